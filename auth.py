from __future__ import annotations

import html
import re
import time
from typing import Any

import streamlit as st
from itsdangerous import BadSignature, SignatureExpired, URLSafeTimedSerializer
from streamlit_cookies_manager import CookieManager
from supabase import Client

from cookie_store import cookies_ready, get_cookie_manager, save_cookies
from logs import get_logger
from organizations import ACTIVE_ORG_KEY
from remote_query import clear_session_cache
from route_persistence import forget_path
from routing import clear_query_params
from supabase_client import CLIENT_KEY, get_client, get_secret, reset_client

SESSION_KEY = "auth_user"
INACTIVITY_TIMEOUT_SECONDS = 60 * 60
SUPER_ADMIN_INACTIVITY_TIMEOUT_SECONDS = 15 * 60
VALIDATE_TTL_SECONDS = 60
AUTH_PAGE = "pages/1_Auth.py"

AUTH_LOGGER = get_logger("auth")


def _int_setting(key: str, default: int) -> int:
    raw = get_secret(key)
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _load_cookie_config() -> dict[str, Any]:
    return {
        "cookie_secret": get_secret("AUTH_COOKIE_SECRET"),
        "cookie_name": get_secret("AUTH_COOKIE_NAME", "bosplan_auth"),
        "cookie_ttl_seconds": max(1, _int_setting("AUTH_COOKIE_TTL_DAYS", 7)) * 86400,
    }


def _serializer(secret: str) -> URLSafeTimedSerializer:
    return URLSafeTimedSerializer(secret, salt="bosplan-supabase-session")


def _user_from_auth_response(response: Any, now: float | None = None) -> dict[str, Any] | None:
    user = getattr(response, "user", None)
    if user is None:
        return None
    session = getattr(response, "session", None)
    now = time.time() if now is None else now
    return {
        "id": str(getattr(user, "id", "")),
        "email": getattr(user, "email", "") or "",
        "access_token": getattr(session, "access_token", None) if session else None,
        "refresh_token": getattr(session, "refresh_token", None) if session else None,
        "last_active": now,
        "validated_at": now,
    }


EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def validate_credentials(email: str, password: str, *, signing_up: bool = False) -> dict[str, str]:
    errors: dict[str, str] = {}
    clean_email = (email or "").strip()
    if not clean_email:
        errors["email"] = "Email is required"
    elif not EMAIL_RE.match(clean_email) or len(clean_email) > 255:
        errors["email"] = "Invalid email address"
    if not password:
        errors["password"] = "Password is required"
    elif signing_up and len(password) < 6:
        errors["password"] = "Password must be at least 6 characters"
    elif len(password) > 100:
        errors["password"] = "Password must be at most 100 characters"
    return errors


def is_inactive(last_active: float | None, now: float, timeout: float = INACTIVITY_TIMEOUT_SECONDS) -> bool:
    if last_active is None:
        return False
    return now - float(last_active) >= timeout


def remaining_session_seconds(last_active: float | None, now: float, timeout: float = INACTIVITY_TIMEOUT_SECONDS) -> float:
    if last_active is None:
        return float(timeout)
    return max(0.0, timeout - (now - float(last_active)))


def inactivity_message(timeout: float) -> str:
    minutes = int(timeout // 60)
    if minutes % 60 == 0:
        hours = minutes // 60
        span = "an hour" if hours == 1 else f"{hours} hours"
    else:
        span = f"{minutes} minutes"
    return f"You were signed out after {span} of inactivity."


def sign_in(email: str, password: str, *, client: Client | None = None) -> tuple[dict[str, Any] | None, str | None]:
    client = client or get_client()
    try:
        response = client.auth.sign_in_with_password(
            {"email": (email or "").strip(), "password": password}
        )
    except Exception as err:
        AUTH_LOGGER.warning(f"sign_in failed email={email!r} error={err}")
        return None, str(err)
    user = _user_from_auth_response(response)
    if not user:
        return None, "Sign in failed."
    return user, None


def sign_up(
    email: str,
    password: str,
    *,
    redirect_to: str | None = None,
    client: Client | None = None,
) -> tuple[dict[str, Any] | None, str | None]:
    client = client or get_client()
    try:
        credentials: dict[str, Any] = {"email": (email or "").strip(), "password": password}
        if redirect_to:
            credentials["options"] = {"email_redirect_to": redirect_to}
        response = client.auth.sign_up(credentials)
    except Exception as err:
        AUTH_LOGGER.warning(f"sign_up failed email={email!r} error={err}")
        return None, str(err)
    user = _user_from_auth_response(response)
    if not user:
        return None, "Sign up failed."
    return user, None


def validate_session(user: dict[str, Any], *, client: Client | None = None, now: float | None = None) -> bool:
    """Check the stored session against the backend, at most once per minute."""
    now = time.time() if now is None else now
    validated_at = user.get("validated_at")
    if isinstance(validated_at, (int, float)) and now - validated_at < VALIDATE_TTL_SECONDS:
        return True
    client = client or get_client()
    try:
        response = client.auth.get_user(user.get("access_token"))
    except Exception as err:
        AUTH_LOGGER.warning(f"validate_session failed user={user.get('id')} error={err}")
        return False
    remote = getattr(response, "user", None) if response else None
    if remote is None or str(getattr(remote, "id", "")) != str(user.get("id")):
        AUTH_LOGGER.warning(f"validate_session invalid user={user.get('id')}")
        return False
    user["validated_at"] = now
    return True


def _store_session_cookie(cookies: CookieManager, cfg: dict[str, Any], user: dict[str, Any]) -> None:
    if not cfg["cookie_secret"] or not user.get("refresh_token"):
        return
    if not cookies_ready(cookies):
        st.session_state["_pending_session_cookie"] = user["refresh_token"]
        return
    cookies[cfg["cookie_name"]] = _serializer(cfg["cookie_secret"]).dumps(
        {"refresh_token": user["refresh_token"]}
    )
    save_cookies(cookies)


def _flush_pending_cookie(cookies: CookieManager, cfg: dict[str, Any]) -> None:
    pending = st.session_state.get("_pending_session_cookie")
    if not pending or not cookies_ready(cookies) or not cfg["cookie_secret"]:
        return
    cookies[cfg["cookie_name"]] = _serializer(cfg["cookie_secret"]).dumps({"refresh_token": pending})
    save_cookies(cookies)
    st.session_state.pop("_pending_session_cookie", None)


def _restore_from_cookie(cookies: CookieManager, cfg: dict[str, Any], client: Client) -> dict[str, Any] | None:
    if not cfg["cookie_secret"] or not cookies_ready(cookies):
        return None
    token = cookies.get(cfg["cookie_name"])
    if not token:
        return None
    try:
        data = _serializer(cfg["cookie_secret"]).loads(token, max_age=cfg["cookie_ttl_seconds"])
    except (SignatureExpired, BadSignature) as err:
        AUTH_LOGGER.info(f"restore_from_cookie rejected cookie: {err.__class__.__name__}")
        del cookies[cfg["cookie_name"]]
        save_cookies(cookies)
        return None
    refresh_token = data.get("refresh_token") if isinstance(data, dict) else None
    if not refresh_token:
        return None
    try:
        response = client.auth.refresh_session(refresh_token)
    except Exception as err:
        AUTH_LOGGER.warning(f"restore_from_cookie refresh failed: {err}")
        del cookies[cfg["cookie_name"]]
        save_cookies(cookies)
        return None
    return _user_from_auth_response(response)


def start_session(user: dict[str, Any]) -> None:
    st.session_state[SESSION_KEY] = user
    _store_session_cookie(get_cookie_manager(), _load_cookie_config(), user)


def current_user(inactivity_timeout: float = INACTIVITY_TIMEOUT_SECONDS) -> dict[str, Any] | None:
    cfg = _load_cookie_config()
    cookies = get_cookie_manager()
    _flush_pending_cookie(cookies, cfg)
    now = time.time()
    user = st.session_state.get(SESSION_KEY)
    if not isinstance(user, dict):
        user = _restore_from_cookie(cookies, cfg, get_client())
        if user:
            st.session_state[SESSION_KEY] = user
            _store_session_cookie(cookies, cfg, user)
    if not user:
        return None
    if is_inactive(user.get("last_active"), now, inactivity_timeout):
        AUTH_LOGGER.info(f"Signing out inactive user {user.get('id')}")
        sign_out()
        st.info(inactivity_message(inactivity_timeout))
        return None
    if not validate_session(user, now=now):
        sign_out()
        return None
    user["last_active"] = now
    return user


def require_login(inactivity_timeout: float = INACTIVITY_TIMEOUT_SECONDS) -> dict[str, Any]:
    user = current_user(inactivity_timeout)
    if user:
        return user
    st.switch_page(AUTH_PAGE)
    st.stop()
    raise RuntimeError("Login required")


def sign_out() -> None:
    client = st.session_state.get(CLIENT_KEY)
    if client is not None:
        try:
            client.auth.sign_out()
        except Exception as err:
            AUTH_LOGGER.warning(f"sign_out remote error: {err}")
    cfg = _load_cookie_config()
    cookies = get_cookie_manager()
    if cookies_ready(cookies):
        changed = forget_path(cookies)
        if cookies.get(cfg["cookie_name"]):
            del cookies[cfg["cookie_name"]]
            changed = True
        if changed:
            save_cookies(cookies)
    st.session_state.pop(SESSION_KEY, None)
    st.session_state.pop("_pending_session_cookie", None)
    st.session_state.pop(ACTIVE_ORG_KEY, None)
    clear_session_cache()
    reset_client()


def logout() -> None:
    sign_out()
    clear_query_params()
    st.switch_page(AUTH_PAGE)
    st.stop()


def render_auth_sidebar(user: dict[str, Any] | None, org: dict[str, Any] | None = None) -> None:
    if not user:
        return
    with st.sidebar:
        email = user.get("email") or "User"
        initial = (email.strip()[:1] or "?").upper()
        org_line = ""
        if org and org.get("name"):
            org_line = f'<div class="auth-org">{html.escape(org["name"])}</div>'
        with st.container(key="auth_card"):
            st.markdown(
                f"""
                <div class="auth-title">Account</div>
                <div class="auth-row">
                  <div class="auth-avatar placeholder">{html.escape(initial)}</div>
                  <div class="auth-meta">
                    <div class="auth-email">{html.escape(email)}</div>
                    {org_line}
                  </div>
                </div>
                """,
                unsafe_allow_html=True,
            )
            if st.button("⏻", key="auth_logout_btn", help="Sign out"):
                logout()
