from __future__ import annotations

import os
import urllib.parse
from typing import Any

import streamlit as st

PROTECTED_PATHS = [
    "/",
    "/calendar",
    "/projects",
    "/magic-merge",
    "/taskflow",
    "/taskpopulate",
    "/templates",
    "/settings",
    "/dataroom",
    "/drive",
    "/policies",
    "/virtual-assistants",
]

# In-app paths served by each page script.
PAGE_FILES: dict[str, str] = {
    "/": "pages/3_Dashboard.py",
    "/calendar": "pages/3_Dashboard.py",
    "/projects": "pages/3_Dashboard.py",
    "/invoicing": "pages/4_Invoicing.py",
    "/drive": "pages/5_Drive.py",
    "/dataroom": "pages/5_Drive.py",
    "/virtual-assistants": "pages/6_Pricing.py",
    "/settings/billing": "pages/7_Billing.py",
    "/feedback-form": "pages/8_Feedback.py",
    "/onboarding": "pages/2_Onboarding.py",
    "/auth": "pages/1_Auth.py",
    "/superadmin": "pages/99_SuperAdmin.py",
}

# Top-level segments that are never an org slug.
RESERVED_SEGMENTS = {p.strip("/").split("/")[0] for p in PAGE_FILES if p != "/"} | {
    "welcome",
    "pricing",
    "shared",
}


def get_query_params() -> dict[str, Any]:
    return dict(st.query_params)


def query_value(params: dict[str, Any], key: str) -> str | None:
    val = params.get(key)
    if isinstance(val, list):
        return val[0] if val else None
    if val is None:
        return None
    return str(val)


def clear_query_params() -> None:
    st.query_params.clear()


def is_truthy(value: str | None) -> bool:
    if value is None:
        return False
    return str(value).strip().lower() in {"1", "true", "yes", "on"}


def base_url() -> str:
    raw = os.environ.get("APP_URL", "")
    if not raw:
        try:
            raw = st.secrets.get("APP_URL", "")
        except Exception:
            raw = ""

    if raw:
        return raw.rstrip("/")

    host = st.get_option("server.address") or "localhost"
    port = st.get_option("server.port") or 8501
    return f"http://{host}:{port}"


def is_protected_path(pathname: str) -> bool:
    return any(pathname == path or pathname.startswith(f"{path}/") for path in PROTECTED_PATHS)


def resolve_org_redirect(
    pathname: str,
    *,
    route_slug: str | None,
    active_slug: str | None,
    search: str = "",
    hash: str = "",
) -> str | None:
    """Return the path the user should be sent to, or None to stay put."""
    if not active_slug:
        return None
    expected_prefix = f"/{active_slug}"

    if route_slug:
        if route_slug == active_slug:
            return None
        path_without_slug = pathname.replace(f"/{route_slug}", "", 1)
        return f"{expected_prefix}{path_without_slug}{search}{hash}"

    if is_protected_path(pathname):
        return f"{expected_prefix}{pathname}{search}{hash}"
    return None


def split_org_path(path: str) -> tuple[str | None, str]:
    raw = path.split("?", 1)[0].split("#", 1)[0]
    parts = [p for p in raw.split("/") if p]
    if not parts or parts[0] in RESERVED_SEGMENTS:
        return None, raw or "/"
    rest = "/" + "/".join(parts[1:]) if len(parts) > 1 else "/"
    return parts[0], rest


def page_for_path(path: str) -> str | None:
    _, rest = split_org_path(path)
    if rest in PAGE_FILES:
        return PAGE_FILES[rest]
    for route, page in PAGE_FILES.items():
        if route != "/" and rest.startswith(f"{route}/"):
            return page
    return None


def encode_search(params: dict[str, Any], exclude: tuple[str, ...] = ("org",)) -> str:
    """Build a `?a=1&b=2` query string, sorted by key, or "" when empty."""
    pairs = [
        (key, query_value(params, key) or "")
        for key in sorted(params)
        if key not in exclude
    ]
    return f"?{urllib.parse.urlencode(pairs)}" if pairs else ""


def current_path(page_path: str, slug: str | None, params: dict[str, Any] | None = None) -> str:
    if params is None:
        params = get_query_params()
    base = f"/{slug}{'' if page_path == '/' else page_path}" if slug else page_path
    return f"{base}{encode_search(params)}"


PENDING_QUERY_KEY = "_pending_query"


def parse_search(search: str) -> dict[str, str]:
    query = search[1:] if search.startswith("?") else search
    return {key: value for key, value in urllib.parse.parse_qsl(query, keep_blank_values=True)}


def navigate(path: str) -> None:
    """Switch to the page serving `path`, carrying its org slug and query."""
    slug, _ = split_org_path(path)
    search = path.split("#", 1)[0].split("?", 1)[1] if "?" in path else ""
    params = parse_search(search)
    if slug:
        params["org"] = slug
    st.session_state[PENDING_QUERY_KEY] = params
    st.switch_page(page_for_path(path) or "app.py")


def apply_pending_query() -> None:
    pending = st.session_state.pop(PENDING_QUERY_KEY, None)
    if pending is None:
        return
    st.query_params.from_dict(pending)
