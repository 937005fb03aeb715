"""
Credential validation, inactivity timeout and session checks.
"""

from __future__ import annotations

import time
from types import SimpleNamespace

import auth
from auth import (
    INACTIVITY_TIMEOUT_SECONDS,
    SESSION_KEY,
    SUPER_ADMIN_INACTIVITY_TIMEOUT_SECONDS,
    VALIDATE_TTL_SECONDS,
    inactivity_message,
    is_inactive,
    remaining_session_seconds,
    sign_in,
    validate_credentials,
    validate_session,
)
from route_persistence import LAST_PATH_KEY, remember_path


class FakeCookies(dict):
    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.saves = 0

    def ready(self) -> bool:
        return True

    def save(self) -> None:
        self.saves += 1


class FakeAuthApi:
    def __init__(self, user_id: str | None = "u1", error: Exception | None = None) -> None:
        self.user_id = user_id
        self.error = error
        self.calls = 0

    def _response(self):
        user = SimpleNamespace(id=self.user_id, email="ada@example.com") if self.user_id else None
        session = SimpleNamespace(access_token="access", refresh_token="refresh")
        return SimpleNamespace(user=user, session=session)

    def get_user(self, token):
        self.calls += 1
        if self.error:
            raise self.error
        return self._response()

    def sign_in_with_password(self, credentials):
        if self.error:
            raise self.error
        return self._response()


def test_validate_credentials() -> None:
    assert validate_credentials("ada@example.com", "secret") == {}
    assert validate_credentials("", "") == {"email": "Email is required", "password": "Password is required"}
    assert validate_credentials("ada@", "secret")["email"] == "Invalid email address"
    assert validate_credentials("ada@example.com", "123", signing_up=True)["password"] == (
        "Password must be at least 6 characters"
    )
    assert validate_credentials("ada@example.com", "123") == {}
    assert validate_credentials("ada@example.com", "x" * 101)["password"] == "Password must be at most 100 characters"


def test_is_inactive() -> None:
    assert is_inactive(None, 1000.0) is False
    assert is_inactive(1000.0, 1000.0 + INACTIVITY_TIMEOUT_SECONDS - 1) is False
    assert is_inactive(1000.0, 1000.0 + INACTIVITY_TIMEOUT_SECONDS) is True


def test_super_admin_timeout_is_shorter() -> None:
    assert SUPER_ADMIN_INACTIVITY_TIMEOUT_SECONDS == 15 * 60
    idle = 1000.0 + 20 * 60
    assert is_inactive(1000.0, idle) is False
    assert is_inactive(1000.0, idle, SUPER_ADMIN_INACTIVITY_TIMEOUT_SECONDS) is True


def test_remaining_session_seconds() -> None:
    timeout = SUPER_ADMIN_INACTIVITY_TIMEOUT_SECONDS
    assert remaining_session_seconds(None, 5000.0, timeout) == timeout
    assert remaining_session_seconds(1000.0, 1000.0 + 60, timeout) == timeout - 60
    assert remaining_session_seconds(1000.0, 1000.0 + timeout + 30, timeout) == 0.0


def test_inactivity_message() -> None:
    assert inactivity_message(INACTIVITY_TIMEOUT_SECONDS) == "You were signed out after an hour of inactivity."
    assert inactivity_message(SUPER_ADMIN_INACTIVITY_TIMEOUT_SECONDS) == "You were signed out after 15 minutes of inactivity."


def _patch_session(monkeypatch, session: dict, cookies: FakeCookies) -> SimpleNamespace:
    fake_st = SimpleNamespace(session_state=session, messages=[])
    fake_st.info = fake_st.messages.append
    monkeypatch.setattr(auth, "st", fake_st)
    monkeypatch.setattr(auth, "_load_cookie_config", lambda: {"cookie_secret": None, "cookie_name": "bosplan_auth"})
    monkeypatch.setattr(auth, "get_cookie_manager", lambda: cookies)
    monkeypatch.setattr(auth, "clear_session_cache", lambda: None)
    monkeypatch.setattr(auth, "reset_client", lambda: None)
    return fake_st


def test_admin_timeout_signs_out_idle_user(monkeypatch) -> None:
    idle_since = time.time() - 20 * 60
    session = {SESSION_KEY: {"id": "u1", "last_active": idle_since}}
    fake_st = _patch_session(monkeypatch, session, FakeCookies())
    monkeypatch.setattr(auth, "validate_session", lambda user, now=None: True)

    assert auth.current_user()["id"] == "u1"

    session[SESSION_KEY]["last_active"] = idle_since
    assert auth.current_user(SUPER_ADMIN_INACTIVITY_TIMEOUT_SECONDS) is None
    assert SESSION_KEY not in session
    assert fake_st.messages == ["You were signed out after 15 minutes of inactivity."]


def test_sign_out_forgets_last_path(monkeypatch) -> None:
    cookies = FakeCookies({"bosplan_auth": "signed-token"})
    remember_path(cookies, "/acme/settings/billing")
    session = {SESSION_KEY: {"id": "u1"}, "active_organization_id": "org-1"}
    _patch_session(monkeypatch, session, cookies)

    auth.sign_out()
    assert LAST_PATH_KEY not in cookies
    assert "bosplan_auth" not in cookies
    assert cookies.saves == 1
    assert session == {}


def test_sign_in_returns_user_or_error() -> None:
    user, error = sign_in("ada@example.com", "secret", client=SimpleNamespace(auth=FakeAuthApi()))
    assert error is None
    assert user["id"] == "u1" and user["refresh_token"] == "refresh"

    user, error = sign_in("ada@example.com", "bad", client=SimpleNamespace(auth=FakeAuthApi(error=RuntimeError("Invalid login credentials"))))
    assert user is None and error == "Invalid login credentials"


def test_validate_session_is_throttled() -> None:
    api = FakeAuthApi()
    client = SimpleNamespace(auth=api)
    user = {"id": "u1", "access_token": "access", "validated_at": 1000.0}
    assert validate_session(user, client=client, now=1000.0 + VALIDATE_TTL_SECONDS - 1) is True
    assert api.calls == 0
    assert validate_session(user, client=client, now=1000.0 + VALIDATE_TTL_SECONDS) is True
    assert api.calls == 1
    assert user["validated_at"] == 1000.0 + VALIDATE_TTL_SECONDS


def test_validate_session_rejects_mismatch_and_errors() -> None:
    user = {"id": "u1", "access_token": "access"}
    assert validate_session(dict(user), client=SimpleNamespace(auth=FakeAuthApi(user_id="u2")), now=5.0) is False
    assert validate_session(dict(user), client=SimpleNamespace(auth=FakeAuthApi(error=RuntimeError("expired"))), now=5.0) is False
    assert validate_session(dict(user), client=SimpleNamespace(auth=FakeAuthApi(user_id=None)), now=5.0) is False


if __name__ == "__main__":
    test_validate_credentials()
    test_is_inactive()
    test_super_admin_timeout_is_shorter()
    test_remaining_session_seconds()
    test_inactivity_message()
    test_sign_in_returns_user_or_error()
    test_validate_session_is_throttled()
    test_validate_session_rejects_mismatch_and_errors()
    print("PASS")
