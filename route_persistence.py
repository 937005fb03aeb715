"""
Keep the user on the same page across a browser refresh.

Some hosts always serve the app at `/` on reload. The last in-app path is
written to a browser cookie as `{"path": ..., "ts": ...}` on every page
render and replayed once when a fresh Streamlit session starts at `/`.

The cookie outlives the tab, so an entry only counts while it is younger
than `RELOAD_WINDOW_SECONDS`. Sign-out removes it.
"""

from __future__ import annotations

import json
import time
from collections.abc import MutableMapping
from typing import Any

from cookie_store import cookies_ready, get_cookie_manager, save_cookies

LAST_PATH_KEY = "bosplan:last_path"
SESSION_STARTED_KEY = "_session_started"
RELOAD_WINDOW_SECONDS = 30 * 60
REFRESH_AFTER_SECONDS = 60


def _read_entry(store: MutableMapping[str, Any]) -> tuple[str, float] | None:
    raw = store.get(LAST_PATH_KEY)
    if not raw:
        return None
    try:
        entry = json.loads(raw) if isinstance(raw, str) else raw
    except ValueError:
        return None
    if not isinstance(entry, dict):
        return None
    path, ts = entry.get("path"), entry.get("ts")
    if not isinstance(path, str) or not path or not isinstance(ts, (int, float)):
        return None
    return path, float(ts)


def _fresh_path(store: MutableMapping[str, Any], now: float | None = None) -> str | None:
    entry = _read_entry(store)
    if entry is None:
        return None
    path, ts = entry
    now = time.time() if now is None else now
    if now - ts > RELOAD_WINDOW_SECONDS:
        return None
    return path


def remember_path(store: MutableMapping[str, Any], path: str, now: float | None = None) -> None:
    if not path:
        return
    stamp = time.time() if now is None else now
    store[LAST_PATH_KEY] = json.dumps({"path": path, "ts": stamp})


def forget_path(store: MutableMapping[str, Any]) -> bool:
    """Drop the remembered path. Returns True when something was removed."""
    if store.get(LAST_PATH_KEY) is None:
        return False
    del store[LAST_PATH_KEY]
    return True


def path_to_restore(
    store: MutableMapping[str, Any],
    *,
    is_reload: bool,
    current_path: str,
    now: float | None = None,
) -> str | None:
    if not is_reload:
        return None
    last_path = _fresh_path(store, now)
    if not last_path:
        return None
    if current_path == "/" and last_path != "/":
        return last_path
    return None


def detect_reload(
    session: MutableMapping[str, Any],
    store: MutableMapping[str, Any],
    now: float | None = None,
) -> bool:
    """A new session that finds a recently remembered path came from a reload."""
    if session.get(SESSION_STARTED_KEY):
        return False
    session[SESSION_STARTED_KEY] = True
    return _fresh_path(store, now) is not None


def needs_refresh(store: MutableMapping[str, Any], path: str, now: float | None = None) -> bool:
    entry = _read_entry(store)
    if entry is None:
        return True
    last_path, ts = entry
    now = time.time() if now is None else now
    return last_path != path or now - ts > REFRESH_AFTER_SECONDS


def persist_current_path(path: str) -> None:
    cookies = get_cookie_manager()
    if not cookies_ready(cookies):
        return
    if not needs_refresh(cookies, path):
        return
    remember_path(cookies, path)
    save_cookies(cookies)
