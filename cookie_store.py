from __future__ import annotations

import time

import streamlit as st
from streamlit.errors import StreamlitDuplicateElementKey
from streamlit_cookies_manager import CookieManager

from logs import get_logger

LOGGER = get_logger("cookie_store")

COOKIE_PREFIX = "bosplan/"
_MANAGER_KEY = "_cookie_manager"


def get_cookie_manager(refresh: bool = False) -> CookieManager:
    cached = st.session_state.get(_MANAGER_KEY)
    last_create_ts = st.session_state.get(f"{_MANAGER_KEY}_ts")
    if isinstance(cached, CookieManager):
        if not refresh:
            return cached
        if cookies_ready(cached):
            return cached
        if isinstance(last_create_ts, (int, float)) and time.time() - last_create_ts < 1.0:
            return cached
    cookies = CookieManager(prefix=COOKIE_PREFIX)
    st.session_state[_MANAGER_KEY] = cookies
    st.session_state[f"{_MANAGER_KEY}_ts"] = time.time()
    return cookies


def cookies_ready(cookies: CookieManager) -> bool:
    try:
        return bool(cookies.ready())
    except Exception:
        return False


def save_cookies(cookies: CookieManager) -> None:
    if not cookies_ready(cookies):
        return
    try:
        cookies.save()
    except StreamlitDuplicateElementKey:
        # save() already ran in this script run.
        return
    except Exception as err:
        LOGGER.warning(f"save_cookies failed: {err}")
