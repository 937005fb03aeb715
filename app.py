from __future__ import annotations

import streamlit as st

from auth import AUTH_PAGE, current_user
from cookie_store import cookies_ready, get_cookie_manager
from error_guard import render_guard
from organizations import fetch_active_organization
from route_persistence import detect_reload, path_to_restore
from routing import apply_pending_query, navigate
from runtime_checks import validate_runtime_config
from slugs import org_path
from ui import inject_theme

st.set_page_config(page_title="Bosplan", page_icon="🅱", layout="wide")
st.markdown(
    "<style>[data-testid='stSidebarNav']{display:none !important;}</style>",
    unsafe_allow_html=True,
)
apply_pending_query()
inject_theme()

with render_guard():
    config = validate_runtime_config()
    if config["missing"]:
        st.error("Bosplan is not configured: " + ", ".join(config["missing"]))
        st.stop()

    cookies = get_cookie_manager()
    if not cookies_ready(cookies):
        # The cookie component reports back on the next run.
        st.stop()

    is_reload = detect_reload(st.session_state, cookies)
    restore = path_to_restore(cookies, is_reload=is_reload, current_path="/")
    if restore:
        navigate(restore)

    user = current_user()
    if not user:
        st.switch_page(AUTH_PAGE)
        st.stop()

    with st.spinner("Loading your workspace..."):
        org, _profile = fetch_active_organization(user.get("id"))
    if org is None:
        st.switch_page("pages/2_Onboarding.py")
        st.stop()
    navigate(org_path(org.slug, "/"))
