"""
Shared start-up sequence for every organization page.

A page body runs inside `error_guard.render_guard()` and starts with
`bootstrap_page(path)`, which signs the user in, resolves the active
organization, keeps the org slug in the URL, remembers the route for
reloads, records feature usage and draws the sidebar.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import streamlit as st

from access_guard import is_super_admin, render_access_warning, require_org_member
from auth import render_auth_sidebar, require_login
from feature_tracking import track_feature_usage
from organizations import (
    Organization,
    Profile,
    fetch_active_organization,
    list_user_organizations,
    set_active_organization,
)
from remote_query import clear_session_cache
from route_persistence import persist_current_path
from routing import (
    apply_pending_query,
    current_path,
    encode_search,
    get_query_params,
    navigate,
    query_value,
    resolve_org_redirect,
)
from runtime_checks import validate_runtime_config
from roles import UI_ROLE_LABELS, role_label
from slugs import org_path
from ui import inject_theme
from ui_state import install_ui_state

ONBOARDING_PAGE = "pages/2_Onboarding.py"

NAV_ITEMS = [
    ("🏠 Dashboard", "/"),
    ("🧾 Invoicing", "/invoicing"),
    ("🗂 Drive", "/drive"),
    ("🧑‍💼 Virtual assistants", "/virtual-assistants"),
    ("💳 Billing", "/settings/billing"),
    ("💬 Feedback", "/feedback-form"),
]


@dataclass
class PageContext:
    user: dict[str, Any]
    org: Organization
    profile: Profile | None
    access: dict[str, Any]

    @property
    def slug(self) -> str:
        return self.org.slug


def start_page(title: str) -> None:
    st.set_page_config(page_title=f"{title} · Bosplan", page_icon="🅱", layout="wide")
    st.markdown(
        "<style>[data-testid='stSidebarNav']{display:none !important;}</style>",
        unsafe_allow_html=True,
    )
    apply_pending_query()
    inject_theme()
    validate_runtime_config()
    install_ui_state()


def _route_path(slug: str | None, path: str) -> str:
    if not slug:
        return path
    return f"/{slug}" if path == "/" else f"/{slug}{path}"


def page_redirect(path: str, params: dict[str, Any], active_slug: str | None) -> str | None:
    """Where a page at `path` with query `params` must go to carry `active_slug`."""
    route_slug = query_value(params, "org") or None
    return resolve_org_redirect(
        _route_path(route_slug, path),
        route_slug=route_slug,
        active_slug=active_slug,
        search=encode_search(params),
    )


def bootstrap_page(path: str, *, title: str) -> PageContext:
    start_page(title)
    user = require_login()

    org, profile = fetch_active_organization(user.get("id"))
    if org is None:
        st.switch_page(ONBOARDING_PAGE)
        st.stop()

    redirect = page_redirect(path, get_query_params(), org.slug)
    if redirect:
        navigate(redirect)

    access = require_org_member(user, org)
    persist_current_path(current_path(path, org.slug))
    track_feature_usage(path, user, org.id)
    _render_sidebar(user, org, path, access)
    render_access_warning(access, org)
    return PageContext(user=user, org=org, profile=profile, access=access)


def _render_sidebar(user: dict[str, Any], org: Organization, path: str, access: dict[str, Any]) -> None:
    render_auth_sidebar(user, {"name": org.name})
    with st.sidebar:
        st.caption(f"Access: {UI_ROLE_LABELS.get(access.get('role') or '', 'No access')}")
        orgs = list_user_organizations(user.get("id"))
        if len(orgs) > 1:
            by_id = {o.id: o for o in orgs}
            choice = st.selectbox(
                "Organization",
                list(by_id),
                index=list(by_id).index(org.id) if org.id in by_id else 0,
                format_func=lambda oid: f"{by_id[oid].name} · {role_label(by_id[oid].role)}",
                key="org_switcher",
            )
            if choice != org.id:
                set_active_organization(choice)
                clear_session_cache()
                navigate(org_path(by_id[choice].slug, path))
        st.markdown("---")
        for label, target in NAV_ITEMS:
            if st.button(label, key=f"nav_{target}", use_container_width=True, disabled=target == path):
                navigate(org_path(org.slug, target))
        if _cached_super_admin(user):
            if st.button("🛡 Super admin", key="nav_superadmin", use_container_width=True):
                navigate("/superadmin")


def _cached_super_admin(user: dict[str, Any]) -> bool:
    key = f"_is_super_admin_{user.get('id')}"
    if key not in st.session_state:
        st.session_state[key] = is_super_admin(user)
    return bool(st.session_state[key])
