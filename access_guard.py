"""
Access guard utilities for organization membership and admin tools.
"""

from __future__ import annotations

from typing import Any

import streamlit as st
from supabase import Client

from logs import get_logger
from organizations import Organization, has_membership
from roles import db_role_to_ui
from supabase_client import get_client, get_secret

LOGGER = get_logger("access_guard")


def _org_field(org: Organization | dict | None, name: str) -> Any:
    if org is None:
        return None
    if isinstance(org, dict):
        return org.get(name)
    return getattr(org, name, None)


def access_for(role: str | None, org: Organization | dict | None) -> dict[str, Any]:
    """Build the access dict for a DB role inside an organization.

    Returns dict with keys: allowed, role, suspended, can_edit
    """
    ui_role = db_role_to_ui(role)
    if role == "super_admin":
        ui_role = "admin"
    suspended = bool(_org_field(org, "is_suspended"))
    allowed = org is not None and ui_role is not None
    return {
        "allowed": allowed,
        "role": ui_role,
        "suspended": suspended,
        "can_edit": allowed and not suspended and ui_role in ("admin", "member"),
    }


def get_access_for_user(
    user: dict | None,
    org: Organization | dict | None,
    *,
    client: Client | None = None,
) -> dict[str, Any]:
    if not user or org is None:
        return access_for(None, None)
    try:
        role = has_membership(str(user.get("id")), str(_org_field(org, "id")), client=client)
    except Exception as err:
        LOGGER.warning(f"Membership check failed user={user.get('id')}: {err}")
        role = None
    return access_for(role, org)


def require_org_member(user: dict | None, org: Organization | dict | None) -> dict[str, Any]:
    """Check membership. If missing, show an error and stop the page."""
    access = get_access_for_user(user, org)
    if not access.get("allowed"):
        st.error("You do not have access to this organization.")
        st.stop()
    return access


def render_access_warning(access: dict[str, Any], org: Organization | dict | None = None) -> None:
    if not access:
        return
    if access.get("suspended"):
        reason = _org_field(org, "suspension_reason")
        suffix = f" Reason: {reason}" if reason else ""
        st.error(f"🔒 **This organization is suspended.** Changes are disabled.{suffix}")
    elif access.get("role") == "viewer":
        st.info("You have view-only access to this workspace.")


def assert_can_edit(access: dict[str, Any] | None) -> None:
    """Raise PermissionError if the current user may not mutate org data.

    This is a server-side guard that prevents mutations even if UI is bypassed.
    """
    if not access or not access.get("allowed"):
        raise PermissionError("You are not a member of this organization.")
    if access.get("suspended"):
        raise PermissionError("Organization suspended: changes are disabled.")
    if not access.get("can_edit"):
        raise PermissionError("View-only access: ask an admin for edit rights.")


def super_admin_emails() -> set[str]:
    raw = get_secret("SUPER_ADMIN_EMAILS")
    return {part.strip().lower() for part in raw.split(",") if part.strip()}


def is_super_admin(user: dict | None, *, client: Client | None = None) -> bool:
    if not user:
        return False
    email = (user.get("email") or "").strip().lower()
    if email and email in super_admin_emails():
        return True
    client = client or get_client()
    try:
        response = client.rpc("is_super_admin", {"_user_id": user.get("id")}).execute()
    except Exception as err:
        LOGGER.warning(f"is_super_admin rpc failed user={user.get('id')}: {err}")
        return False
    return bool(getattr(response, "data", False))


def assert_super_admin(user: dict | None, *, client: Client | None = None) -> None:
    if not is_super_admin(user, client=client):
        raise PermissionError("Super admin access required.")
