"""
Organizations, profiles and the user's active organization.

Row shapes are loose: the remote store owns validation and uniqueness
(slugs included), so these classes only give names to the columns the
pages read.
"""

from __future__ import annotations

from collections.abc import MutableMapping
from dataclasses import dataclass
from typing import Any

import streamlit as st
from supabase import Client

from logs import get_logger
from remote_query import rows, single
from roles import db_role_to_ui
from supabase_client import get_client

ACTIVE_ORG_KEY = "active_organization_id"

EMPLOYEE_SIZES = ["1-10", "11-50", "51-200", "201-500", "500+"]
EMPLOYEE_SIZE_LABELS = {size: f"{size} employees" for size in EMPLOYEE_SIZES}

LOGGER = get_logger("organizations")


@dataclass
class Organization:
    id: str
    name: str
    slug: str
    employee_size: str = ""
    logo_url: str | None = None
    is_suspended: bool = False
    suspended_at: str | None = None
    suspension_reason: str | None = None
    scheduled_deletion_at: str | None = None

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "Organization":
        return cls(
            id=str(row.get("id")),
            name=row.get("name") or "",
            slug=row.get("slug") or "",
            employee_size=row.get("employee_size") or "",
            logo_url=row.get("logo_url"),
            is_suspended=bool(row.get("is_suspended")),
            suspended_at=row.get("suspended_at"),
            suspension_reason=row.get("suspension_reason"),
            scheduled_deletion_at=row.get("scheduled_deletion_at"),
        )


@dataclass
class Profile:
    id: str
    organization_id: str
    full_name: str = ""
    job_role: str = ""
    phone_number: str = ""

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "Profile":
        return cls(
            id=str(row.get("id")),
            organization_id=str(row.get("organization_id")),
            full_name=row.get("full_name") or "",
            job_role=row.get("job_role") or "",
            phone_number=row.get("phone_number") or "",
        )


@dataclass
class UserOrganization:
    id: str
    name: str
    slug: str
    role: str
    logo_url: str | None = None
    scheduled_deletion_at: str | None = None

    @property
    def ui_role(self) -> str | None:
        return db_role_to_ui(self.role)


def _session(store: MutableMapping[str, Any] | None) -> MutableMapping[str, Any]:
    return st.session_state if store is None else store


def fetch_profile(user_id: str, *, client: Client | None = None) -> Profile | None:
    client = client or get_client()
    row = single(
        client.table("profiles").select("*").eq("id", user_id).maybe_single().execute()
    )
    return Profile.from_row(row) if row else None


def fetch_organization(org_id: str, *, client: Client | None = None) -> Organization | None:
    client = client or get_client()
    row = single(
        client.table("organizations").select("*").eq("id", org_id).maybe_single().execute()
    )
    return Organization.from_row(row) if row else None


def has_membership(user_id: str, org_id: str, *, client: Client | None = None) -> str | None:
    """Return the user's role in the organization, or None without access."""
    client = client or get_client()
    row = single(
        client.table("user_roles")
        .select("role, organization_id")
        .eq("user_id", user_id)
        .eq("organization_id", org_id)
        .maybe_single()
        .execute()
    )
    if not row:
        return None
    return row.get("role") or "user"


def fetch_active_organization(
    user_id: str | None,
    *,
    store: MutableMapping[str, Any] | None = None,
    client: Client | None = None,
) -> tuple[Organization | None, Profile | None]:
    if not user_id:
        return None, None
    session = _session(store)
    profile: Profile | None = None
    try:
        profile = fetch_profile(user_id, client=client)
        if not profile:
            return None, None
        org_id = session.get(ACTIVE_ORG_KEY) or profile.organization_id
        if not has_membership(user_id, org_id, client=client):
            org_id = profile.organization_id
        session[ACTIVE_ORG_KEY] = org_id
        return fetch_organization(org_id, client=client), profile
    except Exception as err:
        LOGGER.error(f"Error fetching organization data user={user_id}: {err}")
        return None, profile


def list_user_organizations(
    user_id: str | None,
    *,
    store: MutableMapping[str, Any] | None = None,
    client: Client | None = None,
) -> list[UserOrganization]:
    if not user_id:
        return []
    client = client or get_client()
    session = _session(store)
    try:
        response = (
            client.table("user_roles")
            .select(
                "role, organization_id, "
                "organizations:organization_id (id, name, slug, logo_url, scheduled_deletion_at)"
            )
            .eq("user_id", user_id)
            .execute()
        )
    except Exception as err:
        LOGGER.error(f"Error fetching user organizations user={user_id}: {err}")
        return []
    orgs: list[UserOrganization] = []
    for row in rows(response):
        org = row.get("organizations")
        if not isinstance(org, dict):
            continue
        orgs.append(
            UserOrganization(
                id=str(org.get("id")),
                name=org.get("name") or "",
                slug=org.get("slug") or "",
                role=row.get("role") or "user",
                logo_url=org.get("logo_url"),
                scheduled_deletion_at=org.get("scheduled_deletion_at"),
            )
        )
    if orgs and not any(o.id == session.get(ACTIVE_ORG_KEY) for o in orgs):
        session[ACTIVE_ORG_KEY] = orgs[0].id
    return orgs


def set_active_organization(org_id: str, *, store: MutableMapping[str, Any] | None = None) -> None:
    _session(store)[ACTIVE_ORG_KEY] = org_id


def create_organization(
    user_id: str,
    org_name: str,
    employee_size: str,
    full_name: str,
    job_role: str,
    phone_number: str,
    *,
    client: Client | None = None,
) -> tuple[str | None, str | None]:
    client = client or get_client()
    try:
        response = client.rpc(
            "create_organization_and_profile",
            {
                "_user_id": user_id,
                "_org_name": org_name.strip(),
                "_employee_size": employee_size,
                "_full_name": full_name.strip(),
                "_job_role": job_role.strip(),
                "_phone_number": phone_number.strip(),
            },
        ).execute()
    except Exception as err:
        LOGGER.error(f"Organization/profile creation error user={user_id}: {err}")
        return None, str(err) or "Failed to complete signup. Please try again."
    org_id = getattr(response, "data", None)
    if not org_id:
        return None, "Failed to complete signup. Please try again."
    return str(org_id), None


def _length_error(value: str, label: str, low: int, high: int, unit: str = "characters") -> str | None:
    text = (value or "").strip()
    if len(text) < low:
        return f"{label} must be at least {low} {unit}"
    if len(text) > high:
        return f"{label} must be at most {high} {unit}"
    return None


def validate_org_details(
    org_name: str,
    employee_size: str,
    full_name: str,
    job_role: str,
    phone_number: str,
) -> dict[str, str]:
    """Return {field: message} for every invalid field."""
    checks = {
        "org_name": _length_error(org_name, "Organization name", 2, 100),
        "employee_size": None if employee_size in EMPLOYEE_SIZES else "Please select employee size",
        "full_name": _length_error(full_name, "Full name", 2, 100),
        "job_role": _length_error(job_role, "Job role", 2, 100),
        "phone_number": _length_error(phone_number, "Phone number", 7, 20, "digits"),
    }
    return {field: message for field, message in checks.items() if message}
