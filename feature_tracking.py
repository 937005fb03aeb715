from __future__ import annotations

from collections.abc import MutableMapping
from typing import Any

import streamlit as st
from supabase import Client

from logs import get_logger
from remote_query import QueryCache, QueryResult, rows
from supabase_client import get_client

LAST_TRACKED_KEY = "_last_tracked_path"
STATS_KEY = ("feature-usage-stats",)
STATS_STALE_SECONDS = 60
STATS_POLL_SECONDS = 120

FEATURE_MAP: dict[str, tuple[str, str]] = {
    "/": ("Dashboard", "Core"),
    "/projects": ("Projects", "Project Management"),
    "/calendar": ("Calendar", "Core"),
    "/drive": ("Drive", "File Management"),
    "/dataroom": ("Data Room", "File Management"),
    "/policies": ("Policies", "Compliance"),
    "/templates": ("Templates", "Content"),
    "/taskflow": ("Task Flow", "Project Management"),
    "/taskpopulate": ("Task Populate", "AI Features"),
    "/product-management": ("Product Management", "Project Management"),
    "/team-members": ("Team Members", "Settings"),
    "/settings": ("Settings", "Settings"),
    "/settings/account": ("Account Settings", "Settings"),
    "/settings/organization": ("Organization Settings", "Settings"),
    "/settings/billing": ("Billing", "Settings"),
    "/settings/appearance": ("Appearance", "Settings"),
    "/magic-merge": ("Magic Merge", "AI Features"),
    "/merge-history": ("Merge History", "AI Features"),
    "/invoicing": ("Invoicing", "Finance"),
    "/virtual-assistants": ("Virtual Assistants", "Services"),
}

LOGGER = get_logger("feature_tracking")


def feature_from_path(path: str) -> tuple[str, str] | None:
    if path in FEATURE_MAP:
        return FEATURE_MAP[path]
    if path.startswith("/shared/"):
        return ("Shared File", "File Management")
    for route, feature in FEATURE_MAP.items():
        if route != "/" and path.startswith(route):
            return feature
    return None


def should_track(path: str, user: dict | None, last_path: str | None) -> bool:
    if not user:
        return False
    if path.startswith("/superadmin"):
        return False
    if path in ("/auth", "/welcome"):
        return False
    return path != last_path


def track_feature_usage(
    path: str,
    user: dict | None,
    org_id: str | None = None,
    *,
    store: MutableMapping[str, Any] | None = None,
    client: Client | None = None,
) -> bool:
    """Record a page visit. Returns True when a row was written."""
    session = st.session_state if store is None else store
    if not should_track(path, user, session.get(LAST_TRACKED_KEY)):
        return False
    feature = feature_from_path(path)
    if not feature:
        return False
    session[LAST_TRACKED_KEY] = path
    name, category = feature
    try:
        (client or get_client()).table("feature_usage_logs").insert(
            {
                "organization_id": org_id or None,
                "user_id": user.get("id"),
                "feature_name": name,
                "feature_category": category,
                "page_path": path,
            }
        ).execute()
    except Exception as err:
        LOGGER.warning(f"Failed to log feature usage path={path}: {err}")
        return False
    return True


def feature_usage_stats(
    *,
    client: Client | None = None,
    cache: QueryCache | None = None,
    force: bool = False,
) -> QueryResult:
    client = client or get_client()
    cache = cache or QueryCache()

    def fetch() -> list[dict]:
        return rows(
            client.table("feature_usage_stats")
            .select("*")
            .order("total_visits", desc=True)
            .execute()
        )

    if force:
        return cache.refetch(STATS_KEY, fetch, default=[])
    return cache.get_or_fetch(STATS_KEY, fetch, stale_time=STATS_STALE_SECONDS, default=[])
