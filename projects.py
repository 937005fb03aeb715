from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

import streamlit as st
from supabase import Client

from access_guard import assert_can_edit
from logs import get_logger
from remote_query import QueryCache, QueryResult, rows, single
from supabase_client import get_client

PROJECT_STATUSES = ("todo", "in_progress", "done")
PROJECTS_STALE_SECONDS = 30

LOGGER = get_logger("projects")


def _now_iso() -> str:
    return datetime.now(timezone.utc).replace(microsecond=0).isoformat().replace("+00:00", "Z")


def _cache_key(org_id: str) -> tuple:
    return ("projects", org_id)


def _guard(access: dict | None) -> None:
    if access is not None:
        assert_can_edit(access)


def _fetch_projects(client: Client, org_id: str) -> list[dict]:
    return rows(
        client.table("projects")
        .select("*")
        .eq("organization_id", org_id)
        .is_("deleted_at", "null")
        .is_("archived_at", "null")
        .order("position")
        .execute()
    )


def list_projects(
    org_id: str | None,
    *,
    client: Client | None = None,
    cache: QueryCache | None = None,
) -> QueryResult:
    if not org_id:
        return QueryResult(data=[])
    client = client or get_client()
    cache = cache or QueryCache()
    return cache.get_or_fetch(
        _cache_key(org_id),
        lambda: _fetch_projects(client, org_id),
        stale_time=PROJECTS_STALE_SECONDS,
        default=[],
    )


def list_deleted_projects(org_id: str | None, *, client: Client | None = None) -> list[dict]:
    if not org_id:
        return []
    client = client or get_client()
    try:
        return rows(
            client.table("projects")
            .select("id, title, description, status, deleted_at")
            .eq("organization_id", org_id)
            .not_.is_("deleted_at", "null")
            .order("deleted_at", desc=True)
            .execute()
        )
    except Exception as err:
        LOGGER.warning(f"list_deleted_projects failed org={org_id}: {err}")
        return []


def _next_position(client: Client, org_id: str) -> int:
    row = single(
        client.table("projects")
        .select("position")
        .eq("organization_id", org_id)
        .order("position", desc=True)
        .limit(1)
        .maybe_single()
        .execute()
    )
    position = row.get("position") if row else None
    return int(position) + 1 if isinstance(position, (int, float)) else 0


def create_project(
    org_id: str | None,
    user_id: str | None,
    title: str | None,
    description: str | None = None,
    *,
    due_date: str | None = None,
    access: dict | None = None,
    client: Client | None = None,
    cache: QueryCache | None = None,
) -> dict | None:
    _guard(access)
    clean_title = (title or "").strip()
    if not org_id or not user_id or not clean_title:
        return None
    client = client or get_client()
    try:
        created = single(
            client.table("projects")
            .insert(
                {
                    "user_id": user_id,
                    "organization_id": org_id,
                    "title": clean_title,
                    "description": (description or "").strip() or None,
                    "status": "todo",
                    "position": _next_position(client, org_id),
                    "due_date": due_date,
                }
            )
            .execute()
        )
    except Exception as err:
        LOGGER.warning(f"create_project failed org={org_id}: {err}")
        return None
    if created:
        (cache or QueryCache()).update(_cache_key(org_id), lambda data: [*(data or []), created])
    return created


def update_project(
    project_id: str,
    org_id: str,
    *,
    access: dict | None = None,
    client: Client | None = None,
    cache: QueryCache | None = None,
    **fields: Any,
) -> dict | None:
    _guard(access)
    if "status" in fields and fields["status"] not in PROJECT_STATUSES:
        raise ValueError(f"Unknown project status: {fields['status']!r}")
    client = client or get_client()
    try:
        updated = single(client.table("projects").update(fields).eq("id", project_id).execute())
    except Exception as err:
        LOGGER.warning(f"update_project failed id={project_id}: {err}")
        return None
    patch = updated or fields
    (cache or QueryCache()).update(
        _cache_key(org_id),
        lambda data: [{**p, **patch} if p.get("id") == project_id else p for p in data or []],
    )
    return updated or {"id": project_id, **fields}


def _drop_from_cache(cache: QueryCache | None, org_id: str, project_id: str) -> None:
    (cache or QueryCache()).update(
        _cache_key(org_id),
        lambda data: [p for p in data or [] if p.get("id") != project_id],
    )


def soft_delete_project(
    project_id: str,
    org_id: str,
    *,
    access: dict | None = None,
    client: Client | None = None,
    cache: QueryCache | None = None,
) -> bool:
    _guard(access)
    client = client or get_client()
    try:
        client.table("projects").update({"deleted_at": _now_iso()}).eq("id", project_id).execute()
    except Exception as err:
        LOGGER.warning(f"soft_delete_project failed id={project_id}: {err}")
        return False
    _drop_from_cache(cache, org_id, project_id)
    return True


def restore_project(
    project_id: str,
    org_id: str,
    *,
    access: dict | None = None,
    client: Client | None = None,
    cache: QueryCache | None = None,
) -> bool:
    _guard(access)
    client = client or get_client()
    try:
        client.table("projects").update({"deleted_at": None}).eq("id", project_id).execute()
    except Exception as err:
        LOGGER.warning(f"restore_project failed id={project_id}: {err}")
        return False
    (cache or QueryCache()).invalidate(_cache_key(org_id))
    return True


def purge_project(
    project_id: str,
    *,
    access: dict | None = None,
    client: Client | None = None,
) -> bool:
    """Permanently delete a project that is already in the recycling bin."""
    _guard(access)
    client = client or get_client()
    try:
        client.table("projects").delete().eq("id", project_id).execute()
    except Exception as err:
        LOGGER.warning(f"purge_project failed id={project_id}: {err}")
        return False
    return True


def render_project_list(org_id: str, user_id: str, access: dict) -> None:
    st.markdown("### Projects")
    with st.spinner("Loading projects..."):
        result = list_projects(org_id)
    if not result.ok:
        st.error(f"Error fetching projects: {result.error}")
    projects = result.data or []
    if not projects:
        st.caption("No projects yet.")
    for project in projects:
        cols = st.columns([6, 2, 1])
        cols[0].markdown(f"**{project.get('title') or 'Untitled'}**")
        if project.get("description"):
            cols[0].caption(project["description"])
        cols[1].caption(str(project.get("status") or "todo").replace("_", " "))
        if access.get("can_edit") and cols[2].button("🗑", key=f"del_project_{project.get('id')}", help="Move to recycling bin"):
            if soft_delete_project(str(project["id"]), org_id, access=access):
                st.toast("Project moved to the recycling bin")
                st.rerun()
            st.error("Could not delete the project.")
    if access.get("can_edit"):
        _render_create_project_ui(org_id, user_id, access)
    _render_recycling_bin(org_id, access)


def _render_create_project_ui(org_id: str, user_id: str, access: dict) -> None:
    with st.expander("Create project", expanded=False):
        with st.form("create_project_form", clear_on_submit=True):
            title = st.text_input("Project title")
            description = st.text_area("Description")
            submitted = st.form_submit_button("Create")
        if submitted:
            if not title.strip():
                st.warning("Enter a project title.")
                return
            project = create_project(org_id, user_id, title, description, access=access)
            if project:
                st.success(f"Created project '{project.get('title')}'.")
                st.rerun()
            else:
                st.error("Could not create the project.")


def _render_recycling_bin(org_id: str, access: dict) -> None:
    with st.expander("Recycling bin", expanded=False):
        deleted = list_deleted_projects(org_id)
        if not deleted:
            st.caption("The recycling bin is empty.")
            return
        for project in deleted:
            cols = st.columns([6, 1, 1])
            cols[0].markdown(project.get("title") or "Untitled")
            if not access.get("can_edit"):
                continue
            if cols[1].button("Restore", key=f"restore_project_{project.get('id')}"):
                restore_project(str(project["id"]), org_id, access=access)
                st.rerun()
            if cols[2].button("Delete", key=f"purge_project_{project.get('id')}"):
                purge_project(str(project["id"]), access=access)
                st.rerun()
