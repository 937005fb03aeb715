"""
Task board data: list, create and move tasks between the todo and
complete columns of each category.

Mutations go to the remote table first. When they succeed the cached
list for the organization is patched in place, so the board does not
refetch after every click.
"""

from __future__ import annotations

from collections import OrderedDict
from datetime import datetime, timezone
from typing import Any

from supabase import Client

from access_guard import assert_can_edit
from logs import get_logger
from remote_query import QueryCache, QueryResult, rows, single
from supabase_client import get_client

TASK_STATUSES = ("todo", "complete")
TASK_PRIORITIES = ("low", "medium", "high")
SUBCATEGORIES = ("weekly", "monthly", "quarterly", "yearly", "misc")
TASKS_STALE_SECONDS = 30

LOGGER = get_logger("tasks")


def _now_iso() -> str:
    return datetime.now(timezone.utc).replace(microsecond=0).isoformat().replace("+00:00", "Z")


def _cache_key(org_id: str) -> tuple:
    return ("tasks", org_id)


def _fetch_tasks(client: Client, org_id: str) -> list[dict]:
    return rows(
        client.table("tasks")
        .select("*")
        .eq("organization_id", org_id)
        .is_("deleted_at", "null")
        .is_("archived_at", "null")
        .or_("is_draft.is.null,is_draft.eq.false")
        .eq("assignment_status", "accepted")
        .order("position")
        .execute()
    )


def list_tasks(
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
        lambda: _fetch_tasks(client, org_id),
        stale_time=TASKS_STALE_SECONDS,
        default=[],
    )


def next_position(tasks: list[dict], category: str, status: str = "todo") -> int:
    positions = [
        int(t.get("position") or 0)
        for t in tasks
        if t.get("category") == category and t.get("status") == status
    ]
    return max(positions) + 1 if positions else 0


def group_tasks_by_category(tasks: list[dict]) -> "OrderedDict[str, dict[str, list[dict]]]":
    """Group tasks as {category: {"todo": [...], "complete": [...]}} ordered by position."""
    grouped: OrderedDict[str, dict[str, list[dict]]] = OrderedDict()
    for task in sorted(tasks, key=lambda t: (t.get("position") or 0)):
        category = task.get("category") or "General"
        bucket = grouped.setdefault(category, {status: [] for status in TASK_STATUSES})
        status = task.get("status") if task.get("status") in TASK_STATUSES else "todo"
        bucket[status].append(task)
    return grouped


def _patch_cached(cache: QueryCache | None, org_id: str, task_id: str, patch: dict[str, Any]) -> None:
    (cache or QueryCache()).update(
        _cache_key(org_id),
        lambda data: [{**t, **patch} if t.get("id") == task_id else t for t in data or []],
    )


def _cached_tasks(cache: QueryCache, org_id: str) -> list[dict]:
    entry = cache.get(_cache_key(org_id), float("inf"))
    return list(entry.data or []) if entry else []


def create_task(
    org_id: str,
    user_id: str,
    title: str,
    category: str,
    *,
    description: str = "",
    subcategory: str = "weekly",
    priority: str = "medium",
    project_id: str | None = None,
    due_date: str | None = None,
    assigned_user_id: str | None = None,
    access: dict | None = None,
    client: Client | None = None,
    cache: QueryCache | None = None,
) -> dict | None:
    if access is not None:
        assert_can_edit(access)
    clean_title = (title or "").strip()
    if not clean_title:
        raise ValueError("Task title is required")
    if subcategory not in SUBCATEGORIES:
        raise ValueError(f"Unknown subcategory: {subcategory!r}")
    client = client or get_client()
    cache = cache or QueryCache()
    assignment_status = "pending" if assigned_user_id and assigned_user_id != user_id else "accepted"
    payload = {
        "title": clean_title,
        "description": description.strip() or None,
        "category": category,
        "subcategory": subcategory,
        "priority": priority,
        "status": "todo",
        "user_id": user_id,
        "organization_id": org_id,
        "position": next_position(_cached_tasks(cache, org_id), category),
        "created_by_user_id": user_id,
        "project_id": project_id,
        "due_date": due_date,
        "assigned_user_id": assigned_user_id,
        "assignment_status": assignment_status,
    }
    try:
        created = single(client.table("tasks").insert(payload).execute())
    except Exception as err:
        LOGGER.warning(f"create_task failed org={org_id}: {err}")
        return None
    # Pending assignments are not shown until the assignee accepts.
    if created and created.get("assignment_status", assignment_status) == "accepted":
        cache.update(_cache_key(org_id), lambda data: [*(data or []), created])
    return created


def update_task(
    task_id: str,
    org_id: str,
    *,
    access: dict | None = None,
    client: Client | None = None,
    cache: QueryCache | None = None,
    **fields: Any,
) -> bool:
    if access is not None:
        assert_can_edit(access)
    if "title" in fields:
        fields["title"] = str(fields["title"] or "").strip()
        if not fields["title"]:
            raise ValueError("Task title is required")
    client = client or get_client()
    try:
        client.table("tasks").update(fields).eq("id", task_id).execute()
    except Exception as err:
        LOGGER.warning(f"update_task failed id={task_id}: {err}")
        return False
    _patch_cached(cache, org_id, task_id, fields)
    return True


def _set_status(
    task_id: str,
    org_id: str,
    status: str,
    *,
    access: dict | None,
    client: Client | None,
    cache: QueryCache | None,
) -> bool:
    cache = cache or QueryCache()
    tasks = _cached_tasks(cache, org_id)
    task = next((t for t in tasks if t.get("id") == task_id), None)
    category = task.get("category") if task else None
    fields = {
        "status": status,
        "position": next_position(tasks, category, status) if category else 0,
        "completed_at": _now_iso() if status == "complete" else None,
    }
    return update_task(task_id, org_id, access=access, client=client, cache=cache, **fields)


def complete_task(
    task_id: str,
    org_id: str,
    *,
    access: dict | None = None,
    client: Client | None = None,
    cache: QueryCache | None = None,
) -> bool:
    return _set_status(task_id, org_id, "complete", access=access, client=client, cache=cache)


def reopen_task(
    task_id: str,
    org_id: str,
    *,
    access: dict | None = None,
    client: Client | None = None,
    cache: QueryCache | None = None,
) -> bool:
    return _set_status(task_id, org_id, "todo", access=access, client=client, cache=cache)


def soft_delete_task(
    task_id: str,
    org_id: str,
    *,
    access: dict | None = None,
    client: Client | None = None,
    cache: QueryCache | None = None,
) -> bool:
    if access is not None:
        assert_can_edit(access)
    client = client or get_client()
    try:
        client.table("tasks").update({"deleted_at": _now_iso()}).eq("id", task_id).execute()
    except Exception as err:
        LOGGER.warning(f"soft_delete_task failed id={task_id}: {err}")
        return False
    (cache or QueryCache()).update(
        _cache_key(org_id),
        lambda data: [t for t in data or [] if t.get("id") != task_id],
    )
    return True
