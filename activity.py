from __future__ import annotations

from typing import Any

from supabase import Client

from logs import get_logger
from remote_query import rows
from supabase_client import get_client

AUDIT_LOG_LIMIT = 500
ACTIVITY_LIMIT = 100

LOGGER = get_logger("activity")


def log_data_room_activity(
    data_room_id: str,
    org_id: str,
    user_id: str | None,
    user_name: str,
    user_email: str,
    action: str,
    details: Any = None,
    *,
    is_guest: bool = False,
    client: Client | None = None,
) -> bool:
    try:
        (client or get_client()).table("data_room_activity").insert(
            [
                {
                    "data_room_id": data_room_id,
                    "organization_id": org_id,
                    "user_id": None if is_guest else user_id,
                    "user_name": user_name,
                    "user_email": user_email,
                    "action": action,
                    "details": details if details is not None else None,
                    "is_guest": is_guest,
                }
            ]
        ).execute()
    except Exception as err:
        LOGGER.warning(f"Error logging activity room={data_room_id} action={action}: {err}")
        return False
    return True


def list_data_rooms(org_id: str | None, *, client: Client | None = None) -> list[dict]:
    if not org_id:
        return []
    try:
        return rows(
            (client or get_client())
            .table("data_rooms")
            .select("id, name")
            .eq("organization_id", org_id)
            .is_("deleted_at", "null")
            .order("name")
            .execute()
        )
    except Exception as err:
        LOGGER.warning(f"list_data_rooms failed org={org_id}: {err}")
        return []


def list_data_room_activity(
    data_room_id: str | None,
    limit: int = ACTIVITY_LIMIT,
    *,
    client: Client | None = None,
) -> list[dict]:
    if not data_room_id:
        return []
    try:
        return rows(
            (client or get_client())
            .table("data_room_activity")
            .select("*")
            .eq("data_room_id", data_room_id)
            .order("created_at", desc=True)
            .limit(limit)
            .execute()
        )
    except Exception as err:
        LOGGER.warning(f"list_data_room_activity failed room={data_room_id}: {err}")
        return []


def list_audit_logs(limit: int = AUDIT_LOG_LIMIT, *, client: Client | None = None) -> list[dict]:
    try:
        return rows(
            (client or get_client())
            .table("super_admin_audit_logs")
            .select("*")
            .order("created_at", desc=True)
            .limit(limit)
            .execute()
        )
    except Exception as err:
        LOGGER.warning(f"list_audit_logs failed: {err}")
        return []
