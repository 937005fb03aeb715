"""
Storage quotas for the drive and the data room.

Every organization gets a 100 MiB base allowance plus whatever extra
gigabytes it has bought. Usage is the sum of the sizes of files that
are not in the recycling bin.
"""

from __future__ import annotations

from typing import Any

from supabase import Client

from logs import get_logger
from remote_query import QueryCache, QueryResult, rows, single
from supabase_client import get_client

MIB = 1024 * 1024
GIB = 1024 * MIB
BASE_STORAGE_BYTES = 100 * MIB
STORAGE_STALE_SECONDS = 30

DRIVE_STORAGE_KEY = "drive-storage"
DATAROOM_STORAGE_KEY = "dataroom-storage"

LOGGER = get_logger("storage_usage")


def _sum_sizes(client: Client, table: str, org_id: str) -> int:
    files = rows(
        client.table(table)
        .select("file_size")
        .eq("organization_id", org_id)
        .is_("deleted_at", "null")
        .execute()
    )
    return sum(int(f.get("file_size") or 0) for f in files)


def _additional_gb(client: Client, table: str, org_id: str) -> float:
    row = single(
        client.table(table)
        .select("additional_storage_gb")
        .eq("organization_id", org_id)
        .maybe_single()
        .execute()
    )
    return (row or {}).get("additional_storage_gb") or 0


def _fetch_drive(client: Client, org_id: str) -> dict[str, Any]:
    used = _sum_sizes(client, "drive_files", org_id)
    additional_gb = _additional_gb(client, "organization_storage", org_id)
    return {
        "used": used,
        "total": BASE_STORAGE_BYTES + int(additional_gb * GIB),
        "additional_gb": additional_gb,
    }


def _fetch_dataroom(client: Client, org_id: str) -> dict[str, Any]:
    used = _sum_sizes(client, "data_room_files", org_id)
    additional_gb = _additional_gb(client, "organization_dataroom_storage", org_id)
    return {
        "used": used,
        "total": BASE_STORAGE_BYTES + int(additional_gb * GIB),
        "additional_gb": additional_gb,
        "additional_mb": additional_gb * 1024,
    }


def drive_storage(
    org_id: str | None,
    *,
    client: Client | None = None,
    cache: QueryCache | None = None,
) -> QueryResult:
    if not org_id:
        return QueryResult(data={"used": 0, "total": BASE_STORAGE_BYTES, "additional_gb": 0})
    client = client or get_client()
    cache = cache or QueryCache()
    return cache.get_or_fetch(
        (DRIVE_STORAGE_KEY, org_id),
        lambda: _fetch_drive(client, org_id),
        stale_time=STORAGE_STALE_SECONDS,
    )


def dataroom_storage(
    org_id: str | None,
    *,
    client: Client | None = None,
    cache: QueryCache | None = None,
) -> QueryResult:
    if not org_id:
        return QueryResult(
            data={"used": 0, "total": BASE_STORAGE_BYTES, "additional_gb": 0, "additional_mb": 0}
        )
    client = client or get_client()
    cache = cache or QueryCache()
    return cache.get_or_fetch(
        (DATAROOM_STORAGE_KEY, org_id),
        lambda: _fetch_dataroom(client, org_id),
        stale_time=STORAGE_STALE_SECONDS,
    )


def refetch_drive_storage(org_id: str, *, client: Client | None = None, cache: QueryCache | None = None) -> QueryResult:
    client = client or get_client()
    return (cache or QueryCache()).refetch((DRIVE_STORAGE_KEY, org_id), lambda: _fetch_drive(client, org_id))


def refetch_dataroom_storage(org_id: str, *, client: Client | None = None, cache: QueryCache | None = None) -> QueryResult:
    client = client or get_client()
    return (cache or QueryCache()).refetch((DATAROOM_STORAGE_KEY, org_id), lambda: _fetch_dataroom(client, org_id))


def invalidate_drive_storage(cache: QueryCache | None = None) -> int:
    return (cache or QueryCache()).invalidate((DRIVE_STORAGE_KEY,))


def invalidate_dataroom_storage(cache: QueryCache | None = None) -> int:
    return (cache or QueryCache()).invalidate((DATAROOM_STORAGE_KEY,))


def usage_percent(data: dict[str, Any] | None) -> float:
    if not data or not data.get("total"):
        return 0.0
    return min(100.0, max(0.0, 100.0 * float(data.get("used") or 0) / float(data["total"])))


def format_bytes(size: float | int | None) -> str:
    value = float(size or 0)
    for unit in ("B", "KB", "MB", "GB"):
        if value < 1024 or unit == "GB":
            return f"{value:.0f} {unit}" if unit == "B" else f"{value:.1f} {unit}"
        value /= 1024
    return f"{value:.1f} GB"
