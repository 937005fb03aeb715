from __future__ import annotations

from supabase import Client

from logs import get_logger
from remote_query import QueryResult, rows, run_query
from supabase_client import get_client

LOGGER = get_logger("pricing")


def list_va_pricing(*, client: Client | None = None) -> QueryResult:
    client = client or get_client()
    return run_query(
        lambda: rows(client.table("va_pricing").select("*").order("hours_package").execute()),
        default=[],
        label="va_pricing",
    )


def price_for_package(pricing: list[dict], hours: int) -> float:
    for package in pricing:
        if package.get("hours_package") == hours:
            return (package.get("price_cents") or 0) / 100
    return 0


def hourly_rate(pricing: list[dict], hours: int) -> float:
    price = price_for_package(pricing, hours)
    return price / hours if hours else 0
