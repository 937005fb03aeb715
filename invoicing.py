from __future__ import annotations

from typing import Any

from supabase import Client

from access_guard import assert_can_edit
from logs import get_logger
from remote_query import QueryCache, QueryResult, rows, single
from supabase_client import get_client

VAT_OPTIONS = [
    {"value": "none", "label": "No VAT", "rate": 0},
    {"value": "standard", "label": "Standard (20%)", "rate": 20},
    {"value": "reduced", "label": "Reduced (5%)", "rate": 5},
    {"value": "zero", "label": "Zero Rated (0%)", "rate": 0},
]
CURRENCY_SYMBOLS = {"GBP": "£", "USD": "$", "EUR": "€"}

LOGGER = get_logger("invoicing")


def _cache_key(org_id: str | None) -> tuple:
    return ("invoice_products", org_id)


def vat_rate(value: str | None) -> int:
    for option in VAT_OPTIONS:
        if option["value"] == value:
            return int(option["rate"])
    return 0


def format_rate(value: float | int | None, currency: str = "GBP") -> str:
    amount = float(value or 0)
    symbol = CURRENCY_SYMBOLS.get(currency.upper(), f"{currency.upper()} ")
    sign = "-" if amount < 0 else ""
    return f"{sign}{symbol}{abs(amount):,.2f}"


def list_invoice_products(
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
        lambda: rows(
            client.table("invoice_products")
            .select("*")
            .eq("organization_id", org_id)
            .order("name")
            .execute()
        ),
        default=[],
    )


def add_invoice_product(
    org_id: str | None,
    name: str,
    description: str | None,
    default_rate: float,
    default_vat: str,
    *,
    access: dict | None = None,
    client: Client | None = None,
    cache: QueryCache | None = None,
) -> dict[str, Any]:
    """Insert a product and return the stored row.

    Raises ValueError without an organization or a name, and lets remote
    errors propagate so the form can show them.
    """
    if not org_id:
        raise ValueError("No organization")
    if access is not None:
        assert_can_edit(access)
    clean_name = (name or "").strip()
    if not clean_name:
        raise ValueError("Item name is required")
    if default_vat not in {option["value"] for option in VAT_OPTIONS}:
        raise ValueError(f"Unknown VAT option: {default_vat!r}")
    client = client or get_client()
    try:
        row = single(
            client.table("invoice_products")
            .insert(
                {
                    "organization_id": org_id,
                    "name": clean_name,
                    "description": (description or "").strip() or None,
                    "default_rate": default_rate,
                    "default_vat": default_vat,
                }
            )
            .execute()
        )
    except Exception as err:
        LOGGER.warning(f"add_invoice_product failed org={org_id}: {err}")
        raise
    (cache or QueryCache()).invalidate(_cache_key(org_id))
    return row or {}
