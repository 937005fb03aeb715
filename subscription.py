from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

from supabase import Client

from logs import get_logger
from remote_query import QueryResult
from supabase_client import invoke_function

SUBSCRIPTION_POLL_SECONDS = 60

LOGGER = get_logger("subscription")


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _parse_iso(value: str | None) -> datetime | None:
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


@dataclass
class SubscriptionInfo:
    subscribed: bool = False
    status: str = "unknown"
    trial_ends_at: str | None = None
    current_period_end: str | None = None
    plan_type: str | None = None

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "SubscriptionInfo":
        return cls(
            subscribed=payload.get("subscribed") is True,
            status=str(payload.get("status") or "unknown"),
            trial_ends_at=payload.get("trial_ends_at"),
            current_period_end=payload.get("current_period_end"),
            plan_type=payload.get("plan_type"),
        )


def check_subscription(*, client: Client | None = None) -> QueryResult:
    payload, error = invoke_function("check-subscription", client=client)
    if error:
        LOGGER.warning(f"Error fetching subscription: {error}")
        return QueryResult(data=None, error=error)
    if not isinstance(payload, dict):
        return QueryResult(data=None, error="Unexpected subscription response")
    return QueryResult(data=SubscriptionInfo.from_payload(payload))


def is_trialing(info: SubscriptionInfo | None) -> bool:
    return info is not None and info.status == "trialing"


def is_active(info: SubscriptionInfo | None) -> bool:
    return info is not None and info.subscribed


def trial_days_left(info: SubscriptionInfo | None, now: datetime | None = None) -> int | None:
    if info is None:
        return None
    trial_end = _parse_iso(info.trial_ends_at)
    if trial_end is None:
        return None
    now = now or _utc_now()
    days = (trial_end - now).total_seconds() / 86400
    return max(0, math.ceil(days))


def period_end_label(info: SubscriptionInfo | None) -> str | None:
    end = _parse_iso(info.current_period_end) if info else None
    return end.strftime("%d %b %Y") if end else None
