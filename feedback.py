"""
Beta feedback form storage.

Feedback has no table of its own: each submission is a
`feature_usage_logs` row named `beta_feedback` whose `page_path`
holds the form fields as JSON.
"""

from __future__ import annotations

import json
import random
import re
from typing import Any

from supabase import Client

from logs import get_logger
from remote_query import rows
from supabase_client import get_client

FEEDBACK_FEATURE = "beta_feedback"
FEEDBACK_CATEGORY = "Feedback"
FIELD_LIMITS = {"name": 100, "organisation": 100, "email": 255, "feedback": 2000}
MIN_FEEDBACK_LENGTH = 10

_EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

LOGGER = get_logger("feedback")


def math_challenge(rng: random.Random | None = None) -> tuple[int, int]:
    rng = rng or random
    return rng.randint(1, 10), rng.randint(1, 10)


def validate_feedback(
    name: str,
    organisation: str,
    email: str,
    text: str,
    *,
    challenge: tuple[int, int] | None = None,
    answer: str | int | None = None,
) -> str | None:
    """Return the first validation message, or None when the form is valid."""
    if not (name or "").strip():
        return "Name is required"
    if not (organisation or "").strip():
        return "Organisation name is required"
    if not (email or "").strip():
        return "Email address is required"
    if not _EMAIL_RE.match(email.strip()):
        return "Please enter a valid email address"
    if not (text or "").strip():
        return "Feedback details are required"
    if len(text.strip()) < MIN_FEEDBACK_LENGTH:
        return "Please provide more detailed feedback (at least 10 characters)"
    if challenge is not None:
        try:
            given = int(str(answer).strip())
        except (TypeError, ValueError):
            return "Incorrect answer. Please try again."
        if given != sum(challenge):
            return "Incorrect answer. Please try again."
    return None


def pack_feedback(name: str, organisation: str, email: str, text: str) -> str:
    fields = {"name": name, "organisation": organisation, "email": email, "feedback": text}
    return json.dumps(
        {key: (value or "").strip()[: FIELD_LIMITS[key]] for key, value in fields.items()}
    )


def submit_feedback(
    user_id: str | None,
    org_id: str | None,
    name: str,
    organisation: str,
    email: str,
    text: str,
    *,
    client: Client | None = None,
) -> bool:
    if not (text or "").strip():
        raise ValueError("Feedback details are required")
    try:
        (client or get_client()).table("feature_usage_logs").insert(
            {
                "feature_name": FEEDBACK_FEATURE,
                "feature_category": FEEDBACK_CATEGORY,
                "user_id": user_id or None,
                "organization_id": org_id or None,
                "page_path": pack_feedback(name, organisation, email, text),
            }
        ).execute()
    except Exception as err:
        LOGGER.warning(f"Error submitting feedback: {err}")
        return False
    return True


def unpack_feedback(page_path: str | None) -> dict[str, Any]:
    entry = {"name": "", "organisation": "", "email": "", "feedback": ""}
    if page_path:
        try:
            parsed = json.loads(page_path)
        except ValueError:
            parsed = None
        if isinstance(parsed, dict):
            entry.update(parsed)
    return {
        "name": entry["name"] or "Unknown",
        "organisation": entry["organisation"] or "N/A",
        "email": entry["email"] or "N/A",
        "feedback": entry["feedback"] or "No feedback provided",
    }


def list_feedback(*, client: Client | None = None) -> list[dict[str, Any]]:
    try:
        data = rows(
            (client or get_client())
            .table("feature_usage_logs")
            .select("id, created_at, page_path")
            .eq("feature_name", FEEDBACK_FEATURE)
            .order("created_at", desc=True)
            .execute()
        )
    except Exception as err:
        LOGGER.warning(f"Error fetching feedback: {err}")
        return []
    return [
        {"id": row.get("id"), "created_at": row.get("created_at"), **unpack_feedback(row.get("page_path"))}
        for row in data
    ]
