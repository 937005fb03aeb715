"""Organization slugs and org-prefixed path building."""

from __future__ import annotations

import re

SLUG_MAX_LEN = 50

_DISALLOWED = re.compile(r"[^a-z0-9]+")
_EDGE_DASH = re.compile(r"^-|-$")
_SLUG_LONG = re.compile(r"^[a-z0-9][a-z0-9-]{1,48}[a-z0-9]$")
_SLUG_SHORT = re.compile(r"^[a-z0-9]{2,50}$")


def generate_slug(name: str | None) -> str:
    slug = _DISALLOWED.sub("-", (name or "").lower())
    slug = _EDGE_DASH.sub("", slug)
    return slug[:SLUG_MAX_LEN]


def is_valid_slug(slug: str | None) -> bool:
    if not slug:
        return False
    return bool(_SLUG_LONG.match(slug)) or (len(slug) >= 2 and bool(_SLUG_SHORT.match(slug)))


def org_url(slug: str, path: str = "") -> str:
    clean = path[1:] if path.startswith("/") else path
    return f"/{slug}/{clean}" if clean else f"/{slug}"


def org_path(slug: str | None, path: str) -> str:
    # No active org: plain navigation.
    if not slug:
        return path
    clean = "" if path == "/" else path
    return f"/{slug}{clean}"


def onboarding_path(slug: str) -> str:
    return f"/{slug}/onboarding"
