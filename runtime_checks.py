from __future__ import annotations

import logging
from typing import Any

import streamlit as st

from logs import get_logger, log_once
from supabase_client import get_secret

RUNTIME_LOGGER = get_logger("runtime_checks")

REQUIRED_KEYS = ["SUPABASE_URL", "SUPABASE_ANON_KEY", "AUTH_COOKIE_SECRET"]
OPTIONAL_KEYS = ["APP_URL", "SUPER_ADMIN_EMAILS"]


def missing_config_keys(keys: list[str] | None = None) -> list[str]:
    missing: list[str] = []
    for key in keys or REQUIRED_KEYS:
        value = get_secret(key)
        if key == "SUPABASE_ANON_KEY" and not value:
            value = get_secret("SUPABASE_PUBLISHABLE_KEY")
        if not value:
            missing.append(key)
    return missing


@st.cache_resource(show_spinner=False)
def validate_runtime_config() -> dict[str, Any]:
    missing = missing_config_keys()
    for key in missing:
        log_once(RUNTIME_LOGGER, f"missing:{key}", logging.WARNING, f"Missing runtime config key: {key}")
    for key in OPTIONAL_KEYS:
        if not get_secret(key):
            log_once(RUNTIME_LOGGER, f"optional:{key}", logging.INFO, f"Optional config key not set: {key}")
    return {"missing": missing}
