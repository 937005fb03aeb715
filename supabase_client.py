"""
Supabase client access and runtime settings.

Settings are read from the process environment first, then from
Streamlit secrets, so the same code runs under `streamlit run` and
from plain scripts (the admin function server, tests).
"""

from __future__ import annotations

import json
from dataclasses import dataclass
import os
from typing import Any

import streamlit as st
from supabase import Client, create_client

from logs import get_logger

LOGGER = get_logger("supabase_client")

CLIENT_KEY = "_supabase_client"


def get_secret(key: str, default: str = "") -> str:
    value = os.environ.get(key, "")
    if not value:
        try:
            value = st.secrets.get(key, "")
        except Exception:
            value = ""
    return str(value).strip() if value else default


@dataclass(frozen=True)
class SupabaseConfig:
    url: str
    anon_key: str
    service_role_key: str = ""

    @property
    def configured(self) -> bool:
        return bool(self.url and self.anon_key)


def load_config() -> SupabaseConfig:
    return SupabaseConfig(
        url=get_secret("SUPABASE_URL").rstrip("/"),
        anon_key=get_secret("SUPABASE_ANON_KEY") or get_secret("SUPABASE_PUBLISHABLE_KEY"),
        service_role_key=get_secret("SUPABASE_SERVICE_ROLE_KEY"),
    )


def get_client() -> Client:
    # One client per browser session: the auth session lives on the client.
    client = st.session_state.get(CLIENT_KEY)
    if isinstance(client, Client):
        return client
    cfg = load_config()
    if not cfg.configured:
        raise RuntimeError("SUPABASE_URL and SUPABASE_ANON_KEY must be set")
    LOGGER.debug(f"Creating Supabase client for {cfg.url}")
    client = create_client(cfg.url, cfg.anon_key)
    st.session_state[CLIENT_KEY] = client
    return client


def reset_client() -> None:
    st.session_state.pop(CLIENT_KEY, None)


def get_admin_client() -> Client:
    cfg = load_config()
    if not cfg.url or not cfg.service_role_key:
        raise RuntimeError("SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY must be set")
    return create_client(cfg.url, cfg.service_role_key)


def _decode_payload(raw: Any) -> Any:
    if isinstance(raw, (bytes, bytearray)):
        raw = raw.decode("utf-8")
    if isinstance(raw, str):
        return json.loads(raw or "null")
    return raw


def invoke_function(
    name: str,
    body: dict[str, Any] | None = None,
    *,
    client: Client | None = None,
) -> tuple[Any, str | None]:
    """Call an edge function and return (payload, error message)."""
    client = client or get_client()
    try:
        raw = client.functions.invoke(name, invoke_options={"body": body or {}})
        payload = _decode_payload(raw)
    except Exception as err:
        LOGGER.warning(f"invoke_function name={name} error={err}")
        return None, str(err)
    if isinstance(payload, dict) and isinstance(payload.get("error"), str):
        return payload, payload["error"]
    return payload, None
