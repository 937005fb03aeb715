"""
Helpers shared by the data modules: result wrapping, a per-session TTL
cache for query results and fixed-interval polling.
"""

from __future__ import annotations

import time
from collections.abc import Callable, MutableMapping
from dataclasses import dataclass, field
from typing import Any

import streamlit as st

from logs import get_logger

LOGGER = get_logger("remote_query")

CACHE_KEY = "_query_cache"


@dataclass
class QueryResult:
    data: Any = None
    error: str | None = None
    fetched_at: float = field(default_factory=time.time)

    @property
    def ok(self) -> bool:
        return self.error is None


def rows(response: Any) -> list[dict[str, Any]]:
    data = getattr(response, "data", None) if response is not None else None
    if isinstance(data, list):
        return [row for row in data if isinstance(row, dict)]
    if isinstance(data, dict):
        return [data]
    return []


def single(response: Any) -> dict[str, Any] | None:
    # maybe_single() returns None instead of a response when nothing matched.
    data = getattr(response, "data", None) if response is not None else None
    if isinstance(data, list):
        return data[0] if data and isinstance(data[0], dict) else None
    return data if isinstance(data, dict) else None


def run_query(fn: Callable[[], Any], *, default: Any = None, label: str = "query") -> QueryResult:
    try:
        return QueryResult(data=fn())
    except Exception as err:
        LOGGER.warning(f"{label} failed: {err}")
        return QueryResult(data=default, error=str(err) or err.__class__.__name__)


class QueryCache:
    def __init__(self, store: MutableMapping[str, Any] | None = None, clock: Callable[[], float] = time.time) -> None:
        if store is None:
            store = st.session_state.setdefault(CACHE_KEY, {})
        self._store = store
        self._clock = clock

    def get(self, key: tuple, stale_time: float) -> QueryResult | None:
        entry = self._store.get(key)
        if not isinstance(entry, QueryResult):
            return None
        if self._clock() - entry.fetched_at >= stale_time:
            return None
        return entry

    def set(self, key: tuple, result: QueryResult) -> None:
        if result.ok:
            self._store[key] = result

    def get_or_fetch(
        self,
        key: tuple,
        fn: Callable[[], Any],
        *,
        stale_time: float = 0.0,
        default: Any = None,
    ) -> QueryResult:
        cached = self.get(key, stale_time)
        if cached is not None:
            return cached
        return self.refetch(key, fn, default=default)

    def refetch(self, key: tuple, fn: Callable[[], Any], *, default: Any = None) -> QueryResult:
        result = run_query(fn, default=default, label=str(key[0]) if key else "query")
        result.fetched_at = self._clock()
        self.set(key, result)
        return result

    def update(self, key: tuple, fn: Callable[[Any], Any]) -> None:
        """Patch a cached value in place after a successful mutation."""
        entry = self._store.get(key)
        if isinstance(entry, QueryResult):
            entry.data = fn(entry.data)

    def invalidate(self, prefix: tuple = ()) -> int:
        doomed = [k for k in list(self._store) if isinstance(k, tuple) and k[: len(prefix)] == prefix]
        for key in doomed:
            self._store.pop(key, None)
        return len(doomed)


def clear_session_cache() -> None:
    st.session_state.pop(CACHE_KEY, None)


def poll(interval_seconds: float):
    """Rerun the decorated renderer every `interval_seconds`."""

    def decorator(fn):
        fragment = getattr(st, "fragment", None)
        if fragment is None:
            return fn
        return fragment(run_every=interval_seconds)(fn)

    return decorator
