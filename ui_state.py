"""
Shared UI flags kept in the Streamlit session.

`install_ui_state` plays the provider role: pages call it once before any
widget reads the calendar or sparkle state.
"""

from __future__ import annotations

from collections.abc import MutableMapping
from typing import Any

import streamlit as st

CALENDAR_KEY = "_ui_calendar"
SPARKLE_KEY = "_ui_sparkle"


def _session(store: MutableMapping[str, Any] | None) -> MutableMapping[str, Any]:
    return st.session_state if store is None else store


class CalendarState:
    def __init__(self, store: MutableMapping[str, Any]) -> None:
        self._store = store

    @property
    def is_open(self) -> bool:
        return bool(self._store[CALENDAR_KEY]["open"])

    def open(self) -> None:
        self._store[CALENDAR_KEY]["open"] = True

    def close(self) -> None:
        self._store[CALENDAR_KEY]["open"] = False

    def toggle(self) -> None:
        self._store[CALENDAR_KEY]["open"] = not self.is_open


class SparkleState:
    def __init__(self, store: MutableMapping[str, Any]) -> None:
        self._store = store

    @property
    def is_active(self) -> bool:
        return bool(self._store[SPARKLE_KEY]["active"])

    @property
    def container(self) -> str | None:
        return self._store[SPARKLE_KEY]["container"]

    def trigger(self, container: str | None = None) -> None:
        self._store[SPARKLE_KEY]["container"] = container
        self._store[SPARKLE_KEY]["active"] = True

    def complete(self) -> None:
        self._store[SPARKLE_KEY]["active"] = False
        self._store[SPARKLE_KEY]["container"] = None


def install_ui_state(store: MutableMapping[str, Any] | None = None) -> None:
    session = _session(store)
    if CALENDAR_KEY not in session:
        session[CALENDAR_KEY] = {"open": False}
    if SPARKLE_KEY not in session:
        session[SPARKLE_KEY] = {"active": False, "container": None}


def use_calendar(store: MutableMapping[str, Any] | None = None) -> CalendarState:
    session = _session(store)
    if CALENDAR_KEY not in session:
        raise RuntimeError("use_calendar() called before install_ui_state()")
    return CalendarState(session)


def use_sparkle(store: MutableMapping[str, Any] | None = None) -> SparkleState:
    session = _session(store)
    if SPARKLE_KEY not in session:
        raise RuntimeError("use_sparkle() called before install_ui_state()")
    return SparkleState(session)
