from __future__ import annotations

import html
import traceback
from collections.abc import Iterator
from contextlib import contextmanager

import streamlit as st

from logs import get_logger
from remote_query import clear_session_cache

LOGGER = get_logger("error_guard")

# st.stop(), st.rerun() and st.switch_page() unwind the script with these.
_CONTROL_FLOW = {"StopException", "RerunException"}


def is_control_flow(err: BaseException) -> bool:
    return any(cls.__name__ in _CONTROL_FLOW for cls in type(err).__mro__)


def render_crash(err: BaseException, title: str | None = None) -> None:
    st.markdown(
        f"""
        <div class="crash-panel">
          <div class="crash-title">{html.escape(title or "App crashed while rendering")}</div>
          <pre class="crash-error">{html.escape(str(err) or err.__class__.__name__)}</pre>
        </div>
        """,
        unsafe_allow_html=True,
    )
    if st.button("Reload", key="crash_reload_btn", type="primary"):
        clear_session_cache()
        st.rerun()


@contextmanager
def render_guard(title: str | None = None) -> Iterator[None]:
    try:
        yield
    except Exception as err:
        if is_control_flow(err):
            raise
        LOGGER.error(f"Unhandled page error: {err}\n{traceback.format_exc()}")
        render_crash(err, title)
