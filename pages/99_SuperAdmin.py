from __future__ import annotations

import time

import pandas as pd
import streamlit as st

from access_guard import is_super_admin
from activity import list_audit_logs
from auth import (
    SUPER_ADMIN_INACTIVITY_TIMEOUT_SECONDS,
    remaining_session_seconds,
    render_auth_sidebar,
    require_login,
)
from charts import category_totals, feature_usage_bar, feature_usage_frame
from error_guard import render_guard
from feature_tracking import STATS_POLL_SECONDS, feature_usage_stats
from feedback import list_feedback
from functions.delete_test_users import request_deletion
from page_shell import start_page
from remote_query import poll
from ui import kpi_chip_row, page_header


@poll(STATS_POLL_SECONDS)
def render_feature_usage() -> None:
    result = feature_usage_stats()
    if not result.ok:
        st.error(f"Could not load feature usage: {result.error}")
        return
    df = feature_usage_frame(result.data)
    if df.empty:
        st.caption("No feature usage recorded yet.")
        return
    kpi_chip_row([
        {"label": "Total visits", "value": int(df["total_visits"].sum())},
        {"label": "Last 24h", "value": int(df["visits_last_24h"].sum())},
        {"label": "Features used", "value": len(df)},
    ])
    st.plotly_chart(feature_usage_bar(df), use_container_width=True, key="feature_usage_chart")
    st.dataframe(category_totals(df), hide_index=True, use_container_width=True)


def render_delete_test_users() -> None:
    st.warning("Deleting accounts is permanent. Only use this for test accounts.")
    with st.form("delete_test_users_form"):
        raw_ids = st.text_area("User ids (one per line)")
        secret = st.text_input("Secret key", type="password")
        submitted = st.form_submit_button("Delete accounts", type="primary")
    if not submitted:
        return
    user_ids = [line.strip() for line in raw_ids.splitlines() if line.strip()]
    try:
        status, payload = request_deletion(user_ids, secret)
    except OSError as err:
        st.error(f"Could not reach the delete-test-users function: {err}")
        return
    if status != 200:
        st.error(payload.get("error") or f"Request failed ({status})")
        return
    results = payload.get("results") or []
    st.dataframe(pd.DataFrame(results), hide_index=True, use_container_width=True)
    failed = [r for r in results if not r.get("success")]
    if failed:
        st.warning(f"{len(failed)} of {len(results)} deletions failed.")
    else:
        st.success(f"Deleted {len(results)} account(s).")


start_page("Super admin")

with render_guard():
    user = require_login(inactivity_timeout=SUPER_ADMIN_INACTIVITY_TIMEOUT_SECONDS)
    if not is_super_admin(user):
        st.error("Super admin access required.")
        st.stop()
    render_auth_sidebar(user)
    page_header("Super admin")
    remaining = remaining_session_seconds(user.get("last_active"), time.time(), SUPER_ADMIN_INACTIVITY_TIMEOUT_SECONDS)
    st.caption(f"Admin session ends after {int(remaining // 60)} minutes without activity.")

    usage_tab, feedback_tab, audit_tab, cleanup_tab = st.tabs(
        ["Feature usage", "Feedback", "Audit log", "Test accounts"]
    )
    with usage_tab:
        render_feature_usage()
    with feedback_tab:
        entries = list_feedback()
        if not entries:
            st.caption("No feedback yet.")
        for entry in entries:
            with st.expander(f"{entry['name']} · {entry['organisation']} · {entry.get('created_at') or ''}"):
                st.caption(entry["email"])
                st.write(entry["feedback"])
    with audit_tab:
        logs = list_audit_logs()
        if logs:
            st.dataframe(pd.DataFrame(logs), hide_index=True, use_container_width=True)
        else:
            st.caption("No audit entries.")
    with cleanup_tab:
        render_delete_test_users()
