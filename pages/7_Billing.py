from __future__ import annotations

import streamlit as st

from error_guard import render_guard
from page_shell import bootstrap_page
from remote_query import poll
from subscription import (
    SUBSCRIPTION_POLL_SECONDS,
    check_subscription,
    is_active,
    is_trialing,
    period_end_label,
    trial_days_left,
)
from ui import badge, kpi_chip_row, page_header


@poll(SUBSCRIPTION_POLL_SECONDS)
def render_subscription() -> None:
    result = check_subscription()
    if not result.ok:
        st.error(f"Could not load your subscription: {result.error}")
        return
    info = result.data
    if is_active(info):
        status = badge("Active", "success")
    elif is_trialing(info):
        status = badge("Trial", "warn")
    else:
        status = badge(info.status.replace("_", " ").title(), "muted")
    st.markdown(status, unsafe_allow_html=True)

    days = trial_days_left(info)
    kpi_chip_row([
        {"label": "Plan", "value": info.plan_type or "—"},
        {"label": "Trial days left", "value": "—" if days is None else days},
        {"label": "Renews", "value": period_end_label(info) or "—"},
    ])
    if is_trialing(info) and days is not None and days <= 3:
        st.warning(f"⏰ Your trial expires in {days} day(s).")


with render_guard():
    bootstrap_page("/settings/billing", title="Billing")
    page_header("Billing")
    render_subscription()
