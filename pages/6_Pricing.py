from __future__ import annotations

import streamlit as st

from error_guard import render_guard
from invoicing import format_rate
from page_shell import bootstrap_page
from pricing import hourly_rate, list_va_pricing, price_for_package
from ui import badge, page_header, stat

with render_guard():
    bootstrap_page("/virtual-assistants", title="Virtual assistants")
    page_header("Virtual assistants", right=badge("Monthly packages", "success"))

    with st.spinner("Loading pricing..."):
        result = list_va_pricing()
    if not result.ok:
        st.error(f"Error fetching VA pricing: {result.error}")
        if st.button("Retry"):
            st.rerun()
        st.stop()

    pricing = result.data or []
    if not pricing:
        st.caption("No virtual assistant packages are available yet.")
        st.stop()

    cols = st.columns(min(4, len(pricing)))
    for idx, package in enumerate(pricing):
        hours = int(package.get("hours_package") or 0)
        with cols[idx % len(cols)]:
            stat(
                f"{hours} hours / month",
                format_rate(price_for_package(pricing, hours)),
                f"{format_rate(hourly_rate(pricing, hours))} per hour",
            )
