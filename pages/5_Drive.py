from __future__ import annotations

import pandas as pd
import streamlit as st

from activity import list_data_room_activity, list_data_rooms, log_data_room_activity
from charts import storage_gauge
from error_guard import render_guard
from page_shell import bootstrap_page
from storage_usage import (
    dataroom_storage,
    drive_storage,
    format_bytes,
    refetch_dataroom_storage,
    refetch_drive_storage,
    usage_percent,
)
from ui import page_header, storage_bar


def _render_storage(label: str, result, gauge_key: str) -> None:
    if not result.ok:
        st.error(f"Could not load {label.lower()} usage: {result.error}")
        return
    data = result.data or {}
    pct = usage_percent(data)
    extra = data.get("additional_gb") or 0
    detail = f"{format_bytes(data.get('used'))} of {format_bytes(data.get('total'))}"
    if extra:
        detail += f" (includes {extra} GB add-on)"
    storage_bar(label, pct, detail)
    st.plotly_chart(storage_gauge(label, pct), use_container_width=True, key=gauge_key)


with render_guard():
    ctx = bootstrap_page("/drive", title="Drive")
    page_header("Drive & data room")

    if st.button("↻ Refresh usage"):
        refetch_drive_storage(ctx.org.id)
        refetch_dataroom_storage(ctx.org.id)

    with st.spinner("Calculating storage..."):
        drive = drive_storage(ctx.org.id)
        dataroom = dataroom_storage(ctx.org.id)
    left, right = st.columns(2)
    with left:
        _render_storage("Drive storage", drive, "drive_gauge")
    with right:
        _render_storage("Data room storage", dataroom, "dataroom_gauge")

    st.markdown("### Data room activity")
    rooms = list_data_rooms(ctx.org.id)
    if not rooms:
        st.caption("No data rooms yet.")
    else:
        names = {room["id"]: room.get("name") or "Untitled" for room in rooms if room.get("id")}
        room_id = st.selectbox("Data room", list(names), format_func=names.get)
        viewed_key = f"_room_viewed_{room_id}"
        if room_id and not st.session_state.get(viewed_key):
            st.session_state[viewed_key] = True
            email = ctx.user.get("email") or ""
            log_data_room_activity(
                room_id,
                ctx.org.id,
                ctx.user.get("id"),
                (ctx.profile.full_name if ctx.profile else "") or email,
                email,
                "room_viewed",
            )
        activity = list_data_room_activity(room_id)
        if not activity:
            st.caption("No activity recorded for this data room.")
        else:
            df = pd.DataFrame(activity)
            df["who"] = df.apply(
                lambda r: f"{r.get('user_name') or r.get('user_email') or 'Unknown'}"
                + (" (guest)" if r.get("is_guest") else ""),
                axis=1,
            )
            st.dataframe(
                df[["created_at", "who", "action"]].rename(
                    columns={"created_at": "When", "who": "Who", "action": "Action"}
                ),
                hide_index=True,
                use_container_width=True,
            )
