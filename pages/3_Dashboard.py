from __future__ import annotations

import html

import pandas as pd
import streamlit as st

from error_guard import render_guard
from feature_tracking import track_feature_usage
from page_shell import bootstrap_page
from projects import list_projects, render_project_list
from routing import get_query_params, is_truthy, query_value
from tasks import (
    SUBCATEGORIES,
    TASK_PRIORITIES,
    complete_task,
    create_task,
    group_tasks_by_category,
    list_tasks,
    reopen_task,
    soft_delete_task,
)
from ui import kpi_chip_row, page_header, render_sparkle
from ui_state import use_calendar, use_sparkle


def _render_task_row(task: dict, org_id: str, access: dict, category: str) -> None:
    task_id = str(task.get("id"))
    done = task.get("status") == "complete"
    cols = st.columns([0.6, 8, 1])
    checked = cols[0].checkbox(
        "done",
        value=done,
        key=f"task_done_{task_id}",
        label_visibility="collapsed",
        disabled=not access.get("can_edit"),
    )
    title = html.escape(task.get("title") or "Untitled")
    css = "task-done" if done else ""
    due = f" · due {html.escape(str(task['due_date']))}" if task.get("due_date") else ""
    cols[1].markdown(f'<span class="{css}">{title}</span><span class="muted">{due}</span>', unsafe_allow_html=True)
    if access.get("can_edit") and cols[2].button("🗑", key=f"task_del_{task_id}", help="Delete task"):
        if soft_delete_task(task_id, org_id, access=access):
            st.rerun()
        st.error("Could not delete the task.")
    if checked and not done:
        if complete_task(task_id, org_id, access=access):
            use_sparkle().trigger(category)
            st.rerun()
        st.error("Could not update the task.")
    elif done and not checked:
        if reopen_task(task_id, org_id, access=access):
            st.rerun()
        st.error("Could not update the task.")


def _render_board(tasks: list[dict], org_id: str, access: dict) -> None:
    grouped = group_tasks_by_category(tasks)
    if not grouped:
        st.caption("No tasks yet. Add one below.")
        return
    for category, buckets in grouped.items():
        todo, complete = buckets["todo"], buckets["complete"]
        with st.expander(f"{category} · {len(todo)} open / {len(complete)} done", expanded=True):
            render_sparkle(category)
            for task in todo:
                _render_task_row(task, org_id, access, category)
            if complete:
                st.caption("Completed")
                for task in complete:
                    _render_task_row(task, org_id, access, category)


def _render_calendar(tasks: list[dict]) -> None:
    dated = [t for t in tasks if t.get("due_date")]
    if not dated:
        st.caption("No tasks have a due date.")
        return
    df = pd.DataFrame(dated)[["due_date", "title", "category", "status"]]
    df["due_date"] = pd.to_datetime(df["due_date"], errors="coerce").dt.date
    df = df.dropna(subset=["due_date"]).sort_values("due_date")
    st.dataframe(
        df.rename(columns={"due_date": "Due", "title": "Task", "category": "Category", "status": "Status"}),
        hide_index=True,
        use_container_width=True,
    )


def _render_add_task(org_id: str, user_id: str, access: dict, categories: list[str], projects: list[dict]) -> None:
    with st.expander("Add task", expanded=False):
        with st.form("add_task_form", clear_on_submit=True):
            title = st.text_input("Title")
            category = st.text_input("Category", value=categories[0] if categories else "General")
            cols = st.columns(3)
            subcategory = cols[0].selectbox("Repeat", SUBCATEGORIES)
            priority = cols[1].selectbox("Priority", TASK_PRIORITIES, index=1)
            due = cols[2].date_input("Due date", value=None)
            project_ids = [None] + [p.get("id") for p in projects]
            titles = {p.get("id"): p.get("title") for p in projects}
            project_id = st.selectbox(
                "Project",
                project_ids,
                format_func=lambda pid: "No project" if pid is None else titles.get(pid, pid),
            )
            description = st.text_area("Description")
            submitted = st.form_submit_button("Add task", type="primary")
        if submitted:
            try:
                task = create_task(
                    org_id,
                    user_id,
                    title,
                    category.strip() or "General",
                    description=description,
                    subcategory=subcategory,
                    priority=priority,
                    project_id=project_id,
                    due_date=due.isoformat() if due else None,
                    access=access,
                )
            except ValueError as err:
                st.error(str(err))
                return
            if task:
                st.rerun()
            st.error("Could not create the task.")


with render_guard():
    ctx = bootstrap_page("/", title="Dashboard")
    org_id, user_id = ctx.org.id, str(ctx.user.get("id"))
    calendar = use_calendar()
    if is_truthy(query_value(get_query_params(), "calendar")) and not st.session_state.get("_calendar_from_url"):
        st.session_state["_calendar_from_url"] = True
        calendar.open()

    page_header(ctx.org.name, right=html.escape(ctx.profile.full_name) if ctx.profile else "")

    with st.spinner("Loading tasks..."):
        tasks_result = list_tasks(org_id)
    if not tasks_result.ok:
        st.error(f"Error fetching tasks: {tasks_result.error}")
    tasks = tasks_result.data or []
    open_count = sum(1 for t in tasks if t.get("status") != "complete")
    kpi_chip_row([
        {"label": "Open tasks", "value": open_count},
        {"label": "Completed", "value": len(tasks) - open_count},
        {"label": "Categories", "value": len(group_tasks_by_category(tasks))},
    ])

    toggle_label = "Hide calendar" if calendar.is_open else "📅 Show calendar"
    if st.button(toggle_label, key="calendar_toggle"):
        calendar.toggle()
        if calendar.is_open:
            track_feature_usage("/calendar", ctx.user, org_id)
        st.rerun()

    board_col, side_col = st.columns([3, 2]) if calendar.is_open else (st.container(), None)
    with board_col:
        st.markdown("### Tasks")
        _render_board(tasks, org_id, ctx.access)
        if ctx.access.get("can_edit"):
            categories = list(group_tasks_by_category(tasks))
            _render_add_task(org_id, user_id, ctx.access, categories, list_projects(org_id).data or [])
    if side_col is not None:
        with side_col:
            st.markdown("### Calendar")
            _render_calendar(tasks)

    st.markdown("---")
    render_project_list(org_id, user_id, ctx.access)
