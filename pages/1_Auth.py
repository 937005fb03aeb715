from __future__ import annotations

import streamlit as st

from auth import current_user, sign_in, sign_up, start_session, validate_credentials
from error_guard import render_guard
from organizations import (
    EMPLOYEE_SIZE_LABELS,
    EMPLOYEE_SIZES,
    create_organization,
    fetch_active_organization,
    validate_org_details,
)
from page_shell import start_page
from routing import base_url, navigate
from slugs import org_path


def _go_to_workspace(user: dict) -> None:
    org, _profile = fetch_active_organization(user.get("id"))
    if org is None:
        st.switch_page("pages/2_Onboarding.py")
        st.stop()
    navigate(org_path(org.slug, "/"))


def _show_errors(errors: dict[str, str]) -> None:
    for message in errors.values():
        st.error(message)


def _render_sign_in() -> None:
    with st.form("sign_in_form"):
        email = st.text_input("Email")
        password = st.text_input("Password", type="password")
        submitted = st.form_submit_button("Sign in", type="primary", use_container_width=True)
    if not submitted:
        return
    errors = validate_credentials(email, password)
    if errors:
        _show_errors(errors)
        return
    user, error = sign_in(email, password)
    if error or not user:
        st.error(error or "Sign in failed.")
        return
    start_session(user)
    _go_to_workspace(user)


def _render_sign_up() -> None:
    with st.form("sign_up_form"):
        email = st.text_input("Work email")
        password = st.text_input("Password", type="password")
        org_name = st.text_input("Organization name")
        employee_size = st.selectbox(
            "Employee size",
            EMPLOYEE_SIZES,
            index=None,
            format_func=lambda size: EMPLOYEE_SIZE_LABELS[size],
            placeholder="Select employee size",
        )
        full_name = st.text_input("Full name")
        job_role = st.text_input("Job role")
        phone = st.text_input("Phone number")
        submitted = st.form_submit_button("Create account", type="primary", use_container_width=True)
    if not submitted:
        return
    errors = validate_credentials(email, password, signing_up=True)
    errors.update(validate_org_details(org_name, employee_size or "", full_name, job_role, phone))
    if errors:
        _show_errors(errors)
        return
    user, error = sign_up(email, password, redirect_to=f"{base_url()}/")
    if error or not user:
        st.error(error or "Sign up failed.")
        return
    _org_id, error = create_organization(user["id"], org_name, employee_size, full_name, job_role, phone)
    if error:
        st.error(error)
        return
    if not user.get("access_token"):
        st.success("Account created. Check your email to confirm it, then sign in.")
        return
    start_session(user)
    st.toast("Welcome to Bosplan!")
    _go_to_workspace(user)


start_page("Sign in")

with render_guard():
    existing = current_user()
    if existing:
        _go_to_workspace(existing)

    st.markdown("## Bosplan")
    st.caption("Plan, track and run your business in one workspace.")
    sign_in_tab, sign_up_tab = st.tabs(["Sign in", "Sign up"])
    with sign_in_tab:
        _render_sign_in()
    with sign_up_tab:
        _render_sign_up()
