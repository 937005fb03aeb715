from __future__ import annotations

import streamlit as st

from auth import require_login
from error_guard import render_guard
from organizations import (
    EMPLOYEE_SIZE_LABELS,
    EMPLOYEE_SIZES,
    create_organization,
    fetch_active_organization,
    validate_org_details,
)
from page_shell import start_page
from remote_query import clear_session_cache
from routing import base_url, navigate
from slugs import generate_slug, onboarding_path, org_path, org_url
from ui import page_header

start_page("Welcome")

with render_guard():
    user = require_login()
    org, profile = fetch_active_organization(user.get("id"))

    if org is not None:
        page_header(f"Welcome to {org.name}")
        st.caption(f"Your workspace lives at {base_url()}{org_url(org.slug)}")
        st.markdown(
            "Your workspace is ready. Add your first tasks on the dashboard, "
            "upload files to the drive and invite your team from settings."
        )
        if st.button("Go to dashboard", type="primary"):
            navigate(org_path(org.slug, "/"))
        st.stop()

    page_header("Set up your organization")
    with st.form("onboarding_form"):
        org_name = st.text_input("Organization name")
        employee_size = st.selectbox(
            "Employee size",
            EMPLOYEE_SIZES,
            index=None,
            format_func=lambda size: EMPLOYEE_SIZE_LABELS[size],
            placeholder="Select employee size",
        )
        full_name = st.text_input("Full name", value=profile.full_name if profile else "")
        job_role = st.text_input("Job role", value=profile.job_role if profile else "")
        phone = st.text_input("Phone number", value=profile.phone_number if profile else "")
        submitted = st.form_submit_button("Create organization", type="primary")

    if org_name.strip():
        st.caption(f"Suggested workspace address: /{generate_slug(org_name)}")

    if submitted:
        errors = validate_org_details(org_name, employee_size or "", full_name, job_role, phone)
        for message in errors.values():
            st.error(message)
        if not errors:
            with st.spinner("Creating your organization..."):
                _org_id, error = create_organization(
                    user["id"], org_name, employee_size, full_name, job_role, phone
                )
            if error:
                st.error(error)
            else:
                clear_session_cache()
                org, _ = fetch_active_organization(user.get("id"))
                if org is None:
                    st.error("Organization created, but it could not be loaded. Try reloading.")
                else:
                    navigate(onboarding_path(org.slug))
