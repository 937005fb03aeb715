from __future__ import annotations

import streamlit as st

from error_guard import render_guard
from feedback import math_challenge, submit_feedback, validate_feedback
from page_shell import bootstrap_page
from ui import page_header

CHALLENGE_KEY = "_feedback_challenge"
SUBMITTED_KEY = "_feedback_submitted"

with render_guard():
    ctx = bootstrap_page("/feedback-form", title="Feedback")
    page_header("Beta feedback")

    if st.session_state.get(SUBMITTED_KEY):
        st.success("Thank you for your feedback! We appreciate your help in improving Bosplan.")
        if st.button("Send more feedback"):
            st.session_state.pop(SUBMITTED_KEY, None)
            st.rerun()
        st.stop()

    if CHALLENGE_KEY not in st.session_state:
        st.session_state[CHALLENGE_KEY] = math_challenge()
    num1, num2 = st.session_state[CHALLENGE_KEY]

    with st.form("feedback_form"):
        name = st.text_input("Name", value=ctx.profile.full_name if ctx.profile else "")
        organisation = st.text_input("Organisation", value=ctx.org.name)
        email = st.text_input("Email", value=ctx.user.get("email") or "")
        text = st.text_area("Feedback", max_chars=2000)
        answer = st.text_input(f"What is {num1} + {num2}?")
        submitted = st.form_submit_button("Submit feedback", type="primary")

    if submitted:
        error = validate_feedback(name, organisation, email, text, challenge=(num1, num2), answer=answer)
        if error:
            st.error(error)
            if error.startswith("Incorrect answer"):
                st.session_state[CHALLENGE_KEY] = math_challenge()
        elif submit_feedback(ctx.user.get("id"), ctx.org.id, name, organisation, email, text):
            st.session_state.pop(CHALLENGE_KEY, None)
            st.session_state[SUBMITTED_KEY] = True
            st.rerun()
        else:
            st.error("Failed to submit feedback. Please try again later.")
