"""
Streamlit entry point for the notetaker UI.

Run with `streamlit run SOURCE/notetaker_ui/streamlit_app.py` after
installing the project.
"""

from __future__ import annotations

from typing import Optional

import streamlit as st

from notetaker_ui.alerts import ALERT_KEY, AlertKind, use_alert
from notetaker_ui.api import ApiClient, ApiError
from notetaker_ui.components import inject_styles, render_alert, render_content
from notetaker_ui.content import STATE_KEYS, ContentController
from notetaker_ui.session import Session, get_session, sign_in, sign_out, sign_up


LOGIN_PROMPT = "Please log in..."


def render_login_forms() -> None:
    alerts = use_alert(st.session_state)
    login_tab, register_tab = st.tabs(["Log in", "Register"])

    with login_tab:
        with st.form("login_form"):
            username = st.text_input("Username", key="login_username")
            password = st.text_input("Password", type="password", key="login_password")
            if st.form_submit_button("Log in"):
                try:
                    sign_in(st.session_state, username, password)
                    alerts.set_alert(AlertKind.SUCCESS, "Login successful.")
                except ApiError as exc:
                    alerts.set_alert(AlertKind.ERROR, f"Login failed: {exc.message}")
                st.rerun()

    with register_tab:
        with st.form("register_form"):
            username = st.text_input("Username", key="register_username")
            password = st.text_input("Password", type="password", key="register_password")
            confirm = st.text_input("Confirm password", type="password", key="register_confirm")
            if st.form_submit_button("Register"):
                if password != confirm:
                    alerts.set_alert(AlertKind.ERROR, "Passwords do not match.")
                else:
                    try:
                        sign_up(st.session_state, username, password)
                        alerts.set_alert(AlertKind.SUCCESS, "Account created.")
                    except ApiError as exc:
                        alerts.set_alert(AlertKind.ERROR, f"Registration failed: {exc.message}")
                st.rerun()


def render_header(session: Optional[Session]) -> None:
    title_col, user_col = st.columns([5, 1])
    with title_col:
        st.title("Notetaker")
    if session is None:
        return
    with user_col:
        st.caption(session.user.username)
        if st.button("Sign out", use_container_width=True):
            sign_out(st.session_state, extra_keys=(*STATE_KEYS, ALERT_KEY))
            st.rerun()


def expire_session(error: ApiError) -> None:
    sign_out(st.session_state, extra_keys=(*STATE_KEYS, ALERT_KEY))
    use_alert(st.session_state).set_alert(AlertKind.ERROR, error.message)
    st.rerun()


def main() -> None:
    st.set_page_config(page_title="Notetaker", page_icon="📝", layout="wide")
    inject_styles()

    session = get_session(st.session_state)
    render_header(session)

    if session is None:
        st.write(LOGIN_PROMPT)
        render_login_forms()
        render_alert(use_alert(st.session_state).pop())
        return

    client = ApiClient(
        st.session_state,
        token=session.access_token,
        fetch_context=lambda: st.spinner("Loading..."),
    )
    render_content(
        ContentController(client, session, st.session_state, on_unauthorized=expire_session)
    )


if __name__ == "__main__":
    main()
