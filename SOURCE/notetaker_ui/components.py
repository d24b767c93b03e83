"""
Streamlit widgets for the notes page.
"""

from __future__ import annotations

from html import escape
from typing import Callable, Optional

import streamlit as st

from .alerts import Alert, AlertKind
from .api import Note
from .content import ContentController, ContentView


ALERT_CLASSES = {
    AlertKind.SUCCESS: "flash-success",
    AlertKind.ERROR: "flash-error",
}


def inject_styles() -> None:
    st.markdown(
        """
        <style>
        /* Alert styling with fade-out animation */
        .flash-message {
            padding: 0.9rem 1.2rem;
            border-radius: 0.75rem;
            margin-top: 1rem;
            font-weight: 500;
            animation: flash-fade 10s forwards;
        }
        .flash-success {
            background-color: rgba(46, 204, 113, 0.2);
            color: #2ecc71;
        }
        .flash-error {
            background-color: rgba(231, 76, 60, 0.2);
            color: #e74c3c;
        }
        @keyframes flash-fade {
            0%, 90% { opacity: 1; }
            100% { opacity: 0; display: none; }
        }
        .topic-path {
            color: #9ca3af;
            font-weight: 700;
            font-size: 1.25rem;
        }
        </style>
        """,
        unsafe_allow_html=True,
    )


def render_alert(alert: Optional[Alert]) -> None:
    if not alert:
        return
    css_class = ALERT_CLASSES.get(alert.kind, "flash-error")
    st.markdown(
        f"<div class='flash-message {css_class}'>{escape(alert.message)}</div>",
        unsafe_allow_html=True,
    )


def render_topics_menu(controller: ContentController, view: ContentView, key: str) -> None:
    st.markdown("**Topics**")
    selected_id = view.selected_topic.id if view.selected_topic else None
    for topic in view.topics or []:
        if st.button(
            topic.title,
            key=f"{key}_topic_{topic.id}",
            type="primary" if topic.id == selected_id else "secondary",
            use_container_width=True,
        ):
            controller.select_topic(topic)
            st.rerun()

    with st.form(f"{key}_new_topic", clear_on_submit=True):
        title = st.text_input(
            "New topic",
            placeholder="New topic",
            label_visibility="collapsed",
        )
        if st.form_submit_button("Add topic"):
            controller.handle_create_topic(title)
            st.rerun()


def render_note_card(note: Note, on_delete: Callable[[int], None]) -> None:
    with st.expander(note.title):
        st.markdown(note.content)
        if st.button("Delete", key=f"delete_note_{note.id}", type="secondary"):
            on_delete(note.id)
            st.rerun()


def render_note_editor(is_disabled: bool, on_save: Callable[[str, str], None]) -> None:
    with st.form("note_editor", clear_on_submit=True):
        title = st.text_input("Note title", disabled=is_disabled)
        content = st.text_area(
            "Content",
            placeholder="Write your note in Markdown...",
            height=200,
            disabled=is_disabled,
        )
        if st.form_submit_button("Save", type="primary", disabled=is_disabled):
            on_save(title, content)
            st.rerun()


def render_topic_bar(controller: ContentController, view: ContentView) -> None:
    cols = st.columns([2, 6, 1])
    menu_label = f"☰ {view.selected_topic.title}" if view.selected_topic else "☰ Topics"
    if cols[0].button(menu_label, key="open_topics_menu"):
        controller.open_topics_menu()
        st.rerun()
    if view.selected_topic:
        cols[1].markdown(
            f"<span class='topic-path'>/{escape(view.selected_topic.title)}</span>",
            unsafe_allow_html=True,
        )
    if view.show_delete_topic:
        with cols[2].popover("🗑️"):
            if st.button("Delete", key="delete_topic"):
                controller.handle_delete_topic()
                st.rerun()


def render_drawer(controller: ContentController, view: ContentView) -> None:
    if not view.topics_menu_open:
        return
    with st.sidebar:
        if st.button("Close", key="close_topics_menu"):
            controller.close_topics_menu()
            st.rerun()
        render_topics_menu(controller, view, key="drawer")


def render_content(controller: ContentController) -> None:
    view = controller.load()

    menu_col, main_col = st.columns([1, 3])
    with menu_col:
        render_topics_menu(controller, view, key="side")

    with main_col:
        render_topic_bar(controller, view)

        if view.error is not None:
            st.error(view.error.message)

        for note in view.notes or []:
            render_note_card(note, controller.handle_delete_note)

        if view.show_topic_prompt:
            st.markdown(
                "<h3 style='text-align: center'>Create a topic to get started!</h3>",
                unsafe_allow_html=True,
            )

        if view.show_note_editor:
            render_note_editor(view.note_editor_disabled, controller.handle_create_note)

        render_alert(view.alert)

    render_drawer(controller, view)


__all__ = ["inject_styles", "render_alert", "render_content"]
