"""
State and event handlers behind the main notes page.

`ContentController` owns the selected topic, the topics drawer flag and
the alert, runs the topic and note queries, and turns user actions into
mutations. `load()` returns a `ContentView` describing what to draw, so
the Streamlit layer only renders and wires buttons to handlers.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, List, MutableMapping, Optional

from .alerts import Alert, AlertKind, use_alert
from .api import ApiClient, ApiError, Note, Topic
from .session import Session


SELECTED_TOPIC_KEY = "selected_topic"
TOPICS_MENU_OPEN_KEY = "topics_menu_open"
STATE_KEYS = (SELECTED_TOPIC_KEY, TOPICS_MENU_OPEN_KEY)

logger = logging.getLogger(__name__)


@dataclass
class ContentView:
    topics: Optional[List[Topic]]
    notes: Optional[List[Note]]
    selected_topic: Optional[Topic]
    topics_menu_open: bool
    alert: Optional[Alert]
    error: Optional[ApiError] = None

    @property
    def show_topic_prompt(self) -> bool:
        return self.topics is not None and len(self.topics) == 0

    @property
    def show_note_editor(self) -> bool:
        return bool(self.topics)

    @property
    def note_editor_disabled(self) -> bool:
        return self.selected_topic is None

    @property
    def show_delete_topic(self) -> bool:
        return self.selected_topic is not None


class ContentController:
    def __init__(
        self,
        client: ApiClient,
        session: Optional[Session],
        store: MutableMapping[str, Any],
        on_unauthorized: Optional[Callable[[ApiError], None]] = None,
    ) -> None:
        self._client = client
        self._session = session
        self._store = store
        self._on_unauthorized = on_unauthorized
        self._alerts = use_alert(store)

        store.setdefault(SELECTED_TOPIC_KEY, None)
        store.setdefault(TOPICS_MENU_OPEN_KEY, False)

        self._create_topic = client.topic.create.mutation(
            on_success=self._on_topic_created,
            on_error=self._show_error,
        )
        self._delete_topic = client.topic.delete.mutation(
            on_success=self._on_topic_deleted,
            on_error=self._show_error,
        )
        self._create_note = client.note.create.mutation(
            on_success=lambda _note: client.note.get_all.invalidate(),
            on_error=self._show_error,
        )
        self._delete_note = client.note.delete.mutation(
            on_success=self._on_note_deleted,
            on_error=self._show_error,
        )

    @property
    def selected_topic(self) -> Optional[Topic]:
        return self._store[SELECTED_TOPIC_KEY]

    @property
    def topics_menu_open(self) -> bool:
        return self._store[TOPICS_MENU_OPEN_KEY]

    def select_topic(self, topic: Optional[Topic]) -> None:
        self._store[SELECTED_TOPIC_KEY] = topic
        self._store[TOPICS_MENU_OPEN_KEY] = False

    def open_topics_menu(self) -> None:
        self._store[TOPICS_MENU_OPEN_KEY] = True

    def close_topics_menu(self) -> None:
        self._store[TOPICS_MENU_OPEN_KEY] = False

    def load(self) -> ContentView:
        signed_in = self._session is not None

        topics = self._client.topic.get_all.query(
            enabled=signed_in,
            on_success=self._default_selection,
        )

        selected = self.selected_topic
        notes = self._client.note.get_all.query(
            {"topic_id": selected.id if selected else None},
            enabled=signed_in and selected is not None,
        )

        error = topics.error or notes.error
        if error is not None and error.status == 401 and self._on_unauthorized is not None:
            self._expire(error)

        return ContentView(
            topics=topics.data,
            notes=notes.data,
            selected_topic=self.selected_topic,
            topics_menu_open=self.topics_menu_open,
            alert=self._alerts.pop(),
            error=error,
        )

    def handle_create_topic(self, title: str) -> None:
        self._create_topic.mutate({"title": title})

    def handle_delete_topic(self) -> None:
        topic = self.selected_topic
        if topic is None:
            return
        self._delete_topic.mutate({"id": topic.id})

    def handle_create_note(self, title: str, content: str) -> None:
        topic = self.selected_topic
        if topic is None:
            self._alerts.set_alert(AlertKind.ERROR, "No topic selected")
            return

        self._create_note.mutate(
            {"title": title, "content": content, "topic_id": topic.id}
        )

    def handle_delete_note(self, note_id: int) -> None:
        self._delete_note.mutate({"id": note_id})

    def _default_selection(self, topics: List[Topic]) -> None:
        if self.selected_topic is None and topics:
            self._store[SELECTED_TOPIC_KEY] = topics[0]

    def _on_topic_created(self, topic: Topic) -> None:
        logger.debug("Topic %s created", topic.id)
        self._client.topic.get_all.invalidate()

    def _on_topic_deleted(self, _result: Any) -> None:
        self._client.topic.get_all.invalidate()
        self._client.note.get_all.invalidate()
        self._store[SELECTED_TOPIC_KEY] = None
        self._alerts.set_alert(AlertKind.SUCCESS, "Topic deleted")

    def _on_note_deleted(self, _result: Any) -> None:
        self._client.note.get_all.invalidate()
        self._alerts.set_alert(AlertKind.SUCCESS, "Note deleted")

    def _show_error(self, error: ApiError) -> None:
        if error.status == 401 and self._on_unauthorized is not None:
            self._expire(error)
            return
        self._alerts.set_alert(AlertKind.ERROR, error.message)

    def _expire(self, error: ApiError) -> None:
        logger.info("Session rejected by the server: %s", error.message)
        self._on_unauthorized(error)


__all__ = ["ContentController", "ContentView", "STATE_KEYS"]
