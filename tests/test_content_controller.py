import unittest
from typing import Any, Dict, List, Optional

from notetaker_ui.alerts import Alert, AlertKind
from notetaker_ui.api import ApiClient, ApiError, Topic
from notetaker_ui.content import ContentController
from notetaker_ui.session import Session, User


SESSION = Session(user=User(user_id=1, username="alice"), access_token="tok")


class FakeBackendClient(ApiClient):
    """ApiClient whose HTTP layer is an in-memory topic/note store."""

    def __init__(self, store: Dict[str, Any], topics: Optional[List[str]] = None) -> None:
        super().__init__(store, token="tok", base_url="http://api.test")
        self.calls: List[tuple] = []
        self.errors: Dict[tuple, ApiError] = {}
        self.topics = [{"id": i + 1, "title": title} for i, title in enumerate(topics or [])]
        self.notes: List[Dict[str, Any]] = []
        self._next_note_id = 1

    def _check(self, call: tuple) -> None:
        self.calls.append(call)
        error = self.errors.get(call[:2])
        if error is not None:
            raise error

    def get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        self._check(("GET", path, params))
        if path == "/topics":
            return {"topics": list(self.topics)}
        return {"notes": [n for n in self.notes if n["topic_id"] == params["topic_id"]]}

    def post(self, path: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        self._check(("POST", path, payload))
        if path == "/topics":
            topic = {"id": len(self.topics) + 1, "title": payload["title"]}
            self.topics.append(topic)
            return topic
        note = dict(payload, id=self._next_note_id, last_update=None)
        self._next_note_id += 1
        self.notes.append(note)
        return note

    def delete(self, path: str) -> Dict[str, Any]:
        self._check(("DELETE", path, None))
        kind, ident = path.strip("/").split("/")
        ident = int(ident)
        if kind == "topics":
            self.topics = [t for t in self.topics if t["id"] != ident]
            self.notes = [n for n in self.notes if n["topic_id"] != ident]
        else:
            self.notes = [n for n in self.notes if n["id"] != ident]
        return {"status": "deleted", "id": ident}

    def count(self, method: str, path: str) -> int:
        return sum(1 for call in self.calls if call[:2] == (method, path))


class ContentTestCase(unittest.TestCase):
    topics: List[str] = ["Work", "Home"]

    def setUp(self) -> None:
        self.store: Dict[str, Any] = {}
        self.client = FakeBackendClient(self.store, topics=self.topics)
        self.controller = ContentController(self.client, SESSION, self.store)


class TestWithoutSession(unittest.TestCase):
    def test_no_queries_are_issued(self) -> None:
        store: Dict[str, Any] = {}
        client = FakeBackendClient(store, topics=["Work"])
        view = ContentController(client, None, store).load()

        self.assertEqual(client.calls, [])
        self.assertIsNone(view.topics)
        self.assertIsNone(view.notes)
        self.assertFalse(view.show_topic_prompt)
        self.assertFalse(view.show_note_editor)


class TestWithoutTopics(ContentTestCase):
    topics: List[str] = []

    def test_prompt_shown_and_editor_hidden(self) -> None:
        view = self.controller.load()

        self.assertEqual(view.topics, [])
        self.assertTrue(view.show_topic_prompt)
        self.assertFalse(view.show_note_editor)
        self.assertIsNone(view.selected_topic)
        self.assertEqual(self.client.count("GET", "/notes"), 0)

    def test_creating_first_topic_selects_it(self) -> None:
        self.controller.load()
        self.controller.handle_create_topic("Ideas")
        view = self.controller.load()

        self.assertEqual(view.topics, [Topic(id=1, title="Ideas")])
        self.assertEqual(view.selected_topic, Topic(id=1, title="Ideas"))
        self.assertFalse(view.show_topic_prompt)
        self.assertTrue(view.show_note_editor)
        self.assertFalse(view.note_editor_disabled)


class TestTopicSelection(ContentTestCase):
    def test_first_topic_selected_by_default(self) -> None:
        view = self.controller.load()

        self.assertEqual(view.selected_topic, Topic(id=1, title="Work"))
        self.assertIn(("GET", "/notes", {"topic_id": 1}), self.client.calls)
        self.assertEqual(view.notes, [])
        self.assertTrue(view.show_delete_topic)

    def test_existing_selection_is_kept(self) -> None:
        self.controller.select_topic(Topic(id=2, title="Home"))
        view = self.controller.load()
        self.assertEqual(view.selected_topic, Topic(id=2, title="Home"))

    def test_selecting_topic_closes_drawer(self) -> None:
        self.controller.open_topics_menu()
        self.assertTrue(self.controller.load().topics_menu_open)

        self.controller.select_topic(Topic(id=2, title="Home"))
        view = self.controller.load()
        self.assertFalse(view.topics_menu_open)
        self.assertEqual(self.client.count("GET", "/topics"), 1)


class TestTopicDeletion(ContentTestCase):
    def test_deleting_selected_topic(self) -> None:
        self.controller.load()
        self.controller.handle_delete_topic()

        self.assertIn(("DELETE", "/topics/1", None), self.client.calls)
        self.assertIsNone(self.controller.selected_topic)

        view = self.controller.load()
        self.assertEqual(view.alert, Alert(AlertKind.SUCCESS, "Topic deleted"))
        self.assertEqual(self.client.count("GET", "/topics"), 2)
        self.assertEqual(view.selected_topic, Topic(id=2, title="Home"))

    def test_failed_deletion_keeps_selection(self) -> None:
        self.controller.load()
        self.client.errors[("DELETE", "/topics/1")] = ApiError("Topic not found", status=404)
        self.controller.handle_delete_topic()

        view = self.controller.load()
        self.assertEqual(view.selected_topic, Topic(id=1, title="Work"))
        self.assertEqual(view.alert, Alert(AlertKind.ERROR, "Topic not found"))


class TestNoteHandlers(ContentTestCase):
    def test_create_without_topic_never_calls_server(self) -> None:
        self.controller.select_topic(None)
        self.controller.handle_create_note("title", "content")

        self.assertEqual(self.client.count("POST", "/notes"), 0)
        self.assertEqual(self.store["alert"], Alert(AlertKind.ERROR, "No topic selected"))

    def test_create_refetches_notes(self) -> None:
        self.controller.load()
        self.controller.handle_create_note("Standup", "9am daily")
        view = self.controller.load()

        self.assertEqual(self.client.count("GET", "/notes"), 2)
        self.assertEqual([n.title for n in view.notes], ["Standup"])
        self.assertEqual(view.notes[0].topic_id, 1)
        self.assertIsNone(view.alert)

    def test_create_error_is_alerted(self) -> None:
        self.controller.load()
        self.client.errors[("POST", "/notes")] = ApiError("title: String should have at least 1 character", 400)
        self.controller.handle_create_note("", "body")

        view = self.controller.load()
        self.assertEqual(view.alert.kind, AlertKind.ERROR)
        self.assertIn("title", view.alert.message)
        self.assertEqual(self.client.count("GET", "/notes"), 1)

    def test_delete_refetches_notes(self) -> None:
        self.controller.load()
        self.controller.handle_create_note("Standup", "9am")
        note_id = self.controller.load().notes[0].id

        self.controller.handle_delete_note(note_id)
        view = self.controller.load()

        self.assertEqual(self.client.count("GET", "/notes"), 3)
        self.assertEqual(view.notes, [])
        self.assertEqual(view.alert, Alert(AlertKind.SUCCESS, "Note deleted"))

    def test_alert_is_shown_once(self) -> None:
        self.controller.load()
        self.controller.handle_delete_note(42)
        self.assertIsNotNone(self.controller.load().alert)
        self.assertIsNone(self.controller.load().alert)


class TestExpiredSession(ContentTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.expired: List[ApiError] = []
        self.controller = ContentController(
            self.client, SESSION, self.store, on_unauthorized=self.expired.append
        )

    def test_rejected_query_ends_session(self) -> None:
        self.client.errors[("GET", "/topics")] = ApiError("Session expired, please log in again", 401)
        view = self.controller.load()

        self.assertEqual([e.message for e in self.expired], ["Session expired, please log in again"])
        self.assertIsNone(view.topics)

    def test_rejected_mutation_ends_session_without_alert(self) -> None:
        self.controller.load()
        self.client.errors[("DELETE", "/topics/1")] = ApiError("Session expired, please log in again", 401)
        self.controller.handle_delete_topic()

        self.assertEqual(len(self.expired), 1)
        self.assertNotIn("alert", self.store)

    def test_other_errors_do_not_end_session(self) -> None:
        self.controller.load()
        self.client.errors[("POST", "/notes")] = ApiError("Topic not found", 404)
        self.controller.handle_create_note("t", "c")

        self.assertEqual(self.expired, [])
        self.assertEqual(self.store["alert"], Alert(AlertKind.ERROR, "Topic not found"))

    def test_without_handler_rejection_is_alerted(self) -> None:
        controller = ContentController(self.client, SESSION, self.store)
        controller.load()
        self.client.errors[("DELETE", "/notes/7")] = ApiError("Session expired, please log in again", 401)
        controller.handle_delete_note(7)

        self.assertEqual(self.store["alert"].message, "Session expired, please log in again")


if __name__ == "__main__":
    unittest.main(verbosity=2)
