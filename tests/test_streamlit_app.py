import unittest
from pathlib import Path
from unittest.mock import MagicMock, patch

from streamlit.testing.v1 import AppTest

from notetaker_ui.session import Session, User


APP = Path(__file__).resolve().parents[1] / "SOURCE" / "notetaker_ui" / "streamlit_app.py"


def _json_response(payload: dict) -> MagicMock:
    response = MagicMock()
    response.status_code = 200
    response.content = b"{...}"
    response.json.return_value = payload
    return response


def _markdown_text(at: AppTest) -> str:
    return "\n".join(str(element.value) for element in at.markdown)


class TestPageShell(unittest.TestCase):
    def test_logged_out_page_prompts_for_login(self) -> None:
        at = AppTest.from_file(str(APP), default_timeout=30)
        with patch("notetaker_ui.api.requests.request") as request:
            at.run()

        self.assertEqual(len(at.exception), 0)
        self.assertIn("Please log in...", _markdown_text(at))
        request.assert_not_called()

    def test_signed_in_without_topics_prompts_for_topic(self) -> None:
        at = AppTest.from_file(str(APP), default_timeout=30)
        at.session_state["session"] = Session(
            user=User(user_id=1, username="alice"), access_token="tok"
        )
        with patch("notetaker_ui.api.requests.request") as request:
            request.return_value = _json_response({"topics": []})
            at.run()

        self.assertEqual(len(at.exception), 0)
        text = _markdown_text(at)
        self.assertIn("Create a topic to get started!", text)
        self.assertNotIn("Please log in...", text)
        self.assertEqual(request.call_count, 1)
        self.assertTrue(request.call_args.args[1].endswith("/api/topics"))


if __name__ == "__main__":
    unittest.main(verbosity=2)
