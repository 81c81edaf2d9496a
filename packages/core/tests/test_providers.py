"""Tests for the review providers.

Shared behaviour (prompt construction, the review() template) lives in
BaseReviewer and is tested once via a lightweight stub. The Ollama tests
cover the HTTP call and the line-delimited response parsing, with the
requests session mocked out.
"""

import json
from unittest.mock import MagicMock

import pytest
import requests

from revlens_core.models import ReviewFragment, ReviewRequest
from revlens_core.providers.base import BaseReviewer
from revlens_core.providers.ollama import OllamaReviewer


def _ndjson(*objects) -> str:
    return "\n".join(json.dumps(o) for o in objects) + "\n"


def _session(text="", status_code=200):
    session = MagicMock(spec=requests.Session)
    session.post.return_value = MagicMock(status_code=status_code, text=text)
    return session


class _StubReviewer(BaseReviewer):
    """Echoes the prompt back so the template method can be inspected."""

    def __init__(self):
        self.prompts = []

    def _call_api(self, prompt: str) -> str:
        self.prompts.append(prompt)
        return prompt

    def _parse(self, raw: str) -> str:
        return raw.upper()


# ---------------------------------------------------------------------------
# Shared behaviour
# ---------------------------------------------------------------------------


class TestBaseReviewer:
    def test_review_sends_built_prompt_once(self):
        reviewer = _StubReviewer()
        reviewer.review("+x = 2", {"a.py": "x = 1"}, 5)
        assert len(reviewer.prompts) == 1
        assert "+x = 2" in reviewer.prompts[0]
        assert "a.py:" in reviewer.prompts[0]

    def test_review_returns_parsed_result(self):
        result = _StubReviewer().review("+x", {}, 5)
        assert result.startswith("AS A CODE REVIEWER")

    def test_review_respects_max_files(self):
        reviewer = _StubReviewer()
        reviewer.review("", {"a.py": "", "b.py": "", "c.py": ""}, 2)
        assert sum(f"{name}:" in reviewer.prompts[0] for name in ("a.py", "b.py", "c.py")) == 2

    def test_close_is_a_noop_by_default(self):
        _StubReviewer().close()


# ---------------------------------------------------------------------------
# Wire models
# ---------------------------------------------------------------------------


class TestReviewFragment:
    def test_decodes_complete_object(self):
        assert ReviewFragment.from_line('{"response": "hi", "done": true}') == ReviewFragment("hi", True)

    def test_missing_fields_take_defaults(self):
        assert ReviewFragment.from_line("{}") == ReviewFragment("", False)

    def test_extra_fields_ignored(self):
        fragment = ReviewFragment.from_line('{"model": "codellama", "response": "x", "done": false}')
        assert fragment == ReviewFragment("x", False)

    @pytest.mark.parametrize(
        "line",
        [
            "",
            "not json",
            "[1, 2]",
            "null",
            '{"response": 5}',
            '{"response": null}',
            '{"done": "yes"}',
        ],
    )
    def test_undecodable_lines_return_none(self, line):
        assert ReviewFragment.from_line(line) is None


def test_review_request_serializes_stream_false():
    assert ReviewRequest(model="m", prompt="p").to_dict() == {"model": "m", "prompt": "p", "stream": False}


# ---------------------------------------------------------------------------
# Ollama
# ---------------------------------------------------------------------------


class TestOllamaReviewerDefaults:
    def test_defaults_when_not_configured(self):
        reviewer = OllamaReviewer(session=_session())
        assert reviewer.ollama_url == "http://localhost:11434"
        assert reviewer.model == "codellama"
        assert reviewer.endpoint == "http://localhost:11434/api/generate"

    def test_uses_configured_values(self):
        reviewer = OllamaReviewer("http://gpu-box:9000", "llama3", session=_session())
        assert reviewer.endpoint == "http://gpu-box:9000/api/generate"
        assert reviewer.model == "llama3"


class TestOllamaReviewerCallApi:
    def test_posts_request_body_to_generate(self):
        session = _session(_ndjson({"response": "ok", "done": True}))
        reviewer = OllamaReviewer("http://localhost:11434", "codellama", session=session)

        reviewer.review("+x = 2", {}, 5)

        session.post.assert_called_once()
        args, kwargs = session.post.call_args
        assert args[0] == "http://localhost:11434/api/generate"
        body = kwargs["json"]
        assert body["model"] == "codellama"
        assert body["stream"] is False
        assert "+x = 2" in body["prompt"]
        assert kwargs["timeout"] is None

    def test_timeout_passed_through(self):
        session = _session(_ndjson({"response": "ok", "done": True}))
        OllamaReviewer(session=session, timeout=30.0).review("", {}, 5)
        assert session.post.call_args.kwargs["timeout"] == 30.0

    def test_returns_raw_body_text(self):
        session = _session("raw body")
        assert OllamaReviewer(session=session)._call_api("prompt") == "raw body"

    def test_transport_error_propagates(self):
        session = MagicMock(spec=requests.Session)
        session.post.side_effect = requests.ConnectionError("connection refused")
        with pytest.raises(requests.RequestException):
            OllamaReviewer(session=session).review("", {}, 5)

    def test_http_error_status_logged_but_body_returned(self, caplog):
        session = _session('{"error": "model not found"}', status_code=404)
        with caplog.at_level("WARNING"):
            raw = OllamaReviewer(session=session)._call_api("prompt")
        assert raw == '{"error": "model not found"}'
        assert "404" in caplog.text

    def test_debug_env_prints_status_and_raw_body(self, monkeypatch, capsys):
        monkeypatch.setenv("DEBUG", "TRUE")
        session = _session(_ndjson({"response": "A", "done": True}))

        OllamaReviewer(session=session).review("", {}, 5)

        err = capsys.readouterr().err
        assert "Response status: 200" in err
        assert 'Raw response: {"response": "A", "done": true}' in err

    def test_debug_raw_body_written_unaltered(self, monkeypatch, capsys):
        monkeypatch.setenv("DEBUG", "TRUE")
        body = '{"response":"A","done":true}\r\n'

        review = OllamaReviewer(session=_session(body)).review("", {}, 5)

        assert review == "A"
        assert "Raw response: " + body in capsys.readouterr().err

    @pytest.mark.parametrize("value", [None, "true", "1", "FALSE"])
    def test_no_debug_output_unless_exactly_true(self, monkeypatch, capsys, value):
        if value is None:
            monkeypatch.delenv("DEBUG", raising=False)
        else:
            monkeypatch.setenv("DEBUG", value)

        OllamaReviewer(session=_session(_ndjson({"response": "A", "done": True}))).review("", {}, 5)

        assert "Response status" not in capsys.readouterr().err

    def test_close_closes_session(self):
        session = _session()
        OllamaReviewer(session=session).close()
        session.close.assert_called_once()


class TestOllamaReviewerParse:
    def _parse(self, body: str) -> str:
        return OllamaReviewer(session=_session())._parse(body)

    def test_stops_at_done_fragment(self):
        body = (
            '{"response":"A","done":false}\n'
            '{"response":"B","done":true}\n'
            '{"response":"C","done":false}\n'
        )
        assert self._parse(body) == "AB"

    def test_malformed_line_between_fragments_skipped(self):
        body = '{"response":"Hello, ","done":false}\n{not json\n{"response":"world","done":true}\n'
        assert self._parse(body) == "Hello, world"

    def test_blank_and_keepalive_lines_skipped(self):
        body = '\n\n: keep-alive\n{"response":"X","done":true}\n'
        assert self._parse(body) == "X"

    def test_no_done_fragment_concatenates_everything(self):
        body = _ndjson({"response": "one "}, {"response": "two"})
        assert self._parse(body) == "one two"

    def test_single_non_streamed_object(self):
        assert self._parse('{"model":"codellama","response":"Looks good.","done":true}') == "Looks good."

    def test_crlf_line_endings(self):
        body = '{"response":"A","done":false}\r\n{"response":"B","done":true}\r\n'
        assert self._parse(body) == "AB"

    def test_unicode_line_separator_inside_string_not_split(self):
        body = json.dumps({"response": "a\u2028b", "done": True}, ensure_ascii=False)
        assert self._parse(body) == "a\u2028b"

    def test_empty_body_returns_empty_string(self):
        assert self._parse("") == ""

    def test_fragment_without_response_contributes_nothing(self):
        body = _ndjson({"response": "A"}, {"done": True}, {"response": "B"})
        assert self._parse(body) == "A"
