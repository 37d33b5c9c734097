"""Tests for react_a11y_ai/fixer.py"""

from pathlib import Path

import pytest
import requests

from react_a11y_ai.completion import DEFAULT_ENDPOINT, CompletionClient
from react_a11y_ai.diagnostics import Issue, Position, Severity, TextRange
from react_a11y_ai.document import ApplyError, TextDocument
from react_a11y_ai.fixer import (
    MISSING_KEY_MESSAGE,
    NO_FIX_MESSAGE,
    FixPipeline,
    FixState,
    build_prompt,
    parse_fix_response,
)

SOURCE_TEXT = "const a = <img src=\"a.png\" />;\n"
IMG_RANGE = TextRange(Position(0, 10), Position(0, 29))


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

class RecordingNotifier:
    def __init__(self) -> None:
        self.messages: list[tuple[str, str]] = []

    def info(self, message: str) -> None:
        self.messages.append(("info", message))

    def warning(self, message: str) -> None:
        self.messages.append(("warning", message))

    def error(self, message: str) -> None:
        self.messages.append(("error", message))


def _reply(content: str) -> dict:
    return {"choices": [{"message": {"role": "assistant", "content": content}}]}


@pytest.fixture
def document(tmp_path) -> TextDocument:
    p = tmp_path / "A.jsx"
    p.write_text(SOURCE_TEXT, encoding="utf-8")
    return TextDocument.from_path(p)


@pytest.fixture
def issue(document) -> Issue:
    return Issue(document.path, IMG_RANGE, "img elements must have an alt prop",
                 Severity.ERROR, code="jsx-a11y/alt-text")


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


# ---------------------------------------------------------------------------
# parse_fix_response()
# ---------------------------------------------------------------------------

def test_parse_plain_fence_and_explanation():
    result = parse_fix_response('```\n<Foo aria-label="x" />\n```\nExplanation: added label')
    assert result.fixed_code  == '<Foo aria-label="x" />'
    assert result.explanation == "added label"


def test_parse_fence_with_language_tag():
    result = parse_fix_response("Here you go:\n```jsx\n<img alt=\"\" />\n```")
    assert result.fixed_code  == '<img alt="" />'
    assert result.explanation == ""


def test_parse_explanation_is_case_insensitive():
    result = parse_fix_response("```\n<a href=\"/\">Home</a>\n```\nEXPLANATION:   anchors need content\n")
    assert result.explanation == "anchors need content"


def test_parse_without_fence_has_no_code():
    result = parse_fix_response('<img alt="x" />\nExplanation: inline answer')
    assert result.fixed_code  == ""
    assert result.explanation == "inline answer"


def test_parse_empty_reply():
    result = parse_fix_response("")
    assert (result.fixed_code, result.explanation) == ("", "")


def test_build_prompt_embeds_snippet():
    prompt = build_prompt('<img src="a.png" />')
    assert '---\n<img src="a.png" />\n---' in prompt
    assert "accessibility issue" in prompt


# ---------------------------------------------------------------------------
# FixPipeline.run() — terminal states
# ---------------------------------------------------------------------------

def test_missing_credential_makes_no_request(document, issue, notifier, requests_mock):
    adapter = requests_mock.post(DEFAULT_ENDPOINT, json=_reply("```\nx\n```"))
    state = FixPipeline(api_key="", notifier=notifier).run(document, issue)

    assert state is FixState.MISSING_CREDENTIAL
    assert adapter.call_count == 0
    assert notifier.messages == [("error", MISSING_KEY_MESSAGE)]
    assert document.text == SOURCE_TEXT


def test_fix_applied_replaces_stored_range(document, issue, notifier, requests_mock):
    adapter = requests_mock.post(
        DEFAULT_ENDPOINT,
        json=_reply('```jsx\n<img src="a.png" alt="A" />\n```\nExplanation: added alt text'),
    )
    pipeline = FixPipeline(api_key="sk-test", notifier=notifier)
    state = pipeline.run(document, issue)

    assert state is FixState.FIX_APPLIED
    assert document.text == 'const a = <img src="a.png" alt="A" />;\n'
    assert open(document.path, encoding="utf-8").read() == document.text
    assert notifier.messages == [("info", "AI fix applied. Explanation: added alt text")]

    user_prompt = adapter.last_request.json()["messages"][1]["content"]
    assert '<img src="a.png" />' in user_prompt
    assert pipeline.last_request.original_snippet == '<img src="a.png" />'
    assert pipeline.last_request.issue_message == issue.message


def test_fix_applied_without_explanation(document, issue, notifier, requests_mock):
    requests_mock.post(DEFAULT_ENDPOINT, json=_reply('```\n<img src="a.png" alt="" />\n```'))
    state = FixPipeline(api_key="sk-test", notifier=notifier).run(document, issue)

    assert state is FixState.FIX_APPLIED
    assert notifier.messages == [("info", "AI fix applied.")]


def test_no_fenced_block_is_no_fix(document, issue, notifier, requests_mock):
    requests_mock.post(DEFAULT_ENDPOINT, json=_reply("I cannot help with that."))
    state = FixPipeline(api_key="sk-test", notifier=notifier).run(document, issue)

    assert state is FixState.NO_FIX_AVAILABLE
    assert notifier.messages == [("warning", NO_FIX_MESSAGE)]
    assert document.text == SOURCE_TEXT


def test_non_2xx_reports_status_text_and_applies_nothing(document, issue, notifier, requests_mock):
    requests_mock.post(DEFAULT_ENDPOINT, status_code=503, reason="Service Unavailable")
    state = FixPipeline(api_key="sk-test", notifier=notifier).run(document, issue)

    assert state is FixState.REQUEST_FAILED
    assert len(notifier.messages) == 1
    level, message = notifier.messages[0]
    assert level == "error"
    assert message.startswith("Failed to get AI fix:")
    assert "Service Unavailable" in message
    assert document.text == SOURCE_TEXT


def test_apply_failure_is_reported(document, issue, notifier, requests_mock):
    requests_mock.post(DEFAULT_ENDPOINT, json=_reply("```\nfixed\n```"))

    def reject(_edit):
        raise ApplyError("range no longer valid")

    state = FixPipeline(api_key="sk-test", notifier=notifier, apply=reject).run(document, issue)

    assert state is FixState.APPLY_FAILED
    assert notifier.messages == [("error", "Failed to apply AI fix: range no longer valid")]


def test_client_factory_receives_api_key(document, issue, notifier, requests_mock):
    requests_mock.post(DEFAULT_ENDPOINT, json=_reply("no code"))
    keys: list[str] = []

    def factory(api_key: str) -> CompletionClient:
        keys.append(api_key)
        return CompletionClient(api_key)

    FixPipeline(api_key="sk-abc", notifier=notifier, client_factory=factory).run(document, issue)
    assert keys == ["sk-abc"]


def test_extraction_uses_current_document_text(document, issue, notifier, requests_mock):
    adapter = requests_mock.post(DEFAULT_ENDPOINT, json=_reply("no code"))
    document.text = "let b = <div role=\"button\" />;\n"

    FixPipeline(api_key="sk-test", notifier=notifier).run(document, issue)

    user_prompt = adapter.last_request.json()["messages"][1]["content"]
    assert 'role="button"' in user_prompt
    assert "a.png" not in user_prompt


def test_terminal_states_are_marked_terminal():
    assert FixState.FIX_APPLIED.is_terminal
    assert FixState.NO_FIX_AVAILABLE.is_terminal
    assert not FixState.REQUEST_SENT.is_terminal


def test_transport_failure_is_reported_once(document, issue, notifier, requests_mock):
    requests_mock.post(DEFAULT_ENDPOINT, exc=requests.exceptions.ChunkedEncodingError)
    pipeline = FixPipeline(api_key="sk-test", notifier=notifier)
    state = pipeline.run(document, issue)

    assert state is FixState.REQUEST_FAILED
    assert pipeline.state is FixState.REQUEST_FAILED
    assert len(notifier.messages) == 1
    level, message = notifier.messages[0]
    assert level == "error"
    assert message.startswith("Failed to get AI fix:")
    assert document.text == SOURCE_TEXT


def test_client_is_closed_after_request(document, issue, notifier, requests_mock, monkeypatch):
    requests_mock.post(DEFAULT_ENDPOINT, json=_reply("no code"))
    closed: list[bool] = []

    def factory(api_key: str) -> CompletionClient:
        client = CompletionClient(api_key)
        monkeypatch.setattr(client._session, "close", lambda: closed.append(True))
        return client

    FixPipeline(api_key="sk-test", notifier=notifier, client_factory=factory).run(document, issue)
    assert closed == [True]


def test_write_failure_leaves_buffer_untouched(document, issue, notifier, requests_mock):
    requests_mock.post(DEFAULT_ENDPOINT, json=_reply("```\n<img src=\"a.png\" alt=\"x\" />\n```"))
    path = Path(document.path)
    path.unlink()
    path.mkdir()

    state = FixPipeline(api_key="sk-test", notifier=notifier).run(document, issue)

    assert state is FixState.APPLY_FAILED
    assert document.text == SOURCE_TEXT
    assert len(notifier.messages) == 1
    assert notifier.messages[0][1].startswith("Failed to apply AI fix: Unable to write")


@pytest.mark.parametrize("fence", ["```JSX\n", "```jsx\r\n", "```tsx+react\n"])
def test_parse_strips_any_language_tag(fence):
    result = parse_fix_response(f"{fence}<img alt=\"\" />\n```")
    assert result.fixed_code == '<img alt="" />'
