"""AI fix pipeline: snippet -> prompt -> completion -> parsed fix -> edit.

Usage:
    pipeline = FixPipeline(api_key=config.api_key, notifier=notifier)
    state = pipeline.run(document, issue)      # FixState.FIX_APPLIED, ...

Every call to ``run`` ends in exactly one terminal state and emits exactly one
message through the notifier. Nothing is retried.
"""

import re
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import Protocol

from react_a11y_ai.completion import CompletionClient, CompletionClientError
from react_a11y_ai.diagnostics import Issue, TextRange
from react_a11y_ai.document import ApplyError, TextDocument, WorkspaceEdit, apply_edit

MISSING_KEY_MESSAGE = "OPENAI_API_KEY environment variable not set."
NO_FIX_MESSAGE = "No fix was returned by the AI."

PROMPT_TEMPLATE = """\
The following React code has an accessibility issue:
---
{snippet}
---
Please provide a fixed version of this snippet (only the code), along with a brief explanation.
"""

_CODE_BLOCK_RE = re.compile(r"```(?:[A-Za-z0-9_+-]*\r?\n)?([\s\S]*?)```")
_EXPLANATION_RE = re.compile(r"Explanation:\s*([\s\S]*)", re.IGNORECASE)


class Notifier(Protocol):
    """User-facing message sink provided by the host."""

    def info(self, message: str) -> None: ...

    def warning(self, message: str) -> None: ...

    def error(self, message: str) -> None: ...


class FixState(Enum):
    IDLE = "idle"
    CREDENTIAL_CHECKED = "credential_checked"
    SNIPPET_EXTRACTED = "snippet_extracted"
    REQUEST_SENT = "request_sent"
    RESPONSE_PARSED = "response_parsed"
    # terminal
    MISSING_CREDENTIAL = "missing_credential"
    REQUEST_FAILED = "request_failed"
    NO_FIX_AVAILABLE = "no_fix_available"
    FIX_APPLIED = "fix_applied"
    APPLY_FAILED = "apply_failed"

    @property
    def is_terminal(self) -> bool:
        return self in _TERMINAL_STATES


_TERMINAL_STATES = frozenset({
    FixState.MISSING_CREDENTIAL,
    FixState.REQUEST_FAILED,
    FixState.NO_FIX_AVAILABLE,
    FixState.FIX_APPLIED,
    FixState.APPLY_FAILED,
})


@dataclass(frozen=True)
class FixRequest:
    file_path: str
    range: TextRange
    original_snippet: str
    issue_message: str


@dataclass(frozen=True)
class FixResult:
    fixed_code: str = ""
    explanation: str = ""


# ---------------------------------------------------------------------------
# Pure helpers
# ---------------------------------------------------------------------------

def build_prompt(snippet: str) -> str:
    return PROMPT_TEMPLATE.format(snippet=snippet)


def parse_fix_response(text: str) -> FixResult:
    """Pull the fixed code and the explanation out of a free-form reply.

    The fixed code is the trimmed interior of the first fenced block (with or
    without a language tag). The explanation is whatever follows the first
    ``Explanation:`` marker, trimmed. Either may come back empty.
    """
    code_match = _CODE_BLOCK_RE.search(text)
    fixed_code = code_match.group(1).strip() if code_match else ""

    explanation_match = _EXPLANATION_RE.search(text)
    explanation = explanation_match.group(1).strip() if explanation_match else ""

    return FixResult(fixed_code=fixed_code, explanation=explanation)


# ---------------------------------------------------------------------------
# Pipeline
# ---------------------------------------------------------------------------

class FixPipeline:
    """Runs one AI fix for one issue against the current document text."""

    def __init__(
        self,
        api_key: str | None,
        notifier: Notifier,
        client_factory: Callable[[str], CompletionClient] = CompletionClient,
        apply: Callable[[WorkspaceEdit], None] = apply_edit,
    ) -> None:
        self._api_key = api_key
        self._notifier = notifier
        self._client_factory = client_factory
        self._apply = apply
        self.state = FixState.IDLE
        self.last_request: FixRequest | None = None
        self.last_result: FixResult | None = None

    def run(self, document: TextDocument, issue: Issue) -> FixState:
        self.state = FixState.IDLE
        self.last_request = None
        self.last_result = None

        if not self._api_key:
            self._notifier.error(MISSING_KEY_MESSAGE)
            return self._finish(FixState.MISSING_CREDENTIAL)
        self.state = FixState.CREDENTIAL_CHECKED

        # Read from the document as it is now; the stored range may be stale
        snippet = document.get_text(issue.range)
        self.last_request = FixRequest(
            file_path=document.path,
            range=issue.range,
            original_snippet=snippet,
            issue_message=issue.message,
        )
        self.state = FixState.SNIPPET_EXTRACTED

        try:
            with self._client_factory(self._api_key) as client:
                self.state = FixState.REQUEST_SENT
                reply = client.complete(build_prompt(snippet))
        except CompletionClientError as exc:
            self._notifier.error(f"Failed to get AI fix: {exc}")
            return self._finish(FixState.REQUEST_FAILED)

        result = parse_fix_response(reply)
        self.last_result = result
        self.state = FixState.RESPONSE_PARSED

        if not result.fixed_code:
            self._notifier.warning(NO_FIX_MESSAGE)
            return self._finish(FixState.NO_FIX_AVAILABLE)

        edit = WorkspaceEdit()
        edit.replace(document, issue.range, result.fixed_code)
        try:
            self._apply(edit)
        except ApplyError as exc:
            self._notifier.error(f"Failed to apply AI fix: {exc}")
            return self._finish(FixState.APPLY_FAILED)

        if result.explanation:
            self._notifier.info(f"AI fix applied. Explanation: {result.explanation}")
        else:
            self._notifier.info("AI fix applied.")
        return self._finish(FixState.FIX_APPLIED)

    def _finish(self, state: FixState) -> FixState:
        self.state = state
        return state
