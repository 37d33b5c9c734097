"""Quick-fix actions offered for this tool's issues.

Usage:
    actions = provide_fix_actions(document, text_range, store.issues_at(path, text_range))
    for action in actions:
        extension.execute_command(action.command.command, *action.command.arguments)
"""

from dataclasses import dataclass

from react_a11y_ai.diagnostics import SOURCE, Issue, TextRange
from react_a11y_ai.document import TextDocument

FIX_COMMAND = "react-a11y-ai.fixWithAI"
RUN_CHECK_COMMAND = "react-a11y-ai.runCheck"

QUICK_FIX = "quickfix"

#: Documents the quick-fix provider is registered for
DOCUMENT_SELECTOR: tuple[dict[str, str], ...] = (
    {"language": "javascriptreact", "scheme": "file"},
    {"language": "typescriptreact", "scheme": "file"},
)


@dataclass(frozen=True)
class CommandBinding:
    """A deferred command call; arguments are captured when the action is built."""

    title: str
    command: str
    arguments: tuple = ()


@dataclass(frozen=True)
class FixAction:
    title: str
    kind: str
    issues: tuple[Issue, ...]
    command: CommandBinding
    is_preferred: bool = True


def matches_selector(
    document: TextDocument,
    selector: tuple[dict[str, str], ...] = DOCUMENT_SELECTOR,
) -> bool:
    return any(
        document.language_id == sel["language"] and document.scheme == sel["scheme"]
        for sel in selector
    )


def provide_fix_actions(
    document: TextDocument,
    text_range: TextRange,
    issues: list[Issue],
) -> list[FixAction]:
    """Build one "Fix with AI" action per issue reported by this tool.

    Issues from other sources are skipped. *text_range* is the range the host
    asked about; the issues passed in are already the ones overlapping it.
    """
    actions: list[FixAction] = []

    for issue in issues:
        if issue.source != SOURCE:
            continue
        actions.append(FixAction(
            title=f"Fix with AI: {issue.message}",
            kind=QUICK_FIX,
            issues=(issue,),
            command=CommandBinding(
                title="Fix with AI",
                command=FIX_COMMAND,
                arguments=(document, issue),
            ),
            is_preferred=True,
        ))

    return actions
