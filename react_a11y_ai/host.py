"""Extension registry: lifecycle, commands and the quick-fix provider.

Usage:
    extension = Extension(notifier, config)
    extension.init(ExtensionContext(workspace_root="/path/to/workspace"))

    extension.execute_command(RUN_CHECK_COMMAND)
    for action in extension.code_actions(document, text_range):
        extension.execute_command(action.command.command, *action.command.arguments)

    extension.shutdown()

The host owns the lifetime: ``init`` registers everything and pushes a
disposable per registration onto ``context.subscriptions``; ``shutdown``
disposes them. An Extension can be initialised again after shutdown.
"""

import subprocess
from collections.abc import Callable
from dataclasses import dataclass, field
from functools import partial
from typing import Any

from react_a11y_ai.actions import (
    DOCUMENT_SELECTOR,
    FIX_COMMAND,
    RUN_CHECK_COMMAND,
    FixAction,
    matches_selector,
    provide_fix_actions,
)
from react_a11y_ai.completion import CompletionClient
from react_a11y_ai.config import Config
from react_a11y_ai.diagnostics import Issue, TextRange, map_results
from react_a11y_ai.document import TextDocument, WorkspaceEdit, apply_edit
from react_a11y_ai.fixer import FixPipeline, FixState, Notifier
from react_a11y_ai.lint import LintSettings, run_a11y_checks
from react_a11y_ai.store import IssueStore, publish

NO_WORKSPACE_MESSAGE = "No workspace folder found!"

CodeActionProvider = Callable[[TextDocument, TextRange, list[Issue]], list[FixAction]]


class HostError(Exception):
    """Raised on misuse of the registry (unknown command, not initialised)."""


class Disposable:
    def __init__(self, callback: Callable[[], None]) -> None:
        self._callback: Callable[[], None] | None = callback

    def dispose(self) -> None:
        if self._callback is not None:
            callback, self._callback = self._callback, None
            callback()


@dataclass
class ExtensionContext:
    workspace_root: str | None = None
    subscriptions: list[Disposable] = field(default_factory=list)


class Extension:
    """In-process stand-in for the editor host's extension API."""

    def __init__(
        self,
        notifier: Notifier,
        config: Config | None = None,
        store: IssueStore | None = None,
        runner: Callable[..., subprocess.CompletedProcess] | None = None,
        client_factory: Callable[[str], CompletionClient] | None = None,
        apply: Callable[[WorkspaceEdit], None] = apply_edit,
    ) -> None:
        self.notifier = notifier
        self.config = config or Config()
        self.store = store if store is not None else IssueStore()
        self._runner = runner
        self._client_factory = client_factory or partial(
            CompletionClient,
            endpoint=self.config.endpoint,
            model=self.config.model,
            max_tokens=self.config.max_tokens,
            temperature=self.config.temperature,
            timeout=self.config.timeout,
        )
        self._apply = apply
        self._context: ExtensionContext | None = None
        self._commands: dict[str, Callable[..., Any]] = {}
        self._providers: list[tuple[tuple[dict[str, str], ...], CodeActionProvider]] = []

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    @property
    def active(self) -> bool:
        return self._context is not None

    def init(self, context: ExtensionContext) -> None:
        if self._context is not None:
            raise HostError("Extension is already initialised; call shutdown() first.")
        self._context = context
        context.subscriptions.append(Disposable(self.store.clear))
        context.subscriptions.append(self.register_command(RUN_CHECK_COMMAND, self.run_check))
        context.subscriptions.append(self.register_command(FIX_COMMAND, self.fix_with_ai))
        context.subscriptions.append(
            self.register_code_action_provider(DOCUMENT_SELECTOR, provide_fix_actions)
        )

    def shutdown(self) -> None:
        if self._context is None:
            return
        subscriptions = self._context.subscriptions
        while subscriptions:
            subscriptions.pop().dispose()
        self._context = None

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def register_command(self, name: str, handler: Callable[..., Any]) -> Disposable:
        if name in self._commands:
            raise HostError(f"Command '{name}' is already registered.")
        self._commands[name] = handler
        return Disposable(lambda: self._commands.pop(name, None))

    def register_code_action_provider(
        self,
        selector: tuple[dict[str, str], ...],
        provider: CodeActionProvider,
    ) -> Disposable:
        entry = (selector, provider)
        self._providers.append(entry)
        return Disposable(lambda: self._providers.remove(entry))

    # ------------------------------------------------------------------
    # Host entry points
    # ------------------------------------------------------------------

    def execute_command(self, name: str, *args: Any) -> Any:
        handler = self._commands.get(name)
        if handler is None:
            raise HostError(f"Unknown command '{name}'.")
        return handler(*args)

    def code_actions(self, document: TextDocument, text_range: TextRange) -> list[FixAction]:
        """Quick fixes for *text_range*, from the issues currently in the store."""
        issues = self.store.issues_at(document.path, text_range)
        actions: list[FixAction] = []
        for selector, provider in self._providers:
            if matches_selector(document, selector):
                actions.extend(provider(document, text_range, issues))
        return actions

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def run_check(self) -> dict[str, list[Issue]] | None:
        """Lint the workspace and replace the store contents with the result.

        ESLint failures propagate to the caller.
        """
        root = self._context.workspace_root if self._context else None
        if not root:
            self.notifier.error(NO_WORKSPACE_MESSAGE)
            return None

        settings = LintSettings(command=self.config.eslint_command, patterns=self.config.patterns)
        results = run_a11y_checks(root, settings, runner=self._runner)
        mapping = map_results(results)
        publish(self.store, mapping)
        return mapping

    def fix_with_ai(self, document: TextDocument, issue: Issue) -> FixState:
        pipeline = FixPipeline(
            api_key=self.config.api_key,
            notifier=self.notifier,
            client_factory=self._client_factory,
            apply=self._apply,
        )
        return pipeline.run(document, issue)
