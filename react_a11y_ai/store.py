"""Process-wide issue collection published to the host.

Usage:
    store = IssueStore()
    publish(store, map_results(results))   # full flush, then one set per file
    store.get("/abs/App.jsx")               # -> [Issue, ...] or []
"""

from collections.abc import Iterator

from react_a11y_ai.diagnostics import Issue, TextRange


class IssueStore:
    """Mapping of file path to the issues currently shown for that file."""

    def __init__(self, name: str = "react-a11y-ai") -> None:
        self.name = name
        self._issues: dict[str, list[Issue]] = {}

    def clear(self) -> None:
        self._issues.clear()

    def set(self, file_path: str, issues: list[Issue]) -> None:
        if issues:
            self._issues[file_path] = list(issues)
        else:
            self._issues.pop(file_path, None)

    def get(self, file_path: str) -> list[Issue]:
        return list(self._issues.get(file_path, []))

    def paths(self) -> list[str]:
        return list(self._issues)

    def items(self) -> Iterator[tuple[str, list[Issue]]]:
        for file_path, issues in self._issues.items():
            yield file_path, list(issues)

    def all_issues(self) -> list[Issue]:
        return [issue for issues in self._issues.values() for issue in issues]

    def issues_at(self, file_path: str, text_range: TextRange) -> list[Issue]:
        """Issues of *file_path* whose range overlaps *text_range*."""
        return [i for i in self._issues.get(file_path, []) if i.range.intersects(text_range)]

    def __len__(self) -> int:
        return sum(len(issues) for issues in self._issues.values())

    def __contains__(self, file_path: object) -> bool:
        return file_path in self._issues


def publish(store: IssueStore, mapping: dict[str, list[Issue]]) -> None:
    """Replace everything in *store* with *mapping*.

    The store is cleared first so files fixed or deleted since the last run
    never keep stale issues.
    """
    store.clear()
    for file_path, issues in mapping.items():
        store.set(file_path, issues)
