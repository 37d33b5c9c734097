"""Issue data model and ESLint result mapping.

Usage:
    results = run_a11y_checks("/path/to/workspace")
    issues  = map_results(results)       # {"/abs/App.jsx": [Issue, ...]}
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any

#: Provenance tag stamped on every issue produced by this tool
SOURCE = "react-a11y-ai"

#: Code used when ESLint reports a message without a rule id (parse errors)
FALLBACK_CODE = "react-a11y"

# ESLint severity codes: 1 = warn, 2 = error
_ESLINT_ERROR = 2


# ---------------------------------------------------------------------------
# Positions and ranges
# ---------------------------------------------------------------------------

@dataclass(frozen=True, order=True)
class Position:
    """A 0-based (line, character) position inside a document."""

    line: int
    character: int


@dataclass(frozen=True)
class TextRange:
    start: Position
    end: Position

    @classmethod
    def at(cls, line: int, column: int) -> "TextRange":
        """Single-character range starting at a 0-based (line, column)."""
        return cls(Position(line, column), Position(line, column + 1))

    def contains(self, position: Position) -> bool:
        return self.start <= position <= self.end

    def intersects(self, other: "TextRange") -> bool:
        return self.start <= other.end and other.start <= self.end


class Severity(Enum):
    ERROR = "error"
    WARNING = "warning"


# ---------------------------------------------------------------------------
# Issue
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Issue:
    """One positioned accessibility finding, ready to be rendered by a host."""

    file_path: str
    range: TextRange
    message: str
    severity: Severity
    source: str = SOURCE
    code: str = FALLBACK_CODE

    @property
    def line(self) -> int:
        return self.range.start.line

    @property
    def column(self) -> int:
        return self.range.start.character

    @property
    def end_column(self) -> int:
        return self.range.end.character

    def to_dict(self) -> dict[str, Any]:
        return {
            "file":       self.file_path,
            "line":       self.line,
            "column":     self.column,
            "end_column": self.end_column,
            "severity":   self.severity.value,
            "source":     self.source,
            "code":       self.code,
            "message":    self.message,
        }


# ---------------------------------------------------------------------------
# Mapping
# ---------------------------------------------------------------------------

def map_results(results: list[dict[str, Any]]) -> dict[str, list[Issue]]:
    """Convert ESLint's per-file results into issues keyed by file path.

    Files without any message are left out of the returned mapping so that
    nothing empty is ever published. Message order is preserved.
    """
    mapping: dict[str, list[Issue]] = {}

    for result in results:
        file_path = result.get("filePath", "")
        file_issues = [_to_issue(file_path, msg) for msg in result.get("messages") or []]
        if file_issues:
            mapping[file_path] = file_issues

    return mapping


def _to_issue(file_path: str, msg: dict[str, Any]) -> Issue:
    # ESLint is 1-based; 0 or missing is treated as 1 so nothing goes negative
    line = (msg.get("line") or 1) - 1
    column = (msg.get("column") or 1) - 1

    severity = Severity.ERROR if msg.get("severity") == _ESLINT_ERROR else Severity.WARNING

    return Issue(
        file_path=file_path,
        range=TextRange.at(line, column),
        message=msg.get("message", ""),
        severity=severity,
        source=SOURCE,
        code=msg.get("ruleId") or FALLBACK_CODE,
    )
