"""Text documents and atomic edits.

Usage:
    doc = TextDocument.from_path("src/App.jsx")
    snippet = doc.get_text(issue.range)

    edit = WorkspaceEdit()
    edit.replace(doc, issue.range, "<img alt=\"logo\" />")
    apply_edit(edit)                 # raises ApplyError, writes nothing, on a bad range
"""

from dataclasses import dataclass, field
from pathlib import Path

from react_a11y_ai.diagnostics import Position, TextRange

#: File extension -> language id the quick-fix provider is registered for
LANGUAGE_IDS: dict[str, str] = {
    ".jsx": "javascriptreact",
    ".tsx": "typescriptreact",
}


class ApplyError(Exception):
    """Raised when an edit cannot be applied (range no longer valid)."""


# ---------------------------------------------------------------------------
# Document
# ---------------------------------------------------------------------------

@dataclass
class TextDocument:
    path: str
    text: str
    language_id: str = "plaintext"
    scheme: str = "file"

    @classmethod
    def from_path(cls, path: str | Path) -> "TextDocument":
        p = Path(path).resolve()
        text = p.read_text(encoding="utf-8")
        return cls(path=str(p), text=text, language_id=LANGUAGE_IDS.get(p.suffix, "plaintext"))

    @property
    def line_count(self) -> int:
        return len(self._lines())

    def get_text(self, text_range: TextRange | None = None) -> str:
        """Return the text currently covered by *text_range* (whole text if None).

        Positions past the end of a line or of the document are clamped.
        """
        if text_range is None:
            return self.text
        start = self._offset(text_range.start, strict=False)
        end = self._offset(text_range.end, strict=False)
        return self.text[start:end]

    def offset_at(self, position: Position) -> int:
        """Character offset of *position*; raises ApplyError if the line is gone."""
        return self._offset(position, strict=True)

    def save(self) -> None:
        Path(self.path).write_text(self.text, encoding="utf-8")

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _lines(self) -> list[str]:
        lines = self.text.splitlines(keepends=True)
        # A trailing newline (or an empty text) opens one more, empty line
        if not lines or lines[-1].endswith(("\n", "\r")):
            lines.append("")
        return lines

    def _offset(self, position: Position, strict: bool) -> int:
        lines = self._lines()
        if position.line < 0 or position.character < 0:
            raise ApplyError(f"Negative position {position} in '{self.path}'")
        if position.line >= len(lines):
            if strict:
                raise ApplyError(
                    f"Line {position.line + 1} is out of range for '{self.path}' "
                    f"({len(lines)} lines)"
                )
            return len(self.text)

        offset = sum(len(line) for line in lines[: position.line])
        content = lines[position.line].rstrip("\r\n")
        return offset + min(position.character, len(content))


# ---------------------------------------------------------------------------
# Edits
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class TextEdit:
    range: TextRange
    new_text: str


@dataclass
class WorkspaceEdit:
    """A set of replacements applied all together or not at all."""

    _edits: dict[str, tuple[TextDocument, list[TextEdit]]] = field(default_factory=dict)

    def replace(self, document: TextDocument, text_range: TextRange, new_text: str) -> None:
        _, edits = self._edits.setdefault(document.path, (document, []))
        edits.append(TextEdit(text_range, new_text))

    def entries(self) -> list[tuple[TextDocument, list[TextEdit]]]:
        return list(self._edits.values())

    def __len__(self) -> int:
        return sum(len(edits) for _, edits in self._edits.values())


def apply_edit(edit: WorkspaceEdit, save: bool = True) -> None:
    """Apply every replacement of *edit*, validating all of them first.

    Raises:
        ApplyError: a range is invalid, two replacements overlap, or a
                    file cannot be written. No document is modified in
                    that case; files already written are restored.
    """
    new_texts: list[tuple[TextDocument, str]] = []

    for document, edits in edit.entries():
        spans = sorted(
            ((document.offset_at(e.range.start), document.offset_at(e.range.end), e.new_text)
             for e in edits),
            key=lambda span: span[0],
        )
        text = document.text
        parts: list[str] = []
        cursor = 0
        for start, end, new_text in spans:
            if start < cursor or end < start:
                raise ApplyError(f"Overlapping or inverted edit ranges in '{document.path}'")
            parts.append(text[cursor:start])
            parts.append(new_text)
            cursor = end
        parts.append(text[cursor:])
        new_texts.append((document, "".join(parts)))

    if save:
        written: list[TextDocument] = []
        for document, text in new_texts:
            try:
                Path(document.path).write_text(text, encoding="utf-8")
            except OSError as exc:
                for done in written:
                    done.save()
                raise ApplyError(f"Unable to write '{document.path}': {exc}") from exc
            written.append(document)

    # Buffers change only once every file is on disk
    for document, text in new_texts:
        document.text = text
