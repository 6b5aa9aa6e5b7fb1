"""Document provider: line counts and line lengths for files in the workspace.

The renderer needs nothing else from a document: the line count to detect
stale anchors and a line's text length to build the full-line marker range.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from reviewmark_store.models import normalize_file_name

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TextDocument:
    file_name: str
    lines: tuple[str, ...]

    @classmethod
    def from_text(cls, file_name: str, text: str) -> TextDocument:
        lines = text.splitlines()
        # An editor always shows at least one (possibly empty) line, and a
        # trailing newline opens one more.
        if not lines or text.endswith(("\n", "\r")):
            lines.append("")
        return cls(normalize_file_name(file_name), tuple(lines))

    @property
    def line_count(self) -> int:
        return len(self.lines)

    def line_length(self, index: int) -> int:
        """Length of the 0-based line ``index``. Raises IndexError outside the document."""
        if index < 0 or index >= len(self.lines):
            raise IndexError(f"Line {index} outside document of {len(self.lines)} lines")
        return len(self.lines[index])


def relative_file_name(root: str | Path, path: str | Path) -> str:
    """Return ``path`` relative to the workspace ``root`` in normalized store form.

    Relative paths are taken relative to the current directory first. Raises
    ValueError when the file lies outside the workspace.
    """
    root_path = Path(root).resolve()
    file_path = Path(path)
    if not file_path.is_absolute():
        file_path = Path.cwd() / file_path
    try:
        relative = file_path.resolve().relative_to(root_path)
    except ValueError:
        raise ValueError(f"{path} is not inside the workspace {root_path}") from None
    return normalize_file_name(relative.as_posix())


class FileDocumentProvider:
    """Reads documents from disk relative to the workspace root."""

    def __init__(self, root: str | Path):
        self._root = Path(root)

    @property
    def root(self) -> Path:
        return self._root

    def open(self, file_name: str) -> TextDocument:
        name = normalize_file_name(file_name)
        path = self._root / name
        logger.debug("Opening document %s", path)
        text = path.read_text(encoding="utf-8", errors="replace")
        return TextDocument.from_text(name, text)
