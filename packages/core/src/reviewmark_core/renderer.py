"""Decoration Renderer: two visual layers per comment.

For each comment on the active file:
  highlight  the exact stored span, in document coordinates, drawn with a
             background colour;
  marker     the full extent of the line holding the span's end, which
             carries the comment icon at the end of that line.

Rendering is a pure function of (comments, document): the same inputs give
an equal RenderResult, so a file switch can always clear and redraw.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable

from reviewmark_core.ranges import DocPosition, Range
from reviewmark_core.document import TextDocument
from reviewmark_store.models import InlineComment, Priority

logger = logging.getLogger(__name__)

_MARKER_ICONS = {
    None: "comment",
    Priority.LOW: "priority-low",
    Priority.MEDIUM: "priority-medium",
    Priority.HIGH: "priority-high",
}


class StaleAnchorError(Exception):
    """A stored anchor no longer fits the current document."""

    def __init__(self, comment_id: int | None, reason: str):
        super().__init__(f"Comment {comment_id}: {reason}")
        self.comment_id = comment_id
        self.reason = reason


def marker_icon(priority: Priority | None) -> str:
    return _MARKER_ICONS.get(priority, "comment")


@dataclass(frozen=True)
class Decoration:
    comment_id: int | None
    highlight: Range
    marker: Range
    priority: Priority | None = None

    @property
    def icon(self) -> str:
        return marker_icon(self.priority)


@dataclass(frozen=True)
class RenderResult:
    decorations: tuple[Decoration, ...] = ()
    skipped: tuple[tuple[int | None, str], ...] = field(default=())

    @property
    def highlights(self) -> tuple[Range, ...]:
        return tuple(d.highlight for d in self.decorations)

    @property
    def markers(self) -> tuple[Range, ...]:
        return tuple(d.marker for d in self.decorations)


def decorate(comment: InlineComment, document: TextDocument) -> Decoration:
    """Build the decoration for one comment or raise StaleAnchorError.

    Lines outside the document make the anchor stale. Characters past the end
    of their line are clamped to it, the way an editor clamps a range.
    """
    start, end = comment.start, comment.end
    if start.line < 1:
        raise StaleAnchorError(comment.id, f"start line {start.line} is not a valid line")
    if end.line > document.line_count:
        raise StaleAnchorError(
            comment.id,
            f"end line {end.line} is beyond the document's {document.line_count} line(s)",
        )

    start_line, end_line = start.line - 1, end.line - 1
    end_line_length = document.line_length(end_line)
    highlight = Range(
        DocPosition(start_line, _clamp(start.character - 1, document.line_length(start_line))),
        DocPosition(end_line, _clamp(end.character - 1, end_line_length)),
    )
    marker = Range(DocPosition(end_line, 0), DocPosition(end_line, end_line_length))
    return Decoration(comment_id=comment.id, highlight=highlight, marker=marker, priority=comment.priority)


def render_decorations(comments: Iterable[InlineComment], document: TextDocument) -> RenderResult:
    """Decorate every comment that belongs to ``document``.

    A stale anchor only loses its own decoration: it is logged, listed in
    ``skipped`` and the rest of the batch is still drawn.
    """
    decorations: list[Decoration] = []
    skipped: list[tuple[int | None, str]] = []
    for comment in comments:
        if comment.file_name != document.file_name:
            continue
        try:
            decorations.append(decorate(comment, document))
        except StaleAnchorError as e:
            logger.warning("Skipping decoration: %s", e)
            skipped.append((e.comment_id, e.reason))
    return RenderResult(decorations=tuple(decorations), skipped=tuple(skipped))


def _clamp(value: int, upper: int) -> int:
    return max(0, min(value, upper))
