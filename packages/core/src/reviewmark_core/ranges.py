"""Document coordinates and the boundary to stored coordinates.

The editor works in 0-based (line, character) positions; the store keeps
1-based ones. to_stored / to_document are the only conversions between the
two, so an off-by-one can only live here.
"""

from __future__ import annotations

from dataclasses import dataclass

from reviewmark_store.models import Position, Span


@dataclass(frozen=True, order=True)
class DocPosition:
    """A 0-based position in a live document."""

    line: int
    character: int


@dataclass(frozen=True)
class Range:
    """An ordered 0-based range. Containment is inclusive at both ends."""

    start: DocPosition
    end: DocPosition

    def __post_init__(self):
        if self.start > self.end:
            raise ValueError(f"Range start {self.start} is after end {self.end}")

    @property
    def is_empty(self) -> bool:
        return self.start == self.end

    @property
    def is_single_line(self) -> bool:
        return self.start.line == self.end.line

    def contains(self, point: DocPosition) -> bool:
        return self.start <= point <= self.end


@dataclass(frozen=True)
class Selection:
    """What the editor reports: anchor is where the drag began, active where it ended."""

    anchor: DocPosition
    active: DocPosition

    @classmethod
    def at(cls, line: int, character: int) -> Selection:
        point = DocPosition(line, character)
        return cls(point, point)

    @property
    def is_point(self) -> bool:
        return self.anchor == self.active

    @property
    def is_single_line(self) -> bool:
        return self.anchor.line == self.active.line

    @property
    def range(self) -> Range:
        return Range(min(self.anchor, self.active), max(self.anchor, self.active))


def to_stored(position: DocPosition) -> Position:
    return Position(position.line + 1, position.character + 1)


def to_document(position: Position) -> DocPosition:
    return DocPosition(position.line - 1, position.character - 1)


def span_from_selection(selection: Selection) -> Span:
    ordered = selection.range
    return Span(to_stored(ordered.start), to_stored(ordered.end))


def span_to_range(span: Span) -> Range:
    return Range(to_document(span.start), to_document(span.end))
