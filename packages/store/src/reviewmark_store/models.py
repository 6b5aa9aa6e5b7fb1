"""Review comment data models.

Decoupled from reviewmark_core so the store layer can be used independently
and the anchor logic has no knowledge of persistence concerns.

All positions here are in *stored* coordinates: 1-based line and character,
the same numbers a reviewer sees in the editor gutter. Conversion to the
0-based document convention happens in reviewmark_core.ranges only.
"""

from __future__ import annotations

import logging
import posixpath
from dataclasses import dataclass, replace
from enum import IntEnum

logger = logging.getLogger(__name__)


class Priority(IntEnum):
    LOW = 1
    MEDIUM = 2
    HIGH = 3

    @classmethod
    def parse(cls, value) -> Priority | None:
        """Return the matching Priority, or None for unset/unknown values."""
        if value is None or value == "":
            return None
        try:
            return cls(int(value))
        except (TypeError, ValueError):
            logger.debug("Ignoring unknown priority value %r", value)
            return None


def normalize_file_name(path: str) -> str:
    """Return the canonical relative form used for every fileName comparison.

    Backslashes become forward slashes, redundant separators and "." segments
    are collapsed, and a leading "./" is dropped.
    """
    cleaned = path.replace("\\", "/").strip()
    if not cleaned:
        return ""
    normalized = posixpath.normpath(cleaned)
    return "" if normalized == "." else normalized


def _coordinate(d: dict, key: str) -> int:
    value = d.get(key)
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{key} must be an integer, got {value!r}")
    if value < 0:
        raise ValueError(f"{key} must not be negative, got {value}")
    return value


def _text(d: dict, key: str) -> str:
    value = d.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValueError(f"{key} must be a string, got {type(value).__name__}")
    return value


@dataclass(frozen=True, order=True)
class Position:
    """A 1-based (line, character) pair. Ordering is lexicographic."""

    line: int
    character: int

    def to_dict(self) -> dict:
        return {"line": self.line, "character": self.character}

    @classmethod
    def from_dict(cls, d: dict) -> Position:
        if not isinstance(d, dict):
            raise ValueError(f"position must be an object, got {type(d).__name__}")
        return cls(line=_coordinate(d, "line"), character=_coordinate(d, "character"))


@dataclass(frozen=True)
class Span:
    start: Position
    end: Position

    def __post_init__(self):
        if self.start > self.end:
            raise ValueError(f"Span start {self.start} is after end {self.end}")

    def contains(self, position: Position) -> bool:
        return self.start <= position <= self.end


@dataclass
class InlineComment:
    """A review comment anchored to a span of one file.

    The anchor (file_name, start, end) is fixed at creation; updates only
    touch title, comment and priority.
    """

    file_name: str
    start: Position
    end: Position
    title: str = ""
    comment: str = ""
    priority: Priority | None = None
    id: int | None = None

    def __post_init__(self):
        self.file_name = normalize_file_name(self.file_name)
        if self.start > self.end:
            raise ValueError(f"Comment start {self.start} is after end {self.end}")

    @property
    def span(self) -> Span:
        return Span(self.start, self.end)

    @property
    def is_blank(self) -> bool:
        return not self.title.strip() and not self.comment.strip()

    def with_payload(self, title: str, comment: str, priority: Priority | None) -> InlineComment:
        return replace(self, title=title, comment=comment, priority=priority)

    def to_dict(self) -> dict:
        d: dict = {
            "id": self.id,
            "fileName": self.file_name,
            "start": self.start.to_dict(),
            "end": self.end.to_dict(),
            "title": self.title,
            "comment": self.comment,
        }
        if self.id is None:
            del d["id"]
        if self.priority is not None:
            d["priority"] = int(self.priority)
        return d

    @classmethod
    def from_dict(cls, d: dict) -> InlineComment:
        raw_id = d.get("id")
        return cls(
            id=int(raw_id) if raw_id is not None else None,
            file_name=_text(d, "fileName"),
            start=Position.from_dict(d.get("start")),
            end=Position.from_dict(d.get("end")),
            title=_text(d, "title"),
            comment=_text(d, "comment"),
            priority=Priority.parse(d.get("priority")),
        )


@dataclass
class GeneralComment:
    """A file-independent comment recorded against one rubric criterion."""

    rubric_id: int
    comment: str = ""
    score: float | None = None
    id: int | None = None

    @property
    def is_blank(self) -> bool:
        return not self.comment.strip() and self.score is None

    def to_dict(self) -> dict:
        d: dict = {"rubricId": self.rubric_id, "comment": self.comment}
        if self.id is not None:
            d = {"id": self.id, **d}
        if self.score is not None:
            d["score"] = self.score
        return d

    @classmethod
    def from_dict(cls, d: dict) -> GeneralComment:
        raw_id = d.get("id")
        return cls(
            id=int(raw_id) if raw_id is not None else None,
            rubric_id=int(d.get("rubricId", 0)),
            comment=_text(d, "comment"),
            score=d.get("score"),
        )


@dataclass
class Rubric:
    """A named review criterion. has_score is persisted as "true"/"false"."""

    id: int
    title: str
    description: str = ""
    has_score: bool = False

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "has_score": "true" if self.has_score else "false",
        }

    @classmethod
    def from_dict(cls, d: dict) -> Rubric:
        has_score = d.get("has_score", "false")
        if isinstance(has_score, str):
            has_score = has_score.strip().lower() == "true"
        return cls(
            id=int(d.get("id", 0)),
            title=_text(d, "title"),
            description=_text(d, "description"),
            has_score=bool(has_score),
        )


@dataclass
class PendingDelete:
    """First phase of a two-phase delete: the record the user is asked about."""

    comment: InlineComment
