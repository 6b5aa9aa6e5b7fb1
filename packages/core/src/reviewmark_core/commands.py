"""Typed commands coming from the comment UI.

The UI posts loosely-shaped dict messages. decode_command turns one into a
command object exactly once, at the boundary, so the controller never
inspects untyped payloads.

Wire shape:
    {"command": "addComment",    "data": {"title", "text", "priority"?, "fileName"?, "selection"?}}
    {"command": "updateComment", "data": {"id", "title", "text", "priority"?}}
    {"command": "deleteComment", "id": ...}            (or "data": {"id": ...})
    {"command": "draftStored",   "data": [{"rubricId", "comment", "score"?}, ...]}

A selection is {"anchor": {"line", "character"}, "active": {...}} in
0-based document coordinates.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Union

from reviewmark_core.ranges import DocPosition, Selection
from reviewmark_store.models import GeneralComment, Priority


class CommandDecodeError(ValueError):
    """The UI message is not a known command or is missing required fields."""


@dataclass(frozen=True)
class SaveComment:
    file_name: str
    selection: Selection
    title: str
    text: str
    priority: Priority | None = None


@dataclass(frozen=True)
class UpdateComment:
    id: int
    title: str
    text: str
    priority: Priority | None = None


@dataclass(frozen=True)
class DeleteComment:
    id: int


@dataclass(frozen=True)
class SaveDraft:
    entries: tuple[GeneralComment, ...] = field(default=())


Command = Union[SaveComment, UpdateComment, DeleteComment, SaveDraft]


def decode_command(
    message: dict,
    *,
    file_name: str | None = None,
    selection: Selection | None = None,
) -> Command:
    """Decode a UI message.

    ``file_name`` and ``selection`` describe the active editor; they fill in
    an addComment payload that does not carry its own.
    """
    if not isinstance(message, dict):
        raise CommandDecodeError(f"Expected a message object, got {type(message).__name__}")
    name = message.get("command")
    data = message.get("data")

    if name == "addComment":
        data = _require_mapping(data, name)
        target = data.get("fileName") or file_name
        if not target:
            raise CommandDecodeError("addComment needs a file name")
        raw_selection = data.get("selection")
        chosen = _decode_selection(raw_selection) if raw_selection is not None else selection
        if chosen is None:
            raise CommandDecodeError("addComment needs a selection")
        return SaveComment(
            file_name=target,
            selection=chosen,
            title=_text(data, "title"),
            text=_text(data, "text"),
            priority=Priority.parse(data.get("priority")),
        )

    if name == "updateComment":
        data = _require_mapping(data, name)
        return UpdateComment(
            id=_require_int(data.get("id"), "updateComment.id"),
            title=_text(data, "title"),
            text=_text(data, "text"),
            priority=Priority.parse(data.get("priority")),
        )

    if name == "deleteComment":
        raw_id = message.get("id")
        if raw_id is None and isinstance(data, dict):
            raw_id = data.get("id")
        return DeleteComment(id=_require_int(raw_id, "deleteComment.id"))

    if name == "draftStored":
        if not isinstance(data, list):
            raise CommandDecodeError("draftStored needs a list of entries")
        entries = []
        for item in data:
            if not isinstance(item, dict):
                raise CommandDecodeError("draftStored entries must be objects")
            score = _score(item.get("score"))
            entries.append(
                GeneralComment(
                    rubric_id=_require_int(item.get("rubricId"), "draftStored.rubricId"),
                    comment=_text(item, "comment"),
                    score=score,
                )
            )
        return SaveDraft(entries=tuple(entries))

    raise CommandDecodeError(f"Unknown command: {name!r}")


def _require_mapping(data, name: str) -> dict:
    if not isinstance(data, dict):
        raise CommandDecodeError(f"{name} needs a data object")
    return data


def _require_int(value, label: str) -> int:
    if isinstance(value, bool) or value is None:
        raise CommandDecodeError(f"{label} is required")
    try:
        return int(value)
    except (TypeError, ValueError):
        raise CommandDecodeError(f"{label} must be an integer, got {value!r}") from None


def _score(value) -> float | None:
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        raise CommandDecodeError(f"draftStored.score must be a number, got {value!r}")
    try:
        return float(value)
    except (TypeError, ValueError):
        raise CommandDecodeError(f"draftStored.score must be a number, got {value!r}") from None


def _text(data: dict, key: str) -> str:
    value = data.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise CommandDecodeError(f"{key} must be a string")
    return value


def _decode_position(raw, label: str) -> DocPosition:
    if not isinstance(raw, dict):
        raise CommandDecodeError(f"{label} must be a position object")
    line = _require_int(raw.get("line"), f"{label}.line")
    character = _require_int(raw.get("character"), f"{label}.character")
    if line < 0 or character < 0:
        raise CommandDecodeError(f"{label} must not be negative")
    return DocPosition(line, character)


def _decode_selection(raw) -> Selection:
    if not isinstance(raw, dict):
        raise CommandDecodeError("selection must be an object")
    anchor = _decode_position(raw.get("anchor", raw.get("start")), "selection.anchor")
    active = _decode_position(raw.get("active", raw.get("end")), "selection.active")
    return Selection(anchor, active)
