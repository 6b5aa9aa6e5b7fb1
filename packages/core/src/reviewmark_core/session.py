"""ReviewSession and the effects the core asks the editor to perform.

The session is immutable: every handler takes a session and returns a new
one plus a list of effects. Nothing in the core touches the editor directly,
which keeps the renderer and dispatcher testable without one.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Union

from reviewmark_core.renderer import Decoration, RenderResult
from reviewmark_store.models import InlineComment


class DispatchState(str, Enum):
    IDLE = "idle"
    MATCHING = "matching"
    RESOLVED = "resolved"


@dataclass(frozen=True)
class ReviewSession:
    root: str
    active_file: str | None = None
    decorations: tuple[Decoration, ...] = ()
    state: DispatchState = DispatchState.IDLE
    selected_id: int | None = None


# --------------------------------------------------------------------------- #
# Effects                                                                      #
# --------------------------------------------------------------------------- #


@dataclass(frozen=True)
class ClearDecorations:
    """Remove both decoration layers from the editor."""


@dataclass(frozen=True)
class ShowDecorations:
    file_name: str
    result: RenderResult = field(default_factory=RenderResult)


@dataclass(frozen=True)
class OpenCommentEditor:
    """Open the edit UI pre-filled with ``comment``."""

    comment: InlineComment


@dataclass(frozen=True)
class Notify:
    level: str  # "info" | "warning" | "error"
    message: str


Effect = Union[ClearDecorations, ShowDecorations, OpenCommentEditor, Notify]
