"""Click Dispatcher: from a point selection to the comment under it.

One selection-changed event is handled at a time:

    IDLE --selectionChanged--> guard (point, single line)
         --> MATCHING: scan the rendered highlight ranges for one containing the point
         --> RESOLVED: map that range's comment id back to the stored comment,
             emit OpenCommentEditor
         --> no match: back to IDLE, no effects

Both entry points are pure: (session, input) -> (session', effects).
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Iterable, Sequence

from reviewmark_core.document import TextDocument
from reviewmark_core.ranges import DocPosition, Selection
from reviewmark_core.renderer import Decoration, render_decorations
from reviewmark_core.resolver import comments_for_file, find_by_id, find_by_point
from reviewmark_core.session import (
    ClearDecorations,
    DispatchState,
    Effect,
    Notify,
    OpenCommentEditor,
    ReviewSession,
    ShowDecorations,
)
from reviewmark_store.models import InlineComment

logger = logging.getLogger(__name__)


def open_file(
    session: ReviewSession,
    document: TextDocument,
    comments: Iterable[InlineComment],
) -> tuple[ReviewSession, list[Effect]]:
    """Make ``document`` the active file: clear, then redraw its decorations."""
    result = render_decorations(comments_for_file(comments, document.file_name), document)
    effects: list[Effect] = [ClearDecorations(), ShowDecorations(document.file_name, result)]
    if result.skipped:
        effects.append(
            Notify(
                "warning",
                f"{len(result.skipped)} comment(s) on {document.file_name} no longer fit the file "
                "and are not shown inline.",
            )
        )
    new_session = replace(
        session,
        active_file=document.file_name,
        decorations=result.decorations,
        state=DispatchState.IDLE,
        selected_id=None,
    )
    return new_session, effects


def close_file(session: ReviewSession) -> tuple[ReviewSession, list[Effect]]:
    new_session = replace(session, active_file=None, decorations=(), state=DispatchState.IDLE, selected_id=None)
    return new_session, [ClearDecorations()]


def find_decoration(decorations: Sequence[Decoration], point: DocPosition) -> Decoration | None:
    """Return the first rendered decoration whose highlight contains ``point``."""
    for decoration in decorations:
        if decoration.highlight.contains(point):
            return decoration
    return None


def on_selection_changed(
    session: ReviewSession,
    selection: Selection,
    comments: Sequence[InlineComment],
) -> tuple[ReviewSession, list[Effect]]:
    idle = replace(session, state=DispatchState.IDLE, selected_id=None)
    if session.active_file is None:
        return idle, []
    # Drag-selects and multi-line selections never open a comment.
    if not (selection.is_point and selection.is_single_line):
        return idle, []

    point = selection.active
    logger.debug("%s -> %s at %s", DispatchState.IDLE.value, DispatchState.MATCHING.value, point)
    decoration = find_decoration(session.decorations, point)
    if decoration is None:
        return idle, []

    comment = None
    if decoration.comment_id is not None:
        comment = find_by_id(comments, decoration.comment_id)
    if comment is None:
        comment = find_by_point(comments, session.active_file, point)
    if comment is None:
        # The comment was removed after the decorations were drawn.
        logger.debug("Decoration for %s has no stored comment", decoration.comment_id)
        return idle, []

    logger.debug("%s -> %s comment %s", DispatchState.MATCHING.value, DispatchState.RESOLVED.value, comment.id)
    resolved = replace(session, state=DispatchState.RESOLVED, selected_id=comment.id)
    return resolved, [OpenCommentEditor(comment)]
