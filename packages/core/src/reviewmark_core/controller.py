"""ReviewController: owns the ReviewSession and runs every user action.

Each public method handles one discrete action and returns the effects the
editor must apply, in order. Within one action the store write completes,
then the refresh notification fires, then the active file is re-rendered.

Error policy:
  - validation / not-found errors become an informational Notify;
  - parse and I/O errors abort the action and become one error Notify;
  - a stale anchor only loses its own decoration (see renderer).
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Callable, Protocol

from reviewmark_core import dispatcher
from reviewmark_core.commands import Command, DeleteComment, SaveComment, SaveDraft, UpdateComment
from reviewmark_core.document import TextDocument
from reviewmark_core.ranges import Selection, span_from_selection, to_document
from reviewmark_core.resolver import find_by_id
from reviewmark_core.session import Effect, Notify, OpenCommentEditor, ReviewSession
from reviewmark_core.tree import FileNode, build_comment_tree
from reviewmark_store.errors import (
    CommentNotFoundError,
    CommentValidationError,
    ParseError,
    StoreError,
    StoreIOError,
)
from reviewmark_store.models import InlineComment, normalize_file_name

if TYPE_CHECKING:
    from reviewmark_store.base import BaseStore, StoreEvent
    from reviewmark_store.drafts import GeneralCommentStore, RubricCatalog

logger = logging.getLogger(__name__)


class DocumentProvider(Protocol):
    def open(self, file_name: str) -> TextDocument: ...


def _never_confirm(comment: InlineComment) -> bool:
    return False


class ReviewController:
    """Top-level controller wiring store, documents and the pure core together."""

    def __init__(
        self,
        store: BaseStore,
        documents: DocumentProvider,
        root: str = ".",
        drafts: GeneralCommentStore | None = None,
        rubrics: RubricCatalog | None = None,
        confirm: Callable[[InlineComment], bool] = _never_confirm,
    ):
        self._store = store
        self._documents = documents
        self._drafts = drafts
        self._rubrics = rubrics
        self._confirm = confirm
        self._session = ReviewSession(root=str(root))
        self._dirty = False
        self._unsubscribe = store.subscribe(self._on_store_event)

    @property
    def session(self) -> ReviewSession:
        return self._session

    def close(self) -> None:
        self._unsubscribe()

    # ------------------------------------------------------------------ #
    # Editor events                                                        #
    # ------------------------------------------------------------------ #

    def open_file(self, file_name: str) -> list[Effect]:
        """Editor switched to ``file_name`` (relative to the workspace root)."""
        name = normalize_file_name(file_name)
        try:
            document = self._documents.open(name)
        except OSError as e:
            logger.error("Could not open %s: %s", name, e)
            self._session, effects = dispatcher.close_file(self._session)
            return effects + [Notify("error", f"Could not open {name}: {e}")]
        try:
            comments = self._store.snapshot()
        except StoreIOError as e:
            return self._failure(e)
        self._session, effects = dispatcher.open_file(self._session, document, comments)
        return effects

    def select(self, selection: Selection) -> list[Effect]:
        """Selection changed in the active editor."""
        try:
            comments = self._store.snapshot()
        except StoreIOError as e:
            return self._failure(e)
        self._session, effects = dispatcher.on_selection_changed(self._session, selection, comments)
        return effects

    def navigate_to(self, comment_id: int) -> list[Effect]:
        """Open the comment's file, put the cursor on its start and open the comment.

        A stale comment has no decoration to click, so it is opened by id.
        """
        try:
            comment = find_by_id(self._store.snapshot(), comment_id)
        except StoreIOError as e:
            return self._failure(e)
        if comment is None:
            return [Notify("info", str(CommentNotFoundError(comment_id)))]

        effects = self.open_file(comment.file_name)
        if self._session.active_file != comment.file_name:
            return effects
        effects += self.select(Selection.at(*_doc_point(comment)))
        if not any(isinstance(e, OpenCommentEditor) and e.comment.id == comment.id for e in effects):
            effects = [e for e in effects if not isinstance(e, OpenCommentEditor)]
            effects.append(OpenCommentEditor(comment))
        return effects

    def tree(self) -> list[FileNode]:
        return build_comment_tree(self._store.snapshot())

    # ------------------------------------------------------------------ #
    # UI commands                                                          #
    # ------------------------------------------------------------------ #

    def handle(self, command: Command) -> list[Effect]:
        self._dirty = False
        try:
            if isinstance(command, SaveComment):
                effects = self._save(command)
            elif isinstance(command, UpdateComment):
                effects = self._update(command)
            elif isinstance(command, DeleteComment):
                effects = self._delete(command)
            elif isinstance(command, SaveDraft):
                effects = self._save_draft(command)
            else:
                raise TypeError(f"Unsupported command: {command!r}")
        except (CommentValidationError, CommentNotFoundError) as e:
            return [Notify("info", str(e))]
        except (ParseError, StoreIOError) as e:
            return self._failure(e)

        if self._dirty:
            effects = self._refresh() + effects
        return effects

    def _save(self, command: SaveComment) -> list[Effect]:
        span = span_from_selection(command.selection)
        comment = InlineComment(
            file_name=command.file_name,
            start=span.start,
            end=span.end,
            title=command.title,
            comment=command.text,
            priority=command.priority,
        )
        stored = self._store.append(comment)
        return [Notify("info", f"Comment {stored.id} successfully added.")]

    def _update(self, command: UpdateComment) -> list[Effect]:
        self._store.update(command.id, command.title, command.text, command.priority)
        return [Notify("info", "Comment successfully updated.")]

    def _delete(self, command: DeleteComment) -> list[Effect]:
        removed = self._store.remove(command.id, self._confirm)
        if removed is None:
            return []
        return [Notify("info", "Comment successfully deleted.")]

    def _save_draft(self, command: SaveDraft) -> list[Effect]:
        if self._drafts is None:
            raise CommentValidationError("General comments are not configured.")
        rubrics = self._rubrics.load() if self._rubrics is not None else None
        self._drafts.save_draft(command.entries, rubrics=rubrics)
        return [Notify("info", "Draft successfully saved.")]

    # ------------------------------------------------------------------ #
    # Internals                                                            #
    # ------------------------------------------------------------------ #

    def _on_store_event(self, event: StoreEvent) -> None:
        logger.debug("Store %s comment %s", event.kind, event.comment.id)
        self._dirty = True

    def _refresh(self) -> list[Effect]:
        self._dirty = False
        if self._session.active_file is None:
            return []
        return self.open_file(self._session.active_file)

    def _failure(self, error: StoreError) -> list[Effect]:
        logger.error("%s", error)
        return [Notify("error", str(error))]


def _doc_point(comment: InlineComment) -> tuple[int, int]:
    point = to_document(comment.start)
    return max(point.line, 0), max(point.character, 0)
