"""Abstract Anchor Store.

BaseStore implements the comment CRUD algorithm once. Backends (JSON file,
in-memory) only provide raw document access through _read_document and
_write_document, so the no-op rules, id assignment and refresh notification
behave identically everywhere.

Every mutation is a read-modify-write of the whole document. That is only
safe because all access goes through one process; the RLock below
serializes commands dispatched from different threads of that process, but
two processes sharing one file still need an external lock.
"""

from __future__ import annotations

import logging
import threading
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, replace
from typing import Callable

from reviewmark_store.errors import CommentNotFoundError, CommentValidationError, ParseError
from reviewmark_store.models import InlineComment, PendingDelete, Priority, normalize_file_name

logger = logging.getLogger(__name__)

COLLECTION_KEY = "inlineComments"


def _epoch_millis() -> int:
    return int(time.time() * 1000)


@dataclass(frozen=True)
class StoreEvent:
    """Emitted to listeners after a mutation has been written."""

    kind: str  # "added" | "updated" | "removed"
    comment: InlineComment


Listener = Callable[[StoreEvent], None]


class BaseStore(ABC):
    """Durable CRUD over the ordered InlineComment sequence.

    Lookups are linear scans in store order. The sequence is small (dozens to
    low hundreds of comments per review) so no index is kept.
    """

    def __init__(self, clock: Callable[[], int] | None = None):
        self._clock = clock or _epoch_millis
        self._lock = threading.RLock()
        self._listeners: list[Listener] = []

    # ------------------------------------------------------------------ #
    # Backend hooks                                                        #
    # ------------------------------------------------------------------ #

    @abstractmethod
    def _read_document(self) -> dict | None:
        """Return the parsed backing document, or None if it does not exist yet.

        Raise ParseError if the resource exists but is not valid JSON.
        """

    @abstractmethod
    def _write_document(self, document: dict) -> None:
        """Durably replace the backing document. Must not return before the write completes."""

    @property
    def source(self) -> str:
        """Human-readable name of the backing resource, used in messages."""
        return type(self).__name__

    def close(self) -> None:
        """Release any resources held by the store. Default is a no-op."""

    # ------------------------------------------------------------------ #
    # Reads                                                                #
    # ------------------------------------------------------------------ #

    def load(self) -> list[InlineComment]:
        """Return every stored comment in store order.

        An absent backing resource is initialised to an empty skeleton and
        yields []. A malformed one raises ParseError and is left untouched.
        """
        with self._lock:
            return self._load_locked()

    def snapshot(self) -> tuple[InlineComment, ...]:
        """Like load(), but a corrupt document is logged and read as empty.

        Used on read-only paths (rendering, resolving) so one bad file does not
        end the session. Mutations use load() and never overwrite a corrupt file.
        """
        try:
            return tuple(self.load())
        except ParseError as e:
            logger.error("%s", e)
            return ()

    def find_by_id(self, comment_id: int) -> InlineComment | None:
        for comment in self.load():
            if comment.id == comment_id:
                return comment
        return None

    def comments_for_file(self, file_name: str) -> list[InlineComment]:
        target = normalize_file_name(file_name)
        return [c for c in self.load() if c.file_name == target]

    # ------------------------------------------------------------------ #
    # Mutations                                                            #
    # ------------------------------------------------------------------ #

    def append(self, comment: InlineComment) -> InlineComment:
        """Persist a new comment and return it with its assigned id.

        Raises CommentValidationError if both title and comment are blank, or
        if the comment carries an id that is already in use.
        """
        if comment.is_blank:
            raise CommentValidationError("Please enter either a title or a comment.")

        with self._lock:
            comments = self._load_locked()
            used_ids = {c.id for c in comments}
            if comment.id is None:
                comment = replace(comment, id=self._next_id(used_ids))
            elif comment.id in used_ids:
                raise CommentValidationError(f"A comment with id {comment.id} already exists.")
            comments.append(comment)
            self._save_locked(comments)

        logger.debug("Added comment %s on %s", comment.id, comment.file_name)
        self._emit(StoreEvent("added", comment))
        return comment

    def update(
        self,
        comment_id: int,
        title: str,
        comment: str,
        priority: Priority | None = None,
    ) -> InlineComment:
        """Replace title, comment and priority of an existing record.

        The anchor is never touched. Raises CommentNotFoundError for an unknown
        id and CommentValidationError if the payload is blank or identical to
        what is stored; in both cases nothing is written and no event fires.
        """
        if not title.strip() and not comment.strip():
            raise CommentValidationError("Either no changes detected, or missing title or comment.")
        priority = Priority.parse(priority)

        with self._lock:
            comments = self._load_locked()
            index = self._index_of(comments, comment_id)
            if index is None:
                raise CommentNotFoundError(comment_id)
            existing = comments[index]
            if existing.title == title and existing.comment == comment and existing.priority == priority:
                raise CommentValidationError("Either no changes detected, or missing title or comment.")
            updated = existing.with_payload(title, comment, priority)
            comments[index] = updated
            self._save_locked(comments)

        logger.debug("Updated comment %s", comment_id)
        self._emit(StoreEvent("updated", updated))
        return updated

    def request_delete(self, comment_id: int) -> PendingDelete:
        """First phase of delete: locate the record the user must confirm.

        Nothing is mutated. Raises CommentNotFoundError for an unknown id.
        """
        existing = self.find_by_id(comment_id)
        if existing is None:
            raise CommentNotFoundError(comment_id)
        return PendingDelete(comment=existing)

    def confirm_delete(self, pending: PendingDelete) -> InlineComment | None:
        """Second phase of delete: splice the pending record out.

        Returns None (and writes nothing) if the record disappeared between
        request and confirmation.
        """
        comment_id = pending.comment.id
        with self._lock:
            comments = self._load_locked()
            index = self._index_of(comments, comment_id)
            if index is None:
                logger.info("Comment %s was already removed", comment_id)
                return None
            removed = comments.pop(index)
            self._save_locked(comments)

        logger.debug("Removed comment %s", comment_id)
        self._emit(StoreEvent("removed", removed))
        return removed

    def remove(self, comment_id: int, confirm: Callable[[InlineComment], bool]) -> InlineComment | None:
        """Delete by id after asking ``confirm``.

        Only an explicit True from ``confirm`` deletes; a False, a None or a
        dismissed prompt leaves the store untouched and returns None.
        """
        pending = self.request_delete(comment_id)
        if confirm(pending.comment) is not True:
            logger.debug("Delete of comment %s cancelled", comment_id)
            return None
        return self.confirm_delete(pending)

    # ------------------------------------------------------------------ #
    # Observers                                                            #
    # ------------------------------------------------------------------ #

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a refresh listener. Returns a callable that unsubscribes it."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def _emit(self, event: StoreEvent) -> None:
        for listener in list(self._listeners):
            listener(event)

    # ------------------------------------------------------------------ #
    # Internals                                                            #
    # ------------------------------------------------------------------ #

    def _load_locked(self) -> list[InlineComment]:
        document = self._read_document()
        if document is None:
            logger.info("Initialising empty comment store at %s", self.source)
            self._write_document({COLLECTION_KEY: []})
            return []
        return self._parse_comments(document)

    def _save_locked(self, comments: list[InlineComment]) -> None:
        self._write_document({COLLECTION_KEY: [c.to_dict() for c in comments]})

    def _parse_comments(self, document) -> list[InlineComment]:
        if not isinstance(document, dict):
            raise ParseError(self.source, "top-level value must be an object")
        raw = document.get(COLLECTION_KEY)
        if not isinstance(raw, list):
            raise ParseError(self.source, f"missing '{COLLECTION_KEY}' array")
        comments = []
        for position, item in enumerate(raw):
            if not isinstance(item, dict):
                raise ParseError(self.source, f"entry {position} is not an object")
            try:
                comments.append(InlineComment.from_dict(item))
            except (AttributeError, TypeError, ValueError) as e:
                raise ParseError(self.source, f"entry {position}: {e}") from e
        return comments

    def _next_id(self, used_ids: set) -> int:
        candidate = self._clock()
        ceiling = max((i for i in used_ids if i is not None), default=None)
        if ceiling is not None and candidate <= ceiling:
            candidate = ceiling + 1
        return candidate

    @staticmethod
    def _index_of(comments: list[InlineComment], comment_id: int) -> int | None:
        for index, comment in enumerate(comments):
            if comment.id == comment_id:
                return index
        return None
