"""General (non-anchored) review comments and the rubric catalogue.

A general comment belongs to one rubric criterion rather than to a span of
code. Reviewers fill in a draft with one entry per rubric; saving a draft
replaces the previous draft wholesale.

Files:
  rubrics.json           {"rubrics": [Rubric, ...]}        read-only here
  general-comments.json  {"generalComments": [GeneralComment, ...]}
"""

from __future__ import annotations

import logging
import threading
import time
from pathlib import Path
from typing import Callable, Iterable

from reviewmark_store.errors import CommentValidationError, ParseError
from reviewmark_store.json_file import read_json_document, write_json_document
from reviewmark_store.models import GeneralComment, Rubric

logger = logging.getLogger(__name__)

RUBRICS_KEY = "rubrics"
GENERAL_COMMENTS_KEY = "generalComments"


def _read_collection(path: Path, key: str) -> list[dict] | None:
    document = read_json_document(path)
    if document is None:
        return None
    if not isinstance(document, dict) or not isinstance(document.get(key), list):
        raise ParseError(str(path), f"missing '{key}' array")
    entries = document[key]
    for position, item in enumerate(entries):
        if not isinstance(item, dict):
            raise ParseError(str(path), f"entry {position} is not an object")
    return entries


class RubricCatalog:
    """The review criteria a general comment can be recorded against."""

    def __init__(self, path: str | Path = "rubrics.json"):
        self._path = Path(path)

    def load(self) -> list[Rubric]:
        """Return all rubrics; [] when the file is absent, ParseError when malformed."""
        entries = _read_collection(self._path, RUBRICS_KEY)
        if entries is None:
            logger.debug("No rubric file at %s", self._path)
            return []
        try:
            return [Rubric.from_dict(e) for e in entries]
        except (TypeError, ValueError) as e:
            raise ParseError(str(self._path), str(e)) from e


class GeneralCommentStore:
    """Persists the current draft of general comments."""

    def __init__(self, path: str | Path = "general-comments.json", clock: Callable[[], int] | None = None):
        self._path = Path(path)
        self._clock = clock or (lambda: int(time.time() * 1000))
        self._lock = threading.RLock()

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> list[GeneralComment]:
        with self._lock:
            entries = _read_collection(self._path, GENERAL_COMMENTS_KEY)
            if entries is None:
                write_json_document(self._path, {GENERAL_COMMENTS_KEY: []})
                return []
        try:
            return [GeneralComment.from_dict(e) for e in entries]
        except (TypeError, ValueError) as e:
            raise ParseError(str(self._path), str(e)) from e

    def save_draft(
        self,
        entries: Iterable[GeneralComment],
        rubrics: list[Rubric] | None = None,
    ) -> list[GeneralComment]:
        """Replace the stored draft with the non-blank ``entries``.

        When ``rubrics`` is given, every entry must reference one of them and
        scores are dropped for rubrics without a score. Raises
        CommentValidationError if nothing is left to save.
        """
        by_id = {r.id: r for r in rubrics} if rubrics is not None else None
        draft: list[GeneralComment] = []
        for entry in entries:
            if by_id is not None:
                rubric = by_id.get(entry.rubric_id)
                if rubric is None:
                    raise CommentValidationError(f"Unknown rubric id {entry.rubric_id}.")
                if not rubric.has_score and entry.score is not None:
                    logger.debug("Dropping score for unscored rubric %s", rubric.id)
                    entry = GeneralComment(rubric_id=entry.rubric_id, comment=entry.comment, id=entry.id)
            if entry.is_blank:
                continue
            draft.append(entry)

        if not draft:
            raise CommentValidationError("Cannot save empty draft.")

        base_id = self._clock()
        saved = [
            GeneralComment(rubric_id=e.rubric_id, comment=e.comment, score=e.score, id=base_id + offset)
            for offset, e in enumerate(draft)
        ]
        with self._lock:
            write_json_document(self._path, {GENERAL_COMMENTS_KEY: [c.to_dict() for c in saved]})
        logger.debug("Saved draft with %d general comment(s)", len(saved))
        return saved
