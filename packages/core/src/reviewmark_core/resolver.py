"""Anchor Resolver: translate between document points and stored comments.

Every lookup is a linear scan over a fresh snapshot of the store. There is
no cache: the store is a small JSON document and results must reflect the
latest write.

Overlap rule: anchors never move after creation, so after edits two spans
can cover the same point. The first match in store order (the earliest
inserted comment) wins, on every call.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Iterable

from reviewmark_core.ranges import DocPosition, to_stored
from reviewmark_store.models import InlineComment, normalize_file_name

if TYPE_CHECKING:
    from reviewmark_store.base import BaseStore


def comments_for_file(comments: Iterable[InlineComment], file_name: str) -> list[InlineComment]:
    target = normalize_file_name(file_name)
    return [c for c in comments if c.file_name == target]


def find_by_point(
    comments: Iterable[InlineComment],
    file_name: str,
    point: DocPosition,
) -> InlineComment | None:
    """Return the first comment in ``file_name`` whose stored span contains ``point``.

    ``point`` is a 0-based document position; it is compared in stored
    coordinates, i.e. ``start <= point + 1 <= end``.
    """
    target = normalize_file_name(file_name)
    stored_point = to_stored(point)
    for comment in comments:
        if comment.file_name == target and comment.start <= stored_point <= comment.end:
            return comment
    return None


def find_by_id(comments: Iterable[InlineComment], comment_id: int) -> InlineComment | None:
    for comment in comments:
        if comment.id == comment_id:
            return comment
    return None


class AnchorResolver:
    """Store-backed resolver; each call re-reads the store's current snapshot."""

    def __init__(self, store: BaseStore):
        self._store = store

    def find_by_point(self, file_name: str, point: DocPosition) -> InlineComment | None:
        return find_by_point(self._store.snapshot(), file_name, point)

    def find_by_id(self, comment_id: int) -> InlineComment | None:
        return find_by_id(self._store.snapshot(), comment_id)

    def comments_for_file(self, file_name: str) -> list[InlineComment]:
        return comments_for_file(self._store.snapshot(), file_name)
