"""Store error taxonomy.

The store raises; callers decide how loud to be. Validation and not-found
errors are informational in the UI, parse and I/O errors are failures that
abort the whole operation and are reported once.
"""

from __future__ import annotations


class StoreError(Exception):
    """Base class for every error raised by reviewmark_store."""


class ParseError(StoreError):
    """The backing JSON document is malformed or has the wrong shape."""

    def __init__(self, source: str, detail: str):
        super().__init__(f"Could not parse {source}: {detail}")
        self.source = source
        self.detail = detail


class CommentValidationError(StoreError):
    """User input rejected before any write (blank comment, no-op update, empty draft)."""


class CommentNotFoundError(StoreError):
    """No stored comment has the requested id."""

    def __init__(self, comment_id: int):
        super().__init__(f"No comment with id {comment_id}")
        self.comment_id = comment_id


class StoreIOError(StoreError):
    """Reading or writing the backing resource failed (permissions, disk)."""
