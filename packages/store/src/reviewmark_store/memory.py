"""In-memory store: nothing touches disk.

Selected with `store: memory` in .reviewmark.yml for dry runs, and used by
the test-suite. The document is kept as a JSON string so every read returns
fresh objects, exactly like the file-backed store.
"""

from __future__ import annotations

import json
from typing import Callable

from reviewmark_store.base import BaseStore


class MemoryStore(BaseStore):
    """Keeps the comment document in process memory for the store's lifetime."""

    def __init__(self, document: dict | None = None, clock: Callable[[], int] | None = None):
        super().__init__(clock=clock)
        self._payload: str | None = json.dumps(document) if document is not None else None

    @property
    def source(self) -> str:
        return "<memory>"

    def _read_document(self) -> dict | None:
        if self._payload is None:
            return None
        return json.loads(self._payload)

    def _write_document(self, document: dict) -> None:
        self._payload = json.dumps(document)
