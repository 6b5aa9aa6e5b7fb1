"""JsonFileStore: the default local store: one JSON document in the workspace.

Data format: a single UTF-8 file (``inline-comments.json`` by default)
holding ``{"inlineComments": [InlineComment, ...]}``. fileName values are
forward-slash paths relative to the workspace root, so the file can be
committed and read back from any checkout.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Callable

from reviewmark_store.base import BaseStore
from reviewmark_store.errors import ParseError, StoreIOError

logger = logging.getLogger(__name__)


def read_json_document(path: Path) -> dict | None:
    """Read and parse a JSON document, returning None if the file does not exist.

    Raises ParseError on invalid JSON and StoreIOError on any other OS failure.
    """
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return None
    except OSError as e:
        raise StoreIOError(f"Could not read {path}: {e}") from e
    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        raise ParseError(str(path), str(e)) from e


def write_json_document(path: Path, document: dict) -> None:
    """Write a JSON document via a temp file in the same directory and os.replace.

    Readers see either the old or the new document, never a partial write.
    """
    payload = json.dumps(document, indent=2, ensure_ascii=False) + "\n"
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(payload)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_name, path)
        except BaseException:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise
    except OSError as e:
        raise StoreIOError(f"Could not write {path}: {e}") from e


class JsonFileStore(BaseStore):
    """Stores inline comments in a local JSON file.

    The file is created with an empty skeleton the first time it is loaded.
    Configure the location via .reviewmark.yml: `inline_comments_file: ...`.
    """

    def __init__(self, path: str | Path = "inline-comments.json", clock: Callable[[], int] | None = None):
        super().__init__(clock=clock)
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    @property
    def source(self) -> str:
        return str(self._path)

    def _read_document(self) -> dict | None:
        return read_json_document(self._path)

    def _write_document(self, document: dict) -> None:
        write_json_document(self._path, document)
