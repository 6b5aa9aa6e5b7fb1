"""Acknowledged delivery of messages to a UI panel.

A freshly created panel may not be listening yet when the first message is
posted. Instead of re-posting after a fixed delay, every message stays
pending until the panel acknowledges its sequence number; when the panel
announces it is ready, everything still pending is sent again.
"""

from __future__ import annotations

import itertools
import logging
import threading
from concurrent.futures import Future
from typing import Any, Callable

logger = logging.getLogger(__name__)


class MessageChannel:
    def __init__(self, send: Callable[[dict], None]):
        self._send = send
        self._seq = itertools.count(1)
        self._pending: dict[int, tuple[dict, Future]] = {}
        self._lock = threading.Lock()

    @property
    def pending(self) -> list[int]:
        with self._lock:
            return sorted(self._pending)

    def post(self, command: str, data: Any = None) -> Future:
        """Send a message; the returned future resolves with it once acknowledged."""
        future: Future = Future()
        with self._lock:
            seq = next(self._seq)
            message = {"seq": seq, "command": command, "data": data}
            self._pending[seq] = (message, future)
        self._send(message)
        return future

    def ack(self, seq: int) -> bool:
        """Mark ``seq`` as received. Returns False for unknown, already-acked or cancelled messages."""
        with self._lock:
            entry = self._pending.pop(seq, None)
        if entry is None:
            logger.debug("Ignoring ack for unknown message %s", seq)
            return False
        message, future = entry
        if not future.set_running_or_notify_cancel():
            logger.debug("Message %s was cancelled before its ack", seq)
            return False
        future.set_result(message)
        return True

    def ready(self) -> int:
        """The consumer is listening: re-send every unacknowledged message in order."""
        with self._lock:
            messages = [self._pending[seq][0] for seq in sorted(self._pending)]
        for message in messages:
            self._send(message)
        if messages:
            logger.debug("Re-sent %d pending message(s)", len(messages))
        return len(messages)

    def close(self) -> None:
        with self._lock:
            pending = list(self._pending.values())
            self._pending.clear()
        for _, future in pending:
            future.cancel()
