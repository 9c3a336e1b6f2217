"""Lifecycle events for one command run, written as NDJSON to stderr."""

from __future__ import annotations

import sys
import time
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, TextIO

import orjson


class Timer:
    """Context-manager stopwatch; ``elapsed_ms`` is set on exit."""

    def __init__(self) -> None:
        self.start: float = 0
        self.elapsed_ms: int = 0

    def __enter__(self) -> "Timer":
        self.start = time.perf_counter()
        return self

    def __exit__(self, *args: Any) -> None:
        self.elapsed_ms = int((time.perf_counter() - self.start) * 1000)


class EventEmitter:
    """Writes ``{"event", "timestamp", "data"}`` lines when enabled; a no-op otherwise.

    Events go to stderr only, so stdout stays a clean JSON channel.
    """

    def __init__(self, enabled: bool = False, *, stream: TextIO | None = None) -> None:
        self.enabled = enabled
        self._stream = stream

    def emit(self, event: str, **data: Any) -> None:
        if not self.enabled:
            return
        payload = {
            "event": event,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "data": data,
        }
        stream = self._stream or sys.stderr
        stream.write(orjson.dumps(payload).decode() + "\n")
        stream.flush()

    @contextmanager
    def command(self, name: str, **fields: Any) -> Iterator[dict[str, Any]]:
        """Bracket one command with ``command.start`` / ``command.end``.

        The caller fills the yielded dict with the outcome (``success``,
        ``errorCode``); it is merged into the end event with ``duration_ms``.
        """
        self.emit("command.start", command=name, **fields)
        outcome: dict[str, Any] = {"success": False, "errorCode": None}
        with Timer() as t:
            yield outcome
        self.emit("command.end", command=name, duration_ms=t.elapsed_ms, **outcome)
