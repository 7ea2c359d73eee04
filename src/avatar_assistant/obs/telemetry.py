"""In-process diagnostics: bounded telemetry buffer and timing helper."""

from __future__ import annotations

import threading
import time
from abc import ABC, abstractmethod
from collections import deque
from collections.abc import Iterable
from datetime import datetime, timezone

from avatar_assistant.types import TelemetryLogEntry

DEFAULT_CAPACITY = 100


class TelemetrySink(ABC):
    """Destination for per-request diagnostics entries."""

    @abstractmethod
    def append(self, entry: TelemetryLogEntry) -> None:
        """Record one entry."""

    def list_recent(self, limit: int = 20) -> list[TelemetryLogEntry]:
        return []

    def __len__(self) -> int:
        return 0


class TelemetryBuffer(TelemetrySink):
    """Fixed-capacity FIFO ring buffer safe for concurrent appends.

    The deque is bounded, so appending past capacity evicts the oldest entry;
    the lock keeps append and snapshot atomic across threads.
    """

    def __init__(self, capacity: int = DEFAULT_CAPACITY) -> None:
        if capacity < 1:
            raise ValueError("capacity must be positive")
        self.capacity = capacity
        self._entries: deque[TelemetryLogEntry] = deque(maxlen=capacity)
        self._lock = threading.Lock()

    def append(self, entry: TelemetryLogEntry) -> None:
        with self._lock:
            self._entries.append(entry)

    def extend(self, entries: Iterable[TelemetryLogEntry]) -> None:
        with self._lock:
            self._entries.extend(entries)

    def list_recent(self, limit: int = 20) -> list[TelemetryLogEntry]:
        if limit <= 0:
            return []
        with self._lock:
            snapshot = list(self._entries)
        return snapshot[-limit:]

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


class NullTelemetrySink(TelemetrySink):
    """Discards everything."""

    def append(self, entry: TelemetryLogEntry) -> None:
        return None


def make_entry(
    *,
    user_id: str,
    intent: str | None,
    tools_used: list[str] | None = None,
    has_navigate_to: bool = False,
    error: str | None = None,
    path: str | None = None,
    latency_ms: float | None = None,
) -> TelemetryLogEntry:
    return TelemetryLogEntry(
        timestamp_utc=datetime.now(timezone.utc).isoformat(),
        user_id=user_id,
        intent=intent,
        tools_used=list(tools_used or []),
        has_navigate_to=has_navigate_to,
        error=error,
        path=path,
        latency_ms=latency_ms,
    )


class Timer:
    """Simple context timer used by the pipeline and router."""

    def __init__(self) -> None:
        self._start = 0.0
        self.elapsed_ms = 0.0

    def __enter__(self) -> "Timer":
        self._start = time.perf_counter()
        return self

    def __exit__(self, exc_type: object, exc: object, tb: object) -> None:
        self.elapsed_ms = (time.perf_counter() - self._start) * 1000.0
