"""Bounded in-memory buffer of diagnostic log entries.

The buffer keeps the most recent operational events for the /logs endpoint.
Appends are synchronous and never await, so concurrent requests interleaving
on the event loop cannot observe a half-applied eviction.
"""

import datetime as dt
from collections import deque
from collections.abc import Iterator
from functools import lru_cache

from payment_monitor.models.enums import LogLevel
from payment_monitor.models.log_entry import LogEntry
from payment_monitor.utils.logging import get_logger

logger = get_logger(__name__)

LOG_BUFFER_CAPACITY = 100
RECENT_LOGS_LIMIT = 50


def _utc_timestamp() -> str:
    """ISO-8601 UTC timestamp with millisecond precision and a Z suffix."""
    now = dt.datetime.now(dt.UTC)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


class LogBuffer:
    """Append-only FIFO of LogEntry values with a fixed capacity.

    Appending beyond capacity evicts the oldest entry. Every entry is also
    forwarded to the Python logger so it reaches the process output.

    Usage:
        buffer = get_log_buffer()
        buffer.append("Received Stripe webhook: charge.failed")
        buffer.append("Error sending Gmail alert: timeout", LogLevel.ERROR)
        buffer.recent(50)
    """

    def __init__(self, capacity: int = LOG_BUFFER_CAPACITY) -> None:
        if capacity < 1:
            raise ValueError("capacity must be at least 1")
        self._capacity = capacity
        self._entries: deque[LogEntry] = deque(maxlen=capacity)

    @property
    def capacity(self) -> int:
        return self._capacity

    def append(self, message: str, level: LogLevel | str = LogLevel.INFO) -> LogEntry:
        """Record a message and mirror it to the Python logger.

        Args:
            message: Human-readable event description.
            level: "info" or "error".

        Returns:
            The appended entry.
        """
        entry = LogEntry(timestamp=_utc_timestamp(), level=LogLevel(level), message=message)
        self._entries.append(entry)

        if entry.level is LogLevel.ERROR:
            logger.error(message)
        else:
            logger.info(message)
        return entry

    def recent(self, n: int = RECENT_LOGS_LIMIT) -> list[LogEntry]:
        """Return the last n entries, oldest first."""
        if n <= 0:
            return []
        entries = list(self._entries)
        return entries[-n:]

    def size(self) -> int:
        """Current number of buffered entries (not a lifetime counter)."""
        return len(self._entries)

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[LogEntry]:
        return iter(list(self._entries))


@lru_cache(maxsize=1)
def get_log_buffer() -> LogBuffer:
    """Get the process-wide LogBuffer (created empty on first use)."""
    return LogBuffer()


def reset_log_buffer() -> None:
    """Drop the process-wide buffer. Used by tests."""
    get_log_buffer.cache_clear()
