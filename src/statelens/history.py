"""
Bounded change-history log.

Append-only ring buffer of ChangeEvents. Once capacity is reached each
append evicts the oldest entry, so memory stays flat no matter how long
the host app keeps updating.

Thread safety: Not thread-safe (all operations expected on the host
graph's notification thread).
"""

from collections import deque
import logging
from typing import Deque, Iterator, List, Optional

from statelens.config import DEFAULT_HISTORY_CAPACITY
from statelens.models import ChangeEvent

logger = logging.getLogger(__name__)


class HistoryLog:
    """FIFO log of the most recent ChangeEvents, oldest first."""

    def __init__(self, capacity: int = DEFAULT_HISTORY_CAPACITY):
        if capacity < 1:
            raise ValueError(f"History capacity must be positive, got {capacity}")
        self._events: Deque[ChangeEvent] = deque(maxlen=capacity)

    @property
    def capacity(self) -> int:
        return self._events.maxlen

    def append(self, event: ChangeEvent) -> None:
        """Append an event, evicting the oldest if the log is full."""
        if len(self._events) == self._events.maxlen:
            evicted = self._events[0]
            logger.debug(f"History full ({self.capacity}), evicting {evicted.cell_name} @ {evicted.timestamp}")
        self._events.append(event)

    def events(self) -> List[ChangeEvent]:
        """Copy of all retained events, oldest first."""
        return list(self._events)

    def for_cell(self, name: str) -> List[ChangeEvent]:
        """Retained events for one cell, oldest first."""
        return [event for event in self._events if event.cell_name == name]

    def last(self) -> Optional[ChangeEvent]:
        """Most recent event, or None if the log is empty."""
        return self._events[-1] if self._events else None

    def clear(self) -> None:
        self._events.clear()

    def __len__(self) -> int:
        return len(self._events)

    def __iter__(self) -> Iterator[ChangeEvent]:
        return iter(list(self._events))
