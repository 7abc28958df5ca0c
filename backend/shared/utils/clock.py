"""
UTC clock used for createdAt/updatedAt stamps.

Two writes in the same microsecond would otherwise receive equal stamps,
so each reading is at least one microsecond after the previous one.
"""

from __future__ import annotations

import threading
from datetime import datetime, timedelta, timezone
from typing import Callable


_TICK = timedelta(microseconds=1)


class MonotonicClock:
    """Strictly increasing, timezone-aware UTC timestamps."""

    def __init__(self, source: Callable[[], datetime] | None = None):
        self._source = source or (lambda: datetime.now(timezone.utc))
        self._last: datetime | None = None
        self._lock = threading.Lock()

    def now(self) -> datetime:
        with self._lock:
            current = self._source()
            if self._last is not None and current <= self._last:
                current = self._last + _TICK
            self._last = current
            return current

    __call__ = now


utc_now = MonotonicClock()
