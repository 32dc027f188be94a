"""Unique, strictly increasing "current" timestamps for formatted records."""

import threading
from datetime import datetime, timedelta
from typing import Callable, Optional

ISO8601_FORMAT = "%Y-%m-%dT%H:%M:%S.%f"
PLAIN_FORMAT = "%Y-%m-%d %H:%M:%S.%f"


class UniqueTimestamp:
    """Generates microsecond timestamps that never repeat within a process."""

    def __init__(self, clock: Optional[Callable[[], datetime]] = None) -> None:
        self._clock = clock or datetime.now
        self._last: Optional[datetime] = None
        self._lock = threading.Lock()

    def next(self) -> datetime:
        with self._lock:
            now = self._clock()
            if self._last is not None and now <= self._last:
                now = self._last + timedelta(microseconds=1)
            self._last = now
            return now

    def generate(self, iso8601: bool = True) -> str:
        return self.next().strftime(ISO8601_FORMAT if iso8601 else PLAIN_FORMAT)
