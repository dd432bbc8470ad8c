from __future__ import annotations

import re
import threading
import time
from typing import Callable

from hiretrack.utils.errors import ApiError

_LIMIT_RE = re.compile(r"^\s*(\d+)\s+per\s+minute\s*$", re.IGNORECASE)


class InMemoryRateLimiter:
    """Fixed one-minute windows per key. Per process only; each gunicorn worker counts on its own.

    Only counters of the current window are kept; older ones are dropped when
    the window rolls over.
    """

    def __init__(
        self,
        *,
        window_seconds: int = 60,
        max_keys: int = 50_000,
        clock: Callable[[], float] = time.time,
    ):
        self._window_seconds = window_seconds
        self._max_keys = max_keys
        self._clock = clock
        self._lock = threading.Lock()
        self._store: dict[str, tuple[int, int]] = {}
        self._current_window = -1

    def __len__(self) -> int:
        with self._lock:
            return len(self._store)

    @staticmethod
    def parse_limit(limit: str, default: int = 300) -> int:
        m = _LIMIT_RE.match(str(limit or ""))
        if not m:
            return default
        return max(1, int(m.group(1)))

    def check(self, key: str, limit: str) -> None:
        max_per_window = self.parse_limit(limit)
        window_id = int(self._clock() // self._window_seconds)

        with self._lock:
            if window_id != self._current_window:
                self._current_window = window_id
                self._store = {k: v for k, v in self._store.items() if v[0] >= window_id}
            if len(self._store) > self._max_keys:
                self._store.clear()

            window, count = self._store.get(key, (window_id, 0))
            if window != window_id:
                window, count = window_id, 0
            count += 1
            self._store[key] = (window, count)

        if count > max_per_window:
            raise ApiError("RATE_LIMITED", "Rate limit exceeded", status=429, details={"limit": limit})

    def clear(self) -> None:
        with self._lock:
            self._store.clear()
