"""Rolling count of gesture detections over the last minute."""

from collections import deque
from typing import Deque


class DetectionRateCounter:
    """Counts detections whose timestamps fall inside a trailing window."""

    def __init__(self, window_ms: float = 60_000.0):
        self.window_ms = window_ms
        self._timestamps: Deque[float] = deque()

    def _prune(self, now_ms: float) -> None:
        while self._timestamps and now_ms - self._timestamps[0] >= self.window_ms:
            self._timestamps.popleft()

    def record(self, now_ms: float) -> int:
        """Add a detection at now_ms and return the current count."""
        self._timestamps.append(now_ms)
        self._prune(now_ms)
        return len(self._timestamps)

    def rate(self, now_ms: float) -> int:
        """Detections within the window ending at now_ms."""
        self._prune(now_ms)
        return len(self._timestamps)

    def reset(self) -> None:
        self._timestamps.clear()

    def __len__(self) -> int:
        return len(self._timestamps)
