"""
Hold Tracker
=============

Turns the per-frame classification stream into discrete words. A gesture
must be seen on consecutive frames for longer than the hold duration before
its word is committed; holding it further commits it again after every
additional hold duration.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from .gesture_classifier import GestureLabel

logger = logging.getLogger(__name__)

HOLD_DURATION_MS = 800.0


@dataclass
class HoldTrackerConfig:
    """Hold tracker configuration."""
    hold_duration_ms: float = HOLD_DURATION_MS
    rate_window_ms: float = 60_000.0

    @classmethod
    def from_dict(cls, config: dict) -> "HoldTrackerConfig":
        """Create config from dictionary."""
        return cls(
            hold_duration_ms=config.get("hold_duration_ms", HOLD_DURATION_MS),
            rate_window_ms=config.get("rate_window_ms", 60_000.0),
        )


@dataclass(frozen=True)
class HoldUpdate:
    """Outcome of observing one frame."""
    label: GestureLabel
    changed: bool = False
    started: bool = False
    committed_word: Optional[str] = None

    @property
    def committed(self) -> bool:
        return self.committed_word is not None


class HoldTracker:
    """
    Debounces gestures by hold time.

    The tracked label always follows the latest frame; there is no
    smoothing, so a single NONE frame restarts the hold window.

    Example:
        >>> tracker = HoldTracker()
        >>> tracker.observe(GestureLabel.FIST, 0).started
        True
        >>> tracker.observe(GestureLabel.FIST, 801).committed_word
        'STOP'
    """

    def __init__(self, config: Optional[HoldTrackerConfig] = None):
        self.config = config or HoldTrackerConfig()
        self._last_label = GestureLabel.NONE
        self._hold_start_ms = 0.0

    @property
    def last_label(self) -> GestureLabel:
        return self._last_label

    @property
    def hold_start_ms(self) -> float:
        return self._hold_start_ms

    def held_for_ms(self, now_ms: float) -> float:
        """How long the current gesture has been held since the last reset."""
        if self._last_label.is_none:
            return 0.0
        return max(0.0, now_ms - self._hold_start_ms)

    def observe(self, label: GestureLabel, now_ms: float) -> HoldUpdate:
        """
        Feed one frame's label.

        Args:
            label: Classified gesture for this frame
            now_ms: Monotonic timestamp in milliseconds

        Returns:
            HoldUpdate describing whether a gesture started or a word was committed
        """
        if label != self._last_label:
            self._last_label = label
            self._hold_start_ms = now_ms
            return HoldUpdate(label=label, changed=True, started=not label.is_none)

        if not label.is_none and now_ms - self._hold_start_ms > self.config.hold_duration_ms:
            self._hold_start_ms = now_ms
            logger.debug(f"Hold complete for {label.value}")
            return HoldUpdate(label=label, committed_word=label.word)

        return HoldUpdate(label=label)

    def reset(self) -> None:
        """Forget the current hold."""
        self._last_label = GestureLabel.NONE
        self._hold_start_ms = 0.0
