"""
Publish/subscribe bus for session events.

The UI layer subscribes to these instead of reading session internals:

    bus = EventBus()
    bus.subscribe(WORD_COMMITTED, on_word)
    bus.emit(WORD_COMMITTED, word="YES", message="HELLO YES")
"""

import logging
import threading
from collections import defaultdict
from typing import Callable

logger = logging.getLogger(__name__)

GESTURE_STARTED = "gesture_started"
WORD_COMMITTED = "word_committed"
DETECTION_RATE_UPDATED = "detection_rate_updated"
NO_HAND_DETECTED = "no_hand_detected"
MESSAGE_CLEARED = "message_cleared"
SESSION_STARTED = "session_started"
SESSION_STOPPED = "session_stopped"
CAMERA_ERROR = "camera_error"


class EventBus:
    """Thread-safe synchronous event bus with priority ordering."""

    def __init__(self):
        self._listeners = defaultdict(list)  # event_name -> [(priority, callback)]
        self._lock = threading.Lock()

    def subscribe(self, event_name: str, callback: Callable, priority: int = 0):
        """Register a listener. Higher priority callbacks run first."""
        with self._lock:
            self._listeners[event_name].append((priority, callback))
            self._listeners[event_name].sort(key=lambda x: -x[0])

    def unsubscribe(self, event_name: str, callback: Callable):
        """Remove a listener for an event."""
        with self._lock:
            self._listeners[event_name] = [
                (p, cb) for p, cb in self._listeners[event_name] if cb is not callback
            ]

    def emit(self, event_name: str, **kwargs):
        """Call every listener of event_name with kwargs."""
        with self._lock:
            listeners = list(self._listeners.get(event_name, []))

        for _priority, callback in listeners:
            try:
                callback(**kwargs)
            except Exception:
                logger.exception("Event handler error [%s -> %s]",
                                 event_name, getattr(callback, "__name__", callback))

    def listener_count(self, event_name: str) -> int:
        with self._lock:
            return len(self._listeners.get(event_name, []))

    def clear(self, event_name: str = None):
        """Remove all listeners, optionally for a specific event."""
        with self._lock:
            if event_name:
                self._listeners.pop(event_name, None)
            else:
                self._listeners.clear()
