"""
Session Controller
===================

Single owner of the session state. Frames from the landmark source and
commands from the user (clear, copy, speak, camera control) all pass
through here, and every state change happens under one lock.
"""

import logging
import threading
import time
from typing import Callable, Iterable, Optional, Tuple

from ..capture.camera import Camera
from ..detection.landmarks import HandLandmarks
from ..errors import CameraError
from ..recognition.detection_rate import DetectionRateCounter
from ..recognition.gesture_classifier import Classification, GestureClassifier, NO_GESTURE
from ..recognition.hold_tracker import HoldTracker, HoldTrackerConfig
from ..utils.logger import WordLogger
from . import events
from .clipboard import Clipboard
from .events import EventBus
from .speech import Speaker
from .state import SessionState, SessionStats

logger = logging.getLogger(__name__)

FrameInput = Tuple[float, Optional[HandLandmarks]]


class SessionController:
    """
    Drives classification and hold tracking for one user session.

    Example:
        >>> controller = SessionController()
        >>> controller.bus.subscribe(events.WORD_COMMITTED, lambda word, message: print(message))
        >>> controller.start()
        >>> for now_ms, hand in frames:
        ...     controller.observe_frame(hand, now_ms)
    """

    def __init__(
        self,
        classifier: Optional[GestureClassifier] = None,
        hold_config: Optional[HoldTrackerConfig] = None,
        bus: Optional[EventBus] = None,
        camera: Optional[Camera] = None,
        clipboard: Optional[Clipboard] = None,
        speaker: Optional[Speaker] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        hold_config = hold_config or HoldTrackerConfig()
        self.classifier = classifier or GestureClassifier()
        self.tracker = HoldTracker(hold_config)
        self.rate_counter = DetectionRateCounter(hold_config.rate_window_ms)
        self.bus = bus or EventBus()
        self.camera = camera
        self.clipboard = clipboard
        self.speaker = speaker
        self.state = SessionState()
        self.word_logger = WordLogger()

        self._clock = clock
        self._lock = threading.RLock()
        self._starting = False
        self._stop_requested = False

    def now(self) -> float:
        """Current time on the session clock, in seconds."""
        return self._clock()

    # --- Session lifecycle ---

    @property
    def is_detecting(self) -> bool:
        return self.state.detecting

    def start(self) -> bool:
        """
        Acquire the camera and begin detecting.

        Returns:
            True if the session is running. On camera failure the session
            stays stopped and a camera_error event is emitted.
        """
        with self._lock:
            if self._starting or self.state.detecting:
                logger.debug("Start ignored, session already starting or running")
                return self.state.detecting
            self._starting = True
            self._stop_requested = False

        try:
            if self.camera is not None:
                self.camera.start()
        except CameraError as e:
            logger.error(f"{e}. Check camera permissions and try again.")
            with self._lock:
                self._starting = False
            self.bus.emit(events.CAMERA_ERROR, error=e)
            return False

        with self._lock:
            self._starting = False
            cancelled = self._stop_requested
            self._stop_requested = False
            if not cancelled:
                self.state.detecting = True
                if self.state.started_at is None:
                    self.state.started_at = self._clock()

        if cancelled:
            # stop() arrived while the camera was opening
            logger.info("Session start cancelled by stop")
            if self.camera is not None:
                self.camera.stop()
            return False

        logger.info("Session started")
        self.bus.emit(events.SESSION_STARTED)
        return True

    def stop(self) -> None:
        """
        Release the camera and reset the hold state. The message is kept.

        A stop issued while start() is still opening the camera cancels
        that start.
        """
        with self._lock:
            if self._starting:
                self._stop_requested = True
            was_detecting = self.state.detecting
            self.state.detecting = False
            self.state.started_at = None
            self.state.current = NO_GESTURE
            self.tracker.reset()

        if self.camera is not None:
            self.camera.stop()

        if was_detecting:
            logger.info("Session stopped")
            self.bus.emit(events.SESSION_STOPPED)

    def switch_camera(self) -> bool:
        """
        Toggle between front and back camera.

        Returns:
            True if the switch succeeded (or there is no camera to restart)
        """
        if self.camera is None:
            return False
        try:
            self.camera.switch_facing()
        except CameraError as e:
            logger.error(f"Camera switch failed: {e}")
            self.stop()
            self.bus.emit(events.CAMERA_ERROR, error=e)
            return False
        with self._lock:
            self.tracker.reset()
        return True

    # --- Frame processing ---

    def observe_frame(self, hand: Optional[HandLandmarks], now_ms: float) -> Classification:
        """
        Process one frame from the landmark source.

        Args:
            hand: First detected hand, or None if no hand was found
            now_ms: Monotonic frame timestamp in milliseconds

        Returns:
            The frame's classification
        """
        classification = self.classifier.classify(hand)

        with self._lock:
            self.state.current = classification
            update = self.tracker.observe(classification.label, now_ms)

            if update.started:
                self.state.gesture_count += 1

            if update.committed:
                self.state.message.append(update.committed_word)
                self.state.word_count += 1

            rate = None
            if not classification.is_none:
                rate = self.rate_counter.record(now_ms)
            else:
                # Let old detections age out while nothing is recognized
                expired = self.rate_counter.rate(now_ms)
                if expired != self.state.detection_rate:
                    rate = expired
            if rate is not None:
                self.state.detection_rate = rate

            message_text = self.state.message.text

        if hand is None:
            self.bus.emit(events.NO_HAND_DETECTED)

        if update.started:
            self.word_logger.log_gesture(classification.label.value, classification.confidence)
            self.bus.emit(
                events.GESTURE_STARTED,
                label=classification.label,
                word=classification.word,
                confidence=classification.confidence,
            )

        if update.committed:
            self.word_logger.log_word(update.committed_word, message_text)
            self.bus.emit(events.WORD_COMMITTED, word=update.committed_word, message=message_text)

        if rate is not None:
            self.bus.emit(events.DETECTION_RATE_UPDATED, count_per_minute=rate)

        return classification

    def run(self, frames: Iterable[FrameInput]) -> int:
        """
        Consume (timestamp_ms, hand) pairs until the iterable ends or the
        session stops.

        Returns:
            Number of frames processed
        """
        processed = 0
        for now_ms, hand in frames:
            if not self.state.detecting:
                break
            self.observe_frame(hand, now_ms)
            processed += 1
        return processed

    # --- User commands ---

    def clear_message(self) -> None:
        """Empty the message and reset the word counter."""
        with self._lock:
            self.state.clear_message()
        logger.info("Message cleared")
        self.bus.emit(events.MESSAGE_CLEARED)

    def message_text(self) -> str:
        with self._lock:
            return self.state.message.text

    def copy_message(self) -> bool:
        """Copy the message to the system clipboard."""
        text = self.message_text()
        if not text or self.clipboard is None:
            return False
        copied = self.clipboard.copy(text)
        if copied:
            logger.info("Message copied!")
        return copied

    def speak_message(self) -> bool:
        """Read the message aloud without blocking."""
        text = self.message_text()
        if not text or self.speaker is None:
            return False
        return self.speaker.speak(text)

    # --- Statistics ---

    def stats(self, now: Optional[float] = None) -> SessionStats:
        """Snapshot of counters for display."""
        now = self._clock() if now is None else now
        with self._lock:
            return SessionStats(
                total_gestures=self.state.gesture_count,
                words_formed=self.state.word_count,
                detection_rate=self.state.detection_rate,
                elapsed_s=self.state.elapsed_s(now),
                current_word=self.state.current_word,
                confidence=self.state.current.confidence,
                message=self.state.message.display_text,
            )
