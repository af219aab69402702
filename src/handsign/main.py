"""
Hand Sign Translator - Main Application
=========================================

Entry point. Wires camera, MediaPipe detection, the session controller and
the OpenCV overlay into one frame loop.
"""

import argparse
import logging
import signal
import sys
from typing import Iterator, Optional, Tuple

import cv2
import numpy as np

from .capture.camera import Camera, Frame
from .config import AppConfig, load_config
from .detection.hand_detector import HandDetector
from .detection.landmarks import HandLandmarks
from .errors import ConfigError
from .recognition.gesture_classifier import GestureClassifier
from .session import events
from .session.clipboard import Clipboard
from .session.controller import SessionController
from .session.speech import Speaker
from .utils.logger import setup_logging
from .utils.visualization import Visualizer

logger = logging.getLogger(__name__)

WINDOW_NAME = "Hand Sign Translator"
NOTICE_DURATION_S = 3.0


class HandSignApplication:
    """
    Desktop application: camera in, message out.

    Keyboard controls are handled in the same loop as frame processing,
    so all session commands run on one thread.
    """

    def __init__(self, config: AppConfig):
        self.config = config

        self.camera = Camera(config.camera)
        self.detector = HandDetector(config.mediapipe)
        self.visualizer = Visualizer(config.visualization)
        self.controller = SessionController(
            classifier=GestureClassifier(config.recognition),
            hold_config=config.hold,
            camera=self.camera,
            clipboard=Clipboard(),
            speaker=Speaker(config.speech),
        )

        self._running = False
        self._notice = ""
        self._notice_until = 0.0
        self._last_hand: Optional[HandLandmarks] = None

        self.controller.bus.subscribe(events.CAMERA_ERROR, self._on_camera_error)
        self.controller.bus.subscribe(events.WORD_COMMITTED, self._on_word_committed)

    def _show_notice(self, text: str) -> None:
        self._notice = text
        self._notice_until = self.controller.now() + NOTICE_DURATION_S

    def _on_camera_error(self, error) -> None:
        self._show_notice("Unable to access camera")

    def _on_word_committed(self, word: str, message: str) -> None:
        self._show_notice(word)

    def run(self) -> None:
        """Run until the user quits."""
        if not self.detector.start():
            logger.error("Hand detector could not be started")
            return

        signal.signal(signal.SIGINT, self._signal_handler)
        signal.signal(signal.SIGTERM, self._signal_handler)

        self._running = True
        self.controller.start()

        try:
            while self._running:
                self._idle_until_started()
                if not self._running:
                    break
                self.controller.run(self._frames())
        finally:
            self.controller.stop()
            self.detector.stop()
            if self.controller.speaker is not None:
                self.controller.speaker.close()
            cv2.destroyAllWindows()
            logger.info("Words formed this run: %d", self.controller.state.word_count)

    def _frames(self) -> Iterator[Tuple[float, Optional[HandLandmarks]]]:
        """Yield (timestamp_ms, hand) for each new camera frame."""
        while self._running and self.controller.is_detecting:
            frame = self.camera.read()
            if frame is None:
                self._handle_key(cv2.waitKey(1) & 0xFF)
                continue

            hand = self.detector.detect_first(frame.rgb, int(frame.timestamp_ms))
            self._last_hand = hand
            yield frame.timestamp_ms, hand

            self._render(frame)
            self._handle_key(cv2.waitKey(1) & 0xFF)

    def _idle_until_started(self) -> None:
        """Show a blank screen while the session is stopped."""
        blank = np.zeros((self.config.camera.height, self.config.camera.width, 3), dtype=np.uint8)
        while self._running and not self.controller.is_detecting:
            display = blank.copy()
            self.visualizer.draw_status(display, "Press 's' to start the camera")
            self._draw_overlay(display)
            cv2.imshow(WINDOW_NAME, display)
            self._handle_key(cv2.waitKey(50) & 0xFF)

    def _render(self, frame: Frame) -> None:
        display = frame.image.copy()
        if self._last_hand is not None:
            self.visualizer.draw_hand(display, self._last_hand)
        self.visualizer.draw_classification(display, self.controller.state.current)
        self._draw_overlay(display)
        cv2.imshow(WINDOW_NAME, display)

    def _draw_overlay(self, display: np.ndarray) -> None:
        stats = self.controller.stats()
        self.visualizer.draw_stats(display, stats)
        self.visualizer.draw_help(display)
        self.visualizer.draw_message(display, stats.message)
        if self._notice and self.controller.now() < self._notice_until:
            self.visualizer.draw_status(display, self._notice)

    def _handle_key(self, key: int) -> None:
        if key in (ord("q"), 27):
            self._running = False
        elif key == ord("s"):
            self.controller.start()
        elif key == ord("x"):
            self.controller.stop()
        elif key == ord("c"):
            self.controller.clear_message()
        elif key == ord("y"):
            if self.controller.copy_message():
                self._show_notice("Message copied!")
        elif key == ord("v"):
            self.controller.speak_message()
        elif key == ord("f"):
            self.controller.switch_camera()

    def _signal_handler(self, signum, frame) -> None:
        logger.info(f"Received signal {signum}, shutting down...")
        self._running = False


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Translate static hand signs into words",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Gestures (hold ~1s to add the word):
  thumb up -> YES      open palm -> HELLO   peace -> PEACE
  OK sign  -> OKAY     index up  -> WAIT    fist  -> STOP
  rock     -> ROCK     call      -> CALL

Keyboard Controls:
  s start  x stop  c clear  y copy  v speak  f switch camera  q/ESC quit
        """,
    )
    parser.add_argument("--config", "-c", default=None, help="Path to configuration file")
    parser.add_argument("--camera", type=int, default=None, help="Front camera device index")
    parser.add_argument("--no-mirror", action="store_true", help="Do not mirror the front camera")
    parser.add_argument("--debug", "-d", action="store_true", help="Enable debug logging")
    return parser.parse_args(argv)


def main(argv=None) -> int:
    """Main entry point."""
    args = parse_args(argv)

    overrides = {"camera": {}}
    if args.camera is not None:
        overrides["camera"]["front_device_id"] = args.camera
    if args.no_mirror:
        overrides["camera"]["flip_horizontal"] = False

    try:
        config = load_config(args.config, overrides=overrides)
    except ConfigError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 2

    setup_logging(
        level="DEBUG" if args.debug else config.logging.level,
        log_file=config.logging.file or None,
        max_size_mb=config.logging.max_size_mb,
        backup_count=config.logging.backup_count,
    )

    HandSignApplication(config).run()
    return 0


if __name__ == "__main__":
    sys.exit(main())
