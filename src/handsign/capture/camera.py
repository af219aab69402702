"""
Camera Capture Module
======================

OpenCV camera capture with an optional background thread that keeps only
the latest frame. Supports switching between a front ("user") and back
("environment") device.
"""

import logging
import threading
import time
from collections import deque
from dataclasses import dataclass
from typing import List, Optional, Tuple

import cv2
import numpy as np

from ..errors import CameraError

logger = logging.getLogger(__name__)

FACING_USER = "user"
FACING_ENVIRONMENT = "environment"


@dataclass
class CameraConfig:
    """Camera configuration settings."""
    front_device_id: int = 0
    back_device_id: int = 1
    facing_mode: str = FACING_USER
    width: int = 1280
    height: int = 720
    fps: int = 30
    buffer_size: int = 1  # Minimal buffering for low latency
    threaded: bool = True
    flip_horizontal: bool = True
    warmup_frames: int = 5

    @classmethod
    def from_dict(cls, config: dict) -> "CameraConfig":
        """Create config from dictionary (YAML parsed)."""
        return cls(
            front_device_id=config.get("front_device_id", 0),
            back_device_id=config.get("back_device_id", 1),
            facing_mode=config.get("facing_mode", FACING_USER),
            width=config.get("width", 1280),
            height=config.get("height", 720),
            fps=config.get("fps", 30),
            buffer_size=config.get("buffer_size", 1),
            threaded=config.get("threaded", True),
            flip_horizontal=config.get("flip_horizontal", True),
            warmup_frames=config.get("warmup_frames", 5),
        )

    @property
    def device_id(self) -> int:
        """Device index for the current facing mode."""
        if self.facing_mode == FACING_ENVIRONMENT:
            return self.back_device_id
        return self.front_device_id


@dataclass
class Frame:
    """Captured frame with metadata."""
    image: np.ndarray
    timestamp: float  # time.monotonic() seconds
    frame_number: int

    @property
    def rgb(self) -> np.ndarray:
        """Convert BGR to RGB."""
        return cv2.cvtColor(self.image, cv2.COLOR_BGR2RGB)

    @property
    def timestamp_ms(self) -> float:
        return self.timestamp * 1000.0


def probe_devices(max_index: int = 5) -> List[int]:
    """Return the indices of cameras that open and deliver a frame."""
    working = []
    for device_id in range(max_index):
        cap = cv2.VideoCapture(device_id)
        try:
            if not cap.isOpened():
                continue
            ret, frame = cap.read()
            if ret and frame is not None:
                working.append(device_id)
        finally:
            cap.release()
    return working


class Camera:
    """
    Camera capture with optional threading.

    Example:
        >>> with Camera(CameraConfig()) as camera:
        ...     frame = camera.read()
        ...     if frame:
        ...         process(frame.image)
    """

    def __init__(self, config: Optional[CameraConfig] = None):
        self.config = config or CameraConfig()
        self._cap: Optional[cv2.VideoCapture] = None
        self._frame_number = 0
        self._running = False

        self._thread: Optional[threading.Thread] = None
        self._lock = threading.Lock()
        self._latest_frame: Optional[Frame] = None

        self._capture_times = deque(maxlen=30)  # type: deque

    def start(self) -> None:
        """
        Open the device for the current facing mode.

        Raises:
            CameraError: if the device cannot be opened or yields no frames
        """
        device_id = self.config.device_id
        logger.info("Starting camera (device={}, facing={}, {}x{}@{}fps)".format(
            device_id, self.config.facing_mode, self.config.width,
            self.config.height, self.config.fps))

        cap = cv2.VideoCapture(device_id)
        if not cap.isOpened():
            cap.release()
            raise CameraError(device_id, "device could not be opened")

        cap.set(cv2.CAP_PROP_FRAME_WIDTH, self.config.width)
        cap.set(cv2.CAP_PROP_FRAME_HEIGHT, self.config.height)
        cap.set(cv2.CAP_PROP_FPS, self.config.fps)
        cap.set(cv2.CAP_PROP_BUFFERSIZE, self.config.buffer_size)

        ret, test_frame = cap.read()
        if not ret or test_frame is None:
            cap.release()
            raise CameraError(device_id, "device opened but delivered no frames")

        self._cap = cap
        logger.info("Camera initialized: {}x{}@{}fps".format(
            int(cap.get(cv2.CAP_PROP_FRAME_WIDTH)),
            int(cap.get(cv2.CAP_PROP_FRAME_HEIGHT)),
            cap.get(cv2.CAP_PROP_FPS)))

        for _ in range(self.config.warmup_frames):
            cap.read()

        self._running = True
        self._frame_number = 0
        self._latest_frame = None

        if self.config.threaded:
            self._thread = threading.Thread(target=self._capture_loop, daemon=True)
            self._thread.start()

    def stop(self) -> None:
        """Stop capture and release the device."""
        self._running = False

        if self._thread:
            self._thread.join(timeout=1.0)
            self._thread = None

        if self._cap:
            self._cap.release()
            self._cap = None
            logger.info("Camera stopped")

        with self._lock:
            self._latest_frame = None

    def switch_facing(self) -> str:
        """
        Toggle between front and back device. Restarts capture if running.

        Returns:
            The new facing mode
        """
        was_running = self._running
        if was_running:
            self.stop()

        if self.config.facing_mode == FACING_USER:
            self.config.facing_mode = FACING_ENVIRONMENT
        else:
            self.config.facing_mode = FACING_USER
        logger.info(f"Camera facing mode: {self.config.facing_mode}")

        if was_running:
            self.start()
        return self.config.facing_mode

    def read(self) -> Optional[Frame]:
        """
        Read the latest frame.

        In threaded mode, returns the most recent captured frame.
        In synchronous mode, captures a new frame.
        """
        if not self._running:
            return None

        if self.config.threaded:
            with self._lock:
                frame, self._latest_frame = self._latest_frame, None
            return frame
        return self._capture_frame()

    def _capture_frame(self) -> Optional[Frame]:
        if not self._cap:
            return None

        start_time = time.perf_counter()
        ret, image = self._cap.read()
        capture_time = time.perf_counter() - start_time

        if not ret or image is None:
            logger.warning("Failed to capture frame")
            return None

        # Mirror for the front camera so movement feels natural
        if self.config.flip_horizontal and self.config.facing_mode == FACING_USER:
            image = cv2.flip(image, 1)

        self._frame_number += 1
        self._capture_times.append(capture_time)

        return Frame(
            image=image,
            timestamp=time.monotonic(),
            frame_number=self._frame_number,
        )

    def _capture_loop(self) -> None:
        """Background thread for continuous frame capture."""
        while self._running:
            frame = self._capture_frame()
            if frame:
                with self._lock:
                    self._latest_frame = frame

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def resolution(self) -> Tuple[int, int]:
        return (self.config.width, self.config.height)

    @property
    def avg_capture_time_ms(self) -> float:
        """Average frame capture time in milliseconds."""
        if not self._capture_times:
            return 0.0
        return (sum(self._capture_times) / len(self._capture_times)) * 1000

    def __enter__(self):
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.stop()
        return False
