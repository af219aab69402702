"""
Hand Detection Module - MediaPipe Tasks API
============================================

Wraps the MediaPipe HandLandmarker and converts its results into
HandLandmarks. Only the first detected hand is used downstream.
"""

import logging
import urllib.request
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

import mediapipe as mp
import numpy as np
from mediapipe.tasks import python
from mediapipe.tasks.python import vision

from .landmarks import HandLandmarks, Landmark

logger = logging.getLogger(__name__)

HAND_LANDMARKER_MODEL_URL = "https://storage.googleapis.com/mediapipe-models/hand_landmarker/hand_landmarker/float16/1/hand_landmarker.task"
DEFAULT_MODEL_PATH = Path.home() / ".cache" / "handsign" / "hand_landmarker.task"


@dataclass
class HandDetectorConfig:
    """Configuration for hand detector."""
    model_path: str = ""
    max_num_hands: int = 1
    min_detection_confidence: float = 0.6
    min_tracking_confidence: float = 0.6
    min_presence_confidence: float = 0.5
    running_mode: str = "VIDEO"  # IMAGE or VIDEO

    @classmethod
    def from_dict(cls, d: dict) -> "HandDetectorConfig":
        """Create config from dictionary."""
        return cls(
            model_path=d.get("model_path", ""),
            max_num_hands=d.get("max_num_hands", 1),
            min_detection_confidence=d.get("min_detection_confidence", 0.6),
            min_tracking_confidence=d.get("min_tracking_confidence", 0.6),
            min_presence_confidence=d.get("min_presence_confidence", 0.5),
            running_mode=d.get("running_mode", "VIDEO"),
        )


def download_model(url: str, save_path: Path) -> bool:
    """
    Fetch the hand landmarker model into save_path.

    The file is written next to its final location and renamed when
    complete, so an interrupted download never leaves a truncated model.
    """
    if save_path.exists():
        return True

    partial = save_path.with_suffix(save_path.suffix + ".part")
    try:
        save_path.parent.mkdir(parents=True, exist_ok=True)
        logger.info(f"Downloading hand landmarker model to {save_path}...")
        urllib.request.urlretrieve(url, partial)
        partial.replace(save_path)
    except OSError as e:
        logger.error(f"Failed to download model: {e}")
        if partial.exists():
            partial.unlink()
        return False

    logger.info("Model download complete")
    return True


def hands_from_result(result, image_width: int, image_height: int) -> List[HandLandmarks]:
    """Convert a HandLandmarkerResult into HandLandmarks, in detection order."""
    hands = []
    for i, points in enumerate(result.hand_landmarks):
        handedness, score = "Right", 0.0
        if result.handedness and i < len(result.handedness):
            category = result.handedness[i][0]
            handedness, score = category.category_name, category.score

        hands.append(HandLandmarks(
            landmarks=[Landmark(p.x, p.y, p.z) for p in points],
            handedness=handedness,
            confidence=score,
            image_width=image_width,
            image_height=image_height,
        ))
    return hands


class HandDetector:
    """
    Landmark source for the session: one MediaPipe HandLandmarker.

    In VIDEO mode MediaPipe requires strictly increasing timestamps, so
    repeated or out-of-order frame times are nudged forward by 1 ms.

    Example:
        >>> with HandDetector(HandDetectorConfig()) as detector:
        ...     hand = detector.detect_first(frame.rgb, int(frame.timestamp_ms))
    """

    def __init__(self, config: Optional[HandDetectorConfig] = None):
        self.config = config or HandDetectorConfig()
        self._landmarker = None
        self._last_timestamp_ms = -1

    @property
    def model_path(self) -> Path:
        return Path(self.config.model_path) if self.config.model_path else DEFAULT_MODEL_PATH

    @property
    def video_mode(self) -> bool:
        return self.config.running_mode.upper() != "IMAGE"

    def start(self) -> bool:
        """
        Load the model and create the landmarker.

        Returns:
            False if the model is missing and cannot be downloaded, or
            MediaPipe rejects it
        """
        model_path = self.model_path
        if not download_model(HAND_LANDMARKER_MODEL_URL, model_path):
            logger.error("Could not obtain hand landmarker model")
            return False

        options = vision.HandLandmarkerOptions(
            base_options=python.BaseOptions(model_asset_path=str(model_path)),
            running_mode=vision.RunningMode.VIDEO if self.video_mode else vision.RunningMode.IMAGE,
            num_hands=self.config.max_num_hands,
            min_hand_detection_confidence=self.config.min_detection_confidence,
            min_hand_presence_confidence=self.config.min_presence_confidence,
            min_tracking_confidence=self.config.min_tracking_confidence,
        )

        try:
            self._landmarker = vision.HandLandmarker.create_from_options(options)
        except (RuntimeError, ValueError) as e:
            logger.error(f"Failed to initialize HandLandmarker: {e}")
            return False

        self._last_timestamp_ms = -1
        logger.info(f"HandLandmarker ready ({self.config.running_mode}, model: {model_path})")
        return True

    def stop(self) -> None:
        if self._landmarker is not None:
            self._landmarker.close()
            self._landmarker = None
            logger.info("HandLandmarker stopped")

    @property
    def is_running(self) -> bool:
        return self._landmarker is not None

    def detect(self, image: np.ndarray, timestamp_ms: int) -> List[HandLandmarks]:
        """
        Find hands in an RGB frame.

        Args:
            image: RGB image (H, W, 3)
            timestamp_ms: Monotonic frame time in milliseconds

        Returns:
            Detected hands, empty when none are found or the detector is stopped
        """
        if self._landmarker is None:
            logger.warning("HandLandmarker not initialized. Call start() first.")
            return []

        mp_image = mp.Image(image_format=mp.ImageFormat.SRGB, data=image)
        if self.video_mode:
            timestamp_ms = max(int(timestamp_ms), self._last_timestamp_ms + 1)
            self._last_timestamp_ms = timestamp_ms
            result = self._landmarker.detect_for_video(mp_image, timestamp_ms)
        else:
            result = self._landmarker.detect(mp_image)

        height, width = image.shape[:2]
        return hands_from_result(result, width, height)

    def detect_first(self, image: np.ndarray, timestamp_ms: int) -> Optional[HandLandmarks]:
        """The first detected hand, or None."""
        hands = self.detect(image, timestamp_ms)
        return hands[0] if hands else None

    def __enter__(self):
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.stop()
        return False
