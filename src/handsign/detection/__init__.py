"""Hand landmark types and MediaPipe detection."""
from .landmarks import (
    FINGERTIPS,
    HAND_CONNECTIONS,
    NUM_LANDMARKS,
    HandLandmarks,
    Landmark,
    LandmarkIndex,
)

# HandDetector lives in .hand_detector and pulls in MediaPipe on import.

__all__ = [
    "FINGERTIPS",
    "HAND_CONNECTIONS",
    "NUM_LANDMARKS",
    "HandLandmarks",
    "Landmark",
    "LandmarkIndex",
]
