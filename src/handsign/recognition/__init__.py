"""Gesture recognition module."""
from .gesture_classifier import (
    GESTURE_WORDS,
    Classification,
    FingerStates,
    GestureClassifier,
    GestureClassifierConfig,
    GestureLabel,
    classify,
    finger_states,
)
from .hold_tracker import HoldTracker, HoldTrackerConfig, HoldUpdate
from .detection_rate import DetectionRateCounter

__all__ = [
    "GESTURE_WORDS",
    "Classification",
    "FingerStates",
    "GestureClassifier",
    "GestureClassifierConfig",
    "GestureLabel",
    "classify",
    "finger_states",
    "HoldTracker",
    "HoldTrackerConfig",
    "HoldUpdate",
    "DetectionRateCounter",
]
