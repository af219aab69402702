"""
Visualization Module
=====================

OpenCV overlays: hand skeleton, current word with confidence bar, session
statistics and the assembled message.
"""

from dataclasses import dataclass
from typing import List, Optional, Tuple

import cv2
import numpy as np

from ..detection.landmarks import FINGERTIPS, HAND_CONNECTIONS, HandLandmarks, LandmarkIndex
from ..recognition.gesture_classifier import Classification
from ..session.state import SessionStats


@dataclass
class VisualizerConfig:
    """Visualization settings."""
    show_landmarks: bool = True
    show_connections: bool = True
    show_stats: bool = True
    show_help: bool = True

    # Colors (BGR format)
    landmark_color: Tuple[int, int, int] = (68, 68, 239)      # Red
    connection_color: Tuple[int, int, int] = (246, 130, 59)   # Blue
    text_color: Tuple[int, int, int] = (255, 255, 255)        # White
    accent_color: Tuple[int, int, int] = (94, 197, 34)        # Green
    muted_color: Tuple[int, int, int] = (160, 160, 160)       # Grey

    font_scale: float = 0.7
    font_thickness: int = 2

    @classmethod
    def from_dict(cls, config: dict) -> "VisualizerConfig":
        """Create config from dictionary."""
        colors = config.get("colors", {})
        return cls(
            show_landmarks=config.get("show_landmarks", True),
            show_connections=config.get("show_connections", True),
            show_stats=config.get("show_stats", True),
            show_help=config.get("show_help", True),
            landmark_color=tuple(colors.get("landmarks", [68, 68, 239])),
            connection_color=tuple(colors.get("connections", [246, 130, 59])),
            text_color=tuple(colors.get("text", [255, 255, 255])),
            accent_color=tuple(colors.get("accent", [94, 197, 34])),
            muted_color=tuple(colors.get("muted", [160, 160, 160])),
            font_scale=config.get("font_scale", 0.7),
            font_thickness=config.get("font_thickness", 2),
        )


HELP_LINES = [
    "s: start   x: stop",
    "c: clear   y: copy",
    "v: speak   f: flip cam",
    "q: quit",
]


class Visualizer:
    """
    Draws the translator overlay onto BGR frames in place.

    Example:
        >>> viz = Visualizer()
        >>> viz.draw_hand(frame.image, hand)
        >>> viz.draw_classification(frame.image, classification)
        >>> viz.draw_stats(frame.image, controller.stats())
    """

    def __init__(self, config: Optional[VisualizerConfig] = None):
        self.config = config or VisualizerConfig()
        self._font = cv2.FONT_HERSHEY_SIMPLEX

    def draw_hand(self, image: np.ndarray, hand: HandLandmarks) -> np.ndarray:
        """Draw landmarks and skeleton of one hand."""
        if not hand.is_complete:
            return image

        height, width = image.shape[:2]

        if self.config.show_connections:
            for start_idx, end_idx in HAND_CONNECTIONS:
                start = hand.get(LandmarkIndex(start_idx)).to_pixel(width, height)
                end = hand.get(LandmarkIndex(end_idx)).to_pixel(width, height)
                cv2.line(image, start, end, self.config.connection_color, 4)

        if self.config.show_landmarks:
            for i, lm in enumerate(hand.landmarks):
                radius = 8 if i in FINGERTIPS else 6
                cv2.circle(image, lm.to_pixel(width, height), radius, self.config.landmark_color, -1)

        return image

    def draw_classification(
        self,
        image: np.ndarray,
        classification: Classification,
        position: Optional[Tuple[int, int]] = None,
    ) -> np.ndarray:
        """Draw the current word and a confidence bar (bottom-left by default)."""
        height, width = image.shape[:2]
        x, y = position or (20, height - 90)

        word = classification.word or "None"
        color = self.config.muted_color if classification.is_none else self.config.accent_color
        cv2.putText(image, f"Gesture: {word}", (x, y),
                    self._font, self.config.font_scale, color, self.config.font_thickness)

        bar_width = 200
        bar_top = y + 12
        cv2.rectangle(image, (x, bar_top), (x + bar_width, bar_top + 10), self.config.muted_color, 1)
        filled = int(bar_width * classification.confidence / 100)
        if filled > 0:
            cv2.rectangle(image, (x, bar_top), (x + filled, bar_top + 10), color, -1)
        cv2.putText(image, f"{classification.confidence}%", (x + bar_width + 10, bar_top + 10),
                    self._font, 0.5, self.config.text_color, 1)

        return image

    def draw_stats(self, image: np.ndarray, stats: SessionStats) -> np.ndarray:
        """Draw the statistics panel in the top-left corner."""
        if not self.config.show_stats:
            return image

        lines = [
            f"Session: {stats.elapsed_text}",
            f"Rate: {stats.detection_rate}/min",
            f"Gestures: {stats.total_gestures}",
            f"Words: {stats.words_formed}",
        ]
        x, y = 20, 30
        for line in lines:
            cv2.putText(image, line, (x, y), self._font, 0.6, self.config.text_color, 1)
            y += 25
        return image

    def draw_message(self, image: np.ndarray, message: str) -> np.ndarray:
        """Draw the message on a dark strip along the bottom edge."""
        height, width = image.shape[:2]
        strip_top = height - 40
        overlay = image.copy()
        cv2.rectangle(overlay, (0, strip_top), (width, height), (0, 0, 0), -1)
        cv2.addWeighted(overlay, 0.6, image, 0.4, 0, dst=image)

        # Keep the tail of long messages visible
        text = message
        while len(text) > 4:
            text_w = cv2.getTextSize(text, self._font, self.config.font_scale, 1)[0][0]
            if text_w <= width - 40:
                break
            text = "..." + text[4:]

        cv2.putText(image, text, (20, height - 12),
                    self._font, self.config.font_scale, self.config.text_color, 1)
        return image

    def draw_status(self, image: np.ndarray, status: str) -> np.ndarray:
        """Draw a large centered status line such as 'Camera stopped'."""
        height, width = image.shape[:2]
        font_scale = 1.2
        thickness = 2
        text_size = cv2.getTextSize(status, self._font, font_scale, thickness)[0]
        x = (width - text_size[0]) // 2
        y = (height + text_size[1]) // 2
        cv2.putText(image, status, (x + 2, y + 2), self._font, font_scale, (0, 0, 0), thickness + 2)
        cv2.putText(image, status, (x, y), self._font, font_scale, self.config.text_color, thickness)
        return image

    def draw_help(self, image: np.ndarray, lines: Optional[List[str]] = None) -> np.ndarray:
        """Draw key bindings in the top-right corner."""
        if not self.config.show_help:
            return image
        height, width = image.shape[:2]
        x = width - 230
        for i, line in enumerate(lines or HELP_LINES):
            cv2.putText(image, line, (x, 30 + i * 20), self._font, 0.5, self.config.muted_color, 1)
        return image
