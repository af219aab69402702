"""
Hand Landmark Types
====================

Plain containers for the 21-point MediaPipe hand model. Kept free of the
MediaPipe import so the recognition core can be used on recorded frames.
"""

import math
from dataclasses import dataclass
from enum import IntEnum
from typing import List, NamedTuple, Sequence, Tuple

import numpy as np

NUM_LANDMARKS = 21


class LandmarkIndex(IntEnum):
    """Hand landmark indices following MediaPipe convention."""
    WRIST = 0
    THUMB_CMC = 1
    THUMB_MCP = 2
    THUMB_IP = 3
    THUMB_TIP = 4
    INDEX_MCP = 5
    INDEX_PIP = 6
    INDEX_DIP = 7
    INDEX_TIP = 8
    MIDDLE_MCP = 9
    MIDDLE_PIP = 10
    MIDDLE_DIP = 11
    MIDDLE_TIP = 12
    RING_MCP = 13
    RING_PIP = 14
    RING_DIP = 15
    RING_TIP = 16
    PINKY_MCP = 17
    PINKY_PIP = 18
    PINKY_DIP = 19
    PINKY_TIP = 20


FINGERTIPS = (
    LandmarkIndex.THUMB_TIP,
    LandmarkIndex.INDEX_TIP,
    LandmarkIndex.MIDDLE_TIP,
    LandmarkIndex.RING_TIP,
    LandmarkIndex.PINKY_TIP,
)

# Skeleton edges for drawing
HAND_CONNECTIONS = [
    (0, 1), (1, 2), (2, 3), (3, 4),        # Thumb
    (0, 5), (5, 6), (6, 7), (7, 8),        # Index
    (5, 9), (9, 10), (10, 11), (11, 12),   # Middle
    (9, 13), (13, 14), (14, 15), (15, 16), # Ring
    (13, 17), (17, 18), (18, 19), (19, 20), # Pinky
    (0, 17),                               # Palm base
]


class Landmark(NamedTuple):
    """A single landmark point with normalized coordinates."""
    x: float  # 0.0 to 1.0, normalized by image width
    y: float  # 0.0 to 1.0, normalized by image height, grows downward
    z: float = 0.0  # Depth relative to wrist, more negative = closer

    def to_pixel(self, width: int, height: int) -> Tuple[int, int]:
        """Convert normalized coordinates to pixel coordinates."""
        return (int(self.x * width), int(self.y * height))


@dataclass
class HandLandmarks:
    """One detected hand: 21 landmarks plus detector metadata."""
    landmarks: List[Landmark]
    handedness: str = "Right"  # "Left" or "Right"
    confidence: float = 1.0
    image_width: int = 1280
    image_height: int = 720

    @classmethod
    def from_points(cls, points: Sequence[Sequence[float]], **kwargs) -> "HandLandmarks":
        """Build from raw (x, y) or (x, y, z) tuples."""
        return cls(landmarks=[Landmark(*p) for p in points], **kwargs)

    @property
    def is_complete(self) -> bool:
        """True when the hand carries exactly the 21 expected points."""
        return len(self.landmarks) == NUM_LANDMARKS

    def get(self, index: LandmarkIndex) -> Landmark:
        """Get landmark by index."""
        return self.landmarks[index]

    def get_pixel(self, index: LandmarkIndex) -> Tuple[int, int]:
        """Get landmark as pixel coordinates."""
        return self.get(index).to_pixel(self.image_width, self.image_height)

    @property
    def palm_center(self) -> Tuple[float, float]:
        """Palm center from the wrist and the four finger MCPs."""
        indices = (
            LandmarkIndex.WRIST,
            LandmarkIndex.INDEX_MCP,
            LandmarkIndex.MIDDLE_MCP,
            LandmarkIndex.RING_MCP,
            LandmarkIndex.PINKY_MCP,
        )
        xs = [self.get(i).x for i in indices]
        ys = [self.get(i).y for i in indices]
        return (sum(xs) / len(xs), sum(ys) / len(ys))

    @property
    def palm_center_pixel(self) -> Tuple[int, int]:
        x, y = self.palm_center
        return (int(x * self.image_width), int(y * self.image_height))

    def planar_distance(self, idx1: LandmarkIndex, idx2: LandmarkIndex) -> float:
        """Euclidean distance between two landmarks in the image plane."""
        lm1 = self.get(idx1)
        lm2 = self.get(idx2)
        return math.hypot(lm1.x - lm2.x, lm1.y - lm2.y)

    def to_numpy(self) -> np.ndarray:
        """Convert landmarks to numpy array of shape (N, 3)."""
        return np.array([[lm.x, lm.y, lm.z] for lm in self.landmarks])
