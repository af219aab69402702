"""
Static Gesture Classifier
==========================

Rule-based recognition of ten static hand poses. Each finger is judged
extended or curled from landmark heights, then an ordered rule table is
scanned and the first matching rule decides the gesture.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, List, NamedTuple, Optional

from ..detection.landmarks import HandLandmarks, LandmarkIndex

logger = logging.getLogger(__name__)

OK_DISTANCE_THRESHOLD = 0.07


class GestureLabel(Enum):
    """Recognized gesture vocabulary."""
    NONE = "none"
    THUMBS_UP = "thumbs_up"
    THUMBS_DOWN = "thumbs_down"
    OPEN_PALM = "open_palm"
    PEACE = "peace"
    OK = "ok"
    POINT_UP = "point_up"
    FIST = "fist"
    ROCK = "rock"
    CALL = "call"
    LOVE = "love"

    @property
    def word(self) -> Optional[str]:
        """Display word for this gesture, None for NONE."""
        return GESTURE_WORDS.get(self)

    @property
    def is_none(self) -> bool:
        return self is GestureLabel.NONE


GESTURE_WORDS: Dict[GestureLabel, str] = {
    GestureLabel.THUMBS_UP: "YES",
    GestureLabel.THUMBS_DOWN: "NO",
    GestureLabel.OPEN_PALM: "HELLO",
    GestureLabel.PEACE: "PEACE",
    GestureLabel.OK: "OKAY",
    GestureLabel.POINT_UP: "WAIT",
    GestureLabel.FIST: "STOP",
    GestureLabel.ROCK: "ROCK",
    GestureLabel.CALL: "CALL",
    GestureLabel.LOVE: "LOVE",
}


class Classification(NamedTuple):
    """Per-frame classifier output. Confidence is an integer in [0, 100]."""
    label: GestureLabel
    confidence: int

    @property
    def word(self) -> Optional[str]:
        return self.label.word

    @property
    def is_none(self) -> bool:
        return self.label.is_none

    @staticmethod
    def none() -> "Classification":
        return NO_GESTURE


NO_GESTURE = Classification(GestureLabel.NONE, 0)


@dataclass(frozen=True)
class FingerStates:
    """Extension flag for each finger."""
    thumb: bool
    index: bool
    middle: bool
    ring: bool
    pinky: bool

    def matches(self, thumb: bool, index: bool, middle: bool, ring: bool, pinky: bool) -> bool:
        """True when every flag equals the given pattern."""
        return (self.thumb, self.index, self.middle, self.ring, self.pinky) == (
            thumb, index, middle, ring, pinky)

    @property
    def extended_count(self) -> int:
        return sum((self.thumb, self.index, self.middle, self.ring, self.pinky))


# (tip, reference joint) per finger. The thumb is compared against its IP
# joint only; the variant that also required the MCP joint is not used.
FINGER_JOINTS = {
    "thumb": (LandmarkIndex.THUMB_TIP, LandmarkIndex.THUMB_IP),
    "index": (LandmarkIndex.INDEX_TIP, LandmarkIndex.INDEX_PIP),
    "middle": (LandmarkIndex.MIDDLE_TIP, LandmarkIndex.MIDDLE_PIP),
    "ring": (LandmarkIndex.RING_TIP, LandmarkIndex.RING_PIP),
    "pinky": (LandmarkIndex.PINKY_TIP, LandmarkIndex.PINKY_PIP),
}


def finger_states(hand: HandLandmarks) -> FingerStates:
    """
    Judge each finger extended when its tip sits strictly above its
    reference joint (smaller y). Assumes an upright hand facing the camera.
    """
    flags = {
        finger: hand.get(tip).y < hand.get(joint).y
        for finger, (tip, joint) in FINGER_JOINTS.items()
    }
    return FingerStates(**flags)


@dataclass(frozen=True)
class GestureRule:
    """One entry of the ordered rule table."""
    label: GestureLabel
    confidence: int
    predicate: Callable[[FingerStates, float], bool]


def _pattern(thumb: bool, index: bool, middle: bool, ring: bool, pinky: bool):
    return lambda f, _pinch: f.matches(thumb, index, middle, ring, pinky)


def _ok_sign(threshold: float):
    def predicate(f: FingerStates, pinch: float) -> bool:
        return pinch < threshold and f.middle and f.ring and f.pinky
    return predicate


def build_rules(ok_distance_threshold: float = OK_DISTANCE_THRESHOLD) -> List[GestureRule]:
    """Rule table in priority order; the first match wins."""
    return [
        GestureRule(GestureLabel.THUMBS_UP, 95, _pattern(True, False, False, False, False)),
        GestureRule(GestureLabel.FIST, 98, _pattern(False, False, False, False, False)),
        GestureRule(GestureLabel.PEACE, 97, _pattern(False, True, True, False, False)),
        GestureRule(GestureLabel.OPEN_PALM, 99, _pattern(True, True, True, True, True)),
        GestureRule(GestureLabel.OK, 92, _ok_sign(ok_distance_threshold)),
        GestureRule(GestureLabel.POINT_UP, 94, _pattern(False, True, False, False, False)),
        GestureRule(GestureLabel.ROCK, 91, _pattern(True, True, False, False, True)),
        GestureRule(GestureLabel.CALL, 93, _pattern(True, False, False, False, True)),
        # Same pattern as ROCK above, so never reached. Kept in place
        # until the intended LOVE pose is defined.
        GestureRule(GestureLabel.LOVE, 96, _pattern(True, True, False, False, True)),
    ]


@dataclass
class GestureClassifierConfig:
    """Gesture classifier configuration."""
    # Thumb tip to index tip distance below which the OK pinch is closed
    ok_distance_threshold: float = OK_DISTANCE_THRESHOLD
    # Log finger states for every frame
    debug: bool = False

    @classmethod
    def from_dict(cls, config: dict) -> "GestureClassifierConfig":
        """Create config from dictionary."""
        return cls(
            ok_distance_threshold=config.get("ok_distance_threshold", OK_DISTANCE_THRESHOLD),
            debug=config.get("debug", False),
        )


class GestureClassifier:
    """
    Deterministic rule-based static gesture classifier.

    Stateless: the same landmarks always give the same Classification.
    Missing or malformed hands classify as NONE instead of raising.

    Example:
        >>> classifier = GestureClassifier()
        >>> result = classifier.classify(hand)
        >>> if not result.is_none:
        ...     print(f"{result.word} ({result.confidence}%)")
    """

    def __init__(self, config: Optional[GestureClassifierConfig] = None):
        self.config = config or GestureClassifierConfig()
        self.rules = build_rules(self.config.ok_distance_threshold)

    def classify(self, hand: Optional[HandLandmarks]) -> Classification:
        """
        Classify a single hand.

        Args:
            hand: Detected hand or None when no hand is in the frame

        Returns:
            Label and confidence of the first matching rule, or (NONE, 0)
        """
        if hand is None or not hand.is_complete:
            if hand is not None:
                logger.debug(f"Ignoring hand with {len(hand.landmarks)} landmarks")
            return NO_GESTURE

        fingers = finger_states(hand)
        pinch = hand.planar_distance(LandmarkIndex.THUMB_TIP, LandmarkIndex.INDEX_TIP)

        if self.config.debug:
            logger.debug(f"Finger states: {fingers}, pinch={pinch:.3f}")

        for rule in self.rules:
            if rule.predicate(fingers, pinch):
                return Classification(rule.label, rule.confidence)

        return NO_GESTURE


_default_classifier = GestureClassifier()


def classify(hand: Optional[HandLandmarks]) -> Classification:
    """Classify with the default thresholds."""
    return _default_classifier.classify(hand)
