"""Session state owned by the SessionController."""

from dataclasses import dataclass, field
from typing import List, Optional

from ..recognition.gesture_classifier import Classification, NO_GESTURE

MESSAGE_PLACEHOLDER = "Waiting for gesture input..."


@dataclass
class Message:
    """Append-only list of committed words."""
    words: List[str] = field(default_factory=list)

    def append(self, word: str) -> None:
        if word:
            self.words.append(word)

    def clear(self) -> None:
        self.words.clear()

    @property
    def text(self) -> str:
        return " ".join(self.words)

    @property
    def display_text(self) -> str:
        return self.text or MESSAGE_PLACEHOLDER

    def __len__(self) -> int:
        return len(self.words)

    def __bool__(self) -> bool:
        return bool(self.words)


def format_elapsed(seconds: float) -> str:
    """Format seconds as HH:MM:SS."""
    elapsed = int(max(0, seconds))
    return "{:02d}:{:02d}:{:02d}".format(elapsed // 3600, (elapsed % 3600) // 60, elapsed % 60)


@dataclass(frozen=True)
class SessionStats:
    """Snapshot of the counters shown to the user."""
    total_gestures: int
    words_formed: int
    detection_rate: int
    elapsed_s: float
    current_word: str
    confidence: int
    message: str

    @property
    def elapsed_text(self) -> str:
        return format_elapsed(self.elapsed_s)


@dataclass
class SessionState:
    """Everything that changes while a session runs."""
    message: Message = field(default_factory=Message)
    gesture_count: int = 0
    word_count: int = 0
    detection_rate: int = 0
    current: Classification = NO_GESTURE
    detecting: bool = False
    started_at: Optional[float] = None  # monotonic seconds

    @property
    def current_word(self) -> str:
        return self.current.word or "None"

    def clear_message(self) -> None:
        self.message.clear()
        self.word_count = 0

    def elapsed_s(self, now: float) -> float:
        if self.started_at is None:
            return 0.0
        return now - self.started_at
