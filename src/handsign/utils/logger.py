"""
Logging setup and gesture/word event logging.
"""

import logging
import logging.handlers
import os
import time
from dataclasses import dataclass
from typing import Optional


@dataclass
class LoggingConfig:
    """Logging settings."""
    level: str = "INFO"
    file: str = ""
    max_size_mb: int = 10
    backup_count: int = 3

    @classmethod
    def from_dict(cls, config: dict) -> "LoggingConfig":
        """Create config from dictionary."""
        return cls(
            level=config.get("level", "INFO"),
            file=config.get("file", ""),
            max_size_mb=config.get("max_size_mb", 10),
            backup_count=config.get("backup_count", 3),
        )


def setup_logging(level="INFO", log_file=None, max_size_mb=10, backup_count=3):
    """Configure console logging and an optional rotating log file."""
    console_format = "%(asctime)s  %(levelname)-5s  %(message)s"
    file_format = "%(asctime)s [%(levelname)-7s] %(name)-25s | %(message)s"
    date_format = "%H:%M:%S"

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    root_logger.handlers.clear()

    console = logging.StreamHandler()
    console.setLevel(root_logger.level)
    console.setFormatter(logging.Formatter(console_format, datefmt=date_format))
    root_logger.addHandler(console)

    if log_file:
        log_dir = os.path.dirname(log_file)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            log_file,
            maxBytes=max_size_mb * 1024 * 1024,
            backupCount=backup_count,
        )
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(file_format, datefmt=date_format))
        root_logger.addHandler(file_handler)

    return root_logger


class WordLogger:
    """Logs started gestures and committed words, keeping a history."""

    def __init__(self, max_history: int = 500):
        self.logger = logging.getLogger("gesture_events")
        self._history = []
        self._max_history = max_history

    def _record(self, entry):
        self._history.append(entry)
        if len(self._history) > self._max_history:
            self._history = self._history[-self._max_history:]

    def log_gesture(self, gesture_name, confidence):
        """Log a newly started gesture."""
        self._record({
            "timestamp": time.time(),
            "kind": "gesture",
            "gesture": gesture_name,
            "confidence": confidence,
        })
        self.logger.debug("Gesture: %-12s | Confidence: %d", gesture_name, confidence)

    def log_word(self, word, message=""):
        """Log a committed word."""
        self._record({
            "timestamp": time.time(),
            "kind": "word",
            "word": word,
        })
        self.logger.info("Word: %-6s | Message: %s", word, message)

    def get_history(self, last_n: Optional[int] = None):
        """Recent history entries, oldest first."""
        if last_n:
            return self._history[-last_n:]
        return self._history.copy()

    @property
    def words(self):
        return [e["word"] for e in self._history if e["kind"] == "word"]
