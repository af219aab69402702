"""
Speech Module
==============

Reads the message aloud with pyttsx3. One long-lived worker thread owns
the engine and makes every call on it; the SAPI5 and NSSS drivers are
bound to the thread that created them.
"""

import logging
import queue
import threading
from dataclasses import dataclass
from typing import Optional

import pyttsx3

logger = logging.getLogger(__name__)

_SHUTDOWN = object()


@dataclass
class SpeechConfig:
    """Text-to-speech settings."""
    enabled: bool = True
    rate: int = 150  # words per minute
    volume: float = 1.0  # 0.0 to 1.0
    voice_id: str = ""

    @classmethod
    def from_dict(cls, config: dict) -> "SpeechConfig":
        """Create config from dictionary."""
        return cls(
            enabled=config.get("enabled", True),
            rate=config.get("rate", 150),
            volume=config.get("volume", 1.0),
            voice_id=config.get("voice_id", ""),
        )


class Speaker:
    """
    Non-blocking text-to-speech.

    Only one utterance plays at a time; requests made while speaking are
    dropped.

    Example:
        >>> speaker = Speaker(SpeechConfig(rate=120))
        >>> speaker.speak("HELLO YES")
        True
        >>> speaker.close()
    """

    def __init__(self, config: Optional[SpeechConfig] = None):
        self.config = config or SpeechConfig()
        self._requests: "queue.Queue" = queue.Queue()
        self._idle = threading.Event()
        self._idle.set()
        self._thread: Optional[threading.Thread] = None
        self._thread_lock = threading.Lock()
        self._init_failed = False

    def _create_engine(self):
        try:
            engine = pyttsx3.init()
        except (RuntimeError, OSError, ImportError) as e:
            logger.warning(f"Text-to-speech unavailable: {e}")
            self._init_failed = True
            return None
        engine.setProperty("rate", self.config.rate)
        engine.setProperty("volume", self.config.volume)
        if self.config.voice_id:
            engine.setProperty("voice", self.config.voice_id)
        return engine

    def _ensure_worker(self) -> None:
        with self._thread_lock:
            if self._thread is None or not self._thread.is_alive():
                self._thread = threading.Thread(target=self._worker, name="speech", daemon=True)
                self._thread.start()

    def _worker(self) -> None:
        """Owns the engine for its whole lifetime; it never leaves this thread."""
        engine = None
        while True:
            text = self._requests.get()
            if text is _SHUTDOWN:
                break
            try:
                if engine is None and not self._init_failed:
                    engine = self._create_engine()
                if engine is not None:
                    engine.say(text)
                    engine.runAndWait()
            except RuntimeError as e:
                logger.error(f"Speech failed: {e}")
            finally:
                self._idle.set()

    @property
    def is_speaking(self) -> bool:
        return not self._idle.is_set()

    def speak(self, text: str) -> bool:
        """
        Queue text for the speech worker.

        Returns:
            True if speech was started
        """
        if not self.config.enabled or not text:
            return False
        if self.is_speaking:
            logger.debug("Already speaking, request dropped")
            return False

        self._idle.clear()
        self._ensure_worker()
        self._requests.put(text)
        return True

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Block until the current utterance finishes."""
        return self._idle.wait(timeout)

    def close(self, timeout: Optional[float] = 1.0) -> None:
        """
        End the worker thread once the current utterance is done.

        Waits at most timeout seconds; the worker is a daemon thread, so an
        unfinished utterance never holds up process exit.
        """
        with self._thread_lock:
            thread, self._thread = self._thread, None
        if thread is not None and thread.is_alive():
            self._requests.put(_SHUTDOWN)
            thread.join(timeout=timeout)
