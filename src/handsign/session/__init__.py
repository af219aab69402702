"""Session state, events and user commands."""
from . import events
from .clipboard import Clipboard
from .controller import SessionController
from .events import EventBus
from .speech import Speaker, SpeechConfig
from .state import MESSAGE_PLACEHOLDER, Message, SessionState, SessionStats, format_elapsed

__all__ = [
    "events",
    "Clipboard",
    "SessionController",
    "EventBus",
    "Speaker",
    "SpeechConfig",
    "MESSAGE_PLACEHOLDER",
    "Message",
    "SessionState",
    "SessionStats",
    "format_elapsed",
]
