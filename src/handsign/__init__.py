"""
Hand Sign Translator
====================

Recognizes static hand signs from a camera and assembles them into a
message.

Modules:
    - capture: Camera frame acquisition
    - detection: MediaPipe hand landmark detection
    - recognition: Rule-based gesture classification and hold tracking
    - session: Session state, events, clipboard and speech
    - utils: Logging and visualization
"""

__version__ = "1.0.0"
