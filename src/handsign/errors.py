"""Exception hierarchy for the sign translator."""


class HandSignError(Exception):
    """Base class for all handsign errors."""


class CameraError(HandSignError):
    """Camera could not be opened or delivered no frames."""

    def __init__(self, device_id: int, reason: str = ""):
        self.device_id = device_id
        self.reason = reason
        message = f"Unable to access camera {device_id}"
        if reason:
            message += f": {reason}"
        super().__init__(message)


class ConfigError(HandSignError):
    """Configuration file is malformed or holds an invalid value."""
