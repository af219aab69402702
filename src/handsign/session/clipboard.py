"""
Clipboard Module
=================

Copies text to the system clipboard through whichever command line tool
is installed (wl-copy, xclip, xsel or pbcopy).
"""

import logging
import subprocess
from typing import List, Optional

logger = logging.getLogger(__name__)

# Tried in order; the first one found on PATH is used
CLIPBOARD_COMMANDS = [
    ["wl-copy"],
    ["xclip", "-selection", "clipboard"],
    ["xsel", "--clipboard", "--input"],
    ["pbcopy"],
]


def _is_installed(tool: str) -> bool:
    try:
        result = subprocess.run(["which", tool], capture_output=True, text=True, timeout=5)
        return result.returncode == 0
    except (OSError, subprocess.SubprocessError) as e:
        logger.warning(f"Error checking {tool}: {e}")
        return False


def find_clipboard_command() -> Optional[List[str]]:
    """Return the first available clipboard command, or None."""
    for command in CLIPBOARD_COMMANDS:
        if _is_installed(command[0]):
            return command
    return None


class Clipboard:
    """
    System clipboard writer.

    Example:
        >>> clipboard = Clipboard()
        >>> clipboard.copy("HELLO YES")
        True
    """

    def __init__(self, command: Optional[List[str]] = None):
        self._command = command if command is not None else find_clipboard_command()
        if self._command is None:
            logger.warning("No clipboard tool found (install wl-clipboard or xclip). Copy is disabled.")

    @property
    def is_available(self) -> bool:
        return self._command is not None

    def copy(self, text: str) -> bool:
        """
        Put text on the clipboard.

        Returns:
            True if the clipboard tool accepted the text
        """
        if not self._command:
            return False

        try:
            result = subprocess.run(
                self._command,
                input=text,
                capture_output=True,
                text=True,
                timeout=5,
            )
        except subprocess.TimeoutExpired:
            logger.error(f"{self._command[0]} timed out")
            return False
        except OSError as e:
            logger.error(f"Error running {self._command[0]}: {e}")
            return False

        if result.returncode != 0:
            logger.error(f"{self._command[0]} error: {result.stderr.strip()}")
            return False

        return True
