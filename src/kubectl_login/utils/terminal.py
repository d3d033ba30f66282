"""Terminal mode snapshot and restore around masked input."""

from __future__ import annotations

import os
import signal
import sys
from types import FrameType
from typing import Any

try:
    import termios
except ImportError:  # not available on Windows
    termios = None  # type: ignore[assignment]

from kubectl_login.utils.logging import get_logger

logger = get_logger(__name__)


class TerminalGuard:
    """Restore the terminal's mode after masked input, even on Ctrl-C.

    On enter the current termios attributes are saved and a SIGINT handler is
    installed that restores them and exits. On exit the attributes are restored and
    the previous SIGINT handler comes back. Does nothing when the descriptor is not a
    terminal.

    Example:
        >>> with TerminalGuard():
        ...     token = getpass.getpass("Enter token: ")
    """

    def __init__(self, fd: int | None = None):
        """Initialize guard.

        Args:
            fd: Terminal file descriptor (defaults to stdin)
        """
        if fd is None:
            try:
                fd = sys.stdin.fileno()
            except (AttributeError, ValueError, OSError):
                fd = None
        self.fd = fd
        self._saved: list[Any] | None = None
        self._previous_handler: Any = None

    @property
    def active(self) -> bool:
        """Whether a terminal mode snapshot is held."""
        return self._saved is not None

    def __enter__(self) -> TerminalGuard:
        if termios is None or self.fd is None or not os.isatty(self.fd):
            logger.debug("terminal_guard_skipped", fd=self.fd)
            return self

        self._saved = termios.tcgetattr(self.fd)
        self._previous_handler = signal.signal(signal.SIGINT, self._handle_interrupt)
        logger.debug("terminal_mode_saved", fd=self.fd)
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.restore()
        if self._previous_handler is not None:
            signal.signal(signal.SIGINT, self._previous_handler)
            self._previous_handler = None
        self._saved = None

    def restore(self) -> None:
        """Put the saved terminal mode back. Safe to call repeatedly."""
        if self._saved is None:
            return
        termios.tcsetattr(self.fd, termios.TCSADRAIN, self._saved)
        logger.debug("terminal_mode_restored", fd=self.fd)

    def _handle_interrupt(self, signum: int, frame: FrameType | None) -> None:
        self.restore()
        logger.debug("interrupted_during_prompt", signal=signum)
        raise SystemExit(1)
