"""Launch the platform URL opener without waiting on it."""

import subprocess
import sys

from kubectl_login.core.exceptions import BrowserLaunchError
from kubectl_login.utils.logging import get_logger

logger = get_logger(__name__)


def url_opener(platform: str | None = None) -> str:
    """Name of the program that opens URLs on this platform.

    Args:
        platform: Platform string (defaults to sys.platform)

    Returns:
        Program name
    """
    platform = platform or sys.platform
    return "open" if platform == "darwin" else "sensible-browser"


def open_url(url: str) -> subprocess.Popen:
    """Start the URL opener detached and return immediately.

    The child is never waited on; its output is discarded.

    Args:
        url: URL to open

    Returns:
        The child process

    Raises:
        BrowserLaunchError: If the opener cannot be started
    """
    cmd = [url_opener(), url]
    try:
        process = subprocess.Popen(
            cmd,
            stdin=subprocess.DEVNULL,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
            start_new_session=True,
        )
    except OSError as e:
        logger.error("url_opener_failed", opener=cmd[0], error=str(e))
        raise BrowserLaunchError(f"Failed to launch {cmd[0]}: {e}") from e

    logger.debug("url_opener_started", opener=cmd[0], pid=process.pid)
    return process
