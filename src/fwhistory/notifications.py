"""
Error reporting for fwhistory.

Unexpected failures inside a history job are handed to an ErrorReporter. The
default reporter only logs; NtfyErrorReporter additionally posts a short report
to an NTFY topic so failures on unattended installs are noticed.
"""

from abc import ABC, abstractmethod
from typing import Optional

import requests  # type: ignore[import-untyped]

from fwhistory.constants import NTFY_REQUEST_TIMEOUT
from fwhistory.log_utils import logger


def send_ntfy_notification(
    ntfy_server: Optional[str],
    ntfy_topic: Optional[str],
    message: str,
    title: Optional[str] = None,
) -> None:
    """
    POST `message` to `{ntfy_server}/{ntfy_topic}`; a no-op unless both are set.

    Request failures are logged as warnings and never raised.
    """
    if not (ntfy_server and ntfy_topic):
        return

    url = f"{ntfy_server.rstrip('/')}/{ntfy_topic}"
    headers = {"Content-Type": "text/plain; charset=utf-8"}
    if title:
        # Header values must be latin-1; NTFY reads them back as UTF-8.
        headers["Title"] = title.encode("utf-8").decode("latin-1")

    try:
        requests.post(
            url,
            data=message.encode("utf-8"),
            headers=headers,
            timeout=NTFY_REQUEST_TIMEOUT,
        ).raise_for_status()
    except requests.exceptions.RequestException as e:
        logger.warning(f"Error sending notification to {url}: {e}")
        return
    logger.debug(f"Notification sent to {url}")


def format_error_report(error: BaseException) -> str:
    message = str(error)
    if message:
        return f"{type(error).__name__}: {message}"
    return type(error).__name__


class ErrorReporter(ABC):
    """Fire-and-forget sink for unexpected errors."""

    @abstractmethod
    def notify(self, error: BaseException) -> None:
        """
        Report an unexpected error.

        Implementations must not raise; the caller has already decided how the error
        affects its own state.
        """


class LoggingErrorReporter(ErrorReporter):
    """Reports errors to the fwhistory log, including the traceback."""

    def notify(self, error: BaseException) -> None:
        logger.error(
            f"Unexpected error: {format_error_report(error)}",
            exc_info=(type(error), error, error.__traceback__),
        )


class NtfyErrorReporter(LoggingErrorReporter):
    """Logs errors and posts them to an NTFY topic."""

    def __init__(self, ntfy_server: str, ntfy_topic: str, title: str = "fwhistory error"):
        self.ntfy_server = ntfy_server
        self.ntfy_topic = ntfy_topic
        self.title = title

    def notify(self, error: BaseException) -> None:
        super().notify(error)
        send_ntfy_notification(
            self.ntfy_server,
            self.ntfy_topic,
            format_error_report(error),
            title=self.title,
        )
