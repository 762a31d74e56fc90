"""Pluggable notification protocol for propscript.

Lets the dispatcher and controller report to the user without depending on a
particular UI. Hosts supply their own implementation; tests record messages.
"""

import logging
from typing import Protocol


class PropscriptNotifier(Protocol):
    """Protocol for user-visible notices - host can provide custom implementation."""

    def info(self, message: str) -> None:
        """Successful script runs and status messages."""
        ...

    def warning(self, message: str) -> None:
        """Configuration problems."""
        ...

    def error(self, message: str) -> None:
        """Script failures."""
        ...


class NoOpNotifier:
    """Silent notifier - default when embedded without a UI."""

    def info(self, message: str) -> None:
        pass

    def warning(self, message: str) -> None:
        pass

    def error(self, message: str) -> None:
        pass


class LoggingNotifier:
    """Implementation using stdlib logging - used by headless mode."""

    def __init__(self, logger_name: str = "propscript.notices"):
        self._logger = logging.getLogger(logger_name)

    def info(self, message: str) -> None:
        self._logger.info(message)

    def warning(self, message: str) -> None:
        self._logger.warning(message)

    def error(self, message: str) -> None:
        self._logger.error(message)
