"""Notification port used by panels and uploaders to report outcomes to the user."""
from typing import Protocol

from loguru import logger


class Notifier(Protocol):

    def success(self, message: str) -> None:
        ...

    def error(self, message: str) -> None:
        ...


class LogNotifier:
    """Notifier that only writes to the log. Used when no UI is attached."""

    def success(self, message: str) -> None:
        logger.info(message)

    def error(self, message: str) -> None:
        logger.error(message)
