"""Notifier that writes user notices to the log."""

import logging

from techpro.domain.contracts.notifier import NotifierProtocol

logger = logging.getLogger("techpro.notifications")


class LoggingNotifier(NotifierProtocol):
    """Shows transient notices by logging them at warning level."""

    def __init__(self) -> None:
        """Initialize the notifier."""
        self.sent: list[tuple[str, str]] = []

    def notify(self, title: str, description: str) -> None:
        """Log a notice and remember it.

        Args:
            title: Short headline.
            description: One sentence of detail.
        """
        self.sent.append((title, description))
        logger.warning(f"{title}: {description}")
