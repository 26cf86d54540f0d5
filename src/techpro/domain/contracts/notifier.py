"""Protocol for transient user notifications."""

from typing import Protocol


class NotifierProtocol(Protocol):
    """Protocol for showing short, non-blocking notices to the user."""

    def notify(self, title: str, description: str) -> None:
        """Show a notice.

        Args:
            title: Short headline, e.g. "Like failed".
            description: One sentence of detail.
        """
        ...
