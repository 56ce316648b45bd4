"""Notification port: in-app notification delivery to marketplace users."""

from abc import ABC, abstractmethod


class NotifierPort(ABC):
    """Abstract interface for notification delivery adapters."""

    @abstractmethod
    def notify(
        self,
        user_id: str,
        title: str,
        body: str,
        link: str | None = None,
        severity: str = "info",
    ) -> dict:
        """Deliver a notification to a user.

        Returns:
            dict with keys: notification_id, status ("sent" or "failed"), error (optional)
        """
        ...
