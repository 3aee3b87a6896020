"""Notification sink port — abstract interface for user notifications."""

from abc import ABC, abstractmethod


class NotificationSink(ABC):
    """Abstract interface for notification dispatch adapters."""

    @abstractmethod
    def send(
        self,
        user_id: str,
        title: str,
        message: str,
        notification_type: str,
        data: dict | None = None,
    ) -> dict:
        """Send a notification to a user.

        Returns:
            dict with keys: message_id, status ("sent" or "failed"), error (optional)
        """
        ...
