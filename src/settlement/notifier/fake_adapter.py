"""Fake notification sink — records notifications for testing."""

from uuid import uuid4

from settlement.notifier.port import NotificationSink


class NotificationDeliveryError(Exception):
    pass


class FakeNotificationSink(NotificationSink):
    """Sink that records notifications in memory for test assertions."""

    def __init__(self):
        self.sent: list[dict] = []
        self.should_succeed = True
        self.failure_reason = "Notification delivery failed"

    def configure(self, should_succeed: bool = True, failure_reason: str = "Notification delivery failed"):
        self.should_succeed = should_succeed
        self.failure_reason = failure_reason

    def send(
        self,
        user_id: str,
        title: str,
        message: str,
        notification_type: str,
        data: dict | None = None,
    ) -> dict:
        if not self.should_succeed:
            raise NotificationDeliveryError(self.failure_reason)

        message_id = f"note-{uuid4().hex[:12]}"
        self.sent.append(
            {
                "message_id": message_id,
                "user_id": user_id,
                "title": title,
                "message": message,
                "notification_type": notification_type,
                "data": data,
            }
        )
        return {"message_id": message_id, "status": "sent"}

    def reset(self):
        self.sent.clear()
        self.should_succeed = True
        self.failure_reason = "Notification delivery failed"
