"""Notification sink registry.

Notifications are fire-and-forget: ``notify_safely`` never lets a delivery
failure reach the caller.
"""

import structlog

from settlement.notifier.port import NotificationSink

logger = structlog.get_logger(__name__)

_current_notifier: NotificationSink | None = None


def get_notifier() -> NotificationSink:
    """Return the current notification sink. Defaults to FakeNotificationSink."""
    global _current_notifier
    if _current_notifier is None:
        from settlement.notifier.fake_adapter import FakeNotificationSink

        _current_notifier = FakeNotificationSink()
    return _current_notifier


def set_notifier(notifier: NotificationSink) -> None:
    global _current_notifier
    _current_notifier = notifier


def reset_notifier() -> None:
    global _current_notifier
    _current_notifier = None


def notify_safely(
    user_id: str,
    title: str,
    message: str,
    notification_type: str,
    data: dict | None = None,
) -> bool:
    """Send a notification, logging instead of raising on failure."""
    try:
        result = get_notifier().send(user_id, title, message, notification_type, data)
    except Exception as exc:
        logger.warning(
            "Notification delivery failed",
            user_id=user_id,
            notification_type=notification_type,
            error=str(exc),
        )
        return False

    if result.get("status") != "sent":
        logger.warning(
            "Notification not sent",
            user_id=user_id,
            notification_type=notification_type,
            error=result.get("error"),
        )
        return False
    return True
