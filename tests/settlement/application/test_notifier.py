"""Tests for the notification sink registry and fire-and-forget delivery."""

from unittest.mock import MagicMock

from settlement.notifier import get_notifier, notify_safely, reset_notifier, set_notifier
from settlement.notifier.fake_adapter import FakeNotificationSink


class TestRegistry:
    def test_defaults_to_fake_sink(self):
        reset_notifier()
        assert isinstance(get_notifier(), FakeNotificationSink)

    def test_set_notifier(self):
        sink = FakeNotificationSink()
        set_notifier(sink)
        assert get_notifier() is sink


class TestNotifySafely:
    def test_delivers(self, notifier):
        assert notify_safely("user-1", "Hello", "Body", "marketer_profit", {"amount": 5}) is True
        assert notifier.sent[0]["user_id"] == "user-1"
        assert notifier.sent[0]["data"] == {"amount": 5}

    def test_raising_sink_is_swallowed(self, notifier):
        notifier.configure(should_succeed=False)
        assert notify_safely("user-1", "Hello", "Body", "marketer_profit") is False

    def test_failed_status_is_reported(self):
        sink = MagicMock()
        sink.send.return_value = {"message_id": None, "status": "failed", "error": "quota"}
        set_notifier(sink)
        assert notify_safely("user-1", "Hello", "Body", "admin_profit") is False
