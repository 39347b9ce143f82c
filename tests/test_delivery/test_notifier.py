"""
Tests for the background notification dispatcher.
"""

import logging

from delivery.notifier import NotificationDispatcher
from shared.channels import EmailChannel


class TestNotificationDispatcher:
    """Tests for fire-and-forget sending."""

    def test_dispatch_sends_in_background(self, email_channel):
        dispatcher = NotificationDispatcher(email_channel)
        try:
            future = dispatcher.dispatch("shop@example.com", "Order Created", "Order 1 created")
            result = future.result(timeout=5)
        finally:
            dispatcher.shutdown()

        assert result.success
        assert email_channel.find_message_to("shop@example.com").subject == "Order Created"

    def test_flush_waits_for_pending(self, email_channel):
        dispatcher = NotificationDispatcher(email_channel, max_workers=1)
        try:
            for i in range(5):
                dispatcher.dispatch(f"shop{i}@example.com", "Order Created", f"Order {i} created")
            assert dispatcher.flush(timeout=5)
        finally:
            dispatcher.shutdown()

        assert email_channel.get_sent_count() == 5

    def test_channel_exception_is_logged_not_raised(self, caplog):
        class BrokenChannel(EmailChannel):
            def send(self, to, subject, body):
                raise TimeoutError("relay timed out")

        dispatcher = NotificationDispatcher(BrokenChannel())
        try:
            with caplog.at_level(logging.ERROR, logger="notifications"):
                future = dispatcher.dispatch("shop@example.com", "Order Created", "Order 1 created")
                assert future.result(timeout=5) is None
        finally:
            dispatcher.shutdown()

        assert any("shop@example.com" in r.getMessage() for r in caplog.records)

    def test_failed_send_is_logged(self, caplog):
        channel = EmailChannel(fail_rate=1.0)
        dispatcher = NotificationDispatcher(channel)
        try:
            with caplog.at_level(logging.ERROR, logger="notifications"):
                result = dispatcher.dispatch("shop@example.com", "S", "B").result(timeout=5)
        finally:
            dispatcher.shutdown()

        assert result.success is False
        assert channel.get_successful_sends() == []
        assert any("not delivered" in r.getMessage() for r in caplog.records)

    def test_dispatch_after_shutdown_returns_none(self, email_channel, caplog):
        dispatcher = NotificationDispatcher(email_channel)
        dispatcher.shutdown()

        with caplog.at_level(logging.ERROR, logger="notifications"):
            assert dispatcher.dispatch("shop@example.com", "S", "B") is None

        assert email_channel.get_sent_count() == 0
        assert any("dropped" in r.getMessage() for r in caplog.records)
