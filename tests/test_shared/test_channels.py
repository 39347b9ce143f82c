"""
Tests for the mock email channel.

These tests verify that the channel logs messages and tracks sent
notifications, including simulated failures.
"""

from shared.channels import EmailChannel, NotificationResult


class TestEmailChannel:
    """Tests for the mock email channel."""

    def test_send_email_success(self, email_channel: EmailChannel):
        result = email_channel.send(
            to="shop@example.com",
            subject="Order Created",
            body="Order 1 created",
        )

        assert result.success is True
        assert result.recipient == "shop@example.com"
        assert result.error is None
        assert email_channel.get_sent_count() == 1

    def test_simulated_failure(self):
        channel = EmailChannel(fail_rate=1.0)

        result = channel.send("shop@example.com", "Order Created", "Order 1 created")

        assert result.success is False
        assert result.error == "Simulated email delivery failure"
        assert channel.get_sent_count() == 1
        assert channel.get_successful_sends() == []

    def test_find_message_to(self, email_channel: EmailChannel):
        email_channel.send("a@example.com", "A", "first")
        email_channel.send("b@example.com", "B", "second")

        assert email_channel.find_message_to("b@example.com").body == "second"
        assert email_channel.find_message_to("c@example.com") is None

    def test_clear_history(self, email_channel: EmailChannel):
        email_channel.send("a@example.com", "A", "first")

        email_channel.clear_history()

        assert email_channel.get_sent_count() == 0


class TestNotificationResult:
    """Tests for the result record."""

    def test_str(self):
        ok = NotificationResult(success=True, recipient="a@example.com", subject="Hi", body="x")
        failed = NotificationResult(success=False, recipient="a@example.com", subject="Hi", body="x")

        assert str(ok) == "✓ EMAIL to a@example.com: Hi"
        assert str(failed).startswith("✗")
