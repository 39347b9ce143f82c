"""
Mock email channel for order notifications.

The channel simulates sending an email by logging it. In a real system this
would integrate with an SMTP relay or a service like SendGrid or AWS SES.

Design decisions:
- All sends are logged on the ``notifications`` logger
- The channel tracks sent messages for test assertions
- Channel failures can be simulated for testing
- Sends may arrive from background worker threads, so history is locked
"""

import logging
import random
import threading
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from shared.models import utc_now

logger = logging.getLogger("notifications")


@dataclass
class NotificationResult:
    """
    Result of a notification send attempt.

    Captures success/failure and metadata for debugging and testing.
    """
    success: bool
    recipient: str
    subject: str
    body: str
    timestamp: datetime = field(default_factory=utc_now)
    error: Optional[str] = None

    def __str__(self) -> str:
        status = "✓" if self.success else "✗"
        return f"{status} EMAIL to {self.recipient}: {self.subject}"


class EmailChannel:
    """
    Mock email channel.

    Logs email sends and tracks them for test assertions.
    Can simulate failures for testing error handling.
    """

    def __init__(self, fail_rate: float = 0.0, sender: str = "orders@delivery-service.local"):
        """
        Initialize the email channel.

        Args:
            fail_rate: Probability of send failure (0.0 to 1.0), for testing.
            sender: From address used for every message.
        """
        self.fail_rate = fail_rate
        self.sender = sender
        self.sent_messages: list[NotificationResult] = []
        self._lock = threading.Lock()

    def send(self, to: str, subject: str, body: str) -> NotificationResult:
        """
        Send an email (mock implementation).

        Args:
            to: Recipient email address
            subject: Email subject line
            body: Email body content

        Returns:
            NotificationResult indicating success/failure
        """
        if random.random() < self.fail_rate:
            result = NotificationResult(
                success=False,
                recipient=to,
                subject=subject,
                body=body,
                error="Simulated email delivery failure",
            )
            logger.error(f"[EMAIL FAILED] To: {to} | Subject: {subject} | Error: {result.error}")
        else:
            result = NotificationResult(
                success=True,
                recipient=to,
                subject=subject,
                body=body,
            )
            logger.info(f"[EMAIL] From: {self.sender} | To: {to} | Subject: {subject}")
            logger.debug(f"[EMAIL BODY] {body}")

        with self._lock:
            self.sent_messages.append(result)
        return result

    def get_sent_count(self) -> int:
        """Get the number of messages sent (for testing)."""
        with self._lock:
            return len(self.sent_messages)

    def get_successful_sends(self) -> list[NotificationResult]:
        """Get all successful sends."""
        with self._lock:
            return [m for m in self.sent_messages if m.success]

    def clear_history(self):
        """Clear sent message history (useful between tests)."""
        with self._lock:
            self.sent_messages.clear()

    def find_message_to(self, recipient: str) -> Optional[NotificationResult]:
        """Find a message sent to a specific recipient."""
        with self._lock:
            for msg in self.sent_messages:
                if msg.recipient == recipient:
                    return msg
        return None
