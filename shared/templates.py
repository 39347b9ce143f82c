"""
Notification message templates.

Templates are simple strings with {variable} placeholders, organized by
notification type. Only email is supported: every notification goes to the
business contact address.
"""

from dataclasses import dataclass
from enum import Enum


class NotificationType(str, Enum):
    """Business events that trigger a notification."""
    ORDER_CREATED = "order_created"


@dataclass
class NotificationTemplate:
    """An email template: subject and body."""
    notification_type: NotificationType
    email_subject: str
    email_body: str

    def render_email(self, **kwargs) -> tuple[str, str]:
        """
        Render the email template with provided variables.

        Returns:
            Tuple of (subject, body)
        """
        return (
            self.email_subject.format(**kwargs),
            self.email_body.format(**kwargs),
        )


# =============================================================================
# Template Definitions
# =============================================================================

ORDER_CREATED_TEMPLATE = NotificationTemplate(
    notification_type=NotificationType.ORDER_CREATED,
    email_subject="Order Created",
    email_body="Order {order_id} created",
)

TEMPLATES: dict[NotificationType, NotificationTemplate] = {
    NotificationType.ORDER_CREATED: ORDER_CREATED_TEMPLATE,
}


def get_template(notification_type: NotificationType) -> NotificationTemplate:
    """
    Get the template for a notification type.

    Raises:
        KeyError: If no template exists for the type
    """
    return TEMPLATES[notification_type]


def render_notification(notification_type: NotificationType, **context) -> tuple[str, str]:
    """
    Render a notification as (subject, body).

    Raises:
        KeyError: If the template references a variable missing from context
    """
    return get_template(notification_type).render_email(**context)
