"""
Tests for notification templates.
"""

import pytest

from shared.templates import (
    TEMPLATES,
    NotificationType,
    get_template,
    render_notification,
)


class TestTemplates:
    """Tests for template lookup and rendering."""

    def test_every_type_has_a_template(self):
        assert set(TEMPLATES) == set(NotificationType)

    def test_order_created(self):
        subject, body = render_notification(NotificationType.ORDER_CREATED, order_id="ord-123")

        assert subject == "Order Created"
        assert body == "Order ord-123 created"

    def test_missing_variable(self):
        with pytest.raises(KeyError):
            get_template(NotificationType.ORDER_CREATED).render_email()
