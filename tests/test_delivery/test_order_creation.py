"""
Tests for order creation.

Covers the delivery window computation, rejection of unserviced zip codes,
and the best-effort creation notification.
"""

import logging
from datetime import timedelta

import pytest

from delivery.models import BusinessCreate, OrderCreate, OrderUpdate, ZipCodeCreate
from shared.channels import EmailChannel
from shared.errors import UnservicedZipError
from shared.models import OrderStatus


def order_request(business_id: str, zip_code: str = "10001") -> OrderCreate:
    return OrderCreate(
        business_id=business_id,
        customer_street="350 5th Ave",
        customer_city="New York",
        customer_state="NY",
        customer_zip_code=zip_code,
        order_items="2 sourdough loaves",
    )


class TestDeliveryWindow:
    """The window is anchored on the creation instant."""

    def test_window_offsets_match_zip_entry(self, services, zip_10001, business, t0):
        order = services.ordering.create_order(order_request(business.id))

        assert order.min_delivery_time == t0 + timedelta(minutes=30)
        assert order.max_delivery_time == t0 + timedelta(minutes=60)
        assert order.expected_delivery_time == t0 + timedelta(minutes=45)
        assert order.created_at == t0
        assert order.updated_at == t0

    def test_new_order_is_received_without_driver(self, services, zip_10001, business):
        order = services.ordering.create_order(order_request(business.id))

        assert order.order_status == OrderStatus.RECEIVED
        assert order.assigned_driver_id is None
        assert order.actual_delivery_time is None

    @pytest.mark.parametrize("minimum,expected,maximum", [
        (0, 0, 0),
        (10, 10, 90),
        (15, 40, 40),
        (20, 35, 50),
    ])
    def test_window_is_ordered(self, services, business, minimum, expected, maximum):
        services.zip_codes.add_zip_code(ZipCodeCreate(
            zip_code="20500",
            min_delivery_time=minimum,
            max_delivery_time=maximum,
            expected_delivery_time=expected,
        ))

        order = services.ordering.create_order(order_request(business.id, "20500"))

        assert order.min_delivery_time <= order.expected_delivery_time <= order.max_delivery_time
        assert order.expected_delivery_time - order.created_at == timedelta(minutes=expected)

    def test_window_not_recomputed_on_update(self, services, zip_10001, business, clock):
        services.zip_codes.add_zip_code(ZipCodeCreate(
            zip_code="11201",
            min_delivery_time=45,
            max_delivery_time=90,
            expected_delivery_time=60,
        ))
        order = services.ordering.create_order(order_request(business.id))
        clock.advance(minutes=10)

        updated = services.ordering.update_order(order.id, OrderUpdate(customer_zip_code="11201"))

        assert updated.customer_zip_code == "11201"
        assert updated.min_delivery_time == order.min_delivery_time
        assert updated.max_delivery_time == order.max_delivery_time
        assert updated.expected_delivery_time == order.expected_delivery_time


class TestUnservicedZip:
    """Orders for unknown zip codes are rejected without side effects."""

    def test_unserviced_zip_raises(self, services, zip_10001, business):
        with pytest.raises(UnservicedZipError) as exc_info:
            services.ordering.create_order(order_request(business.id, "99999"))

        assert exc_info.value.message == "Zip code not serviced"

    def test_unserviced_zip_persists_nothing(self, services, zip_10001, business, email_channel):
        with pytest.raises(UnservicedZipError):
            services.ordering.create_order(order_request(business.id, "99999"))

        services.dispatcher.flush(timeout=5)
        assert services.data_store.get_orders() == []
        assert email_channel.get_sent_count() == 0


class TestCreationNotification:
    """The business hears about new orders; failures stay out of the way."""

    def test_business_is_emailed(self, services, zip_10001, business, email_channel):
        order = services.ordering.create_order(order_request(business.id))
        assert services.dispatcher.flush(timeout=5)

        message = email_channel.find_message_to("orders@cornerbakery.example.com")
        assert message is not None
        assert message.success
        assert message.subject == "Order Created"
        assert message.body == f"Order {order.id} created"

    def test_no_email_without_address(self, services, zip_10001, email_channel):
        quiet = services.businesses.create_business(BusinessCreate(business_name="No Mail Deli"))

        services.ordering.create_order(order_request(quiet.id))
        services.dispatcher.flush(timeout=5)

        assert email_channel.get_sent_count() == 0

    def test_unknown_business_still_creates_order(self, services, zip_10001, email_channel):
        order = services.ordering.create_order(order_request("biz-unknown"))
        services.dispatcher.flush(timeout=5)

        assert services.data_store.get_order(order.id) is not None
        assert email_channel.get_sent_count() == 0

    def test_failed_delivery_does_not_fail_creation(self, services, zip_10001, business, caplog):
        services.dispatcher.channel = EmailChannel(fail_rate=1.0)

        with caplog.at_level(logging.ERROR, logger="notifications"):
            order = services.ordering.create_order(order_request(business.id))
            services.dispatcher.flush(timeout=5)

        assert services.data_store.get_order(order.id) is not None
        assert any("not delivered" in r.getMessage() for r in caplog.records)

    def test_raising_channel_does_not_fail_creation(self, services, zip_10001, business, caplog):
        class BrokenChannel(EmailChannel):
            def send(self, to, subject, body):
                raise ConnectionError("SMTP relay unreachable")

        services.dispatcher.channel = BrokenChannel()

        with caplog.at_level(logging.ERROR, logger="notifications"):
            order = services.ordering.create_order(order_request(business.id))
            services.dispatcher.flush(timeout=5)

        assert order.order_status == OrderStatus.RECEIVED
        assert any(r.exc_info for r in caplog.records if r.name == "notifications")

    def test_stopped_dispatcher_does_not_fail_creation(self, services, zip_10001, business):
        services.dispatcher.shutdown()

        order = services.ordering.create_order(order_request(business.id))

        assert services.data_store.get_order(order.id) is not None
