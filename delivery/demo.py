"""
Demonstration walkthrough of the order lifecycle.

Runs entirely in-process against an empty store: registers a zip code, a
business and a driver, then takes one order from creation to delivery and
shows a rejected cancellation along the way.
"""

import logging

from delivery.container import build_services
from delivery.models import (
    AssignDriverRequest,
    BusinessCreate,
    DriverCreate,
    OrderCreate,
    StatusUpdate,
    ZipCodeCreate,
)
from shared.config import Settings
from shared.errors import DeliveryError

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s | %(name)-24s | %(levelname)-5s | %(message)s",
    datefmt="%H:%M:%S",
)


def _step(title: str):
    print("\n" + "-" * 70)
    print(f"ACTION: {title}")
    print("-" * 70)


def run_lifecycle_demo():
    """Walk one order through received -> assigned -> ... -> delivered."""
    print("\n" + "=" * 70)
    print("DEMO: Order Lifecycle")
    print("=" * 70)

    services = build_services(Settings(data_dir=None))
    try:
        _step("Register zip code 10001 (30-60 min, expected 45)")
        services.zip_codes.add_zip_code(ZipCodeCreate(
            zip_code="10001",
            min_delivery_time=30,
            max_delivery_time=60,
            expected_delivery_time=45,
        ))

        _step("Register a business and a driver")
        business = services.businesses.create_business(BusinessCreate(
            business_name="Corner Bakery",
            business_email="orders@cornerbakery.example.com",
        ))
        driver = services.drivers.register_driver(DriverCreate(driver_name="Alex Kim"))

        _step("Create an order")
        order = services.ordering.create_order(OrderCreate(
            business_id=business.id,
            customer_street="350 5th Ave",
            customer_zip_code="10001",
            order_items="2 sourdough loaves",
        ))
        print(f"  window: {order.min_delivery_time:%H:%M} - {order.max_delivery_time:%H:%M} "
              f"(expected {order.expected_delivery_time:%H:%M})")

        _step("Auto-assign a driver")
        services.ordering.assign_driver(order.id, AssignDriverRequest(auto_assign=True))
        print(f"  driver {driver.driver_name}: {services.drivers.get_driver(driver.id).availability_status.value}")

        _step("Try to cancel the assigned order")
        try:
            services.ordering.cancel_order(order.id)
        except DeliveryError as e:
            print(f"  rejected: {e.message}")

        for status in ("picked_up", "out_for_delivery", "delivered"):
            _step(f"Set status {status}")
            services.ordering.set_status(order.id, StatusUpdate(status=status))

        detail = services.ordering.get_order(order.id)
        print(f"\n  final status: {detail.order_status.value}")
        print(f"  delivered at: {detail.actual_delivery_time:%H:%M:%S}")
        print(f"  driver {driver.driver_name}: {detail.assigned_driver.availability_status.value}")
    finally:
        services.close()

    print("\nNotifications sent:")
    for msg in services.channel.sent_messages:
        print(f"  {msg}")

    return services.channel.sent_messages


if __name__ == "__main__":
    run_lifecycle_demo()
