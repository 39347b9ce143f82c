"""
Shared pytest fixtures for the delivery service tests.

These fixtures provide a fixed clock, fresh stores and fully wired services
so tests don't interfere with each other.
"""

from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Callable

import pytest

from delivery.container import ServiceContainer, build_services
from delivery.models import (
    AssignDriverRequest,
    BusinessCreate,
    DriverCreate,
    OrderCreate,
    StatusUpdate,
    ZipCodeCreate,
)
from shared.channels import EmailChannel
from shared.config import Settings
from shared.data_store import DataStore
from shared.models import Business, Driver, Order, OrderStatus

T0 = datetime(2026, 3, 2, 9, 0, tzinfo=timezone.utc)


class FixedClock:
    """A clock that only moves when told to."""

    def __init__(self, start: datetime = T0):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs):
        self.now += timedelta(**kwargs)


@pytest.fixture
def data_dir() -> Path:
    """Path to the JSON fixture directory."""
    return Path(__file__).parent.parent / "data"


@pytest.fixture
def data_store(data_dir: Path) -> DataStore:
    """
    Fresh DataStore seeded from the JSON fixtures.

    A new instance per test, so in-memory writes never leak.
    """
    return DataStore(data_dir=data_dir)


@pytest.fixture
def empty_store() -> DataStore:
    """DataStore with no seed data."""
    return DataStore()


@pytest.fixture
def t0() -> datetime:
    """The instant every FixedClock starts at."""
    return T0


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock()


@pytest.fixture
def email_channel() -> EmailChannel:
    """Fresh EmailChannel for each test."""
    return EmailChannel(fail_rate=0.0)


@pytest.fixture
def settings() -> Settings:
    return Settings(data_dir=None, static_dir=None, assign_max_attempts=3)


@pytest.fixture
def services(settings, empty_store, email_channel, clock) -> ServiceContainer:
    """All services wired against an empty store and a fixed clock."""
    container = build_services(
        settings,
        data_store=empty_store,
        channel=email_channel,
        clock=clock,
    )
    yield container
    container.close()


# =============================================================================
# Reference data
# =============================================================================

@pytest.fixture
def zip_10001(services):
    """Zip code 10001: 30-60 minutes, 45 expected."""
    return services.zip_codes.add_zip_code(ZipCodeCreate(
        zip_code="10001",
        min_delivery_time=30,
        max_delivery_time=60,
        expected_delivery_time=45,
    ))


@pytest.fixture
def business(services) -> Business:
    """A business with a notification address."""
    return services.businesses.create_business(BusinessCreate(
        business_name="Corner Bakery",
        business_email="orders@cornerbakery.example.com",
    ))


@pytest.fixture
def driver(services) -> Driver:
    return services.drivers.register_driver(DriverCreate(driver_name="Alex Kim"))


@pytest.fixture
def make_order(services, zip_10001, business) -> Callable[..., Order]:
    """
    Factory for orders in a given status.

    Statuses past ``received`` go through real assignment and status
    changes, so a driver must be available for them.
    """
    path = [OrderStatus.PICKED_UP, OrderStatus.OUT_FOR_DELIVERY, OrderStatus.DELIVERED]

    def _make(status: OrderStatus = OrderStatus.RECEIVED) -> Order:
        order = services.ordering.create_order(OrderCreate(
            business_id=business.id,
            customer_street="350 5th Ave",
            customer_zip_code="10001",
            order_items="2 sourdough loaves",
        ))
        if status == OrderStatus.CANCELLED:
            return services.ordering.cancel_order(order.id)
        if status == OrderStatus.RECEIVED:
            return order
        order = services.ordering.assign_driver(order.id, AssignDriverRequest(auto_assign=True))
        for step in path[:path.index(status) + 1] if status in path else []:
            order = services.ordering.set_status(order.id, StatusUpdate(status=step.value))
        return order

    return _make
