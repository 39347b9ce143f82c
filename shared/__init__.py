"""
Shared infrastructure for the delivery service.

- Domain models (Business, Driver, ZipCode, Order)
- In-memory data store seeded from JSON fixtures
- Mock email channel and notification templates
- Error taxonomy and settings
"""

from shared.models import (
    Business,
    Driver,
    DriverStatus,
    Order,
    OrderDetail,
    OrderStatus,
    ZipCode,
)
from shared.data_store import DataStore, StaleRecordError
from shared.channels import EmailChannel, NotificationResult

__all__ = [
    "Business",
    "Driver",
    "DriverStatus",
    "Order",
    "OrderDetail",
    "OrderStatus",
    "ZipCode",
    "DataStore",
    "StaleRecordError",
    "EmailChannel",
    "NotificationResult",
]
