"""
Order delivery workflow.

Businesses create orders for customers in serviced zip codes, orders are
assigned to drivers, and order status progresses until delivery.
"""

from delivery.container import ServiceContainer, build_services
from delivery.notifier import NotificationDispatcher
from delivery.services import (
    BusinessDirectory,
    DriverRegistry,
    OrderingService,
    ServiceAreaDirectory,
)

__all__ = [
    "ServiceContainer",
    "build_services",
    "NotificationDispatcher",
    "BusinessDirectory",
    "DriverRegistry",
    "OrderingService",
    "ServiceAreaDirectory",
]
