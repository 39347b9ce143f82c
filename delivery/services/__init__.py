"""
Domain services of the delivery workflow.

- BusinessDirectory: reference data for businesses placing orders
- DriverRegistry: drivers and their availability
- ServiceAreaDirectory: serviced zip codes and delivery time bounds
- OrderingService: the order lifecycle engine
"""

from delivery.services.businesses import BusinessDirectory
from delivery.services.drivers import DriverRegistry
from delivery.services.ordering import OrderingService
from delivery.services.zipcodes import ServiceAreaDirectory

__all__ = [
    "BusinessDirectory",
    "DriverRegistry",
    "OrderingService",
    "ServiceAreaDirectory",
]
