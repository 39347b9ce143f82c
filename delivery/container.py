"""
Wiring for the delivery services.

The store, the email channel and the notification dispatcher are built once
per process and shared by every service. The API builds a container in its
lifespan; tests and the CLI demo build their own.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Callable, Optional

from delivery.notifier import NotificationDispatcher
from delivery.services.businesses import BusinessDirectory
from delivery.services.drivers import DriverRegistry
from delivery.services.ordering import OrderingService
from delivery.services.zipcodes import ServiceAreaDirectory
from shared.channels import EmailChannel
from shared.config import Settings
from shared.data_store import DataStore
from shared.models import utc_now

logger = logging.getLogger("delivery")


@dataclass
class ServiceContainer:
    """All services of one running instance."""
    data_store: DataStore
    channel: EmailChannel
    dispatcher: NotificationDispatcher
    businesses: BusinessDirectory
    drivers: DriverRegistry
    zip_codes: ServiceAreaDirectory
    ordering: OrderingService

    def close(self):
        """Let queued notifications finish and stop the dispatcher."""
        self.dispatcher.shutdown(wait=True)


def build_services(
    settings: Settings,
    data_store: Optional[DataStore] = None,
    channel: Optional[EmailChannel] = None,
    clock: Callable[[], datetime] = utc_now,
) -> ServiceContainer:
    """
    Build the service graph.

    Args:
        settings: Application settings
        data_store: Store to use instead of one seeded from ``settings.data_dir``
        channel: Email channel to use instead of a fresh mock channel
        clock: Wall-clock source for order timestamps
    """
    if data_store is None:
        data_dir: Optional[Path] = settings.data_dir
        if data_dir is not None and not data_dir.is_dir():
            logger.warning(f"Data directory {data_dir} not found, starting empty")
            data_dir = None
        data_store = DataStore(data_dir=data_dir)
    if channel is None:
        channel = EmailChannel(
            fail_rate=settings.email_fail_rate,
            sender=settings.notification_sender,
        )

    dispatcher = NotificationDispatcher(channel, max_workers=settings.notification_workers)
    zip_codes = ServiceAreaDirectory(data_store)
    drivers = DriverRegistry(data_store, max_attempts=settings.assign_max_attempts)

    return ServiceContainer(
        data_store=data_store,
        channel=channel,
        dispatcher=dispatcher,
        businesses=BusinessDirectory(data_store),
        drivers=drivers,
        zip_codes=zip_codes,
        ordering=OrderingService(
            data_store=data_store,
            zip_codes=zip_codes,
            drivers=drivers,
            dispatcher=dispatcher,
            clock=clock,
            assign_max_attempts=settings.assign_max_attempts,
        ),
    )
