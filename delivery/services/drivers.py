"""
Driver registry.

Tracks drivers and their availability. Availability only changes through
``claim`` and ``release``, which the order lifecycle calls during
assignment and delivery. Both are version-checked writes, so two requests
racing for the same driver cannot both win.
"""

import logging
from typing import Optional

from delivery.models import DriverCreate
from shared.data_store import DataStore, StaleRecordError
from shared.models import Driver, DriverStatus

logger = logging.getLogger("driver_registry")


class DriverRegistry:
    """Register drivers and coordinate their availability."""

    def __init__(self, data_store: DataStore, max_attempts: int = 3):
        self.data_store = data_store
        self.max_attempts = max_attempts

    def register_driver(self, request: DriverCreate) -> Driver:
        driver = self.data_store.add_driver(Driver(**request.model_dump()))
        logger.info(f"Driver {driver.id} registered: {driver.driver_name}")
        return driver

    def list_drivers(self) -> list[Driver]:
        return self.data_store.get_drivers()

    def get_driver(self, driver_id: str) -> Optional[Driver]:
        return self.data_store.get_driver(driver_id)

    def find_available_driver(self) -> Optional[Driver]:
        """First available driver in registration order, or None."""
        available = self.data_store.get_available_drivers()
        return available[0] if available else None

    def claim(self, driver: Driver) -> Driver:
        """
        Mark a driver busy, provided nobody changed it since it was read.

        Raises:
            StaleRecordError: If the driver was written concurrently
        """
        busy = driver.model_copy(update={"availability_status": DriverStatus.BUSY})
        claimed = self.data_store.save_driver(busy, expected_version=driver.version)
        logger.info(f"Driver {driver.id} claimed")
        return claimed

    def release(self, driver_id: str) -> Optional[Driver]:
        """
        Mark a driver available again.

        Retries on concurrent writes. Returns None if the driver no longer
        exists.

        Raises:
            StaleRecordError: If every attempt lost a race with another write
        """
        last_error: Optional[StaleRecordError] = None
        for _ in range(self.max_attempts):
            driver = self.data_store.get_driver(driver_id)
            if driver is None:
                logger.warning(f"Cannot release unknown driver {driver_id}")
                return None
            if driver.is_available:
                return driver
            available = driver.model_copy(update={"availability_status": DriverStatus.AVAILABLE})
            try:
                released = self.data_store.save_driver(available, expected_version=driver.version)
            except StaleRecordError as e:
                last_error = e
                logger.debug(f"Driver {driver_id} changed during release, retrying")
                continue
            logger.info(f"Driver {driver_id} released")
            return released
        raise last_error
