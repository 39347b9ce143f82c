"""
In-memory data store for the delivery service, optionally seeded from JSON.

This module provides the storage layer: four independent record collections
(businesses, drivers, zip codes, orders) keyed by generated id.

Design decisions:
- Fixture files in the data directory seed the store lazily on first access
- Each single-record write is atomic (guarded by one store lock)
- There are no multi-record transactions; drivers and orders carry a
  ``version`` token and saves are compare-and-set, so callers can detect a
  concurrent write and compensate
- Records handed out are copies; mutating them does not touch the store

One DataStore is built at process start and injected into the services.
"""

import json
import logging
import threading
from pathlib import Path
from typing import Optional

from shared.models import Business, Driver, DriverStatus, Order, ZipCode

logger = logging.getLogger("data_store")


class StaleRecordError(Exception):
    """A compare-and-set save found a newer version than the caller read."""

    def __init__(self, kind: str, record_id: str, expected: int, actual: int):
        self.kind = kind
        self.record_id = record_id
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"{kind} {record_id} was modified concurrently "
            f"(expected version {expected}, found {actual})"
        )


class DataStore:
    """
    Central data store holding all four record collections.

    Example:
        store = DataStore(data_dir=Path("data"))
        driver = store.get_driver("drv-001")
        busy = driver.model_copy(update={"availability_status": DriverStatus.BUSY})
        store.save_driver(busy, expected_version=driver.version)
    """

    def __init__(self, data_dir: Optional[Path] = None):
        """
        Initialize the data store.

        Args:
            data_dir: Directory containing JSON fixtures used to seed the
                     store. ``None`` starts with empty collections.
        """
        self.data_dir = Path(data_dir) if data_dir is not None else None
        self._lock = threading.RLock()

        # In-memory collections - loaded lazily
        self._businesses: Optional[dict[str, Business]] = None
        self._drivers: Optional[dict[str, Driver]] = None
        self._zip_codes: Optional[dict[str, ZipCode]] = None  # keyed by zip code
        self._orders: Optional[dict[str, Order]] = None

    # =========================================================================
    # Data Loading (lazy)
    # =========================================================================

    def _load_json(self, filename: str) -> list[dict]:
        """Load a JSON fixture file."""
        if self.data_dir is None:
            return []
        filepath = self.data_dir / filename
        if not filepath.exists():
            return []
        with open(filepath, "r") as f:
            return json.load(f)

    def _ensure_loaded(self):
        """Lazy load every collection from its fixture file."""
        with self._lock:
            if self._businesses is None:
                data = self._load_json("businesses.json")
                self._businesses = {b.id: b for b in map(Business.model_validate, data)}
            if self._drivers is None:
                data = self._load_json("drivers.json")
                self._drivers = {d.id: d for d in map(Driver.model_validate, data)}
            if self._zip_codes is None:
                data = self._load_json("zipcodes.json")
                self._zip_codes = {z.zip_code: z for z in map(ZipCode.model_validate, data)}
            if self._orders is None:
                data = self._load_json("orders.json")
                self._orders = {o.id: o for o in map(Order.model_validate, data)}

    # =========================================================================
    # Business Operations
    # =========================================================================

    def add_business(self, business: Business) -> Business:
        self._ensure_loaded()
        with self._lock:
            self._businesses[business.id] = business
        return business

    def get_business(self, business_id: str) -> Optional[Business]:
        """Get a business by ID."""
        self._ensure_loaded()
        return self._businesses.get(business_id)

    def get_businesses(self) -> list[Business]:
        """Get all businesses."""
        self._ensure_loaded()
        with self._lock:
            return list(self._businesses.values())

    # =========================================================================
    # Driver Operations
    # =========================================================================

    def add_driver(self, driver: Driver) -> Driver:
        self._ensure_loaded()
        with self._lock:
            self._drivers[driver.id] = driver.model_copy()
        return driver

    def get_driver(self, driver_id: str) -> Optional[Driver]:
        """Get a driver by ID."""
        self._ensure_loaded()
        with self._lock:
            driver = self._drivers.get(driver_id)
            return driver.model_copy() if driver else None

    def get_drivers(self) -> list[Driver]:
        """Get all drivers, in registration order."""
        self._ensure_loaded()
        with self._lock:
            return [d.model_copy() for d in self._drivers.values()]

    def get_available_drivers(self) -> list[Driver]:
        """Get drivers whose availability status is ``available``."""
        return [d for d in self.get_drivers() if d.availability_status == DriverStatus.AVAILABLE]

    def save_driver(self, driver: Driver, expected_version: int) -> Driver:
        """
        Replace a stored driver if its version still matches.

        Returns the stored copy with its version bumped.

        Raises:
            KeyError: If the driver does not exist
            StaleRecordError: If another write happened since ``expected_version``
        """
        self._ensure_loaded()
        with self._lock:
            current = self._drivers.get(driver.id)
            if current is None:
                raise KeyError(driver.id)
            if current.version != expected_version:
                raise StaleRecordError("Driver", driver.id, expected_version, current.version)
            stored = driver.model_copy(update={"version": current.version + 1})
            self._drivers[driver.id] = stored
            return stored.model_copy()

    # =========================================================================
    # Zip Code Operations
    # =========================================================================

    def add_zip_code(self, zip_code: ZipCode) -> ZipCode:
        """
        Register a zip code entry.

        Raises:
            ValueError: If the zip code is already registered
        """
        self._ensure_loaded()
        with self._lock:
            if zip_code.zip_code in self._zip_codes:
                raise ValueError(f"Zip code already registered: {zip_code.zip_code}")
            self._zip_codes[zip_code.zip_code] = zip_code
        return zip_code

    def get_zip_code(self, zip_code: str) -> Optional[ZipCode]:
        """Get a service area entry by zip code (not by record id)."""
        self._ensure_loaded()
        return self._zip_codes.get(zip_code)

    def get_zip_codes(self) -> list[ZipCode]:
        self._ensure_loaded()
        with self._lock:
            return list(self._zip_codes.values())

    # =========================================================================
    # Order Operations
    # =========================================================================

    def add_order(self, order: Order) -> Order:
        self._ensure_loaded()
        with self._lock:
            self._orders[order.id] = order.model_copy()
        return order

    def get_order(self, order_id: str) -> Optional[Order]:
        """Get an order by ID."""
        self._ensure_loaded()
        with self._lock:
            order = self._orders.get(order_id)
            return order.model_copy() if order else None

    def get_orders(
        self,
        business_id: Optional[str] = None,
        driver_id: Optional[str] = None,
    ) -> list[Order]:
        """
        Get orders, optionally filtered.

        Both filters are equality matches; when both are given an order must
        match both.
        """
        self._ensure_loaded()
        with self._lock:
            return [
                o.model_copy() for o in self._orders.values()
                if (business_id is None or o.business_id == business_id)
                and (driver_id is None or o.assigned_driver_id == driver_id)
            ]

    def save_order(self, order: Order, expected_version: int) -> Order:
        """
        Replace a stored order if its version still matches.

        Raises:
            KeyError: If the order does not exist
            StaleRecordError: If another write happened since ``expected_version``
        """
        self._ensure_loaded()
        with self._lock:
            current = self._orders.get(order.id)
            if current is None:
                raise KeyError(order.id)
            if current.version != expected_version:
                raise StaleRecordError("Order", order.id, expected_version, current.version)
            stored = order.model_copy(update={"version": current.version + 1})
            self._orders[order.id] = stored
            return stored.model_copy()

    # =========================================================================
    # Utility Methods
    # =========================================================================

    def reload(self):
        """
        Drop all in-memory state and reseed from the fixture files.

        Useful for tests that modify records.
        """
        with self._lock:
            self._businesses = None
            self._drivers = None
            self._zip_codes = None
            self._orders = None
        logger.debug("Data store reset")
