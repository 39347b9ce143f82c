"""
Service area directory.

Maps a zip code to the delivery time bounds used when an order is created.
Entries are static reference data: added once, read by the order lifecycle.
"""

import logging
from typing import Optional

from delivery.models import ZipCodeCreate
from shared.data_store import DataStore
from shared.errors import ValidationError
from shared.models import ZipCode

logger = logging.getLogger("service_area")


class ServiceAreaDirectory:
    """Register and look up serviced zip codes."""

    def __init__(self, data_store: DataStore):
        self.data_store = data_store

    def add_zip_code(self, request: ZipCodeCreate) -> ZipCode:
        """
        Register a serviced zip code.

        Raises:
            ValidationError: If the zip code is already registered
        """
        try:
            entry = self.data_store.add_zip_code(ZipCode(**request.model_dump()))
        except ValueError as e:
            raise ValidationError(str(e)) from e
        logger.info(
            f"Zip code {entry.zip_code} serviced: "
            f"{entry.min_delivery_time}-{entry.max_delivery_time} min "
            f"(expected {entry.expected_delivery_time})"
        )
        return entry

    def get_zip_code(self, zip_code: str) -> Optional[ZipCode]:
        """Get the entry for a zip code, or None if it is not serviced."""
        return self.data_store.get_zip_code(zip_code)

    def list_zip_codes(self) -> list[ZipCode]:
        return self.data_store.get_zip_codes()
