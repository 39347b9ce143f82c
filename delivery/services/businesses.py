"""
Business directory.

Reference data only: businesses are registered and listed, never edited.
Orders refer to them by id.
"""

import logging
from typing import Optional

from delivery.models import BusinessCreate
from shared.data_store import DataStore
from shared.models import Business

logger = logging.getLogger("business_directory")


class BusinessDirectory:
    """Create and look up businesses."""

    def __init__(self, data_store: DataStore):
        self.data_store = data_store

    def create_business(self, request: BusinessCreate) -> Business:
        business = self.data_store.add_business(Business(**request.model_dump()))
        logger.info(f"Business {business.id} registered: {business.business_name}")
        return business

    def list_businesses(self) -> list[Business]:
        return self.data_store.get_businesses()

    def get_business(self, business_id: str) -> Optional[Business]:
        return self.data_store.get_business(business_id)
