"""
Request models for the delivery API.

These Pydantic models define the payloads callers send. Records returned to
callers are the domain models in shared.models.
"""

from typing import Optional

from pydantic import ConfigDict, Field, model_validator

from shared.models import DeliveryModel


class BusinessCreate(DeliveryModel):
    """Fields for registering a business."""
    business_name: str = Field(..., min_length=1)
    business_street: Optional[str] = None
    business_city: Optional[str] = None
    business_state: Optional[str] = None
    business_zip_code: Optional[str] = None
    business_contact: Optional[str] = None
    business_email: Optional[str] = None
    business_phone: Optional[str] = None


class DriverCreate(DeliveryModel):
    """
    Fields for registering a driver.

    New drivers always start ``available``; availability is owned by the
    order lifecycle afterwards.
    """
    driver_name: str = Field(..., min_length=1)
    contact_info: Optional[str] = None


class ZipCodeCreate(DeliveryModel):
    """A service area entry. All delivery times are in minutes."""
    zip_code: str = Field(..., min_length=1)
    min_delivery_time: int = Field(..., ge=0)
    max_delivery_time: int = Field(..., ge=0)
    expected_delivery_time: int = Field(..., ge=0)

    @model_validator(mode="after")
    def check_bounds(self) -> "ZipCodeCreate":
        if not (self.min_delivery_time <= self.expected_delivery_time <= self.max_delivery_time):
            raise ValueError(
                "delivery times must satisfy minDeliveryTime <= "
                "expectedDeliveryTime <= maxDeliveryTime"
            )
        return self


class OrderCreate(DeliveryModel):
    """
    Request to create an order.

    Delivery window fields are not accepted: they are computed from the
    service area entry for ``customer_zip_code``.
    """
    business_id: str = Field(..., min_length=1)
    customer_street: Optional[str] = None
    customer_city: Optional[str] = None
    customer_state: Optional[str] = None
    customer_zip_code: str = Field(..., min_length=1)
    order_items: Optional[str] = None


class OrderUpdate(DeliveryModel):
    """
    Partial update of an order's editable fields.

    Status, driver and delivery window fields have their own operations and
    are rejected here.
    """
    business_id: Optional[str] = None
    customer_street: Optional[str] = None
    customer_city: Optional[str] = None
    customer_state: Optional[str] = None
    customer_zip_code: Optional[str] = None
    order_items: Optional[str] = None

    model_config = ConfigDict(extra="forbid")


class AssignDriverRequest(DeliveryModel):
    """Assign a specific driver, or let the registry pick an available one."""
    auto_assign: bool = False
    driver_id: Optional[str] = None


class StatusUpdate(DeliveryModel):
    """
    Direct status change.

    Kept as a plain string so unknown values reach the lifecycle engine and
    are reported through the same error envelope as other rule violations.
    """
    status: str
