"""
Domain models for the order delivery service.

Four independent record types live in the store: businesses, drivers,
zip code entries and orders. Orders point at businesses and drivers by id
only; the query layer resolves those references when an order is read.

Design decisions:
- Using Pydantic for validation and serialization
- Python attributes are snake_case, the wire format is camelCase (aliases)
- Order status is a closed enum with an explicit transition table
- Drivers and orders carry a ``version`` counter used for optimistic
  concurrency in the store
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Optional
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel


def utc_now() -> datetime:
    """Current wall-clock time, timezone-aware."""
    return datetime.now(timezone.utc)


def new_id() -> str:
    return uuid4().hex


# =============================================================================
# Enums - Status values used across the domain
# =============================================================================

class OrderStatus(str, Enum):
    """
    Order lifecycle states.

    received -> assigned -> picked_up -> out_for_delivery -> delivered,
    with cancelled reachable only before a driver is assigned.
    """
    RECEIVED = "received"                   # Order created, no driver yet
    ASSIGNED = "assigned"                   # A driver has been assigned
    PICKED_UP = "picked_up"                 # Driver collected the items
    OUT_FOR_DELIVERY = "out_for_delivery"   # On the way to the customer
    DELIVERED = "delivered"                 # Terminal
    CANCELLED = "cancelled"                 # Terminal


class DriverStatus(str, Enum):
    """Binary driver availability."""
    AVAILABLE = "available"
    BUSY = "busy"


# Allowed moves between distinct states. Staying in the same state is
# always accepted and only refreshes the update timestamp.
ORDER_TRANSITIONS: dict[OrderStatus, frozenset[OrderStatus]] = {
    OrderStatus.RECEIVED: frozenset({OrderStatus.ASSIGNED, OrderStatus.CANCELLED}),
    OrderStatus.ASSIGNED: frozenset({OrderStatus.PICKED_UP, OrderStatus.DELIVERED}),
    OrderStatus.PICKED_UP: frozenset({OrderStatus.OUT_FOR_DELIVERY, OrderStatus.DELIVERED}),
    OrderStatus.OUT_FOR_DELIVERY: frozenset({OrderStatus.DELIVERED}),
    OrderStatus.DELIVERED: frozenset(),
    OrderStatus.CANCELLED: frozenset(),
}

# Statuses in which the order's details may still be edited
EDITABLE_STATUSES = frozenset({OrderStatus.RECEIVED, OrderStatus.ASSIGNED})

# Statuses from which a driver may be (re)assigned
ASSIGNABLE_STATUSES = frozenset({OrderStatus.RECEIVED, OrderStatus.ASSIGNED})


def can_transition(current: OrderStatus, target: OrderStatus) -> bool:
    """Check the transition table for a move from ``current`` to ``target``."""
    return current == target or target in ORDER_TRANSITIONS[current]


class DeliveryModel(BaseModel):
    """Base model: camelCase on the wire, snake_case in Python."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# =============================================================================
# Core Domain Models
# =============================================================================

class Business(DeliveryModel):
    """
    A business placing delivery orders.

    Reference data only: there is no update path, so the model is frozen.
    """
    id: str = Field(default_factory=new_id, description="Unique business identifier")
    business_name: str = Field(..., min_length=1, description="Display name")
    business_street: Optional[str] = None
    business_city: Optional[str] = None
    business_state: Optional[str] = None
    business_zip_code: Optional[str] = None
    business_contact: Optional[str] = Field(default=None, description="Contact person")
    business_email: Optional[str] = Field(
        default=None,
        description="Address that receives order notifications"
    )
    business_phone: Optional[str] = None

    model_config = ConfigDict(frozen=True)


class Driver(DeliveryModel):
    """A delivery driver with a binary availability flag."""
    id: str = Field(default_factory=new_id, description="Unique driver identifier")
    driver_name: str = Field(..., min_length=1, description="Driver display name")
    contact_info: Optional[str] = None
    availability_status: DriverStatus = Field(default=DriverStatus.AVAILABLE)
    version: int = Field(default=0, ge=0, description="Optimistic concurrency token")

    @property
    def is_available(self) -> bool:
        return self.availability_status == DriverStatus.AVAILABLE


class ZipCode(DeliveryModel):
    """
    Service area entry: delivery time bounds for one zip code.

    All times are minutes from order creation.
    """
    id: str = Field(default_factory=new_id)
    zip_code: str = Field(..., min_length=1)
    min_delivery_time: int = Field(..., ge=0, description="Minutes")
    max_delivery_time: int = Field(..., ge=0, description="Minutes")
    expected_delivery_time: int = Field(..., ge=0, description="Minutes")

    model_config = ConfigDict(frozen=True)

    @model_validator(mode="after")
    def check_bounds(self) -> "ZipCode":
        if not (self.min_delivery_time <= self.expected_delivery_time <= self.max_delivery_time):
            raise ValueError(
                "delivery times must satisfy minDeliveryTime <= "
                "expectedDeliveryTime <= maxDeliveryTime"
            )
        return self


class Order(DeliveryModel):
    """
    A delivery order.

    The three delivery window timestamps are computed once at creation and
    never recomputed. ``assigned_driver_id`` is set exactly when the order
    has reached ``assigned`` or a later state.
    """
    id: str = Field(default_factory=new_id, description="Unique order identifier")
    business_id: str = Field(..., description="Reference to business")
    customer_street: Optional[str] = None
    customer_city: Optional[str] = None
    customer_state: Optional[str] = None
    customer_zip_code: str = Field(..., description="Destination zip code")
    order_items: Optional[str] = Field(default=None, description="Free-text item description")
    order_status: OrderStatus = Field(default=OrderStatus.RECEIVED)
    assigned_driver_id: Optional[str] = Field(default=None, description="Reference to driver")
    min_delivery_time: datetime
    max_delivery_time: datetime
    expected_delivery_time: datetime
    actual_delivery_time: Optional[datetime] = None
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)
    version: int = Field(default=0, ge=0, description="Optimistic concurrency token")

    @property
    def is_editable(self) -> bool:
        return self.order_status in EDITABLE_STATUSES

    @property
    def has_driver(self) -> bool:
        return self.assigned_driver_id is not None


class OrderDetail(Order):
    """
    An order with its business and driver references resolved.

    Built at read time by the query layer; never stored.
    """
    business: Optional[Business] = None
    assigned_driver: Optional[Driver] = None
