"""
Error taxonomy for the delivery service.

Every error a service can raise on purpose derives from DeliveryError and
carries the HTTP status code the API layer renders it with. The message is
what ends up in the ``{"error": ...}`` response envelope.
"""

from typing import Optional


class DeliveryError(Exception):
    """Base class for all expected, per-request failures."""

    status_code: int = 400
    default_message: str = "Bad request"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(DeliveryError):
    """Malformed or missing input."""

    default_message = "Invalid request"


class UnservicedZipError(DeliveryError):
    """The customer's zip code has no service area entry."""

    default_message = "Zip code not serviced"


class OrderLockedError(DeliveryError):
    """The order has been picked up and can no longer be edited."""

    default_message = "Cannot update after pickup"


class AssignmentConflictError(DeliveryError):
    """The order's driver assignment prevents the operation."""

    default_message = "Cannot cancel assigned order"


class NoDriverAvailableError(DeliveryError):
    """The requested driver does not exist, is busy, or nobody is free."""

    default_message = "No driver available"


class InvalidTransitionError(DeliveryError):
    """The order status table does not allow the requested move."""

    def __init__(self, current: str, target: str):
        self.current = current
        self.target = target
        super().__init__(f"Cannot change status from {current} to {target}")


class NotFoundError(DeliveryError):
    """A looked-up entity does not exist."""

    status_code = 404
    default_message = "Not found"

    def __init__(self, entity: str, entity_id: Optional[str] = None):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} not found")
