"""
Order lifecycle engine.

Creates orders with their delivery windows, enforces the status transition
table, and coordinates driver assignment and release with the driver
registry.

Orders and drivers live in separate collections and there is no
multi-record transaction. Assignment therefore claims the driver with a
version-checked write first, then writes the order the same way; if the
order write loses a race the driver claim is undone.

Driver release happens in exactly one place: a status change that reaches
``delivered``. Cancellation never releases a driver because it is only
allowed before one is assigned.
"""

import logging
from datetime import datetime, timedelta
from typing import Callable, Optional

from delivery.models import AssignDriverRequest, OrderCreate, OrderUpdate, StatusUpdate
from delivery.notifier import NotificationDispatcher
from delivery.services.drivers import DriverRegistry
from delivery.services.zipcodes import ServiceAreaDirectory
from shared.data_store import DataStore, StaleRecordError
from shared.errors import (
    AssignmentConflictError,
    InvalidTransitionError,
    NoDriverAvailableError,
    NotFoundError,
    OrderLockedError,
    UnservicedZipError,
    ValidationError,
)
from shared.models import (
    ASSIGNABLE_STATUSES,
    Driver,
    Order,
    OrderDetail,
    OrderStatus,
    can_transition,
    utc_now,
)
from shared.templates import NotificationType, render_notification

logger = logging.getLogger("ordering_service")

CONCURRENT_UPDATE_MESSAGE = "Order was modified concurrently, retry the request"


class OrderingService:
    """
    The order lifecycle engine.

    Example:
        service = OrderingService(data_store, zip_codes, drivers, dispatcher)
        order = service.create_order(OrderCreate(business_id="biz-001", customer_zip_code="10001"))
        service.assign_driver(order.id, AssignDriverRequest(auto_assign=True))
        service.set_status(order.id, StatusUpdate(status="delivered"))
    """

    def __init__(
        self,
        data_store: DataStore,
        zip_codes: ServiceAreaDirectory,
        drivers: DriverRegistry,
        dispatcher: Optional[NotificationDispatcher] = None,
        clock: Callable[[], datetime] = utc_now,
        assign_max_attempts: int = 3,
    ):
        self.data_store = data_store
        self.zip_codes = zip_codes
        self.drivers = drivers
        self.dispatcher = dispatcher
        self.clock = clock
        self.assign_max_attempts = assign_max_attempts

    # =========================================================================
    # Creation
    # =========================================================================

    def create_order(self, request: OrderCreate) -> Order:
        """
        Create an order for a serviced zip code.

        The delivery window is anchored on a single clock reading and is
        never recomputed afterwards.

        Raises:
            UnservicedZipError: If the zip code has no service area entry
        """
        entry = self.zip_codes.get_zip_code(request.customer_zip_code)
        if entry is None:
            logger.warning(f"Rejected order for unserviced zip code {request.customer_zip_code}")
            raise UnservicedZipError()

        now = self.clock()
        order = Order(
            **request.model_dump(),
            min_delivery_time=now + timedelta(minutes=entry.min_delivery_time),
            max_delivery_time=now + timedelta(minutes=entry.max_delivery_time),
            expected_delivery_time=now + timedelta(minutes=entry.expected_delivery_time),
            created_at=now,
            updated_at=now,
        )
        order = self.data_store.add_order(order)
        logger.info(
            f"Order {order.id} received for business {order.business_id}, "
            f"expected by {order.expected_delivery_time.isoformat()}"
        )

        self._notify_order_created(order)
        return order

    def _notify_order_created(self, order: Order):
        """Queue the creation email; failures never reach the caller."""
        if self.dispatcher is None:
            return
        business = self.data_store.get_business(order.business_id)
        if business is None or not business.business_email:
            return
        try:
            subject, body = render_notification(NotificationType.ORDER_CREATED, order_id=order.id)
        except KeyError as e:
            logger.error(f"Could not render notification for order {order.id}: {e}")
            return
        self.dispatcher.dispatch(business.business_email, subject, body)

    # =========================================================================
    # Queries
    # =========================================================================

    def list_orders(
        self,
        business_id: Optional[str] = None,
        driver_id: Optional[str] = None,
    ) -> list[OrderDetail]:
        """List orders, optionally filtered by business and/or driver."""
        orders = self.data_store.get_orders(business_id=business_id, driver_id=driver_id)
        return [self._resolve(order) for order in orders]

    def get_order(self, order_id: str) -> OrderDetail:
        """
        Get one order with its business and driver resolved.

        Raises:
            NotFoundError: If the order does not exist
        """
        return self._resolve(self._require_order(order_id))

    def _resolve(self, order: Order) -> OrderDetail:
        """Expand the business and driver references of an order."""
        driver = None
        if order.assigned_driver_id:
            driver = self.data_store.get_driver(order.assigned_driver_id)
        return OrderDetail(
            **order.model_dump(),
            business=self.data_store.get_business(order.business_id),
            assigned_driver=driver,
        )

    def _require_order(self, order_id: str) -> Order:
        order = self.data_store.get_order(order_id)
        if order is None:
            raise NotFoundError("Order", order_id)
        return order

    def _save(self, order: Order, **changes) -> Order:
        """Write changes to an order as read; refreshes ``updated_at``."""
        updated = order.model_copy(update={**changes, "updated_at": self.clock()})
        try:
            return self.data_store.save_order(updated, expected_version=order.version)
        except StaleRecordError as e:
            logger.warning(str(e))
            raise AssignmentConflictError(CONCURRENT_UPDATE_MESSAGE) from e

    # =========================================================================
    # Edits and cancellation
    # =========================================================================

    def update_order(self, order_id: str, request: OrderUpdate) -> Order:
        """
        Edit an order's details.

        Raises:
            NotFoundError: If the order does not exist
            OrderLockedError: Once the order has left received/assigned
        """
        order = self._require_order(order_id)
        if not order.is_editable:
            logger.warning(f"Rejected update of order {order_id} in status {order.order_status.value}")
            raise OrderLockedError()

        changes = request.model_dump(exclude_unset=True)
        if "business_id" in changes and not changes["business_id"]:
            raise ValidationError("businessId cannot be empty")
        if "customer_zip_code" in changes and not changes["customer_zip_code"]:
            raise ValidationError("customerZipCode cannot be empty")

        updated = self._save(order, **changes)
        logger.info(f"Order {order_id} updated: {', '.join(sorted(changes)) or 'no fields'}")
        return updated

    def cancel_order(self, order_id: str) -> Order:
        """
        Cancel an order that has no driver yet.

        Raises:
            NotFoundError: If the order does not exist
            AssignmentConflictError: If a driver is assigned
            InvalidTransitionError: If the order is already delivered
        """
        order = self._require_order(order_id)
        if order.has_driver:
            logger.warning(f"Rejected cancellation of assigned order {order_id}")
            raise AssignmentConflictError()
        self._check_transition(order, OrderStatus.CANCELLED)

        updated = self._save(order, order_status=OrderStatus.CANCELLED)
        logger.info(f"Order {order_id} cancelled")
        return updated

    # =========================================================================
    # Driver assignment
    # =========================================================================

    def assign_driver(self, order_id: str, request: AssignDriverRequest) -> Order:
        """
        Assign a driver to an order.

        With ``auto_assign`` the first available driver is taken; otherwise
        the named driver must exist and be available. Re-assigning an
        ``assigned`` order releases the previous driver.

        Raises:
            NotFoundError: If the order does not exist
            InvalidTransitionError: If the order is past the assigned state
            NoDriverAvailableError: If no suitable driver could be claimed
            AssignmentConflictError: If the order changed during assignment
        """
        order = self._require_order(order_id)
        if order.order_status not in ASSIGNABLE_STATUSES:
            raise InvalidTransitionError(order.order_status.value, OrderStatus.ASSIGNED.value)

        previous_driver_id = order.assigned_driver_id
        if not request.auto_assign and request.driver_id and request.driver_id == previous_driver_id:
            return self._save(order)

        driver = self._claim_driver(request)
        try:
            updated = self._save(
                order,
                assigned_driver_id=driver.id,
                order_status=OrderStatus.ASSIGNED,
            )
        except AssignmentConflictError:
            self._release_driver(driver.id)
            raise

        if previous_driver_id and previous_driver_id != driver.id:
            self._release_driver(previous_driver_id)

        logger.info(f"Order {order_id} assigned to driver {driver.id}")
        return updated

    def _claim_driver(self, request: AssignDriverRequest) -> Driver:
        """
        Pick a driver and mark it busy.

        Auto-assignment moves on to the next available driver when a claim
        loses a race; an explicitly named driver gets a single attempt.
        """
        for _ in range(self.assign_max_attempts):
            if request.auto_assign:
                driver = self.drivers.find_available_driver()
            elif request.driver_id:
                driver = self.drivers.get_driver(request.driver_id)
            else:
                driver = None

            if driver is None or not driver.is_available:
                break
            try:
                return self.drivers.claim(driver)
            except StaleRecordError as e:
                logger.warning(str(e))
                if not request.auto_assign:
                    break

        logger.warning("No driver available for assignment")
        raise NoDriverAvailableError()

    # =========================================================================
    # Status changes
    # =========================================================================

    def set_status(self, order_id: str, request: StatusUpdate) -> Order:
        """
        Move an order to a new status.

        Reaching ``delivered`` stamps the actual delivery time and releases
        the assigned driver. No other status touches driver availability.

        Raises:
            NotFoundError: If the order does not exist
            ValidationError: If the status is not a known order status
            InvalidTransitionError: If the transition table forbids the move
            AssignmentConflictError: If cancelling an order with a driver
        """
        try:
            target = OrderStatus(request.status)
        except ValueError:
            raise ValidationError(f"Unknown order status: {request.status}") from None

        order = self._require_order(order_id)
        current = order.order_status
        if target == current:
            return self._save(order)

        if target == OrderStatus.CANCELLED and order.has_driver:
            raise AssignmentConflictError()
        if target == OrderStatus.ASSIGNED and not order.has_driver:
            raise InvalidTransitionError(current.value, target.value)
        self._check_transition(order, target)

        changes = {"order_status": target}
        if target == OrderStatus.DELIVERED:
            changes["actual_delivery_time"] = self.clock()
        updated = self._save(order, **changes)
        logger.info(f"Order {order_id} status {current.value} -> {target.value}")

        if target == OrderStatus.DELIVERED and updated.assigned_driver_id:
            self._release_driver(updated.assigned_driver_id)
        return updated

    def _release_driver(self, driver_id: str):
        try:
            self.drivers.release(driver_id)
        except StaleRecordError as e:
            logger.error(f"Driver {driver_id} could not be released: {e}")

    def _check_transition(self, order: Order, target: OrderStatus):
        if not can_transition(order.order_status, target):
            logger.warning(
                f"Rejected transition of order {order.id}: "
                f"{order.order_status.value} -> {target.value}"
            )
            raise InvalidTransitionError(order.order_status.value, target.value)
