"""
FastAPI application for the order delivery service.

This application provides:
1. Business, driver and zip code registration (/api/businesses, /api/drivers, /api/zipcodes)
2. The order lifecycle (/api/orders, assignment, status changes)
3. A health check and, when present, the static front-end

Run with:
    uv run uvicorn api.main:app --reload

Then visit http://localhost:8000/docs for interactive API documentation.
"""

import logging
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Callable, Optional

from fastapi import APIRouter, Depends, FastAPI, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from pydantic import BaseModel

from delivery.container import ServiceContainer, build_services
from delivery.models import (
    AssignDriverRequest,
    BusinessCreate,
    DriverCreate,
    OrderCreate,
    OrderUpdate,
    StatusUpdate,
    ZipCodeCreate,
)
from delivery.services import (
    BusinessDirectory,
    DriverRegistry,
    OrderingService,
    ServiceAreaDirectory,
)
from shared.channels import EmailChannel
from shared.config import Settings, get_settings
from shared.data_store import DataStore
from shared.errors import DeliveryError, NotFoundError
from shared.models import Business, Driver, Order, OrderDetail, ZipCode, utc_now

LOG_FORMAT = "%(asctime)s | %(name)-24s | %(levelname)-5s | %(message)s"

logger = logging.getLogger("delivery_api")


class ErrorResponse(BaseModel):
    """Error envelope returned for every failed request."""
    error: str


ERROR_RESPONSES = {400: {"model": ErrorResponse}}


# =============================================================================
# Dependencies
# =============================================================================

def get_services(request: Request) -> ServiceContainer:
    return request.app.state.services


def get_businesses(request: Request) -> BusinessDirectory:
    return get_services(request).businesses


def get_drivers(request: Request) -> DriverRegistry:
    return get_services(request).drivers


def get_zip_codes(request: Request) -> ServiceAreaDirectory:
    return get_services(request).zip_codes


def get_ordering(request: Request) -> OrderingService:
    return get_services(request).ordering


router = APIRouter()


# =============================================================================
# Businesses
# =============================================================================

@router.post("/businesses", status_code=201, response_model=Business,
             responses=ERROR_RESPONSES, tags=["Businesses"])
def create_business(body: BusinessCreate, businesses: BusinessDirectory = Depends(get_businesses)):
    """Register a business."""
    return businesses.create_business(body)


@router.get("/businesses", response_model=list[Business], tags=["Businesses"])
def list_businesses(businesses: BusinessDirectory = Depends(get_businesses)):
    """Get all businesses."""
    return businesses.list_businesses()


# =============================================================================
# Drivers
# =============================================================================

@router.post("/drivers", status_code=201, response_model=Driver,
             responses=ERROR_RESPONSES, tags=["Drivers"])
def create_driver(body: DriverCreate, drivers: DriverRegistry = Depends(get_drivers)):
    """Register a driver. New drivers start available."""
    return drivers.register_driver(body)


@router.get("/drivers", response_model=list[Driver], tags=["Drivers"])
def list_drivers(drivers: DriverRegistry = Depends(get_drivers)):
    """Get all drivers."""
    return drivers.list_drivers()


@router.get("/drivers/{driver_id}", response_model=Driver,
            responses={404: {"model": ErrorResponse}}, tags=["Drivers"])
def get_driver(driver_id: str, drivers: DriverRegistry = Depends(get_drivers)):
    """Get one driver."""
    driver = drivers.get_driver(driver_id)
    if driver is None:
        raise NotFoundError("Driver", driver_id)
    return driver


# =============================================================================
# Zip codes
# =============================================================================

@router.post("/zipcodes", status_code=201, response_model=ZipCode,
             responses=ERROR_RESPONSES, tags=["Zip Codes"])
def create_zip_code(body: ZipCodeCreate, zip_codes: ServiceAreaDirectory = Depends(get_zip_codes)):
    """Register a serviced zip code with its delivery times in minutes."""
    return zip_codes.add_zip_code(body)


@router.get("/zipcodes", response_model=list[ZipCode], tags=["Zip Codes"])
def list_zip_codes(zip_codes: ServiceAreaDirectory = Depends(get_zip_codes)):
    """Get all serviced zip codes."""
    return zip_codes.list_zip_codes()


@router.get("/zipcodes/{zip_code}", response_model=Optional[ZipCode], tags=["Zip Codes"])
def get_zip_code(zip_code: str, zip_codes: ServiceAreaDirectory = Depends(get_zip_codes)):
    """Get a zip code entry. Unserviced zip codes return ``null``."""
    return zip_codes.get_zip_code(zip_code)


# =============================================================================
# Orders
# =============================================================================

@router.post("/orders", status_code=201, response_model=Order,
             responses=ERROR_RESPONSES, tags=["Orders"])
def create_order(body: OrderCreate, ordering: OrderingService = Depends(get_ordering)):
    """
    Create an order.

    The delivery window is computed from the zip code entry. The business
    is notified by email in the background if it has an address on file.
    """
    return ordering.create_order(body)


@router.get("/orders", response_model=list[OrderDetail], tags=["Orders"])
def list_orders(
    business_id: Optional[str] = Query(default=None, alias="businessId"),
    driver_id: Optional[str] = Query(default=None, alias="driverId"),
    ordering: OrderingService = Depends(get_ordering),
):
    """Get orders, optionally filtered by business and/or driver."""
    return ordering.list_orders(business_id=business_id or None, driver_id=driver_id or None)


@router.get("/orders/{order_id}", response_model=OrderDetail,
            responses={404: {"model": ErrorResponse}}, tags=["Orders"])
def get_order(order_id: str, ordering: OrderingService = Depends(get_ordering)):
    """Get one order with its business and driver."""
    return ordering.get_order(order_id)


@router.patch("/orders/{order_id}", response_model=Order,
              responses=ERROR_RESPONSES, tags=["Orders"])
def update_order(order_id: str, body: OrderUpdate, ordering: OrderingService = Depends(get_ordering)):
    """Edit an order. Only allowed before pickup."""
    return ordering.update_order(order_id, body)


@router.delete("/orders/{order_id}", response_model=Order,
               responses=ERROR_RESPONSES, tags=["Orders"])
def cancel_order(order_id: str, ordering: OrderingService = Depends(get_ordering)):
    """Cancel an order. Only allowed while no driver is assigned."""
    return ordering.cancel_order(order_id)


@router.post("/orders/{order_id}/assign", response_model=Order,
             responses=ERROR_RESPONSES, tags=["Orders"])
def assign_driver(order_id: str, body: AssignDriverRequest,
                  ordering: OrderingService = Depends(get_ordering)):
    """Assign a named driver, or the first available one with ``autoAssign``."""
    return ordering.assign_driver(order_id, body)


@router.patch("/orders/{order_id}/status", response_model=Order,
              responses=ERROR_RESPONSES, tags=["Orders"])
def set_order_status(order_id: str, body: StatusUpdate,
                     ordering: OrderingService = Depends(get_ordering)):
    """Move an order to a new status. ``delivered`` releases the driver."""
    return ordering.set_status(order_id, body)


# =============================================================================
# Error handlers
# =============================================================================

def handle_delivery_error(request: Request, exc: DeliveryError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    messages = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        messages.append(f"{location}: {error.get('msg')}" if location else error.get("msg"))
    return JSONResponse(status_code=400, content={"error": "; ".join(messages) or "Invalid request"})


def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return JSONResponse(status_code=500, content={"error": "Internal server error"})


# =============================================================================
# Application
# =============================================================================

def create_app(
    settings: Optional[Settings] = None,
    data_store: Optional[DataStore] = None,
    channel: Optional[EmailChannel] = None,
    clock: Callable[[], datetime] = utc_now,
) -> FastAPI:
    """
    Build the FastAPI application.

    The services are created when the application starts and torn down when
    it stops; ``data_store``, ``channel`` and ``clock`` let tests supply
    their own.
    """
    settings = settings or get_settings()
    logging.basicConfig(level=settings.log_level, format=LOG_FORMAT, datefmt="%H:%M:%S")

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application startup and shutdown."""
        logger.info("Starting Order Delivery Service")
        app.state.services = build_services(
            settings,
            data_store=data_store,
            channel=channel,
            clock=clock,
        )
        yield
        logger.info("Shutting down")
        app.state.services.close()

    app = FastAPI(
        title="Order Delivery Service",
        description="""
        Businesses create delivery orders for customers in serviced zip codes.
        Orders are assigned to drivers and move through
        `received → assigned → picked_up → out_for_delivery → delivered`,
        or are `cancelled` before a driver is assigned.
        """,
        version="1.0.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(DeliveryError, handle_delivery_error)
    app.add_exception_handler(RequestValidationError, handle_validation_error)
    app.add_exception_handler(Exception, handle_unexpected_error)

    @app.get("/health", tags=["Health"])
    def health_check():
        """Health check endpoint."""
        return {"status": "healthy", "service": "order-delivery-service"}

    app.include_router(router, prefix=settings.api_prefix)

    if settings.static_dir is not None and settings.static_dir.is_dir():
        app.mount("/", StaticFiles(directory=settings.static_dir, html=True), name="static")

    return app


app = create_app()
