"""
FastAPI Application Entry Point

Order Desk - customers submit food orders with a payment receipt,
administrators review them and confirm payments.

Endpoints:
    - POST  /order-submission: Submit a new order (alias: POST /orders)
    - GET   /orders: List all orders, newest first
    - GET   /orders/{id}: Get one order
    - PATCH /orders/{id}: Confirm payment for an order
    - GET   /health: System health check
"""

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional

from fastapi import FastAPI, Depends, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from orderdesk.core.config import get_settings, setup_logging
from orderdesk.core.exceptions import OrderDeskError, ValidationError
from orderdesk.database import gateway, get_db, init_db, ping_db
from orderdesk.repositories.orders import OrderRepository
from orderdesk.schemas import (
    HealthResponse,
    MessageResponse,
    OrderEnvelope,
    OrderListResponse,
    OrderResponse,
    OrderSubmission,
    PaymentUpdate,
)
from orderdesk.services.normalizer import normalize_order
from orderdesk.services.users import upsert_user

# Initialize configuration and logging
settings = get_settings()
setup_logging()
logger = logging.getLogger(__name__)

ERROR_RESPONSES = {
    400: {"model": MessageResponse},
    500: {"model": MessageResponse},
}


# =============================================================================
# APPLICATION LIFECYCLE
# =============================================================================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Manage application startup and shutdown events.
    """
    current = get_settings()
    logger.info("=" * 60)
    logger.info(f"🚀 Starting {current.app_name}")
    logger.info(f"   Version: {current.app_version}")
    logger.info(f"   Environment: {current.env_mode.value}")
    logger.info("=" * 60)

    await init_db()
    logger.info("✅ Database initialized")

    yield  # Application runs

    logger.info("Shutting down...")
    await gateway.dispose()
    logger.info("✅ Cleanup complete")


# =============================================================================
# APPLICATION INSTANCE
# =============================================================================

app = FastAPI(
    title=settings.app_name,
    description="Food ordering with manual receipt review and payment confirmation.",
    version=settings.app_version,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# =============================================================================
# ROOT & HEALTH ENDPOINTS
# =============================================================================

@app.get("/", tags=["Root"])
async def root() -> dict[str, str]:
    current = get_settings()
    return {
        "message": f"Welcome to {current.app_name}",
        "version": current.app_version,
        "environment": current.env_mode.value,
        "documentation": "/docs",
        "health": "/health",
    }


@app.get(
    "/health",
    response_model=HealthResponse,
    tags=["Health"],
    summary="System Health Check",
)
async def health_check() -> HealthResponse:
    database_ok = await ping_db()
    return HealthResponse(
        status="operational" if database_ok else "degraded",
        database="healthy" if database_ok else "unhealthy",
        timestamp=datetime.now(timezone.utc),
    )


# =============================================================================
# ORDER ENDPOINTS
# =============================================================================

@app.post(
    "/order-submission",
    response_model=OrderEnvelope,
    status_code=201,
    responses=ERROR_RESPONSES,
    tags=["Orders"],
    summary="Submit Order",
)
@app.post(
    "/orders",
    response_model=OrderEnvelope,
    status_code=201,
    responses=ERROR_RESPONSES,
    tags=["Orders"],
    include_in_schema=False,
)
async def submit_order(
    submission: OrderSubmission,
    db: AsyncSession = Depends(get_db),
) -> OrderEnvelope:
    """
    Submit a new order.

    The customer directory entry for the phone number is created or
    refreshed before the order itself is stored.
    """
    payload = normalize_order(submission)
    logger.info(f"Submitting order for {payload.phone} ({len(payload.items)} items)")

    await upsert_user(db, payload.full_name, payload.phone)
    order = await OrderRepository(db).create(payload)

    return OrderEnvelope(order=OrderResponse.model_validate(order))


@app.get(
    "/orders",
    response_model=OrderListResponse,
    responses={500: {"model": MessageResponse}},
    tags=["Orders"],
    summary="List Orders",
)
async def list_orders(db: AsyncSession = Depends(get_db)) -> OrderListResponse:
    """All orders, most recent first. No pagination."""
    orders = await OrderRepository(db).list_all()
    return OrderListResponse(
        orders=[OrderResponse.model_validate(order) for order in orders],
    )


@app.get(
    "/orders/{order_id}",
    response_model=OrderEnvelope,
    responses={404: {"model": MessageResponse}, 500: {"model": MessageResponse}},
    tags=["Orders"],
)
async def get_order(order_id: str, db: AsyncSession = Depends(get_db)) -> OrderEnvelope:
    order = await OrderRepository(db).get_by_id(order_id)
    return OrderEnvelope(order=OrderResponse.model_validate(order))


@app.patch(
    "/orders/{order_id}",
    response_model=OrderEnvelope,
    responses={**ERROR_RESPONSES, 404: {"model": MessageResponse}},
    tags=["Orders"],
    summary="Update Payment Status",
)
async def update_order(
    order_id: str,
    update: Optional[PaymentUpdate] = None,
    db: AsyncSession = Depends(get_db),
) -> OrderEnvelope:
    """Mark an order's payment as confirmed."""
    changes = update.model_dump(by_alias=True, exclude_unset=True) if update else {}
    order = await OrderRepository(db).update_payment_confirmed(order_id, changes)
    return OrderEnvelope(order=OrderResponse.model_validate(order))


# =============================================================================
# ERROR HANDLERS
# =============================================================================

@app.exception_handler(OrderDeskError)
async def order_desk_exception_handler(request: Request, exc: OrderDeskError) -> JSONResponse:
    if isinstance(exc, ValidationError):
        logger.warning(f"Rejected {request.method} {request.url.path}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content={"message": exc.message})


@app.exception_handler(RequestValidationError)
async def request_validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    logger.warning(f"Malformed body on {request.method} {request.url.path}: {exc.errors()}")
    return JSONResponse(
        status_code=400,
        content={"message": "Request body must be a JSON object"},
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all exception handler."""
    logger.exception(f"Unhandled exception: {exc}")
    return JSONResponse(
        status_code=500,
        content={"message": "An unexpected error occurred"},
    )
