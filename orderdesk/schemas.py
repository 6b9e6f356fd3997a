"""
Pydantic Schemas for Request/Response Validation

Raw request bodies are accepted loosely (``OrderSubmission``) and only become
a ``NormalizedOrder`` after passing through the order normalizer. Wire names
are camelCase; Python attributes are snake_case.
"""

from datetime import datetime
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from orderdesk.models import OrderState


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )


# =============================================================================
# REQUEST SCHEMAS
# =============================================================================

class OrderSubmission(CamelModel):
    """
    Order body exactly as the customer sent it.

    Every field is untyped on purpose; coercion and rejection happen in
    ``orderdesk.services.normalizer.normalize_order``.
    """
    model_config = ConfigDict(extra="ignore")

    full_name: Any = None
    phone: Any = None
    items: Any = None
    total_amount: Any = None
    extra_fee: Any = None
    receipt_url: Any = None
    payment_confirmed: Any = None
    notes: Any = None


class PaymentUpdate(CamelModel):
    """Admin update body for ``PATCH /orders/{id}``."""
    model_config = ConfigDict(extra="ignore")

    payment_confirmed: Any = Field(None, examples=[True])


# =============================================================================
# NORMALIZED ORDER
# =============================================================================

class OrderItem(CamelModel):
    """Single line item in an order."""
    name: str = Field(default="Item", examples=["Jollof Rice"])
    price: float = Field(default=0.0, ge=0, examples=[1500])
    quantity: int = Field(default=1, ge=1, examples=[2])


class NormalizedOrder(CamelModel):
    """Validated order payload, ready to be persisted."""
    model_config = ConfigDict(frozen=True)

    full_name: str = Field(..., min_length=1)
    phone: str = Field(..., min_length=1)
    items: List[OrderItem] = Field(..., min_length=1)
    total_amount: float
    extra_fee: Optional[float] = None
    receipt_url: Optional[str] = None
    payment_confirmed: Optional[bool] = None
    notes: Optional[str] = None


# =============================================================================
# RESPONSE SCHEMAS
# =============================================================================

class OrderResponse(CamelModel):
    """Response schema for a single order."""
    model_config = ConfigDict(from_attributes=True)

    id: str
    full_name: str
    phone: str
    items: List[OrderItem]
    total_amount: float
    extra_fee: float
    receipt_url: Optional[str] = None
    payment_confirmed: bool
    notes: Optional[str] = None
    status: OrderState
    created_at: datetime
    updated_at: datetime


class OrderEnvelope(BaseModel):
    order: OrderResponse


class OrderListResponse(BaseModel):
    orders: List[OrderResponse]


class MessageResponse(BaseModel):
    """Standard error response."""
    message: str


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    database: str
    timestamp: datetime
