"""
SQLAlchemy Database Models

Two tables:
- orders: one self-contained record per customer order, line items kept as JSON
- users: customer directory keyed by phone number
"""

import enum
import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, String, Float, DateTime, Text, Boolean, JSON

from orderdesk.database import Base


def utc_now() -> datetime:
    """Application clock for created_at / updated_at."""
    return datetime.now(timezone.utc)


def new_id() -> str:
    return uuid.uuid4().hex


class OrderState(str, enum.Enum):
    """Payment state of an order. The only transition is PENDING -> CONFIRMED."""
    PENDING = "pending"
    CONFIRMED = "confirmed"


class Order(Base):
    """
    Customer food order.

    After creation only ``payment_confirmed`` (and with it ``updated_at``)
    ever changes. Orders are never deleted.
    """
    __tablename__ = "orders"

    id = Column(String(32), primary_key=True, default=new_id)

    # =========================================================================
    # CUSTOMER INFORMATION
    # =========================================================================
    full_name = Column(String(200), nullable=False)
    phone = Column(String(50), nullable=False, index=True)

    # =========================================================================
    # ORDER DETAILS
    # =========================================================================
    items = Column(JSON, nullable=False)  # [{"name": str, "price": float, "quantity": int}]
    notes = Column(Text, nullable=True)

    # =========================================================================
    # PRICING
    # =========================================================================
    total_amount = Column(Float, nullable=False)
    extra_fee = Column(Float, nullable=False, default=100.0)

    # =========================================================================
    # PAYMENT INFO
    # =========================================================================
    receipt_url = Column(Text, nullable=True)  # usually a data: URL of the receipt image
    payment_confirmed = Column(Boolean, nullable=False, default=False)

    # =========================================================================
    # TIMESTAMPS
    # =========================================================================
    created_at = Column(DateTime(timezone=True), nullable=False, default=utc_now, index=True)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utc_now, onupdate=utc_now)

    @property
    def status(self) -> OrderState:
        return OrderState.CONFIRMED if self.payment_confirmed else OrderState.PENDING

    def __repr__(self):
        return f"<Order {self.id} - {self.full_name} - {self.status.value}>"


class User(Base):
    """Customer directory entry, refreshed on every order submission."""
    __tablename__ = "users"

    id = Column(String(32), primary_key=True, default=new_id)
    full_name = Column(String(200), nullable=False)
    phone = Column(String(50), nullable=False, unique=True, index=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=utc_now)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utc_now, onupdate=utc_now)

    def __repr__(self):
        return f"<User {self.phone} - {self.full_name}>"
