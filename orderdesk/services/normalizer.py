"""
Order Normalizer

Turns a raw ``OrderSubmission`` into a ``NormalizedOrder`` or raises
``ValidationError``. Pure function of its input: no I/O, no clock.

Rules:
    - fullName / phone are trimmed and must be non-empty
    - items must be a non-empty list of objects
    - numbers may arrive as numeric strings ("1500", " 2 ")
    - item defaults: name "Item", price 0, quantity 1
    - receiptUrl / notes are trimmed and dropped when blank
    - extraFee is optional; when absent the repository applies the default
"""

import math
from typing import Any, Optional

from orderdesk.core.exceptions import ValidationError
from orderdesk.schemas import NormalizedOrder, OrderItem, OrderSubmission

DEFAULT_ITEM_NAME = "Item"
DEFAULT_ITEM_PRICE = 0.0
DEFAULT_ITEM_QUANTITY = 1


def to_number(value: Any) -> Optional[float]:
    """
    Interpret ``value`` as a finite number.

    Returns None for anything that is not a real number or a non-blank
    numeric string. Booleans are not numbers here.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, str):
        value = value.strip()
        # float() accepts digit separators such as "1_000"
        if not value or "_" in value:
            return None
    elif not isinstance(value, (int, float)):
        return None

    try:
        number = float(value)
    except (ValueError, OverflowError):
        return None
    return number if math.isfinite(number) else None


def clean_text(value: Any) -> Optional[str]:
    """Trimmed string, or None when missing, not a string, or blank."""
    if not isinstance(value, str):
        return None
    value = value.strip()
    return value or None


def is_out_of_range(value: Any) -> bool:
    """A JSON number that does not fit in a finite float."""
    return (
        isinstance(value, (int, float))
        and not isinstance(value, bool)
        and to_number(value) is None
    )


def item_number(raw: dict, key: str, default: float) -> float:
    value = raw.get(key)
    if is_out_of_range(value):
        raise ValidationError(f"item {key} must be a finite number")
    number = to_number(value)
    return default if number is None else number


def normalize_item(raw: Any) -> OrderItem:
    if not isinstance(raw, dict):
        raise ValidationError("each item must be an object")

    price = item_number(raw, "price", DEFAULT_ITEM_PRICE)
    if price < 0:
        raise ValidationError("item price must not be negative")

    quantity = item_number(raw, "quantity", DEFAULT_ITEM_QUANTITY)
    if quantity < 1 or not float(quantity).is_integer():
        raise ValidationError("item quantity must be a positive integer")

    return OrderItem(
        name=clean_text(raw.get("name")) or DEFAULT_ITEM_NAME,
        price=price,
        quantity=int(quantity),
    )


def normalize_order(submission: OrderSubmission) -> NormalizedOrder:
    """
    Validate and sanitize a raw submission.

    Raises:
        ValidationError: On the first missing or malformed field
    """
    full_name = clean_text(submission.full_name)
    phone = clean_text(submission.phone)
    if not full_name or not phone:
        raise ValidationError("fullName and phone are required")

    raw_items = submission.items
    if not isinstance(raw_items, list) or not raw_items:
        raise ValidationError("items must be a non-empty array")

    total_amount = to_number(submission.total_amount)
    if total_amount is None:
        raise ValidationError("totalAmount must be a valid number")

    payment_confirmed = submission.payment_confirmed
    if not isinstance(payment_confirmed, bool):
        payment_confirmed = None

    return NormalizedOrder(
        full_name=full_name,
        phone=phone,
        items=[normalize_item(item) for item in raw_items],
        total_amount=total_amount,
        extra_fee=to_number(submission.extra_fee),
        receipt_url=clean_text(submission.receipt_url),
        payment_confirmed=payment_confirmed,
        notes=clean_text(submission.notes),
    )
