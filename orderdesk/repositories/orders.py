"""
Order Repository

Create, list, fetch and payment-status update against the ``orders`` table.
Store failures surface as ``PersistenceError``; the driver exception is logged
and chained, never returned to the caller.
"""

import logging
from typing import Any, List, Mapping, Optional

from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from orderdesk.core.config import get_settings
from orderdesk.core.exceptions import NotFoundError, PersistenceError, ValidationError
from orderdesk.models import Order, utc_now
from orderdesk.schemas import NormalizedOrder

logger = logging.getLogger(__name__)

# Wire name -> column for fields an administrator may change.
UPDATABLE_FIELDS = {
    "paymentConfirmed": "payment_confirmed",
}


def recognized_changes(changes: Mapping[str, Any]) -> dict[str, bool]:
    """Keep only updatable fields carrying a boolean value."""
    return {
        column: changes[field]
        for field, column in UPDATABLE_FIELDS.items()
        if isinstance(changes.get(field), bool)
    }


class OrderRepository:
    """Data access for orders, bound to one session."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, payload: NormalizedOrder) -> Order:
        """
        Persist a normalized order.

        ``extra_fee`` falls back to the configured default and
        ``payment_confirmed`` to False when the payload leaves them unset.
        """
        now = utc_now()
        extra_fee = payload.extra_fee
        if extra_fee is None:
            extra_fee = get_settings().default_extra_fee

        order = Order(
            full_name=payload.full_name,
            phone=payload.phone,
            items=[item.model_dump() for item in payload.items],
            total_amount=payload.total_amount,
            extra_fee=extra_fee,
            receipt_url=payload.receipt_url,
            payment_confirmed=bool(payload.payment_confirmed),
            notes=payload.notes,
            created_at=now,
            updated_at=now,
        )

        try:
            self.session.add(order)
            await self.session.commit()
            await self.session.refresh(order)
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.exception(f"Failed to create order: {e}")
            raise PersistenceError("Unable to create order. Please try again.") from e

        logger.info(f"Order {order.id} created for {order.phone}")
        return order

    async def list_all(self) -> List[Order]:
        """Every order, newest first."""
        query = select(Order).order_by(Order.created_at.desc(), Order.id.desc())
        try:
            result = await self.session.execute(query)
        except SQLAlchemyError as e:
            logger.exception(f"Failed to list orders: {e}")
            raise PersistenceError("Unable to fetch orders. Please try again.") from e
        return list(result.scalars().all())

    async def find_by_id(self, order_id: str) -> Optional[Order]:
        try:
            result = await self.session.execute(select(Order).where(Order.id == order_id))
        except SQLAlchemyError as e:
            logger.exception(f"Failed to fetch order {order_id}: {e}")
            raise PersistenceError("Unable to fetch order. Please try again.") from e
        return result.scalar_one_or_none()

    async def get_by_id(self, order_id: str) -> Order:
        """
        Raises:
            NotFoundError: If no order has this id
        """
        order = await self.find_by_id(order_id)
        if order is None:
            raise NotFoundError("Order not found")
        return order

    async def update_payment_confirmed(self, order_id: str, changes: Mapping[str, Any]) -> Order:
        """
        Apply an admin update to one order.

        ``changes`` uses wire names; only ``paymentConfirmed`` with a boolean
        value is recognized. The write is a single conditional UPDATE so the
        store's row-level atomicity is the only concurrency control. Setting
        False never moves a confirmed order back to pending.

        Raises:
            ValidationError: No recognized field, or an attempt to revoke
                a confirmed payment
            NotFoundError: If no order has this id
            PersistenceError: If the store fails
        """
        values = recognized_changes(changes)
        if not values:
            raise ValidationError("No valid fields provided")

        confirmed = values["payment_confirmed"]
        statement = (
            update(Order)
            .where(Order.id == order_id)
            .values(payment_confirmed=confirmed, updated_at=utc_now())
            .execution_options(synchronize_session=False)
        )
        if not confirmed:
            statement = statement.where(Order.payment_confirmed.is_(False))

        try:
            result = await self.session.execute(statement)
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.exception(f"Failed to update order {order_id}: {e}")
            raise PersistenceError("Unable to update order. Please try again.") from e

        if result.rowcount == 0:
            # Either the id is unknown or the guard refused a revocation.
            await self.get_by_id(order_id)
            raise ValidationError("Payment confirmation cannot be revoked")

        order = await self.get_by_id(order_id)
        await self.session.refresh(order)
        logger.info(f"Order {order_id} paymentConfirmed={confirmed}")
        return order
