"""
User Upsert

Keeps exactly one ``users`` row per phone number: created on the first order
from that phone, ``full_name`` refreshed on every later one.
"""

import logging

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from orderdesk.core.exceptions import PersistenceError
from orderdesk.models import User, utc_now

logger = logging.getLogger(__name__)


async def _apply(session: AsyncSession, full_name: str, phone: str) -> User:
    result = await session.execute(select(User).where(User.phone == phone))
    user = result.scalar_one_or_none()

    now = utc_now()
    if user is None:
        user = User(full_name=full_name, phone=phone, created_at=now, updated_at=now)
        session.add(user)
        logger.info(f"Creating user for phone {phone}")
    else:
        user.full_name = full_name
        user.updated_at = now
        logger.debug(f"Refreshing user for phone {phone}")

    await session.commit()
    return user


async def upsert_user(session: AsyncSession, full_name: str, phone: str) -> User:
    """
    Create the user for ``phone`` or update its name.

    A concurrent request may insert the same phone between our SELECT and
    INSERT; the unique constraint then fails and the second attempt takes
    the update path.

    Raises:
        PersistenceError: If the store rejects the write
    """
    try:
        try:
            return await _apply(session, full_name, phone)
        except IntegrityError:
            await session.rollback()
            logger.warning(f"Concurrent insert for phone {phone}, retrying as update")
            return await _apply(session, full_name, phone)
    except SQLAlchemyError as e:
        await session.rollback()
        logger.exception(f"Failed to upsert user {phone}: {e}")
        raise PersistenceError("Unable to create order. Please try again.") from e
