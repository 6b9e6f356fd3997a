import pytest
from sqlalchemy.exc import OperationalError

from orderdesk.core.exceptions import NotFoundError, PersistenceError, ValidationError
from orderdesk.models import OrderState
from orderdesk.repositories.orders import OrderRepository, recognized_changes
from orderdesk.schemas import NormalizedOrder, OrderItem


def payload(**overrides):
    data = {
        "full_name": "Ada Lovelace",
        "phone": "0801234567",
        "items": [OrderItem(name="Rice", price=1500, quantity=2)],
        "total_amount": 3100,
    }
    data.update(overrides)
    return NormalizedOrder(**data)


async def test_create_assigns_id_timestamps_and_defaults(session, clock):
    order = await OrderRepository(session).create(payload())

    assert len(order.id) == 32
    assert order.created_at == order.updated_at
    assert order.extra_fee == 100.0
    assert order.payment_confirmed is False
    assert order.status == OrderState.PENDING
    assert order.items == [{"name": "Rice", "price": 1500.0, "quantity": 2}]
    assert order.receipt_url is None
    assert order.notes is None


async def test_create_keeps_explicit_values(session):
    order = await OrderRepository(session).create(payload(
        extra_fee=0,
        payment_confirmed=True,
        receipt_url="data:image/png;base64,AAAA",
        notes="extra spicy",
    ))

    assert order.extra_fee == 0.0
    assert order.status == OrderState.CONFIRMED
    assert order.receipt_url == "data:image/png;base64,AAAA"
    assert order.notes == "extra spicy"


async def test_create_wraps_store_failure(session, monkeypatch):
    async def broken_commit():
        raise OperationalError("INSERT", {}, Exception("disk I/O error"))

    monkeypatch.setattr(session, "commit", broken_commit)

    with pytest.raises(PersistenceError, match="Unable to create order"):
        await OrderRepository(session).create(payload())


async def test_list_all_newest_first(session, clock):
    repo = OrderRepository(session)
    first = await repo.create(payload(full_name="First"))
    second = await repo.create(payload(full_name="Second"))
    third = await repo.create(payload(full_name="Third"))

    orders = await repo.list_all()

    assert [o.id for o in orders] == [third.id, second.id, first.id]


async def test_list_all_empty(session):
    assert await OrderRepository(session).list_all() == []


async def test_get_by_id(session):
    repo = OrderRepository(session)
    created = await repo.create(payload())

    assert (await repo.get_by_id(created.id)).id == created.id
    with pytest.raises(NotFoundError):
        await repo.get_by_id("does-not-exist")


def test_recognized_changes():
    assert recognized_changes({"paymentConfirmed": True}) == {"payment_confirmed": True}
    assert recognized_changes({"paymentConfirmed": "yes"}) == {}
    assert recognized_changes({"status": "paid"}) == {}
    assert recognized_changes({}) == {}


async def test_confirm_payment_refreshes_updated_at(session, clock):
    repo = OrderRepository(session)
    created = await repo.create(payload())
    created_at = created.created_at

    order = await repo.update_payment_confirmed(created.id, {"paymentConfirmed": True})

    assert order.status == OrderState.CONFIRMED
    assert order.created_at == created_at
    assert order.updated_at > order.created_at


async def test_confirm_payment_is_idempotent(session, clock):
    repo = OrderRepository(session)
    created = await repo.create(payload())

    await repo.update_payment_confirmed(created.id, {"paymentConfirmed": True})
    order = await repo.update_payment_confirmed(created.id, {"paymentConfirmed": True})

    assert order.payment_confirmed is True


async def test_update_unknown_id(session):
    repo = OrderRepository(session)
    created = await repo.create(payload())

    with pytest.raises(NotFoundError, match="Order not found"):
        await repo.update_payment_confirmed("missing", {"paymentConfirmed": True})

    assert (await repo.get_by_id(created.id)).payment_confirmed is False


async def test_update_without_recognized_field_touches_nothing(session, clock):
    repo = OrderRepository(session)
    created = await repo.create(payload())
    before = created.updated_at

    for changes in ({}, {"paymentConfirmed": "true"}, {"notes": "hi"}):
        with pytest.raises(ValidationError, match="No valid fields provided"):
            await repo.update_payment_confirmed(created.id, changes)

    order = await repo.get_by_id(created.id)
    await session.refresh(order)
    assert order.payment_confirmed is False
    assert order.updated_at == before


async def test_validation_happens_before_lookup(session):
    with pytest.raises(ValidationError):
        await OrderRepository(session).update_payment_confirmed("missing", {})


async def test_confirmed_order_cannot_go_back_to_pending(session, clock):
    repo = OrderRepository(session)
    created = await repo.create(payload(payment_confirmed=True))

    with pytest.raises(ValidationError, match="cannot be revoked"):
        await repo.update_payment_confirmed(created.id, {"paymentConfirmed": False})

    order = await repo.get_by_id(created.id)
    await session.refresh(order)
    assert order.payment_confirmed is True


async def test_false_on_pending_order_is_accepted(session, clock):
    repo = OrderRepository(session)
    created = await repo.create(payload())

    order = await repo.update_payment_confirmed(created.id, {"paymentConfirmed": False})

    assert order.status == OrderState.PENDING
    assert order.updated_at > order.created_at


async def store_down(*args, **kwargs):
    raise OperationalError("SELECT", {}, Exception("connection refused"))


async def test_list_all_wraps_store_failure(session, monkeypatch):
    monkeypatch.setattr(session, "execute", store_down)

    with pytest.raises(PersistenceError, match="Unable to fetch orders. Please try again."):
        await OrderRepository(session).list_all()


async def test_update_wraps_store_failure(session, monkeypatch):
    repo = OrderRepository(session)
    created = await repo.create(payload())
    monkeypatch.setattr(session, "execute", store_down)

    with pytest.raises(PersistenceError, match="Unable to update order. Please try again."):
        await repo.update_payment_confirmed(created.id, {"paymentConfirmed": True})


async def test_get_by_id_wraps_store_failure(session, monkeypatch):
    monkeypatch.setattr(session, "execute", store_down)

    with pytest.raises(PersistenceError, match="Unable to fetch order. Please try again."):
        await OrderRepository(session).get_by_id("any")
