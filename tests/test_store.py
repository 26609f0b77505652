"""Tests for the in-memory persistence gateway."""

import pytest

from gasline.errors import CustomerNotFoundError, PersistenceError
from gasline.gateways.store import InMemoryStore
from gasline.schemas.customer_schema import Customer
from gasline.schemas.order_schema import Order, OrderStatus, PaymentMethod, ServiceVariant
from gasline.schemas.report_schema import SealReport


def _order(customer_id: int = 1, **fields) -> Order:
    values = dict(
        customer_id=customer_id,
        service_variant=ServiceVariant.TANK_BY_VOLUME,
        volume=100.0,
        amount=1250.0,
        unit_price=12.5,
        payment_method=PaymentMethod.CASH,
        address="Calle Pino 45",
    )
    values.update(fields)
    return Order(**values)


class TestCustomers:
    @pytest.mark.asyncio
    async def test_create_assigns_id_and_normalizes_phone(self, store):
        customer = await store.create_customer(Customer(phone="whatsapp:+52 1 55 1234 5678"))
        assert customer.id == 1
        assert customer.phone == "+5215512345678"

    @pytest.mark.asyncio
    async def test_lookup_by_any_phone_format(self, store):
        await store.create_customer(Customer(phone="+5215512345678"))
        found = await store.get_customer_by_phone("+52 1 55 1234-5678")
        assert found is not None

    @pytest.mark.asyncio
    async def test_unknown_phone_returns_none(self, store):
        assert await store.get_customer_by_phone("+5200000000") is None

    @pytest.mark.asyncio
    async def test_duplicate_phone_rejected(self, store):
        await store.create_customer(Customer(phone="+5215512345678"))
        with pytest.raises(PersistenceError):
            await store.create_customer(Customer(phone="+5215512345678"))

    @pytest.mark.asyncio
    async def test_returned_records_are_copies(self, store):
        customer = await store.create_customer(Customer(phone="+5215512345678"))
        customer.first_name = "Changed"
        stored = await store.get_customer_by_phone("+5215512345678")
        assert stored.first_name == ""

    @pytest.mark.asyncio
    async def test_update_state(self, store):
        await store.create_customer(Customer(phone="+5215512345678"))
        await store.update_customer_state("+5215512345678", "ESPERANDO_DIRECCION")
        stored = await store.get_customer_by_phone("+5215512345678")
        assert stored.conversation_state == "ESPERANDO_DIRECCION"

    @pytest.mark.asyncio
    async def test_update_unknown_customer(self, store):
        with pytest.raises(CustomerNotFoundError):
            await store.update_customer(Customer(phone="+5200000000"))
        with pytest.raises(CustomerNotFoundError):
            await store.update_customer_state("+5200000000", "INICIO")


class TestOrders:
    @pytest.mark.asyncio
    async def test_last_order_is_most_recent(self, store):
        await store.create_order(_order(volume=100.0))
        second = await store.create_order(_order(volume=200.0))
        last = await store.get_last_order(1)
        assert last.id == second.id
        assert last.volume == 200.0

    @pytest.mark.asyncio
    async def test_no_orders(self, store):
        assert await store.get_last_order(1) is None
        assert await store.get_order(99) is None

    @pytest.mark.asyncio
    async def test_orders_by_status(self, store):
        await store.create_order(_order())
        await store.create_order(_order(
            service_variant=ServiceVariant.CYLINDER_RECHARGE,
            volume=None, amount=None, unit_price=None,
            cylinder_count=1, tracking_codes=["QR-1"],
            status=OrderStatus.PENDING_PICKUP,
        ))
        pending = await store.get_orders_by_status(OrderStatus.PENDING)
        pickup = await store.get_orders_by_status(OrderStatus.PENDING_PICKUP)
        assert len(pending) == 1
        assert len(pickup) == 1

    @pytest.mark.asyncio
    async def test_status_update_allowed(self, store):
        order = await store.create_order(_order())
        order.status = OrderStatus.DELIVERED
        updated = await store.update_order(order)
        assert updated.status == OrderStatus.DELIVERED

    @pytest.mark.asyncio
    async def test_confirmed_fields_are_immutable(self, store):
        order = await store.create_order(_order())
        order.volume = 999.0
        with pytest.raises(PersistenceError, match="volume"):
            await store.update_order(order)

    @pytest.mark.asyncio
    async def test_update_unknown_order(self, store):
        with pytest.raises(PersistenceError):
            await store.update_order(_order())


class TestSealReports:
    @pytest.mark.asyncio
    async def test_create_and_update(self, store):
        report = await store.create_seal_report(
            SealReport(customer_id=1, order_id=3, description="sello roto")
        )
        report.photo_requested = True
        await store.update_seal_report(report)
        stored = await store.get_seal_report(report.id)
        assert stored.photo_requested
        assert store.list_seal_reports()[0].order_id == 3

    @pytest.mark.asyncio
    async def test_update_unknown_report(self, store):
        with pytest.raises(PersistenceError):
            await store.update_seal_report(SealReport(customer_id=1, description="x"))


class TestReset:
    @pytest.mark.asyncio
    async def test_reset_clears_and_restarts_ids(self):
        store = InMemoryStore()
        await store.create_customer(Customer(phone="+5215512345678"))
        store.reset()
        assert await store.get_customer_by_phone("+5215512345678") is None
        customer = await store.create_customer(Customer(phone="+5215512345678"))
        assert customer.id == 1
