"""
Persistence gateway for customers, orders and seal reports.

``PersistenceGateway`` is the contract the conversation core relies on.
Getters return ``None`` when a record does not exist; any failure to reach
or write the backing store raises ``PersistenceError``.

``InMemoryStore`` implements the contract for development, the console
demo and tests. In production this would be backed by the relational
database the delivery office already runs.
"""

import itertools
import logging
from datetime import datetime, timezone
from typing import Optional, Protocol

from gasline.errors import CustomerNotFoundError, PersistenceError
from gasline.schemas.customer_schema import Customer
from gasline.schemas.order_schema import Order, OrderStatus
from gasline.schemas.report_schema import SealReport
from gasline.utils import normalize_phone

logger = logging.getLogger(__name__)


class PersistenceGateway(Protocol):
    async def get_customer_by_phone(self, phone: str) -> Optional[Customer]: ...

    async def create_customer(self, customer: Customer) -> Customer: ...

    async def update_customer(self, customer: Customer) -> Customer: ...

    async def update_customer_state(self, phone: str, state: str) -> None: ...

    async def get_last_order(self, customer_id: int) -> Optional[Order]: ...

    async def get_order(self, order_id: int) -> Optional[Order]: ...

    async def get_orders_by_status(self, status: OrderStatus) -> list[Order]: ...

    async def create_order(self, order: Order) -> Order: ...

    async def update_order(self, order: Order) -> Order: ...

    async def get_seal_report(self, report_id: int) -> Optional[SealReport]: ...

    async def create_seal_report(self, report: SealReport) -> SealReport: ...

    async def update_seal_report(self, report: SealReport) -> SealReport: ...


def _now() -> datetime:
    return datetime.now(timezone.utc)


# Fields an order may still change once it has been stored.
_MUTABLE_ORDER_FIELDS = {"status", "updated_at"}


class InMemoryStore:
    """Dict-backed ``PersistenceGateway``.

    Records are copied on the way in and out, so callers never hold a
    reference into the store.
    """

    def __init__(self) -> None:
        self._customers: dict[str, Customer] = {}
        self._orders: dict[int, Order] = {}
        self._reports: dict[int, SealReport] = {}
        self._customer_ids = itertools.count(1)
        self._order_ids = itertools.count(1)
        self._report_ids = itertools.count(1)

    def reset(self) -> None:
        """Drop every record. Used for test isolation."""
        self.__init__()

    # ------------------------------------------------------------------ #
    # Customers
    # ------------------------------------------------------------------ #

    async def get_customer_by_phone(self, phone: str) -> Optional[Customer]:
        customer = self._customers.get(normalize_phone(phone))
        return customer.model_copy(deep=True) if customer else None

    async def create_customer(self, customer: Customer) -> Customer:
        phone = normalize_phone(customer.phone)
        if phone in self._customers:
            raise PersistenceError(f"Customer with phone {phone} already exists")
        stored = customer.model_copy(
            update={"id": next(self._customer_ids), "phone": phone}, deep=True
        )
        self._customers[phone] = stored
        logger.info("Customer %s created with id %d", phone, stored.id)
        return stored.model_copy(deep=True)

    async def update_customer(self, customer: Customer) -> Customer:
        phone = normalize_phone(customer.phone)
        if phone not in self._customers:
            raise CustomerNotFoundError(f"No customer with phone {phone}")
        stored = customer.model_copy(update={"updated_at": _now()}, deep=True)
        self._customers[phone] = stored
        return stored.model_copy(deep=True)

    async def update_customer_state(self, phone: str, state: str) -> None:
        phone = normalize_phone(phone)
        customer = self._customers.get(phone)
        if customer is None:
            raise CustomerNotFoundError(f"No customer with phone {phone}")
        self._customers[phone] = customer.model_copy(
            update={"conversation_state": state, "updated_at": _now()}
        )

    # ------------------------------------------------------------------ #
    # Orders
    # ------------------------------------------------------------------ #

    async def get_last_order(self, customer_id: int) -> Optional[Order]:
        orders = [o for o in self._orders.values() if o.customer_id == customer_id]
        if not orders:
            return None
        latest = max(orders, key=lambda o: (o.created_at, o.id or 0))
        return latest.model_copy(deep=True)

    async def get_order(self, order_id: int) -> Optional[Order]:
        order = self._orders.get(order_id)
        return order.model_copy(deep=True) if order else None

    async def get_orders_by_status(self, status: OrderStatus) -> list[Order]:
        matches = [o for o in self._orders.values() if o.status == status]
        matches.sort(key=lambda o: (o.created_at, o.id or 0))
        return [o.model_copy(deep=True) for o in matches]

    async def create_order(self, order: Order) -> Order:
        stored = order.model_copy(update={"id": next(self._order_ids)}, deep=True)
        self._orders[stored.id] = stored
        logger.info(
            "Order %d stored for customer %d (%s, %s)",
            stored.id, stored.customer_id, stored.service_variant.value, stored.status.value,
        )
        return stored.model_copy(deep=True)

    async def update_order(self, order: Order) -> Order:
        if order.id is None or order.id not in self._orders:
            raise PersistenceError(f"No order with id {order.id}")
        current = self._orders[order.id]
        changed = {
            name for name in Order.model_fields
            if getattr(current, name) != getattr(order, name)
        }
        frozen = changed - _MUTABLE_ORDER_FIELDS
        if frozen:
            raise PersistenceError(
                f"Order {order.id} is confirmed; cannot change {sorted(frozen)}"
            )
        stored = order.model_copy(update={"updated_at": _now()}, deep=True)
        self._orders[order.id] = stored
        logger.info("Order %d status -> %s", order.id, stored.status.value)
        return stored.model_copy(deep=True)

    # ------------------------------------------------------------------ #
    # Seal reports
    # ------------------------------------------------------------------ #

    async def get_seal_report(self, report_id: int) -> Optional[SealReport]:
        report = self._reports.get(report_id)
        return report.model_copy(deep=True) if report else None

    async def create_seal_report(self, report: SealReport) -> SealReport:
        stored = report.model_copy(update={"id": next(self._report_ids)}, deep=True)
        self._reports[stored.id] = stored
        logger.info(
            "Seal report %d filed by customer %d (order %s)",
            stored.id, stored.customer_id, stored.order_id,
        )
        return stored.model_copy(deep=True)

    async def update_seal_report(self, report: SealReport) -> SealReport:
        if report.id is None or report.id not in self._reports:
            raise PersistenceError(f"No seal report with id {report.id}")
        self._reports[report.id] = report.model_copy(deep=True)
        return report.model_copy(deep=True)

    def list_seal_reports(self) -> list[SealReport]:
        return [r.model_copy(deep=True) for r in self._reports.values()]
