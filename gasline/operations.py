"""
Back-office operations triggered by staff or courier events, not by the
customer's own messages.

They share the dispatcher's session locks, so a strike or a delivery
confirmation request never interleaves with a message the same customer
is sending at that moment.

Usage:
    ops = DeliveryOperations(dispatcher)
    await ops.assign_strike("+5215512345678")
    await ops.request_delivery_confirmation("+5215512345678", order_id=42)
"""

import logging
from dataclasses import dataclass

from gasline.conversation.session import SessionContext
from gasline.conversation.states import ConversationState
from gasline.dispatcher import StateDispatcher
from gasline.errors import CustomerNotFoundError, NotificationError, PersistenceError
from gasline.prompts import replies, templates
from gasline.schemas.customer_schema import Customer, CustomerCategory
from gasline.schemas.order_schema import Order, OrderStatus
from gasline.utils import normalize_phone

logger = logging.getLogger(__name__)


@dataclass
class RouteStop:
    """One line of the daily delivery route."""
    order_id: int
    customer_id: int
    address: str
    summary: str
    red_code: bool


class DeliveryOperations:
    """Staff-facing actions on customers and orders."""

    def __init__(self, dispatcher: StateDispatcher) -> None:
        self.dispatcher = dispatcher
        self.store = dispatcher.store
        self.messenger = dispatcher.messenger
        self.sessions = dispatcher.sessions
        self.config = dispatcher.config

    async def _load(self, phone: str) -> Customer:
        customer = await self.store.get_customer_by_phone(phone)
        if customer is None:
            raise CustomerNotFoundError(f"No customer with phone {phone}")
        return customer

    # ------------------------------------------------------------------ #
    # Customer standing
    # ------------------------------------------------------------------ #

    async def assign_strike(self, phone: str) -> Customer:
        """Record a missed delivery. Reaching the strike limit blocks the customer.

        The strike is stored before the customer is told; a failed notice
        is logged and does not undo it.
        """
        phone = normalize_phone(phone)
        limit = self.config.conversation.strike_limit
        async with self.sessions.acquire(phone):
            customer = await self._load(phone)
            customer.strikes += 1
            if customer.strikes >= limit:
                customer.blocked = True
            customer = await self.store.update_customer(customer)

        if customer.blocked:
            logger.warning("Customer %s blocked after %d strikes", phone, customer.strikes)
            notice = templates.build_blocked_notice(customer.strikes)
        else:
            logger.info("Strike %d of %d for customer %s", customer.strikes, limit, phone)
            notice = templates.build_strike_notice(customer.strikes, limit)
        try:
            await self.messenger.send(phone, notice)
        except NotificationError:
            logger.error("Strike notice to %s not delivered", phone)
        return customer

    async def promote_to_premium(self, phone: str) -> Customer:
        """Upgrade a customer so future orders offer a delivery window."""
        phone = normalize_phone(phone)
        async with self.sessions.acquire(phone):
            customer = await self._load(phone)
            if customer.category == CustomerCategory.PREMIUM:
                return customer
            customer.category = CustomerCategory.PREMIUM
            customer = await self.store.update_customer(customer)
        logger.info("Customer %s promoted to premium", phone)
        await self.messenger.send(phone, replies.PROMOTED_TO_PREMIUM)
        return customer

    # ------------------------------------------------------------------ #
    # Delivery follow-up
    # ------------------------------------------------------------------ #

    async def request_delivery_confirmation(self, phone: str, order_id: int) -> ConversationState:
        """Ask the customer whether ``order_id`` arrived in good condition."""
        order = await self.store.get_order(order_id)
        if order is None:
            raise PersistenceError(f"No order with id {order_id}")

        def track(session: SessionContext) -> None:
            session.tracked_order_id = order_id

        return await self.dispatcher.enter(phone, ConversationState.CONFIRMING_DELIVERY, track)

    async def notify_picked_up(self, phone: str) -> None:
        await self._notify(phone, replies.PICKED_UP)

    async def notify_arrived_at_plant(self, phone: str) -> None:
        await self._notify(phone, replies.ARRIVED_AT_PLANT)

    async def notify_refill_started(self, phone: str) -> None:
        await self._notify(phone, replies.REFILL_STARTED)

    async def _notify(self, phone: str, text: str) -> None:
        phone = normalize_phone(phone)
        await self._load(phone)
        await self.messenger.send(phone, text)
        logger.info("Cylinder progress notice sent to %s", phone)

    # ------------------------------------------------------------------ #
    # Routing
    # ------------------------------------------------------------------ #

    async def daily_route(self) -> list[RouteStop]:
        """List today's pending deliveries and pickups, oldest first."""
        orders: list[Order] = []
        for status in (OrderStatus.PENDING, OrderStatus.PENDING_PICKUP):
            orders.extend(await self.store.get_orders_by_status(status))
        orders.sort(key=lambda o: (o.created_at, o.id or 0))

        stops = [
            RouteStop(
                order_id=o.id,
                customer_id=o.customer_id,
                address=o.address,
                summary=templates.describe_order(o),
                red_code=o.red_code,
            )
            for o in orders
        ]
        logger.info("Daily route built with %d stop(s)", len(stops))
        return stops
