"""
State node base class and the per-turn context handed to every node.

A node sends its question in ``on_enter`` and consumes the answer in
``on_input``. Both return a ``Transition``; the dispatcher follows it,
delivers the queued replies and persists the resulting state.
"""

import logging
from dataclasses import dataclass, field
from typing import ClassVar

from gasline.config import AppConfig
from gasline.conversation.drafts import OrderDraft
from gasline.conversation.session import SessionContext
from gasline.conversation.states import ConversationState, Transition, goto, settle, stay
from gasline.gateways.messaging import MessagingGateway
from gasline.gateways.store import PersistenceGateway
from gasline.prompts import replies
from gasline.schemas.customer_schema import Customer
from gasline.schemas.order_schema import Order, OrderStatus

logger = logging.getLogger(__name__)


@dataclass
class TurnContext:
    """Everything a node may touch while one inbound message is processed."""
    phone: str
    session: SessionContext
    store: PersistenceGateway
    messenger: MessagingGateway
    config: AppConfig
    replies: list[str] = field(default_factory=list)

    @property
    def customer(self) -> Customer:
        customer = self.session.customer
        if customer is None:
            raise RuntimeError(f"No customer loaded for {self.phone}")
        return customer

    @property
    def draft(self) -> OrderDraft:
        draft = self.session.draft
        if draft is None:
            raise RuntimeError(f"No order draft for {self.phone}")
        return draft

    def reply(self, text: str) -> None:
        self.replies.append(text)

    async def save_customer(self) -> Customer:
        self.session.customer = await self.store.update_customer(self.customer)
        return self.session.customer


class StateHandler:
    """One node of the conversation graph."""

    state: ClassVar[ConversationState]
    next_states: ClassVar[frozenset[ConversationState]] = frozenset()
    requires_draft: ClassVar[bool] = False

    async def on_enter(self, ctx: TurnContext) -> Transition:
        return stay()

    async def on_input(self, ctx: TurnContext, text: str) -> Transition:
        raise NotImplementedError

    async def receive(self, ctx: TurnContext, text: str) -> Transition:
        """Entry point used by the dispatcher for an inbound answer."""
        if self.requires_draft and ctx.session.draft is None:
            logger.info("No draft for %s in %s, back to menu", ctx.phone, self.state.value)
            ctx.reply(replies.DRAFT_EXPIRED)
            return goto(ConversationState.AWAITING_OPTION)
        return await self.on_input(ctx, text)

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.state.value}>"


def home(ctx: TurnContext) -> Transition:
    """Where a side flow ends: the idle state, or registration if still nameless."""
    if ctx.customer.is_registered:
        return settle(ConversationState.INITIAL)
    return goto(ConversationState.AWAITING_NAME)


def schedule_pickup_notice(ctx: TurnContext, order: Order) -> None:
    """Tell the customer their cylinders were collected, once a recharge is stored."""
    if order.status != OrderStatus.PENDING_PICKUP:
        return
    phone = ctx.phone
    messenger = ctx.messenger

    async def notify() -> None:
        await messenger.send(phone, replies.PICKED_UP)
        logger.info("Pickup notice for order %s sent to %s", order.id, phone)

    ctx.session.schedule(
        "pickup_notice", ctx.config.runtime.pickup_notice_delay_sec, notify,
        bound_to_draft=False,
    )
