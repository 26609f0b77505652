"""
Checkout: payment, delivery address, premium scheduling and the final
confirmation that turns the draft into a stored order.

The facade and door color steps are shared with the profile flow. With an
order draft in progress the colors go on the order (and are remembered on
the customer); without one they only update the customer.
"""

import logging

from gasline.conversation import choices
from gasline.conversation.states import ConversationState, Transition, goto, settle, stay
from gasline.conversation.validators import parse_free_text
from gasline.handlers.base import StateHandler, TurnContext, schedule_pickup_notice
from gasline.prompts import replies, templates
from gasline.schemas.order_schema import DeliveryWindow, PaymentMethod

logger = logging.getLogger(__name__)

S = ConversationState


def _after_address(ctx: TurnContext) -> Transition:
    if ctx.customer.is_premium:
        return goto(S.AWAITING_DELIVERY_WINDOW)
    return goto(S.CONFIRMING_ORDER)


class PaymentHandler(StateHandler):
    state = S.AWAITING_PAYMENT
    next_states = frozenset({S.AWAITING_ADDRESS})
    requires_draft = True

    async def on_enter(self, ctx: TurnContext) -> Transition:
        ctx.reply(replies.PAYMENT_PROMPT)
        return stay()

    async def on_input(self, ctx: TurnContext, text: str) -> Transition:
        method = choices.match_choice(text, choices.PAYMENT_METHOD)
        if method is None:
            ctx.reply(templates.build_menu_retry(["1", "2"]))
            return stay()
        ctx.draft.payment_method = PaymentMethod(method)
        return goto(S.AWAITING_ADDRESS)


class AddressHandler(StateHandler):
    state = S.AWAITING_ADDRESS
    next_states = frozenset({S.CONFIRMING_ADDRESS})
    requires_draft = True

    async def on_enter(self, ctx: TurnContext) -> Transition:
        ctx.reply(replies.ADDRESS_PROMPT)
        return stay()

    async def on_input(self, ctx: TurnContext, text: str) -> Transition:
        address = parse_free_text(text, ctx.config.conversation.min_address_length)
        if address is None:
            ctx.reply(replies.ADDRESS_INVALID)
            return stay()
        ctx.draft.address = address
        return goto(S.CONFIRMING_ADDRESS)


class AddressConfirmHandler(StateHandler):
    state = S.CONFIRMING_ADDRESS
    next_states = frozenset({
        S.AWAITING_DELIVERY_WINDOW, S.CONFIRMING_ORDER, S.AWAITING_FACADE_COLOR, S.AWAITING_ADDRESS,
    })
    requires_draft = True

    async def on_enter(self, ctx: TurnContext) -> Transition:
        if not ctx.draft.address:
            return goto(S.AWAITING_ADDRESS)
        ctx.reply(templates.build_address_confirmation(
            ctx.draft.address, ctx.config.business.maps_url
        ))
        return stay()

    async def on_input(self, ctx: TurnContext, text: str) -> Transition:
        answer = choices.match_choice(text, choices.YES_NO)
        if answer == "yes":
            return _after_address(ctx)
        if answer == "no":
            return goto(S.AWAITING_FACADE_COLOR)
        ctx.reply(templates.build_menu_retry(["1", "2"]))
        return stay()


class FacadeColorHandler(StateHandler):
    state = S.AWAITING_FACADE_COLOR
    next_states = frozenset({S.AWAITING_DOOR_COLOR})

    async def on_enter(self, ctx: TurnContext) -> Transition:
        ctx.reply(replies.FACADE_COLOR_PROMPT)
        return stay()

    async def on_input(self, ctx: TurnContext, text: str) -> Transition:
        color = parse_free_text(text, 3)
        if color is None:
            ctx.reply(replies.COLOR_INVALID)
            return stay()
        ctx.customer.facade_color = color
        await ctx.save_customer()
        if ctx.session.draft is not None:
            ctx.session.draft.facade_color = color
        return goto(S.AWAITING_DOOR_COLOR)


class DoorColorHandler(StateHandler):
    """Last color question; marks the address for special handling."""

    state = S.AWAITING_DOOR_COLOR
    next_states = frozenset({S.AWAITING_DELIVERY_WINDOW, S.CONFIRMING_ORDER})

    async def on_enter(self, ctx: TurnContext) -> Transition:
        ctx.reply(replies.DOOR_COLOR_PROMPT)
        return stay()

    async def on_input(self, ctx: TurnContext, text: str) -> Transition:
        color = parse_free_text(text, 3)
        if color is None:
            ctx.reply(replies.COLOR_INVALID)
            return stay()
        customer = ctx.customer
        customer.door_color = color
        customer.red_code = True
        await ctx.save_customer()

        draft = ctx.session.draft
        if draft is None:
            ctx.reply(replies.PROFILE_SAVED)
            return settle(S.INITIAL)
        draft.door_color = color
        draft.facade_color = draft.facade_color or customer.facade_color
        draft.red_code = True
        return _after_address(ctx)


class DeliveryWindowHandler(StateHandler):
    state = S.AWAITING_DELIVERY_WINDOW
    next_states = frozenset({S.CONFIRMING_ORDER})
    requires_draft = True

    async def on_enter(self, ctx: TurnContext) -> Transition:
        ctx.reply(replies.DELIVERY_WINDOW_PROMPT)
        return stay()

    async def on_input(self, ctx: TurnContext, text: str) -> Transition:
        window = choices.match_choice(text, choices.DELIVERY_WINDOW)
        if window is None:
            ctx.reply(templates.build_menu_retry(["1", "2"]))
            return stay()
        ctx.draft.delivery_window = DeliveryWindow(window)
        return goto(S.CONFIRMING_ORDER)


class OrderConfirmHandler(StateHandler):
    """Stores the order on "yes"; discards the draft on "no"."""

    state = S.CONFIRMING_ORDER
    next_states = frozenset({S.INITIAL})
    requires_draft = True

    async def on_enter(self, ctx: TurnContext) -> Transition:
        ctx.reply(templates.build_order_summary(
            ctx.draft, ctx.config.business.courier_wait_minutes
        ))
        return stay()

    async def on_input(self, ctx: TurnContext, text: str) -> Transition:
        answer = choices.match_choice(text, choices.YES_NO)
        if answer == "yes":
            return await self._place(ctx)
        if answer == "no":
            ctx.session.discard_draft()
            logger.info("Customer %s cancelled the order draft", ctx.customer.id)
            ctx.reply(replies.ORDER_CANCELLED)
            return settle(S.INITIAL)
        ctx.reply(templates.build_menu_retry(["1", "2"]))
        return stay()

    async def _place(self, ctx: TurnContext) -> Transition:
        draft = ctx.draft
        order = draft.to_order()
        # a failed write propagates and leaves the draft in place for a retry
        order = await ctx.store.create_order(order)
        ctx.session.commit_draft()
        logger.info(
            "Order %s placed: %s, volume=%s amount=%s status=%s",
            order.id, order.service_variant.value, order.volume, order.amount,
            order.status.value,
        )
        schedule_pickup_notice(ctx, order)
        ctx.reply(templates.build_order_confirmed(order))
        return settle(S.INITIAL)
