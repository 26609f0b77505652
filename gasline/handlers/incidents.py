"""
Seal-violation reports and post-delivery follow-up.

A report can be opened two ways: the customer types the seal keyword at
any point in the conversation, or answers "no" when asked whether a
delivery arrived correctly. Either way the report is stored first and the
customer is then offered to attach a photo.
"""

import logging
from typing import Optional

from gasline.conversation import choices
from gasline.conversation.states import ConversationState, Transition, goto, settle, stay
from gasline.conversation.validators import parse_free_text, parse_rating
from gasline.handlers.base import StateHandler, TurnContext, home
from gasline.prompts import replies, templates
from gasline.schemas.order_schema import Order, OrderStatus
from gasline.schemas.report_schema import SealReport

logger = logging.getLogger(__name__)

S = ConversationState


async def open_seal_report(
    ctx: TurnContext, description: str, order_id: Optional[int] = None
) -> Transition:
    """File a report for the current customer and ask for a photo.

    Without an explicit order the customer's most recent order is attached.
    Any order draft in progress is abandoned.
    """
    ctx.session.discard_draft()
    if order_id is None:
        last_order = await ctx.store.get_last_order(ctx.customer.id)
        order_id = last_order.id if last_order else None
    report = await ctx.store.create_seal_report(SealReport(
        customer_id=ctx.customer.id,
        order_id=order_id,
        description=description,
    ))
    ctx.session.seal_report_id = report.id
    logger.info("Seal report %s opened for customer %s", report.id, ctx.customer.id)
    return goto(S.AWAITING_SEAL_PHOTO)


async def _current_report(ctx: TurnContext) -> Optional[SealReport]:
    report_id = ctx.session.seal_report_id
    if report_id is None:
        return None
    return await ctx.store.get_seal_report(report_id)


class SealReportDescriptionHandler(StateHandler):
    """Collects what went wrong after a delivery was disputed."""

    state = S.REPORTING_SEAL
    next_states = frozenset({S.AWAITING_SEAL_PHOTO})

    async def on_enter(self, ctx: TurnContext) -> Transition:
        ctx.reply(replies.DELIVERY_PROBLEM_PROMPT)
        return stay()

    async def on_input(self, ctx: TurnContext, text: str) -> Transition:
        description = parse_free_text(text, 3)
        if description is None:
            ctx.reply(replies.DELIVERY_PROBLEM_INVALID)
            return stay()
        return await open_seal_report(ctx, description, ctx.session.tracked_order_id)


class SealPhotoHandler(StateHandler):
    state = S.AWAITING_SEAL_PHOTO
    next_states = frozenset({S.RECEIVING_SEAL_PHOTO, S.AWAITING_NAME})

    async def on_enter(self, ctx: TurnContext) -> Transition:
        ctx.reply(replies.SEAL_PHOTO_QUESTION)
        return stay()

    async def on_input(self, ctx: TurnContext, text: str) -> Transition:
        answer = choices.match_choice(text, choices.YES_NO)
        if answer == "yes":
            report = await _current_report(ctx)
            if report is not None:
                report.photo_requested = True
                await ctx.store.update_seal_report(report)
            ctx.reply(replies.SEAL_PHOTO_SEND)
            return settle(S.RECEIVING_SEAL_PHOTO)
        if answer == "no":
            ctx.session.seal_report_id = None
            ctx.reply(replies.SEAL_NO_PHOTO)
            return home(ctx)
        ctx.reply(templates.build_menu_retry(["1", "2"]))
        return stay()


class SealPhotoReceivedHandler(StateHandler):
    """Whatever arrives next is taken as the photo."""

    state = S.RECEIVING_SEAL_PHOTO
    next_states = frozenset({S.AWAITING_NAME})

    async def on_input(self, ctx: TurnContext, text: str) -> Transition:
        report = await _current_report(ctx)
        if report is not None:
            report.photo_received = True
            await ctx.store.update_seal_report(report)
        ctx.session.seal_report_id = None
        ctx.reply(replies.SEAL_PHOTO_RECEIVED)
        return home(ctx)


class DeliveryConfirmHandler(StateHandler):
    """Entered by the back office once the courier reports a delivery."""

    state = S.CONFIRMING_DELIVERY
    next_states = frozenset({S.AWAITING_RATING, S.REPORTING_SEAL})

    async def on_enter(self, ctx: TurnContext) -> Transition:
        order = await self._tracked_order(ctx)
        ctx.reply(templates.build_delivery_question(order))
        return stay()

    async def on_input(self, ctx: TurnContext, text: str) -> Transition:
        answer = choices.match_choice(text, choices.YES_NO)
        if answer == "yes":
            order = await self._tracked_order(ctx)
            if order is not None and order.status != OrderStatus.DELIVERED:
                order.status = OrderStatus.DELIVERED
                await ctx.store.update_order(order)
                logger.info("Order %s confirmed delivered", order.id)
            return goto(S.AWAITING_RATING)
        if answer == "no":
            order = await self._tracked_order(ctx)
            ctx.session.tracked_order_id = order.id if order else None
            return goto(S.REPORTING_SEAL)
        ctx.reply(templates.build_menu_retry(["1", "2"]))
        return stay()

    async def _tracked_order(self, ctx: TurnContext) -> Optional[Order]:
        if ctx.session.tracked_order_id is not None:
            order = await ctx.store.get_order(ctx.session.tracked_order_id)
            if order is not None:
                return order
        return await ctx.store.get_last_order(ctx.customer.id)


class RatingHandler(StateHandler):
    state = S.AWAITING_RATING
    next_states = frozenset({S.INITIAL})

    async def on_enter(self, ctx: TurnContext) -> Transition:
        ctx.reply(replies.RATING_PROMPT)
        return stay()

    async def on_input(self, ctx: TurnContext, text: str) -> Transition:
        rating = parse_rating(text)
        if rating is None:
            ctx.reply(replies.RATING_INVALID)
            return stay()
        logger.info(
            "Customer %s rated order %s with %d star(s)",
            ctx.customer.id, ctx.session.tracked_order_id, rating,
        )
        ctx.session.tracked_order_id = None
        ctx.reply(replies.RATING_THANKS)
        return settle(S.INITIAL)
