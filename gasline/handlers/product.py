"""
Product selection: stationary tank refills and cylinder services.

Tank quantities can be given in liters, in money or as a gauge reading
against the tank's capacity. Whatever the customer types is stored in the
matching typed draft; volume and amount are derived from it.
"""

from gasline.conversation import choices
from gasline.conversation.drafts import (
    CylinderDraft,
    ProductKind,
    TankByMoneyDraft,
    TankByPercentDraft,
    TankByVolumeDraft,
    generate_tracking_codes,
)
from gasline.conversation.states import ConversationState, Transition, goto, stay
from gasline.conversation.validators import parse_count, parse_number, parse_percentage
from gasline.handlers.base import StateHandler, TurnContext
from gasline.prompts import replies, templates
from gasline.schemas.order_schema import PaymentMethod, ServiceVariant

S = ConversationState


class ServiceTypeHandler(StateHandler):
    state = S.AWAITING_SERVICE_TYPE
    next_states = frozenset({S.AWAITING_MEASURE_METHOD, S.AWAITING_CYLINDER_MODE})

    async def on_enter(self, ctx: TurnContext) -> Transition:
        ctx.reply(replies.SERVICE_TYPE_PROMPT)
        return stay()

    async def on_input(self, ctx: TurnContext, text: str) -> Transition:
        service = choices.match_choice(text, choices.SERVICE_TYPE)
        if service == "tank":
            ctx.session.start_draft(ctx.customer.id, ProductKind.TANK)
            return goto(S.AWAITING_MEASURE_METHOD)
        if service == "cylinder":
            ctx.session.start_draft(ctx.customer.id, ProductKind.CYLINDER)
            return goto(S.AWAITING_CYLINDER_MODE)
        ctx.reply(templates.build_menu_retry(["1", "2"]))
        return stay()


# ---------------------------------------------------------------------- #
# Stationary tank
# ---------------------------------------------------------------------- #


class MeasureMethodHandler(StateHandler):
    state = S.AWAITING_MEASURE_METHOD
    next_states = frozenset({S.AWAITING_VOLUME, S.AWAITING_MONEY, S.AWAITING_CAPACITY})
    requires_draft = True

    async def on_enter(self, ctx: TurnContext) -> Transition:
        ctx.reply(templates.build_measure_method_prompt(ctx.config.business.unit_price))
        return stay()

    async def on_input(self, ctx: TurnContext, text: str) -> Transition:
        method = choices.match_choice(text, choices.MEASURE_METHOD)
        if method == "volume":
            return goto(S.AWAITING_VOLUME)
        if method == "money":
            return goto(S.AWAITING_MONEY)
        if method == "percentage":
            return goto(S.AWAITING_CAPACITY)
        ctx.reply(templates.build_menu_retry(["1", "2", "3"]))
        return stay()


class VolumeHandler(StateHandler):
    state = S.AWAITING_VOLUME
    next_states = frozenset({S.CONFIRMING_TANK_ORDER})
    requires_draft = True

    async def on_enter(self, ctx: TurnContext) -> Transition:
        ctx.reply(replies.VOLUME_PROMPT)
        return stay()

    async def on_input(self, ctx: TurnContext, text: str) -> Transition:
        volume = parse_number(text)
        if volume is None:
            ctx.reply(replies.NUMBER_INVALID)
            return stay()
        ctx.draft.product = TankByVolumeDraft(
            volume=volume, unit_price=ctx.config.business.unit_price
        )
        return goto(S.CONFIRMING_TANK_ORDER)


class MoneyHandler(StateHandler):
    state = S.AWAITING_MONEY
    next_states = frozenset({S.CONFIRMING_TANK_ORDER})
    requires_draft = True

    async def on_enter(self, ctx: TurnContext) -> Transition:
        ctx.reply(replies.MONEY_PROMPT)
        return stay()

    async def on_input(self, ctx: TurnContext, text: str) -> Transition:
        amount = parse_number(text)
        if amount is None:
            ctx.reply(replies.NUMBER_INVALID)
            return stay()
        ctx.draft.product = TankByMoneyDraft(
            amount=amount, unit_price=ctx.config.business.unit_price
        )
        return goto(S.CONFIRMING_TANK_ORDER)


class CapacityHandler(StateHandler):
    state = S.AWAITING_CAPACITY
    next_states = frozenset({S.AWAITING_PERCENTAGE})
    requires_draft = True

    async def on_enter(self, ctx: TurnContext) -> Transition:
        ctx.reply(replies.CAPACITY_PROMPT)
        return stay()

    async def on_input(self, ctx: TurnContext, text: str) -> Transition:
        capacity = parse_number(text)
        if capacity is None:
            ctx.reply(replies.NUMBER_INVALID)
            return stay()
        ctx.draft.product = TankByPercentDraft(
            capacity=capacity, unit_price=ctx.config.business.unit_price
        )
        return goto(S.AWAITING_PERCENTAGE)


class PercentageHandler(StateHandler):
    state = S.AWAITING_PERCENTAGE
    next_states = frozenset({S.CONFIRMING_TANK_ORDER, S.AWAITING_CAPACITY})
    requires_draft = True

    async def on_enter(self, ctx: TurnContext) -> Transition:
        product = ctx.draft.product
        if not isinstance(product, TankByPercentDraft):
            return goto(S.AWAITING_CAPACITY)
        ctx.reply(templates.build_percentage_prompt(
            product.capacity, ctx.config.conversation.recommended_fill_percent
        ))
        return stay()

    async def on_input(self, ctx: TurnContext, text: str) -> Transition:
        product = ctx.draft.product
        if not isinstance(product, TankByPercentDraft):
            return goto(S.AWAITING_CAPACITY)
        percent = parse_percentage(text)
        if percent is None:
            ctx.reply(replies.PERCENT_INVALID)
            return stay()
        product.percent = percent
        return goto(S.CONFIRMING_TANK_ORDER)


class TankConfirmHandler(StateHandler):
    """Shows liters and total before payment.

    Naming a payment method counts as a yes and answers the next question.
    """

    state = S.CONFIRMING_TANK_ORDER
    next_states = frozenset({S.AWAITING_PAYMENT, S.AWAITING_ADDRESS, S.AWAITING_MEASURE_METHOD})
    requires_draft = True

    async def on_enter(self, ctx: TurnContext) -> Transition:
        product = ctx.draft.product
        if product is None or not product.variant.is_tank or not product.is_complete:
            return goto(S.AWAITING_MEASURE_METHOD)
        ctx.reply(templates.build_tank_confirmation(product))
        return stay()

    async def on_input(self, ctx: TurnContext, text: str) -> Transition:
        product = ctx.draft.product
        if product is None or not product.variant.is_tank or not product.is_complete:
            return goto(S.AWAITING_MEASURE_METHOD)
        answer = choices.match_choice(text, choices.YES_NO)
        if answer == "yes":
            return goto(S.AWAITING_PAYMENT)
        if answer == "no":
            ctx.draft.product = None
            ctx.reply(replies.TANK_ORDER_REJECTED)
            return goto(S.AWAITING_MEASURE_METHOD)
        method = choices.match_choice(text, choices.PAYMENT_METHOD, allow_numbers=False)
        if method is not None:
            ctx.draft.payment_method = PaymentMethod(method)
            return goto(S.AWAITING_ADDRESS)
        ctx.reply(templates.build_menu_retry(["1", "2"]))
        return stay()


# ---------------------------------------------------------------------- #
# Cylinders
# ---------------------------------------------------------------------- #


class CylinderModeHandler(StateHandler):
    state = S.AWAITING_CYLINDER_MODE
    next_states = frozenset({S.AWAITING_CYLINDER_QUANTITY})
    requires_draft = True

    async def on_enter(self, ctx: TurnContext) -> Transition:
        ctx.reply(replies.CYLINDER_MODE_PROMPT)
        return stay()

    async def on_input(self, ctx: TurnContext, text: str) -> Transition:
        mode = choices.match_choice(text, choices.CYLINDER_MODE)
        if mode == "recharge":
            ctx.draft.product = CylinderDraft(variant=ServiceVariant.CYLINDER_RECHARGE)
        elif mode == "exchange":
            ctx.draft.product = CylinderDraft(variant=ServiceVariant.CYLINDER_EXCHANGE)
        else:
            ctx.reply(templates.build_menu_retry(["1", "2"]))
            return stay()
        return goto(S.AWAITING_CYLINDER_QUANTITY)


class CylinderQuantityHandler(StateHandler):
    state = S.AWAITING_CYLINDER_QUANTITY
    next_states = frozenset({
        S.CONFIRMING_TRACKING_CODES, S.AWAITING_PAYMENT, S.AWAITING_CYLINDER_MODE,
    })
    requires_draft = True

    async def on_enter(self, ctx: TurnContext) -> Transition:
        ctx.reply(templates.build_quantity_prompt(ctx.config.conversation.max_cylinders_per_order))
        return stay()

    async def on_input(self, ctx: TurnContext, text: str) -> Transition:
        product = ctx.draft.product
        if not isinstance(product, CylinderDraft):
            return goto(S.AWAITING_CYLINDER_MODE)
        maximum = ctx.config.conversation.max_cylinders_per_order
        count = parse_count(text, maximum)
        if count is None:
            ctx.reply(templates.build_quantity_invalid(maximum))
            return stay()
        product.count = count
        if product.variant == ServiceVariant.CYLINDER_RECHARGE:
            product.tracking_codes = generate_tracking_codes(count)
            return goto(S.CONFIRMING_TRACKING_CODES)
        ctx.reply(templates.build_product_summary(product))
        return goto(S.AWAITING_PAYMENT)


class TrackingCodesHandler(StateHandler):
    """Shows the codes to stick on each cylinder before the pickup."""

    state = S.CONFIRMING_TRACKING_CODES
    next_states = frozenset({S.AWAITING_PAYMENT, S.AWAITING_SERVICE_TYPE, S.AWAITING_CYLINDER_MODE})
    requires_draft = True

    async def on_enter(self, ctx: TurnContext) -> Transition:
        product = ctx.draft.product
        if not isinstance(product, CylinderDraft) or not product.tracking_codes:
            return goto(S.AWAITING_CYLINDER_MODE)
        ctx.reply(templates.build_tracking_codes_prompt(product.tracking_codes))
        return stay()

    async def on_input(self, ctx: TurnContext, text: str) -> Transition:
        product = ctx.draft.product
        if not isinstance(product, CylinderDraft) or not product.tracking_codes:
            return goto(S.AWAITING_CYLINDER_MODE)
        answer = choices.match_choice(text, choices.YES_NO)
        if answer == "yes":
            ctx.reply(templates.build_pickup_scheduled(product.count or 0))
            return goto(S.AWAITING_PAYMENT)
        if answer == "no":
            ctx.session.discard_draft()
            ctx.reply(replies.TRACKING_CODES_REJECTED)
            return goto(S.AWAITING_SERVICE_TYPE)
        ctx.reply(templates.build_menu_retry(["1", "2"]))
        return stay()

