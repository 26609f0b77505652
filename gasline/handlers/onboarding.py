"""
Idle state, main menu, registration and profile updates.

The main menu is the hub every flow returns to. Returning customers can
repeat their last order in one step; new customers register by name.
"""

import logging

from gasline.conversation import choices
from gasline.conversation.drafts import ProductKind, generate_tracking_codes
from gasline.conversation.states import ConversationState, Transition, goto, settle, stay
from gasline.conversation.validators import parse_full_name
from gasline.handlers.base import StateHandler, TurnContext, schedule_pickup_notice
from gasline.prompts import replies, templates
from gasline.schemas.order_schema import Order, ServiceVariant, initial_status_for

logger = logging.getLogger(__name__)

S = ConversationState


class InitialHandler(StateHandler):
    """Resting state between orders. Any message opens the main menu."""

    state = S.INITIAL
    next_states = frozenset({S.AWAITING_OPTION})

    async def on_input(self, ctx: TurnContext, text: str) -> Transition:
        return goto(S.AWAITING_OPTION)


class MainMenuHandler(StateHandler):
    state = S.AWAITING_OPTION
    next_states = frozenset({
        S.INITIAL,
        S.AWAITING_NAME,
        S.AWAITING_SERVICE_TYPE,
        S.AWAITING_MEASURE_METHOD,
        S.AWAITING_CYLINDER_MODE,
    })

    async def on_enter(self, ctx: TurnContext) -> Transition:
        last_order = await ctx.store.get_last_order(ctx.customer.id)
        ctx.reply(templates.build_main_menu(ctx.customer, last_order, ctx.config.business.name))
        return stay()

    async def on_input(self, ctx: TurnContext, text: str) -> Transition:
        last_order = await ctx.store.get_last_order(ctx.customer.id)
        menu = choices.MAIN_MENU_RETURNING if last_order else choices.MAIN_MENU_FIRST_TIME
        choice = choices.match_choice(text, menu)

        if choice == "repeat" and last_order is not None:
            return await self._repeat(ctx, last_order)
        if choice == "new":
            return goto(S.AWAITING_SERVICE_TYPE)
        if choice == "update":
            ctx.session.discard_draft()
            ctx.session.profile_update = True
            return goto(S.AWAITING_NAME)

        # "tanque" / "cilindro" straight from the menu starts a new order
        service = choices.match_choice(text, choices.SERVICE_TYPE, allow_numbers=False)
        if service == "tank":
            ctx.session.start_draft(ctx.customer.id, ProductKind.TANK)
            return goto(S.AWAITING_MEASURE_METHOD)
        if service == "cylinder":
            ctx.session.start_draft(ctx.customer.id, ProductKind.CYLINDER)
            return goto(S.AWAITING_CYLINDER_MODE)

        logger.debug("Unrecognized menu option %r", text)
        ctx.reply(templates.build_menu_retry([o.number for o in menu]))
        return stay()

    async def _repeat(self, ctx: TurnContext, last: Order) -> Transition:
        """Store a copy of the last order, repriced at today's unit price."""
        unit_price = ctx.config.business.unit_price
        variant = last.service_variant
        volume = last.volume
        amount = last.amount
        if variant.is_tank and volume is not None:
            amount = volume * unit_price
        tracking_codes = []
        if variant == ServiceVariant.CYLINDER_RECHARGE and last.cylinder_count:
            tracking_codes = generate_tracking_codes(last.cylinder_count)

        ctx.session.discard_draft()
        order = await ctx.store.create_order(Order(
            customer_id=ctx.customer.id,
            service_variant=variant,
            volume=volume,
            amount=amount,
            unit_price=unit_price if variant.is_tank else None,
            payment_method=last.payment_method,
            address=last.address,
            door_color=last.door_color,
            facade_color=last.facade_color,
            red_code=last.red_code,
            cylinder_count=last.cylinder_count,
            tracking_codes=tracking_codes,
            delivery_window=last.delivery_window if ctx.customer.is_premium else None,
            status=initial_status_for(variant),
        ))
        logger.info("Repeated order %s as order %s", last.id, order.id)
        schedule_pickup_notice(ctx, order)
        ctx.reply(templates.build_order_confirmed(order))
        return settle(S.INITIAL)


class NameHandler(StateHandler):
    """Captures the full name, for registration or a profile update."""

    state = S.AWAITING_NAME
    next_states = frozenset({S.AWAITING_OPTION, S.AWAITING_HOUSE_PHOTO})

    async def on_enter(self, ctx: TurnContext) -> Transition:
        if ctx.session.profile_update:
            ctx.reply(replies.PROFILE_NAME_PROMPT)
        else:
            ctx.reply(replies.REGISTRATION_PROMPT)
        return stay()

    async def on_input(self, ctx: TurnContext, text: str) -> Transition:
        name = parse_full_name(text)
        if name is None:
            ctx.reply(replies.NAME_INVALID)
            return stay()

        customer = ctx.customer
        customer.first_name = name.first_name
        customer.paternal_surname = name.paternal_surname
        customer.maternal_surname = name.maternal_surname
        await ctx.save_customer()
        logger.info("Name stored for customer %s", customer.id)

        if ctx.session.profile_update:
            ctx.session.profile_update = False
            return goto(S.AWAITING_HOUSE_PHOTO)
        ctx.reply(f"¡Gracias, {name.first_name}! Ya estás registrado.")
        return goto(S.AWAITING_OPTION)


class HousePhotoHandler(StateHandler):
    """Offers to locate the house by photo, or by describing its colors."""

    state = S.AWAITING_HOUSE_PHOTO
    next_states = frozenset({S.CONFIRMING_HOUSE_PHOTO, S.AWAITING_FACADE_COLOR})

    async def on_enter(self, ctx: TurnContext) -> Transition:
        ctx.reply(replies.HOUSE_PHOTO_PROMPT)
        return stay()

    async def on_input(self, ctx: TurnContext, text: str) -> Transition:
        answer = choices.match_choice(text, choices.YES_NO)
        if answer == "yes":
            ctx.reply(replies.HOUSE_PHOTO_SEND)
            return settle(S.CONFIRMING_HOUSE_PHOTO)
        if answer == "no":
            return goto(S.AWAITING_FACADE_COLOR)
        ctx.reply(templates.build_menu_retry(["1", "2"]))
        return stay()


class HousePhotoConfirmHandler(StateHandler):
    """Waits for the photo, then asks the customer to confirm it."""

    state = S.CONFIRMING_HOUSE_PHOTO
    next_states = frozenset({S.AWAITING_FACADE_COLOR})

    async def on_input(self, ctx: TurnContext, text: str) -> Transition:
        answer = choices.match_choice(text, choices.YES_NO)
        if answer == "yes":
            ctx.customer.red_code = True
            await ctx.save_customer()
            ctx.reply(replies.HOUSE_PHOTO_SAVED)
            return settle(S.INITIAL)
        if answer == "no":
            return goto(S.AWAITING_FACADE_COLOR)
        # anything else is the photo arriving
        ctx.reply(replies.HOUSE_PHOTO_CONFIRM)
        return stay()
