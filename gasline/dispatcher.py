"""
State dispatcher: turns one inbound message into replies and a new state.

For every message, under the sender's session lock:

1. A seal-report keyword files a report, whatever state the customer is in.
2. Blocked customers get a fixed rejection.
3. Unknown phones are registered and asked for their name.
4. Otherwise the node for the persisted state handles the text, and any
   ``goto`` transitions are followed so the next question goes out in the
   same turn.

Replies are queued while nodes run and delivered afterwards. The new
state is persisted only once every reply was delivered, so a message the
customer never saw never moves their conversation forward.

Usage:
    dispatcher = StateDispatcher(store=InMemoryStore(), messenger=LoggingMessenger())
    await dispatcher.handle("whatsapp:+5215512345678", "Hola")
"""

import asyncio
import time
from typing import Awaitable, Callable, Optional

from gasline.config import AppConfig, settings
from gasline.conversation.interrupts import InterruptPipeline
from gasline.conversation.session import SessionContext, SessionRegistry
from gasline.conversation.states import (
    RESET_STATES,
    ConversationState,
    Transition,
    parse_state,
)
from gasline.errors import (
    CustomerNotFoundError,
    DispatchTimeoutError,
    InvalidTransitionError,
    NotificationError,
    RoutingError,
)
from gasline.gateways.messaging import MessagingGateway
from gasline.gateways.store import PersistenceGateway
from gasline.handlers.base import StateHandler, TurnContext
from gasline.handlers.incidents import open_seal_report
from gasline.handlers.registry import get_handler, validate_registry
from gasline.logging_context import (
    begin_message,
    get_conversation_logger,
    set_conversation_state,
)
from gasline.prompts import replies
from gasline.schemas.customer_schema import Customer
from gasline.utils import normalize_phone

logger = get_conversation_logger(__name__)

Step = Callable[[TurnContext], Awaitable[ConversationState]]


class StateDispatcher:
    """Routes inbound messages to state nodes, one message per phone at a time."""

    def __init__(
        self,
        store: PersistenceGateway,
        messenger: MessagingGateway,
        sessions: Optional[SessionRegistry] = None,
        config: AppConfig = settings,
    ) -> None:
        validate_registry()
        self.store = store
        self.messenger = messenger
        self.sessions = sessions or SessionRegistry()
        self.config = config
        self.interrupts = InterruptPipeline(config)
        self._last_sweep = time.monotonic()

    # ------------------------------------------------------------------ #
    # Public entry points
    # ------------------------------------------------------------------ #

    async def handle(self, phone: str, text: str) -> None:
        """Process one inbound message within the configured deadline.

        Raises:
            ConversationError: Any failure, after the customer was told
                to try again where that is still possible.
        """
        phone = normalize_phone(phone)
        begin_message(phone)
        timeout = self.config.runtime.message_timeout_sec
        try:
            await asyncio.wait_for(self._process(phone, text), timeout=timeout)
        except asyncio.TimeoutError:
            logger.error("Abandoned message from %s after %.1fs", phone, timeout)
            raise DispatchTimeoutError(
                f"Message from {phone} not processed within {timeout}s"
            ) from None
        finally:
            self._sweep_idle_sessions()

    async def enter(
        self,
        phone: str,
        state: ConversationState,
        prepare: Optional[Callable[[SessionContext], None]] = None,
    ) -> ConversationState:
        """Move an existing customer into ``state`` and send its prompt.

        Used by back-office operations, e.g. asking for delivery
        confirmation once the courier reports an order delivered.

        Raises:
            CustomerNotFoundError: If the phone is not registered.
        """
        phone = normalize_phone(phone)
        begin_message(phone)
        async with self.sessions.acquire(phone) as session:
            customer = await self.store.get_customer_by_phone(phone)
            if customer is None:
                raise CustomerNotFoundError(f"No customer with phone {phone}")
            session.customer = customer
            if prepare is not None:
                prepare(session)
            ctx = self._context(phone, session)

            async def step(c: TurnContext) -> ConversationState:
                return await self._follow(c, None, Transition(to_state=state))

            return await self._execute(ctx, step)

    # ------------------------------------------------------------------ #
    # Message processing
    # ------------------------------------------------------------------ #

    async def _process(self, phone: str, text: str) -> None:
        async with self.sessions.acquire(phone) as session:
            ctx = self._context(phone, session)

            if self.interrupts.check_text(text).triggered:
                customer = await self.store.get_customer_by_phone(phone)
                if customer is None:
                    customer = await self._register(phone)
                session.customer = customer
                await self._execute(ctx, lambda c: self._seal_interrupt(c, text))
                return

            customer = await self.store.get_customer_by_phone(phone)
            blocked = self.interrupts.check_customer(customer)
            if blocked.triggered:
                await self.messenger.send(phone, blocked.message)
                return

            if customer is None:
                await self._register(phone)
                await self.messenger.send(phone, replies.REGISTRATION_PROMPT)
                return

            session.customer = customer
            await self._execute(ctx, lambda c: self._dispatch(c, text))

    async def _register(self, phone: str) -> Customer:
        customer = await self.store.create_customer(
            Customer(phone=phone, conversation_state=ConversationState.AWAITING_NAME.value)
        )
        logger.info("New customer %s registered", phone)
        return customer

    async def _seal_interrupt(self, ctx: TurnContext, text: str) -> ConversationState:
        transition = await open_seal_report(ctx, description=" ".join(text.split()))
        return await self._follow(ctx, None, transition)

    async def _dispatch(self, ctx: TurnContext, text: str) -> ConversationState:
        raw_state = ctx.customer.conversation_state
        state = parse_state(raw_state)
        if state is None:
            raise RoutingError(f"Unknown conversation state {raw_state!r}")
        handler = get_handler(state)
        transition = await handler.receive(ctx, text)
        return await self._follow(ctx, handler, transition)

    async def _follow(
        self,
        ctx: TurnContext,
        source: Optional[StateHandler],
        transition: Transition,
    ) -> ConversationState:
        """Follow prompt transitions until a node waits for an answer."""
        for _ in range(self.config.runtime.max_transition_chain):
            self._check_edge(source, transition)
            if transition.to_state is None:
                if source is None:
                    raise InvalidTransitionError("Transition without a source node or target")
                return source.state
            if not transition.prompt:
                return transition.to_state
            logger.debug(
                "Transition %s -> %s",
                source.state.value if source else "-", transition.to_state.value,
            )
            source = get_handler(transition.to_state)
            transition = await source.on_enter(ctx)
        raise InvalidTransitionError(
            f"More than {self.config.runtime.max_transition_chain} chained transitions"
        )

    @staticmethod
    def _check_edge(source: Optional[StateHandler], transition: Transition) -> None:
        target = transition.to_state
        if source is None or target is None or target == source.state:
            return
        if target in source.next_states or target in RESET_STATES:
            return
        raise InvalidTransitionError(
            f"{source.state.value} may not move to {target.value}. "
            f"Allowed: {sorted(s.value for s in source.next_states)}"
        )

    async def _execute(self, ctx: TurnContext, step: Step) -> ConversationState:
        """Run a step, deliver its replies, then persist the resulting state."""
        previous = ctx.customer.conversation_state
        set_conversation_state(previous)
        try:
            next_state = await step(ctx)
        except RoutingError:
            logger.error(
                "Routing failed for %s in state %r; resetting to %s",
                ctx.phone, previous, ConversationState.INITIAL.value, exc_info=True,
            )
            await self._recover(ctx, reset=True)
            raise
        except Exception:
            logger.exception("Handler failed for %s in state %r", ctx.phone, previous)
            await self._recover(ctx, reset=False)
            raise

        await self._deliver(ctx)
        if next_state.value != previous:
            await self.store.update_customer_state(ctx.phone, next_state.value)
            ctx.customer.conversation_state = next_state.value
            logger.debug("State %s -> %s", previous, next_state.value)
            set_conversation_state(next_state.value)
        return next_state

    async def _deliver(self, ctx: TurnContext) -> None:
        queued, ctx.replies = ctx.replies, []
        for text in queued:
            try:
                await self.messenger.send(ctx.phone, text)
            except NotificationError:
                logger.error("Reply to %s not delivered; state left unchanged", ctx.phone)
                raise

    async def _recover(self, ctx: TurnContext, reset: bool) -> None:
        """Drop the failed turn's replies and tell the customer to retry."""
        ctx.replies.clear()
        if reset:
            await self.store.update_customer_state(ctx.phone, ConversationState.INITIAL.value)
            ctx.customer.conversation_state = ConversationState.INITIAL.value
        try:
            await self.messenger.send(ctx.phone, replies.GENERIC_ERROR)
        except NotificationError:
            logger.warning("Could not deliver error notice to %s", ctx.phone)

    def _context(self, phone: str, session: SessionContext) -> TurnContext:
        return TurnContext(
            phone=phone,
            session=session,
            store=self.store,
            messenger=self.messenger,
            config=self.config,
        )

    def _sweep_idle_sessions(self) -> None:
        runtime = self.config.runtime
        now = time.monotonic()
        if now - self._last_sweep < runtime.session_sweep_interval_sec:
            return
        self._last_sweep = now
        self.sessions.evict_idle(runtime.session_idle_timeout_sec)

    def close(self) -> None:
        self.sessions.close()
