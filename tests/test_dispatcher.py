"""Tests for dispatcher routing, interrupts and failure handling."""

import asyncio
import logging

import pytest

from gasline.conversation.states import ConversationState, goto
from gasline.errors import (
    CustomerNotFoundError,
    DispatchTimeoutError,
    InvalidTransitionError,
    NotificationError,
    PersistenceError,
    RoutingError,
)
from gasline.handlers.registry import get_handler
from gasline.logging_context import get_conversation_id
from gasline.prompts import replies

PHONE = "+5215512345678"


class TestInterrupts:
    @pytest.mark.asyncio
    async def test_blocked_customer_is_rejected(self, chat, make_customer):
        await make_customer(blocked=True, strikes=3)
        await chat.send("hola")
        assert chat.replies() == [replies.BLOCKED]
        assert await chat.state() == "INICIO"

    @pytest.mark.asyncio
    async def test_seal_keyword_from_mid_order(self, chat, make_customer, store):
        await make_customer()
        await chat.send("hola", "1", "1", "1", "100")
        assert chat.session.draft is not None

        await chat.send("REPORTAR SELLO")
        reports = store.list_seal_reports()
        assert len(reports) == 1
        assert reports[0].description == "REPORTAR SELLO"
        assert chat.session.draft is None
        assert chat.last_reply() == replies.SEAL_PHOTO_QUESTION
        assert await chat.state() == "ESPERANDO_FOTO_SELLO"

    @pytest.mark.asyncio
    async def test_seal_keyword_attaches_last_order(self, chat, make_customer, store):
        await make_customer()
        await chat.send("hola", "1", "1", "1", "100", "si", "1", "Calle Pino 45", "si", "si")
        await chat.send("quiero reportar sello")
        assert store.list_seal_reports()[0].order_id == 1

    @pytest.mark.asyncio
    async def test_seal_keyword_from_blocked_customer(self, chat, make_customer, store):
        await make_customer(blocked=True)
        await chat.send("Reportar sello")
        assert len(store.list_seal_reports()) == 1
        assert chat.last_reply() == replies.SEAL_PHOTO_QUESTION

    @pytest.mark.asyncio
    async def test_seal_keyword_from_unknown_phone(self, chat, store):
        await chat.send("REPORTAR SELLO")
        customer = await chat.customer()
        assert customer is not None
        assert store.list_seal_reports()[0].customer_id == customer.id

        await chat.send("no")
        assert replies.SEAL_NO_PHOTO in chat.replies()
        assert chat.last_reply() == replies.REGISTRATION_PROMPT
        assert await chat.state() == "ESPERANDO_NOMBRE_NUEVO"

    @pytest.mark.asyncio
    async def test_seal_photo_flow(self, chat, make_customer, store):
        await make_customer()
        await chat.send("REPORTAR SELLO", "si")
        assert chat.last_reply() == replies.SEAL_PHOTO_SEND
        assert await chat.state() == "RECIBIENDO_FOTO_SELLO"
        assert store.list_seal_reports()[0].photo_requested

        await chat.send("[foto]")
        assert store.list_seal_reports()[0].photo_received
        assert chat.last_reply() == replies.SEAL_PHOTO_RECEIVED
        assert await chat.state() == "INICIO"


class TestRouting:
    @pytest.mark.asyncio
    async def test_unknown_state_resets(self, chat, make_customer):
        await make_customer(state="ESTADO_INEXISTENTE")
        with pytest.raises(RoutingError):
            await chat.send("hola")
        assert await chat.state() == "INICIO"
        assert chat.replies() == [replies.GENERIC_ERROR]

    @pytest.mark.asyncio
    async def test_conversation_resumes_after_reset(self, chat, make_customer):
        await make_customer(state="ESTADO_INEXISTENTE")
        with pytest.raises(RoutingError):
            await chat.send("hola")
        await chat.send("hola")
        assert await chat.state() == "ESPERANDO_OPCION_INICIAL"

    @pytest.mark.asyncio
    async def test_undeclared_edge_resets(self, chat, make_customer, monkeypatch):
        await make_customer()
        await chat.send("hola", "1", "1", "1")
        handler = get_handler(ConversationState.AWAITING_VOLUME)

        async def jump(ctx, text):
            ctx.reply("never delivered")
            return goto(ConversationState.AWAITING_RATING)

        monkeypatch.setattr(handler, "on_input", jump)
        with pytest.raises(InvalidTransitionError):
            await chat.send("100")
        assert "never delivered" not in chat.replies()
        assert chat.last_reply() == replies.GENERIC_ERROR
        assert await chat.state() == "INICIO"

    @pytest.mark.asyncio
    async def test_transition_chain_limit(self, build_chat, make_customer):
        chat = build_chat(max_transition_chain=1)
        await make_customer()
        with pytest.raises(InvalidTransitionError):
            await chat.send("hola")

    @pytest.mark.asyncio
    async def test_phone_formats_reach_same_customer(self, chat, make_customer):
        await make_customer()
        await chat.dispatcher.handle("whatsapp:+52 1 55 1234 5678", "hola")
        assert await chat.state() == "ESPERANDO_OPCION_INICIAL"

    @pytest.mark.asyncio
    async def test_conversation_id_is_phone(self, chat, make_customer):
        await make_customer()
        await chat.send("hola")
        assert get_conversation_id() == PHONE

    @pytest.mark.asyncio
    async def test_log_records_carry_message_context(self, chat, make_customer, caplog):
        await make_customer()
        with caplog.at_level(logging.DEBUG, logger="gasline.dispatcher"):
            await chat.send("hola")
        record = next(
            r for r in caplog.records
            if r.getMessage() == "State INICIO -> ESPERANDO_OPCION_INICIAL"
        )
        assert record.conversation_id == PHONE
        assert record.conversation_state == "INICIO"
        assert record.message_id > 0


class TestHandlerFailures:
    @pytest.mark.asyncio
    async def test_failure_keeps_state_and_sends_generic_error(
        self, chat, make_customer, monkeypatch
    ):
        await make_customer()
        await chat.send("hola", "1", "1", "1")
        handler = get_handler(ConversationState.AWAITING_VOLUME)

        async def boom(ctx, text):
            ctx.reply("half done")
            raise RuntimeError("unexpected")

        monkeypatch.setattr(handler, "on_input", boom)
        with pytest.raises(RuntimeError):
            await chat.send("100")
        assert "half done" not in chat.replies()
        assert chat.last_reply() == replies.GENERIC_ERROR
        assert await chat.state() == "ESPERANDO_LITROS_ESTACIONARIO"
        assert chat.session.draft is not None

    @pytest.mark.asyncio
    async def test_failed_order_write_keeps_draft(self, chat, make_customer, store, monkeypatch):
        await make_customer()
        await chat.send("hola", "1", "1", "1", "100", "si", "1", "Calle Pino 45", "si")
        create_order = store.create_order

        async def unavailable(order):
            raise PersistenceError("database unavailable")

        monkeypatch.setattr(store, "create_order", unavailable)
        with pytest.raises(PersistenceError):
            await chat.send("si")
        assert chat.last_reply() == replies.GENERIC_ERROR
        assert await chat.state() == "CONFIRMANDO_PEDIDO_FINAL"
        assert chat.session.draft is not None
        assert not any(r.startswith("¡Pedido #") for r in chat.replies())

        monkeypatch.setattr(store, "create_order", create_order)
        await chat.send("si")
        assert (await store.get_last_order(1)).id == 1
        assert await store.get_order(2) is None
        assert await chat.state() == "INICIO"

    @pytest.mark.asyncio
    async def test_undelivered_reply_leaves_state(self, chat, make_customer, messenger):
        await make_customer()
        await chat.send("hola", "1")
        messenger.fail_after = len(messenger.sent)
        with pytest.raises(NotificationError):
            await chat.send("1")
        assert await chat.state() == "ESPERANDO_TIPO_SERVICIO"

        messenger.fail_after = None
        await chat.send("1")
        assert await chat.state() == "ESPERANDO_OPCION_ESTACIONARIO"


class TestTimeouts:
    @pytest.mark.asyncio
    async def test_slow_store_times_out(self, build_chat, make_customer, store, monkeypatch):
        chat = build_chat(message_timeout_sec=0.05)
        await make_customer()

        async def slow_lookup(phone):
            await asyncio.sleep(1)

        monkeypatch.setattr(store, "get_customer_by_phone", slow_lookup)
        with pytest.raises(DispatchTimeoutError):
            await chat.dispatcher.handle(PHONE, "hola")

    @pytest.mark.asyncio
    async def test_lock_released_after_timeout(self, build_chat, make_customer, store, monkeypatch):
        chat = build_chat(message_timeout_sec=0.05)
        await make_customer()
        lookup = store.get_customer_by_phone

        async def slow_lookup(phone):
            await asyncio.sleep(1)

        monkeypatch.setattr(store, "get_customer_by_phone", slow_lookup)
        with pytest.raises(DispatchTimeoutError):
            await chat.dispatcher.handle(PHONE, "hola")

        monkeypatch.setattr(store, "get_customer_by_phone", lookup)
        await chat.send("hola")
        assert await chat.state() == "ESPERANDO_OPCION_INICIAL"


class TestConcurrency:
    @pytest.mark.asyncio
    async def test_same_phone_messages_are_serialized(self, chat, make_customer):
        await make_customer()
        await asyncio.gather(
            chat.dispatcher.handle(PHONE, "hola"),
            chat.dispatcher.handle(PHONE, "1"),
        )
        assert await chat.state() == "ESPERANDO_TIPO_SERVICIO"

    @pytest.mark.asyncio
    async def test_different_phones_are_independent(self, dispatcher, make_customer, store):
        await make_customer(phone="+5215500000001")
        await make_customer(phone="+5215500000002")
        await asyncio.gather(
            dispatcher.handle("+5215500000001", "hola"),
            dispatcher.handle("+5215500000002", "hola"),
        )
        for phone in ("+5215500000001", "+5215500000002"):
            customer = await store.get_customer_by_phone(phone)
            assert customer.conversation_state == "ESPERANDO_OPCION_INICIAL"


class TestEnter:
    @pytest.mark.asyncio
    async def test_enter_unknown_phone(self, dispatcher):
        with pytest.raises(CustomerNotFoundError):
            await dispatcher.enter(PHONE, ConversationState.CONFIRMING_DELIVERY)

    @pytest.mark.asyncio
    async def test_enter_prompts_target_state(self, chat, make_customer):
        await make_customer()
        state = await chat.dispatcher.enter(PHONE, ConversationState.AWAITING_SERVICE_TYPE)
        assert state == ConversationState.AWAITING_SERVICE_TYPE
        assert chat.last_reply() == replies.SERVICE_TYPE_PROMPT
        assert await chat.state() == "ESPERANDO_TIPO_SERVICIO"


class TestIdleSessions:
    @pytest.mark.asyncio
    async def test_idle_sessions_swept_on_later_message(self, build_chat, make_customer):
        chat = build_chat(session_idle_timeout_sec=60.0, session_sweep_interval_sec=0.0)
        await make_customer(phone="+5215500000001")
        await make_customer(phone="+5215500000002")

        await chat.dispatcher.handle("+5215500000001", "hola")
        sessions = chat.dispatcher.sessions
        sessions.get("+5215500000001").last_seen -= 120

        await chat.dispatcher.handle("+5215500000002", "hola")
        assert sessions.get("+5215500000001") is None
        assert sessions.get("+5215500000002") is not None
        assert len(sessions) == 1

    @pytest.mark.asyncio
    async def test_evicted_customer_resumes_from_stored_state(self, build_chat, make_customer):
        chat = build_chat(session_idle_timeout_sec=60.0, session_sweep_interval_sec=0.0)
        await make_customer()
        await chat.send("hola", "1")
        chat.session.last_seen -= 120
        await chat.dispatcher.handle("+5215500000009", "hola")
        assert chat.session is None

        await chat.send("1")
        assert await chat.state() == "ESPERANDO_OPCION_ESTACIONARIO"

    @pytest.mark.asyncio
    async def test_sweep_is_throttled(self, build_chat, make_customer):
        chat = build_chat(session_idle_timeout_sec=60.0, session_sweep_interval_sec=3600.0)
        await make_customer()
        await chat.send("hola")
        chat.session.last_seen -= 120
        await chat.dispatcher.handle("+5215500000009", "hola")
        assert chat.session is not None
        assert len(chat.dispatcher.sessions) == 2
