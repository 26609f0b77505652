"""Shared test fixtures and helpers."""

from dataclasses import replace
from typing import Optional

import pytest

from gasline.config import AppConfig, RuntimeConfig, settings
from gasline.dispatcher import StateDispatcher
from gasline.gateways.messaging import RecordingMessenger
from gasline.gateways.store import InMemoryStore
from gasline.operations import DeliveryOperations
from gasline.schemas.customer_schema import Customer, CustomerCategory

PHONE = "+5215512345678"


class Chat:
    """Plays one customer's side of the conversation against a dispatcher."""

    def __init__(self, dispatcher: StateDispatcher, phone: str = PHONE) -> None:
        self.dispatcher = dispatcher
        self.phone = phone

    @property
    def store(self) -> InMemoryStore:
        return self.dispatcher.store

    @property
    def messenger(self) -> RecordingMessenger:
        return self.dispatcher.messenger

    async def send(self, *texts: str) -> None:
        for text in texts:
            await self.dispatcher.handle(self.phone, text)

    async def customer(self) -> Optional[Customer]:
        return await self.store.get_customer_by_phone(self.phone)

    async def state(self) -> Optional[str]:
        customer = await self.customer()
        return customer.conversation_state if customer else None

    def replies(self) -> list[str]:
        return self.messenger.messages_for(self.phone)

    def last_reply(self) -> Optional[str]:
        return self.messenger.last_for(self.phone)

    @property
    def session(self):
        return self.dispatcher.sessions.get(self.phone)


@pytest.fixture
def config() -> AppConfig:
    """Default settings at the list price, with short timers so background jobs fire quickly."""
    return replace(
        settings,
        business=replace(settings.business, unit_price=12.5),
        runtime=RuntimeConfig(
            message_timeout_sec=5.0,
            pickup_notice_delay_sec=0.01,
            session_idle_timeout_sec=3600.0,
            session_sweep_interval_sec=3600.0,
            max_transition_chain=8,
        ),
    )


@pytest.fixture
def store():
    return InMemoryStore()


@pytest.fixture
def messenger():
    return RecordingMessenger()


@pytest.fixture
def dispatcher(store, messenger, config):
    d = StateDispatcher(store=store, messenger=messenger, config=config)
    yield d
    d.close()


@pytest.fixture
def ops(dispatcher):
    return DeliveryOperations(dispatcher)


@pytest.fixture
def chat(dispatcher):
    return Chat(dispatcher)


@pytest.fixture
def build_chat(store, messenger, config):
    """Factory for a chat whose dispatcher uses overridden runtime settings."""
    dispatchers = []

    def _build(**runtime) -> Chat:
        custom = replace(config, runtime=replace(config.runtime, **runtime))
        d = StateDispatcher(store=store, messenger=messenger, config=custom)
        dispatchers.append(d)
        return Chat(d)

    yield _build
    for d in dispatchers:
        d.close()


@pytest.fixture
def make_customer(store):
    """Factory storing a registered customer in a given conversation state."""

    async def _make(
        phone: str = PHONE,
        state: str = "INICIO",
        premium: bool = False,
        **fields,
    ) -> Customer:
        customer = Customer(
            phone=phone,
            first_name=fields.pop("first_name", "Juan"),
            paternal_surname=fields.pop("paternal_surname", "Pérez"),
            maternal_surname=fields.pop("maternal_surname", "López"),
            conversation_state=state,
            category=CustomerCategory.PREMIUM if premium else CustomerCategory.STANDARD,
            **fields,
        )
        return await store.create_customer(customer)

    return _make
