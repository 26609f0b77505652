"""Tests for import chains and module integrity.

Ensures all public modules can be imported without errors and
that re-exports from __init__.py files work correctly.
"""

import pytest


class TestSchemaImports:
    def test_import_customer_schema(self):
        from gasline.schemas.customer_schema import Customer, CustomerCategory
        customer = Customer(phone="+5215512345678")
        assert customer.conversation_state == "INICIO"
        assert not customer.is_registered
        assert CustomerCategory.PREMIUM == "premium"

    def test_import_order_schema(self):
        from gasline.schemas.order_schema import OrderStatus, ServiceVariant
        assert OrderStatus.PENDING_PICKUP == "pending_pickup"
        assert ServiceVariant.CYLINDER_RECHARGE.is_cylinder
        assert ServiceVariant.TANK_BY_MONEY.is_tank

    def test_import_report_schema(self):
        from gasline.schemas.report_schema import ReportStatus, SealReport
        report = SealReport(customer_id=1, description="sello roto")
        assert report.status == ReportStatus.PENDING


class TestConversationImports:
    def test_reexports(self):
        from gasline.conversation import (
            ConversationState, InterruptPipeline, OrderDraft, ProductKind,
            SessionContext, SessionRegistry, Transition, goto, settle, stay,
        )
        assert ConversationState.INITIAL == "INICIO"
        assert stay() == Transition()

    def test_import_handlers(self):
        from gasline.conversation import ConversationState
        from gasline.handlers import StateHandler, TurnContext, get_handler, validate_registry
        validate_registry()
        assert isinstance(get_handler(ConversationState.INITIAL), StateHandler)


class TestCoreImports:
    def test_import_dispatcher_and_operations(self):
        from gasline.dispatcher import StateDispatcher
        from gasline.operations import DeliveryOperations, RouteStop
        assert StateDispatcher is not None
        assert DeliveryOperations is not None

    def test_import_gateways(self):
        from gasline.gateways.messaging import LoggingMessenger, MessagingGateway, RecordingMessenger
        from gasline.gateways.store import InMemoryStore, PersistenceGateway
        assert InMemoryStore() is not None

    def test_error_hierarchy(self):
        from gasline.errors import (
            ConversationError, CustomerNotFoundError, DispatchTimeoutError,
            InvalidTransitionError, NotificationError, PersistenceError, RoutingError,
        )
        assert issubclass(CustomerNotFoundError, PersistenceError)
        assert issubclass(InvalidTransitionError, RoutingError)
        for error in (PersistenceError, RoutingError, NotificationError, DispatchTimeoutError):
            assert issubclass(error, ConversationError)

    @pytest.mark.asyncio
    async def test_logging_messenger_sends(self, caplog):
        import logging
        from gasline.gateways.messaging import LoggingMessenger
        with caplog.at_level(logging.INFO, logger="gasline.gateways.messaging"):
            await LoggingMessenger().send("+5215512345678", "Hola")
        assert "Hola" in caplog.text


class TestEntryPoints:
    def test_console_demo_scenarios(self):
        from console_demo import ConsoleSession
        assert {"tank", "percentage", "cylinder", "premium", "seal"} <= set(ConsoleSession.SCENARIOS)

    @pytest.mark.asyncio
    async def test_tank_scenario_places_order(self, capsys):
        from console_demo import ConsoleSession
        session = ConsoleSession()
        await session.run_scenario("tank")
        order = await session.store.get_order(1)
        assert order is not None
        assert order.volume == 150.0
        assert "Scenario 'tank' complete." in capsys.readouterr().out

    @pytest.mark.asyncio
    @pytest.mark.parametrize("scenario", ["percentage", "cylinder", "premium", "seal"])
    async def test_scenarios_end_idle(self, scenario):
        from console_demo import ConsoleSession
        session = ConsoleSession()
        await session.run_scenario(scenario)
        customer = await session.store.get_customer_by_phone(session.phone)
        assert customer.conversation_state == "INICIO"
        assert await session.store.get_order(1) is not None
