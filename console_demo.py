"""
Offline console demo: runs the ordering conversation without any provider.

Uses the real dispatcher, state nodes and session registry against the
in-memory store. Outbound messages are printed instead of sent. Designed
for walkthroughs of the flows without a phone.

Usage:
    python console_demo.py
    python console_demo.py --scenario tank
    python console_demo.py --scenario seal
"""

import argparse
import asyncio
import sys
from typing import Optional, Union

from gasline.config import settings
from gasline.dispatcher import StateDispatcher
from gasline.errors import ConversationError
from gasline.gateways.messaging import RecordingMessenger
from gasline.gateways.store import InMemoryStore
from gasline.operations import DeliveryOperations

BLUE = "\033[94m"
GREEN = "\033[92m"
YELLOW = "\033[93m"
RED = "\033[91m"
DIM = "\033[2m"
RESET = "\033[0m"
BOLD = "\033[1m"

DEMO_PHONE = "+5215512345678"

# A step is either a customer message or a back-office action name.
Step = Union[str, tuple[str, str]]


class ConsoleMessenger(RecordingMessenger):
    """Prints every outbound message as it is delivered."""

    async def send(self, phone: str, text: str) -> None:
        await super().send(phone, text)
        print(f"{GREEN}{BOLD}[{settings.business.name}]{RESET} {GREEN}{text}{RESET}")


class ConsoleSession:
    """Drives one customer's conversation from the terminal."""

    # Pre-scripted scenarios for --scenario flag
    SCENARIOS: dict[str, list[Step]] = {
        "tank": [
            "Hola",
            "Pérez López Juan",
            "1",
            "tanque",
            "litros",
            "150",
            "efectivo",
            "Av. Reforma 123, Col. Centro",
            "si",
            "si",
        ],
        "percentage": [
            "Hola",
            "García Ruiz Ana",
            "1",
            "1",
            "3",
            "300",
            "85",
            "1",
            "2",
            "Calle Pino 45, Col. Jardines",
            "1",
            "1",
        ],
        "cylinder": [
            "Hola",
            "Hernández Soto Luis",
            "cilindro",
            "recarga",
            "2",
            "si",
            "tarjeta",
            "Calle Olmo 8, Col. Roma",
            "no",
            "azul",
            "blanca",
            "si",
        ],
        "premium": [
            "Hola",
            "Martínez Vega Rosa",
            ("ops", "promote"),
            "1",
            "1",
            "2",
            "$1,000",
            "si",
            "1",
            "Calle Cedro 10, Col. Lomas",
            "1",
            "tarde",
            "1",
        ],
        "seal": [
            "Hola",
            "Torres Díaz Pedro",
            "1",
            "1",
            "1",
            "100",
            "si",
            "1",
            "Calle Roble 7, Col. Norte",
            "1",
            "1",
            ("ops", "deliver"),
            "no",
            "El sello venía roto",
            "1",
            "[foto]",
            "REPORTAR SELLO",
            "2",
        ],
    }

    MAX_INPUT_LENGTH = 500

    def __init__(self, phone: str = DEMO_PHONE) -> None:
        self.phone = phone
        self.store = InMemoryStore()
        self.messenger = ConsoleMessenger()
        self.dispatcher = StateDispatcher(store=self.store, messenger=self.messenger)
        self.ops = DeliveryOperations(self.dispatcher)

    def system_log(self, text: str) -> None:
        print(f"{DIM}  >> {text}{RESET}")

    async def _state(self) -> Optional[str]:
        customer = await self.store.get_customer_by_phone(self.phone)
        return customer.conversation_state if customer else None

    async def _say(self, text: str) -> None:
        print(f"\n{BLUE}[Cliente] {RESET}{text}")
        try:
            await self.dispatcher.handle(self.phone, text)
        except ConversationError as exc:
            print(f"{RED}  !! {type(exc).__name__}: {exc}{RESET}")
        self.system_log(f"State: {await self._state()}")

    async def _operate(self, action: str) -> None:
        print(f"\n{YELLOW}[Oficina] {action}{RESET}")
        if action == "promote":
            await self.ops.promote_to_premium(self.phone)
        elif action == "deliver":
            customer = await self.store.get_customer_by_phone(self.phone)
            last = await self.store.get_last_order(customer.id) if customer else None
            if last is None:
                print(f"{RED}  !! No order to deliver{RESET}")
                return
            await self.ops.request_delivery_confirmation(self.phone, last.id)
        elif action == "strike":
            await self.ops.assign_strike(self.phone)
        elif action == "route":
            for stop in await self.ops.daily_route():
                flag = " [codigo rojo]" if stop.red_code else ""
                self.system_log(f"#{stop.order_id} {stop.address}: {stop.summary}{flag}")
        else:
            print(f"{RED}  !! Unknown action: {action}{RESET}")
            return
        self.system_log(f"State: {await self._state()}")

    async def run_scenario(self, scenario: str) -> None:
        """Auto-play a pre-scripted scenario for demo purposes."""
        steps = self.SCENARIOS.get(scenario)
        if not steps:
            print(f"{RED}Unknown scenario: {scenario}{RESET}")
            return

        print()
        print(f"{BOLD}{'=' * 60}{RESET}")
        print(f"{BOLD}  GASLINE - Scenario: {scenario}{RESET}")
        print(f"{BOLD}  Business: {settings.business.name}{RESET}")
        print(f"{BOLD}{'=' * 60}{RESET}")

        for step in steps:
            if isinstance(step, tuple):
                await self._operate(step[1])
            else:
                await self._say(step)

        await self._operate("route")
        print(f"\n{BOLD}{'=' * 60}{RESET}")
        print(f"{BOLD}  Scenario '{scenario}' complete.{RESET}")
        print(f"{DIM}  Messages sent: {len(self.messenger.sent)}{RESET}")
        print(f"{BOLD}{'=' * 60}{RESET}")
        self.dispatcher.close()

    async def run(self) -> None:
        print()
        print(f"{BOLD}{'=' * 60}{RESET}")
        print(f"{BOLD}  GASLINE - Console Demo{RESET}")
        print(f"{BOLD}  Business: {settings.business.name}{RESET}")
        print(f"{BOLD}  Type 'quit' to exit, '/promote', '/deliver', '/strike' or '/route'{RESET}")
        print(f"{BOLD}{'=' * 60}{RESET}")

        while True:
            user_input = (await asyncio.to_thread(input, f"\n{BLUE}[Cliente] {RESET}")).strip()
            if not user_input:
                continue
            if user_input.lower() in ("quit", "exit", "q"):
                print(f"\n{DIM}Session ended.{RESET}")
                break
            if user_input.startswith("/"):
                await self._operate(user_input[1:])
                continue
            if len(user_input) > self.MAX_INPUT_LENGTH:
                self.system_log("Message too long, ignored")
                continue
            try:
                await self.dispatcher.handle(self.phone, user_input)
            except ConversationError as exc:
                print(f"{RED}  !! {type(exc).__name__}: {exc}{RESET}")
            self.system_log(f"State: {await self._state()}")

        self.dispatcher.close()


def main(argv: Optional[list[str]] = None) -> None:
    parser = argparse.ArgumentParser(description="Gasline offline console demo")
    parser.add_argument("--scenario", choices=sorted(ConsoleSession.SCENARIOS), default=None)
    parser.add_argument("--phone", default=DEMO_PHONE)
    args = parser.parse_args(argv)

    session = ConsoleSession(phone=args.phone)
    try:
        if args.scenario:
            asyncio.run(session.run_scenario(args.scenario))
        else:
            asyncio.run(session.run())
    except (KeyboardInterrupt, EOFError):
        print(f"\n{DIM}Session ended.{RESET}")
        sys.exit(0)


if __name__ == "__main__":
    main()
