"""
Checks that run before the current state's handler gets the message.

1. SealReportInterrupt:  a trigger phrase files a seal report from any state
2. BlockedCustomerGuard: blocked customers get a fixed rejection

They are composed into an InterruptPipeline the dispatcher consults on
every inbound message.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from gasline.config import AppConfig, settings
from gasline.conversation.choices import contains_any
from gasline.prompts import replies
from gasline.schemas.customer_schema import Customer

logger = logging.getLogger(__name__)


@dataclass
class InterruptResult:
    """Outcome of a single interrupt check."""
    triggered: bool
    interrupt_type: Optional[str] = None
    message: Optional[str] = None


class SealReportInterrupt:
    """Detects the keyword that opens a seal-violation report."""

    def __init__(self, phrases: tuple[str, ...]) -> None:
        self.phrases = phrases

    def check(self, text: str) -> InterruptResult:
        if contains_any(text, self.phrases):
            logger.info("Seal report keyword received")
            return InterruptResult(triggered=True, interrupt_type="seal_report")
        return InterruptResult(triggered=False)


class BlockedCustomerGuard:
    """Stops blocked customers before any handler runs."""

    def check(self, customer: Optional[Customer]) -> InterruptResult:
        if customer is not None and customer.blocked:
            logger.info("Rejected message from blocked customer %s", customer.phone)
            return InterruptResult(
                triggered=True,
                interrupt_type="blocked",
                message=replies.BLOCKED,
            )
        return InterruptResult(triggered=False)


class InterruptPipeline:
    """Runs the interrupt checks in the order the dispatcher needs them."""

    def __init__(self, config: AppConfig = settings) -> None:
        self.seal = SealReportInterrupt(config.conversation.seal_report_phrases)
        self.blocked = BlockedCustomerGuard()

    def check_text(self, text: str) -> InterruptResult:
        return self.seal.check(text)

    def check_customer(self, customer: Optional[Customer]) -> InterruptResult:
        return self.blocked.check(customer)
