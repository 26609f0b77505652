"""
Outbound messaging gateway.

Provider adapters (WhatsApp Cloud API, Twilio, ...) live outside this
package and implement ``MessagingGateway``. The two implementations here
need no credentials: ``LoggingMessenger`` writes every message to the log
and ``RecordingMessenger`` keeps a transcript for tests and the console.
"""

import logging
from typing import Optional, Protocol

from gasline.errors import NotificationError

logger = logging.getLogger(__name__)


class MessagingGateway(Protocol):
    async def send(self, phone: str, text: str) -> None:
        """Deliver ``text`` to ``phone``. Raises ``NotificationError`` on failure."""
        ...


class LoggingMessenger:
    """Logs outbound messages instead of sending them."""

    async def send(self, phone: str, text: str) -> None:
        logger.info("[MOCK] -> %s: %s", phone, text)


class RecordingMessenger:
    """Keeps every delivered message in order.

    ``fail_after`` simulates a provider outage: once that many messages
    have been delivered, further sends raise ``NotificationError``.
    """

    def __init__(self, fail_after: Optional[int] = None) -> None:
        self.sent: list[tuple[str, str]] = []
        self.fail_after = fail_after

    async def send(self, phone: str, text: str) -> None:
        if self.fail_after is not None and len(self.sent) >= self.fail_after:
            raise NotificationError(f"Provider rejected message to {phone}")
        self.sent.append((phone, text))

    def messages_for(self, phone: str) -> list[str]:
        return [text for to, text in self.sent if to == phone]

    def last_for(self, phone: str) -> Optional[str]:
        messages = self.messages_for(phone)
        return messages[-1] if messages else None

    def clear(self) -> None:
        self.sent.clear()
