"""Per-message logging context: who is writing, which message, in what state.

The dispatcher opens a context for every inbound message. Log records
emitted while it is processed carry the customer's phone, a process-wide
message number and the conversation state the message arrived in, so
interleaved conversations and retried deliveries can be told apart.

Usage:
    from gasline.logging_context import begin_message, get_conversation_logger

    begin_message("+5215512345678", state="ESPERANDO_METODO_PAGO")
    logger = get_conversation_logger(__name__)
    logger.info("Order stored")  # → [+5215512345678 #17 ESPERANDO_METODO_PAGO]: Order stored
"""

import itertools
import logging
from contextvars import ContextVar
from typing import Optional

_conversation_id: ContextVar[str] = ContextVar("conversation_id", default="-")
_conversation_state: ContextVar[str] = ContextVar("conversation_state", default="-")
_message_id: ContextVar[int] = ContextVar("message_id", default=0)

_message_counter = itertools.count(1)


def begin_message(conversation_id: str, state: Optional[str] = None) -> int:
    """Start the context for one inbound message and return its number."""
    message_id = next(_message_counter)
    _conversation_id.set(conversation_id)
    _conversation_state.set(state or "-")
    _message_id.set(message_id)
    return message_id


def set_conversation_state(state: str) -> None:
    """Record the state once it is known; the customer may be loaded later."""
    _conversation_state.set(state)


def get_conversation_id() -> str:
    return _conversation_id.get()


def get_conversation_state() -> str:
    return _conversation_state.get()


def get_message_id() -> int:
    return _message_id.get()


class ConversationContextFilter(logging.Filter):
    """Injects conversation_id, conversation_state and message_id into every record."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.conversation_id = _conversation_id.get()  # type: ignore[attr-defined]
        record.conversation_state = _conversation_state.get()  # type: ignore[attr-defined]
        record.message_id = _message_id.get()  # type: ignore[attr-defined]
        return True


def get_conversation_logger(name: str) -> logging.Logger:
    """Return a logger with the ConversationContextFilter attached."""
    logger = logging.getLogger(name)
    if not any(isinstance(f, ConversationContextFilter) for f in logger.filters):
        logger.addFilter(ConversationContextFilter())
    return logger
