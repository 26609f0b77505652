"""
Exception hierarchy for the conversation core.

Input that fails validation is not an error: parsers return ``None`` and
the handler re-prompts. Everything below aborts the current turn.
"""


class ConversationError(Exception):
    """Base class for failures that abort processing of a message."""


class PersistenceError(ConversationError):
    """The persistence gateway failed to read or write a record."""


class CustomerNotFoundError(PersistenceError):
    """An update targeted a customer that does not exist."""


class RoutingError(ConversationError):
    """A persisted state has no registered handler."""


class InvalidTransitionError(RoutingError):
    """A handler followed an edge its node does not declare."""


class NotificationError(ConversationError):
    """An outbound message could not be delivered."""


class DispatchTimeoutError(ConversationError):
    """Processing a message exceeded the configured deadline."""
