from gasline.handlers.base import StateHandler, TurnContext, home
from gasline.handlers.registry import (
    get_handler,
    reachable_states,
    register_handler,
    validate_registry,
)

__all__ = [
    "StateHandler", "TurnContext", "home",
    "get_handler", "reachable_states",
    "register_handler", "validate_registry",
]
