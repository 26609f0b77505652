"""
Handler registry: the table mapping each persisted state to its node.

Nodes are registered here instead of being wired into a switch in the
dispatcher. ``validate_registry`` checks the table is complete and that
every edge a node declares points at a registered state, so a missing
handler shows up at startup rather than on a customer's message.
"""

import logging

from gasline.conversation.states import RESET_STATES, ConversationState
from gasline.errors import RoutingError
from gasline.handlers.base import StateHandler

logger = logging.getLogger(__name__)

_HANDLER_REGISTRY: dict[ConversationState, StateHandler] = {}


def register_handler(handler: StateHandler) -> None:
    """Register the node responsible for ``handler.state``."""
    _HANDLER_REGISTRY[handler.state] = handler
    logger.debug("Handler registered: %s -> %s", handler.state.value, type(handler).__name__)


def get_handler(state: ConversationState) -> StateHandler:
    """Return the node for a state.

    Raises:
        RoutingError: If no node is registered for the state.
    """
    if state not in _HANDLER_REGISTRY:
        registered = [s.value for s in _HANDLER_REGISTRY]
        raise RoutingError(f"No handler for state '{state.value}'. Registered: {registered}")
    return _HANDLER_REGISTRY[state]


def reachable_states(start: ConversationState = ConversationState.INITIAL) -> set[ConversationState]:
    """States reachable from ``start`` by following declared edges."""
    seen = {start}
    frontier = [start]
    while frontier:
        handler = _HANDLER_REGISTRY.get(frontier.pop())
        if handler is None:
            continue
        for target in handler.next_states | RESET_STATES:
            if target not in seen:
                seen.add(target)
                frontier.append(target)
    return seen


def validate_registry() -> None:
    """Check every state has a node and every declared edge resolves.

    Raises:
        RoutingError: Describing the first inconsistency found.
    """
    missing = [s.value for s in ConversationState if s not in _HANDLER_REGISTRY]
    if missing:
        raise RoutingError(f"States without a handler: {missing}")
    for state, handler in _HANDLER_REGISTRY.items():
        dangling = [t.value for t in handler.next_states if t not in _HANDLER_REGISTRY]
        if dangling:
            raise RoutingError(f"{state.value} declares unknown targets: {dangling}")


def _auto_register() -> None:
    """Auto-register all built-in nodes. Called once at import time."""
    from gasline.handlers import checkout, incidents, onboarding, product

    for handler in (
        onboarding.InitialHandler(),
        onboarding.MainMenuHandler(),
        onboarding.NameHandler(),
        onboarding.HousePhotoHandler(),
        onboarding.HousePhotoConfirmHandler(),
        product.ServiceTypeHandler(),
        product.MeasureMethodHandler(),
        product.VolumeHandler(),
        product.MoneyHandler(),
        product.CapacityHandler(),
        product.PercentageHandler(),
        product.TankConfirmHandler(),
        product.CylinderModeHandler(),
        product.CylinderQuantityHandler(),
        product.TrackingCodesHandler(),
        checkout.PaymentHandler(),
        checkout.AddressHandler(),
        checkout.AddressConfirmHandler(),
        checkout.FacadeColorHandler(),
        checkout.DoorColorHandler(),
        checkout.DeliveryWindowHandler(),
        checkout.OrderConfirmHandler(),
        incidents.SealReportDescriptionHandler(),
        incidents.SealPhotoHandler(),
        incidents.SealPhotoReceivedHandler(),
        incidents.DeliveryConfirmHandler(),
        incidents.RatingHandler(),
    ):
        register_handler(handler)


_auto_register()
