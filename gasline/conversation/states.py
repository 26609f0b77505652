"""
Conversation states and the transitions handlers return.

The string value of each state is what gets persisted on the customer
record and is the only thing that lets a conversation resume on the next
message. Values are shared with records written by earlier deployments
and must never be renamed.

Usage:
    return goto(ConversationState.AWAITING_PAYMENT)   # prompt next step now
    return settle(ConversationState.INITIAL)           # store, stay quiet
    return stay()                                      # re-prompt was queued
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class ConversationState(str, Enum):
    """All persisted states of the ordering conversation."""
    INITIAL = "INICIO"
    AWAITING_OPTION = "ESPERANDO_OPCION_INICIAL"
    AWAITING_NAME = "ESPERANDO_NOMBRE_NUEVO"

    # --- Profile ---
    AWAITING_HOUSE_PHOTO = "ESPERANDO_FOTO_CASA"
    CONFIRMING_HOUSE_PHOTO = "CONFIRMANDO_FOTO_CASA"

    # --- Product ---
    AWAITING_SERVICE_TYPE = "ESPERANDO_TIPO_SERVICIO"
    AWAITING_MEASURE_METHOD = "ESPERANDO_OPCION_ESTACIONARIO"
    AWAITING_VOLUME = "ESPERANDO_LITROS_ESTACIONARIO"
    AWAITING_MONEY = "ESPERANDO_DINERO_ESTACIONARIO"
    AWAITING_CAPACITY = "ESPERANDO_CAPACIDAD_TABULADOR"
    AWAITING_PERCENTAGE = "ESPERANDO_PORCENTAJE_TABULADOR"
    CONFIRMING_TANK_ORDER = "CONFIRMANDO_PEDIDO_ESTACIONARIO"
    AWAITING_CYLINDER_MODE = "ESPERANDO_OPCION_CILINDRO"
    AWAITING_CYLINDER_QUANTITY = "ESPERANDO_CANTIDAD_CILINDRO"
    CONFIRMING_TRACKING_CODES = "CONFIRMANDO_QR_CILINDRO"

    # --- Checkout ---
    AWAITING_PAYMENT = "ESPERANDO_METODO_PAGO"
    AWAITING_ADDRESS = "ESPERANDO_DIRECCION"
    CONFIRMING_ADDRESS = "CONFIRMANDO_DIRECCION"
    AWAITING_FACADE_COLOR = "ESPERANDO_COLOR_FACHADA"
    AWAITING_DOOR_COLOR = "ESPERANDO_COLOR_PUERTA"
    AWAITING_DELIVERY_WINDOW = "ESPERANDO_HORARIO_PREMIUM"
    CONFIRMING_ORDER = "CONFIRMANDO_PEDIDO_FINAL"

    # --- After delivery ---
    REPORTING_SEAL = "REPORTANDO_SELLO"
    AWAITING_SEAL_PHOTO = "ESPERANDO_FOTO_SELLO"
    RECEIVING_SEAL_PHOTO = "RECIBIENDO_FOTO_SELLO"
    CONFIRMING_DELIVERY = "CONFIRMANDO_ENTREGA"
    AWAITING_RATING = "ESPERANDO_CALIFICACION"


# Any node may fall back to these without declaring them.
RESET_STATES = frozenset({ConversationState.INITIAL, ConversationState.AWAITING_OPTION})


def parse_state(value: str) -> Optional[ConversationState]:
    """Return the state for a persisted identifier, or None if unknown."""
    try:
        return ConversationState(value)
    except ValueError:
        return None


@dataclass(frozen=True)
class Transition:
    """Outcome of a node callback.

    ``to_state`` of None keeps the conversation where it is. When
    ``prompt`` is set the target node's ``on_enter`` runs in the same turn.
    """
    to_state: Optional[ConversationState] = None
    prompt: bool = True


def stay() -> Transition:
    return Transition()


def goto(state: ConversationState) -> Transition:
    return Transition(to_state=state, prompt=True)


def settle(state: ConversationState) -> Transition:
    return Transition(to_state=state, prompt=False)
