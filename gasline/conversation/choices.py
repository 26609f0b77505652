"""
Numbered menus and the keywords accepted for each option.

Customers answer a menu with the option number or a word ("1", "tanque",
"tank"). Matching ignores case and accents. A reply that names two
different options is treated as unrecognized rather than guessed.
"""

import re
from dataclasses import dataclass
from typing import Optional

from gasline.utils import normalize_text


@dataclass(frozen=True)
class Option:
    value: str
    number: str
    aliases: tuple[str, ...] = ()


Menu = tuple[Option, ...]

YES_NO: Menu = (
    Option("yes", "1", ("si", "yes", "s", "y", "claro", "correcto", "confirmo", "ok")),
    Option("no", "2", ("no", "n", "nop", "cancelar", "cancel")),
)

MAIN_MENU_RETURNING: Menu = (
    Option("repeat", "1", ("repetir", "repeat", "lo mismo", "same")),
    Option("new", "2", ("nuevo", "nuevo pedido", "new", "new order", "pedir")),
    Option("update", "3", ("actualizar", "datos", "update", "perfil", "profile")),
)

MAIN_MENU_FIRST_TIME: Menu = (
    Option("new", "1", ("nuevo", "nuevo pedido", "new", "new order", "pedir")),
    Option("update", "2", ("actualizar", "datos", "update", "perfil", "profile")),
)

SERVICE_TYPE: Menu = (
    Option("tank", "1", ("tanque", "estacionario", "tank", "e")),
    Option("cylinder", "2", ("cilindro", "cylinder", "c")),
)

MEASURE_METHOD: Menu = (
    Option("volume", "1", ("litros", "litro", "lts", "volumen", "volume", "liters")),
    Option("money", "2", ("dinero", "pesos", "monto", "money", "$")),
    Option("percentage", "3", ("tabulador", "porcentaje", "percentage", "percent", "%")),
)

CYLINDER_MODE: Menu = (
    Option("recharge", "1", ("recarga", "recargar", "recharge", "refill")),
    Option("exchange", "2", ("canje", "cambio", "intercambio", "exchange")),
)

PAYMENT_METHOD: Menu = (
    Option("cash", "1", ("efectivo", "cash")),
    Option("card", "2", ("tarjeta", "card", "terminal")),
)

DELIVERY_WINDOW: Menu = (
    Option("morning", "1", ("manana", "morning", "am")),
    Option("afternoon", "2", ("tarde", "afternoon", "pm")),
)


def _contains_phrase(text: str, phrase: str) -> bool:
    return re.search(rf"(?<!\w){re.escape(phrase)}(?!\w)", text) is not None


def match_choice(text: str, menu: Menu, allow_numbers: bool = True) -> Optional[str]:
    """Map a reply to an option value. Returns None if nothing or several match."""
    normalized = normalize_text(text).strip(" .!¡?¿")
    if not normalized:
        return None

    for option in menu:
        if (allow_numbers and normalized == option.number) or normalized in option.aliases:
            return option.value

    matched = {
        option.value
        for option in menu
        for phrase in ((option.number,) if allow_numbers else ()) + option.aliases
        if len(phrase) > 1 or phrase.isdigit()
        if _contains_phrase(normalized, phrase)
    }
    if len(matched) == 1:
        return matched.pop()
    return None


def contains_any(text: str, phrases: tuple[str, ...]) -> bool:
    """Case- and accent-insensitive substring check against configured phrases."""
    normalized = normalize_text(text)
    return any(normalize_text(p) in normalized for p in phrases if p.strip())
