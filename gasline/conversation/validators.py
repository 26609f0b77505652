"""
Parsers for free-text answers.

Each parser returns the parsed value, or None when the text is not
acceptable. Handlers turn a None into a re-prompt; nothing here raises.
"""

import logging
import math
import re
from dataclasses import dataclass
from typing import Optional

logger = logging.getLogger(__name__)

_NUMBER = re.compile(r"^\$?\s*(\d{1,3}(?:,\d{3})+|\d+)(?:\.(\d+))?\s*(l|lt|lts|litros?|liters?|%|pesos|mxn)?$")


def parse_number(text: str) -> Optional[float]:
    """Parse a positive number, tolerating a ``$`` prefix and a unit suffix.

    Examples:
        >>> parse_number("$1,500.50")
        1500.5
        >>> parse_number("150 lts")
        150.0
        >>> parse_number("ciento cincuenta") is None
        True
    """
    match = _NUMBER.match(text.strip().lower())
    if not match:
        logger.debug("Not a number: %r", text)
        return None
    whole, fraction, _unit = match.groups()
    value = float(whole.replace(",", "") + ("." + fraction if fraction else ""))
    if not math.isfinite(value) or value <= 0:
        return None
    return value


def parse_percentage(text: str) -> Optional[float]:
    """Parse a fill percentage in the range (0, 100]."""
    value = parse_number(text)
    if value is None or not 0 < value <= 100:
        return None
    return value


def parse_count(text: str, maximum: int) -> Optional[int]:
    """Parse a whole number of items between 1 and ``maximum``."""
    value = parse_number(text)
    if value is None or not value.is_integer():
        return None
    count = int(value)
    if not 1 <= count <= maximum:
        return None
    return count


@dataclass(frozen=True)
class FullName:
    paternal_surname: str
    maternal_surname: str
    first_name: str


def parse_full_name(text: str) -> Optional[FullName]:
    """Split a name written surname-first.

    "Pérez López Juan Carlos" gives paternal "Pérez", maternal "López",
    first name "Juan Carlos". Two words give a paternal surname and a first
    name. A single word is rejected.
    """
    words = [w.capitalize() if w.islower() else w for w in text.split()]
    if len(words) < 2 or any(not re.search(r"[^\W\d_]", w) for w in words):
        return None
    if len(words) == 2:
        return FullName(paternal_surname=words[0], maternal_surname="", first_name=words[1])
    return FullName(
        paternal_surname=words[0],
        maternal_surname=words[1],
        first_name=" ".join(words[2:]),
    )


def parse_free_text(text: str, min_length: int = 1) -> Optional[str]:
    """Collapse whitespace; reject answers shorter than ``min_length``."""
    cleaned = " ".join(text.split())
    if len(cleaned) < min_length:
        return None
    return cleaned


def parse_rating(text: str) -> Optional[int]:
    """Parse a 1-5 star rating, as a digit or a row of stars."""
    stripped = text.strip().replace("\ufe0f", "")
    if stripped and set(stripped) <= {"⭐", "*"}:
        count = len(stripped)
        return count if 1 <= count <= 5 else None
    return parse_count(stripped, 5)
