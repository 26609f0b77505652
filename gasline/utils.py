"""Shared utilities used across the ordering bot."""

import re
import unicodedata

_CHANNEL_PREFIX = re.compile(r"^[a-z]+:", re.IGNORECASE)


def normalize_phone(value: str) -> str:
    """Normalize a phone number by stripping everything except digits and a leading +.

    A messaging channel prefix such as ``whatsapp:`` is dropped first.

    Examples:
        >>> normalize_phone("55 1234 5678")
        '5512345678'
        >>> normalize_phone("whatsapp:+52 1 (55) 1234-5678")
        '+5215512345678'
    """
    value = _CHANNEL_PREFIX.sub("", value.strip()).strip()
    if value.startswith("+"):
        return "+" + re.sub(r"[^\d]", "", value[1:])
    return re.sub(r"[^\d]", "", value)


def normalize_text(value: str) -> str:
    """Lowercase, strip accents and collapse whitespace.

    Examples:
        >>> normalize_text("  Sí,  MAÑANA ")
        'si, manana'
    """
    decomposed = unicodedata.normalize("NFKD", value)
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return " ".join(stripped.lower().split())


def format_money(amount: float) -> str:
    """Format an amount for display, rounded to cents."""
    return f"${amount:,.2f}"


def format_liters(volume: float) -> str:
    """Format a volume for display, rounded to two decimals."""
    return f"{volume:,.2f} L"
