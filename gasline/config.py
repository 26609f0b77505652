"""
Centralized configuration with environment variable overrides.

Prices, limits and timing for the ordering conversation are configurable
here. Handlers read them through the ``AppConfig`` they are given, never
from literals.
"""

import logging
import os
from dataclasses import dataclass, field

from dotenv import load_dotenv

from gasline.logging_context import ConversationContextFilter

load_dotenv()

logger = logging.getLogger(__name__)


def _safe_int(env_var: str, default: str) -> int:
    """Parse an integer from an env var with a clear error on bad values."""
    raw = os.getenv(env_var, default)
    try:
        return int(raw)
    except (ValueError, TypeError):
        raise ValueError(
            f"Invalid integer for {env_var}: {raw!r}"
        ) from None


def _safe_float(env_var: str, default: str) -> float:
    """Parse a float from an env var with a clear error on bad values."""
    raw = os.getenv(env_var, default)
    try:
        return float(raw)
    except (ValueError, TypeError):
        raise ValueError(
            f"Invalid float for {env_var}: {raw!r}"
        ) from None


def _csv(env_var: str, default: str) -> tuple[str, ...]:
    """Split a comma-separated env var into a tuple of non-empty entries."""
    raw = os.getenv(env_var, default)
    return tuple(part.strip() for part in raw.split(",") if part.strip())


@dataclass(frozen=True)
class BusinessConfig:
    """Business-specific settings loaded from environment or defaults."""

    name: str = os.getenv("BUSINESS_NAME", "Gas Express")
    unit_price: float = _safe_float("UNIT_PRICE_PER_LITER", "12.50")
    courier_wait_minutes: int = _safe_int("COURIER_WAIT_MINUTES", "10")
    maps_url: str = os.getenv("MAPS_SEARCH_URL", "https://maps.google.com/?q=")


@dataclass(frozen=True)
class ConversationConfig:
    """Limits and keywords used by the conversation handlers."""

    max_cylinders_per_order: int = _safe_int("MAX_CYLINDERS_PER_ORDER", "3")
    recommended_fill_percent: int = _safe_int("RECOMMENDED_FILL_PERCENT", "85")
    strike_limit: int = _safe_int("STRIKE_LIMIT", "3")
    min_address_length: int = _safe_int("MIN_ADDRESS_LENGTH", "5")
    seal_report_phrases: tuple[str, ...] = _csv(
        "SEAL_REPORT_PHRASES", "REPORTAR SELLO,SELLO VIOLADO,REPORT SEAL"
    )


@dataclass(frozen=True)
class RuntimeConfig:
    """Deadlines and background job timing."""

    message_timeout_sec: float = _safe_float("MESSAGE_TIMEOUT_SEC", "30")
    pickup_notice_delay_sec: float = _safe_float("PICKUP_NOTICE_DELAY_SEC", "10")
    session_idle_timeout_sec: float = _safe_float("SESSION_IDLE_TIMEOUT_SEC", "86400")
    session_sweep_interval_sec: float = _safe_float("SESSION_SWEEP_INTERVAL_SEC", "60")
    max_transition_chain: int = _safe_int("MAX_TRANSITION_CHAIN", "8")


@dataclass(frozen=True)
class AppConfig:
    """Root configuration aggregating all sub-configs."""

    business: BusinessConfig = field(default_factory=BusinessConfig)
    conversation: ConversationConfig = field(default_factory=ConversationConfig)
    runtime: RuntimeConfig = field(default_factory=RuntimeConfig)
    log_level: str = os.getenv("LOG_LEVEL", "INFO")


def _validate_config(config: AppConfig) -> None:
    """Validate configuration values are within acceptable ranges."""
    if config.business.unit_price <= 0:
        raise ValueError(
            f"UNIT_PRICE_PER_LITER must be > 0, got {config.business.unit_price}"
        )
    if config.business.courier_wait_minutes < 0:
        raise ValueError(
            f"COURIER_WAIT_MINUTES must be >= 0, got {config.business.courier_wait_minutes}"
        )
    if config.conversation.max_cylinders_per_order < 1:
        raise ValueError(
            "MAX_CYLINDERS_PER_ORDER must be >= 1, "
            f"got {config.conversation.max_cylinders_per_order}"
        )
    if not 0 < config.conversation.recommended_fill_percent <= 100:
        raise ValueError(
            "RECOMMENDED_FILL_PERCENT must be between 1 and 100, "
            f"got {config.conversation.recommended_fill_percent}"
        )
    if config.conversation.strike_limit < 1:
        raise ValueError(
            f"STRIKE_LIMIT must be >= 1, got {config.conversation.strike_limit}"
        )
    if config.conversation.min_address_length < 1:
        raise ValueError(
            f"MIN_ADDRESS_LENGTH must be >= 1, got {config.conversation.min_address_length}"
        )
    if not config.conversation.seal_report_phrases:
        raise ValueError("SEAL_REPORT_PHRASES must name at least one phrase")

    if not 5 <= config.runtime.message_timeout_sec <= 30:
        raise ValueError(
            "MESSAGE_TIMEOUT_SEC must be between 5 and 30, "
            f"got {config.runtime.message_timeout_sec}"
        )
    for name, value in [
        ("PICKUP_NOTICE_DELAY_SEC", config.runtime.pickup_notice_delay_sec),
        ("SESSION_IDLE_TIMEOUT_SEC", config.runtime.session_idle_timeout_sec),
        ("SESSION_SWEEP_INTERVAL_SEC", config.runtime.session_sweep_interval_sec),
    ]:
        if value < 0:
            raise ValueError(f"{name} must be >= 0, got {value}")
    if config.runtime.max_transition_chain < 1:
        raise ValueError(
            f"MAX_TRANSITION_CHAIN must be >= 1, got {config.runtime.max_transition_chain}"
        )


def load_config() -> AppConfig:
    """Load and validate application configuration."""
    config = AppConfig()
    _validate_config(config)
    logging.basicConfig(
        level=getattr(logging, config.log_level.upper(), logging.INFO),
        format=(
            "%(asctime)s [%(name)s] %(levelname)s "
            "[%(conversation_id)s #%(message_id)s %(conversation_state)s]: %(message)s"
        ),
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    for handler in logging.getLogger().handlers:
        if not any(isinstance(f, ConversationContextFilter) for f in handler.filters):
            handler.addFilter(ConversationContextFilter())
    logger.info(
        "Configuration loaded for '%s' (unit price %.2f)",
        config.business.name, config.business.unit_price,
    )
    return config


# Singleton instance
settings = load_config()
