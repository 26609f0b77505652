"""Tests for configuration loading and validation."""

from dataclasses import FrozenInstanceError, replace

import pytest

from gasline.config import (
    AppConfig,
    BusinessConfig,
    ConversationConfig,
    RuntimeConfig,
    _safe_float,
    _safe_int,
    _validate_config,
    settings,
)


class TestConfigValidation:
    def test_default_config_passes_validation(self):
        config = AppConfig()
        _validate_config(config)  # should not raise

    def test_zero_unit_price_rejected(self):
        config = AppConfig(business=BusinessConfig(unit_price=0.0))
        with pytest.raises(ValueError, match="UNIT_PRICE_PER_LITER"):
            _validate_config(config)

    def test_negative_courier_wait_rejected(self):
        config = AppConfig(business=BusinessConfig(courier_wait_minutes=-1))
        with pytest.raises(ValueError, match="COURIER_WAIT_MINUTES"):
            _validate_config(config)

    def test_zero_cylinders_rejected(self):
        config = AppConfig(conversation=ConversationConfig(max_cylinders_per_order=0))
        with pytest.raises(ValueError, match="MAX_CYLINDERS_PER_ORDER"):
            _validate_config(config)

    def test_fill_percent_above_100_rejected(self):
        config = AppConfig(conversation=ConversationConfig(recommended_fill_percent=120))
        with pytest.raises(ValueError, match="RECOMMENDED_FILL_PERCENT"):
            _validate_config(config)

    def test_zero_strike_limit_rejected(self):
        config = AppConfig(conversation=ConversationConfig(strike_limit=0))
        with pytest.raises(ValueError, match="STRIKE_LIMIT"):
            _validate_config(config)

    def test_empty_seal_phrases_rejected(self):
        config = AppConfig(conversation=ConversationConfig(seal_report_phrases=()))
        with pytest.raises(ValueError, match="SEAL_REPORT_PHRASES"):
            _validate_config(config)

    def test_timeout_above_30_seconds_rejected(self):
        config = AppConfig(runtime=RuntimeConfig(message_timeout_sec=45.0))
        with pytest.raises(ValueError, match="MESSAGE_TIMEOUT_SEC"):
            _validate_config(config)

    def test_timeout_below_5_seconds_rejected(self):
        config = AppConfig(runtime=RuntimeConfig(message_timeout_sec=1.0))
        with pytest.raises(ValueError, match="MESSAGE_TIMEOUT_SEC"):
            _validate_config(config)

    def test_negative_pickup_delay_rejected(self):
        config = AppConfig(runtime=RuntimeConfig(pickup_notice_delay_sec=-1.0))
        with pytest.raises(ValueError, match="PICKUP_NOTICE_DELAY_SEC"):
            _validate_config(config)

    def test_negative_sweep_interval_rejected(self):
        config = AppConfig(runtime=RuntimeConfig(session_sweep_interval_sec=-1.0))
        with pytest.raises(ValueError, match="SESSION_SWEEP_INTERVAL_SEC"):
            _validate_config(config)

    def test_zero_transition_chain_rejected(self):
        config = AppConfig(runtime=RuntimeConfig(max_transition_chain=0))
        with pytest.raises(ValueError, match="MAX_TRANSITION_CHAIN"):
            _validate_config(config)


class TestEnvParsing:
    def test_safe_int_reads_env(self, monkeypatch):
        monkeypatch.setenv("GASLINE_TEST_INT", "7")
        assert _safe_int("GASLINE_TEST_INT", "1") == 7

    def test_safe_int_falls_back_to_default(self, monkeypatch):
        monkeypatch.delenv("GASLINE_TEST_INT", raising=False)
        assert _safe_int("GASLINE_TEST_INT", "3") == 3

    def test_safe_int_names_the_variable(self, monkeypatch):
        monkeypatch.setenv("GASLINE_TEST_INT", "three")
        with pytest.raises(ValueError, match="GASLINE_TEST_INT"):
            _safe_int("GASLINE_TEST_INT", "3")

    def test_safe_float_names_the_variable(self, monkeypatch):
        monkeypatch.setenv("GASLINE_TEST_FLOAT", "12,50")
        with pytest.raises(ValueError, match="GASLINE_TEST_FLOAT"):
            _safe_float("GASLINE_TEST_FLOAT", "12.5")


class TestDefaults:
    def test_settings_singleton_is_app_config(self):
        assert isinstance(settings, AppConfig)

    def test_config_is_frozen(self):
        with pytest.raises(FrozenInstanceError):
            settings.log_level = "DEBUG"

    def test_replace_builds_variant(self):
        variant = replace(settings, business=BusinessConfig(unit_price=20.0))
        assert variant.business.unit_price == 20.0
        assert variant.conversation == settings.conversation

    def test_seal_phrases_are_non_empty(self):
        assert all(p.strip() for p in settings.conversation.seal_report_phrases)
