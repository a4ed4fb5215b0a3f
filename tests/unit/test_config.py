"""Test settings and logging setup"""

import logging
from decimal import Decimal

import pytest
from pydantic import ValidationError as PydanticValidationError

from splitledger.config import Settings, get_settings
from splitledger.core.logging_config import configure_logging


class TestSettings:
    """Test environment-driven settings"""

    def test_defaults(self):
        """Test default values"""
        settings = get_settings()

        assert settings.balance_tolerance == Decimal("0.01")
        assert settings.recent_settlements_limit == 5
        assert settings.cache_enabled is True

    def test_reads_environment(self, monkeypatch):
        """Test that environment variables override defaults"""
        monkeypatch.setenv("BALANCE_TOLERANCE", "0.05")
        monkeypatch.setenv("log_level", "debug")

        settings = get_settings()

        assert settings.balance_tolerance == Decimal("0.05")
        assert settings.log_level == "DEBUG"

    def test_settings_are_cached(self):
        """Test that get_settings returns one instance"""
        assert get_settings() is get_settings()

    @pytest.mark.parametrize("field,value", [
        ("log_level", "LOUD"),
        ("balance_tolerance", "-1"),
        ("redis_url", "http://localhost"),
    ])
    def test_invalid_values(self, field, value):
        """Test field validators"""
        with pytest.raises(PydanticValidationError):
            Settings(**{field: value})


class TestConfigureLogging:
    """Test logging configuration"""

    def test_sets_package_level(self):
        """Test that log_level applies to the package logger"""
        configure_logging(Settings(log_level="WARNING"))

        logger = logging.getLogger("splitledger")
        assert logger.level == logging.WARNING
        assert len(logger.handlers) == 1

    def test_debug_overrides_level(self):
        """Test that debug mode logs everything"""
        configure_logging(Settings(log_level="ERROR", debug=True))

        assert logging.getLogger("splitledger").level == logging.DEBUG

    def test_handler_added_once(self):
        """Test that repeated calls don't stack handlers"""
        configure_logging(Settings())
        configure_logging(Settings())

        assert len(logging.getLogger("splitledger").handlers) == 1
