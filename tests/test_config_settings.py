"""Regression tests for runtime settings and logging bootstrap."""

from __future__ import annotations

import logging
from decimal import Decimal

import pytest
from pydantic import ValidationError

from trade_ledger.config import AppSettings, SettingsLoadError, config_load_settings, logging_configure


def test_settings_normalize_codes_and_build_collector_config() -> None:
    """Upper-case currency and log level and map precision into the engine config.

    Returns:
        None: Assertions validate normalized settings.

    Raises:
        AssertionError: Raised when normalization or mapping is wrong.
    """

    settings = AppSettings(_env_file=None, term_currency=" usd ", log_level="debug", share_decimal_places=8)

    collector_config = settings.trade_collector_config()

    assert settings.term_currency == "USD"
    assert settings.log_level == "DEBUG"
    assert collector_config.term_currency == "USD"
    assert collector_config.amount_decimal_places == 2
    assert str(collector_config.share_quantum) == "1E-8"


def test_settings_reject_unknown_log_level() -> None:
    """Reject unsupported log level names."""

    with pytest.raises(ValidationError):
        AppSettings(_env_file=None, log_level="chatty")


def test_config_load_settings_wraps_validation_errors(monkeypatch: pytest.MonkeyPatch) -> None:
    """Raise SettingsLoadError for invalid environment configuration."""

    monkeypatch.setenv("TERM_CURRENCY", "12")

    with pytest.raises(SettingsLoadError, match="Startup configuration validation failed"):
        config_load_settings()


@pytest.fixture
def package_logger_state():
    package_logger = logging.getLogger("trade_ledger")
    previous_level = package_logger.level
    previous_handlers = list(package_logger.handlers)
    yield package_logger
    for handler in list(package_logger.handlers):
        if handler not in previous_handlers:
            package_logger.removeHandler(handler)
    package_logger.setLevel(previous_level)


def test_logging_configure_installs_single_handler(package_logger_state: logging.Logger) -> None:
    """Install the package handler once and update the level on repeated calls."""

    logging_configure("INFO")
    package_logger = logging_configure("DEBUG")

    assert package_logger is package_logger_state

    handler_names = [handler.get_name() for handler in package_logger.handlers]
    assert handler_names.count("trade_ledger") == 1
    assert package_logger.level == logging.DEBUG

    with pytest.raises(ValueError, match="log level"):
        logging_configure("chatty")


def test_settings_parse_exchange_rates_from_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    """Read currency-pair rates from JSON and expose them as a rate table."""

    monkeypatch.setenv("EXCHANGE_RATES", '{" usd/eur ": "0.9"}')

    settings = config_load_settings()

    assert settings.exchange_rates == {"USD/EUR": Decimal("0.9")}
    assert settings.exchange_rate_table() == {("USD", "EUR"): Decimal("0.9")}


def test_settings_reject_malformed_exchange_rates() -> None:
    """Reject rate keys that are not currency pairs and non-positive rates."""

    with pytest.raises(ValidationError, match="USD/EUR"):
        AppSettings(_env_file=None, exchange_rates={"USDEUR": "0.9"})
    with pytest.raises(ValidationError, match="positive"):
        AppSettings(_env_file=None, exchange_rates={"USD/EUR": "0"})
