"""Application bootstrap wiring for startup validation and dependency assembly."""

from fastapi import FastAPI

from trade_ledger.api import create_api_application
from trade_ledger.config import AppSettings, config_load_settings, logging_configure
from trade_ledger.domain import CurrencyConverterPort, FixedRateCurrencyConverter
from trade_ledger.ledger import TradeCollectionService, TradeCollector


def bootstrap_create_collection_service(
    settings: AppSettings,
    converter: CurrencyConverterPort | None = None,
) -> TradeCollectionService:
    """Build the account-level collection service from validated settings.

    Args:
        settings: Validated runtime settings.
        converter: Optional converter into the term currency; defaults to the configured static rates.

    Returns:
        TradeCollectionService: Fully wired collection service.
    """

    collector_config = settings.trade_collector_config()
    if converter is None:
        converter = FixedRateCurrencyConverter(
            rates=settings.exchange_rate_table(),
            amount_quantum=collector_config.amount_quantum,
        )
    collector = TradeCollector(config=collector_config, converter=converter)
    return TradeCollectionService(collector=collector)


def bootstrap_create_application() -> FastAPI:
    """Assemble the runtime application after validating startup configuration.

    Returns:
        FastAPI: Fully initialized FastAPI application instance.

    Raises:
        SettingsLoadError: Raised when startup configuration validation fails.
    """

    settings = config_load_settings()
    logging_configure(settings.log_level)
    return create_api_application(
        settings=settings,
        collection_service=bootstrap_create_collection_service(settings),
    )
