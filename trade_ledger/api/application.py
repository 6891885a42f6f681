"""FastAPI application factory for the trade reconstruction service."""

from fastapi import FastAPI

from trade_ledger.config import AppSettings
from trade_ledger.ledger import TradeCollectionService

from .routers import api_create_trades_router


def create_api_application(
    settings: AppSettings,
    collection_service: TradeCollectionService,
) -> FastAPI:
    """Create the FastAPI application instance for the service.

    Args:
        settings: Validated application settings used for runtime metadata.
        collection_service: Account-level trade collection service.

    Returns:
        FastAPI: Framework application instance.

    Raises:
        ValueError: Raised when dependencies are invalid.
    """

    if collection_service is None:
        raise ValueError("collection_service must not be None")

    application = FastAPI(title="Trade Ledger")

    @application.get("/", tags=["foundation"])
    def foundation_index() -> dict[str, str]:
        """Return service metadata for bootstrap verification.

        Returns:
            dict[str, str]: Service name, environment and term currency.
        """

        return {
            "service": "trade-ledger",
            "status": "ready",
            "environment": settings.environment_name,
            "term_currency": settings.term_currency,
        }

    application.include_router(api_create_trades_router(collection_service=collection_service))

    return application
