"""Typed runtime settings with dotenv support and startup validation."""

from decimal import Decimal

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from trade_ledger.ledger import TradeCollectorConfig


class SettingsLoadError(RuntimeError):
    """Raised when runtime settings cannot be loaded or validated."""


class AppSettings(BaseSettings):
    """Application settings for API runtime and trade reconstruction.

    Environment variable names map directly to field names in uppercase.
    Example: `term_currency` reads from `TERM_CURRENCY`.

    Attributes:
        environment_name: Runtime environment label.
        application_host: Host interface for web server binding.
        application_port: Web server port.
        log_level: Root level for the `trade_ledger` logger.
        term_currency: Currency trade values are reported in.
        amount_decimal_places: Fractional digits kept for scaled monetary amounts.
        share_decimal_places: Fractional digits kept for share quantities.
        exchange_rates: Static conversion rates keyed by `FROM/TO` currency pairs.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    environment_name: str = Field(default="development")
    application_host: str = Field(default="0.0.0.0")
    application_port: int = Field(default=8000, ge=1, le=65535)
    log_level: str = Field(default="INFO")
    term_currency: str = Field(default="EUR")
    amount_decimal_places: int = Field(default=2, ge=0, le=8)
    share_decimal_places: int = Field(default=10, ge=0, le=18)
    exchange_rates: dict[str, Decimal] = Field(default_factory=dict)

    @field_validator("term_currency")
    @classmethod
    def _validate_currency_code(cls, value: str) -> str:
        normalized_value = value.strip().upper()
        if len(normalized_value) != 3 or not normalized_value.isalpha():
            raise ValueError("term_currency must be an alphabetic ISO-4217 code")
        return normalized_value

    @field_validator("log_level")
    @classmethod
    def _validate_log_level(cls, value: str) -> str:
        normalized_value = value.strip().upper()
        if normalized_value not in {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}:
            raise ValueError(f"unsupported log_level={value}")
        return normalized_value

    @field_validator("exchange_rates")
    @classmethod
    def _validate_exchange_rates(cls, value: dict[str, Decimal]) -> dict[str, Decimal]:
        normalized_rates: dict[str, Decimal] = {}
        for currency_pair, rate in value.items():
            from_currency, separator, to_currency = currency_pair.strip().upper().partition("/")
            if not separator or len(from_currency) != 3 or len(to_currency) != 3:
                raise ValueError(f"exchange rate key must look like USD/EUR, got {currency_pair}")
            if rate <= Decimal("0"):
                raise ValueError(f"exchange rate {currency_pair} must be positive")
            normalized_rates[f"{from_currency}/{to_currency}"] = rate
        return normalized_rates

    def exchange_rate_table(self) -> dict[tuple[str, str], Decimal]:
        """Return configured rates keyed by `(from_currency, to_currency)`."""

        rate_table: dict[tuple[str, str], Decimal] = {}
        for currency_pair, rate in self.exchange_rates.items():
            from_currency, _, to_currency = currency_pair.partition("/")
            rate_table[(from_currency, to_currency)] = rate
        return rate_table

    def trade_collector_config(self) -> TradeCollectorConfig:
        """Build engine configuration from runtime settings.

        Returns:
            TradeCollectorConfig: Precision and currency configuration.
        """

        return TradeCollectorConfig(
            term_currency=self.term_currency,
            amount_decimal_places=self.amount_decimal_places,
            share_decimal_places=self.share_decimal_places,
        )


def config_load_settings() -> AppSettings:
    """Load and validate runtime settings from environment and dotenv.

    Returns:
        AppSettings: Validated runtime settings object.

    Raises:
        SettingsLoadError: Raised when required settings are missing or invalid.
    """

    try:
        return AppSettings()
    except ValidationError as error:
        raise SettingsLoadError(
            f"Startup configuration validation failed. Update .env or environment variables. Details: {error}"
        ) from error
