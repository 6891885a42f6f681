"""Project-native typed exceptions for trade reconstruction failures.

Every error aborts reconstruction for the instrument being processed. These
are data-consistency failures, so callers surface them instead of retrying.
"""

from __future__ import annotations


class TradeCollectorError(Exception):
    """Base exception for trade reconstruction failures.

    Attributes:
        error_code: Stable machine-readable failure code.
        transaction_id: Optional identifier of the offending ledger transaction.
    """

    error_code = "TRADE_COLLECTOR_ERROR"

    def __init__(self, message: str, transaction_id: str | None = None):
        super().__init__(message)
        self.transaction_id = transaction_id


class InvalidTransactionError(TradeCollectorError, ValueError):
    """Transaction with zero or inconsistent shares, or unreconciled sub-amounts."""

    error_code = "INVALID_TRANSACTION"


class MissingSubAmountError(InvalidTransactionError):
    """Transaction without the GROSS_VALUE sub-amount needed for cost attribution."""

    error_code = "MISSING_SUB_AMOUNT"


class OversoldPositionError(TradeCollectorError, RuntimeError):
    """Disposal that exceeds the cumulative open shares of the instrument.

    Attributes:
        shortfall_shares: Shares that could not be matched against open lots.
    """

    error_code = "OVERSOLD_POSITION"

    def __init__(self, message: str, transaction_id: str | None = None, shortfall_shares=None):
        super().__init__(message=message, transaction_id=transaction_id)
        self.shortfall_shares = shortfall_shares


class CurrencyConversionError(TradeCollectorError, LookupError):
    """Monetary amount that cannot be expressed in the requested term currency."""

    error_code = "CURRENCY_CONVERSION"


__all__ = [
    "CurrencyConversionError",
    "InvalidTransactionError",
    "MissingSubAmountError",
    "OversoldPositionError",
    "TradeCollectorError",
]
