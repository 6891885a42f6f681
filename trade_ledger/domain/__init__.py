"""Domain models used across application layer boundaries."""

from .errors import (
    CurrencyConversionError,
    InvalidTransactionError,
    MissingSubAmountError,
    OversoldPositionError,
    TradeCollectorError,
)
from .models import SubAmount, SubAmountKind, Transaction, TransactionDirection, TransactionKind
from .money import CurrencyConverterPort, FixedRateCurrencyConverter, IdentityCurrencyConverter, Money

__all__ = [
    "CurrencyConversionError",
    "CurrencyConverterPort",
    "FixedRateCurrencyConverter",
    "IdentityCurrencyConverter",
    "InvalidTransactionError",
    "MissingSubAmountError",
    "Money",
    "OversoldPositionError",
    "SubAmount",
    "SubAmountKind",
    "TradeCollectorError",
    "Transaction",
    "TransactionDirection",
    "TransactionKind",
]
