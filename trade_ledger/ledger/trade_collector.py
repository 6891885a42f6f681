"""Trade reconstruction entry point chaining normalization, matching and costing."""

from __future__ import annotations

import logging

from trade_ledger.domain import CurrencyConverterPort, IdentityCurrencyConverter, Transaction

from .cost_basis import cost_basis_calculate
from .fifo_matcher import fifo_match_lots
from .interfaces import TradeCollectionRequest, TradeCollectionResult, TradeCollectorConfig, TradeCollectorPort
from .normalizer import normalizer_normalize_transactions

logger = logging.getLogger(__name__)


def trade_collect_instrument(
    request: TradeCollectionRequest,
    converter: CurrencyConverterPort | None = None,
) -> TradeCollectionResult:
    """Reconstruct the trades of one instrument from the account ledger.

    The call is a pure function of its inputs: the ledger is never mutated
    and repeated calls on the same snapshot return equal results.

    Args:
        request: Instrument, ledger snapshot and precision configuration.
        converter: Converter into the term currency; identity conversion when omitted.

    Returns:
        TradeCollectionResult: Trades ordered by start timestamp, then lot creation order.

    Raises:
        ValueError: Raised when request values are invalid.
        InvalidTransactionError: Raised when a transaction is malformed.
        MissingSubAmountError: Raised when a transaction lacks GROSS_VALUE.
        OversoldPositionError: Raised when a disposal exceeds the open shares.
        CurrencyConversionError: Raised when a value cannot be expressed in the term currency.
    """

    if request is None:
        raise ValueError("request must not be None")
    if not request.instrument_id.strip():
        raise ValueError("request.instrument_id must not be blank")
    if not request.config.term_currency.strip():
        raise ValueError("request.config.term_currency must not be blank")
    if request.config.amount_decimal_places < 0 or request.config.share_decimal_places < 0:
        raise ValueError("request.config decimal places must not be negative")

    instrument_id = request.instrument_id.strip()
    term_currency = request.config.term_currency.strip().upper()
    resolved_converter = converter or IdentityCurrencyConverter()

    normalized_transactions = normalizer_normalize_transactions(
        transactions=request.transactions,
        instrument_id=instrument_id,
        share_quantum=request.config.share_quantum,
        reconciliation_tolerance=request.config.amount_quantum,
    )
    match_result = fifo_match_lots(normalized_transactions, amount_quantum=request.config.amount_quantum)
    trades = cost_basis_calculate(
        matched_trades=match_result.trades,
        normalized_transactions=normalized_transactions,
        instrument_id=instrument_id,
        converter=resolved_converter,
        term_currency=term_currency,
        amount_quantum=request.config.amount_quantum,
    )

    logger.info(
        "collected %d trades (%d open) for instrument=%s from %d transactions",
        len(trades),
        sum(1 for trade in trades if not trade.is_closed),
        instrument_id,
        len(normalized_transactions),
    )
    return TradeCollectionResult(
        instrument_id=instrument_id,
        term_currency=term_currency,
        trades=trades,
        open_shares=match_result.open_shares,
    )


class TradeCollector(TradeCollectorPort):
    """Trade collector bound to one configuration and currency converter."""

    def __init__(self, config: TradeCollectorConfig, converter: CurrencyConverterPort | None = None):
        """Initialize collector dependencies.

        Args:
            config: Precision and currency configuration.
            converter: Optional converter into the term currency.

        Raises:
            ValueError: Raised when config is invalid.
        """

        if config is None:
            raise ValueError("config must not be None")
        if not config.term_currency.strip():
            raise ValueError("config.term_currency must not be blank")
        self._config = config
        self._converter = converter or IdentityCurrencyConverter()

    @property
    def config(self) -> TradeCollectorConfig:
        return self._config

    def trade_collect_instrument(self, transactions: list[Transaction], instrument_id: str) -> TradeCollectionResult:
        """Reconstruct trades for one instrument with the bound configuration."""

        return trade_collect_instrument(
            TradeCollectionRequest(instrument_id=instrument_id, transactions=transactions, config=self._config),
            converter=self._converter,
        )


__all__ = ["TradeCollector", "trade_collect_instrument"]
