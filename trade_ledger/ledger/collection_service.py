"""Account-level trade collection with one independent run per instrument."""
# pylint: disable=too-few-public-methods

from __future__ import annotations

import logging
from dataclasses import dataclass

from trade_ledger.domain import TradeCollectorError, Transaction

from .interfaces import TradeCollectionResult, TradeCollectorPort

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class InstrumentCollectionFailure:
    """Failure record for one instrument whose history could not be reconstructed.

    Attributes:
        instrument_id: Instrument reference.
        error_code: Stable machine-readable failure code.
        message: Human-readable failure detail.
        transaction_id: Offending transaction, when known.
    """

    instrument_id: str
    error_code: str
    message: str
    transaction_id: str | None = None


@dataclass(frozen=True)
class AccountTradeCollectionResult:
    """Per-instrument outcome of an account-level collection.

    Attributes:
        results: Successful instrument results in processing order.
        failures: Failed instruments in processing order.
    """

    results: tuple[TradeCollectionResult, ...]
    failures: tuple[InstrumentCollectionFailure, ...]

    def result_for(self, instrument_id: str) -> TradeCollectionResult | None:
        for result in self.results:
            if result.instrument_id == instrument_id:
                return result
        return None

    def failure_for(self, instrument_id: str) -> InstrumentCollectionFailure | None:
        for failure in self.failures:
            if failure.instrument_id == instrument_id:
                return failure
        return None


class TradeCollectionService:
    """Collect trades for every instrument of an account ledger."""

    def __init__(self, collector: TradeCollectorPort):
        """Initialize service dependencies.

        Args:
            collector: Per-instrument trade collector.

        Raises:
            ValueError: Raised when collector is invalid.
        """

        if collector is None:
            raise ValueError("collector must not be None")
        self._collector = collector

    def trade_collect_instrument(self, transactions: list[Transaction], instrument_id: str) -> TradeCollectionResult:
        """Collect one instrument; engine errors propagate to the caller."""

        return self._collector.trade_collect_instrument(transactions=transactions, instrument_id=instrument_id)

    def trade_collect_account(
        self,
        transactions: list[Transaction],
        instrument_ids: list[str] | None = None,
    ) -> AccountTradeCollectionResult:
        """Collect trades for each instrument independently.

        A failing instrument is reported in `failures` and never produces a
        partial trade list; other instruments are unaffected.

        Args:
            transactions: Account ledger.
            instrument_ids: Optional instrument subset; defaults to every instrument in first-seen order.

        Returns:
            AccountTradeCollectionResult: Per-instrument results and failures.

        Raises:
            ValueError: Raised when transactions is None.
        """

        if transactions is None:
            raise ValueError("transactions must not be None")

        target_instrument_ids = (
            [instrument_id.strip() for instrument_id in instrument_ids]
            if instrument_ids is not None
            else self._group_instrument_ids(transactions)
        )

        results: list[TradeCollectionResult] = []
        failures: list[InstrumentCollectionFailure] = []
        for instrument_id in target_instrument_ids:
            try:
                results.append(
                    self._collector.trade_collect_instrument(transactions=transactions, instrument_id=instrument_id)
                )
            except TradeCollectorError as error:
                logger.warning(
                    "trade collection failed for instrument=%s code=%s: %s",
                    instrument_id,
                    error.error_code,
                    error,
                )
                failures.append(
                    InstrumentCollectionFailure(
                        instrument_id=instrument_id,
                        error_code=error.error_code,
                        message=str(error),
                        transaction_id=error.transaction_id,
                    )
                )

        return AccountTradeCollectionResult(results=tuple(results), failures=tuple(failures))

    def _group_instrument_ids(self, transactions: list[Transaction]) -> list[str]:
        """Return distinct instrument identifiers in first-seen order."""

        seen_instrument_ids: dict[str, None] = {}
        for transaction in transactions:
            seen_instrument_ids.setdefault(transaction.instrument_id.strip(), None)
        return list(seen_instrument_ids)


__all__ = ["AccountTradeCollectionResult", "InstrumentCollectionFailure", "TradeCollectionService"]
