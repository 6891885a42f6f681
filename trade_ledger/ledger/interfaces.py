"""Typed contracts for the trade reconstruction engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Protocol

from trade_ledger.domain import Money, SubAmount, SubAmountKind, Transaction, TransactionDirection


@dataclass(frozen=True)
class TradeCollectorConfig:
    """Precision and currency configuration for one engine invocation.

    Attributes:
        term_currency: Currency all trade values are expressed in.
        amount_decimal_places: Fractional digits kept for scaled monetary amounts.
        share_decimal_places: Fractional digits kept for share quantities.
    """

    term_currency: str = "EUR"
    amount_decimal_places: int = 2
    share_decimal_places: int = 10

    @property
    def amount_quantum(self) -> Decimal:
        return Decimal(1).scaleb(-self.amount_decimal_places)

    @property
    def share_quantum(self) -> Decimal:
        return Decimal(1).scaleb(-self.share_decimal_places)


@dataclass(frozen=True)
class NormalizedTransaction:
    """Validated, direction-tagged view of one ledger transaction.

    Attributes:
        sequence: Position in the chronological, tie-stable processing order.
        direction: Inflow (acquisition) or outflow (disposal).
        shares: Absolute share quantity, quantized to the share precision.
        transaction: Original ledger transaction.
        sub_amounts: Extracted GROSS_VALUE/TAX/FEE components.
    """

    sequence: int
    direction: TransactionDirection
    shares: Decimal
    transaction: Transaction
    sub_amounts: dict[SubAmountKind, SubAmount] = field(default_factory=dict)

    @property
    def timestamp(self) -> datetime:
        return self.transaction.timestamp

    @property
    def is_acquisition(self) -> bool:
        return self.direction is TransactionDirection.INFLOW


@dataclass(frozen=True)
class TradeTransactionItem:
    """Share of one transaction attributed to one trade.

    Attributes:
        transaction: Referenced ledger transaction (not owned).
        direction: Inflow or outflow contribution.
        share_fraction: Fraction of the transaction attributed to the trade.
        shares: Attributed share quantity.
        amount: Attributed share of the transaction total.
        sub_amounts: Fraction-scaled GROSS_VALUE/TAX/FEE components.
    """

    transaction: Transaction
    direction: TransactionDirection
    share_fraction: Decimal
    shares: Decimal
    amount: Money
    sub_amounts: dict[SubAmountKind, SubAmount] = field(default_factory=dict)

    def sub_amount(self, kind: SubAmountKind) -> SubAmount | None:
        return self.sub_amounts.get(kind)

    @property
    def gross_value(self) -> SubAmount:
        return self.sub_amounts[SubAmountKind.GROSS_VALUE]


@dataclass(frozen=True)
class MatchedTrade:
    """Trade produced by FIFO matching before cost values are attached.

    Attributes:
        lot_id: Identifier of the originating lot (queue creation order).
        opening_sequence: Sequence of the acquisition that opened the lot.
        closing_order: Order in which the trade closed; None while open.
        start: Acquisition timestamp.
        end: Closing disposal timestamp; None while open.
        shares: Shares held by this trade before closing, or still held when open.
        items: Ordered transaction contributions.
    """

    lot_id: int
    opening_sequence: int
    closing_order: int | None
    start: datetime
    end: datetime | None
    shares: Decimal
    items: tuple[TradeTransactionItem, ...]

    @property
    def is_closed(self) -> bool:
        return self.end is not None


@dataclass(frozen=True)
class FifoMatchResult:
    """Output of FIFO lot matching.

    Attributes:
        trades: Matched trades in output order.
        open_shares: Shares remaining across open lots.
    """

    trades: tuple[MatchedTrade, ...]
    open_shares: Decimal


@dataclass(frozen=True)
class Trade:
    """Round trip of one lot with its cost-basis figures.

    Attributes:
        instrument_id: Instrument reference.
        lot_id: Identifier of the originating lot.
        start: Acquisition timestamp.
        end: Closing timestamp; None while the trade is open.
        shares: Shares closed by the trade, or still held when open.
        items: Ordered transaction contributions.
        entry_value: FIFO entry value in the term currency.
        entry_value_moving_average: Moving-average entry value in the term currency.
        exit_value: Disposal gross value in the term currency; None while open.
    """

    instrument_id: str
    lot_id: int
    start: datetime
    end: datetime | None
    shares: Decimal
    items: tuple[TradeTransactionItem, ...]
    entry_value: Money
    entry_value_moving_average: Money
    exit_value: Money | None = None

    @property
    def is_closed(self) -> bool:
        return self.end is not None

    @property
    def profit_loss(self) -> Money | None:
        """Return realized gross profit under FIFO costing; None while open."""

        if self.exit_value is None:
            return None
        return self.exit_value.subtract(self.entry_value)

    @property
    def profit_loss_moving_average(self) -> Money | None:
        if self.exit_value is None:
            return None
        return self.exit_value.subtract(self.entry_value_moving_average)

    @property
    def return_rate(self) -> Decimal | None:
        """Return `exit / entry - 1` for closed trades with a non-zero entry value."""

        if self.exit_value is None or self.entry_value.is_zero():
            return None
        return self.exit_value.amount / self.entry_value.amount - Decimal("1")

    @property
    def is_loss(self) -> bool:
        profit_loss = self.profit_loss
        return profit_loss is not None and profit_loss.amount < Decimal("0")

    def holding_period_days(self, as_of: datetime | None = None) -> int | None:
        """Return whole days between start and end (or `as_of` for open trades).

        Args:
            as_of: Valuation timestamp used for open trades.

        Returns:
            int | None: Holding period in days, or None for an open trade without `as_of`.
        """

        boundary = self.end if self.end is not None else as_of
        if boundary is None:
            return None
        return (boundary.date() - self.start.date()).days


@dataclass(frozen=True)
class TradeCollectionRequest:
    """Input contract for one instrument trade reconstruction.

    Attributes:
        instrument_id: Instrument to reconstruct trades for.
        transactions: Account ledger; other instruments are ignored.
        config: Precision and currency configuration.
    """

    instrument_id: str
    transactions: list[Transaction]
    config: TradeCollectorConfig = field(default_factory=TradeCollectorConfig)


@dataclass(frozen=True)
class TradeCollectionResult:
    """Trades reconstructed for one instrument.

    Attributes:
        instrument_id: Instrument reference.
        term_currency: Currency of all trade values.
        trades: Trades ordered by start, then lot creation order.
        open_shares: Shares still held across open trades.
    """

    instrument_id: str
    term_currency: str
    trades: tuple[Trade, ...]
    open_shares: Decimal


class TradeCollectorPort(Protocol):
    """Port definition for account-level trade reconstruction."""

    def trade_collect_instrument(self, transactions: list[Transaction], instrument_id: str) -> TradeCollectionResult:
        """Reconstruct trades for one instrument.

        Args:
            transactions: Account ledger.
            instrument_id: Target instrument.

        Returns:
            TradeCollectionResult: Ordered trades for the instrument.

        Raises:
            TradeCollectorError: Raised when the instrument history is inconsistent.
        """


__all__ = [
    "FifoMatchResult",
    "MatchedTrade",
    "NormalizedTransaction",
    "Trade",
    "TradeCollectionRequest",
    "TradeCollectionResult",
    "TradeCollectorConfig",
    "TradeCollectorPort",
    "TradeTransactionItem",
]
