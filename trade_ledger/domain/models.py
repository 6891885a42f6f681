"""Typed domain models for ledger transactions and their monetary components.

Transactions are read-only inputs owned by the surrounding ledger. The trade
engine only references them and never mutates them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum

from .money import Money


class TransactionDirection(str, Enum):
    """Share-flow direction of a transaction kind."""

    INFLOW = "inflow"
    OUTFLOW = "outflow"


class TransactionKind(str, Enum):
    """Ledger transaction kind tagged with its share-flow direction.

    Deliveries and transfers are treated like purchases and sales for lot
    matching purposes.
    """

    BUY = "BUY"
    SELL = "SELL"
    DELIVERY_INBOUND = "DELIVERY_INBOUND"
    DELIVERY_OUTBOUND = "DELIVERY_OUTBOUND"
    TRANSFER_IN = "TRANSFER_IN"
    TRANSFER_OUT = "TRANSFER_OUT"

    @property
    def direction(self) -> TransactionDirection:
        """Return the share-flow direction for this kind.

        Returns:
            TransactionDirection: `INFLOW` for acquisitions, `OUTFLOW` for disposals.
        """

        if self in _INFLOW_KINDS:
            return TransactionDirection.INFLOW
        return TransactionDirection.OUTFLOW


_INFLOW_KINDS = frozenset(
    {
        TransactionKind.BUY,
        TransactionKind.DELIVERY_INBOUND,
        TransactionKind.TRANSFER_IN,
    }
)


class SubAmountKind(str, Enum):
    """Component of a transaction total."""

    GROSS_VALUE = "GROSS_VALUE"
    TAX = "TAX"
    FEE = "FEE"


@dataclass(frozen=True)
class SubAmount:
    """One monetary component of a transaction total.

    Attributes:
        kind: Component kind.
        amount: Value in the transaction (home) currency.
        forex: Optional value in the original foreign currency.
        exchange_rate: Rate used at transaction time (home / forex); required with `forex`.
    """

    kind: SubAmountKind
    amount: Money
    forex: Money | None = None
    exchange_rate: Decimal | None = None


@dataclass(frozen=True)
class Transaction:
    """Ledger transaction for one instrument.

    Attributes:
        transaction_id: Ledger identifier, unique within the account.
        instrument_id: Instrument reference.
        timestamp: Booking timestamp.
        shares: Share quantity; disposals may carry a negative sign.
        kind: Transaction kind.
        amount: Total amount in home currency.
        sub_amounts: Components keyed by kind.
    """

    transaction_id: str
    instrument_id: str
    timestamp: datetime
    shares: Decimal
    kind: TransactionKind
    amount: Money
    sub_amounts: dict[SubAmountKind, SubAmount] = field(default_factory=dict)

    def sub_amount(self, kind: SubAmountKind) -> SubAmount | None:
        """Return one sub-amount by kind, if the transaction carries it."""

        return self.sub_amounts.get(kind)


__all__ = [
    "SubAmount",
    "SubAmountKind",
    "Transaction",
    "TransactionDirection",
    "TransactionKind",
]
