"""Transaction normalization for per-instrument trade reconstruction."""

from __future__ import annotations

import logging
from datetime import datetime
from decimal import Decimal, InvalidOperation

from trade_ledger.domain import (
    InvalidTransactionError,
    MissingSubAmountError,
    SubAmount,
    SubAmountKind,
    Transaction,
    TransactionDirection,
)

from .interfaces import NormalizedTransaction

logger = logging.getLogger(__name__)


def normalizer_normalize_transactions(
    transactions: list[Transaction],
    instrument_id: str,
    share_quantum: Decimal = Decimal("1E-10"),
    reconciliation_tolerance: Decimal = Decimal("0.01"),
) -> tuple[NormalizedTransaction, ...]:
    """Filter, validate and chronologically order one instrument's transactions.

    Args:
        transactions: Account ledger in any order.
        instrument_id: Target instrument; other instruments are excluded.
        share_quantum: Share precision used to quantize quantities.
        reconciliation_tolerance: Allowed gap between the total and its sub-amounts.

    Returns:
        tuple[NormalizedTransaction, ...]: Tie-stable chronological sequence.

    Raises:
        ValueError: Raised when arguments are invalid.
        InvalidTransactionError: Raised for zero or inconsistent shares, timestamps or sub-amounts.
        MissingSubAmountError: Raised when a transaction lacks GROSS_VALUE.
    """

    if transactions is None:
        raise ValueError("transactions must not be None")
    if not isinstance(instrument_id, str) or not instrument_id.strip():
        raise ValueError("instrument_id must not be blank")

    normalized_instrument_id = instrument_id.strip()
    instrument_transactions = [
        transaction for transaction in transactions if transaction.instrument_id.strip() == normalized_instrument_id
    ]
    _normalizer_validate_timestamps(instrument_transactions)

    # sorted() is stable, so equal timestamps keep ledger order.
    ordered_transactions = sorted(instrument_transactions, key=lambda transaction: transaction.timestamp)

    normalized_transactions = tuple(
        NormalizedTransaction(
            sequence=sequence,
            direction=transaction.kind.direction,
            shares=_normalizer_resolve_shares(transaction, share_quantum),
            transaction=transaction,
            sub_amounts=_normalizer_extract_sub_amounts(transaction, reconciliation_tolerance),
        )
        for sequence, transaction in enumerate(ordered_transactions)
    )

    logger.debug(
        "normalized %d of %d transactions for instrument=%s",
        len(normalized_transactions),
        len(transactions),
        normalized_instrument_id,
    )
    return normalized_transactions


def _normalizer_validate_timestamps(transactions: list[Transaction]) -> None:
    """Reject missing timestamps and mixed offset-aware/naive values.

    Raises:
        InvalidTransactionError: Raised when timestamps cannot be ordered.
    """

    reference_awareness: bool | None = None
    for transaction in transactions:
        if not isinstance(transaction.timestamp, datetime):
            raise InvalidTransactionError(
                f"transaction timestamp must be a datetime, got {type(transaction.timestamp).__name__}",
                transaction_id=transaction.transaction_id,
            )
        is_aware = transaction.timestamp.tzinfo is not None and transaction.timestamp.utcoffset() is not None
        if reference_awareness is None:
            reference_awareness = is_aware
        elif is_aware != reference_awareness:
            raise InvalidTransactionError(
                "transaction timestamps must be consistently offset-aware or naive",
                transaction_id=transaction.transaction_id,
            )


def _normalizer_resolve_shares(transaction: Transaction, share_quantum: Decimal) -> Decimal:
    """Resolve the absolute share quantity from a signed ledger value.

    Outflows may be recorded with a negative sign; inflows must be positive.

    Raises:
        InvalidTransactionError: Raised for zero shares or a sign contradicting the direction,
            or for quantities that cannot be quantized.
    """

    try:
        shares = Decimal(transaction.shares).quantize(share_quantum)
    except InvalidOperation as error:
        raise InvalidTransactionError(
            f"transaction {transaction.transaction_id} shares={transaction.shares} exceed the supported precision",
            transaction_id=transaction.transaction_id,
        ) from error
    if shares == Decimal("0"):
        raise InvalidTransactionError(
            f"transaction {transaction.transaction_id} has zero shares",
            transaction_id=transaction.transaction_id,
        )
    if shares < Decimal("0") and transaction.kind.direction is TransactionDirection.INFLOW:
        raise InvalidTransactionError(
            f"acquisition {transaction.transaction_id} has negative shares={transaction.shares}",
            transaction_id=transaction.transaction_id,
        )
    return abs(shares)


def _normalizer_extract_sub_amounts(
    transaction: Transaction,
    reconciliation_tolerance: Decimal,
) -> dict[SubAmountKind, SubAmount]:
    """Extract and validate GROSS_VALUE/TAX/FEE components.

    Raises:
        MissingSubAmountError: Raised when GROSS_VALUE is absent.
        InvalidTransactionError: Raised when components are malformed or do not reconcile.
    """

    sub_amounts: dict[SubAmountKind, SubAmount] = {}
    for kind in SubAmountKind:
        sub_amount = transaction.sub_amount(kind)
        if sub_amount is None:
            continue
        _normalizer_validate_sub_amount(transaction, kind, sub_amount)
        sub_amounts[kind] = sub_amount

    if SubAmountKind.GROSS_VALUE not in sub_amounts:
        raise MissingSubAmountError(
            f"transaction {transaction.transaction_id} has no GROSS_VALUE sub-amount",
            transaction_id=transaction.transaction_id,
        )

    gross_value = sub_amounts[SubAmountKind.GROSS_VALUE].amount.amount
    charges = sum(
        (sub_amounts[kind].amount.amount for kind in (SubAmountKind.FEE, SubAmountKind.TAX) if kind in sub_amounts),
        Decimal("0"),
    )
    if transaction.kind.direction is TransactionDirection.INFLOW:
        expected_total = gross_value + charges
    else:
        expected_total = gross_value - charges

    if abs(expected_total - transaction.amount.amount) > reconciliation_tolerance:
        raise InvalidTransactionError(
            f"transaction {transaction.transaction_id} sub-amounts reconcile to {expected_total}, "
            f"total amount is {transaction.amount.amount}",
            transaction_id=transaction.transaction_id,
        )
    return sub_amounts


def _normalizer_validate_sub_amount(transaction: Transaction, kind: SubAmountKind, sub_amount: SubAmount) -> None:
    if sub_amount.kind is not kind:
        raise InvalidTransactionError(
            f"transaction {transaction.transaction_id} stores {sub_amount.kind.value} under {kind.value}",
            transaction_id=transaction.transaction_id,
        )
    if sub_amount.amount.currency_code != transaction.amount.currency_code:
        raise InvalidTransactionError(
            f"transaction {transaction.transaction_id} {kind.value} currency "
            f"{sub_amount.amount.currency_code} differs from {transaction.amount.currency_code}",
            transaction_id=transaction.transaction_id,
        )
    if (sub_amount.forex is None) != (sub_amount.exchange_rate is None):
        raise InvalidTransactionError(
            f"transaction {transaction.transaction_id} {kind.value} must carry forex and exchange rate together",
            transaction_id=transaction.transaction_id,
        )
    if sub_amount.exchange_rate is not None and sub_amount.exchange_rate <= Decimal("0"):
        raise InvalidTransactionError(
            f"transaction {transaction.transaction_id} {kind.value} exchange rate must be positive",
            transaction_id=transaction.transaction_id,
        )


__all__ = ["normalizer_normalize_transactions"]
