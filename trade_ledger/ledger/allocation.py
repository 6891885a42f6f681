"""Proportional allocation of transaction amounts across split lots.

All scaling goes through `allocation_scale_sub_amount` so that home and
forex magnitudes are always scaled together and exchange rates never change.
"""

from __future__ import annotations

from decimal import Decimal

from trade_ledger.domain import Money, SubAmount, SubAmountKind

from .interfaces import NormalizedTransaction, TradeTransactionItem

_FULL_FRACTION = Decimal("1")


def allocation_scale_money(money: Money, fraction: Decimal, amount_quantum: Decimal) -> Money:
    """Scale money by a share fraction, rounding to the currency quantum.

    Args:
        money: Source amount.
        fraction: Share fraction in `[0, 1]`.
        amount_quantum: Rounding quantum for the result.

    Returns:
        Money: Scaled amount; unchanged when `fraction` is 1.
    """

    if fraction == _FULL_FRACTION:
        return money
    return money.multiply(fraction, amount_quantum)


def allocation_scale_sub_amount(sub_amount: SubAmount, fraction: Decimal, amount_quantum: Decimal) -> SubAmount:
    """Scale one sub-amount and its forex counterpart by a share fraction.

    Args:
        sub_amount: Source sub-amount.
        fraction: Share fraction in `[0, 1]`.
        amount_quantum: Rounding quantum for both magnitudes.

    Returns:
        SubAmount: Scaled sub-amount carrying the original exchange rate.

    Raises:
        ValueError: Raised when the fraction is outside `[0, 1]`.
    """

    if fraction < Decimal("0") or fraction > _FULL_FRACTION:
        raise ValueError(f"share fraction must be within [0, 1], got {fraction}")

    return SubAmount(
        kind=sub_amount.kind,
        amount=allocation_scale_money(sub_amount.amount, fraction, amount_quantum),
        forex=None if sub_amount.forex is None else allocation_scale_money(sub_amount.forex, fraction, amount_quantum),
        exchange_rate=sub_amount.exchange_rate,
    )


def allocation_build_item(
    normalized_transaction: NormalizedTransaction,
    shares: Decimal,
    amount_quantum: Decimal,
) -> TradeTransactionItem:
    """Build the contribution of `shares` out of one transaction.

    The share fraction is always derived from the transaction's own share
    count, so repeated splits never accumulate rounding drift.

    Args:
        normalized_transaction: Source transaction.
        shares: Attributed share quantity.
        amount_quantum: Rounding quantum for scaled amounts.

    Returns:
        TradeTransactionItem: Item with all amounts scaled by the same fraction.
    """

    if shares == normalized_transaction.shares:
        share_fraction = _FULL_FRACTION
    else:
        share_fraction = shares / normalized_transaction.shares

    scaled_sub_amounts: dict[SubAmountKind, SubAmount] = {
        kind: allocation_scale_sub_amount(sub_amount, share_fraction, amount_quantum)
        for kind, sub_amount in normalized_transaction.sub_amounts.items()
    }
    return TradeTransactionItem(
        transaction=normalized_transaction.transaction,
        direction=normalized_transaction.direction,
        share_fraction=share_fraction,
        shares=shares,
        amount=allocation_scale_money(normalized_transaction.transaction.amount, share_fraction, amount_quantum),
        sub_amounts=scaled_sub_amounts,
    )


__all__ = ["allocation_build_item", "allocation_scale_money", "allocation_scale_sub_amount"]
