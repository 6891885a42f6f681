"""Regression tests for proportional sub-amount allocation."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal

import pytest

from ledger_builders import build_transaction
from trade_ledger.domain import Money, SubAmount, SubAmountKind, TransactionKind
from trade_ledger.ledger import allocation_build_item, allocation_scale_sub_amount, normalizer_normalize_transactions


def test_allocation_scales_home_and_forex_but_keeps_exchange_rate() -> None:
    """Scale both magnitudes by the fraction and carry the exchange rate unchanged.

    Returns:
        None: Assertions validate scaled magnitudes and the intensive rate.

    Raises:
        AssertionError: Raised when the rate is rescaled or magnitudes drift.
    """

    sub_amount = SubAmount(
        kind=SubAmountKind.GROSS_VALUE,
        amount=Money.of("EUR", "100"),
        forex=Money.of("USD", "115"),
        exchange_rate=Decimal("0.8696"),
    )

    scaled = allocation_scale_sub_amount(sub_amount, Decimal("0.4"), Decimal("0.01"))

    assert scaled.kind is SubAmountKind.GROSS_VALUE
    assert scaled.amount == Money.of("EUR", "40.00")
    assert scaled.forex == Money.of("USD", "46.00")
    assert scaled.exchange_rate == Decimal("0.8696")


def test_allocation_full_fraction_returns_original_amounts() -> None:
    """Leave amounts untouched when the whole transaction is attributed."""

    sub_amount = SubAmount(kind=SubAmountKind.FEE, amount=Money.of("EUR", "1.005"))

    scaled = allocation_scale_sub_amount(sub_amount, Decimal("1"), Decimal("0.01"))

    assert scaled == sub_amount


def test_allocation_rounds_half_up_to_currency_quantum() -> None:
    """Round scaled amounts half-up to the minor unit."""

    sub_amount = SubAmount(kind=SubAmountKind.TAX, amount=Money.of("EUR", "0.05"))

    scaled = allocation_scale_sub_amount(sub_amount, Decimal("0.5"), Decimal("0.01"))

    assert scaled.amount.amount == Decimal("0.03")


def test_allocation_rejects_fraction_outside_unit_interval() -> None:
    """Reject fractions that would attribute more than the whole transaction."""

    sub_amount = SubAmount(kind=SubAmountKind.GROSS_VALUE, amount=Money.of("EUR", "10"))

    with pytest.raises(ValueError, match="share fraction"):
        allocation_scale_sub_amount(sub_amount, Decimal("1.5"), Decimal("0.01"))


def test_allocation_build_item_scales_every_component_uniformly() -> None:
    """Apply the same share fraction to the total, gross value, fee and tax."""

    normalized = normalizer_normalize_transactions(
        [
            build_transaction(
                "buy-1",
                TransactionKind.BUY,
                "8",
                "200",
                datetime(2026, 3, 1),
                fee="4",
                tax="2",
            )
        ],
        "instrument-1",
    )

    item = allocation_build_item(normalized[0], Decimal("2"), Decimal("0.01"))

    assert item.share_fraction == Decimal("0.25")
    assert item.shares == Decimal("2")
    assert item.amount == Money.of("EUR", "51.50")
    assert item.gross_value.amount == Money.of("EUR", "50.00")
    assert item.sub_amount(SubAmountKind.FEE).amount == Money.of("EUR", "1.00")
    assert item.sub_amount(SubAmountKind.TAX).amount == Money.of("EUR", "0.50")
