"""Regression tests for account-level trade collection."""

from __future__ import annotations

from datetime import datetime

import pytest

from ledger_builders import build_transaction
from trade_ledger.domain import TransactionKind
from trade_ledger.ledger import TradeCollectionService, TradeCollector, TradeCollectorConfig


def _service() -> TradeCollectionService:
    return TradeCollectionService(collector=TradeCollector(config=TradeCollectorConfig(term_currency="EUR")))


def _account_ledger():
    return [
        build_transaction("ok-buy", TransactionKind.BUY, "10", "100", datetime(2026, 1, 1), instrument_id="ok"),
        build_transaction("bad-buy", TransactionKind.BUY, "1", "10", datetime(2026, 1, 1), instrument_id="bad"),
        build_transaction("ok-sell", TransactionKind.SELL, "4", "48", datetime(2026, 1, 2), instrument_id="ok"),
        build_transaction("bad-sell", TransactionKind.SELL, "2", "22", datetime(2026, 1, 2), instrument_id="bad"),
    ]


def test_collection_service_isolates_failing_instruments() -> None:
    """Report an oversold instrument as failure without affecting other instruments.

    Returns:
        None: Assertions validate per-instrument isolation.

    Raises:
        AssertionError: Raised when one failure leaks into another instrument.
    """

    account_result = _service().trade_collect_account(_account_ledger())

    assert [result.instrument_id for result in account_result.results] == ["ok"]
    assert len(account_result.result_for("ok").trades) == 2
    assert account_result.result_for("bad") is None

    failure = account_result.failure_for("bad")
    assert failure is not None
    assert failure.error_code == "OVERSOLD_POSITION"
    assert failure.transaction_id == "bad-sell"


def test_collection_service_limits_to_requested_instruments() -> None:
    """Collect only the requested instrument subset."""

    account_result = _service().trade_collect_account(_account_ledger(), instrument_ids=["ok"])

    assert [result.instrument_id for result in account_result.results] == ["ok"]
    assert account_result.failures == ()


def test_collection_service_returns_empty_trade_list_for_unknown_instrument() -> None:
    """Return no trades for an instrument without transactions."""

    account_result = _service().trade_collect_account(_account_ledger(), instrument_ids=["missing"])

    assert account_result.result_for("missing").trades == ()


def test_collection_service_rejects_missing_collector() -> None:
    """Reject a None collector dependency."""

    with pytest.raises(ValueError, match="collector"):
        TradeCollectionService(collector=None)


def test_collection_service_reports_unquantizable_share_quantities_per_instrument() -> None:
    """Report a share quantity beyond decimal precision as one instrument failure."""

    ledger = [
        build_transaction("good-buy", TransactionKind.BUY, "1", "10", datetime(2026, 1, 1), instrument_id="good"),
        build_transaction("huge-buy", TransactionKind.BUY, "1E20", "10", datetime(2026, 1, 1), instrument_id="huge"),
    ]

    account_result = _service().trade_collect_account(ledger)

    assert [result.instrument_id for result in account_result.results] == ["good"]
    failure = account_result.failure_for("huge")
    assert failure is not None
    assert failure.error_code == "INVALID_TRANSACTION"
    assert failure.transaction_id == "huge-buy"
