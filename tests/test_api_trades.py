"""Regression tests for trade reconstruction API endpoints."""

from __future__ import annotations

from fastapi.testclient import TestClient

from trade_ledger.api.application import create_api_application
from trade_ledger.bootstrap import bootstrap_create_collection_service
from trade_ledger.config import AppSettings


def _client(exchange_rates: dict[str, str] | None = None) -> TestClient:
    settings = AppSettings(
        _env_file=None,
        environment_name="test",
        term_currency="EUR",
        exchange_rates=exchange_rates or {},
    )
    application = create_api_application(
        settings=settings,
        collection_service=bootstrap_create_collection_service(settings),
    )
    return TestClient(application)


def _transaction_payload(
    transaction_id: str,
    kind: str,
    shares: str,
    gross: str,
    timestamp: str,
    instrument_id: str = "att",
    forex: str | None = None,
    exchange_rate: str | None = None,
    currency: str = "EUR",
) -> dict[str, object]:
    return {
        "transaction_id": transaction_id,
        "instrument_id": instrument_id,
        "timestamp": timestamp,
        "shares": shares,
        "kind": kind,
        "amount": gross,
        "currency": currency,
        "sub_amounts": [
            {
                "kind": "GROSS_VALUE",
                "amount": gross,
                "currency": currency,
                "forex_amount": forex,
                "forex_currency": None if forex is None else "USD",
                "exchange_rate": exchange_rate,
            }
        ],
    }


def test_api_foundation_index_reports_term_currency() -> None:
    """Return service metadata from the foundation route.

    Returns:
        None: Assertions validate metadata payload.

    Raises:
        AssertionError: Raised when metadata is missing.
    """

    response = _client().get("/")

    assert response.status_code == 200
    assert response.json()["service"] == "trade-ledger"
    assert response.json()["term_currency"] == "EUR"


def test_api_trades_collect_returns_ordered_trades() -> None:
    """Serialize the closed slice and the scaled open remainder for one instrument."""

    payload = {
        "instrument_id": "att",
        "transactions": [
            _transaction_payload(
                "att-sell", "SELL", "0.802", "22.93", "2018-11-28T00:00:00", forex="26.09", exchange_rate="0.8788807973"
            ),
            _transaction_payload(
                "att-buy", "BUY", "0.859", "24.63", "2018-10-23T00:00:00", forex="28.27", exchange_rate="0.8712319219"
            ),
        ],
    }

    response = _client().post("/trades/collect", json=payload)

    assert response.status_code == 200
    body = response.json()
    assert body["instrument_id"] == "att"
    assert body["term_currency"] == "EUR"
    assert len(body["trades"]) == 2

    closed_trade, open_trade = body["trades"]
    assert closed_trade["closed"] is True
    assert closed_trade["end"] == "2018-11-28T00:00:00"
    assert closed_trade["exit_value"] == "22.93"
    assert open_trade["closed"] is False
    assert open_trade["end"] is None
    assert open_trade["entry_value"] == "1.63"

    open_gross = open_trade["transactions"][0]["sub_amounts"]["GROSS_VALUE"]
    assert open_gross["amount"] == "1.63"
    assert open_gross["forex_amount"] == "1.88"
    assert open_gross["exchange_rate"] == "0.8712319219"


def test_api_trades_collect_returns_error_envelope_for_oversold_position() -> None:
    """Map engine data errors to a 422 error envelope without trades."""

    payload = {
        "instrument_id": "att",
        "transactions": [
            _transaction_payload("buy-1", "BUY", "1", "10", "2026-01-01T00:00:00"),
            _transaction_payload("sell-1", "SELL", "2", "20", "2026-01-02T00:00:00"),
        ],
    }

    response = _client().post("/trades/collect", json=payload)

    assert response.status_code == 422
    body = response.json()
    assert body["status"] == "error"
    assert body["code"] == "OVERSOLD_POSITION"
    assert body["transaction_id"] == "sell-1"
    assert "trades" not in body


def test_api_trades_collect_account_reports_failures_per_instrument() -> None:
    """Return successful instruments and failures side by side."""

    payload = {
        "transactions": [
            _transaction_payload("ok-buy", "BUY", "2", "20", "2026-01-01T00:00:00", instrument_id="ok"),
            _transaction_payload("bad-buy", "BUY", "0", "0", "2026-01-01T00:00:00", instrument_id="bad"),
        ],
    }

    response = _client().post("/trades/collect-account", json=payload)

    assert response.status_code == 200
    body = response.json()
    assert [item["instrument_id"] for item in body["items"]] == ["ok"]
    assert body["failures"] == [
        {
            "instrument_id": "bad",
            "code": "INVALID_TRANSACTION",
            "message": "transaction bad-buy has zero shares",
            "transaction_id": "bad-buy",
        }
    ]


def test_api_trades_collect_converts_home_currency_with_configured_rates() -> None:
    """Express a USD ledger in the EUR term currency using settings rates."""

    payload = {
        "instrument_id": "att",
        "transactions": [_transaction_payload("buy-usd", "BUY", "10", "100", "2026-01-01T00:00:00", currency="USD")],
    }

    converted_response = _client(exchange_rates={"USD/EUR": "0.9"}).post("/trades/collect", json=payload)
    unconverted_response = _client().post("/trades/collect", json=payload)

    assert converted_response.status_code == 200
    assert converted_response.json()["trades"][0]["entry_value"] == "90.00"
    assert unconverted_response.status_code == 422
    assert unconverted_response.json()["code"] == "CURRENCY_CONVERSION"


def test_api_trades_collect_rejects_blank_instrument_identifier() -> None:
    """Reject whitespace-only instrument identifiers as request validation errors."""

    response = _client().post("/trades/collect", json={"instrument_id": "   ", "transactions": []})

    assert response.status_code == 422
    assert "detail" in response.json()


def test_api_trades_collect_account_rejects_blank_instrument_subset_entry() -> None:
    """Reject a blank entry in the requested instrument subset."""

    payload = {
        "instrument_ids": ["ok", " "],
        "transactions": [_transaction_payload("ok-buy", "BUY", "2", "20", "2026-01-01T00:00:00", instrument_id="ok")],
    }

    response = _client().post("/trades/collect-account", json=payload)

    assert response.status_code == 422
    assert "detail" in response.json()


def test_api_trades_collect_rejects_forex_amount_without_currency() -> None:
    """Reject a forex amount that is missing its currency."""

    transaction = _transaction_payload("buy-1", "BUY", "1", "10", "2026-01-01T00:00:00", forex="12", exchange_rate="0.8")
    transaction["sub_amounts"][0]["forex_currency"] = None

    response = _client().post("/trades/collect", json={"instrument_id": "att", "transactions": [transaction]})

    assert response.status_code == 422
    assert "forex_currency" in response.text


def test_api_trades_collect_rejects_repeated_sub_amount_kinds() -> None:
    """Reject transactions listing the same sub-amount kind twice."""

    transaction = _transaction_payload("buy-1", "BUY", "1", "10", "2026-01-01T00:00:00")
    transaction["sub_amounts"].append({"kind": "GROSS_VALUE", "amount": "10", "currency": "EUR"})

    response = _client().post("/trades/collect", json={"instrument_id": "att", "transactions": [transaction]})

    assert response.status_code == 422
    assert "repeat" in response.text
