"""Trade API router composition for ledger-snapshot trade reconstruction."""
# pylint: disable=duplicate-code

from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field, field_validator, model_validator

from trade_ledger.domain import (
    Money,
    SubAmount,
    SubAmountKind,
    TradeCollectorError,
    Transaction,
    TransactionKind,
)
from trade_ledger.ledger import Trade, TradeCollectionResult, TradeCollectionService, TradeTransactionItem


class SubAmountPayload(BaseModel):
    """Request payload for one transaction sub-amount."""

    kind: SubAmountKind
    amount: Decimal
    currency: str = Field(min_length=3, max_length=3)
    forex_amount: Decimal | None = None
    forex_currency: str | None = Field(default=None, min_length=3, max_length=3)
    exchange_rate: Decimal | None = None

    @model_validator(mode="after")
    def _validate_forex_pair(self) -> "SubAmountPayload":
        if (self.forex_amount is None) != (self.forex_currency is None):
            raise ValueError("forex_amount and forex_currency must be provided together")
        return self


class TransactionPayload(BaseModel):
    """Request payload for one ledger transaction."""

    transaction_id: str = Field(min_length=1)
    instrument_id: str = Field(min_length=1)
    timestamp: datetime
    shares: Decimal
    kind: TransactionKind
    amount: Decimal
    currency: str = Field(min_length=3, max_length=3)
    sub_amounts: list[SubAmountPayload] = Field(default_factory=list)

    @field_validator("transaction_id", "instrument_id")
    @classmethod
    def _validate_identifier(cls, value: str) -> str:
        return _api_require_identifier(value)

    @field_validator("sub_amounts")
    @classmethod
    def _validate_unique_sub_amount_kinds(cls, value: list[SubAmountPayload]) -> list[SubAmountPayload]:
        kinds = [sub_amount.kind for sub_amount in value]
        if len(kinds) != len(set(kinds)):
            raise ValueError("sub_amounts must not repeat a kind")
        return value


class InstrumentTradeCollectPayload(BaseModel):
    """Request payload for one-instrument trade reconstruction."""

    instrument_id: str = Field(min_length=1)
    transactions: list[TransactionPayload]

    @field_validator("instrument_id")
    @classmethod
    def _validate_instrument_id(cls, value: str) -> str:
        return _api_require_identifier(value)


class AccountTradeCollectPayload(BaseModel):
    """Request payload for account-wide trade reconstruction."""

    instrument_ids: list[str] | None = None
    transactions: list[TransactionPayload]

    @field_validator("instrument_ids")
    @classmethod
    def _validate_instrument_ids(cls, value: list[str] | None) -> list[str] | None:
        if value is None:
            return None
        return [_api_require_identifier(instrument_id) for instrument_id in value]


def _api_require_identifier(value: str) -> str:
    normalized_value = value.strip()
    if not normalized_value:
        raise ValueError("identifier must not be blank")
    return normalized_value


def api_create_trades_router(collection_service: TradeCollectionService) -> APIRouter:
    """Create trades router exposing reconstruction endpoints.

    Args:
        collection_service: Account-level trade collection service.

    Returns:
        APIRouter: Router exposing trade endpoints.

    Raises:
        ValueError: Raised when dependencies are invalid.
    """

    if collection_service is None:
        raise ValueError("collection_service must not be None")

    router = APIRouter(prefix="/trades", tags=["trades"])

    @router.post("/collect")
    def api_trades_collect_instrument(payload: InstrumentTradeCollectPayload) -> JSONResponse:
        """Reconstruct trades for one instrument.

        Args:
            payload: Instrument and ledger snapshot.

        Returns:
            JSONResponse: Trade list payload or error envelope.
        """

        transactions = [api_build_transaction(transaction) for transaction in payload.transactions]
        try:
            result = collection_service.trade_collect_instrument(
                transactions=transactions,
                instrument_id=payload.instrument_id,
            )
        except TradeCollectorError as error:
            error_payload = {
                "status": "error",
                "code": error.error_code,
                "message": str(error),
                "transaction_id": error.transaction_id,
            }
            return JSONResponse(content=error_payload, status_code=status.HTTP_422_UNPROCESSABLE_ENTITY)

        return JSONResponse(content=api_serialize_collection_result(result), status_code=status.HTTP_200_OK)

    @router.post("/collect-account")
    def api_trades_collect_account(payload: AccountTradeCollectPayload) -> JSONResponse:
        """Reconstruct trades for every instrument of the submitted ledger.

        Args:
            payload: Ledger snapshot and optional instrument subset.

        Returns:
            JSONResponse: Per-instrument results and failures.
        """

        transactions = [api_build_transaction(transaction) for transaction in payload.transactions]
        account_result = collection_service.trade_collect_account(
            transactions=transactions,
            instrument_ids=payload.instrument_ids,
        )
        response_payload = {
            "items": [api_serialize_collection_result(result) for result in account_result.results],
            "failures": [
                {
                    "instrument_id": failure.instrument_id,
                    "code": failure.error_code,
                    "message": failure.message,
                    "transaction_id": failure.transaction_id,
                }
                for failure in account_result.failures
            ],
        }
        return JSONResponse(content=response_payload, status_code=status.HTTP_200_OK)

    return router


def api_build_transaction(payload: TransactionPayload) -> Transaction:
    """Build one domain transaction from its request payload.

    Args:
        payload: Validated transaction payload.

    Returns:
        Transaction: Domain transaction.
    """

    sub_amounts: dict[SubAmountKind, SubAmount] = {}
    for sub_amount_payload in payload.sub_amounts:
        forex = None
        if sub_amount_payload.forex_amount is not None and sub_amount_payload.forex_currency is not None:
            forex = Money.of(sub_amount_payload.forex_currency, sub_amount_payload.forex_amount)
        sub_amounts[sub_amount_payload.kind] = SubAmount(
            kind=sub_amount_payload.kind,
            amount=Money.of(sub_amount_payload.currency, sub_amount_payload.amount),
            forex=forex,
            exchange_rate=sub_amount_payload.exchange_rate,
        )

    return Transaction(
        transaction_id=payload.transaction_id,
        instrument_id=payload.instrument_id,
        timestamp=payload.timestamp,
        shares=payload.shares,
        kind=payload.kind,
        amount=Money.of(payload.currency, payload.amount),
        sub_amounts=sub_amounts,
    )


def api_serialize_collection_result(result: TradeCollectionResult) -> dict[str, object]:
    """Serialize one instrument collection result to JSON payload."""

    return {
        "instrument_id": result.instrument_id,
        "term_currency": result.term_currency,
        "open_shares": str(result.open_shares),
        "trades": [api_serialize_trade(trade) for trade in result.trades],
    }


def api_serialize_trade(trade: Trade) -> dict[str, object]:
    """Serialize one trade to JSON payload.

    Args:
        trade: Trade with cost-basis values.

    Returns:
        dict[str, object]: JSON-serializable trade payload.
    """

    profit_loss = trade.profit_loss
    return_rate = trade.return_rate
    return {
        "lot_id": trade.lot_id,
        "start": trade.start.isoformat(),
        "end": None if trade.end is None else trade.end.isoformat(),
        "closed": trade.is_closed,
        "shares": str(trade.shares),
        "entry_value": str(trade.entry_value.amount),
        "entry_value_moving_average": str(trade.entry_value_moving_average.amount),
        "exit_value": None if trade.exit_value is None else str(trade.exit_value.amount),
        "profit_loss": None if profit_loss is None else str(profit_loss.amount),
        "return_rate": None if return_rate is None else str(return_rate),
        "holding_period_days": trade.holding_period_days(),
        "transactions": [api_serialize_trade_item(item) for item in trade.items],
    }


def api_serialize_trade_item(item: TradeTransactionItem) -> dict[str, object]:
    return {
        "transaction_id": item.transaction.transaction_id,
        "kind": item.transaction.kind.value,
        "direction": item.direction.value,
        "timestamp": item.transaction.timestamp.isoformat(),
        "share_fraction": str(item.share_fraction),
        "shares": str(item.shares),
        "amount": str(item.amount.amount),
        "currency": item.amount.currency_code,
        "sub_amounts": {
            kind.value: {
                "amount": str(sub_amount.amount.amount),
                "currency": sub_amount.amount.currency_code,
                "forex_amount": None if sub_amount.forex is None else str(sub_amount.forex.amount),
                "forex_currency": None if sub_amount.forex is None else sub_amount.forex.currency_code,
                "exchange_rate": None if sub_amount.exchange_rate is None else str(sub_amount.exchange_rate),
            }
            for kind, sub_amount in item.sub_amounts.items()
        },
    }


__all__ = [
    "api_build_transaction",
    "api_create_trades_router",
    "api_serialize_collection_result",
    "api_serialize_trade",
    "api_serialize_trade_item",
]
