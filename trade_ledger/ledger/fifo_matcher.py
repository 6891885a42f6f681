"""FIFO lot matching that turns normalized transactions into trades."""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal

from trade_ledger.domain import OversoldPositionError

from .allocation import allocation_build_item
from .interfaces import FifoMatchResult, MatchedTrade, NormalizedTransaction, TradeTransactionItem

logger = logging.getLogger(__name__)


@dataclass
class _OpenLot:
    """Mutable internal lot state used during FIFO processing."""

    lot_id: int
    acquisition: NormalizedTransaction
    remaining_shares: Decimal
    remaining_fraction: Decimal
    items: list[TradeTransactionItem] = field(default_factory=list)


@dataclass
class _FifoMatcherState:
    """Per-invocation lot arena, FIFO index and closed trades."""

    lots: dict[int, _OpenLot] = field(default_factory=dict)
    queue: deque[int] = field(default_factory=deque)
    closed_trades: list[MatchedTrade] = field(default_factory=list)
    next_lot_id: int = 0


def fifo_match_lots(
    normalized_transactions: tuple[NormalizedTransaction, ...],
    amount_quantum: Decimal = Decimal("0.01"),
) -> FifoMatchResult:
    """Match disposals against the oldest open lots and build trades.

    Args:
        normalized_transactions: Chronological, validated transactions of one instrument.
        amount_quantum: Rounding quantum for scaled monetary amounts.

    Returns:
        FifoMatchResult: Trades ordered by start, lot creation order, closed slices before the open remainder.

    Raises:
        OversoldPositionError: Raised when a disposal exceeds the open shares.
    """

    state = _FifoMatcherState()

    for normalized_transaction in normalized_transactions:
        if normalized_transaction.is_acquisition:
            _fifo_open_lot(state, normalized_transaction, amount_quantum)
        else:
            _fifo_consume_lots(state, normalized_transaction, amount_quantum)

    open_trades = [_fifo_build_open_trade(state.lots[lot_id]) for lot_id in state.queue]
    open_shares = sum((state.lots[lot_id].remaining_shares for lot_id in state.queue), Decimal("0"))

    ordered_trades = sorted(
        [*state.closed_trades, *open_trades],
        key=lambda trade: (
            trade.start,
            trade.lot_id,
            0 if trade.is_closed else 1,
            trade.closing_order if trade.closing_order is not None else 0,
        ),
    )
    return FifoMatchResult(trades=tuple(ordered_trades), open_shares=open_shares)


def _fifo_open_lot(
    state: _FifoMatcherState,
    acquisition: NormalizedTransaction,
    amount_quantum: Decimal,
) -> None:
    lot = _OpenLot(
        lot_id=state.next_lot_id,
        acquisition=acquisition,
        remaining_shares=acquisition.shares,
        remaining_fraction=Decimal("1"),
        items=[allocation_build_item(acquisition, acquisition.shares, amount_quantum)],
    )
    state.next_lot_id += 1
    state.lots[lot.lot_id] = lot
    state.queue.append(lot.lot_id)
    logger.debug(
        "opened lot=%d transaction=%s shares=%s",
        lot.lot_id,
        acquisition.transaction.transaction_id,
        acquisition.shares,
    )


def _fifo_consume_lots(
    state: _FifoMatcherState,
    disposal: NormalizedTransaction,
    amount_quantum: Decimal,
) -> None:
    """Consume open lots oldest-first until the disposal is fully matched.

    Raises:
        OversoldPositionError: Raised when the queue empties before the disposal is matched.
    """

    shares_to_close = disposal.shares

    while shares_to_close > Decimal("0"):
        if not state.queue:
            raise OversoldPositionError(
                f"disposal {disposal.transaction.transaction_id} sells {disposal.shares} shares, "
                f"{shares_to_close} more than the open position",
                transaction_id=disposal.transaction.transaction_id,
                shortfall_shares=shares_to_close,
            )

        lot = state.lots[state.queue[0]]
        close_quantity = min(shares_to_close, lot.remaining_shares)
        disposal_item = allocation_build_item(disposal, close_quantity, amount_quantum)

        if close_quantity == lot.remaining_shares:
            state.queue.popleft()
            del state.lots[lot.lot_id]
            state.closed_trades.append(
                _fifo_build_closed_trade(
                    state=state,
                    lot=lot,
                    shares=lot.remaining_shares,
                    items=(*lot.items, disposal_item),
                    end=disposal.timestamp,
                )
            )
            logger.debug(
                "closed lot=%d by transaction=%s shares=%s",
                lot.lot_id,
                disposal.transaction.transaction_id,
                close_quantity,
            )
        else:
            acquisition = lot.acquisition
            lot.remaining_shares -= close_quantity
            lot.remaining_fraction = lot.remaining_shares / acquisition.shares
            # The open trade's acquisition item always reflects the shares still held.
            lot.items[0] = allocation_build_item(acquisition, lot.remaining_shares, amount_quantum)
            state.closed_trades.append(
                _fifo_build_closed_trade(
                    state=state,
                    lot=lot,
                    shares=close_quantity,
                    items=(allocation_build_item(acquisition, close_quantity, amount_quantum), disposal_item),
                    end=disposal.timestamp,
                )
            )
            logger.debug(
                "split lot=%d by transaction=%s closed=%s remaining=%s fraction=%s",
                lot.lot_id,
                disposal.transaction.transaction_id,
                close_quantity,
                lot.remaining_shares,
                lot.remaining_fraction,
            )

        shares_to_close -= close_quantity


def _fifo_build_closed_trade(
    state: _FifoMatcherState,
    lot: _OpenLot,
    shares: Decimal,
    items: tuple[TradeTransactionItem, ...],
    end: datetime,
) -> MatchedTrade:
    return MatchedTrade(
        lot_id=lot.lot_id,
        opening_sequence=lot.acquisition.sequence,
        closing_order=len(state.closed_trades),
        start=lot.acquisition.timestamp,
        end=end,
        shares=shares,
        items=items,
    )


def _fifo_build_open_trade(lot: _OpenLot) -> MatchedTrade:
    return MatchedTrade(
        lot_id=lot.lot_id,
        opening_sequence=lot.acquisition.sequence,
        closing_order=None,
        start=lot.acquisition.timestamp,
        end=None,
        shares=lot.remaining_shares,
        items=tuple(lot.items),
    )


__all__ = ["fifo_match_lots"]
