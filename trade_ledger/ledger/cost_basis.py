"""FIFO and moving-average cost basis for matched trades."""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

from trade_ledger.domain import CurrencyConverterPort, Money, SubAmountKind, TransactionDirection

from .interfaces import MatchedTrade, NormalizedTransaction, Trade, TradeTransactionItem


def cost_basis_calculate(
    matched_trades: tuple[MatchedTrade, ...],
    normalized_transactions: tuple[NormalizedTransaction, ...],
    instrument_id: str,
    converter: CurrencyConverterPort,
    term_currency: str,
    amount_quantum: Decimal = Decimal("0.01"),
) -> tuple[Trade, ...]:
    """Attach FIFO entry, moving-average entry and exit values to matched trades.

    Args:
        matched_trades: Trades produced by FIFO matching.
        normalized_transactions: The sequence the trades were matched from.
        instrument_id: Instrument reference.
        converter: Converter expressing home-currency values in the term currency.
        term_currency: Currency of all resulting values.
        amount_quantum: Rounding quantum for computed values.

    Returns:
        tuple[Trade, ...]: Trades in the same order as `matched_trades`.

    Raises:
        CurrencyConversionError: Raised when an amount cannot be converted.
    """

    average_cost_by_sequence = cost_basis_moving_average_unit_costs(normalized_transactions, converter, term_currency)

    trades: list[Trade] = []
    for matched_trade in matched_trades:
        acquisition_items = [item for item in matched_trade.items if item.direction is TransactionDirection.INFLOW]
        disposal_items = [item for item in matched_trade.items if item.direction is TransactionDirection.OUTFLOW]

        average_unit_cost = average_cost_by_sequence[matched_trade.opening_sequence]
        entry_value_moving_average = Money(
            currency_code=term_currency,
            amount=(average_unit_cost * matched_trade.shares).quantize(amount_quantum, rounding=ROUND_HALF_UP),
        )

        trades.append(
            Trade(
                instrument_id=instrument_id,
                lot_id=matched_trade.lot_id,
                start=matched_trade.start,
                end=matched_trade.end,
                shares=matched_trade.shares,
                items=matched_trade.items,
                entry_value=_cost_basis_sum_gross_value(acquisition_items, converter, term_currency),
                entry_value_moving_average=entry_value_moving_average,
                exit_value=(
                    _cost_basis_sum_gross_value(disposal_items, converter, term_currency)
                    if matched_trade.is_closed
                    else None
                ),
            )
        )
    return tuple(trades)


def cost_basis_moving_average_unit_costs(
    normalized_transactions: tuple[NormalizedTransaction, ...],
    converter: CurrencyConverterPort,
    term_currency: str,
) -> dict[int, Decimal]:
    """Compute the running weighted-average unit cost after each acquisition.

    Acquisitions blend their gross value into the average; disposals only
    reduce the share count. The average is independent of lot identity.

    Args:
        normalized_transactions: Chronological transactions of one instrument.
        converter: Converter expressing gross values in the term currency.
        term_currency: Currency of the unit costs.

    Returns:
        dict[int, Decimal]: Unit cost right after each acquisition, keyed by sequence.
    """

    average_unit_cost = Decimal("0")
    held_shares = Decimal("0")
    average_cost_by_sequence: dict[int, Decimal] = {}

    for normalized_transaction in normalized_transactions:
        if normalized_transaction.is_acquisition:
            gross_value = converter.money_convert(
                normalized_transaction.sub_amounts[SubAmountKind.GROSS_VALUE].amount,
                normalized_transaction.timestamp,
                term_currency,
            ).amount
            shares_after = held_shares + normalized_transaction.shares
            average_unit_cost = (average_unit_cost * held_shares + gross_value) / shares_after
            held_shares = shares_after
            average_cost_by_sequence[normalized_transaction.sequence] = average_unit_cost
        else:
            held_shares = max(held_shares - normalized_transaction.shares, Decimal("0"))

    return average_cost_by_sequence


def _cost_basis_sum_gross_value(
    items: list[TradeTransactionItem],
    converter: CurrencyConverterPort,
    term_currency: str,
) -> Money:
    total = Money.zero(term_currency)
    for item in items:
        total = total.add(converter.money_convert(item.gross_value.amount, item.transaction.timestamp, term_currency))
    return total


__all__ = ["cost_basis_calculate", "cost_basis_moving_average_unit_costs"]
