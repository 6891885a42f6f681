"""Ledger layer package for FIFO trade reconstruction and cost basis."""

from trade_ledger.domain import (
	CurrencyConversionError,
	InvalidTransactionError,
	MissingSubAmountError,
	OversoldPositionError,
	TradeCollectorError,
)

from .allocation import allocation_build_item, allocation_scale_money, allocation_scale_sub_amount
from .collection_service import AccountTradeCollectionResult, InstrumentCollectionFailure, TradeCollectionService
from .cost_basis import cost_basis_calculate, cost_basis_moving_average_unit_costs
from .fifo_matcher import fifo_match_lots
from .interfaces import (
	FifoMatchResult,
	MatchedTrade,
	NormalizedTransaction,
	Trade,
	TradeCollectionRequest,
	TradeCollectionResult,
	TradeCollectorConfig,
	TradeCollectorPort,
	TradeTransactionItem,
)
from .normalizer import normalizer_normalize_transactions
from .trade_collector import TradeCollector, trade_collect_instrument

__all__ = [
	"AccountTradeCollectionResult",
	"CurrencyConversionError",
	"FifoMatchResult",
	"InstrumentCollectionFailure",
	"InvalidTransactionError",
	"MatchedTrade",
	"MissingSubAmountError",
	"NormalizedTransaction",
	"OversoldPositionError",
	"Trade",
	"TradeCollectionRequest",
	"TradeCollectionResult",
	"TradeCollectionService",
	"TradeCollector",
	"TradeCollectorConfig",
	"TradeCollectorError",
	"TradeCollectorPort",
	"TradeTransactionItem",
	"allocation_build_item",
	"allocation_scale_money",
	"allocation_scale_sub_amount",
	"cost_basis_calculate",
	"cost_basis_moving_average_unit_costs",
	"fifo_match_lots",
	"normalizer_normalize_transactions",
	"trade_collect_instrument",
]
