"""SettleUp - Split group expenses and settle balances with exact integer money."""

__version__ = "0.1.0"

from .balances import aggregate_balances, resolve_expense_splits
from .config import Settings, load_settings
from .currency import format_currency, to_major, to_minor
from .models import (
    Balance,
    CustomSplit,
    EqualSplit,
    EventInfo,
    EventSnapshot,
    Expense,
    ExpenseSplit,
    Participant,
    PercentageSplit,
    Settlement,
    SplitShare,
    SplitStrategy,
)
from .service import SettlementService, load_snapshot
from .settlement import apply_settlements, compute_settlements
from .splitter import compute_split

__all__ = [
    "Settings",
    "load_settings",
    "format_currency",
    "to_major",
    "to_minor",
    "Balance",
    "CustomSplit",
    "EqualSplit",
    "EventInfo",
    "EventSnapshot",
    "Expense",
    "ExpenseSplit",
    "Participant",
    "PercentageSplit",
    "Settlement",
    "SplitShare",
    "SplitStrategy",
    "aggregate_balances",
    "resolve_expense_splits",
    "compute_split",
    "apply_settlements",
    "compute_settlements",
    "SettlementService",
    "load_snapshot",
]
