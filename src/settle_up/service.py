"""Service layer that composes the settlement engine over event snapshots.

The engine functions are pure and silent; this layer loads snapshots,
applies configured limits, verifies results and logs what happened.
"""

import logging
from collections.abc import Sequence
from datetime import datetime
from decimal import Decimal
from pathlib import Path

from pydantic import ValidationError as PydanticValidationError

from .balances import aggregate_balances
from .config import Settings
from .exceptions import SettlementVerificationError, SnapshotLoadError
from .export import ExportFormat, render_report
from .models import (
    Balance,
    CustomSplit,
    EqualSplit,
    EventSnapshot,
    PercentageSplit,
    Settlement,
    SplitShare,
)
from .settlement import apply_settlements, compute_settlements
from .splitter import compute_split, validate_amount
from .stats import EventStatistics, compute_statistics

logger = logging.getLogger(__name__)


def load_snapshot(path: Path) -> EventSnapshot:
    """
    Load an event snapshot from a JSON file.

    Raises:
        SnapshotLoadError: If the file can't be read or doesn't match the schema
    """
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise SnapshotLoadError(f"Failed to read event file {path}: {e}") from e

    try:
        snapshot = EventSnapshot.model_validate_json(raw)
    except PydanticValidationError as e:
        raise SnapshotLoadError(f"Invalid event file {path}:\n{e}") from e

    logger.info(
        f"Loaded event '{snapshot.event.name}' with "
        f"{len(snapshot.participants)} participants and "
        f"{len(snapshot.expenses)} expenses"
    )
    return snapshot


class SettlementService:
    """Service for computing balances, settlements and reports for events."""

    def __init__(self, settings: Settings):
        """Initialize the settlement service."""
        self.settings = settings

    def split_expense(
        self,
        amount: Decimal | int | float | str,
        strategy: EqualSplit | CustomSplit | PercentageSplit,
        participant_ids: Sequence[str],
    ) -> list[SplitShare]:
        """Compute one expense's shares using the configured limits."""
        shares = compute_split(
            amount,
            strategy,
            participant_ids,
            max_amount=self.settings.max_amount,
            percentage_tolerance=self.settings.percentage_tolerance,
        )
        logger.debug(
            f"Split {amount} ({strategy.kind}) across {len(shares)} slots"
        )
        return shares

    def balances(self, snapshot: EventSnapshot) -> list[Balance]:
        """
        Compute net balances for every participant of an event.

        Every expense amount is checked against the configured maximum before
        any aggregation happens, so nothing is partially computed.
        """
        for expense in snapshot.expenses:
            validate_amount(expense.amount, self.settings.max_amount)

        balances = aggregate_balances(
            snapshot.participants,
            snapshot.expenses,
            snapshot.expense_splits,
            max_amount=self.settings.max_amount,
        )

        outstanding = sum(b.net for b in balances if b.net > 0)
        logger.info(
            f"Computed {len(balances)} balances for event {snapshot.event.id} "
            f"({outstanding} minor units outstanding)"
        )
        return balances

    def settlements(
        self, snapshot: EventSnapshot, balances: Sequence[Balance] | None = None
    ) -> list[Settlement]:
        """
        Compute the transfers that settle an event.

        Raises:
            SettlementVerificationError: If replaying the transfers leaves any
                                         balance non-zero
        """
        if balances is None:
            balances = self.balances(snapshot)

        settlements = compute_settlements(balances)

        residuals = {
            pid: amount
            for pid, amount in apply_settlements(balances, settlements).items()
            if amount != 0
        }
        if residuals:
            raise SettlementVerificationError(residuals)

        logger.info(
            f"Computed {len(settlements)} settlements for event {snapshot.event.id}"
        )
        return settlements

    def statistics(self, snapshot: EventSnapshot) -> EventStatistics:
        """Compute spending statistics for an event."""
        return compute_statistics(snapshot)

    def export(
        self,
        snapshot: EventSnapshot,
        fmt: ExportFormat = ExportFormat.TEXT,
        generated_at: datetime | None = None,
    ) -> str:
        """Render a full event report in the requested format."""
        balances = self.balances(snapshot)
        settlements = self.settlements(snapshot, balances)
        statistics = self.statistics(snapshot)

        report = render_report(
            snapshot,
            balances,
            settlements,
            statistics,
            fmt=fmt,
            title=self.settings.report_title,
            generated_at=generated_at,
        )
        logger.info(f"Exported {fmt.value} report ({len(report)} characters)")
        return report
