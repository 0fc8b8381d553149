"""Report rendering for an event's expenses and settlements.

Reports are plain strings in one of three formats: a human-readable text
report, a JSON document and a CSV ledger. Amounts are written in major units.
"""

import csv
import io
import logging
from collections.abc import Sequence
from datetime import datetime
from decimal import Decimal
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field

from .currency import format_currency, to_major
from .models import Balance, EventSnapshot, Settlement
from .stats import EventStatistics

logger = logging.getLogger(__name__)

BANNER = "=" * 40


class ExportFormat(StrEnum):
    """Supported report formats."""

    TEXT = "text"
    JSON = "json"
    CSV = "csv"

    @property
    def file_extension(self) -> str:
        """File extension for downloads."""
        return "txt" if self is ExportFormat.TEXT else self.value

    @property
    def media_type(self) -> str:
        """MIME type for downloads."""
        return {
            ExportFormat.TEXT: "text/plain",
            ExportFormat.JSON: "application/json",
            ExportFormat.CSV: "text/csv",
        }[self]


# ============================================================================
# JSON document models
# ============================================================================


class _EventSection(BaseModel):
    name: str
    date: datetime | None
    location: str | None
    description: str | None
    currency: str
    url: str | None


class _SummarySection(BaseModel):
    total_expenses: Decimal
    participant_count: int
    per_person: Decimal


class _ExpenseEntry(BaseModel):
    paid_by: str
    amount: Decimal
    category: str
    description: str | None
    date: datetime


class _BalanceEntry(BaseModel):
    name: str
    paid: Decimal
    should_pay: Decimal
    net: Decimal


class _SettlementEntry(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    from_name: str = Field(serialization_alias="from")
    to_name: str = Field(serialization_alias="to")
    amount: Decimal


class _ReportDocument(BaseModel):
    event: _EventSection
    summary: _SummarySection
    participants: list[str]
    expenses: list[_ExpenseEntry]
    balances: list[_BalanceEntry]
    settlements: list[_SettlementEntry]


# ============================================================================
# Renderers
# ============================================================================


def _participant_names(snapshot: EventSnapshot) -> dict[str, str]:
    return {p.id: p.name for p in snapshot.participants}


def render_json(
    snapshot: EventSnapshot,
    balances: Sequence[Balance],
    settlements: Sequence[Settlement],
    statistics: EventStatistics,
) -> str:
    """Render the report as an indented JSON document."""
    names = _participant_names(snapshot)
    event = snapshot.event

    document = _ReportDocument(
        event=_EventSection(
            name=event.name,
            date=event.date,
            location=event.location,
            description=event.description,
            currency=event.currency,
            url=event.url,
        ),
        summary=_SummarySection(
            total_expenses=to_major(statistics.total),
            participant_count=statistics.participant_count,
            per_person=to_major(statistics.per_person),
        ),
        participants=[p.name for p in snapshot.participants],
        expenses=[
            _ExpenseEntry(
                paid_by=names.get(e.payer_id, e.payer_id),
                amount=to_major(e.amount_minor),
                category=e.category,
                description=e.description,
                date=e.created_at,
            )
            for e in snapshot.expenses
        ],
        balances=[
            _BalanceEntry(
                name=b.participant.name,
                paid=to_major(b.paid),
                should_pay=to_major(b.should_pay),
                net=to_major(b.net),
            )
            for b in balances
        ],
        settlements=[
            _SettlementEntry(
                from_name=s.from_participant.name,
                to_name=s.to_participant.name,
                amount=to_major(s.amount),
            )
            for s in settlements
        ],
    )
    return document.model_dump_json(indent=2, by_alias=True)


def render_csv(
    snapshot: EventSnapshot, settlements: Sequence[Settlement]
) -> str:
    """Render expenses and settlements as one CSV ledger."""
    names = _participant_names(snapshot)
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")

    writer.writerow(["type", "from", "to", "amount", "category", "description", "date"])
    for e in snapshot.expenses:
        writer.writerow(
            [
                "expense",
                names.get(e.payer_id, e.payer_id),
                "",
                str(to_major(e.amount_minor)),
                e.category,
                e.description or "",
                e.created_at.isoformat(),
            ]
        )
    for s in settlements:
        writer.writerow(
            [
                "settlement",
                s.from_participant.name,
                s.to_participant.name,
                str(to_major(s.amount)),
                "",
                "settlement",
                "",
            ]
        )
    return buffer.getvalue()


def render_text(
    snapshot: EventSnapshot,
    settlements: Sequence[Settlement],
    statistics: EventStatistics,
    title: str,
    generated_at: datetime | None = None,
) -> str:
    """Render a sectioned plain-text report."""
    names = _participant_names(snapshot)
    event = snapshot.event
    currency = event.currency
    generated_at = generated_at or datetime.now()

    def section(heading: str) -> list[str]:
        return ["", BANNER, heading, BANNER]

    lines = [BANNER, title, BANNER, ""]
    lines.append(f"Event: {event.name}")
    lines.append(f"Date: {event.date.strftime('%Y-%m-%d %H:%M') if event.date else 'Not set'}")
    lines.append(f"Location: {event.location or 'Not set'}")
    if event.url:
        lines.append(f"URL: {event.url}")

    lines += section("Summary")
    lines.append(f"Total: {format_currency(statistics.total, currency)}")
    lines.append(f"Participants: {statistics.participant_count}")
    lines.append(f"Per person: {format_currency(statistics.per_person, currency)}")

    lines += section("Participants")
    lines += [f"- {p.name}" for p in snapshot.participants]

    lines += section("Expenses")
    history = []
    for e in snapshot.expenses:
        entry = [
            e.created_at.strftime("%Y-%m-%d %H:%M"),
            f"  {names.get(e.payer_id, e.payer_id)} paid "
            f"{format_currency(e.amount_minor, currency)}",
            f"  Category: {e.category}",
        ]
        if e.description:
            entry.append(f"  Description: {e.description}")
        history.append("\n".join(entry))
    lines.append("\n---\n".join(history) if history else "No expenses recorded")

    lines += section("Settlements")
    if settlements:
        lines += [
            f"{s.from_participant.name} -> {s.to_participant.name}: "
            f"{format_currency(s.amount, currency)}"
            for s in settlements
        ]
    else:
        lines.append("No settlements needed")

    lines += ["", BANNER, f"Generated: {generated_at.strftime('%Y-%m-%d %H:%M')}"]
    return "\n".join(lines)


def render_report(
    snapshot: EventSnapshot,
    balances: Sequence[Balance],
    settlements: Sequence[Settlement],
    statistics: EventStatistics,
    fmt: ExportFormat = ExportFormat.TEXT,
    title: str = "Walican Settlement Report",
    generated_at: datetime | None = None,
) -> str:
    """
    Render an event report in the requested format.

    Args:
        snapshot: The event being reported
        balances: Output of aggregate_balances
        settlements: Output of compute_settlements
        statistics: Output of compute_statistics
        fmt: Report format
        title: Heading for the text report
        generated_at: Timestamp for the text footer (defaults to now)

    Returns:
        The rendered report
    """
    logger.debug(f"Rendering {fmt.value} report for event {snapshot.event.id}")

    if fmt is ExportFormat.JSON:
        return render_json(snapshot, balances, settlements, statistics)
    if fmt is ExportFormat.CSV:
        return render_csv(snapshot, settlements)
    return render_text(snapshot, settlements, statistics, title, generated_at)
