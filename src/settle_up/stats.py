"""Event-level spending statistics, computed in minor units."""

from decimal import ROUND_HALF_UP, Decimal

from pydantic import BaseModel, Field

from .models import EventSnapshot

CATEGORY_LABELS = {
    "food": "Food",
    "transport": "Transport",
    "accommodation": "Accommodation",
    "entertainment": "Entertainment",
    "shopping": "Shopping",
    "other": "Other",
}


class CategoryTotal(BaseModel):
    """Spending within one category."""

    category: str
    label: str
    amount: int
    percentage: Decimal  # one decimal place


class ParticipantTotal(BaseModel):
    """How much one participant paid out."""

    participant_id: str
    name: str
    paid: int


class EventStatistics(BaseModel):
    """Summary figures for an event."""

    currency: str
    total: int = 0
    participant_count: int = 0
    per_person: int = 0
    expense_count: int = 0
    average_expense: int = 0
    largest_expense: int = 0
    by_category: list[CategoryTotal] = Field(default_factory=list)
    by_participant: list[ParticipantTotal] = Field(default_factory=list)
    by_day: dict[str, int] = Field(default_factory=dict)


def _rounded_ratio(numerator: int, denominator: int) -> int:
    if denominator == 0:
        return 0
    ratio = Decimal(numerator) / Decimal(denominator)
    return int(ratio.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def normalize_category(category: str | None) -> str:
    """Map a stored category onto a known key, defaulting to 'other'."""
    key = (category or "").lower().strip()
    return key if key in CATEGORY_LABELS else "other"


def compute_statistics(snapshot: EventSnapshot) -> EventStatistics:
    """
    Compute totals, averages and breakdowns for an event.

    Args:
        snapshot: The event's participants and expenses

    Returns:
        Statistics with every amount in minor units
    """
    expenses = snapshot.expenses
    amounts = [expense.amount_minor for expense in expenses]
    total = sum(amounts)

    category_totals: dict[str, int] = {}
    for expense, amount in zip(expenses, amounts, strict=True):
        key = normalize_category(expense.category)
        category_totals[key] = category_totals.get(key, 0) + amount

    by_category = []
    for key, amount in sorted(category_totals.items(), key=lambda kv: (-kv[1], kv[0])):
        percentage = (
            (Decimal(amount) * 100 / Decimal(total)).quantize(
                Decimal("0.1"), rounding=ROUND_HALF_UP
            )
            if total
            else Decimal("0.0")
        )
        by_category.append(
            CategoryTotal(
                category=key,
                label=CATEGORY_LABELS[key],
                amount=amount,
                percentage=percentage,
            )
        )

    paid_by: dict[str, int] = {p.id: 0 for p in snapshot.participants}
    for expense, amount in zip(expenses, amounts, strict=True):
        if expense.payer_id in paid_by:
            paid_by[expense.payer_id] += amount

    by_participant = [
        ParticipantTotal(participant_id=p.id, name=p.name, paid=paid_by[p.id])
        for p in snapshot.participants
    ]

    # Keyed on the calendar date: snapshots can mix naive and aware timestamps
    by_day: dict[str, int] = {}
    for expense, amount in sorted(
        zip(expenses, amounts, strict=True),
        key=lambda pair: pair[0].created_at.date(),
    ):
        day = expense.created_at.date().isoformat()
        by_day[day] = by_day.get(day, 0) + amount

    return EventStatistics(
        currency=snapshot.event.currency,
        total=total,
        participant_count=len(snapshot.participants),
        per_person=_rounded_ratio(total, len(snapshot.participants)),
        expense_count=len(expenses),
        average_expense=_rounded_ratio(total, len(expenses)),
        largest_expense=max(amounts, default=0),
        by_category=by_category,
        by_participant=by_participant,
        by_day=by_day,
    )
