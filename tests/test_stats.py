"""Tests for event statistics."""

from datetime import datetime, timezone
from decimal import Decimal

from settle_up.models import EventInfo, EventSnapshot, Expense, Participant
from settle_up.stats import compute_statistics, normalize_category


def make_snapshot(expenses: list[tuple[str, str, str, datetime]]) -> EventSnapshot:
    """Build a three-person snapshot from (payer, amount, category, when) tuples."""
    return EventSnapshot(
        event=EventInfo(id="ev", name="Ski Weekend"),
        participants=[
            Participant(id="1", name="Alice", event_id="ev"),
            Participant(id="2", name="Bob", event_id="ev"),
            Participant(id="3", name="Charlie", event_id="ev"),
        ],
        expenses=[
            Expense(
                id=f"e{i}",
                event_id="ev",
                payer_id=payer,
                amount=Decimal(amount),
                category=category,
                created_at=when,
            )
            for i, (payer, amount, category, when) in enumerate(expenses)
        ],
    )


def test_totals_and_averages():
    snapshot = make_snapshot(
        [
            ("1", "100.00", "accommodation", datetime(2025, 2, 1, 15, 0)),
            ("2", "30.00", "food", datetime(2025, 2, 1, 20, 0)),
            ("2", "20.00", "transport", datetime(2025, 2, 2, 9, 0)),
        ]
    )

    stats = compute_statistics(snapshot)

    assert stats.total == 15000
    assert stats.participant_count == 3
    assert stats.per_person == 5000
    assert stats.expense_count == 3
    assert stats.average_expense == 5000
    assert stats.largest_expense == 10000


def test_per_person_rounds_half_up():
    snapshot = make_snapshot([("1", "0.05", "food", datetime(2025, 2, 1))])

    stats = compute_statistics(snapshot)

    assert stats.per_person == 2  # 5 / 3 = 1.67


def test_category_breakdown():
    snapshot = make_snapshot(
        [
            ("1", "60.00", "food", datetime(2025, 2, 1)),
            ("1", "30.00", "Sightseeing", datetime(2025, 2, 1)),
            ("2", "10.00", "food", datetime(2025, 2, 2)),
        ]
    )

    stats = compute_statistics(snapshot)

    assert [(c.category, c.amount, c.percentage) for c in stats.by_category] == [
        ("food", 7000, Decimal("70.0")),
        ("other", 3000, Decimal("30.0")),
    ]
    assert stats.by_category[0].label == "Food"


def test_participant_and_daily_totals():
    snapshot = make_snapshot(
        [
            ("2", "20.00", "food", datetime(2025, 2, 2, 9, 0)),
            ("1", "10.00", "food", datetime(2025, 2, 1, 12, 0)),
            ("1", "5.00", "food", datetime(2025, 2, 2, 18, 0)),
        ]
    )

    stats = compute_statistics(snapshot)

    assert [(p.name, p.paid) for p in stats.by_participant] == [
        ("Alice", 1500),
        ("Bob", 2000),
        ("Charlie", 0),
    ]
    assert list(stats.by_day.items()) == [("2025-02-01", 1000), ("2025-02-02", 2500)]


def test_empty_event():
    stats = compute_statistics(make_snapshot([]))

    assert stats.total == 0
    assert stats.per_person == 0
    assert stats.average_expense == 0
    assert stats.largest_expense == 0
    assert stats.by_category == []


def test_normalize_category():
    assert normalize_category(" Food ") == "food"
    assert normalize_category(None) == "other"
    assert normalize_category("karaoke") == "other"


def test_daily_totals_with_mixed_timezones():
    snapshot = make_snapshot(
        [
            ("1", "10.00", "food", datetime(2025, 2, 2, 9, 0)),
            ("2", "20.00", "food", datetime(2025, 2, 1, 12, 0, tzinfo=timezone.utc)),
        ]
    )

    stats = compute_statistics(snapshot)

    assert list(stats.by_day.items()) == [("2025-02-01", 2000), ("2025-02-02", 1000)]
