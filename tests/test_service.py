"""Tests for SettlementService layer."""

import json
from datetime import datetime
from decimal import Decimal

import pytest

from settle_up.config import Settings
from settle_up.exceptions import (
    InvalidInputError,
    SettlementVerificationError,
    SnapshotLoadError,
    ValidationError,
)
from settle_up.export import ExportFormat
from settle_up.models import (
    Balance,
    EqualSplit,
    EventInfo,
    EventSnapshot,
    Expense,
    Participant,
)
from settle_up.service import SettlementService, load_snapshot


@pytest.fixture
def settings():
    """Create settings with defaults."""
    return Settings()


@pytest.fixture
def service(settings):
    """Create a SettlementService instance."""
    return SettlementService(settings)


@pytest.fixture
def snapshot():
    """A three-person trip with two equal expenses."""
    participants = [
        Participant(id="1", name="Alice", event_id="trip"),
        Participant(id="2", name="Bob", event_id="trip"),
        Participant(id="3", name="Charlie", event_id="trip"),
    ]
    return EventSnapshot(
        event=EventInfo(id="trip", name="Hakone Trip", currency="JPY"),
        participants=participants,
        expenses=[
            Expense(
                id="exp1",
                event_id="trip",
                payer_id="1",
                amount=Decimal("30.00"),
                category="food",
                description="Dinner",
                created_at=datetime(2025, 3, 1, 19, 0),
            ),
            Expense(
                id="exp2",
                event_id="trip",
                payer_id="2",
                amount=Decimal("15.00"),
                category="transport",
                description="Taxi",
                created_at=datetime(2025, 3, 2, 9, 30),
            ),
        ],
    )


class TestLoadSnapshot:
    """Loading event files."""

    def test_round_trips_through_json(self, tmp_path, snapshot):
        path = tmp_path / "event.json"
        path.write_text(snapshot.model_dump_json(), encoding="utf-8")

        loaded = load_snapshot(path)

        assert loaded == snapshot

    def test_missing_file(self, tmp_path):
        with pytest.raises(SnapshotLoadError, match="Failed to read"):
            load_snapshot(tmp_path / "missing.json")

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "event.json"
        path.write_text("{not json", encoding="utf-8")

        with pytest.raises(SnapshotLoadError, match="Invalid event file"):
            load_snapshot(path)

    def test_negative_amount_rejected(self, tmp_path, snapshot):
        data = json.loads(snapshot.model_dump_json())
        data["expenses"][0]["amount"] = "-5"
        path = tmp_path / "event.json"
        path.write_text(json.dumps(data), encoding="utf-8")

        with pytest.raises(SnapshotLoadError):
            load_snapshot(path)


class TestBalances:
    """Service-level balance computation."""

    def test_balances(self, service, snapshot):
        balances = service.balances(snapshot)

        assert {b.participant.id: b.net for b in balances} == {
            "1": 1500,
            "2": 0,
            "3": -1500,
        }

    def test_configured_maximum_applies(self, snapshot):
        service = SettlementService(Settings(max_amount=Decimal("20")))

        with pytest.raises(ValidationError, match="exceeds the maximum"):
            service.balances(snapshot)

    def test_unknown_payer_surfaces(self, service, snapshot):
        bad = snapshot.model_copy(
            update={
                "expenses": [
                    snapshot.expenses[0].model_copy(update={"payer_id": "ghost"})
                ]
            }
        )

        with pytest.raises(InvalidInputError):
            service.balances(bad)


class TestSettlements:
    """Service-level settlement computation."""

    def test_settlements(self, service, snapshot):
        settlements = service.settlements(snapshot)

        assert [
            (s.from_participant.name, s.to_participant.name, s.amount)
            for s in settlements
        ] == [("Charlie", "Alice", 1500)]

    def test_verification_rejects_unbalanced_input(self, service, snapshot):
        """Hand-built balances that don't sum to zero can't be fully settled."""
        alice, bob = snapshot.participants[:2]
        balances = [
            Balance(participant=alice, paid=1000, should_pay=0),
            Balance(participant=bob, paid=0, should_pay=400),
        ]

        with pytest.raises(SettlementVerificationError) as exc_info:
            service.settlements(snapshot, balances)

        assert exc_info.value.residuals == {"1": 600}


class TestSplitExpense:
    """One-off split computation."""

    def test_split_uses_settings(self, service):
        shares = service.split_expense("10.00", EqualSplit(), ["a", "b", "c"])

        assert [s.amount_minor for s in shares] == [334, 333, 333]

    def test_split_respects_configured_maximum(self):
        service = SettlementService(Settings(max_amount=Decimal("5")))

        with pytest.raises(ValidationError):
            service.split_expense("10.00", EqualSplit(), ["a", "b"])


class TestExport:
    """Report export through the service."""

    def test_json_export(self, service, snapshot):
        report = service.export(snapshot, ExportFormat.JSON)

        data = json.loads(report)
        assert data["summary"]["total_expenses"] == "45.00"
        assert data["settlements"] == [
            {"from": "Charlie", "to": "Alice", "amount": "15.00"}
        ]

    def test_text_export_uses_title(self, snapshot):
        service = SettlementService(Settings(report_title="Trip Report"))

        report = service.export(
            snapshot, ExportFormat.TEXT, generated_at=datetime(2025, 3, 3, 10, 0)
        )

        assert report.splitlines()[1] == "Trip Report"
        assert "Generated: 2025-03-03 10:00" in report
