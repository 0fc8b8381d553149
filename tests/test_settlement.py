"""Tests for greedy settlement matching."""

import pytest

from settle_up.models import Balance, Participant
from settle_up.settlement import apply_settlements, compute_settlements


@pytest.fixture
def participants():
    """Five participants of one event."""
    return [
        Participant(id=str(i), name=name, event_id="event1")
        for i, name in enumerate(["Alice", "Bob", "Charlie", "Dana", "Eve"], start=1)
    ]


def balance(participant: Participant, net: int) -> Balance:
    """Create a Balance with the given net."""
    if net >= 0:
        return Balance(participant=participant, paid=net, should_pay=0)
    return Balance(participant=participant, paid=0, should_pay=-net)


def transfers(settlements) -> list[tuple[str, str, int]]:
    """Reduce settlements to (from, to, amount) tuples."""
    return [
        (s.from_participant.id, s.to_participant.id, s.amount) for s in settlements
    ]


class TestComputeSettlements:
    """Observed settlement scenarios."""

    def test_one_creditor_two_debtors(self, participants):
        alice, bob, charlie = participants[:3]
        balances = [balance(alice, 2000), balance(bob, -1000), balance(charlie, -1000)]

        settlements = compute_settlements(balances)

        assert transfers(settlements) == [("2", "1", 1000), ("3", "1", 1000)]
        assert settlements[0].from_participant == bob
        assert settlements[0].to_participant == alice

    def test_uneven_debts(self, participants):
        alice, bob, charlie = participants[:3]
        balances = [balance(alice, 3000), balance(bob, -1000), balance(charlie, -2000)]

        settlements = compute_settlements(balances)

        assert len(settlements) == 2
        assert sum(s.amount for s in settlements) == 3000
        # Largest debtor settles first
        assert transfers(settlements)[0] == ("3", "1", 2000)

    def test_all_zero(self, participants):
        balances = [balance(p, 0) for p in participants[:3]]

        assert compute_settlements(balances) == []

    def test_empty_input(self):
        assert compute_settlements([]) == []

    def test_two_people(self, participants):
        alice, bob = participants[:2]
        balances = [balance(alice, 500), balance(bob, -500)]

        assert transfers(compute_settlements(balances)) == [("2", "1", 500)]

    def test_single_remaining_balance(self, participants):
        alice, bob, charlie = participants[:3]
        balances = [balance(alice, 1500), balance(bob, 0), balance(charlie, -1500)]

        assert transfers(compute_settlements(balances)) == [("3", "1", 1500)]

    def test_chain_of_partial_transfers(self, participants):
        a, b, c, d, e = participants
        balances = [
            balance(a, 700),
            balance(b, 300),
            balance(c, -400),
            balance(d, -400),
            balance(e, -200),
        ]

        settlements = compute_settlements(balances)

        assert transfers(settlements) == [
            ("3", "1", 400),
            ("4", "1", 300),
            ("4", "2", 100),
            ("5", "2", 200),
        ]

    def test_ties_keep_input_order(self, participants):
        alice, bob, charlie = participants[:3]
        balances = [balance(charlie, -500), balance(bob, -500), balance(alice, 1000)]

        settlements = compute_settlements(balances)

        assert transfers(settlements) == [("3", "1", 500), ("2", "1", 500)]


class TestSettlementProperties:
    """Correctness, bounds and determinism."""

    @pytest.mark.parametrize(
        "nets",
        [
            [2000, -1000, -1000],
            [1, -1, 0, 0, 0],
            [333, 333, 334, -500, -500],
            [12345, -1, -2, -3, -12339],
            [-7, 3, 3, 1, 0],
        ],
    )
    def test_transfers_zero_every_balance(self, participants, nets):
        balances = [balance(p, n) for p, n in zip(participants, nets)]

        settlements = compute_settlements(balances)

        residuals = apply_settlements(balances, settlements)
        assert all(amount == 0 for amount in residuals.values())
        assert sum(s.amount for s in settlements) == sum(max(0, n) for n in nets)

        non_zero = sum(1 for n in nets if n != 0)
        assert len(settlements) <= max(non_zero - 1, 0)
        assert all(s.amount >= 1 for s in settlements)

    def test_deterministic(self, participants):
        balances = [balance(p, n) for p, n in zip(participants, [900, -300, -300, -299, -1])]

        first = compute_settlements(balances)
        second = compute_settlements(balances)

        assert first == second

    def test_input_is_not_mutated(self, participants):
        alice, bob = participants[:2]
        balances = [balance(alice, 500), balance(bob, -500)]

        compute_settlements(balances)

        assert [b.net for b in balances] == [500, -500]


class TestApplySettlements:
    """Replaying transfers."""

    def test_no_settlements_leaves_nets(self, participants):
        alice, bob = participants[:2]
        balances = [balance(alice, 500), balance(bob, -500)]

        assert apply_settlements(balances, []) == {"1": 500, "2": -500}
