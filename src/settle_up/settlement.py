"""Greedy debt matching: reduce net balances to a short list of transfers.

Finding the true minimum number of transfers is NP-hard. Matching the
largest debtor against the largest creditor resolves at least one side per
step, so the result never exceeds n - 1 transfers for n non-zero balances.
"""

from collections.abc import Sequence
from dataclasses import dataclass

from .models import Balance, Participant, Settlement

# Remainders below one minor unit count as settled
MIN_TRANSFER = 1


@dataclass
class _OpenPosition:
    """Working copy of a debtor's or creditor's outstanding amount."""

    participant: Participant
    remaining: int


def compute_settlements(balances: Sequence[Balance]) -> list[Settlement]:
    """
    Compute transfers that bring every balance to zero.

    Debtors and creditors are each ordered by magnitude, largest first. Ties
    keep their input order, so identical input always yields identical output.

    Args:
        balances: Net balances in minor units

    Returns:
        Transfers from debtors to creditors; empty when nothing is owed
    """
    debtors = [
        _OpenPosition(b.participant, -b.net) for b in balances if b.net < 0
    ]
    creditors = [
        _OpenPosition(b.participant, b.net) for b in balances if b.net > 0
    ]

    # sort() is stable, which keeps tie-breaks deterministic
    debtors.sort(key=lambda position: position.remaining, reverse=True)
    creditors.sort(key=lambda position: position.remaining, reverse=True)

    settlements: list[Settlement] = []
    i = j = 0

    while i < len(debtors) and j < len(creditors):
        debtor = debtors[i]
        creditor = creditors[j]

        amount = min(debtor.remaining, creditor.remaining)
        if amount >= MIN_TRANSFER:
            settlements.append(
                Settlement(
                    from_participant=debtor.participant,
                    to_participant=creditor.participant,
                    amount=amount,
                )
            )

        debtor.remaining -= amount
        creditor.remaining -= amount

        if debtor.remaining < MIN_TRANSFER:
            i += 1
        if creditor.remaining < MIN_TRANSFER:
            j += 1

    return settlements


def apply_settlements(
    balances: Sequence[Balance], settlements: Sequence[Settlement]
) -> dict[str, int]:
    """
    Replay transfers against balances.

    Returns:
        Remaining net per participant id; all zeros when the transfers are
        complete
    """
    residuals = {b.participant.id: b.net for b in balances}
    for settlement in settlements:
        residuals[settlement.from_participant.id] = (
            residuals.get(settlement.from_participant.id, 0) + settlement.amount
        )
        residuals[settlement.to_participant.id] = (
            residuals.get(settlement.to_participant.id, 0) - settlement.amount
        )
    return residuals
