"""Balance aggregation across an event's full expense history."""

from collections import defaultdict
from collections.abc import Sequence
from decimal import Decimal

from .exceptions import InvalidInputError, SplitMismatchError
from .models import (
    Balance,
    CustomSplit,
    EqualSplit,
    Expense,
    ExpenseSplit,
    Participant,
    PercentageSplit,
    SplitShare,
)
from .splitter import MAX_AMOUNT, compute_split, validate_amount


def resolve_expense_splits(
    expense: Expense,
    participants: Sequence[Participant],
    persisted_splits: Sequence[ExpenseSplit] = (),
    max_amount: Decimal = MAX_AMOUNT,
) -> list[SplitShare]:
    """
    Resolve who owes what for one expense.

    Priority:
    1. Custom shares or percentages embedded in the expense
    2. Persisted ExpenseSplit rows recorded for the expense
    3. Equal split across all current participants

    Args:
        expense: The expense to resolve
        participants: All event participants, in display order
        persisted_splits: ExpenseSplit rows belonging to this expense
        max_amount: Upper bound for the expense total

    Returns:
        Shares summing exactly to the expense amount in minor units

    Raises:
        SplitMismatchError: If embedded or persisted shares don't add up
    """
    participant_ids = [p.id for p in participants]
    params = expense.split_params()

    if isinstance(params, CustomSplit):
        # Embedded custom shares name their own participants
        return compute_split(
            expense.amount, params, list(params.shares), max_amount=max_amount
        )

    if isinstance(params, PercentageSplit):
        return compute_split(
            expense.amount, params, participant_ids, max_amount=max_amount
        )

    if persisted_splits:
        shares = [
            SplitShare(participant_id=row.participant_id, amount_minor=row.amount_minor)
            for row in persisted_splits
        ]
        actual = sum(share.amount_minor for share in shares)
        if actual != expense.amount_minor:
            raise SplitMismatchError(
                expected=expense.amount_minor,
                actual=actual,
                message=f"Stored splits for expense {expense.id} total {actual} "
                f"minor units, expected {expense.amount_minor}",
            )
        return shares

    return compute_split(
        expense.amount, EqualSplit(), participant_ids, max_amount=max_amount
    )


def aggregate_balances(
    participants: Sequence[Participant],
    expenses: Sequence[Expense],
    expense_splits: Sequence[ExpenseSplit] | None = None,
    max_amount: Decimal = MAX_AMOUNT,
) -> list[Balance]:
    """
    Compute every participant's net balance (paid minus owed).

    Because each expense's shares sum to its own amount, the nets always sum
    to zero.

    Args:
        participants: Event participants; output follows this order
        expenses: All expenses recorded for the event
        expense_splits: Persisted split rows, for any expense
        max_amount: Upper bound for a single expense

    Returns:
        One Balance per participant, in minor units

    Raises:
        InvalidInputError: If an expense references an unlisted participant,
                           or expenses span more than one currency
        SplitMismatchError: If an expense's shares don't add up to its amount
    """
    if not expenses:
        return [Balance(participant=p) for p in participants]

    currencies = sorted({expense.currency for expense in expenses})
    if len(currencies) > 1:
        raise InvalidInputError(
            f"Expenses span multiple currencies ({', '.join(currencies)}); "
            f"balances can only be netted within one currency"
        )

    if not participants:
        raise InvalidInputError("Expenses were supplied without any participants")

    splits_by_expense: dict[str, list[ExpenseSplit]] = defaultdict(list)
    for row in expense_splits or ():
        splits_by_expense[row.expense_id].append(row)

    paid = {p.id: 0 for p in participants}
    owed = {p.id: 0 for p in participants}

    for expense in expenses:
        # Stored-row expenses never reach compute_split, so check the limit here
        validate_amount(expense.amount, max_amount)
        if expense.payer_id not in paid:
            raise InvalidInputError(
                f"Expense {expense.id} was paid by unknown participant "
                f"{expense.payer_id}"
            )

        shares = resolve_expense_splits(
            expense,
            participants,
            splits_by_expense.get(expense.id, ()),
            max_amount=max_amount,
        )

        paid[expense.payer_id] += expense.amount_minor
        for share in shares:
            if share.participant_id not in owed:
                raise InvalidInputError(
                    f"Expense {expense.id} has a split for unknown participant "
                    f"{share.participant_id}"
                )
            owed[share.participant_id] += share.amount_minor

    return [
        Balance(participant=p, paid=paid[p.id], should_pay=owed[p.id])
        for p in participants
    ]
