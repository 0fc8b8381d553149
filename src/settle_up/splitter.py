"""Split computation: divide one expense into exact integer shares.

Every strategy returns shares that sum to the expense total in minor units,
exactly. A naive ``amount / n`` in floating point does not give that
guarantee; distributing the integer remainder does.
"""

from collections.abc import Sequence
from decimal import ROUND_HALF_UP, Decimal
from typing import assert_never

from .currency import to_decimal, to_minor
from .exceptions import InvalidInputError, SplitMismatchError, ValidationError
from .models import CustomSplit, EqualSplit, PercentageSplit, SplitShare

MAX_AMOUNT = Decimal("10000000")  # major units
PERCENTAGE_TOLERANCE = Decimal("0.01")


def validate_amount(
    amount: Decimal | int | float | str, max_amount: Decimal = MAX_AMOUNT
) -> Decimal:
    """
    Validate an expense amount in major units.

    Zero is allowed (every share is zero).

    Raises:
        ValidationError: If the amount is non-finite, negative or above max_amount
    """
    value = to_decimal(amount)
    if value < 0:
        raise ValidationError(f"Amount must not be negative, got {value}")
    if value > max_amount:
        raise ValidationError(f"Amount {value} exceeds the maximum of {max_amount}")
    return value


def compute_split(
    amount: Decimal | int | float | str,
    strategy: EqualSplit | CustomSplit | PercentageSplit,
    participant_ids: Sequence[str],
    max_amount: Decimal = MAX_AMOUNT,
    percentage_tolerance: Decimal = PERCENTAGE_TOLERANCE,
) -> list[SplitShare]:
    """
    Compute each participant's share of an expense.

    Duplicate ids in participant_ids are distinct slots and each receive
    their own share.

    Args:
        amount: Expense total in major units
        strategy: Equal, custom or percentage split parameters
        participant_ids: Ordered participant ids; order decides who absorbs
                         leftover minor units
        max_amount: Upper bound for the expense total
        percentage_tolerance: Allowed drift of the percentage sum from 100

    Returns:
        One SplitShare per slot, in input order, summing to the total

    Raises:
        ValidationError: On a malformed amount, share or percentage
        InvalidInputError: On an empty participant list or unknown ids
        SplitMismatchError: When custom/percentage input doesn't reconcile
    """
    value = validate_amount(amount, max_amount)
    ids = list(participant_ids)
    if not ids:
        raise InvalidInputError("At least one participant is required to split")

    total = to_minor(value)

    if isinstance(strategy, EqualSplit):
        amounts = _equal_amounts(total, len(ids))
    elif isinstance(strategy, CustomSplit):
        amounts = _custom_amounts(total, strategy.shares, ids)
    elif isinstance(strategy, PercentageSplit):
        amounts = _percentage_amounts(
            total, strategy.percentages, ids, percentage_tolerance
        )
    else:
        assert_never(strategy)

    return [
        SplitShare(participant_id=pid, amount_minor=share)
        for pid, share in zip(ids, amounts, strict=True)
    ]


def distribute_remainder(amounts: list[int], remainder: int, slots: list[int]) -> None:
    """
    Spread a signed remainder across the given slots in order.

    A positive remainder gives every slot the whole-number part of
    remainder / len(slots), and the first slots one more minor unit for what's
    left. A negative remainder is taken back one minor unit at a time, walking
    the slots in order and skipping any slot already at zero, so no amount
    goes negative. Mutates amounts in place.

    Raises:
        ValueError: If the slots don't hold enough to absorb a negative remainder
    """
    if remainder == 0 or not slots:
        return

    if remainder > 0:
        base, extra = divmod(remainder, len(slots))
        for position, index in enumerate(slots):
            amounts[index] += base + (1 if position < extra else 0)
        return

    needed = -remainder
    while needed:
        holders = [index for index in slots if amounts[index] > 0]
        if not holders:
            raise ValueError(f"Slots can't absorb {needed} more minor units")
        for index in holders[:needed]:
            amounts[index] -= 1
        needed -= min(needed, len(holders))


def _equal_amounts(total: int, count: int) -> list[int]:
    base = total // count
    amounts = [base] * count
    distribute_remainder(amounts, total - base * count, list(range(count)))
    return amounts


def _check_known(ids: list[str], referenced: dict[str, Decimal], label: str) -> None:
    known = set(ids)
    unknown = [pid for pid in referenced if pid not in known]
    if unknown:
        raise InvalidInputError(
            f"{label} reference participants not in the split: {', '.join(unknown)}"
        )


def _custom_amounts(total: int, shares: dict[str, Decimal], ids: list[str]) -> list[int]:
    _check_known(ids, shares, "Custom shares")

    shares_minor: dict[str, int] = {}
    for pid, share in shares.items():
        share_minor = to_minor(share)
        if share_minor < 0:
            raise ValidationError(f"Share for {pid} must not be negative, got {share}")
        shares_minor[pid] = share_minor

    amounts = [shares_minor.get(pid, 0) for pid in ids]

    # Both sides are integers, so the match must be exact
    actual = sum(amounts)
    if actual != total:
        raise SplitMismatchError(expected=total, actual=actual)
    return amounts


def _percentage_amounts(
    total: int,
    percentages: dict[str, Decimal],
    ids: list[str],
    tolerance: Decimal,
) -> list[int]:
    _check_known(ids, percentages, "Percentages")

    pcts: dict[str, Decimal] = {}
    for pid, pct in percentages.items():
        value = to_decimal(pct)
        if value < 0 or value > 100:
            raise ValidationError(
                f"Percentage for {pid} must be between 0 and 100, got {value}"
            )
        pcts[pid] = value

    pct_total = sum(pcts.values(), Decimal("0"))
    if abs(pct_total - 100) > tolerance:
        raise SplitMismatchError(
            expected=Decimal("100"),
            actual=pct_total,
            message=f"Percentages total {pct_total}%, expected 100%",
        )

    zero = Decimal("0")
    amounts = [
        int(
            (Decimal(total) * pcts.get(pid, zero) / 100).quantize(
                Decimal("1"), rounding=ROUND_HALF_UP
            )
        )
        for pid in ids
    ]

    # Participants at 0% never absorb rounding residue. Every share is 0 for
    # them, so on overshoot the other slots always hold enough to give back.
    slots = [i for i, pid in enumerate(ids) if pcts.get(pid, zero) > 0]
    distribute_remainder(amounts, total - sum(amounts), slots)
    return amounts
