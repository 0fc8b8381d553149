"""Pydantic domain models for SettleUp."""

from datetime import datetime
from decimal import Decimal
from enum import StrEnum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator

from .currency import to_major, to_minor

# ============================================================================
# Event Models
# ============================================================================


class Participant(BaseModel):
    """A member of an event. The id never changes, even if renamed."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    event_id: str


class EventInfo(BaseModel):
    """Descriptive event metadata used by reports."""

    id: str
    name: str
    date: datetime | None = None
    location: str | None = None
    description: str | None = None
    currency: str = "JPY"
    url: str | None = None


# ============================================================================
# Split Strategy Models
# ============================================================================


class SplitStrategy(StrEnum):
    """How an expense is divided among participants."""

    EQUAL = "equal"
    CUSTOM = "custom"
    PERCENTAGE = "percentage"


class EqualSplit(BaseModel):
    """Divide the amount evenly; leftover minor units go to the first slots."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["equal"] = "equal"


class CustomSplit(BaseModel):
    """Explicit per-participant amounts in major units."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["custom"] = "custom"
    shares: dict[str, Decimal]

    @classmethod
    def from_minor(cls, shares: dict[str, int]) -> "CustomSplit":
        """Build a custom split from minor-unit amounts."""
        return cls(
            shares={pid: to_major(amount) for pid, amount in shares.items()}
        )


class PercentageSplit(BaseModel):
    """Per-participant percentages (0-100) that together make 100."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["percentage"] = "percentage"
    percentages: dict[str, Decimal]


class SplitShare(BaseModel):
    """One participant's share of one expense."""

    model_config = ConfigDict(frozen=True)

    participant_id: str
    amount_minor: int


# ============================================================================
# Expense Models
# ============================================================================


class Expense(BaseModel):
    """A recorded group expense with a single payer."""

    id: str
    event_id: str
    payer_id: str
    amount: Decimal = Field(ge=0)
    currency: str = "JPY"
    split_strategy: SplitStrategy = SplitStrategy.EQUAL
    custom_shares: dict[str, Decimal] | None = None  # major units
    percentages: dict[str, Decimal] | None = None
    category: str = "other"
    description: str | None = None
    created_at: datetime = Field(default_factory=datetime.now)

    @field_validator("split_strategy", mode="before")
    @classmethod
    def _legacy_strategy_tag(cls, value: object) -> object:
        # Older records tag equal splits as "even"
        if isinstance(value, str) and value.lower() == "even":
            return SplitStrategy.EQUAL
        return value

    @field_validator("amount")
    @classmethod
    def _amount_is_finite(cls, value: Decimal) -> Decimal:
        if not value.is_finite():
            raise ValueError("amount must be finite")
        return value

    @property
    def amount_minor(self) -> int:
        """Amount in integer minor units."""
        return to_minor(self.amount)

    def split_params(self) -> EqualSplit | CustomSplit | PercentageSplit | None:
        """
        Strategy parameters embedded in this expense.

        Returns:
            The split parameters, or None when the strategy relies on
            persisted ExpenseSplit rows (custom/percentage without embedded
            data; an empty mapping counts as none)
        """
        if self.split_strategy is SplitStrategy.EQUAL:
            return EqualSplit()
        if self.split_strategy is SplitStrategy.CUSTOM:
            if not self.custom_shares:
                return None
            return CustomSplit(shares=self.custom_shares)
        if not self.percentages:
            return None
        return PercentageSplit(percentages=self.percentages)


class ExpenseSplit(BaseModel):
    """A persisted share row: this participant owes this much of this expense."""

    expense_id: str
    participant_id: str
    amount: Decimal  # major units
    is_settled: bool = False

    @property
    def amount_minor(self) -> int:
        """Amount in integer minor units."""
        return to_minor(self.amount)


class EventSnapshot(BaseModel):
    """Snapshot of everything the engine needs for one event."""

    event: EventInfo
    participants: list[Participant]
    expenses: list[Expense] = Field(default_factory=list)
    expense_splits: list[ExpenseSplit] = Field(default_factory=list)


# ============================================================================
# Result Models
# ============================================================================


class Balance(BaseModel):
    """A participant's position across all expenses (minor units)."""

    model_config = ConfigDict(frozen=True)

    participant: Participant
    paid: int = 0
    should_pay: int = 0

    @computed_field  # type: ignore[prop-decorator]
    @property
    def net(self) -> int:
        """Paid minus owed: positive = should receive, negative = should pay."""
        return self.paid - self.should_pay


class Settlement(BaseModel):
    """A single directed transfer from a debtor to a creditor."""

    model_config = ConfigDict(frozen=True)

    from_participant: Participant
    to_participant: Participant
    amount: int = Field(gt=0)  # minor units
