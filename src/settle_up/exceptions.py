"""Custom exceptions for SettleUp."""

from decimal import Decimal


class SettleUpError(Exception):
    """Base exception for all SettleUp errors."""

    pass


class ConfigurationError(SettleUpError):
    """Raised when configuration is invalid or missing."""

    pass


class ValidationError(SettleUpError):
    """Raised when an amount, percentage or share is malformed or out of range."""

    pass


class InvalidInputError(ValidationError):
    """Raised when input is structurally inconsistent.

    Examples: an empty participant set, a split or payer referencing a
    participant that is not part of the event, or expenses in mixed currencies.
    """

    pass


class SplitMismatchError(SettleUpError):
    """Raised when split shares don't reconcile to the expense total."""

    def __init__(
        self,
        expected: int | Decimal,
        actual: int | Decimal,
        message: str | None = None,
    ):
        self.expected = expected
        self.actual = actual
        super().__init__(
            message
            or f"Split shares total {actual} minor units, expected {expected} "
            f"(difference: {expected - actual})"
        )


class SnapshotLoadError(SettleUpError):
    """Raised when an event snapshot file can't be read or parsed."""

    pass


class SettlementVerificationError(SettleUpError):
    """Raised when computed transfers fail to zero every balance."""

    def __init__(self, residuals: dict[str, int]):
        self.residuals = residuals
        outstanding = ", ".join(f"{pid}: {amount}" for pid, amount in residuals.items())
        super().__init__(f"Settlements left non-zero balances ({outstanding})")
