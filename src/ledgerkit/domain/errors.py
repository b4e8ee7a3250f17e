"""Shared domain error messages and error types."""

from decimal import Decimal


class DomainError(ValueError):
    """Base class for domain-level errors.

    Subclasses provide semantic categories while preserving ValueError
    compatibility for existing error handling.
    """


class ValidationError(DomainError):
    """Invalid input or failed validation in domain logic."""


class NotFoundError(DomainError):
    """Requested domain entity or period does not exist."""


class ConflictError(DomainError):
    """Domain conflict, such as a second reversal of the same verification."""


class ImbalanceError(ValidationError):
    """Verification rows do not balance.

    Attributes:
        expected: Sum of the debit side
        actual: Sum of the credit side
    """

    def __init__(self, expected: Decimal, actual: Decimal):
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Verification does not balance: debit {expected:.2f} != credit {actual:.2f} "
            f"(difference {self.difference:.2f})"
        )

    @property
    def difference(self) -> Decimal:
        return self.expected - self.actual


class AlreadySubmittedError(ConflictError):
    """A report for the period has already been submitted."""

    def __init__(self, period_id: str):
        self.period_id = period_id
        super().__init__(f"Period {period_id} has already been submitted")


def verification_not_found(verification_id: int) -> str:
    """Return message for missing verification."""
    return f"Verification {verification_id} not found"


def period_not_found(period_id: str) -> str:
    """Return message for missing period."""
    return f"Period '{period_id}' not found"


def employee_not_found(employee_id: int) -> str:
    """Return message for missing employee."""
    return f"Employee {employee_id} not found"


def account_not_found(account: str) -> str:
    """Return message for an account missing from the chart."""
    return f"Account '{account}' not found in chart of accounts"


def verification_already_reversed(verification_id: int, reversal_id: int) -> str:
    """Return message when a verification already has an offsetting entry."""
    return (
        f"Verification {verification_id} has already been reversed "
        f"by verification {reversal_id}"
    )
