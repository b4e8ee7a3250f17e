"""Verification ledger domain service."""

from datetime import date
from decimal import Decimal
from typing import Iterable, Optional

from ledgerkit.config.logging import get_logger
from ledgerkit.database.base import Database
from ledgerkit.domain.entities import (
    ZERO,
    Verification,
    VerificationDraft,
    VerificationRow,
)
from ledgerkit.domain.errors import (
    ConflictError,
    ImbalanceError,
    NotFoundError,
    ValidationError,
    verification_already_reversed,
    verification_not_found,
)
from ledgerkit.utils.amount_parser import round_ore

logger = get_logger(__name__)

DEFAULT_SERIES = "A"


def validate_row(row: VerificationRow) -> None:
    """Validate a single verification row.

    Raises:
        ValidationError: If the account is not four digits, an amount is not
            finite or is negative, or both sides carry an amount
    """
    if not (len(row.account) == 4 and row.account.isdigit()):
        raise ValidationError(f"Account number must have four digits: '{row.account}'")
    if not (row.debit.is_finite() and row.credit.is_finite()):
        raise ValidationError(f"Amount on account {row.account} is not a number")
    if row.debit < 0 or row.credit < 0:
        raise ValidationError(f"Negative amount on account {row.account}")
    if row.debit != 0 and row.credit != 0:
        raise ValidationError(
            f"Row on account {row.account} has both debit and credit; split it into two rows"
        )


def check_balance(rows: Iterable[VerificationRow]) -> tuple[Decimal, Decimal]:
    """Validate rows and the balance invariant.

    Sums are compared in öre, so sub-öre noise never makes a verification
    unbalanced.

    Args:
        rows: Verification rows

    Returns:
        Tuple of (total debit, total credit)

    Raises:
        ValidationError: If there are fewer than two rows or a row is invalid
        ImbalanceError: If total debit differs from total credit
    """
    rows = tuple(rows)
    if len(rows) < 2:
        raise ValidationError("A verification needs at least two rows")
    for row in rows:
        validate_row(row)

    total_debit = round_ore(sum((row.debit for row in rows), ZERO))
    total_credit = round_ore(sum((row.credit for row in rows), ZERO))
    if total_debit != total_credit:
        raise ImbalanceError(expected=total_debit, actual=total_credit)
    return total_debit, total_credit


class LedgerService:
    """Append-only journal of verifications."""

    def __init__(self, db: Database):
        """Initialize ledger service.

        Args:
            db: Database instance
        """
        self.db = db

    def append(self, draft: VerificationDraft) -> int:
        """Validate and book a verification.

        Nothing is written unless every check passes. The store assigns the
        next number in the draft's series together with the insert.

        Args:
            draft: Verification to book

        Returns:
            Verification ID

        Raises:
            ValidationError: If the rows are invalid
            ImbalanceError: If the rows do not balance
        """
        if not draft.series or not draft.series.isalpha():
            raise ValidationError(f"Invalid verification series '{draft.series}'")

        try:
            total, _ = check_balance(draft.rows)
        except ValidationError as e:
            logger.warning(
                "verification_rejected",
                date=draft.date.isoformat(),
                series=draft.series,
                error=str(e),
            )
            raise

        verification_id = self.db.create_verification(
            series=draft.series.upper(),
            date=draft.date,
            description=draft.description,
            rows=draft.rows,
            reverses_id=draft.reverses_id,
        )
        logger.info(
            "verification_appended",
            verification_id=verification_id,
            series=draft.series.upper(),
            date=draft.date.isoformat(),
            total=str(total),
        )
        return verification_id

    def get(self, verification_id: int) -> Verification:
        """Get a verification by ID.

        Raises:
            NotFoundError: If the verification doesn't exist
        """
        verification = self.db.get_verification(verification_id)
        if verification is None:
            raise NotFoundError(verification_not_found(verification_id))
        return verification

    def list(
        self,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> list[Verification]:
        """List verifications dated in [start_date, end_date), by date then ID."""
        return self.db.list_verifications(start_date=start_date, end_date=end_date)

    def reverse(
        self,
        verification_id: int,
        on_date: Optional[date] = None,
        description: Optional[str] = None,
    ) -> int:
        """Book an offsetting verification for an earlier one.

        Booked verifications are never edited. The correction is a new
        verification in the same series with debit and credit swapped on
        every row, linked back through ``reverses_id``.

        Args:
            verification_id: Verification to reverse
            on_date: Booking date of the reversal, defaults to the original date
            description: Optional description, defaults to "Rättelse av <ref>"

        Returns:
            ID of the reversing verification

        Raises:
            NotFoundError: If the verification doesn't exist
            ConflictError: If it is already reversed or is itself a reversal
        """
        original = self.get(verification_id)
        if original.reverses_id is not None:
            raise ConflictError(
                f"Verification {verification_id} is a reversal and cannot be reversed"
            )

        existing = self.db.find_reversal(verification_id)
        if existing is not None:
            raise ConflictError(verification_already_reversed(verification_id, existing.id))

        rows = tuple(
            VerificationRow(
                account=row.account,
                debit=row.credit,
                credit=row.debit,
                description=row.description,
            )
            for row in original.rows
        )
        draft = VerificationDraft(
            date=on_date or original.date,
            description=description or f"Rättelse av {original.reference}: {original.description}",
            rows=rows,
            series=original.series,
            reverses_id=original.id,
        )
        reversal_id = self.append(draft)
        logger.info(
            "verification_reversed",
            verification_id=verification_id,
            reversal_id=reversal_id,
        )
        return reversal_id
