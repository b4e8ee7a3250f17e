"""Tests for the verification ledger."""

import pytest
from datetime import date
from decimal import Decimal

from ledgerkit.domain.entities import VerificationRow
from ledgerkit.domain.errors import (
    ConflictError,
    ImbalanceError,
    NotFoundError,
    ValidationError,
)
from ledgerkit.domain.ledger import check_balance


def test_append_assigns_sequential_numbers_per_series(ledger_service, make_draft):
    """Test that each series is numbered from 1 independently."""
    first = ledger_service.append(
        make_draft(date(2025, 1, 2), "Första", ("1930", 100, 0), ("3001", 0, 100))
    )
    second = ledger_service.append(
        make_draft(date(2025, 1, 3), "Andra", ("1930", 200, 0), ("3001", 0, 200))
    )
    payroll = ledger_service.append(
        make_draft(date(2025, 1, 25), "Lön", ("7010", 500, 0), ("1930", 0, 500), series="L")
    )

    assert ledger_service.get(first).reference == "A1"
    assert ledger_service.get(second).reference == "A2"
    assert ledger_service.get(payroll).reference == "L1"


def test_append_rejects_imbalance_without_writing(ledger_service, make_draft):
    """Test that an unbalanced verification is rejected and nothing is stored."""
    draft = make_draft(date(2025, 1, 2), "Fel", ("1930", 1000, 0), ("3001", 0, 900))

    with pytest.raises(ImbalanceError) as excinfo:
        ledger_service.append(draft)

    assert excinfo.value.expected == Decimal("1000.00")
    assert excinfo.value.actual == Decimal("900.00")
    assert excinfo.value.difference == Decimal("100.00")
    assert ledger_service.list() == []


def test_imbalance_error_is_validation_error(ledger_service, make_draft):
    """Test that callers catching ValidationError also see imbalances."""
    with pytest.raises(ValidationError):
        ledger_service.append(
            make_draft(date(2025, 1, 2), "Fel", ("1930", 1, 0), ("3001", 0, 2))
        )


def test_append_requires_two_rows(ledger_service, make_draft):
    """Test that a single-row verification is rejected."""
    with pytest.raises(ValidationError, match="at least two rows"):
        ledger_service.append(make_draft(date(2025, 1, 2), "En rad", ("1930", 0, 0)))


@pytest.mark.parametrize(
    "row, message",
    [
        (("193", 100, 0), "four digits"),
        (("1930", -100, 0), "Negative amount"),
        (("1930", 100, 100), "both debit and credit"),
        (("1930", "NaN", 0), "not a number"),
    ],
)
def test_append_rejects_invalid_rows(ledger_service, make_draft, row, message):
    """Test row-level validation."""
    draft = make_draft(date(2025, 1, 2), "Ogiltig", row, ("3001", 0, 100))
    with pytest.raises(ValidationError, match=message):
        ledger_service.append(draft)
    assert ledger_service.list() == []


def test_append_rejects_invalid_series(ledger_service, make_draft):
    """Test that a series must be letters."""
    draft = make_draft(date(2025, 1, 2), "Serie", ("1930", 1, 0), ("3001", 0, 1), series="1")
    with pytest.raises(ValidationError, match="series"):
        ledger_service.append(draft)


def test_check_balance_compares_in_ore():
    """Test that sub-öre differences do not unbalance a verification."""
    rows = [
        VerificationRow(account="1930", debit=Decimal("100.001")),
        VerificationRow(account="3001", credit=Decimal("100.004")),
    ]
    debit, credit = check_balance(rows)
    assert debit == credit == Decimal("100.00")


def test_get_missing_verification_raises(ledger_service):
    """Test that a missing verification raises NotFoundError."""
    with pytest.raises(NotFoundError, match="Verification 999 not found"):
        ledger_service.get(999)


def test_list_uses_half_open_range(ledger_service, sample_verifications):
    """Test that list includes the start date and excludes the end date."""
    verifications = ledger_service.list(start_date=date(2025, 1, 10), end_date=date(2025, 1, 20))

    assert [v.description for v in verifications] == ["Försäljning", "Hyra januari"]


def test_accepted_verifications_balance(ledger_service, sample_verifications):
    """Test the balance invariant over everything stored."""
    for verification in ledger_service.list():
        assert verification.is_balanced
        assert verification.total_debit == verification.total_credit


def test_reverse_books_offsetting_verification(ledger_service, sample_verifications):
    """Test that a reversal swaps debit and credit and links to the original."""
    rent_id = sample_verifications["rent"]
    reversal_id = ledger_service.reverse(rent_id)

    original = ledger_service.get(rent_id)
    reversal = ledger_service.get(reversal_id)

    assert reversal.reverses_id == rent_id
    assert reversal.date == original.date
    assert reversal.series == original.series
    assert reversal.description.startswith(f"Rättelse av {original.reference}")
    assert [(r.account, r.debit, r.credit) for r in reversal.rows] == [
        (r.account, r.credit, r.debit) for r in original.rows
    ]


def test_reverse_with_custom_date_and_description(ledger_service, sample_verifications):
    """Test reversal options."""
    reversal_id = ledger_service.reverse(
        sample_verifications["sale"], on_date=date(2025, 2, 1), description="Kreditfaktura"
    )
    reversal = ledger_service.get(reversal_id)

    assert reversal.date == date(2025, 2, 1)
    assert reversal.description == "Kreditfaktura"


def test_reverse_twice_is_rejected(ledger_service, sample_verifications):
    """Test that a verification can be reversed only once."""
    reversal_id = ledger_service.reverse(sample_verifications["rent"])

    with pytest.raises(ConflictError, match=f"reversed by verification {reversal_id}"):
        ledger_service.reverse(sample_verifications["rent"])


def test_reversal_cannot_be_reversed(ledger_service, sample_verifications):
    """Test that a reversing verification cannot itself be reversed."""
    reversal_id = ledger_service.reverse(sample_verifications["rent"])

    with pytest.raises(ConflictError, match="is a reversal"):
        ledger_service.reverse(reversal_id)


def test_reverse_missing_verification(ledger_service):
    """Test reversing a verification that does not exist."""
    with pytest.raises(NotFoundError):
        ledger_service.reverse(42)
