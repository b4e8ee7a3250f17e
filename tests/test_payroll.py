"""Tests for payroll calculation and booking."""

import pytest
from dataclasses import replace
from datetime import date
from decimal import Decimal

from ledgerkit.domain.entities import AdjustmentKind, PayAdjustment
from ledgerkit.domain.errors import ConflictError, NotFoundError, ValidationError
from ledgerkit.domain.payroll import (
    PAYROLL_SERIES,
    SENIOR_CONTRIBUTION_RATE,
    STANDARD_CONTRIBUTION_RATE,
    compute_payslip,
    contribution_rate,
    payslip_to_verification,
)


def test_basic_payslip(sample_employee):
    """Test tax, contributions and net pay on the base salary."""
    payslip = compute_payslip(sample_employee, on_date=date(2025, 1, 25))

    assert payslip.gross_salary == Decimal("30000")
    assert payslip.tax == Decimal("9000")
    assert payslip.contribution_rate == STANDARD_CONTRIBUTION_RATE
    assert payslip.employer_contribution == Decimal("9426")
    assert payslip.pension == Decimal("1350")
    assert payslip.net_pay == Decimal("21000")
    assert payslip.total_cost == Decimal("40776")


def test_sick_leave_deducts_waiting_day_and_sick_pay(sample_employee):
    """Test two sick days: one waiting day at full rate, one day at 20%."""
    sick = PayAdjustment(
        employee_id=sample_employee.id, kind=AdjustmentKind.SICK, quantity=Decimal("2")
    )

    payslip = compute_payslip(sample_employee, [sick], on_date=date(2025, 2, 25))

    amounts = {line.label: line.amount for line in payslip.lines}
    assert amounts["Karensavdrag"] == Decimal("-1429")
    assert amounts["Sjukavdrag 1 dagar"] == Decimal("-286")
    assert payslip.gross_salary == Decimal("28285")


def test_overtime_bonus_and_deduction(sample_employee):
    """Test additions and deductions to gross pay."""
    adjustments = [
        PayAdjustment(sample_employee.id, AdjustmentKind.OVERTIME, quantity=Decimal("10")),
        PayAdjustment(sample_employee.id, AdjustmentKind.BONUS, amount=Decimal("2000")),
        PayAdjustment(sample_employee.id, AdjustmentKind.DEDUCTION, amount=Decimal("500")),
    ]

    payslip = compute_payslip(sample_employee, adjustments, on_date=date(2025, 3, 25))

    # 30000 / 168 * 1.5 * 10 = 2678.57
    assert payslip.gross_salary == Decimal("30000") + Decimal("2679") + Decimal("2000") - Decimal("500")


def test_other_employees_adjustments_are_ignored(sample_employee):
    """Test that adjustments are matched by employee."""
    bonus = PayAdjustment(sample_employee.id + 1, AdjustmentKind.BONUS, amount=Decimal("5000"))

    payslip = compute_payslip(sample_employee, [bonus], on_date=date(2025, 3, 25))

    assert payslip.gross_salary == Decimal("30000")


def test_senior_contribution_rate(sample_employee):
    """Test the reduced employer contribution from age 66."""
    senior = replace(sample_employee, personal_number="19580101-1234")

    assert contribution_rate(senior, date(2025, 1, 25)) == SENIOR_CONTRIBUTION_RATE
    assert contribution_rate(senior, date(2023, 1, 25)) == STANDARD_CONTRIBUTION_RATE
    assert compute_payslip(senior, on_date=date(2025, 1, 25)).employer_contribution == Decimal("3063")


def test_invalid_adjustments(sample_employee):
    """Test rejected adjustment values."""
    with pytest.raises(ValidationError, match="at least one day"):
        compute_payslip(
            sample_employee,
            [PayAdjustment(sample_employee.id, AdjustmentKind.SICK, quantity=Decimal("0"))],
        )
    with pytest.raises(ValidationError, match="Gross salary"):
        compute_payslip(
            sample_employee,
            [PayAdjustment(sample_employee.id, AdjustmentKind.DEDUCTION, amount=Decimal("40000"))],
        )


def test_payslip_verification_balances(sample_employee):
    """Test that the payroll verification balances and uses series L."""
    payslip = compute_payslip(
        replace(sample_employee, union_fee=Decimal("300")), on_date=date(2025, 1, 25)
    )

    draft = payslip_to_verification(payslip)
    debit = sum(row.debit for row in draft.rows)
    credit = sum(row.credit for row in draft.rows)

    assert draft.series == PAYROLL_SERIES
    assert debit == credit
    rows = {row.account: row for row in draft.rows}
    assert rows["7010"].debit == Decimal("30000")
    assert rows["2710"].credit == Decimal("9000")
    assert rows["2790"].credit == Decimal("300")
    assert rows["1930"].credit == Decimal("20700")


def test_payslip_verification_skips_zero_rows(sample_employee):
    """Test that empty rows are left out of the verification."""
    draft = payslip_to_verification(compute_payslip(sample_employee, on_date=date(2025, 1, 25)))

    assert "2790" not in {row.account for row in draft.rows}


def test_run_payroll_books_verifications(payroll_service, ledger_service, sample_employee):
    """Test that a pay run books one verification per payslip and stores the payslip."""
    payslips = payroll_service.run_payroll(on_date=date(2025, 1, 25))

    assert len(payslips) == 1
    verification = ledger_service.get(payslips[0].verification_id)
    assert verification.reference == "L1"
    assert verification.is_balanced
    assert verification.date == date(2025, 1, 25)

    stored = payroll_service.list_payslips(employee_id=sample_employee.id)
    assert len(stored) == 1
    assert stored[0].gross_salary == Decimal("30000")
    assert stored[0].verification_id == payslips[0].verification_id


def test_run_payroll_rejects_adjustment_for_unpaid_employee(payroll_service, ledger_service, sample_employee):
    """Test that nothing is booked when an adjustment names someone outside the run."""
    bonus = PayAdjustment(sample_employee.id + 10, AdjustmentKind.BONUS, amount=Decimal("100"))

    with pytest.raises(ValidationError, match="not in this run"):
        payroll_service.run_payroll(adjustments=[bonus], on_date=date(2025, 1, 25))

    assert ledger_service.list() == []


def test_run_payroll_unknown_employee(payroll_service):
    """Test paying an employee that does not exist."""
    with pytest.raises(NotFoundError, match="Employee 99 not found"):
        payroll_service.run_payroll(employee_ids=[99])


def test_create_employee_validation(payroll_service, sample_employee):
    """Test employee input validation and duplicate personal numbers."""
    with pytest.raises(ValidationError, match="Personal number"):
        payroll_service.create_employee("Bo", "850615-1234", Decimal("30000"), Decimal("0.3"))
    with pytest.raises(ValidationError, match="Tax rate"):
        payroll_service.create_employee("Bo", "19850615-9999", Decimal("30000"), Decimal("1.2"))
    with pytest.raises(ConflictError, match="already exists"):
        payroll_service.create_employee(
            "Anna Kopia", sample_employee.personal_number, Decimal("30000"), Decimal("0.3")
        )
