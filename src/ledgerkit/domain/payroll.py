"""Payroll net-pay calculation and booking."""

from dataclasses import replace
from datetime import date
from decimal import Decimal
from typing import Iterable, Optional

from ledgerkit.config.logging import get_logger
from ledgerkit.database.base import Database
from ledgerkit.domain.entities import (
    ZERO,
    AdjustmentKind,
    Employee,
    PayAdjustment,
    Payslip,
    PayslipLine,
    VerificationDraft,
    VerificationRow,
)
from ledgerkit.domain.errors import NotFoundError, ValidationError, employee_not_found
from ledgerkit.domain.ledger import LedgerService
from ledgerkit.utils.amount_parser import round_krona

logger = get_logger(__name__)

PAYROLL_SERIES = "L"

WORKING_DAYS_PER_MONTH = Decimal("21")
WORKING_HOURS_PER_MONTH = Decimal("168")
SICK_PAY_DEDUCTION = Decimal("0.20")
OVERTIME_FACTOR = Decimal("1.5")

STANDARD_CONTRIBUTION_RATE = Decimal("0.3142")
SENIOR_CONTRIBUTION_RATE = Decimal("0.1021")
SENIOR_AGE = 66

# BAS accounts used by the payroll verification
SALARY_ACCOUNT = "7010"
CONTRIBUTION_COST_ACCOUNT = "7510"
PENSION_COST_ACCOUNT = "7410"
TAX_LIABILITY_ACCOUNT = "2710"
CONTRIBUTION_LIABILITY_ACCOUNT = "2730"
PENSION_LIABILITY_ACCOUNT = "2740"
OTHER_DEDUCTIONS_ACCOUNT = "2790"
BANK_ACCOUNT = "1930"


def contribution_rate(employee: Employee, on_date: date) -> Decimal:
    """Employer contribution rate: the reduced senior rate from age 66."""
    age = on_date.year - employee.birth_year
    return SENIOR_CONTRIBUTION_RATE if age >= SENIOR_AGE else STANDARD_CONTRIBUTION_RATE


def _adjustment_lines(employee: Employee, adjustment: PayAdjustment) -> list[PayslipLine]:
    daily_rate = employee.monthly_salary / WORKING_DAYS_PER_MONTH
    hourly_rate = employee.monthly_salary / WORKING_HOURS_PER_MONTH

    if adjustment.kind == AdjustmentKind.SICK:
        days = adjustment.quantity
        if days < 1:
            raise ValidationError("Sick leave must cover at least one day")
        lines = [PayslipLine("Karensavdrag", -round_krona(daily_rate))]
        paid_days = days - 1
        if paid_days > 0:
            lines.append(
                PayslipLine(
                    f"Sjukavdrag {paid_days} dagar",
                    -round_krona(daily_rate * paid_days * SICK_PAY_DEDUCTION),
                )
            )
        return lines

    if adjustment.kind == AdjustmentKind.OVERTIME:
        if adjustment.quantity <= 0:
            raise ValidationError("Overtime must be a positive number of hours")
        return [
            PayslipLine(
                f"Övertid {adjustment.quantity} h",
                round_krona(adjustment.quantity * hourly_rate * OVERTIME_FACTOR),
            )
        ]

    if adjustment.amount < 0:
        raise ValidationError("Bonus and deduction amounts must not be negative")
    if adjustment.kind == AdjustmentKind.BONUS:
        return [PayslipLine("Bonus", round_krona(adjustment.amount))]
    return [PayslipLine("Avdrag", -round_krona(adjustment.amount))]


def compute_payslip(
    employee: Employee,
    adjustments: Iterable[PayAdjustment] = (),
    on_date: Optional[date] = None,
) -> Payslip:
    """Compute a payslip.

    Gross pay is the monthly salary less deductions plus additions. Sick
    leave deducts one waiting day at the full daily rate (salary / 21) and
    20% of the daily rate for each further day. Overtime pays 1.5 times the
    hourly rate (salary / 168). Tax, employer contribution and pension are
    computed on gross pay; every amount is rounded to whole kronor, half-up.

    Args:
        employee: Employee being paid
        adjustments: Adjustments for this pay run; other employees' are ignored
        on_date: Pay date, defaults to today

    Returns:
        Payslip

    Raises:
        ValidationError: If an adjustment is invalid or pay would be negative
    """
    on_date = on_date or date.today()
    base = round_krona(employee.monthly_salary)
    lines = [PayslipLine("Grundlön", base)]
    for adjustment in adjustments:
        if adjustment.employee_id != employee.id:
            continue
        lines.extend(_adjustment_lines(employee, adjustment))

    gross = sum((line.amount for line in lines), ZERO)
    if gross <= 0:
        raise ValidationError(f"Gross salary for {employee.name} would be {gross}")

    rate = contribution_rate(employee, on_date)
    tax = round_krona(gross * employee.tax_rate)
    employer_contribution = round_krona(gross * rate)
    pension = round_krona(gross * employee.pension_rate)
    union_fee = round_krona(employee.union_fee)
    fund_fee = round_krona(employee.unemployment_fund_fee)
    net = gross - tax - union_fee - fund_fee
    if net < 0:
        raise ValidationError(f"Net pay for {employee.name} would be negative ({net})")

    return Payslip(
        employee_id=employee.id,
        employee_name=employee.name,
        date=on_date,
        base_salary=base,
        gross_salary=gross,
        tax=tax,
        employer_contribution=employer_contribution,
        contribution_rate=rate,
        pension=pension,
        union_fee=union_fee,
        unemployment_fund_fee=fund_fee,
        net_pay=net,
        lines=tuple(lines),
    )


def payslip_to_verification(payslip: Payslip) -> VerificationDraft:
    """Build the balanced payroll verification (series L) for a payslip."""
    fees = payslip.union_fee + payslip.unemployment_fund_fee
    candidates = (
        VerificationRow(SALARY_ACCOUNT, debit=payslip.gross_salary, description="Bruttolön"),
        VerificationRow(
            CONTRIBUTION_COST_ACCOUNT,
            debit=payslip.employer_contribution,
            description="Arbetsgivaravgifter",
        ),
        VerificationRow(PENSION_COST_ACCOUNT, debit=payslip.pension, description="Pension"),
        VerificationRow(TAX_LIABILITY_ACCOUNT, credit=payslip.tax, description="Personalskatt"),
        VerificationRow(
            CONTRIBUTION_LIABILITY_ACCOUNT,
            credit=payslip.employer_contribution,
            description="Arbetsgivaravgifter",
        ),
        VerificationRow(PENSION_LIABILITY_ACCOUNT, credit=payslip.pension, description="Pension"),
        VerificationRow(OTHER_DEDUCTIONS_ACCOUNT, credit=fees, description="Fackavgift och a-kassa"),
        VerificationRow(BANK_ACCOUNT, credit=payslip.net_pay, description="Nettolön"),
    )
    rows = tuple(row for row in candidates if row.debit != 0 or row.credit != 0)
    return VerificationDraft(
        date=payslip.date,
        description=f"Lön {payslip.employee_name} {payslip.date:%Y-%m}",
        rows=rows,
        series=PAYROLL_SERIES,
    )


def _validate_personal_number(personal_number: str) -> None:
    digits = personal_number.replace("-", "")
    if not (digits.isdigit() and len(digits) == 12):
        raise ValidationError(
            f"Personal number must be in the form YYYYMMDD-XXXX, got '{personal_number}'"
        )


class PayrollService:
    """Service for employees and payroll runs."""

    def __init__(self, db: Database):
        """Initialize payroll service.

        Args:
            db: Database instance
        """
        self.db = db
        self.ledger = LedgerService(db)

    def create_employee(
        self,
        name: str,
        personal_number: str,
        monthly_salary: Decimal,
        tax_rate: Decimal,
        union_fee: Decimal = ZERO,
        unemployment_fund_fee: Decimal = ZERO,
        pension_rate: Decimal = Decimal("0.045"),
    ) -> int:
        """Create an employee.

        Args:
            name: Full name
            personal_number: Personal identity number, YYYYMMDD-XXXX
            monthly_salary: Monthly base salary
            tax_rate: Withholding tax rate, e.g. 0.30
            union_fee: Monthly union fee withheld from net pay
            unemployment_fund_fee: Monthly unemployment fund fee withheld from net pay
            pension_rate: Occupational pension rate

        Returns:
            Employee ID

        Raises:
            ValidationError: If any value is out of range
        """
        if not name.strip():
            raise ValidationError("Employee name must not be empty")
        _validate_personal_number(personal_number)
        if monthly_salary <= 0:
            raise ValidationError("Monthly salary must be positive")
        for label, rate in (("Tax rate", tax_rate), ("Pension rate", pension_rate)):
            if not ZERO <= rate < 1:
                raise ValidationError(f"{label} must be between 0 and 1, got {rate}")
        if union_fee < 0 or unemployment_fund_fee < 0:
            raise ValidationError("Fees must not be negative")

        return self.db.create_employee(
            name=name.strip(),
            personal_number=personal_number,
            monthly_salary=monthly_salary,
            tax_rate=tax_rate,
            union_fee=union_fee,
            unemployment_fund_fee=unemployment_fund_fee,
            pension_rate=pension_rate,
        )

    def get_employee(self, employee_id: int) -> Employee:
        """Get employee by ID.

        Raises:
            NotFoundError: If the employee doesn't exist
        """
        employee = self.db.get_employee(employee_id)
        if employee is None:
            raise NotFoundError(employee_not_found(employee_id))
        return employee

    def list_employees(self, active_only: bool = True) -> list[Employee]:
        """List employees."""
        return self.db.list_employees(active_only=active_only)

    def run_payroll(
        self,
        employee_ids: Optional[Iterable[int]] = None,
        adjustments: Iterable[PayAdjustment] = (),
        on_date: Optional[date] = None,
    ) -> list[Payslip]:
        """Pay employees and book one verification per payslip.

        Every payslip is computed before anything is booked, so an invalid
        adjustment leaves the ledger untouched.

        Args:
            employee_ids: Employees to pay, defaults to all active employees
            adjustments: Adjustments for this run
            on_date: Pay date, defaults to today

        Returns:
            Booked payslips carrying their verification IDs

        Raises:
            NotFoundError: If an employee doesn't exist
            ValidationError: If a payslip cannot be computed
        """
        on_date = on_date or date.today()
        adjustments = tuple(adjustments)
        if employee_ids is None:
            employees = self.list_employees(active_only=True)
        else:
            employees = [self.get_employee(employee_id) for employee_id in employee_ids]

        known_ids = {employee.id for employee in employees}
        for adjustment in adjustments:
            if adjustment.employee_id not in known_ids:
                raise ValidationError(
                    f"Adjustment for employee {adjustment.employee_id}, who is not in this run"
                )

        payslips = [compute_payslip(employee, adjustments, on_date) for employee in employees]

        booked = []
        for payslip in payslips:
            verification_id = self.ledger.append(payslip_to_verification(payslip))
            payslip = replace(payslip, verification_id=verification_id)
            self.db.create_payslip(payslip)
            booked.append(payslip)

        logger.info(
            "payroll_run",
            date=on_date.isoformat(),
            employees=len(booked),
            gross_total=str(sum((p.gross_salary for p in booked), ZERO)),
        )
        return booked

    def list_payslips(self, employee_id: Optional[int] = None) -> list[Payslip]:
        """List booked payslips, most recent first."""
        return self.db.list_payslips(employee_id=employee_id)
