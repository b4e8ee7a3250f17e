"""Domain model entities for ledgerkit.

These are pure data classes representing bookkeeping concepts, independent of
database schema. Calculators in the domain layer only ever see these types, so
the same code serves the SQLAlchemy store, tests and any other collaborator.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Optional

ZERO = Decimal("0")


class AccountType(str, Enum):
    """Account type in the BAS chart."""

    ASSET = "asset"
    LIABILITY = "liability"
    EQUITY = "equity"
    REVENUE = "revenue"
    EXPENSE = "expense"


class PeriodKind(str, Enum):
    """Kind of reporting period."""

    VAT = "vat"
    AGI = "agi"


class PeriodStatus(str, Enum):
    """Filing status of a period."""

    OPEN = "open"
    UPCOMING = "upcoming"
    SUBMITTED = "submitted"


class VatFrequency(str, Enum):
    """How often the company files VAT declarations."""

    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    YEARLY = "yearly"


class AdjustmentKind(str, Enum):
    """Payroll adjustment kinds."""

    SICK = "sick"
    OVERTIME = "overtime"
    BONUS = "bonus"
    DEDUCTION = "deduction"


@dataclass(frozen=True)
class Account:
    """Chart-of-accounts entry."""

    number: str
    name: str
    account_class: int
    type: AccountType
    group: str

    @property
    def is_debit_normal(self) -> bool:
        """Assets and expenses increase on the debit side."""
        return self.type in (AccountType.ASSET, AccountType.EXPENSE)


@dataclass(frozen=True)
class VerificationRow:
    """One debit or credit line of a verification."""

    account: str
    debit: Decimal = ZERO
    credit: Decimal = ZERO
    description: Optional[str] = None


@dataclass(frozen=True)
class VerificationDraft:
    """Verification not yet booked; the ledger assigns id and number on append."""

    date: date
    description: str
    rows: tuple[VerificationRow, ...]
    series: str = "A"
    reverses_id: Optional[int] = None


@dataclass(frozen=True)
class Verification:
    """Booked double-entry journal entry (verifikation)."""

    id: int
    series: str
    number: int
    date: date
    description: str
    rows: tuple[VerificationRow, ...]
    created_at: datetime
    reverses_id: Optional[int] = None

    @property
    def total_debit(self) -> Decimal:
        return sum((row.debit for row in self.rows), ZERO)

    @property
    def total_credit(self) -> Decimal:
        return sum((row.credit for row in self.rows), ZERO)

    @property
    def is_balanced(self) -> bool:
        return self.total_debit == self.total_credit

    @property
    def reference(self) -> str:
        """Series-and-number reference, e.g. 'A12'."""
        return f"{self.series}{self.number}"


@dataclass(frozen=True)
class Period:
    """Reporting period covering the half-open interval [start_date, end_date)."""

    id: str
    kind: PeriodKind
    start_date: date
    end_date: date
    due_date: date
    status: PeriodStatus
    name: str

    def contains(self, day: date) -> bool:
        return self.start_date <= day < self.end_date

    @property
    def key(self) -> str:
        """Stable key of kind and start date, e.g. 'VAT:2025-01-01'."""
        return f"{self.kind.value.upper()}:{self.start_date.isoformat()}"

    @property
    def is_submitted(self) -> bool:
        return self.status == PeriodStatus.SUBMITTED

    def is_overdue(self, today: date) -> bool:
        return not self.is_submitted and today > self.due_date


@dataclass(frozen=True)
class CompanySettings:
    """Company configuration consulted by the period deriver and filings."""

    org_number: str = "556000-0000"
    company_name: str = ""
    vat_number: Optional[str] = None
    vat_frequency: VatFrequency = VatFrequency.QUARTERLY
    fiscal_year_end: str = "12-31"

    @property
    def vat_registration_number(self) -> str:
        """VAT number, derived from the organisation number when not set."""
        if self.vat_number:
            return self.vat_number
        digits = "".join(ch for ch in self.org_number if ch.isdigit())
        return f"SE{digits}01"


@dataclass(frozen=True)
class LedgerEntry:
    """A single posting shown in account drill-down."""

    verification_id: int
    date: date
    description: str
    amount: Decimal


@dataclass(frozen=True)
class AccountActivity:
    """Aggregated activity of one account over a date range."""

    number: str
    name: str
    account_class: int
    type: AccountType
    group: str
    debit_total: Decimal = ZERO
    credit_total: Decimal = ZERO
    transaction_count: int = 0
    last_date: Optional[date] = None
    transactions: tuple[LedgerEntry, ...] = ()

    @property
    def balance(self) -> Decimal:
        """Net balance in the account's natural direction."""
        if self.type in (AccountType.ASSET, AccountType.EXPENSE):
            return self.debit_total - self.credit_total
        return self.credit_total - self.debit_total


@dataclass(frozen=True)
class VatReport:
    """VAT declaration (momsdeklaration, SKV 4700).

    ``rutaNN`` fields other than ``ruta49`` are editable box values. ``ruta49``,
    ``sales_vat`` and ``input_vat`` are derived and only written by
    ``ledgerkit.domain.vat.recalculate``.
    """

    period: str
    period_id: str
    due_date: date
    status: PeriodStatus = PeriodStatus.OPEN
    # A. Sales excl. VAT
    ruta05: Decimal = ZERO
    ruta06: Decimal = ZERO
    ruta07: Decimal = ZERO
    ruta08: Decimal = ZERO
    # B. Output VAT on sales
    ruta10: Decimal = ZERO
    ruta11: Decimal = ZERO
    ruta12: Decimal = ZERO
    # C. Reverse-charge purchases
    ruta20: Decimal = ZERO
    ruta21: Decimal = ZERO
    ruta22: Decimal = ZERO
    ruta23: Decimal = ZERO
    ruta24: Decimal = ZERO
    # D. Output VAT on reverse-charge purchases
    ruta30: Decimal = ZERO
    ruta31: Decimal = ZERO
    ruta32: Decimal = ZERO
    # E. Exempt sales
    ruta35: Decimal = ZERO
    ruta36: Decimal = ZERO
    ruta37: Decimal = ZERO
    ruta38: Decimal = ZERO
    ruta39: Decimal = ZERO
    ruta40: Decimal = ZERO
    ruta41: Decimal = ZERO
    ruta42: Decimal = ZERO
    # F. Input VAT
    ruta48: Decimal = ZERO
    # H. Import
    ruta50: Decimal = ZERO
    ruta60: Decimal = ZERO
    ruta61: Decimal = ZERO
    ruta62: Decimal = ZERO
    # G. Result (derived)
    ruta49: Decimal = ZERO
    sales_vat: Decimal = ZERO
    input_vat: Decimal = ZERO

    def box(self, code: str) -> Decimal:
        return getattr(self, f"ruta{code}")

    @property
    def is_submitted(self) -> bool:
        return self.status == PeriodStatus.SUBMITTED


@dataclass(frozen=True)
class AgiReport:
    """Monthly employer declaration (arbetsgivardeklaration)."""

    period_key: str
    period: str
    due_date: date
    status: PeriodStatus = PeriodStatus.OPEN
    employees: int = 0
    total_salary: Decimal = ZERO
    tax: Decimal = ZERO
    contributions: Decimal = ZERO

    @property
    def total_to_pay(self) -> Decimal:
        return self.tax + self.contributions

    @property
    def is_submitted(self) -> bool:
        return self.status == PeriodStatus.SUBMITTED


@dataclass(frozen=True)
class ReportSnapshot:
    """Stored report payload.

    Draft rows hold manual box overrides and have no ``submitted_at``; a
    submitted row holds the full frozen report.
    """

    period_id: str
    kind: PeriodKind
    data: dict[str, Any]
    submitted_at: Optional[datetime] = None

    @property
    def is_frozen(self) -> bool:
        return self.submitted_at is not None


@dataclass(frozen=True)
class Employee:
    """Employee on the payroll."""

    id: int
    name: str
    personal_number: str
    monthly_salary: Decimal
    tax_rate: Decimal
    union_fee: Decimal = ZERO
    unemployment_fund_fee: Decimal = ZERO
    pension_rate: Decimal = Decimal("0.045")
    active: bool = True

    @property
    def birth_year(self) -> int:
        """Birth year from the first four digits of the personal number."""
        return int(self.personal_number[:4])


@dataclass(frozen=True)
class PayAdjustment:
    """A payroll adjustment for one pay run.

    ``quantity`` is days for sick leave and hours for overtime; ``amount`` is
    used for plain bonuses and deductions.
    """

    employee_id: int
    kind: AdjustmentKind
    quantity: Decimal = ZERO
    amount: Decimal = ZERO


@dataclass(frozen=True)
class PayslipLine:
    """Line on a payslip; negative amounts reduce gross pay."""

    label: str
    amount: Decimal


@dataclass(frozen=True)
class Payslip:
    """Result of a payroll calculation for one employee."""

    employee_id: int
    employee_name: str
    date: date
    base_salary: Decimal
    gross_salary: Decimal
    tax: Decimal
    employer_contribution: Decimal
    contribution_rate: Decimal
    pension: Decimal
    union_fee: Decimal
    unemployment_fund_fee: Decimal
    net_pay: Decimal
    lines: tuple[PayslipLine, ...] = field(default_factory=tuple)
    verification_id: Optional[int] = None

    @property
    def total_cost(self) -> Decimal:
        """Employer's total cost for the payslip."""
        return self.gross_salary + self.employer_contribution + self.pension
