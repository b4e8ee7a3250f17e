"""Abstract database interface."""

from abc import ABC, abstractmethod
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Optional

# Import entities directly to avoid circular import through domain/__init__.py
from ledgerkit.domain.entities import (
    CompanySettings,
    Employee,
    Payslip,
    Period,
    PeriodKind,
    ReportSnapshot,
    Verification,
    VerificationRow,
)


class Database(ABC):
    """Abstract database interface for ledgerkit."""

    @abstractmethod
    def connect(self) -> None:
        """Connect to the database."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Disconnect from the database."""
        pass

    @abstractmethod
    def initialize_schema(self) -> None:
        """Initialize database schema (create tables)."""
        pass

    # Verification operations
    @abstractmethod
    def create_verification(
        self,
        series: str,
        date: date,
        description: str,
        rows: tuple[VerificationRow, ...],
        reverses_id: Optional[int] = None,
    ) -> int:
        """Insert a verification with the next number in its series. Returns verification ID.

        Raises ConflictError if ``reverses_id`` already has a reversal.
        """
        pass

    @abstractmethod
    def get_verification(self, verification_id: int) -> Optional[Verification]:
        """Get verification by ID."""
        pass

    @abstractmethod
    def list_verifications(
        self,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> list[Verification]:
        """List verifications dated in [start_date, end_date), ordered by date then ID."""
        pass

    @abstractmethod
    def find_reversal(self, verification_id: int) -> Optional[Verification]:
        """Get the verification that reverses the given one, if any."""
        pass

    # Company settings
    @abstractmethod
    def get_company_settings(self) -> CompanySettings:
        """Get company settings, defaults when never saved."""
        pass

    @abstractmethod
    def save_company_settings(self, settings: CompanySettings) -> None:
        """Save company settings."""
        pass

    # Period operations
    @abstractmethod
    def save_period(self, period: Period) -> None:
        """Insert or update a period record. A submitted status is never downgraded."""
        pass

    @abstractmethod
    def get_period(self, period_id: str) -> Optional[Period]:
        """Get stored period by ID."""
        pass

    @abstractmethod
    def list_periods(self, kind: Optional[PeriodKind] = None) -> list[Period]:
        """List stored periods, optionally filtered by kind."""
        pass

    # Report operations
    @abstractmethod
    def get_report_snapshot(self, period_id: str) -> Optional[ReportSnapshot]:
        """Get the stored report payload (draft or frozen) of a period."""
        pass

    @abstractmethod
    def save_report_draft(self, period: Period, data: dict[str, Any]) -> None:
        """Store draft data for an unsubmitted period, creating its period record if needed.

        Raises AlreadySubmittedError if the period has a frozen snapshot.
        """
        pass

    @abstractmethod
    def submit_period(self, period: Period, data: dict[str, Any], submitted_at: datetime) -> bool:
        """Atomically mark a period submitted and store its frozen snapshot.

        Compare-and-set on the period status. Returns False, writing nothing,
        when the period was already submitted.
        """
        pass

    # Employee operations
    @abstractmethod
    def create_employee(
        self,
        name: str,
        personal_number: str,
        monthly_salary: Decimal,
        tax_rate: Decimal,
        union_fee: Decimal,
        unemployment_fund_fee: Decimal,
        pension_rate: Decimal,
    ) -> int:
        """Create an employee. Returns employee ID."""
        pass

    @abstractmethod
    def get_employee(self, employee_id: int) -> Optional[Employee]:
        """Get employee by ID."""
        pass

    @abstractmethod
    def list_employees(self, active_only: bool = True) -> list[Employee]:
        """List employees ordered by name."""
        pass

    # Payslip operations
    @abstractmethod
    def create_payslip(self, payslip: Payslip) -> int:
        """Record a booked payslip. Returns payslip ID."""
        pass

    @abstractmethod
    def list_payslips(self, employee_id: Optional[int] = None) -> list[Payslip]:
        """List payslips, most recent first."""
        pass
