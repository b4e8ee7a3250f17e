"""Shared pytest fixtures for ledgerkit tests."""

import tempfile
import os
from datetime import date
from decimal import Decimal
import pytest

from ledgerkit.database.factories import create_sqlite_database
from ledgerkit.domain.balances import BalanceService
from ledgerkit.domain.company import CompanyService
from ledgerkit.domain.entities import VatFrequency, VerificationDraft, VerificationRow
from ledgerkit.domain.ledger import LedgerService
from ledgerkit.domain.payroll import PayrollService
from ledgerkit.domain.periods import PeriodService
from ledgerkit.domain.reports import ReportService


@pytest.fixture
def temp_db():
    """Create a temporary database for testing."""
    # Create a temporary file for the database
    fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(fd)

    # Create database
    db = create_sqlite_database(database_path=db_path)
    # Store the path for tests that need it
    db.database_path = db_path
    db.connect()
    db.initialize_schema()

    yield db

    # Cleanup
    db.disconnect()
    if os.path.exists(db_path):
        os.unlink(db_path)


@pytest.fixture
def ledger_service(temp_db):
    """Create a LedgerService with a temporary database."""
    return LedgerService(temp_db)


@pytest.fixture
def balance_service(temp_db):
    """Create a BalanceService with a temporary database."""
    return BalanceService(temp_db)


@pytest.fixture
def period_service(temp_db):
    """Create a PeriodService with a temporary database."""
    return PeriodService(temp_db)


@pytest.fixture
def report_service(temp_db):
    """Create a ReportService with a temporary database."""
    return ReportService(temp_db)


@pytest.fixture
def payroll_service(temp_db):
    """Create a PayrollService with a temporary database."""
    return PayrollService(temp_db)


@pytest.fixture
def company_service(temp_db):
    """Create a CompanyService with a temporary database."""
    return CompanyService(temp_db)


@pytest.fixture
def monthly_vat(company_service):
    """Switch the company to monthly VAT filing."""
    return company_service.update_settings(
        org_number="556677-8899",
        company_name="Exempel AB",
        vat_frequency=VatFrequency.MONTHLY,
    )


def _draft(day, description, *rows, series="A"):
    return VerificationDraft(
        date=day,
        description=description,
        rows=tuple(
            VerificationRow(account=account, debit=Decimal(str(debit)), credit=Decimal(str(credit)))
            for account, debit, credit in rows
        ),
        series=series,
    )


@pytest.fixture
def make_draft():
    """Return a helper that builds drafts from (account, debit, credit) tuples."""
    return _draft


@pytest.fixture
def sample_verifications(ledger_service, make_draft):
    """Book a sale with 25% VAT, a rent payment and an input VAT purchase in January 2025."""
    sale_id = ledger_service.append(
        make_draft(
            date(2025, 1, 10),
            "Försäljning",
            ("1930", 1250, 0),
            ("3000", 0, 1000),
            ("2610", 0, 250),
        )
    )
    rent_id = ledger_service.append(
        make_draft(
            date(2025, 1, 15),
            "Hyra januari",
            ("5010", 8000, 0),
            ("1930", 0, 8000),
        )
    )
    purchase_id = ledger_service.append(
        make_draft(
            date(2025, 1, 20),
            "Inköp material",
            ("4010", 400, 0),
            ("2640", 100, 0),
            ("1930", 0, 500),
        )
    )
    return {"sale": sale_id, "rent": rent_id, "purchase": purchase_id}


@pytest.fixture
def sample_employee(payroll_service):
    """Create an employee with a 30 000 kr salary."""
    employee_id = payroll_service.create_employee(
        name="Anna Andersson",
        personal_number="19850615-1234",
        monthly_salary=Decimal("30000"),
        tax_rate=Decimal("0.30"),
    )
    return payroll_service.get_employee(employee_id)


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()
