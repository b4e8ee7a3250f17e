"""Mapper functions to convert between domain models and SQLAlchemy models.

This layer isolates the conversion logic, so calculators never see ORM rows.
"""

from decimal import Decimal

from ledgerkit.domain import entities as domain
from ledgerkit.database.models import (
    CompanySettings as ORMCompanySettings,
    Employee as ORMEmployee,
    Payslip as ORMPayslip,
    Period as ORMPeriod,
    Report as ORMReport,
    Verification as ORMVerification,
    VerificationRow as ORMVerificationRow,
)


def _money(value) -> Decimal:
    return Decimal(str(value)) if value is not None else domain.ZERO


def verification_row_to_domain(orm_row: ORMVerificationRow) -> domain.VerificationRow:
    """Convert SQLAlchemy VerificationRow model to domain VerificationRow entity."""
    return domain.VerificationRow(
        account=orm_row.account,
        debit=_money(orm_row.debit),
        credit=_money(orm_row.credit),
        description=orm_row.description,
    )


def verification_to_domain(orm_verification: ORMVerification) -> domain.Verification:
    """Convert SQLAlchemy Verification model to domain Verification entity."""
    return domain.Verification(
        id=orm_verification.id,
        series=orm_verification.series,
        number=orm_verification.number,
        date=orm_verification.date,
        description=orm_verification.description,
        rows=tuple(verification_row_to_domain(row) for row in orm_verification.rows),
        created_at=orm_verification.created_at,
        reverses_id=orm_verification.reverses_id,
    )


def company_settings_to_domain(orm_settings: ORMCompanySettings) -> domain.CompanySettings:
    """Convert SQLAlchemy CompanySettings model to domain CompanySettings entity."""
    return domain.CompanySettings(
        org_number=orm_settings.org_number,
        company_name=orm_settings.company_name,
        vat_number=orm_settings.vat_number,
        vat_frequency=domain.VatFrequency(orm_settings.vat_frequency),
        fiscal_year_end=orm_settings.fiscal_year_end,
    )


def period_to_domain(orm_period: ORMPeriod) -> domain.Period:
    """Convert SQLAlchemy Period model to domain Period entity."""
    return domain.Period(
        id=orm_period.id,
        kind=domain.PeriodKind(orm_period.kind),
        start_date=orm_period.start_date,
        end_date=orm_period.end_date,
        due_date=orm_period.due_date,
        status=domain.PeriodStatus(orm_period.status),
        name=orm_period.name,
    )


def report_to_domain(orm_report: ORMReport) -> domain.ReportSnapshot:
    """Convert SQLAlchemy Report model to domain ReportSnapshot entity."""
    return domain.ReportSnapshot(
        period_id=orm_report.period_id,
        kind=domain.PeriodKind(orm_report.kind),
        data=dict(orm_report.data),
        submitted_at=orm_report.submitted_at,
    )


def employee_to_domain(orm_employee: ORMEmployee) -> domain.Employee:
    """Convert SQLAlchemy Employee model to domain Employee entity."""
    return domain.Employee(
        id=orm_employee.id,
        name=orm_employee.name,
        personal_number=orm_employee.personal_number,
        monthly_salary=_money(orm_employee.monthly_salary),
        tax_rate=_money(orm_employee.tax_rate),
        union_fee=_money(orm_employee.union_fee),
        unemployment_fund_fee=_money(orm_employee.unemployment_fund_fee),
        pension_rate=_money(orm_employee.pension_rate),
        active=orm_employee.active,
    )


def payslip_to_domain(orm_payslip: ORMPayslip) -> domain.Payslip:
    """Convert SQLAlchemy Payslip model to domain Payslip entity."""
    return domain.Payslip(
        employee_id=orm_payslip.employee_id,
        employee_name=orm_payslip.employee_name,
        date=orm_payslip.date,
        base_salary=_money(orm_payslip.base_salary),
        gross_salary=_money(orm_payslip.gross_salary),
        tax=_money(orm_payslip.tax),
        employer_contribution=_money(orm_payslip.employer_contribution),
        contribution_rate=_money(orm_payslip.contribution_rate),
        pension=_money(orm_payslip.pension),
        union_fee=_money(orm_payslip.union_fee),
        unemployment_fund_fee=_money(orm_payslip.unemployment_fund_fee),
        net_pay=_money(orm_payslip.net_pay),
        lines=tuple(
            domain.PayslipLine(label=line["label"], amount=Decimal(line["amount"]))
            for line in orm_payslip.lines or []
        ),
        verification_id=orm_payslip.verification_id,
    )
