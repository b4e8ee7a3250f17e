"""Employer declaration (arbetsgivardeklaration, AGI) calculator."""

from collections import defaultdict
from datetime import date
from typing import Iterable

from ledgerkit.domain.entities import ZERO, AgiReport, PeriodKind, PeriodStatus, Verification
from ledgerkit.domain.periods import MONTH_NAMES, due_date_for
from ledgerkit.domain.vat import CREDIT, DEBIT, BoxRule, accumulate_boxes

SALARY_ACCOUNTS = (7000, 7399)

AGI_ACCOUNT_MAP: tuple[BoxRule, ...] = (
    BoxRule(SALARY_ACCOUNTS[0], SALARY_ACCOUNTS[1], "total_salary", DEBIT),
    BoxRule(2710, 2710, "tax", CREDIT),
    BoxRule(2730, 2739, "contributions", CREDIT),
)


def period_key(day: date) -> str:
    """Month key such as "2025-01"."""
    return f"{day.year}-{day.month:02d}"


def period_id_for_key(key: str) -> str:
    """Period ID of an AGI month key, e.g. "agi-2025-01"."""
    return f"{PeriodKind.AGI.value}-{key}"


def _is_salary_account(account: str) -> bool:
    return account.isdigit() and SALARY_ACCOUNTS[0] <= int(account) <= SALARY_ACCOUNTS[1]


def _headcount(verifications: Iterable[Verification]) -> int:
    # One per salary debit; a reversal takes its postings back out
    count = 0
    for verification in verifications:
        for row in verification.rows:
            if not _is_salary_account(row.account):
                continue
            if row.debit > 0:
                count += 1
            elif row.credit > 0 and verification.reverses_id is not None:
                count -= 1
    return max(count, 0)


def agi_report_for_month(key: str, verifications: Iterable[Verification]) -> AgiReport:
    """Compute the AGI report of one month from that month's verifications."""
    verifications = list(verifications)
    rows = [row for verification in verifications for row in verification.rows]
    totals = accumulate_boxes(rows, AGI_ACCOUNT_MAP)

    employees = _headcount(verifications)
    if employees == 0 and totals["total_salary"] > 0:
        employees = 1

    year, month = (int(part) for part in key.split("-"))
    last_day = date(year, month, 1)
    return AgiReport(
        period_key=key,
        period=f"{MONTH_NAMES[month - 1]} {year}",
        due_date=due_date_for(last_day),
        status=PeriodStatus.OPEN,
        employees=employees,
        total_salary=totals["total_salary"],
        tax=totals["tax"],
        contributions=totals["contributions"],
    )


def calculate_agi_reports(verifications: Iterable[Verification]) -> list[AgiReport]:
    """Group verifications by calendar month and compute one AGI report per month.

    Months without any salary, tax or contribution postings are left out.

    Returns:
        Reports sorted by period key, most recent first
    """
    by_month: dict[str, list[Verification]] = defaultdict(list)
    for verification in verifications:
        by_month[period_key(verification.date)].append(verification)

    reports = []
    for key, month_verifications in by_month.items():
        report = agi_report_for_month(key, month_verifications)
        if report.total_salary == ZERO and report.tax == ZERO and report.contributions == ZERO:
            continue
        reports.append(report)
    return sorted(reports, key=lambda r: r.period_key, reverse=True)
