"""Tests for the report lifecycle: computed, edited, submitted and frozen."""

import pytest
from dataclasses import replace
from datetime import date, datetime, UTC
from decimal import Decimal

from ledgerkit.domain.entities import PeriodKind, PeriodStatus, ReportSnapshot
from ledgerkit.domain.errors import AlreadySubmittedError, NotFoundError, ValidationError
from ledgerkit.domain.periods import quarter_period
from ledgerkit.domain.reports import (
    Computed,
    Frozen,
    ReportService,
    agi_report_from_data,
    report_to_data,
    select_source,
    vat_report_from_data,
)

TODAY = date(2025, 5, 1)


def _book_salary(ledger_service, make_draft, day, salary=25000, tax=6000, contributions=7855):
    return ledger_service.append(
        make_draft(
            day,
            "Lön",
            ("7010", salary, 0),
            ("7510", contributions, 0),
            ("2710", 0, tax),
            ("2730", 0, contributions),
            ("1930", 0, salary - tax),
            series="L",
        )
    )


def test_select_source():
    """Test that only a submitted period with a frozen snapshot is frozen."""
    period = quarter_period(2025, 1, TODAY)
    draft = ReportSnapshot(period.id, PeriodKind.VAT, {"overrides": {"10": "1"}})
    frozen = ReportSnapshot(period.id, PeriodKind.VAT, {}, submitted_at=datetime.now(UTC))
    submitted = replace(period, status=PeriodStatus.SUBMITTED)

    assert select_source(period, None) == Computed(period, {})
    assert select_source(period, draft) == Computed(period, {"10": "1"})
    assert select_source(submitted, frozen) == Frozen(frozen)
    assert isinstance(select_source(submitted, None), Computed)


def test_snapshot_payload_round_trip(report_service, sample_verifications):
    """Test that a report survives the snapshot payload unchanged."""
    report = report_service.get_vat_report("vat-2025-q1", today=TODAY)

    assert vat_report_from_data(report_to_data(report)) == report


def test_get_vat_report_computes_from_ledger(report_service, sample_verifications):
    """Test the computed report of an open period."""
    report = report_service.get_vat_report("vat-2025-q1", today=TODAY)

    assert report.status == PeriodStatus.OPEN
    assert report.ruta05 == Decimal("1000")
    assert report.ruta10 == Decimal("250")
    assert report.ruta48 == Decimal("100")
    assert report.ruta49 == Decimal("150")


def test_get_vat_report_rejects_agi_period(report_service):
    """Test that an AGI period ID is not a VAT report."""
    with pytest.raises(ValidationError, match="not a VAT period"):
        report_service.get_vat_report("agi-2025-01")


def test_get_vat_report_unknown_period(report_service):
    """Test that an unknown period ID raises NotFoundError."""
    with pytest.raises(NotFoundError):
        report_service.get_vat_report("vat-soon")


def test_set_vat_box_persists_override(report_service, ledger_service, make_draft, sample_verifications):
    """Test that a manual edit survives recomputation after new bookings."""
    edited = report_service.set_vat_box("vat-2025-q1", "10", Decimal("300"))
    assert edited.ruta10 == Decimal("300")
    assert edited.ruta49 == Decimal("200")

    ledger_service.append(
        make_draft(date(2025, 2, 1), "Inköp", ("4010", 800, 0), ("2640", 200, 0), ("1930", 0, 1000))
    )
    report = report_service.get_vat_report("vat-2025-q1")

    assert report.ruta10 == Decimal("300")
    assert report.ruta48 == Decimal("300")
    assert report.ruta49 == Decimal("0")


def test_set_vat_box_rejects_derived_box(report_service, sample_verifications):
    """Test that box 49 cannot be edited."""
    with pytest.raises(ValidationError, match="cannot be edited"):
        report_service.set_vat_box("vat-2025-q1", "49", Decimal("0"))


def test_submitted_report_is_frozen(report_service, ledger_service, make_draft, sample_verifications):
    """Test that a backdated verification does not change a submitted report."""
    submitted = report_service.submit_vat("vat-2025-q1")
    assert submitted.status == PeriodStatus.SUBMITTED

    ledger_service.append(
        make_draft(date(2025, 2, 14), "Sen faktura", ("1930", 5000, 0), ("3000", 0, 4000), ("2610", 0, 1000))
    )
    report = report_service.get_vat_report("vat-2025-q1")

    assert report == submitted
    assert report.ruta05 == Decimal("1000")
    assert report.ruta49 == Decimal("150")


def test_submit_uses_manual_edits(report_service, sample_verifications):
    """Test that the frozen report carries the edited boxes."""
    report_service.set_vat_box("vat-2025-q1", "48", Decimal("250"))

    frozen = report_service.submit_vat("vat-2025-q1")

    assert frozen.ruta48 == Decimal("250")
    assert frozen.ruta49 == Decimal("0")


def test_double_submit_is_rejected(report_service, sample_verifications):
    """Test that a period can be submitted only once."""
    report_service.submit_vat("vat-2025-q1")

    with pytest.raises(AlreadySubmittedError) as excinfo:
        report_service.submit_vat("vat-2025-q1")
    assert excinfo.value.period_id == "vat-2025-q1"


def test_submit_period_is_compare_and_set(temp_db):
    """Test the store-level conditional status change."""
    period = quarter_period(2025, 1, TODAY)
    now = datetime.now(UTC)

    assert temp_db.submit_period(period, {"ruta49": "1"}, now) is True
    assert temp_db.submit_period(period, {"ruta49": "2"}, now) is False

    snapshot = temp_db.get_report_snapshot(period.id)
    assert snapshot.is_frozen
    assert snapshot.data == {"ruta49": "1"}
    assert temp_db.get_period(period.id).status == PeriodStatus.SUBMITTED


def test_edit_after_submit_is_rejected(report_service, sample_verifications):
    """Test that a submitted report cannot be edited."""
    report_service.submit_vat("vat-2025-q1")

    with pytest.raises(AlreadySubmittedError):
        report_service.set_vat_box("vat-2025-q1", "10", Decimal("1"))


def test_submit_rejects_report_of_other_period(report_service, sample_verifications):
    """Test that a report is only filed for its own period."""
    report = report_service.get_vat_report("vat-2025-q1", today=TODAY)

    with pytest.raises(ValidationError, match="belongs to period"):
        report_service.submit_vat("vat-2025-q2", report)


def test_list_vat_reports_covers_all_periods(report_service, sample_verifications):
    """Test that every known VAT period gets a report, most recent first."""
    reports = report_service.list_vat_reports(today=TODAY)

    assert [r.period_id for r in reports] == ["vat-2025-q2", "vat-2025-q1"]
    assert reports[0].ruta49 == Decimal("0")
    assert reports[1].ruta49 == Decimal("150")


def test_recompute_all_matches_single_reads(temp_db, sample_verifications, make_draft, ledger_service):
    """Test that the thread pool produces the same reports as sequential reads."""
    for month in (4, 7, 10):
        ledger_service.append(
            make_draft(date(2025, month, 3), "Försäljning", ("1930", 125, 0), ("3000", 0, 100), ("2610", 0, 25))
        )
    service = ReportService(temp_db, max_workers=2)
    today = date(2026, 1, 20)

    reports = service.recompute_all(PeriodKind.VAT, today=today)

    assert [r.period_id for r in reports] == [
        "vat-2025-q4",
        "vat-2025-q3",
        "vat-2025-q2",
        "vat-2025-q1",
    ]
    for report in reports:
        assert report == service.get_vat_report(report.period_id, today=today)


def test_recompute_all_keeps_frozen_reports(report_service, ledger_service, make_draft, sample_verifications):
    """Test that recompute_all returns frozen snapshots for submitted periods."""
    frozen = report_service.submit_vat("vat-2025-q1")
    ledger_service.append(
        make_draft(date(2025, 3, 30), "Sen", ("1930", 125, 0), ("3000", 0, 100), ("2610", 0, 25))
    )

    reports = report_service.recompute_all(PeriodKind.VAT, today=TODAY)

    assert next(r for r in reports if r.period_id == "vat-2025-q1") == frozen


def test_agi_reports_skip_months_without_payroll(report_service, ledger_service, make_draft, sample_verifications):
    """Test that only months with payroll show up."""
    _book_salary(ledger_service, make_draft, date(2025, 2, 25))

    reports = report_service.get_agi_reports(today=TODAY)

    assert [r.period_key for r in reports] == ["2025-02"]
    assert reports[0].total_salary == Decimal("25000")
    assert reports[0].employees == 1


def test_submitted_agi_report_is_frozen(report_service, ledger_service, make_draft):
    """Test AGI submission, freezing and double submission."""
    _book_salary(ledger_service, make_draft, date(2025, 2, 25))

    frozen = report_service.submit_agi("2025-02")
    _book_salary(ledger_service, make_draft, date(2025, 2, 26), salary=30000, tax=9000, contributions=9426)

    assert report_service.get_agi_report("2025-02") == frozen
    assert agi_report_from_data(report_to_data(frozen)) == frozen
    with pytest.raises(AlreadySubmittedError):
        report_service.submit_agi("2025-02")
