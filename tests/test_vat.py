"""Tests for the VAT declaration calculator."""

import pytest
from dataclasses import replace
from datetime import date, datetime
from decimal import Decimal

from ledgerkit.domain.entities import PeriodKind, PeriodStatus, VatReport, Verification, VerificationRow
from ledgerkit.domain.errors import AlreadySubmittedError, ValidationError
from ledgerkit.domain.periods import month_period, quarter_period
from ledgerkit.domain.vat import (
    ACCOUNT_BOX_MAP,
    BOX_CODES,
    EDITABLE_CODES,
    accumulate_boxes,
    apply_overrides,
    calculate_from_ledger,
    consistency_issues,
    normalize_box_code,
    recalculate,
    with_box,
)


def _report(**boxes) -> VatReport:
    return VatReport(period="Q1 2025", period_id="vat-2025-q1", due_date=date(2025, 5, 12), **boxes)


def test_box_schema():
    """Test that every declaration box is present and only box 49 is derived."""
    assert len(BOX_CODES) == 29
    assert "49" in BOX_CODES
    assert "49" not in EDITABLE_CODES
    assert set(BOX_CODES) - set(EDITABLE_CODES) == {"49"}


def test_accumulate_boxes_first_rule_wins_and_ignores_unmapped():
    """Test the generic accumulation routine."""
    rows = [
        VerificationRow(account="3010", credit=Decimal("2000")),
        VerificationRow(account="2611", credit=Decimal("500")),
        VerificationRow(account="2641", debit=Decimal("120")),
        VerificationRow(account="1930", debit=Decimal("2380")),
    ]

    totals = accumulate_boxes(rows, ACCOUNT_BOX_MAP)

    assert totals["05"] == Decimal("2000")
    assert totals["10"] == Decimal("500")
    assert totals["48"] == Decimal("120")
    assert sum(totals.values()) == Decimal("2620")


def test_recalculate_net_vat_identity():
    """Test ruta49 = output VAT (B + D) - input VAT."""
    report = recalculate(
        _report(
            ruta10=Decimal("2500"),
            ruta11=Decimal("120"),
            ruta12=Decimal("60"),
            ruta30=Decimal("500"),
            ruta31=Decimal("0"),
            ruta32=Decimal("30"),
            ruta48=Decimal("1000"),
            ruta60=Decimal("999"),
        )
    )

    assert report.sales_vat == Decimal("3210")
    assert report.input_vat == Decimal("1000")
    assert report.ruta49 == Decimal("2210")


def _back_computed_report() -> VatReport:
    # Output VAT booked with no sales base, so box 05 is derived from box 10
    verification = Verification(
        id=1,
        series="A",
        number=1,
        date=date(2025, 2, 3),
        description="Försäljning utan underlag",
        rows=(
            VerificationRow(account="1930", debit=Decimal("250")),
            VerificationRow(account="2610", credit=Decimal("250")),
        ),
        created_at=datetime(2025, 2, 3, 12, 0),
    )
    return calculate_from_ledger([verification], quarter_period(2025, 1, today=date(2025, 5, 1)))


def _overridden_report() -> VatReport:
    return apply_overrides(_report(ruta05=Decimal("1000"), ruta10=Decimal("250")), {"10": "300", "48": "75.50"})


def _stale_report() -> VatReport:
    return _report(
        ruta10=Decimal("250"),
        ruta48=Decimal("400"),
        ruta49=Decimal("12345"),
        sales_vat=Decimal("999"),
        input_vat=Decimal("1"),
    )


@pytest.mark.parametrize(
    "build, expected_ruta49",
    [
        (_back_computed_report, Decimal("250")),
        (_overridden_report, Decimal("224.50")),
        (_stale_report, Decimal("-150")),
    ],
)
def test_recalculate_is_idempotent(build, expected_ruta49):
    """Test that recalculating twice changes nothing."""
    once = recalculate(build())

    assert recalculate(once) == once
    assert once.ruta49 == expected_ruta49
    assert once.sales_vat - once.input_vat == once.ruta49


def test_monthly_scenario_input_vat_and_manual_output_vat(ledger_service, make_draft):
    """Test a sale and an input VAT payment, then box 10 set manually."""
    ledger_service.append(
        make_draft(date(2025, 1, 5), "Försäljning", ("1930", 1000, 0), ("3001", 0, 1000))
    )
    ledger_service.append(
        make_draft(date(2025, 1, 8), "Moms", ("2640", 250, 0), ("1930", 0, 250))
    )
    period = month_period(PeriodKind.VAT, 2025, 1, today=date(2025, 3, 1))

    report = calculate_from_ledger(ledger_service.list(), period)
    assert report.ruta48 == Decimal("250")
    assert report.ruta06 == Decimal("1000")

    edited = with_box(report, "10", Decimal("250"))
    assert edited.ruta10 == Decimal("250")
    assert edited.ruta49 == Decimal("0")


def test_calculate_from_ledger_only_counts_period_dates(ledger_service, sample_verifications, make_draft):
    """Test that verifications outside the period are left out."""
    ledger_service.append(
        make_draft(date(2025, 4, 1), "April", ("1930", 500, 0), ("3000", 0, 400), ("2610", 0, 100))
    )
    period = quarter_period(2025, 1, today=date(2025, 5, 1))

    report = calculate_from_ledger(ledger_service.list(), period)

    assert report.period == "Q1 2025"
    assert report.period_id == "vat-2025-q1"
    assert report.due_date == date(2025, 4, 12)
    assert report.status == PeriodStatus.OPEN
    assert report.ruta05 == Decimal("1000")
    assert report.ruta10 == Decimal("250")
    assert report.ruta48 == Decimal("100")
    assert report.ruta49 == Decimal("150")


def test_sales_base_is_back_computed_from_output_vat(ledger_service, make_draft):
    """Test that output VAT without a booked sales base implies one."""
    ledger_service.append(
        make_draft(date(2025, 2, 3), "Kontant", ("1930", 1120, 0), ("3990", 0, 1000), ("2620", 0, 120))
    )
    period = quarter_period(2025, 1)

    report = calculate_from_ledger(ledger_service.list(), period)

    assert report.ruta11 == Decimal("120")
    assert report.ruta06 == Decimal("1000")


def test_reverse_charge_and_import_boxes(ledger_service, make_draft):
    """Test reverse-charge purchases and their output and input VAT."""
    ledger_service.append(
        make_draft(
            date(2025, 2, 10),
            "Tjänst från EU",
            ("4531", 10000, 0),
            ("2645", 2500, 0),
            ("2614", 0, 2500),
            ("1930", 0, 10000),
        )
    )
    report = calculate_from_ledger(ledger_service.list(), quarter_period(2025, 1))

    assert report.ruta21 == Decimal("10000")
    assert report.ruta30 == Decimal("2500")
    assert report.ruta48 == Decimal("2500")
    assert report.ruta49 == Decimal("0")
    assert recalculate(report) == report


def test_reversal_cancels_out(ledger_service, sample_verifications):
    """Test that a reversed sale no longer contributes to the boxes."""
    ledger_service.reverse(sample_verifications["sale"])

    report = calculate_from_ledger(ledger_service.list(), quarter_period(2025, 1))

    assert report.ruta05 == Decimal("0")
    assert report.ruta10 == Decimal("0")
    assert report.ruta48 == Decimal("100")


def test_consistency_issues():
    """Test output VAT is compared against the sales base per rate."""
    consistent = recalculate(_report(ruta05=Decimal("1000"), ruta10=Decimal("250")))
    assert consistency_issues(consistent) == []

    off = recalculate(_report(ruta05=Decimal("1000"), ruta10=Decimal("200")))
    assert consistency_issues(off) == [("10", Decimal("250.00"), Decimal("200"))]


@pytest.mark.parametrize("code, expected", [("5", "05"), ("05", "05"), ("ruta48", "48"), (" 49 ", "49")])
def test_normalize_box_code(code, expected):
    """Test box code normalization."""
    assert normalize_box_code(code) == expected


def test_with_box_rejects_unknown_and_derived_boxes():
    """Test that box 49 and unknown boxes cannot be edited."""
    report = recalculate(_report())

    with pytest.raises(ValidationError, match="Unknown VAT box"):
        with_box(report, "99", Decimal("1"))
    with pytest.raises(ValidationError, match="cannot be edited"):
        with_box(report, "49", Decimal("1"))
    with pytest.raises(ValidationError, match="Invalid amount"):
        with_box(report, "05", "lots")


@pytest.mark.parametrize("value", [Decimal("NaN"), Decimal("Infinity"), "-Infinity", "sNaN"])
def test_with_box_rejects_non_finite_amounts(value):
    """Test that NaN and infinite amounts never reach a box."""
    report = recalculate(_report(ruta10=Decimal("250")))

    with pytest.raises(ValidationError, match="Invalid amount"):
        with_box(report, "10", value)


def test_set_vat_box_non_finite_amount_keeps_report_readable(report_service, sample_verifications):
    """Test that a rejected NaN edit is not stored as an override."""
    with pytest.raises(ValidationError, match="Invalid amount"):
        report_service.set_vat_box("vat-2025-q1", "10", Decimal("NaN"))

    report = report_service.get_vat_report("vat-2025-q1")
    assert report.ruta10 == Decimal("250")
    assert report.ruta49 == Decimal("150")


def test_with_box_rejects_submitted_report():
    """Test that a submitted report cannot be edited."""
    report = replace(recalculate(_report()), status=PeriodStatus.SUBMITTED)

    with pytest.raises(AlreadySubmittedError):
        with_box(report, "05", Decimal("1"))


def test_apply_overrides():
    """Test applying stored manual edits."""
    report = apply_overrides(recalculate(_report()), {"10": "250", "48": "100"})

    assert report.ruta10 == Decimal("250")
    assert report.ruta48 == Decimal("100")
    assert report.ruta49 == Decimal("150")
