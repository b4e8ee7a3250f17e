"""Tests for the XML filing formats."""

import xml.etree.ElementTree as ET
from datetime import date
from decimal import Decimal

from ledgerkit.domain.entities import AgiReport, CompanySettings, VatReport
from ledgerkit.domain.filing import agi_to_xml, vat_to_xml
from ledgerkit.domain.vat import recalculate

COMPANY = CompanySettings(org_number="556677-8899", company_name="Exempel AB")


def _vat_report() -> VatReport:
    return recalculate(
        VatReport(
            period="Q1 2025",
            period_id="vat-2025-q1",
            due_date=date(2025, 5, 12),
            ruta05=Decimal("1000.40"),
            ruta10=Decimal("250.10"),
            ruta48=Decimal("100"),
        )
    )


def test_vat_xml_contains_identity_and_non_zero_boxes():
    """Test the VAT envelope and that zero boxes are left out."""
    root = ET.fromstring(vat_to_xml(_vat_report(), COMPANY))

    assert root.tag == "Momsdeklaration"
    assert root.findtext("organisationsnummer") == "556677-8899"
    assert root.findtext("foretagsnamn") == "Exempel AB"
    assert root.findtext("momsregistreringsnummer") == "SE556677889901"
    assert root.findtext("period") == "Q1 2025"
    boxes = [child.tag for child in root if child.tag.startswith("ruta")]
    assert boxes == ["ruta05", "ruta10", "ruta48", "ruta49"]
    assert root.findtext("ruta05") == "1000"
    assert root.findtext("ruta49") == "150"


def test_vat_xml_is_byte_stable():
    """Test that the same report always serializes to the same bytes."""
    first = vat_to_xml(_vat_report(), COMPANY)
    second = vat_to_xml(_vat_report(), COMPANY)

    assert first == second
    assert first.startswith(b"<?xml version='1.0' encoding='utf-8'?>")
    assert first.endswith(b"</Momsdeklaration>\n")


def test_vat_xml_writes_negative_result():
    """Test a refund in box 49."""
    report = recalculate(
        VatReport(period="Mars 2025", period_id="vat-2025-03", due_date=date(2025, 4, 12), ruta48=Decimal("800"))
    )

    root = ET.fromstring(vat_to_xml(report, COMPANY))

    assert root.findtext("ruta49") == "-800"


def test_agi_xml():
    """Test the AGI envelope."""
    report = AgiReport(
        period_key="2025-01",
        period="Januari 2025",
        due_date=date(2025, 2, 12),
        employees=1,
        total_salary=Decimal("25000"),
        tax=Decimal("6000"),
        contributions=Decimal("7855"),
    )

    document = agi_to_xml(report, COMPANY.org_number)
    root = ET.fromstring(document)

    assert root.tag == "Arbetsgivardeklaration"
    assert [child.tag for child in root] == [
        "period",
        "orgNumber",
        "totalSalary",
        "tax",
        "contributions",
        "employees",
    ]
    assert root.findtext("period") == "2025-01"
    assert root.findtext("contributions") == "7855"
    assert document == agi_to_xml(report, COMPANY.org_number)
