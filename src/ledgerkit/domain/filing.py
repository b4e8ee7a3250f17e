"""XML filing formats for VAT and AGI declarations.

Output is byte-stable: the same report always serializes to the same bytes.
Amounts are written in whole kronor.
"""

import xml.etree.ElementTree as ET
from decimal import Decimal

from ledgerkit.domain.entities import AgiReport, CompanySettings, VatReport
from ledgerkit.domain.vat import BOX_CODES
from ledgerkit.utils.amount_parser import round_krona


def _kronor(value: Decimal) -> str:
    return str(int(round_krona(value)))


def _to_bytes(root: ET.Element) -> bytes:
    ET.indent(root, space="  ")
    return ET.tostring(root, encoding="utf-8", xml_declaration=True) + b"\n"


def vat_to_xml(report: VatReport, company: CompanySettings) -> bytes:
    """Serialize a VAT report into a ``<Momsdeklaration>`` document.

    Only non-zero boxes are written, in declaration order.

    Args:
        report: VAT report to file
        company: Company settings supplying the identity fields

    Returns:
        UTF-8 encoded XML
    """
    root = ET.Element("Momsdeklaration")
    ET.SubElement(root, "organisationsnummer").text = company.org_number
    ET.SubElement(root, "foretagsnamn").text = company.company_name
    ET.SubElement(root, "momsregistreringsnummer").text = company.vat_registration_number
    ET.SubElement(root, "period").text = report.period
    for code in BOX_CODES:
        value = round_krona(report.box(code))
        if value != 0:
            ET.SubElement(root, f"ruta{code}").text = _kronor(value)
    return _to_bytes(root)


def agi_to_xml(report: AgiReport, org_number: str) -> bytes:
    """Serialize an AGI report into an ``<Arbetsgivardeklaration>`` document."""
    root = ET.Element("Arbetsgivardeklaration")
    ET.SubElement(root, "period").text = report.period_key
    ET.SubElement(root, "orgNumber").text = org_number
    ET.SubElement(root, "totalSalary").text = _kronor(report.total_salary)
    ET.SubElement(root, "tax").text = _kronor(report.tax)
    ET.SubElement(root, "contributions").text = _kronor(report.contributions)
    ET.SubElement(root, "employees").text = str(report.employees)
    return _to_bytes(root)
