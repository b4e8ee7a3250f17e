"""VAT declaration (momsdeklaration) calculator.

Ledger rows are mapped to SKV 4700 boxes through one declarative table,
``ACCOUNT_BOX_MAP``, consulted by ``accumulate_boxes``. The result box 49 and
the ``sales_vat``/``input_vat`` totals are derived and written only by
``recalculate``.
"""

from dataclasses import dataclass, replace
from decimal import Decimal, InvalidOperation
from typing import Iterable, Mapping

from ledgerkit.domain.entities import (
    ZERO,
    Period,
    VatReport,
    Verification,
    VerificationRow,
)
from ledgerkit.domain.errors import AlreadySubmittedError, ValidationError
from ledgerkit.utils.amount_parser import round_krona

DEBIT = "debit"
CREDIT = "credit"


@dataclass(frozen=True)
class VatBox:
    """A box (ruta) on the VAT declaration."""

    code: str
    section: str
    label: str
    editable: bool = True


VAT_BOXES: tuple[VatBox, ...] = (
    VatBox("05", "A", "Momspliktig försäljning 25%"),
    VatBox("06", "A", "Momspliktig försäljning 12%"),
    VatBox("07", "A", "Momspliktig försäljning 6%"),
    VatBox("08", "A", "Hyresinkomster vid frivillig skattskyldighet"),
    VatBox("10", "B", "Utgående moms 25%"),
    VatBox("11", "B", "Utgående moms 12%"),
    VatBox("12", "B", "Utgående moms 6%"),
    VatBox("20", "C", "Inköp av varor från annat EU-land"),
    VatBox("21", "C", "Inköp av tjänster från annat EU-land"),
    VatBox("22", "C", "Inköp av tjänster utanför EU"),
    VatBox("23", "C", "Inköp av varor i Sverige"),
    VatBox("24", "C", "Övriga inköp av tjänster"),
    VatBox("30", "D", "Utgående moms 25%"),
    VatBox("31", "D", "Utgående moms 12%"),
    VatBox("32", "D", "Utgående moms 6%"),
    VatBox("35", "E", "Försäljning av varor till annat EU-land"),
    VatBox("36", "E", "Försäljning av varor utanför EU"),
    VatBox("37", "E", "Mellanmans inköp av varor vid trepartshandel"),
    VatBox("38", "E", "Mellanmans försäljning av varor vid trepartshandel"),
    VatBox("39", "E", "Försäljning av tjänster till näringsidkare i annat EU-land"),
    VatBox("40", "E", "Övrig försäljning av tjänster omsatta utanför Sverige"),
    VatBox("41", "E", "Försäljning när köparen är skattskyldig i Sverige"),
    VatBox("42", "E", "Övrig försäljning m.m."),
    VatBox("48", "F", "Ingående moms att dra av"),
    VatBox("49", "G", "Moms att betala eller få tillbaka", editable=False),
    VatBox("50", "H", "Beskattningsunderlag vid import"),
    VatBox("60", "H", "Utgående moms 25%"),
    VatBox("61", "H", "Utgående moms 12%"),
    VatBox("62", "H", "Utgående moms 6%"),
)

BOXES_BY_CODE: dict[str, VatBox] = {box.code: box for box in VAT_BOXES}
BOX_CODES: tuple[str, ...] = tuple(box.code for box in VAT_BOXES)
EDITABLE_CODES: tuple[str, ...] = tuple(box.code for box in VAT_BOXES if box.editable)

OUTPUT_VAT_CODES = ("10", "11", "12", "30", "31", "32")
INPUT_VAT_CODE = "48"

# (sales box, output VAT box, rate)
RATES: tuple[tuple[str, str, Decimal], ...] = (
    ("05", "10", Decimal("0.25")),
    ("06", "11", Decimal("0.12")),
    ("07", "12", Decimal("0.06")),
)


@dataclass(frozen=True)
class BoxRule:
    """Maps the account range ``first..last`` (inclusive) to a box.

    ``side`` is the side the box grows on: a credit box sums
    ``credit - debit``, a debit box sums ``debit - credit``.
    """

    first: int
    last: int
    box: str
    side: str

    def matches(self, account: int) -> bool:
        return self.first <= account <= self.last


ACCOUNT_BOX_MAP: tuple[BoxRule, ...] = (
    # A. Sales by rate
    BoxRule(3000, 3000, "05", CREDIT),
    BoxRule(3010, 3010, "05", CREDIT),
    BoxRule(3001, 3001, "06", CREDIT),
    BoxRule(3011, 3011, "06", CREDIT),
    BoxRule(3002, 3002, "07", CREDIT),
    BoxRule(3012, 3012, "07", CREDIT),
    BoxRule(3913, 3913, "08", CREDIT),
    # B. Output VAT on domestic sales
    BoxRule(2610, 2613, "10", CREDIT),
    BoxRule(2616, 2619, "10", CREDIT),
    BoxRule(2620, 2623, "11", CREDIT),
    BoxRule(2626, 2629, "11", CREDIT),
    BoxRule(2630, 2633, "12", CREDIT),
    BoxRule(2636, 2639, "12", CREDIT),
    # C. Reverse-charge purchase bases
    BoxRule(4040, 4040, "20", DEBIT),
    BoxRule(4531, 4531, "21", DEBIT),
    BoxRule(4535, 4535, "22", DEBIT),
    BoxRule(4415, 4415, "23", DEBIT),
    BoxRule(4425, 4425, "24", DEBIT),
    # D. Output VAT on reverse-charge purchases
    BoxRule(2614, 2614, "30", CREDIT),
    BoxRule(2624, 2624, "31", CREDIT),
    BoxRule(2634, 2634, "32", CREDIT),
    # E. Exempt sales
    BoxRule(3040, 3040, "35", CREDIT),
    BoxRule(3050, 3050, "36", CREDIT),
    BoxRule(4516, 4516, "37", DEBIT),
    BoxRule(3109, 3109, "38", CREDIT),
    BoxRule(3308, 3308, "39", CREDIT),
    BoxRule(3305, 3305, "40", CREDIT),
    BoxRule(3231, 3231, "41", CREDIT),
    BoxRule(3003, 3003, "42", CREDIT),
    BoxRule(3013, 3013, "42", CREDIT),
    # F. Deductible input VAT
    BoxRule(2640, 2649, "48", DEBIT),
    # H. Import
    BoxRule(4050, 4050, "50", DEBIT),
    BoxRule(2615, 2615, "60", CREDIT),
    BoxRule(2625, 2625, "61", CREDIT),
    BoxRule(2635, 2635, "62", CREDIT),
)


def accumulate_boxes(
    rows: Iterable[VerificationRow], rules: Iterable[BoxRule]
) -> dict[str, Decimal]:
    """Sum rows into boxes using a mapping table.

    Each row goes to the first rule whose range contains its account. Rows on
    unmapped or non-numeric accounts are ignored.

    Args:
        rows: Verification rows to accumulate
        rules: Mapping table

    Returns:
        Totals keyed by box, with every box of the table present
    """
    rules = tuple(rules)
    totals = {rule.box: ZERO for rule in rules}
    for row in rows:
        if not row.account.isdigit():
            continue
        account = int(row.account)
        for rule in rules:
            if rule.matches(account):
                if rule.side == DEBIT:
                    totals[rule.box] += row.debit - row.credit
                else:
                    totals[rule.box] += row.credit - row.debit
                break
    return totals


def recalculate(report: VatReport) -> VatReport:
    """Derive box 49 and the VAT totals from the editable boxes.

    ``ruta49 = (10 + 11 + 12 + 30 + 31 + 32) - 48``; a positive result is owed,
    a negative one is refunded. Idempotent.
    """
    sales_vat = sum((report.box(code) for code in OUTPUT_VAT_CODES), ZERO)
    input_vat = report.box(INPUT_VAT_CODE)
    return replace(
        report,
        ruta49=sales_vat - input_vat,
        sales_vat=sales_vat,
        input_vat=input_vat,
    )


def calculate_from_ledger(verifications: Iterable[Verification], period: Period) -> VatReport:
    """Compute the VAT report of a period from the ledger.

    Only verifications dated inside the period's ``[start, end)`` interval
    count. When a rate has output VAT booked but no sales base, the base is
    back-computed from the VAT amount.

    Args:
        verifications: Verification snapshot
        period: VAT period

    Returns:
        Recalculated VAT report
    """
    rows = [
        row
        for verification in verifications
        if period.contains(verification.date)
        for row in verification.rows
    ]
    totals = accumulate_boxes(rows, ACCOUNT_BOX_MAP)

    for sales_code, vat_code, rate in RATES:
        if totals[sales_code] == 0 and totals[vat_code] > 0:
            totals[sales_code] = round_krona(totals[vat_code] / rate)

    report = VatReport(
        period=period.name,
        period_id=period.id,
        due_date=period.due_date,
        status=period.status,
        **{f"ruta{code}": value for code, value in totals.items()},
    )
    return recalculate(report)


def consistency_issues(
    report: VatReport, tolerance: Decimal = Decimal("1")
) -> list[tuple[str, Decimal, Decimal]]:
    """Compare output VAT computed from the sales boxes with the booked output VAT.

    Args:
        report: VAT report
        tolerance: Allowed difference in kronor

    Returns:
        List of (output VAT box, expected, actual) for each rate that disagrees
    """
    issues = []
    for sales_code, vat_code, rate in RATES:
        expected = report.box(sales_code) * rate
        actual = report.box(vat_code)
        if abs(expected - actual) > tolerance:
            issues.append((vat_code, expected, actual))
    return issues


def normalize_box_code(code: str) -> str:
    """Normalize "5", "05" or "ruta05" to "05".

    Raises:
        ValidationError: If the code is not a box on the declaration
    """
    text = str(code).strip().lower()
    if text.startswith("ruta"):
        text = text[4:]
    if text.isdigit():
        text = text.zfill(2)
    if text not in BOXES_BY_CODE:
        raise ValidationError(f"Unknown VAT box '{code}'")
    return text


def with_box(report: VatReport, code: str, value: Decimal | str | int) -> VatReport:
    """Manually set an editable box and recalculate.

    Raises:
        ValidationError: If the box is unknown, derived, or the value is not a number
        AlreadySubmittedError: If the report has been submitted
    """
    if report.is_submitted:
        raise AlreadySubmittedError(report.period_id)
    box_code = normalize_box_code(code)
    if not BOXES_BY_CODE[box_code].editable:
        raise ValidationError(f"Box {box_code} is calculated and cannot be edited")
    try:
        amount = Decimal(value)
    except (InvalidOperation, TypeError, ValueError) as e:
        raise ValidationError(f"Invalid amount for box {box_code}: '{value}'") from e
    if not amount.is_finite():
        raise ValidationError(f"Invalid amount for box {box_code}: '{value}'")
    return recalculate(replace(report, **{f"ruta{box_code}": amount}))


def apply_overrides(report: VatReport, overrides: Mapping[str, Decimal | str]) -> VatReport:
    """Apply stored manual box edits to a computed report."""
    for code, value in sorted(overrides.items()):
        report = with_box(report, code, value)
    return recalculate(report)
