"""Reporting period derivation.

Periods are half-open date intervals ``[start_date, end_date)``. VAT periods
follow the company's VAT frequency (monthly, quarterly, or yearly aligned to
the fiscal year end); AGI periods are always calendar months. The filing due
date is the 12th of the month after the period's last day.

Period records persisted in the store are authoritative for status, and their
boundaries win when bucketing. Computed periods fill every gap, so a
verification is never left without a period.
"""

import re
from dataclasses import replace
from datetime import date, timedelta
from typing import Iterable, Optional

from dateutil.relativedelta import relativedelta

from ledgerkit.config.logging import get_logger
from ledgerkit.database.base import Database
from ledgerkit.domain.entities import (
    CompanySettings,
    Period,
    PeriodKind,
    PeriodStatus,
    Verification,
    VatFrequency,
)
from ledgerkit.domain.errors import NotFoundError, ValidationError, period_not_found

logger = get_logger(__name__)

DUE_DAY = 12

MONTH_NAMES = (
    "Januari",
    "Februari",
    "Mars",
    "April",
    "Maj",
    "Juni",
    "Juli",
    "Augusti",
    "September",
    "Oktober",
    "November",
    "December",
)

_MONTH_ID = re.compile(r"^(vat|agi)-(\d{4})-(\d{2})$")
_QUARTER_ID = re.compile(r"^vat-(\d{4})-q([1-4])$")
_YEAR_ID = re.compile(r"^vat-(\d{4})$")


def due_date_for(last_day: date) -> date:
    """Return the 12th of the month following ``last_day``."""
    return (last_day.replace(day=1) + relativedelta(months=1)).replace(day=DUE_DAY)


def parse_fiscal_year_end(fiscal_year_end: str) -> tuple[int, int]:
    """Parse an "MM-DD" fiscal year end into (month, day).

    Raises:
        ValidationError: If the value is not a valid month and day
    """
    try:
        month_text, day_text = fiscal_year_end.split("-")
        month, day = int(month_text), int(day_text)
        # Validate against a leap year so that 02-29 is accepted
        date(2024, month, day)
    except ValueError as e:
        raise ValidationError(
            f"Fiscal year end must be MM-DD, got '{fiscal_year_end}'"
        ) from e
    return month, day


def _fiscal_year_end_in(year: int, month: int, day: int) -> date:
    # 02-29 falls back to 02-28 outside leap years
    last_day = (date(year, month, 1) + relativedelta(months=1)) - timedelta(days=1)
    return date(year, month, min(day, last_day.day))


def computed_status(end_date: date, today: Optional[date] = None) -> PeriodStatus:
    """Status of a period without a stored record: upcoming until it has ended."""
    today = today or date.today()
    return PeriodStatus.UPCOMING if today < end_date else PeriodStatus.OPEN


def _make_period(
    period_id: str,
    kind: PeriodKind,
    start: date,
    end: date,
    name: str,
    today: Optional[date],
) -> Period:
    return Period(
        id=period_id,
        kind=kind,
        start_date=start,
        end_date=end,
        due_date=due_date_for(end - timedelta(days=1)),
        status=computed_status(end, today),
        name=name,
    )


def month_period(kind: PeriodKind, year: int, month: int, today: Optional[date] = None) -> Period:
    """Calendar-month period."""
    start = date(year, month, 1)
    return _make_period(
        f"{kind.value}-{year}-{month:02d}",
        kind,
        start,
        start + relativedelta(months=1),
        f"{MONTH_NAMES[month - 1]} {year}",
        today,
    )


def quarter_period(year: int, quarter: int, today: Optional[date] = None) -> Period:
    """Calendar-quarter VAT period."""
    start = date(year, 3 * (quarter - 1) + 1, 1)
    return _make_period(
        f"vat-{year}-q{quarter}",
        PeriodKind.VAT,
        start,
        start + relativedelta(months=3),
        f"Q{quarter} {year}",
        today,
    )


def fiscal_year_period(
    end_year: int, fiscal_year_end: str = "12-31", today: Optional[date] = None
) -> Period:
    """Yearly VAT period for the fiscal year ending in ``end_year``."""
    month, day = parse_fiscal_year_end(fiscal_year_end)
    last_day = _fiscal_year_end_in(end_year, month, day)
    previous_last_day = _fiscal_year_end_in(end_year - 1, month, day)
    start = previous_last_day + timedelta(days=1)
    if start.year == end_year:
        name = f"Helår {end_year}"
    else:
        name = f"Räkenskapsår {start.year}/{end_year}"
    return _make_period(
        f"vat-{end_year}",
        PeriodKind.VAT,
        start,
        last_day + timedelta(days=1),
        name,
        today,
    )


def _frequency(kind: PeriodKind, settings: CompanySettings) -> VatFrequency:
    if kind == PeriodKind.AGI:
        return VatFrequency.MONTHLY
    return settings.vat_frequency


def period_containing(
    kind: PeriodKind,
    settings: CompanySettings,
    day: date,
    today: Optional[date] = None,
) -> Period:
    """Compute the period of the given kind that contains ``day``."""
    frequency = _frequency(kind, settings)
    if frequency == VatFrequency.MONTHLY:
        return month_period(kind, day.year, day.month, today)
    if frequency == VatFrequency.QUARTERLY:
        return quarter_period(day.year, (day.month - 1) // 3 + 1, today)

    month, fy_day = parse_fiscal_year_end(settings.fiscal_year_end)
    end_year = day.year if day <= _fiscal_year_end_in(day.year, month, fy_day) else day.year + 1
    return fiscal_year_period(end_year, settings.fiscal_year_end, today)


def next_period(kind: PeriodKind, settings: CompanySettings, now: date) -> Period:
    """The period currently due for reporting.

    Monthly periods (all AGI periods, and VAT when filed monthly) point at the
    previous month until the 12th, then at the current month. Quarterly VAT
    reports the quarter containing the date one month back. Yearly VAT reports
    the most recently ended fiscal year.
    """
    frequency = _frequency(kind, settings)
    if frequency == VatFrequency.MONTHLY:
        target = now - relativedelta(months=1) if now.day < DUE_DAY else now
        return month_period(kind, target.year, target.month, now)
    if frequency == VatFrequency.QUARTERLY:
        target = now - relativedelta(months=1)
        return quarter_period(target.year, (target.month - 1) // 3 + 1, now)

    month, day = parse_fiscal_year_end(settings.fiscal_year_end)
    end_year = now.year if now > _fiscal_year_end_in(now.year, month, day) else now.year - 1
    return fiscal_year_period(end_year, settings.fiscal_year_end, now)


def parse_period_id(
    period_id: str, settings: CompanySettings, today: Optional[date] = None
) -> Period:
    """Build the computed period for an ID such as "vat-2025-q1" or "agi-2025-01".

    Raises:
        NotFoundError: If the ID is not in a recognized format
    """
    text = period_id.strip().lower()

    match = _MONTH_ID.match(text)
    if match:
        month = int(match.group(3))
        if 1 <= month <= 12:
            return month_period(PeriodKind(match.group(1)), int(match.group(2)), month, today)

    match = _QUARTER_ID.match(text)
    if match:
        return quarter_period(int(match.group(1)), int(match.group(2)), today)

    match = _YEAR_ID.match(text)
    if match:
        return fiscal_year_period(int(match.group(1)), settings.fiscal_year_end, today)

    raise NotFoundError(period_not_found(period_id))


def with_valid_boundaries(
    stored: Period, settings: CompanySettings, today: Optional[date] = None
) -> Period:
    """Return the stored period, or the computed default when its boundaries are invalid.

    The stored status is kept either way.
    """
    if stored.end_date > stored.start_date:
        return stored
    fallback = period_containing(stored.kind, settings, stored.start_date, today)
    logger.warning(
        "period_boundaries_invalid",
        period_id=stored.id,
        start_date=stored.start_date.isoformat(),
        end_date=stored.end_date.isoformat(),
        fallback=fallback.id,
    )
    return Period(
        id=stored.id,
        kind=stored.kind,
        start_date=fallback.start_date,
        end_date=fallback.end_date,
        due_date=fallback.due_date,
        status=stored.status,
        name=stored.name or fallback.name,
    )


def _overlaps(a: Period, b: Period) -> bool:
    return a.start_date < b.end_date and b.start_date < a.end_date


def _uncovered_ranges(period: Period, records: list[Period]) -> list[tuple[date, date]]:
    ranges = []
    cursor = period.start_date
    for record in sorted(records, key=lambda r: r.start_date):
        if record.start_date > cursor:
            ranges.append((cursor, min(record.start_date, period.end_date)))
        cursor = max(cursor, record.end_date)
    if cursor < period.end_date:
        ranges.append((cursor, period.end_date))
    return ranges


def clip_to_gaps(
    period: Period, stored: Iterable[Period], today: Optional[date] = None
) -> list[Period]:
    """Split a computed period into the parts no stored record covers.

    A period without overlapping records is returned unchanged. Otherwise
    every uncovered range becomes calendar-month periods cut at the range
    boundaries, so dates between stored records still get a period.
    """
    overlapping = [record for record in stored if _overlaps(period, record)]
    if not overlapping:
        return [period]

    parts = []
    for start, end in _uncovered_ranges(period, overlapping):
        month_start = start.replace(day=1)
        while month_start < end:
            month = month_period(period.kind, month_start.year, month_start.month, today)
            part_start = max(start, month.start_date)
            part_end = min(end, month.end_date)
            if (part_start, part_end) != (month.start_date, month.end_date):
                month = replace(
                    month,
                    start_date=part_start,
                    end_date=part_end,
                    status=computed_status(part_end, today),
                )
            parts.append(month)
            month_start += relativedelta(months=1)
    logger.debug("period_clipped", period_id=period.id, parts=[part.id for part in parts])
    return parts


def reconcile(
    computed: Iterable[Period], stored: Iterable[Period], today: Optional[date] = None
) -> list[Period]:
    """Merge computed periods with stored period records.

    Stored records win: a computed period with the same ID is dropped, and
    one that overlaps a stored record is cut down to the dates no record
    covers. The result is sorted most recent first.
    """
    stored = list(stored)
    merged = list(stored)
    seen = {period.id for period in stored}
    for period in computed:
        if period.id in seen:
            continue
        for part in clip_to_gaps(period, stored, today):
            if part.id in seen:
                continue
            merged.append(part)
            seen.add(part.id)
    return sorted(merged, key=lambda p: (p.start_date, p.id), reverse=True)


def bucket_into(
    periods: Iterable[Period],
    verification: Verification,
    kind: PeriodKind,
    settings: CompanySettings,
    today: Optional[date] = None,
) -> Period:
    """Find the period a verification belongs to.

    The first period whose interval contains the verification date wins.
    When none does, a period is synthesized from the settings; the
    verification is never dropped.
    """
    for period in periods:
        if period.kind == kind and period.contains(verification.date):
            return period
    synthesized = period_containing(kind, settings, verification.date, today)
    logger.debug(
        "period_synthesized",
        period_id=synthesized.id,
        verification_id=verification.id,
        date=verification.date.isoformat(),
    )
    return synthesized


class PeriodService:
    """Service for listing and resolving reporting periods."""

    def __init__(self, db: Database):
        """Initialize period service.

        Args:
            db: Database instance
        """
        self.db = db

    def stored_periods(
        self, kind: PeriodKind, settings: CompanySettings, today: Optional[date] = None
    ) -> list[Period]:
        """Stored period records of a kind, with invalid boundaries repaired."""
        return [
            with_valid_boundaries(period, settings, today)
            for period in self.db.list_periods(kind=kind)
        ]

    def list_periods(
        self,
        kind: PeriodKind,
        settings: Optional[CompanySettings] = None,
        verifications: Optional[Iterable[Verification]] = None,
        today: Optional[date] = None,
    ) -> list[Period]:
        """List known periods of a kind, most recent first.

        The result is the union of stored period records, the period currently
        due for reporting, and a period for every verification date.

        Args:
            kind: VAT or AGI
            settings: Company settings, loaded from the store when omitted
            verifications: Verification snapshot, loaded from the store when omitted
            today: Reference date, defaults to date.today()

        Returns:
            Periods sorted by start date, descending
        """
        today = today or date.today()
        settings = settings or self.db.get_company_settings()
        if verifications is None:
            verifications = self.db.list_verifications()

        stored = self.stored_periods(kind, settings, today)
        computed = [next_period(kind, settings, today)]
        known = stored + computed
        for verification in verifications:
            period = bucket_into(known, verification, kind, settings, today)
            if period not in known:
                known.append(period)
                computed.append(period)
        return reconcile(computed, stored, today)

    def get_period(
        self,
        period_id: str,
        settings: Optional[CompanySettings] = None,
        today: Optional[date] = None,
    ) -> Period:
        """Resolve a period ID, preferring the stored record.

        Raises:
            NotFoundError: If the ID is neither stored nor a valid period ID
        """
        settings = settings or self.db.get_company_settings()
        stored = self.db.get_period(period_id)
        if stored is not None:
            return with_valid_boundaries(stored, settings, today)
        period = parse_period_id(period_id, settings, today)
        # Month IDs resolve to the same cut-down period the listing shows
        for part in clip_to_gaps(period, self.stored_periods(period.kind, settings, today), today):
            if part.id == period.id:
                return part
        return period

    def next_period(
        self,
        kind: PeriodKind,
        settings: Optional[CompanySettings] = None,
        today: Optional[date] = None,
    ) -> Period:
        """The period currently due, with stored status applied."""
        settings = settings or self.db.get_company_settings()
        computed = next_period(kind, settings, today or date.today())
        stored = self.db.get_period(computed.id)
        if stored is not None:
            return with_valid_boundaries(stored, settings, today)
        return computed
