"""Report lifecycle for VAT and AGI declarations.

A report is either ``Computed`` (recomputed from the ledger on every read) or
``Frozen`` (the snapshot stored when it was submitted). The period's status
chooses between them. Submission is a compare-and-set in the store, so a
period can only ever be submitted once.
"""

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, fields, replace
from datetime import UTC, date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Callable, Optional, Sequence, Union

from ledgerkit.config.logging import get_logger
from ledgerkit.database.base import Database
from ledgerkit.domain.agi import agi_report_for_month, period_id_for_key
from ledgerkit.domain.entities import (
    AgiReport,
    CompanySettings,
    Period,
    PeriodKind,
    PeriodStatus,
    ReportSnapshot,
    VatReport,
    Verification,
)
from ledgerkit.domain.errors import AlreadySubmittedError, ValidationError
from ledgerkit.domain.periods import PeriodService
from ledgerkit.domain.vat import (
    apply_overrides,
    calculate_from_ledger,
    consistency_issues,
    normalize_box_code,
    recalculate,
    with_box,
)

logger = get_logger(__name__)

Report = Union[VatReport, AgiReport]


@dataclass(frozen=True)
class Computed:
    """Report recomputed from the ledger for a period."""

    period: Period
    overrides: dict[str, str]


@dataclass(frozen=True)
class Frozen:
    """Report loaded verbatim from its submission snapshot."""

    snapshot: ReportSnapshot


ReportSource = Union[Computed, Frozen]


def select_source(period: Period, snapshot: Optional[ReportSnapshot]) -> ReportSource:
    """Choose how a period's report is produced.

    A submitted period with a stored snapshot is frozen. Anything else is
    computed, carrying manual overrides from a draft snapshot if there is one.
    """
    if period.is_submitted and snapshot is not None and snapshot.is_frozen:
        return Frozen(snapshot)
    overrides = {}
    if snapshot is not None and not snapshot.is_frozen and not period.is_submitted:
        overrides = dict(snapshot.data.get("overrides", {}))
    return Computed(period, overrides)


def _encode(value: Any) -> Any:
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, Enum):
        return value.value
    return value


def report_to_data(report: Report) -> dict[str, Any]:
    """Serialize a report into a JSON-compatible snapshot payload."""
    return {f.name: _encode(getattr(report, f.name)) for f in fields(report)}


def _decode(report_type: type, data: dict[str, Any]) -> Report:
    values = {}
    for f in fields(report_type):
        if f.name not in data:
            continue
        raw = data[f.name]
        if f.name == "due_date":
            values[f.name] = date.fromisoformat(raw)
        elif f.name == "status":
            values[f.name] = PeriodStatus(raw)
        elif f.name == "employees":
            values[f.name] = int(raw)
        elif f.name in ("period", "period_id", "period_key"):
            values[f.name] = raw
        else:
            values[f.name] = Decimal(raw)
    return report_type(**values)


def vat_report_from_data(data: dict[str, Any]) -> VatReport:
    """Rebuild a VAT report from a snapshot payload, as stored."""
    return _decode(VatReport, data)


def agi_report_from_data(data: dict[str, Any]) -> AgiReport:
    """Rebuild an AGI report from a snapshot payload, as stored."""
    return _decode(AgiReport, data)


def _vat_for(source: ReportSource, verifications: Sequence[Verification]) -> VatReport:
    if isinstance(source, Frozen):
        return vat_report_from_data(source.snapshot.data)
    report = calculate_from_ledger(verifications, source.period)
    if source.overrides:
        report = apply_overrides(report, source.overrides)
    return report


def _agi_for(source: ReportSource, verifications: Sequence[Verification]) -> AgiReport:
    if isinstance(source, Frozen):
        return agi_report_from_data(source.snapshot.data)
    period = source.period
    in_period = [v for v in verifications if period.contains(v.date)]
    report = agi_report_for_month(period.id.split("-", 1)[1], in_period)
    return replace(report, status=period.status, due_date=period.due_date)


_CALCULATORS: dict[PeriodKind, Callable[[ReportSource, Sequence[Verification]], Report]] = {
    PeriodKind.VAT: _vat_for,
    PeriodKind.AGI: _agi_for,
}


class ReportService:
    """Service for reading and submitting VAT and AGI reports."""

    def __init__(self, db: Database, max_workers: Optional[int] = None):
        """Initialize report service.

        Args:
            db: Database instance
            max_workers: Upper bound on threads used by recompute_all
        """
        self.db = db
        self.periods = PeriodService(db)
        self.max_workers = max_workers

    def _source(self, period: Period) -> ReportSource:
        return select_source(period, self.db.get_report_snapshot(period.id))

    def _log_consistency(self, report: VatReport) -> None:
        for box, expected, actual in consistency_issues(report):
            logger.warning(
                "vat_consistency_issue",
                period_id=report.period_id,
                box=box,
                expected=str(expected),
                actual=str(actual),
            )

    def _settings(self) -> CompanySettings:
        return self.db.get_company_settings()

    def get_vat_report(self, period_id: str, today: Optional[date] = None) -> VatReport:
        """Get the VAT report of a period.

        Submitted periods return their frozen snapshot; other periods are
        computed from the ledger with any manual box edits applied.

        Raises:
            NotFoundError: If the period ID is unknown
        """
        period = self.periods.get_period(period_id, today=today)
        if period.kind != PeriodKind.VAT:
            raise ValidationError(f"Period '{period_id}' is not a VAT period")
        source = self._source(period)
        if isinstance(source, Frozen):
            return _vat_for(source, ())
        verifications = self.db.list_verifications(
            start_date=period.start_date, end_date=period.end_date
        )
        report = _vat_for(source, verifications)
        self._log_consistency(report)
        return report

    def list_vat_reports(self, today: Optional[date] = None) -> list[VatReport]:
        """VAT reports for every known VAT period, most recent first."""
        return self.recompute_all(PeriodKind.VAT, today=today)

    def get_agi_reports(self, today: Optional[date] = None) -> list[AgiReport]:
        """AGI reports for every month with payroll activity or a stored record."""
        stored_ids = {period.id for period in self.db.list_periods(kind=PeriodKind.AGI)}
        reports = self.recompute_all(PeriodKind.AGI, today=today)
        return [
            report
            for report in reports
            if period_id_for_key(report.period_key) in stored_ids
            or report.total_salary or report.tax or report.contributions
        ]

    def get_agi_report(self, key: str, today: Optional[date] = None) -> AgiReport:
        """Get the AGI report of one month ("YYYY-MM").

        Raises:
            NotFoundError: If the key is not a valid month
        """
        period = self.periods.get_period(period_id_for_key(key), today=today)
        source = self._source(period)
        if isinstance(source, Frozen):
            return _agi_for(source, ())
        verifications = self.db.list_verifications(
            start_date=period.start_date, end_date=period.end_date
        )
        return _agi_for(source, verifications)

    def set_vat_box(self, period_id: str, code: str, value: Decimal) -> VatReport:
        """Manually edit a VAT box of an unsubmitted period.

        The edit is stored as a draft override and survives recomputation.

        Raises:
            ValidationError: If the box is unknown or derived
            AlreadySubmittedError: If the period has been submitted
        """
        period = self.periods.get_period(period_id)
        report = self.get_vat_report(period_id)
        updated = with_box(report, code, value)
        box_code = normalize_box_code(code)

        snapshot = self.db.get_report_snapshot(period.id)
        overrides = {}
        if snapshot is not None and not snapshot.is_frozen:
            overrides = dict(snapshot.data.get("overrides", {}))
        overrides[box_code] = str(updated.box(box_code))
        self.db.save_report_draft(period, {"overrides": overrides})
        return updated

    def _submit(self, period: Period, report: Report) -> None:
        data = report_to_data(report)
        submitted_at = datetime.now(UTC)
        if not self.db.submit_period(period, data, submitted_at):
            logger.warning("report_submit_rejected", period_id=period.id, kind=period.kind.value)
            raise AlreadySubmittedError(period.id)
        logger.info("report_submitted", period_id=period.id, kind=period.kind.value)

    def submit_vat(self, period_id: str, report: Optional[VatReport] = None) -> VatReport:
        """Submit a VAT report and freeze it.

        Args:
            period_id: VAT period ID
            report: Report to file, defaults to the current report of the period

        Returns:
            The frozen report

        Raises:
            AlreadySubmittedError: If the period has already been submitted
        """
        period = self.periods.get_period(period_id)
        if period.is_submitted:
            logger.warning("report_submit_rejected", period_id=period.id, kind=period.kind.value)
            raise AlreadySubmittedError(period.id)
        if report is None:
            report = self.get_vat_report(period_id)
        elif report.period_id != period.id:
            raise ValidationError(
                f"Report belongs to period '{report.period_id}', not '{period.id}'"
            )
        frozen = replace(recalculate(report), status=PeriodStatus.SUBMITTED)
        self._submit(period, frozen)
        return frozen

    def submit_agi(self, key: str) -> AgiReport:
        """Submit the AGI report of a month ("YYYY-MM") and freeze it.

        Raises:
            AlreadySubmittedError: If the month has already been submitted
        """
        period = self.periods.get_period(period_id_for_key(key))
        if period.is_submitted:
            logger.warning("report_submit_rejected", period_id=period.id, kind=period.kind.value)
            raise AlreadySubmittedError(period.id)
        frozen = replace(self.get_agi_report(key), status=PeriodStatus.SUBMITTED)
        self._submit(period, frozen)
        return frozen

    def recompute_all(self, kind: PeriodKind, today: Optional[date] = None) -> list[Report]:
        """Produce the report of every known period of a kind.

        The verification snapshot and stored snapshots are read once; the
        per-period calculations then run in a thread pool over that immutable
        snapshot.

        Returns:
            Reports in period order, most recent first
        """
        settings = self._settings()
        verifications = self.db.list_verifications()
        periods = self.periods.list_periods(kind, settings, verifications, today=today)
        sources = [self._source(period) for period in periods]
        if not sources:
            return []

        calculate = _CALCULATORS[kind]
        workers = min(len(sources), self.max_workers or len(sources))
        with ThreadPoolExecutor(max_workers=workers) as executor:
            reports = list(executor.map(lambda source: calculate(source, verifications), sources))

        if kind == PeriodKind.VAT:
            for report in reports:
                if not report.is_submitted:
                    self._log_consistency(report)
        return reports
