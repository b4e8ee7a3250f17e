"""Account balance aggregation (huvudbok)."""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Iterable, Optional

from ledgerkit.database.base import Database
from ledgerkit.domain import chart
from ledgerkit.domain.entities import (
    ZERO,
    AccountActivity,
    LedgerEntry,
    Verification,
)
from ledgerkit.domain.errors import ValidationError

VIEW_MODES = ("activity", "all")
DEFAULT_MAX_TRANSACTIONS = 10


@dataclass
class _Accumulator:
    debit: Decimal = ZERO
    credit: Decimal = ZERO
    count: int = 0
    last_date: Optional[date] = None
    entries: list[LedgerEntry] = field(default_factory=list)


@dataclass(frozen=True)
class ClassTotal:
    """Debit and credit totals for one account class."""

    account_class: int
    label: str
    debit_total: Decimal
    credit_total: Decimal

    @property
    def net(self) -> Decimal:
        return self.debit_total - self.credit_total


def aggregate_activity(
    verifications: Iterable[Verification],
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    max_transactions: int = DEFAULT_MAX_TRANSACTIONS,
) -> dict[str, AccountActivity]:
    """Roll verifications up into per-account activity.

    Args:
        verifications: Verification snapshot to aggregate
        start_date: Optional inclusive start of the date range
        end_date: Optional exclusive end of the date range
        max_transactions: How many of the most recent entries to keep per account

    Returns:
        Activity keyed by account number. Accounts missing from the chart are
        kept under the uncategorized bucket.
    """
    accumulators: dict[str, _Accumulator] = {}

    for verification in verifications:
        if start_date is not None and verification.date < start_date:
            continue
        if end_date is not None and verification.date >= end_date:
            continue

        for row in verification.rows:
            acc = accumulators.setdefault(row.account, _Accumulator())
            account = chart.account_for_number(row.account)
            acc.debit += row.debit
            acc.credit += row.credit
            acc.count += 1
            if acc.last_date is None or verification.date > acc.last_date:
                acc.last_date = verification.date
            if account.is_debit_normal:
                amount = row.debit - row.credit
            else:
                amount = row.credit - row.debit
            acc.entries.append(
                LedgerEntry(
                    verification_id=verification.id,
                    date=verification.date,
                    description=row.description or verification.description,
                    amount=amount,
                )
            )

    result = {}
    for number, acc in accumulators.items():
        account = chart.account_for_number(number)
        recent = sorted(acc.entries, key=lambda e: (e.date, e.verification_id), reverse=True)
        result[number] = AccountActivity(
            number=number,
            name=account.name,
            account_class=account.account_class,
            type=account.type,
            group=account.group,
            debit_total=acc.debit,
            credit_total=acc.credit,
            transaction_count=acc.count,
            last_date=acc.last_date,
            transactions=tuple(recent[:max_transactions]),
        )
    return result


def class_totals(rows: Iterable[AccountActivity]) -> list[ClassTotal]:
    """Summarize activity rows by account class."""
    totals: dict[int, list[Decimal]] = {}
    for row in rows:
        debit_credit = totals.setdefault(row.account_class, [ZERO, ZERO])
        debit_credit[0] += row.debit_total
        debit_credit[1] += row.credit_total
    return [
        ClassTotal(
            account_class=account_class,
            label=chart.CLASS_LABELS.get(account_class, chart.UNCATEGORIZED_GROUP),
            debit_total=debit,
            credit_total=credit,
        )
        for account_class, (debit, credit) in sorted(totals.items())
    ]


class BalanceService:
    """Service for the general ledger view."""

    def __init__(self, db: Database):
        """Initialize balance service.

        Args:
            db: Database instance
        """
        self.db = db

    def get_account_activity(
        self,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        view_mode: str = "activity",
        class_filter: Optional[int] = None,
        search: Optional[str] = None,
        max_transactions: int = DEFAULT_MAX_TRANSACTIONS,
    ) -> list[AccountActivity]:
        """Get per-account activity for the general ledger.

        Args:
            start_date: Optional inclusive start date
            end_date: Optional exclusive end date
            view_mode: "activity" for accounts with postings only, "all" to
                include every chart account
            class_filter: Optional account class (1-8)
            search: Optional case-insensitive search on number, name and group
            max_transactions: Drill-down entries kept per account

        Returns:
            Activity rows sorted by account number

        Raises:
            ValidationError: If view_mode or class_filter is invalid
        """
        if view_mode not in VIEW_MODES:
            raise ValidationError(
                f"Unknown view mode '{view_mode}'. Use one of: {', '.join(VIEW_MODES)}"
            )
        if class_filter is not None and class_filter not in chart.CLASS_LABELS:
            raise ValidationError(f"Account class must be between 1 and 8, got {class_filter}")

        verifications = self.db.list_verifications(start_date=start_date, end_date=end_date)
        activity = aggregate_activity(verifications, max_transactions=max_transactions)

        if view_mode == "all":
            for account in chart.list_accounts():
                if account.number not in activity:
                    activity[account.number] = AccountActivity(
                        number=account.number,
                        name=account.name,
                        account_class=account.account_class,
                        type=account.type,
                        group=account.group,
                    )

        rows = sorted(activity.values(), key=lambda row: row.number)
        if class_filter is not None:
            rows = [row for row in rows if row.account_class == class_filter]
        if search:
            rows = [row for row in rows if chart.matches_search(row, search)]
        return rows
