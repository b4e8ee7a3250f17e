"""Domain layer for ledgerkit.

Services are exported lazily; ``ledgerkit.database.base`` imports the entity
module of this package, and the services in turn import the database layer.
"""

_SERVICES = {
    "LedgerService": "ledgerkit.domain.ledger",
    "BalanceService": "ledgerkit.domain.balances",
    "PeriodService": "ledgerkit.domain.periods",
    "ReportService": "ledgerkit.domain.reports",
    "PayrollService": "ledgerkit.domain.payroll",
}

__all__ = list(_SERVICES)


def __getattr__(name):
    if name in _SERVICES:
        from importlib import import_module

        return getattr(import_module(_SERVICES[name]), name)
    raise AttributeError(f"module '{__name__}' has no attribute '{name}'")
