"""Reporting period commands."""

from datetime import date

import click

from ledgerkit.domain.entities import PeriodKind
from ledgerkit.domain.periods import PeriodService

KIND_CHOICE = click.Choice([kind.value for kind in PeriodKind])


def _echo_period_line(period, today: date) -> None:
    overdue = " (overdue)" if period.is_overdue(today) else ""
    click.echo(
        f"{period.id:<14} {period.name:<22} {period.start_date.isoformat()}  "
        f"{period.end_date.isoformat()}  {period.due_date.isoformat()}  "
        f"{period.status.value}{overdue}"
    )


@click.group()
def periods_group():
    """List VAT and AGI reporting periods."""
    pass


@periods_group.command("list")
@click.option("--kind", type=KIND_CHOICE, default=PeriodKind.VAT.value, show_default=True)
@click.pass_context
def list_periods(ctx, kind: str):
    """List periods, most recent first.

    Includes stored periods, the period currently due, and a period for
    every month or quarter that has bookings.
    """
    service = PeriodService(ctx.obj["db"])
    today = date.today()
    periods = service.list_periods(PeriodKind(kind), today=today)

    click.echo(f"{'ID':<14} {'Name':<22} {'Start':<10}  {'End':<10}  {'Due':<10}  Status")
    click.echo("-" * 84)
    for period in periods:
        _echo_period_line(period, today)


@periods_group.command("next")
@click.option("--kind", type=KIND_CHOICE, default=PeriodKind.VAT.value, show_default=True)
@click.pass_context
def next_period(ctx, kind: str):
    """Show the period currently due for reporting."""
    service = PeriodService(ctx.obj["db"])
    today = date.today()
    period = service.next_period(PeriodKind(kind), today=today)
    _echo_period_line(period, today)


def register_commands(cli):
    """Register period commands with main CLI."""
    cli.add_command(periods_group, name="periods")
