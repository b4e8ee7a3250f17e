"""CLI helpers for date range resolution."""

from datetime import date, timedelta

import click

from ledgerkit.utils.date_parser import PERIOD_NAMES, get_date_range, parse_date


def period_options(func):
    """Add --start-date/--end-date and one flag per named period to a command."""
    for name in reversed(PERIOD_NAMES):
        func = click.option(
            f"--{name}",
            name.replace("-", "_"),
            is_flag=True,
            help=f"Limit to {name.replace('-', ' ')}",
        )(func)
    func = click.option(
        "--end-date", help="Last date to include (YYYY-MM-DD or relative like 'today')"
    )(func)
    func = click.option(
        "--start-date", help="First date to include (YYYY-MM-DD or relative like 'last month')"
    )(func)
    return func


def pop_period_flags(kwargs: dict) -> dict[str, bool]:
    """Remove the named period flags from command kwargs."""
    return {name: kwargs.pop(name.replace("-", "_"), False) for name in PERIOD_NAMES}


def resolve_cli_date_range(
    ctx,
    *,
    start_date: str | None,
    end_date: str | None,
    period_flags: dict[str, bool],
    default_range: tuple[date, date] | None = None,
) -> tuple[date | None, date | None]:
    """Resolve a half-open [start, end) range from period flags or explicit dates.

    ``--end-date`` names the last day to include, so one day is added to it.
    """
    period_count = sum(1 for is_set in period_flags.values() if is_set)
    flag_list = ", ".join(f"--{name}" for name in PERIOD_NAMES)

    if period_count > 1:
        click.echo(f"Error: Only one period option ({flag_list}) can be specified at a time.", err=True)
        ctx.exit(1)

    if period_count > 0 and (start_date or end_date):
        click.echo(
            "Error: Period options cannot be combined with --start-date or --end-date.",
            err=True,
        )
        ctx.exit(1)

    if period_count == 1:
        period = next(name for name, is_set in period_flags.items() if is_set)
        return get_date_range(period)

    start = None
    end = None
    if start_date:
        try:
            start = parse_date(start_date)
        except ValueError as e:
            click.echo(f"Error: Invalid start date: {e}", err=True)
            ctx.exit(1)

    if end_date:
        try:
            end = parse_date(end_date) + timedelta(days=1)
        except ValueError as e:
            click.echo(f"Error: Invalid end date: {e}", err=True)
            ctx.exit(1)

    if start is not None and end is not None and end <= start:
        click.echo("Error: --end-date must not be before --start-date.", err=True)
        ctx.exit(1)

    if start is None and end is None and default_range is not None:
        start, end = default_range

    return start, end
