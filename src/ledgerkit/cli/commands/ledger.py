"""General ledger command."""

import click

from ledgerkit.cli.date_filters import period_options, pop_period_flags, resolve_cli_date_range
from ledgerkit.cli.error_handling import handle_domain_error
from ledgerkit.domain.balances import DEFAULT_MAX_TRANSACTIONS, VIEW_MODES, BalanceService, class_totals
from ledgerkit.domain.errors import DomainError
from ledgerkit.utils.amount_parser import format_amount


@click.command("ledger")
@click.option(
    "--view",
    "view_mode",
    type=click.Choice(VIEW_MODES),
    default="activity",
    show_default=True,
    help="'activity' shows accounts with postings, 'all' the whole chart",
)
@click.option("--class", "account_class", type=click.IntRange(1, 8), help="Only accounts of this class (1-8)")
@click.option("--search", help="Search account number, name or group")
@click.option(
    "--max-transactions",
    type=click.IntRange(min=0),
    default=DEFAULT_MAX_TRANSACTIONS,
    show_default=True,
    help="Most recent postings to show per account",
)
@click.option("--details", is_flag=True, help="Show the most recent postings of each account")
@period_options
@click.pass_context
def ledger(
    ctx,
    view_mode: str,
    account_class: int | None,
    search: str | None,
    max_transactions: int,
    details: bool,
    start_date: str | None,
    end_date: str | None,
    **period_kwargs,
):
    """Show debit, credit and balance per account.

    Examples:
        ledgerkit ledger --this-year
        ledgerkit ledger --class 3 --start-date 2025-01-01 --end-date 2025-03-31
        ledgerkit ledger --search moms --details
    """
    service = BalanceService(ctx.obj["db"])
    start, end = resolve_cli_date_range(
        ctx,
        start_date=start_date,
        end_date=end_date,
        period_flags=pop_period_flags(period_kwargs),
    )

    try:
        rows = service.get_account_activity(
            start_date=start,
            end_date=end,
            view_mode=view_mode,
            class_filter=account_class,
            search=search,
            max_transactions=max_transactions,
        )
    except DomainError as e:
        handle_domain_error(ctx, e)

    if not rows:
        click.echo("No ledger activity found.")
        return

    click.echo(f"{'Account':<8} {'Name':<36} {'Debit':>14} {'Credit':>14} {'Balance':>14}")
    click.echo("-" * 90)
    for row in rows:
        click.echo(
            f"{row.number:<8} {row.name[:36]:<36} {format_amount(row.debit_total):>14} "
            f"{format_amount(row.credit_total):>14} {format_amount(row.balance):>14}"
        )
        if details:
            for entry in row.transactions:
                click.echo(
                    f"{'':<8}   {entry.date.isoformat()}  #{entry.verification_id:<5} "
                    f"{entry.description[:30]:<30} {format_amount(entry.amount):>14}"
                )

    click.echo("-" * 90)
    for total in class_totals(rows):
        click.echo(
            f"{total.account_class:<8} {total.label[:36]:<36} {format_amount(total.debit_total):>14} "
            f"{format_amount(total.credit_total):>14} {format_amount(total.net):>14}"
        )


def register_commands(cli):
    """Register ledger command with main CLI."""
    cli.add_command(ledger)
