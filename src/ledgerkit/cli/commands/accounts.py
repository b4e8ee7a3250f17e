"""Chart of accounts command."""

import click

from ledgerkit.domain import chart


@click.command("accounts")
@click.option("--class", "account_class", type=click.IntRange(1, 8), help="Only accounts of this class (1-8)")
@click.option("--search", help="Search number, name or group")
def accounts(account_class: int | None, search: str | None):
    """List the BAS chart of accounts.

    Examples:
        ledgerkit accounts --class 2
        ledgerkit accounts --search moms
    """
    if account_class is not None:
        results = chart.accounts_by_class(account_class)
    else:
        results = chart.list_accounts()
    if search:
        results = [acc for acc in results if chart.matches_search(acc, search)]

    if not results:
        click.echo("No accounts found.")
        return

    current_class = None
    for acc in results:
        if acc.account_class != current_class:
            current_class = acc.account_class
            click.echo(f"\n{current_class} {chart.CLASS_LABELS[current_class]}")
            click.echo("-" * 70)
        click.echo(f"{acc.number}  {acc.name:<48} {acc.group}")


def register_commands(cli):
    """Register accounts command with main CLI."""
    cli.add_command(accounts)
