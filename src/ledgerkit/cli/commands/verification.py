"""Verification (journal entry) commands."""

from datetime import date

import click

from ledgerkit.cli.date_filters import period_options, pop_period_flags, resolve_cli_date_range
from ledgerkit.cli.error_handling import handle_domain_error, parse_date_option
from ledgerkit.domain import chart
from ledgerkit.domain.entities import ZERO, VerificationDraft, VerificationRow
from ledgerkit.domain.errors import DomainError
from ledgerkit.domain.ledger import DEFAULT_SERIES, LedgerService
from ledgerkit.utils.account_resolver import resolve_account
from ledgerkit.utils.amount_parser import format_amount, parse_amount


def parse_row_option(text: str) -> VerificationRow:
    """Parse ACCOUNT:DEBIT:CREDIT into a verification row.

    ACCOUNT is a number or an exact account name; an empty amount means zero.

    Raises:
        ValueError: If the text is malformed
    """
    parts = text.rsplit(":", 2)
    if len(parts) != 3:
        raise ValueError(f"Row must be ACCOUNT:DEBIT:CREDIT, got '{text}'")
    account_text, debit_text, credit_text = parts
    account = resolve_account(account_text)
    debit = parse_amount(debit_text) if debit_text.strip() else ZERO
    credit = parse_amount(credit_text) if credit_text.strip() else ZERO
    return VerificationRow(account=account, debit=debit, credit=credit)


@click.group()
def verification_group():
    """Book and inspect verifications."""
    pass


@verification_group.command("add")
@click.option("--date", "date_str", help="Booking date (YYYY-MM-DD or 'today'), defaults to today")
@click.option("--description", "-d", required=True, help="Verification description")
@click.option(
    "--row",
    "rows",
    multiple=True,
    required=True,
    help="Row as ACCOUNT:DEBIT:CREDIT, e.g. 1930:1250: or 3000::1000 (repeatable)",
)
@click.option("--series", default=DEFAULT_SERIES, show_default=True, help="Verification series")
@click.pass_context
def add_verification(ctx, date_str: str | None, description: str, rows: tuple[str, ...], series: str):
    """Book a balanced verification.

    Examples:
        ledgerkit verification add -d "Kontantförsäljning" --row 1930:1250: --row 3000::1000 --row 2610::250
        ledgerkit verification add --date 2025-01-31 -d "Hyra" --row 5010:8000: --row 1930::8000
    """
    service = LedgerService(ctx.obj["db"])

    booking_date = parse_date_option(ctx, date_str) or date.today()

    try:
        parsed_rows = tuple(parse_row_option(text) for text in rows)
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        ctx.exit(1)

    try:
        verification_id = service.append(
            VerificationDraft(
                date=booking_date,
                description=description,
                rows=parsed_rows,
                series=series.upper(),
            )
        )
        verification = service.get(verification_id)
        click.echo(f"Booked verification {verification.reference} (ID: {verification_id})")
    except DomainError as e:
        handle_domain_error(ctx, e)


@verification_group.command("list")
@period_options
@click.pass_context
def list_verifications(ctx, start_date: str | None, end_date: str | None, **period_kwargs):
    """List verifications, optionally limited to a date range."""
    service = LedgerService(ctx.obj["db"])
    start, end = resolve_cli_date_range(
        ctx,
        start_date=start_date,
        end_date=end_date,
        period_flags=pop_period_flags(period_kwargs),
    )

    verifications = service.list(start_date=start, end_date=end)
    if not verifications:
        click.echo("No verifications found.")
        return

    click.echo(f"{'ID':>5}  {'Ver':<6} {'Date':<10}  {'Description':<40} {'Amount':>14}")
    click.echo("-" * 82)
    for v in verifications:
        marker = f" (rättar {v.reverses_id})" if v.reverses_id else ""
        text = (v.description + marker)[:40]
        click.echo(
            f"{v.id:>5}  {v.reference:<6} {v.date.isoformat():<10}  {text:<40} "
            f"{format_amount(v.total_debit):>14}"
        )


@verification_group.command("show")
@click.argument("verification_id", type=int)
@click.pass_context
def show_verification(ctx, verification_id: int):
    """Show the rows of a verification."""
    service = LedgerService(ctx.obj["db"])
    try:
        v = service.get(verification_id)
    except DomainError as e:
        handle_domain_error(ctx, e)

    click.echo(f"Verification {v.reference} (ID: {v.id})")
    click.echo(f"Date:        {v.date.isoformat()}")
    click.echo(f"Description: {v.description}")
    if v.reverses_id:
        click.echo(f"Reverses:    verification {v.reverses_id}")
    click.echo("")
    click.echo(f"{'Account':<8} {'Name':<40} {'Debit':>14} {'Credit':>14}")
    click.echo("-" * 79)
    for row in v.rows:
        account = chart.account_for_number(row.account)
        debit = format_amount(row.debit) if row.debit else ""
        credit = format_amount(row.credit) if row.credit else ""
        click.echo(f"{row.account:<8} {account.name[:40]:<40} {debit:>14} {credit:>14}")
    click.echo("-" * 79)
    click.echo(f"{'':<8} {'Summa':<40} {format_amount(v.total_debit):>14} {format_amount(v.total_credit):>14}")


@verification_group.command("reverse")
@click.argument("verification_id", type=int)
@click.option("--date", "date_str", help="Booking date of the reversal, defaults to the original date")
@click.option("--description", "-d", help="Description of the reversal")
@click.pass_context
def reverse_verification(ctx, verification_id: int, date_str: str | None, description: str | None):
    """Reverse a verification by booking an offsetting one.

    Booked verifications are never edited; the reversal swaps debit and
    credit on every row. A verification can be reversed once.
    """
    service = LedgerService(ctx.obj["db"])

    on_date = parse_date_option(ctx, date_str)

    try:
        reversal_id = service.reverse(verification_id, on_date=on_date, description=description)
        reversal = service.get(reversal_id)
        click.echo(
            f"Reversed verification {verification_id} with {reversal.reference} (ID: {reversal_id})"
        )
    except DomainError as e:
        handle_domain_error(ctx, e)


def register_commands(cli):
    """Register verification commands with main CLI."""
    cli.add_command(verification_group, name="verification")
