"""VAT declaration (momsdeklaration) commands."""

from datetime import date
from pathlib import Path

import click

from ledgerkit.cli.error_handling import handle_domain_error
from ledgerkit.domain.entities import PeriodKind
from ledgerkit.domain.errors import DomainError
from ledgerkit.domain.filing import vat_to_xml
from ledgerkit.domain.periods import PeriodService
from ledgerkit.domain.reports import ReportService
from ledgerkit.domain.vat import VAT_BOXES, consistency_issues
from ledgerkit.utils.amount_parser import format_amount, parse_amount

SECTION_TITLES = {
    "A": "A. Momspliktig försäljning eller uttag exkl. moms",
    "B": "B. Utgående moms på försäljning",
    "C": "C. Momspliktiga inköp vid omvänd skattskyldighet",
    "D": "D. Utgående moms på inköp",
    "E": "E. Försäljning m.m. som är undantagen från moms",
    "F": "F. Ingående moms",
    "G": "G. Moms att betala eller få tillbaka",
    "H": "H. Import",
}


def _resolve_period_id(ctx, period_id: str | None) -> str:
    if period_id:
        return period_id
    return PeriodService(ctx.obj["db"]).next_period(PeriodKind.VAT).id


def _echo_report(report, show_zero: bool) -> None:
    click.echo(f"Momsdeklaration {report.period} ({report.period_id})")
    click.echo(f"Due: {report.due_date.isoformat()}  Status: {report.status.value}")

    section = None
    for box in VAT_BOXES:
        value = report.box(box.code)
        if not value and not show_zero and box.code != "49":
            continue
        if box.section != section:
            section = box.section
            click.echo(f"\n{SECTION_TITLES[section]}")
        click.echo(f"  {box.code}  {box.label[:52]:<52} {format_amount(value):>14}")

    click.echo("")
    click.echo(f"Utgående moms:  {format_amount(report.sales_vat):>14}")
    click.echo(f"Ingående moms:  {format_amount(report.input_vat):>14}")
    result = "to pay" if report.ruta49 >= 0 else "to reclaim"
    click.echo(f"Ruta 49 ({result}): {format_amount(abs(report.ruta49))}")

    for vat_code, expected, actual in consistency_issues(report):
        click.echo(
            f"Warning: box {vat_code} is {format_amount(actual)} but the sales base "
            f"implies {format_amount(expected)}",
            err=True,
        )


@click.group()
def vat_group():
    """Compute, edit, submit and export VAT declarations."""
    pass


@vat_group.command("show")
@click.argument("period_id", required=False)
@click.option("--all-boxes", is_flag=True, help="Also show boxes that are zero")
@click.pass_context
def show_vat(ctx, period_id: str | None, all_boxes: bool):
    """Show the VAT declaration of a period.

    PERIOD_ID is e.g. vat-2025-q1, vat-2025-03 or vat-2025. Defaults to the
    period currently due.
    """
    service = ReportService(ctx.obj["db"])
    try:
        report = service.get_vat_report(_resolve_period_id(ctx, period_id))
        _echo_report(report, show_zero=all_boxes)
    except DomainError as e:
        handle_domain_error(ctx, e)


@vat_group.command("list")
@click.pass_context
def list_vat(ctx):
    """List the VAT declarations of all known periods."""
    service = ReportService(ctx.obj["db"])
    reports = service.list_vat_reports()
    if not reports:
        click.echo("No VAT periods found.")
        return

    today = date.today()
    click.echo(
        f"{'Period':<14} {'Name':<22} {'Due':<10}  {'Output VAT':>12} {'Input VAT':>12} "
        f"{'Ruta 49':>12}  Status"
    )
    click.echo("-" * 100)
    for report in reports:
        overdue = " (overdue)" if not report.is_submitted and today > report.due_date else ""
        click.echo(
            f"{report.period_id:<14} {report.period:<22} {report.due_date.isoformat():<10}  "
            f"{format_amount(report.sales_vat):>12} {format_amount(report.input_vat):>12} "
            f"{format_amount(report.ruta49):>12}  {report.status.value}{overdue}"
        )


@vat_group.command("set")
@click.argument("period_id")
@click.argument("box")
@click.argument("value")
@click.pass_context
def set_vat_box(ctx, period_id: str, box: str, value: str):
    """Manually set a box of an unsubmitted declaration.

    Examples:
        ledgerkit vat set vat-2025-q1 05 100000
        ledgerkit vat set vat-2025-q1 ruta48 "2 500"
    """
    service = ReportService(ctx.obj["db"])
    try:
        amount = parse_amount(value)
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        ctx.exit(1)

    try:
        report = service.set_vat_box(period_id, box, amount)
        click.echo(f"Set box {box} of {report.period_id} to {format_amount(amount)}")
        click.echo(f"Ruta 49: {format_amount(report.ruta49)}")
    except DomainError as e:
        handle_domain_error(ctx, e)


@vat_group.command("submit")
@click.argument("period_id")
@click.option("--yes", is_flag=True, help="Submit without asking for confirmation")
@click.pass_context
def submit_vat(ctx, period_id: str, yes: bool):
    """Submit a VAT declaration. The submitted report can no longer change."""
    service = ReportService(ctx.obj["db"])
    try:
        report = service.get_vat_report(period_id)
        if not yes:
            click.confirm(
                f"Submit {report.period} with ruta 49 = {format_amount(report.ruta49)}?",
                abort=True,
            )
        frozen = service.submit_vat(period_id, report)
        click.echo(f"Submitted VAT declaration for {frozen.period} ({frozen.period_id})")
    except DomainError as e:
        handle_domain_error(ctx, e)


@vat_group.command("export")
@click.argument("period_id")
@click.option(
    "--output",
    "-o",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Write the XML to this file instead of standard output",
)
@click.pass_context
def export_vat(ctx, period_id: str, output: Path | None):
    """Export a VAT declaration as XML."""
    service = ReportService(ctx.obj["db"])
    try:
        report = service.get_vat_report(period_id)
    except DomainError as e:
        handle_domain_error(ctx, e)

    document = vat_to_xml(report, ctx.obj["db"].get_company_settings())
    if output is None:
        click.echo(document.decode("utf-8"), nl=False)
        return
    output.write_bytes(document)
    click.echo(f"Wrote {output}")


def register_commands(cli):
    """Register VAT commands with main CLI."""
    cli.add_command(vat_group, name="vat")
