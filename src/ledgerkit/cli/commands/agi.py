"""Employer declaration (arbetsgivardeklaration) commands."""

from pathlib import Path

import click

from ledgerkit.cli.error_handling import handle_domain_error
from ledgerkit.domain.errors import DomainError
from ledgerkit.domain.filing import agi_to_xml
from ledgerkit.domain.reports import ReportService
from ledgerkit.utils.amount_parser import format_amount


@click.group()
def agi_group():
    """Compute, submit and export employer declarations."""
    pass


@agi_group.command("list")
@click.pass_context
def list_agi(ctx):
    """List employer declarations for months with payroll."""
    service = ReportService(ctx.obj["db"])
    reports = service.get_agi_reports()
    if not reports:
        click.echo("No payroll activity found.")
        return

    click.echo(
        f"{'Month':<8} {'Name':<16} {'Due':<10}  {'Staff':>5} {'Salary':>12} {'Tax':>12} "
        f"{'Contrib.':>12} {'To pay':>12}  Status"
    )
    click.echo("-" * 105)
    for report in reports:
        click.echo(
            f"{report.period_key:<8} {report.period:<16} {report.due_date.isoformat():<10}  "
            f"{report.employees:>5} {format_amount(report.total_salary):>12} "
            f"{format_amount(report.tax):>12} {format_amount(report.contributions):>12} "
            f"{format_amount(report.total_to_pay):>12}  {report.status.value}"
        )


@agi_group.command("show")
@click.argument("month")
@click.pass_context
def show_agi(ctx, month: str):
    """Show the employer declaration of MONTH (YYYY-MM)."""
    service = ReportService(ctx.obj["db"])
    try:
        report = service.get_agi_report(month)
        click.echo(f"Arbetsgivardeklaration {report.period} ({report.period_key})")
        click.echo(f"Due:           {report.due_date.isoformat()}")
        click.echo(f"Status:        {report.status.value}")
        click.echo(f"Employees:     {report.employees}")
        click.echo(f"Total salary:  {format_amount(report.total_salary)}")
        click.echo(f"Tax:           {format_amount(report.tax)}")
        click.echo(f"Contributions: {format_amount(report.contributions)}")
        click.echo(f"Total to pay:  {format_amount(report.total_to_pay)}")
    except DomainError as e:
        handle_domain_error(ctx, e)


@agi_group.command("submit")
@click.argument("month")
@click.pass_context
def submit_agi(ctx, month: str):
    """Submit the employer declaration of MONTH (YYYY-MM)."""
    service = ReportService(ctx.obj["db"])
    try:
        report = service.submit_agi(month)
        click.echo(f"Submitted employer declaration for {report.period} ({report.period_key})")
    except DomainError as e:
        handle_domain_error(ctx, e)


@agi_group.command("export")
@click.argument("month")
@click.option(
    "--output",
    "-o",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Write the XML to this file instead of standard output",
)
@click.pass_context
def export_agi(ctx, month: str, output: Path | None):
    """Export the employer declaration of MONTH (YYYY-MM) as XML."""
    service = ReportService(ctx.obj["db"])
    try:
        report = service.get_agi_report(month)
    except DomainError as e:
        handle_domain_error(ctx, e)

    document = agi_to_xml(report, ctx.obj["db"].get_company_settings().org_number)
    if output is None:
        click.echo(document.decode("utf-8"), nl=False)
        return
    output.write_bytes(document)
    click.echo(f"Wrote {output}")


def register_commands(cli):
    """Register AGI commands with main CLI."""
    cli.add_command(agi_group, name="agi")
