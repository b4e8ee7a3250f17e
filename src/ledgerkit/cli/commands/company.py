"""Company settings commands."""

import click

from ledgerkit.cli.error_handling import handle_domain_error
from ledgerkit.domain.company import CompanyService
from ledgerkit.domain.entities import VatFrequency
from ledgerkit.domain.errors import DomainError


@click.group()
def company_group():
    """Manage company settings."""
    pass


def _echo_settings(settings) -> None:
    click.echo(f"Organisation number: {settings.org_number}")
    click.echo(f"Company name:        {settings.company_name or '-'}")
    click.echo(f"VAT number:          {settings.vat_registration_number}")
    click.echo(f"VAT frequency:       {settings.vat_frequency.value}")
    click.echo(f"Fiscal year end:     {settings.fiscal_year_end}")


@company_group.command("show")
@click.pass_context
def show_company(ctx):
    """Show company settings."""
    service = CompanyService(ctx.obj["db"])
    _echo_settings(service.get_settings())


@company_group.command("set")
@click.option("--org-number", help="Organisation number (NNNNNN-NNNN)")
@click.option("--name", "company_name", help="Company name")
@click.option("--vat-number", help="VAT registration number (defaults to SE<org number>01)")
@click.option(
    "--vat-frequency",
    type=click.Choice([f.value for f in VatFrequency]),
    help="How often VAT is declared",
)
@click.option("--fiscal-year-end", help="Fiscal year end as MM-DD (e.g. 12-31)")
@click.pass_context
def set_company(
    ctx,
    org_number: str | None,
    company_name: str | None,
    vat_number: str | None,
    vat_frequency: str | None,
    fiscal_year_end: str | None,
):
    """Update company settings.

    Examples:
        ledgerkit company set --org-number 556677-8899 --name "Exempel AB"
        ledgerkit company set --vat-frequency monthly
    """
    service = CompanyService(ctx.obj["db"])
    try:
        settings = service.update_settings(
            org_number=org_number,
            company_name=company_name,
            vat_number=vat_number,
            vat_frequency=VatFrequency(vat_frequency) if vat_frequency else None,
            fiscal_year_end=fiscal_year_end,
        )
        click.echo("Updated company settings")
        _echo_settings(settings)
    except DomainError as e:
        handle_domain_error(ctx, e)


def register_commands(cli):
    """Register company commands with main CLI."""
    cli.add_command(company_group, name="company")
