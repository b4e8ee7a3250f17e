"""CLI error handling helpers."""

from datetime import date
from typing import Optional

import click

from ledgerkit.config.logging import get_logger
from ledgerkit.domain.errors import DomainError
from ledgerkit.utils.date_parser import parse_date

logger = get_logger(__name__)


def handle_domain_error(ctx: click.Context, error: DomainError | ValueError) -> None:
    """Render a domain error and exit with failure."""
    logger.debug(
        "command_failed",
        command=ctx.command_path,
        error_type=type(error).__name__,
        error=str(error),
    )
    click.echo(f"Error: {error}", err=True)
    ctx.exit(1)


def parse_date_option(ctx: click.Context, value: Optional[str], label: str = "date") -> Optional[date]:
    """Parse an optional date option, exiting with failure if it is invalid."""
    if not value:
        return None
    try:
        return parse_date(value)
    except ValueError as e:
        click.echo(f"Error: Invalid {label} format: {e}", err=True)
        ctx.exit(1)
