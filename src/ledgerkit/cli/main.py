"""Main CLI entry point."""

import click

from ledgerkit.config.logging import configure_logging
from ledgerkit.database.factories import create_sqlite_database

# Import and register all commands at module level
from ledgerkit.cli.commands import (
    accounts,
    agi,
    company,
    ledger,
    payroll,
    periods,
    vat,
    verification,
)


@click.group()
@click.option(
    "--db-path",
    type=click.Path(),
    help="Path to database file (overrides LEDGERKIT_DB_PATH environment variable)",
    envvar="LEDGERKIT_DB_PATH",
)
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default="WARNING",
    show_default=True,
    envvar="LEDGERKIT_LOG_LEVEL",
    help="Log level for structured logs on stderr",
)
@click.option(
    "--log-format",
    type=click.Choice(["console", "json"]),
    default="console",
    show_default=True,
    envvar="LEDGERKIT_LOG_FORMAT",
    help="Log output format",
)
@click.pass_context
def cli(ctx, db_path: str | None, log_level: str, log_format: str):
    """ledgerkit - Swedish double-entry bookkeeping.

    Book verifications against the BAS chart, follow account balances, and
    derive VAT (momsdeklaration) and employer (AGI) declarations from the
    ledger. Submitted declarations are frozen.
    """
    ctx.ensure_object(dict)

    # Initialize database connection only when actually running a command
    # (not when showing help)
    if ctx.invoked_subcommand is not None:
        configure_logging(level=log_level.upper(), format=log_format)
        db = create_sqlite_database(database_path=db_path)
        db.connect()
        db.initialize_schema()
        ctx.obj["db"] = db
        ctx.call_on_close(db.disconnect)


# Register all commands
company.register_commands(cli)
accounts.register_commands(cli)
verification.register_commands(cli)
ledger.register_commands(cli)
periods.register_commands(cli)
vat.register_commands(cli)
agi.register_commands(cli)
payroll.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
