"""Main CLI entry point."""

import logging

import click
from click.core import ParameterSource
from profitshare.database.factories import create_database
from profitshare.settings import ProfitPolicy

# Import and register all commands at module level
from profitshare.cli.commands import (
    participant,
    profit,
    settlement,
    transaction,
)

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR"]


@click.group()
@click.option(
    "--db-path",
    type=click.Path(),
    help="Path to database file (overrides PROFITSHARE_DB_PATH environment variable)",
    envvar="PROFITSHARE_DB_PATH",
)
@click.option(
    "--database-url",
    help="SQLAlchemy database URL (overrides --db-path; env PROFITSHARE_DATABASE_URL)",
    envvar="PROFITSHARE_DATABASE_URL",
)
@click.option(
    "--log-level",
    type=click.Choice(LOG_LEVELS, case_sensitive=False),
    default="WARNING",
    show_default=True,
    help="Logging level",
)
@click.option(
    "--include-closed/--exclude-closed",
    default=True,
    help="Fold closed-trade net into profit (default from PROFITSHARE_INCLUDE_CLOSED_IN_PROFIT, else on)",
)
@click.pass_context
def cli(
    ctx,
    db_path: str | None,
    database_url: str | None,
    log_level: str,
    include_closed: bool,
):
    """Profitshare - profit aggregation and settlement.

    Compute net profit from a classified bill ledger and settle it among
    profit participants in immutable, append-only settlement batches.
    """
    ctx.ensure_object(dict)
    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    policy = ProfitPolicy.from_env()
    if ctx.get_parameter_source("include_closed") == ParameterSource.COMMANDLINE:
        policy = ProfitPolicy(
            include_closed_in_profit=include_closed,
            deduct_refund_in_report=policy.deduct_refund_in_report,
        )
    ctx.obj["policy"] = policy

    # Initialize database connection only when actually running a command
    # (not when showing help)
    if ctx.invoked_subcommand is not None:
        db = create_database(database_url=database_url, database_path=db_path)
        db.connect()
        db.initialize_schema()
        ctx.obj["db"] = db
        ctx.call_on_close(db.disconnect)


# Register all commands
transaction.register_commands(cli)
participant.register_commands(cli)
profit.register_commands(cli)
settlement.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
