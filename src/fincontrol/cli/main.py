"""Main CLI entry point."""

import logging

import click
from fincontrol.database.factories import create_sqlite_database

# Import and register all commands at module level
from fincontrol.cli.commands import (
    user,
    category,
    card,
    entry,
    summary,
    asset,
    trade,
    portfolio,
    quotes,
)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


@click.group()
@click.option(
    "--db-path",
    type=click.Path(),
    help="Path to database file (overrides FINCONTROL_DB_PATH environment variable)",
    envvar="FINCONTROL_DB_PATH",
)
@click.option(
    "--user",
    help="User email or ID that owns the records (or set FINCONTROL_USER)",
    envvar="FINCONTROL_USER",
)
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default="WARNING",
    show_default=True,
    envvar="FINCONTROL_LOG_LEVEL",
    help="Logging verbosity",
)
@click.pass_context
def cli(ctx, db_path: str | None, user: str | None, log_level: str):
    """Fincontrol - Personal finance tracking.

    Record expenses and incomes (with installments and fixed monthly
    entries), credit cards and categories, follow monthly totals, and keep
    an investment portfolio with daily market quotes.
    """
    ctx.ensure_object(dict)
    logging.basicConfig(level=log_level.upper(), format=LOG_FORMAT)

    # Initialize database connection only when actually running a command
    # (not when showing help)
    if ctx.invoked_subcommand is not None:
        db = create_sqlite_database(database_path=db_path)
        db.connect()
        db.initialize_schema()
        ctx.obj["db"] = db
        ctx.obj["user"] = user
        ctx.call_on_close(db.disconnect)


# Register all commands
user.register_commands(cli)
category.register_commands(cli)
card.register_commands(cli)
entry.register_commands(cli)
summary.register_commands(cli)
asset.register_commands(cli)
trade.register_commands(cli)
portfolio.register_commands(cli)
quotes.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
