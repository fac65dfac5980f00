"""Main CLI entry point."""

import logging

import click
from fundbook.database.factories import create_sqlite_database

# Import and register all commands at module level
from fundbook.cli.commands import (
    account,
    add,
    category,
    reconcile,
    season,
    summary,
    template,
    transaction,
)


@click.group()
@click.option(
    "--db-path",
    type=click.Path(),
    help="Path to database file (overrides FUNDBOOK_DB_PATH environment variable)",
    envvar="FUNDBOOK_DB_PATH",
)
@click.option("--verbose", "-v", is_flag=True, help="Log what the application is doing")
@click.pass_context
def cli(ctx, db_path: str | None, verbose: bool):
    """Fundbook - bookkeeping for clubs and small organisations.

    Keep account registers, reconcile them against bank statements,
    generate recurring transactions and track season fees.
    """
    ctx.ensure_object(dict)
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    # Initialize database connection only when actually running a command
    # (not when showing help)
    if ctx.invoked_subcommand is not None:
        db = create_sqlite_database(database_path=db_path)
        db.connect()
        db.initialize_schema()
        ctx.obj["db"] = db
        ctx.call_on_close(db.disconnect)


# Register all commands
account.register_commands(cli)
category.register_commands(cli)
add.register_commands(cli)
transaction.register_commands(cli)
reconcile.register_commands(cli)
template.register_commands(cli)
season.register_commands(cli)
summary.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
