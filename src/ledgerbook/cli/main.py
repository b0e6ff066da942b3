"""Main CLI entry point."""

import click
from ledgerbook.database.factories import create_sqlite_database
from ledgerbook.domain.access import Role
from ledgerbook.logging_config import configure_logging

# Import and register all commands at module level
from ledgerbook.cli.commands import (
    tenant,
    account,
    entry,
    import_cmd,
    reconcile,
    coa,
    category,
    unit,
    summary,
)


@click.group()
@click.option(
    "--db-path",
    type=click.Path(),
    help="Path to database file (overrides LEDGERBOOK_DB_PATH environment variable)",
    envvar="LEDGERBOOK_DB_PATH",
)
@click.option("--tenant", "tenant_id", envvar="LEDGERBOOK_TENANT", help="Tenant ID to act in")
@click.option("--user", "user_id", envvar="LEDGERBOOK_USER", default="cli", show_default=True, help="Caller user ID")
@click.option(
    "--role",
    envvar="LEDGERBOOK_ROLE",
    type=click.Choice([r.value for r in Role], case_sensitive=False),
    default=Role.OWNER.value,
    show_default=True,
    help="Caller role",
)
@click.option(
    "--log-level",
    envvar="LEDGERBOOK_LOG_LEVEL",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default="WARNING",
    show_default=True,
)
@click.option(
    "--log-format",
    envvar="LEDGERBOOK_LOG_FORMAT",
    type=click.Choice(["console", "json"], case_sensitive=False),
    default="console",
    show_default=True,
)
@click.pass_context
def cli(
    ctx,
    db_path: str | None,
    tenant_id: str | None,
    user_id: str,
    role: str,
    log_level: str,
    log_format: str,
):
    """Ledgerbook - multi-tenant back-office ledger.

    Record entries against financial accounts and a chart of accounts, import
    bank statements as undoable batches, and reconcile cached balances.

    The caller identity (--tenant, --user, --role) is trusted as given.
    """
    ctx.ensure_object(dict)
    configure_logging(level=log_level.upper(), format=log_format.lower())
    ctx.obj["tenant_id"] = tenant_id
    ctx.obj["user_id"] = user_id
    ctx.obj["role"] = role.upper()

    # Initialize database connection only when actually running a command
    # (not when showing help)
    if ctx.invoked_subcommand is not None:
        db = create_sqlite_database(database_path=db_path)
        db.connect()
        db.initialize_schema()
        ctx.obj["db"] = db
        ctx.call_on_close(db.disconnect)


# Register all commands
tenant.register_commands(cli)
account.register_commands(cli)
entry.register_commands(cli)
import_cmd.register_commands(cli)
reconcile.register_commands(cli)
coa.register_commands(cli)
category.register_commands(cli)
unit.register_commands(cli)
summary.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
