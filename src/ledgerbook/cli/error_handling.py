"""CLI error handling helpers."""

import click

from ledgerbook.domain.access import Caller
from ledgerbook.domain.errors import DomainError


def handle_domain_error(ctx: click.Context, error: DomainError | ValueError | FileNotFoundError) -> None:
    """Render a domain error and exit with failure."""
    click.echo(f"Error: {error}", err=True)
    ctx.exit(1)


def get_caller(ctx: click.Context) -> Caller:
    """Build the caller from the global options, or exit if no tenant was given."""
    obj = ctx.find_root().obj
    if not obj.get("tenant_id"):
        click.echo("Error: No tenant selected. Use --tenant or set LEDGERBOOK_TENANT.", err=True)
        ctx.exit(1)
    try:
        return Caller.of(obj["user_id"], obj["tenant_id"], obj["role"])
    except DomainError as e:
        handle_domain_error(ctx, e)
