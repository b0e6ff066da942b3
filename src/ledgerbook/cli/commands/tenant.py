"""Tenant onboarding commands."""

import click
from ledgerbook.cli.error_handling import handle_domain_error
from ledgerbook.domain.errors import DomainError
from ledgerbook.domain.tenant import TenantService


@click.group()
def tenant_group():
    """Onboard and list tenants."""
    pass


@tenant_group.command("create")
@click.argument("name")
@click.option("--id", "tenant_id", help="Fixed tenant ID (generated if omitted)")
@click.pass_context
def create_tenant(ctx, name: str, tenant_id: str | None):
    """Create a tenant.

    Examples:
        ledgerbook tenant create "Acme Rentals"
        ledgerbook tenant create "Acme Rentals" --id acme
    """
    service = TenantService(ctx.obj["db"])
    try:
        tenant = service.create_tenant(name, tenant_id=tenant_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Created tenant '{tenant.name}' (ID: {tenant.id})")


@tenant_group.command("list")
@click.pass_context
def list_tenants(ctx):
    """List all tenants."""
    tenants = TenantService(ctx.obj["db"]).list_tenants()
    if not tenants:
        click.echo("No tenants found.")
        return
    for tenant in tenants:
        click.echo(f"{tenant.id:<34} {tenant.name}")


def register_commands(cli):
    """Register tenant commands with main CLI."""
    cli.add_command(tenant_group, name="tenant")
