"""Business unit commands."""

import click
from ledgerbook.cli.account_resolution import resolve_unit_or_exit
from ledgerbook.cli.error_handling import get_caller, handle_domain_error
from ledgerbook.cli.tree_output import echo_tree
from ledgerbook.domain.business_unit import BusinessUnitService
from ledgerbook.domain.errors import DomainError


@click.group()
def unit_group():
    """Manage business units."""
    pass


@unit_group.command("list")
@click.option("--all", "include_inactive", is_flag=True, help="Include inactive units")
@click.option("--ids", "show_ids", is_flag=True, help="Show unit IDs")
@click.pass_context
def list_units(ctx, include_inactive: bool, show_ids: bool):
    """List business units in tree format."""
    caller = get_caller(ctx)
    try:
        tree = BusinessUnitService(ctx.obj["db"]).get_tree(caller, include_inactive=include_inactive)
    except DomainError as e:
        handle_domain_error(ctx, e)
    if not tree:
        click.echo("No business units found.")
        return
    echo_tree(tree, show_ids=show_ids)


@unit_group.command("create")
@click.argument("name")
@click.option("--description", help="Description")
@click.option("--parent", help="Parent unit name or ID")
@click.pass_context
def create_unit(ctx, name: str, description: str | None, parent: str | None):
    """Create a business unit."""
    caller = get_caller(ctx)
    service = BusinessUnitService(ctx.obj["db"])
    parent_id = resolve_unit_or_exit(ctx, service, caller, parent) if parent else None
    try:
        unit = service.create_business_unit(caller, name=name, description=description, parent_id=parent_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Created business unit '{unit.name}' (ID: {unit.id})")


@unit_group.command("update")
@click.argument("unit")
@click.option("--name", help="New name")
@click.option("--description", help="New description")
@click.option("--parent", help="New parent name or ID, or empty string to make it a root")
@click.option("--activate", is_flag=True, help="Reactivate a deleted unit")
@click.pass_context
def update_unit(ctx, unit: str, name: str | None, description: str | None, parent: str | None, activate: bool):
    """Update a business unit given by name or ID."""
    caller = get_caller(ctx)
    service = BusinessUnitService(ctx.obj["db"])
    unit_id = resolve_unit_or_exit(ctx, service, caller, unit)
    parent_id = resolve_unit_or_exit(ctx, service, caller, parent) if parent else None
    try:
        updated = service.update_business_unit(
            caller,
            unit_id,
            name=name,
            description=description,
            parent_id=parent_id,
            is_active=True if activate else None,
            clear_parent=parent == "",
        )
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Updated business unit '{updated.name}'")


@unit_group.command("delete")
@click.argument("unit")
@click.pass_context
def delete_unit(ctx, unit: str):
    """Deactivate a business unit. Entries keep referring to it."""
    caller = get_caller(ctx)
    service = BusinessUnitService(ctx.obj["db"])
    unit_id = resolve_unit_or_exit(ctx, service, caller, unit)
    try:
        deactivated = service.delete_business_unit(caller, unit_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Deactivated business unit '{deactivated.name}'")


def register_commands(cli):
    """Register business unit commands with main CLI."""
    cli.add_command(unit_group, name="unit")
