"""Chart of accounts commands."""

import click
from ledgerbook.cli.account_resolution import resolve_coa_or_exit
from ledgerbook.cli.error_handling import get_caller, handle_domain_error
from ledgerbook.cli.tree_output import echo_tree
from ledgerbook.domain.coa import ChartOfAccountService
from ledgerbook.domain.entities import CoaType, NormalBalance
from ledgerbook.domain.errors import DomainError

COA_TYPES = click.Choice([t.value for t in CoaType], case_sensitive=False)
BALANCE_SIDES = click.Choice([b.value for b in NormalBalance], case_sensitive=False)


@click.group()
def coa_group():
    """Manage the chart of accounts."""
    pass


@coa_group.command("list")
@click.option("--all", "include_inactive", is_flag=True, help="Include inactive accounts")
@click.option("--ids", "show_ids", is_flag=True, help="Show node IDs")
@click.pass_context
def list_coa(ctx, include_inactive: bool, show_ids: bool):
    """Show the chart of accounts as a tree."""
    caller = get_caller(ctx)
    try:
        tree = ChartOfAccountService(ctx.obj["db"]).get_tree(caller, include_inactive=include_inactive)
    except DomainError as e:
        handle_domain_error(ctx, e)
    if not tree:
        click.echo("No chart of accounts found.")
        return
    echo_tree(tree, show_ids=show_ids)


@coa_group.command("create")
@click.argument("code")
@click.argument("name")
@click.option("--type", "coa_type", type=COA_TYPES, help="Account type (defaults from the code)")
@click.option("--normal-balance", type=BALANCE_SIDES, help="DEBIT or CREDIT (defaults from the type)")
@click.option("--parent", help="Parent code or ID")
@click.option("--description", help="Description")
@click.pass_context
def create_coa(
    ctx,
    code: str,
    name: str,
    coa_type: str | None,
    normal_balance: str | None,
    parent: str | None,
    description: str | None,
):
    """Create a chart-of-accounts node.

    Examples:
        ledgerbook coa create 1000 "Assets"
        ledgerbook coa create 1100 "Cash" --parent 1000
    """
    caller = get_caller(ctx)
    service = ChartOfAccountService(ctx.obj["db"])
    parent_id = resolve_coa_or_exit(ctx, service, caller, parent) if parent else None
    try:
        node = service.create_coa(
            caller,
            code=code,
            name=name,
            type=coa_type,
            normal_balance=normal_balance,
            parent_id=parent_id,
            description=description,
        )
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Created '{node.label}' ({node.type.value}, {node.normal_balance.value})")


@coa_group.command("update")
@click.argument("coa")
@click.option("--code", help="New code")
@click.option("--name", help="New name")
@click.option("--type", "coa_type", type=COA_TYPES, help="New type")
@click.option("--normal-balance", type=BALANCE_SIDES, help="New normal balance")
@click.option("--parent", help="New parent code or ID, or empty string to make it a root")
@click.option("--description", help="New description")
@click.option("--active/--inactive", "is_active", default=None, help="Activate or deactivate")
@click.pass_context
def update_coa(
    ctx,
    coa: str,
    code: str | None,
    name: str | None,
    coa_type: str | None,
    normal_balance: str | None,
    parent: str | None,
    description: str | None,
    is_active: bool | None,
):
    """Update a chart-of-accounts node given by code or ID."""
    caller = get_caller(ctx)
    service = ChartOfAccountService(ctx.obj["db"])
    coa_id = resolve_coa_or_exit(ctx, service, caller, coa)
    parent_id = resolve_coa_or_exit(ctx, service, caller, parent) if parent else None
    try:
        node = service.update_coa(
            caller,
            coa_id,
            code=code,
            name=name,
            type=coa_type,
            normal_balance=normal_balance,
            parent_id=parent_id,
            description=description,
            is_active=is_active,
            clear_parent=parent == "",
        )
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Updated '{node.label}'")


@coa_group.command("delete")
@click.argument("coa")
@click.option("--yes", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def delete_coa(ctx, coa: str, yes: bool):
    """Delete a node and its direct children.

    Entries keep their amounts but lose the reference to deleted nodes.
    """
    caller = get_caller(ctx)
    service = ChartOfAccountService(ctx.obj["db"])
    coa_id = resolve_coa_or_exit(ctx, service, caller, coa)
    if not yes and not click.confirm(f"Delete '{coa}' and its direct children?"):
        click.echo("Deletion cancelled.")
        return
    try:
        deleted = service.delete_coa(caller, coa_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Deleted {deleted} node(s)")


@coa_group.command("import")
@click.argument("csv_file", type=click.Path(exists=True))
@click.pass_context
def import_coa(ctx, csv_file: str):
    """Create or update nodes from a CSV file.

    Columns: Code, Name, Type (optional), Normal Balance (optional), Description (optional).
    """
    caller = get_caller(ctx)
    try:
        result = ChartOfAccountService(ctx.obj["db"]).import_csv(caller, csv_file)
    except (DomainError, FileNotFoundError) as e:
        handle_domain_error(ctx, e)
    click.echo(f"Imported: {result['imported']} ({result['created']} created, {result['updated']} updated)")
    if result["errors"]:
        click.echo(f"Errors: {len(result['errors'])}")
        for error in result["errors"]:
            click.echo(f"  - {error}", err=True)


def register_commands(cli):
    """Register chart of accounts commands with main CLI."""
    cli.add_command(coa_group, name="coa")
