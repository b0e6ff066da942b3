"""Category management commands."""

import click
from ledgerbook.cli.account_resolution import resolve_category_or_exit
from ledgerbook.cli.error_handling import get_caller, handle_domain_error
from ledgerbook.cli.tree_output import echo_tree
from ledgerbook.domain.category import CategoryService
from ledgerbook.domain.errors import DomainError

CATEGORY_TYPES = click.Choice(["INCOME", "EXPENSE"], case_sensitive=False)


@click.group()
def category_group():
    """Manage categories."""
    pass


@category_group.command("list")
@click.option("--ids", "show_ids", is_flag=True, help="Show category IDs")
@click.pass_context
def list_categories(ctx, show_ids: bool):
    """List all categories in tree format."""
    caller = get_caller(ctx)
    try:
        tree = CategoryService(ctx.obj["db"]).get_category_tree(caller)
    except DomainError as e:
        handle_domain_error(ctx, e)
    if not tree:
        click.echo("No categories found.")
        return
    echo_tree(tree, show_ids=show_ids)


@category_group.command("create")
@click.argument("name")
@click.option("--type", "category_type", type=CATEGORY_TYPES, required=True, help="INCOME or EXPENSE")
@click.option("--parent", help="Parent category path (e.g., 'Operating') or ID")
@click.pass_context
def create_category(ctx, name: str, category_type: str, parent: str | None):
    """Create a new category.

    Examples:
        ledgerbook category create "Operating" --type EXPENSE
        ledgerbook category create "Utilities" --type EXPENSE --parent "Operating"
    """
    caller = get_caller(ctx)
    service = CategoryService(ctx.obj["db"])
    parent_id = resolve_category_or_exit(ctx, service, caller, parent) if parent else None
    try:
        category = service.create_category(caller, name=name, type=category_type, parent_id=parent_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Created category '{service.format_category_path(caller, category.id)}'")


@category_group.command("update")
@click.argument("category")
@click.option("--name", help="New name")
@click.option("--type", "category_type", type=CATEGORY_TYPES, help="New type")
@click.option("--parent", help="New parent path or ID, or empty string to make it a root")
@click.pass_context
def update_category(ctx, category: str, name: str | None, category_type: str | None, parent: str | None):
    """Rename, retype or move a category given by path or ID."""
    caller = get_caller(ctx)
    service = CategoryService(ctx.obj["db"])
    category_id = resolve_category_or_exit(ctx, service, caller, category)
    parent_id = resolve_category_or_exit(ctx, service, caller, parent) if parent else None
    try:
        service.update_category(
            caller,
            category_id,
            name=name,
            type=category_type,
            parent_id=parent_id,
            clear_parent=parent == "",
        )
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Updated category '{service.format_category_path(caller, category_id)}'")


@category_group.command("delete")
@click.argument("category")
@click.option("--yes", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def delete_category(ctx, category: str, yes: bool):
    """Delete a category and its direct children."""
    caller = get_caller(ctx)
    service = CategoryService(ctx.obj["db"])
    category_id = resolve_category_or_exit(ctx, service, caller, category)
    if not yes and not click.confirm(f"Delete '{category}' and its direct children?"):
        click.echo("Deletion cancelled.")
        return
    try:
        deleted = service.delete_category(caller, category_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Deleted {deleted} categor{'y' if deleted == 1 else 'ies'}")


@category_group.command("import")
@click.argument("csv_file", type=click.Path(exists=True))
@click.pass_context
def import_categories(ctx, csv_file: str):
    """Create categories from a CSV file.

    Columns: Name, Type, Parent (optional parent name).
    """
    caller = get_caller(ctx)
    try:
        result = CategoryService(ctx.obj["db"]).import_csv(caller, csv_file)
    except (DomainError, FileNotFoundError) as e:
        handle_domain_error(ctx, e)
    click.echo(f"Imported: {result['imported']} ({result['skipped']} already present)")
    if result["errors"]:
        click.echo(f"Errors: {len(result['errors'])}")
        for error in result["errors"]:
            click.echo(f"  - {error}", err=True)


def register_commands(cli):
    """Register category commands with main CLI."""
    cli.add_command(category_group, name="category")
