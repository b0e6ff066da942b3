"""Batch import, undo and listing commands."""

import click
from ledgerbook.cli.error_handling import get_caller, handle_domain_error
from ledgerbook.domain.batch import BatchService
from ledgerbook.domain.csv_import import LedgerImportService
from ledgerbook.domain.errors import DomainError


@click.command("import")
@click.argument("csv_file", type=click.Path(exists=True))
@click.option("--batch-id", help="Batch ID to import under (letters, digits and '-')")
@click.option("--dayfirst", is_flag=True, help="Read ambiguous dates as DD/MM/YYYY")
@click.pass_context
def import_csv(ctx, csv_file: str, batch_id: str | None, dayfirst: bool):
    """Import ledger entries from a CSV file as one undoable batch.

    Required columns: Date, Description, Debit, Credit, Amount. Optional:
    Business Unit, Status. Debit and Credit name a financial account or a
    chart-of-accounts code/name.

    Examples:
        ledgerbook import statement.csv
        ledgerbook import statement.csv --batch-id 2024-01-bca --dayfirst
    """
    caller = get_caller(ctx)
    service = LedgerImportService(ctx.obj["db"])
    try:
        result = service.import_csv(caller, csv_file, batch_id=batch_id, dayfirst=dayfirst)
    except (DomainError, FileNotFoundError) as e:
        handle_domain_error(ctx, e)

    click.echo(f"Imported: {result['imported']} entries")
    if result["batch_id"]:
        click.echo(f"Batch ID: {result['batch_id']} (undo with: ledgerbook undo {result['batch_id']})")
    click.echo(f"Skipped (duplicates): {result['skipped']}")
    for detail in result["skipped_details"]:
        click.echo(f"  - {detail}")
    if result["errors"]:
        click.echo(f"Errors: {len(result['errors'])}")
        for error in result["errors"]:
            click.echo(f"  - {error}", err=True)


@click.command("undo")
@click.argument("batch_id")
@click.option("--yes", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def undo_batch(ctx, batch_id: str, yes: bool):
    """Remove every entry of an import batch and reverse its balance effects."""
    caller = get_caller(ctx)
    service = BatchService(ctx.obj["db"])
    if not yes and not click.confirm(f"Undo batch '{batch_id}'?"):
        click.echo("Undo cancelled.")
        return
    try:
        result = service.undo_batch(caller, batch_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Undid batch '{batch_id}': removed {result.count} entries")
    for change in result.balance_changes:
        click.echo(f"  {change.account_id}: {change.delta:+,.2f}")


@click.command("batches")
@click.pass_context
def list_batches(ctx):
    """List import batches still present in the ledger."""
    caller = get_caller(ctx)
    try:
        batches = BatchService(ctx.obj["db"]).list_batches(caller)
    except DomainError as e:
        handle_domain_error(ctx, e)
    if not batches:
        click.echo("No batches found.")
        return
    for batch in batches:
        click.echo(
            f"{batch.batch_id:<32} {batch.entry_count:>5} entries  "
            f"in {batch.total_in:>16,.2f}  out {batch.total_out:>16,.2f}"
        )


def register_commands(cli):
    """Register import commands with main CLI."""
    cli.add_command(import_csv)
    cli.add_command(undo_batch)
    cli.add_command(list_batches)
