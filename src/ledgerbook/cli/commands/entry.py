"""Ledger entry commands."""

import click
from datetime import date as date_type
from ledgerbook.cli.account_resolution import (
    resolve_account_or_exit,
    resolve_category_or_exit,
    resolve_coa_or_exit,
    resolve_unit_or_exit,
)
from ledgerbook.cli.date_filters import resolve_cli_date_range, with_date_range
from ledgerbook.cli.error_handling import get_caller, handle_domain_error
from ledgerbook.domain.account import AccountService
from ledgerbook.domain.business_unit import BusinessUnitService
from ledgerbook.domain.category import CategoryService
from ledgerbook.domain.coa import ChartOfAccountService
from ledgerbook.domain.errors import DomainError
from ledgerbook.domain.ledger import LedgerService
from ledgerbook.utils.amount_parser import parse_amount
from ledgerbook.utils.date_parser import parse_date

ENTRY_TYPES = click.Choice(["IN", "OUT"], case_sensitive=False)
STATUSES = click.Choice(["PAID", "UNPAID"], case_sensitive=False)


@click.group()
def entry_group():
    """Append, correct and list ledger entries."""
    pass


def _parse_date_or_exit(ctx, value: str) -> date_type:
    try:
        return parse_date(value)
    except ValueError as e:
        click.echo(f"Error: Invalid date format: {e}", err=True)
        ctx.exit(1)


def _parse_amount_or_exit(ctx, value: str):
    try:
        return parse_amount(value)
    except ValueError as e:
        click.echo(f"Error: Invalid amount format: {e}", err=True)
        ctx.exit(1)


@entry_group.command("add")
@click.option("--amount", required=True, help="Positive amount (e.g., 150000 or 'Rp 1.500.000')")
@click.option("--type", "entry_type", type=ENTRY_TYPES, required=True, help="IN or OUT")
@click.option("--date", "entry_date", default="today", show_default=True, help="Entry date")
@click.option("--description", help="Description")
@click.option("--status", type=STATUSES, default="PAID", show_default=True, help="Payment status")
@click.option("--account", help="Financial account name or ID (omit for a journal entry)")
@click.option("--category", help="Category path or ID")
@click.option("--coa", help="Chart of account code or ID")
@click.option("--unit", help="Business unit name or ID")
@click.option("--label", help="Display label for journal entries without an account")
@click.pass_context
def add_entry(
    ctx,
    amount: str,
    entry_type: str,
    entry_date: str,
    description: str | None,
    status: str,
    account: str | None,
    category: str | None,
    coa: str | None,
    unit: str | None,
    label: str | None,
) -> None:
    """Append an entry and update the account balance.

    Examples:
        ledgerbook entry add --account "Operations" --type IN --amount 1500000 --coa 4100
        ledgerbook entry add --account "Operations" --type OUT --amount 250000 --date 2024-01-15
    """
    caller = get_caller(ctx)
    db = ctx.obj["db"]

    account_id = resolve_account_or_exit(ctx, AccountService(db), caller, account) if account else None
    category_id = resolve_category_or_exit(ctx, CategoryService(db), caller, category) if category else None
    coa_id = resolve_coa_or_exit(ctx, ChartOfAccountService(db), caller, coa) if coa else None
    unit_id = resolve_unit_or_exit(ctx, BusinessUnitService(db), caller, unit) if unit else None

    try:
        entry = LedgerService(db).append_entry(
            caller,
            date=_parse_date_or_exit(ctx, entry_date),
            amount=_parse_amount_or_exit(ctx, amount),
            type=entry_type,
            description=description,
            status=status,
            account_id=account_id,
            category_id=category_id,
            coa_id=coa_id,
            business_unit_id=unit_id,
            account_label=label,
        )
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Added entry {entry.id} ({entry.type.value} {entry.amount:,.2f})")


@entry_group.command("update")
@click.argument("entry_id")
@click.option("--amount", help="New amount")
@click.option("--type", "entry_type", type=ENTRY_TYPES, help="New direction")
@click.option("--date", "entry_date", help="New date")
@click.option("--description", help="New description")
@click.option("--status", type=STATUSES, help="New payment status")
@click.option("--account", help="Account name or ID, or empty string to make it a journal entry")
@click.option("--category", help="Category path or ID, or empty string to clear")
@click.option("--coa", help="Chart of account code or ID, or empty string to clear")
@click.option("--unit", help="Business unit name or ID, or empty string to clear")
@click.option("--label", help="Display label for journal entries")
@click.pass_context
def update_entry(
    ctx,
    entry_id: str,
    amount: str | None,
    entry_type: str | None,
    entry_date: str | None,
    description: str | None,
    status: str | None,
    account: str | None,
    category: str | None,
    coa: str | None,
    unit: str | None,
    label: str | None,
) -> None:
    """Update an entry; balances follow the change.

    Updates only the fields that are provided. Use --category "" to clear the category.

    Examples:
        ledgerbook entry update 3f2a... --amount 175000
        ledgerbook entry update 3f2a... --account "Savings" --coa ""
    """
    caller = get_caller(ctx)
    db = ctx.obj["db"]

    account_id = None
    if account:
        account_id = resolve_account_or_exit(ctx, AccountService(db), caller, account)
    category_id = None
    if category:
        category_id = resolve_category_or_exit(ctx, CategoryService(db), caller, category)
    coa_id = None
    if coa:
        coa_id = resolve_coa_or_exit(ctx, ChartOfAccountService(db), caller, coa)
    unit_id = None
    if unit:
        unit_id = resolve_unit_or_exit(ctx, BusinessUnitService(db), caller, unit)

    try:
        LedgerService(db).update_entry(
            caller,
            entry_id,
            date=_parse_date_or_exit(ctx, entry_date) if entry_date is not None else None,
            amount=_parse_amount_or_exit(ctx, amount) if amount is not None else None,
            type=entry_type,
            description=description,
            status=status,
            account_id=account_id,
            category_id=category_id,
            coa_id=coa_id,
            business_unit_id=unit_id,
            account_label=label,
            clear_account=account == "",
            clear_category=category == "",
            clear_coa=coa == "",
            clear_business_unit=unit == "",
        )
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Updated entry {entry_id}")


@entry_group.command("delete")
@click.argument("entry_id")
@click.option("--yes", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def delete_entry(ctx, entry_id: str, yes: bool) -> None:
    """Delete an entry and reverse its balance effect."""
    caller = get_caller(ctx)
    service = LedgerService(ctx.obj["db"])
    if not yes and not click.confirm(f"Are you sure you want to delete entry {entry_id}?"):
        click.echo("Deletion cancelled.")
        return
    try:
        service.delete_entry(caller, entry_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Deleted entry {entry_id}")


@entry_group.command("list")
@with_date_range
@click.option("--account", help="Account name or ID")
@click.option("--batch", "batch_id", help="Only entries from this import batch")
@click.option("--limit", type=int, help="Maximum number of entries")
@click.option("--verbose", "-v", is_flag=True, help="Show status, COA and business unit columns")
@click.pass_context
def list_entries(
    ctx,
    start_date: str | None,
    end_date: str | None,
    period: str | None,
    account: str | None,
    batch_id: str | None,
    limit: int | None,
    verbose: bool,
):
    """List entries, newest first."""
    caller = get_caller(ctx)
    db = ctx.obj["db"]
    start, end = resolve_cli_date_range(ctx, start_date=start_date, end_date=end_date, period=period)
    account_id = resolve_account_or_exit(ctx, AccountService(db), caller, account) if account else None

    try:
        entries = LedgerService(db).list_entries(
            caller, start_date=start, end_date=end, account_id=account_id, batch_id=batch_id, limit=limit
        )
    except DomainError as e:
        handle_domain_error(ctx, e)

    if not entries:
        click.echo("No entries found.")
        return

    click.echo(f"\nFound {len(entries)} entr{'y' if len(entries) == 1 else 'ies'}:")
    click.echo("-" * 110)
    for entry in entries:
        amount = f"{entry.signed_amount:+,.2f}"
        description = (entry.description or "")[:30]
        line = f"{entry.id:<34} {str(entry.date):<12} {amount:>16} {(entry.account or ''):<20} {description}"
        if verbose:
            status = entry.status.value if entry.status else "-"
            line += f" | {status} | coa={entry.coa_id or '-'} | unit={entry.business_unit_id or '-'}"
        click.echo(line)


def register_commands(cli):
    """Register entry commands with main CLI."""
    cli.add_command(entry_group, name="entry")
