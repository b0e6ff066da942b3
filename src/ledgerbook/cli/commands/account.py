"""Financial account commands."""

import click
from ledgerbook.cli.account_resolution import resolve_account_or_exit
from ledgerbook.cli.date_filters import resolve_cli_date_range, with_date_range
from ledgerbook.cli.error_handling import get_caller, handle_domain_error
from ledgerbook.domain.account import AccountService
from ledgerbook.domain.errors import DomainError
from ledgerbook.domain.ledger import LedgerService


@click.group()
def account_group():
    """Manage financial accounts."""
    pass


@account_group.command("create")
@click.argument("name", metavar="ACCOUNT_NAME")
@click.option("--bank", required=True, help="Bank name (e.g., 'BCA', 'Cash')")
@click.option("--number", "account_number", help="Account number")
@click.option("--description", help="Description")
@click.pass_context
def create_account(ctx, name: str, bank: str, account_number: str | None, description: str | None):
    """Create a new account with a zero balance.

    Examples:
        ledgerbook account create "Operations" --bank "BCA"
        ledgerbook account create "Petty Cash" --bank "Cash" --description "Front desk"
    """
    caller = get_caller(ctx)
    service = AccountService(ctx.obj["db"])
    try:
        account = service.create_account(
            caller, name=name, bank_name=bank, account_number=account_number, description=description
        )
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Created account '{account.label}' (ID: {account.id})")


@account_group.command("list")
@click.option("--all", "include_inactive", is_flag=True, help="Include deactivated accounts")
@click.pass_context
def list_accounts(ctx, include_inactive: bool):
    """List accounts with their balances."""
    caller = get_caller(ctx)
    service = AccountService(ctx.obj["db"])
    try:
        accounts = service.list_accounts(caller, include_inactive=include_inactive)
    except DomainError as e:
        handle_domain_error(ctx, e)

    if not accounts:
        click.echo("No accounts found.")
        return

    click.echo("\nAccounts:")
    click.echo("-" * 90)
    for acc in accounts:
        status = "" if acc.is_active else " (inactive)"
        click.echo(f"{acc.id:<34} {acc.label:<32} {acc.balance:>18,.2f}{status}")


@account_group.command("update")
@click.argument("account", metavar="ACCOUNT")
@click.option("--name", help="New account name")
@click.option("--bank", help="New bank name")
@click.option("--number", "account_number", help="New account number")
@click.option("--description", help="New description")
@click.option("--activate", is_flag=True, help="Reactivate a deactivated account")
@click.pass_context
def update_account(
    ctx,
    account: str,
    name: str | None,
    bank: str | None,
    account_number: str | None,
    description: str | None,
    activate: bool,
) -> None:
    """Update an account.

    ACCOUNT can be an account name, "bank - name" label or ID. Renaming also
    updates the account name shown on its entries.

    Examples:
        ledgerbook account update "Operations" --name "Operations IDR"
        ledgerbook account update "Petty Cash" --activate
    """
    caller = get_caller(ctx)
    service = AccountService(ctx.obj["db"])
    account_id = resolve_account_or_exit(ctx, service, caller, account)
    try:
        updated = service.update_account(
            caller,
            account_id,
            name=name,
            bank_name=bank,
            account_number=account_number,
            description=description,
            is_active=True if activate else None,
        )
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Updated account '{updated.label}'")


@account_group.command("deactivate")
@click.argument("account", metavar="ACCOUNT")
@click.pass_context
def deactivate_account(ctx, account: str) -> None:
    """Deactivate an account. Its entries and balance are kept."""
    caller = get_caller(ctx)
    service = AccountService(ctx.obj["db"])
    account_id = resolve_account_or_exit(ctx, service, caller, account)
    try:
        deactivated = service.deactivate_account(caller, account_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Deactivated account '{deactivated.label}'")


@account_group.command("statement")
@click.argument("account", metavar="ACCOUNT")
@with_date_range
@click.pass_context
def account_statement(ctx, account: str, start_date: str | None, end_date: str | None, period: str | None):
    """Show an account's entries with running balances.

    Examples:
        ledgerbook account statement "Operations" --period this-month
        ledgerbook account statement "Operations" --start-date 2024-01-01 --end-date 2024-03-31
    """
    caller = get_caller(ctx)
    db = ctx.obj["db"]
    account_id = resolve_account_or_exit(ctx, AccountService(db), caller, account)
    start, end = resolve_cli_date_range(ctx, start_date=start_date, end_date=end_date, period=period)
    try:
        statement = LedgerService(db).account_statement(caller, account_id, start_date=start, end_date=end)
    except DomainError as e:
        handle_domain_error(ctx, e)

    click.echo(f"\nStatement for {statement.account.label}")
    click.echo("-" * 100)
    click.echo(f"{'Opening balance':<72} {statement.opening_balance:>18,.2f}")
    for line in statement.lines:
        entry = line.entry
        signed = f"{entry.signed_amount:+,.2f}"
        description = (entry.description or "")[:40]
        click.echo(f"{str(entry.date):<12} {description:<40} {signed:>18} {line.running_balance:>18,.2f}")
    click.echo(f"{'Closing balance':<72} {statement.closing_balance:>18,.2f}")


def register_commands(cli):
    """Register account commands with main CLI."""
    cli.add_command(account_group, name="account")
