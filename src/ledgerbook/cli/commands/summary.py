"""Summary commands."""

import click
from ledgerbook.cli.date_filters import resolve_cli_date_range, with_date_range
from ledgerbook.cli.error_handling import get_caller, handle_domain_error
from ledgerbook.domain.errors import DomainError
from ledgerbook.domain.ledger import LedgerService


@click.command("summary")
@with_date_range
@click.pass_context
def summary(ctx, start_date: str | None, end_date: str | None, period: str | None):
    """Show account balances, total assets and income/expense for a period.

    Without dates the current month is used.

    Examples:
        ledgerbook summary
        ledgerbook summary --period last-month
        ledgerbook summary --start-date 2024-01-01 --end-date 2024-12-31
    """
    caller = get_caller(ctx)
    if not (start_date or end_date or period):
        period = "this-month"
    start, end = resolve_cli_date_range(ctx, start_date=start_date, end_date=end_date, period=period)
    try:
        report = LedgerService(ctx.obj["db"]).summary(caller, start_date=start, end_date=end)
    except DomainError as e:
        handle_domain_error(ctx, e)

    click.echo("\nAccount balances:")
    click.echo("-" * 60)
    if not report.accounts:
        click.echo("No accounts found.")
    for account in report.accounts:
        status = "" if account.is_active else " (inactive)"
        click.echo(f"{account.label + status:<40} {account.balance:>19,.2f}")
    click.echo("-" * 60)
    click.echo(f"{'Total assets':<40} {report.total_assets:>19,.2f}")

    period_label = f"{report.start_date or '...'} to {report.end_date or '...'}"
    click.echo(f"\nCash flow {period_label}:")
    click.echo(f"{'Income':<40} {report.income:>19,.2f}")
    click.echo(f"{'Expense':<40} {report.expense:>19,.2f}")
    click.echo(f"{'Profit':<40} {report.profit:>19,.2f}")


def register_commands(cli):
    """Register summary command with main CLI."""
    cli.add_command(summary)
