"""Balance reconciliation commands."""

import click
from ledgerbook.cli.error_handling import get_caller, handle_domain_error
from ledgerbook.domain.errors import DomainError
from ledgerbook.domain.reconciliation import ReconciliationService


@click.command("reconcile")
@click.option("--all-tenants", is_flag=True, help="Reconcile every tenant (SUPERADMIN only)")
@click.option("--check", is_flag=True, help="Only report drift; change nothing")
@click.pass_context
def reconcile(ctx, all_tenants: bool, check: bool):
    """Recompute cached account balances from the ledger.

    Exits with status 1 if any account failed to reconcile.
    """
    caller = get_caller(ctx)
    service = ReconciliationService(ctx.obj["db"])

    if check:
        try:
            drifted = service.verify(caller, all_tenants=all_tenants)
        except DomainError as e:
            handle_domain_error(ctx, e)
        if not drifted:
            click.echo("All balances match the ledger.")
            return
        for result in drifted:
            click.echo(f"DRIFT {result.account_id}: cached {result.previous_balance:,.2f}, ledger {result.balance:,.2f}")
        ctx.exit(1)

    try:
        report = service.reconcile(caller, all_tenants=all_tenants)
    except DomainError as e:
        handle_domain_error(ctx, e)

    for result in report.results:
        marker = "FIXED" if result.drift != 0 else "OK"
        click.echo(f"{marker:<6} {result.account_id}: {result.balance:,.2f}")
    for failure in report.failures:
        click.echo(f"FAILED {failure.account_id}: {failure.error}", err=True)
    click.echo(f"Reconciled {len(report.results)} accounts, {len(report.failures)} failed")
    if not report.ok:
        ctx.exit(1)


def register_commands(cli):
    """Register reconcile command with main CLI."""
    cli.add_command(reconcile)
