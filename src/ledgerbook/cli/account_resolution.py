"""CLI helpers for resolving names to IDs."""

import click
from ledgerbook.domain.access import Caller
from ledgerbook.domain.account import AccountService
from ledgerbook.domain.business_unit import BusinessUnitService
from ledgerbook.domain.category import CategoryService
from ledgerbook.domain.coa import ChartOfAccountService
from ledgerbook.domain.errors import DomainError
from ledgerbook.utils.account_resolver import normalize_label, resolve_account


def resolve_account_or_exit(
    ctx: click.Context, account_service: AccountService, caller: Caller, account: str
) -> str:
    """Resolve account name, label or ID, or exit with a CLI error."""
    try:
        return resolve_account(account_service, caller, account, include_inactive=True)
    except DomainError as exc:
        click.echo(f"Error: {exc}", err=True)
        ctx.exit(1)


def resolve_coa_or_exit(ctx: click.Context, service: ChartOfAccountService, caller: Caller, value: str) -> str:
    """Resolve a COA code or ID."""
    try:
        node = service.get_coa_by_code(caller, value) or service.get_coa(caller, value)
    except DomainError as exc:
        click.echo(f"Error: {exc}", err=True)
        ctx.exit(1)
    if node is None:
        click.echo(f"Error: Chart of account '{value}' not found", err=True)
        ctx.exit(1)
    return node.id


def resolve_category_or_exit(ctx: click.Context, service: CategoryService, caller: Caller, value: str) -> str:
    """Resolve a category path (e.g., "Operating > Utilities") or ID."""
    try:
        category = service.get_category_by_path(caller, value) or service.get_category(caller, value)
    except DomainError as exc:
        click.echo(f"Error: {exc}", err=True)
        ctx.exit(1)
    if category is None:
        click.echo(f"Error: Category '{value}' not found", err=True)
        ctx.exit(1)
    return category.id


def resolve_unit_or_exit(ctx: click.Context, service: BusinessUnitService, caller: Caller, value: str) -> str:
    """Resolve a business unit name or ID."""
    try:
        units = service.list_business_units(caller, include_inactive=True)
    except DomainError as exc:
        click.echo(f"Error: {exc}", err=True)
        ctx.exit(1)
    for unit in units:
        if unit.id == value or normalize_label(unit.name) == normalize_label(value):
            return unit.id
    click.echo(f"Error: Business unit '{value}' not found", err=True)
    ctx.exit(1)
