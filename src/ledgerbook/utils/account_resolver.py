"""Utility for resolving account names to IDs."""

from typing import Optional
from ledgerbook.domain.access import Caller
from ledgerbook.domain.account import AccountService
from ledgerbook.domain.errors import NotFoundError


def normalize_label(value: Optional[str]) -> str:
    """Lower-case a label and collapse its whitespace, for loose matching."""
    if value is None:
        return ""
    return " ".join(str(value).lower().split())


def resolve_account(
    account_service: AccountService, caller: Caller, account: str, include_inactive: bool = False
) -> str:
    """Resolve an account id, name or "bank - name" label to an account ID.

    Ids match exactly; names and labels match case-insensitively within the
    caller's tenant.

    Raises:
        NotFoundError: If nothing in the tenant matches
    """
    accounts = account_service.list_accounts(caller, include_inactive=include_inactive)
    for acc in accounts:
        if acc.id == account:
            return acc.id

    wanted = normalize_label(account)
    for acc in accounts:
        if normalize_label(acc.name) == wanted or normalize_label(acc.label) == wanted:
            return acc.id

    raise NotFoundError(f"Account '{account}' not found")
