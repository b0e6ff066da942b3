"""Financial account domain service."""

from typing import Optional
from ledgerbook.database.base import Database
from ledgerbook.domain.access import Caller, OWNER_ROLES, READ_ROLES, WRITE_ROLES, require_role
from ledgerbook.domain.entities import FinancialAccount
from ledgerbook.domain.errors import (
    ConflictError,
    NotFoundError,
    ValidationError,
    account_not_found,
    duplicate_account_name,
)
from ledgerbook.logging_config import get_logger

logger = get_logger(__name__)


def _required(value: Optional[str], field: str) -> str:
    if value is None or not value.strip():
        raise ValidationError(f"{field} is required")
    return value.strip()


class AccountService:
    """Service for managing financial accounts."""

    def __init__(self, db: Database):
        """Initialize account service.

        Args:
            db: Database instance
        """
        self.db = db

    def create_account(
        self,
        caller: Caller,
        name: str,
        bank_name: str,
        account_number: Optional[str] = None,
        description: Optional[str] = None,
    ) -> FinancialAccount:
        """Create a new account with a zero balance.

        Args:
            caller: Caller context
            name: Account name, unique within the tenant
            bank_name: Bank name
            account_number: Optional account number
            description: Optional description

        Returns:
            The created account

        Raises:
            ValidationError: If name or bank name is missing
            ConflictError: If account name already exists in the tenant
        """
        require_role(caller, WRITE_ROLES, "create accounts")
        name = _required(name, "Account name")
        bank_name = _required(bank_name, "Bank name")

        with self.db.atomic():
            if self.db.get_account_by_name(caller.tenant_id, name) is not None:
                raise ConflictError(duplicate_account_name(name))
            account_id = self.db.create_account(
                caller.tenant_id,
                name=name,
                bank_name=bank_name,
                account_number=account_number,
                description=description,
            )
        logger.info("account_created", tenant_id=caller.tenant_id, account_id=account_id)
        return self.db.get_account(caller.tenant_id, account_id)

    def get_account(self, caller: Caller, account_id: str) -> Optional[FinancialAccount]:
        """Get account by ID, or None if it is not in the caller's tenant."""
        require_role(caller, READ_ROLES, "view accounts")
        return self.db.get_account(caller.tenant_id, account_id)

    def require_account(self, caller: Caller, account_id: str) -> FinancialAccount:
        """Get account by ID.

        Raises:
            NotFoundError: If the account is not in the caller's tenant
        """
        account = self.get_account(caller, account_id)
        if account is None:
            raise NotFoundError(account_not_found(account_id))
        return account

    def list_accounts(self, caller: Caller, include_inactive: bool = False) -> list[FinancialAccount]:
        """List the tenant's accounts ordered by creation time.

        Args:
            caller: Caller context
            include_inactive: Also list deactivated accounts
        """
        require_role(caller, READ_ROLES, "view accounts")
        return self.db.list_accounts(caller.tenant_id, include_inactive=include_inactive)

    def update_account(
        self,
        caller: Caller,
        account_id: str,
        name: Optional[str] = None,
        bank_name: Optional[str] = None,
        account_number: Optional[str] = None,
        description: Optional[str] = None,
        is_active: Optional[bool] = None,
    ) -> FinancialAccount:
        """Update account fields.

        A name change rewrites the display name stored on every entry of the
        account in the same transaction. The balance is never touched here.

        Raises:
            NotFoundError: If account not found
            ValidationError: If name or bank name is set to blank
            ConflictError: If the new name is taken by another account
        """
        require_role(caller, OWNER_ROLES, "update accounts")
        fields = {}
        if name is not None:
            fields["name"] = _required(name, "Account name")
        if bank_name is not None:
            fields["bank_name"] = _required(bank_name, "Bank name")
        if account_number is not None:
            fields["account_number"] = account_number
        if description is not None:
            fields["description"] = description
        if is_active is not None:
            fields["is_active"] = is_active

        with self.db.atomic():
            account = self.db.get_account(caller.tenant_id, account_id)
            if account is None:
                raise NotFoundError(account_not_found(account_id))

            renamed = "name" in fields and fields["name"] != account.name
            if renamed:
                existing = self.db.get_account_by_name(caller.tenant_id, fields["name"])
                if existing is not None and existing.id != account_id:
                    raise ConflictError(duplicate_account_name(fields["name"]))

            if fields:
                self.db.update_account(caller.tenant_id, account_id, fields)
            if renamed:
                count = self.db.rename_account_references(caller.tenant_id, account_id, fields["name"])
                logger.info(
                    "account_renamed",
                    tenant_id=caller.tenant_id,
                    account_id=account_id,
                    entries_updated=count,
                )
        return self.db.get_account(caller.tenant_id, account_id)

    def deactivate_account(self, caller: Caller, account_id: str) -> FinancialAccount:
        """Soft-delete an account. Its entries and balance are kept."""
        require_role(caller, OWNER_ROLES, "deactivate accounts")
        with self.db.atomic():
            if self.db.get_account(caller.tenant_id, account_id) is None:
                raise NotFoundError(account_not_found(account_id))
            self.db.update_account(caller.tenant_id, account_id, {"is_active": False})
        logger.info("account_deactivated", tenant_id=caller.tenant_id, account_id=account_id)
        return self.db.get_account(caller.tenant_id, account_id)
