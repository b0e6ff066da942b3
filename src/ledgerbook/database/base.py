"""Abstract database interface.

Every method that reads or writes tenant data takes ``tenant_id`` as its first
argument and filters by it. Write methods only flush; callers group them into
one transaction with ``atomic()``.
"""

from abc import ABC, abstractmethod
from contextlib import AbstractContextManager
from typing import Optional, Any
from datetime import date
from decimal import Decimal

# Import entities directly to avoid circular import through domain/__init__.py
from ledgerbook.domain.entities import (
    Tenant,
    FinancialAccount,
    ChartOfAccount,
    TransactionCategory,
    BusinessUnit,
    LedgerEntry,
)


class Database(ABC):
    """Abstract database interface for ledgerbook."""

    @abstractmethod
    def connect(self) -> None:
        """Connect to the database."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Disconnect from the database."""
        pass

    @abstractmethod
    def initialize_schema(self) -> None:
        """Initialize database schema (create tables)."""
        pass

    @abstractmethod
    def atomic(self) -> AbstractContextManager[None]:
        """Open a unit of work.

        The outermost block commits on success and rolls back on any
        exception; nested blocks join it. Store failures surface as
        TransactionAbortError after rollback.
        """
        pass

    # Tenant operations
    @abstractmethod
    def create_tenant(self, name: str, tenant_id: Optional[str] = None) -> str:
        """Create a tenant. Returns tenant ID."""
        pass

    @abstractmethod
    def get_tenant(self, tenant_id: str) -> Optional[Tenant]:
        """Get tenant by ID."""
        pass

    @abstractmethod
    def list_tenants(self) -> list[Tenant]:
        """List all tenants."""
        pass

    # Financial account operations
    @abstractmethod
    def create_account(
        self,
        tenant_id: str,
        name: str,
        bank_name: str,
        account_number: Optional[str] = None,
        description: Optional[str] = None,
    ) -> str:
        """Create a financial account with a zero balance. Returns account ID."""
        pass

    @abstractmethod
    def get_account(self, tenant_id: str, account_id: str) -> Optional[FinancialAccount]:
        """Get account by ID within a tenant, active or not."""
        pass

    @abstractmethod
    def get_account_by_name(self, tenant_id: str, name: str) -> Optional[FinancialAccount]:
        """Get account by exact name within a tenant."""
        pass

    @abstractmethod
    def list_accounts(self, tenant_id: Optional[str], include_inactive: bool = False) -> list[FinancialAccount]:
        """List accounts ordered by creation time.

        ``tenant_id=None`` lists every tenant's accounts (maintenance only).
        """
        pass

    @abstractmethod
    def update_account(self, tenant_id: str, account_id: str, fields: dict[str, Any]) -> None:
        """Update account columns (not the balance)."""
        pass

    @abstractmethod
    def rename_account_references(self, tenant_id: str, account_id: str, name: str) -> int:
        """Rewrite the display name on every entry of an account. Returns row count."""
        pass

    @abstractmethod
    def adjust_balance(self, tenant_id: str, account_id: str, delta: Decimal) -> None:
        """Atomically add ``delta`` to an account balance at the store level."""
        pass

    @abstractmethod
    def set_balance(self, tenant_id: str, account_id: str, balance: Decimal) -> None:
        """Overwrite an account balance."""
        pass

    @abstractmethod
    def compute_account_balance(
        self, tenant_id: str, account_id: str, before: Optional[date] = None
    ) -> Decimal:
        """Aggregate sum(IN) - sum(OUT) over an account's entries.

        Args:
            before: Only count entries dated strictly before this date
        """
        pass

    # Chart of accounts operations
    @abstractmethod
    def create_coa(
        self,
        tenant_id: str,
        code: str,
        name: str,
        type: str,
        normal_balance: str,
        parent_id: Optional[str] = None,
        description: Optional[str] = None,
    ) -> str:
        """Create a COA node. Returns node ID."""
        pass

    @abstractmethod
    def get_coa(self, tenant_id: str, coa_id: str) -> Optional[ChartOfAccount]:
        """Get COA node by ID."""
        pass

    @abstractmethod
    def get_coa_by_code(self, tenant_id: str, code: str) -> Optional[ChartOfAccount]:
        """Get COA node by code."""
        pass

    @abstractmethod
    def list_coa(self, tenant_id: str, include_inactive: bool = False) -> list[ChartOfAccount]:
        """List COA nodes ordered by code."""
        pass

    @abstractmethod
    def update_coa(self, tenant_id: str, coa_id: str, fields: dict[str, Any]) -> None:
        """Update COA node columns."""
        pass

    @abstractmethod
    def delete_coa_nodes(self, tenant_id: str, coa_ids: list[str]) -> int:
        """Hard-delete COA nodes. Returns row count."""
        pass

    # Category operations
    @abstractmethod
    def create_category(
        self, tenant_id: str, name: str, type: str, parent_id: Optional[str] = None
    ) -> str:
        """Create a category. Returns category ID."""
        pass

    @abstractmethod
    def get_category(self, tenant_id: str, category_id: str) -> Optional[TransactionCategory]:
        """Get category by ID."""
        pass

    @abstractmethod
    def list_categories(self, tenant_id: str) -> list[TransactionCategory]:
        """List categories ordered by type, then name."""
        pass

    @abstractmethod
    def update_category(self, tenant_id: str, category_id: str, fields: dict[str, Any]) -> None:
        """Update category columns."""
        pass

    @abstractmethod
    def delete_categories(self, tenant_id: str, category_ids: list[str]) -> int:
        """Hard-delete categories. Returns row count."""
        pass

    # Business unit operations
    @abstractmethod
    def create_business_unit(
        self,
        tenant_id: str,
        name: str,
        description: Optional[str] = None,
        parent_id: Optional[str] = None,
    ) -> str:
        """Create a business unit. Returns unit ID."""
        pass

    @abstractmethod
    def get_business_unit(self, tenant_id: str, unit_id: str) -> Optional[BusinessUnit]:
        """Get business unit by ID, active or not."""
        pass

    @abstractmethod
    def list_business_units(self, tenant_id: str, include_inactive: bool = False) -> list[BusinessUnit]:
        """List business units ordered by name."""
        pass

    @abstractmethod
    def update_business_unit(self, tenant_id: str, unit_id: str, fields: dict[str, Any]) -> None:
        """Update business unit columns."""
        pass

    # Ledger entry operations
    @abstractmethod
    def create_entry(self, tenant_id: str, values: dict[str, Any]) -> str:
        """Insert one entry. ``values`` may carry an ``id``. Returns entry ID."""
        pass

    @abstractmethod
    def create_entries(self, tenant_id: str, rows: list[dict[str, Any]]) -> list[str]:
        """Insert many entries in one flush. Each row must carry its ``id``."""
        pass

    @abstractmethod
    def get_entry(self, tenant_id: str, entry_id: str) -> Optional[LedgerEntry]:
        """Get entry by ID."""
        pass

    @abstractmethod
    def update_entry(self, tenant_id: str, entry_id: str, fields: dict[str, Any]) -> None:
        """Update entry columns."""
        pass

    @abstractmethod
    def delete_entry(self, tenant_id: str, entry_id: str) -> None:
        """Delete one entry."""
        pass

    @abstractmethod
    def list_entries(
        self,
        tenant_id: str,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        account_id: Optional[str] = None,
        id_prefix: Optional[str] = None,
        limit: Optional[int] = None,
        oldest_first: bool = False,
    ) -> list[LedgerEntry]:
        """List entries with optional filters, newest first by default.

        Args:
            id_prefix: Only entries whose id starts with this literal prefix
        """
        pass

    @abstractmethod
    def delete_entries_with_prefix(self, tenant_id: str, id_prefix: str) -> int:
        """Bulk-delete entries whose id starts with a literal prefix. Returns row count."""
        pass

    @abstractmethod
    def count_entries_with_prefix(self, tenant_id: str, id_prefix: str) -> int:
        """Count entries whose id starts with a literal prefix."""
        pass

    @abstractmethod
    def entry_exists(
        self,
        tenant_id: str,
        date: date,
        amount: Decimal,
        description: Optional[str],
        account_id: Optional[str],
        account: Optional[str],
    ) -> bool:
        """Check for an entry with the same date, amount, description and account."""
        pass

    @abstractmethod
    def clear_entry_references(self, tenant_id: str, column: str, ids: list[str]) -> int:
        """Null out ``column`` (coa_id, category_id, business_unit_id) on entries pointing at ``ids``."""
        pass
