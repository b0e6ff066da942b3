"""Domain model entities for ledgerbook.

These are pure data classes representing business concepts, independent of
the database schema. Services hand these out; ORM rows never leave the
database layer.
"""

from dataclasses import dataclass, field
from datetime import datetime, date
from decimal import Decimal
from enum import Enum
from typing import Optional


class EntryType(str, Enum):
    """Direction of a ledger entry. Amounts are always positive."""

    IN = "IN"
    OUT = "OUT"


class EntryStatus(str, Enum):
    """Payment workflow status. Does not affect balances."""

    PAID = "PAID"
    UNPAID = "UNPAID"


class CoaType(str, Enum):
    ASSET = "ASSET"
    LIABILITY = "LIABILITY"
    EQUITY = "EQUITY"
    INCOME = "INCOME"
    EXPENSE = "EXPENSE"


class NormalBalance(str, Enum):
    DEBIT = "DEBIT"
    CREDIT = "CREDIT"


class CategoryType(str, Enum):
    INCOME = "INCOME"
    EXPENSE = "EXPENSE"


CENT = Decimal("0.01")


def money(value) -> Decimal:
    """Coerce a stored numeric (Decimal, float, int or None) to a 2-place Decimal."""
    if value is None:
        return Decimal("0.00")
    return Decimal(str(value)).quantize(CENT)


def signed_amount(entry_type: EntryType, amount: Decimal) -> Decimal:
    """Return the balance effect of an entry: +amount for IN, -amount for OUT."""
    return amount if EntryType(entry_type) == EntryType.IN else -amount


@dataclass(frozen=True)
class Tenant:
    """Isolation boundary created at onboarding."""

    id: str
    name: str
    created_at: datetime


@dataclass(frozen=True)
class FinancialAccount:
    """Cash or bank account with a cached balance."""

    id: str
    tenant_id: str
    name: str
    bank_name: str
    account_number: Optional[str]
    description: Optional[str]
    balance: Decimal
    is_active: bool
    created_at: datetime

    @property
    def label(self) -> str:
        return f"{self.bank_name} - {self.name}"


@dataclass(frozen=True)
class ChartOfAccount:
    """Chart-of-accounts node."""

    id: str
    tenant_id: str
    code: str
    name: str
    type: CoaType
    normal_balance: NormalBalance
    parent_id: Optional[str]
    description: Optional[str]
    is_active: bool
    created_at: datetime

    @property
    def label(self) -> str:
        return f"{self.code} - {self.name}"


@dataclass(frozen=True)
class TransactionCategory:
    """Transaction category tree node."""

    id: str
    tenant_id: str
    name: str
    type: CategoryType
    parent_id: Optional[str]
    created_at: datetime


@dataclass(frozen=True)
class BusinessUnit:
    """Business unit tree node."""

    id: str
    tenant_id: str
    name: str
    description: Optional[str]
    parent_id: Optional[str]
    is_active: bool
    created_at: datetime


@dataclass(frozen=True)
class LedgerEntry:
    """One monetary movement."""

    id: str
    tenant_id: str
    date: date
    description: Optional[str]
    amount: Decimal
    type: EntryType
    status: Optional[EntryStatus]
    account_id: Optional[str]
    account: Optional[str]
    category_id: Optional[str]
    coa_id: Optional[str]
    business_unit_id: Optional[str]
    created_at: datetime

    @property
    def signed_amount(self) -> Decimal:
        return signed_amount(self.type, self.amount)

    @property
    def is_journal(self) -> bool:
        """True for general-journal entries, which have no cash-account effect."""
        return self.account_id is None


@dataclass(frozen=True)
class EntryDraft:
    """Unsaved ledger entry, as handed to batch append."""

    date: date
    amount: Decimal
    type: EntryType
    description: Optional[str] = None
    status: Optional[EntryStatus] = EntryStatus.PAID
    account_id: Optional[str] = None
    account_label: Optional[str] = None
    category_id: Optional[str] = None
    coa_id: Optional[str] = None
    business_unit_id: Optional[str] = None


@dataclass(frozen=True)
class TreeNode:
    """Node of a nested tree listing (COA, category or business unit)."""

    id: str
    name: str
    parent_id: Optional[str]
    children: list["TreeNode"] = field(default_factory=list)


@dataclass(frozen=True)
class BalanceChange:
    """Balance delta applied to one account by a batch operation."""

    account_id: str
    delta: Decimal


@dataclass(frozen=True)
class BatchResult:
    """Outcome of a batch append or undo."""

    batch_id: str
    entry_ids: list[str]
    balance_changes: list[BalanceChange]

    @property
    def count(self) -> int:
        return len(self.entry_ids)


@dataclass(frozen=True)
class BatchSummary:
    """Import batch as seen through its entry-id prefix."""

    batch_id: str
    entry_count: int
    total_in: Decimal
    total_out: Decimal
    first_created_at: datetime


@dataclass(frozen=True)
class ReconciledBalance:
    """Result of recomputing one account."""

    account_id: str
    tenant_id: str
    previous_balance: Decimal
    balance: Decimal

    @property
    def drift(self) -> Decimal:
        return self.balance - self.previous_balance


@dataclass(frozen=True)
class ReconciliationFailure:
    account_id: str
    tenant_id: str
    error: str


@dataclass(frozen=True)
class ReconciliationReport:
    """Per-account outcome of a reconciliation run."""

    results: list[ReconciledBalance]
    failures: list[ReconciliationFailure]

    @property
    def ok(self) -> bool:
        return not self.failures

    @property
    def drifted(self) -> list[ReconciledBalance]:
        return [r for r in self.results if r.drift != 0]


@dataclass(frozen=True)
class StatementLine:
    entry: LedgerEntry
    running_balance: Decimal


@dataclass(frozen=True)
class AccountStatement:
    """Entries of one account over a date range with running balances."""

    account: FinancialAccount
    start_date: Optional[date]
    end_date: Optional[date]
    opening_balance: Decimal
    lines: list[StatementLine]

    @property
    def closing_balance(self) -> Decimal:
        if self.lines:
            return self.lines[-1].running_balance
        return self.opening_balance


@dataclass(frozen=True)
class LedgerSummary:
    """Cached account balances plus cash flow over a date range.

    income and expense only count entries booked on a financial account;
    journal entries between COA nodes move no cash.
    """

    start_date: Optional[date]
    end_date: Optional[date]
    accounts: list[FinancialAccount]
    income: Decimal
    expense: Decimal

    @property
    def total_assets(self) -> Decimal:
        return sum((a.balance for a in self.accounts), Decimal("0.00"))

    @property
    def profit(self) -> Decimal:
        return self.income - self.expense
