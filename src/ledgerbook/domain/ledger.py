"""Transaction ledger domain service."""

import re
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Optional, Any
from ledgerbook.database.base import Database
from ledgerbook.domain.access import (
    Caller,
    ENTRY_READ_ROLES,
    READ_ROLES,
    WRITE_ROLES,
    require_role,
)
from ledgerbook.domain.entities import (
    AccountStatement,
    EntryDraft,
    EntryStatus,
    EntryType,
    FinancialAccount,
    LedgerEntry,
    LedgerSummary,
    StatementLine,
    money,
    signed_amount,
)
from ledgerbook.domain.errors import (
    NotFoundError,
    ReferentialError,
    ValidationError,
    account_not_found,
    entry_not_found,
    reference_not_found,
)
from ledgerbook.logging_config import get_logger

logger = get_logger(__name__)

BATCH_ID_PATTERN = re.compile(r"^[A-Za-z0-9-]+$")


def validate_batch_id(batch_id: str) -> str:
    """Return batch_id if it is usable as an entry-id prefix.

    Underscores are excluded so no batch prefix can extend another.
    """
    if not batch_id or not BATCH_ID_PATTERN.match(batch_id):
        raise ValidationError(
            f"Invalid batch id '{batch_id}': use letters, digits and '-' only"
        )
    return batch_id


def batch_prefix(batch_id: str) -> str:
    """Entry-id prefix shared by every row of a batch."""
    return f"IMP_{validate_batch_id(batch_id)}_"


def batch_entry_id(batch_id: str, index: int) -> str:
    """Id of the index-th row (1-based) of a batch."""
    return f"{batch_prefix(batch_id)}{index:05d}"


def coerce_amount(amount: Any) -> Decimal:
    """Return amount as a positive 2-place Decimal.

    Raises:
        ValidationError: If amount is not a number or not greater than zero
    """
    if isinstance(amount, bool):
        raise ValidationError(f"Invalid amount: {amount!r}")
    try:
        value = money(amount)
    except (InvalidOperation, ValueError, TypeError):
        raise ValidationError(f"Invalid amount: {amount!r}")
    if not value.is_finite() or value <= 0:
        raise ValidationError(f"Amount must be greater than zero, got {amount}")
    return value


def coerce_type(entry_type: Any) -> EntryType:
    try:
        return EntryType(str(getattr(entry_type, "value", entry_type)).upper())
    except ValueError:
        raise ValidationError(f"Invalid entry type '{entry_type}': expected IN or OUT")


def coerce_status(status: Any) -> Optional[EntryStatus]:
    if status is None:
        return None
    try:
        return EntryStatus(str(getattr(status, "value", status)).upper())
    except ValueError:
        raise ValidationError(f"Invalid status '{status}': expected PAID or UNPAID")


def coerce_date(value: Any) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    raise ValidationError(f"Invalid date: {value!r}")


class LedgerService:
    """Service for appending, correcting and listing ledger entries.

    Every write adjusts the referenced account's cached balance in the same
    unit of work as the row change.
    """

    def __init__(self, db: Database):
        """Initialize ledger service.

        Args:
            db: Database instance
        """
        self.db = db

    # Reference resolution
    def _active_account(self, tenant_id: str, account_id: str) -> FinancialAccount:
        account = self.db.get_account(tenant_id, account_id)
        if account is None:
            raise ReferentialError(reference_not_found("Account", account_id))
        if not account.is_active:
            raise ReferentialError(f"Account {account_id} is inactive")
        return account

    def _check_references(
        self,
        tenant_id: str,
        category_id: Optional[str] = None,
        coa_id: Optional[str] = None,
        business_unit_id: Optional[str] = None,
    ) -> None:
        if category_id is not None and self.db.get_category(tenant_id, category_id) is None:
            raise ReferentialError(reference_not_found("Category", category_id))
        if coa_id is not None and self.db.get_coa(tenant_id, coa_id) is None:
            raise ReferentialError(reference_not_found("Chart of account", coa_id))
        if business_unit_id is not None and self.db.get_business_unit(tenant_id, business_unit_id) is None:
            raise ReferentialError(reference_not_found("Business unit", business_unit_id))

    def prepare_entry(self, tenant_id: str, draft: EntryDraft) -> dict[str, Any]:
        """Validate a draft and return the column values to insert.

        Raises:
            ValidationError: If date, amount, type or status is invalid
            ReferentialError: If a reference does not resolve in the tenant,
                or the account is inactive
        """
        values = {
            "date": coerce_date(draft.date),
            "amount": coerce_amount(draft.amount),
            "type": coerce_type(draft.type).value,
            "description": draft.description,
            "account_id": draft.account_id,
            "account": draft.account_label,
            "category_id": draft.category_id,
            "coa_id": draft.coa_id,
            "business_unit_id": draft.business_unit_id,
        }
        status = coerce_status(draft.status)
        values["status"] = status.value if status is not None else None

        if draft.account_id is not None:
            # The display mirror of a cash entry is always the account name
            values["account"] = self._active_account(tenant_id, draft.account_id).name
        self._check_references(
            tenant_id,
            category_id=draft.category_id,
            coa_id=draft.coa_id,
            business_unit_id=draft.business_unit_id,
        )
        return values

    def append_entry(
        self,
        caller: Caller,
        date: date,
        amount: Decimal,
        type: EntryType | str,
        description: Optional[str] = None,
        status: Optional[EntryStatus | str] = EntryStatus.PAID,
        account_id: Optional[str] = None,
        category_id: Optional[str] = None,
        coa_id: Optional[str] = None,
        business_unit_id: Optional[str] = None,
        account_label: Optional[str] = None,
    ) -> LedgerEntry:
        """Append one entry and apply its signed effect to the account.

        Args:
            caller: Caller context
            date: Entry date
            amount: Positive amount; direction comes from ``type``
            type: IN or OUT
            description: Optional description
            status: PAID, UNPAID or None; never affects balances
            account_id: Financial account, or None for a general-journal entry
            category_id: Optional category
            coa_id: Optional chart-of-accounts node
            business_unit_id: Optional business unit
            account_label: Display label for general-journal entries

        Returns:
            The stored entry

        Raises:
            ValidationError: If amount is not positive or type/status is invalid
            ReferentialError: If a reference is not in the caller's tenant
        """
        require_role(caller, WRITE_ROLES, "append entries")
        draft = EntryDraft(
            date=date,
            amount=amount,
            type=type,
            description=description,
            status=status,
            account_id=account_id,
            account_label=account_label,
            category_id=category_id,
            coa_id=coa_id,
            business_unit_id=business_unit_id,
        )
        with self.db.atomic():
            values = self.prepare_entry(caller.tenant_id, draft)
            entry_id = self.db.create_entry(caller.tenant_id, values)
            if values["account_id"] is not None:
                self.db.adjust_balance(
                    caller.tenant_id,
                    values["account_id"],
                    signed_amount(EntryType(values["type"]), values["amount"]),
                )
        logger.info(
            "entry_appended",
            tenant_id=caller.tenant_id,
            entry_id=entry_id,
            account_id=values["account_id"],
        )
        return self.db.get_entry(caller.tenant_id, entry_id)

    def get_entry(self, caller: Caller, entry_id: str) -> Optional[LedgerEntry]:
        """Get entry by ID, or None if it is not in the caller's tenant."""
        require_role(caller, ENTRY_READ_ROLES, "view entries")
        return self.db.get_entry(caller.tenant_id, entry_id)

    def update_entry(
        self,
        caller: Caller,
        entry_id: str,
        date: Optional[date] = None,
        amount: Optional[Decimal] = None,
        type: Optional[EntryType | str] = None,
        description: Optional[str] = None,
        status: Optional[EntryStatus | str] = None,
        account_id: Optional[str] = None,
        category_id: Optional[str] = None,
        coa_id: Optional[str] = None,
        business_unit_id: Optional[str] = None,
        account_label: Optional[str] = None,
        clear_account: bool = False,
        clear_category: bool = False,
        clear_coa: bool = False,
        clear_business_unit: bool = False,
    ) -> LedgerEntry:
        """Update entry fields and move its balance effect accordingly.

        Fields left as None are unchanged; the ``clear_*`` flags set a
        reference to None. When the account is unchanged one delta
        adjustment is applied (skipped if zero). When the account changes the
        old effect is reversed on the old account and the new effect applied
        to the new one.

        Raises:
            NotFoundError: If entry not found
            ValidationError: If a value is invalid or a field is both set and cleared
            ReferentialError: If a new reference is not in the caller's tenant
        """
        require_role(caller, WRITE_ROLES, "update entries")
        for value, clear, field in (
            (account_id, clear_account, "account"),
            (category_id, clear_category, "category"),
            (coa_id, clear_coa, "coa"),
            (business_unit_id, clear_business_unit, "business_unit"),
        ):
            if clear and value is not None:
                raise ValidationError(f"Cannot set both {field}_id and clear_{field}")

        fields: dict[str, Any] = {}
        if date is not None:
            fields["date"] = coerce_date(date)
        if amount is not None:
            fields["amount"] = coerce_amount(amount)
        if type is not None:
            fields["type"] = coerce_type(type).value
        if description is not None:
            fields["description"] = description
        if status is not None:
            fields["status"] = coerce_status(status).value

        with self.db.atomic():
            old = self.db.get_entry(caller.tenant_id, entry_id)
            if old is None:
                raise NotFoundError(entry_not_found(entry_id))

            new_account_id = old.account_id
            if clear_account:
                new_account_id = None
                fields["account_id"] = None
                fields["account"] = account_label
            elif account_id is not None and account_id != old.account_id:
                account = self._active_account(caller.tenant_id, account_id)
                new_account_id = account_id
                fields["account_id"] = account_id
                fields["account"] = account.name
            elif account_label is not None and old.account_id is None:
                fields["account"] = account_label

            self._check_references(
                caller.tenant_id,
                category_id=category_id,
                coa_id=coa_id,
                business_unit_id=business_unit_id,
            )
            for value, clear, column in (
                (category_id, clear_category, "category_id"),
                (coa_id, clear_coa, "coa_id"),
                (business_unit_id, clear_business_unit, "business_unit_id"),
            ):
                if clear:
                    fields[column] = None
                elif value is not None:
                    fields[column] = value

            if fields:
                self.db.update_entry(caller.tenant_id, entry_id, fields)

            old_effect = old.signed_amount
            new_effect = signed_amount(
                EntryType(fields.get("type", old.type)), fields.get("amount", old.amount)
            )
            if new_account_id == old.account_id:
                delta = new_effect - old_effect
                if new_account_id is not None and delta != 0:
                    self.db.adjust_balance(caller.tenant_id, new_account_id, delta)
            else:
                if old.account_id is not None:
                    self.db.adjust_balance(caller.tenant_id, old.account_id, -old_effect)
                if new_account_id is not None:
                    self.db.adjust_balance(caller.tenant_id, new_account_id, new_effect)

        logger.info("entry_updated", tenant_id=caller.tenant_id, entry_id=entry_id)
        return self.db.get_entry(caller.tenant_id, entry_id)

    def delete_entry(self, caller: Caller, entry_id: str) -> None:
        """Delete an entry and reverse its balance effect.

        Raises:
            NotFoundError: If entry not found
        """
        require_role(caller, WRITE_ROLES, "delete entries")
        with self.db.atomic():
            entry = self.db.get_entry(caller.tenant_id, entry_id)
            if entry is None:
                raise NotFoundError(entry_not_found(entry_id))
            if entry.account_id is not None:
                self.db.adjust_balance(caller.tenant_id, entry.account_id, -entry.signed_amount)
            self.db.delete_entry(caller.tenant_id, entry_id)
        logger.info("entry_deleted", tenant_id=caller.tenant_id, entry_id=entry_id)

    def list_entries(
        self,
        caller: Caller,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        account_id: Optional[str] = None,
        batch_id: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> list[LedgerEntry]:
        """List entries, newest first.

        Args:
            caller: Caller context
            start_date: Optional start date filter (inclusive)
            end_date: Optional end date filter (inclusive)
            account_id: Optional account ID filter
            batch_id: Only entries imported by this batch
            limit: Optional maximum number of entries
        """
        require_role(caller, ENTRY_READ_ROLES, "view entries")
        return self.db.list_entries(
            caller.tenant_id,
            start_date=start_date,
            end_date=end_date,
            account_id=account_id,
            id_prefix=batch_prefix(batch_id) if batch_id is not None else None,
            limit=limit,
        )

    def account_statement(
        self,
        caller: Caller,
        account_id: str,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> AccountStatement:
        """Entries of one account in date order with running balances.

        The opening balance aggregates every entry dated before start_date.

        Raises:
            NotFoundError: If account not found
        """
        require_role(caller, READ_ROLES, "view statements")
        account = self.db.get_account(caller.tenant_id, account_id)
        if account is None:
            raise NotFoundError(account_not_found(account_id))

        if start_date is not None:
            opening = self.db.compute_account_balance(caller.tenant_id, account_id, before=start_date)
        else:
            opening = money(0)

        entries = self.db.list_entries(
            caller.tenant_id,
            start_date=start_date,
            end_date=end_date,
            account_id=account_id,
            oldest_first=True,
        )
        running = opening
        lines = []
        for entry in entries:
            running += entry.signed_amount
            lines.append(StatementLine(entry=entry, running_balance=running))

        return AccountStatement(
            account=account,
            start_date=start_date,
            end_date=end_date,
            opening_balance=opening,
            lines=lines,
        )

    def summary(
        self,
        caller: Caller,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> LedgerSummary:
        """Balances of every account and income/expense totals for a period.

        Balances are the cached ones and include deactivated accounts.
        Payment status does not matter, as for balances.
        """
        require_role(caller, READ_ROLES, "view summaries")
        accounts = self.db.list_accounts(caller.tenant_id, include_inactive=True)
        entries = self.db.list_entries(caller.tenant_id, start_date=start_date, end_date=end_date)

        income = Decimal("0.00")
        expense = Decimal("0.00")
        for entry in entries:
            if entry.is_journal:
                continue
            if entry.type == EntryType.IN:
                income += entry.amount
            else:
                expense += entry.amount

        return LedgerSummary(
            start_date=start_date,
            end_date=end_date,
            accounts=accounts,
            income=money(income),
            expense=money(expense),
        )
