"""Ledger CSV import domain service."""

import re
from typing import Any, Optional

from ledgerbook.database.base import Database
from ledgerbook.domain.access import Caller, WRITE_ROLES, require_role
from ledgerbook.domain.batch import BatchService
from ledgerbook.domain.entities import (
    ChartOfAccount,
    EntryDraft,
    EntryStatus,
    EntryType,
    FinancialAccount,
)
from ledgerbook.domain.errors import ValidationError
from ledgerbook.domain.ledger import coerce_status
from ledgerbook.logging_config import get_logger
from ledgerbook.utils.account_resolver import normalize_label
from ledgerbook.utils.amount_parser import parse_positive_amount
from ledgerbook.utils.csv_reader import read_csv_rows
from ledgerbook.utils.date_parser import parse_date

logger = get_logger(__name__)

REQUIRED_COLUMNS = ("Date", "Description", "Debit", "Credit", "Amount")

_UNPAID_HINT = re.compile(r"\b(dp|down payment)\b")
_PAID_HINT = re.compile(r"\b(pelunasan|settlement|paid in full)\b")


def detect_status(description: Optional[str]) -> EntryStatus:
    """Guess a payment status from the description when none is given.

    Down-payment wording marks the entry UNPAID unless it also says the
    balance was settled.
    """
    text = normalize_label(description)
    if _PAID_HINT.search(text):
        return EntryStatus.PAID
    if _UNPAID_HINT.search(text):
        return EntryStatus.UNPAID
    return EntryStatus.PAID


def _index(items, *labels) -> dict[str, Any]:
    index = {}
    for item in items:
        for label in labels:
            key = normalize_label(label(item))
            if key:
                index.setdefault(key, item)
    return index


class LedgerImportService:
    """Imports bank statements and journals written as debit/credit rows.

    Each row names a debit side and a credit side; each side is either a
    financial account or a chart-of-accounts node. The pair decides the
    entry:

    - account debit, COA credit: IN to the account
    - COA debit, account credit: OUT of the account
    - COA debit, COA credit: general-journal entry with no account
    - account debit, account credit: OUT of the credit account (transfer)

    All accepted rows are written as a single batch, which can be undone.
    """

    def __init__(self, db: Database):
        """Initialize ledger import service.

        Args:
            db: Database instance
        """
        self.db = db
        self.batch_service = BatchService(db)

    def _row_to_draft(
        self,
        row: dict[str, str],
        accounts: dict[str, FinancialAccount],
        coas: dict[str, ChartOfAccount],
        units: dict[str, Any],
        dayfirst: bool,
    ) -> EntryDraft:
        try:
            entry_date = parse_date(row.get("date", ""), dayfirst=dayfirst)
        except ValueError as e:
            raise ValidationError(str(e))
        try:
            amount = parse_positive_amount(row.get("amount", ""))
        except ValueError as e:
            raise ValidationError(str(e))

        unit_label = row.get("business unit", "")
        unit_id = None
        if unit_label:
            unit = units.get(normalize_label(unit_label))
            if unit is None:
                raise ValidationError(f"Business unit '{unit_label}' is unknown or inactive")
            unit_id = unit.id

        debit_label = row.get("debit", "")
        credit_label = row.get("credit", "")
        debit_bank = accounts.get(normalize_label(debit_label))
        credit_bank = accounts.get(normalize_label(credit_label))
        debit_coa = coas.get(normalize_label(debit_label))
        credit_coa = coas.get(normalize_label(credit_label))

        description = row.get("description") or None
        account_label = None
        coa_id = None
        if debit_bank and credit_coa:
            entry_type = EntryType.IN
            account_id = debit_bank.id
            coa_id = credit_coa.id
        elif debit_coa and credit_bank:
            entry_type = EntryType.OUT
            account_id = credit_bank.id
            coa_id = debit_coa.id
        elif debit_coa and credit_coa:
            entry_type = EntryType.IN
            account_id = None
            account_label = debit_coa.label
            coa_id = credit_coa.id
        elif debit_bank and credit_bank:
            # Only the source account moves; the target is noted in the description
            entry_type = EntryType.OUT
            account_id = credit_bank.id
            description = description or f"Transfer to {debit_bank.name}"
        else:
            raise ValidationError(
                f"Account '{debit_label}' or '{credit_label}' not found"
            )

        status_value = row.get("status", "")
        status = coerce_status(status_value) if status_value else detect_status(description)

        return EntryDraft(
            date=entry_date,
            amount=amount,
            type=entry_type,
            description=description,
            status=status,
            account_id=account_id,
            account_label=account_label,
            coa_id=coa_id,
            business_unit_id=unit_id,
        )

    def import_csv(
        self,
        caller: Caller,
        csv_file_path: str,
        batch_id: Optional[str] = None,
        dayfirst: bool = False,
    ) -> dict[str, Any]:
        """Import ledger entries from a CSV file as one batch.

        Columns: Date, Description, Debit, Credit, Amount, and optionally
        Business Unit and Status. Debit/Credit hold an account name, bank
        name or "bank - name" label, or a COA code, name or "code - name"
        label; matching ignores case and extra spaces.

        Args:
            caller: Caller context
            csv_file_path: Path to CSV file
            batch_id: Optional batch id (generated when omitted)
            dayfirst: Read ambiguous dates as DD/MM/YYYY

        Returns:
            Dict with import statistics:
            - batch_id: id to undo the import with (None if nothing was imported)
            - imported: number of entries written
            - skipped: number of rows skipped as duplicates of existing entries
            - skipped_details: one message per skipped row
            - errors: one message per rejected row

        Raises:
            FileNotFoundError: If CSV file doesn't exist
            ValidationError: If required columns are missing
        """
        require_role(caller, WRITE_ROLES, "import entries")
        rows = read_csv_rows(csv_file_path, required_columns=REQUIRED_COLUMNS)

        tenant_id = caller.tenant_id
        accounts = _index(
            self.db.list_accounts(tenant_id),
            lambda a: a.name,
            lambda a: a.bank_name,
            lambda a: a.label,
        )
        coas = _index(
            self.db.list_coa(tenant_id, include_inactive=True),
            lambda c: c.code,
            lambda c: c.name,
            lambda c: c.label,
        )
        units = _index(self.db.list_business_units(tenant_id), lambda u: u.name)

        drafts = []
        errors = []
        skipped_details = []
        for row_num, row in rows:
            try:
                draft = self._row_to_draft(row, accounts, coas, units, dayfirst)
            except ValidationError as e:
                errors.append(f"Row {row_num}: {e}")
                continue

            if self.db.entry_exists(
                tenant_id,
                date=draft.date,
                amount=draft.amount,
                description=draft.description,
                account_id=draft.account_id,
                account=draft.account_label,
            ):
                skipped_details.append(
                    f"Row {row_num}: duplicate of an existing entry ({draft.date}, {draft.amount}, "
                    f"{draft.description or 'no description'})"
                )
                continue
            drafts.append(draft)

        result = {
            "batch_id": None,
            "imported": 0,
            "skipped": len(skipped_details),
            "skipped_details": skipped_details,
            "errors": errors,
        }
        if drafts:
            batch = self.batch_service.append_batch(caller, drafts, batch_id=batch_id)
            result["batch_id"] = batch.batch_id
            result["imported"] = batch.count

        logger.info(
            "ledger_imported",
            tenant_id=tenant_id,
            batch_id=result["batch_id"],
            imported=result["imported"],
            skipped=result["skipped"],
            errors=len(errors),
        )
        return result