"""Batch import and undo service.

A batch is not stored anywhere on its own: it is the set of entries whose id
starts with ``IMP_<batch_id>_``. Appending and undoing a batch each run in
one unit of work and touch every affected account's balance exactly once.
"""

import uuid
from collections import OrderedDict
from datetime import datetime, UTC
from decimal import Decimal
from typing import Optional, Iterable
from ledgerbook.database.base import Database
from ledgerbook.domain.access import Caller, READ_ROLES, WRITE_ROLES, require_role
from ledgerbook.domain.entities import (
    BalanceChange,
    BatchResult,
    BatchSummary,
    EntryDraft,
    EntryType,
    LedgerEntry,
    signed_amount,
)
from ledgerbook.domain.errors import (
    BatchNotFoundError,
    ConflictError,
    DomainError,
    ValidationError,
    batch_not_found,
)
from ledgerbook.domain.ledger import (
    LedgerService,
    batch_entry_id,
    batch_prefix,
    validate_batch_id,
)
from ledgerbook.logging_config import get_logger

logger = get_logger(__name__)

IMPORT_PREFIX = "IMP_"


def new_batch_id() -> str:
    """Generate a batch id: UTC timestamp plus a random suffix."""
    return f"{datetime.now(UTC):%Y%m%d%H%M%S}-{uuid.uuid4().hex[:8]}"


def batch_id_of(entry_id: str) -> Optional[str]:
    """Return the batch id encoded in an entry id, or None for manual entries."""
    if not entry_id.startswith(IMPORT_PREFIX):
        return None
    batch_id, sep, _ = entry_id[len(IMPORT_PREFIX):].rpartition("_")
    return batch_id if sep and batch_id else None


def _aggregate(entries: Iterable[tuple[Optional[str], Decimal]]) -> "OrderedDict[str, Decimal]":
    deltas: OrderedDict[str, Decimal] = OrderedDict()
    for account_id, delta in entries:
        if account_id is None:
            continue
        deltas[account_id] = deltas.get(account_id, Decimal("0")) + delta
    return deltas


class BatchService:
    """Service for appending and undoing import batches."""

    def __init__(self, db: Database):
        """Initialize batch service.

        Args:
            db: Database instance
        """
        self.db = db
        self.ledger = LedgerService(db)

    def append_batch(
        self, caller: Caller, drafts: list[EntryDraft], batch_id: Optional[str] = None
    ) -> BatchResult:
        """Insert many entries as one batch.

        Every draft is validated before anything is written; one invalid
        draft rejects the whole batch. Signed effects are summed per account
        and each distinct account receives a single balance adjustment.

        Args:
            caller: Caller context
            drafts: Entries to insert, in row order
            batch_id: Optional batch id (generated when omitted)

        Returns:
            BatchResult with the inserted entry ids and per-account deltas

        Raises:
            ValidationError: If the batch is empty, the batch id is malformed,
                or a draft is invalid
            ReferentialError: If a draft references something outside the tenant
            ConflictError: If the batch id already has entries
        """
        require_role(caller, WRITE_ROLES, "import batches")
        if not drafts:
            raise ValidationError("Batch has no entries")
        batch_id = validate_batch_id(batch_id) if batch_id is not None else new_batch_id()

        with self.db.atomic():
            if self.db.count_entries_with_prefix(caller.tenant_id, batch_prefix(batch_id)) > 0:
                raise ConflictError(f"Batch '{batch_id}' already exists")

            rows = []
            for index, draft in enumerate(drafts, start=1):
                try:
                    values = self.ledger.prepare_entry(caller.tenant_id, draft)
                except DomainError as e:
                    raise type(e)(f"Row {index}: {e}") from e
                values["id"] = batch_entry_id(batch_id, index)
                rows.append(values)

            entry_ids = self.db.create_entries(caller.tenant_id, rows)
            deltas = _aggregate(
                (row["account_id"], signed_amount(EntryType(row["type"]), row["amount"])) for row in rows
            )
            for account_id, delta in deltas.items():
                self.db.adjust_balance(caller.tenant_id, account_id, delta)

        logger.info(
            "batch_appended",
            tenant_id=caller.tenant_id,
            batch_id=batch_id,
            entries=len(entry_ids),
            accounts=len(deltas),
        )
        return BatchResult(
            batch_id=batch_id,
            entry_ids=entry_ids,
            balance_changes=[BalanceChange(account_id=a, delta=d) for a, d in deltas.items()],
        )

    def undo_batch(self, caller: Caller, batch_id: str) -> BatchResult:
        """Delete every entry of a batch and reverse its balance effects.

        Raises:
            ValidationError: If the batch id is malformed
            BatchNotFoundError: If the tenant has no entries for the batch
        """
        require_role(caller, WRITE_ROLES, "undo batches")
        prefix = batch_prefix(batch_id)

        with self.db.atomic():
            entries = self.db.list_entries(caller.tenant_id, id_prefix=prefix, oldest_first=True)
            if not entries:
                raise BatchNotFoundError(batch_not_found(batch_id))

            deltas = _aggregate((e.account_id, -e.signed_amount) for e in entries)
            for account_id, delta in deltas.items():
                self.db.adjust_balance(caller.tenant_id, account_id, delta)
            deleted = self.db.delete_entries_with_prefix(caller.tenant_id, prefix)

        logger.info(
            "batch_undone",
            tenant_id=caller.tenant_id,
            batch_id=batch_id,
            entries=deleted,
            accounts=len(deltas),
        )
        return BatchResult(
            batch_id=batch_id,
            entry_ids=[e.id for e in entries],
            balance_changes=[BalanceChange(account_id=a, delta=d) for a, d in deltas.items()],
        )

    def list_batches(self, caller: Caller) -> list[BatchSummary]:
        """Summarize the batches present in the tenant, most recent first."""
        require_role(caller, READ_ROLES, "view batches")
        entries = self.db.list_entries(caller.tenant_id, id_prefix=IMPORT_PREFIX, oldest_first=True)

        grouped: OrderedDict[str, list[LedgerEntry]] = OrderedDict()
        for entry in entries:
            batch_id = batch_id_of(entry.id)
            if batch_id is not None:
                grouped.setdefault(batch_id, []).append(entry)

        summaries = [
            BatchSummary(
                batch_id=batch_id,
                entry_count=len(rows),
                total_in=sum((e.amount for e in rows if e.type == EntryType.IN), Decimal("0.00")),
                total_out=sum((e.amount for e in rows if e.type == EntryType.OUT), Decimal("0.00")),
                first_created_at=min(e.created_at for e in rows),
            )
            for batch_id, rows in grouped.items()
        ]
        summaries.sort(key=lambda s: (s.first_created_at, s.batch_id), reverse=True)
        return summaries
