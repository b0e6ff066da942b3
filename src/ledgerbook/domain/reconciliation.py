"""Full balance recomputation."""

from ledgerbook.database.base import Database
from ledgerbook.domain.access import (
    Caller,
    READ_ROLES,
    SYSTEM_ROLES,
    WRITE_ROLES,
    require_role,
)
from ledgerbook.domain.entities import (
    ReconciledBalance,
    ReconciliationFailure,
    ReconciliationReport,
)
from ledgerbook.domain.errors import DomainError
from ledgerbook.logging_config import get_logger

logger = get_logger(__name__)


class ReconciliationService:
    """Rebuilds cached account balances from entry history.

    Each account is recomputed as sum(IN) - sum(OUT) over all of its entries,
    whatever their status, and written back in its own unit of work. A
    failure on one account is reported and the run moves on.
    """

    def __init__(self, db: Database):
        self.db = db

    def reconcile(self, caller: Caller, all_tenants: bool = False) -> ReconciliationReport:
        """Recompute and overwrite balances.

        Args:
            caller: Caller context
            all_tenants: Recompute every tenant's accounts (SUPERADMIN only)

        Returns:
            ReconciliationReport listing per-account results and failures
        """
        if all_tenants:
            require_role(caller, SYSTEM_ROLES, "reconcile all tenants")
            accounts = self.db.list_accounts(None, include_inactive=True)
        else:
            require_role(caller, WRITE_ROLES, "reconcile balances")
            accounts = self.db.list_accounts(caller.tenant_id, include_inactive=True)

        results = []
        failures = []
        for account in accounts:
            try:
                with self.db.atomic():
                    balance = self.db.compute_account_balance(account.tenant_id, account.id)
                    self.db.set_balance(account.tenant_id, account.id, balance)
            except DomainError as e:
                logger.error(
                    "reconcile_account_failed",
                    tenant_id=account.tenant_id,
                    account_id=account.id,
                    error=str(e),
                )
                failures.append(
                    ReconciliationFailure(account_id=account.id, tenant_id=account.tenant_id, error=str(e))
                )
                continue

            result = ReconciledBalance(
                account_id=account.id,
                tenant_id=account.tenant_id,
                previous_balance=account.balance,
                balance=balance,
            )
            if result.drift != 0:
                logger.warning(
                    "balance_drift_repaired",
                    tenant_id=account.tenant_id,
                    account_id=account.id,
                    previous=str(result.previous_balance),
                    balance=str(balance),
                )
            results.append(result)

        logger.info(
            "balance_reconciled",
            tenant_id=None if all_tenants else caller.tenant_id,
            accounts=len(results),
            failures=len(failures),
        )
        return ReconciliationReport(results=results, failures=failures)

    def verify(self, caller: Caller, all_tenants: bool = False) -> list[ReconciledBalance]:
        """Report accounts whose cached balance differs from their entries.

        Read-only; ``balance`` on each result is the recomputed value.
        Checking every tenant requires SUPERADMIN.
        """
        if all_tenants:
            require_role(caller, SYSTEM_ROLES, "verify all tenants")
        else:
            require_role(caller, READ_ROLES, "verify balances")
        drifted = []
        for account in self.db.list_accounts(None if all_tenants else caller.tenant_id, include_inactive=True):
            computed = self.db.compute_account_balance(account.tenant_id, account.id)
            if computed != account.balance:
                drifted.append(
                    ReconciledBalance(
                        account_id=account.id,
                        tenant_id=account.tenant_id,
                        previous_balance=account.balance,
                        balance=computed,
                    )
                )
        return drifted
