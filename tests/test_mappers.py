"""Tests for database mappers."""

from datetime import datetime, date, UTC
from decimal import Decimal

from ledgerbook.database.models import (
    FinancialAccount as ORMFinancialAccount,
    ChartOfAccount as ORMChartOfAccount,
    Transaction as ORMTransaction,
)
from ledgerbook.database.mappers import account_to_domain, coa_to_domain, entry_to_domain
from ledgerbook.domain.entities import (
    ChartOfAccount,
    CoaType,
    EntryStatus,
    EntryType,
    FinancialAccount,
    LedgerEntry,
    NormalBalance,
)


class TestAccountMapper:
    def test_account_to_domain(self):
        """Balances come back as 2-place Decimals whatever the store returned."""
        orm_account = ORMFinancialAccount(
            id="acc-1",
            tenant_id="t1",
            name="Operations",
            bank_name="BCA",
            balance=1500.5,
            is_active=1,
            created_at=datetime.now(UTC),
        )

        account = account_to_domain(orm_account)

        assert isinstance(account, FinancialAccount)
        assert account.balance == Decimal("1500.50")
        assert account.is_active is True
        assert account.account_number is None


def test_coa_to_domain():
    orm_coa = ORMChartOfAccount(
        id="c1",
        tenant_id="t1",
        code="4100",
        name="Rental Income",
        type="INCOME",
        normal_balance="CREDIT",
        is_active=True,
        created_at=datetime.now(UTC),
    )

    node = coa_to_domain(orm_coa)

    assert isinstance(node, ChartOfAccount)
    assert node.type == CoaType.INCOME
    assert node.normal_balance == NormalBalance.CREDIT
    assert node.parent_id is None


class TestEntryMapper:
    def _orm(self, **overrides):
        values = dict(
            id="IMP_b1_00001",
            tenant_id="t1",
            date=date(2024, 1, 15),
            amount=Decimal("250000"),
            type="OUT",
            status="UNPAID",
            account_id="acc-1",
            account="Operations",
            created_at=datetime.now(UTC),
        )
        values.update(overrides)
        return ORMTransaction(**values)

    def test_entry_to_domain(self):
        entry = entry_to_domain(self._orm())

        assert isinstance(entry, LedgerEntry)
        assert entry.type == EntryType.OUT
        assert entry.status == EntryStatus.UNPAID
        assert entry.amount == Decimal("250000.00")
        assert entry.signed_amount == Decimal("-250000.00")

    def test_missing_status(self):
        assert entry_to_domain(self._orm(status=None)).status is None
