"""Tests for balance reconciliation."""

import pytest
from datetime import date
from decimal import Decimal

from ledgerbook.domain.errors import NotFoundError, PermissionDeniedError


def _seed(ledger_service, caller, account, *movements):
    for amount, entry_type in movements:
        ledger_service.append_entry(
            caller, date=date(2024, 3, 1), amount=Decimal(amount), type=entry_type, account_id=account.id
        )


def _corrupt(temp_db, account, balance):
    with temp_db.atomic():
        temp_db.set_balance(account.tenant_id, account.id, Decimal(balance))


class TestReconcile:
    def test_consistent_balances_report_no_drift(
        self, reconciliation_service, ledger_service, owner, sample_account
    ):
        _seed(ledger_service, owner, sample_account, ("300", "IN"), ("120", "OUT"))

        report = reconciliation_service.reconcile(owner)

        assert report.ok
        assert report.drifted == []
        assert [(r.account_id, r.balance) for r in report.results] == [(sample_account.id, Decimal("180.00"))]

    def test_drift_is_repaired(
        self, reconciliation_service, ledger_service, account_service, temp_db, owner, sample_account
    ):
        _seed(ledger_service, owner, sample_account, ("1000", "IN"), ("400", "OUT"))
        _corrupt(temp_db, sample_account, "9999")

        report = reconciliation_service.reconcile(owner)

        assert [(r.previous_balance, r.balance) for r in report.drifted] == [
            (Decimal("9999.00"), Decimal("600.00"))
        ]
        assert report.drifted[0].drift == Decimal("-9399.00")
        assert account_service.require_account(owner, sample_account.id).balance == Decimal("600.00")

    def test_reconcile_is_idempotent(
        self, reconciliation_service, ledger_service, temp_db, owner, sample_account
    ):
        _seed(ledger_service, owner, sample_account, ("50", "IN"))
        _corrupt(temp_db, sample_account, "0")

        first = reconciliation_service.reconcile(owner)
        second = reconciliation_service.reconcile(owner)

        assert len(first.drifted) == 1
        assert second.drifted == []
        assert second.results[0].balance == first.results[0].balance

    def test_unpaid_entries_count(self, reconciliation_service, ledger_service, owner, sample_account):
        ledger_service.append_entry(
            owner,
            date=date(2024, 3, 1),
            amount=Decimal("70"),
            type="IN",
            status="UNPAID",
            account_id=sample_account.id,
        )

        report = reconciliation_service.reconcile(owner)

        assert report.results[0].balance == Decimal("70.00")

    def test_inactive_accounts_are_included(
        self, reconciliation_service, account_service, ledger_service, temp_db, owner, sample_account
    ):
        _seed(ledger_service, owner, sample_account, ("25", "IN"))
        account_service.deactivate_account(owner, sample_account.id)
        _corrupt(temp_db, sample_account, "1")

        report = reconciliation_service.reconcile(owner)

        assert [r.account_id for r in report.drifted] == [sample_account.id]
        assert temp_db.get_account("tenant-a", sample_account.id).balance == Decimal("25.00")

    def test_scoped_to_callers_tenant(
        self, reconciliation_service, account_service, temp_db, owner, other_owner, sample_account
    ):
        other = account_service.create_account(other_owner, name="Main", bank_name="BNI")
        _corrupt(temp_db, other, "42")

        report = reconciliation_service.reconcile(owner)

        assert [r.account_id for r in report.results] == [sample_account.id]
        assert temp_db.get_account("tenant-b", other.id).balance == Decimal("42.00")

    def test_failure_on_one_account_does_not_stop_run(
        self, reconciliation_service, ledger_service, temp_db, owner, sample_account, second_account, monkeypatch
    ):
        _seed(ledger_service, owner, second_account, ("80", "IN"))
        _corrupt(temp_db, second_account, "0")
        original = temp_db.compute_account_balance

        def flaky(tenant_id, account_id, before=None):
            if account_id == sample_account.id:
                raise NotFoundError(f"Account {account_id} not found")
            return original(tenant_id, account_id, before=before)

        monkeypatch.setattr(temp_db, "compute_account_balance", flaky)

        report = reconciliation_service.reconcile(owner)

        assert not report.ok
        assert [f.account_id for f in report.failures] == [sample_account.id]
        assert "not found" in report.failures[0].error
        assert [r.account_id for r in report.results] == [second_account.id]
        assert temp_db.get_account("tenant-a", second_account.id).balance == Decimal("80.00")

    def test_manager_cannot_reconcile(self, reconciliation_service, manager):
        with pytest.raises(PermissionDeniedError):
            reconciliation_service.reconcile(manager)


class TestReconcileAllTenants:
    def test_requires_superadmin(self, reconciliation_service, owner):
        with pytest.raises(PermissionDeniedError):
            reconciliation_service.reconcile(owner, all_tenants=True)

    def test_superadmin_repairs_every_tenant(
        self, reconciliation_service, account_service, temp_db, superadmin, other_owner, sample_account
    ):
        other = account_service.create_account(other_owner, name="Main", bank_name="BNI")
        _corrupt(temp_db, sample_account, "3")
        _corrupt(temp_db, other, "4")

        report = reconciliation_service.reconcile(superadmin, all_tenants=True)

        assert {r.tenant_id for r in report.drifted} == {"tenant-a", "tenant-b"}
        assert temp_db.get_account("tenant-b", other.id).balance == Decimal("0.00")


def test_verify_is_read_only(reconciliation_service, ledger_service, temp_db, manager, owner, sample_account):
    """MANAGER may look for drift but nothing is written."""
    _seed(ledger_service, owner, sample_account, ("10", "IN"))
    _corrupt(temp_db, sample_account, "11")

    drifted = reconciliation_service.verify(manager)

    assert [(d.previous_balance, d.balance) for d in drifted] == [(Decimal("11.00"), Decimal("10.00"))]
    assert temp_db.get_account("tenant-a", sample_account.id).balance == Decimal("11.00")


class TestVerifyAllTenants:
    def test_requires_superadmin(self, reconciliation_service, owner):
        with pytest.raises(PermissionDeniedError):
            reconciliation_service.verify(owner, all_tenants=True)

    def test_reports_drift_in_every_tenant(
        self, reconciliation_service, account_service, temp_db, superadmin, other_owner, sample_account
    ):
        other = account_service.create_account(other_owner, name="Main", bank_name="BNI")
        _corrupt(temp_db, other, "4")

        assert reconciliation_service.verify(superadmin) == []
        drifted = reconciliation_service.verify(superadmin, all_tenants=True)

        assert [(d.tenant_id, d.account_id) for d in drifted] == [("tenant-b", other.id)]
        assert temp_db.get_account("tenant-b", other.id).balance == Decimal("4.00")
