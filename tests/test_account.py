"""Tests for financial accounts: service and commands."""

import pytest
from datetime import date
from decimal import Decimal

from ledgerbook.cli.main import cli
from ledgerbook.domain.errors import (
    ConflictError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)


class TestAccountService:
    """Tests for AccountService."""

    def test_create_account_starts_at_zero(self, account_service, owner):
        """New accounts have a zero balance and are active."""
        account = account_service.create_account(owner, name="Operations", bank_name="BCA")

        assert account.tenant_id == owner.tenant_id
        assert account.balance == Decimal("0.00")
        assert account.is_active is True
        assert account.label == "BCA - Operations"

    def test_create_account_requires_name_and_bank(self, account_service, owner):
        with pytest.raises(ValidationError):
            account_service.create_account(owner, name="  ", bank_name="BCA")
        with pytest.raises(ValidationError):
            account_service.create_account(owner, name="Operations", bank_name="")
        assert account_service.list_accounts(owner) == []

    def test_duplicate_name_in_same_tenant(self, account_service, owner, sample_account):
        with pytest.raises(ConflictError, match="already exists"):
            account_service.create_account(owner, name="Operations", bank_name="Other")

    def test_same_name_in_other_tenant(self, account_service, other_owner, sample_account):
        """Names are unique per tenant only."""
        account = account_service.create_account(other_owner, name="Operations", bank_name="BCA")
        assert account.id != sample_account.id

    def test_list_accounts_is_tenant_scoped(self, account_service, owner, other_owner, sample_account):
        account_service.create_account(other_owner, name="Main", bank_name="BNI")

        assert [a.id for a in account_service.list_accounts(owner)] == [sample_account.id]
        assert [a.name for a in account_service.list_accounts(other_owner)] == ["Main"]

    def test_get_account_from_other_tenant_is_none(self, account_service, other_owner, sample_account):
        assert account_service.get_account(other_owner, sample_account.id) is None
        with pytest.raises(NotFoundError) as exc_info:
            account_service.require_account(other_owner, sample_account.id)
        assert str(exc_info.value) == f"Account {sample_account.id} not found"

    def test_deactivate_hides_from_default_listing(self, account_service, owner, sample_account):
        account_service.deactivate_account(owner, sample_account.id)

        assert account_service.list_accounts(owner) == []
        listed = account_service.list_accounts(owner, include_inactive=True)
        assert [a.id for a in listed] == [sample_account.id]
        assert listed[0].is_active is False

    def test_rename_rewrites_entry_display_name(
        self, account_service, ledger_service, owner, sample_account
    ):
        """Renaming an account updates the account name shown on its entries."""
        entry = ledger_service.append_entry(
            owner, date=date(2024, 1, 5), amount=Decimal("100"), type="IN", account_id=sample_account.id
        )
        assert entry.account == "Operations"

        account_service.update_account(owner, sample_account.id, name="Operations IDR")

        assert ledger_service.get_entry(owner, entry.id).account == "Operations IDR"

    def test_rename_to_taken_name(self, account_service, owner, sample_account, second_account):
        with pytest.raises(ConflictError):
            account_service.update_account(owner, second_account.id, name="Operations")

    def test_update_does_not_touch_balance(self, account_service, ledger_service, owner, sample_account):
        ledger_service.append_entry(
            owner, date=date(2024, 1, 5), amount=Decimal("250"), type="IN", account_id=sample_account.id
        )
        updated = account_service.update_account(owner, sample_account.id, description="Main account")

        assert updated.description == "Main account"
        assert updated.balance == Decimal("250.00")

    def test_update_unknown_account(self, account_service, owner):
        with pytest.raises(NotFoundError):
            account_service.update_account(owner, "missing", name="X")

    def test_update_requires_owner(self, account_service, finance, sample_account):
        """FINANCE may create accounts but not update or deactivate them."""
        with pytest.raises(PermissionDeniedError):
            account_service.update_account(finance, sample_account.id, name="X")
        with pytest.raises(PermissionDeniedError):
            account_service.deactivate_account(finance, sample_account.id)

    def test_staff_cannot_list_accounts(self, account_service, staff):
        with pytest.raises(PermissionDeniedError):
            account_service.list_accounts(staff)


def test_account_create_cli(cli_runner, temp_db, tenants):
    """Test creating an account from the command line."""
    result = cli_runner.invoke(
        cli,
        ["--db-path", temp_db.database_path, "--tenant", "tenant-a", "account", "create", "Operations", "--bank", "BCA"],
    )

    assert result.exit_code == 0
    assert "Created account 'BCA - Operations'" in result.output
    assert "ID:" in result.output
    assert [a.name for a in temp_db.list_accounts("tenant-a")] == ["Operations"]


def test_account_list_empty(cli_runner, temp_db, tenants):
    result = cli_runner.invoke(cli, ["--db-path", temp_db.database_path, "--tenant", "tenant-a", "account", "list"])

    assert result.exit_code == 0
    assert "No accounts found" in result.output


def test_account_list_with_data(cli_runner, temp_db, sample_account):
    result = cli_runner.invoke(cli, ["--db-path", temp_db.database_path, "--tenant", "tenant-a", "account", "list"])

    assert result.exit_code == 0
    assert "BCA - Operations" in result.output
    assert "0.00" in result.output


def test_account_create_duplicate_cli(cli_runner, temp_db, sample_account):
    result = cli_runner.invoke(
        cli,
        ["--db-path", temp_db.database_path, "--tenant", "tenant-a", "account", "create", "Operations", "--bank", "X"],
    )

    assert result.exit_code == 1
    assert "already exists" in result.output.lower()


def test_account_command_requires_tenant(cli_runner, temp_db, monkeypatch):
    monkeypatch.delenv("LEDGERBOOK_TENANT", raising=False)
    result = cli_runner.invoke(cli, ["--db-path", temp_db.database_path, "account", "list"])

    assert result.exit_code == 1
    assert "No tenant selected" in result.output


def test_account_update_role_denied_cli(cli_runner, temp_db, sample_account):
    result = cli_runner.invoke(
        cli,
        [
            "--db-path", temp_db.database_path,
            "--tenant", "tenant-a",
            "--role", "FINANCE",
            "account", "update", "Operations", "--name", "Renamed",
        ],
    )

    assert result.exit_code == 1
    assert "not allowed" in result.output


def test_account_deactivate_cli(cli_runner, temp_db, sample_account):
    result = cli_runner.invoke(
        cli,
        ["--db-path", temp_db.database_path, "--tenant", "tenant-a", "account", "deactivate", "BCA - Operations"],
    )

    assert result.exit_code == 0
    assert "Deactivated account 'BCA - Operations'" in result.output
    assert temp_db.get_account("tenant-a", sample_account.id).is_active is False
