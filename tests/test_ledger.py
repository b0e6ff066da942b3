"""Tests for LedgerService: entries and incremental balance maintenance."""

import pytest
from datetime import date
from decimal import Decimal

from ledgerbook.domain.entities import EntryStatus, EntryType
from ledgerbook.domain.errors import (
    NotFoundError,
    PermissionDeniedError,
    ReferentialError,
    ValidationError,
)
from ledgerbook.domain.ledger import batch_entry_id, batch_prefix, coerce_amount, validate_batch_id


def _balance(account_service, caller, account_id):
    return account_service.require_account(caller, account_id).balance


class TestEntryHelpers:
    def test_batch_entry_id_is_zero_padded(self):
        assert batch_entry_id("20240115-abc", 7) == "IMP_20240115-abc_00007"
        assert batch_prefix("b1") == "IMP_b1_"

    @pytest.mark.parametrize("batch_id", ["", "has space", "with_underscore", "semi;colon"])
    def test_invalid_batch_ids(self, batch_id):
        with pytest.raises(ValidationError):
            validate_batch_id(batch_id)

    @pytest.mark.parametrize("amount", [0, -5, "abc", True, Decimal("NaN")])
    def test_coerce_amount_rejects(self, amount):
        with pytest.raises(ValidationError):
            coerce_amount(amount)

    def test_coerce_amount_rounds_to_cents(self):
        assert coerce_amount("10.006") == Decimal("10.01")
        assert coerce_amount(3) == Decimal("3.00")


class TestAppendEntry:
    """Appending entries updates the cached balance immediately."""

    def test_in_and_out_move_balance(self, ledger_service, account_service, owner, sample_account):
        ledger_service.append_entry(
            owner, date=date(2024, 1, 1), amount=Decimal("1000"), type=EntryType.IN, account_id=sample_account.id
        )
        ledger_service.append_entry(
            owner, date=date(2024, 1, 2), amount=Decimal("300"), type="out", account_id=sample_account.id
        )

        assert _balance(account_service, owner, sample_account.id) == Decimal("700.00")

    def test_entry_fields(self, ledger_service, owner, sample_account, sample_coa):
        entry = ledger_service.append_entry(
            owner,
            date=date(2024, 2, 1),
            amount=Decimal("1500000"),
            type="IN",
            description="January rent",
            account_id=sample_account.id,
            coa_id=sample_coa["4100"].id,
        )

        assert entry.tenant_id == "tenant-a"
        assert entry.amount == Decimal("1500000.00")
        assert entry.type == EntryType.IN
        assert entry.status == EntryStatus.PAID
        assert entry.account == "Operations"
        assert entry.coa_id == sample_coa["4100"].id
        assert entry.signed_amount == Decimal("1500000.00")
        assert not entry.is_journal

    def test_status_does_not_affect_balance(self, ledger_service, account_service, owner, sample_account):
        """UNPAID entries still count toward the balance."""
        ledger_service.append_entry(
            owner,
            date=date(2024, 1, 1),
            amount=Decimal("200"),
            type="IN",
            status="UNPAID",
            account_id=sample_account.id,
        )

        assert _balance(account_service, owner, sample_account.id) == Decimal("200.00")

    def test_journal_entry_has_no_account_effect(self, ledger_service, account_service, owner, sample_account):
        entry = ledger_service.append_entry(
            owner, date=date(2024, 1, 1), amount=Decimal("50"), type="IN", account_label="5100 - Utilities"
        )

        assert entry.is_journal
        assert entry.account == "5100 - Utilities"
        assert _balance(account_service, owner, sample_account.id) == Decimal("0.00")

    @pytest.mark.parametrize("amount", [Decimal("0"), Decimal("-5")])
    def test_non_positive_amount_rejected(self, ledger_service, account_service, owner, sample_account, amount):
        with pytest.raises(ValidationError):
            ledger_service.append_entry(
                owner, date=date(2024, 1, 1), amount=amount, type="IN", account_id=sample_account.id
            )

        assert ledger_service.list_entries(owner) == []
        assert _balance(account_service, owner, sample_account.id) == Decimal("0.00")

    def test_invalid_type_rejected(self, ledger_service, owner, sample_account):
        with pytest.raises(ValidationError, match="expected IN or OUT"):
            ledger_service.append_entry(
                owner, date=date(2024, 1, 1), amount=Decimal("1"), type="SIDEWAYS", account_id=sample_account.id
            )

    def test_inactive_account_rejected(self, ledger_service, account_service, owner, sample_account):
        account_service.deactivate_account(owner, sample_account.id)

        with pytest.raises(ReferentialError, match="inactive"):
            ledger_service.append_entry(
                owner, date=date(2024, 1, 1), amount=Decimal("10"), type="IN", account_id=sample_account.id
            )

    def test_account_from_other_tenant_rejected(self, ledger_service, other_owner, sample_account):
        """An account id from another tenant behaves like an unknown id."""
        with pytest.raises(ReferentialError):
            ledger_service.append_entry(
                other_owner, date=date(2024, 1, 1), amount=Decimal("10"), type="IN", account_id=sample_account.id
            )

    def test_unknown_coa_rejected(self, ledger_service, owner, sample_account):
        with pytest.raises(ReferentialError, match="Chart of account"):
            ledger_service.append_entry(
                owner,
                date=date(2024, 1, 1),
                amount=Decimal("10"),
                type="IN",
                account_id=sample_account.id,
                coa_id="nope",
            )

    def test_manager_cannot_append(self, ledger_service, manager, sample_account):
        with pytest.raises(PermissionDeniedError):
            ledger_service.append_entry(
                manager, date=date(2024, 1, 1), amount=Decimal("10"), type="IN", account_id=sample_account.id
            )

    def test_finance_can_append(self, ledger_service, finance, sample_account):
        entry = ledger_service.append_entry(
            finance, date=date(2024, 1, 1), amount=Decimal("10"), type="IN", account_id=sample_account.id
        )
        assert entry.id


class TestUpdateEntry:
    """Corrections move the balance by the difference only."""

    @pytest.fixture
    def entry(self, ledger_service, owner, sample_account):
        return ledger_service.append_entry(
            owner, date=date(2024, 1, 10), amount=Decimal("100"), type="IN", account_id=sample_account.id
        )

    def test_amount_change_applies_delta(self, ledger_service, account_service, owner, sample_account, entry):
        ledger_service.update_entry(owner, entry.id, amount=Decimal("150"))

        assert _balance(account_service, owner, sample_account.id) == Decimal("150.00")

    def test_type_flip(self, ledger_service, account_service, owner, sample_account, entry):
        ledger_service.update_entry(owner, entry.id, type="OUT")

        assert _balance(account_service, owner, sample_account.id) == Decimal("-100.00")

    def test_description_only_issues_no_adjustment(
        self, ledger_service, temp_db, owner, sample_account, entry, monkeypatch
    ):
        calls = []
        original = temp_db.adjust_balance

        def spy(tenant_id, account_id, delta):
            calls.append((account_id, delta))
            return original(tenant_id, account_id, delta)

        monkeypatch.setattr(temp_db, "adjust_balance", spy)
        updated = ledger_service.update_entry(owner, entry.id, description="Corrected")

        assert updated.description == "Corrected"
        assert calls == []

    def test_moving_to_other_account(
        self, ledger_service, account_service, owner, sample_account, second_account, entry
    ):
        updated = ledger_service.update_entry(owner, entry.id, account_id=second_account.id, amount=Decimal("80"))

        assert updated.account_id == second_account.id
        assert updated.account == "Savings"
        assert _balance(account_service, owner, sample_account.id) == Decimal("0.00")
        assert _balance(account_service, owner, second_account.id) == Decimal("80.00")

    def test_clear_account_reverses_effect(self, ledger_service, account_service, owner, sample_account, entry):
        updated = ledger_service.update_entry(owner, entry.id, clear_account=True, account_label="4000 - Revenue")

        assert updated.is_journal
        assert updated.account == "4000 - Revenue"
        assert _balance(account_service, owner, sample_account.id) == Decimal("0.00")

    def test_set_and_clear_same_field(self, ledger_service, owner, entry, second_account):
        with pytest.raises(ValidationError):
            ledger_service.update_entry(owner, entry.id, account_id=second_account.id, clear_account=True)

    def test_clear_coa(self, ledger_service, owner, sample_account, sample_coa):
        entry = ledger_service.append_entry(
            owner,
            date=date(2024, 1, 10),
            amount=Decimal("5"),
            type="OUT",
            account_id=sample_account.id,
            coa_id=sample_coa["5100"].id,
        )
        updated = ledger_service.update_entry(owner, entry.id, clear_coa=True)

        assert updated.coa_id is None

    def test_update_unknown_entry(self, ledger_service, owner):
        with pytest.raises(NotFoundError, match="Transaction missing not found"):
            ledger_service.update_entry(owner, "missing", amount=Decimal("1"))

    def test_update_from_other_tenant(self, ledger_service, other_owner, entry):
        with pytest.raises(NotFoundError):
            ledger_service.update_entry(other_owner, entry.id, amount=Decimal("1"))

    def test_invalid_amount_leaves_entry_untouched(
        self, ledger_service, account_service, owner, sample_account, entry
    ):
        with pytest.raises(ValidationError):
            ledger_service.update_entry(owner, entry.id, amount=Decimal("0"))

        assert ledger_service.get_entry(owner, entry.id).amount == Decimal("100.00")
        assert _balance(account_service, owner, sample_account.id) == Decimal("100.00")


class TestDeleteEntry:
    def test_delete_reverses_effect(self, ledger_service, account_service, owner, sample_account):
        keep = ledger_service.append_entry(
            owner, date=date(2024, 1, 1), amount=Decimal("40"), type="IN", account_id=sample_account.id
        )
        drop = ledger_service.append_entry(
            owner, date=date(2024, 1, 2), amount=Decimal("15"), type="OUT", account_id=sample_account.id
        )

        ledger_service.delete_entry(owner, drop.id)

        assert _balance(account_service, owner, sample_account.id) == Decimal("40.00")
        assert [e.id for e in ledger_service.list_entries(owner)] == [keep.id]

    def test_delete_unknown_entry(self, ledger_service, owner):
        with pytest.raises(NotFoundError):
            ledger_service.delete_entry(owner, "missing")


class TestListEntries:
    def test_newest_first_and_filters(self, ledger_service, owner, sample_account, second_account):
        for day, account in ((5, sample_account), (20, second_account), (12, sample_account)):
            ledger_service.append_entry(
                owner, date=date(2024, 1, day), amount=Decimal(day), type="IN", account_id=account.id
            )

        assert [e.date.day for e in ledger_service.list_entries(owner)] == [20, 12, 5]
        in_range = ledger_service.list_entries(owner, start_date=date(2024, 1, 6), end_date=date(2024, 1, 31))
        assert [e.date.day for e in in_range] == [20, 12]
        by_account = ledger_service.list_entries(owner, account_id=sample_account.id)
        assert [e.date.day for e in by_account] == [12, 5]
        assert len(ledger_service.list_entries(owner, limit=1)) == 1

    def test_staff_can_list_entries(self, ledger_service, staff, owner, sample_account):
        ledger_service.append_entry(
            owner, date=date(2024, 1, 1), amount=Decimal("1"), type="IN", account_id=sample_account.id
        )
        assert len(ledger_service.list_entries(staff)) == 1

    def test_tenant_isolation(self, ledger_service, owner, other_owner, sample_account):
        entry = ledger_service.append_entry(
            owner, date=date(2024, 1, 1), amount=Decimal("1"), type="IN", account_id=sample_account.id
        )

        assert ledger_service.list_entries(other_owner) == []
        assert ledger_service.get_entry(other_owner, entry.id) is None


class TestAccountStatement:
    def test_running_balance_with_opening(self, ledger_service, owner, sample_account):
        """Entries before the start date roll into the opening balance."""
        rows = [
            (date(2023, 12, 20), "500", "IN"),
            (date(2024, 1, 3), "200", "OUT"),
            (date(2024, 1, 9), "1000", "IN"),
            (date(2024, 2, 1), "50", "OUT"),
        ]
        for entry_date, amount, entry_type in rows:
            ledger_service.append_entry(
                owner, date=entry_date, amount=Decimal(amount), type=entry_type, account_id=sample_account.id
            )

        statement = ledger_service.account_statement(
            owner, sample_account.id, start_date=date(2024, 1, 1), end_date=date(2024, 1, 31)
        )

        assert statement.opening_balance == Decimal("500.00")
        assert [line.running_balance for line in statement.lines] == [Decimal("300.00"), Decimal("1300.00")]
        assert statement.closing_balance == Decimal("1300.00")

    def test_empty_statement(self, ledger_service, owner, sample_account):
        statement = ledger_service.account_statement(owner, sample_account.id)

        assert statement.lines == []
        assert statement.closing_balance == Decimal("0.00")

    def test_statement_unknown_account(self, ledger_service, owner):
        with pytest.raises(NotFoundError):
            ledger_service.account_statement(owner, "missing")


class TestSummary:
    """Balances, total assets and period cash flow."""

    def _add(self, ledger_service, owner, account, amount, entry_type, day, **kwargs):
        return ledger_service.append_entry(
            owner,
            date=day,
            amount=Decimal(amount),
            type=entry_type,
            account_id=account.id if account else None,
            **kwargs,
        )

    def test_summary_over_period(
        self, ledger_service, account_service, owner, sample_account, second_account
    ):
        self._add(ledger_service, owner, sample_account, "1000", "IN", date(2024, 1, 31))
        self._add(ledger_service, owner, sample_account, "400", "IN", date(2024, 2, 5))
        self._add(ledger_service, owner, second_account, "150", "OUT", date(2024, 2, 10), status="UNPAID")
        self._add(ledger_service, owner, None, "999", "IN", date(2024, 2, 11), account_label="4100 - Rental Income")
        account_service.deactivate_account(owner, second_account.id)

        report = ledger_service.summary(owner, start_date=date(2024, 2, 1), end_date=date(2024, 2, 29))

        assert [(a.name, a.balance) for a in report.accounts] == [
            ("Operations", Decimal("1400.00")),
            ("Savings", Decimal("-150.00")),
        ]
        assert report.total_assets == Decimal("1250.00")
        assert report.income == Decimal("400.00")
        assert report.expense == Decimal("150.00")
        assert report.profit == Decimal("250.00")

    def test_empty_tenant(self, ledger_service, other_owner, sample_account):
        report = ledger_service.summary(other_owner)

        assert report.accounts == []
        assert report.total_assets == Decimal("0.00")
        assert report.profit == Decimal("0.00")

    def test_staff_cannot_view(self, ledger_service, staff):
        with pytest.raises(PermissionDeniedError):
            ledger_service.summary(staff)
