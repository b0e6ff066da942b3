"""Tests for business units."""

import pytest
from datetime import date
from decimal import Decimal

from ledgerbook.domain.errors import NotFoundError, PermissionDeniedError, ReferentialError, ValidationError


@pytest.fixture
def head_office(unit_service, owner):
    return unit_service.create_business_unit(owner, name="Head Office")


def test_create_nested_units(unit_service, owner, head_office):
    branch = unit_service.create_business_unit(owner, name="Bandung", parent_id=head_office.id)

    assert branch.parent_id == head_office.id
    assert unit_service.format_unit_path(owner, branch.id) == "Head Office > Bandung"
    tree = unit_service.get_tree(owner)
    assert [n.name for n in tree[0].children] == ["Bandung"]


def test_name_required(unit_service, owner):
    with pytest.raises(ValidationError):
        unit_service.create_business_unit(owner, name=" ")


def test_unknown_parent(unit_service, owner):
    with pytest.raises(ReferentialError):
        unit_service.create_business_unit(owner, name="Branch", parent_id="nope")


def test_delete_is_soft(unit_service, ledger_service, owner, sample_account, head_office):
    """Deleted units disappear from listings but entries keep pointing at them."""
    entry = ledger_service.append_entry(
        owner,
        date=date(2024, 1, 1),
        amount=Decimal("10"),
        type="IN",
        account_id=sample_account.id,
        business_unit_id=head_office.id,
    )

    deactivated = unit_service.delete_business_unit(owner, head_office.id)

    assert deactivated.is_active is False
    assert unit_service.list_business_units(owner) == []
    assert [u.id for u in unit_service.list_business_units(owner, include_inactive=True)] == [head_office.id]
    assert ledger_service.get_entry(owner, entry.id).business_unit_id == head_office.id


def test_reactivate(unit_service, owner, head_office):
    unit_service.delete_business_unit(owner, head_office.id)

    restored = unit_service.update_business_unit(owner, head_office.id, is_active=True)

    assert restored.is_active is True


def test_move_under_child_rejected(unit_service, owner, head_office):
    branch = unit_service.create_business_unit(owner, name="Bandung", parent_id=head_office.id)

    with pytest.raises(ValidationError):
        unit_service.update_business_unit(owner, head_office.id, parent_id=branch.id)


def test_other_tenant_cannot_see_unit(unit_service, other_owner, head_office):
    assert unit_service.get_business_unit(other_owner, head_office.id) is None
    with pytest.raises(NotFoundError):
        unit_service.delete_business_unit(other_owner, head_office.id)


def test_staff_cannot_list(unit_service, staff):
    with pytest.raises(PermissionDeniedError):
        unit_service.list_business_units(staff)
