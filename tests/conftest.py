"""Shared pytest fixtures for ledgerbook tests."""

import tempfile
import os
from datetime import date
from decimal import Decimal
import pytest

from ledgerbook.database.factories import create_sqlite_database
from ledgerbook.domain.access import Caller, Role
from ledgerbook.domain.account import AccountService
from ledgerbook.domain.batch import BatchService
from ledgerbook.domain.business_unit import BusinessUnitService
from ledgerbook.domain.category import CategoryService
from ledgerbook.domain.coa import ChartOfAccountService
from ledgerbook.domain.csv_import import LedgerImportService
from ledgerbook.domain.entities import EntryDraft, EntryType
from ledgerbook.domain.ledger import LedgerService
from ledgerbook.domain.reconciliation import ReconciliationService
from ledgerbook.domain.tenant import TenantService

TENANT_A = "tenant-a"
TENANT_B = "tenant-b"


@pytest.fixture
def temp_db():
    """Create a temporary database for testing."""
    fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(fd)

    db = create_sqlite_database(database_path=db_path)
    # Store the path for tests that need it
    db.database_path = db_path
    db.connect()
    db.initialize_schema()

    yield db

    db.disconnect()
    if os.path.exists(db_path):
        os.unlink(db_path)


@pytest.fixture
def tenants(temp_db):
    """Onboard two tenants with fixed ids."""
    service = TenantService(temp_db)
    service.create_tenant("Acme Rentals", tenant_id=TENANT_A)
    service.create_tenant("Bravo Studio", tenant_id=TENANT_B)
    return TENANT_A, TENANT_B


@pytest.fixture
def owner(tenants):
    """OWNER of tenant A."""
    return Caller(id="owner-a", tenant_id=TENANT_A, role=Role.OWNER)


@pytest.fixture
def finance(tenants):
    return Caller(id="finance-a", tenant_id=TENANT_A, role=Role.FINANCE)


@pytest.fixture
def manager(tenants):
    return Caller(id="manager-a", tenant_id=TENANT_A, role=Role.MANAGER)


@pytest.fixture
def staff(tenants):
    return Caller(id="staff-a", tenant_id=TENANT_A, role=Role.STAFF)


@pytest.fixture
def other_owner(tenants):
    """OWNER of tenant B."""
    return Caller(id="owner-b", tenant_id=TENANT_B, role=Role.OWNER)


@pytest.fixture
def superadmin(tenants):
    return Caller(id="root", tenant_id=TENANT_A, role=Role.SUPERADMIN)


@pytest.fixture
def account_service(temp_db):
    """Create an AccountService with a temporary database."""
    return AccountService(temp_db)


@pytest.fixture
def ledger_service(temp_db):
    """Create a LedgerService with a temporary database."""
    return LedgerService(temp_db)


@pytest.fixture
def batch_service(temp_db):
    return BatchService(temp_db)


@pytest.fixture
def reconciliation_service(temp_db):
    return ReconciliationService(temp_db)


@pytest.fixture
def coa_service(temp_db):
    return ChartOfAccountService(temp_db)


@pytest.fixture
def category_service(temp_db):
    """Create a CategoryService with a temporary database."""
    return CategoryService(temp_db)


@pytest.fixture
def unit_service(temp_db):
    return BusinessUnitService(temp_db)


@pytest.fixture
def import_service(temp_db):
    return LedgerImportService(temp_db)


@pytest.fixture
def sample_account(account_service, owner):
    """Create a sample account in tenant A."""
    return account_service.create_account(owner, name="Operations", bank_name="BCA")


@pytest.fixture
def second_account(account_service, owner):
    return account_service.create_account(owner, name="Savings", bank_name="Mandiri")


@pytest.fixture
def sample_coa(coa_service, owner):
    """A small chart of accounts: revenue and expense nodes under roots."""
    income = coa_service.create_coa(owner, code="4000", name="Revenue")
    sales = coa_service.create_coa(owner, code="4100", name="Rental Income", parent_id=income.id)
    expense = coa_service.create_coa(owner, code="5000", name="Expenses")
    utilities = coa_service.create_coa(owner, code="5100", name="Utilities", parent_id=expense.id)
    return {"4000": income, "4100": sales, "5000": expense, "5100": utilities}


@pytest.fixture
def make_draft():
    """Build an EntryDraft with sensible defaults."""

    def _make(account_id, amount, entry_type=EntryType.IN, entry_date=date(2024, 1, 15), **kwargs):
        return EntryDraft(
            date=entry_date,
            amount=Decimal(str(amount)),
            type=entry_type,
            account_id=account_id,
            **kwargs,
        )

    return _make


@pytest.fixture
def write_csv(tmp_path):
    """Write CSV text to a temporary file and return its path."""

    def _write(content: str, name: str = "import.csv") -> str:
        path = tmp_path / name
        path.write_text(content, encoding="utf-8")
        return str(path)

    return _write


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()
