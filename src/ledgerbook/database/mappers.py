"""Mapper functions to convert between domain models and SQLAlchemy models.

This layer isolates the conversion logic, so ORM rows never leak out of the
database package and enum-valued string columns come back as enums.
"""

from ledgerbook.domain import entities as domain
from ledgerbook.database.models import (
    Tenant as ORMTenant,
    FinancialAccount as ORMFinancialAccount,
    ChartOfAccount as ORMChartOfAccount,
    TransactionCategory as ORMTransactionCategory,
    BusinessUnit as ORMBusinessUnit,
    Transaction as ORMTransaction,
)


def tenant_to_domain(orm_tenant: ORMTenant) -> domain.Tenant:
    """Convert SQLAlchemy Tenant model to domain Tenant entity."""
    return domain.Tenant(
        id=orm_tenant.id,
        name=orm_tenant.name,
        created_at=orm_tenant.created_at,
    )


def account_to_domain(orm_account: ORMFinancialAccount) -> domain.FinancialAccount:
    """Convert SQLAlchemy FinancialAccount model to domain entity."""
    return domain.FinancialAccount(
        id=orm_account.id,
        tenant_id=orm_account.tenant_id,
        name=orm_account.name,
        bank_name=orm_account.bank_name,
        account_number=orm_account.account_number,
        description=orm_account.description,
        balance=domain.money(orm_account.balance),
        is_active=bool(orm_account.is_active),
        created_at=orm_account.created_at,
    )


def coa_to_domain(orm_coa: ORMChartOfAccount) -> domain.ChartOfAccount:
    """Convert SQLAlchemy ChartOfAccount model to domain entity."""
    return domain.ChartOfAccount(
        id=orm_coa.id,
        tenant_id=orm_coa.tenant_id,
        code=orm_coa.code,
        name=orm_coa.name,
        type=domain.CoaType(orm_coa.type),
        normal_balance=domain.NormalBalance(orm_coa.normal_balance),
        parent_id=orm_coa.parent_id,
        description=orm_coa.description,
        is_active=bool(orm_coa.is_active),
        created_at=orm_coa.created_at,
    )


def category_to_domain(orm_category: ORMTransactionCategory) -> domain.TransactionCategory:
    """Convert SQLAlchemy TransactionCategory model to domain entity."""
    return domain.TransactionCategory(
        id=orm_category.id,
        tenant_id=orm_category.tenant_id,
        name=orm_category.name,
        type=domain.CategoryType(orm_category.type),
        parent_id=orm_category.parent_id,
        created_at=orm_category.created_at,
    )


def business_unit_to_domain(orm_unit: ORMBusinessUnit) -> domain.BusinessUnit:
    """Convert SQLAlchemy BusinessUnit model to domain entity."""
    return domain.BusinessUnit(
        id=orm_unit.id,
        tenant_id=orm_unit.tenant_id,
        name=orm_unit.name,
        description=orm_unit.description,
        parent_id=orm_unit.parent_id,
        is_active=bool(orm_unit.is_active),
        created_at=orm_unit.created_at,
    )


def entry_to_domain(orm_transaction: ORMTransaction) -> domain.LedgerEntry:
    """Convert SQLAlchemy Transaction model to domain LedgerEntry entity."""
    return domain.LedgerEntry(
        id=orm_transaction.id,
        tenant_id=orm_transaction.tenant_id,
        date=orm_transaction.date,
        description=orm_transaction.description,
        amount=domain.money(orm_transaction.amount),
        type=domain.EntryType(orm_transaction.type),
        status=domain.EntryStatus(orm_transaction.status) if orm_transaction.status else None,
        account_id=orm_transaction.account_id,
        account=orm_transaction.account,
        category_id=orm_transaction.category_id,
        coa_id=orm_transaction.coa_id,
        business_unit_id=orm_transaction.business_unit_id,
        created_at=orm_transaction.created_at,
    )
