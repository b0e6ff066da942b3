"""SQLAlchemy models for ledgerbook database."""

from datetime import datetime, UTC
from sqlalchemy import (
    Column,
    String,
    ForeignKey,
    DateTime,
    Date,
    Numeric,
    Boolean,
    Index,
    UniqueConstraint,
    create_engine,
    event,
)
from sqlalchemy.orm import declarative_base, sessionmaker, Session

Base = declarative_base()

MONEY = Numeric(14, 2)


def _now() -> datetime:
    return datetime.now(UTC)


class Tenant(Base):
    """Organization / isolation boundary."""

    __tablename__ = "tenants"

    id = Column(String, primary_key=True)
    name = Column(String, nullable=False)
    created_at = Column(DateTime, default=_now, nullable=False)


class FinancialAccount(Base):
    """Cash or bank account with a cached balance."""

    __tablename__ = "financial_accounts"

    id = Column(String, primary_key=True)
    tenant_id = Column(String, ForeignKey("tenants.id"), nullable=False, index=True)
    name = Column(String, nullable=False)
    bank_name = Column(String, nullable=False)
    account_number = Column(String, nullable=True)
    description = Column(String, nullable=True)
    balance = Column(MONEY, nullable=False, default=0)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=_now, nullable=False)

    __table_args__ = (UniqueConstraint("tenant_id", "name", name="uq_account_tenant_name"),)


class ChartOfAccount(Base):
    """Chart-of-accounts node."""

    __tablename__ = "chart_of_accounts"

    id = Column(String, primary_key=True)
    tenant_id = Column(String, ForeignKey("tenants.id"), nullable=False, index=True)
    code = Column(String, nullable=False)
    name = Column(String, nullable=False)
    type = Column(String, nullable=False)
    normal_balance = Column(String, nullable=False)
    parent_id = Column(String, ForeignKey("chart_of_accounts.id", ondelete="SET NULL"), nullable=True)
    description = Column(String, nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=_now, nullable=False)

    __table_args__ = (UniqueConstraint("tenant_id", "code", name="uq_coa_tenant_code"),)


class TransactionCategory(Base):
    """Transaction category tree node."""

    __tablename__ = "transaction_categories"

    id = Column(String, primary_key=True)
    tenant_id = Column(String, ForeignKey("tenants.id"), nullable=False, index=True)
    name = Column(String, nullable=False)
    type = Column(String, nullable=False)
    parent_id = Column(
        String, ForeignKey("transaction_categories.id", ondelete="SET NULL"), nullable=True
    )
    created_at = Column(DateTime, default=_now, nullable=False)


class BusinessUnit(Base):
    """Business unit tree node."""

    __tablename__ = "business_units"

    id = Column(String, primary_key=True)
    tenant_id = Column(String, ForeignKey("tenants.id"), nullable=False, index=True)
    name = Column(String, nullable=False)
    description = Column(String, nullable=True)
    parent_id = Column(String, ForeignKey("business_units.id", ondelete="SET NULL"), nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=_now, nullable=False)


class Transaction(Base):
    """Ledger entry."""

    __tablename__ = "transactions"

    # Entry ids are unique within a tenant only
    tenant_id = Column(String, ForeignKey("tenants.id"), primary_key=True)
    id = Column(String, primary_key=True)
    date = Column(Date, nullable=False)
    description = Column(String, nullable=True)
    amount = Column(MONEY, nullable=False)
    type = Column(String(3), nullable=False)
    status = Column(String, nullable=True)
    account_id = Column(String, ForeignKey("financial_accounts.id"), nullable=True)
    # Display mirror of the account name, rewritten on account rename
    account = Column(String, nullable=True)
    category_id = Column(String, ForeignKey("transaction_categories.id"), nullable=True)
    coa_id = Column(String, ForeignKey("chart_of_accounts.id"), nullable=True)
    business_unit_id = Column(String, ForeignKey("business_units.id"), nullable=True)
    created_at = Column(DateTime, default=_now, nullable=False)

    __table_args__ = (
        Index("ix_transactions_tenant_date", "tenant_id", "date"),
        Index("ix_transactions_tenant_account", "tenant_id", "account_id"),
    )


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def create_session_factory(database_url: str) -> sessionmaker[Session]:
    """Create a SQLAlchemy session factory."""
    engine = create_engine(database_url, echo=False)
    if engine.dialect.name == "sqlite":
        event.listen(engine, "connect", _enable_sqlite_foreign_keys)
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine)
