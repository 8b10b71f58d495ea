"""SQLAlchemy models for fincontrol database."""

from datetime import datetime, UTC
from sqlalchemy import (
    Column,
    Integer,
    String,
    ForeignKey,
    DateTime,
    Date,
    Numeric,
    Boolean,
    CheckConstraint,
    UniqueConstraint,
    create_engine,
    event,
)
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, declared_attr, relationship, sessionmaker, Session

Base = declarative_base()


def _utcnow() -> datetime:
    return datetime.now(UTC)


class User(Base):
    """Owner of every other record."""

    __tablename__ = "users"

    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False)
    email = Column(String, unique=True, nullable=False)
    created_at = Column(DateTime, default=_utcnow, nullable=False)


class Category(Base):
    """Income or expense category, one namespace per owner."""

    __tablename__ = "categories"

    id = Column(Integer, primary_key=True)
    owner_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    name = Column(String, nullable=False)
    category_type = Column(String, nullable=False)
    active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=_utcnow, nullable=False)
    updated_at = Column(DateTime, default=_utcnow, onupdate=_utcnow, nullable=False)

    __table_args__ = (
        UniqueConstraint("owner_id", "name", "category_type", name="uq_category_owner_name_type"),
        CheckConstraint("category_type IN ('income', 'expense')", name="ck_category_type"),
    )


class CreditCard(Base):
    """Credit card model."""

    __tablename__ = "credit_cards"

    id = Column(Integer, primary_key=True)
    owner_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    name = Column(String, nullable=False)
    brand = Column(String, nullable=False)
    best_purchase_day = Column(Integer, nullable=False)
    active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=_utcnow, nullable=False)
    updated_at = Column(DateTime, default=_utcnow, onupdate=_utcnow, nullable=False)

    __table_args__ = (
        CheckConstraint("best_purchase_day BETWEEN 1 AND 31", name="ck_card_best_day"),
    )


class EntryColumns:
    """Columns shared by the expenses and incomes tables."""

    id = Column(Integer, primary_key=True)
    description = Column(String, nullable=False)
    amount = Column(Numeric(12, 2), nullable=False)
    status = Column(String, nullable=False)
    subcategory = Column(String, nullable=True)
    effective_date = Column(Date, nullable=False, index=True)
    recurrence_mode = Column(String, default="none", nullable=False)
    installment_count = Column(Integer, default=1, nullable=False)
    installment_index = Column(Integer, default=1, nullable=False)
    group_id = Column(String(32), nullable=True, index=True)
    created_at = Column(DateTime, default=_utcnow, nullable=False)
    updated_at = Column(DateTime, default=_utcnow, onupdate=_utcnow, nullable=False)

    @declared_attr
    def owner_id(cls):
        return Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    @declared_attr
    def category_id(cls):
        return Column(Integer, ForeignKey("categories.id"), nullable=False)

    @declared_attr
    def category(cls):
        return relationship("Category", lazy="joined")


class Expense(EntryColumns, Base):
    """Expense model."""

    __tablename__ = "expenses"

    card_id = Column(Integer, ForeignKey("credit_cards.id"), nullable=True)

    card = relationship("CreditCard")

    __table_args__ = (
        CheckConstraint("status IN ('paid', 'open')", name="ck_expense_status"),
        CheckConstraint(
            "recurrence_mode IN ('none', 'installment', 'fixed')", name="ck_expense_recurrence"
        ),
    )


class Income(EntryColumns, Base):
    """Income model."""

    __tablename__ = "incomes"

    __table_args__ = (
        CheckConstraint("status IN ('received', 'open')", name="ck_income_status"),
        CheckConstraint(
            "recurrence_mode IN ('none', 'installment', 'fixed')", name="ck_income_recurrence"
        ),
    )


class InvestmentAsset(Base):
    """Investment asset with its cached quote snapshot."""

    __tablename__ = "investment_assets"

    id = Column(Integer, primary_key=True)
    owner_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    name = Column(String, nullable=False)
    ticker = Column(String, nullable=True, index=True)
    asset_type = Column(String, nullable=False)
    sector = Column(String, nullable=True)
    description = Column(String, nullable=True)
    active = Column(Boolean, default=True, nullable=False)
    current_price = Column(Numeric(14, 4), nullable=True)
    last_quote_date = Column(Date, nullable=True)
    percent_change = Column(Numeric(10, 4), nullable=True)
    absolute_change = Column(Numeric(14, 4), nullable=True)
    created_at = Column(DateTime, default=_utcnow, nullable=False)
    updated_at = Column(DateTime, default=_utcnow, onupdate=_utcnow, nullable=False)

    # Relationships
    transactions = relationship(
        "InvestmentTransaction", back_populates="asset", cascade="all, delete-orphan"
    )


class InvestmentTransaction(Base):
    """Buy, sell or dividend event on an asset."""

    __tablename__ = "investment_transactions"

    id = Column(Integer, primary_key=True)
    owner_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    asset_id = Column(Integer, ForeignKey("investment_assets.id"), nullable=False, index=True)
    trade_date = Column(Date, nullable=False)
    trade_type = Column(String, nullable=False)
    quantity = Column(Numeric(18, 6), nullable=False)
    unit_price = Column(Numeric(14, 4), nullable=False)
    total_value = Column(Numeric(18, 4), nullable=False)
    created_at = Column(DateTime, default=_utcnow, nullable=False)
    updated_at = Column(DateTime, default=_utcnow, onupdate=_utcnow, nullable=False)

    __table_args__ = (
        CheckConstraint("trade_type IN ('buy', 'sell', 'dividend')", name="ck_trade_type"),
    )

    # Relationships
    asset = relationship("InvestmentAsset", back_populates="transactions")


@event.listens_for(Engine, "connect")
def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    """Turn on foreign key enforcement for SQLite connections."""
    module = type(dbapi_connection).__module__
    if module.startswith("sqlite3"):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


def create_session_factory(database_url: str) -> sessionmaker[Session]:
    """Create a SQLAlchemy session factory."""
    engine = create_engine(database_url, echo=False)
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine)
