"""Mapper functions to convert between domain models and SQLAlchemy models.

This layer isolates the conversion logic, so schema details such as the
string-coded enumerations never leak into the domain layer.
"""

from decimal import Decimal
from typing import Optional

from fincontrol.domain import entities as domain
from fincontrol.database.models import (
    User as ORMUser,
    Category as ORMCategory,
    CreditCard as ORMCreditCard,
    Expense as ORMExpense,
    Income as ORMIncome,
    InvestmentAsset as ORMInvestmentAsset,
    InvestmentTransaction as ORMInvestmentTransaction,
)


def _decimal(value) -> Optional[Decimal]:
    if value is None:
        return None
    return value if isinstance(value, Decimal) else Decimal(str(value))


def user_to_domain(orm_user: ORMUser) -> domain.User:
    """Convert SQLAlchemy User model to domain User entity."""
    return domain.User(
        id=orm_user.id,
        name=orm_user.name,
        email=orm_user.email,
        created_at=orm_user.created_at,
    )


def category_to_domain(orm_category: ORMCategory, usage_count: int = 0) -> domain.Category:
    """Convert SQLAlchemy Category model to domain Category entity."""
    return domain.Category(
        id=orm_category.id,
        owner_id=orm_category.owner_id,
        name=orm_category.name,
        category_type=domain.EntryKind(orm_category.category_type),
        active=orm_category.active,
        created_at=orm_category.created_at,
        usage_count=usage_count,
    )


def credit_card_to_domain(orm_card: ORMCreditCard) -> domain.CreditCard:
    """Convert SQLAlchemy CreditCard model to domain CreditCard entity."""
    return domain.CreditCard(
        id=orm_card.id,
        owner_id=orm_card.owner_id,
        name=orm_card.name,
        brand=orm_card.brand,
        best_purchase_day=orm_card.best_purchase_day,
        active=orm_card.active,
        created_at=orm_card.created_at,
    )


def entry_to_domain(orm_entry: ORMExpense | ORMIncome) -> domain.Entry:
    """Convert SQLAlchemy Expense or Income model to domain Entry entity."""
    is_expense = isinstance(orm_entry, ORMExpense)
    return domain.Entry(
        id=orm_entry.id,
        kind=domain.EntryKind.EXPENSE if is_expense else domain.EntryKind.INCOME,
        owner_id=orm_entry.owner_id,
        description=orm_entry.description,
        amount=_decimal(orm_entry.amount),
        status=orm_entry.status,
        category_id=orm_entry.category_id,
        category_name=orm_entry.category.name,
        effective_date=orm_entry.effective_date,
        recurrence_mode=domain.RecurrenceMode(orm_entry.recurrence_mode),
        installment_count=orm_entry.installment_count,
        installment_index=orm_entry.installment_index,
        group_id=orm_entry.group_id,
        subcategory=orm_entry.subcategory,
        card_id=orm_entry.card_id if is_expense else None,
        created_at=orm_entry.created_at,
        updated_at=orm_entry.updated_at,
    )


def asset_to_domain(orm_asset: ORMInvestmentAsset) -> domain.InvestmentAsset:
    """Convert SQLAlchemy InvestmentAsset model to domain entity."""
    return domain.InvestmentAsset(
        id=orm_asset.id,
        owner_id=orm_asset.owner_id,
        name=orm_asset.name,
        ticker=orm_asset.ticker,
        asset_type=domain.AssetType(orm_asset.asset_type),
        sector=orm_asset.sector,
        description=orm_asset.description,
        active=orm_asset.active,
        current_price=_decimal(orm_asset.current_price),
        last_quote_date=orm_asset.last_quote_date,
        percent_change=_decimal(orm_asset.percent_change),
        absolute_change=_decimal(orm_asset.absolute_change),
        created_at=orm_asset.created_at,
        updated_at=orm_asset.updated_at,
    )


def investment_transaction_to_domain(
    orm_transaction: ORMInvestmentTransaction,
) -> domain.InvestmentTransaction:
    """Convert SQLAlchemy InvestmentTransaction model to domain entity."""
    return domain.InvestmentTransaction(
        id=orm_transaction.id,
        owner_id=orm_transaction.owner_id,
        asset_id=orm_transaction.asset_id,
        asset_name=orm_transaction.asset.name,
        trade_date=orm_transaction.trade_date,
        trade_type=domain.TradeType(orm_transaction.trade_type),
        quantity=_decimal(orm_transaction.quantity),
        unit_price=_decimal(orm_transaction.unit_price),
        total_value=_decimal(orm_transaction.total_value),
        created_at=orm_transaction.created_at,
    )
