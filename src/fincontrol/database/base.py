"""Abstract database interface."""

from abc import ABC, abstractmethod
from typing import Optional, Any, Sequence
from datetime import date
from decimal import Decimal

# Import entities directly so the database layer never pulls in services
from fincontrol.domain.entities import (
    AssetType,
    Category,
    CreditCard,
    Entry,
    EntryDraft,
    EntryKind,
    InvestmentAsset,
    InvestmentTransaction,
    QuotationStatus,
    RecurrenceMode,
    TradeType,
    User,
)


class Database(ABC):
    """Abstract database interface for fincontrol.

    Every owner-facing method takes ``owner_id`` and only ever reads or
    writes rows of that owner. The quotation methods are global.
    """

    @abstractmethod
    def connect(self) -> None:
        """Connect to the database."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Disconnect from the database."""
        pass

    @abstractmethod
    def initialize_schema(self) -> None:
        """Initialize database schema (create tables)."""
        pass

    # User operations
    @abstractmethod
    def create_user(self, name: str, email: str) -> int:
        """Create a user. Returns user ID."""
        pass

    @abstractmethod
    def get_user(self, user_id: int) -> Optional[User]:
        """Get user by ID."""
        pass

    @abstractmethod
    def get_user_by_email(self, email: str) -> Optional[User]:
        """Get user by email."""
        pass

    @abstractmethod
    def list_users(self) -> list[User]:
        """List all users."""
        pass

    # Category operations
    @abstractmethod
    def create_category(
        self, owner_id: int, name: str, category_type: EntryKind, active: bool = True
    ) -> int:
        """Create a category. Returns category ID."""
        pass

    @abstractmethod
    def get_category(self, owner_id: int, category_id: int) -> Optional[Category]:
        """Get category by ID."""
        pass

    @abstractmethod
    def get_category_by_name(
        self, owner_id: int, name: str, category_type: Optional[EntryKind] = None
    ) -> Optional[Category]:
        """Get category by name, optionally restricted to one type."""
        pass

    @abstractmethod
    def list_categories(
        self,
        owner_id: int,
        category_type: Optional[EntryKind] = None,
        active: Optional[bool] = None,
    ) -> list[Category]:
        """List categories with their usage counts."""
        pass

    @abstractmethod
    def update_category(self, owner_id: int, category_id: int, changes: dict[str, Any]) -> None:
        """Update category fields."""
        pass

    @abstractmethod
    def delete_category(self, owner_id: int, category_id: int) -> None:
        """Delete a category."""
        pass

    @abstractmethod
    def count_category_usage(self, owner_id: int, category_id: int) -> int:
        """Count expenses and incomes referencing a category."""
        pass

    # Credit card operations
    @abstractmethod
    def create_credit_card(
        self, owner_id: int, name: str, brand: str, best_purchase_day: int, active: bool = True
    ) -> int:
        """Create a credit card. Returns card ID."""
        pass

    @abstractmethod
    def get_credit_card(self, owner_id: int, card_id: int) -> Optional[CreditCard]:
        """Get credit card by ID."""
        pass

    @abstractmethod
    def list_credit_cards(self, owner_id: int, active: Optional[bool] = None) -> list[CreditCard]:
        """List credit cards, optionally filtered by active flag."""
        pass

    @abstractmethod
    def update_credit_card(self, owner_id: int, card_id: int, changes: dict[str, Any]) -> None:
        """Update credit card fields."""
        pass

    @abstractmethod
    def delete_credit_card(self, owner_id: int, card_id: int) -> None:
        """Delete a credit card, clearing it from its expenses."""
        pass

    # Entry operations
    @abstractmethod
    def create_entries(self, drafts: Sequence[EntryDraft]) -> list[Entry]:
        """Persist a batch of entries in one transaction.

        Either every draft is written or none is.
        """
        pass

    @abstractmethod
    def get_entry(self, kind: EntryKind, owner_id: int, entry_id: int) -> Optional[Entry]:
        """Get an expense or income by ID."""
        pass

    @abstractmethod
    def list_entries(
        self,
        kind: EntryKind,
        owner_id: int,
        status: Optional[str] = None,
        category_id: Optional[int] = None,
        date_prefix: Optional[str] = None,
    ) -> list[Entry]:
        """List entries, newest first.

        Args:
            status: Optional status filter
            category_id: Optional category filter
            date_prefix: Optional ``YYYY-MM-`` prefix matched against the
                stored date text
        """
        pass

    @abstractmethod
    def update_entry(
        self, kind: EntryKind, owner_id: int, entry_id: int, changes: dict[str, Any]
    ) -> None:
        """Update one entry."""
        pass

    @abstractmethod
    def delete_entry(self, kind: EntryKind, owner_id: int, entry_id: int) -> None:
        """Delete one entry."""
        pass

    @abstractmethod
    def list_entries_by_group_id(self, kind: EntryKind, owner_id: int, group_id: str) -> list[Entry]:
        """List the rows of one recurrence batch."""
        pass

    @abstractmethod
    def list_entries_by_description(
        self,
        kind: EntryKind,
        owner_id: int,
        base_description: str,
        recurrence_mode: RecurrenceMode,
    ) -> list[Entry]:
        """List rows whose description starts with ``base_description``.

        Used for rows created before batches carried a group ID.
        """
        pass

    @abstractmethod
    def update_entries_in_group(
        self,
        kind: EntryKind,
        owner_id: int,
        changes: dict[str, Any],
        group_id: Optional[str] = None,
        base_description: Optional[str] = None,
        recurrence_mode: Optional[RecurrenceMode] = None,
        status: Optional[str] = None,
    ) -> int:
        """Apply ``changes`` to every row of a group. Returns rows changed.

        The group is matched by ``group_id`` when given, otherwise by
        description prefix and recurrence mode.
        """
        pass

    # Investment asset operations
    @abstractmethod
    def create_asset(
        self,
        owner_id: int,
        name: str,
        asset_type: AssetType,
        ticker: Optional[str] = None,
        sector: Optional[str] = None,
        description: Optional[str] = None,
        active: bool = True,
    ) -> int:
        """Create an investment asset. Returns asset ID."""
        pass

    @abstractmethod
    def get_asset(self, owner_id: int, asset_id: int) -> Optional[InvestmentAsset]:
        """Get investment asset by ID."""
        pass

    @abstractmethod
    def list_assets(
        self,
        owner_id: int,
        asset_type: Optional[AssetType] = None,
        active: Optional[bool] = None,
        search: Optional[str] = None,
    ) -> list[InvestmentAsset]:
        """List investment assets with optional filters."""
        pass

    @abstractmethod
    def update_asset(self, owner_id: int, asset_id: int, changes: dict[str, Any]) -> None:
        """Update investment asset fields."""
        pass

    @abstractmethod
    def delete_asset(self, owner_id: int, asset_id: int) -> None:
        """Delete an investment asset and its transactions."""
        pass

    # Quotation operations (global, not owner scoped)
    @abstractmethod
    def list_quoted_tickers(self, asset_types: Sequence[AssetType]) -> list[str]:
        """List distinct tickers of active assets of the given types."""
        pass

    @abstractmethod
    def update_asset_quote(
        self,
        ticker: str,
        price: Decimal,
        percent_change: Decimal,
        absolute_change: Decimal,
        quote_date: date,
    ) -> int:
        """Write a quote onto every active asset with ``ticker``. Returns rows changed."""
        pass

    @abstractmethod
    def get_quotation_status(self, today: date) -> QuotationStatus:
        """Summarize quote coverage over active assets with a ticker."""
        pass

    @abstractmethod
    def list_outdated_assets(self, before: date) -> list[InvestmentAsset]:
        """List active assets with a ticker whose quote is missing or older than ``before``."""
        pass

    # Investment transaction operations
    @abstractmethod
    def create_investment_transaction(
        self,
        owner_id: int,
        asset_id: int,
        trade_date: date,
        trade_type: TradeType,
        quantity: Decimal,
        unit_price: Decimal,
        total_value: Decimal,
    ) -> int:
        """Create an investment transaction. Returns transaction ID."""
        pass

    @abstractmethod
    def get_investment_transaction(
        self, owner_id: int, transaction_id: int
    ) -> Optional[InvestmentTransaction]:
        """Get investment transaction by ID."""
        pass

    @abstractmethod
    def list_investment_transactions(
        self,
        owner_id: int,
        asset_id: Optional[int] = None,
        trade_type: Optional[TradeType] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> list[InvestmentTransaction]:
        """List investment transactions, newest first."""
        pass

    @abstractmethod
    def update_investment_transaction(
        self, owner_id: int, transaction_id: int, changes: dict[str, Any]
    ) -> None:
        """Update investment transaction fields."""
        pass

    @abstractmethod
    def delete_investment_transaction(self, owner_id: int, transaction_id: int) -> None:
        """Delete an investment transaction."""
        pass
