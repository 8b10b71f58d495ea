"""Domain model entities for fincontrol.

These are pure data classes representing business concepts, independent of
database schema. Services and the CLI only ever see these types; the
SQLAlchemy models stay behind the database layer.
"""

from dataclasses import dataclass, field
from datetime import datetime, date
from decimal import Decimal
from enum import Enum
from typing import Optional


class EntryKind(str, Enum):
    """Kind of a money entry. Also used as the category type."""

    EXPENSE = "expense"
    INCOME = "income"

    @property
    def settled_status(self) -> str:
        """Status value meaning the money already moved."""
        return "paid" if self is EntryKind.EXPENSE else "received"

    @property
    def statuses(self) -> tuple[str, str]:
        return (self.settled_status, OPEN_STATUS)


OPEN_STATUS = "open"


class RecurrenceMode(str, Enum):
    """How a submitted entry repeats."""

    NONE = "none"
    INSTALLMENT = "installment"
    FIXED = "fixed"


class AssetType(str, Enum):
    """Investment asset types."""

    STOCK = "stock"
    REIT = "reit"
    FUND = "fund"
    FIXED_INCOME = "fixed_income"
    ETF = "etf"


# Asset types quoted on an exchange and refreshed by the quotation job
QUOTED_ASSET_TYPES = (AssetType.STOCK, AssetType.REIT, AssetType.ETF)


class TradeType(str, Enum):
    """Investment transaction types."""

    BUY = "buy"
    SELL = "sell"
    DIVIDEND = "dividend"


@dataclass(frozen=True)
class User:
    """Owner of all other records."""

    id: int
    name: str
    email: str
    created_at: datetime


@dataclass(frozen=True)
class Category:
    """Category domain entity."""

    id: int
    owner_id: int
    name: str
    category_type: EntryKind
    active: bool
    created_at: datetime
    usage_count: int = 0


@dataclass(frozen=True)
class CreditCard:
    """Credit card domain entity."""

    id: int
    owner_id: int
    name: str
    brand: str
    best_purchase_day: int
    active: bool
    created_at: datetime


@dataclass(frozen=True)
class EntryDraft:
    """A validated, not yet persisted expense or income row."""

    kind: EntryKind
    owner_id: int
    description: str
    amount: Decimal
    status: str
    category_id: int
    effective_date: date
    recurrence_mode: RecurrenceMode = RecurrenceMode.NONE
    installment_count: int = 1
    installment_index: int = 1
    group_id: Optional[str] = None
    subcategory: Optional[str] = None
    card_id: Optional[int] = None


@dataclass(frozen=True)
class Entry:
    """Persisted expense or income."""

    id: int
    kind: EntryKind
    owner_id: int
    description: str
    amount: Decimal
    status: str
    category_id: int
    category_name: str
    effective_date: date
    recurrence_mode: RecurrenceMode
    installment_count: int
    installment_index: int
    group_id: Optional[str]
    subcategory: Optional[str]
    card_id: Optional[int]
    created_at: datetime
    updated_at: datetime

    @property
    def is_open(self) -> bool:
        return self.status == OPEN_STATUS


@dataclass(frozen=True)
class InvestmentAsset:
    """Investment asset with its cached quote snapshot."""

    id: int
    owner_id: int
    name: str
    ticker: Optional[str]
    asset_type: AssetType
    sector: Optional[str]
    description: Optional[str]
    active: bool
    current_price: Optional[Decimal]
    last_quote_date: Optional[date]
    percent_change: Optional[Decimal]
    absolute_change: Optional[Decimal]
    created_at: datetime
    updated_at: datetime


@dataclass(frozen=True)
class InvestmentTransaction:
    """Buy, sell or dividend event on an asset."""

    id: int
    owner_id: int
    asset_id: int
    asset_name: str
    trade_date: date
    trade_type: TradeType
    quantity: Decimal
    unit_price: Decimal
    total_value: Decimal
    created_at: datetime


@dataclass(frozen=True)
class MonthlyTotals:
    """Sums of one kind of entry for one month."""

    settled: Decimal = Decimal("0")
    open: Decimal = Decimal("0")
    total: Decimal = Decimal("0")


@dataclass(frozen=True)
class CategoryTotal:
    """Sum and count of entries in one category."""

    category: str
    total: Decimal
    count: int


@dataclass(frozen=True)
class MonthlyBalance:
    """Income against expenses for one month."""

    income: MonthlyTotals
    expenses: MonthlyTotals

    @property
    def realized(self) -> Decimal:
        """Received income minus paid expenses."""
        return self.income.settled - self.expenses.settled

    @property
    def projected(self) -> Decimal:
        """All income minus all expenses, open rows included."""
        return self.income.total - self.expenses.total


@dataclass(frozen=True)
class CardGroup:
    """Expenses charged to one credit card, folded into a single line."""

    card_id: int
    card_name: str
    card_brand: str
    amount: Decimal
    count: int
    expenses: tuple[Entry, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class PortfolioPosition:
    """Position metrics for one asset, derived from its transactions."""

    asset_id: int
    name: str
    asset_type: AssetType
    sector: Optional[str]
    quantity_current: Decimal
    average_cost: Decimal
    net_invested: Decimal
    dividends_received: Decimal
    total_bought: Decimal
    total_sold: Decimal
    current_price: Optional[Decimal] = None

    @property
    def market_value(self) -> Optional[Decimal]:
        if self.current_price is None:
            return None
        return self.quantity_current * self.current_price


@dataclass(frozen=True)
class Quote:
    """Live quote returned by the provider."""

    ticker: str
    price: Decimal
    percent_change: Decimal
    absolute_change: Decimal
    fetched_at: datetime


@dataclass(frozen=True)
class QuotationRunResult:
    """Outcome of one quotation refresh run."""

    success: bool
    total: int = 0
    updated: int = 0
    failed: int = 0
    duration_ms: int = 0
    timestamp: Optional[datetime] = None
    message: Optional[str] = None
    skipped: bool = False
    reason: Optional[str] = None
    forced: bool = False


@dataclass(frozen=True)
class ScheduleCheck:
    """Whether the automatic quotation trigger may run now."""

    should_run: bool
    is_weekday: bool
    is_after_close: bool
    current_day: int
    current_hour: int
    reason: str


@dataclass(frozen=True)
class QuotationStatus:
    """Coverage of the cached quote snapshots."""

    total_assets: int
    with_quotes: int
    last_update_date: Optional[date]
    updated_today: int

    @property
    def coverage(self) -> float:
        if self.total_assets == 0:
            return 0.0
        return round(self.with_quotes / self.total_assets * 100, 1)
