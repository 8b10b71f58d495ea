"""Monthly aggregation domain service."""

from collections import defaultdict
from decimal import Decimal
from typing import Optional

from fincontrol.database.base import Database
from fincontrol.domain.entities import (
    CategoryTotal,
    Entry,
    EntryKind,
    MonthlyBalance,
    MonthlyTotals,
)
from fincontrol.domain.errors import ValidationError
from fincontrol.utils.date_parser import month_prefix

ZERO = Decimal("0")


class SummaryService:
    """Service for month totals, category breakdowns and balances.

    A row belongs to a month when its stored ``YYYY-MM-DD`` date text starts
    with ``YYYY-MM-`` (month zero padded, year four digits).
    """

    def __init__(self, db: Database):
        """Initialize summary service.

        Args:
            db: Database instance
        """
        self.db = db

    def _month_entries(
        self,
        kind: EntryKind,
        owner_id: int,
        month: int | str,
        year: int | str,
        status: Optional[str] = None,
    ) -> list[Entry]:
        try:
            prefix = month_prefix(month, year)
        except ValueError as e:
            raise ValidationError(str(e))
        return self.db.list_entries(kind, owner_id, status=status, date_prefix=prefix)

    def totals(self, kind: EntryKind, owner_id: int, month: int | str, year: int | str) -> MonthlyTotals:
        """Sum a month's entries by status.

        Args:
            kind: Expense or income
            owner_id: Owner user ID
            month: Month number (1-12)
            year: Four digit year

        Returns:
            MonthlyTotals with settled (paid or received), open and overall
            sums; all zero when the month has no rows
        """
        settled = ZERO
        open_total = ZERO
        for entry in self._month_entries(kind, owner_id, month, year):
            if entry.is_open:
                open_total += entry.amount
            else:
                settled += entry.amount
        return MonthlyTotals(settled=settled, open=open_total, total=settled + open_total)

    def by_category(
        self,
        kind: EntryKind,
        owner_id: int,
        month: int | str,
        year: int | str,
        status: Optional[str] = None,
    ) -> list[CategoryTotal]:
        """Sum a month's entries per category, largest total first.

        Args:
            kind: Expense or income
            owner_id: Owner user ID
            month: Month number (1-12)
            year: Four digit year
            status: Optional status filter

        Returns:
            List of CategoryTotal sorted by total descending, then name
        """
        if status is not None and status not in kind.statuses:
            raise ValidationError(f"status must be one of: {', '.join(kind.statuses)}")

        sums: dict[str, Decimal] = defaultdict(lambda: ZERO)
        counts: dict[str, int] = defaultdict(int)
        for entry in self._month_entries(kind, owner_id, month, year, status=status):
            sums[entry.category_name] += entry.amount
            counts[entry.category_name] += 1

        results = [
            CategoryTotal(category=name, total=total, count=counts[name])
            for name, total in sums.items()
        ]
        results.sort(key=lambda item: (-item.total, item.category))
        return results

    def balance(self, owner_id: int, month: int | str, year: int | str) -> MonthlyBalance:
        """Combine a month's income and expense totals."""
        return MonthlyBalance(
            income=self.totals(EntryKind.INCOME, owner_id, month, year),
            expenses=self.totals(EntryKind.EXPENSE, owner_id, month, year),
        )
