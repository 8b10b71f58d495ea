"""Expense and income domain service.

Expenses and incomes share one service parameterized by ``EntryKind``.
Creating an entry runs validation, expands the recurrence into its batch
of rows and writes the batch in one transaction. Rows of a batch can be
read back and updated together, either through their shared ``group_id``
or, for rows written before batches carried one, through their base
description.
"""

import logging
from datetime import date
from decimal import Decimal
from typing import Any, Callable, Optional

from fincontrol.database.base import Database
from fincontrol.domain.entities import (
    CardGroup,
    Entry,
    EntryDraft,
    EntryKind,
    OPEN_STATUS,
    RecurrenceMode,
)
from fincontrol.domain.errors import (
    NotFoundError,
    ValidationError,
    card_not_found,
    category_not_found,
    entry_not_found,
)
from fincontrol.domain.recurrence import expand_entry, new_group_id, strip_installment_suffix
from fincontrol.domain.validation import validate_entry
from fincontrol.utils.date_parser import month_prefix

logger = logging.getLogger(__name__)

# Fields a bulk group update never touches
GROUP_PROTECTED_FIELDS = frozenset({"id", "description"})

# Fields that describe a row's place in its batch; they cannot change in bulk
GROUP_STRUCTURE_FIELDS = frozenset({"installment_index", "installment_count", "recurrence_mode"})


class EntryService:
    """Service for managing expenses and incomes."""

    def __init__(
        self,
        db: Database,
        today: Callable[[], date] = date.today,
        make_group_id: Callable[[], str] = new_group_id,
    ):
        """Initialize entry service.

        Args:
            db: Database instance
            today: Clock used to end fixed-monthly batches
            make_group_id: Generator for batch identifiers
        """
        self.db = db
        self._today = today
        self._make_group_id = make_group_id

    def _require(self, kind: EntryKind, owner_id: int, entry_id: int) -> Entry:
        entry = self.db.get_entry(kind, owner_id, entry_id)
        if entry is None:
            raise NotFoundError(entry_not_found(kind.value, entry_id))
        return entry

    def _check_references(self, kind: EntryKind, owner_id: int, data: dict[str, Any]) -> None:
        """Check that referenced category and card belong to the owner."""
        if "category_id" in data:
            category = self.db.get_category(owner_id, data["category_id"])
            if category is None:
                raise NotFoundError(category_not_found(data["category_id"]))
            if category.category_type is not kind:
                raise ValidationError(
                    f"Category '{category.name}' is a {category.category_type.value} category"
                )
        if data.get("card_id") is not None:
            if self.db.get_credit_card(owner_id, data["card_id"]) is None:
                raise NotFoundError(card_not_found(data["card_id"]))

    def create_entry(self, kind: EntryKind, owner_id: int, data: dict[str, Any]) -> list[Entry]:
        """Create an entry, expanding its recurrence into a batch.

        Args:
            kind: Expense or income
            owner_id: Owner user ID
            data: Field map with description, amount, status, category_id,
                effective_date and optionally subcategory, recurrence_mode,
                installment_count and card_id

        Returns:
            The persisted rows in batch order (one row when not recurring)

        Raises:
            ValidationError: If the payload is invalid
            NotFoundError: If the category or card does not exist
            BatchWriteError: If the batch could not be written
        """
        if "installment_index" in data:
            raise ValidationError("installment_index is assigned automatically")
        fields = validate_entry(kind, data)
        self._check_references(kind, owner_id, fields)

        draft = EntryDraft(
            kind=kind,
            owner_id=owner_id,
            description=fields["description"],
            amount=fields["amount"],
            status=fields["status"],
            category_id=fields["category_id"],
            effective_date=fields["effective_date"],
            recurrence_mode=fields.get("recurrence_mode", RecurrenceMode.NONE),
            installment_count=fields.get("installment_count", 1),
            subcategory=fields.get("subcategory"),
            card_id=fields.get("card_id"),
        )
        rows = expand_entry(draft, today=self._today(), make_group_id=self._make_group_id)
        entries = self.db.create_entries(rows)
        logger.info(
            "Created %d %s row(s) for owner %s (recurrence=%s)",
            len(entries),
            kind.value,
            owner_id,
            draft.recurrence_mode.value,
        )
        return entries

    def get_entry(self, kind: EntryKind, owner_id: int, entry_id: int) -> Optional[Entry]:
        """Get entry by ID."""
        return self.db.get_entry(kind, owner_id, entry_id)

    def list_entries(
        self,
        kind: EntryKind,
        owner_id: int,
        status: Optional[str] = None,
        category_id: Optional[int] = None,
        month: Optional[int] = None,
        year: Optional[int] = None,
    ) -> list[Entry]:
        """List entries, newest first.

        Args:
            kind: Expense or income
            owner_id: Owner user ID
            status: Optional status filter
            category_id: Optional category filter
            month: Optional month (1-12); requires ``year``
            year: Optional year; requires ``month``

        Raises:
            ValidationError: If only one of month and year is given
        """
        if status is not None and status not in kind.statuses:
            raise ValidationError(f"status must be '{kind.settled_status}' or '{OPEN_STATUS}'")
        date_prefix = self._month_prefix(month, year)
        return self.db.list_entries(
            kind, owner_id, status=status, category_id=category_id, date_prefix=date_prefix
        )

    @staticmethod
    def _month_prefix(month: Optional[int], year: Optional[int]) -> Optional[str]:
        if month is None and year is None:
            return None
        if month is None or year is None:
            raise ValidationError("month and year must be given together")
        try:
            return month_prefix(month, year)
        except ValueError as e:
            raise ValidationError(str(e))

    def update_entry(
        self,
        kind: EntryKind,
        owner_id: int,
        entry_id: int,
        changes: dict[str, Any],
        update_all: bool = False,
    ) -> tuple[list[Entry], int]:
        """Update an entry, or every open row of its recurring group.

        Args:
            kind: Expense or income
            owner_id: Owner user ID
            entry_id: Entry to update
            changes: Partial field map
            update_all: Apply the change to every open row of the entry's
                group instead of the single row. Descriptions are never
                changed in bulk.

        Returns:
            Tuple of (affected group or the single updated row, rows changed)

        Raises:
            NotFoundError: If the entry does not exist
            ValidationError: If a changed field is invalid
        """
        entry = self._require(kind, owner_id, entry_id)

        if update_all and entry.recurrence_mode is not RecurrenceMode.NONE:
            updated = self.update_group(
                kind,
                owner_id,
                changes,
                recurrence_mode=entry.recurrence_mode,
                group_id=entry.group_id,
                description=entry.description,
                only_open=True,
            )
            logger.info(
                "Updated %d row(s) in the group of %s %s", updated, kind.value, entry_id
            )
            return self.group_for_entry(entry), updated

        fields = validate_entry(kind, changes, partial=True)
        if not fields:
            return [entry], 0
        count = fields.get("installment_count", entry.installment_count)
        index = fields.get("installment_index", entry.installment_index)
        if index > count:
            raise ValidationError("installment_index cannot exceed installment_count")
        mode = fields.get("recurrence_mode", entry.recurrence_mode)
        if mode is not entry.recurrence_mode and (
            entry.group_id is not None or entry.recurrence_mode is not RecurrenceMode.NONE
        ):
            raise ValidationError("Cannot change the recurrence mode of a recurring entry")
        self._check_references(kind, owner_id, fields)

        self.db.update_entry(kind, owner_id, entry_id, fields)
        return [self._require(kind, owner_id, entry_id)], 1

    def delete_entry(self, kind: EntryKind, owner_id: int, entry_id: int) -> None:
        """Delete a single entry.

        Raises:
            NotFoundError: If the entry does not exist
        """
        self._require(kind, owner_id, entry_id)
        self.db.delete_entry(kind, owner_id, entry_id)

    def find_group_by_id(self, kind: EntryKind, owner_id: int, group_id: str) -> list[Entry]:
        """Return every row of a batch, ordered by installment index then date."""
        return self.db.list_entries_by_group_id(kind, owner_id, group_id)

    def find_group_by_description(
        self,
        kind: EntryKind,
        owner_id: int,
        description: str,
        recurrence_mode: RecurrenceMode | str,
    ) -> list[Entry]:
        """Return the rows of a legacy batch by base description.

        The ``" (n/m)"`` suffix is stripped from ``description`` and rows
        whose description starts with the remaining text and that share the
        recurrence mode are returned. Mode ``none`` has no group.
        """
        mode = RecurrenceMode(recurrence_mode)
        if mode is RecurrenceMode.NONE:
            return []
        base = strip_installment_suffix(description)
        return self.db.list_entries_by_description(kind, owner_id, base, mode)

    def group_for_entry(self, entry: Entry) -> list[Entry]:
        """Return the batch an entry belongs to."""
        if entry.group_id is not None:
            return self.find_group_by_id(entry.kind, entry.owner_id, entry.group_id)
        return self.find_group_by_description(
            entry.kind, entry.owner_id, entry.description, entry.recurrence_mode
        )

    def update_group(
        self,
        kind: EntryKind,
        owner_id: int,
        changes: dict[str, Any],
        recurrence_mode: RecurrenceMode | str,
        group_id: Optional[str] = None,
        description: Optional[str] = None,
        only_open: bool = True,
    ) -> int:
        """Apply a partial update to every row of a batch.

        The batch is matched by ``group_id`` when given, otherwise by base
        description and recurrence mode. ``id`` and ``description`` are
        dropped from ``changes``.

        Returns:
            Number of rows changed

        Raises:
            ValidationError: If a changed field is invalid, or if ``changes``
                touches the recurrence mode or installment numbering
        """
        mode = RecurrenceMode(recurrence_mode)
        structural = sorted(GROUP_STRUCTURE_FIELDS.intersection(changes))
        if structural:
            raise ValidationError(
                f"Cannot change {', '.join(structural)} across a recurring group"
            )
        fields = {k: v for k, v in changes.items() if k not in GROUP_PROTECTED_FIELDS}
        data = validate_entry(kind, fields, partial=True)
        if not data:
            return 0
        self._check_references(kind, owner_id, data)
        status = OPEN_STATUS if only_open else None

        if group_id is not None:
            return self.db.update_entries_in_group(
                kind, owner_id, data, group_id=group_id, status=status
            )

        if mode is RecurrenceMode.NONE or description is None:
            return 0
        return self.db.update_entries_in_group(
            kind,
            owner_id,
            data,
            base_description=strip_installment_suffix(description),
            recurrence_mode=mode,
            status=status,
        )

    def list_expenses_grouped_by_card(
        self,
        owner_id: int,
        status: Optional[str] = None,
        category_id: Optional[int] = None,
        month: Optional[int] = None,
        year: Optional[int] = None,
    ) -> list[Entry | CardGroup]:
        """List expenses with credit card charges folded into one line per card.

        Expenses without a card come first, newest first; the card groups
        follow in the order their most recent charge appears.
        """
        expenses = self.list_entries(
            EntryKind.EXPENSE,
            owner_id,
            status=status,
            category_id=category_id,
            month=month,
            year=year,
        )
        cards = {card.id: card for card in self.db.list_credit_cards(owner_id)}

        plain: list[Entry | CardGroup] = []
        charged: dict[int, list[Entry]] = {}
        for expense in expenses:
            if expense.card_id is not None and expense.card_id in cards:
                charged.setdefault(expense.card_id, []).append(expense)
            else:
                plain.append(expense)

        for card_id, card_expenses in charged.items():
            card = cards[card_id]
            plain.append(
                CardGroup(
                    card_id=card_id,
                    card_name=card.name,
                    card_brand=card.brand,
                    amount=sum((e.amount for e in card_expenses), Decimal("0")),
                    count=len(card_expenses),
                    expenses=tuple(card_expenses),
                )
            )
        return plain
