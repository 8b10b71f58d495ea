"""Recurrence expansion: one submitted entry into a batch of rows.

A submission with ``recurrence_mode`` set produces every row of its batch
up front:

- ``none``: a single row.
- ``installment``: ``installment_count`` monthly rows, descriptions
  suffixed with ``" (i/n)"``.
- ``fixed``: one row per month from the base month through December of
  the current year, all with ``installment_index`` 1.

Rows of a recurring batch share a freshly generated ``group_id``. Dates
move by calendar month and clamp to the last day of shorter months.
"""

import re
import uuid
from dataclasses import replace
from datetime import date
from typing import Callable, Optional

from fincontrol.domain.entities import EntryDraft, RecurrenceMode
from fincontrol.domain.errors import ValidationError
from fincontrol.utils.date_parser import add_months, move_to_month

INSTALLMENT_SUFFIX = re.compile(r" \(\d+/\d+\)$")


def new_group_id() -> str:
    """Generate a random, collision-free batch identifier."""
    return uuid.uuid4().hex


def strip_installment_suffix(description: str) -> str:
    """Return the base description without a trailing ``" (n/m)"``."""
    return INSTALLMENT_SUFFIX.sub("", description)


def installment_description(description: str, index: int, count: int) -> str:
    return f"{description} ({index}/{count})"


def expand_installments(draft: EntryDraft, group_id: str) -> list[EntryDraft]:
    """Expand an installment draft into ``installment_count`` rows."""
    count = draft.installment_count
    if count < 2:
        raise ValidationError("installment_count must be greater than 1 for installment entries")

    rows = []
    for index in range(1, count + 1):
        rows.append(
            replace(
                draft,
                description=installment_description(draft.description, index, count),
                effective_date=add_months(draft.effective_date, index - 1),
                installment_index=index,
                group_id=group_id,
            )
        )
    return rows


def expand_fixed_monthly(draft: EntryDraft, group_id: str, today: date) -> list[EntryDraft]:
    """Expand a fixed-monthly draft through December of ``today``'s year.

    Rows are dated in the current year starting at the base month, using
    the base day clamped to each month's length.
    """
    base = draft.effective_date

    rows = []
    for month in range(base.month, 13):
        rows.append(
            replace(
                draft,
                effective_date=move_to_month(base, today.year, month),
                installment_count=1,
                installment_index=1,
                group_id=group_id,
            )
        )
    return rows


def expand_entry(
    draft: EntryDraft,
    today: Optional[date] = None,
    make_group_id: Callable[[], str] = new_group_id,
) -> list[EntryDraft]:
    """Expand one submitted draft into the rows to persist.

    Args:
        draft: Validated draft carrying the recurrence settings
        today: Current date; fixed-monthly batches end in its year
        make_group_id: Generator for batch identifiers

    Returns:
        Ordered list of drafts; a single element for ``none``

    Raises:
        ValidationError: If an installment draft has fewer than 2 installments
    """
    mode = draft.recurrence_mode

    if mode is RecurrenceMode.NONE:
        return [replace(draft, installment_count=1, installment_index=1, group_id=None)]

    if mode is RecurrenceMode.INSTALLMENT:
        return expand_installments(draft, make_group_id())

    if mode is RecurrenceMode.FIXED:
        return expand_fixed_monthly(draft, make_group_id(), today or date.today())

    raise ValidationError(f"Unsupported recurrence mode '{mode}'")
