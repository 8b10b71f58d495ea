"""Tests for recurrence expansion."""

import pytest
from datetime import date
from decimal import Decimal

from fincontrol.domain.entities import EntryDraft, EntryKind, RecurrenceMode
from fincontrol.domain.errors import ValidationError
from fincontrol.domain.recurrence import (
    expand_entry,
    new_group_id,
    strip_installment_suffix,
)
from fincontrol.utils.date_parser import add_months


def make_draft(**overrides) -> EntryDraft:
    values = dict(
        kind=EntryKind.EXPENSE,
        owner_id=1,
        description="Internet",
        amount=Decimal("89.90"),
        status="open",
        category_id=1,
        effective_date=date(2024, 1, 31),
    )
    values.update(overrides)
    return EntryDraft(**values)


def test_single_entry_is_not_grouped():
    """A non-recurring draft yields one row without a group."""
    rows = expand_entry(make_draft())

    assert len(rows) == 1
    assert rows[0].group_id is None
    assert rows[0].installment_index == 1
    assert rows[0].installment_count == 1
    assert rows[0].description == "Internet"


def test_installments_clamp_to_month_end():
    """Internet 89.90 in 3 installments from Jan 31 lands on each month's last day."""
    draft = make_draft(recurrence_mode=RecurrenceMode.INSTALLMENT, installment_count=3)

    rows = expand_entry(draft)

    assert [row.effective_date for row in rows] == [
        date(2024, 1, 31),
        date(2024, 2, 29),
        date(2024, 3, 31),
    ]
    assert [row.description for row in rows] == [
        "Internet (1/3)",
        "Internet (2/3)",
        "Internet (3/3)",
    ]
    assert [row.installment_index for row in rows] == [1, 2, 3]
    assert all(row.amount == Decimal("89.90") for row in rows)
    assert len({row.group_id for row in rows}) == 1
    assert rows[0].group_id is not None


def test_installments_carry_into_next_year():
    """Installments starting late in the year continue into the next one."""
    draft = make_draft(
        recurrence_mode=RecurrenceMode.INSTALLMENT,
        installment_count=12,
        effective_date=date(2024, 11, 10),
    )

    rows = expand_entry(draft)

    assert len(rows) == 12
    assert rows[1].effective_date == date(2024, 12, 10)
    assert rows[2].effective_date == date(2025, 1, 10)
    assert rows[-1].effective_date == date(2025, 10, 10)
    assert rows[-1].description == "Internet (12/12)"
    assert all(row.installment_count == 12 for row in rows)


def test_installments_require_more_than_one():
    """An installment batch of a single row is rejected."""
    draft = make_draft(recurrence_mode=RecurrenceMode.INSTALLMENT, installment_count=1)

    with pytest.raises(ValidationError, match="installment_count"):
        expand_entry(draft)


def test_fixed_monthly_runs_through_december():
    """A fixed entry from May yields one row per month through December."""
    draft = make_draft(
        description="Rent",
        recurrence_mode=RecurrenceMode.FIXED,
        effective_date=date(2024, 5, 31),
    )

    rows = expand_entry(draft, today=date(2024, 5, 2))

    assert len(rows) == 12 - 5 + 1
    assert [row.effective_date.month for row in rows] == list(range(5, 13))
    assert rows[1].effective_date == date(2024, 6, 30)
    assert rows[-1].effective_date == date(2024, 12, 31)
    assert all(row.description == "Rent" for row in rows)
    assert all(row.installment_index == 1 for row in rows)
    assert len({row.group_id for row in rows}) == 1


def test_fixed_monthly_uses_current_year():
    """Fixed rows are dated in the current year, whatever the base year."""
    draft = make_draft(
        recurrence_mode=RecurrenceMode.FIXED,
        effective_date=date(2023, 10, 15),
    )

    rows = expand_entry(draft, today=date(2024, 1, 20))

    assert [row.effective_date for row in rows] == [
        date(2024, 10, 15),
        date(2024, 11, 15),
        date(2024, 12, 15),
    ]


def test_group_id_generator_is_injectable():
    """Batches take their group ID from the supplied generator."""
    draft = make_draft(recurrence_mode=RecurrenceMode.INSTALLMENT, installment_count=2)

    rows = expand_entry(draft, make_group_id=lambda: "f" * 32)

    assert [row.group_id for row in rows] == ["f" * 32, "f" * 32]


def test_new_group_ids_are_distinct():
    """Generated group IDs are 32 hex characters and do not repeat."""
    ids = {new_group_id() for _ in range(100)}

    assert len(ids) == 100
    assert all(len(group_id) == 32 for group_id in ids)
    assert all(int(group_id, 16) >= 0 for group_id in ids)


def test_strip_installment_suffix():
    """Only a trailing ' (n/m)' suffix is removed."""
    assert strip_installment_suffix("Internet (2/3)") == "Internet"
    assert strip_installment_suffix("Internet (10/12)") == "Internet"
    assert strip_installment_suffix("Internet") == "Internet"
    assert strip_installment_suffix("Internet (a/b)") == "Internet (a/b)"
    assert strip_installment_suffix("(1/2) Internet") == "(1/2) Internet"


@pytest.mark.parametrize(
    "base,months,expected",
    [
        (date(2024, 1, 31), 1, date(2024, 2, 29)),
        (date(2023, 1, 31), 1, date(2023, 2, 28)),
        (date(2024, 8, 31), 1, date(2024, 9, 30)),
        (date(2024, 12, 15), 1, date(2025, 1, 15)),
    ],
)
def test_add_months_clamps_day(base, months, expected):
    """Adding months never overflows into the following month."""
    assert add_months(base, months) == expected
