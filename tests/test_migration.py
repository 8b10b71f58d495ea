"""Tests for the group_id migration script."""

import importlib.util
from datetime import date
from decimal import Decimal
from pathlib import Path

from fincontrol.domain.entities import EntryDraft, EntryKind, RecurrenceMode

MIGRATION_PATH = Path(__file__).parent.parent / "migrations" / "migrate_add_group_id.py"


def load_migration():
    spec = importlib.util.spec_from_file_location("migrate_add_group_id", MIGRATION_PATH)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


def _legacy(owner_id, category_id, description, mode, count, index, month):
    return EntryDraft(
        kind=EntryKind.EXPENSE,
        owner_id=owner_id,
        description=description,
        amount=Decimal("10"),
        status="open",
        category_id=category_id,
        effective_date=date(2024, month, 1),
        recurrence_mode=mode,
        installment_count=count,
        installment_index=index,
    )


def test_migration_groups_legacy_rows(temp_db, sample_user, sample_categories, capsys):
    """Legacy recurring rows get one group ID per batch; single rows stay ungrouped."""
    category_id = sample_categories["Utilities"]
    temp_db.create_entries(
        [
            _legacy(sample_user.id, category_id, "Phone (1/2)", RecurrenceMode.INSTALLMENT, 2, 1, 1),
            _legacy(sample_user.id, category_id, "Phone (2/2)", RecurrenceMode.INSTALLMENT, 2, 2, 2),
            _legacy(sample_user.id, category_id, "Rent", RecurrenceMode.FIXED, 1, 1, 1),
            _legacy(sample_user.id, category_id, "Rent", RecurrenceMode.FIXED, 1, 1, 2),
            _legacy(sample_user.id, category_id, "Coffee", RecurrenceMode.NONE, 1, 1, 1),
        ]
    )

    load_migration().migrate_database(database_path=temp_db.database_path)

    entries = {
        (e.description, e.effective_date.month): e
        for e in temp_db.list_entries(EntryKind.EXPENSE, sample_user.id)
    }
    phone = {entries[("Phone (1/2)", 1)].group_id, entries[("Phone (2/2)", 2)].group_id}
    rent = {entries[("Rent", 1)].group_id, entries[("Rent", 2)].group_id}
    assert len(phone) == 1 and None not in phone
    assert len(rent) == 1 and None not in rent
    assert phone != rent
    assert entries[("Coffee", 1)].group_id is None
    assert "Migration completed successfully!" in capsys.readouterr().out


def test_migration_is_repeatable(temp_db, sample_user, sample_categories):
    """Running the migration again keeps existing group IDs."""
    category_id = sample_categories["Utilities"]
    temp_db.create_entries(
        [
            _legacy(sample_user.id, category_id, "Phone (1/2)", RecurrenceMode.INSTALLMENT, 2, 1, 1),
            _legacy(sample_user.id, category_id, "Phone (2/2)", RecurrenceMode.INSTALLMENT, 2, 2, 2),
        ]
    )
    migration = load_migration()

    migration.migrate_database(database_path=temp_db.database_path)
    first = [e.group_id for e in temp_db.list_entries(EntryKind.EXPENSE, sample_user.id)]
    migration.migrate_database(database_path=temp_db.database_path)
    second = [e.group_id for e in temp_db.list_entries(EntryKind.EXPENSE, sample_user.id)]

    assert first == second
