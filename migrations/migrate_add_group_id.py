#!/usr/bin/env python3
"""Migration script to add group_id columns to expenses and incomes.

This migration adds a group_id column to the expenses and incomes tables:
- group_id (VARCHAR(32), nullable, indexed)

Rows written before the column existed are then grouped the way the
application matched them by description: recurring rows (installment or
fixed) of one owner sharing the same base description (without the
" (n/m)" suffix), recurrence mode and installment count receive one new
group ID. Rows that already carry a group ID are left untouched, so the
script can be run again safely.

Usage:
    python migrations/migrate_add_group_id.py [--db-path PATH] [--no-backfill]
"""

import sys
from collections import defaultdict
from pathlib import Path

# Add src to path so we can import fincontrol modules
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from sqlalchemy import text, inspect
from fincontrol.database.factories import create_sqlite_database
from fincontrol.database.models import Expense, Income
from fincontrol.domain.recurrence import new_group_id, strip_installment_suffix

TABLES = (("expenses", Expense), ("incomes", Income))


def column_exists(engine, table_name: str, column_name: str) -> bool:
    """Check if a column exists in a table.

    Args:
        engine: SQLAlchemy engine
        table_name: Name of the table
        column_name: Name of the column

    Returns:
        True if column exists, False otherwise
    """
    inspector = inspect(engine)
    columns = [col["name"] for col in inspector.get_columns(table_name)]
    return column_name in columns


def backfill_groups(session, model) -> int:
    """Assign group IDs to legacy recurring rows of one table.

    Returns:
        Number of groups created
    """
    rows = (
        session.query(model)
        .filter(model.group_id.is_(None), model.recurrence_mode != "none")
        .order_by(model.id)
        .all()
    )

    groups = defaultdict(list)
    for row in rows:
        key = (
            row.owner_id,
            strip_installment_suffix(row.description),
            row.recurrence_mode,
            row.installment_count,
        )
        groups[key].append(row)

    for members in groups.values():
        group_id = new_group_id()
        for row in members:
            row.group_id = group_id

    return len(groups)


def migrate_database(database_path: str | None = None, backfill: bool = True) -> None:
    """Migrate database to add group_id columns and group legacy rows.

    Args:
        database_path: Path to database file. If None, uses default location.
        backfill: Whether to assign group IDs to legacy recurring rows

    Raises:
        Exception: If migration fails
    """
    # Create database instance
    db = create_sqlite_database(database_path=database_path)
    db.connect()

    try:
        # Get engine from sessionmaker by creating a session and accessing its bind
        session = db.session_factory()
        try:
            engine = session.bind
            if engine is None:
                raise Exception("Could not get database engine from session")
        finally:
            session.close()

        inspector = inspect(engine)
        existing_tables = inspector.get_table_names()

        for table_name, _ in TABLES:
            if table_name not in existing_tables:
                raise Exception(
                    f"Table '{table_name}' does not exist. Please initialize the database schema first."
                )

            if column_exists(engine, table_name, "group_id"):
                print(f"Column group_id already exists in {table_name}")
                continue

            with engine.begin() as conn:
                conn.execute(text(f"ALTER TABLE {table_name} ADD COLUMN group_id VARCHAR(32)"))
                conn.execute(
                    text(f"CREATE INDEX IF NOT EXISTS ix_{table_name}_group_id ON {table_name} (group_id)")
                )
                print(f"  Added column: {table_name}.group_id")

        if not backfill:
            print("Skipping backfill of legacy groups")
            print("Migration completed successfully!")
            return

        print("Grouping legacy recurring rows...")
        session = db.session_factory()
        try:
            for table_name, model in TABLES:
                created = backfill_groups(session, model)
                print(f"  {table_name}: {created} group(s) assigned")
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

        print("Migration completed successfully!")

    except Exception as e:
        print(f"Migration failed: {e}")
        raise
    finally:
        db.disconnect()


def main():
    """Main entry point for migration script."""
    import argparse

    parser = argparse.ArgumentParser(
        description="Migrate database to add group_id columns to expenses and incomes"
    )
    parser.add_argument(
        "--db-path",
        type=str,
        help="Path to database file (overrides FINCONTROL_DB_PATH environment variable)",
    )
    parser.add_argument(
        "--no-backfill",
        action="store_true",
        help="Only add the columns; do not group legacy rows",
    )
    args = parser.parse_args()

    try:
        migrate_database(database_path=args.db_path, backfill=not args.no_backfill)
        return 0
    except Exception as e:
        print(f"\nMigration failed: {e}", file=sys.stderr)
        import traceback
        traceback.print_exc()
        return 1


if __name__ == "__main__":
    sys.exit(main())
