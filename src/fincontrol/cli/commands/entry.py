"""Expense and income commands.

Both groups are built from the same factory; only the status vocabulary
and the credit card options differ between them.
"""

from datetime import date
from typing import Any, Callable

import click
from fincontrol.cli.error_handling import handle_domain_error
from fincontrol.cli.user_resolution import require_owner
from fincontrol.domain.category import CategoryService
from fincontrol.domain.credit_card import CreditCardService
from fincontrol.domain.entities import CardGroup, Entry, EntryKind, OPEN_STATUS, RecurrenceMode
from fincontrol.domain.entry import EntryService
from fincontrol.domain.errors import NotFoundError, card_not_found
from fincontrol.utils.amount_parser import parse_amount
from fincontrol.utils.date_parser import format_entry_date, parse_date

RECURRENCE_CHOICE = click.Choice([mode.value for mode in RecurrenceMode], case_sensitive=False)


def format_entry(entry: Entry) -> str:
    """Format one entry as a single listing line."""
    line = (
        f"ID: {entry.id:4d} | {format_entry_date(entry.effective_date)} | {entry.description:30s} | "
        f"{entry.amount:>12,.2f} | {entry.status:8s} | {entry.category_name}"
    )
    if entry.subcategory:
        line += f" / {entry.subcategory}"
    return line


def format_card_group(group: CardGroup) -> str:
    """Format a folded credit card line."""
    return (
        f"Card: {group.card_name} ({group.card_brand}) | {group.count} expense"
        f"{'s' if group.count != 1 else ''} | {group.amount:>12,.2f}"
    )


def _with_options(func: Callable, options: list[Callable]) -> Callable:
    for option in reversed(options):
        func = option(func)
    return func


def _resolve_card(ctx: click.Context, owner_id: int, card: str) -> int:
    """Resolve a credit card name or ID for the owner."""
    service = CreditCardService(ctx.obj["db"])
    text = card.strip()
    if text.isdigit():
        found = service.get_credit_card(owner_id, int(text))
    else:
        found = next((c for c in service.list_credit_cards(owner_id) if c.name == text), None)
    if found is None:
        raise NotFoundError(card_not_found(text))
    return found.id


def _parse_common_changes(
    ctx: click.Context,
    kind: EntryKind,
    owner_id: int,
    amount: str | None,
    status: str | None,
    category: str | None,
    when: str | None,
    subcategory: str | None,
) -> dict[str, Any]:
    changes: dict[str, Any] = {}
    if amount is not None:
        changes["amount"] = parse_amount(amount)
    if status is not None:
        changes["status"] = status.lower()
    if category is not None:
        changes["category_id"] = (
            CategoryService(ctx.obj["db"]).resolve_category(owner_id, category, kind).id
        )
    if when is not None:
        changes["effective_date"] = parse_date(when)
    if subcategory is not None:
        changes["subcategory"] = subcategory
    return changes


def build_entry_group(kind: EntryKind) -> click.Group:
    """Build the command group for expenses or incomes."""
    label = kind.value
    is_expense = kind is EntryKind.EXPENSE
    status_choice = click.Choice(list(kind.statuses), case_sensitive=False)

    group = click.Group(name=label, help=f"Manage {label}s.")

    # add
    def add_entry(
        ctx,
        description: str,
        amount: str,
        category: str,
        when: str,
        status: str,
        subcategory: str | None,
        recurrence: str,
        installments: int | None,
        card: str | None = None,
    ):
        owner_id = require_owner(ctx)
        service = EntryService(ctx.obj["db"])

        try:
            data = _parse_common_changes(
                ctx, kind, owner_id, amount, status, category, when, subcategory
            )
            data["description"] = description
            data["recurrence_mode"] = recurrence.lower()
            if installments is not None:
                data["installment_count"] = installments
            if card is not None:
                data["card_id"] = _resolve_card(ctx, owner_id, card)
            entries = service.create_entry(kind, owner_id, data)
        except ValueError as e:
            handle_domain_error(ctx, e)

        if len(entries) == 1:
            click.echo(f"Created {label} {entries[0].id}")
        else:
            click.echo(f"Created {len(entries)} {label}s (group {entries[0].group_id})")
        for entry in entries:
            click.echo(f"  {format_entry(entry)}")

    add_options = [
        click.argument("description"),
        click.argument("amount"),
        click.option("--category", required=True, help="Category name or ID"),
        click.option(
            "--date",
            "when",
            default="today",
            show_default=True,
            help="Date (YYYY-MM-DD or relative like 'today', 'next month')",
        ),
        click.option(
            "--status",
            type=status_choice,
            default=OPEN_STATUS,
            show_default=True,
            help="Payment status",
        ),
        click.option("--subcategory", help="Optional subcategory"),
        click.option(
            "--recurrence",
            type=RECURRENCE_CHOICE,
            default=RecurrenceMode.NONE.value,
            show_default=True,
            help="none, installment (split over N months) or fixed (every month until December)",
        ),
        click.option("--installments", type=int, help="Number of installments for --recurrence installment"),
    ]
    if is_expense:
        add_options.append(click.option("--card", help="Credit card name or ID"))
    add_options.append(click.pass_context)
    add_entry.__doc__ = f"""Add a {label}.

    Installment and fixed recurrences create every row of the batch at once.

    Examples:
        fincontrol {label} add "Internet" 89.90 --category Utilities --date 2024-01-31 --recurrence installment --installments 3
        fincontrol {label} add "Rent" 1500 --category Housing --recurrence fixed
    """
    group.command("add")(_with_options(add_entry, add_options))

    # list
    def list_entries(
        ctx,
        month: int | None,
        year: int | None,
        status: str | None,
        category: str | None,
        by_card: bool = False,
    ):
        owner_id = require_owner(ctx)
        service = EntryService(ctx.obj["db"])

        try:
            category_id = None
            if category is not None:
                category_id = CategoryService(ctx.obj["db"]).resolve_category(owner_id, category, kind).id
            if month is not None and year is None:
                year = date.today().year
            filters = dict(
                status=status.lower() if status else None,
                category_id=category_id,
                month=month,
                year=year,
            )
            if by_card:
                rows = service.list_expenses_grouped_by_card(owner_id, **filters)
            else:
                rows = service.list_entries(kind, owner_id, **filters)
        except ValueError as e:
            handle_domain_error(ctx, e)

        if not rows:
            click.echo(f"No {label}s found.")
            return

        click.echo(f"\n{label.capitalize()}s:")
        click.echo("-" * 100)
        for row in rows:
            if isinstance(row, CardGroup):
                click.echo(format_card_group(row))
            else:
                click.echo(format_entry(row))

    list_options = [
        click.option("--month", type=click.IntRange(1, 12), help="Month (1-12)"),
        click.option("--year", type=int, help="Year (defaults to the current year when --month is given)"),
        click.option("--status", type=status_choice, help="Filter by status"),
        click.option("--category", help="Filter by category name or ID"),
    ]
    if is_expense:
        list_options.append(
            click.option("--by-card", is_flag=True, help="Fold credit card expenses into one line per card")
        )
    list_options.append(click.pass_context)
    list_entries.__doc__ = f"""List {label}s, newest first."""
    group.command("list")(_with_options(list_entries, list_options))

    # show
    @group.command("show")
    @click.argument("entry_id", type=int)
    @click.pass_context
    def show_entry(ctx, entry_id: int):
        """Show an entry and the other rows of its recurring group."""
        owner_id = require_owner(ctx)
        service = EntryService(ctx.obj["db"])

        entry = service.get_entry(kind, owner_id, entry_id)
        if entry is None:
            click.echo(f"Error: {label.capitalize()} {entry_id} not found", err=True)
            ctx.exit(1)

        click.echo(format_entry(entry))
        click.echo(f"  Recurrence: {entry.recurrence_mode.value}")
        if entry.recurrence_mode is not RecurrenceMode.NONE:
            click.echo(f"  Installment: {entry.installment_index}/{entry.installment_count}")
            click.echo(f"  Group: {entry.group_id or '(legacy, matched by description)'}")
        if entry.card_id is not None:
            click.echo(f"  Credit card ID: {entry.card_id}")

    # group
    @group.command("group")
    @click.argument("entry_id", type=int)
    @click.pass_context
    def show_group(ctx, entry_id: int):
        """List every row of the recurring group an entry belongs to."""
        owner_id = require_owner(ctx)
        service = EntryService(ctx.obj["db"])

        entry = service.get_entry(kind, owner_id, entry_id)
        if entry is None:
            click.echo(f"Error: {label.capitalize()} {entry_id} not found", err=True)
            ctx.exit(1)

        rows = service.group_for_entry(entry)
        if not rows:
            click.echo(f"{label.capitalize()} {entry_id} is not part of a recurring group.")
            return
        for row in rows:
            click.echo(format_entry(row))
        click.echo(f"{len(rows)} row{'s' if len(rows) != 1 else ''}")

    # update
    def update_entry(
        ctx,
        entry_id: int,
        description: str | None,
        amount: str | None,
        status: str | None,
        category: str | None,
        when: str | None,
        subcategory: str | None,
        update_all: bool,
        card: str | None = None,
        clear_card: bool = False,
    ):
        owner_id = require_owner(ctx)
        service = EntryService(ctx.obj["db"])

        try:
            changes = _parse_common_changes(
                ctx, kind, owner_id, amount, status, category, when, subcategory
            )
            if description is not None:
                changes["description"] = description
            if card is not None:
                changes["card_id"] = _resolve_card(ctx, owner_id, card)
            elif clear_card:
                changes["card_id"] = None
            if not changes:
                click.echo("Error: Nothing to update.", err=True)
                ctx.exit(1)
            rows, updated = service.update_entry(
                kind, owner_id, entry_id, changes, update_all=update_all
            )
        except ValueError as e:
            handle_domain_error(ctx, e)

        click.echo(f"Updated {updated} {label}{'s' if updated != 1 else ''}")
        for row in rows:
            click.echo(f"  {format_entry(row)}")

    update_options = [
        click.argument("entry_id", type=int),
        click.option("--description", help="New description (single row only)"),
        click.option("--amount", help="New amount"),
        click.option("--status", type=status_choice, help="New status"),
        click.option("--category", help="New category name or ID"),
        click.option("--date", "when", help="New date"),
        click.option("--subcategory", help="New subcategory"),
        click.option(
            "--all",
            "update_all",
            is_flag=True,
            help="Apply to every open row of the entry's recurring group",
        ),
    ]
    if is_expense:
        update_options.append(click.option("--card", help="New credit card name or ID"))
        update_options.append(click.option("--clear-card", is_flag=True, help="Remove the credit card"))
    update_options.append(click.pass_context)
    update_entry.__doc__ = f"""Update a {label}.

    With --all the change is applied to every open row of the recurring
    group; descriptions are never changed in bulk.
    """
    group.command("update")(_with_options(update_entry, update_options))

    # delete
    @group.command("delete")
    @click.argument("entry_id", type=int)
    @click.option("--yes", is_flag=True, help="Do not ask for confirmation")
    @click.pass_context
    def delete_entry(ctx, entry_id: int, yes: bool):
        """Delete a single row."""
        owner_id = require_owner(ctx)
        service = EntryService(ctx.obj["db"])

        entry = service.get_entry(kind, owner_id, entry_id)
        if entry is None:
            click.echo(f"Error: {label.capitalize()} {entry_id} not found", err=True)
            ctx.exit(1)

        if not yes and not click.confirm(f"Delete {label} '{entry.description}' (ID: {entry_id})?"):
            click.echo("Deletion cancelled.")
            return

        try:
            service.delete_entry(kind, owner_id, entry_id)
            click.echo(f"Deleted {label} '{entry.description}'")
        except ValueError as e:
            handle_domain_error(ctx, e)

    return group


def register_commands(cli):
    """Register expense and income commands with main CLI."""
    cli.add_command(build_entry_group(EntryKind.EXPENSE), name="expense")
    cli.add_command(build_entry_group(EntryKind.INCOME), name="income")
