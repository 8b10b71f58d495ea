"""Monthly summary command."""

from datetime import date

import click
from fincontrol.cli.error_handling import handle_domain_error
from fincontrol.cli.user_resolution import require_owner
from fincontrol.domain.entities import EntryKind, MonthlyTotals
from fincontrol.domain.summary import SummaryService


def _print_totals(title: str, settled_label: str, totals: MonthlyTotals) -> None:
    click.echo(f"\n{title}:")
    click.echo(f"  {settled_label:10s} {totals.settled:>14,.2f}")
    click.echo(f"  {'Open':10s} {totals.open:>14,.2f}")
    click.echo(f"  {'Total':10s} {totals.total:>14,.2f}")


@click.command("summary")
@click.option("--month", type=click.IntRange(1, 12), help="Month (defaults to the current month)")
@click.option("--year", type=int, help="Year (defaults to the current year)")
@click.option(
    "--by-category",
    "breakdown",
    type=click.Choice([kind.value for kind in EntryKind], case_sensitive=False),
    help="Also break down this entry type by category",
)
@click.option("--status", help="Only count this status in the category breakdown")
@click.pass_context
def summary(ctx, month: int | None, year: int | None, breakdown: str | None, status: str | None):
    """Show income, expense totals and balance for a month.

    Examples:
        fincontrol summary
        fincontrol summary --month 2 --year 2024 --by-category expense
    """
    owner_id = require_owner(ctx)
    service = SummaryService(ctx.obj["db"])

    today = date.today()
    month = month or today.month
    year = year or today.year

    try:
        balance = service.balance(owner_id, month, year)
        categories = []
        if breakdown:
            categories = service.by_category(
                EntryKind(breakdown.lower()), owner_id, month, year, status=status
            )
    except ValueError as e:
        handle_domain_error(ctx, e)

    click.echo(f"Summary for {year:04d}-{month:02d}")
    click.echo("=" * 40)
    _print_totals("Income", "Received", balance.income)
    _print_totals("Expenses", "Paid", balance.expenses)
    click.echo("\nBalance:")
    click.echo(f"  {'Realized':10s} {balance.realized:>14,.2f}")
    click.echo(f"  {'Projected':10s} {balance.projected:>14,.2f}")

    if breakdown:
        click.echo(f"\n{breakdown.capitalize()} by category:")
        if not categories:
            click.echo("  No entries found.")
        for item in categories:
            click.echo(f"  {item.category:25s} {item.total:>14,.2f}  ({item.count})")


def register_commands(cli):
    """Register summary command with main CLI."""
    cli.add_command(summary)
