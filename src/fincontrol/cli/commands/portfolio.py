"""Portfolio summary command."""

from decimal import Decimal

import click
from fincontrol.cli.user_resolution import require_owner
from fincontrol.domain.portfolio import PortfolioService


@click.command("portfolio")
@click.pass_context
def portfolio(ctx):
    """Show position metrics for every active asset."""
    owner_id = require_owner(ctx)
    service = PortfolioService(ctx.obj["db"])

    positions = service.summary(owner_id)
    if not positions:
        click.echo("No active assets found.")
        return

    click.echo(
        f"\n{'Asset':25s} {'Quantity':>14s} {'Avg cost':>12s} {'Invested':>14s} "
        f"{'Dividends':>12s} {'Market value':>14s}"
    )
    click.echo("-" * 96)
    total_invested = Decimal("0")
    total_dividends = Decimal("0")
    for position in positions:
        market_value = position.market_value
        market = f"{market_value:,.2f}" if market_value is not None else "-"
        click.echo(
            f"{position.name:25s} {position.quantity_current:>14,.6f} {position.average_cost:>12,.2f} "
            f"{position.net_invested:>14,.2f} {position.dividends_received:>12,.2f} {market:>14s}"
        )
        total_invested += position.net_invested
        total_dividends += position.dividends_received
    click.echo("-" * 96)
    click.echo(f"{'Total':25s} {'':>14s} {'':>12s} {total_invested:>14,.2f} {total_dividends:>12,.2f}")


def register_commands(cli):
    """Register portfolio command with main CLI."""
    cli.add_command(portfolio)
