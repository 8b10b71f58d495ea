"""Investment transaction commands."""

import click
from fincontrol.cli.error_handling import handle_domain_error
from fincontrol.cli.user_resolution import require_owner
from fincontrol.domain.entities import InvestmentTransaction, TradeType
from fincontrol.domain.investment import InvestmentTransactionService
from fincontrol.utils.amount_parser import parse_amount
from fincontrol.utils.date_parser import parse_date

TRADE_TYPE_CHOICE = click.Choice([trade_type.value for trade_type in TradeType], case_sensitive=False)


def format_trade(txn: InvestmentTransaction) -> str:
    """Format one investment transaction as a listing line."""
    return (
        f"ID: {txn.id:4d} | {txn.trade_date} | {txn.trade_type.value:8s} | {txn.asset_name:20s} | "
        f"{txn.quantity:>12,.6f} x {txn.unit_price:>10,.2f} = {txn.total_value:>12,.2f}"
    )


@click.group()
def trade_group():
    """Record buys, sells and dividends."""
    pass


@trade_group.command("add")
@click.argument("asset_id", type=int)
@click.option("--type", "trade_type", type=TRADE_TYPE_CHOICE, required=True, help="buy, sell or dividend")
@click.option("--quantity", required=True, help="Quantity (up to 6 decimal places)")
@click.option("--price", required=True, help="Unit price")
@click.option("--date", "when", default="today", show_default=True, help="Trade date")
@click.pass_context
def add_trade(ctx, asset_id: int, trade_type: str, quantity: str, price: str, when: str):
    """Record an investment transaction. The total is quantity times price.

    Examples:
        fincontrol trade add 1 --type buy --quantity 100 --price 38.50 --date 2024-03-01
    """
    owner_id = require_owner(ctx)
    service = InvestmentTransactionService(ctx.obj["db"])

    try:
        transaction_id = service.create_transaction(
            owner_id,
            {
                "asset_id": asset_id,
                "trade_type": trade_type.lower(),
                "quantity": parse_amount(quantity),
                "unit_price": parse_amount(price),
                "trade_date": parse_date(when),
            },
        )
        click.echo(f"Recorded transaction {transaction_id}")
        click.echo(f"  {format_trade(service.get_transaction(owner_id, transaction_id))}")
    except ValueError as e:
        handle_domain_error(ctx, e)


@trade_group.command("list")
@click.option("--asset", "asset_id", type=int, help="Filter by asset ID")
@click.option("--type", "trade_type", type=TRADE_TYPE_CHOICE, help="Filter by type")
@click.option("--from", "start", help="Start date")
@click.option("--to", "end", help="End date")
@click.pass_context
def list_trades(ctx, asset_id: int | None, trade_type: str | None, start: str | None, end: str | None):
    """List investment transactions, newest first."""
    owner_id = require_owner(ctx)
    service = InvestmentTransactionService(ctx.obj["db"])

    try:
        transactions = service.list_transactions(
            owner_id,
            asset_id=asset_id,
            trade_type=trade_type.lower() if trade_type else None,
            start_date=parse_date(start) if start else None,
            end_date=parse_date(end) if end else None,
        )
    except ValueError as e:
        handle_domain_error(ctx, e)

    if not transactions:
        click.echo("No transactions found.")
        return

    click.echo("\nInvestment transactions:")
    click.echo("-" * 100)
    for txn in transactions:
        click.echo(format_trade(txn))


@trade_group.command("update")
@click.argument("transaction_id", type=int)
@click.option("--type", "trade_type", type=TRADE_TYPE_CHOICE, help="New type")
@click.option("--quantity", help="New quantity")
@click.option("--price", help="New unit price")
@click.option("--date", "when", help="New trade date")
@click.pass_context
def update_trade(
    ctx,
    transaction_id: int,
    trade_type: str | None,
    quantity: str | None,
    price: str | None,
    when: str | None,
):
    """Update an investment transaction; the total is recomputed."""
    owner_id = require_owner(ctx)
    service = InvestmentTransactionService(ctx.obj["db"])

    try:
        changes = {}
        if trade_type is not None:
            changes["trade_type"] = trade_type.lower()
        if quantity is not None:
            changes["quantity"] = parse_amount(quantity)
        if price is not None:
            changes["unit_price"] = parse_amount(price)
        if when is not None:
            changes["trade_date"] = parse_date(when)
        if not changes:
            click.echo("Error: Nothing to update.", err=True)
            ctx.exit(1)
        txn = service.update_transaction(owner_id, transaction_id, changes)
        click.echo(f"Updated transaction {txn.id}")
        click.echo(f"  {format_trade(txn)}")
    except ValueError as e:
        handle_domain_error(ctx, e)


@trade_group.command("delete")
@click.argument("transaction_id", type=int)
@click.pass_context
def delete_trade(ctx, transaction_id: int):
    """Delete an investment transaction."""
    owner_id = require_owner(ctx)
    service = InvestmentTransactionService(ctx.obj["db"])

    try:
        service.delete_transaction(owner_id, transaction_id)
        click.echo(f"Deleted transaction {transaction_id}")
    except ValueError as e:
        handle_domain_error(ctx, e)


def register_commands(cli):
    """Register investment transaction commands with main CLI."""
    cli.add_command(trade_group, name="trade")
