"""Credit card management commands."""

import click
from fincontrol.cli.error_handling import handle_domain_error
from fincontrol.cli.user_resolution import require_owner
from fincontrol.domain.credit_card import CreditCardService


@click.group()
def card_group():
    """Manage credit cards."""
    pass


@card_group.command("create")
@click.argument("name")
@click.option("--brand", required=True, help="Card brand (e.g., Visa, Mastercard)")
@click.option("--best-day", type=int, required=True, help="Best purchase day of the month (1-31)")
@click.pass_context
def create_card(ctx, name: str, brand: str, best_day: int):
    """Create a new credit card.

    Examples:
        fincontrol card create "Nubank" --brand Mastercard --best-day 5
    """
    owner_id = require_owner(ctx)
    service = CreditCardService(ctx.obj["db"])

    try:
        card_id = service.create_credit_card(
            owner_id, name=name, brand=brand, best_purchase_day=best_day
        )
        click.echo(f"Created credit card '{name}' (ID: {card_id})")
    except ValueError as e:
        handle_domain_error(ctx, e)


@card_group.command("list")
@click.option("--active/--inactive", default=None, help="Filter by active flag")
@click.pass_context
def list_cards(ctx, active: bool | None):
    """List credit cards."""
    owner_id = require_owner(ctx)
    service = CreditCardService(ctx.obj["db"])

    cards = service.list_credit_cards(owner_id, active=active)
    if not cards:
        click.echo("No credit cards found.")
        return

    click.echo("\nCredit cards:")
    click.echo("-" * 70)
    for card in cards:
        status = "active" if card.active else "inactive"
        click.echo(
            f"ID: {card.id:3d} | {card.name:20s} | {card.brand:12s} | "
            f"best day {card.best_purchase_day:2d} | {status}"
        )


@card_group.command("update")
@click.argument("card_id", type=int)
@click.option("--name", help="New name")
@click.option("--brand", help="New brand")
@click.option("--best-day", type=int, help="New best purchase day (1-31)")
@click.pass_context
def update_card(ctx, card_id: int, name: str | None, brand: str | None, best_day: int | None):
    """Update a credit card."""
    owner_id = require_owner(ctx)
    service = CreditCardService(ctx.obj["db"])

    changes = {}
    if name is not None:
        changes["name"] = name
    if brand is not None:
        changes["brand"] = brand
    if best_day is not None:
        changes["best_purchase_day"] = best_day
    if not changes:
        click.echo("Error: Nothing to update. Use --name, --brand or --best-day.", err=True)
        ctx.exit(1)

    try:
        card = service.update_credit_card(owner_id, card_id, changes)
        click.echo(f"Updated credit card {card.id}: {card.name} ({card.brand})")
    except ValueError as e:
        handle_domain_error(ctx, e)


@card_group.command("toggle")
@click.argument("card_id", type=int)
@click.pass_context
def toggle_card(ctx, card_id: int):
    """Activate or deactivate a credit card."""
    owner_id = require_owner(ctx)
    service = CreditCardService(ctx.obj["db"])

    try:
        card = service.toggle_active(owner_id, card_id)
        state = "activated" if card.active else "deactivated"
        click.echo(f"Credit card '{card.name}' {state}")
    except ValueError as e:
        handle_domain_error(ctx, e)


@card_group.command("delete")
@click.argument("card_id", type=int)
@click.option("--yes", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def delete_card(ctx, card_id: int, yes: bool):
    """Delete a credit card.

    Expenses charged to the card are kept without a card.
    """
    owner_id = require_owner(ctx)
    service = CreditCardService(ctx.obj["db"])

    card = service.get_credit_card(owner_id, card_id)
    if card is None:
        click.echo(f"Error: Credit card {card_id} not found", err=True)
        ctx.exit(1)

    if not yes and not click.confirm(f"Delete credit card '{card.name}' (ID: {card_id})?"):
        click.echo("Deletion cancelled.")
        return

    try:
        service.delete_credit_card(owner_id, card_id)
        click.echo(f"Deleted credit card '{card.name}'")
    except ValueError as e:
        handle_domain_error(ctx, e)


def register_commands(cli):
    """Register credit card commands with main CLI."""
    cli.add_command(card_group, name="card")
