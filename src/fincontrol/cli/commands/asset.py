"""Investment asset management commands."""

import click
from fincontrol.cli.error_handling import handle_domain_error
from fincontrol.cli.user_resolution import require_owner
from fincontrol.domain.entities import AssetType, InvestmentAsset
from fincontrol.domain.investment import AssetService

ASSET_TYPE_CHOICE = click.Choice([asset_type.value for asset_type in AssetType], case_sensitive=False)


def format_asset(asset: InvestmentAsset) -> str:
    """Format one asset as a listing line."""
    ticker = asset.ticker or "-"
    price = f"{asset.current_price:,.2f}" if asset.current_price is not None else "-"
    quoted = f" ({asset.last_quote_date})" if asset.last_quote_date else ""
    status = "" if asset.active else " | inactive"
    return (
        f"ID: {asset.id:3d} | {ticker:8s} | {asset.name:25s} | {asset.asset_type.value:12s} | "
        f"{price}{quoted}{status}"
    )


@click.group()
def asset_group():
    """Manage investment assets."""
    pass


@asset_group.command("create")
@click.argument("name")
@click.option("--type", "asset_type", type=ASSET_TYPE_CHOICE, required=True, help="Asset type")
@click.option("--ticker", help="Exchange ticker (e.g., PETR4)")
@click.option("--sector", help="Sector")
@click.option("--description", help="Description")
@click.pass_context
def create_asset(ctx, name: str, asset_type: str, ticker: str | None, sector: str | None, description: str | None):
    """Create a new investment asset.

    Examples:
        fincontrol asset create "Petrobras" --type stock --ticker PETR4 --sector Energy
        fincontrol asset create "Treasury 2029" --type fixed_income
    """
    owner_id = require_owner(ctx)
    service = AssetService(ctx.obj["db"])

    try:
        asset_id = service.create_asset(
            owner_id,
            name=name,
            asset_type=asset_type.lower(),
            ticker=ticker,
            sector=sector,
            description=description,
        )
        click.echo(f"Created asset '{name}' (ID: {asset_id})")
    except ValueError as e:
        handle_domain_error(ctx, e)


@asset_group.command("list")
@click.option("--type", "asset_type", type=ASSET_TYPE_CHOICE, help="Filter by type")
@click.option("--active/--inactive", default=None, help="Filter by active flag")
@click.option("--search", help="Search in name or sector")
@click.pass_context
def list_assets(ctx, asset_type: str | None, active: bool | None, search: str | None):
    """List investment assets."""
    owner_id = require_owner(ctx)
    service = AssetService(ctx.obj["db"])

    assets = service.list_assets(
        owner_id, asset_type=asset_type.lower() if asset_type else None, active=active, search=search
    )
    if not assets:
        click.echo("No assets found.")
        return

    click.echo("\nAssets:")
    click.echo("-" * 90)
    for asset in assets:
        click.echo(format_asset(asset))


@asset_group.command("update")
@click.argument("asset_id", type=int)
@click.option("--name", help="New name")
@click.option("--type", "asset_type", type=ASSET_TYPE_CHOICE, help="New type")
@click.option("--ticker", help="New ticker")
@click.option("--sector", help="New sector")
@click.option("--description", help="New description")
@click.pass_context
def update_asset(
    ctx,
    asset_id: int,
    name: str | None,
    asset_type: str | None,
    ticker: str | None,
    sector: str | None,
    description: str | None,
):
    """Update an investment asset."""
    owner_id = require_owner(ctx)
    service = AssetService(ctx.obj["db"])

    changes = {
        key: value
        for key, value in (
            ("name", name),
            ("asset_type", asset_type.lower() if asset_type else None),
            ("ticker", ticker),
            ("sector", sector),
            ("description", description),
        )
        if value is not None
    }
    if not changes:
        click.echo("Error: Nothing to update.", err=True)
        ctx.exit(1)

    try:
        asset = service.update_asset(owner_id, asset_id, changes)
        click.echo(f"Updated asset {asset.id}: {asset.name}")
    except ValueError as e:
        handle_domain_error(ctx, e)


@asset_group.command("toggle")
@click.argument("asset_id", type=int)
@click.pass_context
def toggle_asset(ctx, asset_id: int):
    """Activate or deactivate an asset."""
    owner_id = require_owner(ctx)
    service = AssetService(ctx.obj["db"])

    try:
        asset = service.toggle_active(owner_id, asset_id)
        state = "activated" if asset.active else "deactivated"
        click.echo(f"Asset '{asset.name}' {state}")
    except ValueError as e:
        handle_domain_error(ctx, e)


@asset_group.command("delete")
@click.argument("asset_id", type=int)
@click.option("--yes", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def delete_asset(ctx, asset_id: int, yes: bool):
    """Delete an asset and all of its transactions."""
    owner_id = require_owner(ctx)
    service = AssetService(ctx.obj["db"])

    asset = service.get_asset(owner_id, asset_id)
    if asset is None:
        click.echo(f"Error: Investment asset {asset_id} not found", err=True)
        ctx.exit(1)

    if not yes and not click.confirm(
        f"Delete asset '{asset.name}' (ID: {asset_id}) and all of its transactions?"
    ):
        click.echo("Deletion cancelled.")
        return

    try:
        service.delete_asset(owner_id, asset_id)
        click.echo(f"Deleted asset '{asset.name}'")
    except ValueError as e:
        handle_domain_error(ctx, e)


def register_commands(cli):
    """Register asset commands with main CLI."""
    cli.add_command(asset_group, name="asset")
