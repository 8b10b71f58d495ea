"""Category management commands."""

import click
from fincontrol.cli.error_handling import handle_domain_error
from fincontrol.cli.user_resolution import require_owner
from fincontrol.domain.category import CategoryService
from fincontrol.domain.entities import EntryKind

KIND_CHOICE = click.Choice([kind.value for kind in EntryKind], case_sensitive=False)


@click.group()
def category_group():
    """Manage income and expense categories."""
    pass


@category_group.command("list")
@click.option("--type", "category_type", type=KIND_CHOICE, help="Only list this category type")
@click.option("--active/--inactive", default=None, help="Filter by active flag")
@click.pass_context
def list_categories(ctx, category_type: str | None, active: bool | None):
    """List categories with the number of entries using each one."""
    owner_id = require_owner(ctx)
    service = CategoryService(ctx.obj["db"])

    categories = service.list_categories(
        owner_id,
        category_type=EntryKind(category_type.lower()) if category_type else None,
        active=active,
    )
    if not categories:
        click.echo("No categories found.")
        return

    click.echo("\nCategories:")
    click.echo("-" * 70)
    for cat in categories:
        status = "active" if cat.active else "inactive"
        click.echo(
            f"ID: {cat.id:3d} | {cat.name:25s} | {cat.category_type.value:7s} | "
            f"{status:8s} | {cat.usage_count} entr{'ies' if cat.usage_count != 1 else 'y'}"
        )


@category_group.command("create")
@click.argument("name")
@click.option(
    "--type",
    "category_type",
    type=KIND_CHOICE,
    default="expense",
    help="Category type (default: expense)",
)
@click.pass_context
def create_category(ctx, name: str, category_type: str):
    """Create a new category.

    Examples:
        fincontrol category create "Groceries"
        fincontrol category create "Salary" --type income
    """
    owner_id = require_owner(ctx)
    service = CategoryService(ctx.obj["db"])

    try:
        category_id = service.create_category(owner_id, name=name, category_type=category_type.lower())
        click.echo(f"Created {category_type.lower()} category '{name}' (ID: {category_id})")
    except ValueError as e:
        handle_domain_error(ctx, e)


@category_group.command("update")
@click.argument("category_id", type=int)
@click.option("--name", help="New name")
@click.option("--type", "category_type", type=KIND_CHOICE, help="New type")
@click.pass_context
def update_category(ctx, category_id: int, name: str | None, category_type: str | None):
    """Rename a category or change its type."""
    owner_id = require_owner(ctx)
    service = CategoryService(ctx.obj["db"])

    changes = {}
    if name is not None:
        changes["name"] = name
    if category_type is not None:
        changes["category_type"] = category_type.lower()
    if not changes:
        click.echo("Error: Nothing to update. Use --name or --type.", err=True)
        ctx.exit(1)

    try:
        category = service.update_category(owner_id, category_id, changes)
        click.echo(f"Updated category {category.id}: {category.name} ({category.category_type.value})")
    except ValueError as e:
        handle_domain_error(ctx, e)


@category_group.command("toggle")
@click.argument("category_id", type=int)
@click.pass_context
def toggle_category(ctx, category_id: int):
    """Activate or deactivate a category."""
    owner_id = require_owner(ctx)
    service = CategoryService(ctx.obj["db"])

    try:
        category = service.toggle_active(owner_id, category_id)
        state = "activated" if category.active else "deactivated"
        click.echo(f"Category '{category.name}' {state}")
    except ValueError as e:
        handle_domain_error(ctx, e)


@category_group.command("delete")
@click.argument("category_id", type=int)
@click.option("--yes", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def delete_category(ctx, category_id: int, yes: bool):
    """Delete a category.

    A category used by any expense or income cannot be deleted; deactivate
    it with 'category toggle' instead.
    """
    owner_id = require_owner(ctx)
    service = CategoryService(ctx.obj["db"])

    category = service.get_category(owner_id, category_id)
    if category is None:
        click.echo(f"Error: Category '{category_id}' not found", err=True)
        ctx.exit(1)

    if not yes and not click.confirm(f"Delete category '{category.name}' (ID: {category_id})?"):
        click.echo("Deletion cancelled.")
        return

    try:
        service.delete_category(owner_id, category_id)
        click.echo(f"Deleted category '{category.name}'")
    except ValueError as e:
        handle_domain_error(ctx, e)


def register_commands(cli):
    """Register category commands with main CLI."""
    cli.add_command(category_group, name="category")
