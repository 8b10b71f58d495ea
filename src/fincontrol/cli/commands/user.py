"""User management commands."""

import click
from fincontrol.cli.error_handling import handle_domain_error
from fincontrol.domain.user import UserService


@click.group()
def user_group():
    """Manage users."""
    pass


@user_group.command("create")
@click.argument("name")
@click.argument("email")
@click.pass_context
def create_user(ctx, name: str, email: str):
    """Create a new user.

    Examples:
        fincontrol user create "Ana Souza" ana@example.com
    """
    service = UserService(ctx.obj["db"])
    try:
        user_id = service.create_user(name=name, email=email)
        click.echo(f"Created user '{name}' (ID: {user_id})")
    except ValueError as e:
        handle_domain_error(ctx, e)


@user_group.command("list")
@click.pass_context
def list_users(ctx):
    """List all users."""
    service = UserService(ctx.obj["db"])

    users = service.list_users()
    if not users:
        click.echo("No users found.")
        return

    click.echo("\nUsers:")
    click.echo("-" * 60)
    for user in users:
        click.echo(f"ID: {user.id:3d} | {user.name:25s} | {user.email}")


def register_commands(cli):
    """Register user commands with main CLI."""
    cli.add_command(user_group, name="user")
