"""CLI helpers for resolving the owner of every command."""

from __future__ import annotations

import click
from fincontrol.cli.error_handling import handle_domain_error
from fincontrol.domain.errors import DomainError
from fincontrol.domain.user import UserService
from fincontrol.utils.user_resolver import resolve_user


def require_owner(ctx: click.Context) -> int:
    """Resolve the ``--user`` option to a user ID, or exit with a CLI error.

    This keeps error messaging and exit behavior consistent across commands.
    """
    user = ctx.obj.get("user")
    if not user:
        click.echo(
            "Error: No user selected. Pass --user or set FINCONTROL_USER "
            "(create one with 'fincontrol user create').",
            err=True,
        )
        ctx.exit(1)

    try:
        return resolve_user(UserService(ctx.obj["db"]), user)
    except DomainError as e:
        handle_domain_error(ctx, e)
