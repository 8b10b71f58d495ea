"""Utility for resolving user emails to IDs."""

from fincontrol.domain.errors import NotFoundError, user_not_found
from fincontrol.domain.user import UserService


def resolve_user(user_service: UserService, user: str | int) -> int:
    """Resolve user email or ID to user ID.

    Args:
        user_service: UserService instance
        user: User email (str) or ID (int or string representation of int)

    Returns:
        User ID

    Raises:
        NotFoundError: If user is not found
    """
    if isinstance(user, int):
        if user_service.get_user(user) is None:
            raise NotFoundError(user_not_found(user))
        return user

    try:
        user_id = int(user)
    except (ValueError, TypeError):
        user_id = None

    if user_id is not None:
        if user_service.get_user(user_id) is None:
            raise NotFoundError(user_not_found(user_id))
        return user_id

    found = user_service.get_user_by_email(user)
    if found is None:
        raise NotFoundError(user_not_found(user))
    return found.id
