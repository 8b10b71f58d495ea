"""Shared domain error messages and error types."""


class DomainError(ValueError):
    """Base class for domain-level errors.

    Subclasses provide semantic categories while preserving ValueError
    compatibility for existing error handling.
    """


class ValidationError(DomainError):
    """Invalid input or failed validation in domain logic."""


class NotFoundError(DomainError):
    """Requested domain entity does not exist or belongs to another owner."""


class ConflictError(DomainError):
    """Domain conflict, such as uniqueness violations."""


class DependencyError(DomainError):
    """Operation blocked due to dependent domain data."""


class BatchWriteError(DomainError):
    """A recurrence batch could not be written; nothing was persisted."""


class ExternalFetchError(DomainError):
    """A call to the external quote provider failed."""


def entry_not_found(kind: str, entry_id: int) -> str:
    """Return message for missing expense or income."""
    return f"{kind.capitalize()} {entry_id} not found"


def user_not_found(user: int | str) -> str:
    """Return message for missing user."""
    return f"User '{user}' not found"


def category_not_found(category: int | str) -> str:
    """Return message for missing category by ID or name."""
    return f"Category '{category}' not found"


def card_not_found(card_id: int) -> str:
    """Return message for missing credit card."""
    return f"Credit card {card_id} not found"


def asset_not_found(asset_id: int) -> str:
    """Return message for missing investment asset."""
    return f"Investment asset {asset_id} not found"


def investment_transaction_not_found(transaction_id: int) -> str:
    """Return message for missing investment transaction."""
    return f"Investment transaction {transaction_id} not found"


def duplicate_user_email(email: str) -> str:
    """Return message for duplicate user email."""
    return f"User with email '{email}' already exists"


def category_delete_blocked(name: str, usage_count: int) -> str:
    """Return message when a category is still referenced by entries."""
    return (
        f"Cannot delete category '{name}': it is used by {usage_count} "
        f"entr{'ies' if usage_count != 1 else 'y'}. Deactivate it instead."
    )
