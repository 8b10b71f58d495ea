"""Category domain service."""

import logging
from typing import Any, Optional

from fincontrol.database.base import Database
from fincontrol.domain.entities import Category as CategoryEntity, EntryKind
from fincontrol.domain.errors import (
    ConflictError,
    DependencyError,
    NotFoundError,
    category_delete_blocked,
    category_not_found,
)
from fincontrol.domain.validation import validate_category

logger = logging.getLogger(__name__)


class CategoryService:
    """Service for managing income and expense categories."""

    def __init__(self, db: Database):
        """Initialize category service.

        Args:
            db: Database instance
        """
        self.db = db

    def _require(self, owner_id: int, category_id: int) -> CategoryEntity:
        category = self.db.get_category(owner_id, category_id)
        if category is None:
            raise NotFoundError(category_not_found(category_id))
        return category

    def _check_unique(
        self, owner_id: int, name: str, category_type: EntryKind, exclude_id: Optional[int] = None
    ) -> None:
        existing = self.db.get_category_by_name(owner_id, name, category_type)
        if existing is not None and existing.id != exclude_id:
            raise ConflictError(
                f"Category '{name}' already exists for {category_type.value} entries"
            )

    def create_category(
        self, owner_id: int, name: str, category_type: EntryKind | str, active: bool = True
    ) -> int:
        """Create a category.

        Args:
            owner_id: Owner user ID
            name: Category name (at least 2 characters)
            category_type: "income" or "expense"
            active: Whether the category is offered for new entries

        Returns:
            Category ID

        Raises:
            ValidationError: If the payload is invalid
            ConflictError: If the owner already has this name for this type
        """
        data = validate_category({"name": name, "category_type": category_type, "active": active})
        self._check_unique(owner_id, data["name"], data["category_type"])
        return self.db.create_category(
            owner_id=owner_id,
            name=data["name"],
            category_type=data["category_type"],
            active=data["active"],
        )

    def get_category(self, owner_id: int, category_id: int) -> Optional[CategoryEntity]:
        """Get category by ID, with its usage count."""
        return self.db.get_category(owner_id, category_id)

    def get_category_by_name(
        self, owner_id: int, name: str, category_type: Optional[EntryKind] = None
    ) -> Optional[CategoryEntity]:
        """Get category by name."""
        return self.db.get_category_by_name(owner_id, name.strip(), category_type)

    def resolve_category(
        self, owner_id: int, category: int | str, category_type: Optional[EntryKind] = None
    ) -> CategoryEntity:
        """Resolve a category ID or name to a category entity.

        Raises:
            NotFoundError: If no matching category exists for the owner
        """
        if isinstance(category, int):
            return self._require(owner_id, category)
        text = str(category).strip()
        if text.isdigit():
            return self._require(owner_id, int(text))
        found = self.get_category_by_name(owner_id, text, category_type)
        if found is None:
            raise NotFoundError(category_not_found(text))
        return found

    def list_categories(
        self,
        owner_id: int,
        category_type: Optional[EntryKind] = None,
        active: Optional[bool] = None,
    ) -> list[CategoryEntity]:
        """List categories with usage counts.

        Args:
            owner_id: Owner user ID
            category_type: Optional type filter
            active: Optional active flag filter

        Returns:
            List of category entities, ordered by type then name
        """
        return self.db.list_categories(owner_id, category_type=category_type, active=active)

    def update_category(self, owner_id: int, category_id: int, changes: dict[str, Any]) -> CategoryEntity:
        """Update category fields.

        Raises:
            NotFoundError: If the category does not exist
            ValidationError: If a changed field is invalid
            ConflictError: If the new name collides with another category
        """
        current = self._require(owner_id, category_id)
        data = validate_category(changes, partial=True)
        if not data:
            return current
        if "name" in data or "category_type" in data:
            self._check_unique(
                owner_id,
                data.get("name", current.name),
                data.get("category_type", current.category_type),
                exclude_id=category_id,
            )
        self.db.update_category(owner_id, category_id, data)
        return self._require(owner_id, category_id)

    def delete_category(self, owner_id: int, category_id: int) -> None:
        """Delete a category that no entry references.

        Raises:
            NotFoundError: If the category does not exist
            DependencyError: If any expense or income still references it
        """
        category = self._require(owner_id, category_id)
        usage_count = self.db.count_category_usage(owner_id, category_id)
        if usage_count > 0:
            raise DependencyError(category_delete_blocked(category.name, usage_count))
        self.db.delete_category(owner_id, category_id)
        logger.info("Deleted category %s (%s) for owner %s", category_id, category.name, owner_id)

    def toggle_active(self, owner_id: int, category_id: int) -> CategoryEntity:
        """Flip a category's active flag. Always allowed, even when in use."""
        category = self._require(owner_id, category_id)
        self.db.update_category(owner_id, category_id, {"active": not category.active})
        return self._require(owner_id, category_id)
