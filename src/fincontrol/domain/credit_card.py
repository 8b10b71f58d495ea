"""Credit card domain service."""

import logging
from typing import Any, Optional

from fincontrol.database.base import Database
from fincontrol.domain.entities import CreditCard as CreditCardEntity
from fincontrol.domain.errors import NotFoundError, card_not_found
from fincontrol.domain.validation import validate_credit_card

logger = logging.getLogger(__name__)


class CreditCardService:
    """Service for managing credit cards."""

    def __init__(self, db: Database):
        """Initialize credit card service.

        Args:
            db: Database instance
        """
        self.db = db

    def _require(self, owner_id: int, card_id: int) -> CreditCardEntity:
        card = self.db.get_credit_card(owner_id, card_id)
        if card is None:
            raise NotFoundError(card_not_found(card_id))
        return card

    def create_credit_card(
        self, owner_id: int, name: str, brand: str, best_purchase_day: int, active: bool = True
    ) -> int:
        """Create a credit card.

        Args:
            owner_id: Owner user ID
            name: Card name (at least 2 characters)
            brand: Card brand, e.g. "Visa"
            best_purchase_day: Day of month (1-31) with the longest grace period
            active: Whether the card is offered for new expenses

        Returns:
            Credit card ID

        Raises:
            ValidationError: If the payload is invalid
        """
        data = validate_credit_card(
            {"name": name, "brand": brand, "best_purchase_day": best_purchase_day, "active": active}
        )
        return self.db.create_credit_card(owner_id=owner_id, **data)

    def get_credit_card(self, owner_id: int, card_id: int) -> Optional[CreditCardEntity]:
        """Get credit card by ID."""
        return self.db.get_credit_card(owner_id, card_id)

    def list_credit_cards(self, owner_id: int, active: Optional[bool] = None) -> list[CreditCardEntity]:
        """List credit cards, ordered by name."""
        return self.db.list_credit_cards(owner_id, active=active)

    def update_credit_card(
        self, owner_id: int, card_id: int, changes: dict[str, Any]
    ) -> CreditCardEntity:
        """Update credit card fields.

        Raises:
            NotFoundError: If the card does not exist
            ValidationError: If a changed field is invalid
        """
        current = self._require(owner_id, card_id)
        data = validate_credit_card(changes, partial=True)
        if not data:
            return current
        self.db.update_credit_card(owner_id, card_id, data)
        return self._require(owner_id, card_id)

    def delete_credit_card(self, owner_id: int, card_id: int) -> None:
        """Delete a credit card.

        Expenses charged to the card are kept; their card reference is cleared.

        Raises:
            NotFoundError: If the card does not exist
        """
        self._require(owner_id, card_id)
        self.db.delete_credit_card(owner_id, card_id)
        logger.info("Deleted credit card %s for owner %s", card_id, owner_id)

    def toggle_active(self, owner_id: int, card_id: int) -> CreditCardEntity:
        """Flip a card's active flag."""
        card = self._require(owner_id, card_id)
        self.db.update_credit_card(owner_id, card_id, {"active": not card.active})
        return self._require(owner_id, card_id)
