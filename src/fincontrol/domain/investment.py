"""Investment asset and investment transaction domain services."""

import logging
from datetime import date
from typing import Any, Optional

from fincontrol.database.base import Database
from fincontrol.domain.entities import (
    AssetType,
    InvestmentAsset as AssetEntity,
    InvestmentTransaction as InvestmentTransactionEntity,
    TradeType,
)
from fincontrol.domain.errors import (
    NotFoundError,
    ValidationError,
    asset_not_found,
    investment_transaction_not_found,
)
from fincontrol.domain.validation import validate_asset, validate_investment_transaction

logger = logging.getLogger(__name__)


class AssetService:
    """Service for managing investment assets."""

    def __init__(self, db: Database):
        """Initialize asset service.

        Args:
            db: Database instance
        """
        self.db = db

    def _require(self, owner_id: int, asset_id: int) -> AssetEntity:
        asset = self.db.get_asset(owner_id, asset_id)
        if asset is None:
            raise NotFoundError(asset_not_found(asset_id))
        return asset

    def create_asset(
        self,
        owner_id: int,
        name: str,
        asset_type: AssetType | str,
        ticker: Optional[str] = None,
        sector: Optional[str] = None,
        description: Optional[str] = None,
        active: bool = True,
    ) -> int:
        """Create an investment asset.

        Args:
            owner_id: Owner user ID
            name: Asset name (at least 2 characters)
            asset_type: One of stock, reit, fund, fixed_income, etf
            ticker: Optional exchange ticker, stored upper case
            sector: Optional sector
            description: Optional free text
            active: Whether the asset is part of the portfolio

        Returns:
            Asset ID

        Raises:
            ValidationError: If the payload is invalid
        """
        data = validate_asset(
            {
                "name": name,
                "asset_type": asset_type,
                "ticker": ticker,
                "sector": sector,
                "description": description,
                "active": active,
            }
        )
        return self.db.create_asset(owner_id=owner_id, **data)

    def get_asset(self, owner_id: int, asset_id: int) -> Optional[AssetEntity]:
        """Get asset by ID."""
        return self.db.get_asset(owner_id, asset_id)

    def list_assets(
        self,
        owner_id: int,
        asset_type: Optional[AssetType | str] = None,
        active: Optional[bool] = None,
        search: Optional[str] = None,
    ) -> list[AssetEntity]:
        """List assets, filtered by type, active flag or a name/sector search."""
        if asset_type is not None:
            asset_type = validate_asset({"asset_type": asset_type}, partial=True)["asset_type"]
        return self.db.list_assets(
            owner_id, asset_type=asset_type, active=active, search=search.strip() if search else None
        )

    def update_asset(self, owner_id: int, asset_id: int, changes: dict[str, Any]) -> AssetEntity:
        """Update asset fields.

        Raises:
            NotFoundError: If the asset does not exist
            ValidationError: If a changed field is invalid
        """
        current = self._require(owner_id, asset_id)
        data = validate_asset(changes, partial=True)
        if not data:
            return current
        self.db.update_asset(owner_id, asset_id, data)
        return self._require(owner_id, asset_id)

    def delete_asset(self, owner_id: int, asset_id: int) -> None:
        """Delete an asset together with its transactions.

        Raises:
            NotFoundError: If the asset does not exist
        """
        asset = self._require(owner_id, asset_id)
        self.db.delete_asset(owner_id, asset_id)
        logger.info("Deleted asset %s (%s) for owner %s", asset_id, asset.name, owner_id)

    def toggle_active(self, owner_id: int, asset_id: int) -> AssetEntity:
        """Flip an asset's active flag."""
        asset = self._require(owner_id, asset_id)
        self.db.update_asset(owner_id, asset_id, {"active": not asset.active})
        return self._require(owner_id, asset_id)


class InvestmentTransactionService:
    """Service for managing buys, sells and dividends.

    The stored total value is always quantity times unit price; it is
    computed on create and recomputed whenever either factor changes.
    """

    def __init__(self, db: Database):
        """Initialize investment transaction service.

        Args:
            db: Database instance
        """
        self.db = db

    def _require(self, owner_id: int, transaction_id: int) -> InvestmentTransactionEntity:
        transaction = self.db.get_investment_transaction(owner_id, transaction_id)
        if transaction is None:
            raise NotFoundError(investment_transaction_not_found(transaction_id))
        return transaction

    def _require_asset(self, owner_id: int, asset_id: int) -> None:
        if self.db.get_asset(owner_id, asset_id) is None:
            raise NotFoundError(asset_not_found(asset_id))

    def create_transaction(self, owner_id: int, data: dict[str, Any]) -> int:
        """Record an investment transaction.

        Args:
            owner_id: Owner user ID
            data: Field map with asset_id, trade_date, trade_type, quantity
                and unit_price

        Returns:
            Transaction ID

        Raises:
            ValidationError: If the payload is invalid or carries total_value
            NotFoundError: If the asset does not exist
        """
        fields = validate_investment_transaction(data)
        self._require_asset(owner_id, fields["asset_id"])
        return self.db.create_investment_transaction(
            owner_id=owner_id,
            total_value=fields["quantity"] * fields["unit_price"],
            **fields,
        )

    def get_transaction(
        self, owner_id: int, transaction_id: int
    ) -> Optional[InvestmentTransactionEntity]:
        """Get transaction by ID."""
        return self.db.get_investment_transaction(owner_id, transaction_id)

    def list_transactions(
        self,
        owner_id: int,
        asset_id: Optional[int] = None,
        trade_type: Optional[TradeType | str] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> list[InvestmentTransactionEntity]:
        """List transactions, newest first.

        Raises:
            ValidationError: If the trade type is unknown or the range is inverted
        """
        if trade_type is not None:
            trade_type = validate_investment_transaction(
                {"trade_type": trade_type}, partial=True
            )["trade_type"]
        if start_date is not None and end_date is not None and start_date > end_date:
            raise ValidationError("start date must not be after end date")
        return self.db.list_investment_transactions(
            owner_id,
            asset_id=asset_id,
            trade_type=trade_type,
            start_date=start_date,
            end_date=end_date,
        )

    def update_transaction(
        self, owner_id: int, transaction_id: int, changes: dict[str, Any]
    ) -> InvestmentTransactionEntity:
        """Update transaction fields, recomputing the total when needed.

        Raises:
            NotFoundError: If the transaction or a new asset does not exist
            ValidationError: If a changed field is invalid
        """
        current = self._require(owner_id, transaction_id)
        data = validate_investment_transaction(changes, partial=True)
        if not data:
            return current
        if "asset_id" in data:
            self._require_asset(owner_id, data["asset_id"])
        if "quantity" in data or "unit_price" in data:
            quantity = data.get("quantity", current.quantity)
            unit_price = data.get("unit_price", current.unit_price)
            data["total_value"] = quantity * unit_price
        self.db.update_investment_transaction(owner_id, transaction_id, data)
        return self._require(owner_id, transaction_id)

    def delete_transaction(self, owner_id: int, transaction_id: int) -> None:
        """Delete a transaction.

        Raises:
            NotFoundError: If the transaction does not exist
        """
        self._require(owner_id, transaction_id)
        self.db.delete_investment_transaction(owner_id, transaction_id)
