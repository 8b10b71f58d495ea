"""Portfolio summary domain service."""

from decimal import Decimal

from fincontrol.database.base import Database
from fincontrol.domain.entities import PortfolioPosition, TradeType

ZERO = Decimal("0")


class PortfolioService:
    """Service deriving position metrics from investment transactions."""

    def __init__(self, db: Database):
        """Initialize portfolio service.

        Args:
            db: Database instance
        """
        self.db = db

    def summary(self, owner_id: int) -> list[PortfolioPosition]:
        """Compute one position per active asset, ordered by asset name.

        For each asset:

        - ``quantity_current``: bought minus sold quantity
        - ``average_cost``: buy value over buy quantity, 0 without buys
        - ``net_invested``: buy value minus sell value
        - ``dividends_received``: sum of dividend values
        - ``total_bought`` / ``total_sold``: buy and sell values

        Assets without transactions are included with zero metrics.
        """
        positions = []
        assets = sorted(self.db.list_assets(owner_id, active=True), key=lambda a: a.name)
        for asset in assets:
            bought_quantity = ZERO
            sold_quantity = ZERO
            bought = ZERO
            sold = ZERO
            dividends = ZERO
            for txn in self.db.list_investment_transactions(owner_id, asset_id=asset.id):
                if txn.trade_type is TradeType.BUY:
                    bought_quantity += txn.quantity
                    bought += txn.total_value
                elif txn.trade_type is TradeType.SELL:
                    sold_quantity += txn.quantity
                    sold += txn.total_value
                elif txn.trade_type is TradeType.DIVIDEND:
                    dividends += txn.total_value

            average_cost = bought / bought_quantity if bought_quantity else ZERO
            positions.append(
                PortfolioPosition(
                    asset_id=asset.id,
                    name=asset.name,
                    asset_type=asset.asset_type,
                    sector=asset.sector,
                    quantity_current=bought_quantity - sold_quantity,
                    average_cost=average_cost,
                    net_invested=bought - sold,
                    dividends_received=dividends,
                    total_bought=bought,
                    total_sold=sold,
                    current_price=asset.current_price,
                )
            )
        return positions
