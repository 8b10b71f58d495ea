"""Tests for assets, investment transactions and the portfolio summary."""

import pytest
from datetime import date
from decimal import Decimal

from fincontrol.domain.entities import AssetType, TradeType
from fincontrol.domain.errors import NotFoundError, ValidationError


@pytest.fixture
def sample_asset(asset_service, sample_user):
    """Create a sample stock."""
    asset_id = asset_service.create_asset(
        sample_user.id, name="Petrobras PN", asset_type="stock", ticker="petr4", sector="Energy"
    )
    return asset_service.get_asset(sample_user.id, asset_id)


def _trade(service, owner_id, asset_id, trade_type, quantity, price, when="2024-02-01"):
    return service.create_transaction(
        owner_id,
        {
            "asset_id": asset_id,
            "trade_date": when,
            "trade_type": trade_type,
            "quantity": quantity,
            "unit_price": price,
        },
    )


def test_create_asset_normalizes_ticker(sample_asset):
    """Tickers are stored upper case."""
    assert sample_asset.ticker == "PETR4"
    assert sample_asset.asset_type is AssetType.STOCK
    assert sample_asset.active is True


def test_create_asset_rejects_unknown_type(asset_service, sample_user):
    """Unknown asset types are rejected."""
    with pytest.raises(ValidationError, match="asset_type"):
        asset_service.create_asset(sample_user.id, name="Bitcoin", asset_type="crypto")


def test_list_assets_filters(asset_service, sample_user, sample_asset):
    """Assets can be filtered by type, active flag and search text."""
    fund_id = asset_service.create_asset(sample_user.id, name="Treasury 2029", asset_type="fixed_income")
    asset_service.toggle_active(sample_user.id, fund_id)

    assert [a.name for a in asset_service.list_assets(sample_user.id, asset_type="stock")] == [
        "Petrobras PN"
    ]
    assert [a.name for a in asset_service.list_assets(sample_user.id, active=False)] == [
        "Treasury 2029"
    ]
    assert [a.name for a in asset_service.list_assets(sample_user.id, search="energy")] == [
        "Petrobras PN"
    ]


def test_transaction_total_is_computed(investment_transaction_service, sample_user, sample_asset):
    """The total value is quantity times unit price."""
    transaction_id = _trade(
        investment_transaction_service, sample_user.id, sample_asset.id, "buy", "10", "35.50"
    )

    transaction = investment_transaction_service.get_transaction(sample_user.id, transaction_id)
    assert transaction.total_value == Decimal("355.00")
    assert transaction.asset_name == "Petrobras PN"


def test_transaction_total_recomputed_on_update(
    investment_transaction_service, sample_user, sample_asset
):
    """Changing quantity or price recomputes the total."""
    transaction_id = _trade(
        investment_transaction_service, sample_user.id, sample_asset.id, "buy", "10", "35.50"
    )

    updated = investment_transaction_service.update_transaction(
        sample_user.id, transaction_id, {"quantity": "20"}
    )
    assert updated.total_value == Decimal("710.00")

    updated = investment_transaction_service.update_transaction(
        sample_user.id, transaction_id, {"unit_price": "30"}
    )
    assert updated.total_value == Decimal("600.00")


def test_transaction_rejects_total_value(investment_transaction_service, sample_user, sample_asset):
    """Callers never supply the total value."""
    with pytest.raises(ValidationError, match="total_value"):
        investment_transaction_service.create_transaction(
            sample_user.id,
            {
                "asset_id": sample_asset.id,
                "trade_date": "2024-02-01",
                "trade_type": "buy",
                "quantity": "1",
                "unit_price": "10",
                "total_value": "999",
            },
        )


@pytest.mark.parametrize(
    "quantity,price",
    [("0", "10"), ("1", "-3"), ("0.0000001", "10"), ("abc", "10")],
)
def test_transaction_rejects_invalid_numbers(
    investment_transaction_service, sample_user, sample_asset, quantity, price
):
    """Quantities and prices must be positive; quantity has at most 6 places."""
    with pytest.raises(ValidationError):
        _trade(investment_transaction_service, sample_user.id, sample_asset.id, "buy", quantity, price)


def test_transaction_requires_existing_asset(investment_transaction_service, sample_user):
    """A transaction must reference an asset of the owner."""
    with pytest.raises(NotFoundError):
        _trade(investment_transaction_service, sample_user.id, 999, "buy", "1", "10")


def test_list_transactions_by_range(investment_transaction_service, sample_user, sample_asset):
    """Transactions filter by date range, newest first."""
    _trade(investment_transaction_service, sample_user.id, sample_asset.id, "buy", "1", "10", "2024-01-10")
    _trade(investment_transaction_service, sample_user.id, sample_asset.id, "buy", "1", "11", "2024-02-10")
    _trade(investment_transaction_service, sample_user.id, sample_asset.id, "sell", "1", "12", "2024-03-10")

    transactions = investment_transaction_service.list_transactions(
        sample_user.id, start_date=date(2024, 2, 1), end_date=date(2024, 3, 31)
    )
    assert [t.trade_date for t in transactions] == [date(2024, 3, 10), date(2024, 2, 10)]

    sells = investment_transaction_service.list_transactions(sample_user.id, trade_type="sell")
    assert len(sells) == 1

    with pytest.raises(ValidationError):
        investment_transaction_service.list_transactions(
            sample_user.id, start_date=date(2024, 3, 1), end_date=date(2024, 1, 1)
        )


def test_delete_asset_removes_transactions(
    asset_service, investment_transaction_service, sample_user, sample_asset
):
    """Deleting an asset deletes its transactions."""
    transaction_id = _trade(
        investment_transaction_service, sample_user.id, sample_asset.id, "buy", "1", "10"
    )

    asset_service.delete_asset(sample_user.id, sample_asset.id)

    assert asset_service.get_asset(sample_user.id, sample_asset.id) is None
    assert investment_transaction_service.get_transaction(sample_user.id, transaction_id) is None


def test_portfolio_summary(
    asset_service, investment_transaction_service, portfolio_service, sample_user, sample_asset
):
    """Position metrics are derived from the asset's transactions."""
    _trade(investment_transaction_service, sample_user.id, sample_asset.id, "buy", "10", "30")
    _trade(investment_transaction_service, sample_user.id, sample_asset.id, "buy", "10", "40")
    _trade(investment_transaction_service, sample_user.id, sample_asset.id, "sell", "5", "45")
    _trade(investment_transaction_service, sample_user.id, sample_asset.id, "dividend", "1", "12.50")
    asset_service.create_asset(sample_user.id, name="Bova ETF", asset_type="etf", ticker="BOVA11")

    positions = portfolio_service.summary(sample_user.id)

    assert [p.name for p in positions] == ["Bova ETF", "Petrobras PN"]
    etf, stock = positions
    assert etf.quantity_current == 0
    assert etf.average_cost == 0
    assert etf.market_value is None

    assert stock.quantity_current == Decimal("15")
    assert stock.average_cost == Decimal("35")
    assert stock.total_bought == Decimal("700")
    assert stock.total_sold == Decimal("225")
    assert stock.net_invested == Decimal("475")
    assert stock.dividends_received == Decimal("12.50")


def test_portfolio_skips_inactive_assets(asset_service, portfolio_service, sample_user, sample_asset):
    """Inactive assets are left out of the summary."""
    asset_service.toggle_active(sample_user.id, sample_asset.id)

    assert portfolio_service.summary(sample_user.id) == []
