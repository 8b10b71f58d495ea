"""Tests for the quotation service and the daily quotation job."""

import pytest
from datetime import date, datetime
from decimal import Decimal
from http.client import IncompleteRead
from zoneinfo import ZoneInfo

from sqlalchemy.exc import SQLAlchemyError

from fincontrol.domain.errors import ExternalFetchError, NotFoundError, ValidationError
from fincontrol.quotes import provider as provider_module
from fincontrol.quotes.job import JOB_SCHEDULE, JOB_TIMEZONE, QuotationJob
from fincontrol.quotes.provider import BrapiQuoteProvider
from fincontrol.quotes.service import QuotationService, normalize_ticker

from conftest import FIXED_TODAY

SAO_PAULO = ZoneInfo(JOB_TIMEZONE)


@pytest.fixture
def sleeps():
    """Record requested pauses instead of sleeping."""
    return []


@pytest.fixture
def quotation_service(temp_db, fake_provider, sleeps):
    """Create a QuotationService with a fake provider and a fixed date."""
    return QuotationService(
        temp_db, fake_provider, sleep=sleeps.append, today=lambda: FIXED_TODAY
    )


@pytest.fixture
def quoted_assets(asset_service, sample_user, other_user):
    """Assets of two owners; only active stocks, REITs and ETFs are quoted."""
    return {
        "petr4": asset_service.create_asset(sample_user.id, "Petrobras", "stock", ticker="PETR4"),
        "petr4_other": asset_service.create_asset(other_user.id, "Petrobras", "stock", ticker="PETR4"),
        "hglg11": asset_service.create_asset(sample_user.id, "HGLG", "reit", ticker="HGLG11"),
        "bova11": asset_service.create_asset(sample_user.id, "Bova", "etf", ticker="BOVA11"),
        "fund": asset_service.create_asset(sample_user.id, "Multimarket", "fund", ticker="FUND11"),
        "no_ticker": asset_service.create_asset(sample_user.id, "Savings", "stock"),
        "inactive": asset_service.create_asset(
            sample_user.id, "Old", "stock", ticker="OIBR3", active=False
        ),
    }


def test_normalize_ticker():
    """Tickers are trimmed and upper cased."""
    assert normalize_ticker(" petr4 ") == "PETR4"
    with pytest.raises(ValidationError):
        normalize_ticker("  ")


def test_active_tickers_are_distinct(quotation_service, quoted_assets):
    """Tickers shared by several owners are fetched once."""
    assert quotation_service.get_active_tickers() == ["BOVA11", "HGLG11", "PETR4"]


def test_refresh_all_writes_quotes(
    quotation_service, fake_provider, asset_service, sample_user, other_user, quoted_assets, sleeps
):
    """Every fetched quote lands on each active asset with the ticker."""
    fake_provider.responses = {"PETR4": "38.12", "HGLG11": "160.5", "BOVA11": "125"}

    result = quotation_service.refresh_all()

    assert result.success is True
    assert (result.total, result.updated, result.failed) == (3, 3, 0)
    assert fake_provider.calls == ["BOVA11", "HGLG11", "PETR4"]
    assert sleeps == [1.0, 1.0]

    for owner, key in ((sample_user, "petr4"), (other_user, "petr4_other")):
        asset = asset_service.get_asset(owner.id, quoted_assets[key])
        assert asset.current_price == Decimal("38.12")
        assert asset.percent_change == Decimal("1.25")
        assert asset.absolute_change == Decimal("0.40")
        assert asset.last_quote_date == FIXED_TODAY

    inactive = asset_service.get_asset(sample_user.id, quoted_assets["inactive"])
    assert inactive.current_price is None


def test_refresh_all_counts_failures(quotation_service, fake_provider, quoted_assets):
    """Fetch errors and missing data are counted, not raised."""
    fake_provider.responses = {
        "PETR4": "38.12",
        "HGLG11": ExternalFetchError("timed out"),
        "BOVA11": None,
    }

    result = quotation_service.refresh_all()

    assert result.success is True
    assert (result.total, result.updated, result.failed) == (3, 1, 2)


def test_refresh_all_survives_broken_responses(temp_db, quoted_assets, sleeps, monkeypatch):
    """A body cut off mid-read counts as a failure for each ticker."""

    def truncated_urlopen(request, timeout=None):
        raise IncompleteRead(b'{"res', 100)

    monkeypatch.setattr(provider_module, "urlopen", truncated_urlopen)
    service = QuotationService(
        temp_db,
        BrapiQuoteProvider(base_url="https://example.test"),
        sleep=sleeps.append,
        today=lambda: FIXED_TODAY,
    )

    result = service.refresh_all()

    assert result.success is True
    assert (result.total, result.updated, result.failed) == (3, 0, 3)


def test_refresh_all_counts_write_failures(quotation_service, fake_provider, temp_db, quoted_assets, monkeypatch):
    """A quote that cannot be stored counts as failed."""
    fake_provider.responses = {"PETR4": "38.12", "HGLG11": "160.5", "BOVA11": "125"}

    def fail_write(**kwargs):
        raise SQLAlchemyError("disk I/O error")

    monkeypatch.setattr(temp_db, "update_asset_quote", fail_write)

    result = quotation_service.refresh_all()

    assert result.success is True
    assert (result.updated, result.failed) == (0, 3)


def test_refresh_all_without_tickers(quotation_service, fake_provider, sleeps):
    """An empty portfolio is a successful no-op."""
    result = quotation_service.refresh_all()

    assert result.success is True
    assert result.total == 0
    assert result.message == "No assets with a ticker to update"
    assert fake_provider.calls == []
    assert sleeps == []


def test_refresh_all_fails_when_tickers_unavailable(quotation_service, fake_provider, monkeypatch):
    """Only failing to list tickers fails the whole run."""

    def broken():
        raise SQLAlchemyError("database is locked")

    monkeypatch.setattr(quotation_service, "get_active_tickers", broken)

    result = quotation_service.refresh_all()

    assert result.success is False
    assert "database is locked" in result.message
    assert fake_provider.calls == []


def test_refresh_ticker(quotation_service, fake_provider, asset_service, sample_user, quoted_assets):
    """A single ticker refresh stores and returns the quote."""
    fake_provider.responses = {"HGLG11": "160.5"}

    quote, updated = quotation_service.refresh_ticker("hglg11")

    assert quote.ticker == "HGLG11"
    assert updated == 1
    assert asset_service.get_asset(sample_user.id, quoted_assets["hglg11"]).current_price == Decimal("160.5")


def test_refresh_ticker_without_asset(quotation_service, fake_provider):
    """A ticker no asset holds still returns its quote."""
    fake_provider.responses = {"VALE3": "61.20"}

    quote, updated = quotation_service.refresh_ticker("VALE3")

    assert quote.price == Decimal("61.20")
    assert updated == 0


def test_live_quote_without_data(quotation_service, fake_provider):
    """A ticker the provider does not know is reported as not found."""
    with pytest.raises(NotFoundError, match="XXXX3"):
        quotation_service.live_quote("xxxx3")


def test_status_and_outdated(quotation_service, fake_provider, temp_db, quoted_assets):
    """Coverage and staleness reflect stored quote dates."""
    temp_db.update_asset_quote("HGLG11", Decimal("150"), Decimal("0"), Decimal("0"), date(2024, 3, 1))
    temp_db.update_asset_quote("BOVA11", Decimal("120"), Decimal("0"), Decimal("0"), date(2024, 3, 10))
    temp_db.update_asset_quote("PETR4", Decimal("38"), Decimal("0"), Decimal("0"), FIXED_TODAY)

    status = quotation_service.status()
    # Both PETR4 assets, HGLG11, BOVA11 and FUND11; the stock without ticker is left out
    assert status.total_assets == 5
    assert status.with_quotes == 4
    assert status.updated_today == 2
    assert status.last_update_date == FIXED_TODAY
    assert status.coverage == 80.0

    outdated = quotation_service.outdated_assets()
    assert [a.ticker for a in outdated] == ["HGLG11", "BOVA11", "FUND11"]


def _at(year, month, day, hour):
    return datetime(year, month, day, hour, 30, tzinfo=SAO_PAULO)


def test_job_skips_weekend(quotation_service, fake_provider, quoted_assets):
    """Saturday evening is skipped without calling the provider."""
    job = QuotationJob(quotation_service)

    result = job.execute(now=_at(2024, 3, 16, 20))

    assert result.skipped is True
    assert result.reason == "Weekend - skipping quote refresh"
    assert fake_provider.calls == []


def test_job_skips_before_close(quotation_service, fake_provider, quoted_assets):
    """A weekday before 19h is too early."""
    job = QuotationJob(quotation_service)

    check = job.should_run(_at(2024, 3, 15, 18))

    assert check.should_run is False
    assert check.is_weekday is True
    assert check.current_day == 5
    assert check.current_hour == 18
    assert check.reason.startswith("Too early (18h)")
    assert job.execute(now=_at(2024, 3, 15, 18)).skipped is True
    assert fake_provider.calls == []


def test_job_runs_after_close(quotation_service, fake_provider, quoted_assets):
    """From 19h on a weekday the refresh runs."""
    fake_provider.responses = {"PETR4": "38.12"}
    job = QuotationJob(quotation_service, now=lambda: _at(2024, 3, 15, 19))

    result = job.execute()

    assert result.skipped is False
    assert result.forced is False
    assert result.total == 3
    assert result.updated == 1


def test_job_force_ignores_schedule(quotation_service, fake_provider, quoted_assets):
    """A forced run ignores the day and hour."""
    fake_provider.responses = {"PETR4": "38.12"}
    job = QuotationJob(quotation_service, now=lambda: _at(2024, 3, 17, 3))

    result = job.force_execute()

    assert result.forced is True
    assert result.success is True
    assert result.updated == 1


def test_job_info(quotation_service):
    """The job describes its schedule."""
    info = QuotationJob(quotation_service).info

    assert info["schedule"] == JOB_SCHEDULE == "0 19 * * 1-5"
    assert info["timezone"] == "America/Sao_Paulo"
