"""Quotation refresh service.

Reads the tickers of every active exchange-traded asset, fetches one quote
per ticker from the provider and writes the quote back onto the cached
snapshot of each matching asset.
"""

import logging
import time
from datetime import date, datetime, timedelta, UTC
from typing import Callable, Optional, Sequence

from sqlalchemy.exc import SQLAlchemyError

from fincontrol.database.base import Database
from fincontrol.domain.entities import (
    InvestmentAsset,
    Quote,
    QuotationRunResult,
    QuotationStatus,
    QUOTED_ASSET_TYPES,
)
from fincontrol.domain.errors import ExternalFetchError, NotFoundError, ValidationError
from fincontrol.quotes.provider import QuoteProvider

logger = logging.getLogger(__name__)

# Pause between consecutive provider requests, in seconds
REQUEST_DELAY = 1.0


def normalize_ticker(ticker: str) -> str:
    """Return ``ticker`` trimmed and upper case.

    Raises:
        ValidationError: If the ticker is empty
    """
    normalized = (ticker or "").strip().upper()
    if not normalized:
        raise ValidationError("ticker is required")
    return normalized


class QuotationService:
    """Service for refreshing and inspecting cached asset quotes."""

    def __init__(
        self,
        db: Database,
        provider: QuoteProvider,
        sleep: Callable[[float], None] = time.sleep,
        today: Callable[[], date] = date.today,
        clock: Callable[[], float] = time.monotonic,
        delay: float = REQUEST_DELAY,
    ):
        """Initialize quotation service.

        Args:
            db: Database instance
            provider: Quote provider
            sleep: Used to pause between provider requests
            today: Date stamped on written quotes
            clock: Monotonic clock used to time a run, in seconds
            delay: Seconds to wait between provider requests
        """
        self.db = db
        self.provider = provider
        self._sleep = sleep
        self._today = today
        self._clock = clock
        self.delay = delay

    def get_active_tickers(self) -> list[str]:
        """Return distinct tickers of active stock, REIT and ETF assets of every owner."""
        return self.db.list_quoted_tickers(QUOTED_ASSET_TYPES)

    def fetch_quotes(self, tickers: Sequence[str]) -> tuple[list[Quote], int]:
        """Fetch quotes one ticker at a time.

        Returns:
            Tuple of (quotes fetched, tickers that failed or had no data)
        """
        quotes = []
        failed = 0
        logger.info("Fetching quotes for %d ticker(s)", len(tickers))
        for position, ticker in enumerate(tickers):
            try:
                quote = self.provider.fetch_quote(ticker)
            except ExternalFetchError as e:
                logger.error("Failed to fetch quote for %s: %s", ticker, e)
                failed += 1
            else:
                if quote is None:
                    failed += 1
                else:
                    quotes.append(quote)
            if position < len(tickers) - 1:
                self._sleep(self.delay)
        logger.info("Quotes fetched: %d/%d", len(quotes), len(tickers))
        return quotes, failed

    def write_quotes(self, quotes: Sequence[Quote]) -> tuple[int, int]:
        """Write quotes onto the matching active assets.

        Returns:
            Tuple of (quotes written to at least one asset, quotes that failed to write)
        """
        updated = 0
        failed = 0
        quote_date = self._today()
        for quote in quotes:
            try:
                rows = self.db.update_asset_quote(
                    ticker=quote.ticker,
                    price=quote.price,
                    percent_change=quote.percent_change,
                    absolute_change=quote.absolute_change,
                    quote_date=quote_date,
                )
            except SQLAlchemyError as e:
                logger.error("Failed to store quote for %s: %s", quote.ticker, e)
                failed += 1
                continue
            if rows > 0:
                updated += 1
                logger.info(
                    "%s: %.2f (%+.2f%%)", quote.ticker, quote.price, quote.percent_change
                )
            else:
                logger.warning("No active asset found for ticker %s", quote.ticker)
        return updated, failed

    def _elapsed_ms(self, started: float) -> int:
        return int(round((self._clock() - started) * 1000))

    def refresh_all(self) -> QuotationRunResult:
        """Fetch and store quotes for every active quoted asset.

        Individual ticker failures are logged and counted; only a failure to
        enumerate the tickers fails the run.
        """
        started = self._clock()
        try:
            tickers = self.get_active_tickers()
        except SQLAlchemyError as e:
            logger.error("Could not list tickers to refresh: %s", e)
            return QuotationRunResult(
                success=False,
                message=str(e),
                duration_ms=self._elapsed_ms(started),
                timestamp=datetime.now(UTC),
            )

        if not tickers:
            logger.info("No assets with a ticker to update")
            return QuotationRunResult(
                success=True,
                message="No assets with a ticker to update",
                duration_ms=self._elapsed_ms(started),
                timestamp=datetime.now(UTC),
            )

        logger.info("Refreshing quotes for: %s", ", ".join(tickers))
        quotes, fetch_failed = self.fetch_quotes(tickers)
        updated, write_failed = self.write_quotes(quotes)
        result = QuotationRunResult(
            success=True,
            total=len(tickers),
            updated=updated,
            failed=fetch_failed + write_failed,
            duration_ms=self._elapsed_ms(started),
            timestamp=datetime.now(UTC),
            message="Quotes updated",
        )
        logger.info(
            "Quote refresh finished in %dms: %d updated, %d failed",
            result.duration_ms,
            result.updated,
            result.failed,
        )
        return result

    def live_quote(self, ticker: str) -> Quote:
        """Fetch a quote without storing it.

        Raises:
            ValidationError: If the ticker is empty
            NotFoundError: If the provider has no quote for the ticker
            ExternalFetchError: If the request fails
        """
        ticker = normalize_ticker(ticker)
        quote = self.provider.fetch_quote(ticker)
        if quote is None:
            raise NotFoundError(f"No quote available for '{ticker}'")
        return quote

    def refresh_ticker(self, ticker: str) -> tuple[Quote, int]:
        """Fetch one ticker's quote and store it.

        The ticker does not need to belong to any asset; the quote is still
        returned with zero assets updated.

        Returns:
            Tuple of (quote, number of assets updated)
        """
        quote = self.live_quote(ticker)
        updated = self.db.update_asset_quote(
            ticker=quote.ticker,
            price=quote.price,
            percent_change=quote.percent_change,
            absolute_change=quote.absolute_change,
            quote_date=self._today(),
        )
        if updated == 0:
            logger.warning("No active asset found for ticker %s", quote.ticker)
        return quote, updated

    def status(self) -> QuotationStatus:
        """Report quote coverage over active assets with a ticker."""
        return self.db.get_quotation_status(self._today())

    def outdated_assets(self, max_age_days: int = 1, today: Optional[date] = None) -> list[InvestmentAsset]:
        """List assets whose quote is missing or older than ``max_age_days``."""
        reference = today or self._today()
        return self.db.list_outdated_assets(reference - timedelta(days=max_age_days))
