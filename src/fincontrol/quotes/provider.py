"""Quote provider client for the brapi.dev quote API."""

import json
import logging
import os
from abc import ABC, abstractmethod
from datetime import datetime, UTC
from decimal import Decimal, InvalidOperation
from http.client import HTTPException
from typing import Optional
from urllib.error import URLError
from urllib.parse import quote as url_quote, urlencode
from urllib.request import Request, urlopen

from fincontrol import __version__
from fincontrol.domain.entities import Quote
from fincontrol.domain.errors import ExternalFetchError

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://brapi.dev/api"
DEFAULT_TIMEOUT = 10.0


class QuoteProvider(ABC):
    """Source of live market quotes."""

    @abstractmethod
    def fetch_quote(self, ticker: str) -> Optional[Quote]:
        """Fetch the current quote for ``ticker``.

        Returns:
            The quote, or None when the provider has no data for the ticker

        Raises:
            ExternalFetchError: If the request fails or the response is unreadable
        """
        pass


def _number(value) -> Decimal:
    """Read a numeric field, treating missing or malformed values as 0."""
    if value is None or isinstance(value, bool):
        return Decimal("0")
    try:
        number = Decimal(str(value))
    except (InvalidOperation, ValueError):
        return Decimal("0")
    return number if number.is_finite() else Decimal("0")


class BrapiQuoteProvider(QuoteProvider):
    """Fetches quotes with ``GET {base_url}/quote/{TICKER}``.

    One attempt per call with a fixed timeout; retrying is left to the
    next scheduled run.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        token: Optional[str] = None,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        """Initialize the provider.

        Args:
            base_url: API root. If None, checks FINCONTROL_QUOTE_API_URL
                environment variable, then defaults to https://brapi.dev/api
            token: Optional API token. If None, checks FINCONTROL_QUOTE_TOKEN
            timeout: Request timeout in seconds
        """
        if base_url is None:
            base_url = os.environ.get("FINCONTROL_QUOTE_API_URL", DEFAULT_API_URL)
        if token is None:
            token = os.environ.get("FINCONTROL_QUOTE_TOKEN") or None
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.timeout = timeout

    def build_url(self, ticker: str) -> str:
        """Return the request URL for ``ticker``."""
        url = f"{self.base_url}/quote/{url_quote(ticker, safe='')}"
        if self.token:
            url += "?" + urlencode({"token": self.token})
        return url

    def _get_json(self, url: str):
        request = Request(url, headers={"User-Agent": f"fincontrol/{__version__}"})
        try:
            with urlopen(request, timeout=self.timeout) as response:
                body = response.read()
        except (URLError, HTTPException, TimeoutError, OSError) as e:
            raise ExternalFetchError(f"Quote request failed: {e}") from e
        try:
            return json.loads(body.decode("utf-8"))
        except (UnicodeDecodeError, ValueError) as e:
            raise ExternalFetchError(f"Quote response is not valid JSON: {e}") from e

    def fetch_quote(self, ticker: str) -> Optional[Quote]:
        """Fetch the current quote for ``ticker``.

        Returns:
            The quote built from ``results[0]``, or None when the response
            carries no results or no market price

        Raises:
            ExternalFetchError: If the request fails or the response is unreadable
        """
        logger.debug("Fetching quote for %s", ticker)
        payload = self._get_json(self.build_url(ticker))

        results = payload.get("results") if isinstance(payload, dict) else None
        if not isinstance(results, list) or not results or not isinstance(results[0], dict):
            logger.warning("No quote data returned for %s", ticker)
            return None

        data = results[0]
        if data.get("regularMarketPrice") is None:
            logger.warning("Quote for %s has no market price", ticker)
            return None

        return Quote(
            ticker=ticker,
            price=_number(data.get("regularMarketPrice")),
            percent_change=_number(data.get("regularMarketChangePercent")),
            absolute_change=_number(data.get("regularMarketChange")),
            fetched_at=datetime.now(UTC),
        )
