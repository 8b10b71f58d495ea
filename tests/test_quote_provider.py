"""Tests for the brapi quote provider."""

import json
import pytest
from decimal import Decimal
from http.client import IncompleteRead
from urllib.error import URLError

from fincontrol.domain.errors import ExternalFetchError
from fincontrol.quotes import provider as provider_module
from fincontrol.quotes.provider import BrapiQuoteProvider


class FakeResponse:
    """Minimal stand-in for the object urlopen returns."""

    def __init__(self, body: bytes):
        self.body = body

    def read(self):
        if isinstance(self.body, Exception):
            raise self.body
        return self.body

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        return False


@pytest.fixture
def http_calls(monkeypatch):
    """Replace urlopen; tests set ``http_calls.body`` or ``http_calls.error``."""

    class Recorder:
        body = b"{}"
        error = None
        calls = []

    recorder = Recorder()
    recorder.calls = []

    def fake_urlopen(request, timeout=None):
        recorder.calls.append((request, timeout))
        if recorder.error is not None:
            raise recorder.error
        return FakeResponse(recorder.body)

    monkeypatch.setattr(provider_module, "urlopen", fake_urlopen)
    return recorder


def test_build_url_defaults(monkeypatch):
    """The default API root is brapi.dev and no token is sent."""
    monkeypatch.delenv("FINCONTROL_QUOTE_API_URL", raising=False)
    monkeypatch.delenv("FINCONTROL_QUOTE_TOKEN", raising=False)

    provider = BrapiQuoteProvider()

    assert provider.build_url("PETR4") == "https://brapi.dev/api/quote/PETR4"


def test_build_url_with_token_from_env(monkeypatch):
    """Base URL and token can come from the environment."""
    monkeypatch.setenv("FINCONTROL_QUOTE_API_URL", "http://localhost:8080/api/")
    monkeypatch.setenv("FINCONTROL_QUOTE_TOKEN", "s3cret")

    provider = BrapiQuoteProvider()

    assert provider.build_url("BOVA11") == "http://localhost:8080/api/quote/BOVA11?token=s3cret"


def test_fetch_quote_parses_first_result(http_calls):
    """Price and changes are read from the first result."""
    http_calls.body = json.dumps(
        {
            "results": [
                {
                    "symbol": "PETR4",
                    "regularMarketPrice": 38.12,
                    "regularMarketChangePercent": -1.5,
                    "regularMarketChange": -0.58,
                }
            ]
        }
    ).encode()

    quote = BrapiQuoteProvider(base_url="https://example.test/api", timeout=3).fetch_quote("PETR4")

    assert quote.ticker == "PETR4"
    assert quote.price == Decimal("38.12")
    assert quote.percent_change == Decimal("-1.5")
    assert quote.absolute_change == Decimal("-0.58")
    request, timeout = http_calls.calls[0]
    assert request.full_url == "https://example.test/api/quote/PETR4"
    assert request.get_header("User-agent").startswith("fincontrol/")
    assert timeout == 3


def test_fetch_quote_missing_changes_default_to_zero(http_calls):
    """Missing change fields read as zero."""
    http_calls.body = b'{"results": [{"regularMarketPrice": 10}]}'

    quote = BrapiQuoteProvider(base_url="https://example.test").fetch_quote("ITSA4")

    assert quote.price == Decimal("10")
    assert quote.percent_change == Decimal("0")
    assert quote.absolute_change == Decimal("0")


@pytest.mark.parametrize(
    "body",
    [
        b'{"results": []}',
        b"{}",
        b'{"results": [{"symbol": "XPTO3"}]}',
        b"[]",
        b'{"results": {"symbol": "XPTO3", "regularMarketPrice": 10}}',
        b'{"results": "XPTO3"}',
    ],
)
def test_fetch_quote_without_data(http_calls, body):
    """Responses without a usable result mean no data."""
    http_calls.body = body

    assert BrapiQuoteProvider(base_url="https://example.test").fetch_quote("XPTO3") is None


def test_fetch_quote_network_error(http_calls):
    """Network errors become ExternalFetchError."""
    http_calls.error = URLError("connection refused")

    with pytest.raises(ExternalFetchError, match="connection refused"):
        BrapiQuoteProvider(base_url="https://example.test").fetch_quote("PETR4")


def test_fetch_quote_timeout(http_calls):
    """Timeouts become ExternalFetchError."""
    http_calls.error = TimeoutError("timed out")

    with pytest.raises(ExternalFetchError):
        BrapiQuoteProvider(base_url="https://example.test").fetch_quote("PETR4")


def test_fetch_quote_invalid_json(http_calls):
    """An unreadable body becomes ExternalFetchError."""
    http_calls.body = b"<html>Bad gateway</html>"

    with pytest.raises(ExternalFetchError, match="not valid JSON"):
        BrapiQuoteProvider(base_url="https://example.test").fetch_quote("PETR4")


def test_fetch_quote_truncated_body(http_calls):
    """A connection dropped mid-body becomes ExternalFetchError."""
    http_calls.body = IncompleteRead(b'{"res', 100)

    with pytest.raises(ExternalFetchError, match="Quote request failed"):
        BrapiQuoteProvider(base_url="https://example.test").fetch_quote("PETR4")
