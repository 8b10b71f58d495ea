"""Market quotation layer: provider client, refresh service and daily job."""

from fincontrol.quotes.provider import QuoteProvider, BrapiQuoteProvider
from fincontrol.quotes.service import QuotationService
from fincontrol.quotes.job import QuotationJob

__all__ = ["QuoteProvider", "BrapiQuoteProvider", "QuotationService", "QuotationJob"]
