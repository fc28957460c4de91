"""Pricing - quote snapshot cache and concurrent quote refresh.

Key components:
- PriceCache: Loads/atomically replaces prices.tsv
- PriceFetcher: Bounded fan-out / join-all quote retrieval
- IQuoteSource / YahooQuoteSource: Quote source contract and yfinance implementation
- Models: PriceQuote, RefreshResult
"""

from lupo.services.pricing.cache import PriceCache
from lupo.services.pricing.fetcher import PriceFetcher
from lupo.services.pricing.models import PriceQuote, RefreshResult, currency_pair
from lupo.services.pricing.sources import IQuoteSource, YahooQuoteSource

__all__ = [
    "PriceCache",
    "PriceFetcher",
    "IQuoteSource",
    "YahooQuoteSource",
    "PriceQuote",
    "RefreshResult",
    "currency_pair",
]
