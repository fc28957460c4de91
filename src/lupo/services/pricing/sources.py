"""
Quote sources - where the price fetcher gets its latest closes from.

IQuoteSource is the contract; YahooQuoteSource is the built-in
implementation on top of yfinance. Tests plug in their own source.
"""

import math
from datetime import timezone
from typing import Protocol

import yfinance as yf  # type: ignore[import-untyped]

from lupo.errors import QuoteFetchError
from lupo.services.pricing.models import PriceQuote
from lupo.system import LoggerFactory

logger = LoggerFactory.get_logger()


class IQuoteSource(Protocol):
    """
    Protocol for quote sources.

    latest() is called from worker threads, one call per symbol, so
    implementations must be safe to call concurrently.

    Examples:
        >>> class FixedSource:
        ...     def latest(self, ticker: str) -> PriceQuote:
        ...         return PriceQuote(ticker=ticker, price=1.0, date=datetime.now(timezone.utc))
    """

    def latest(self, ticker: str) -> PriceQuote:
        """
        Most recent close for a symbol.

        Raises:
            QuoteFetchError: On lookup/network error or when no data is returned
        """
        ...


class YahooQuoteSource:
    """
    Yahoo Finance quote source.

    Requests a short daily history window and keeps the last bar, so the
    quote date tells how fresh the price is (weekends, delisted symbols).

    Args:
        period: History window (yfinance period string)
        timeout: Per-request timeout in seconds
    """

    def __init__(self, period: str = "5d", timeout: float = 10.0):
        self.period = period
        self.timeout = timeout

    def latest(self, ticker: str) -> PriceQuote:
        try:
            history = yf.Ticker(ticker).history(period=self.period, timeout=self.timeout, auto_adjust=False)
        except Exception as e:
            raise QuoteFetchError(ticker, f"Error retrieving prices: {e}") from e

        if history is None or history.empty:
            raise QuoteFetchError(ticker, "Empty prices returned")

        close = float(history["Close"].iloc[-1])
        if not math.isfinite(close):
            raise QuoteFetchError(ticker, "Last close is missing")

        timestamp = history.index[-1].to_pydatetime()
        if timestamp.tzinfo is None:
            timestamp = timestamp.replace(tzinfo=timezone.utc)

        logger.debug("pricing.quote_fetched", ticker=ticker, price=close, date=timestamp.date().isoformat())
        return PriceQuote(ticker=ticker, price=close, date=timestamp)
