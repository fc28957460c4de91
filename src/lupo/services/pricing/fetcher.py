"""
Price fetcher - refreshes the latest quote of every tracked symbol.

Tracked symbols are the tickers of active positions plus one currency pair
per foreign currency ("EURUSD=X" for base USD). Each symbol is an
independent job on a bounded thread pool; the fetcher waits for all of
them. A failing symbol is logged and skipped, it never cancels the others,
so partial snapshots are normal (delisted or temporarily unavailable
symbols).

The base-currency identity quote ("USDUSD=X" = 1.0) is always included.
"""

from concurrent.futures import ThreadPoolExecutor, as_completed
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Callable, Iterable, Optional

from lupo.errors import QuoteFetchError
from lupo.services.pricing.models import PriceQuote, RefreshResult, currency_pair
from lupo.services.pricing.sources import IQuoteSource
from lupo.system import LoggerFactory

if TYPE_CHECKING:
    from lupo.services.portfolio.models import Position

logger = LoggerFactory.get_logger()


class PriceFetcher:
    """
    Concurrent, failure-isolating quote retrieval.

    Args:
        source: Quote source called once per symbol
        base_currency: Currency all valuations are normalized to
        max_workers: Maximum concurrent retrievals

    Example:
        >>> fetcher = PriceFetcher(YahooQuoteSource(timeout=10), base_currency="USD", max_workers=8)
        >>> result = fetcher.fetch(fetcher.symbols_for(active_positions, ["EUR", "GBP"]))
        >>> sorted(result.failures)
        ['DELISTED']
    """

    def __init__(self, source: IQuoteSource, base_currency: str = "USD", max_workers: int = 8):
        if max_workers < 1:
            raise ValueError(f"max_workers must be at least 1, got {max_workers}")
        self.source = source
        self.base_currency = base_currency.upper()
        self.max_workers = max_workers

    @property
    def identity_symbol(self) -> str:
        return currency_pair(self.base_currency, self.base_currency)

    def symbols_for(self, positions: Iterable["Position"], currencies: Iterable[str] = ()) -> list[str]:
        """
        Symbols to refresh for a set of positions.

        Args:
            positions: Active positions (their tickers and traded currencies)
            currencies: Fixed set of foreign currencies always refreshed

        Returns:
            Sorted unique symbols, tickers and currency pairs, base currency excluded
        """
        positions = list(positions)
        tickers = {p.ticker for p in positions if p.ticker}
        foreign = {c.upper() for c in currencies if c} | {p.currency for p in positions if p.currency}
        foreign.discard(self.base_currency)
        pairs = {currency_pair(c, self.base_currency) for c in foreign}
        return sorted(tickers | pairs)

    def fetch(self, symbols: Iterable[str], on_result: Optional[Callable[[str, bool], None]] = None) -> RefreshResult:
        """
        Retrieve the latest quote of every symbol.

        Results are keyed by symbol, so completion order does not matter.

        Args:
            symbols: Symbols to retrieve
            on_result: Called from the calling thread as each symbol completes,
                with the symbol and whether it succeeded

        Returns:
            RefreshResult with successful quotes (plus the identity quote) and failures
        """
        unique = sorted(set(symbols) - {self.identity_symbol})
        result = RefreshResult()
        logger.info("pricing.refresh_started", symbols=len(unique), max_workers=self.max_workers)

        if unique:
            with ThreadPoolExecutor(max_workers=min(self.max_workers, len(unique))) as executor:
                futures = {executor.submit(self.source.latest, symbol): symbol for symbol in unique}
                for future in as_completed(futures):
                    symbol = futures[future]
                    try:
                        quote = future.result()
                    except QuoteFetchError as e:
                        result.failures[symbol] = str(e)
                        logger.warning("pricing.fetch_failed", ticker=symbol, error=str(e))
                    except Exception as e:
                        error = QuoteFetchError(symbol, f"Unexpected error: {e}")
                        result.failures[symbol] = str(error)
                        logger.warning("pricing.fetch_failed", ticker=symbol, error=str(error))
                    else:
                        if quote.ticker != symbol:
                            quote = quote.model_copy(update={"ticker": symbol})
                        result.quotes[symbol] = quote

                    if on_result is not None:
                        on_result(symbol, symbol in result.quotes)

        result.quotes[self.identity_symbol] = PriceQuote(
            ticker=self.identity_symbol, price=1.0, date=datetime.now(timezone.utc)
        )
        logger.info("pricing.refresh_completed", fetched=len(result.quotes), failed=len(result.failures))
        return result
