"""Portfolio service - wires ledger, aggregation, pricing and valuation together.

Separates the portfolio operations from the CLI presentation layer.
"""

from datetime import datetime, timedelta
from typing import Callable, Optional

from lupo.services.ledger import CheckSummary, Instrument, LedgerStore, Trade
from lupo.services.portfolio.aggregator import PositionAggregator, Positions
from lupo.services.portfolio.models import Position
from lupo.services.pricing import PriceCache, PriceFetcher, RefreshResult, YahooQuoteSource
from lupo.services.valuation import GroupBy, GroupTotal, ValuationService, sort_positions
from lupo.system import LoggerFactory
from lupo.system.config import SystemConfig

logger = LoggerFactory.get_logger()


class PortfolioService:
    """
    CLI-level portfolio operations.

    Example:
        >>> service = PortfolioService.from_config(config)
        >>> service.check()
        CheckSummary(trades=42, instruments=12)
        >>> for position in service.positions(sort_by="amount", descending=True):
        ...     print(position.name, position.amount)
    """

    def __init__(
        self,
        store: LedgerStore,
        cache: PriceCache,
        config: SystemConfig,
        fetcher: Optional[PriceFetcher] = None,
    ):
        """
        Initialize portfolio service.

        Args:
            store: Ledger store of the portfolio home
            cache: Price snapshot of the portfolio home
            config: System configuration
            fetcher: Price fetcher, built from config with the Yahoo source when omitted
        """
        self.store = store
        self.cache = cache
        self.config = config
        self.fetcher = fetcher or PriceFetcher(
            YahooQuoteSource(period=config.pricing.period, timeout=config.pricing.timeout_seconds),
            base_currency=config.pricing.base_currency,
            max_workers=config.pricing.max_workers,
        )
        self.valuation = ValuationService(
            base_currency=config.pricing.base_currency,
            stale_after=timedelta(days=config.valuation.stale_after_days),
            closed_threshold=config.valuation.closed_threshold,
        )

    @classmethod
    def from_config(cls, config: SystemConfig, fetcher: Optional[PriceFetcher] = None) -> "PortfolioService":
        """Open the portfolio home named by the configuration."""
        store = LedgerStore.open(config.home)
        return cls(store, PriceCache(store.prices_path), config, fetcher=fetcher)

    @property
    def base_currency(self) -> str:
        return self.config.pricing.base_currency

    def check(self) -> CheckSummary:
        return self.store.check()

    def trades(self, name_substring: Optional[str] = None) -> list[Trade]:
        return self.store.trades(name_substring)

    def instruments(self, name_substring: Optional[str] = None) -> list[Instrument]:
        return self.store.instruments(name_substring)

    def aggregate(self) -> Positions:
        """Fold the ledger into one position per instrument."""
        aggregator = PositionAggregator(self.store.load_instruments(), self.config.valuation.closed_threshold)
        return aggregator.aggregate(self.store)

    def positions(
        self,
        all: bool = False,
        sort_by: Optional[str] = None,
        descending: bool = False,
        now: Optional[datetime] = None,
    ) -> list[Position]:
        """
        Valued positions against the cached price snapshot.

        Args:
            all: Include closed positions
            sort_by: Position field to sort by (registry order when None)
            descending: Reverse the sort
            now: Evaluation time for staleness flags

        Raises:
            ValueError: If sort_by is not a Position field
        """
        valued = self.valuation.value(self.aggregate().values(), self.cache.load(), include_closed=all, now=now)
        if sort_by:
            valued = sort_positions(valued, sort_by, descending=descending)
        return valued

    def report(self, dimension: GroupBy | str, now: Optional[datetime] = None) -> list[GroupTotal]:
        """Active positions summed by a report dimension."""
        return self.valuation.group(self.positions(now=now), dimension)

    def total(self, now: Optional[datetime] = None) -> float:
        """Portfolio value in the base currency."""
        return self.valuation.total(self.positions(now=now))

    def symbols_to_refresh(self) -> list[str]:
        """Tickers of active positions plus the configured currency pairs."""
        active = [p for p in self.aggregate().values() if not p.is_closed(self.config.valuation.closed_threshold)]
        return self.fetcher.symbols_for(active, self.config.pricing.currencies)

    def refresh_prices(
        self,
        symbols: Optional[list[str]] = None,
        on_result: Optional[Callable[[str, bool], None]] = None,
    ) -> RefreshResult:
        """
        Fetch fresh quotes and replace the snapshot.

        Symbols that fail are reported in the result and left out of the
        snapshot.

        Args:
            symbols: Symbols to fetch (symbols_to_refresh() when None)
            on_result: Per-symbol completion callback, see PriceFetcher.fetch
        """
        if symbols is None:
            symbols = self.symbols_to_refresh()

        result = self.fetcher.fetch(symbols, on_result=on_result)
        self.cache.write(result.quotes.values())

        if result.failures:
            logger.warning("portfolio.prices_partial", failed=sorted(result.failures))
        return result
