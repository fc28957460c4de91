"""Price cache - the last fetched price snapshot (prices.tsv).

The snapshot is a flat table with one row per symbol:

    ticker	price	date
    AAPL	189.25	18/10/2026
    EURUSD=X	1.0842	18/10/2026

It keeps no history: every refresh rewrites it completely. The new content
is written to a temporary file next to the snapshot, then moved over it.
"""

import csv
import os
import tempfile
from pathlib import Path
from typing import Iterable

from lupo.errors import StoreIOError
from lupo.services.ledger.store import parse_row, read_table
from lupo.services.pricing.models import SNAPSHOT_DATE_FORMAT, PriceQuote
from lupo.system import LoggerFactory

logger = LoggerFactory.get_logger()

PRICE_COLUMNS = {"ticker": "ticker", "price": "price", "date": "date"}
PRICES_HEADER = ["ticker", "price", "date"]


class PriceCache:
    """
    Loads and persists the price snapshot.

    Example:
        >>> cache = PriceCache(home / "prices.tsv")
        >>> quotes = cache.load()
        >>> cache.write(result.quotes.values())
    """

    def __init__(self, path: Path):
        self.path = Path(path)

    def load(self) -> dict[str, PriceQuote]:
        """
        Load the snapshot keyed by ticker.

        A missing snapshot (prices never refreshed) is an empty cache.

        Raises:
            ParseError: On a malformed row
        """
        if not self.path.exists():
            logger.info("pricing.snapshot_missing", path=str(self.path))
            return {}

        quotes: dict[str, PriceQuote] = {}
        for line_number, line, fields in read_table(self.path, PRICE_COLUMNS, {"ticker", "price", "date"}):
            quote = parse_row(PriceQuote, self.path, line_number, line, fields)
            quotes[quote.ticker] = quote

        logger.debug("pricing.snapshot_loaded", quotes=len(quotes))
        return quotes

    def write(self, quotes: Iterable[PriceQuote]) -> None:
        """
        Replace the snapshot with the given quotes, sorted by ticker.

        Raises:
            StoreIOError: If the snapshot cannot be written
        """
        quotes = sorted(quotes, key=lambda q: q.ticker)
        directory = self.path.parent
        try:
            fd, tmp_name = tempfile.mkstemp(prefix=f".{self.path.name}.", suffix=".tmp", dir=directory)
        except OSError as e:
            raise StoreIOError(f"Can't open price file in {directory}") from e

        tmp_path = Path(tmp_name)
        try:
            with os.fdopen(fd, "w", encoding="utf-8", newline="") as f:
                writer = csv.writer(f, delimiter="\t", lineterminator="\n")
                writer.writerow(PRICES_HEADER)
                for quote in quotes:
                    writer.writerow([quote.ticker, repr(quote.price), quote.date.strftime(SNAPSHOT_DATE_FORMAT)])
            os.replace(tmp_path, self.path)
        except OSError as e:
            tmp_path.unlink(missing_ok=True)
            raise StoreIOError(f"Error writing price file {self.path}") from e

        logger.info("pricing.snapshot_written", path=str(self.path), quotes=len(quotes))
