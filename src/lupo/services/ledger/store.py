"""Ledger store - reads the instrument registry and the trade ledger.

Both files are tab-separated with a header row. Parsing rules:
  - Surrounding whitespace is trimmed from every cell
  - Lines starting with '#' and blank lines are skipped
  - Ragged rows are tolerated: missing trailing cells are blank, extra cells ignored
  - Header names are matched case-insensitively

Layout of the portfolio home directory:

    home/
      ├── stocks.tsv   (instrument registry)
      ├── trades.tsv   (append-only trade ledger)
      └── prices.tsv   (last price snapshot, see PriceCache)
"""

import csv
import shutil
from pathlib import Path
from typing import Callable, Iterator, TypeVar

from pydantic import BaseModel, ValidationError

from lupo.errors import ParseError, StoreIOError
from lupo.services.ledger.models import CheckSummary, Instrument, Trade
from lupo.system import LoggerFactory

logger = LoggerFactory.get_logger()

TRADES_FILE = "trades.tsv"
STOCKS_FILE = "stocks.tsv"
PRICES_FILE = "prices.tsv"

TRADES_HEADER = ["Account", "Date", "Type", "Stock", "Units", "Price", "Fees", "Split", "Currency"]
STOCKS_HEADER = ["Name", "Asset", "Group", "Tags", "Riskyness", "Ticker", "TradedCurrency", "CurrencyUnderlying"]

# Lower-cased header cell -> model field
INSTRUMENT_COLUMNS = {
    "name": "name",
    "asset": "asset",
    "group": "group",
    "tags": "tags",
    "riskyness": "riskyness",
    "ticker": "ticker",
    "tradedcurrency": "traded_currency",
    "currencyunderlying": "underlying_currency",
}
TRADE_COLUMNS = {
    "account": "account",
    "date": "date",
    "type": "type",
    "stock": "stock",
    "units": "units",
    "price": "price",
    "fees": "fees",
    "split": "split",
    "currency": "currency",
}

A = TypeVar("A")
M = TypeVar("M", bound=BaseModel)


def _split_row(line: str) -> list[str]:
    return [cell.strip() for cell in next(csv.reader([line], delimiter="\t"))]


def _validation_message(error: ValidationError) -> str:
    parts = []
    for err in error.errors():
        loc = ".".join(str(p) for p in err["loc"]) or "row"
        parts.append(f"{loc}: {err['msg']}")
    return "; ".join(parts)


def read_table(path: Path, columns: dict[str, str], required: set[str]) -> Iterator[tuple[int, str, dict[str, str]]]:
    """
    Stream a tab-separated table as field dictionaries.

    Args:
        path: File to read
        columns: Lower-cased header name -> field name
        required: Field names the header must provide

    Yields:
        (line_number, raw_line, fields) for every data row

    Raises:
        StoreIOError: If the file cannot be opened
        ParseError: If a line is not valid UTF-8 or the header lacks a required column
    """
    try:
        handle = path.open("rb")
    except OSError as e:
        raise StoreIOError(f"Cannot open {path}") from e

    with handle:
        header: list[str | None] | None = None
        for line_number, raw in enumerate(handle, start=1):
            try:
                line = raw.decode("utf-8").rstrip("\r\n")
            except UnicodeDecodeError as e:
                raise ParseError(f"Invalid UTF-8 at byte {e.start}", path=path, line=line_number) from e
            if not line.strip() or line.lstrip().startswith("#"):
                continue

            cells = _split_row(line)
            if header is None:
                header = [columns.get(cell.lower()) for cell in cells]
                missing = required - {h for h in header if h}
                if missing:
                    raise ParseError(
                        f"Missing column(s) {sorted(missing)} in header", path=path, line=line_number, row=line
                    )
                continue

            fields = {name: value for name, value in zip(header, cells) if name is not None}
            yield line_number, line, fields


def parse_row(model: type[M], path: Path, line_number: int, line: str, fields: dict[str, str]) -> M:
    try:
        return model(**fields)
    except ValidationError as e:
        raise ParseError(_validation_message(e), path=path, line=line_number, row=line) from e


class LedgerStore:
    """
    Read-only access to the portfolio files in a home directory.

    Example:
        >>> store = LedgerStore.open(Path("~/.local/share/lupo").expanduser())
        >>> instruments = store.load_instruments()
        >>> count = store.fold_trades(0, lambda acc, trade: acc + 1)
    """

    def __init__(self, home_dir: Path):
        self.home_dir = Path(home_dir)

    @property
    def trades_path(self) -> Path:
        return self.home_dir / TRADES_FILE

    @property
    def stocks_path(self) -> Path:
        return self.home_dir / STOCKS_FILE

    @property
    def prices_path(self) -> Path:
        return self.home_dir / PRICES_FILE

    @classmethod
    def open(cls, home_dir: Path) -> "LedgerStore":
        """
        Open an existing portfolio directory.

        Raises:
            StoreIOError: If the directory does not exist
        """
        home_dir = Path(home_dir)
        if not home_dir.is_dir():
            raise StoreIOError(f"Can't find home directory {home_dir} (run 'lupo init' first)")
        return cls(home_dir)

    @classmethod
    def create(cls, home_dir: Path, force: bool = False) -> "LedgerStore":
        """
        Create the portfolio directory and empty ledger files.

        Existing files are left untouched unless force is set, in which case
        the whole directory is removed first.

        Args:
            home_dir: Portfolio directory
            force: Wipe the existing directory

        Raises:
            StoreIOError: If the directory or files cannot be created
        """
        home_dir = Path(home_dir)
        if force and home_dir.is_dir():
            try:
                shutil.rmtree(home_dir)
            except OSError as e:
                raise StoreIOError(f"Could not remove portfolio directory {home_dir}") from e
            logger.info("ledger.directory_removed", path=str(home_dir))

        try:
            home_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StoreIOError(f"Can't create portfolio directory at {home_dir}") from e

        store = cls(home_dir)
        store._create_file_if_not_exist(store.stocks_path, STOCKS_HEADER)
        store._create_file_if_not_exist(store.trades_path, TRADES_HEADER)
        return store

    def _create_file_if_not_exist(self, path: Path, header: list[str]) -> None:
        try:
            with path.open("x", encoding="utf-8", newline="") as f:
                f.write("\t".join(header) + "\n")
        except FileExistsError:
            logger.warning("ledger.file_exists", path=str(path))
            return
        except OSError as e:
            raise StoreIOError(f"Cannot write to file {path}") from e
        logger.info("ledger.file_created", path=str(path))

    # ==================== Instrument registry ====================

    def load_instruments(self) -> dict[str, Instrument]:
        """
        Load the instrument registry keyed by name.

        Raises:
            StoreIOError: If stocks.tsv cannot be opened
            ParseError: On a malformed row or a duplicate name
        """
        instruments: dict[str, Instrument] = {}
        for line_number, line, fields in read_table(self.stocks_path, INSTRUMENT_COLUMNS, {"name"}):
            instrument = parse_row(Instrument, self.stocks_path, line_number, line, fields)
            if instrument.name in instruments:
                raise ParseError(
                    f"Duplicate instrument name '{instrument.name}'", path=self.stocks_path, line=line_number, row=line
                )
            instruments[instrument.name] = instrument

        logger.debug("ledger.instruments_loaded", count=len(instruments))
        return instruments

    def instruments(self, name_substring: str | None = None) -> list[Instrument]:
        """Registry entries whose name contains the substring (case-insensitive), sorted by name."""
        needle = (name_substring or "").lower()
        return sorted(
            (i for i in self.load_instruments().values() if needle in i.name.lower()),
            key=lambda i: i.name,
        )

    # ==================== Trade ledger ====================

    def iter_trades(self) -> Iterator[Trade]:
        """
        Stream trades in file order.

        Raises:
            StoreIOError: If trades.tsv cannot be opened
            ParseError: On the first malformed row
        """
        required = {"account", "date", "type", "stock", "units"}
        for line_number, line, fields in read_table(self.trades_path, TRADE_COLUMNS, required):
            yield parse_row(Trade, self.trades_path, line_number, line, fields)

    def fold_trades(self, initial: A, reducer: Callable[[A, Trade], A]) -> A:
        """
        Fold the ledger in file order.

        Args:
            initial: Starting accumulator
            reducer: Called as reducer(acc, trade), returns the next accumulator

        Returns:
            Final accumulator
        """
        acc = initial
        for trade in self.iter_trades():
            acc = reducer(acc, trade)
        return acc

    def trades(self, name_substring: str | None = None) -> list[Trade]:
        """Trades whose instrument name contains the substring (case-insensitive), in file order."""
        needle = (name_substring or "").lower()

        def keep(acc: list[Trade], trade: Trade) -> list[Trade]:
            if needle in trade.stock.lower():
                acc.append(trade)
            return acc

        return self.fold_trades([], keep)

    def check(self) -> CheckSummary:
        """
        Parse both tables completely and count their rows.

        Returns:
            CheckSummary(trades, instruments)
        """
        instruments = self.load_instruments()
        trade_count = self.fold_trades(0, lambda count, _trade: count + 1)
        summary = CheckSummary(trades=trade_count, instruments=len(instruments))
        logger.info("ledger.checked", trades=summary.trades, instruments=summary.instruments)
        return summary
