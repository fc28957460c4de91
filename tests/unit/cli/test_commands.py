"""
Unit tests for lupo CLI commands.

Tests cover:
- Storage bootstrap and validation (init, check)
- Listings (trades, stocks)
- Valued views (port, report, total)
- Price refresh with a fake quote source
- Error reporting with exit status 1
"""

from datetime import datetime, timezone
from pathlib import Path
from unittest.mock import patch

import pytest
from click.testing import CliRunner

from lupo import __version__
from lupo.cli import context
from lupo.cli.main import main, resolve_log_level
from lupo.errors import QuoteFetchError
from lupo.services.pricing import PriceCache, PriceQuote

TODAY = datetime.now(timezone.utc)

TRADES = [
    ["IB", "2024/01/02", "TrIn", "CashIB", "1000", "1", "", "", "1"],
    ["IB", "2024/01/03", "Buy", "AAA", "10", "5", "1", "", "1"],
]


class FakeSource:
    """Quote source used in place of Yahoo Finance."""

    prices = {"AAA": 50.0, "EURUSD=X": 1.1}

    def __init__(self, **kwargs):
        pass

    def latest(self, ticker: str) -> PriceQuote:
        if ticker not in self.prices:
            raise QuoteFetchError(ticker, "Empty prices returned")
        return PriceQuote(ticker=ticker, price=self.prices[ticker], date=TODAY)


@pytest.fixture
def cli_runner(monkeypatch):
    """Fixture providing Click CLI test runner with wide rich consoles."""
    monkeypatch.setattr(context.console, "width", 200)
    monkeypatch.setattr(context.err_console, "width", 200)
    monkeypatch.delenv("LUPO_HOME", raising=False)
    return CliRunner()


@pytest.fixture
def config_file(tmp_path: Path) -> Path:
    """Fixture providing a minimal configuration file."""
    path = tmp_path / "lupo.yaml"
    path.write_text("pricing:\n  currencies: [EUR]\n", encoding="utf-8")
    return path


@pytest.fixture
def invoke(cli_runner: CliRunner, config_file: Path, home: Path):
    """Run a lupo command against the test home directory."""

    def _invoke(*args: str, directory: Path | None = None):
        return cli_runner.invoke(main, ["--config", str(config_file), "-d", str(directory or home), *args])

    return _invoke


@pytest.fixture
def priced_home(make_store, home: Path) -> Path:
    """Home with two trades and a fresh price snapshot."""
    store = make_store(TRADES)
    PriceCache(store.prices_path).write(
        [
            PriceQuote(ticker="AAA", price=50.0, date=TODAY),
            PriceQuote(ticker="USDUSD=X", price=1.0, date=TODAY),
        ]
    )
    return home


class TestMain:
    """Test the command group itself."""

    def test_version(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(main, ["--version"])

        assert result.exit_code == 0
        assert __version__ in result.output

    def test_invalid_config_file(self, cli_runner: CliRunner, tmp_path: Path) -> None:
        bad = tmp_path / "bad.yaml"
        bad.write_text("pricing:\n  max_workers: -1\n", encoding="utf-8")

        result = cli_runner.invoke(main, ["--config", str(bad), "check"])

        assert result.exit_code == 1
        assert "error: bad.yaml: Invalid configuration" in result.output
        assert "caused by:" in result.output

    @pytest.mark.parametrize(
        "configured, verbose, quiet, expected",
        [
            ("WARNING", 0, False, "WARNING"),
            ("WARNING", 1, False, "INFO"),
            ("WARNING", 2, False, "DEBUG"),
            ("WARNING", 5, False, "DEBUG"),
            ("INFO", 1, False, "DEBUG"),
            ("WARNING", 2, True, "ERROR"),
        ],
    )
    def test_resolve_log_level(self, configured: str, verbose: int, quiet: bool, expected: str) -> None:
        assert resolve_log_level(configured, verbose, quiet) == expected


class TestStorageCommands:
    """Test init and check."""

    def test_init_creates_files(self, invoke, tmp_path: Path) -> None:
        target = tmp_path / "fresh"

        result = invoke("init", directory=target)

        assert result.exit_code == 0
        assert "Portfolio initialized" in result.output
        assert (target / "stocks.tsv").exists()
        assert (target / "trades.tsv").exists()

    def test_init_force(self, invoke, make_store, home: Path) -> None:
        make_store(TRADES)

        result = invoke("init", "--force")

        assert result.exit_code == 0
        assert (home / "trades.tsv").read_text(encoding="utf-8").count("\n") == 1

    def test_check(self, invoke, make_store) -> None:
        make_store(TRADES)

        result = invoke("check")

        assert result.exit_code == 0
        assert "2 trades, 4 instruments" in result.output

    def test_check_missing_home(self, invoke, tmp_path: Path) -> None:
        result = invoke("check", directory=tmp_path / "missing")

        assert result.exit_code == 1
        assert "error: Can't find home directory" in result.output

    def test_check_reports_bad_row(self, invoke, make_store) -> None:
        make_store(TRADES + [["IB", "2024/13/45", "Buy", "AAA", "1", "5"]])

        result = invoke("check")

        assert result.exit_code == 1
        assert "trades.tsv:4" in result.output
        assert "expected YYYY/MM/DD" in result.output


class TestListingCommands:
    """Test trades and stocks."""

    def test_trades(self, invoke, make_store) -> None:
        make_store(TRADES)

        result = invoke("trades", "aaa")

        assert result.exit_code == 0
        assert "AAA" in result.output
        assert "CashIB" not in result.output

    def test_trades_none_found(self, invoke, make_store) -> None:
        make_store(TRADES)

        result = invoke("trades", "zzz")

        assert result.exit_code == 0
        assert "No trades found" in result.output

    def test_stocks(self, invoke, make_store) -> None:
        make_store([])

        result = invoke("stocks", "nes")

        assert result.exit_code == 0
        assert "NESN.SW" in result.output
        assert "CashIB" not in result.output


class TestPortfolioCommands:
    """Test port, report and total."""

    def test_port(self, invoke, priced_home: Path) -> None:
        result = invoke("port", "--sort", "amount", "--desc")

        assert result.exit_code == 0
        assert result.output.index("CashIB") < result.output.index("AAA")
        assert "500.00" in result.output
        assert "Total: 1,450.00 USD" in result.output
        assert "Nestle" not in result.output

    def test_port_all(self, invoke, priced_home: Path) -> None:
        result = invoke("port", "--all")

        assert result.exit_code == 0
        assert "Nestle" in result.output
        assert "CN" in result.output

    def test_port_without_snapshot_flags_missing_rate(self, invoke, make_store) -> None:
        make_store(TRADES)

        result = invoke("port")

        assert result.exit_code == 0
        assert "CN" in result.output

    def test_port_unknown_sort_field(self, invoke, priced_home: Path) -> None:
        result = invoke("port", "--sort", "colour")

        assert result.exit_code == 2

    def test_port_unknown_instrument(self, invoke, make_store) -> None:
        make_store([["IB", "2024/01/03", "Buy", "ZZZ", "10", "5"]])

        result = invoke("port")

        assert result.exit_code == 1
        assert "Unknown instrument 'ZZZ'" in result.output

    def test_report(self, invoke, priced_home: Path) -> None:
        result = invoke("report", "asset")

        assert result.exit_code == 0
        assert "Portfolio by asset" in result.output
        assert "Equity" in result.output
        assert "34.48%" in result.output

    def test_report_unknown_dimension(self, invoke, priced_home: Path) -> None:
        assert invoke("report", "sector").exit_code == 2

    def test_total(self, invoke, priced_home: Path) -> None:
        result = invoke("total")

        assert result.exit_code == 0
        assert result.output.strip() == "1,450.00 USD"


class TestPricesCommand:
    """Test the price refresh command."""

    def test_prices(self, invoke, make_store, home: Path) -> None:
        make_store(TRADES)

        with patch("lupo.services.portfolio.service.YahooQuoteSource", FakeSource):
            result = invoke("prices")

        assert result.exit_code == 0
        assert "Refreshing 2 symbol(s) against USD" in result.output
        assert "All prices updated" in result.output
        snapshot = PriceCache(home / "prices.tsv").load()
        assert set(snapshot) == {"AAA", "EURUSD=X", "USDUSD=X"}

    def test_prices_partial_failure(self, invoke, make_store, home: Path) -> None:
        make_store(TRADES)

        with patch("lupo.services.portfolio.service.YahooQuoteSource", FakeSource), patch.object(
            FakeSource, "prices", {"AAA": 50.0}
        ):
            result = invoke("prices")

        assert result.exit_code == 0
        assert "1 symbol(s) failed" in result.output
        assert "EURUSD=X" in result.output
        assert set(PriceCache(home / "prices.tsv").load()) == {"AAA", "USDUSD=X"}
