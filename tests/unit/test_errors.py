"""Tests for the lupo error hierarchy."""

from pathlib import Path

import pytest

from lupo.errors import (
    LupoError,
    ParseError,
    QuoteFetchError,
    StoreIOError,
    UnknownCashAccountError,
    UnknownInstrumentError,
    format_error_chain,
)


class TestErrors:
    """Test error messages and attributes."""

    @pytest.mark.parametrize(
        "error",
        [
            StoreIOError("x"),
            ParseError("x"),
            UnknownInstrumentError("AAA"),
            UnknownCashAccountError("CashIB", "IB"),
            QuoteFetchError("AAA", "x"),
        ],
    )
    def test_hierarchy(self, error: LupoError) -> None:
        assert isinstance(error, LupoError)

    def test_parse_error_location(self) -> None:
        error = ParseError("units: bad number", path=Path("/home/me/trades.tsv"), line=7, row="IB\tx")

        assert str(error) == "trades.tsv:7: units: bad number (row: 'IB\\tx')"
        assert error.line == 7
        assert error.row == "IB\tx"

    def test_parse_error_without_location(self) -> None:
        assert str(ParseError("bad")) == "bad"

    def test_quote_fetch_error(self) -> None:
        error = QuoteFetchError("DELISTED", "Empty prices returned")

        assert error.ticker == "DELISTED"
        assert str(error) == "DELISTED: Empty prices returned"


class TestFormatErrorChain:
    """Test cause chain rendering."""

    def test_single_error(self) -> None:
        assert format_error_chain(UnknownInstrumentError("ZZZ")).startswith("error: Unknown instrument 'ZZZ'")

    def test_explicit_cause_chain(self) -> None:
        try:
            try:
                try:
                    raise FileNotFoundError("No such file: trades.tsv")
                except OSError as e:
                    raise StoreIOError("Cannot open trades.tsv") from e
            except StoreIOError as e:
                raise LupoError("Check failed") from e
        except LupoError as e:
            text = format_error_chain(e)

        assert text.splitlines() == [
            "error: Check failed",
            "  caused by: Cannot open trades.tsv",
            "  caused by: No such file: trades.tsv",
        ]

    def test_suppressed_context_is_hidden(self) -> None:
        try:
            try:
                raise KeyError("inner")
            except KeyError:
                raise StoreIOError("outer") from None
        except StoreIOError as e:
            assert format_error_chain(e) == "error: outer"
