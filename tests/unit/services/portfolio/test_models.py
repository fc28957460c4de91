"""Unit tests for portfolio models."""

import pytest

from lupo.services.ledger import Instrument
from lupo.services.portfolio import CURRENCY_NOT_FOUND, PRICE_STALE, Position, PositionDelta


class TestPosition:
    """Test position state helpers."""

    def test_from_instrument_copies_metadata(self) -> None:
        instrument = Instrument(
            name="Nestle",
            asset="Equity",
            group="Staples",
            tags="dividend",
            riskyness="2",
            ticker="NESN.SW",
            traded_currency="CHF",
            underlying_currency="CHF",
        )

        position = Position.from_instrument(instrument)

        assert position.name == "Nestle"
        assert position.ticker == "NESN.SW"
        assert position.currency == "CHF"
        assert position.group == "Staples"
        assert not position.cash_equivalent
        assert position.units == 0.0
        assert position.percentage is None

    @pytest.mark.parametrize(
        "units, closed",
        [(0.0, True), (0.009, True), (-0.009, True), (0.01, False), (-0.5, False), (100, False)],
    )
    def test_is_closed(self, units: float, closed: bool) -> None:
        assert Position(name="X", units=units).is_closed() is closed

    def test_custom_threshold(self) -> None:
        assert Position(name="X", units=0.5).is_closed(threshold=1.0)

    def test_flags(self) -> None:
        position = Position(name="X")

        position.add_flag(PRICE_STALE)
        position.add_flag(CURRENCY_NOT_FOUND)

        assert position.error == "PO CN"
        assert position.flags == ["PO", "CN"]


class TestPositionDelta:
    """Test delta application."""

    def test_apply_delta(self) -> None:
        position = Position(name="AAA", units=10, cost=50)

        PositionDelta("AAA", units_delta=-4, revenue=24, fees=1).apply_to(position)

        assert position.units == 6
        assert position.cost == 50
        assert position.revenue == 24
        assert position.fees == 1

    def test_apply_factor(self) -> None:
        position = Position(name="AAA", units=10)

        PositionDelta("AAA", units_factor=3).apply_to(position)

        assert position.units == 30
