"""Data models for the ledger store.

Defines the two source-of-truth tables:
- Instrument: One row of the instrument registry (stocks.tsv)
- Trade: One row of the trade ledger (trades.tsv)
- TradeType: Kind of trade event
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, NamedTuple

from pydantic import BaseModel, ConfigDict, Field, field_validator

CASH_PREFIX = "Cash"
DATE_FORMAT = "%Y/%m/%d"


class TradeType(str, Enum):
    """Kind of trade event, as written in the Type column."""

    BUY = "Buy"
    SELL = "Sell"
    TRANSFER_IN = "TrIn"
    TRANSFER_OUT = "TrOut"
    DIVIDEND = "Div"
    SPLIT = "Split"

    @classmethod
    def _missing_(cls, value: object) -> "TradeType | None":
        if isinstance(value, str):
            lowered = value.strip().lower()
            for member in cls:
                if member.value.lower() == lowered:
                    return member
        return None


def cash_account_name(account: str) -> str:
    """Name of the cash position funding an account ("IB" -> "CashIB")."""
    return f"{CASH_PREFIX}{account}"


class Instrument(BaseModel):
    """
    One tradable name from the instrument registry.

    Attributes:
        name: Unique key referenced by trades
        asset: Asset class (Equity, Bond, Cash, ...)
        group: Free grouping label
        tags: Free-text tags (comma or space separated)
        riskyness: Risk bucket
        ticker: External quote symbol, None when the instrument is not quoted
        traded_currency: Currency the instrument is quoted in
        underlying_currency: Currency of the economic exposure

    Example:
        >>> Instrument(name="AAA", asset="Equity", ticker="AAA", traded_currency="USD")
    """

    name: str = Field(min_length=1)
    asset: str = ""
    group: str = ""
    tags: str = ""
    riskyness: str = ""
    ticker: str | None = None
    traded_currency: str = ""
    underlying_currency: str = ""

    model_config = ConfigDict(frozen=True)

    @field_validator("ticker", mode="before")
    @classmethod
    def blank_ticker_is_none(cls, v: Any) -> Any:
        """Blank Ticker cell means the instrument is not quoted."""
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("traded_currency", "underlying_currency")
    @classmethod
    def upper_currency(cls, v: str) -> str:
        """Currency codes are compared upper case."""
        return v.strip().upper()

    @property
    def is_cash(self) -> bool:
        """True for cash-account buckets (CashIB, CashBank, ...)."""
        return self.name.startswith(CASH_PREFIX)

    @property
    def tag_list(self) -> list[str]:
        """Tags split on commas and whitespace."""
        return [t for t in self.tags.replace(",", " ").split() if t]

    @property
    def is_cash_equivalent(self) -> bool:
        """Cash-like holdings always price at 1.0 in their currency."""
        return self.asset.strip().lower() == "cash" or any(t.lower() == "cash" for t in self.tag_list)


class Trade(BaseModel):
    """
    One trade event from the ledger.

    Attributes:
        account: Account identifier; its cash bucket is "Cash" + account
        date: Trade date at midnight UTC
        type: Kind of event
        stock: Instrument name (must exist in the registry)
        units: Unit quantity
        price: Unit price (None when blank)
        fees: Fee in trade currency (None when blank)
        split: Split ratio (only used by Split events)
        currency: Multiplier converting trade currency into base currency
    """

    account: str
    date: datetime
    type: TradeType
    stock: str = Field(min_length=1)
    units: float
    price: float | None = None
    fees: float | None = None
    split: float = 1.0
    currency: float = 1.0

    model_config = ConfigDict(frozen=True, allow_inf_nan=False)

    @field_validator("date", mode="before")
    @classmethod
    def parse_date(cls, v: Any) -> Any:
        """Parse YYYY/MM/DD at midnight UTC."""
        if isinstance(v, str):
            try:
                return datetime.strptime(v.strip(), DATE_FORMAT).replace(tzinfo=timezone.utc)
            except ValueError as e:
                raise ValueError(f"Invalid date '{v}', expected YYYY/MM/DD") from e
        return v

    @field_validator("type", mode="before")
    @classmethod
    def parse_type(cls, v: Any) -> Any:
        """Accept trade types case-insensitively (buy, BUY, Buy)."""
        if isinstance(v, str):
            try:
                return TradeType(v)
            except ValueError as e:
                allowed = "|".join(t.value for t in TradeType)
                raise ValueError(f"Unknown trade type '{v}', expected one of {allowed}") from e
        return v

    @field_validator("price", "fees", mode="before")
    @classmethod
    def blank_is_none(cls, v: Any) -> Any:
        """Blank optional cells are 'not given'."""
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("split", "currency", mode="before")
    @classmethod
    def blank_is_one(cls, v: Any) -> Any:
        """Blank ratio cells default to 1.0."""
        if v is None or (isinstance(v, str) and not v.strip()):
            return 1.0
        return v

    @property
    def amount(self) -> float:
        """units x price x currency multiplier (missing price counts as 0)."""
        return self.units * (self.price or 0.0) * self.currency

    @property
    def fee_amount(self) -> float:
        """fees x currency multiplier (missing fee counts as 0)."""
        return (self.fees or 0.0) * self.currency


class CheckSummary(NamedTuple):
    """Row counts reported by the check command."""

    trades: int
    instruments: int
