"""Data models for price quotes."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, ConfigDict, field_validator

SNAPSHOT_DATE_FORMAT = "%d/%m/%Y"


def currency_pair(currency: str, base_currency: str) -> str:
    """Yahoo symbol of a currency rate against the base currency ("EUR", "USD" -> "EURUSD=X")."""
    return f"{currency}{base_currency}=X"


class PriceQuote(BaseModel):
    """
    Last known price of one symbol.

    Attributes:
        ticker: Quote symbol (instrument ticker or currency pair like EURUSD=X)
        price: Close price
        date: Quote timestamp (UTC)
    """

    ticker: str
    price: float
    date: datetime

    model_config = ConfigDict(frozen=True, allow_inf_nan=False)

    @field_validator("date", mode="before")
    @classmethod
    def parse_date(cls, v: Any) -> Any:
        """Snapshot dates are DD/MM/YYYY at midnight UTC."""
        if isinstance(v, str):
            try:
                return datetime.strptime(v.strip(), SNAPSHOT_DATE_FORMAT).replace(tzinfo=timezone.utc)
            except ValueError as e:
                raise ValueError(f"Invalid date '{v}', expected DD/MM/YYYY") from e
        return v

    @field_validator("date")
    @classmethod
    def ensure_utc(cls, v: datetime) -> datetime:
        """Naive timestamps are taken as UTC."""
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v.astimezone(timezone.utc)

    def age_days(self, now: datetime) -> float:
        """Age of the quote relative to now, in days."""
        return (now - self.date).total_seconds() / 86400


@dataclass
class RefreshResult:
    """
    Outcome of one price refresh.

    Attributes:
        quotes: Successful quotes keyed by symbol
        failures: Error message keyed by symbol
    """

    quotes: dict[str, PriceQuote] = field(default_factory=dict)
    failures: dict[str, str] = field(default_factory=dict)

    def __repr__(self) -> str:
        return f"RefreshResult(quotes={len(self.quotes)}, failures={sorted(self.failures)})"
