"""Ledger store - instrument registry and trade ledger.

Key components:
- LedgerStore: Reads stocks.tsv / trades.tsv, folds trades, bootstraps storage
- Models: Instrument, Trade, TradeType, CheckSummary
"""

from lupo.services.ledger.models import CheckSummary, Instrument, Trade, TradeType, cash_account_name
from lupo.services.ledger.store import PRICES_FILE, STOCKS_FILE, TRADES_FILE, LedgerStore

__all__ = [
    "LedgerStore",
    "Instrument",
    "Trade",
    "TradeType",
    "CheckSummary",
    "cash_account_name",
    "PRICES_FILE",
    "STOCKS_FILE",
    "TRADES_FILE",
]
