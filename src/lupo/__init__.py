"""
Lupo - CLI Portfolio Manager

Rebuilds positions from a trade ledger, values them in a single base
currency and refreshes quotes from Yahoo Finance.
"""

from importlib.metadata import version

try:
    __version__ = version("lupo")
except Exception:
    __version__ = "0.0.0.dev"  # Fallback for development


__all__ = [
    "__version__",
]
