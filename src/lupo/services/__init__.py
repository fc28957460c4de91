"""Service layer: ledger, portfolio, pricing and valuation."""
