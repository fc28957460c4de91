"""Valuation and reporting of aggregated positions."""

from lupo.services.valuation.service import GroupBy, GroupTotal, ValuationService, sort_positions

__all__ = ["GroupBy", "GroupTotal", "ValuationService", "sort_positions"]
