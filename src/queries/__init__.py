"""Summary query package."""

from src.queries.aggregator import filter_month, summarize, summarize_month

__all__ = ["filter_month", "summarize", "summarize_month"]
