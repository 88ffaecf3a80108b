"""Aggregation queries package."""

from expense_tracker.queries.engine import AggregationEngine

__all__ = ["AggregationEngine"]
