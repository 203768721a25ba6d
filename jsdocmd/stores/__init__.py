"""Stateful stores."""

from .aggregation import AggregationStore

__all__ = ["AggregationStore"]
