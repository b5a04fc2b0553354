"""Monthly report builders.

This package turns the flat transaction collection into listings, monthly
totals, a fixed-bucket price histogram and a category distribution, using
only the store's query primitives.
"""

from roxiler_stats.aggregate.months import resolve_month
from roxiler_stats.aggregate.service import PRICE_BUCKETS, AggregationService

__all__ = ["PRICE_BUCKETS", "AggregationService", "resolve_month"]
