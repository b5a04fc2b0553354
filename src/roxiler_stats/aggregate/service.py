"""Report builders over the transaction store.

`AggregationService` implements the listing and the three monthly reports
(statistics, price histogram, category distribution) plus the combined report.
Every report filters on the calendar month of `dateOfSale`, any year.

Independent store queries (the ten histogram buckets, the three sub-reports
of the combined report) are fanned out with `dask.delayed` on the threaded
scheduler and joined; the first failure aborts the whole computation.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, cast
from typing import Any as TypingAny

from dask import delayed, compute  # type: ignore[attr-defined]

from roxiler_stats.aggregate.months import resolve_month
from roxiler_stats.errors import InvalidRequest
from roxiler_stats.models import (
    CategoryCount,
    CombinedReport,
    PriceRangeCount,
    Statistics,
    TransactionPage,
)
from roxiler_stats.store.base import TransactionStore
from roxiler_stats.store.predicates import FieldEquals, MonthEquals, PriceRange, all_of

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class PriceBucket:
    """Histogram bucket covering `minimum <= price < maximum`.

    Attributes:
        label: Range label returned to clients (e.g. "101-200").
        minimum: Inclusive lower bound.
        maximum: Exclusive upper bound, None for the open-ended last bucket.
    """
    label: str
    minimum: float
    maximum: float | None


# Lower bounds after the first start at 101, 201, ... so prices in
# [100, 101), [200, 201), ... [900, 901) fall in no bucket.
PRICE_BUCKETS: tuple[PriceBucket, ...] = (
    PriceBucket("0-100", 0, 100),
    PriceBucket("101-200", 101, 200),
    PriceBucket("201-300", 201, 300),
    PriceBucket("301-400", 301, 400),
    PriceBucket("401-500", 401, 500),
    PriceBucket("501-600", 501, 600),
    PriceBucket("601-700", 601, 700),
    PriceBucket("701-800", 701, 800),
    PriceBucket("801-900", 801, 900),
    PriceBucket("901-above", 901, None),
)


# Label for records stored without a category
UNCATEGORIZED = "uncategorized"


def _require_month(month: str | int | None) -> int:
    if month is None or (isinstance(month, str) and not month.strip()):
        raise InvalidRequest("Month is required")
    return resolve_month(month)


def _run_concurrently(*tasks: Any) -> tuple[Any, ...]:
    # `compute` is untyped in our environment; cast to Any before calling
    return cast(TypingAny, compute)(*tasks, scheduler="threads")


class AggregationService:
    """Listing and monthly reports built only from store primitives."""

    def __init__(self, store: TransactionStore) -> None:
        self._store = store

    @property
    def store(self) -> TransactionStore:
        return self._store

    def list_transactions(
        self,
        search: str | None = None,
        page: int = 1,
        per_page: int = 10,
    ) -> TransactionPage:
        """Return one page of transactions matching an optional search text.

        Args:
            search: Matched against title and description (case-insensitive)
                and, when numeric, against the exact price.
            page: 1-indexed page number.
            per_page: Page size.

        Raises:
            InvalidRequest: if `page` or `per_page` is below 1.
        """
        if page < 1 or per_page < 1:
            raise InvalidRequest("page and perPage must be positive integers")
        transactions, total = self._store.search_paginated(search, page, per_page)
        return TransactionPage(transactions=transactions, total=total)

    def compute_statistics(self, month: str | int) -> Statistics:
        """Return total sale amount and sold / not-sold counts for a month.

        The amount sums the price of every transaction dated in the month,
        sold or not; only the two counts look at `sold`.
        """
        in_month = MonthEquals(_require_month(month))
        total_amount = self._store.sum_matching(in_month, "price")
        sold = self._store.count_matching(all_of(in_month, FieldEquals("sold", True)))
        not_sold = self._store.count_matching(all_of(in_month, FieldEquals("sold", False)))
        return Statistics(
            total_sale_amount=total_amount or 0,
            total_sold_items=sold,
            total_not_sold_items=not_sold,
        )

    def _count_bucket(self, month_number: int, minimum: float, maximum: float | None) -> int:
        return self._store.count_matching(
            all_of(MonthEquals(month_number), PriceRange(minimum, maximum))
        )

    def compute_histogram(self, month: str | int) -> list[PriceRangeCount]:
        """Return the count of month transactions per fixed price bucket.

        Buckets are counted concurrently and returned in `PRICE_BUCKETS` order.
        """
        month_number = _require_month(month)
        tasks = [
            delayed(self._count_bucket)(month_number, b.minimum, b.maximum)
            for b in PRICE_BUCKETS
        ]
        counts = _run_concurrently(*tasks)
        log.debug("Histogram for month=%d: %s", month_number, counts)
        return [
            PriceRangeCount(range=b.label, count=int(c))
            for b, c in zip(PRICE_BUCKETS, counts)
        ]

    def compute_distribution(self, month: str | int) -> list[CategoryCount]:
        """Return the number of month transactions per category."""
        groups = self._store.group_count_by(MonthEquals(_require_month(month)), "category")
        return [
            CategoryCount(category=UNCATEGORIZED if key is None else str(key), count=count)
            for key, count in groups
        ]

    def compute_combined(self, month: str | int) -> CombinedReport:
        """Return statistics, histogram and distribution for one month.

        The three reports run concurrently and are joined; if any fails the
        whole call fails.

        Raises:
            InvalidRequest: if `month` is empty.
            InvalidMonth: if `month` does not name a month.
        """
        month_number = _require_month(month)
        statistics, bar_chart, pie_chart = _run_concurrently(
            delayed(self.compute_statistics)(month_number),
            delayed(self.compute_histogram)(month_number),
            delayed(self.compute_distribution)(month_number),
        )
        return CombinedReport(
            statistics=statistics,
            bar_chart=bar_chart,
            pie_chart=pie_chart,
        )
