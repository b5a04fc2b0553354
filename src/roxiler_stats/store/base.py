"""Store contract shared by the Mongo and in-memory backends."""

from __future__ import annotations

import math
from typing import Any, Iterable, Protocol, Sequence

from roxiler_stats.models import Transaction
from roxiler_stats.store.predicates import FieldEquals, MATCH_ALL, Predicate, TextMatch, any_of


class TransactionStore(Protocol):
    def count_matching(self, predicate: Predicate) -> int:
        """Return the number of records satisfying `predicate`."""

    def sum_matching(self, predicate: Predicate, field: str) -> float:
        """Return the sum of `field` over matching records (0 when none match)."""

    def search_paginated(
        self,
        text_query: str | None = None,
        page: int = 1,
        per_page: int = 10,
    ) -> tuple[list[Transaction], int]:
        """Return one page of matching records in insertion order and the total match count."""

    def group_count_by(self, predicate: Predicate, field: str) -> list[tuple[Any, int]]:
        """Return `(key, count)` pairs for matching records grouped by `field`."""

    def replace_all(self, documents: Iterable[dict[str, Any]]) -> int:
        """Replace the whole dataset and return the number of inserted records."""

    def ping(self) -> None:
        """Raise `StoreUnavailable` when the store cannot be reached."""

    def close(self) -> None:
        """Release the storage handle."""


def parse_price(text: str) -> float | None:
    """Return `text` as a finite number, or None when it is not one."""
    try:
        value = float(text.strip())
    except ValueError:
        return None
    return value if math.isfinite(value) else None


def search_predicate(text_query: str | None) -> Predicate:
    """Build the listing filter for an optional free-text query.

    Title or description containing the text (case-insensitive), or price
    equal to the text when it parses as a number. No query matches all.
    """
    if text_query is None or not text_query.strip():
        return MATCH_ALL
    text = text_query.strip()
    parts: list[Predicate] = [TextMatch(text)]
    price = parse_price(text)
    if price is not None:
        parts.append(FieldEquals("price", price))
    return any_of(*parts)


def check_page(page: int, per_page: int) -> int:
    """Validate pagination arguments and return the record offset."""
    if page < 1 or per_page < 1:
        raise ValueError(f"page and per_page must be >= 1, got page={page} per_page={per_page}")
    return (page - 1) * per_page


def page_slice(rows: Sequence[Any], page: int, per_page: int) -> Sequence[Any]:
    offset = check_page(page, per_page)
    return rows[offset : offset + per_page]
