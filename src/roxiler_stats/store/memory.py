"""In-memory transaction store.

Used when `STORE_BACKEND=memory` and throughout the tests. Records are plain
dicts carrying a `bson.ObjectId` under `_id`, the same shape MongoDB returns.
"""

from __future__ import annotations

import logging
import threading
from collections import Counter
from typing import Any, Iterable

from bson import ObjectId

from roxiler_stats.models import Transaction
from roxiler_stats.store.base import page_slice, search_predicate
from roxiler_stats.store.predicates import Predicate

log = logging.getLogger(__name__)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


class InMemoryTransactionStore:
    """List-backed store evaluating predicates in Python."""

    def __init__(self, documents: Iterable[dict[str, Any]] = ()) -> None:
        self._lock = threading.Lock()
        self._rows: tuple[dict[str, Any], ...] = ()
        docs = list(documents)
        if docs:
            self.replace_all(docs)

    def _filtered(self, predicate: Predicate) -> list[dict[str, Any]]:
        rows = self._rows
        return [row for row in rows if predicate.matches(row)]

    def count_matching(self, predicate: Predicate) -> int:
        return len(self._filtered(predicate))

    def sum_matching(self, predicate: Predicate, field: str) -> float:
        # $sum semantics: non-numeric values are ignored
        return sum(row[field] for row in self._filtered(predicate) if _is_number(row.get(field)))

    def search_paginated(
        self,
        text_query: str | None = None,
        page: int = 1,
        per_page: int = 10,
    ) -> tuple[list[Transaction], int]:
        matched = self._filtered(search_predicate(text_query))
        page_rows = page_slice(matched, page, per_page)
        return [Transaction.from_document(row) for row in page_rows], len(matched)

    def group_count_by(self, predicate: Predicate, field: str) -> list[tuple[Any, int]]:
        counts = Counter(row.get(field) for row in self._filtered(predicate))
        return list(counts.items())

    def replace_all(self, documents: Iterable[dict[str, Any]]) -> int:
        rows = []
        for doc in documents:
            row = dict(doc)
            row.setdefault("_id", ObjectId())
            rows.append(row)
        with self._lock:
            self._rows = tuple(rows)
        log.info("Replaced in-memory dataset with %d documents", len(rows))
        return len(rows)

    def ping(self) -> None:
        return None

    def close(self) -> None:
        return None
