"""MongoDB-backed transaction store.

Wraps a single collection. Predicates compile to filter documents; sums and
groupings run as aggregation pipelines. Driver errors are translated into
`StoreUnavailable` / `StoreQueryFailed` so callers never see pymongo types.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any, Iterable, Iterator, List

from bson import ObjectId
from pymongo import ASCENDING, MongoClient
from pymongo.collection import Collection
from pymongo.errors import ConnectionFailure, PyMongoError

from roxiler_stats.config import Settings
from roxiler_stats.db import get_client, get_db
from roxiler_stats.errors import StoreQueryFailed, StoreUnavailable
from roxiler_stats.models import Transaction
from roxiler_stats.store.base import check_page, search_predicate
from roxiler_stats.store.predicates import Predicate

log = logging.getLogger(__name__)

BATCH_SIZE = 1000
STAGING_SUFFIX = "__staging"


def _chunks(data: List[dict[str, Any]], size: int) -> Iterator[List[dict[str, Any]]]:
    """Yield lists of documents in batches.

    Args:
        data: List of dict documents.
        size: Batch size.
    """
    for i in range(0, len(data), size):
        yield data[i : i + size]


@contextmanager
def _translate_errors(action: str) -> Iterator[None]:
    try:
        yield
    except ConnectionFailure as exc:
        raise StoreUnavailable(f"MongoDB unreachable while {action}: {exc}") from exc
    except PyMongoError as exc:
        raise StoreQueryFailed(f"MongoDB error while {action}: {exc}") from exc


class MongoTransactionStore:
    """Transaction store over one pymongo collection.

    Args:
        collection: Collection holding the transactions.
        client: Client to close on `close()`; pass it only when this store
            owns the connection.
    """

    def __init__(
        self,
        collection: Collection[dict[str, Any]],
        client: MongoClient | None = None,
    ) -> None:
        self._collection = collection
        self._client = client

    @classmethod
    def from_settings(cls, settings: Settings) -> "MongoTransactionStore":
        """Open a client for `settings` and return a store that owns it."""
        client = get_client(settings.mongo_uri, tls=settings.mongo_tls)
        db = get_db(client, settings.mongo_db)
        log.info("Using MongoDB collection %s.%s", settings.mongo_db, settings.mongo_collection)
        return cls(db[settings.mongo_collection], client=client)

    def count_matching(self, predicate: Predicate) -> int:
        with _translate_errors("counting transactions"):
            return int(self._collection.count_documents(predicate.to_mongo()))

    def sum_matching(self, predicate: Predicate, field: str) -> float:
        pipeline = [
            {"$match": predicate.to_mongo()},
            {"$group": {"_id": None, "total": {"$sum": f"${field}"}}},
        ]
        with _translate_errors(f"summing {field}"):
            rows = list(self._collection.aggregate(pipeline))
        if not rows:
            return 0
        return rows[0].get("total") or 0

    def search_paginated(
        self,
        text_query: str | None = None,
        page: int = 1,
        per_page: int = 10,
    ) -> tuple[list[Transaction], int]:
        offset = check_page(page, per_page)
        query = search_predicate(text_query).to_mongo()
        with _translate_errors("searching transactions"):
            cursor = (
                self._collection.find(query)
                .sort("_id", ASCENDING)
                .skip(offset)
                .limit(per_page)
            )
            docs = list(cursor)
            total = int(self._collection.count_documents(query))
        return [Transaction.from_document(d) for d in docs], total

    def group_count_by(self, predicate: Predicate, field: str) -> list[tuple[Any, int]]:
        pipeline = [
            {"$match": predicate.to_mongo()},
            {"$group": {"_id": f"${field}", "count": {"$sum": 1}}},
        ]
        with _translate_errors(f"grouping by {field}"):
            rows = list(self._collection.aggregate(pipeline))
        return [(row["_id"], int(row["count"])) for row in rows]

    def replace_all(self, documents: Iterable[dict[str, Any]]) -> int:
        """Replace the collection contents in one atomic swap.

        Documents are written to a staging collection which is then renamed
        over the live one (`dropTarget=True`). Readers see either the old or
        the new dataset. Each call stages into its own collection, so
        overlapping reseeds cannot drop or publish each other's partial
        writes; the last rename wins. On failure the staging collection is
        dropped and the live collection is left as it was.
        """
        docs = [dict(d) for d in documents]
        db = self._collection.database
        staging = db[f"{self._collection.name}{STAGING_SUFFIX}_{ObjectId()}"]

        with _translate_errors("replacing transactions"):
            if not docs:
                self._collection.drop()
                log.info("Replaced %s with an empty dataset", self._collection.name)
                return 0
            try:
                for batch in _chunks(docs, BATCH_SIZE):
                    staging.insert_many(batch, ordered=True)
                staging.rename(self._collection.name, dropTarget=True)
            except PyMongoError:
                log.warning("Replace failed; dropping %s", staging.name)
                staging.drop()
                raise

        log.info("Replaced %s with %d documents", self._collection.name, len(docs))
        return len(docs)

    def ping(self) -> None:
        with _translate_errors("pinging"):
            self._collection.database.command("ping")

    def close(self) -> None:
        if self._client is not None:
            self._client.close()
            self._client = None
