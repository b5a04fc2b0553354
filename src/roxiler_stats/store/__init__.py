"""Transaction store accessors.

The store owns the physical storage handle; everything above it talks in
typed predicates (`store.predicates`) and the `TransactionStore` contract.
"""

from __future__ import annotations

from roxiler_stats.config import Settings
from roxiler_stats.store.base import TransactionStore
from roxiler_stats.store.memory import InMemoryTransactionStore
from roxiler_stats.store.mongo import MongoTransactionStore

__all__ = [
    "InMemoryTransactionStore",
    "MongoTransactionStore",
    "TransactionStore",
    "build_store",
]


def build_store(settings: Settings) -> TransactionStore:
    """Return the store backend selected by `settings.store_backend`."""
    if settings.store_backend == "memory":
        return InMemoryTransactionStore()
    return MongoTransactionStore.from_settings(settings)
