"""Seed loading: validate dump records and replace the stored dataset.

Module notes:
- Every record is validated against `SeedTransaction` before the store is
  touched; one bad record aborts the load.
- `dateOfSale` is normalized to UTC so month extraction matches MongoDB's
  `$month` in every backend.
"""
from __future__ import annotations

import logging
from typing import Any, Iterable

from pydantic import ValidationError

from roxiler_stats.config import Settings
from roxiler_stats.errors import SeedValidationError
from roxiler_stats.ingest.fetch_seed import fetch_seed_records
from roxiler_stats.models import SeedTransaction
from roxiler_stats.store.base import TransactionStore

log = logging.getLogger(__name__)


def validate_records(records: Iterable[Any]) -> list[dict[str, Any]]:
    """Validate raw dump records and return store documents.

    Raises:
        SeedValidationError: naming the index of the first invalid record.
    """
    docs: list[dict[str, Any]] = []
    for i, rec in enumerate(records):
        try:
            docs.append(SeedTransaction.model_validate(rec).to_document())
        except ValidationError as exc:
            raise SeedValidationError(f"Seed record #{i} is invalid: {exc}") from exc
    return docs


def load_seed(store: TransactionStore, records: Iterable[Any]) -> int:
    """Replace the store's dataset with validated `records`.

    Returns:
        Number of documents stored.
    """
    docs = validate_records(records)
    inserted = store.replace_all(docs)
    log.info("Seed load complete: %d transactions", inserted)
    return inserted


def initialize_from_source(store: TransactionStore, settings: Settings) -> int:
    """Fetch the configured seed dump and load it into `store`."""
    records = fetch_seed_records(settings.seed_url, timeout=settings.seed_timeout)
    return load_seed(store, records)
