from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

import pytest

from roxiler_stats.aggregate.service import AggregationService
from roxiler_stats.config import Settings
from roxiler_stats.store.memory import InMemoryTransactionStore


def make_doc(
    title: str,
    price: float,
    month: int,
    sold: bool = True,
    category: str = "electronics",
    year: int = 2022,
    description: str = "",
) -> dict[str, Any]:
    return {
        "title": title,
        "description": description,
        "price": price,
        "category": category,
        "image": None,
        "sold": sold,
        "dateOfSale": datetime(year, month, 15, 10, 30, tzinfo=timezone.utc),
    }


SAMPLE_DOCS = [
    make_doc("Phone case", 50, 3, sold=True, category="electronics", description="Hard shell"),
    make_doc("Cotton Shirt", 100.5, 3, sold=False, category="men's clothing", year=2021),
    make_doc("Backpack", 109.95, 3, sold=True, category="men's clothing", description="Fits 15 inch laptops"),
    make_doc("Gold ring", 901, 3, sold=False, category="jewelery", year=2023),
    make_doc("SSD drive", 200, 3, sold=True, category="electronics"),
    make_doc("Monitor", 999.99, 3, sold=True, category="electronics"),
    make_doc("Rain jacket", 39.99, 7, sold=False, category="women's clothing", description="Waterproof shirt"),
    make_doc("Silver chain", 168, 7, sold=True, category="jewelery"),
    make_doc("TV", 0, 12, sold=False, category="electronics"),
    make_doc("Earrings", 10.99, 1, sold=True, category="jewelery"),
    make_doc("Blouse", 9.85, 1, sold=False, category="women's clothing"),
    make_doc("Hard drive", 64, 10, sold=True, category="electronics"),
]


@pytest.fixture
def store() -> InMemoryTransactionStore:
    return InMemoryTransactionStore(SAMPLE_DOCS)


@pytest.fixture
def service(store: InMemoryTransactionStore) -> AggregationService:
    return AggregationService(store)


@pytest.fixture
def doc_factory():
    return make_doc


@pytest.fixture
def settings() -> Settings:
    return Settings(
        mongo_uri="mongodb://localhost:27017",
        mongo_db="roxiler_test",
        mongo_collection="transactions",
        mongo_tls=False,
        store_backend="memory",
        seed_url="https://seed.example.test/product_transaction.json",
        seed_timeout=5.0,
        host="127.0.0.1",
        port=3000,
        cors_allow_origins=("*",),
        log_path=None,
        log_level="INFO",
    )
