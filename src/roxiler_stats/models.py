"""Pydantic models for seed records, stored transactions and reports.

Python attributes are snake_case; JSON names are camelCase to match the
public API (`dateOfSale`, `totalSaleAmount`, `barChart`, ...).
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class _ApiModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class SeedTransaction(_ApiModel):
    """Schema for one record of the remote seed dump.

    Unknown keys (the dump carries its own numeric `id`) are ignored; the
    store assigns identifiers on insert.
    """
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")
    title: str
    description: str = ""
    price: float
    category: str
    image: str | None = None
    sold: bool
    date_of_sale: datetime

    @field_validator("date_of_sale")
    @classmethod
    def normalize_date_of_sale(cls, value: datetime) -> datetime:
        return _as_utc(value)

    def to_document(self) -> dict[str, Any]:
        """Return the document stored for this record (JSON field names)."""
        return self.model_dump(by_alias=True)


class Transaction(_ApiModel):
    """A stored transaction as returned by listings.

    Attributes:
        id: Store-assigned identifier (hex string).
        title: Product title.
        description: Product description.
        price: Sale price.
        category: Grouping label.
        image: Optional product image URL from the seed dump.
        sold: Whether the item was sold.
        date_of_sale: Sale timestamp in UTC.
    """
    id: str
    title: str
    description: str = ""
    price: float
    category: str
    image: str | None = None
    sold: bool
    date_of_sale: datetime

    @field_validator("date_of_sale")
    @classmethod
    def normalize_date_of_sale(cls, value: datetime) -> datetime:
        return _as_utc(value)

    @classmethod
    def from_document(cls, doc: dict[str, Any]) -> "Transaction":
        """Build a Transaction from a stored document carrying `_id`."""
        data = {k: v for k, v in doc.items() if k != "_id"}
        data["id"] = str(doc["_id"])
        return cls.model_validate(data)


class TransactionPage(_ApiModel):
    """One page of a listing plus the total number of matches."""
    transactions: list[Transaction]
    total: int = Field(..., ge=0)


class Statistics(_ApiModel):
    """Monthly totals."""
    total_sale_amount: float
    total_sold_items: int = Field(..., ge=0)
    total_not_sold_items: int = Field(..., ge=0)


class PriceRangeCount(_ApiModel):
    """Count of month-matching transactions inside one price bucket."""
    range: str
    count: int = Field(..., ge=0)


class CategoryCount(_ApiModel):
    """Count of month-matching transactions for one category."""
    category: str
    count: int = Field(..., ge=0)


class CombinedReport(_ApiModel):
    """Statistics, histogram and distribution for the same month."""
    statistics: Statistics
    bar_chart: list[PriceRangeCount]
    pie_chart: list[CategoryCount]
