"""Typed query predicates shared by every store backend.

Each predicate compiles itself to a MongoDB filter document (`to_mongo`) and
evaluates itself against a plain record dict (`matches`), so the Mongo and
in-memory stores agree on filtering semantics.
"""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Mapping


class Predicate(ABC):
    """Base class for store predicates."""

    @abstractmethod
    def to_mongo(self) -> dict[str, Any]:
        """Return the MongoDB filter document for this predicate."""

    @abstractmethod
    def matches(self, record: Mapping[str, Any]) -> bool:
        """Return whether `record` satisfies this predicate."""


@dataclass(frozen=True)
class MonthEquals(Predicate):
    """Calendar month of `field` equals `month`, whatever the year."""
    month: int
    field: str = "dateOfSale"

    def __post_init__(self) -> None:
        if not 1 <= self.month <= 12:
            raise ValueError(f"month must be within 1..12, got {self.month}")

    def to_mongo(self) -> dict[str, Any]:
        return {"$expr": {"$eq": [{"$month": f"${self.field}"}, self.month]}}

    def matches(self, record: Mapping[str, Any]) -> bool:
        value = record.get(self.field)
        if not isinstance(value, datetime):
            return False
        # $month reads the UTC month; naive values are already UTC
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc)
        return value.month == self.month


@dataclass(frozen=True)
class FieldEquals(Predicate):
    """Plain equality on one field."""
    field: str
    value: Any

    def to_mongo(self) -> dict[str, Any]:
        return {self.field: self.value}

    def matches(self, record: Mapping[str, Any]) -> bool:
        return self.field in record and record[self.field] == self.value


@dataclass(frozen=True)
class PriceRange(Predicate):
    """Half-open numeric range `minimum <= field < maximum`.

    `maximum=None` leaves the range unbounded above.
    """
    minimum: float
    maximum: float | None = None
    field: str = "price"

    def to_mongo(self) -> dict[str, Any]:
        bounds: dict[str, Any] = {"$gte": self.minimum}
        if self.maximum is not None:
            bounds["$lt"] = self.maximum
        return {self.field: bounds}

    def matches(self, record: Mapping[str, Any]) -> bool:
        value = record.get(self.field)
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return False
        if value < self.minimum:
            return False
        return self.maximum is None or value < self.maximum


@dataclass(frozen=True)
class TextMatch(Predicate):
    """Case-insensitive substring match on any of `fields`.

    The text is matched literally; regex metacharacters are escaped.
    """
    text: str
    fields: tuple[str, ...] = ("title", "description")

    def to_mongo(self) -> dict[str, Any]:
        pattern = re.escape(self.text)
        return {"$or": [{f: {"$regex": pattern, "$options": "i"}} for f in self.fields]}

    def matches(self, record: Mapping[str, Any]) -> bool:
        needle = self.text.lower()
        return any(needle in str(record.get(f) or "").lower() for f in self.fields)


@dataclass(frozen=True)
class AllOf(Predicate):
    """Conjunction. An empty conjunction matches every record."""
    predicates: tuple[Predicate, ...] = ()

    def to_mongo(self) -> dict[str, Any]:
        if not self.predicates:
            return {}
        if len(self.predicates) == 1:
            return self.predicates[0].to_mongo()
        return {"$and": [p.to_mongo() for p in self.predicates]}

    def matches(self, record: Mapping[str, Any]) -> bool:
        return all(p.matches(record) for p in self.predicates)


@dataclass(frozen=True)
class AnyOf(Predicate):
    """Disjunction of at least one predicate."""
    predicates: tuple[Predicate, ...]

    def __post_init__(self) -> None:
        if not self.predicates:
            raise ValueError("AnyOf needs at least one predicate")

    def to_mongo(self) -> dict[str, Any]:
        if len(self.predicates) == 1:
            return self.predicates[0].to_mongo()
        return {"$or": [p.to_mongo() for p in self.predicates]}

    def matches(self, record: Mapping[str, Any]) -> bool:
        return any(p.matches(record) for p in self.predicates)


MATCH_ALL = AllOf()


def all_of(*predicates: Predicate) -> AllOf:
    return AllOf(tuple(predicates))


def any_of(*predicates: Predicate) -> AnyOf:
    return AnyOf(tuple(predicates))
