"""Data models for query resolution and catalog search."""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, field_validator


def as_number(value: Any) -> float | None:
    """Return *value* as a finite float, or None if it is not numeric."""
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


class ExtractedFilters(BaseModel):
    """Filter object the classifier must return during extraction.

    Unknown keys are ignored; every listed field may be null.  The strings
    ``""`` and ``"null"`` are read as null because models emit them for
    unmentioned fields, and a non-numeric ``budget`` or ``min_rating``
    (e.g. ``"4.5+"``) is dropped rather than failing the reply.
    """

    model_config = ConfigDict(extra="ignore")

    source_table: str | None = None
    sub_category: str | None = None
    color: str | None = None
    brand: str | None = None
    budget: float | None = None
    min_rating: float | None = None
    size: str | None = None

    @field_validator("*", mode="before")
    @classmethod
    def _blank_to_none(cls, value: Any) -> Any:
        if isinstance(value, str) and value.strip().lower() in ("", "null", "none"):
            return None
        return value

    @field_validator("budget", "min_rating", mode="before")
    @classmethod
    def _numeric_or_none(cls, value: Any) -> float | None:
        return as_number(value)


class ProductQuery(BaseModel):
    """Validated structured filter returned by ``/product-suggest``."""

    table: str
    source_table: str | None = None
    sub_category: str | None = None
    color: str | None = None
    brand: str | None = None
    budget: float | None = None
    min_rating: float | None = None
    size: str | None = None


@dataclass
class ResolvedQuery:
    """Outcome of the query resolution pipeline."""

    query: ProductQuery
    categories: list[str]
    category_fallback: bool = False


class PredicateOp(StrEnum):
    """Store operators used by catalog search."""

    ILIKE = "ilike"
    LTE = "lte"
    GTE = "gte"


@dataclass(frozen=True)
class Predicate:
    """One filter pushed down to the catalog store."""

    column: str
    op: PredicateOp
    value: str | float


class SearchResult(BaseModel):
    """Public projection of a catalog row."""

    id: Any = None
    name: str | None = None
    price: float | None = None
    image: str | None = None
    sub_category: str | None = None
