"""Catalog search: compose store predicates, apply brand filter, project rows."""

from __future__ import annotations

import logging
from typing import Any

from src.catalog.models import Predicate, PredicateOp, SearchResult, as_number
from src.catalog.store import CatalogStore
from src.errors import SearchInputError, StoreError
from src.pipeline_config import CatalogConfig

logger = logging.getLogger(__name__)


def _contains(value: str) -> str:
    return f"%{value.strip().lower()}%"


def build_predicates(
    config: CatalogConfig,
    table: str,
    sub_category: str,
    budget: Any = None,
    color: str | None = None,
    min_rating: Any = None,
    size: str | None = None,
) -> list[Predicate]:
    """Translate search inputs into store predicates.

    ``color`` and ``size`` are dropped unless the table's allow-list has
    them.  A zero or missing budget adds no price bound.
    """
    predicates = [Predicate("sub_category", PredicateOp.ILIKE, _contains(sub_category))]

    price_cap = as_number(budget)
    if price_cap:
        predicates.append(Predicate("price", PredicateOp.LTE, price_cap))

    if color and color.strip() and config.supports(table, "color"):
        predicates.append(Predicate("color", PredicateOp.ILIKE, _contains(color)))

    rating_floor = as_number(min_rating)
    if rating_floor is not None:
        predicates.append(Predicate("rating", PredicateOp.GTE, rating_floor))

    if size and size.strip() and config.supports(table, "size"):
        predicates.append(Predicate("size", PredicateOp.ILIKE, _contains(size)))

    return predicates


def filter_by_brand(rows: list[dict[str, Any]], brand: str | None) -> list[dict[str, Any]]:
    """Keep rows whose name contains *brand* (case-insensitive)."""
    if not brand:
        return rows
    needle = brand.lower()
    return [row for row in rows if needle in str(row.get("name") or "").lower()]


def project(row: dict[str, Any]) -> SearchResult:
    return SearchResult(
        id=row.get("id"),
        name=row.get("name"),
        price=row.get("price"),
        image=row.get("image_url"),
        sub_category=row.get("sub_category"),
    )


class ProductSearch:
    """Run a validated product filter against the catalog store."""

    def __init__(self, store: CatalogStore, config: CatalogConfig) -> None:
        self._store = store
        self._config = config

    def run(
        self,
        table: str | None,
        sub_category: str | None,
        budget: Any = None,
        color: str | None = None,
        brand: str | None = None,
        min_rating: Any = None,
        size: str | None = None,
    ) -> list[SearchResult]:
        """Search *table* and return projected results.

        Raises:
            SearchInputError: table or sub_category is missing, or the table is unknown.
            StoreError: the store query failed.
        """
        logger.info(
            "Product search input: table=%s sub_category=%s budget=%s color=%s brand=%s",
            table,
            sub_category,
            budget,
            color,
            brand,
        )
        if not table or not sub_category or not sub_category.strip():
            logger.warning("Missing table or category.")
            raise SearchInputError()
        if not self._config.is_known_table(table):
            raise SearchInputError(f"Unknown table {table!r}", error="Unknown table")

        predicates = build_predicates(
            self._config, table, sub_category, budget, color, min_rating, size
        )
        try:
            rows = self._store.search(table, predicates)
        except StoreError as exc:
            logger.error("Catalog fetch failed for table %s: %s", table, exc.detail)
            raise

        results = [project(row) for row in filter_by_brand(rows, brand)]
        logger.info("Product IDs: %s", [r.id for r in results])
        logger.info("Fetched products: %d", len(results))
        return results
