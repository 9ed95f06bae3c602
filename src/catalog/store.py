"""Supabase-backed product catalog store."""

from __future__ import annotations

from typing import Any, Protocol, cast

import httpx
from postgrest.exceptions import APIError
from supabase import Client, create_client

from src.catalog.models import Predicate
from src.config import settings
from src.errors import StoreError


def get_supabase_client() -> Client:
    """Create and return a Supabase client from application settings."""
    return create_client(settings.supabase_url, settings.supabase_key)


class CatalogStore(Protocol):
    def fetch_page(self, table: str, column: str, start: int, end: int) -> list[dict[str, Any]]:
        """Return rows ``start..end`` (inclusive) of *column* where it is not null."""
        ...

    def search(self, table: str, predicates: list[Predicate]) -> list[dict[str, Any]]:
        """Return all rows of *table* matching every predicate."""
        ...


class SupabaseCatalogStore:
    """:class:`CatalogStore` over a Supabase (PostgREST) project."""

    def __init__(self, client: Client) -> None:
        self._client = client

    def fetch_page(self, table: str, column: str, start: int, end: int) -> list[dict[str, Any]]:
        try:
            result = (
                self._client.table(table)
                .select(column)
                .not_.is_(column, "null")
                .range(start, end)
                .execute()
            )
        except APIError as exc:
            raise StoreError(exc.message or str(exc)) from exc
        except httpx.HTTPError as exc:
            raise StoreError(f"Catalog request failed: {exc}") from exc
        # Supabase .data is typed as JSON (broad union); cast to concrete type.
        return cast(list[dict[str, Any]], result.data or [])

    def search(self, table: str, predicates: list[Predicate]) -> list[dict[str, Any]]:
        query = self._client.table(table).select("*")
        for predicate in predicates:
            # PredicateOp values are the builder method names (ilike / lte / gte)
            query = getattr(query, predicate.op.value)(predicate.column, predicate.value)
        try:
            result = query.execute()
        except APIError as exc:
            raise StoreError(exc.message or str(exc)) from exc
        except httpx.HTTPError as exc:
            raise StoreError(f"Catalog request failed: {exc}") from exc
        return cast(list[dict[str, Any]], result.data or [])
