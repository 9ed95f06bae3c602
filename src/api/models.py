"""Pydantic request/response schemas for the Voice Shopping API."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel

from src.catalog.models import ProductQuery, SearchResult


class ErrorResponse(BaseModel):
    """Body of every non-2xx response."""

    error: str
    detail: str | None = None


class TranscriptionResponse(BaseModel):
    """Response body for the /api/transcribe endpoint."""

    transcription: str


class SynthesisRequest(BaseModel):
    """Request body for the /tts endpoint.

    ``text`` is optional at the schema level so a missing value is
    reported as a 400 by the pipeline instead of a 422.
    """

    text: str | None = None


class SuggestRequest(BaseModel):
    """Request body for the /product-suggest endpoint."""

    prompt: str | None = None


class SuggestResponse(BaseModel):
    """Response body for the /product-suggest endpoint.

    ``category_fallback`` is true when the extracted sub_category was not
    in the table's catalog and was replaced by the catalog's first entry.
    """

    parsed: ProductQuery
    category_fallback: bool = False


class SearchRequest(BaseModel):
    """Request body for the /api/product-search endpoint.

    ``budget`` and ``min_rating`` accept numbers or numeric strings; other
    values are ignored.
    """

    table: str | None = None
    sub_category: str | None = None
    budget: Any = None
    color: str | None = None
    brand: str | None = None
    min_rating: Any = None
    size: str | None = None


class SearchResponse(BaseModel):
    """Response body for the /api/product-search endpoint."""

    results: list[SearchResult]
