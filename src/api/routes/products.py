"""Product endpoints: prompt-to-filter resolution and catalog search."""

from __future__ import annotations

import asyncio
from typing import Annotated

from fastapi import APIRouter, Depends

from src.api.deps import get_product_search, get_resolution_pipeline
from src.api.models import (
    ErrorResponse,
    SearchRequest,
    SearchResponse,
    SuggestRequest,
    SuggestResponse,
)
from src.catalog.resolution import QueryResolutionPipeline
from src.catalog.search import ProductSearch
from src.errors import ServiceError

router = APIRouter()


@router.post(
    "/product-suggest",
    response_model=SuggestResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def product_suggest(
    pipeline: Annotated[QueryResolutionPipeline, Depends(get_resolution_pipeline)],
    request: SuggestRequest | None = None,
) -> SuggestResponse:
    """Turn a free-form shopping request into a structured product filter.

    The request is routed to one catalog table, the table's categories are
    enumerated, and a filter is extracted whose sub_category is guaranteed
    to be one of them (see ``category_fallback``).
    """
    prompt = request.prompt if request else None
    try:
        resolved = await asyncio.to_thread(pipeline.run, prompt)
    except ServiceError:
        raise
    except Exception as exc:
        raise ServiceError(str(exc), error="Parsing failed") from exc

    return SuggestResponse(parsed=resolved.query, category_fallback=resolved.category_fallback)


@router.post(
    "/api/product-search",
    response_model=SearchResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def product_search(
    search: Annotated[ProductSearch, Depends(get_product_search)],
    request: SearchRequest | None = None,
) -> SearchResponse:
    """Search one catalog table with the filter produced by /product-suggest."""
    request = request or SearchRequest()
    try:
        results = await asyncio.to_thread(
            search.run,
            request.table,
            request.sub_category,
            budget=request.budget,
            color=request.color,
            brand=request.brand,
            min_rating=request.min_rating,
            size=request.size,
        )
    except ServiceError:
        raise
    except Exception as exc:
        raise ServiceError(error="Failed to fetch products") from exc

    return SearchResponse(results=results)
