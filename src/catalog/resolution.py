"""Query resolution: free-form shopping prompt -> validated ProductQuery.

Stages:
  A. route the prompt to one table of the closed catalog set
  B. enumerate that table's distinct sub-categories
  C. extract a structured filter and repair its sub_category
"""

from __future__ import annotations

import logging
import re

from pydantic import ValidationError

from src.catalog.llm import LanguageClassifier
from src.catalog.models import ExtractedFilters, ProductQuery, ResolvedQuery
from src.catalog.prompts import build_extraction_prompt, build_table_prompt, filter_schema
from src.catalog.store import CatalogStore
from src.errors import (
    CategoryFetchError,
    ExtractionParseError,
    PromptInputError,
    StoreError,
    TableRoutingError,
)
from src.pipeline_config import CatalogConfig

logger = logging.getLogger(__name__)

# A reply wrapped in one markdown fence, e.g. ```json\n{...}\n```
_FENCED_REPLY = re.compile(r"^```[a-zA-Z]*\s*\n?(?P<body>.*?)\n?\s*```$", re.DOTALL)


def normalize_category(value: str) -> str:
    return value.strip().lower()


def unwrap_code_fence(reply: str) -> str:
    """Strip a single surrounding markdown code fence, if present."""
    reply = reply.strip()
    match = _FENCED_REPLY.match(reply)
    return match.group("body").strip() if match else reply


def parse_filters(reply: str) -> ExtractedFilters:
    """Validate the classifier's extraction reply against the filter schema.

    The whole reply (minus an enclosing code fence) must be one JSON
    object; trailing commentary is rejected rather than cut away.

    Raises:
        ExtractionParseError: the reply is not a conforming JSON object.
    """
    try:
        return ExtractedFilters.model_validate_json(unwrap_code_fence(reply))
    except ValidationError as exc:
        raise ExtractionParseError(str(exc)) from exc


class QueryResolutionPipeline:
    """Resolve a shopping prompt into a filter over one catalog table."""

    def __init__(
        self,
        classifier: LanguageClassifier,
        store: CatalogStore,
        config: CatalogConfig,
    ) -> None:
        self._classifier = classifier
        self._store = store
        self._config = config

    def run(self, prompt: str | None) -> ResolvedQuery:
        if not prompt or not prompt.strip():
            raise PromptInputError()
        logger.info("User prompt: %s", prompt)

        table = self.route_table(prompt)
        categories = self.enumerate_categories(table)
        if not categories:
            logger.error("No categories fetched for table %s", table)
            raise CategoryFetchError()

        return self.extract_query(prompt, table, categories)

    def route_table(self, prompt: str) -> str:
        """Ask the classifier for a table; accept only an exact member of the closed set.

        Raises:
            ClassifierServiceError: the completion call failed.
            TableRoutingError: the reply is not a known table name.
        """
        reply = self._classifier.complete(build_table_prompt(prompt, self._config.tables))
        chosen = reply.strip()
        if not self._config.is_known_table(chosen):
            logger.warning("Table not in list. Received: %r", chosen)
            raise TableRoutingError(f"Classifier replied {chosen!r}")

        logger.info("Chosen table: %s", chosen)
        return chosen

    def enumerate_categories(self, table: str) -> list[str]:
        """Page through *table*'s category column and return its distinct values.

        Values are trimmed and lower-cased; first-seen order is kept so the
        first entry is stable for a given store ordering.  A store error
        ends pagination early with whatever was collected.
        """
        column = self._config.category_column
        page_size = self._config.category_page_size
        seen: dict[str, None] = {}
        rows_fetched = 0
        start = 0

        while True:
            try:
                page = self._store.fetch_page(table, column, start, start + page_size - 1)
            except StoreError as exc:
                logger.warning("Pagination fetch error on %s at row %d: %s", table, start, exc.detail)
                break
            if not page:
                break

            rows_fetched += len(page)
            for row in page:
                raw = row.get(column)
                if isinstance(raw, str) and raw.strip():
                    seen.setdefault(normalize_category(raw), None)
            start += page_size

        categories = list(seen)
        logger.info(
            "Fetched %d %s rows from %s; %d distinct", rows_fetched, column, table, len(categories)
        )
        return categories

    def extract_query(self, prompt: str, table: str, categories: list[str]) -> ResolvedQuery:
        """Extract filters for *table* and substitute an unknown sub_category.

        Raises:
            ClassifierServiceError: the completion call failed.
            ExtractionParseError: the reply did not match the filter schema.
        """
        include_size = self._config.supports(table, "size")
        extraction_prompt = build_extraction_prompt(prompt, table, categories, include_size)
        reply = self._classifier.complete_json(extraction_prompt, filter_schema(include_size))
        logger.debug("Raw extraction reply: %s", reply)

        filters = parse_filters(reply)

        sub_category = normalize_category(filters.sub_category) if filters.sub_category else None
        fallback = sub_category not in categories
        if fallback:
            logger.warning(
                "Classifier returned unknown category %r. Applying fallback.", filters.sub_category
            )
            sub_category = categories[0] if categories else None

        query = ProductQuery(
            table=table,
            source_table=filters.source_table or table,
            sub_category=sub_category,
            color=filters.color,
            brand=filters.brand,
            budget=filters.budget,
            min_rating=filters.min_rating,
            size=filters.size if include_size else None,
        )
        logger.info("Final parsed query: %s", query.model_dump())
        return ResolvedQuery(query=query, categories=categories, category_fallback=fallback)
