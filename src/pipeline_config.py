"""Pipeline configuration: provider enums and immutable pipeline settings."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Mapping


class LLMProvider(str, Enum):
    """Available completion backends for table routing and filter extraction."""

    GROQ = "groq"
    ANTHROPIC = "anthropic"


class STTProvider(str, Enum):
    """Available speech recognition backends."""

    SARVAM = "sarvam"
    ASSEMBLYAI = "assemblyai"


DEFAULT_TABLES: tuple[str, ...] = (
    "Groceries",
    "cloth_accessories",
    "Electronics",
    "body_care_diet",
    "pet",
    "Household",
    "school_utensils",
)

# Columns that may be filtered on, per table
DEFAULT_TABLE_SCHEMAS: Mapping[str, frozenset[str]] = MappingProxyType(
    {
        "Groceries": frozenset({"sub_category"}),
        "cloth_accessories": frozenset({"sub_category", "color", "size"}),
        "Electronics": frozenset({"sub_category"}),
        "body_care_diet": frozenset({"sub_category", "color"}),
        "pet": frozenset({"sub_category"}),
        "Household": frozenset({"sub_category"}),
        "school_utensils": frozenset({"sub_category"}),
    }
)


@dataclass(frozen=True)
class CatalogConfig:
    """Immutable description of the product catalog.

    Holds the closed set of table names the classifier may route to and
    the per-table allow-list of filterable columns.  Table names are
    matched exactly (case-sensitive).
    """

    tables: tuple[str, ...] = DEFAULT_TABLES
    table_schemas: Mapping[str, frozenset[str]] = field(
        default_factory=lambda: DEFAULT_TABLE_SCHEMAS
    )
    category_column: str = "sub_category"
    category_page_size: int = 1000

    def is_known_table(self, table: str | None) -> bool:
        return table is not None and table in self.tables

    def allowed_fields(self, table: str) -> frozenset[str]:
        return self.table_schemas.get(table, frozenset())

    def supports(self, table: str, column: str) -> bool:
        return column in self.allowed_fields(table)


@dataclass(frozen=True)
class ChunkingConfig:
    """Bounds used when splitting text for the synthesis service."""

    max_chars: int = 300
    min_break_offset: int = 100
    terminator: str = "."


@dataclass(frozen=True)
class VoiceParams:
    """Fixed voice configuration sent with every synthesis call."""

    model: str = "bulbul:v2"
    speaker: str = "vidya"
    target_language: str = "en-IN"
    pace: float = 0.7


DEFAULT_CATALOG_CONFIG = CatalogConfig()
