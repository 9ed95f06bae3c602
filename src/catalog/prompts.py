"""Prompt templates and the structured-output schema for query resolution."""

from __future__ import annotations

from typing import Any

TABLE_PROMPT = """\
You are a product assistant. Choose the best matching table from:
{tables}
User said: "{prompt}"
Strictly Return only exact table name or "Unknown".
Return only exact table name from the list above (case-sensitive). Do not add punctuation."""

EXTRACTION_PROMPT = """\
You are a smart product filter extractor.
User query: "{prompt}"
Available categories:
{categories}

Return this JSON:
{shape}
Do not guess similar categories (e.g., "men's clothing"). Match exactly.
Respond ONLY with clean JSON. Do not add explanations or markdown."""

_FIELD_HINTS: dict[str, str] = {
    "sub_category": "exact match from list above or null",
    "color": "if mentioned, else null",
    "brand": "if mentioned, else null",
    "budget": "if mentioned (numeric), else null",
    "min_rating": (
        "if mentioned (numeric) or implied (e.g., 'very good' = 4, "
        "'excellent' or 'best' = 4.5), else null"
    ),
    "size": "if mentioned, else null",
}


def build_table_prompt(prompt: str, tables: tuple[str, ...]) -> str:
    return TABLE_PROMPT.format(tables=", ".join(tables), prompt=prompt)


def build_extraction_prompt(
    prompt: str,
    table: str,
    categories: list[str],
    include_size: bool,
) -> str:
    """Render the extraction prompt for *table*.

    ``size`` is only requested when *include_size* is set, i.e. when the
    table can be filtered on it.
    """
    lines = [f'  "source_table": "{table}"']
    for name, hint in _FIELD_HINTS.items():
        if name == "size" and not include_size:
            continue
        lines.append(f'  "{name}": "{hint}"')
    shape = "{\n" + ",\n".join(lines) + "\n}"

    return EXTRACTION_PROMPT.format(
        prompt=prompt,
        categories="\n".join(f"- {c}" for c in categories),
        shape=shape,
    )


def filter_schema(include_size: bool) -> dict[str, Any]:
    """JSON schema for the extraction reply, used for forced tool calls."""
    nullable_string = {"type": ["string", "null"]}
    nullable_number = {"type": ["number", "null"]}
    properties: dict[str, Any] = {
        "source_table": {**nullable_string, "description": "Table the query was routed to."},
        "sub_category": {
            **nullable_string,
            "description": "Exact category from the provided list, or null.",
        },
        "color": {**nullable_string, "description": "Color if mentioned."},
        "brand": {**nullable_string, "description": "Brand if mentioned."},
        "budget": {**nullable_number, "description": "Maximum price if mentioned."},
        "min_rating": {
            **nullable_number,
            "description": "Minimum rating, stated or implied ('very good' = 4, 'best' = 4.5).",
        },
    }
    if include_size:
        properties["size"] = {**nullable_string, "description": "Size if mentioned."}

    return {
        "type": "object",
        "properties": properties,
        "required": ["source_table", "sub_category"],
    }
