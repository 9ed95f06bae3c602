"""Completion backends used for table routing and filter extraction."""

from __future__ import annotations

import json
from typing import Any, Protocol

from anthropic import Anthropic, AnthropicError
from anthropic.types import TextBlock
from openai import OpenAI, OpenAIError

from src.config import Settings
from src.errors import ClassifierServiceError
from src.pipeline_config import LLMProvider

FILTER_TOOL_NAME = "submit_product_filter"

# Error label for failures during filter extraction (routing keeps the class default)
EXTRACTION_FAILED = "Parsing failed"


class LanguageClassifier(Protocol):
    def complete(self, prompt: str) -> str:
        """Return the model's single free-text reply to *prompt*."""
        ...

    def complete_json(self, prompt: str, schema: dict[str, Any]) -> str:
        """Return a JSON document answering *prompt*, shaped by *schema*."""
        ...


class GroqClassifier:
    """Chat completions against Groq's OpenAI-compatible endpoint."""

    def __init__(self, api_key: str, model: str, base_url: str) -> None:
        self._api_key = api_key
        self._model = model
        self._base_url = base_url

    def complete(self, prompt: str) -> str:
        return self._chat(prompt)

    def complete_json(self, prompt: str, schema: dict[str, Any]) -> str:
        # JSON mode guarantees a single object; the schema is described in the prompt
        return self._chat(
            prompt, error=EXTRACTION_FAILED, response_format={"type": "json_object"}
        )

    def _chat(self, prompt: str, error: str | None = None, **extra: Any) -> str:
        try:
            client = OpenAI(api_key=self._api_key, base_url=self._base_url)
            response = client.chat.completions.create(
                model=self._model,
                messages=[{"role": "system", "content": prompt}],
                **extra,
            )
        except OpenAIError as exc:
            raise ClassifierServiceError(str(exc), error=error) from exc
        return (response.choices[0].message.content or "").strip()


class AnthropicClassifier:
    """Claude messages; extraction is a forced tool call on the filter schema."""

    def __init__(self, api_key: str, model: str, max_tokens: int = 1024) -> None:
        self._api_key = api_key
        self._model = model
        self._max_tokens = max_tokens

    def complete(self, prompt: str) -> str:
        try:
            client = Anthropic(api_key=self._api_key)
            response = client.messages.create(
                model=self._model,
                max_tokens=self._max_tokens,
                messages=[{"role": "user", "content": prompt}],
            )
        except AnthropicError as exc:
            raise ClassifierServiceError(str(exc)) from exc

        block = response.content[0] if response.content else None
        if not isinstance(block, TextBlock):
            return ""
        return block.text.strip()

    def complete_json(self, prompt: str, schema: dict[str, Any]) -> str:
        tool = {
            "name": FILTER_TOOL_NAME,
            "description": "Submit the product filter extracted from the user's request.",
            "input_schema": schema,
        }
        try:
            client = Anthropic(api_key=self._api_key)
            response = client.messages.create(
                model=self._model,
                max_tokens=self._max_tokens,
                tools=[tool],
                tool_choice={"type": "tool", "name": FILTER_TOOL_NAME},
                messages=[{"role": "user", "content": prompt}],
            )
        except AnthropicError as exc:
            raise ClassifierServiceError(str(exc), error=EXTRACTION_FAILED) from exc

        return _tool_input_as_json(response)


def _tool_input_as_json(response: Any) -> str:
    """Return the forced tool call's input as a JSON string ("" if absent)."""
    for block in response.content:
        if block.type != "tool_use" or block.name != FILTER_TOOL_NAME:
            continue
        data = block.input
        if isinstance(data, str):
            return data
        return json.dumps(data)
    return ""


def get_classifier(settings: Settings) -> LanguageClassifier:
    """Build the backend selected by ``settings.llm_provider``."""
    provider = LLMProvider(settings.llm_provider)
    if provider is LLMProvider.ANTHROPIC:
        return AnthropicClassifier(settings.anthropic_api_key, settings.anthropic_model)
    return GroqClassifier(settings.groq_api_key, settings.llm_model, settings.llm_base_url)
