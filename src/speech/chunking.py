"""Sentence-aware text splitting for the synthesis service."""

from __future__ import annotations

from src.pipeline_config import ChunkingConfig
from src.speech.models import TextChunk


def split_text(text: str, config: ChunkingConfig | None = None) -> list[TextChunk]:
    """Split *text* into chunks of at most ``config.max_chars`` characters.

    Each window of ``max_chars`` characters is cut after its last sentence
    terminator when that terminator sits beyond ``min_break_offset``, so
    short leading sentences are not split off on their own.  Whitespace
    at chunk boundaries is dropped.

    Args:
        text: Text to split.
        config: Size bounds; defaults to 300 / 100 with ``"."``.

    Returns:
        Chunks in playback order, indexed from 0.
    """
    config = config or ChunkingConfig()
    chunks: list[TextChunk] = []
    remaining = text.strip()

    while remaining:
        window = remaining[: config.max_chars]
        last_stop = window.rfind(config.terminator)
        if last_stop > config.min_break_offset:
            window = window[: last_stop + 1]
        chunks.append(TextChunk(index=len(chunks), text=window.strip()))
        remaining = remaining[len(window) :].strip()

    return chunks
