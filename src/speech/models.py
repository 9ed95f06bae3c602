"""Data models for the transcription and synthesis pipelines."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class UploadedAudioAsset:
    """An uploaded audio file owned by a single transcription request."""

    path: Path
    container_format: str | None = None


@dataclass(frozen=True)
class TextChunk:
    """An ordered slice of the input text sent in one synthesis call."""

    index: int
    text: str


@dataclass(frozen=True)
class SynthesizedSegment:
    """Audio file produced for one :class:`TextChunk`."""

    index: int
    path: Path


@dataclass(frozen=True)
class MergedAudioAsset:
    """Final audio assembled from all segments of a request.

    ``scratch_dir`` holds ``path`` and must be removed once the file has
    been sent.
    """

    path: Path
    scratch_dir: Path
    media_type: str = "audio/wav"
