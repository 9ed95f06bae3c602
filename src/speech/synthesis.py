"""Synthesis pipeline: text -> ordered chunks -> per-chunk audio -> merged WAV."""

from __future__ import annotations

import logging
from pathlib import Path

from src.errors import SynthesisInputError
from src.pipeline_config import ChunkingConfig, VoiceParams
from src.speech.chunking import split_text
from src.speech.ffmpeg import AudioConcatenator, write_concat_manifest
from src.speech.models import MergedAudioAsset, SynthesizedSegment, TextChunk
from src.speech.scratch import make_scratch_dir, remove_quietly, remove_tree_quietly, timestamp_name
from src.speech.tts import TextToSpeech

logger = logging.getLogger(__name__)


class SynthesisPipeline:
    """Turn arbitrarily long text into one audio file.

    All intermediates live in a per-request scratch directory under
    ``audio_dir``.  Segments and the concat manifest are removed as soon as
    the merge finishes; the directory holding the merged file is handed to
    the caller (see :attr:`MergedAudioAsset.scratch_dir`) and removed here
    only when the pipeline fails.
    """

    def __init__(
        self,
        text_to_speech: TextToSpeech,
        concatenator: AudioConcatenator,
        audio_dir: str | Path,
        voice: VoiceParams | None = None,
        chunking: ChunkingConfig | None = None,
    ) -> None:
        self._text_to_speech = text_to_speech
        self._concatenator = concatenator
        self._audio_dir = Path(audio_dir)
        self._voice = voice or VoiceParams()
        self._chunking = chunking or ChunkingConfig()

    def run(self, text: str | None) -> MergedAudioAsset:
        """Synthesize *text* and return the merged audio.

        Raises:
            SynthesisInputError: *text* is missing or blank.
            SynthesisServiceError: a chunk produced no audio.
            ConcatError: ffmpeg failed to join the segments.
        """
        if not text or not text.strip():
            raise SynthesisInputError()

        chunks = split_text(text, self._chunking)
        logger.info("Synthesizing %d chunk(s)", len(chunks))

        scratch_dir = make_scratch_dir(self._audio_dir, "tts")
        try:
            segments = self.synthesize_segments(chunks, scratch_dir)
            merged = self.merge_segments(segments, scratch_dir)
        except Exception:
            remove_tree_quietly(scratch_dir)
            raise

        return MergedAudioAsset(path=merged, scratch_dir=scratch_dir)

    def synthesize_segments(
        self, chunks: list[TextChunk], scratch_dir: Path
    ) -> list[SynthesizedSegment]:
        """Synthesize chunks one at a time, in chunk order.

        Calls are sequential: the segment list must match playback order.
        """
        segments: list[SynthesizedSegment] = []
        for chunk in chunks:
            audio = self._text_to_speech.synthesize(chunk.text, self._voice)
            path = scratch_dir / timestamp_name(f"chunk_{chunk.index}", ".wav")
            path.write_bytes(audio)
            segments.append(SynthesizedSegment(index=chunk.index, path=path))
        return segments

    def merge_segments(self, segments: list[SynthesizedSegment], scratch_dir: Path) -> Path:
        """Concatenate *segments* by chunk index into a single WAV file."""
        ordered = sorted(segments, key=lambda s: s.index)
        manifest = scratch_dir / timestamp_name("list", ".txt")
        output = scratch_dir / timestamp_name("merged", ".wav")
        try:
            write_concat_manifest([s.path for s in ordered], manifest)
            self._concatenator.concat(manifest, output)
        finally:
            remove_quietly(manifest, *(s.path for s in ordered))
        return output
