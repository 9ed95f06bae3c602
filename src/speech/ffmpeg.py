"""ffmpeg wrappers: container-to-WAV transcoding and lossless concatenation."""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path

from src.errors import ConcatError, ConversionError

logger = logging.getLogger(__name__)

# Keep error details short enough to return to the client
_STDERR_TAIL_CHARS = 500


def _run(command: list[str]) -> subprocess.CompletedProcess[bytes]:
    return subprocess.run(
        command,
        stdout=subprocess.PIPE,
        stderr=subprocess.PIPE,
        check=True,
    )


def _stderr_tail(exc: subprocess.CalledProcessError) -> str:
    error_msg = exc.stderr.decode("utf-8", errors="replace") if exc.stderr else "No stderr"
    return error_msg.strip()[-_STDERR_TAIL_CHARS:]


class AudioTranscoder:
    """Convert an arbitrary audio container to a WAV waveform."""

    def __init__(self, binary: str = "ffmpeg") -> None:
        self._binary = binary

    def to_wav(self, source: Path, target: Path) -> Path:
        command = [self._binary, "-y", "-i", str(source), "-f", "wav", str(target)]
        try:
            _run(command)
        except subprocess.CalledProcessError as exc:
            error_msg = _stderr_tail(exc)
            logger.error("ffmpeg conversion failed. stderr: %s", error_msg)
            raise ConversionError(error_msg) from exc
        except OSError as exc:
            logger.error("ffmpeg could not be started: %s", exc)
            raise ConversionError(f"ffmpeg could not be started: {exc}") from exc

        logger.info("Converted to WAV: %s", target)
        return target


def write_concat_manifest(paths: list[Path], manifest: Path) -> Path:
    """Write an ffmpeg concat-demuxer list naming *paths* in order."""
    lines = []
    for path in paths:
        # Single quotes are closed, escaped and reopened per concat syntax
        quoted = str(path.resolve()).replace("'", "'\\''")
        lines.append(f"file '{quoted}'")
    manifest.write_text("\n".join(lines), encoding="utf-8")
    return manifest


class AudioConcatenator:
    """Join audio files listed in a concat manifest without re-encoding."""

    def __init__(self, binary: str = "ffmpeg") -> None:
        self._binary = binary

    def concat(self, manifest: Path, target: Path) -> Path:
        command = [
            self._binary,
            "-y",
            "-f", "concat",
            "-safe", "0",
            "-i", str(manifest),
            "-c", "copy",
            str(target),
        ]
        try:
            _run(command)
        except subprocess.CalledProcessError as exc:
            error_msg = _stderr_tail(exc)
            logger.error("ffmpeg concat failed. stderr: %s", error_msg)
            raise ConcatError(error_msg) from exc
        except OSError as exc:
            logger.error("ffmpeg could not be started: %s", exc)
            raise ConcatError(f"ffmpeg could not be started: {exc}") from exc

        return target
