"""Speech-to-text backends: Sarvam REST API and AssemblyAI SDK."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Protocol

import httpx

from src.config import Settings
from src.errors import TranscriptionServiceError
from src.pipeline_config import STTProvider

logger = logging.getLogger(__name__)


class SpeechToText(Protocol):
    def transcribe(self, audio_path: Path, language: str) -> str | None:
        """Return the transcript for a WAV file, or None if the service found none."""
        ...


class SarvamSpeechToText:
    """Multipart upload to Sarvam's ``/speech-to-text`` endpoint."""

    def __init__(self, api_key: str, url: str, timeout: float = 60.0) -> None:
        self._api_key = api_key
        self._url = url
        self._timeout = timeout

    def transcribe(self, audio_path: Path, language: str) -> str | None:
        with audio_path.open("rb") as audio:
            try:
                response = httpx.post(
                    self._url,
                    headers={"api-subscription-key": self._api_key},
                    files={"file": ("converted.wav", audio, "audio/wav")},
                    data={"language_code": language},
                    timeout=self._timeout,
                )
            except httpx.HTTPError as exc:
                raise TranscriptionServiceError(f"STT request failed: {exc}") from exc

        if response.is_error:
            logger.error("STT failed: %s %s", response.status_code, response.text)
            raise TranscriptionServiceError(response.text, upstream_status=response.status_code)

        result: dict[str, Any] = response.json()
        logger.debug("Full STT response: %s", result)
        return result.get("transcript")


class AssemblyAISpeechToText:
    """Transcription through the AssemblyAI SDK (uploads the file directly)."""

    def __init__(self, api_key: str) -> None:
        self._api_key = api_key

    def transcribe(self, audio_path: Path, language: str) -> str | None:
        import assemblyai as aai  # type: ignore[import-untyped]  # no stubs; import inside function

        aai.settings.api_key = self._api_key
        # AssemblyAI takes bare language codes ("en"), not regional ones ("en-IN")
        config = aai.TranscriptionConfig(language_code=language.split("-")[0])

        try:
            transcript = aai.Transcriber().transcribe(str(audio_path), config=config)
        except Exception as exc:
            raise TranscriptionServiceError(f"Transcription service unavailable: {exc}") from exc

        if transcript.status == aai.TranscriptStatus.error:
            raise TranscriptionServiceError(str(transcript.error))
        return transcript.text


def get_speech_to_text(settings: Settings) -> SpeechToText:
    """Build the backend selected by ``settings.stt_provider``."""
    provider = STTProvider(settings.stt_provider)
    if provider is STTProvider.ASSEMBLYAI:
        return AssemblyAISpeechToText(settings.assemblyai_api_key)
    return SarvamSpeechToText(
        settings.sarvam_api_key,
        settings.sarvam_stt_url,
        timeout=settings.http_timeout_seconds,
    )
