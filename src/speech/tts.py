"""Text-to-speech backend: Sarvam REST API."""

from __future__ import annotations

import base64
import binascii
from typing import Any, Protocol

import httpx

from src.config import Settings
from src.errors import SynthesisServiceError
from src.pipeline_config import VoiceParams


class TextToSpeech(Protocol):
    def synthesize(self, text: str, voice: VoiceParams) -> bytes:
        """Return encoded audio for *text*; raise SynthesisServiceError if none."""
        ...


class SarvamTextToSpeech:
    """JSON call to Sarvam's ``/text-to-speech`` endpoint.

    The service answers with ``{"audios": ["<base64 wav>", ...]}``; only the
    first entry is used.
    """

    def __init__(self, api_key: str, url: str, timeout: float = 60.0) -> None:
        self._api_key = api_key
        self._url = url
        self._timeout = timeout

    def synthesize(self, text: str, voice: VoiceParams) -> bytes:
        payload = {
            "text": text,
            "model": voice.model,
            "speaker": voice.speaker,
            "target_language_code": voice.target_language,
            "pace": voice.pace,
        }
        try:
            response = httpx.post(
                self._url,
                headers={"api-subscription-key": self._api_key},
                json=payload,
                timeout=self._timeout,
            )
            response.raise_for_status()
        except httpx.HTTPError as exc:
            raise SynthesisServiceError(f"TTS request failed: {exc}") from exc

        body: dict[str, Any] = response.json()
        audios = body.get("audios") or []
        if not audios or not audios[0]:
            raise SynthesisServiceError("No audio returned for chunk")

        try:
            return base64.b64decode(audios[0])
        except (binascii.Error, ValueError) as exc:
            raise SynthesisServiceError(f"Undecodable audio payload: {exc}") from exc


def get_text_to_speech(settings: Settings) -> TextToSpeech:
    return SarvamTextToSpeech(
        settings.sarvam_api_key,
        settings.sarvam_tts_url,
        timeout=settings.http_timeout_seconds,
    )


def voice_from_settings(settings: Settings) -> VoiceParams:
    return VoiceParams(
        model=settings.tts_model,
        speaker=settings.tts_speaker,
        target_language=settings.tts_language,
        pace=settings.tts_pace,
    )
