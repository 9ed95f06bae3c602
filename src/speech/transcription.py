"""Transcription pipeline: uploaded audio -> WAV -> recognized text."""

from __future__ import annotations

import logging

from src.speech.ffmpeg import AudioTranscoder
from src.speech.models import UploadedAudioAsset
from src.speech.scratch import remove_quietly
from src.speech.stt import SpeechToText

logger = logging.getLogger(__name__)

# Returned instead of failing when the service answers without a transcript
MISSING_TRANSCRIPT = "Transcription not found"


class TranscriptionPipeline:
    """Convert an upload to WAV and send it to the recognition service.

    Both the upload and the converted waveform are removed when
    :meth:`run` returns, whether or not it succeeded.
    """

    def __init__(
        self,
        transcoder: AudioTranscoder,
        speech_to_text: SpeechToText,
        language: str = "en-IN",
    ) -> None:
        self._transcoder = transcoder
        self._speech_to_text = speech_to_text
        self._language = language

    def run(self, upload: UploadedAudioAsset) -> str:
        """Transcribe *upload*.

        Raises:
            ConversionError: ffmpeg failed to produce a waveform.
            TranscriptionServiceError: the recognition service rejected the request.
        """
        wav_path = upload.path.with_name(upload.path.name + ".wav")
        try:
            self._transcoder.to_wav(upload.path, wav_path)
            transcript = self._speech_to_text.transcribe(wav_path, self._language)
        finally:
            remove_quietly(upload.path, wav_path)

        if not transcript:
            logger.warning("Recognition returned no transcript for %s", upload.path.name)
            return MISSING_TRANSCRIPT

        logger.info("Transcription: %s", transcript)
        return transcript
