"""Tests for the transcription and synthesis pipelines and their adapters."""

from __future__ import annotations

import base64
import subprocess
from pathlib import Path
from unittest.mock import MagicMock, patch

import httpx
import pytest

from src.config import Settings
from src.errors import (
    ConcatError,
    ConversionError,
    SynthesisInputError,
    SynthesisServiceError,
    TranscriptionServiceError,
)
from src.pipeline_config import VoiceParams
from src.speech.ffmpeg import AudioConcatenator, AudioTranscoder, write_concat_manifest
from src.speech.models import SynthesizedSegment, UploadedAudioAsset
from src.speech.stt import AssemblyAISpeechToText, SarvamSpeechToText, get_speech_to_text
from src.speech.synthesis import SynthesisPipeline
from src.speech.transcription import MISSING_TRANSCRIPT, TranscriptionPipeline
from src.speech.tts import SarvamTextToSpeech, voice_from_settings
from tests.fakes import FakeConcatenator, FakeSpeechToText, FakeTextToSpeech, FakeTranscoder

LONG_TEXT = " ".join(
    f"Item {i} is a sturdy steel bottle that keeps water cold for a full day." for i in range(12)
)


def _upload(tmp_path: Path, name: str = "voice.webm") -> UploadedAudioAsset:
    path = tmp_path / name
    path.write_bytes(b"\x1aE\xdf\xa3webm")
    return UploadedAudioAsset(path=path, container_format="webm")


# ---------------------------------------------------------------------------
# ffmpeg wrappers
# ---------------------------------------------------------------------------


class TestAudioTranscoder:
    @patch("src.speech.ffmpeg.subprocess.run")
    def test_invokes_ffmpeg_with_wav_output(self, mock_run: MagicMock, tmp_path: Path) -> None:
        source, target = tmp_path / "in.webm", tmp_path / "in.webm.wav"
        result = AudioTranscoder("/opt/ffmpeg").to_wav(source, target)

        assert result == target
        command = mock_run.call_args.args[0]
        assert command[0] == "/opt/ffmpeg"
        assert command[command.index("-i") + 1] == str(source)
        assert command[-1] == str(target)
        assert mock_run.call_args.kwargs["check"] is True

    @patch("src.speech.ffmpeg.subprocess.run")
    def test_nonzero_exit_raises_conversion_error(self, mock_run: MagicMock, tmp_path: Path) -> None:
        mock_run.side_effect = subprocess.CalledProcessError(
            1, ["ffmpeg"], stderr=b"Invalid data found when processing input"
        )
        with pytest.raises(ConversionError) as exc_info:
            AudioTranscoder().to_wav(tmp_path / "a", tmp_path / "b")
        assert "Invalid data" in (exc_info.value.detail or "")
        assert exc_info.value.status_code == 500

    @patch("src.speech.ffmpeg.subprocess.run", side_effect=FileNotFoundError("ffmpeg"))
    def test_missing_binary_raises_conversion_error(self, _: MagicMock, tmp_path: Path) -> None:
        with pytest.raises(ConversionError):
            AudioTranscoder().to_wav(tmp_path / "a", tmp_path / "b")


class TestAudioConcatenator:
    @patch("src.speech.ffmpeg.subprocess.run")
    def test_uses_concat_demuxer_without_reencoding(
        self, mock_run: MagicMock, tmp_path: Path
    ) -> None:
        AudioConcatenator().concat(tmp_path / "list.txt", tmp_path / "out.wav")
        command = mock_run.call_args.args[0]
        assert command[command.index("-f") + 1] == "concat"
        assert command[command.index("-safe") + 1] == "0"
        assert command[command.index("-c") + 1] == "copy"

    @patch("src.speech.ffmpeg.subprocess.run")
    def test_failure_raises_concat_error(self, mock_run: MagicMock, tmp_path: Path) -> None:
        mock_run.side_effect = subprocess.CalledProcessError(1, ["ffmpeg"], stderr=None)
        with pytest.raises(ConcatError) as exc_info:
            AudioConcatenator().concat(tmp_path / "list.txt", tmp_path / "out.wav")
        assert exc_info.value.detail == "No stderr"

    def test_manifest_lists_paths_in_order_and_escapes_quotes(self, tmp_path: Path) -> None:
        paths = [tmp_path / "chunk_0.wav", tmp_path / "it's chunk_1.wav"]
        manifest = write_concat_manifest(paths, tmp_path / "list.txt")
        lines = manifest.read_text(encoding="utf-8").splitlines()
        assert lines[0] == f"file '{paths[0].resolve()}'"
        assert lines[1].endswith("it'\\''s chunk_1.wav'")


# ---------------------------------------------------------------------------
# Transcription pipeline
# ---------------------------------------------------------------------------


class TestTranscriptionPipeline:
    def test_returns_transcript_and_removes_files(self, tmp_path: Path) -> None:
        upload = _upload(tmp_path)
        transcoder, stt = FakeTranscoder(), FakeSpeechToText("order two apples")
        pipeline = TranscriptionPipeline(transcoder, stt, language="en-IN")  # type: ignore[arg-type]

        assert pipeline.run(upload) == "order two apples"

        wav_path = transcoder.calls[0][1]
        assert wav_path.name == "voice.webm.wav"
        assert stt.calls == [(wav_path, "en-IN")]
        assert not upload.path.exists()
        assert not wav_path.exists()

    @pytest.mark.parametrize("transcript", [None, ""])
    def test_missing_transcript_uses_placeholder(
        self, tmp_path: Path, transcript: str | None
    ) -> None:
        pipeline = TranscriptionPipeline(FakeTranscoder(), FakeSpeechToText(transcript))  # type: ignore[arg-type]
        assert pipeline.run(_upload(tmp_path)) == MISSING_TRANSCRIPT

    def test_service_error_still_removes_files(self, tmp_path: Path) -> None:
        upload = _upload(tmp_path)
        stt = MagicMock()
        stt.transcribe.side_effect = TranscriptionServiceError("quota", upstream_status=429)
        pipeline = TranscriptionPipeline(FakeTranscoder(), stt)  # type: ignore[arg-type]

        with pytest.raises(TranscriptionServiceError):
            pipeline.run(upload)
        assert list(tmp_path.iterdir()) == []

    def test_conversion_error_skips_recognition(self, tmp_path: Path) -> None:
        upload = _upload(tmp_path)
        transcoder = MagicMock()
        transcoder.to_wav.side_effect = ConversionError("bad container")
        stt = FakeSpeechToText()
        pipeline = TranscriptionPipeline(transcoder, stt)

        with pytest.raises(ConversionError):
            pipeline.run(upload)
        assert stt.calls == []
        assert not upload.path.exists()


# ---------------------------------------------------------------------------
# Synthesis pipeline
# ---------------------------------------------------------------------------


class TestSynthesisPipeline:
    def _pipeline(
        self, tmp_path: Path, tts: FakeTextToSpeech | None = None
    ) -> tuple[SynthesisPipeline, FakeTextToSpeech, FakeConcatenator]:
        tts = tts or FakeTextToSpeech()
        concat = FakeConcatenator()
        voice = VoiceParams(speaker="meera", pace=1.0)
        pipeline = SynthesisPipeline(tts, concat, tmp_path / "audios", voice=voice)  # type: ignore[arg-type]
        return pipeline, tts, concat

    def test_chunks_are_synthesized_and_merged_in_order(self, tmp_path: Path) -> None:
        pipeline, tts, concat = self._pipeline(tmp_path)

        merged = pipeline.run(LONG_TEXT)

        assert len(tts.texts) > 1
        assert all(v.speaker == "meera" for v in tts.voices)
        expected = b"".join(f"<{i}>".encode() for i in range(len(tts.texts)))
        assert merged.path.read_bytes() == expected
        names = [
            Path(line.removeprefix("file '").removesuffix("'")).name
            for line in concat.manifest_lines
        ]
        assert [name.split("_")[1] for name in names] == [str(i) for i in range(len(tts.texts))]

    def test_intermediates_removed_after_merge(self, tmp_path: Path) -> None:
        pipeline, _, _ = self._pipeline(tmp_path)
        merged = pipeline.run(LONG_TEXT)
        assert list(merged.scratch_dir.iterdir()) == [merged.path]
        assert merged.path.name.startswith("merged_")

    @pytest.mark.parametrize("text", [None, "", "   "])
    def test_blank_text_is_rejected_before_any_work(
        self, tmp_path: Path, text: str | None
    ) -> None:
        pipeline, tts, _ = self._pipeline(tmp_path)
        with pytest.raises(SynthesisInputError) as exc_info:
            pipeline.run(text)
        assert exc_info.value.status_code == 400
        assert tts.texts == []
        assert not (tmp_path / "audios").exists()

    def test_chunk_failure_aborts_and_cleans_up(self, tmp_path: Path) -> None:
        pipeline, tts, concat = self._pipeline(tmp_path, FakeTextToSpeech(fail_on_call=1))
        with pytest.raises(SynthesisServiceError):
            pipeline.run(LONG_TEXT)
        assert tts.texts and len(tts.texts) == 1
        assert concat.manifest_lines == []
        assert list((tmp_path / "audios").iterdir()) == []

    def test_concat_failure_cleans_up(self, tmp_path: Path) -> None:
        concat = MagicMock()
        concat.concat.side_effect = ConcatError("Invalid data")
        pipeline = SynthesisPipeline(FakeTextToSpeech(), concat, tmp_path / "audios")  # type: ignore[arg-type]
        with pytest.raises(ConcatError):
            pipeline.run(LONG_TEXT)
        assert list((tmp_path / "audios").iterdir()) == []

    def test_merge_orders_segments_by_index(self, tmp_path: Path) -> None:
        pipeline, _, concat = self._pipeline(tmp_path)
        segments = []
        for index in (2, 0, 1):
            path = tmp_path / f"seg{index}.wav"
            path.write_bytes(f"[{index}]".encode())
            segments.append(SynthesizedSegment(index=index, path=path))

        output = pipeline.merge_segments(segments, tmp_path)

        assert output.read_bytes() == b"[0][1][2]"
        assert not any(s.path.exists() for s in segments)


# ---------------------------------------------------------------------------
# Sarvam / AssemblyAI adapters
# ---------------------------------------------------------------------------


class TestSarvamSpeechToText:
    @patch("src.speech.stt.httpx.post")
    def test_posts_multipart_with_key_and_language(
        self, mock_post: MagicMock, tmp_path: Path
    ) -> None:
        wav = tmp_path / "a.wav"
        wav.write_bytes(b"RIFF")
        mock_post.return_value = MagicMock(is_error=False)
        mock_post.return_value.json.return_value = {"transcript": "two kilos of rice"}

        text = SarvamSpeechToText("secret", "https://stt.example").transcribe(wav, "en-IN")

        assert text == "two kilos of rice"
        kwargs = mock_post.call_args.kwargs
        assert kwargs["headers"] == {"api-subscription-key": "secret"}
        assert kwargs["data"] == {"language_code": "en-IN"}
        assert kwargs["files"]["file"][0] == "converted.wav"

    @patch("src.speech.stt.httpx.post")
    def test_error_status_carries_upstream_body(self, mock_post: MagicMock, tmp_path: Path) -> None:
        wav = tmp_path / "a.wav"
        wav.write_bytes(b"RIFF")
        mock_post.return_value = MagicMock(is_error=True, status_code=403, text="invalid key")

        with pytest.raises(TranscriptionServiceError) as exc_info:
            SarvamSpeechToText("bad", "https://stt.example").transcribe(wav, "en-IN")

        assert exc_info.value.to_payload() == {
            "error": "STT failed",
            "detail": "invalid key",
            "upstream_status": 403,
        }

    @patch("src.speech.stt.httpx.post", side_effect=httpx.ConnectError("refused"))
    def test_network_error_raises_service_error(self, _: MagicMock, tmp_path: Path) -> None:
        wav = tmp_path / "a.wav"
        wav.write_bytes(b"RIFF")
        with pytest.raises(TranscriptionServiceError):
            SarvamSpeechToText("k", "https://stt.example").transcribe(wav, "en-IN")


class TestSarvamTextToSpeech:
    @patch("src.speech.tts.httpx.post")
    def test_decodes_first_audio(self, mock_post: MagicMock) -> None:
        mock_post.return_value.json.return_value = {
            "audios": [base64.b64encode(b"RIFFdata").decode()]
        }
        voice = VoiceParams()

        audio = SarvamTextToSpeech("k", "https://tts.example").synthesize("Hello.", voice)

        assert audio == b"RIFFdata"
        payload = mock_post.call_args.kwargs["json"]
        assert payload == {
            "text": "Hello.",
            "model": "bulbul:v2",
            "speaker": "vidya",
            "target_language_code": "en-IN",
            "pace": 0.7,
        }

    @pytest.mark.parametrize("body", [{}, {"audios": []}, {"audios": [""]}])
    @patch("src.speech.tts.httpx.post")
    def test_missing_audio_is_fatal(self, mock_post: MagicMock, body: dict[str, object]) -> None:
        mock_post.return_value.json.return_value = body
        with pytest.raises(SynthesisServiceError, match="No audio returned"):
            SarvamTextToSpeech("k", "https://tts.example").synthesize("Hi.", VoiceParams())

    @patch("src.speech.tts.httpx.post")
    def test_http_error_is_fatal(self, mock_post: MagicMock) -> None:
        request = httpx.Request("POST", "https://tts.example")
        mock_post.return_value.raise_for_status.side_effect = httpx.HTTPStatusError(
            "500", request=request, response=httpx.Response(500, request=request)
        )
        with pytest.raises(SynthesisServiceError):
            SarvamTextToSpeech("k", "https://tts.example").synthesize("Hi.", VoiceParams())


class TestSpeechFactories:
    def test_default_provider_is_sarvam(self) -> None:
        settings = Settings(_env_file=None, stt_provider="sarvam")  # type: ignore[call-arg]
        assert isinstance(get_speech_to_text(settings), SarvamSpeechToText)

    def test_assemblyai_provider(self) -> None:
        settings = Settings(_env_file=None, stt_provider="assemblyai")  # type: ignore[call-arg]
        assert isinstance(get_speech_to_text(settings), AssemblyAISpeechToText)

    def test_unknown_provider_raises(self) -> None:
        settings = Settings(_env_file=None, stt_provider="whisper")  # type: ignore[call-arg]
        with pytest.raises(ValueError):
            get_speech_to_text(settings)

    def test_voice_from_settings(self) -> None:
        settings = Settings(_env_file=None, tts_speaker="anushka", tts_pace=1.1)  # type: ignore[call-arg]
        voice = voice_from_settings(settings)
        assert voice.speaker == "anushka"
        assert voice.pace == 1.1
