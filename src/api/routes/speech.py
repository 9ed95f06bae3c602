"""Speech endpoints: audio upload transcription and long-text synthesis."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Annotated

from fastapi import APIRouter, Depends, File, UploadFile
from fastapi.responses import FileResponse
from starlette.background import BackgroundTask

from src.api.deps import SettingsDep, get_synthesis_pipeline, get_transcription_pipeline
from src.api.models import ErrorResponse, SynthesisRequest, TranscriptionResponse
from src.errors import ServiceError, SynthesisServiceError, UploadError
from src.speech.models import UploadedAudioAsset
from src.speech.scratch import remove_tree_quietly, timestamp_name
from src.speech.synthesis import SynthesisPipeline
from src.speech.transcription import TranscriptionPipeline

router = APIRouter()


def _save_upload(raw: bytes, filename: str, upload_dir: str) -> UploadedAudioAsset:
    """Write upload bytes to a timestamped file in *upload_dir*."""
    ext = filename.rsplit(".", 1)[-1].lower() if "." in filename else ""
    directory = Path(upload_dir)
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / timestamp_name("upload", f".{ext}" if ext else "")
    path.write_bytes(raw)
    return UploadedAudioAsset(path=path, container_format=ext or None)


@router.post(
    "/api/transcribe",
    response_model=TranscriptionResponse,
    responses={400: {"model": ErrorResponse}, 413: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def transcribe(
    settings: SettingsDep,
    pipeline: Annotated[TranscriptionPipeline, Depends(get_transcription_pipeline)],
    file: Annotated[UploadFile | None, File()] = None,
) -> TranscriptionResponse:
    """Transcribe an uploaded audio file of any ffmpeg-readable container.

    The upload is converted to WAV and sent to the configured recognition
    service.  Both files are deleted once the request finishes.
    """
    if file is None:
        raise UploadError("Expected a multipart upload with a 'file' field.")

    raw = await file.read()
    if len(raw) > settings.max_upload_bytes:
        raise UploadError(
            f"Maximum size is {settings.max_upload_bytes // (1024 * 1024)} MB.",
            error="File too large",
            status_code=413,
        )
    if not raw:
        raise UploadError("The uploaded audio file is empty.")

    try:
        upload = _save_upload(raw, file.filename or "", settings.upload_dir)
        # Blocking ffmpeg + HTTP calls run in a thread to keep the event loop free.
        transcription = await asyncio.to_thread(pipeline.run, upload)
    except ServiceError:
        raise
    except Exception as exc:
        raise ServiceError(str(exc), error="Transcription failed") from exc

    return TranscriptionResponse(transcription=transcription)


@router.post(
    "/tts",
    response_class=FileResponse,
    responses={
        200: {"content": {"audio/wav": {}}},
        400: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
)
async def tts(
    pipeline: Annotated[SynthesisPipeline, Depends(get_synthesis_pipeline)],
    request: SynthesisRequest | None = None,
) -> FileResponse:
    """Synthesize text of any length and stream back a single WAV file.

    Text is split on sentence boundaries, each chunk is synthesized in
    order and the segments are joined losslessly.  The merged file is
    deleted after the response body has been sent.
    """
    text = request.text if request else None
    try:
        merged = await asyncio.to_thread(pipeline.run, text)
    except ServiceError:
        raise
    except Exception as exc:
        raise SynthesisServiceError() from exc

    return FileResponse(
        merged.path,
        media_type=merged.media_type,
        filename=merged.path.name,
        background=BackgroundTask(remove_tree_quietly, merged.scratch_dir),
    )
