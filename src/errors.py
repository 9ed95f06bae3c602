"""Error taxonomy shared by the speech and catalog pipelines.

Every pipeline failure is raised as a :class:`ServiceError` subclass and
converted to a JSON ``{"error": ..., "detail": ...}`` body by the handler
registered in :mod:`src.api.main`.
"""

from __future__ import annotations

from typing import Any


class ServiceError(Exception):
    """Base class for all request-level failures."""

    status_code: int = 500
    error: str = "Internal server error"
    expose_detail: bool = True

    def __init__(
        self,
        detail: str | None = None,
        *,
        error: str | None = None,
        status_code: int | None = None,
    ) -> None:
        if error is not None:
            self.error = error
        if status_code is not None:
            self.status_code = status_code
        self.detail = detail
        super().__init__(detail or self.error)

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"error": self.error}
        if self.detail and self.expose_detail:
            payload["detail"] = self.detail
        return payload


# --- Transcription ---


class UploadError(ServiceError):
    status_code = 400
    error = "No audio file uploaded"


class ConversionError(ServiceError):
    error = "Audio conversion failed"


class TranscriptionServiceError(ServiceError):
    """Raised when the recognition service answers with a non-success status."""

    error = "STT failed"

    def __init__(self, detail: str | None = None, *, upstream_status: int | None = None) -> None:
        super().__init__(detail)
        self.upstream_status = upstream_status

    def to_payload(self) -> dict[str, Any]:
        payload = super().to_payload()
        if self.upstream_status is not None:
            payload["upstream_status"] = self.upstream_status
        return payload


# --- Synthesis ---


class SynthesisInputError(ServiceError):
    status_code = 400
    error = "Text is required for TTS."


class SynthesisServiceError(ServiceError):
    error = "TTS failed to process long input."


class ConcatError(ServiceError):
    error = "Audio merge failed"


# --- Query resolution ---


class PromptInputError(ServiceError):
    status_code = 400
    error = "No prompt provided."


class ClassifierServiceError(ServiceError):
    error = "Table selection failed"


class TableRoutingError(ServiceError):
    status_code = 400
    error = "No valid table match."


class CategoryFetchError(ServiceError):
    error = "No categories found"


class ExtractionParseError(ServiceError):
    error = "Parsing failed"


class SearchInputError(ServiceError):
    status_code = 400
    error = "Missing table or category"


class StoreError(ServiceError):
    error = "Supabase fetch error"
    expose_detail = False
