"""FastAPI dependencies that assemble pipelines from settings and catalog config."""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends

from src.catalog.llm import LanguageClassifier, get_classifier
from src.catalog.resolution import QueryResolutionPipeline
from src.catalog.search import ProductSearch
from src.catalog.store import CatalogStore, SupabaseCatalogStore, get_supabase_client
from src.config import Settings, get_settings
from src.errors import StoreError
from src.pipeline_config import DEFAULT_CATALOG_CONFIG, CatalogConfig
from src.speech.ffmpeg import AudioConcatenator, AudioTranscoder
from src.speech.stt import get_speech_to_text
from src.speech.synthesis import SynthesisPipeline
from src.speech.transcription import TranscriptionPipeline
from src.speech.tts import get_text_to_speech, voice_from_settings

SettingsDep = Annotated[Settings, Depends(get_settings)]


def get_catalog_config() -> CatalogConfig:
    return DEFAULT_CATALOG_CONFIG


def get_catalog_store() -> CatalogStore:
    try:
        client = get_supabase_client()
    except Exception as exc:
        # Missing/invalid SUPABASE_URL or key surfaces here, before any query
        raise StoreError(f"Supabase client unavailable: {exc}") from exc
    return SupabaseCatalogStore(client)


def get_language_classifier(settings: SettingsDep) -> LanguageClassifier:
    return get_classifier(settings)


def get_transcription_pipeline(settings: SettingsDep) -> TranscriptionPipeline:
    return TranscriptionPipeline(
        AudioTranscoder(settings.ffmpeg_binary),
        get_speech_to_text(settings),
        language=settings.stt_language,
    )


def get_synthesis_pipeline(settings: SettingsDep) -> SynthesisPipeline:
    return SynthesisPipeline(
        get_text_to_speech(settings),
        AudioConcatenator(settings.ffmpeg_binary),
        audio_dir=settings.audio_dir,
        voice=voice_from_settings(settings),
    )


def get_resolution_pipeline(
    classifier: Annotated[LanguageClassifier, Depends(get_language_classifier)],
    store: Annotated[CatalogStore, Depends(get_catalog_store)],
    config: Annotated[CatalogConfig, Depends(get_catalog_config)],
) -> QueryResolutionPipeline:
    return QueryResolutionPipeline(classifier, store, config)


def get_product_search(
    store: Annotated[CatalogStore, Depends(get_catalog_store)],
    config: Annotated[CatalogConfig, Depends(get_catalog_config)],
) -> ProductSearch:
    return ProductSearch(store, config)
