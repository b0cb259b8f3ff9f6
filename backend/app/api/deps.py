from functools import lru_cache

from fastapi import Depends

from app.core.config import settings
from app.llm.client import GeminiRecognizer, build_recognizer
from app.services.extraction_service import ExtractionService
from app.services.run_store import RunStore

_run_store = RunStore()


def get_run_store() -> RunStore:
    """
    Process-wide in-memory store of finished runs.
    Using Depends(get_run_store) allows swapping in a fresh store in tests.
    """
    return _run_store


@lru_cache
def get_recognizer() -> GeminiRecognizer:
    """
    OCR client built once from settings. The API key is passed in explicitly;
    a missing key yields simulated OCR output instead of an error.
    """
    return build_recognizer(settings)


def get_extraction_service(
    recognizer: GeminiRecognizer = Depends(get_recognizer),
    runs: RunStore = Depends(get_run_store),
) -> ExtractionService:
    """
    Service dependency for extraction flows.
    """
    return ExtractionService(
        recognizer,
        runs,
        dpi=settings.RENDER_DPI,
        text_threshold=settings.TEXT_MIN_CHARS,
        max_concurrency=settings.OCR_MAX_CONCURRENCY or None,
        max_upload_bytes=settings.MAX_UPLOAD_BYTES,
    )
