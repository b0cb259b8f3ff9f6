from fastapi import APIRouter, Depends

from app.api.deps import get_recognizer
from app.llm.client import GeminiRecognizer

router = APIRouter(prefix="/api", tags=["health"])


@router.get("/health")
def health():
    return {"status": "ok"}


@router.get("/ocr/health")
def ocr_health(recognizer: GeminiRecognizer = Depends(get_recognizer)):
    # No network call: only reports whether real OCR or the simulation will be used.
    return {
        "status": "ok",
        "provider": recognizer.provider_name,
        "model": recognizer.model,
        "mode": "live" if recognizer.configured else "simulated",
    }
