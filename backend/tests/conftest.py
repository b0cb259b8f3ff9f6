import asyncio

import fitz
import pytest
from fastapi.testclient import TestClient

from app.api.deps import get_recognizer, get_run_store
from app.llm.errors import LLMNotConfiguredError
from app.main import app
from app.services.run_store import RunStore


LONG_TEXT = "This page carries a real text layer with plenty of words."


def build_pdf(pages: list[str]) -> bytes:
    """One PDF page per entry; an empty string gives a blank (scanned-looking) page."""
    doc = fitz.open()
    for text in pages:
        page = doc.new_page(width=300, height=300)
        if text:
            page.insert_text((20, 40), text, fontsize=8)
    data = doc.tobytes()
    doc.close()
    return data


def build_png(width: int = 8, height: int = 8) -> bytes:
    pix = fitz.Pixmap(fitz.csRGB, fitz.IRect(0, 0, width, height), False)
    pix.clear_with(255)
    return pix.tobytes("png")


class FakeRecognizer:
    """Stands in for GeminiRecognizer.

    ``texts`` maps page number -> recognized text, ``delays`` page number ->
    seconds to sleep, ``errors`` page number -> exception to raise.
    """

    provider_name = "fake"
    model = "fake-ocr"

    def __init__(self, texts=None, *, delays=None, errors=None, configured=True):
        self.texts = texts or {}
        self.delays = delays or {}
        self.errors = errors or {}
        self.configured = configured
        self.calls: list[tuple[int | None, str]] = []
        self.finished: list[int | None] = []
        self.cancelled: list[int | None] = []
        self.active = 0
        self.peak = 0

    async def recognize(self, image: bytes, mime_type: str, *, page_number: int | None = None) -> str:
        self.calls.append((page_number, mime_type))
        if not self.configured:
            raise LLMNotConfiguredError("GEMINI_API_KEY is missing")

        self.active += 1
        self.peak = max(self.peak, self.active)
        try:
            await asyncio.sleep(self.delays.get(page_number, 0))
            if page_number in self.errors:
                raise self.errors[page_number]
            self.finished.append(page_number)
            return self.texts.get(page_number, f"recognized page {page_number}")
        except asyncio.CancelledError:
            self.cancelled.append(page_number)
            raise
        finally:
            self.active -= 1


@pytest.fixture
def pdf_factory():
    return build_pdf


@pytest.fixture
def png_bytes() -> bytes:
    return build_png()


@pytest.fixture
def recognizer():
    return FakeRecognizer()


@pytest.fixture
def run_store():
    return RunStore()


@pytest.fixture
def client(recognizer, run_store):
    app.dependency_overrides[get_recognizer] = lambda: recognizer
    app.dependency_overrides[get_run_store] = lambda: run_store
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
