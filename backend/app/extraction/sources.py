"""app/extraction/sources.py

Page-source providers: give the pipeline, per 1-based page number, the
embedded text fragments of the page or a raster image of it.

Backends:
1) PyMuPDF (fitz), which handles nearly every PDF
2) pdfplumber, used when PyMuPDF cannot open the document
3) ImageSource for uploads that already are an image (one page, no text layer)

Neither PDF library is safe for concurrent use of one document, so each
source serializes its calls with an asyncio.Lock and runs them in a worker
thread. The event loop stays free while a page renders.

A worker thread cannot be interrupted. When the awaiting task is cancelled
the lock stays held until the thread returns, and ``aclose()`` takes the
same lock, so a document is never closed under a running call.
"""

from __future__ import annotations

import asyncio
import io
import logging
from typing import Protocol

import fitz  # PyMuPDF
import pdfplumber

from app.core import ErrorCode, ErrorReason
from app.core.errors import input_error
from app.extraction.errors import RenderError
from app.extraction.types import RenderedImage
from app.validations.file_validators import is_pdf

logger = logging.getLogger("app.extraction.sources")

JPEG_MIME = "image/jpeg"
JPEG_QUALITY = 100
PDF_POINTS_PER_INCH = 72


class PageSource(Protocol):
    backend: str

    @property
    def page_count(self) -> int: ...

    async def embedded_text(self, page_number: int) -> list[str]: ...

    async def render_page(self, page_number: int, scale: float) -> RenderedImage: ...

    async def aclose(self) -> None: ...


class _ThreadedDocument:
    """Runs blocking document calls one at a time in a worker thread."""

    def __init__(self) -> None:
        self._lock = asyncio.Lock()

    async def _call(self, fn, *args):
        async with self._lock:
            work = asyncio.ensure_future(asyncio.to_thread(fn, *args))
            try:
                return await asyncio.shield(work)
            except asyncio.CancelledError:
                # hold the lock until the thread is done with the document
                await asyncio.gather(work, return_exceptions=True)
                raise

    def _close(self) -> None:
        raise NotImplementedError

    async def aclose(self) -> None:
        async with self._lock:
            self._close()


class PyMuPDFSource(_ThreadedDocument):
    backend = "pymupdf"

    def __init__(self, doc: "fitz.Document"):
        super().__init__()
        self._doc = doc

    @classmethod
    def open(cls, pdf_bytes: bytes) -> "PyMuPDFSource":
        return cls(fitz.open(stream=pdf_bytes, filetype="pdf"))

    @property
    def page_count(self) -> int:
        return self._doc.page_count

    def _fragments(self, page_number: int) -> list[str]:
        page = self._doc.load_page(page_number - 1)
        # Spans come back in content-stream order; image blocks carry no lines.
        raw = page.get_text("dict", sort=False)
        fragments: list[str] = []
        for block in raw.get("blocks", []):
            for line in block.get("lines", []):
                for span in line.get("spans", []):
                    fragments.append(span.get("text", ""))
        return fragments

    def _render(self, page_number: int, scale: float) -> RenderedImage:
        try:
            page = self._doc.load_page(page_number - 1)
            pix = page.get_pixmap(matrix=fitz.Matrix(scale, scale), alpha=False)
            data = pix.tobytes("jpeg", jpg_quality=JPEG_QUALITY)
        except Exception as e:
            raise RenderError(page_number, f"Could not render page {page_number}: {e}") from e
        return RenderedImage(content=data, mime_type=JPEG_MIME)

    async def embedded_text(self, page_number: int) -> list[str]:
        return await self._call(self._fragments, page_number)

    async def render_page(self, page_number: int, scale: float) -> RenderedImage:
        return await self._call(self._render, page_number, scale)

    def _close(self) -> None:
        self._doc.close()


class PdfPlumberSource(_ThreadedDocument):
    backend = "pdfplumber"

    def __init__(self, pdf: "pdfplumber.PDF"):
        super().__init__()
        self._pdf = pdf

    @classmethod
    def open(cls, pdf_bytes: bytes) -> "PdfPlumberSource":
        pdf = pdfplumber.open(io.BytesIO(pdf_bytes))
        # pdfplumber parses lazily; touch the page tree so broken files fail here
        _ = len(pdf.pages)
        return cls(pdf)

    @property
    def page_count(self) -> int:
        return len(self._pdf.pages)

    def _fragments(self, page_number: int) -> list[str]:
        page = self._pdf.pages[page_number - 1]
        words = page.extract_words(use_text_flow=True)
        return [w["text"] for w in words]

    def _render(self, page_number: int, scale: float) -> RenderedImage:
        try:
            page = self._pdf.pages[page_number - 1]
            resolution = int(round(PDF_POINTS_PER_INCH * scale))
            img = page.to_image(resolution=resolution).original
            buf = io.BytesIO()
            img.convert("RGB").save(buf, format="JPEG", quality=JPEG_QUALITY)
        except Exception as e:
            raise RenderError(page_number, f"Could not render page {page_number}: {e}") from e
        return RenderedImage(content=buf.getvalue(), mime_type=JPEG_MIME)

    async def embedded_text(self, page_number: int) -> list[str]:
        return await self._call(self._fragments, page_number)

    async def render_page(self, page_number: int, scale: float) -> RenderedImage:
        return await self._call(self._render, page_number, scale)

    def _close(self) -> None:
        self._pdf.close()


class ImageSource:
    """A single uploaded image: one page, no text layer, rendered as is."""

    backend = "image"

    def __init__(self, image_bytes: bytes, mime_type: str):
        self._image = image_bytes
        self._mime_type = mime_type

    @property
    def page_count(self) -> int:
        return 1

    async def embedded_text(self, page_number: int) -> list[str]:
        return []

    async def render_page(self, page_number: int, scale: float) -> RenderedImage:
        return RenderedImage(content=self._image, mime_type=self._mime_type)

    async def aclose(self) -> None:
        return None


def open_pdf(pdf_bytes: bytes) -> PageSource:
    try:
        return PyMuPDFSource.open(pdf_bytes)
    except Exception as e:
        logger.warning("source.pymupdf_failed", extra={"error": str(e)})

    try:
        return PdfPlumberSource.open(pdf_bytes)
    except Exception as e:
        raise input_error(
            ErrorReason.PDF_INVALID,
            code=ErrorCode.PDF_INVALID,
            message="The PDF could not be opened. The file may be damaged or encrypted.",
        ) from e


def open_source(data: bytes, content_type: str) -> PageSource:
    if is_pdf(content_type):
        return open_pdf(data)
    return ImageSource(data, content_type)
