"""app/extraction/dispatcher.py

Turns classified pages into final text.

Text pages pass through untouched. Image pages go to the recognizer, all at
once (or through a semaphore when ``max_concurrency`` is set). The first real
failure ends the run; outstanding recognitions are cancelled and their results
dropped. A recognizer without a credential is not a failure: the page gets a
clearly marked simulated placeholder and the run carries on.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from typing import Sequence

from app.extraction.types import ExtractedPage, ImagePage, Page, TextPage
from app.llm.errors import LLMNotConfiguredError
from app.llm.types import TextRecognizer

logger = logging.getLogger("app.extraction.dispatcher")

NO_TEXT_PLACEHOLDER = "[No text found on this page]"
SIMULATED_PREFIX = "[Simulated OCR"


def simulated_text(page_number: int) -> str:
    return f"{SIMULATED_PREFIX}: recognition service not configured (page {page_number})]"


def is_simulated(text: str) -> bool:
    return text.startswith(SIMULATED_PREFIX)


class PageDispatcher:
    def __init__(self, recognizer: TextRecognizer, *, max_concurrency: int | None = None):
        self.recognizer = recognizer
        self._semaphore = asyncio.Semaphore(max_concurrency) if max_concurrency else None

    async def resolve(self, pages: Sequence[Page]) -> list[ExtractedPage]:
        tasks = [asyncio.create_task(self._resolve_one(p)) for p in pages]
        try:
            results = await asyncio.gather(*tasks)
        except BaseException:
            for t in tasks:
                t.cancel()
            raise
        return sorted(results, key=lambda r: r.page_number)

    async def _resolve_one(self, page: Page) -> ExtractedPage:
        if isinstance(page, TextPage):
            return ExtractedPage(page_number=page.page_number, text=page.content, source="text")
        return await self._recognize(page)

    async def _recognize(self, page: ImagePage) -> ExtractedPage:
        guard = self._semaphore if self._semaphore is not None else contextlib.nullcontext()
        async with guard:
            try:
                text = await self.recognizer.recognize(
                    page.content, page.mime_type, page_number=page.page_number
                )
            except LLMNotConfiguredError:
                logger.warning("ocr.simulated", extra={"page_number": page.page_number})
                return ExtractedPage(
                    page_number=page.page_number,
                    text=simulated_text(page.page_number),
                    source="simulated",
                )

        if not text or not text.strip():
            return ExtractedPage(page_number=page.page_number, text=NO_TEXT_PLACEHOLDER, source="empty")
        return ExtractedPage(page_number=page.page_number, text=text, source="ocr")
