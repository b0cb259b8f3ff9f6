"""app/extraction/classifier.py

Hybrid page classification.

A page whose text layer holds more than ``threshold`` characters (after
trimming) is taken as is. Anything less is treated as a scanned page: it is
rasterized and handed to OCR later. The threshold is a cheap proxy for "has a
real text layer", not a judgement on the text itself.
"""


import asyncio
import logging

from app.extraction.sources import PageSource
from app.extraction.types import ImagePage, Page, TextPage

logger = logging.getLogger("app.extraction.classifier")

DEFAULT_DPI = 300
DEFAULT_TEXT_THRESHOLD = 20
# The render scale is fixed at dpi / 96. Both PDF backends measure pages in
# 72 points per inch, so 300 dpi rasterizes at an effective 225.
BASE_DPI = 96


def render_scale(dpi: int) -> float:
    return dpi / BASE_DPI


def join_fragments(fragments: list[str]) -> str:
    return " ".join(fragments)


def has_sufficient_text(text: str, threshold: int = DEFAULT_TEXT_THRESHOLD) -> bool:
    return len(text.strip()) > threshold


async def classify_page(
    source: PageSource,
    page_number: int,
    *,
    dpi: int = DEFAULT_DPI,
    threshold: int = DEFAULT_TEXT_THRESHOLD,
) -> Page:
    text = join_fragments(await source.embedded_text(page_number))
    if has_sufficient_text(text, threshold):
        return TextPage(page_number=page_number, content=text)

    # RenderError propagates: one unrenderable page fails the run.
    image = await source.render_page(page_number, render_scale(dpi))
    logger.debug(
        "page.rasterized",
        extra={"page_number": page_number, "bytes": len(image.content), "mime_type": image.mime_type},
    )
    return ImagePage(page_number=page_number, content=image.content, mime_type=image.mime_type)


async def classify_document(
    source: PageSource,
    *,
    dpi: int = DEFAULT_DPI,
    threshold: int = DEFAULT_TEXT_THRESHOLD,
) -> list[Page]:
    """Classify every page concurrently; results come back in page order."""
    tasks = [
        asyncio.create_task(classify_page(source, n, dpi=dpi, threshold=threshold))
        for n in range(1, source.page_count + 1)
    ]
    try:
        pages = await asyncio.gather(*tasks)
    except BaseException:
        for t in tasks:
            t.cancel()
        # let cancelled pages release the source before the caller closes it
        await asyncio.gather(*tasks, return_exceptions=True)
        raise
    return sorted(pages, key=lambda p: p.page_number)
