# app/llm/types.py
from dataclasses import dataclass, field
from typing import Protocol


@dataclass(frozen=True)
class OCRRequest:
    trace_id: str
    purpose: str                    # e.g. "ocr_page"
    prompt_name: str                # registry key
    prompt_version: str             # e.g. "v1"

    provider: str                   # "gemini"
    model: str                      # e.g. "gemini-2.5-flash"
    timeout_seconds: int

    image: bytes = field(repr=False, default=b"")
    mime_type: str = "image/jpeg"
    page_number: int | None = None

@dataclass(frozen=True)
class OCRResponse:
    trace_id: str
    output_text: str

    # Token usage, when the provider reports it
    input_tokens: int | None = None
    output_tokens: int | None = None


class TextRecognizer(Protocol):
    """Anything that turns an image into text.

    Implementations raise ``LLMNotConfiguredError`` when they cannot run for
    lack of a credential, and another ``LLMError`` for any other failure.
    """

    async def recognize(self, image: bytes, mime_type: str, *, page_number: int | None = None) -> str:
        ...
