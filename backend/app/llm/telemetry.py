# app/llm/telemetry.py

import logging
import time
from dataclasses import dataclass

logger = logging.getLogger("llm")

@dataclass
class OCRCallLog:
    trace_id: str
    provider: str
    model: str
    purpose: str
    prompt_name: str
    prompt_version: str
    page_number: int | None
    latency_ms: int
    ok: bool
    chars: int = 0
    error_type: str | None = None
    input_tokens: int | None = None
    output_tokens: int | None = None

def now_ms() -> int:
    return int(time.time() * 1000)

def log_ocr_call(item: OCRCallLog) -> None:
    logger.info(
        "ocr_call trace_id=%s provider=%s model=%s purpose=%s prompt=%s@%s page=%s latency_ms=%s ok=%s chars=%s "
        "in_tokens=%s out_tokens=%s error=%s",
        item.trace_id,
        item.provider,
        item.model,
        item.purpose,
        item.prompt_name,
        item.prompt_version,
        item.page_number,
        item.latency_ms,
        item.ok,
        item.chars,
        item.input_tokens,
        item.output_tokens,
        item.error_type,
        extra={"input_tokens": item.input_tokens, "output_tokens": item.output_tokens},
    )
