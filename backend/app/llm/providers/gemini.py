# app/llm/providers/gemini.py
from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Optional

import httpx
from google import genai
from google.genai import errors as genai_errors
from google.genai import types

from app.llm.errors import LLMNonRetryableError, LLMNotConfiguredError, LLMRetryableError
from app.llm.types import OCRRequest, OCRResponse


@dataclass
class GeminiProvider:
    """
    Gemini provider using Google Gen AI SDK (google-genai).
    Single-attempt. A failed page fails the run; nothing is retried.

    The API key is handed in by the caller. ``None`` or an empty string means
    OCR is not configured and every call raises ``LLMNotConfiguredError``.
    """
    api_key: str | None = field(default=None, repr=False)
    _client: Optional[genai.Client] = None

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    def _get_client(self) -> genai.Client:
        if not self.configured:
            raise LLMNotConfiguredError("GEMINI_API_KEY is missing")
        if self._client is None:
            # Per-call timeout goes via GenerateContentConfig.http_options
            self._client = genai.Client(api_key=self.api_key)
        return self._client

    async def generate(self, req: OCRRequest, prompt: str) -> OCRResponse:
        client = self._get_client()

        try:
            # HttpOptions timeout is in milliseconds.
            http_opts = types.HttpOptions(timeout=int(req.timeout_seconds * 1000))
            cfg = types.GenerateContentConfig(http_options=http_opts)

            resp = await client.aio.models.generate_content(
                model=req.model,
                contents=[
                    types.Part.from_bytes(data=req.image, mime_type=req.mime_type),
                    prompt,
                ],
                config=cfg,
            )

            text = getattr(resp, "text", None) or ""

            # Token usage: best-effort, won't break if missing
            input_tokens = None
            output_tokens = None
            usage = getattr(resp, "usage_metadata", None)
            if usage is not None:
                input_tokens = getattr(usage, "prompt_token_count", None)
                output_tokens = getattr(usage, "candidates_token_count", None)

            return OCRResponse(
                trace_id=req.trace_id,
                output_text=text,
                input_tokens=input_tokens,
                output_tokens=output_tokens,
            )

        # ---- classify failures (all of them end the run) ----
        except (httpx.TimeoutException, asyncio.TimeoutError) as e:
            raise LLMRetryableError(f"Gemini call timed out: {e}") from e
        except httpx.HTTPError as e:
            raise LLMRetryableError(f"Gemini http error: {e}") from e
        except genai_errors.ServerError as e:
            raise LLMRetryableError(f"Gemini server error ({e.code}): {e.message}") from e
        except genai_errors.ClientError as e:
            if e.code == 429:
                raise LLMRetryableError(f"Gemini quota exceeded: {e.message}") from e
            raise LLMNonRetryableError(f"Gemini rejected the request ({e.code}): {e.message}") from e
        except genai_errors.APIError as e:
            raise LLMNonRetryableError(f"Gemini API error ({e.code}): {e.message}") from e
        except Exception as e:
            # e.g. a response the SDK could not parse
            raise LLMNonRetryableError(f"Gemini non-retryable failure: {e}") from e
