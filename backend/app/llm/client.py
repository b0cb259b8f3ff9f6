# app/llm/client.py


import uuid

from app.core.config import Settings
from app.llm.errors import LLMError, LLMNotConfiguredError
from app.llm.prompts.registry import get_prompt
from app.llm.providers.gemini import GeminiProvider
from app.llm.telemetry import OCRCallLog, log_ocr_call, now_ms
from app.llm.types import OCRRequest


class GeminiRecognizer:
    """Page OCR through Gemini.

    One attempt per call; errors are raised as ``LLMError`` subclasses and
    logged through telemetry before they propagate.
    """

    provider_name = "gemini"
    purpose = "ocr_page"

    def __init__(
        self,
        *,
        api_key: str | None,
        model: str,
        timeout_seconds: int = 60,
        prompt_name: str = "ocr_page",
        prompt_version: str = "v1",
        provider: GeminiProvider | None = None,
    ):
        self.model = model
        self.timeout_seconds = timeout_seconds
        self.prompt_name = prompt_name
        self.prompt_version = prompt_version
        self._provider = provider or GeminiProvider(api_key=api_key)
        self._prompt = get_prompt(prompt_name, prompt_version).template

    @property
    def configured(self) -> bool:
        return self._provider.configured

    async def recognize(self, image: bytes, mime_type: str, *, page_number: int | None = None) -> str:
        req = OCRRequest(
            trace_id=str(uuid.uuid4()),
            purpose=self.purpose,
            prompt_name=self.prompt_name,
            prompt_version=self.prompt_version,
            provider=self.provider_name,
            model=self.model,
            timeout_seconds=self.timeout_seconds,
            image=image,
            mime_type=mime_type,
            page_number=page_number,
        )

        start_ms = now_ms()
        try:
            resp = await self._provider.generate(req, self._prompt)
        except LLMNotConfiguredError:
            # Expected in demo setups; the caller decides how to degrade.
            raise
        except LLMError as e:
            self._log(req, start_ms, ok=False, error_type=type(e).__name__)
            raise

        self._log(
            req,
            start_ms,
            ok=True,
            chars=len(resp.output_text),
            input_tokens=resp.input_tokens,
            output_tokens=resp.output_tokens,
        )
        return resp.output_text

    def _log(
        self,
        req: OCRRequest,
        start_ms: int,
        *,
        ok: bool,
        chars: int = 0,
        error_type: str | None = None,
        input_tokens: int | None = None,
        output_tokens: int | None = None,
    ) -> None:
        log_ocr_call(
            OCRCallLog(
                trace_id=req.trace_id,
                provider=req.provider,
                model=req.model,
                purpose=req.purpose,
                prompt_name=req.prompt_name,
                prompt_version=req.prompt_version,
                page_number=req.page_number,
                latency_ms=(now_ms() - start_ms),
                ok=ok,
                chars=chars,
                error_type=error_type,
                input_tokens=input_tokens,
                output_tokens=output_tokens,
            )
        )


def build_recognizer(settings: Settings) -> GeminiRecognizer:
    return GeminiRecognizer(
        api_key=settings.GEMINI_API_KEY,
        model=settings.GEMINI_MODEL,
        timeout_seconds=settings.OCR_TIMEOUT_SECONDS,
    )
