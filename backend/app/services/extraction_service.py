# app/services/extraction_service.py
"""
extraction_service.py
- Purpose: Orchestrates one extraction run end-to-end:
  validate -> open source -> plan chunks -> classify pages -> OCR -> build output files.
- Owns: the run log shown to the user, progress state, mapping core failures to AppError.
- Design: Thick service; routers remain thin and easy to reason about.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field

from app.constants.statuses import ProcessState
from app.core import ErrorCode, ErrorReason
from app.core.errors import not_found, run_failed
from app.core.request_context import set_context
from app.extraction.assembler import assemble
from app.extraction.chunking import describe_plan, plan_chunks
from app.extraction.classifier import DEFAULT_DPI, DEFAULT_TEXT_THRESHOLD, classify_document
from app.extraction.dispatcher import PageDispatcher
from app.extraction.errors import RenderError
from app.extraction.sources import open_source
from app.extraction.types import Chunk, ExtractedPage, ImagePage, LogEntry, LogLevel, OutputArtifact
from app.llm.errors import LLMError
from app.llm.types import TextRecognizer
from app.services.run_store import RunStore
from app.validations.file_validators import validate_upload

logger = logging.getLogger("app.extraction_service")

DEFAULT_MAX_UPLOAD_BYTES = 200 * 1024 * 1024


class RunLog:
    """The user-facing log of a run. Every entry is mirrored to the app logger."""

    def __init__(self) -> None:
        self.entries: list[LogEntry] = []

    def add(self, message: str, level: LogLevel = "info") -> LogEntry:
        entry = LogEntry(message=message, level=level)
        self.entries.append(entry)
        log = logger.warning if level == "warning" else logger.info
        log("run.log", extra={"run_message": message, "run_level": level})
        return entry


@dataclass
class ExtractionRun:
    run_id: str
    file_name: str
    content_type: str
    file_size: int
    state: ProcessState = ProcessState.IDLE
    backend: str | None = None
    chunks: list[Chunk] = field(default_factory=list)
    pages: list[ExtractedPage] = field(default_factory=list)
    artifacts: list[OutputArtifact] = field(default_factory=list)
    logs: list[LogEntry] = field(default_factory=list)

    @property
    def degraded(self) -> bool:
        return any(p.degraded for p in self.pages)

    def artifact(self, name: str) -> OutputArtifact | None:
        for a in self.artifacts:
            if a.name == name:
                return a
        return None


class ExtractionService:
    def __init__(
        self,
        recognizer: TextRecognizer,
        runs: RunStore,
        *,
        dpi: int = DEFAULT_DPI,
        text_threshold: int = DEFAULT_TEXT_THRESHOLD,
        max_concurrency: int | None = None,
        max_upload_bytes: int = DEFAULT_MAX_UPLOAD_BYTES,
    ):
        self.recognizer = recognizer
        self.runs = runs
        self.dpi = dpi
        self.text_threshold = text_threshold
        self.max_upload_bytes = max_upload_bytes
        self.dispatcher = PageDispatcher(recognizer, max_concurrency=max_concurrency)

    async def run(self, file_name: str | None, content_type: str | None, data: bytes | None) -> ExtractionRun:
        # Input errors surface before anything is planned or opened.
        ct = validate_upload(file_name, content_type, data, max_bytes=self.max_upload_bytes)

        run = ExtractionRun(
            run_id=str(uuid.uuid4()),
            file_name=file_name,
            content_type=ct,
            file_size=len(data),
        )
        set_context(run_id=run.run_id, file_name=file_name)
        run_log = RunLog()
        run.logs = run_log.entries

        run.state = ProcessState.UPLOADING
        run_log.add(f'Starting processing for "{file_name}".')
        source = open_source(data, ct)
        run.backend = source.backend

        try:
            run.state = ProcessState.SPLITTING
            run.chunks = plan_chunks(source.page_count, run.file_size)
            run_log.add(describe_plan(run.chunks, run.file_size))
            run_log.add(f"Split plan ready: {source.page_count} page(s) in {len(run.chunks)} part(s).", "success")

            run.state = ProcessState.EXTRACTING
            run_log.add(f"Reading embedded text from {source.page_count} page(s)...")
            classified = await classify_document(source, dpi=self.dpi, threshold=self.text_threshold)

            image_pages = [p.page_number for p in classified if isinstance(p, ImagePage)]
            run_log.add(
                f"{source.page_count - len(image_pages)} page(s) have embedded text; "
                f"{len(image_pages)} page(s) need OCR."
            )
            if image_pages:
                run_log.add(f"Applying intelligent OCR via Gemini to {len(image_pages)} page(s)...")

            run.pages = await self.dispatcher.resolve(classified)

            simulated = [p.page_number for p in run.pages if p.degraded]
            if simulated:
                run_log.add(
                    f"No Gemini API key configured. Simulated OCR output used for page(s) {simulated}.",
                    "warning",
                )
            run_log.add("Text extraction successful.", "success")

            run.state = ProcessState.GENERATING
            run_log.add("Generating output files...")
            run.artifacts = assemble(run.chunks, run.pages)
            run_log.add("Output files generated.", "success")

            run.state = ProcessState.DONE
            run_log.add("Processing complete!", "success")

        except RenderError as e:
            run_log.add(f"Error: {e}", "warning")
            raise run_failed(
                ErrorCode.RENDER_FAILED,
                ErrorReason.RENDER_FAILED,
                message=str(e),
                details={"page_number": e.page_number},
            ) from e
        except LLMError as e:
            run_log.add(f"Error: {e}", "warning")
            raise run_failed(ErrorCode.OCR_FAILED, ErrorReason.OCR_FAILED, message=str(e)) from e
        finally:
            await source.aclose()

        logger.info(
            "run.done",
            extra={
                "pages": len(run.pages),
                "chunks": len(run.chunks),
                "artifacts": len(run.artifacts),
                "degraded": run.degraded,
                "backend": run.backend,
            },
        )
        self.runs.put(run)
        return run

    def get_run(self, run_id: str) -> ExtractionRun:
        run = self.runs.get(run_id)
        if not run:
            raise not_found(message="Run not found or already released")
        return run

    def get_artifact(self, run_id: str, name: str) -> OutputArtifact:
        artifact = self.get_run(run_id).artifact(name)
        if not artifact:
            raise not_found(message=f"No output file named '{name}' in this run")
        return artifact

    def release_run(self, run_id: str) -> None:
        if not self.runs.release(run_id):
            raise not_found(message="Run not found or already released")
        logger.info("run.released", extra={"released_run_id": run_id})
