"""
extraction.py (schemas)
- Purpose: Response DTOs for extraction runs.
- Design: Keep API DTOs stable; include helper constructors for DRY mapping.
"""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel


class ChunkOut(BaseModel):
    index: int
    pages: list[int]


class PageOut(BaseModel):
    page_number: int
    source: Literal["text", "ocr", "empty", "simulated"]
    text: str


class LogEntryOut(BaseModel):
    timestamp: datetime
    level: Literal["info", "success", "warning"]
    message: str


class OutputFileOut(BaseModel):
    name: str
    media_type: str
    size: int
    url: str


class ExtractionRunResponse(BaseModel):
    """
    API response after a run completes. Everything the UI needs to show
    results, the log, and download links.
    """
    run_id: str
    file_name: str
    status: str
    backend: str | None
    page_count: int
    degraded: bool
    chunks: list[ChunkOut]
    pages: list[PageOut]
    logs: list[LogEntryOut]
    outputs: list[OutputFileOut]

    @classmethod
    def from_run(cls, run) -> "ExtractionRunResponse":
        """
        DRY mapper from ExtractionRun -> response DTO.
        """
        rid = run.run_id
        return cls(
            run_id=rid,
            file_name=run.file_name,
            status=run.state.value,
            backend=run.backend,
            page_count=len(run.pages),
            degraded=run.degraded,
            chunks=[ChunkOut(index=c.index, pages=list(c.pages)) for c in run.chunks],
            pages=[PageOut(page_number=p.page_number, source=p.source, text=p.text) for p in run.pages],
            logs=[LogEntryOut(timestamp=e.timestamp, level=e.level, message=e.message) for e in run.logs],
            outputs=[
                OutputFileOut(
                    name=a.name,
                    media_type=a.media_type,
                    size=a.size,
                    url=f"/api/runs/{rid}/files/{a.name}",
                )
                for a in run.artifacts
            ],
        )
