"""app/extraction/types.py

Lightweight dataclasses passed between the pipeline stages:
planner -> classifier -> dispatcher -> assembler.
All of them are frozen; a page's classification never changes once made.
"""


from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Literal, Union


@dataclass(frozen=True)
class Chunk:
    index: int  # 1-based
    pages: tuple[int, ...]


@dataclass(frozen=True)
class TextPage:
    page_number: int
    content: str
    kind: Literal["text"] = "text"


@dataclass(frozen=True)
class ImagePage:
    page_number: int
    content: bytes = field(repr=False)
    mime_type: str = "image/jpeg"
    kind: Literal["image"] = "image"


Page = Union[TextPage, ImagePage]


@dataclass(frozen=True)
class RenderedImage:
    content: bytes = field(repr=False)
    mime_type: str


PageSourceKind = Literal["text", "ocr", "empty", "simulated"]


@dataclass(frozen=True)
class ExtractedPage:
    page_number: int
    text: str
    source: PageSourceKind = "text"

    @property
    def degraded(self) -> bool:
        return self.source == "simulated"


@dataclass(frozen=True)
class OutputArtifact:
    name: str
    content: bytes = field(repr=False)
    media_type: str

    @property
    def size(self) -> int:
        return len(self.content)


LogLevel = Literal["info", "success", "warning"]


@dataclass(frozen=True)
class LogEntry:
    message: str
    level: LogLevel = "info"
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
