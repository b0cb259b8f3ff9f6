"""app/extraction/chunking.py

Size-based chunk planning.

A large upload is exported as several parts. Nothing is physically split:
a chunk is just a contiguous range of page numbers that is serialized into
its own set of output files.
"""


import math

from app.extraction.types import Chunk

MIB = 1024 * 1024

SPLIT_IN_TWO_MB = 10.0
FIXED_CHUNKS_MB = 19.0
PAGES_PER_CHUNK = 15


def file_size_mb(file_size_bytes: int) -> float:
    return file_size_bytes / MIB


def _ranges(num_pages: int, size: int) -> list[tuple[int, ...]]:
    return [
        tuple(range(start, min(start + size, num_pages + 1)))
        for start in range(1, num_pages + 1, size)
    ]


def plan_chunks(num_pages: int, file_size_bytes: int) -> list[Chunk]:
    """Partition pages 1..num_pages into chunks.

    - under 10 MiB: a single chunk
    - 10 to 19 MiB: two halves, the first one holding ceil(n / 2) pages
    - 19 MiB and up: runs of 15 pages, the last one holding the remainder

    Chunks are never empty, so zero pages gives zero chunks and a one-page
    file in the middle band gets a single chunk.
    """
    if num_pages <= 0:
        return []

    size_mb = file_size_mb(max(0, file_size_bytes))

    if size_mb < SPLIT_IN_TWO_MB:
        groups = [tuple(range(1, num_pages + 1))]
    elif size_mb < FIXED_CHUNKS_MB:
        groups = _ranges(num_pages, math.ceil(num_pages / 2))
    else:
        groups = _ranges(num_pages, PAGES_PER_CHUNK)

    return [Chunk(index=i, pages=pages) for i, pages in enumerate(groups, start=1)]


def describe_plan(chunks: list[Chunk], file_size_bytes: int) -> str:
    """One human-readable line for the run log."""
    size_mb = file_size_mb(file_size_bytes)
    if size_mb >= FIXED_CHUNKS_MB:
        return f"File size ({size_mb:.2f}MB) >= 19MB. Splitting into {len(chunks)} parts of up to {PAGES_PER_CHUNK} pages."
    if size_mb >= SPLIT_IN_TWO_MB:
        return f"File size ({size_mb:.2f}MB) is between 10-19MB. Splitting into {len(chunks)} parts."
    return f"File size ({size_mb:.2f}MB) < 10MB. Processing directly."
