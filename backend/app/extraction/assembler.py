"""app/extraction/assembler.py

Serializes extracted pages into downloadable files, three per chunk:

- <base>.txt   page number on its own line, then the text; pages separated by a blank line
- <base>.json  {"paginas": {"<page>": "<text>"}}, 2-space indent
- <base>.html  one <article data-pagina="N"> per page

<base> is "saida" for a single chunk and "part<N>_saida" otherwise.
"""


import html
import json
from typing import Sequence

from app.extraction.types import Chunk, ExtractedPage, OutputArtifact

BASE_NAME = "saida"

TEXT_MEDIA_TYPE = "text/plain"
JSON_MEDIA_TYPE = "application/json"
HTML_MEDIA_TYPE = "text/html"

_HTML_TEMPLATE = """<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>Extracted Content - {title}</title>
    <style>
        body {{ font-family: sans-serif; line-height: 1.6; padding: 2em; }}
        article {{ border: 1px solid #ccc; padding: 1em; margin-bottom: 1em; border-radius: 5px; white-space: pre-wrap; }}
        article::before {{ content: 'Page ' attr(data-pagina); font-weight: bold; display: block; margin-bottom: 0.5em; color: #555; }}
    </style>
</head>
<body>
{articles}
</body>
</html>"""


def render_text(pages: Sequence[ExtractedPage]) -> str:
    return "\n\n".join(f"{p.page_number}\n{p.text}" for p in pages)


def render_json(pages: Sequence[ExtractedPage]) -> str:
    payload = {"paginas": {str(p.page_number): p.text for p in pages}}
    return json.dumps(payload, indent=2, ensure_ascii=False)


def _article(page: ExtractedPage) -> str:
    body = html.escape(page.text, quote=False).replace("\n", "\n  ")
    return f'<article data-pagina="{page.page_number}">\n  {body}\n</article>'


def render_html(pages: Sequence[ExtractedPage], title: str = BASE_NAME) -> str:
    articles = "\n\n".join(_article(p) for p in pages)
    return _HTML_TEMPLATE.format(title=html.escape(title), articles=articles)


def chunk_base_name(chunk: Chunk, total_chunks: int) -> str:
    if total_chunks <= 1:
        return BASE_NAME
    return f"part{chunk.index}_{BASE_NAME}"


def assemble(chunks: Sequence[Chunk], pages: Sequence[ExtractedPage]) -> list[OutputArtifact]:
    by_number = {p.page_number: p for p in pages}
    artifacts: list[OutputArtifact] = []

    for chunk in chunks:
        missing = [n for n in chunk.pages if n not in by_number]
        if missing:
            raise ValueError(f"Chunk {chunk.index} has no extracted text for pages {missing}")

        chunk_pages = [by_number[n] for n in sorted(chunk.pages)]
        base = chunk_base_name(chunk, len(chunks))

        artifacts.extend(
            [
                OutputArtifact(f"{base}.txt", render_text(chunk_pages).encode("utf-8"), TEXT_MEDIA_TYPE),
                OutputArtifact(f"{base}.json", render_json(chunk_pages).encode("utf-8"), JSON_MEDIA_TYPE),
                OutputArtifact(f"{base}.html", render_html(chunk_pages, base).encode("utf-8"), HTML_MEDIA_TYPE),
            ]
        )

    return artifacts
