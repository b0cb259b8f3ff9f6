# app/llm/prompts/registry.py

from dataclasses import dataclass

from app.llm.prompts import templates

@dataclass(frozen=True)
class PromptTemplate:
    name: str
    version: str
    template: str

PROMPTS: dict[tuple[str, str], PromptTemplate] = {
    ("ocr_page", "v1"): PromptTemplate("ocr_page", "v1", templates.OCR_PAGE_V1),
}

def get_prompt(name: str, version: str) -> PromptTemplate:
    key = (name, version)
    if key not in PROMPTS:
        raise KeyError(f"Unknown prompt: {name}@{version}")
    return PROMPTS[key]
