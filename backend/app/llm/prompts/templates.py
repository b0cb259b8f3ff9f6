# app/llm/prompts/templates.py

OCR_PAGE_V1 = (
    "You are an advanced OCR (Optical Character Recognition) system. "
    "Extract all text from this image. "
    "Preserve the original line breaks and structure as accurately as possible. "
    "Do not add any commentary or explanations, only return the extracted text."
)
