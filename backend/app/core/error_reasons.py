"""
error_reasons.py
- Purpose: Human-friendly "reason" strings.
- Keep these stable; they are surfaced in the UI.
"""

from enum import Enum


class ErrorReason(str, Enum):
    UNKNOWN = "Unknown error"

    INVALID_INPUT = "Invalid input"
    RESOURCE_NOT_FOUND = "Resource not found"

    FILE_MISSING = "Please select a file first."
    UNSUPPORTED_FILE_TYPE = "Unsupported file type"
    FILE_TOO_LARGE = "File too large"
    PDF_INVALID = "Invalid PDF"
    RENDER_FAILED = "Page rendering failed"
    OCR_FAILED = "Text recognition failed"
    INTERNAL_ERROR = "Internal server error"
