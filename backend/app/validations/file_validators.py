"""
file_validators.py
- Purpose: Centralized validation for uploads (PDF or image).
- Design: Raise AppError with stable error codes for UI + logs, before any processing starts.
"""

from app.core import ErrorCode, ErrorReason
from app.core.errors import input_error

PDF_MIME = "application/pdf"
IMAGE_MIMES = frozenset({"image/png", "image/jpeg", "image/webp"})
SUPPORTED_MIMES = frozenset({PDF_MIME}) | IMAGE_MIMES


def normalize_content_type(content_type: str | None) -> str:
    # "image/jpeg; charset=binary" -> "image/jpeg"
    return (content_type or "").split(";", 1)[0].strip().lower()


def is_pdf(content_type: str) -> bool:
    return normalize_content_type(content_type) == PDF_MIME


def check_upload_size(size: int | None, *, max_bytes: int) -> None:
    # size may be unknown (None) before the body is read
    if size is not None and size > max_bytes:
        raise input_error(
            ErrorReason.FILE_TOO_LARGE,
            code=ErrorCode.FILE_TOO_LARGE,
            status_code=413,
            details={"size_bytes": size, "max_bytes": max_bytes},
        )


def validate_upload(
    file_name: str | None,
    content_type: str | None,
    data: bytes | None,
    *,
    max_bytes: int,
) -> str:
    """Returns the normalized content type."""
    # Basic presence check
    if not file_name or data is None:
        raise input_error(ErrorReason.FILE_MISSING, code=ErrorCode.FILE_MISSING)

    # Content-type validation
    ct = normalize_content_type(content_type)
    if ct not in SUPPORTED_MIMES:
        raise input_error(
            ErrorReason.UNSUPPORTED_FILE_TYPE,
            code=ErrorCode.INVALID_FILE_TYPE,
            status_code=415,
            message=f"Unsupported file type '{ct or 'unknown'}'. Upload a PDF or a PNG, JPEG or WEBP image.",
            details={"content_type": ct},
        )

    if not data:
        raise input_error(ErrorReason.INVALID_INPUT, message="The uploaded file is empty.")

    check_upload_size(len(data), max_bytes=max_bytes)

    return ct
