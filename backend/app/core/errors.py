"""
errors.py
- Purpose: AppError used across services for consistent errors.
- Pattern: raise AppError(...) in service/validator, handler converts to JSON response.
"""



from dataclasses import dataclass
from enum import Enum
from typing import Any

from fastapi import status as http_status
from app.core.error_codes import ErrorCode
from app.core.error_reasons import ErrorReason



@dataclass
class AppError(Exception):
    code: ErrorCode
    reason: str
    status_code: int = http_status.HTTP_400_BAD_REQUEST
    details: dict[str, Any] | None = None
    message: str | None = None  # Optional human-readable message

    def __str__(self) -> str:
        return self.message if self.message else _text(self.reason)

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "error": {
                "code": self.code,
                "reason": self.reason,
                "message": self.message if self.message else self.reason,
            }
        }
        if self.details:
            payload["error"]["details"] = self.details
        return payload


def _text(reason: str) -> str:
    # str() of a str-mixin Enum gives "ErrorReason.X"; we want the value.
    return reason.value if isinstance(reason, Enum) else reason


# Convenience constructors
def input_error(
    reason: str = ErrorReason.INVALID_INPUT,
    *,
    code: ErrorCode = ErrorCode.VALIDATION_ERROR,
    status_code: int = 422,
    message: str | None = None,
    details: dict | None = None,
) -> AppError:
    """Boundary errors: bad or missing upload. Nothing is processed."""
    return AppError(code=code, reason=_text(reason), status_code=status_code, message=message, details=details)


def not_found(reason: str = ErrorReason.RESOURCE_NOT_FOUND, *, message: str | None = None) -> AppError:
    return AppError(code=ErrorCode.NOT_FOUND, reason=_text(reason), status_code=http_status.HTTP_404_NOT_FOUND, message=message)


def run_failed(code: ErrorCode, reason: str, *, message: str, details: dict | None = None) -> AppError:
    return AppError(code=code, reason=_text(reason), status_code=http_status.HTTP_502_BAD_GATEWAY, message=message, details=details)
