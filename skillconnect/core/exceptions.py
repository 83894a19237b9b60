"""
skillconnect/core/exceptions.py

Description:
Defines a standard error response format for the API.
"""

from typing import Any

from fastapi import HTTPException


class APIError(HTTPException):
    """Custom exception with standardized error response."""

    def __init__(
        self,
        status_code: int,
        message: str,
        code: str | None = None,
        extra: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ):
        detail: dict[str, Any] = {"error": message}
        if code:
            detail["code"] = code
        if extra:
            detail.update(extra)
        super().__init__(status_code=status_code, detail=detail, headers=headers)
        self.code = code


class EmailDeliveryError(Exception):
    """Raised when the mail provider rejects or fails to accept a message."""
