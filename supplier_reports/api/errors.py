"""Centralized exception definitions for the report engine and its collaborators."""

from __future__ import annotations

from typing import Optional


class AppError(Exception):
    """Base error carrying a user-facing message and an HTTP-like status."""

    def __init__(self, message: str, status_code: int = 400) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class ValidationError(AppError):
    """Raised when an argument is outside the accepted domain values."""

    def __init__(self, message: str) -> None:
        super().__init__(message=message, status_code=422)


class CollaboratorError(AppError):
    """Raised when the REST API fails or answers with ``success: false``."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message=message, status_code=status_code or 502)


class PayloadError(AppError):
    """Raised when a collaborator payload does not match the expected schema."""

    def __init__(self, message: str) -> None:
        super().__init__(message=message, status_code=502)


class UnsupportedOperationError(AppError):
    """Raised by collaborator operations that exist but are not implemented."""

    def __init__(self, message: str) -> None:
        super().__init__(message=message, status_code=501)


class NavigationError(AppError):
    """Raised when the navigator cannot write the requested URL."""

    def __init__(self, message: str) -> None:
        super().__init__(message=message, status_code=500)
