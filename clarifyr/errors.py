"""Failure taxonomy for the explain pipeline.

Every failure a caller can observe is an :class:`ExplainError` carrying the
status code and the JSON payload the HTTP layer returns for it.
"""

from __future__ import annotations

from typing import Any


class ExplainError(Exception):
    """Base class for classified pipeline failures."""

    status_code: int = 500
    kind: str = "error"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_payload(self) -> dict[str, Any]:
        return {"error": self.message}


class ValidationError(ExplainError):
    """The request carried no usable content."""

    status_code = 400
    kind = "validation"


class FetchError(ExplainError):
    """The URL could not be retrieved (transport error, timeout, bad status)."""

    status_code = 400
    kind = "fetch"

    def __init__(self, reason: str) -> None:
        super().__init__("Failed to fetch URL content")
        self.reason = reason

    def __str__(self) -> str:
        return f"{self.message}: {self.reason}"

    def to_payload(self) -> dict[str, Any]:
        return {"error": self.message, "details": self.reason}


class ModelError(ExplainError):
    """The generative model failed or returned no usable text.

    The underlying cause is kept for logging only; callers get a generic
    message.
    """

    status_code = 500
    kind = "model"

    def __init__(self, cause: str | BaseException) -> None:
        super().__init__("Failed to generate explanation")
        self.cause = cause

    def __str__(self) -> str:
        return f"{self.message}: {self.cause}"
