"""errors.py — Failure taxonomy for the render pipeline.

Each error records the operation that failed and the document identifier it
was working on, so a single log line is enough to diagnose a failed request.
The handler maps error types to response codes (see ``status_for``).
"""
from __future__ import annotations

from typing import Optional

__all__ = [
    "CompositionError",
    "DocumentNotFound",
    "RenderError",
    "StorageUnavailable",
    "TemplateInvalid",
    "TemplateMissing",
    "status_for",
]


class RenderError(Exception):
    """Base class for every expected pipeline failure."""

    status_code = 500
    error_code = "INTERNAL_ERROR"

    def __init__(self, message: str, *, operation: str = "", doc_id: Optional[str] = None) -> None:
        super().__init__(message)
        self.operation = operation
        self.doc_id = doc_id


class DocumentNotFound(RenderError):
    status_code = 404
    error_code = "NOT_FOUND"


class StorageUnavailable(RenderError):
    error_code = "STORAGE_UNAVAILABLE"


class TemplateMissing(RenderError):
    error_code = "TEMPLATE_MISSING"


class TemplateInvalid(RenderError):
    error_code = "TEMPLATE_INVALID"


class CompositionError(RenderError):
    error_code = "COMPOSITION_ERROR"


def status_for(exc: BaseException) -> int:
    if isinstance(exc, RenderError):
        return exc.status_code
    return 500
