"""classifier.py — Decide how a document is rendered from its identifier alone."""
from __future__ import annotations

import enum

__all__ = ["RenderMode", "classify"]


class RenderMode(str, enum.Enum):
    RAW = "raw"
    MARKDOWN_TEMPLATED = "markdown"


def classify(doc_id: str) -> RenderMode:
    """Any '.' in the identifier means the stored bytes are served as-is.

    There is no extension allowlist: ``v1.2-notes`` is raw too.
    """
    if "." in doc_id:
        return RenderMode.RAW
    return RenderMode.MARKDOWN_TEMPLATED
