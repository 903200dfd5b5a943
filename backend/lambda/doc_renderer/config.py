"""config.py — Central configuration — environment variables, constants, logging.

Part of doc_renderer.
"""
from __future__ import annotations

import logging
import os

__all__ = [
    "DOCSTORE_BUCKET",
    "DOCSTORE_PREFIX",
    "DOCSTORE_TABLE",
    "DYNAMODB_REGION",
    "MARKDOWN_EXTENSIONS",
    "REQUIRED_TEMPLATE_FIELDS",
    "S3_REGION",
    "TEMPLATE_CACHE_ENABLED",
    "TEMPLATE_DOC_ID",
    "TEMPLATE_STRICT_PLACEHOLDERS",
    "TIMESTAMP_FORMAT",
    "logger",
]


def _env_flag(name: str, default: str = "false") -> bool:
    return os.environ.get(name, default).strip().lower() in {"1", "true", "yes", "on"}


def _env_csv(name: str, default: str) -> tuple[str, ...]:
    values: list[str] = []
    for part in os.environ.get(name, default).split(","):
        item = part.strip()
        if item and item not in values:
            values.append(item)
    return tuple(values)


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------

DOCSTORE_TABLE = os.environ.get("DOCSTORE_TABLE", "docstore")
DOCSTORE_BUCKET = os.environ.get("DOCSTORE_BUCKET", "docstore-content")
DOCSTORE_PREFIX = os.environ.get("DOCSTORE_PREFIX", "revisions").strip("/")
DYNAMODB_REGION = os.environ.get("DYNAMODB_REGION", "us-west-2")
S3_REGION = os.environ.get("S3_REGION", DYNAMODB_REGION)

TEMPLATE_DOC_ID = os.environ.get("TEMPLATE_DOC_ID", "doc-template.html")
TEMPLATE_CACHE_ENABLED = _env_flag("TEMPLATE_CACHE_ENABLED")
TEMPLATE_STRICT_PLACEHOLDERS = _env_flag("TEMPLATE_STRICT_PLACEHOLDERS")
REQUIRED_TEMPLATE_FIELDS = ("Title", "DocBody", "Timestamp", "Version")

MARKDOWN_EXTENSIONS = _env_csv("MARKDOWN_EXTENSIONS", "fenced_code,tables")

# Monday, 02-Jan-06 15:04:05 MST
TIMESTAMP_FORMAT = "%A, %d-%b-%y %H:%M:%S %Z"

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

logger = logging.getLogger()
logger.setLevel(getattr(logging, os.environ.get("LOG_LEVEL", "INFO").upper(), logging.INFO))
