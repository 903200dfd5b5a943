"""page_metadata.py — Title, revision timestamp and version shown on a rendered page."""
from __future__ import annotations

import datetime as dt
from dataclasses import dataclass

from config import TIMESTAMP_FORMAT
from docstore import RevisionMetadata

__all__ = ["PageMetadata", "extract", "first_line", "format_timestamp"]


@dataclass(frozen=True)
class PageMetadata:
    title: str
    timestamp: str
    version: int
    body: str = ""


def first_line(content: bytes) -> str:
    line = content.split(b"\n", 1)[0]
    if line.endswith(b"\r"):
        line = line[:-1]
    return line.decode("utf-8", errors="replace")


def format_timestamp(when: dt.datetime) -> str:
    if when.tzinfo is None:
        when = when.replace(tzinfo=dt.timezone.utc)
    zone = when.tzname() or ""
    if not zone or (zone.startswith("UTC") and zone != "UTC"):
        # Zones without an abbreviation print as a numeric offset.
        return when.strftime(TIMESTAMP_FORMAT.replace("%Z", "%z"))
    return when.strftime(TIMESTAMP_FORMAT)


def extract(raw_content: bytes, revision: RevisionMetadata, body: str = "") -> PageMetadata:
    return PageMetadata(
        title=first_line(raw_content),
        timestamp=format_timestamp(revision.timestamp),
        version=revision.version,
        body=body,
    )
