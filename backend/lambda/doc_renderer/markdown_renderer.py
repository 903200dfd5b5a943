"""markdown_renderer.py — Markdown source bytes to HTML bytes."""
from __future__ import annotations

from typing import Sequence

import markdown

from config import MARKDOWN_EXTENSIONS

__all__ = ["render"]


def render(source: bytes, extensions: Sequence[str] = MARKDOWN_EXTENSIONS) -> bytes:
    # Invalid UTF-8 is replaced rather than rejected so every input renders.
    text = source.decode("utf-8", errors="replace")
    html = markdown.markdown(text, extensions=list(extensions), output_format="html")
    return html.encode("utf-8")
