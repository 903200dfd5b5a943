"""composer.py — Merge a rendered body and page metadata into the page template."""
from __future__ import annotations

from jinja2 import TemplateError

from errors import CompositionError
from page_template import RenderTemplate

__all__ = ["compose"]


def compose(template: RenderTemplate, body: str, title: str, timestamp: str, version: int) -> bytes:
    """Execute the template. Raises CompositionError if the template rejects the fields."""
    try:
        page = template.template.render(
            Title=title,
            DocBody=body,
            Timestamp=timestamp,
            Version=version,
        )
    except (TemplateError, TypeError, ValueError) as exc:
        raise CompositionError(
            f"template execution failed: {exc}",
            operation="template.execute",
            doc_id=template.name,
        ) from exc
    return page.encode("utf-8")
