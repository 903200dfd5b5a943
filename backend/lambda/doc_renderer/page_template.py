"""page_template.py — Load the page template document and parse it with Jinja2.

The template is itself a stored document (``TEMPLATE_DOC_ID``). Fields
available to it are ``Title``, ``DocBody``, ``Timestamp`` and ``Version``.
Fields may be written either as ``{{ Title }}`` or dot-prefixed as
``{{.Title}}``; the dotted form is rewritten before parsing. Only ``{{ }}``
is markup: ``{%`` and ``{#`` are literal text, and ``{{/* ... */}}`` is a
comment.

By default every call fetches and parses the template again. With
TEMPLATE_CACHE_ENABLED the parsed template is kept per container and only
re-parsed when the stored template revision changes.

Part of doc_renderer.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Dict, FrozenSet, Optional

from jinja2 import Environment, StrictUndefined, Template, TemplateSyntaxError, meta

from config import (
    REQUIRED_TEMPLATE_FIELDS,
    TEMPLATE_CACHE_ENABLED,
    TEMPLATE_DOC_ID,
    TEMPLATE_STRICT_PLACEHOLDERS,
    logger,
)
from docstore import DocumentStore, Revision
from errors import DocumentNotFound, TemplateInvalid, TemplateMissing

__all__ = [
    "RenderTemplate",
    "clear_template_cache",
    "get_template",
    "parse_template",
]

_DOT_FIELD_RE = re.compile(r"\{\{(-?)\s*\.([A-Za-z_][A-Za-z0-9_]*)\s*(-?)\}\}")

# Only {{ ... }} is markup; {% and {# are literal page text. Block tags are
# moved to control-character delimiters that never occur in a page template,
# and comments use the {{/* ... */}} form.
# Body is already HTML; the template must not escape it.
_env = Environment(
    block_start_string="\x00\x01",
    block_end_string="\x01\x00",
    comment_start_string="{{/*",
    comment_end_string="*/}}",
    undefined=StrictUndefined,
    autoescape=False,
    keep_trailing_newline=True,
)

_template_cache: Dict[str, "RenderTemplate"] = {}


@dataclass(frozen=True)
class RenderTemplate:
    name: str
    version: int
    template: Template
    fields: FrozenSet[str]


def _rewrite_dot_fields(source: str) -> str:
    def _sub(match: re.Match) -> str:
        left, name, right = match.groups()
        return "{{" + left + " " + name + " " + right + "}}"

    return _DOT_FIELD_RE.sub(_sub, source)


def parse_template(source: bytes, *, name: str = TEMPLATE_DOC_ID, version: int = 0,
                   strict: Optional[bool] = None) -> RenderTemplate:
    """Parse template source. Raises TemplateInvalid on malformed syntax."""
    if strict is None:
        strict = TEMPLATE_STRICT_PLACEHOLDERS
    try:
        text = source.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise TemplateInvalid(f"template is not valid UTF-8: {exc}", operation="template.parse", doc_id=name) from exc

    text = _rewrite_dot_fields(text)
    try:
        ast = _env.parse(text, name=name)
        template = _env.from_string(ast)
    except TemplateSyntaxError as exc:
        raise TemplateInvalid(
            f"template syntax error at line {exc.lineno}: {exc.message}",
            operation="template.parse",
            doc_id=name,
        ) from exc

    parsed = RenderTemplate(
        name=name,
        version=version,
        template=template,
        fields=frozenset(meta.find_undeclared_variables(ast)),
    )
    _check_fields(parsed, strict)
    return parsed


def _check_fields(tmpl: RenderTemplate, strict: bool) -> None:
    missing = [f for f in REQUIRED_TEMPLATE_FIELDS if f not in tmpl.fields]
    if not missing:
        return
    if strict:
        raise TemplateInvalid(
            f"template does not reference required fields: {', '.join(missing)}",
            operation="template.parse",
            doc_id=tmpl.name,
        )
    logger.warning("template %s (v%d) does not reference: %s", tmpl.name, tmpl.version, ", ".join(missing))


def _load(store: DocumentStore, doc_id: str, strict: Optional[bool]) -> RenderTemplate:
    try:
        rev: Revision = store.fetch(doc_id)
    except DocumentNotFound as exc:
        raise TemplateMissing(f"template document {doc_id} not found", operation="template.fetch",
                              doc_id=doc_id) from exc
    return parse_template(rev.content, name=doc_id, version=rev.metadata.version, strict=strict)


def get_template(store: DocumentStore, doc_id: Optional[str] = None, *,
                 use_cache: Optional[bool] = None, strict: Optional[bool] = None) -> RenderTemplate:
    """Fetch and parse the page template.

    Raises TemplateMissing, TemplateInvalid, or StorageUnavailable.
    """
    doc_id = doc_id or TEMPLATE_DOC_ID
    if use_cache is None:
        use_cache = TEMPLATE_CACHE_ENABLED
    if not use_cache:
        return _load(store, doc_id, strict)

    try:
        current = store.latest_revision(doc_id)
    except DocumentNotFound as exc:
        _template_cache.pop(doc_id, None)
        raise TemplateMissing(f"template document {doc_id} not found", operation="template.fetch",
                              doc_id=doc_id) from exc

    cached = _template_cache.get(doc_id)
    if cached is not None and cached.version == current.version:
        if strict is None:
            strict = TEMPLATE_STRICT_PLACEHOLDERS
        if strict:
            _check_fields(cached, strict)
        return cached

    parsed = _load(store, doc_id, strict)
    _template_cache[doc_id] = parsed
    logger.info("template cache refreshed: %s v%d", doc_id, parsed.version)
    return parsed


def clear_template_cache() -> None:
    _template_cache.clear()
