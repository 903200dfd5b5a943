"""doc_renderer/lambda_function.py

Renders one stored document as an HTML page per request.

Routes (via API Gateway proxy):
    GET /docs/{docId}    — render document

Render modes (decided from the identifier alone):
    docId contains "."   — stored bytes returned verbatim as text/html
    otherwise            — markdown converted to HTML, wrapped in the page
                           template document (TEMPLATE_DOC_ID) together with
                           the first content line as title, the revision
                           timestamp and the revision version

Responses:
    200  text/html page
    404  empty body, document not stored
    500  empty body, storage/template/composition failure (logged)

Environment variables:
    DOCSTORE_TABLE                default: docstore
    DOCSTORE_BUCKET               default: docstore-content
    DOCSTORE_PREFIX               default: revisions
    DYNAMODB_REGION               default: us-west-2
    TEMPLATE_DOC_ID               default: doc-template.html
    TEMPLATE_CACHE_ENABLED        default: false
    TEMPLATE_STRICT_PLACEHOLDERS  default: false
    MARKDOWN_EXTENSIONS           default: fenced_code,tables
    LOG_LEVEL                     default: INFO
"""

from __future__ import annotations

import time
from typing import Any, Dict, Optional

from classifier import RenderMode, classify
from composer import compose
from config import logger
from docstore import DocumentStore, Revision, _get_store
from errors import DocumentNotFound, RenderError, status_for
from http_utils import _doc_id, _empty, _html_response, _path_method
from markdown_renderer import render
from page_metadata import extract
from page_template import get_template
from serialization import _emit_structured_observability

# ---------------------------------------------------------------------------
# Rendering
# ---------------------------------------------------------------------------


def _render_page(revision: Revision, store: DocumentStore) -> bytes:
    html = render(revision.content)
    template = get_template(store)
    meta = extract(revision.content, revision.metadata, body=html.decode("utf-8"))
    return compose(
        template,
        meta.body,
        meta.title,
        meta.timestamp,
        meta.version,
    )


def _finish(
    doc_id: str,
    mode: Optional[RenderMode],
    response: Dict[str, Any],
    started: float,
    exc: Optional[BaseException] = None,
) -> Dict[str, Any]:
    error_code = ""
    if exc is not None:
        error_code = getattr(exc, "error_code", "") or "INTERNAL_ERROR"
    _emit_structured_observability(
        component="doc_renderer",
        event="render",
        doc_id=doc_id,
        latency_ms=int((time.monotonic() - started) * 1000),
        error_code=error_code,
        extra={
            "render_mode": mode.value if mode else "",
            "status": response["statusCode"],
        },
    )
    return response


# ---------------------------------------------------------------------------
# Handler
# ---------------------------------------------------------------------------


def handle_request(event: Dict[str, Any], store: DocumentStore) -> Dict[str, Any]:
    started = time.monotonic()
    method, path = _path_method(event)
    doc_id = _doc_id(event)
    logger.info("request parse: method=%s path=%s doc_id=%s", method, path, doc_id)

    try:
        revision = store.fetch(doc_id)
    except DocumentNotFound as exc:
        logger.warning("fetch: document not found: doc_id=%s (%s)", doc_id, exc)
        return _finish(doc_id, None, _empty(404), started, exc)
    except Exception as exc:
        logger.error(
            "fetch failed: operation=%s doc_id=%s error=%s",
            getattr(exc, "operation", "docstore.fetch"), doc_id, exc,
        )
        return _finish(doc_id, None, _empty(500), started, exc)

    mode = classify(doc_id)
    if mode is RenderMode.RAW:
        return _finish(doc_id, mode, _html_response(200, revision.content), started)

    try:
        page = _render_page(revision, store)
    except RenderError as exc:
        logger.error(
            "render failed: operation=%s doc_id=%s version=%d error=%s",
            exc.operation, doc_id, revision.metadata.version, exc,
        )
        return _finish(doc_id, mode, _empty(status_for(exc)), started, exc)
    except Exception as exc:
        logger.exception("render failed: doc_id=%s unexpected error", doc_id)
        return _finish(doc_id, mode, _empty(500), started, exc)

    return _finish(doc_id, mode, _html_response(200, page), started)


def lambda_handler(event: Dict[str, Any], context: Any) -> Dict[str, Any]:
    return handle_request(event, _get_store())
