"""http_utils.py — API Gateway proxy responses and request parsing.

Part of doc_renderer.
"""
from __future__ import annotations

from typing import Any, Dict, Tuple, Union

__all__ = [
    "_doc_id",
    "_empty",
    "_html_response",
    "_path_method",
]

HTML_CONTENT_TYPE = "text/html"


def _html_response(status_code: int, body: Union[str, bytes]) -> Dict[str, Any]:
    if isinstance(body, bytes):
        body = body.decode("utf-8", errors="replace")
    return {
        "statusCode": status_code,
        "headers": {"Content-Type": HTML_CONTENT_TYPE},
        "body": body,
        "isBase64Encoded": False,
    }


def _empty(status_code: int) -> Dict[str, Any]:
    """Terminal failure response. Never carries internal error text."""
    return {
        "statusCode": status_code,
        "headers": {},
        "body": "",
        "isBase64Encoded": False,
    }


def _doc_id(event: Dict[str, Any]) -> str:
    path_params = event.get("pathParameters") or {}
    return str(path_params.get("docId") or "")


def _path_method(event: Dict[str, Any]) -> Tuple[str, str]:
    """Extract HTTP method and path from an API Gateway v1 or v2 event."""
    method = (event.get("requestContext", {}).get("http", {}).get("method") or event.get("httpMethod") or "GET").upper()
    path = event.get("rawPath") or event.get("path") or "/"
    return method, path
