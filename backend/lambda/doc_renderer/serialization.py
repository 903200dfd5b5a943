"""serialization.py — DynamoDB deserialization, timestamps, structured observability.

Part of doc_renderer.
"""
from __future__ import annotations

import datetime as dt
import json
from decimal import Decimal
from typing import Any, Dict, Optional

from boto3.dynamodb.types import TypeDeserializer

from config import logger

__all__ = [
    "_deserialize",
    "_emit_structured_observability",
    "_now_z",
    "_parse_timestamp",
]

# ---------------------------------------------------------------------------
# Serialization helpers
# ---------------------------------------------------------------------------

_deserializer = TypeDeserializer()


def _deserialize(raw: Dict[str, Any]) -> Dict[str, Any]:
    """Convert a DynamoDB typed map to a plain dict (Decimal -> int/float)."""
    out: Dict[str, Any] = {}
    for k, v in raw.items():
        val = _deserializer.deserialize(v)
        if isinstance(val, Decimal):
            val = int(val) if val == int(val) else float(val)
        out[k] = val
    return out


def _now_z() -> str:
    return dt.datetime.now(dt.timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def _parse_timestamp(value: Any) -> dt.datetime:
    """Parse an ISO-8601 string or epoch seconds into an aware UTC-based datetime.

    Naive values are taken to be UTC.
    """
    if isinstance(value, (int, float)):
        return dt.datetime.fromtimestamp(value, tz=dt.timezone.utc)
    text = str(value or "").strip()
    if not text:
        raise ValueError("empty timestamp")
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    parsed = dt.datetime.fromisoformat(text)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=dt.timezone.utc)
    return parsed


def _emit_structured_observability(
    *,
    component: str,
    event: str,
    doc_id: Optional[str] = None,
    latency_ms: Optional[int] = None,
    error_code: Optional[str] = None,
    extra: Optional[Dict[str, Any]] = None,
) -> None:
    payload: Dict[str, Any] = {
        "timestamp": _now_z(),
        "component": component,
        "event": event,
        "doc_id": str(doc_id or ""),
        "latency_ms": int(max(0, latency_ms or 0)),
        "error_code": str(error_code or ""),
    }
    if extra:
        payload.update(extra)
    logger.info("[OBSERVABILITY] %s", json.dumps(payload, sort_keys=True, default=str))
