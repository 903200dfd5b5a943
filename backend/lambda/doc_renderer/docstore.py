"""docstore.py — Versioned document storage (revision metadata in DynamoDB, content on S3).

Storage layout:
    DynamoDB  DOCSTORE_TABLE   pk doc_id (S), sk version (N)
                               attrs: created_at (S, ISO-8601), s3_key (S, optional)
    S3        DOCSTORE_BUCKET  {DOCSTORE_PREFIX}/{doc_id}/{version} unless s3_key is set

The latest revision of a document is the item with the highest version.
Revisions are immutable; an edit writes a new item, it never rewrites one.

The store only reads. Callers get a ``Revision`` back or one of two failures:
``DocumentNotFound`` when nothing is stored under the identifier, and
``StorageUnavailable`` for every backend/transport problem.

Part of doc_renderer.
"""
from __future__ import annotations

import datetime as dt
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, Optional

from botocore.exceptions import BotoCoreError, ClientError

from aws_clients import _get_ddb, _get_s3
from config import DOCSTORE_BUCKET, DOCSTORE_PREFIX, DOCSTORE_TABLE, logger
from errors import DocumentNotFound, StorageUnavailable
from serialization import _deserialize, _parse_timestamp

__all__ = [
    "AwsDocStore",
    "DocumentStore",
    "Revision",
    "RevisionMetadata",
]


@dataclass(frozen=True)
class RevisionMetadata:
    version: int
    timestamp: dt.datetime


@dataclass(frozen=True)
class Revision:
    doc_id: str
    content: bytes
    metadata: RevisionMetadata


class DocumentStore(ABC):
    """Read contract the render pipeline depends on."""

    @abstractmethod
    def fetch(self, doc_id: str) -> Revision:
        ...

    def latest_revision(self, doc_id: str) -> RevisionMetadata:
        return self.fetch(doc_id).metadata


class AwsDocStore(DocumentStore):
    def __init__(
        self,
        *,
        table: str = DOCSTORE_TABLE,
        bucket: str = DOCSTORE_BUCKET,
        prefix: str = DOCSTORE_PREFIX,
        ddb: Any = None,
        s3: Any = None,
    ) -> None:
        self.table = table
        self.bucket = bucket
        self.prefix = prefix
        self._ddb = ddb
        self._s3 = s3

    @property
    def ddb(self):
        if self._ddb is None:
            self._ddb = _get_ddb()
        return self._ddb

    @property
    def s3(self):
        if self._s3 is None:
            self._s3 = _get_s3()
        return self._s3

    def content_key(self, doc_id: str, version: int) -> str:
        if self.prefix:
            return f"{self.prefix}/{doc_id}/{version}"
        return f"{doc_id}/{version}"

    def _latest_item(self, doc_id: str) -> Dict[str, Any]:
        if not doc_id:
            raise DocumentNotFound("empty document identifier", operation="docstore.query", doc_id=doc_id)
        try:
            resp = self.ddb.query(
                TableName=self.table,
                KeyConditionExpression="doc_id = :id",
                ExpressionAttributeValues={":id": {"S": doc_id}},
                ScanIndexForward=False,
                Limit=1,
                ConsistentRead=True,
            )
        except (ClientError, BotoCoreError) as exc:
            raise StorageUnavailable(
                f"revision query failed: {exc}", operation="docstore.query", doc_id=doc_id
            ) from exc
        items = resp.get("Items") or []
        if not items:
            raise DocumentNotFound(f"no revisions stored for {doc_id}", operation="docstore.query", doc_id=doc_id)
        return _deserialize(items[0])

    def _metadata(self, doc_id: str, item: Dict[str, Any]) -> RevisionMetadata:
        try:
            return RevisionMetadata(
                version=int(item["version"]),
                timestamp=_parse_timestamp(item.get("created_at")),
            )
        except (KeyError, TypeError, ValueError) as exc:
            raise StorageUnavailable(
                f"malformed revision record: {exc}", operation="docstore.metadata", doc_id=doc_id
            ) from exc

    def latest_revision(self, doc_id: str) -> RevisionMetadata:
        return self._metadata(doc_id, self._latest_item(doc_id))

    def fetch(self, doc_id: str) -> Revision:
        item = self._latest_item(doc_id)
        meta = self._metadata(doc_id, item)
        key = str(item.get("s3_key") or self.content_key(doc_id, meta.version))
        content = self._read_content(doc_id, key)
        logger.debug("docstore fetch: doc_id=%s version=%d bytes=%d", doc_id, meta.version, len(content))
        return Revision(doc_id=doc_id, content=content, metadata=meta)

    def _read_content(self, doc_id: str, key: str) -> bytes:
        try:
            resp = self.s3.get_object(Bucket=self.bucket, Key=key)
            return resp["Body"].read()
        except ClientError as exc:
            code = exc.response.get("Error", {}).get("Code", "Unknown")
            # The revision row exists, so a missing object is a backend inconsistency.
            raise StorageUnavailable(
                f"content read failed ({code}) for s3://{self.bucket}/{key}",
                operation="docstore.read",
                doc_id=doc_id,
            ) from exc
        except (BotoCoreError, OSError) as exc:
            raise StorageUnavailable(
                f"content read failed for s3://{self.bucket}/{key}: {exc}",
                operation="docstore.read",
                doc_id=doc_id,
            ) from exc


_store: Optional[DocumentStore] = None


def _get_store() -> DocumentStore:
    """Process-wide store handle, created on first use."""
    global _store
    if _store is None:
        _store = AwsDocStore()
    return _store
