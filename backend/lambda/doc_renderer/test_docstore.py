"""test_docstore.py — AwsDocStore against mocked DynamoDB / S3 clients.

Run: python3 -m pytest test_docstore.py -v
"""

from __future__ import annotations

import datetime as dt
import io
import os
import sys
import unittest
from unittest.mock import MagicMock, patch

from botocore.exceptions import ClientError, EndpointConnectionError

sys.path.insert(0, os.path.dirname(__file__))

import docstore  # noqa: E402
from errors import DocumentNotFound, StorageUnavailable  # noqa: E402


def _revision_item(doc_id="intro", version=3, created_at="2021-05-04T10:00:00Z", s3_key=None):
    item = {
        "doc_id": {"S": doc_id},
        "version": {"N": str(version)},
        "created_at": {"S": created_at},
    }
    if s3_key:
        item["s3_key"] = {"S": s3_key}
    return item


def _client_error(code, operation="GetObject"):
    return ClientError({"Error": {"Code": code, "Message": code}}, operation)


class AwsDocStoreTests(unittest.TestCase):
    def setUp(self):
        self.ddb = MagicMock()
        self.s3 = MagicMock()
        self.store = docstore.AwsDocStore(
            table="docstore", bucket="docs-bucket", prefix="revisions", ddb=self.ddb, s3=self.s3,
        )

    def test_fetch_reads_latest_revision(self):
        self.ddb.query.return_value = {"Items": [_revision_item()]}
        self.s3.get_object.return_value = {"Body": io.BytesIO(b"# Welcome\nBody text")}

        rev = self.store.fetch("intro")

        self.assertEqual(rev.content, b"# Welcome\nBody text")
        self.assertEqual(rev.metadata.version, 3)
        self.assertEqual(rev.metadata.timestamp, dt.datetime(2021, 5, 4, 10, 0, tzinfo=dt.timezone.utc))
        query_kwargs = self.ddb.query.call_args.kwargs
        self.assertEqual(query_kwargs["TableName"], "docstore")
        self.assertEqual(query_kwargs["ExpressionAttributeValues"], {":id": {"S": "intro"}})
        self.assertFalse(query_kwargs["ScanIndexForward"])
        self.assertEqual(query_kwargs["Limit"], 1)
        self.s3.get_object.assert_called_once_with(Bucket="docs-bucket", Key="revisions/intro/3")

    def test_fetch_uses_explicit_s3_key(self):
        self.ddb.query.return_value = {"Items": [_revision_item(s3_key="custom/intro.md")]}
        self.s3.get_object.return_value = {"Body": io.BytesIO(b"x")}
        self.store.fetch("intro")
        self.s3.get_object.assert_called_once_with(Bucket="docs-bucket", Key="custom/intro.md")

    def test_no_revisions_is_not_found(self):
        self.ddb.query.return_value = {"Items": []}
        with self.assertRaises(DocumentNotFound) as ctx:
            self.store.fetch("no-such-doc")
        self.assertEqual(ctx.exception.doc_id, "no-such-doc")
        self.s3.get_object.assert_not_called()

    def test_empty_identifier_is_not_found_without_backend_call(self):
        with self.assertRaises(DocumentNotFound):
            self.store.fetch("")
        self.ddb.query.assert_not_called()

    def test_query_client_error_is_storage_unavailable(self):
        self.ddb.query.side_effect = _client_error("ProvisionedThroughputExceededException", "Query")
        with self.assertRaises(StorageUnavailable) as ctx:
            self.store.fetch("intro")
        self.assertEqual(ctx.exception.operation, "docstore.query")

    def test_connection_error_is_storage_unavailable(self):
        self.ddb.query.side_effect = EndpointConnectionError(endpoint_url="https://dynamodb.example")
        with self.assertRaises(StorageUnavailable):
            self.store.fetch("intro")

    def test_missing_content_object_is_storage_unavailable(self):
        self.ddb.query.return_value = {"Items": [_revision_item()]}
        self.s3.get_object.side_effect = _client_error("NoSuchKey")
        with self.assertRaises(StorageUnavailable) as ctx:
            self.store.fetch("intro")
        self.assertEqual(ctx.exception.operation, "docstore.read")

    def test_malformed_timestamp_is_storage_unavailable(self):
        self.ddb.query.return_value = {"Items": [_revision_item(created_at="yesterday")]}
        with self.assertRaises(StorageUnavailable):
            self.store.fetch("intro")

    def test_latest_revision_skips_content_read(self):
        self.ddb.query.return_value = {"Items": [_revision_item(version=7)]}
        meta = self.store.latest_revision("doc-template.html")
        self.assertEqual(meta.version, 7)
        self.s3.get_object.assert_not_called()

    def test_content_key_without_prefix(self):
        store = docstore.AwsDocStore(prefix="", ddb=self.ddb, s3=self.s3)
        self.assertEqual(store.content_key("intro", 2), "intro/2")


class DocumentStoreContractTests(unittest.TestCase):
    def test_base_class_is_abstract(self):
        with self.assertRaises(TypeError):
            docstore.DocumentStore()

    def test_latest_revision_defaults_to_fetch(self):
        meta = docstore.RevisionMetadata(version=2, timestamp=dt.datetime(2021, 5, 4, tzinfo=dt.timezone.utc))

        class _OneDocStore(docstore.DocumentStore):
            def fetch(self, doc_id):
                return docstore.Revision(doc_id=doc_id, content=b"x", metadata=meta)

        self.assertEqual(_OneDocStore().latest_revision("intro"), meta)


class StoreSingletonTests(unittest.TestCase):
    def test_get_store_created_once(self):
        orig = docstore._store
        docstore._store = None
        try:
            with patch.object(docstore, "AwsDocStore") as mock_cls:
                first = docstore._get_store()
                second = docstore._get_store()
            self.assertIs(first, second)
            mock_cls.assert_called_once_with()
        finally:
            docstore._store = orig

    @patch("aws_clients.boto3")
    def test_clients_created_lazily(self, mock_boto3):
        import aws_clients

        aws_clients._ddb = None
        aws_clients._s3 = None
        try:
            store = docstore.AwsDocStore()
            mock_boto3.client.assert_not_called()
            self.assertIs(store.ddb, store.ddb)
            self.assertIs(store.s3, store.s3)
            self.assertEqual(mock_boto3.client.call_count, 2)
        finally:
            aws_clients._ddb = None
            aws_clients._s3 = None


if __name__ == "__main__":
    unittest.main()
