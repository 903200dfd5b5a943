"""aws_clients.py — Singleton AWS service clients (DynamoDB, S3).

Clients are created on first use and reused for the life of the Lambda
container, so every invocation shares one connection pool per service.

Part of doc_renderer.
"""
from __future__ import annotations

import boto3
from botocore.config import Config

from config import DYNAMODB_REGION, S3_REGION

__all__ = [
    "_get_ddb",
    "_get_s3",
]

# ---------------------------------------------------------------------------
# AWS client singletons
# ---------------------------------------------------------------------------

_ddb = None
_s3 = None


def _get_ddb():
    global _ddb
    if _ddb is None:
        _ddb = boto3.client(
            "dynamodb",
            region_name=DYNAMODB_REGION,
            config=Config(retries={"max_attempts": 3, "mode": "standard"}),
        )
    return _ddb


def _get_s3():
    global _s3
    if _s3 is None:
        _s3 = boto3.client(
            "s3",
            region_name=S3_REGION,
            config=Config(retries={"max_attempts": 3, "mode": "standard"}),
        )
    return _s3
