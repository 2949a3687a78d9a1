#!/usr/bin/env python3
"""
Storage Module - blob storage abstraction and backends
"""

from .interface import BlobStorage, StorageError, generate_blob_key
from .local import LocalFileBlobStorage
from .memory import InMemoryBlobStorage
from .s3 import S3BlobStorage, build_s3_client

__all__ = [
    'BlobStorage',
    'StorageError',
    'generate_blob_key',
    'LocalFileBlobStorage',
    'InMemoryBlobStorage',
    'S3BlobStorage',
    'build_s3_client',
]
