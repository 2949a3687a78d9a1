#!/usr/bin/env python3
"""
In-memory blob storage for tests and local development
"""
from typing import Dict, Optional

from .interface import BlobStorage, generate_blob_key


class InMemoryBlobStorage(BlobStorage):

    def __init__(self):
        self.blobs: Dict[str, bytes] = {}

    def save(self, data: bytes, file_name: str, content_type: Optional[str] = None) -> str:
        path = generate_blob_key(file_name)
        self.blobs[path] = bytes(data)
        return path

    def get(self, path: str) -> Optional[bytes]:
        return self.blobs.get(path)

    def delete(self, path: str) -> bool:
        self.blobs.pop(path, None)
        return True
