#!/usr/bin/env python3
"""
Blob storage abstract interface and shared key scheme
"""
import secrets
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from pathlib import PurePosixPath
from typing import Optional


def generate_blob_key(file_name: str, now: Optional[datetime] = None) -> str:
    """``<YYYY-MM-DD>/<16 hex chars><ext>``, keeping the original extension"""
    now = now or datetime.now(timezone.utc)
    extension = PurePosixPath(file_name or "").suffix.lower()
    return f"{now.strftime('%Y-%m-%d')}/{secrets.token_hex(8)}{extension}"


class BlobStorage(ABC):
    """Byte storage addressed by path"""

    @abstractmethod
    def save(self, data: bytes, file_name: str, content_type: Optional[str] = None) -> str:
        """Store bytes and return the path to address them with"""
        pass

    @abstractmethod
    def get(self, path: str) -> Optional[bytes]:
        """Return stored bytes, or None when the path does not exist"""
        pass

    @abstractmethod
    def delete(self, path: str) -> bool:
        """Delete stored bytes; a missing object counts as deleted"""
        pass


class StorageError(Exception):
    """Blob storage backend failure"""

    pass
