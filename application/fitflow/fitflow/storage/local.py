#!/usr/bin/env python3
"""
Local filesystem blob storage
"""
import logging
from pathlib import Path
from typing import Optional, Union

from .interface import BlobStorage, StorageError, generate_blob_key

logger = logging.getLogger(__name__)


class LocalFileBlobStorage(BlobStorage):
    """Stores blobs below a root directory, one sub-directory per day"""

    def __init__(self, root: Union[str, Path]):
        self.root = Path(root).resolve()

    def _resolve(self, path: str) -> Path:
        full_path = (self.root / path).resolve()
        if self.root not in full_path.parents:
            raise StorageError(f"Path escapes storage root: {path}")
        return full_path

    def save(self, data: bytes, file_name: str, content_type: Optional[str] = None) -> str:
        key = generate_blob_key(file_name)
        full_path = self._resolve(key)
        try:
            full_path.parent.mkdir(parents=True, exist_ok=True)
            full_path.write_bytes(data)
        except OSError as e:
            raise StorageError(f"Failed to write {key}: {e}") from e

        logger.debug(f"Saved {len(data)} bytes to {full_path}")
        return key

    def get(self, path: str) -> Optional[bytes]:
        try:
            return self._resolve(path).read_bytes()
        except FileNotFoundError:
            return None
        except OSError as e:
            logger.error(f"Failed to read blob {path}: {e}")
            return None

    def delete(self, path: str) -> bool:
        try:
            self._resolve(path).unlink()
            return True
        except FileNotFoundError:
            return True
        except OSError as e:
            logger.error(f"Failed to delete blob {path}: {e}")
            return False
