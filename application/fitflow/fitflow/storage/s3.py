#!/usr/bin/env python3
"""
S3 / S3-compatible object storage backend
"""
import logging
from typing import Any, Optional

import boto3
from botocore.config import Config as BotoConfig
from botocore.exceptions import BotoCoreError, ClientError

from .interface import BlobStorage, StorageError, generate_blob_key

logger = logging.getLogger(__name__)

_MISSING_KEY_CODES = {"NoSuchKey", "404", "NotFound"}


def build_s3_client(region: Optional[str] = None, endpoint_url: Optional[str] = None) -> Any:
    """Create a boto3 S3 client; ``endpoint_url`` targets S3-compatible stores"""
    return boto3.client(
        "s3",
        region_name=region,
        endpoint_url=endpoint_url,
        config=BotoConfig(
            retries={"max_attempts": 3, "mode": "standard"},
            connect_timeout=10,
            read_timeout=30,
        ),
    )


class S3BlobStorage(BlobStorage):
    """Stores blobs as objects under ``<prefix><YYYY-MM-DD>/<hex><ext>``"""

    def __init__(self, bucket: str, prefix: str = "", client: Any = None,
                 region: Optional[str] = None, endpoint_url: Optional[str] = None):
        if not bucket:
            raise StorageError("S3 bucket must be configured")
        self.bucket = bucket
        self.prefix = prefix
        self._client = client or build_s3_client(region=region, endpoint_url=endpoint_url)

    def _key(self, path: str) -> str:
        return f"{self.prefix}{path}"

    def save(self, data: bytes, file_name: str, content_type: Optional[str] = None) -> str:
        path = generate_blob_key(file_name)
        put_kwargs = {
            "Bucket": self.bucket,
            "Key": self._key(path),
            "Body": data,
        }
        if content_type:
            put_kwargs["ContentType"] = content_type

        try:
            self._client.put_object(**put_kwargs)
        except (BotoCoreError, ClientError) as e:
            raise StorageError(f"Failed to upload {path} to bucket {self.bucket}: {e}") from e

        logger.info(f"Uploaded blob to S3 bucket={self.bucket} key={self._key(path)}")
        return path

    def get(self, path: str) -> Optional[bytes]:
        try:
            response = self._client.get_object(Bucket=self.bucket, Key=self._key(path))
            return response["Body"].read()
        except ClientError as e:
            if e.response.get("Error", {}).get("Code") not in _MISSING_KEY_CODES:
                logger.error(f"Failed to read blob {path} from S3: {e}")
            return None
        except BotoCoreError as e:
            logger.error(f"Failed to read blob {path} from S3: {e}")
            return None

    def delete(self, path: str) -> bool:
        try:
            self._client.delete_object(Bucket=self.bucket, Key=self._key(path))
            return True
        except ClientError as e:
            if e.response.get("Error", {}).get("Code") in _MISSING_KEY_CODES:
                return True
            logger.error(f"Failed to delete blob {path} from S3: {e}")
            return False
        except BotoCoreError as e:
            logger.error(f"Failed to delete blob {path} from S3: {e}")
            return False
