#!/usr/bin/env python3
"""
Quota Guard - storage budget check shared by media and fitness uploads
"""
import logging
from dataclasses import dataclass
from typing import Protocol

from .const import DEFAULT_QUOTA_PER_ACCOUNT

logger = logging.getLogger(__name__)


class StorageUsageSource(Protocol):
    """Anything that can report per-account storage usage in bytes"""

    def get_media_bytes(self, actor_id: str) -> int:
        ...

    def get_fitness_bytes(self, actor_id: str) -> int:
        ...


@dataclass(frozen=True)
class QuotaCheck:
    available: bool
    used: int
    limit: int


class QuotaExceededError(Exception):
    """An upload would push the account past its storage quota"""

    def __init__(self, used: int, limit: int, message: str = "Storage quota exceeded"):
        self.used = used
        self.limit = limit
        self.message = message
        super().__init__(f"{message} (used {used} of {limit} bytes)")


def check_quota(usage: StorageUsageSource, actor_id: str, additional_bytes: int,
                limit: int = DEFAULT_QUOTA_PER_ACCOUNT) -> QuotaCheck:
    """
    Decide whether ``additional_bytes`` fit in the account's remaining quota.

    Media and fitness usage share one limit. This only decides; callers abort
    the write and raise QuotaExceededError when ``available`` is False.
    """
    used = int(usage.get_media_bytes(actor_id) or 0) + int(usage.get_fitness_bytes(actor_id) or 0)
    available = used + max(additional_bytes, 0) <= limit

    if not available:
        logger.info(f"Quota check failed for {actor_id}: {used} + {additional_bytes} > {limit}")
    return QuotaCheck(available=available, used=used, limit=limit)


def ensure_quota(usage: StorageUsageSource, actor_id: str, additional_bytes: int,
                 limit: int = DEFAULT_QUOTA_PER_ACCOUNT) -> QuotaCheck:
    """check_quota that raises QuotaExceededError instead of returning unavailable"""
    result = check_quota(usage, actor_id, additional_bytes, limit)
    if not result.available:
        raise QuotaExceededError(used=result.used, limit=result.limit)
    return result
