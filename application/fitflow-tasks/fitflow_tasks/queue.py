"""
Archive import queue messages and publishers.

A message carries a full snapshot of the job so a worker can tell a stale
re-delivery from the current step.
"""

import hashlib
import logging
import secrets
from typing import Any, List, Optional, Protocol

from pydantic import BaseModel, Field

from .database.models import ArchiveImportJob

logger = logging.getLogger(__name__)

IMPORT_ARCHIVE_TASK = "fitflow_tasks.tasks.archive_import.import_archive_step"
IMPORT_ARCHIVE_QUEUE = "archive_import"


class PendingMediaActivity(BaseModel):
    """An imported activity whose media still has to be attached"""
    activity_id: str
    status_id: str
    media_paths: List[str] = Field(default_factory=list)


class ImportArchiveMessage(BaseModel):
    """One step of an archive import"""
    job_id: str
    actor_id: str
    archive_id: str
    archive_file_id: Optional[str] = None
    batch_id: str
    visibility: str = "public"
    next_activity_index: int = Field(default=0, ge=0)
    pending_media_activities: List[PendingMediaActivity] = Field(default_factory=list)
    media_attachment_retry: int = Field(default=0, ge=0)
    total_activities_count: Optional[int] = None
    completed_activities_count: int = 0
    failed_activities_count: int = 0
    first_failure_message: Optional[str] = None
    nonce: str = Field(default_factory=lambda: secrets.token_hex(8))

    @classmethod
    def from_job(cls, job: ArchiveImportJob) -> "ImportArchiveMessage":
        return cls(
            job_id=job.id,
            actor_id=job.actor_id,
            archive_id=job.archive_id,
            archive_file_id=job.archive_file_id,
            batch_id=job.batch_id,
            visibility=job.visibility,
            next_activity_index=job.next_activity_index,
            pending_media_activities=[
                PendingMediaActivity.model_validate(item) for item in job.pending_media_activities or []
            ],
            media_attachment_retry=job.media_attachment_retry,
            total_activities_count=job.total_activities_count,
            completed_activities_count=job.completed_activities_count,
            failed_activities_count=job.failed_activities_count,
            first_failure_message=job.first_failure_message,
        )

    @property
    def task_id(self) -> str:
        """Queue job id, unique per job, cursor, retry counter and publish"""
        key = ":".join([
            self.actor_id,
            self.archive_id,
            self.job_id,
            str(self.next_activity_index),
            str(self.media_attachment_retry),
            self.nonce,
        ])
        return f"archive-import-{hashlib.sha256(key.encode('utf-8')).hexdigest()}"


class QueuePublisher(Protocol):
    """Anything that can enqueue an archive import step"""

    def publish(self, message: ImportArchiveMessage) -> None:
        ...


class CeleryQueue:
    """Publishes import steps to the archive_import Celery queue"""

    def __init__(self, app: Any, task_name: str = IMPORT_ARCHIVE_TASK, queue: str = IMPORT_ARCHIVE_QUEUE):
        self.app = app
        self.task_name = task_name
        self.queue = queue

    def publish(self, message: ImportArchiveMessage) -> None:
        self.app.send_task(
            self.task_name,
            args=[message.model_dump(mode="json")],
            task_id=message.task_id,
            queue=self.queue,
        )
        logger.debug(
            f"Published import step job={message.job_id} "
            f"cursor={message.next_activity_index} task_id={message.task_id}"
        )
