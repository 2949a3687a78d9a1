"""
Database models for FitFlow Tasks.

This module defines the tables the archive import worker reads and writes:
uploaded fitness files, archive import jobs and the media rows counted
against the storage quota. Uses SQLModel.
"""

import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

from sqlalchemy import JSON, Column, Index, text
from sqlmodel import SQLModel, Field

from fitflow.processors import ProcessingStatus


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_id() -> str:
    return str(uuid.uuid4())


class ArchiveImportStatus(str, Enum):
    """Archive import job states"""
    IMPORTING = "importing"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"


TERMINAL_IMPORT_STATUSES = (ArchiveImportStatus.COMPLETED.value, ArchiveImportStatus.CANCELLED.value)


class FitnessFile(SQLModel, table=True):
    """
    Uploaded fitness file metadata.

    Created after the blob write succeeds. The activity summary columns are
    filled once the file has been normalized.
    """
    __tablename__ = "fitness_files"

    id: str = Field(default_factory=new_id, primary_key=True)
    actor_id: str = Field(index=True)
    path: str
    file_name: str
    file_type: str
    mime_type: str
    bytes: int = Field(default=0)
    description: Optional[str] = None
    import_batch_id: Optional[str] = Field(default=None, index=True)
    source_key: Optional[str] = None

    import_status: str = Field(default=ProcessingStatus.PENDING.value)
    processing_status: str = Field(default=ProcessingStatus.PENDING.value)
    import_error: Optional[str] = None
    status_id: Optional[str] = None

    has_map_data: bool = Field(default=False)
    map_image_path: Optional[str] = None
    total_distance_meters: Optional[float] = None
    total_duration_seconds: Optional[float] = None
    elevation_gain_meters: Optional[float] = None
    activity_type: Optional[str] = None
    start_time: Optional[datetime] = None

    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    def __repr__(self) -> str:
        return f"<FitnessFile(id={self.id}, actor_id={self.actor_id}, file_type={self.file_type})>"


class ArchiveImportJob(SQLModel, table=True):
    """
    One Strava archive import attempt.

    ``next_activity_index`` is the only resumption point. Rows with
    ``resolved_at`` NULL are active; the partial unique index allows one
    active job per actor.
    """
    __tablename__ = "archive_import_jobs"
    __table_args__ = (
        Index(
            "ux_archive_import_jobs_active_actor",
            "actor_id",
            unique=True,
            sqlite_where=text("resolved_at IS NULL"),
            postgresql_where=text("resolved_at IS NULL"),
        ),
    )

    id: str = Field(default_factory=new_id, primary_key=True)
    actor_id: str
    archive_id: str = Field(unique=True)
    archive_file_id: Optional[str] = None
    batch_id: str
    visibility: str = Field(default="public")
    status: str = Field(default=ArchiveImportStatus.IMPORTING.value)

    next_activity_index: int = Field(default=0)
    pending_media_activities: List[Dict[str, Any]] = Field(
        default_factory=list, sa_column=Column(JSON, nullable=False)
    )
    media_attachment_retry: int = Field(default=0)

    total_activities_count: Optional[int] = None
    completed_activities_count: int = Field(default=0)
    failed_activities_count: int = Field(default=0)

    first_failure_message: Optional[str] = None
    last_error: Optional[str] = None

    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)
    resolved_at: Optional[datetime] = None

    def __repr__(self) -> str:
        return f"<ArchiveImportJob(id={self.id}, actor_id={self.actor_id}, status={self.status})>"


class Media(SQLModel, table=True):
    """Media attached to published activities; counted against the storage quota"""
    __tablename__ = "medias"

    id: str = Field(default_factory=new_id, primary_key=True)
    actor_id: str = Field(index=True)
    status_id: Optional[str] = Field(default=None, index=True)
    name: str
    mime_type: str
    path: str
    original_bytes: int = Field(default=0)
    thumbnail_bytes: int = Field(default=0)
    created_at: datetime = Field(default_factory=utcnow)


class PrivacyLocationSetting(SQLModel, table=True):
    """A saved location whose surroundings are left off rendered route maps"""
    __tablename__ = "privacy_locations"

    id: str = Field(default_factory=new_id, primary_key=True)
    actor_id: str = Field(index=True)
    latitude: float
    longitude: float
    hide_radius_meters: int
    created_at: datetime = Field(default_factory=utcnow)


def _isoformat(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


def job_snapshot(job: ArchiveImportJob) -> Dict[str, Any]:
    """User-facing status of an import job"""
    return {
        "id": job.id,
        "actor_id": job.actor_id,
        "archive_id": job.archive_id,
        "archive_file_id": job.archive_file_id,
        "batch_id": job.batch_id,
        "visibility": job.visibility,
        "status": job.status,
        "next_activity_index": job.next_activity_index,
        "total_activities_count": job.total_activities_count,
        "completed_activities_count": job.completed_activities_count,
        "failed_activities_count": job.failed_activities_count,
        "pending_media_count": len(job.pending_media_activities or []),
        "first_failure_message": job.first_failure_message,
        "last_error": job.last_error,
        "created_at": _isoformat(job.created_at),
        "updated_at": _isoformat(job.updated_at),
        "resolved_at": _isoformat(job.resolved_at),
    }
