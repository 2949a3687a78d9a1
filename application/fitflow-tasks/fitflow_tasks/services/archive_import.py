"""
Archive Import Orchestrator.

Drives the bulk import of a Strava export one activity per queue message.
The job row in the store is the only source of truth: every step re-loads it,
drops messages that no longer match it, does one unit of work, commits the
new cursor and returns either Continue (with the next message) or Terminate.
Publishing the next message is left to the caller.

States: importing -> completed | failed | cancelled, and failed -> importing
through an explicit retry.
"""

import io
import uuid
import zipfile
from dataclasses import dataclass
from pathlib import PurePosixPath
from typing import Any, Dict, List, Mapping, Optional, Set, Union

import httpx
import structlog

from fitflow.archive import (
    ArchiveFitnessFile,
    InvalidArchiveError,
    StravaArchiveActivity,
    StravaArchiveReader,
    get_media_mime_type,
)
from fitflow.const import RENDER_MAX_POINTS
from fitflow.geometry import downsample_segments
from fitflow.maps import MapRenderer, MapRenderError
from fitflow.privacy import parse_privacy_locations, visible_segments
from fitflow.processors import ActivityData, FitnessFileType, InvalidFitnessFileError, ProcessingStatus, parse_fitness_file
from fitflow.quota import ensure_quota
from fitflow.storage import BlobStorage
from fitflow.storage import StorageError as BlobStorageError
from fitflow.utils import truncate

from ..config import ArchiveImportConfig, FitnessStorageConfig, MapConfig
from ..database.models import (
    TERMINAL_IMPORT_STATUSES,
    ArchiveImportJob,
    ArchiveImportStatus,
    FitnessFile,
    job_snapshot,
    utcnow,
)
from ..database.repository import FitnessStore
from ..exceptions import (
    ActivityImportError,
    ImportConflictError,
    ImportForbiddenError,
    ImportNotFoundError,
    ImportStartError,
    StorageError,
    ValidationError,
)
from ..queue import ImportArchiveMessage, PendingMediaActivity, QueuePublisher
from ..utils.logging import get_import_logger
from .activity_publisher import ActivityPublisher, MediaAttachment

logger = structlog.get_logger(__name__)

ACCEPTED_ARCHIVE_MIME_TYPES = frozenset({
    "application/zip",
    "application/x-zip-compressed",
    "application/octet-stream",
    "",
})

VISIBILITIES = frozenset({"public", "unlisted", "private", "direct"})


def archive_batch_id(archive_id: str) -> str:
    """Batch shared by every fitness file imported from one archive"""
    return f"strava-archive:{archive_id}"


def archive_source_batch_id(archive_id: str) -> str:
    """Batch of the uploaded archive file itself"""
    return f"strava-archive-source:{archive_id}"


def unique_attachment_name(file_name: str, used: Set[str], limit: int) -> str:
    """
    Attachment name no longer than ``limit``, made unique with ``" (n)"``.

    The suffix goes before the extension; ``used`` is updated in place.
    """
    path = PurePosixPath(file_name)
    suffix = path.suffix if len(path.suffix) < limit else ""
    stem = file_name[:len(file_name) - len(suffix)] if suffix else file_name

    candidate = truncate(stem, limit - len(suffix)) + suffix
    counter = 1
    while candidate in used:
        marker = f" ({counter})"
        candidate = truncate(stem, max(limit - len(suffix) - len(marker), 0)) + marker + suffix
        counter += 1

    used.add(candidate)
    return candidate


@dataclass
class ArchiveUpload:
    """An archive received from the upload boundary"""
    file_name: str
    data: bytes
    content_type: Optional[str] = None


@dataclass(frozen=True)
class Continue:
    """The job has more work; publish ``message`` next"""
    message: ImportArchiveMessage


@dataclass(frozen=True)
class Terminate:
    """Nothing more to publish for this message"""
    reason: str
    job: Optional[Dict[str, Any]] = None


StepResult = Union[Continue, Terminate]


class ArchiveImportService:
    """
    Starts, steps, retries and cancels Strava archive imports.

    All collaborators are injected: the store, blob storage, the queue used to
    publish the first step of a start or retry, the activity publisher and the
    map renderer used for route previews.
    """

    def __init__(self,
                 store: FitnessStore,
                 storage: BlobStorage,
                 queue: QueuePublisher,
                 publisher: ActivityPublisher,
                 map_renderer: Optional[MapRenderer] = None,
                 import_config: Optional[ArchiveImportConfig] = None,
                 storage_config: Optional[FitnessStorageConfig] = None,
                 map_config: Optional[MapConfig] = None):
        self.store = store
        self.storage = storage
        self.queue = queue
        self.publisher = publisher
        self.map_renderer = map_renderer
        self.import_config = import_config or ArchiveImportConfig()
        self.storage_config = storage_config or FitnessStorageConfig()
        self.map_config = map_config or MapConfig()

    # Start

    def start_import(self, actor_id: str, upload: ArchiveUpload, visibility: str = "public") -> ArchiveImportJob:
        """
        Store an uploaded archive and start importing it.

        Args:
            actor_id: Owning account
            upload: The uploaded archive
            visibility: Visibility applied to every imported activity

        Returns:
            The created job

        Raises:
            ImportConflictError: If the actor already has an active import
            ValidationError: If the upload is not an acceptable archive
            QuotaExceededError: If the archive does not fit in the account quota
            StorageError: If the archive could not be written
            ImportStartError: If the first step could not be published
        """
        self._ensure_no_active_job(actor_id)
        self._validate_visibility(visibility)
        self._validate_upload(upload)
        ensure_quota(self.store, actor_id, len(upload.data), limit=self.storage_config.quota_per_account)

        archive_id = str(uuid.uuid4())
        try:
            path = self.storage.save(upload.data, upload.file_name, FitnessFileType.ZIP.mime_type)
        except BlobStorageError as e:
            raise StorageError("Failed to store archive upload", {"error": str(e)}) from e

        try:
            archive_file = self.store.create_file(FitnessFile(
                actor_id=actor_id,
                path=path,
                file_name=upload.file_name,
                file_type=FitnessFileType.ZIP.value,
                mime_type=FitnessFileType.ZIP.mime_type,
                bytes=len(upload.data),
                import_batch_id=archive_source_batch_id(archive_id),
            ))
        except Exception:
            self.storage.delete(path)
            raise

        try:
            job = self.store.create_job(self._new_job(actor_id, archive_id, archive_file.id, visibility))
        except ImportConflictError:
            # Lost a race with a concurrent start for the same actor
            self._delete_file(archive_file)
            raise

        self._publish_first_step(job, archive_file, delete_file=True)
        return job

    def start_import_from_file(self, actor_id: str, fitness_file_id: str, visibility: str = "public",
                               archive_id: Optional[str] = None) -> ArchiveImportJob:
        """
        Start importing an archive that was uploaded out-of-band.

        Raises:
            ImportConflictError: If the actor already has an active import
            ImportForbiddenError: If the file is missing or owned by someone else
            ValidationError: If the file is not a ZIP archive
            ImportStartError: If the first step could not be published
        """
        self._ensure_no_active_job(actor_id)
        self._validate_visibility(visibility)

        archive_file = self.store.get_file(fitness_file_id)
        if archive_file is None or archive_file.actor_id != actor_id:
            raise ImportForbiddenError(
                "Archive file does not belong to this account",
                {"fitness_file_id": fitness_file_id},
            )
        if archive_file.file_type != FitnessFileType.ZIP.value:
            raise ValidationError("Archive file must be a ZIP file", {"file_type": archive_file.file_type})

        archive_id = archive_id or str(uuid.uuid4())
        archive_file.import_batch_id = archive_source_batch_id(archive_id)
        archive_file = self.store.update_file(archive_file)

        job = self.store.create_job(self._new_job(actor_id, archive_id, archive_file.id, visibility))
        self._publish_first_step(job, archive_file, delete_file=True)
        return job

    def get_import_status(self, actor_id: str) -> Optional[Dict[str, Any]]:
        """Status of the actor's active import, or None"""
        job = self.store.get_active_job(actor_id)
        return job_snapshot(job) if job else None

    # Step

    def process_step(self, payload: Union[ImportArchiveMessage, Mapping[str, Any]]) -> StepResult:
        """
        Handle one queue message.

        Imports the activity at the job cursor, or retries pending media, then
        commits the job. Messages for jobs that are gone, not importing, or at
        a different cursor are dropped without touching the job.
        """
        message = payload if isinstance(payload, ImportArchiveMessage) else ImportArchiveMessage.model_validate(payload)
        log = get_import_logger(__name__, message.actor_id, message.archive_id, message.job_id)

        job = self.store.get_job(message.job_id)
        if job is None:
            log.warning("Import job no longer exists; dropping message")
            return Terminate("missing")

        if job.status != ArchiveImportStatus.IMPORTING.value:
            log.info("Import job is not importing; dropping message", status=job.status)
            return Terminate("not_importing", job_snapshot(job))

        if (message.next_activity_index != job.next_activity_index
                or message.media_attachment_retry != job.media_attachment_retry):
            log.info(
                "Dropping stale import message",
                message_cursor=message.next_activity_index,
                job_cursor=job.next_activity_index,
                message_retry=message.media_attachment_retry,
                job_retry=job.media_attachment_retry,
            )
            return Terminate("stale", job_snapshot(job))

        try:
            return self._run_step(job, log)
        except Exception as e:
            log.error("Unexpected error during import step", error=str(e), exc_info=True)
            return self._fail(job, f"Unexpected import error: {e}", log)

    def _run_step(self, job: ArchiveImportJob, log) -> StepResult:
        archive_data = self._load_archive(job)
        if archive_data is None:
            return self._fail(job, "Archive source file is missing", log)

        try:
            reader = StravaArchiveReader(archive_data)
        except InvalidArchiveError as e:
            return self._fail(job, str(e), log)

        with reader:
            try:
                activities = reader.activities()
            except InvalidArchiveError as e:
                return self._fail(job, str(e), log)

            if job.total_activities_count is None:
                job.total_activities_count = len(activities)

            if job.pending_media_activities:
                self._retry_pending_media(job, reader, log)
            elif job.next_activity_index < len(activities):
                self._import_activity(job, reader, activities[job.next_activity_index], log)

        if job.next_activity_index >= len(activities) and not job.pending_media_activities:
            return self._complete(job, log)

        job = self.store.update_job(job)
        return Continue(ImportArchiveMessage.from_job(job))

    def mark_failed(self, job_id: str, error: str) -> Optional[ArchiveImportJob]:
        """Park an importing job in failed, e.g. when its next step cannot be published"""
        job = self.store.get_job(job_id)
        if job is None or job.status != ArchiveImportStatus.IMPORTING.value:
            return job

        self._set_failed(job, error)
        job = self.store.update_job(job)
        logger.warning("Archive import parked in failed", job_id=job_id, error=error)
        return job

    # Retry / cancel

    def retry(self, actor_id: str, job_id: str) -> ArchiveImportJob:
        """
        Resume a failed import at its current cursor.

        Raises:
            ImportNotFoundError: If the actor has no such job
            ImportConflictError: If the job is not failed or its archive is gone
            ImportStartError: If the step could not be published; the job is
                failed again with the error recorded
        """
        job = self._get_owned_job(actor_id, job_id)
        if job.status != ArchiveImportStatus.FAILED.value:
            raise ImportConflictError("Only failed archive imports can be retried", job=job_snapshot(job))

        archive_file = self.store.get_file(job.archive_file_id) if job.archive_file_id else None
        if archive_file is None or archive_file.actor_id != actor_id:
            raise ImportConflictError(
                "The archive file is no longer available; please upload it again",
                job=job_snapshot(job),
            )

        archive_file.import_status = ProcessingStatus.PENDING.value
        archive_file.processing_status = ProcessingStatus.PENDING.value
        self.store.update_file(archive_file)

        job.status = ArchiveImportStatus.IMPORTING.value
        job.last_error = None
        job.resolved_at = None
        job = self.store.update_job(job)

        try:
            self.queue.publish(ImportArchiveMessage.from_job(job))
        except Exception as e:
            self._set_failed(job, f"Failed to resume archive import: {e}")
            job = self.store.update_job(job)
            logger.error("Failed to publish archive import retry", job_id=job.id, error=str(e))
            raise ImportStartError("Failed to resume archive import", {"error": str(e), "job": job_snapshot(job)}) from e

        logger.info("Archive import resumed", job_id=job.id, cursor=job.next_activity_index)
        return job

    def cancel(self, actor_id: str, job_id: str) -> ArchiveImportJob:
        """
        Cancel an import and delete its archive.

        Raises:
            ImportNotFoundError: If the actor has no such job
            ImportConflictError: If the job already completed or was cancelled
        """
        job = self._get_owned_job(actor_id, job_id)
        if job.status in TERMINAL_IMPORT_STATUSES:
            raise ImportConflictError("Archive import is already finished", job=job_snapshot(job))

        self._delete_archive_source(job)

        job.status = ArchiveImportStatus.CANCELLED.value
        job.resolved_at = utcnow()
        job = self.store.update_job(job)
        logger.info("Archive import cancelled", job_id=job.id, actor_id=actor_id)
        return job

    # Start helpers

    def _ensure_no_active_job(self, actor_id: str) -> None:
        active = self.store.get_active_job(actor_id)
        if active is not None:
            raise ImportConflictError("An archive import is already in progress", job=job_snapshot(active))

    @staticmethod
    def _validate_visibility(visibility: str) -> None:
        if visibility not in VISIBILITIES:
            raise ValidationError("Invalid visibility", {"visibility": visibility})

    def _validate_upload(self, upload: ArchiveUpload) -> None:
        if not upload.data:
            raise ValidationError("Archive upload is empty")

        if not (upload.file_name or "").lower().endswith(".zip"):
            raise ValidationError("Archive upload must be a .zip file", {"file_name": upload.file_name})

        content_type = (upload.content_type or "").split(";")[0].strip().lower()
        if content_type not in ACCEPTED_ARCHIVE_MIME_TYPES:
            raise ValidationError("Unsupported archive content type", {"content_type": upload.content_type})

        max_size = self.storage_config.max_file_size
        if len(upload.data) > max_size:
            raise ValidationError("Archive upload is too large", {"bytes": len(upload.data), "limit": max_size})

        if not zipfile.is_zipfile(io.BytesIO(upload.data)):
            raise ValidationError("Archive upload is not a valid ZIP file", {"file_name": upload.file_name})

    @staticmethod
    def _new_job(actor_id: str, archive_id: str, archive_file_id: str, visibility: str) -> ArchiveImportJob:
        return ArchiveImportJob(
            actor_id=actor_id,
            archive_id=archive_id,
            archive_file_id=archive_file_id,
            batch_id=archive_batch_id(archive_id),
            visibility=visibility,
        )

    def _publish_first_step(self, job: ArchiveImportJob, archive_file: FitnessFile, delete_file: bool) -> None:
        try:
            self.queue.publish(ImportArchiveMessage.from_job(job))
        except Exception as e:
            logger.error("Failed to publish first import step; rolling back", job_id=job.id, error=str(e))
            self._rollback_start(job, archive_file if delete_file else None)
            raise ImportStartError("Failed to start archive import", {"error": str(e)}) from e

        logger.info("Archive import started", job_id=job.id, actor_id=job.actor_id, archive_id=job.archive_id)

    def _rollback_start(self, job: ArchiveImportJob, archive_file: Optional[FitnessFile]) -> None:
        try:
            self.store.delete_job(job.id)
        except Exception as e:
            logger.error("Failed to delete import job during rollback", job_id=job.id, error=str(e))

        if archive_file is None:
            return
        try:
            self._delete_file(archive_file)
        except Exception as e:
            logger.error("Failed to delete archive file during rollback", file_id=archive_file.id, error=str(e))

    # Step helpers

    def _load_archive(self, job: ArchiveImportJob) -> Optional[bytes]:
        archive_file = self.store.get_file(job.archive_file_id) if job.archive_file_id else None
        if archive_file is None or archive_file.actor_id != job.actor_id:
            return None
        return self.storage.get(archive_file.path)

    def _import_activity(self, job: ArchiveImportJob, reader: StravaArchiveReader,
                         activity: StravaArchiveActivity, log) -> None:
        log = log.bind(activity_id=activity.activity_id, cursor=job.next_activity_index)
        fitness_file = None
        try:
            payload = reader.read_activity_file(activity)
            if payload is None:
                raise ActivityImportError(f"Activity file {activity.fitness_file_path} is missing from the archive")

            fitness_file = self._save_activity_file(job, activity, payload)
            if fitness_file.status_id and fitness_file.import_status == ProcessingStatus.COMPLETED.value:
                # Published by an earlier delivery of this step
                status_id = fitness_file.status_id
            else:
                activity_data = self._normalize_activity(fitness_file, payload, log)
                status_id = self.publisher.publish_activity(
                    job.actor_id, fitness_file, activity, activity_data, job.visibility
                )
                fitness_file.status_id = status_id
                fitness_file.import_status = ProcessingStatus.COMPLETED.value
                fitness_file = self.store.update_file(fitness_file)
        except Exception as e:
            log.warning("Failed to import archive activity", error=str(e))
            if fitness_file is not None:
                self._mark_file_failed(fitness_file, e)
            self._record_activity_failure(job, activity, e)
            self._advance(job)
            return

        job.completed_activities_count += 1
        self._advance(job)
        log.info("Imported archive activity", status_id=status_id)

        pending = PendingMediaActivity(
            activity_id=activity.activity_id,
            status_id=status_id,
            media_paths=activity.media_paths,
        )
        if not self._attach_media(job, reader, pending, log):
            job.pending_media_activities = [pending.model_dump()]

    def _save_activity_file(self, job: ArchiveImportJob, activity: StravaArchiveActivity,
                            payload: ArchiveFitnessFile) -> FitnessFile:
        existing = self.store.find_file_by_source(job.batch_id, activity.fitness_file_path)
        if existing is not None:
            return existing

        if len(payload.data) > self.storage_config.max_file_size:
            raise ActivityImportError(
                f"Activity file {activity.fitness_file_path} is too large",
                {"bytes": len(payload.data), "limit": self.storage_config.max_file_size},
            )
        ensure_quota(self.store, job.actor_id, len(payload.data), limit=self.storage_config.quota_per_account)

        path = self.storage.save(payload.data, payload.file_name, payload.mime_type)
        return self.store.create_file(FitnessFile(
            actor_id=job.actor_id,
            path=path,
            file_name=payload.file_name,
            file_type=payload.file_type.value,
            mime_type=payload.mime_type,
            bytes=len(payload.data),
            description=activity.activity_description,
            import_batch_id=job.batch_id,
            source_key=activity.fitness_file_path,
            import_status=ProcessingStatus.PROCESSING.value,
        ))

    def _normalize_activity(self, fitness_file: FitnessFile, payload: ArchiveFitnessFile, log) -> ActivityData:
        result = parse_fitness_file(payload.file_type, payload.data)
        if not result.ok:
            raise InvalidFitnessFileError(result.file_type, result.reason)

        activity_data = result.activity
        fitness_file.total_distance_meters = activity_data.total_distance_meters
        fitness_file.total_duration_seconds = activity_data.total_duration_seconds
        fitness_file.elevation_gain_meters = activity_data.elevation_gain_meters
        fitness_file.activity_type = activity_data.activity_type
        fitness_file.start_time = activity_data.start_time
        fitness_file.has_map_data = activity_data.has_map_data
        fitness_file.map_image_path = self._render_map(fitness_file, activity_data, log)
        fitness_file.processing_status = ProcessingStatus.COMPLETED.value
        self.store.update_file(fitness_file)
        return activity_data

    def _render_map(self, fitness_file: FitnessFile, activity_data: ActivityData, log) -> Optional[str]:
        if self.map_renderer is None or not activity_data.has_map_data:
            return None

        try:
            locations = parse_privacy_locations(
                setting.model_dump() for setting in self.store.list_privacy_locations(fitness_file.actor_id)
            )
            if locations:
                segments = downsample_segments(
                    visible_segments(activity_data.coordinates, locations), RENDER_MAX_POINTS
                )
                if not segments:
                    log.info("Route is entirely inside privacy locations; importing without map")
                    return None
                coordinates = [point for segment in segments for point in segment]
            else:
                segments = None
                coordinates = activity_data.route_coordinates()

            image = self.map_renderer.render_sync(
                coordinates,
                segments,
                width=self.map_config.width,
                height=self.map_config.height,
            )
            if image is None:
                return None
            return self.storage.save(image, f"{fitness_file.id}.png", "image/png")
        except (MapRenderError, httpx.HTTPError, BlobStorageError) as e:
            log.warning("Route preview rendering failed; importing without map", error=str(e))
            return None

    def _mark_file_failed(self, fitness_file: FitnessFile, error: Exception) -> None:
        fitness_file.import_status = ProcessingStatus.FAILED.value
        if fitness_file.processing_status != ProcessingStatus.COMPLETED.value:
            fitness_file.processing_status = ProcessingStatus.FAILED.value
        fitness_file.import_error = str(error)
        self.store.update_file(fitness_file)

    @staticmethod
    def _record_activity_failure(job: ArchiveImportJob, activity: StravaArchiveActivity, error: Exception) -> None:
        message = f"Activity {activity.activity_id}: {error}"
        job.failed_activities_count += 1
        job.last_error = message
        if not job.first_failure_message:
            job.first_failure_message = message

    @staticmethod
    def _advance(job: ArchiveImportJob) -> None:
        job.next_activity_index += 1
        job.media_attachment_retry = 0

    def _collect_media(self, reader: StravaArchiveReader, media_paths: List[str], log) -> List[MediaAttachment]:
        attachments: List[MediaAttachment] = []
        used_names: Set[str] = set()

        for media_path in media_paths:
            if len(attachments) >= self.import_config.max_media_attachments:
                break
            mime_type = get_media_mime_type(media_path)
            if mime_type is None:
                continue
            try:
                data = reader.read_entry(media_path)
            except InvalidArchiveError as e:
                log.warning("Skipping unreadable media entry", media_path=media_path, error=str(e))
                continue
            if data is None:
                continue
            name = unique_attachment_name(
                PurePosixPath(media_path).name, used_names, self.import_config.attachment_name_limit
            )
            attachments.append(MediaAttachment(name=name, mime_type=mime_type, data=data, source_path=media_path))

        return attachments

    def _attach_media(self, job: ArchiveImportJob, reader: StravaArchiveReader,
                      pending: PendingMediaActivity, log) -> bool:
        media = self._collect_media(reader, pending.media_paths, log)
        if not media:
            return True

        try:
            self.publisher.attach_media(job.actor_id, pending.status_id, media)
        except Exception as e:
            job.last_error = f"Failed to attach media for activity {pending.activity_id}: {e}"
            log.warning("Media attachment failed", error=str(e), retry=job.media_attachment_retry)
            return False
        return True

    def _retry_pending_media(self, job: ArchiveImportJob, reader: StravaArchiveReader, log) -> None:
        pending = PendingMediaActivity.model_validate(job.pending_media_activities[0])
        log = log.bind(activity_id=pending.activity_id)

        if self._attach_media(job, reader, pending, log):
            job.pending_media_activities = job.pending_media_activities[1:]
            job.media_attachment_retry = 0
            return

        job.media_attachment_retry += 1
        if job.media_attachment_retry >= self.import_config.max_media_attachment_retries:
            log.warning("Abandoning media attachment", retries=job.media_attachment_retry)
            job.pending_media_activities = job.pending_media_activities[1:]
            job.media_attachment_retry = 0

    def _complete(self, job: ArchiveImportJob, log) -> Terminate:
        try:
            self._delete_archive_source(job)
        except Exception as e:
            log.error("Failed to delete archive after import", error=str(e))

        job.status = ArchiveImportStatus.COMPLETED.value
        job.resolved_at = utcnow()
        job = self.store.update_job(job)
        log.info(
            "Archive import completed",
            completed=job.completed_activities_count,
            failed=job.failed_activities_count,
        )
        return Terminate("completed", job_snapshot(job))

    def _fail(self, job: ArchiveImportJob, error: str, log) -> Terminate:
        self._set_failed(job, error)
        job = self.store.update_job(job)
        log.warning("Archive import failed", error=error)
        return Terminate("failed", job_snapshot(job))

    @staticmethod
    def _set_failed(job: ArchiveImportJob, error: str) -> None:
        job.status = ArchiveImportStatus.FAILED.value
        job.last_error = error
        if not job.first_failure_message:
            job.first_failure_message = error

    # Shared helpers

    def _get_owned_job(self, actor_id: str, job_id: str) -> ArchiveImportJob:
        job = self.store.get_job(job_id)
        if job is None or job.actor_id != actor_id:
            raise ImportNotFoundError("Archive import not found", {"job_id": job_id})
        return job

    def _delete_archive_source(self, job: ArchiveImportJob) -> None:
        archive_file = self.store.get_file(job.archive_file_id) if job.archive_file_id else None
        if archive_file is None or archive_file.actor_id != job.actor_id:
            return
        self._delete_file(archive_file)

    def _delete_file(self, fitness_file: FitnessFile) -> None:
        if not self.storage.delete(fitness_file.path):
            logger.warning("Failed to delete blob", path=fitness_file.path)
        self.store.delete_file(fitness_file.id)
