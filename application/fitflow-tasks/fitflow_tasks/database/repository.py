"""
Repository for import jobs, fitness files and storage usage.

Every method runs in its own short session and returns detached objects, so
callers mutate them freely and hand them back to ``update_*``.
"""

import logging
from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError
from sqlmodel import col, select

from ..exceptions import ImportConflictError
from .connection import session_scope
from .models import ArchiveImportJob, FitnessFile, Media, PrivacyLocationSetting, job_snapshot, utcnow

logger = logging.getLogger(__name__)


class FitnessStore:
    """
    Persistent store used by the archive import orchestrator.

    Also reports per-account storage usage for the quota guard.
    """

    def __init__(self, engine: Engine):
        self.engine = engine

    # Import jobs

    def create_job(self, job: ArchiveImportJob) -> ArchiveImportJob:
        """
        Insert a new import job.

        Raises:
            ImportConflictError: If the actor already has an active job or the
                archive id is already in use
        """
        with session_scope(self.engine) as session:
            session.add(job)
            try:
                session.commit()
            except IntegrityError as e:
                session.rollback()
                logger.info(f"Import job insert rejected for actor {job.actor_id}: {e.orig}")
            else:
                session.refresh(job)
                return job

        active = self.get_active_job(job.actor_id)
        raise ImportConflictError(
            "An archive import is already in progress",
            job=job_snapshot(active) if active else None,
        )

    def get_job(self, job_id: str) -> Optional[ArchiveImportJob]:
        with session_scope(self.engine) as session:
            return session.get(ArchiveImportJob, job_id)

    def get_active_job(self, actor_id: str) -> Optional[ArchiveImportJob]:
        """The actor's unresolved job (importing or failed), if any"""
        with session_scope(self.engine) as session:
            statement = (
                select(ArchiveImportJob)
                .where(ArchiveImportJob.actor_id == actor_id)
                .where(col(ArchiveImportJob.resolved_at).is_(None))
                .order_by(col(ArchiveImportJob.created_at).desc())
            )
            return session.exec(statement).first()

    def update_job(self, job: ArchiveImportJob) -> ArchiveImportJob:
        job.updated_at = utcnow()
        with session_scope(self.engine) as session:
            session.add(job)
            session.commit()
            session.refresh(job)
        return job

    def delete_job(self, job_id: str) -> bool:
        with session_scope(self.engine) as session:
            job = session.get(ArchiveImportJob, job_id)
            if job is None:
                return False
            session.delete(job)
            session.commit()
            return True

    # Fitness files

    def create_file(self, fitness_file: FitnessFile) -> FitnessFile:
        with session_scope(self.engine) as session:
            session.add(fitness_file)
            session.commit()
            session.refresh(fitness_file)
        return fitness_file

    def get_file(self, file_id: str) -> Optional[FitnessFile]:
        with session_scope(self.engine) as session:
            return session.get(FitnessFile, file_id)

    def update_file(self, fitness_file: FitnessFile) -> FitnessFile:
        fitness_file.updated_at = utcnow()
        with session_scope(self.engine) as session:
            session.add(fitness_file)
            session.commit()
            session.refresh(fitness_file)
        return fitness_file

    def delete_file(self, file_id: str) -> bool:
        with session_scope(self.engine) as session:
            fitness_file = session.get(FitnessFile, file_id)
            if fitness_file is None:
                return False
            session.delete(fitness_file)
            session.commit()
            return True

    def find_file_by_source(self, import_batch_id: str, source_key: str) -> Optional[FitnessFile]:
        """File already saved for an archive entry, so a re-delivered step reuses it"""
        with session_scope(self.engine) as session:
            statement = (
                select(FitnessFile)
                .where(FitnessFile.import_batch_id == import_batch_id)
                .where(FitnessFile.source_key == source_key)
            )
            return session.exec(statement).first()

    def list_files_by_batch(self, import_batch_id: str) -> List[FitnessFile]:
        with session_scope(self.engine) as session:
            statement = (
                select(FitnessFile)
                .where(FitnessFile.import_batch_id == import_batch_id)
                .order_by(col(FitnessFile.created_at))
            )
            return list(session.exec(statement).all())

    # Media

    def create_media(self, media: Media) -> Media:
        with session_scope(self.engine) as session:
            session.add(media)
            session.commit()
            session.refresh(media)
        return media

    def list_media_by_status(self, status_id: str) -> List[Media]:
        with session_scope(self.engine) as session:
            statement = select(Media).where(Media.status_id == status_id).order_by(col(Media.created_at))
            return list(session.exec(statement).all())

    # Privacy locations

    def add_privacy_location(self, location: PrivacyLocationSetting) -> PrivacyLocationSetting:
        with session_scope(self.engine) as session:
            session.add(location)
            session.commit()
            session.refresh(location)
        return location

    def list_privacy_locations(self, actor_id: str) -> List[PrivacyLocationSetting]:
        with session_scope(self.engine) as session:
            statement = (
                select(PrivacyLocationSetting)
                .where(PrivacyLocationSetting.actor_id == actor_id)
                .order_by(col(PrivacyLocationSetting.created_at))
            )
            return list(session.exec(statement).all())

    # Storage usage

    def get_media_bytes(self, actor_id: str) -> int:
        with session_scope(self.engine) as session:
            statement = select(
                func.coalesce(func.sum(Media.original_bytes + Media.thumbnail_bytes), 0)
            ).where(Media.actor_id == actor_id)
            return int(session.exec(statement).one())

    def get_fitness_bytes(self, actor_id: str) -> int:
        with session_scope(self.engine) as session:
            statement = select(func.coalesce(func.sum(FitnessFile.bytes), 0)).where(FitnessFile.actor_id == actor_id)
            return int(session.exec(statement).one())
