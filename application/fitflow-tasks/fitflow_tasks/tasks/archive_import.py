"""
Archive import tasks for FitFlow Tasks.

The Celery task is a thin boundary around ArchiveImportService.process_step:
it runs one step and, when the step says Continue, publishes the next message.
A failed publish parks the job in failed so the user can retry it.
"""

import logging
from functools import lru_cache
from typing import Any, Dict

from celery.signals import worker_process_init
from pydantic import ValidationError as MessageValidationError

from ..celery_app import celery_app
from ..config import create_blob_storage, create_map_renderer, get_settings
from ..database import FitnessStore, get_engine, job_snapshot
from ..exceptions import TaskExecutionError
from ..queue import IMPORT_ARCHIVE_TASK, CeleryQueue, ImportArchiveMessage, QueuePublisher
from ..services.activity_publisher import StoreActivityPublisher
from ..services.archive_import import ArchiveImportService, Terminate

logger = logging.getLogger(__name__)


# Task configuration
TASK_CONFIG = {
    "import_archive_step": {
        "time_limit": 300,   # 5 minutes
        "soft_time_limit": 240,
    },
}


@lru_cache(maxsize=1)
def get_archive_import_service() -> ArchiveImportService:
    """Build the worker's service once; storage and renderer are chosen here"""
    settings = get_settings()
    store = FitnessStore(get_engine())
    storage = create_blob_storage(settings.fitness_storage)

    return ArchiveImportService(
        store=store,
        storage=storage,
        queue=CeleryQueue(celery_app),
        publisher=StoreActivityPublisher(store, storage),
        map_renderer=create_map_renderer(settings.map),
        import_config=settings.archive_import,
        storage_config=settings.fitness_storage,
        map_config=settings.map,
    )


@worker_process_init.connect(weak=False)
def build_service_on_process_init(sender=None, **kwargs) -> None:
    """Choose storage and renderer when a worker process starts, before its first task"""
    service = get_archive_import_service()
    logger.info(f"Archive import service ready with {type(service.storage).__name__}")


def run_import_step(service: ArchiveImportService, queue: QueuePublisher,
                    message: ImportArchiveMessage) -> Dict[str, Any]:
    """
    Process one step and publish its continuation.

    Returns:
        Task result describing what happened to the job
    """
    result = service.process_step(message)
    if isinstance(result, Terminate):
        return {"status": "terminated", "reason": result.reason, "job": result.job}

    next_message = result.message
    try:
        queue.publish(next_message)
    except Exception as e:
        logger.error(f"Failed to publish next import step for job {next_message.job_id}: {e}")
        job = service.mark_failed(next_message.job_id, f"Failed to publish next import step: {e}")
        return {"status": "failed", "reason": "publish_failed", "job": job_snapshot(job) if job else None}

    return {
        "status": "continued",
        "next_activity_index": next_message.next_activity_index,
        "task_id": next_message.task_id,
    }


@celery_app.task(name=IMPORT_ARCHIVE_TASK, **TASK_CONFIG["import_archive_step"])
def import_archive_step(message: Dict[str, Any]) -> Dict[str, Any]:
    """
    Run one archive import step.

    Args:
        message: Serialized ImportArchiveMessage

    Returns:
        Dictionary with the step outcome
    """
    try:
        payload = ImportArchiveMessage.model_validate(message)
    except MessageValidationError as e:
        raise TaskExecutionError("Malformed archive import message", {"errors": str(e)}) from e

    service = get_archive_import_service()
    return run_import_step(service, service.queue, payload)
