"""
Celery application setup for FitFlow Tasks.

This module creates and configures the Celery application instance that runs
archive import steps. It includes configuration loading, logging setup and
signal handlers for monitoring.
"""

import logging
from celery import Celery
from celery.signals import (
    task_prerun,
    task_postrun,
    task_failure,
    worker_ready,
    worker_shutdown,
)

from fitflow_tasks.config import get_celery_config, get_settings
from fitflow_tasks.utils.logging import get_task_logger, setup_logging


logger = logging.getLogger(__name__)


def create_celery_app() -> Celery:
    """
    Create and configure Celery application.

    Returns:
        Configured Celery application instance
    """
    config = get_celery_config()
    settings = get_settings()

    app = Celery("fitflow_tasks")

    # Task modules are listed under "include"
    app.config_from_object(config)

    setup_logging(
        level="DEBUG" if settings.debug else settings.celery.worker_log_level,
        format_type=settings.log_format,
    )

    _register_signal_handlers()

    logger.info("Celery application initialized")
    return app


def _register_signal_handlers() -> None:
    """Register Celery signal handlers for monitoring and logging."""

    @task_prerun.connect(weak=False)
    def task_prerun_handler(sender=None, task_id=None, task=None, args=None, kwargs=None, **kwds):
        """Log task start."""
        get_task_logger(task.name, task_id).info("Task started")

    @task_postrun.connect(weak=False)
    def task_postrun_handler(sender=None, task_id=None, task=None, args=None, kwargs=None,
                             retval=None, state=None, **kwds):
        """Log task completion."""
        get_task_logger(task.name, task_id).info("Task finished", state=state)

    @task_failure.connect(weak=False)
    def task_failure_handler(sender=None, task_id=None, exception=None, traceback=None, einfo=None, **kwds):
        """Log task failure."""
        get_task_logger(sender.name, task_id).error(
            "Task failed",
            error=str(exception),
            error_type=type(exception).__name__,
        )

    @worker_ready.connect(weak=False)
    def worker_ready_handler(sender=None, **kwds):
        """Log worker ready."""
        logger.info(f"Worker {sender.hostname} is ready")

    @worker_shutdown.connect(weak=False)
    def worker_shutdown_handler(sender=None, **kwds):
        """Log worker shutdown."""
        logger.info(f"Worker {sender.hostname} is shutting down")


# Create the Celery app instance
celery_app = create_celery_app()


app = celery_app
