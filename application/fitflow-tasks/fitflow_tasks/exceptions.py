"""
Custom exception classes for FitFlow Tasks.

This module defines the exception hierarchy used by the archive import worker
so callers can tell validation, quota, conflict and infrastructure failures apart.
"""

from typing import Optional, Any, Dict

from fitflow.quota import QuotaExceededError


class FitflowTasksError(Exception):
    """
    Base exception for all FitFlow Tasks errors.

    All custom exceptions in this package should inherit from this class.
    """

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} (details: {self.details})"
        return self.message


class ConfigurationError(FitflowTasksError):
    """
    Raised when there are configuration-related errors.

    Examples:
    - Unknown storage backend
    - Object storage selected without a bucket
    """
    pass


class ValidationError(FitflowTasksError):
    """
    Raised when an upload is rejected before anything is persisted.

    Examples:
    - Empty upload or wrong file extension
    - Unsupported MIME type
    - Not a ZIP container
    - File larger than the configured maximum
    """
    pass


class StorageError(FitflowTasksError):
    """
    Raised when blob storage operations fail.

    Examples:
    - Archive upload could not be written
    """
    pass


class ImportConflictError(FitflowTasksError):
    """
    Raised when an import request conflicts with the persisted job state.

    Examples:
    - A second import for an actor that already has an active job
    - Retrying a job that is not failed
    - Retrying a job whose archive file is gone

    The current job snapshot is attached so the caller can reconcile.
    """

    def __init__(self, message: str, job: Optional[Dict[str, Any]] = None):
        super().__init__(message, {"job": job} if job else None)
        self.job = job


class ImportForbiddenError(FitflowTasksError):
    """
    Raised when an actor references a file or job it does not own.
    """
    pass


class ImportNotFoundError(FitflowTasksError):
    """
    Raised when an import job does not exist.
    """
    pass


class ImportStartError(FitflowTasksError):
    """
    Raised when queue publishing fails while starting or resuming an import.

    The file and job created by a failed start have been rolled back by the
    time this is raised; a failed resume leaves the job parked in failed.
    """
    pass


class ActivityImportError(FitflowTasksError):
    """
    Raised when a single archive activity cannot be imported.

    Recorded on the job; the rest of the archive is still imported.
    """
    pass


class TaskExecutionError(FitflowTasksError):
    """
    Raised when task execution fails in unexpected ways.

    Examples:
    - Malformed queue message payload
    """
    pass


__all__ = [
    "FitflowTasksError",
    "ConfigurationError",
    "ValidationError",
    "StorageError",
    "QuotaExceededError",
    "ImportConflictError",
    "ImportForbiddenError",
    "ImportNotFoundError",
    "ImportStartError",
    "ActivityImportError",
    "TaskExecutionError",
]
