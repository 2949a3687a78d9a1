"""
Services for FitFlow Tasks.

This module provides the archive import orchestrator and the activity
publishing collaborator it hands imported activities to.
"""

from .activity_publisher import ActivityPublisher, MediaAttachment, StoreActivityPublisher
from .archive_import import (
    ArchiveImportService,
    ArchiveUpload,
    Continue,
    StepResult,
    Terminate,
    unique_attachment_name,
)

__all__ = [
    "ActivityPublisher",
    "MediaAttachment",
    "StoreActivityPublisher",
    "ArchiveImportService",
    "ArchiveUpload",
    "Continue",
    "StepResult",
    "Terminate",
    "unique_attachment_name",
]
