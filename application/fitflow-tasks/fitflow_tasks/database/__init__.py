"""
Database components for FitFlow Tasks.

This module provides database models, connections and the repository used by
the archive import worker.
"""

from .models import (
    ArchiveImportJob,
    ArchiveImportStatus,
    FitnessFile,
    Media,
    PrivacyLocationSetting,
    TERMINAL_IMPORT_STATUSES,
    job_snapshot,
)
from .connection import create_database_engine, get_engine, init_database, session_scope
from .repository import FitnessStore

__all__ = [
    "ArchiveImportJob",
    "ArchiveImportStatus",
    "FitnessFile",
    "Media",
    "PrivacyLocationSetting",
    "TERMINAL_IMPORT_STATUSES",
    "job_snapshot",
    "create_database_engine",
    "get_engine",
    "init_database",
    "session_scope",
    "FitnessStore",
]
