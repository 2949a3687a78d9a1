#!/usr/bin/env python3
"""
FitFlow - Fitness activity ingestion core
Normalizes FIT/GPX/TCX exports, renders route previews and reads Strava bulk exports
"""

# Geometry
from .geometry import Coordinate, haversine_distance, path_distance, elevation_gain, downsample

# Format normalizer
from .processors import (
    ActivityData, FitnessFileType, ParsedActivity, InvalidFitnessFile,
    InvalidFitnessFileError, UnsupportedFileTypeError,
    parse_fitness_file, parse_fitness_file_or_raise,
)

# Map rendering
from .maps import MapRenderer, MapRenderError

# Storage
from .storage import BlobStorage, LocalFileBlobStorage, S3BlobStorage, InMemoryBlobStorage, StorageError

# Quota and archives
from .quota import QuotaCheck, QuotaExceededError, check_quota, ensure_quota
from .archive import StravaArchiveReader, StravaArchiveActivity, InvalidArchiveError

# Privacy zones
from .privacy import PrivacyLocation, PRIVACY_RADIUS_OPTIONS, parse_privacy_locations, visible_segments

__version__ = "0.1.0"

__all__ = [
    # Geometry
    'Coordinate', 'haversine_distance', 'path_distance', 'elevation_gain', 'downsample',

    # Format normalizer
    'ActivityData', 'FitnessFileType', 'ParsedActivity', 'InvalidFitnessFile',
    'InvalidFitnessFileError', 'UnsupportedFileTypeError',
    'parse_fitness_file', 'parse_fitness_file_or_raise',

    # Map rendering
    'MapRenderer', 'MapRenderError',

    # Storage
    'BlobStorage', 'LocalFileBlobStorage', 'S3BlobStorage', 'InMemoryBlobStorage', 'StorageError',

    # Quota and archives
    'QuotaCheck', 'QuotaExceededError', 'check_quota', 'ensure_quota',
    'StravaArchiveReader', 'StravaArchiveActivity', 'InvalidArchiveError',

    # Privacy zones
    'PrivacyLocation', 'PRIVACY_RADIUS_OPTIONS', 'parse_privacy_locations', 'visible_segments',
]
