#!/usr/bin/env python3
"""
Processors module - Fitness File Format Normalizer
"""

from .interface import (
    ActivityData, FitnessFileType, ProcessingStatus,
    ParsedActivity, InvalidFitnessFile, ParseResult,
    FitRecord, FitSession, FitActivityPayload,
    InvalidFitnessFileError, UnsupportedFileTypeError,
)
from .activity import TrackPoint, to_activity_data
from .fit import decode_fit, normalize_fit_payload, parse_fit
from .gpx import parse_gpx
from .tcx import parse_tcx
from .normalizer import parse_fitness_file, parse_fitness_file_or_raise

__all__ = [
    'ActivityData', 'FitnessFileType', 'ProcessingStatus',
    'ParsedActivity', 'InvalidFitnessFile', 'ParseResult',
    'FitRecord', 'FitSession', 'FitActivityPayload',

    'InvalidFitnessFileError', 'UnsupportedFileTypeError',

    'TrackPoint', 'to_activity_data',

    # Format extractors
    'decode_fit', 'normalize_fit_payload', 'parse_fit',
    'parse_gpx', 'parse_tcx',

    # Dispatch
    'parse_fitness_file', 'parse_fitness_file_or_raise',
]
