#!/usr/bin/env python3
"""
Format Normalizer - single entry point dispatching FIT, GPX and TCX payloads
to their extractors
"""
import logging
from typing import Callable, Dict, Union

from .fit import parse_fit
from .gpx import parse_gpx
from .interface import (
    PARSEABLE_FILE_TYPES,
    ActivityData,
    FitnessFileType,
    InvalidFitnessFile,
    InvalidFitnessFileError,
    ParseResult,
    UnsupportedFileTypeError,
)
from .tcx import parse_tcx

logger = logging.getLogger(__name__)

PARSERS: Dict[FitnessFileType, Callable[[bytes], ParseResult]] = {
    FitnessFileType.FIT: parse_fit,
    FitnessFileType.GPX: parse_gpx,
    FitnessFileType.TCX: parse_tcx,
}


def parse_fitness_file(file_type: Union[str, FitnessFileType], data: bytes) -> ParseResult:
    """
    Parse a fitness document of the declared type.

    Returns:
        ParsedActivity, or InvalidFitnessFile when the document is not valid
        for its declared type

    Raises:
        UnsupportedFileTypeError: If the declared type has no parser
    """
    resolved = FitnessFileType.from_value(file_type)
    if resolved not in PARSEABLE_FILE_TYPES:
        raise UnsupportedFileTypeError(file_type)

    result = PARSERS[resolved](data)
    if result.ok:
        activity = result.activity
        logger.debug(
            f"Parsed {resolved.value} file: {len(activity.coordinates)} points, "
            f"{activity.total_distance_meters:.1f} m, {activity.total_duration_seconds:.0f} s"
        )
    return result


def parse_fitness_file_or_raise(file_type: Union[str, FitnessFileType], data: bytes) -> ActivityData:
    """Like parse_fitness_file but raises InvalidFitnessFileError on invalid documents"""
    result = parse_fitness_file(file_type, data)
    if isinstance(result, InvalidFitnessFile):
        raise InvalidFitnessFileError(result.file_type, result.reason)
    return result.activity
