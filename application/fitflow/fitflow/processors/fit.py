#!/usr/bin/env python3
"""
FIT processor - decodes FIT binaries with fitparse and normalizes the decoded
session/record messages into an ActivityData
"""
import io
import logging
from typing import Any, Dict, Mapping, Union

from fitparse import FitFile
from fitparse.utils import FitParseError
from pydantic import ValidationError as PydanticValidationError

from .activity import make_track_point, to_activity_data
from .interface import (
    ActivityData,
    FitActivityPayload,
    FitnessFileType,
    InvalidFitnessFile,
    ParsedActivity,
    ParseResult,
)

logger = logging.getLogger(__name__)


def decode_fit(data: bytes) -> Dict[str, Any]:
    """
    Decode a FIT binary into plain ``sessions``/``records`` dictionaries.

    Raises:
        FitParseError: If the payload is not a readable FIT file
    """
    fitfile = FitFile(io.BytesIO(data))

    sessions = [message.get_values() for message in fitfile.get_messages("session")]
    records = [message.get_values() for message in fitfile.get_messages("record")]

    logger.debug(f"Decoded FIT file: {len(sessions)} sessions, {len(records)} records")
    return {"sessions": sessions, "records": records}


def normalize_fit_payload(payload: Union[FitActivityPayload, Mapping[str, Any]]) -> ActivityData:
    """
    Normalize decoded FIT messages.

    Distance: session ``total_distance``, else the largest per-record cumulative
    ``distance``, else the haversine sum. Duration: session
    ``total_elapsed_time``, else ``total_timer_time``, else the record time span.
    Records whose position fails normalization are dropped.
    """
    if not isinstance(payload, FitActivityPayload):
        payload = FitActivityPayload.model_validate(payload)

    session = payload.sessions[0] if payload.sessions else None

    points = []
    for record in payload.records:
        point = make_track_point(
            record.position_lat,
            record.position_long,
            altitude_meters=record.elevation,
            timestamp=record.timestamp,
        )
        if point is not None:
            points.append(point)

    record_distances = [record.distance for record in payload.records if record.distance is not None]
    distance_from_records = max(record_distances) if record_distances else None

    if session is None:
        return to_activity_data(points, total_distance_meters=distance_from_records)

    total_distance = session.total_distance
    if total_distance is None:
        total_distance = distance_from_records

    total_duration = session.total_elapsed_time
    if total_duration is None:
        total_duration = session.total_timer_time

    return to_activity_data(
        points,
        total_distance_meters=total_distance,
        total_duration_seconds=total_duration,
        elevation_gain_meters=session.total_ascent,
        activity_type=session.sport or session.sub_sport,
        start_time=session.start_time,
    )


def parse_fit(data: bytes) -> ParseResult:
    """Decode and normalize a FIT binary into a tagged parse result"""
    try:
        decoded = decode_fit(data)
        payload = FitActivityPayload.model_validate(decoded)
    except (FitParseError, PydanticValidationError) as e:
        logger.warning(f"Rejected FIT file: {e}")
        return InvalidFitnessFile(file_type=FitnessFileType.FIT, reason=str(e) or "Invalid FIT file payload")
    except Exception as e:
        # fitparse surfaces truncated/corrupt payloads through assorted exception types
        logger.warning(f"Rejected FIT file: {type(e).__name__}: {e}")
        return InvalidFitnessFile(file_type=FitnessFileType.FIT, reason="Invalid FIT file payload")

    return ParsedActivity(file_type=FitnessFileType.FIT, activity=normalize_fit_payload(payload))
