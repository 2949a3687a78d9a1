#!/usr/bin/env python3
"""
GPX processor - collects every track point across tracks and segments
"""
import logging

import gpxpy
import gpxpy.gpx

from ..utils import to_datetime, to_number
from .activity import make_track_point, to_activity_data
from .interface import FitnessFileType, InvalidFitnessFile, ParsedActivity, ParseResult

logger = logging.getLogger(__name__)


def parse_gpx(data: bytes) -> ParseResult:
    """Parse a GPX document; distance and duration always come from the samples"""
    try:
        gpx = gpxpy.parse(data.decode("utf-8"))
    except (gpxpy.gpx.GPXException, UnicodeDecodeError, ValueError) as e:
        logger.warning(f"Rejected GPX file: {e}")
        return InvalidFitnessFile(file_type=FitnessFileType.GPX, reason="Invalid GPX file structure")

    points = []
    for track in gpx.tracks:
        for segment in track.segments:
            for point in segment.points:
                track_point = make_track_point(
                    point.latitude,
                    point.longitude,
                    altitude_meters=to_number(point.elevation),
                    timestamp=to_datetime(point.time),
                )
                if track_point is not None:
                    points.append(track_point)

    activity_type = next((track.type for track in gpx.tracks if track.type), None)

    activity = to_activity_data(
        points,
        activity_type=activity_type,
        start_time=to_datetime(gpx.time),
    )
    return ParsedActivity(file_type=FitnessFileType.GPX, activity=activity)
