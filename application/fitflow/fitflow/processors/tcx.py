#!/usr/bin/env python3
"""
TCX processor - walks Activity -> Lap -> Track -> Trackpoint of the first
activity; lap totals are authoritative for distance and duration
"""
import logging
import xml.etree.ElementTree as ET
from typing import Optional

from ..utils import to_datetime, to_number
from .activity import make_track_point, to_activity_data
from .interface import FitnessFileType, InvalidFitnessFile, ParsedActivity, ParseResult

logger = logging.getLogger(__name__)


def _local_name(tag: str) -> str:
    return tag.rsplit("}", 1)[-1]


def _sum_laps(laps, tag: str) -> Optional[float]:
    total = 0.0
    for lap in laps:
        value = to_number(lap.findtext(f"{{*}}{tag}"))
        if value is not None:
            total += value
    return total if total > 0 else None


def parse_tcx(data: bytes) -> ParseResult:
    """Parse a TCX document into a tagged parse result"""
    try:
        # Some exporters emit whitespace before the XML declaration
        root = ET.fromstring(data.lstrip())
    except ET.ParseError as e:
        logger.warning(f"Rejected TCX file: {e}")
        return InvalidFitnessFile(file_type=FitnessFileType.TCX, reason="Invalid TCX file structure")

    if _local_name(root.tag) != "TrainingCenterDatabase":
        logger.warning(f"Rejected TCX file with root element {root.tag!r}")
        return InvalidFitnessFile(file_type=FitnessFileType.TCX, reason="Invalid TCX file structure")

    activity = root.find("{*}Activities/{*}Activity")
    if activity is None:
        return ParsedActivity(file_type=FitnessFileType.TCX, activity=to_activity_data([]))

    laps = activity.findall("{*}Lap")

    points = []
    for lap in laps:
        for trackpoint in lap.findall("{*}Track/{*}Trackpoint"):
            point = make_track_point(
                trackpoint.findtext("{*}Position/{*}LatitudeDegrees"),
                trackpoint.findtext("{*}Position/{*}LongitudeDegrees"),
                altitude_meters=to_number(trackpoint.findtext("{*}AltitudeMeters")),
                timestamp=to_datetime(trackpoint.findtext("{*}Time")),
            )
            if point is not None:
                points.append(point)

    result = to_activity_data(
        points,
        total_distance_meters=_sum_laps(laps, "DistanceMeters"),
        total_duration_seconds=_sum_laps(laps, "TotalTimeSeconds"),
        activity_type=(activity.get("Sport") or "").strip() or None,
        start_time=to_datetime(activity.findtext("{*}Id")),
    )
    return ParsedActivity(file_type=FitnessFileType.TCX, activity=result)
