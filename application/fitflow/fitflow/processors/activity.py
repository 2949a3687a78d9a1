#!/usr/bin/env python3
"""
Activity summarization - turns accepted track samples plus optional
authoritative totals into an ActivityData
"""
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional, Sequence

from ..geometry import Coordinate, elevation_gain, normalize_latitude, normalize_longitude, path_distance
from .interface import ActivityData


@dataclass
class TrackPoint:
    """A sample that survived coordinate normalization"""
    lat: float
    lng: float
    altitude_meters: Optional[float] = None
    timestamp: Optional[datetime] = None


def make_track_point(raw_lat, raw_lng,
                     altitude_meters: Optional[float] = None,
                     timestamp: Optional[datetime] = None) -> Optional[TrackPoint]:
    """Normalize a raw sample; returns None when either axis is unusable"""
    lat = normalize_latitude(raw_lat)
    lng = normalize_longitude(raw_lng)
    if lat is None or lng is None:
        return None
    return TrackPoint(lat=lat, lng=lng, altitude_meters=altitude_meters, timestamp=timestamp)


def duration_seconds(start_time: Optional[datetime],
                     end_time: Optional[datetime],
                     fallback: Optional[float] = None) -> float:
    if fallback is not None and fallback > 0:
        return float(fallback)

    if start_time and end_time:
        seconds = (end_time - start_time).total_seconds()
        if seconds > 0:
            return seconds

    return 0.0


def to_activity_data(points: Sequence[TrackPoint],
                     total_distance_meters: Optional[float] = None,
                     total_duration_seconds: Optional[float] = None,
                     elevation_gain_meters: Optional[float] = None,
                     activity_type: Optional[str] = None,
                     start_time: Optional[datetime] = None) -> ActivityData:
    """
    Build an ActivityData from full-resolution samples.

    Authoritative totals win when they are positive; otherwise distance is the
    haversine sum of the samples, duration is the span between the earliest
    and latest sample timestamps and elevation gain is summed from altitudes.

    Args:
        points: Accepted samples in recording order
        total_distance_meters: Distance reported by the source format
        total_duration_seconds: Duration reported by the source format
        elevation_gain_meters: Total ascent reported by the source format
        activity_type: Free-form sport label
        start_time: Start time reported by the source format

    Returns:
        ActivityData with distance and duration always populated
    """
    coordinates: List[Coordinate] = [Coordinate(point.lat, point.lng) for point in points]

    if total_distance_meters is not None and total_distance_meters > 0:
        distance = float(total_distance_meters)
    else:
        distance = path_distance(coordinates)

    timestamps = sorted(point.timestamp for point in points if point.timestamp is not None)
    first_timestamp = timestamps[0] if timestamps else None
    last_timestamp = timestamps[-1] if timestamps else None

    duration = duration_seconds(first_timestamp, last_timestamp, total_duration_seconds)

    if elevation_gain_meters is not None and elevation_gain_meters > 0:
        gain: Optional[float] = float(elevation_gain_meters)
    else:
        gain = elevation_gain(point.altitude_meters for point in points)

    return ActivityData(
        coordinates=coordinates,
        total_distance_meters=distance,
        total_duration_seconds=duration,
        elevation_gain_meters=gain,
        activity_type=activity_type or None,
        start_time=start_time or first_timestamp,
    )
