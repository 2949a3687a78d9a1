#!/usr/bin/env python3
"""
Geometry Engine - great-circle distance, elevation gain, coordinate
normalization and Web-Mercator projection shared by parsers and map rendering
"""
import math
from typing import Iterable, List, NamedTuple, Optional, Sequence, Tuple, Union

from .const import (
    EARTH_RADIUS_METERS,
    MAX_LATITUDE_DEGREES,
    MAX_LONGITUDE_DEGREES,
    MERCATOR_MAX_LATITUDE,
    SEMICIRCLE_TO_DEGREES,
    TILE_SIZE,
)
from .utils import to_number

Number = Union[int, float]


class Coordinate(NamedTuple):
    """A (latitude, longitude) pair in degrees"""
    lat: float
    lng: float


def semicircles_to_degrees(value: Number) -> float:
    return value * SEMICIRCLE_TO_DEGREES


def _normalize_angle(value, limit: float) -> Optional[float]:
    numeric = to_number(value)
    if numeric is None:
        return None

    if abs(numeric) > limit:
        # Out of the degree range: only accept it as a semicircle value that
        # lands back in range. Never clamp.
        converted = semicircles_to_degrees(numeric)
        if abs(converted) <= limit:
            return converted
        return None

    return numeric


def normalize_latitude(value) -> Optional[float]:
    """Return latitude in degrees, decoding semicircles; None drops the point"""
    return _normalize_angle(value, MAX_LATITUDE_DEGREES)


def normalize_longitude(value) -> Optional[float]:
    """Return longitude in degrees, decoding semicircles; None drops the point"""
    return _normalize_angle(value, MAX_LONGITUDE_DEGREES)


def haversine_distance(first: Coordinate, second: Coordinate) -> float:
    """Great-circle distance in meters between two coordinates"""
    lat1, lng1 = math.radians(first[0]), math.radians(first[1])
    lat2, lng2 = math.radians(second[0]), math.radians(second[1])

    dlat = lat2 - lat1
    dlng = lng2 - lng1

    a = math.sin(dlat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(dlng / 2) ** 2
    return 2 * EARTH_RADIUS_METERS * math.asin(math.sqrt(a))


def path_distance(coordinates: Sequence[Coordinate]) -> float:
    """Sum of pairwise haversine distances along an ordered coordinate sequence"""
    if len(coordinates) < 2:
        return 0.0

    distance = 0.0
    for index in range(1, len(coordinates)):
        distance += haversine_distance(coordinates[index - 1], coordinates[index])
    return distance


def elevation_gain(altitudes: Iterable[Optional[Number]]) -> Optional[float]:
    """
    Accumulate positive deltas between consecutive present altitude samples.

    Missing samples are skipped rather than treated as zero. Returns None when
    there is no ascent at all, so callers can tell "no data" from a flat route.
    """
    gain = 0.0
    previous: Optional[float] = None

    for altitude in altitudes:
        current = to_number(altitude)
        if current is None:
            continue
        if previous is not None and current > previous:
            gain += current - previous
        previous = current

    if gain <= 0:
        return None
    return gain


def clamp_latitude(latitude: float) -> float:
    return min(MERCATOR_MAX_LATITUDE, max(-MERCATOR_MAX_LATITUDE, latitude))


def wrap_longitude(longitude: float) -> float:
    if longitude > 180:
        return longitude - 360
    if longitude < -180:
        return longitude + 360
    return longitude


def project(coordinate: Coordinate, zoom: int) -> Tuple[float, float]:
    """Project a coordinate to Web-Mercator world pixel space at ``zoom``"""
    scale = (2 ** zoom) * TILE_SIZE
    lng = wrap_longitude(coordinate[1])
    lat = clamp_latitude(coordinate[0])

    x = (lng + 180) / 360 * scale
    lat_rad = math.radians(lat)
    y = (1 - math.log(math.tan(lat_rad) + 1 / math.cos(lat_rad)) / math.pi) / 2 * scale
    return x, y


def downsample(coordinates: Sequence[Coordinate], max_points: int = 500) -> List[Coordinate]:
    """
    Reduce a coordinate sequence to at most ``max_points`` using a uniform
    stride, always keeping the final point.

    Only meant for rendering; distance and duration must be computed from the
    full-resolution samples.
    """
    points = list(coordinates)
    if max_points <= 0:
        return []
    if len(points) <= max_points:
        return points
    if max_points == 1:
        return [points[-1]]

    # Reserve one slot for the forced final point
    stride = math.ceil((len(points) - 1) / (max_points - 1))
    sampled = points[:-1:stride]
    sampled.append(points[-1])
    return sampled


def _allocate_segment_targets(lengths: Sequence[int], max_points: int, minimum_per_segment: int) -> List[int]:
    targets = [0] * len(lengths)
    minimum = max(1, minimum_per_segment)
    remaining = max_points

    # Longest segments get their share first
    order = sorted(range(len(lengths)), key=lambda index: (-lengths[index], index))

    for index in order:
        if remaining < minimum:
            break
        if lengths[index] < minimum:
            continue
        targets[index] = minimum
        remaining -= minimum

    while remaining > 0:
        progressed = False
        for index in order:
            if remaining <= 0:
                break
            if targets[index] == 0 or targets[index] >= lengths[index]:
                continue
            targets[index] += 1
            remaining -= 1
            progressed = True
        if not progressed:
            break

    return targets


def downsample_segments(segments: Sequence[Sequence[Coordinate]],
                        max_points: int,
                        minimum_per_segment: int = 2) -> List[List[Coordinate]]:
    """
    Downsample several route segments to a shared point budget.

    Every kept segment retains at least ``minimum_per_segment`` points; segments
    that cannot get that many are dropped.
    """
    if max_points <= 0 or not segments:
        return []

    if sum(len(segment) for segment in segments) <= max_points:
        return [list(segment) for segment in segments]

    targets = _allocate_segment_targets([len(segment) for segment in segments], max_points, minimum_per_segment)

    sampled = []
    for segment, target in zip(segments, targets):
        points = downsample(segment, target)
        if points:
            sampled.append(points)
    return sampled
