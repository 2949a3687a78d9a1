#!/usr/bin/env python3
"""
Privacy Zones - hide route points near an actor's saved locations

Rendered previews only draw the runs of points that fall outside every
privacy circle, so a hidden start or finish never appears on the map.
"""
import math
from dataclasses import dataclass
from typing import Any, Iterable, List, Mapping, Optional, Sequence

from .const import MAX_LATITUDE_DEGREES, MAX_LONGITUDE_DEGREES
from .geometry import Coordinate, haversine_distance

PRIVACY_RADIUS_OPTIONS = (0, 5, 10, 20, 50)


@dataclass(frozen=True)
class PrivacyLocation:
    """A circle around which route points are hidden"""
    latitude: float
    longitude: float
    radius_meters: int

    def hides(self, coordinate: Coordinate) -> bool:
        return haversine_distance(coordinate, Coordinate(self.latitude, self.longitude)) <= self.radius_meters


def _finite_number(value: Any) -> Optional[float]:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if not math.isfinite(value):
        return None
    return float(value)


def sanitize_privacy_radius(value: Any) -> int:
    """Return the radius if it is one of PRIVACY_RADIUS_OPTIONS, else 0"""
    number = _finite_number(value)
    if number is None or number not in PRIVACY_RADIUS_OPTIONS:
        return 0
    return int(number)


def parse_privacy_location(value: Mapping[str, Any]) -> Optional[PrivacyLocation]:
    latitude = _finite_number(value.get("latitude"))
    longitude = _finite_number(value.get("longitude"))
    radius = sanitize_privacy_radius(value.get("hide_radius_meters"))

    if latitude is None or abs(latitude) > MAX_LATITUDE_DEGREES:
        return None
    if longitude is None or abs(longitude) > MAX_LONGITUDE_DEGREES:
        return None
    if radius <= 0:
        return None

    return PrivacyLocation(latitude=latitude, longitude=longitude, radius_meters=radius)


def parse_privacy_locations(values: Iterable[Mapping[str, Any]]) -> List[PrivacyLocation]:
    """
    Validate stored privacy settings.

    Entries with out-of-range coordinates or a radius outside
    PRIVACY_RADIUS_OPTIONS (or zero) are dropped. Duplicates at six decimal
    places with the same radius are kept once, in first-seen order.
    """
    seen = set()
    locations = []
    for value in values:
        location = parse_privacy_location(value)
        if location is None:
            continue

        key = (f"{location.latitude:.6f}", f"{location.longitude:.6f}", location.radius_meters)
        if key in seen:
            continue
        seen.add(key)
        locations.append(location)

    return locations


def is_hidden(coordinate: Coordinate, locations: Sequence[PrivacyLocation]) -> bool:
    return any(location.hides(coordinate) for location in locations)


def visible_segments(coordinates: Sequence[Coordinate],
                     locations: Sequence[PrivacyLocation]) -> List[List[Coordinate]]:
    """
    Split a route into the runs of points outside every privacy location.

    Runs shorter than two points cannot be drawn and are dropped. Without
    locations the whole route is a single run.
    """
    if not locations:
        return [list(coordinates)] if len(coordinates) >= 2 else []

    segments: List[List[Coordinate]] = []
    current: List[Coordinate] = []
    for coordinate in coordinates:
        if is_hidden(coordinate, locations):
            if len(current) >= 2:
                segments.append(current)
            current = []
        else:
            current.append(coordinate)

    if len(current) >= 2:
        segments.append(current)
    return segments
