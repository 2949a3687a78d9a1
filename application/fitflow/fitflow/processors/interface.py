#!/usr/bin/env python3
"""
Processors Interface - shared activity model, typed parse results and the
validated shape of decoded FIT payloads
"""
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, field_validator

from ..const import FITNESS_MIME_TYPES, RENDER_MAX_POINTS
from ..geometry import Coordinate, downsample
from ..utils import to_datetime, to_number


class FitnessFileType(Enum):
    """Fitness file type enumeration"""
    FIT = "fit"
    GPX = "gpx"
    TCX = "tcx"
    ZIP = "zip"

    @property
    def mime_type(self) -> str:
        return FITNESS_MIME_TYPES[self.value]

    @classmethod
    def from_value(cls, value: Union[str, "FitnessFileType"]) -> "FitnessFileType":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            raise UnsupportedFileTypeError(value) from None


PARSEABLE_FILE_TYPES = (FitnessFileType.FIT, FitnessFileType.GPX, FitnessFileType.TCX)


class ProcessingStatus(Enum):
    """Processing status enumeration"""
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass
class ActivityData:
    """Normalized activity shared by every input format"""
    coordinates: List[Coordinate] = field(default_factory=list)
    total_distance_meters: float = 0.0
    total_duration_seconds: float = 0.0
    elevation_gain_meters: Optional[float] = None
    activity_type: Optional[str] = None
    start_time: Optional[datetime] = None

    @property
    def has_map_data(self) -> bool:
        return len(self.coordinates) >= 2

    def route_coordinates(self, max_points: int = RENDER_MAX_POINTS) -> List[Coordinate]:
        """Coordinates bounded for rendering; never used for totals"""
        return downsample(self.coordinates, max_points)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "coordinates": [[point.lat, point.lng] for point in self.coordinates],
            "total_distance_meters": self.total_distance_meters,
            "total_duration_seconds": self.total_duration_seconds,
            "elevation_gain_meters": self.elevation_gain_meters,
            "activity_type": self.activity_type,
            "start_time": self.start_time.isoformat() if self.start_time else None,
        }


@dataclass
class ParsedActivity:
    """Successful parse result"""
    file_type: FitnessFileType
    activity: ActivityData
    ok: bool = field(default=True, init=False)


@dataclass
class InvalidFitnessFile:
    """Parse result for a document that is not valid for its declared type"""
    file_type: FitnessFileType
    reason: str
    ok: bool = field(default=False, init=False)


ParseResult = Union[ParsedActivity, InvalidFitnessFile]


class InvalidFitnessFileError(Exception):
    """User-facing error for a structurally invalid fitness document"""

    def __init__(self, file_type: FitnessFileType, reason: str):
        self.file_type = file_type
        self.reason = reason
        super().__init__(f"Invalid {file_type.value.upper()} file: {reason}")


class UnsupportedFileTypeError(ValueError):
    """Raised when a caller asks for a file type the normalizer cannot parse"""

    def __init__(self, file_type: Any):
        self.file_type = file_type
        super().__init__(f"Unsupported fitness file type: {file_type!r}")


class _DecodedMessage(BaseModel):
    """Decoder output is untrusted; unusable values become None instead of errors"""
    model_config = ConfigDict(extra="ignore")

    @staticmethod
    def _number(value):
        return to_number(value)

    @staticmethod
    def _label(value):
        if value is None:
            return None
        label = str(value).strip()
        return label or None


class FitRecord(_DecodedMessage):
    """One decoded FIT ``record`` message"""
    position_lat: Optional[float] = None
    position_long: Optional[float] = None
    altitude: Optional[float] = None
    enhanced_altitude: Optional[float] = None
    distance: Optional[float] = None
    timestamp: Optional[datetime] = None

    @field_validator(
        "position_lat", "position_long", "altitude", "enhanced_altitude", "distance",
        mode="before",
    )
    @classmethod
    def _coerce_number(cls, value):
        return cls._number(value)

    @field_validator("timestamp", mode="before")
    @classmethod
    def _coerce_timestamp(cls, value):
        return to_datetime(value)

    @property
    def elevation(self) -> Optional[float]:
        return self.enhanced_altitude if self.enhanced_altitude is not None else self.altitude


class FitSession(_DecodedMessage):
    """One decoded FIT ``session`` message"""
    total_distance: Optional[float] = None
    total_elapsed_time: Optional[float] = None
    total_timer_time: Optional[float] = None
    total_ascent: Optional[float] = None
    sport: Optional[str] = None
    sub_sport: Optional[str] = None
    start_time: Optional[datetime] = None

    @field_validator(
        "total_distance", "total_elapsed_time", "total_timer_time", "total_ascent",
        mode="before",
    )
    @classmethod
    def _coerce_number(cls, value):
        return cls._number(value)

    @field_validator("sport", "sub_sport", mode="before")
    @classmethod
    def _coerce_label(cls, value):
        return cls._label(value)

    @field_validator("start_time", mode="before")
    @classmethod
    def _coerce_timestamp(cls, value):
        return to_datetime(value)


class FitActivityPayload(BaseModel):
    """Structured output of an external FIT decoder"""
    model_config = ConfigDict(extra="ignore")

    sessions: List[FitSession] = []
    records: List[FitRecord] = []
