#!/usr/bin/env python3
"""
Strava bulk export reader

Reads ``activities.csv`` from a Strava account export ZIP and hands out the
activity files and media it references.
"""
import csv
import gzip
import io
import logging
import zipfile
import zlib
from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath
from typing import BinaryIO, Dict, List, Optional, Union

from .processors.interface import FitnessFileType

logger = logging.getLogger(__name__)

ACTIVITIES_CSV = "activities.csv"

SUPPORTED_ACTIVITY_EXTENSIONS = (".fit", ".fit.gz", ".gpx", ".gpx.gz", ".tcx", ".tcx.gz")

MEDIA_MIME_TYPES = {
    ".jpeg": "image/jpeg",
    ".jpg": "image/jpeg",
    ".png": "image/png",
    ".mov": "video/quicktime",
    ".mp4": "video/mp4",
    ".webm": "video/webm",
}


class InvalidArchiveError(Exception):
    """The upload is not a readable Strava export"""
    pass


@dataclass
class StravaArchiveActivity:
    """One row of activities.csv that points at a supported activity file"""
    activity_id: str
    fitness_file_path: str
    activity_name: Optional[str] = None
    activity_description: Optional[str] = None
    media_paths: List[str] = field(default_factory=list)


@dataclass
class ArchiveFitnessFile:
    """An activity file extracted from the archive, gunzipped when needed"""
    file_type: FitnessFileType
    file_name: str
    mime_type: str
    data: bytes


def normalize_archive_path(value: str) -> str:
    path = value.replace("\\", "/").strip()
    if path.startswith("./"):
        path = path[2:]
    elif path.startswith("/"):
        path = path[1:]
    return path.strip()


def get_media_mime_type(media_path: str) -> Optional[str]:
    return MEDIA_MIME_TYPES.get(PurePosixPath(media_path).suffix.lower())


def is_supported_activity_path(path: str) -> bool:
    return path.lower().endswith(SUPPORTED_ACTIVITY_EXTENSIONS)


def fitness_file_type_from_path(path: str) -> Optional[FitnessFileType]:
    lowered = path.lower()
    if lowered.endswith(".gz"):
        lowered = lowered[:-3]
    for file_type in (FitnessFileType.FIT, FitnessFileType.GPX, FitnessFileType.TCX):
        if lowered.endswith(f".{file_type.value}"):
            return file_type
    return None


def to_fitness_payload(fitness_file_path: str, data: bytes) -> ArchiveFitnessFile:
    """
    Turn a raw archive entry into an uploadable fitness file.

    Raises:
        ValueError: If the path is not a supported activity file
        OSError: If a ``.gz`` entry is not valid gzip data
    """
    file_type = fitness_file_type_from_path(fitness_file_path)
    if file_type is None:
        raise ValueError(f"Unsupported fitness file path: {fitness_file_path}")

    base_name = PurePosixPath(fitness_file_path).name
    if base_name.lower().endswith(".gz"):
        data = gzip.decompress(data)
        base_name = base_name[:-3]

    return ArchiveFitnessFile(
        file_type=file_type,
        file_name=base_name,
        mime_type=file_type.mime_type,
        data=data,
    )


class StravaArchiveReader:
    """
    Random access to the entries of a Strava export.

    Use as a context manager, or call ``close()`` when done.
    """

    def __init__(self, source: Union[bytes, str, Path, BinaryIO]):
        if isinstance(source, (bytes, bytearray)):
            source = io.BytesIO(source)
        try:
            self._zip = zipfile.ZipFile(source)
        except (zipfile.BadZipFile, OSError) as e:
            raise InvalidArchiveError(f"Failed to open archive file: {e}") from e

        self._entries: Dict[str, zipfile.ZipInfo] = {
            normalize_archive_path(info.filename): info for info in self._zip.infolist()
        }

    @classmethod
    def open(cls, source: Union[bytes, str, Path, BinaryIO]) -> "StravaArchiveReader":
        return cls(source)

    def close(self) -> None:
        self._zip.close()

    def __enter__(self) -> "StravaArchiveReader":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def has_entry(self, entry_path: str) -> bool:
        return normalize_archive_path(entry_path) in self._entries

    def read_entry(self, entry_path: str) -> Optional[bytes]:
        """
        Entry bytes, or None for missing paths and directories.

        Raises:
            InvalidArchiveError: If the entry is corrupt (bad CRC or deflate stream)
        """
        info = self._entries.get(normalize_archive_path(entry_path))
        if info is None or info.is_dir():
            return None
        try:
            return self._zip.read(info)
        except (zipfile.BadZipFile, zlib.error, EOFError, OSError) as e:
            raise InvalidArchiveError(f"Failed to read {info.filename} from archive: {e}") from e

    def activities(self) -> List[StravaArchiveActivity]:
        """
        Activities listed in activities.csv, in file order.

        Rows without a supported activity file are skipped. Header lookup is by
        first occurrence since Strava exports repeat some column names.

        Raises:
            InvalidArchiveError: If activities.csv or its Filename column is missing
        """
        raw = self.read_entry(ACTIVITIES_CSV)
        if raw is None:
            raise InvalidArchiveError("Strava archive does not contain activities.csv")

        rows = list(csv.reader(io.StringIO(raw.decode("utf-8-sig", errors="replace"))))
        if not rows:
            return []

        header = rows[0]
        if "Filename" not in header:
            raise InvalidArchiveError("Strava archive activities.csv is missing Filename column")

        def column(name: str) -> int:
            return header.index(name) if name in header else -1

        filename_index = column("Filename")
        id_index = column("Activity ID")
        name_index = column("Activity Name")
        description_index = column("Activity Description")
        media_index = column("Media")

        def cell(row: List[str], index: int) -> str:
            if index < 0 or index >= len(row):
                return ""
            return row[index].strip()

        activities = []
        for row in rows[1:]:
            fitness_path = normalize_archive_path(cell(row, filename_index))
            if not fitness_path or not is_supported_activity_path(fitness_path):
                continue

            media_paths = [
                normalize_archive_path(item)
                for item in cell(row, media_index).split("|")
                if normalize_archive_path(item)
            ]

            activities.append(StravaArchiveActivity(
                activity_id=cell(row, id_index) or PurePosixPath(fitness_path).name,
                fitness_file_path=fitness_path,
                activity_name=cell(row, name_index) or None,
                activity_description=cell(row, description_index) or None,
                media_paths=media_paths,
            ))

        logger.debug(f"Found {len(activities)} importable activities in archive")
        return activities

    def read_activity_file(self, activity: StravaArchiveActivity) -> Optional[ArchiveFitnessFile]:
        """The activity's fitness file, or None when the archive lacks it"""
        data = self.read_entry(activity.fitness_file_path)
        if data is None:
            return None
        return to_fitness_payload(activity.fitness_file_path, data)
