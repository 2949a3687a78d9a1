"""
Pytest configuration and fixtures for FitFlow Tasks tests.

This module provides an in-memory database, in-memory blob storage, a fake
queue and a fake activity publisher so archive imports run without a broker.
"""

import io
import zipfile
from unittest.mock import Mock

import pytest

from fitflow.storage import InMemoryBlobStorage
from fitflow_tasks.config import ArchiveImportConfig, FitnessStorageConfig, MapConfig
from fitflow_tasks.database import FitnessStore, create_database_engine, init_database
from fitflow_tasks.services import ArchiveImportService, ArchiveUpload

ACTOR_ID = "https://fitflow.test/users/runner"
OTHER_ACTOR_ID = "https://fitflow.test/users/cyclist"


def build_gpx(points) -> bytes:
    """GPX document with one running track; ``points`` are (lat, lon, ele, time) tuples"""
    trkpts = "".join(
        f'<trkpt lat="{lat}" lon="{lon}"><ele>{ele}</ele><time>{time}</time></trkpt>'
        for lat, lon, ele, time in points
    )
    return (
        '<?xml version="1.0" encoding="UTF-8"?>'
        '<gpx version="1.1" creator="tests" xmlns="http://www.topografix.com/GPX/1/1">'
        f"<trk><type>running</type><trkseg>{trkpts}</trkseg></trk></gpx>"
    ).encode("utf-8")


def build_tcx() -> bytes:
    return (
        '<?xml version="1.0" encoding="UTF-8"?>'
        '<TrainingCenterDatabase xmlns="http://www.garmin.com/xmlschemas/TrainingCenterDatabase/v2">'
        '<Activities><Activity Sport="Biking"><Id>2024-02-01T08:00:00Z</Id>'
        '<Lap StartTime="2024-02-01T08:00:00Z"><TotalTimeSeconds>3600</TotalTimeSeconds>'
        "<DistanceMeters>30000</DistanceMeters><Track>"
        "<Trackpoint><Time>2024-02-01T08:00:00Z</Time><Position><LatitudeDegrees>48.1</LatitudeDegrees>"
        "<LongitudeDegrees>11.5</LongitudeDegrees></Position></Trackpoint>"
        "<Trackpoint><Time>2024-02-01T09:00:00Z</Time><Position><LatitudeDegrees>48.2</LatitudeDegrees>"
        "<LongitudeDegrees>11.6</LongitudeDegrees></Position></Trackpoint>"
        "</Track></Lap></Activity></Activities></TrainingCenterDatabase>"
    ).encode("utf-8")


def build_archive(files, compression=zipfile.ZIP_DEFLATED) -> bytes:
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", compression) as archive:
        for path, data in files.items():
            archive.writestr(path, data)
    return buffer.getvalue()


def build_strava_export(media_paths=("media/a.jpg", "media/b.png"), compression=zipfile.ZIP_DEFLATED) -> bytes:
    """Three activities: a GPX run with media, a broken GPX and a TCX ride"""
    media_column = "|".join(media_paths)
    csv_text = (
        "Activity ID,Activity Name,Activity Description,Filename,Media\n"
        f"1,Morning Run,Easy run,activities/1.gpx,{media_column}\n"
        "2,Broken,,activities/2.gpx,\n"
        "3,Ride,,activities/3.tcx,\n"
    )
    files = {
        "activities.csv": csv_text.encode("utf-8"),
        "activities/1.gpx": build_gpx([
            (52.0, 13.0, 10.0, "2024-01-01T10:00:00Z"),
            (52.01, 13.01, 20.0, "2024-01-01T10:05:00Z"),
        ]),
        "activities/2.gpx": b"<gpx><trk><trkseg>",
        "activities/3.tcx": build_tcx(),
    }
    for media_path in media_paths:
        files[media_path] = b"media-bytes-" + media_path.encode("utf-8")
    return build_archive(files, compression)


def corrupt_stored_entry(archive: bytes, payload: bytes) -> bytes:
    """Damage one uncompressed entry in place so reading it fails the CRC check"""
    assert archive.count(payload) == 1
    return archive.replace(payload, b"X" + payload[1:])


class FakeQueue:
    """Collects published messages; raises while ``fail`` is set"""

    def __init__(self):
        self.messages = []
        self.fail = False

    def publish(self, message):
        if self.fail:
            raise ConnectionError("broker unavailable")
        self.messages.append(message)


class FakeActivityPublisher:
    """Records published activities; ``media_failures`` attachment calls fail first"""

    def __init__(self):
        self.published = []
        self.media_calls = []
        self.media_failures = 0

    def publish_activity(self, actor_id, fitness_file, activity, activity_data, visibility):
        self.published.append({
            "actor_id": actor_id,
            "activity_id": activity.activity_id,
            "fitness_file_id": fitness_file.id,
            "visibility": visibility,
            "activity": activity_data,
        })
        return f"status-{activity.activity_id}"

    def attach_media(self, actor_id, status_id, media):
        self.media_calls.append((status_id, [attachment.name for attachment in media]))
        if self.media_failures > 0:
            self.media_failures -= 1
            raise ConnectionError("media service unavailable")


@pytest.fixture
def engine():
    engine = create_database_engine("sqlite://")
    init_database(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def store(engine):
    return FitnessStore(engine)


@pytest.fixture
def storage():
    return InMemoryBlobStorage()


@pytest.fixture
def queue():
    return FakeQueue()


@pytest.fixture
def publisher():
    return FakeActivityPublisher()


@pytest.fixture
def map_renderer():
    renderer = Mock()
    renderer.render_sync.return_value = b"png-bytes"
    return renderer


@pytest.fixture
def import_config():
    return ArchiveImportConfig(
        max_media_attachment_retries=3,
        max_media_attachments=4,
        attachment_name_limit=150,
    )


@pytest.fixture
def storage_config():
    return FitnessStorageConfig(max_file_size=5_000_000, quota_per_account=10_000_000)


@pytest.fixture
def service(store, storage, queue, publisher, map_renderer, import_config, storage_config):
    return ArchiveImportService(
        store=store,
        storage=storage,
        queue=queue,
        publisher=publisher,
        map_renderer=map_renderer,
        import_config=import_config,
        storage_config=storage_config,
        map_config=MapConfig(width=800, height=600),
    )


@pytest.fixture
def strava_export():
    return build_strava_export()


@pytest.fixture
def export_builder():
    return build_strava_export


@pytest.fixture
def upload(strava_export):
    return ArchiveUpload(file_name="export_12345.zip", data=strava_export, content_type="application/zip")


@pytest.fixture
def actor_id():
    return ACTOR_ID


@pytest.fixture
def other_actor_id():
    return OTHER_ACTOR_ID


@pytest.fixture
def archive_builder():
    return build_archive


@pytest.fixture
def gpx_builder():
    return build_gpx


@pytest.fixture
def entry_corrupter():
    return corrupt_stored_entry
