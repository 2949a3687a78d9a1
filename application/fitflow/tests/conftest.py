"""
Pytest configuration and fixtures for the fitflow library tests
"""
import gzip
import io
import zipfile

import pytest
from PIL import Image


def build_gpx(points, track_type="running", metadata_time=None) -> bytes:
    """GPX 1.1 document with one track; ``points`` are (lat, lon, ele, time) tuples"""
    metadata = f"<metadata><time>{metadata_time}</time></metadata>" if metadata_time else ""
    trkpts = "".join(
        f'<trkpt lat="{lat}" lon="{lon}">'
        + (f"<ele>{ele}</ele>" if ele is not None else "")
        + (f"<time>{time}</time>" if time else "")
        + "</trkpt>"
        for lat, lon, ele, time in points
    )
    track_type_tag = f"<type>{track_type}</type>" if track_type else ""
    return (
        '<?xml version="1.0" encoding="UTF-8"?>'
        '<gpx version="1.1" creator="tests" xmlns="http://www.topografix.com/GPX/1/1">'
        f"{metadata}<trk><name>Morning Run</name>{track_type_tag}<trkseg>{trkpts}</trkseg></trk>"
        "</gpx>"
    ).encode("utf-8")


def build_tcx(laps, sport="Running", activity_id="2024-01-01T08:00:00Z") -> bytes:
    """
    TCX document with one activity.

    ``laps`` is a list of (distance_meters, total_time_seconds, trackpoints) where
    trackpoints are (lat, lon, altitude, time) tuples.
    """
    lap_xml = []
    for distance, total_time, trackpoints in laps:
        points = "".join(
            "<Trackpoint>"
            f"<Time>{time}</Time>"
            f"<Position><LatitudeDegrees>{lat}</LatitudeDegrees>"
            f"<LongitudeDegrees>{lon}</LongitudeDegrees></Position>"
            + (f"<AltitudeMeters>{altitude}</AltitudeMeters>" if altitude is not None else "")
            + "</Trackpoint>"
            for lat, lon, altitude, time in trackpoints
        )
        lap_xml.append(
            f'<Lap StartTime="{activity_id}">'
            f"<TotalTimeSeconds>{total_time}</TotalTimeSeconds>"
            f"<DistanceMeters>{distance}</DistanceMeters>"
            f"<Track>{points}</Track>"
            "</Lap>"
        )
    return (
        '<?xml version="1.0" encoding="UTF-8"?>'
        '<TrainingCenterDatabase xmlns="http://www.garmin.com/xmlschemas/TrainingCenterDatabase/v2">'
        f'<Activities><Activity Sport="{sport}"><Id>{activity_id}</Id>{"".join(lap_xml)}</Activity></Activities>'
        "</TrainingCenterDatabase>"
    ).encode("utf-8")


def build_archive(files) -> bytes:
    """ZIP bytes from a {path: bytes} mapping"""
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", zipfile.ZIP_DEFLATED) as archive:
        for path, data in files.items():
            archive.writestr(path, data)
    return buffer.getvalue()


def png_bytes(width=256, height=256, color="#cccccc") -> bytes:
    output = io.BytesIO()
    Image.new("RGB", (width, height), color).save(output, format="PNG")
    return output.getvalue()


@pytest.fixture
def two_point_gpx():
    """Two points 0.11 degrees of latitude apart, ten minutes apart"""
    return build_gpx(
        [
            (52.0, 13.0, 10.0, "2024-01-01T10:00:00Z"),
            (52.11, 13.0, 25.0, "2024-01-01T10:10:00Z"),
        ],
        metadata_time="2024-01-01T09:59:00Z",
    )


@pytest.fixture
def lap_tcx():
    """One lap reporting 12345.6 m / 1800 s with two trackpoints 30 minutes apart"""
    return build_tcx([
        (12345.6, 1800, [
            (52.0, 13.0, 30.0, "2024-01-01T08:00:00Z"),
            (52.01, 13.0, 35.0, "2024-01-01T08:30:00Z"),
        ]),
    ])


@pytest.fixture
def strava_archive():
    """A small Strava export with a gzipped FIT row, a GPX row and rows that must be skipped"""
    gpx = build_gpx([
        (52.0, 13.0, 10.0, "2024-01-01T10:00:00Z"),
        (52.01, 13.01, 12.0, "2024-01-01T10:05:00Z"),
    ])
    csv_text = (
        "\ufeffActivity ID,Activity Date,Activity Name,Activity Type,Activity Description,"
        "Elapsed Time,Distance,Filename,Distance,Media\n"
        '101,"Jan 1, 2024",Morning Run,Run,"Easy, with friends",1800,5.0,'
        'activities/101.gpx,5000,media/a.jpg|media/b.png\n'
        "102,Jan 2 2024,Evening Ride,Ride,,3600,20.0,activities/102.fit.gz,20000,\n"
        "103,Jan 3 2024,Gym,Workout,,3600,0,,0,\n"
        "104,Jan 4 2024,Swim,Swim,,1800,1.0,activities/104.csv,1000,\n"
    )
    return build_archive({
        "activities.csv": csv_text.encode("utf-8"),
        "activities/101.gpx": gpx,
        "activities/102.fit.gz": gzip.compress(b"fit-bytes"),
        "media/a.jpg": b"jpeg-bytes",
        "media/b.png": png_bytes(8, 8),
    })


@pytest.fixture
def gpx_builder():
    return build_gpx


@pytest.fixture
def tcx_builder():
    return build_tcx


@pytest.fixture
def archive_builder():
    return build_archive


@pytest.fixture
def png_factory():
    return png_bytes
