#!/usr/bin/env python3
"""
Tests for the FIT, GPX and TCX extractors and the normalizer dispatch
"""
from datetime import datetime, timezone
from unittest.mock import patch

import pytest

from fitflow.geometry import Coordinate, haversine_distance
from fitflow.processors import (
    ActivityData,
    FitnessFileType,
    InvalidFitnessFile,
    InvalidFitnessFileError,
    ParsedActivity,
    UnsupportedFileTypeError,
    normalize_fit_payload,
    parse_fitness_file,
    parse_fitness_file_or_raise,
)


def semicircles(degrees: float) -> int:
    return int(round(degrees * (2 ** 31) / 180))


@pytest.fixture
def fit_records():
    """Three records with semicircle positions and cumulative distance samples"""
    start = datetime(2024, 3, 1, 7, 0, 0)
    return [
        {"timestamp": start, "position_lat": semicircles(52.0), "position_long": semicircles(13.0),
         "altitude": 30.0, "distance": 0.0},
        {"timestamp": start.replace(minute=10), "position_lat": semicircles(52.01),
         "position_long": semicircles(13.0), "altitude": 40.0, "distance": 1100.0},
        {"timestamp": start.replace(minute=20), "position_lat": semicircles(52.02),
         "position_long": semicircles(13.0), "altitude": 35.0, "distance": 2250.0},
    ]


class TestGpxExtraction:
    """GPX path"""

    def test_two_points_distance_duration_and_gain(self, two_point_gpx):
        result = parse_fitness_file("gpx", two_point_gpx)

        assert isinstance(result, ParsedActivity)
        activity = result.activity
        expected = haversine_distance(Coordinate(52.0, 13.0), Coordinate(52.11, 13.0))

        assert activity.total_distance_meters == pytest.approx(expected, rel=1e-9)
        assert activity.total_distance_meters == pytest.approx(12231.4, abs=1.0)
        assert activity.total_duration_seconds == pytest.approx(600)
        assert activity.elevation_gain_meters == pytest.approx(15.0)
        assert activity.coordinates == [Coordinate(52.0, 13.0), Coordinate(52.11, 13.0)]

    def test_type_and_metadata_start_time(self, two_point_gpx):
        activity = parse_fitness_file_or_raise("gpx", two_point_gpx)

        assert activity.activity_type == "running"
        assert activity.start_time == datetime(2024, 1, 1, 9, 59, tzinfo=timezone.utc)

    def test_start_time_falls_back_to_first_sample(self, gpx_builder):
        document = gpx_builder([
            (52.0, 13.0, None, "2024-01-01T10:10:00Z"),
            (52.001, 13.0, None, "2024-01-01T10:00:00Z"),
        ], track_type=None)

        activity = parse_fitness_file_or_raise("gpx", document)

        assert activity.start_time == datetime(2024, 1, 1, 10, 0, tzinfo=timezone.utc)
        assert activity.total_duration_seconds == pytest.approx(600)
        assert activity.activity_type is None
        assert activity.elevation_gain_meters is None

    def test_document_without_points_is_empty_but_valid(self, gpx_builder):
        activity = parse_fitness_file_or_raise("gpx", gpx_builder([]))

        assert activity.coordinates == []
        assert activity.total_distance_meters == 0.0
        assert activity.total_duration_seconds == 0.0
        assert not activity.has_map_data

    def test_malformed_document_is_invalid(self):
        result = parse_fitness_file("gpx", b"<gpx><trk><trkseg>")

        assert isinstance(result, InvalidFitnessFile)
        assert not result.ok
        assert result.file_type == FitnessFileType.GPX

        with pytest.raises(InvalidFitnessFileError):
            parse_fitness_file_or_raise("gpx", b"<gpx><trk><trkseg>")


class TestTcxExtraction:
    """TCX path"""

    def test_lap_totals_are_authoritative(self, lap_tcx):
        activity = parse_fitness_file_or_raise("tcx", lap_tcx)

        assert activity.total_distance_meters == 12345.6
        assert activity.total_duration_seconds == 1800
        assert len(activity.coordinates) == 2
        assert activity.activity_type == "Running"
        assert activity.start_time == datetime(2024, 1, 1, 8, 0, tzinfo=timezone.utc)

    def test_lap_totals_win_over_sample_span(self, tcx_builder):
        document = tcx_builder([
            (12345.6, 1800, [
                (52.0, 13.0, None, "2024-01-01T08:00:00Z"),
                (52.01, 13.0, None, "2024-01-01T08:45:00Z"),
            ]),
        ])

        activity = parse_fitness_file_or_raise("tcx", document)

        assert activity.total_duration_seconds == 1800
        assert activity.total_distance_meters == 12345.6

    def test_multiple_laps_are_summed(self, tcx_builder):
        document = tcx_builder([
            (1000, 300, [(52.0, 13.0, None, "2024-01-01T08:00:00Z")]),
            (1500.5, 450, [(52.01, 13.0, None, "2024-01-01T08:12:00Z")]),
        ])

        activity = parse_fitness_file_or_raise("tcx", document)

        assert activity.total_distance_meters == pytest.approx(2500.5)
        assert activity.total_duration_seconds == pytest.approx(750)

    def test_zero_lap_totals_fall_back_to_samples(self, tcx_builder):
        document = tcx_builder([
            (0, 0, [
                (52.0, 13.0, 10.0, "2024-01-01T08:00:00Z"),
                (52.01, 13.0, 20.0, "2024-01-01T08:05:00Z"),
            ]),
        ])

        activity = parse_fitness_file_or_raise("tcx", document)
        expected = haversine_distance(Coordinate(52.0, 13.0), Coordinate(52.01, 13.0))

        assert activity.total_distance_meters == pytest.approx(expected)
        assert activity.total_duration_seconds == pytest.approx(300)
        assert activity.elevation_gain_meters == pytest.approx(10.0)

    def test_leading_whitespace_is_tolerated(self, lap_tcx):
        result = parse_fitness_file("tcx", b"\n   " + lap_tcx)
        assert result.ok

    def test_wrong_root_is_invalid(self, two_point_gpx):
        result = parse_fitness_file("tcx", two_point_gpx)
        assert isinstance(result, InvalidFitnessFile)


class TestFitNormalization:
    """Structured FIT session/record path"""

    def test_session_totals_are_returned_verbatim(self, fit_records):
        payload = {
            "sessions": [{
                "total_distance": 5000.0,
                "total_elapsed_time": 1500.0,
                "total_timer_time": 1400.0,
                "sport": "running",
                "start_time": datetime(2024, 3, 1, 7, 0, 0),
            }],
            "records": fit_records,
        }

        activity = normalize_fit_payload(payload)

        assert activity.total_distance_meters == 5000.0
        assert activity.total_duration_seconds == 1500.0
        assert activity.activity_type == "running"
        assert activity.start_time == datetime(2024, 3, 1, 7, 0, tzinfo=timezone.utc)

    def test_semicircle_positions_are_decoded(self, fit_records):
        activity = normalize_fit_payload({"sessions": [], "records": fit_records})

        assert len(activity.coordinates) == 3
        assert activity.coordinates[0].lat == pytest.approx(52.0, abs=1e-6)
        assert activity.coordinates[0].lng == pytest.approx(13.0, abs=1e-6)

    def test_record_distance_used_without_session_distance(self, fit_records):
        payload = {"sessions": [{"total_timer_time": 1190.0, "sub_sport": "trail"}], "records": fit_records}

        activity = normalize_fit_payload(payload)

        assert activity.total_distance_meters == 2250.0
        assert activity.total_duration_seconds == 1190.0
        assert activity.activity_type == "trail"
        assert activity.elevation_gain_meters == pytest.approx(10.0)

    def test_duration_falls_back_to_record_span(self, fit_records):
        activity = normalize_fit_payload({"sessions": [{}], "records": fit_records})

        assert activity.total_duration_seconds == pytest.approx(1200)
        assert activity.start_time == datetime(2024, 3, 1, 7, 0, tzinfo=timezone.utc)

    def test_session_ascent_wins_over_computed_gain(self, fit_records):
        activity = normalize_fit_payload({"sessions": [{"total_ascent": 42}], "records": fit_records})
        assert activity.elevation_gain_meters == 42.0

    def test_bad_records_are_dropped_not_fatal(self, fit_records):
        records = fit_records + [
            {"position_lat": 2 ** 40, "position_long": semicircles(13.0)},
            {"position_lat": None, "position_long": None},
            {"position_lat": "garbage", "position_long": 13.0},
        ]

        activity = normalize_fit_payload({"sessions": [], "records": records})

        assert len(activity.coordinates) == 3

    def test_corrupt_binary_is_invalid(self):
        result = parse_fitness_file("fit", b"definitely not a fit file")

        assert isinstance(result, InvalidFitnessFile)
        assert result.file_type == FitnessFileType.FIT

    def test_decoded_binary_flows_through_normalization(self, fit_records):
        decoded = {"sessions": [{"total_distance": 321.0}], "records": fit_records}

        with patch("fitflow.processors.fit.decode_fit", return_value=decoded) as decode:
            result = parse_fitness_file(FitnessFileType.FIT, b"binary")

        decode.assert_called_once_with(b"binary")
        assert result.ok
        assert result.activity.total_distance_meters == 321.0


class TestDispatch:
    """File type handling"""

    def test_unsupported_type_is_a_contract_error(self):
        with pytest.raises(UnsupportedFileTypeError):
            parse_fitness_file("csv", b"")

        with pytest.raises(ValueError):
            parse_fitness_file("zip", b"PK")

    def test_type_is_case_insensitive(self, two_point_gpx):
        assert parse_fitness_file("GPX", two_point_gpx).ok

    def test_route_coordinates_are_bounded(self):
        activity = ActivityData(coordinates=[Coordinate(i / 10000, 0.0) for i in range(2000)])

        route = activity.route_coordinates()

        assert len(route) <= 500
        assert route[-1] == activity.coordinates[-1]
        assert len(activity.coordinates) == 2000
