"""Unit tests for great-circle helpers."""

import pytest

from core.geo import bounding_box, haversine_meters, longitude_ranges

MUMBAI = (19.0760, 72.8777)
PUNE = (18.5204, 73.8567)


def test_same_point_is_zero():
    assert haversine_meters(*MUMBAI, *MUMBAI) == pytest.approx(0.0)


def test_mumbai_to_pune():
    assert haversine_meters(*MUMBAI, *PUNE) == pytest.approx(120_000, rel=0.03)


def test_symmetric():
    assert haversine_meters(*MUMBAI, *PUNE) == pytest.approx(haversine_meters(*PUNE, *MUMBAI))


def test_bounding_box_contains_circle():
    min_lat, max_lat, min_lng, max_lng = bounding_box(*MUMBAI, 10_000)

    assert min_lat < MUMBAI[0] < max_lat
    assert min_lng < MUMBAI[1] < max_lng
    # Edges sit roughly one radius away
    assert haversine_meters(*MUMBAI, max_lat, MUMBAI[1]) == pytest.approx(10_000, rel=0.01)
    assert haversine_meters(*MUMBAI, MUMBAI[0], max_lng) == pytest.approx(10_000, rel=0.01)


def test_bounding_box_excludes_far_point():
    min_lat, max_lat, min_lng, max_lng = bounding_box(*MUMBAI, 10_000)
    assert not (min_lat <= PUNE[0] <= max_lat and min_lng <= PUNE[1] <= max_lng)


def test_bounding_box_at_pole():
    min_lat, max_lat, min_lng, max_lng = bounding_box(90.0, 0.0, 5_000)
    assert max_lat == 90.0
    assert (min_lng, max_lng) == (-180.0, 180.0)


def test_longitude_ranges_inside_world():
    assert longitude_ranges(72.5, 73.2) == [(72.5, 73.2)]


def test_longitude_ranges_wrap_east_edge():
    ranges = longitude_ranges(179.9, 180.1)
    assert ranges[0] == (179.9, 180.0)
    assert ranges[1][0] == -180.0
    assert ranges[1][1] == pytest.approx(-179.9)


def test_longitude_ranges_wrap_west_edge():
    ranges = longitude_ranges(-180.1, -179.9)
    assert ranges[0][0] == pytest.approx(179.9)
    assert ranges[0][1] == 180.0
    assert ranges[1] == (-180.0, -179.9)


def test_longitude_ranges_full_span():
    assert longitude_ranges(-180.0, 180.0) == [(-180.0, 180.0)]


def test_box_across_antimeridian_covers_both_sides():
    _, _, min_lng, max_lng = bounding_box(-17.0, 179.98, 10_000)
    ranges = longitude_ranges(min_lng, max_lng)

    assert len(ranges) == 2
    assert any(low <= -179.98 <= high for low, high in ranges)
    assert any(low <= 179.99 <= high for low, high in ranges)
