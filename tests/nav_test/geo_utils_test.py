import math

import pytest

from campus_nav.router.geo_utils import (
    EARTH_RADIUS_M,
    angle_difference,
    bearing_to_direction,
    calculate_bearing,
    destination_point,
    haversine_distance,
    is_correct_direction,
    normalize_angle,
    signed_angle_difference,
)


def test_haversine_one_degree_of_latitude():
    expected = EARTH_RADIUS_M * math.pi / 180
    assert haversine_distance(0, 0, 1, 0) == pytest.approx(expected)


def test_haversine_zero_and_symmetric():
    assert haversine_distance(40.0, -83.0, 40.0, -83.0) == 0.0
    d1 = haversine_distance(40.0, -83.0, 40.001, -82.999)
    d2 = haversine_distance(40.001, -82.999, 40.0, -83.0)
    assert d1 == pytest.approx(d2)


@pytest.mark.parametrize("angle, expected", [
    (0, 0), (360, 0), (720, 0), (-90, 270), (450, 90), (-450, 270), (359.5, 359.5),
])
def test_normalize_angle(angle, expected):
    assert normalize_angle(angle) == pytest.approx(expected)


@pytest.mark.parametrize("a, b, expected", [
    (10, 350, 20),
    (350, 10, 20),
    (0, 180, 180),
    (90, 90, 0),
    (-45, 45, 90),
    (720, 30, 30),
])
def test_angle_difference_wraps(a, b, expected):
    assert angle_difference(a, b) == pytest.approx(expected)


def test_signed_angle_difference_takes_short_way():
    assert signed_angle_difference(350, 10) == pytest.approx(20)
    assert signed_angle_difference(10, 350) == pytest.approx(-20)
    assert signed_angle_difference(0, 180) == pytest.approx(180)


def test_is_correct_direction_tolerance_is_inclusive():
    assert is_correct_direction(45, 0)
    assert is_correct_direction(315, 0)
    assert not is_correct_direction(46, 0)
    assert is_correct_direction(100, 90, tolerance=10)
    assert not is_correct_direction(101, 90, tolerance=10)


def test_bearing_and_octants():
    assert calculate_bearing(0, 0, 1, 0) == pytest.approx(0)
    assert calculate_bearing(0, 0, 0, 1) == pytest.approx(90)
    assert bearing_to_direction(0) == "north"
    assert bearing_to_direction(22) == "north"
    assert bearing_to_direction(23) == "northeast"
    assert bearing_to_direction(350) == "north"
    assert bearing_to_direction(200) == "south"
    assert bearing_to_direction(-90) == "west"


def test_destination_point_distance_and_bearing():
    lat, lon = destination_point(40.0, -83.0, 90, 250)
    assert haversine_distance(40.0, -83.0, lat, lon) == pytest.approx(250, abs=1e-6)
    assert calculate_bearing(40.0, -83.0, lat, lon) == pytest.approx(90, abs=0.01)
