# geo_utils.py
# Pure mathematical / geographic helper functions.
# No side effects, no imports from other project modules.

import math


EARTH_RADIUS_M = 6_371_000.0

_OCTANTS = (
    "north", "northeast", "east", "southeast",
    "south", "southwest", "west", "northwest",
)


def haversine_distance(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """
    Great-circle distance between two points in metres.

    Args:
        lat1, lon1: Origin in decimal degrees.
        lat2, lon2: Destination in decimal degrees.

    Returns:
        Distance in metres.
    """
    d_lat = math.radians(lat2 - lat1)
    d_lon = math.radians(lon2 - lon1)
    a = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(lat1))
        * math.cos(math.radians(lat2))
        * math.sin(d_lon / 2) ** 2
    )
    return EARTH_RADIUS_M * 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))


def normalize_angle(angle: float) -> float:
    """Map any angle in degrees to [0, 360)."""
    normalized = angle % 360.0
    # -1e-20 % 360 rounds to 360.0
    return 0.0 if normalized >= 360.0 else normalized


def angle_difference(angle1: float, angle2: float) -> float:
    """Smallest absolute separation between two headings, in [0, 180]."""
    diff = abs(normalize_angle(angle1) - normalize_angle(angle2))
    return 360.0 - diff if diff > 180.0 else diff


def signed_angle_difference(from_angle: float, to_angle: float) -> float:
    """Shortest rotation from from_angle to to_angle, in (-180, 180]."""
    diff = normalize_angle(to_angle - from_angle)
    return diff - 360.0 if diff > 180.0 else diff


def is_correct_direction(user_heading: float, expected_direction: float, tolerance: float = 45.0) -> bool:
    """True if the heading is within tolerance degrees of the expected direction."""
    return angle_difference(user_heading, expected_direction) <= tolerance


def calculate_bearing(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """
    Forward azimuth (bearing) from point 1 to point 2 in degrees [0, 360).

    Args:
        lat1, lon1: Origin in decimal degrees.
        lat2, lon2: Destination in decimal degrees.

    Returns:
        Bearing in degrees.
    """
    rlat1, rlon1 = math.radians(lat1), math.radians(lon1)
    rlat2, rlon2 = math.radians(lat2), math.radians(lon2)
    d_lon = rlon2 - rlon1
    y = math.sin(d_lon) * math.cos(rlat2)
    x = math.cos(rlat1) * math.sin(rlat2) - math.sin(rlat1) * math.cos(rlat2) * math.cos(d_lon)
    return (math.degrees(math.atan2(y, x)) + 360) % 360


def bearing_to_direction(bearing: float) -> str:
    """Name of the compass octant nearest to bearing ("north" ... "northwest")."""
    index = int((normalize_angle(bearing) + 22.5) // 45) % 8
    return _OCTANTS[index]


def destination_point(lat: float, lon: float, bearing: float, distance: float):
    """
    Point reached by travelling distance metres from (lat, lon) along bearing.

    Args:
        lat, lon: Origin in decimal degrees.
        bearing:  Initial bearing in degrees.
        distance: Great-circle distance in metres.

    Returns:
        (lat, lon) tuple in decimal degrees.
    """
    delta = distance / EARTH_RADIUS_M
    theta = math.radians(bearing)
    rlat1, rlon1 = math.radians(lat), math.radians(lon)

    rlat2 = math.asin(
        math.sin(rlat1) * math.cos(delta)
        + math.cos(rlat1) * math.sin(delta) * math.cos(theta)
    )
    rlon2 = rlon1 + math.atan2(
        math.sin(theta) * math.sin(delta) * math.cos(rlat1),
        math.cos(delta) - math.sin(rlat1) * math.sin(rlat2),
    )
    return math.degrees(rlat2), (math.degrees(rlon2) + 540) % 360 - 180
