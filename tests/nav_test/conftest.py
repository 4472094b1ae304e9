import pytest

from campus_nav.router.geo_utils import destination_point
from campus_nav.router.models import (
    CampusEdge, CampusMap, CampusNode, Coord, Direction, UserLocation,
)
from campus_nav.voice.guidance import GuidanceSink


class RecordingGuidance(GuidanceSink):
    """Keeps every announcement as (kind, payload) instead of speaking it."""

    def __init__(self):
        self.events = []

    def speak(self, text, **overrides):
        self.events.append(("speak", text))
        return True

    def announce_step(self, instruction, step_number, total_steps):
        self.events.append(("step", (instruction, step_number, total_steps)))

    def announce_arrival(self, destination_name):
        self.events.append(("arrival", destination_name))

    def announce_nearby_event(self, location_name, event_info):
        self.events.append(("event", location_name))

    def announce_wrong_direction(self, correct_direction_name):
        self.events.append(("wrong", correct_direction_name))

    def announce_direction_corrected(self):
        self.events.append(("corrected", None))

    def kinds(self, kind):
        return [payload for k, payload in self.events if k == kind]


class Walker:
    """Emits location samples a known number of metres apart."""

    def __init__(self, lat=0.0, lon=0.0, t=0.0, interval=2.0):
        self.lat, self.lon, self.t, self.interval = lat, lon, t, interval

    def here(self, heading=None):
        return UserLocation(self.lat, self.lon, heading=heading, timestamp=self.t)

    def walk(self, metres, bearing, heading=None):
        self.lat, self.lon = destination_point(self.lat, self.lon, bearing, metres)
        self.t += self.interval
        return self.here(bearing if heading is None else heading)


def make_node(nid, lat=0.0, lon=0.0, **kwargs):
    return CampusNode(
        id=nid, name=nid.replace("_", " ").title(), qr_code=f"CAMPUS_{nid.upper()}",
        coordinates=Coord(lat, lon), type="building", **kwargs,
    )


def make_edge(a, b, distance, direction="north", accessible=True):
    return CampusEdge(a, b, distance, Direction(direction), accessible, f"Walk from {a} to {b}.")


@pytest.fixture
def guidance():
    return RecordingGuidance()


@pytest.fixture
def walker():
    return Walker()


@pytest.fixture
def two_node_map():
    """A (0, 0) -> B, one accessible 30 m edge heading north."""
    nodes = {"A": make_node("A", 0.0, 0.0), "B": make_node("B", 0.0, 0.0003)}
    return CampusMap(nodes=nodes, edges=[make_edge("A", "B", 30)])


@pytest.fixture
def three_leg_map():
    """A -> B north 40 m, B -> C east 40 m, C -> D north 40 m."""
    nodes = {
        "A": make_node("A"),
        "B": make_node("B"),
        "C": make_node("C"),
        "D": make_node("D"),
    }
    edges = [
        make_edge("A", "B", 40, "north"),
        make_edge("B", "C", 40, "east"),
        make_edge("C", "D", 40, "north"),
    ]
    return CampusMap(nodes=nodes, edges=edges)
