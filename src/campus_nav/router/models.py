# models.py
# Shared data structures and enums used across all modules.

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Tuple


# ---------------------------------------------------------------------------
# Compass direction
# ---------------------------------------------------------------------------

class Direction(Enum):
    NORTH     = "north"
    NORTHEAST = "northeast"
    EAST      = "east"
    SOUTHEAST = "southeast"
    SOUTH     = "south"
    SOUTHWEST = "southwest"
    WEST      = "west"
    NORTHWEST = "northwest"

    @property
    def degrees(self) -> float:
        """Compass heading a walker holds for this octant."""
        return _DIRECTION_DEGREES[self]

    @property
    def display_name(self) -> str:
        return self.value.capitalize()


_DIRECTION_DEGREES: Dict[Direction, float] = {
    Direction.NORTH: 0.0,
    Direction.NORTHEAST: 45.0,
    Direction.EAST: 90.0,
    Direction.SOUTHEAST: 135.0,
    Direction.SOUTH: 180.0,
    Direction.SOUTHWEST: 225.0,
    Direction.WEST: 270.0,
    Direction.NORTHWEST: 315.0,
}


# ---------------------------------------------------------------------------
# Coordinate
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Coord:
    """Immutable geographic coordinate."""
    lat: float
    lon: float


# ---------------------------------------------------------------------------
# Campus graph
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class CampusNode:
    """A named location on campus, bound to a physical QR code."""
    id: str
    name: str
    qr_code: str
    coordinates: Coord
    type: str                    # "entrance" | "building" | "facility" | "landmark"
    description: Optional[str] = None
    has_event: bool = False
    event_info: Optional[str] = None

    def to_dict(self) -> dict:
        d = {
            "id": self.id,
            "name": self.name,
            "qrCode": self.qr_code,
            "coordinates": {"lat": self.coordinates.lat, "lng": self.coordinates.lon},
            "type": self.type,
        }
        if self.description is not None:
            d["description"] = self.description
        if self.has_event:
            d["hasEvent"] = True
            d["eventInfo"] = self.event_info
        return d

    @staticmethod
    def from_dict(d: dict) -> "CampusNode":
        return CampusNode(
            id=d["id"],
            name=d["name"],
            qr_code=d["qrCode"],
            coordinates=Coord(float(d["coordinates"]["lat"]), float(d["coordinates"]["lng"])),
            type=d.get("type", "landmark"),
            description=d.get("description"),
            has_event=bool(d.get("hasEvent", False)),
            event_info=d.get("eventInfo"),
        )


@dataclass(frozen=True)
class CampusEdge:
    """Directed walkable segment. Bidirectional paths need two edges."""
    from_node: str
    to_node: str
    distance: float              # metres, > 0
    direction: Direction
    accessible: bool             # wheelchair accessible
    instructions: str

    def to_dict(self) -> dict:
        return {
            "from": self.from_node,
            "to": self.to_node,
            "distance": self.distance,
            "direction": self.direction.value,
            "accessible": self.accessible,
            "instructions": self.instructions,
        }

    @staticmethod
    def from_dict(d: dict) -> "CampusEdge":
        return CampusEdge(
            from_node=d["from"],
            to_node=d["to"],
            distance=float(d["distance"]),
            direction=Direction(d["direction"]),
            accessible=bool(d["accessible"]),
            instructions=d["instructions"],
        )


@dataclass
class CampusMap:
    """Node table plus ordered edge list. Read-only once loaded."""
    nodes: Dict[str, CampusNode]
    edges: List[CampusEdge] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "nodes": {nid: node.to_dict() for nid, node in self.nodes.items()},
            "edges": [e.to_dict() for e in self.edges],
        }


# ---------------------------------------------------------------------------
# Route
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class NavigationStep:
    """A single navigation instruction: one traversed edge."""
    step_number: int             # 1-based
    instruction: str
    distance: float
    direction: Direction
    from_node: str
    to_node: str

    def to_dict(self) -> dict:
        return {
            "stepNumber": self.step_number,
            "instruction": self.instruction,
            "distance": self.distance,
            "direction": self.direction.value,
            "fromNode": self.from_node,
            "toNode": self.to_node,
        }

    @staticmethod
    def from_dict(d: dict) -> "NavigationStep":
        return NavigationStep(
            step_number=int(d["stepNumber"]),
            instruction=d["instruction"],
            distance=float(d["distance"]),
            direction=Direction(d["direction"]),
            from_node=d["fromNode"],
            to_node=d["toNode"],
        )


@dataclass(frozen=True)
class Route:
    """Planner output. Steps are contiguous from start to end."""
    id: str
    start: str
    end: str
    distance: float              # metres
    steps: Tuple[NavigationStep, ...]
    accessible: bool
    estimated_time: int          # minutes

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "start": self.start,
            "end": self.end,
            "distance": self.distance,
            "steps": [s.to_dict() for s in self.steps],
            "accessible": self.accessible,
            "estimatedTime": self.estimated_time,
        }

    @staticmethod
    def from_dict(d: dict) -> "Route":
        return Route(
            id=d["id"],
            start=d["start"],
            end=d["end"],
            distance=float(d["distance"]),
            steps=tuple(NavigationStep.from_dict(s) for s in d["steps"]),
            accessible=bool(d["accessible"]),
            estimated_time=int(d["estimatedTime"]),
        )


@dataclass(frozen=True)
class Destination:
    """A reachable node and its shortest route distance."""
    node: CampusNode
    distance: float

    def __str__(self) -> str:
        return f"{self.node.name} - {int(self.distance)} m"


# ---------------------------------------------------------------------------
# Sensor input
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class UserLocation:
    """One location fix. heading is absent when there is no compass fix."""
    latitude: float
    longitude: float
    heading: Optional[float] = None      # compass degrees
    accuracy: Optional[float] = None     # metres
    timestamp: Optional[float] = None    # seconds, monotonic per source


# ---------------------------------------------------------------------------
# Navigation status
# ---------------------------------------------------------------------------

@dataclass
class NavigationState:
    """Snapshot of the navigation engine's live state."""
    current_route: Optional[Route] = None
    current_step_index: int = 0
    start_location: Optional[CampusNode] = None
    destination: Optional[CampusNode] = None
    is_navigating: bool = False
    distance_traveled: float = 0.0       # metres, within the current step only


# ---------------------------------------------------------------------------
# Voice
# ---------------------------------------------------------------------------

@dataclass
class VoiceSettings:
    enabled: bool = True
    pitch: float = 1.0
    rate: float = 0.9
    language: str = "en-US"

    def to_dict(self) -> dict:
        return {
            "enabled": self.enabled,
            "pitch": self.pitch,
            "rate": self.rate,
            "language": self.language,
        }

    @staticmethod
    def from_dict(d: dict) -> "VoiceSettings":
        return VoiceSettings(
            enabled=bool(d["enabled"]),
            pitch=float(d["pitch"]),
            rate=float(d["rate"]),
            language=str(d["language"]),
        )
