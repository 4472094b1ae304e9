# route_calculator.py
# Dijkstra shortest-path search on a CampusMap.
# Returns a Route of NavigationStep objects.

import logging
import math
from typing import Dict, List, Optional, Tuple

from .models import CampusEdge, CampusMap, Destination, NavigationStep, Route
from .nav_config import NavConfig

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

def _build_adjacency(
    campus_map: CampusMap, require_accessible: bool
) -> Dict[str, List[CampusEdge]]:
    """Outgoing edges per node, in map order."""
    adjacency: Dict[str, List[CampusEdge]] = {}
    for edge in campus_map.edges:
        if require_accessible and not edge.accessible:
            continue
        adjacency.setdefault(edge.from_node, []).append(edge)
    return adjacency


def _dijkstra(
    campus_map: CampusMap,
    start_id: str,
    end_id: str,
    require_accessible: bool,
) -> Tuple[Dict[str, float], Dict[str, Optional[CampusEdge]]]:
    """
    Single-source shortest distances with early exit at end_id.

    Selection is a linear scan over the unvisited set. Fine for campus
    maps (hundreds of nodes); swap in heapq for anything much larger.
    """
    adjacency = _build_adjacency(campus_map, require_accessible)

    distances: Dict[str, float] = {nid: math.inf for nid in campus_map.nodes}
    previous: Dict[str, Optional[CampusEdge]] = {nid: None for nid in campus_map.nodes}
    unvisited = set(campus_map.nodes)
    distances[start_id] = 0.0

    while unvisited:
        current = None
        min_dist = math.inf
        # iterate in map order so ties resolve by insertion
        for nid in campus_map.nodes:
            if nid in unvisited and distances[nid] < min_dist:
                min_dist = distances[nid]
                current = nid

        if current is None:
            break                                   # nothing reachable left

        unvisited.discard(current)
        if current == end_id:
            break

        for edge in adjacency.get(current, []):
            neighbor = edge.to_node
            if neighbor not in unvisited:
                continue
            alt = distances[current] + edge.distance
            if alt < distances[neighbor]:
                distances[neighbor] = alt
                previous[neighbor] = edge

    return distances, previous


def _reconstruct_path(
    previous: Dict[str, Optional[CampusEdge]], start_id: str, end_id: str
) -> List[CampusEdge]:
    path: List[CampusEdge] = []
    curr = end_id
    visited_nodes: set = set()
    while curr != start_id:
        if curr in visited_nodes:
            raise RuntimeError("Cycle detected while reconstructing path.")
        visited_nodes.add(curr)
        edge = previous[curr]
        if edge is None:
            raise RuntimeError(f"Broken predecessor chain at '{curr}'.")
        path.append(edge)
        curr = edge.from_node
    path.reverse()
    return path


def _build_steps(path: List[CampusEdge]) -> Tuple[NavigationStep, ...]:
    """One step per traversed edge, numbered from 1."""
    return tuple(
        NavigationStep(
            step_number=i,
            instruction=edge.instructions,
            distance=edge.distance,
            direction=edge.direction,
            from_node=edge.from_node,
            to_node=edge.to_node,
        )
        for i, edge in enumerate(path, start=1)
    )


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def find_route(
    campus_map: CampusMap,
    start_id: str,
    end_id: str,
    require_accessible: bool = False,
    config: Optional[NavConfig] = None,
) -> Optional[Route]:
    """
    Shortest-distance route between two nodes.

    Args:
        campus_map:         Loaded campus map.
        start_id, end_id:   Node ids.
        require_accessible: Only use wheelchair-accessible edges.
        config:             NavConfig for the walking speed.

    Returns:
        Route, or None if a node is unknown or no path exists.
    """
    config = config or NavConfig()

    if start_id not in campus_map.nodes or end_id not in campus_map.nodes:
        return None

    distances, previous = _dijkstra(campus_map, start_id, end_id, require_accessible)
    total = distances[end_id]
    if math.isinf(total):
        return None

    steps = _build_steps(_reconstruct_path(previous, start_id, end_id))
    return Route(
        id=f"{start_id}_to_{end_id}",
        start=start_id,
        end=end_id,
        distance=total,
        steps=steps,
        accessible=require_accessible,
        estimated_time=math.ceil(total / config.walking_speed_m_per_min),
    )


def get_available_destinations(
    campus_map: CampusMap,
    start_id: str,
    require_accessible: bool = False,
    config: Optional[NavConfig] = None,
) -> List[Destination]:
    """
    Every node reachable from start_id, nearest first.

    Runs the planner once per node, so cost grows as O(N) searches.
    """
    destinations: List[Destination] = []
    for node_id, node in campus_map.nodes.items():
        if node_id == start_id:
            continue
        route = find_route(campus_map, start_id, node_id, require_accessible, config)
        if route:
            destinations.append(Destination(node=node, distance=route.distance))

    destinations.sort(key=lambda d: d.distance)
    return destinations


class RouteCalculator:
    """
    Calculates walking routes between campus nodes.

    Args:
        campus_map: Loaded CampusMap from map_loader.load_campus_map().
        config:     NavConfig instance.
    """

    def __init__(self, campus_map: CampusMap, config: Optional[NavConfig] = None) -> None:
        self.campus_map = campus_map
        self.config = config or NavConfig()

    def calculate(
        self, start_id: str, end_id: str, require_accessible: bool = False
    ) -> Tuple[Optional[Route], str]:
        """
        Run the planner from start_id to end_id.

        Returns:
            (route, message); route is None on failure.
        """
        for label, node_id in (("start", start_id), ("destination", end_id)):
            if node_id not in self.campus_map.nodes:
                return None, f"Unknown {label} location '{node_id}'."

        route = find_route(self.campus_map, start_id, end_id, require_accessible, self.config)
        if route is None:
            qualifier = "accessible " if require_accessible else ""
            return None, f"No {qualifier}route found between these locations."

        logger.info(
            f"Route {route.id}: {len(route.steps)} steps, {route.distance:.0f} m, "
            f"~{route.estimated_time} min."
        )
        return route, "OK"

    def destinations(self, start_id: str, require_accessible: bool = False) -> List[Destination]:
        return get_available_destinations(self.campus_map, start_id, require_accessible, self.config)
