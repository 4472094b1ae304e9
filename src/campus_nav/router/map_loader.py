# map_loader.py
# Reads a campus map JSON file and builds the in-memory CampusMap.
# Depends only on: models, geo_utils, nothing else from this project.

import json
import logging
import os
from typing import Dict, List, Optional

from .geo_utils import angle_difference, calculate_bearing
from .models import CampusEdge, CampusMap, CampusNode

logger = logging.getLogger(__name__)

BUNDLED_MAP_PATH = os.path.join(os.path.dirname(__file__), "data", "campus_map.json")

# Authored edge direction vs. bearing between endpoints
_DIRECTION_MISMATCH_DEG = 45.0


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------

def parse_campus_map(data: dict) -> CampusMap:
    """
    Build a CampusMap from its JSON structure.

    Args:
        data: {"nodes": {id: node}, "edges": [edge, ...]}

    Returns:
        Validated CampusMap.

    Raises:
        ValueError: If the structure is malformed or internally inconsistent.
    """
    try:
        raw_nodes = data["nodes"]
        raw_edges = data.get("edges", [])
        nodes: Dict[str, CampusNode] = {}
        for key, raw in raw_nodes.items():
            node = CampusNode.from_dict(raw)
            if node.id != key:
                raise ValueError(f"Node key '{key}' does not match its id '{node.id}'.")
            nodes[key] = node
        edges: List[CampusEdge] = [CampusEdge.from_dict(e) for e in raw_edges]
    except (KeyError, TypeError, AttributeError) as e:
        raise ValueError(f"Malformed campus map: {e!r}") from e

    seen_codes: Dict[str, str] = {}
    for node in nodes.values():
        if node.qr_code in seen_codes:
            raise ValueError(
                f"QR code '{node.qr_code}' used by both '{seen_codes[node.qr_code]}' and '{node.id}'."
            )
        seen_codes[node.qr_code] = node.id

    for edge in edges:
        if edge.from_node not in nodes or edge.to_node not in nodes:
            raise ValueError(f"Edge {edge.from_node} -> {edge.to_node} references an unknown node.")
        if edge.distance <= 0:
            raise ValueError(f"Edge {edge.from_node} -> {edge.to_node} has non-positive distance.")
        _check_direction(edge, nodes)

    return CampusMap(nodes=nodes, edges=edges)


def _check_direction(edge: CampusEdge, nodes: Dict[str, CampusNode]) -> None:
    """Warn when the authored direction disagrees with the endpoint coordinates."""
    a = nodes[edge.from_node].coordinates
    b = nodes[edge.to_node].coordinates
    if a == b:
        return
    bearing = calculate_bearing(a.lat, a.lon, b.lat, b.lon)
    if angle_difference(bearing, edge.direction.degrees) > _DIRECTION_MISMATCH_DEG:
        logger.warning(
            f"Edge {edge.from_node} -> {edge.to_node} is authored '{edge.direction.value}' "
            f"but its endpoints bear {bearing:.0f}°."
        )


# ---------------------------------------------------------------------------
# Public loader
# ---------------------------------------------------------------------------

def load_campus_map(path: Optional[str] = None) -> CampusMap:
    """
    Load a campus map, falling back to the bundled map on any failure.

    Args:
        path: JSON map file; the bundled map is used if omitted.

    Returns:
        CampusMap ready for route planning.
    """
    if path:
        try:
            campus_map = _read(path)
            logger.info(f"Campus map loaded from {path} ({len(campus_map.nodes)} nodes).")
            return campus_map
        except (OSError, ValueError) as e:
            logger.error(f"Failed to load campus map from {path}: {e}. Using bundled map.")

    campus_map = _read(BUNDLED_MAP_PATH)
    logger.info(f"Bundled campus map ready: {len(campus_map.nodes)} nodes, {len(campus_map.edges)} edges.")
    return campus_map


def _read(path: str) -> CampusMap:
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    return parse_campus_map(data)
