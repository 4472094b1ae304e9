# navigator.py
# Public entry point for the navigation system.
# Owns no business logic, delegates everything to specialist modules.

import logging
from typing import Callable, List, Optional, Tuple

from ..voice.guidance import ConsoleGuidance, GuidanceSink
from .ar_assist import ARGuide
from .map_loader import load_campus_map
from .models import CampusMap, CampusNode, Destination, NavigationState, NavigationStep, Route, UserLocation
from .nav_config import NavConfig
from .nav_logger import NavLogger
from .navigation_engine import NavigationEngine
from .qr_resolver import process_qr_code
from .route_calculator import RouteCalculator

logger = logging.getLogger(__name__)


class NavigationSystem:
    """
    High-level navigation facade.

    Typical lifecycle:
        nav = NavigationSystem("campus_map.json")
        ok, msg, node = nav.scan_qr("CAMPUS_MAIN_GATE")
        nav.start_navigation(node.id, "library")

        # Sensor loop:
        state = nav.update(UserLocation(lat, lon, heading=h, timestamp=t))

    Args:
        map_path:          Campus map JSON; the bundled map if omitted.
        config:            Optional NavConfig; defaults to NavConfig().
        guidance:          Announcement sink; prints to the console if omitted.
        on_confirm_prompt: AR mode callback, see ARGuide.
    """

    def __init__(
        self,
        map_path: Optional[str] = None,
        config: Optional[NavConfig] = None,
        guidance: Optional[GuidanceSink] = None,
        on_confirm_prompt: Optional[Callable[[NavigationStep], None]] = None,
    ) -> None:
        self.config = config or NavConfig()

        # Load map once at startup
        self.campus_map: CampusMap = load_campus_map(map_path)

        # Specialist modules
        self.guidance    = guidance or ConsoleGuidance()
        self._calculator = RouteCalculator(self.campus_map, self.config)
        self._engine     = NavigationEngine(self.guidance, self.config)
        self._ar_guide   = ARGuide(self._engine, self.config, on_confirm_prompt)
        self._logger     = NavLogger(self.config)

        self.current_node: Optional[CampusNode] = None
        self._ar_mode = False

    # ------------------------------------------------------------------
    # Where am I
    # ------------------------------------------------------------------

    def scan_qr(self, data: str) -> Tuple[bool, str, Optional[CampusNode]]:
        """
        Resolve a scanned QR payload and remember it as the current location.

        Returns:
            (success, message, node)
        """
        node = process_qr_code(data, self.campus_map, self.config.qr_code_prefix)
        if node is None:
            msg = "Invalid QR code. Please scan a campus location marker."
            logger.warning(f"{msg} Payload: {data!r}")
            return False, msg, None

        self.current_node = node
        logger.info(f"Located at {node.name} via QR.")
        return True, f"You are at {node.name}.", node

    def list_destinations(
        self, start_id: Optional[str] = None, require_accessible: bool = False
    ) -> List[Destination]:
        """Reachable destinations from start_id (or the scanned node), nearest first."""
        start_id = start_id or (self.current_node.id if self.current_node else None)
        if start_id is None:
            return []
        return self._calculator.destinations(start_id, require_accessible)

    # ------------------------------------------------------------------
    # Navigation control
    # ------------------------------------------------------------------

    def start_navigation(
        self,
        start_id: Optional[str],
        destination_id: str,
        require_accessible: bool = False,
        ar_mode: bool = False,
    ) -> Tuple[bool, str]:
        """
        Plan a route and begin tracking.

        Args:
            start_id:           Start node id; the scanned node if None.
            destination_id:     Target node id.
            require_accessible: Only use wheelchair-accessible paths.
            ar_mode:            Start through the AR guide (manual stepping).

        Returns:
            (success, message)
        """
        start_id = start_id or (self.current_node.id if self.current_node else None)
        if start_id is None:
            return False, "Scan a QR code first to set your location."
        if start_id == destination_id:
            return False, "You are already at your destination."

        route, msg = self._calculator.calculate(start_id, destination_id, require_accessible)
        if route is None:
            logger.warning(f"Route calculation failed: {msg}")
            return False, msg

        self._logger.save_route(route)

        start_node = self.campus_map.nodes[start_id]
        destination = self.campus_map.nodes[destination_id]
        self._ar_mode = ar_mode
        if ar_mode:
            self._ar_guide.start(route, start_node, destination)
        else:
            self._engine.start_navigation(route, start_node, destination)

        return True, (
            f"Route ready. {len(route.steps)} steps, {route.distance:.0f} m, "
            f"about {route.estimated_time} min."
        )

    def stop_navigation(self) -> None:
        """Forcibly end the current navigation session."""
        was_navigating = self._engine.is_navigating
        self._ar_guide.stop()
        self._ar_mode = False
        if was_navigating:
            logger.info("Navigation stopped by user.")

    def next_step(self) -> bool:
        """Skip to the next step. In AR mode this also clears any open prompt."""
        if self._ar_mode:
            return self._ar_guide.skip_step()
        return self._engine.next_step()

    # ------------------------------------------------------------------
    # Sensor updates: call these on every fix
    # ------------------------------------------------------------------

    def update(self, location: UserLocation) -> NavigationState:
        """
        Process a new location fix and return the resulting state.

        In AR mode fixes never complete steps; only the user does.
        """
        was_navigating = self._engine.is_navigating
        self._engine.update_location(location, self.campus_map.nodes)
        state = self._engine.get_state()
        if was_navigating:
            self._logger.log_event(state, location, self._engine.get_progress())
        return state

    @property
    def ar_guide(self) -> ARGuide:
        return self._ar_guide

    @property
    def ar_mode(self) -> bool:
        return self._ar_mode and self._engine.is_navigating

    # ------------------------------------------------------------------
    # Convenience read-only properties
    # ------------------------------------------------------------------

    @property
    def is_active(self) -> bool:
        return self._engine.is_navigating

    @property
    def current_step(self) -> Optional[NavigationStep]:
        return self._engine.get_current_step()

    @property
    def current_route(self) -> Optional[Route]:
        return self._engine.get_state().current_route

    @property
    def remaining_distance(self) -> float:
        return self._engine.get_remaining_distance()

    @property
    def progress(self) -> float:
        return self._engine.get_progress()

    @property
    def wrong_direction(self) -> bool:
        return self._engine.is_heading_wrong_direction()
