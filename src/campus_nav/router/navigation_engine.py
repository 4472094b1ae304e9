# navigation_engine.py
# State machine that tracks a walker's progress along an active route.
# Call start_navigation() once, then update_location() on every sensor fix.

import logging
import threading
from dataclasses import replace
from typing import Dict, FrozenSet, Optional, Set

from ..voice.guidance import GuidanceSink
from .geo_utils import haversine_distance, is_correct_direction
from .models import CampusNode, NavigationState, NavigationStep, Route, UserLocation
from .nav_config import NavConfig

logger = logging.getLogger(__name__)


class NavigationEngine:
    """
    Stateful progress tracker for a single navigation session.

    Usage:
        engine = NavigationEngine(guidance, config)
        engine.start_navigation(route, start_node, destination_node)

        # Inside the sensor loop:
        engine.update_location(location, campus_map.nodes)

    Callers should deliver samples in order from one producer. Every
    mutator takes the same lock, so stop_navigation() from another thread
    always leaves the engine idle and consistent.

    Args:
        guidance: Sink that receives announcements (fire and forget).
        config:   NavConfig instance.
    """

    def __init__(self, guidance: GuidanceSink, config: Optional[NavConfig] = None) -> None:
        self.config = config or NavConfig()
        self.guidance = guidance
        self._lock = threading.RLock()
        self._reset()

    def _reset(self) -> None:
        self._state = NavigationState()
        self._last_location: Optional[UserLocation] = None
        self._last_speed: float = 0.0
        self._wrong_direction: bool = False
        self._announced_events: Set[str] = set()
        self._completed_steps: Set[int] = set()
        self._manual_steps: bool = False

    # ------------------------------------------------------------------
    # Session control
    # ------------------------------------------------------------------

    def start_navigation(
        self,
        route: Route,
        start_location: CampusNode,
        destination: CampusNode,
        manual_steps: bool = False,
    ) -> None:
        """
        Replace any previous session with a new one on route.

        With manual_steps the session only advances through next_step();
        location fixes still accrue distance and drive direction and event
        announcements.
        """
        with self._lock:
            self._reset()
            self._manual_steps = manual_steps
            self._state = NavigationState(
                current_route=route,
                current_step_index=0,
                start_location=start_location,
                destination=destination,
                is_navigating=True,
                distance_traveled=0.0,
            )
            mode = "manual" if manual_steps else "auto"
            logger.info(f"Navigation started on {route.id} ({len(route.steps)} steps, {mode} stepping).")

            if route.steps:
                first = route.steps[0]
                self.guidance.announce_step(first.instruction, first.step_number, len(route.steps))

    def stop_navigation(self) -> None:
        """Return to idle. Safe to call when already idle."""
        with self._lock:
            if self._state.is_navigating:
                logger.info("Navigation stopped.")
            self._reset()

    # ------------------------------------------------------------------
    # Core method: call on every sensor fix
    # ------------------------------------------------------------------

    def update_location(self, location: UserLocation, nodes: Dict[str, CampusNode]) -> None:
        """
        Feed one location sample.

        Args:
            location: Current fix; heading and timestamp are optional.
            nodes:    Campus node table, scanned for nearby events.
        """
        with self._lock:
            if not self._state.is_navigating or self._state.current_route is None:
                return

            last = self._last_location
            if (
                last is not None
                and last.timestamp is not None
                and location.timestamp is not None
                and location.timestamp <= last.timestamp
            ):
                logger.debug(f"Dropping out-of-order sample at t={location.timestamp}.")
                return

            # 1. Distance and speed since the previous fix
            distance_moved = 0.0
            if last is not None:
                distance_moved = haversine_distance(
                    last.latitude, last.longitude,
                    location.latitude, location.longitude,
                )
                self._last_speed = distance_moved / self._sample_interval(last, location)

            # 2.
            self._last_location = location

            # 3.
            self._check_direction(location)

            # 4. Walking the wrong way earns no progress
            if not self._wrong_direction:
                self._state.distance_traveled += distance_moved
                if not self._manual_steps:
                    self._check_step_completion()

            # 5.
            if self._state.is_navigating:
                self._check_nearby_events(location, nodes)

    def next_step(self) -> bool:
        """
        Complete the current step regardless of distance (UI "Next Step").

        Returns:
            False if there is no active step.
        """
        with self._lock:
            if not self._state.is_navigating or self.get_current_step() is None:
                return False
            self._complete_current_step()
            return True

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _sample_interval(self, last: UserLocation, location: UserLocation) -> float:
        if last.timestamp is not None and location.timestamp is not None:
            return location.timestamp - last.timestamp
        return self.config.nominal_sample_interval_s

    def _check_step_completion(self) -> None:
        step = self.get_current_step()
        if step is None or step.step_number in self._completed_steps:
            return
        if self._state.distance_traveled >= step.distance - self.config.step_completion_threshold_m:
            self._complete_current_step()

    def _complete_current_step(self) -> None:
        route = self._state.current_route
        step = self.get_current_step()
        if route is None or step is None:
            return

        self._completed_steps.add(step.step_number)

        if self._state.current_step_index < len(route.steps) - 1:
            self._state.current_step_index += 1
            self._state.distance_traveled = 0.0
            nxt = route.steps[self._state.current_step_index]
            logger.info(f"Step {step.step_number} complete; now step {nxt.step_number}/{len(route.steps)}.")
            self.guidance.announce_step(nxt.instruction, nxt.step_number, len(route.steps))
            return

        destination = self._state.destination
        logger.info(f"Arrived at {destination.name if destination else route.end}.")
        if destination is not None:
            self.guidance.announce_arrival(destination.name)
        self.stop_navigation()

    def _check_direction(self, location: UserLocation) -> None:
        step = self.get_current_step()
        if step is None or step.direction is None or location.heading is None:
            return

        # Heading is meaningless while standing still
        if self._last_speed < self.config.min_speed_for_direction_check:
            return

        correct = is_correct_direction(
            location.heading, step.direction.degrees, self.config.direction_tolerance_deg
        )

        if not correct and not self._wrong_direction:
            self._wrong_direction = True
            logger.info(
                f"Wrong direction: heading {location.heading:.0f}°, expected {step.direction.value}."
            )
            self.guidance.announce_wrong_direction(step.direction.display_name)
        elif correct and self._wrong_direction:
            self._wrong_direction = False
            logger.info("Direction corrected.")
            self.guidance.announce_direction_corrected()

    def _check_nearby_events(self, location: UserLocation, nodes: Dict[str, CampusNode]) -> None:
        for node_id, node in nodes.items():
            if not node.has_event or not node.event_info or node_id in self._announced_events:
                continue
            distance = haversine_distance(
                location.latitude, location.longitude,
                node.coordinates.lat, node.coordinates.lon,
            )
            if distance <= self.config.nearby_event_threshold_m:
                self._announced_events.add(node_id)
                self.guidance.announce_nearby_event(node.name, node.event_info)

    # ------------------------------------------------------------------
    # Read-only queries
    # ------------------------------------------------------------------

    @property
    def is_navigating(self) -> bool:
        return self._state.is_navigating

    @property
    def manual_steps(self) -> bool:
        return self._manual_steps

    @property
    def completed_steps(self) -> FrozenSet[int]:
        return frozenset(self._completed_steps)

    def is_step_completed(self, step_number: int) -> bool:
        return step_number in self._completed_steps

    def is_heading_wrong_direction(self) -> bool:
        return self._wrong_direction

    def get_state(self) -> NavigationState:
        return replace(self._state)

    def get_current_step(self) -> Optional[NavigationStep]:
        route = self._state.current_route
        if route is None:
            return None
        if 0 <= self._state.current_step_index < len(route.steps):
            return route.steps[self._state.current_step_index]
        return None

    def get_remaining_distance(self) -> float:
        """Metres left: remaining steps minus progress within the current one."""
        route = self._state.current_route
        if route is None:
            return 0.0
        remaining = sum(s.distance for s in route.steps[self._state.current_step_index:])
        if self._state.current_step_index < len(route.steps):
            remaining -= self._state.distance_traveled
        return max(0.0, remaining)

    def get_progress(self) -> float:
        """Percent of the route covered, in [0, 100]."""
        route = self._state.current_route
        if route is None or route.distance == 0:
            return 0.0
        traveled = route.distance - self.get_remaining_distance()
        return min(100.0, max(0.0, traveled / route.distance * 100.0))
