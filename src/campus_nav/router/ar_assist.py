# ar_assist.py
# AR-guided walking: manual step advances confirmed by accelerometer motion,
# plus a smoothed compass heading for rotating the on-screen arrow.
# Nothing here feeds NavigationEngine's direction checks.

import logging
from typing import Callable, Optional

import numpy as np

from .geo_utils import angle_difference, normalize_angle, signed_angle_difference
from .models import CampusNode, NavigationStep, Route
from .nav_config import NavConfig
from .navigation_engine import NavigationEngine

logger = logging.getLogger(__name__)

GRAVITY_G = 1.0


# ---------------------------------------------------------------------------
# Motion detection
# ---------------------------------------------------------------------------

class StepMotionDetector:
    """
    Detects sustained walking from raw accelerometer samples (G units).

    The motion signal is |a| minus gravity, exponentially smoothed. Once the
    smoothed signal has stayed above the threshold for the minimum duration,
    feed() returns True a single time and then stays quiet until reset().
    """

    def __init__(self, config: Optional[NavConfig] = None) -> None:
        self.config = config or NavConfig()
        self.reset()

    def reset(self) -> None:
        self._smoothed: float = 0.0
        self._moving_since: Optional[float] = None
        self._triggered: bool = False

    @property
    def signal(self) -> float:
        return self._smoothed

    def feed(self, x: float, y: float, z: float, timestamp: float) -> bool:
        """
        Args:
            x, y, z:   Acceleration in G, gravity included.
            timestamp: Sample time in seconds.

        Returns:
            True exactly once per sustained movement.
        """
        magnitude = float(np.linalg.norm(np.array([x, y, z], dtype=float)))
        motion = abs(magnitude - GRAVITY_G)
        k = self.config.ar_accel_smoothing
        self._smoothed = k * motion + (1.0 - k) * self._smoothed

        if self._triggered:
            return False

        if self._smoothed < self.config.ar_step_accel_threshold_g:
            self._moving_since = None
            return False

        if self._moving_since is None:
            self._moving_since = timestamp
            return False

        if timestamp - self._moving_since >= self.config.ar_step_min_duration_s:
            self._triggered = True
            return True
        return False


# ---------------------------------------------------------------------------
# Heading smoothing
# ---------------------------------------------------------------------------

class HeadingSmoother:
    """
    Exponentially smoothed compass heading for display.

    Responsiveness scales with the size of the jump: small wobble is damped
    hard, a real turn is followed quickly. The first heading after reset()
    becomes the anchor.
    """

    def __init__(self, config: Optional[NavConfig] = None) -> None:
        self.config = config or NavConfig()
        self.reset()

    def reset(self) -> None:
        self._heading: Optional[float] = None
        self._anchor: Optional[float] = None

    def update(self, raw_heading: float) -> float:
        raw_heading = normalize_angle(raw_heading)
        if self._heading is None:
            self._heading = raw_heading
            self._anchor = raw_heading
            return self._heading

        delta = signed_angle_difference(self._heading, raw_heading)
        if abs(delta) < self.config.ar_heading_deadzone_deg:
            return self._heading

        lo, hi = self.config.ar_heading_min_alpha, self.config.ar_heading_max_alpha
        alpha = float(np.clip(lo + (abs(delta) / 180.0) * (hi - lo), lo, hi))
        self._heading = normalize_angle(self._heading + alpha * delta)
        return self._heading

    @property
    def heading(self) -> Optional[float]:
        return self._heading

    @property
    def anchor(self) -> Optional[float]:
        return self._anchor

    @property
    def display_heading(self) -> Optional[float]:
        """Smoothed heading rounded to the display precision."""
        if self._heading is None:
            return None
        step = self.config.ar_heading_precision_deg
        return normalize_angle(round(self._heading / step) * step)

    @property
    def relative_heading(self) -> Optional[float]:
        """Signed offset from the anchor heading, in (-180, 180]."""
        if self._heading is None or self._anchor is None:
            return None
        return signed_angle_difference(self._anchor, self._heading)


# ---------------------------------------------------------------------------
# AR guide
# ---------------------------------------------------------------------------

class ARGuide:
    """
    Manual, motion-confirmed stepping on top of a NavigationEngine.

    Usage:
        guide = ARGuide(engine, config, on_confirm_prompt=show_prompt)
        guide.start(route, start_node, destination_node)

        # Sensor callbacks:
        guide.on_accelerometer(x, y, z, t)
        guide.on_heading(heading, t)

        # User taps "Yes, next step":
        guide.confirm_step()

    Args:
        engine:            Engine that owns the session.
        config:            NavConfig instance.
        on_confirm_prompt: Called with the current step when sustained motion
                           suggests the user finished it.
    """

    def __init__(
        self,
        engine: NavigationEngine,
        config: Optional[NavConfig] = None,
        on_confirm_prompt: Optional[Callable[[NavigationStep], None]] = None,
    ) -> None:
        self.engine = engine
        self.config = config or engine.config
        self.on_confirm_prompt = on_confirm_prompt
        self.motion = StepMotionDetector(self.config)
        self.smoother = HeadingSmoother(self.config)
        self._prompted_step: Optional[int] = None
        self._off_heading_since: Optional[float] = None
        self._off_heading = False

    def start(self, route: Route, start_location: CampusNode, destination: CampusNode) -> None:
        self.engine.start_navigation(route, start_location, destination, manual_steps=True)
        self._reset_sensors()

    def stop(self) -> None:
        self.engine.stop_navigation()
        self._reset_sensors()

    def _reset_sensors(self) -> None:
        self.motion.reset()
        self.smoother.reset()
        self._prompted_step = None
        self._off_heading_since = None
        self._off_heading = False

    # ------------------------------------------------------------------
    # Step confirmation
    # ------------------------------------------------------------------

    @property
    def awaiting_confirmation(self) -> bool:
        return self._prompted_step is not None and not self._prompt_is_stale()

    @property
    def prompted_step(self) -> Optional[int]:
        """Step number the open prompt was raised for, if any."""
        return self._prompted_step

    def _prompt_is_stale(self) -> bool:
        step = self.engine.get_current_step()
        return step is None or step.step_number != self._prompted_step

    def _clear_prompt(self) -> None:
        self._prompted_step = None
        self.motion.reset()

    def on_accelerometer(self, x: float, y: float, z: float, timestamp: float) -> bool:
        """
        Feed one accelerometer sample.

        A prompt left over from a step that was advanced some other way is
        dropped before the sample is used.

        Returns:
            True if this sample raised the confirm-step prompt.
        """
        if not self.engine.is_navigating:
            return False
        if self._prompted_step is not None:
            if not self._prompt_is_stale():
                return False
            logger.debug(f"Dropping prompt for step {self._prompted_step}; the route moved on.")
            self._clear_prompt()
        if not self.motion.feed(x, y, z, timestamp):
            return False

        step = self.engine.get_current_step()
        if step is None:
            return False
        self._prompted_step = step.step_number
        logger.debug(f"Sustained motion on step {step.step_number}; asking for confirmation.")
        if self.on_confirm_prompt:
            self.on_confirm_prompt(step)
        return True

    def confirm_step(self) -> bool:
        """
        User confirmed the step: advance the engine.

        Returns:
            False if nothing advanced, including a prompt raised for a step
            that is no longer current.
        """
        if self._prompted_step is not None and self._prompt_is_stale():
            logger.info(f"Ignoring confirmation for step {self._prompted_step}; it is no longer current.")
            self._clear_prompt()
            return False
        return self.skip_step()

    def skip_step(self) -> bool:
        """Advance the engine without a prompt (UI "Next Step")."""
        self._clear_prompt()
        self._off_heading_since = None
        self._off_heading = False
        return self.engine.next_step()

    def dismiss_prompt(self) -> None:
        """User declined: listen for motion again."""
        self._clear_prompt()

    # ------------------------------------------------------------------
    # Heading display
    # ------------------------------------------------------------------

    def on_heading(self, raw_heading: float, timestamp: float) -> float:
        """Feed one compass sample; returns the smoothed heading."""
        heading = self.smoother.update(raw_heading)
        step = self.engine.get_current_step()
        if step is None:
            self._off_heading_since = None
            self._off_heading = False
            return heading

        if angle_difference(heading, step.direction.degrees) > self.config.ar_wrong_direction_deg:
            if self._off_heading_since is None:
                self._off_heading_since = timestamp
            self._off_heading = timestamp - self._off_heading_since >= self.config.ar_wrong_direction_min_s
        else:
            self._off_heading_since = None
            self._off_heading = False
        return heading

    @property
    def is_off_heading(self) -> bool:
        """Display-only warning: facing away from the step for a while."""
        return self._off_heading

    def arrow_rotation(self) -> Optional[float]:
        """
        Degrees to rotate the on-screen arrow, clockwise from straight ahead.

        Without a compass fix the arrow shows the step's absolute direction.
        """
        step = self.engine.get_current_step()
        if step is None:
            return None
        heading = self.smoother.display_heading
        if heading is None:
            return step.direction.degrees
        return normalize_angle(step.direction.degrees - heading)
