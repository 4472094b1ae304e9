# nav_config.py
# All tuneable constants in one place.
# Pass a NavConfig instance to every module that needs settings.

import os
from dataclasses import dataclass

from .models import VoiceSettings


# ---------------------------------------------------------------------------
# Fixed constants
# ---------------------------------------------------------------------------

DEFAULT_VOICE_SETTINGS = VoiceSettings(enabled=True, pitch=1.0, rate=0.9, language="en-US")

QR_CODE_PREFIX: str = "CAMPUS_"

AVERAGE_WALKING_SPEED: float = 80.0  # metres per minute

LOCATION_UPDATE_INTERVAL_S: float = 2.0


# ---------------------------------------------------------------------------
# Main config
# ---------------------------------------------------------------------------

@dataclass
class NavConfig:
    # Routing
    walking_speed_m_per_min: float = AVERAGE_WALKING_SPEED

    # Progress tracking
    step_completion_threshold_m: float = 5.0        # GPS noise forgiveness per step
    direction_tolerance_deg: float = 45.0           # +/- from expected heading
    min_speed_for_direction_check: float = 0.3      # m/s, below this the user is stationary
    nominal_sample_interval_s: float = LOCATION_UPDATE_INTERVAL_S
    nearby_event_threshold_m: float = 20.0

    # QR
    qr_code_prefix: str = QR_CODE_PREFIX

    # AR assist
    ar_step_accel_threshold_g: float = 0.18
    ar_step_min_duration_s: float = 3.0
    ar_accel_smoothing: float = 0.2                 # EMA factor for the motion signal
    ar_heading_deadzone_deg: float = 1.5
    ar_heading_precision_deg: float = 6.0
    ar_heading_min_alpha: float = 0.1
    ar_heading_max_alpha: float = 0.6
    ar_wrong_direction_deg: float = 45.0
    ar_wrong_direction_min_s: float = 3.0

    # Logging
    log_dir: str = "."                              # directory for saved JSON files
    route_filename: str = "active_route.json"
    session_filename: str = "nav_session.jsonl"
    voice_settings_filename: str = "voice_settings.json"

    @property
    def route_filepath(self) -> str:
        return os.path.join(self.log_dir, self.route_filename)

    @property
    def session_filepath(self) -> str:
        return os.path.join(self.log_dir, self.session_filename)

    @property
    def voice_settings_filepath(self) -> str:
        return os.path.join(self.log_dir, self.voice_settings_filename)
