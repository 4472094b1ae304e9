# voice_settings.py
# Load and save VoiceSettings as JSON. Loading never raises.

import json
import logging
from dataclasses import replace

from ..router.models import VoiceSettings
from ..router.nav_config import DEFAULT_VOICE_SETTINGS

logger = logging.getLogger(__name__)


def save_voice_settings(settings: VoiceSettings, path: str) -> bool:
    try:
        with open(path, "w", encoding="utf-8") as f:
            json.dump(settings.to_dict(), f, indent=2)
        return True
    except OSError as e:
        logger.error(f"Failed to save voice settings to {path}: {e}")
        return False


def load_voice_settings(path: str) -> VoiceSettings:
    """Stored settings, or the defaults if the file is missing or unreadable."""
    try:
        with open(path, "r", encoding="utf-8") as f:
            return VoiceSettings.from_dict(json.load(f))
    except FileNotFoundError:
        return replace(DEFAULT_VOICE_SETTINGS)
    except (OSError, KeyError, TypeError, ValueError) as e:
        logger.error(f"Failed to load voice settings from {path}: {e}")
        return replace(DEFAULT_VOICE_SETTINGS)
