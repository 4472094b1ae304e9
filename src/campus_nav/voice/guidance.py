# guidance.py
# Guidance event sinks: the navigation engine announces through these.
# VoiceGuidance speaks with pyttsx3 on a background worker thread.

import logging
import queue
import threading
from dataclasses import replace
from typing import Callable, Optional

import pyttsx3

from ..router.models import VoiceSettings
from ..router.nav_config import DEFAULT_VOICE_SETTINGS

logger = logging.getLogger(__name__)

BASE_RATE_WPM = 180          # pyttsx3 rate at settings.rate == 1.0


class GuidanceSink:
    """
    One-way announcement contract used by NavigationEngine.

    Subclasses implement speak(); the announce_* methods only build text.
    Nothing here is acknowledged back to the caller.
    """

    def speak(self, text: str, **overrides) -> bool:
        raise NotImplementedError

    def announce_step(self, instruction: str, step_number: int, total_steps: int) -> None:
        self.speak(instruction)

    def announce_arrival(self, destination_name: str) -> None:
        self.speak(f"You have arrived at {destination_name}")

    def announce_nearby_event(self, location_name: str, event_info: str) -> None:
        self.speak(f"Nearby: {location_name}. {event_info}")

    def announce_wrong_direction(self, correct_direction_name: str) -> None:
        self.speak(
            "Warning! You are heading in the wrong direction. "
            f"Please turn to face {correct_direction_name}",
            pitch=1.1,
            rate=0.85,
        )

    def announce_direction_corrected(self) -> None:
        self.speak("Good! You are now heading in the correct direction. Resuming navigation.")


class ConsoleGuidance(GuidanceSink):
    """Prints announcements instead of speaking them."""

    def speak(self, text: str, **overrides) -> bool:
        text = (text or "").strip()
        if not text:
            return False
        logger.info(f"Announce: {text}")
        print(f"[Voice] {text}")
        return True


class VoiceGuidance(GuidanceSink):
    """
    Text-to-speech guidance with pyttsx3.

    Utterances are queued and spoken by a single worker thread, so speak()
    never blocks the caller. Speech is dropped while disabled or while the
    app is in the background.

    Args:
        settings:       Initial VoiceSettings (defaults if omitted).
        engine_factory: Callable returning a pyttsx3-compatible engine.
    """

    def __init__(
        self,
        settings: Optional[VoiceSettings] = None,
        engine_factory: Optional[Callable] = None,
    ) -> None:
        self._settings = replace(settings or DEFAULT_VOICE_SETTINGS)
        self._engine_factory = engine_factory or pyttsx3.init
        self._queue: queue.Queue = queue.Queue()
        self._thread: Optional[threading.Thread] = None
        self._app_active = True
        self._lock = threading.Lock()

    # ------------------------------------------------------------------
    # Settings
    # ------------------------------------------------------------------

    def get_voice_settings(self) -> VoiceSettings:
        return replace(self._settings)

    def set_voice_settings(self, **changes) -> VoiceSettings:
        """Merge partial changes (enabled, pitch, rate, language)."""
        self._settings = replace(self._settings, **changes)
        if not self._settings.enabled:
            self._drain()
        return self.get_voice_settings()

    def reset_voice_settings(self) -> None:
        self._settings = replace(DEFAULT_VOICE_SETTINGS)
        self._drain()

    def set_app_active(self, active: bool) -> None:
        """Foreground/background signal; backgrounding silences pending speech."""
        self._app_active = active
        if not active:
            self._drain()

    @property
    def is_app_active(self) -> bool:
        return self._app_active

    # ------------------------------------------------------------------
    # Speech
    # ------------------------------------------------------------------

    def speak(self, text: str, **overrides) -> bool:
        text = (text or "").strip()
        settings = replace(self._settings, **overrides)
        if not text or not settings.enabled or not self._app_active:
            return False
        self._ensure_worker()
        self._queue.put((text, settings))
        return True

    def wait_until_done(self) -> None:
        self._queue.join()

    def shutdown(self) -> None:
        """Finish queued speech and stop the worker."""
        with self._lock:
            thread = self._thread
            self._thread = None
        if thread is None:
            return
        self._queue.join()
        self._queue.put(None)
        thread.join(timeout=5)

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _ensure_worker(self) -> None:
        with self._lock:
            if self._thread is None:
                self._thread = threading.Thread(target=self._worker, daemon=True)
                self._thread.start()

    def _drain(self) -> None:
        while True:
            try:
                self._queue.get_nowait()
            except queue.Empty:
                return
            self._queue.task_done()

    def _worker(self) -> None:
        engine = None
        while True:
            item = self._queue.get()
            if item is None:
                self._queue.task_done()
                break
            text, settings = item
            try:
                if not self._app_active:
                    continue
                if engine is None:
                    engine = self._engine_factory()
                self._apply(engine, settings)
                engine.say(text)
                engine.runAndWait()
            except Exception as e:
                logger.error(f"TTS error: {e}")
            finally:
                self._queue.task_done()

    @staticmethod
    def _apply(engine, settings: VoiceSettings) -> None:
        # pyttsx3 drivers expose no pitch control; pitch stays a stored setting
        engine.setProperty("rate", int(BASE_RATE_WPM * settings.rate))
        engine.setProperty("volume", 1.0)

        wanted = settings.language.lower().replace("_", "-")
        for voice in engine.getProperty("voices") or []:
            languages = [
                lang.decode("utf-8", "ignore") if isinstance(lang, bytes) else str(lang)
                for lang in (getattr(voice, "languages", None) or [])
            ]
            if any(wanted in lang.lower().replace("_", "-") for lang in languages):
                engine.setProperty("voice", voice.id)
                break
