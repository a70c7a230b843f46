"""
Alarm Scheduler Module
Drives the siren and the visual drowsiness alert on a cooperative timer queue

Siren phases:
    IDLE -> RAMPING_UP -> RAMPING_DOWN -> RAMPING_UP -> ... -> RELEASING -> IDLE

Timer steps live in a sched.scheduler bound to the engine clock and are run
non-blocking from the frame loop (run_pending). Every modulation step carries
the generation token it was scheduled with and does nothing once the token
is stale, so silence() and cancel_all() orphan any step still queued.

The looped siren buffer starts on the rising sweep, so RAMPING_UP and
RAMPING_DOWN name the half of the cycle currently audible, and
current_frequency() is read from the same phase bookkeeping.
Every trigger schedules its own visual-alert clear; a later trigger does not
postpone an earlier one.
"""

import logging
import sched
import time
from contextlib import contextmanager
from enum import Enum

from drowsiness_alert.config import (
    ALARM_DURATION_MS,
    SIREN_HALF_PERIOD_SECONDS,
    SIREN_FADE_OUT_MS,
    TEST_SIREN_SECONDS,
)
from drowsiness_alert.errors import AudioUnavailableError
from drowsiness_alert.siren import SirenPlayer, siren_frequency

logger = logging.getLogger(__name__)


class SirenPhase(Enum):
    IDLE = "IDLE"
    RAMPING_UP = "RAMPING_UP"
    RAMPING_DOWN = "RAMPING_DOWN"
    RELEASING = "RELEASING"


_RAMPING = (SirenPhase.RAMPING_UP, SirenPhase.RAMPING_DOWN)


class AlarmScheduler:
    """
    Manages the audible siren and the visual alert.

    - trigger(): start the siren (no-op if already sounding) and show the
      visual alert for alarm_duration_ms.
    - silence(): fade the siren out and release it (no-op unless sounding).
    - cancel_all(): drop every pending step and stop audio immediately.
    """

    def __init__(
        self,
        player=None,
        clock=time.monotonic,
        alarm_duration_ms=ALARM_DURATION_MS,
        half_period=SIREN_HALF_PERIOD_SECONDS,
        fade_out_ms=SIREN_FADE_OUT_MS,
        require_audio=False,
    ):
        """
        Initialize alarm scheduler.

        Args:
            player: Siren audio handle (SirenPlayer is created if None)
            clock: Monotonic time source in seconds
            alarm_duration_ms: How long the visual alert stays up after a trigger
            half_period: Seconds per sweep up or down
            fade_out_ms: Fade-out length before the audio handle is released
            require_audio: Raise AudioUnavailableError instead of going visual-only

        Raises:
            AudioUnavailableError: If require_audio and the audio device is missing
        """
        self.clock = clock
        self.player = player if player is not None else SirenPlayer()
        self.alarm_duration_ms = alarm_duration_ms
        self.half_period = half_period
        self.fade_out_ms = fade_out_ms

        self.audio_enabled = bool(self.player.available)
        if not self.audio_enabled:
            if require_audio:
                raise AudioUnavailableError("Audio device not available for siren")
            logger.warning("[ALARM] Audio not available - visual alerts only")

        self.phase = SirenPhase.IDLE
        self.alert_visible = False

        self._pinned_now = None
        self._timers = sched.scheduler(self._now, time.sleep)
        self._generation = 0
        self._phase_started_at = None
        self._flip_event = None
        self._release_event = None
        self._test_stop_event = None
        self._visual_events = []

    @property
    def is_active(self):
        """True while the siren is sounding (not idle, not releasing)."""
        return self.phase in _RAMPING

    @property
    def pending_steps(self):
        return len(self._timers.queue)

    def trigger(self):
        """Start the siren and show the visual alert."""
        self._show_alert()

        if not self.audio_enabled or self.is_active:
            return

        if self.phase is SirenPhase.RELEASING:
            self._abandon_release()

        self._start_siren()

    def silence(self):
        """Fade the siren out, then release the audio handle."""
        if not self.is_active:
            return

        self._generation += 1
        self._cancel(self._flip_event)
        self._cancel(self._test_stop_event)
        self._flip_event = None
        self._test_stop_event = None

        self.phase = SirenPhase.RELEASING
        self.hide_alert()
        self.player.fade_out(self.fade_out_ms)
        self._release_event = self._timers.enter(
            self.fade_out_ms / 1000.0, 0, self._release, (self._generation,)
        )
        logger.info("[ALARM] Siren fading out")

    def test_siren(self, duration=TEST_SIREN_SECONDS):
        """Sound the siren for a fixed time without showing the visual alert."""
        if not self.audio_enabled:
            logger.info("[ALARM] Test siren skipped - audio not available")
            return

        if not self.is_active:
            if self.phase is SirenPhase.RELEASING:
                self._abandon_release()
            self._start_siren()

        self._cancel(self._test_stop_event)
        self._test_stop_event = self._timers.enter(
            duration, 0, self._stop_test, (self._generation,)
        )

    def hide_alert(self):
        """Take the visual alert down now and drop every pending clear."""
        for event in self._visual_events:
            self._cancel(event)
        self._visual_events = []
        self.alert_visible = False

    def run_pending(self):
        """Run every timer step whose deadline has passed."""
        self._timers.run(blocking=False)

    @contextmanager
    def frame_time(self, now):
        """
        Use `now` as the current time for everything done inside the block.

        Lets the frame loop schedule and run steps on its own frame
        timestamps instead of reading the clock.
        """
        previous = self._pinned_now
        self._pinned_now = now
        try:
            yield
        finally:
            self._pinned_now = previous

    def cancel_all(self):
        """Synchronously cancel every pending step and stop audio immediately."""
        self._generation += 1
        for event in self._timers.queue:
            self._cancel(event)
        self._flip_event = None
        self._release_event = None
        self._test_stop_event = None
        self._visual_events = []

        if self.phase is not SirenPhase.IDLE:
            self.player.release()
            logger.info("[ALARM] Siren stopped")
        self.phase = SirenPhase.IDLE
        self.alert_visible = False
        self._phase_started_at = None

    def current_frequency(self):
        """Nominal siren frequency right now (0.0 when not sounding)."""
        if not self.is_active:
            return 0.0
        into_phase = min(self._now() - self._phase_started_at, self.half_period)
        if self.phase is SirenPhase.RAMPING_DOWN:
            into_phase += self.half_period
        return siren_frequency(into_phase, half_period=self.half_period)

    def close(self):
        """Stop everything and release the audio device."""
        self.cancel_all()
        self.player.close()
        self.audio_enabled = False

    def _now(self):
        if self._pinned_now is not None:
            return self._pinned_now
        return self.clock()

    def _start_siren(self):
        now = self._now()
        self._generation += 1
        self._phase_started_at = now
        self.phase = SirenPhase.RAMPING_UP
        self.player.start()
        self._flip_event = self._timers.enterabs(
            now + self.half_period, 0, self._flip, (self._generation,)
        )
        logger.info("[ALARM] Siren started")

    def _flip(self, token):
        if token != self._generation or not self.is_active:
            return

        if self.phase is SirenPhase.RAMPING_UP:
            self.phase = SirenPhase.RAMPING_DOWN
        else:
            self.phase = SirenPhase.RAMPING_UP

        self._phase_started_at += self.half_period
        self._flip_event = self._timers.enterabs(
            self._phase_started_at + self.half_period, 0, self._flip, (token,)
        )

    def _release(self, token):
        if token != self._generation or self.phase is not SirenPhase.RELEASING:
            return
        self.player.release()
        self.phase = SirenPhase.IDLE
        self._release_event = None
        self._phase_started_at = None
        logger.info("[ALARM] Siren released")

    def _stop_test(self, token):
        self._test_stop_event = None
        if token != self._generation:
            return
        self.silence()

    def _abandon_release(self):
        # The fading channel finishes on its own; the next session gets a fresh one.
        self._cancel(self._release_event)
        self._release_event = None
        self.phase = SirenPhase.IDLE

    def _show_alert(self):
        self.alert_visible = True
        self._visual_events.append(self._timers.enter(
            self.alarm_duration_ms / 1000.0, 1, self._clear_alert
        ))
        logger.info("[ALARM] Drowsiness detected - alert shown")

    def _clear_alert(self):
        queued = self._timers.queue
        self._visual_events = [e for e in self._visual_events if e in queued]
        self.alert_visible = False

    def _cancel(self, event):
        if event is not None and event in self._timers.queue:
            self._timers.cancel(event)
