"""
Drowsiness Engine Module
Per-frame facade tying EAR, history, state machine and alarm together

The engine never draws anything. Each call to on_frame returns an
Observation that rendering or UI code can consume.
"""

import logging
import time
from dataclasses import dataclass

from drowsiness_alert.alerter import AlarmScheduler
from drowsiness_alert.config import FPS_MEASURE_WINDOW_SECONDS
from drowsiness_alert.ear_detector import compute_ear, extract_eyes
from drowsiness_alert.ear_history import EARHistory
from drowsiness_alert.engine_config import EngineConfig
from drowsiness_alert.state_machine import AlarmEdge, AlertnessState, AlertnessStateMachine

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Observation:
    ear: float
    state: AlertnessState
    closed_duration_seconds: float
    alarm_edge: AlarmEdge
    alert_visible: bool = False
    siren_active: bool = False
    fps: float = 0.0


class DrowsinessEngine:
    """
    Drowsiness inference and alert engine.

    Call on_frame once per video frame with the detector's keypoints (or None
    when no face was found). Frames must not overlap; the engine is meant to
    be driven from a single loop.
    """

    def __init__(self, config=None, alarm=None, history=None, clock=time.monotonic, require_audio=False):
        """
        Initialize engine.

        Args:
            config: EngineConfig (defaults from config.py if None)
            alarm: AlarmScheduler (created on the same clock if None)
            history: EARHistory (default capacity if None)
            clock: Monotonic time source in seconds
            require_audio: Fail construction if the siren cannot play

        Raises:
            AudioUnavailableError: If require_audio and no audio device is available
        """
        self.clock = clock
        self.config = config if config is not None else EngineConfig()
        self.state_machine = AlertnessStateMachine(self.config)
        self.history = history if history is not None else EARHistory()
        self.alarm = alarm if alarm is not None else AlarmScheduler(clock=clock, require_audio=require_audio)

        self.audio_enabled = self.alarm.audio_enabled
        if not self.audio_enabled:
            logger.warning("[ENGINE] Running with visual alerts only")

        self._last_ear = None
        self._alarm_latched = False
        self._fps_window_start = None
        self._fps_frames = 0
        self.measured_fps = 0.0

    def on_frame(self, landmarks, now=None):
        """
        Process one frame tick.

        Args:
            landmarks: Face-mesh keypoints for one face, or None if no face
            now: Frame timestamp in clock seconds (clock() if None). Alarm
                timers are scheduled and run on this timestamp too.

        Returns:
            Observation for this tick
        """
        now = self.clock() if now is None else now
        with self.alarm.frame_time(now):
            return self._tick(landmarks, now)

    def _tick(self, landmarks, now):
        self._measure_fps(now)

        ear = self._frame_ear(landmarks)
        detected = ear is not None
        if detected:
            self.history.push(ear)

        result = self.state_machine.update(ear if detected else 0.0, detected)

        if result.edge is AlarmEdge.TRIGGER:
            logger.info("[ENGINE] Eyes closed for %d frames - alarm triggered",
                        self.config.frames_for_drowsiness)
            self.alarm.trigger()
            self._alarm_latched = True
        elif result.state in (AlertnessState.OPEN, AlertnessState.TIRED):
            self.alarm.hide_alert()
            # A NO_FACE gap between trigger and re-opening still silences.
            if result.edge is AlarmEdge.STOP or self._alarm_latched:
                self.alarm.silence()
                self._alarm_latched = False

        self.alarm.run_pending()

        return Observation(
            ear=ear if detected else 0.0,
            state=result.state,
            closed_duration_seconds=result.closed_duration_seconds,
            alarm_edge=result.edge,
            alert_visible=self.alarm.alert_visible,
            siren_active=self.alarm.is_active,
            fps=self.measured_fps,
        )

    def set_threshold(self, value):
        self.config.set_threshold(value)

    def set_drowsiness_duration(self, seconds):
        self.config.set_drowsiness_duration(seconds)

    def set_frames_per_second(self, fps):
        self.config.set_frames_per_second(fps)

    def history_snapshot(self):
        """EAR history, oldest first."""
        return self.history.snapshot()

    def test_siren(self, duration=None):
        if duration is None:
            self.alarm.test_siren()
        else:
            self.alarm.test_siren(duration)

    def stop_siren(self):
        self.alarm.silence()
        self._alarm_latched = False

    def reset(self):
        """Clear counters and history, cancel alarm timers and stop audio."""
        self.state_machine.reset()
        self.history.clear()
        self.alarm.cancel_all()
        self._last_ear = None
        self._alarm_latched = False
        self._fps_window_start = None
        self._fps_frames = 0
        self.measured_fps = 0.0
        logger.info("[ENGINE] Reset")

    def shutdown(self):
        """Stop everything and release the audio device."""
        self.alarm.close()
        self.audio_enabled = False

    def _frame_ear(self, landmarks):
        if landmarks is None:
            return None
        try:
            eyes = extract_eyes(landmarks)
            if eyes is None:
                logger.debug("[ENGINE] Landmarks too short for eye contours, treating as no face")
                return None
            ear = compute_ear(*eyes, previous=self._last_ear)
        except (TypeError, ValueError, IndexError) as e:
            logger.warning("[ENGINE] Malformed landmarks ignored: %s", e)
            return None
        self._last_ear = ear
        return ear

    def _measure_fps(self, now):
        if self._fps_window_start is None:
            self._fps_window_start = now
            return
        self._fps_frames += 1
        elapsed = now - self._fps_window_start
        if elapsed >= FPS_MEASURE_WINDOW_SECONDS:
            self.measured_fps = float(round(self._fps_frames / elapsed))
            self._fps_frames = 0
            self._fps_window_start = now
