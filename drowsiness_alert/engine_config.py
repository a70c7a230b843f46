"""
Runtime Configuration Module
Tunable engine parameters with validated setters and derived frame count
"""

import logging
import math
import numbers

from drowsiness_alert.config import (
    EAR_THRESHOLD,
    EAR_THRESHOLD_MIN,
    EAR_THRESHOLD_MAX,
    DROWSINESS_DURATION_SECONDS,
    DROWSINESS_DURATION_MIN,
    DROWSINESS_DURATION_MAX,
    ESTIMATED_FPS,
    TIRED_BAND,
)
from drowsiness_alert.errors import InvalidConfigurationError

logger = logging.getLogger(__name__)


def frames_for_duration(duration_seconds, fps):
    """
    Convert a closure duration into a whole number of frames.

    Rounds half up and never returns less than 1.
    """
    return max(1, int(math.floor(duration_seconds * fps + 0.5)))


class EngineConfig:
    """
    Engine configuration shared by reference with the state machine.

    All writes go through the setters, which validate the value and recompute
    frames_for_drowsiness. A rejected value leaves the configuration unchanged.
    """

    def __init__(
        self,
        ear_threshold=EAR_THRESHOLD,
        drowsiness_duration_seconds=DROWSINESS_DURATION_SECONDS,
        frames_per_second=ESTIMATED_FPS,
        tired_band=TIRED_BAND,
    ):
        self._ear_threshold = self._check_threshold(ear_threshold)
        self._duration = self._check_duration(drowsiness_duration_seconds)
        self._fps = self._check_fps(frames_per_second)
        self.tired_band = tired_band
        self._frames_for_drowsiness = frames_for_duration(self._duration, self._fps)

    @property
    def ear_threshold(self):
        return self._ear_threshold

    @property
    def drowsiness_duration_seconds(self):
        return self._duration

    @property
    def frames_per_second(self):
        return self._fps

    @property
    def frames_for_drowsiness(self):
        return self._frames_for_drowsiness

    def set_threshold(self, value):
        self._ear_threshold = self._check_threshold(value)
        logger.info("[CONFIG] EAR threshold set to %.2f", self._ear_threshold)

    def set_drowsiness_duration(self, seconds):
        self._duration = self._check_duration(seconds)
        self._frames_for_drowsiness = frames_for_duration(self._duration, self._fps)
        logger.info(
            "[CONFIG] Drowsiness duration set to %.1fs (%d frames)",
            self._duration,
            self._frames_for_drowsiness,
        )

    def set_frames_per_second(self, fps):
        self._fps = self._check_fps(fps)
        self._frames_for_drowsiness = frames_for_duration(self._duration, self._fps)
        logger.info(
            "[CONFIG] Frame rate set to %d fps (%d frames)",
            self._fps,
            self._frames_for_drowsiness,
        )

    @staticmethod
    def _check_threshold(value):
        value = _as_finite_float("ear_threshold", value)
        if not EAR_THRESHOLD_MIN <= value <= EAR_THRESHOLD_MAX:
            raise InvalidConfigurationError(
                "ear_threshold", value,
                f"must be within [{EAR_THRESHOLD_MIN}, {EAR_THRESHOLD_MAX}]",
            )
        return value

    @staticmethod
    def _check_duration(value):
        value = _as_finite_float("drowsiness_duration_seconds", value)
        if not DROWSINESS_DURATION_MIN < value <= DROWSINESS_DURATION_MAX:
            raise InvalidConfigurationError(
                "drowsiness_duration_seconds", value,
                f"must be within ({DROWSINESS_DURATION_MIN}, {DROWSINESS_DURATION_MAX}]",
            )
        return value

    @staticmethod
    def _check_fps(value):
        if isinstance(value, bool) or not isinstance(value, numbers.Integral):
            if isinstance(value, float) and value.is_integer():
                value = int(value)
            else:
                raise InvalidConfigurationError("frames_per_second", value, "must be an integer")
        else:
            value = int(value)
        if value < 1:
            raise InvalidConfigurationError("frames_per_second", value, "must be >= 1")
        return value

    def __repr__(self):
        return (
            f"EngineConfig(ear_threshold={self._ear_threshold}, "
            f"drowsiness_duration_seconds={self._duration}, "
            f"frames_per_second={self._fps}, "
            f"frames_for_drowsiness={self._frames_for_drowsiness})"
        )


def _as_finite_float(name, value):
    try:
        value = float(value)
    except (TypeError, ValueError):
        raise InvalidConfigurationError(name, value, "must be a number") from None
    if not math.isfinite(value):
        raise InvalidConfigurationError(name, value, "must be finite")
    return value
