"""
Exceptions raised by the drowsiness alert engine.

Per-frame problems (degenerate eye geometry, missing detections) are never
raised; they are absorbed and reflected in the observation. Only
construction-time resource failures and rejected configuration reach the
caller.
"""


class DrowsinessAlertError(Exception):
    """Base class for all engine errors."""


class InvalidConfigurationError(DrowsinessAlertError, ValueError):
    """A tunable parameter was outside its valid range."""

    def __init__(self, name, value, reason):
        self.name = name
        self.value = value
        super().__init__(f"Invalid {name}={value!r}: {reason}")


class AudioUnavailableError(DrowsinessAlertError, RuntimeError):
    """The platform audio device could not be opened."""


class DetectorUnavailableError(DrowsinessAlertError, RuntimeError):
    """The facial landmark detector could not be created."""
