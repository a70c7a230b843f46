"""
Alertness State Machine Module
Turns the per-frame EAR into discrete alertness states and alarm edges
"""

from collections import namedtuple
from enum import Enum

from drowsiness_alert.config import RETRIGGER_WHILE_CLOSED


class AlertnessState(Enum):
    NO_FACE = "NO_FACE"
    OPEN = "OPEN"
    TIRED = "TIRED"
    CLOSED = "CLOSED"


class AlarmEdge(Enum):
    NONE = "NONE"
    TRIGGER = "TRIGGER"
    STOP = "STOP"


TickResult = namedtuple("TickResult", ["state", "edge", "closed_duration_seconds"])


def classify_ear(ear, detected, threshold, tired_band):
    """
    Classify a single frame without any history.

    Args:
        ear: Current Eye Aspect Ratio value
        detected: True if a face was found this frame
        threshold: EAR threshold below which eyes count as closed
        tired_band: Width of the band above threshold labelled TIRED

    Returns:
        AlertnessState
    """
    if not detected:
        return AlertnessState.NO_FACE
    if ear < threshold:
        return AlertnessState.CLOSED
    if ear < threshold + tired_band:
        return AlertnessState.TIRED
    return AlertnessState.OPEN


class AlertnessStateMachine:
    """
    Hysteretic, debounced alertness classifier.

    - EAR in [threshold, threshold + tired_band) is labelled TIRED rather than
      flipping between OPEN and CLOSED.
    - The alarm fires only after frames_for_drowsiness consecutive closed
      frames, so a blink never triggers it. The counter resets after each
      trigger, so a sustained closure fires again every N frames.
    - Re-opening the eyes after a CLOSED frame emits a STOP edge.

    The configuration is read on every tick; changing it never resets the
    closed-frame counter.
    """

    def __init__(self, config, retrigger=RETRIGGER_WHILE_CLOSED):
        """
        Initialize state machine.

        Args:
            config: EngineConfig shared with the engine facade
            retrigger: If False, fire once per closure and hold until eyes open
        """
        self.config = config
        self.retrigger = retrigger
        self.state = AlertnessState.OPEN
        self.closed_frame_count = 0
        self._fired_this_closure = False

    def update(self, ear, detected):
        """
        Advance one frame tick.

        Args:
            ear: Current Eye Aspect Ratio value (ignored if not detected)
            detected: True if a face was found this frame

        Returns:
            TickResult(state, edge, closed_duration_seconds)
        """
        previous = self.state
        threshold = self.config.ear_threshold
        edge = AlarmEdge.NONE
        closed_duration = 0.0

        self.state = classify_ear(ear, detected, threshold, self.config.tired_band)

        if self.state is AlertnessState.CLOSED:
            self.closed_frame_count += 1
            closed_duration = self.closed_frame_count / self.config.frames_per_second

            if self.closed_frame_count >= self.config.frames_for_drowsiness:
                if self.retrigger:
                    edge = AlarmEdge.TRIGGER
                    self.closed_frame_count = 0
                elif not self._fired_this_closure:
                    edge = AlarmEdge.TRIGGER
                    self._fired_this_closure = True
        else:
            self.closed_frame_count = 0
            self._fired_this_closure = False
            if self.state is not AlertnessState.NO_FACE and previous is AlertnessState.CLOSED:
                edge = AlarmEdge.STOP

        return TickResult(self.state, edge, closed_duration)

    def reset(self):
        """Return to the initial state (eyes open, no closed frames)."""
        self.state = AlertnessState.OPEN
        self.closed_frame_count = 0
        self._fired_this_closure = False
