"""
Visualization Module
Draws the engine observation, EAR history chart and alert banner on the frame
"""

import cv2
import numpy as np

from drowsiness_alert.config import EAR_CHART_MAX, EAR_THRESHOLD_MAX
from drowsiness_alert.state_machine import AlertnessState

# Badge text and BGR color per alertness state
BADGES = {
    AlertnessState.OPEN: ("Eyes Open", (0, 200, 0)),
    AlertnessState.TIRED: ("Eyes Tired", (0, 200, 255)),
    AlertnessState.CLOSED: ("Eyes Closed", (0, 0, 255)),
    AlertnessState.NO_FACE: ("No Face", (160, 160, 160)),
}


def status_text(observation, running=True):
    """Status line shown at the top of the window."""
    if not running:
        return "Detection stopped."
    if observation.state is AlertnessState.NO_FACE:
        return "No face detected"
    if observation.alert_visible:
        return "Drowsiness detected!"
    return "Detection running..."


def draw_overlay(frame, observation, threshold, running=True, audio_enabled=True):
    """
    Draw all metrics and state information on the frame.

    Args:
        frame: BGR image frame
        observation: Observation returned by DrowsinessEngine.on_frame
        threshold: Current EAR threshold
        running: False while detection is stopped
        audio_enabled: False if the siren cannot play
    """
    text, color = BADGES[observation.state]

    cv2.putText(frame, status_text(observation, running), (10, 30),
                cv2.FONT_HERSHEY_SIMPLEX, 0.7, (255, 255, 255), 2)
    cv2.putText(frame, f"{observation.fps:.0f} FPS", (frame.shape[1] - 100, 30),
                cv2.FONT_HERSHEY_SIMPLEX, 0.6, (255, 255, 255), 1)

    cv2.putText(frame, f"EAR: {observation.ear:.2f}", (10, 60),
                cv2.FONT_HERSHEY_SIMPLEX, 0.6, (255, 255, 255), 1)
    cv2.putText(frame, f"Closed: {observation.closed_duration_seconds:.2f}s", (10, 85),
                cv2.FONT_HERSHEY_SIMPLEX, 0.6, (255, 255, 255), 1)
    cv2.putText(frame, f"Threshold: {threshold:.2f}", (10, 110),
                cv2.FONT_HERSHEY_SIMPLEX, 0.6, (255, 255, 255), 1)

    # Badge
    text_size = cv2.getTextSize(text, cv2.FONT_HERSHEY_SIMPLEX, 0.6, 2)[0]
    cv2.rectangle(frame, (10, 122), (20 + text_size[0], 130 + text_size[1] + 6), color, -1)
    cv2.putText(frame, text, (15, 128 + text_size[1]),
                cv2.FONT_HERSHEY_SIMPLEX, 0.6, (255, 255, 255), 2)

    if not audio_enabled:
        cv2.putText(frame, "Audio not supported - visual alerts only", (10, frame.shape[0] - 110),
                    cv2.FONT_HERSHEY_SIMPLEX, 0.5, (0, 165, 255), 1)

    _draw_threshold_indicator(frame, observation.ear, threshold)

    if observation.alert_visible:
        _draw_alert_banner(frame)


def draw_ear_chart(frame, history, threshold, origin=(10, None), size=(200, 80)):
    """
    Draw the EAR history as a line chart with the threshold as a horizontal line.

    Args:
        frame: BGR image frame
        history: EAR values, oldest first
        threshold: Current EAR threshold
        origin: Top-left corner; a None y places the chart above the bottom edge
        size: (width, height) in pixels
    """
    width, height = size
    x0, y0 = origin
    if y0 is None:
        y0 = frame.shape[0] - height - 10

    cv2.rectangle(frame, (x0, y0), (x0 + width, y0 + height), (40, 40, 40), -1)

    def to_y(value):
        normalized = min(max(value, 0.0), EAR_CHART_MAX) / EAR_CHART_MAX
        return int(y0 + height * (1.0 - normalized))

    ty = to_y(threshold)
    cv2.line(frame, (x0, ty), (x0 + width, ty), (133, 37, 247), 1)

    if len(history) < 2:
        return
    step = width / (len(history) - 1)
    pts = np.array(
        [(int(x0 + i * step), to_y(v)) for i, v in enumerate(history)],
        dtype=np.int32,
    ).reshape((-1, 1, 2))
    cv2.polylines(frame, [pts], isClosed=False, color=(238, 97, 67), thickness=2)


def _draw_threshold_indicator(frame, ear, threshold, width=200):
    # Slider-style bar: 0 .. EAR_THRESHOLD_MAX, with marker at the threshold
    x0, y = 10, 170
    cv2.line(frame, (x0, y), (x0 + width, y), (200, 200, 200), 2)
    tx = x0 + int(width * min(threshold / EAR_THRESHOLD_MAX, 1.0))
    cv2.line(frame, (tx, y - 8), (tx, y + 8), (133, 37, 247), 2)
    ex = x0 + int(width * min(max(ear, 0.0) / EAR_THRESHOLD_MAX, 1.0))
    cv2.circle(frame, (ex, y), 5, (255, 255, 255), -1)


def _draw_alert_banner(frame):
    alert_text = "DROWSINESS ALERT!"
    text_size = cv2.getTextSize(alert_text, cv2.FONT_HERSHEY_SIMPLEX, 1.2, 3)[0]
    x = (frame.shape[1] - text_size[0]) // 2
    y = frame.shape[0] // 2
    cv2.rectangle(frame, (x - 15, y - text_size[1] - 15), (x + text_size[0] + 15, y + 15), (0, 0, 0), -1)
    cv2.putText(frame, alert_text, (x, y), cv2.FONT_HERSHEY_SIMPLEX, 1.2, (0, 0, 255), 3)
