"""
Configuration file for drowsiness alert thresholds and settings

Values marked (env) can be overridden through environment variables or a
.env file in the working directory.
"""

import os

from dotenv import load_dotenv

load_dotenv()

# Eye Aspect Ratio (EAR) thresholds
EAR_THRESHOLD = float(os.getenv("EAR_THRESHOLD", 0.25))  # (env) EAR < threshold => eyes closed
EAR_THRESHOLD_MIN = 0.0
EAR_THRESHOLD_MAX = 0.4               # Upper end of the tuning slider
EAR_THRESHOLD_STEP = 0.01
TIRED_BAND = 0.05                     # threshold <= EAR < threshold + band => eyes tired
EAR_EPSILON = 1e-6                    # Minimum horizontal eye width before EAR is degenerate
EAR_DEGENERATE_CAP = 1.0              # Returned for degenerate geometry when no previous EAR exists

# Continuous closure duration before the alarm fires (seconds)
DROWSINESS_DURATION_SECONDS = float(os.getenv("DROWSINESS_DURATION_SECONDS", 0.5))  # (env)
DROWSINESS_DURATION_MIN = 0.0         # Exclusive lower bound
DROWSINESS_DURATION_MAX = 5.0
DROWSINESS_DURATION_STEP = 0.1

# Frame rate used to turn the closure duration into a frame count
ESTIMATED_FPS = int(os.getenv("ESTIMATED_FPS", 30))  # (env)
FPS_MEASURE_WINDOW_SECONDS = 1.0      # Measured FPS is refreshed once per window

# EAR history (diagnostics / chart)
EAR_HISTORY_LENGTH = 60
EAR_HISTORY_FILL = 0.0
EAR_CHART_MAX = 0.5                   # EAR value mapped to the top of the chart

# Alarm settings
ALARM_DURATION_MS = int(os.getenv("ALARM_DURATION_MS", 3000))  # (env) visual alert display time
RETRIGGER_WHILE_CLOSED = True         # Fire again every N closed frames instead of once per closure
TEST_SIREN_SECONDS = 2.0

# Siren waveform
SIREN_LOW_HZ = 800.0
SIREN_HIGH_HZ = 1600.0
SIREN_HALF_PERIOD_SECONDS = 1.0       # One sweep up or down per half period
SIREN_SWEEP_SECONDS = 0.5             # Exponential sweep length, then hold
SIREN_VOLUME = 0.5
SIREN_FADE_IN_MS = 20
SIREN_FADE_OUT_MS = 500
SIREN_SAMPLE_RATE = 22050

# Face Mesh eye landmark indices
# Order: outer corner, upper 1, upper 2, inner corner, lower 1, lower 2
LEFT_EYE_INDICES = [33, 160, 158, 133, 153, 144]
RIGHT_EYE_INDICES = [362, 385, 387, 263, 373, 380]

# Camera settings
CAMERA_INDEX = int(os.getenv("CAMERA_INDEX", 0))  # (env)
FRAME_WIDTH = 640
FRAME_HEIGHT = 480
TARGET_FPS = 30

# Camera backend (mainly for Windows reliability)
# Options: "AUTO", "DSHOW", "MSMF"
CAMERA_BACKEND = os.getenv("CAMERA_BACKEND", "AUTO")

# How many camera indices to probe if CAMERA_INDEX fails (0..N-1)
CAMERA_PROBE_COUNT = 4

# Visualization settings
DRAW_FACE_MESH = True  # Draw landmark points, toggled with 'm' at runtime
