"""
Drowsiness Alert Engine

Classifies driver alertness from per-frame facial landmarks and drives a
time-bounded siren and visual alert:
- EAR detection
- EAR history
- Alertness state machine (hysteresis + debounce)
- Alarm scheduling and siren playback
- Engine facade

The camera, MediaPipe detector and OpenCV overlay modules are optional and
only needed for the demo in main.py.
"""

__version__ = "1.0.0"
