"""
EAR (Eye Aspect Ratio) Detection Module
Calculates EAR for single eye and average EAR for both eyes
"""

import logging

import numpy as np

from drowsiness_alert.config import (
    EAR_EPSILON,
    EAR_DEGENERATE_CAP,
    LEFT_EYE_INDICES,
    RIGHT_EYE_INDICES,
)

logger = logging.getLogger(__name__)


def calculate_ear(eye_landmarks):
    """
    Calculate EAR for a single eye given 6 points.

    Points are (x, y) or (x, y, z); z is ignored.

    Args:
        eye_landmarks: 6 points ordered outer corner, upper 1, upper 2,
            inner corner, lower 1, lower 2

    Returns:
        EAR value (float) or None if invalid or degenerate
    """
    if len(eye_landmarks) != 6:
        return None

    pts = np.array([p[:2] for p in eye_landmarks], dtype=np.float64)
    # vertical distances
    v1 = np.linalg.norm(pts[1] - pts[5])
    v2 = np.linalg.norm(pts[2] - pts[4])
    # horizontal distance
    h = np.linalg.norm(pts[0] - pts[3])

    if not np.isfinite(h) or h < EAR_EPSILON:
        return None

    ear = (v1 + v2) / (2.0 * h)
    if not np.isfinite(ear):
        return None

    return float(ear)


def calculate_average_ear(left_eye, right_eye, fallback=None):
    """
    Calculate average EAR from both eyes.

    Args:
        left_eye: 6 points for left eye
        right_eye: 6 points for right eye
        fallback: Value returned when either eye is degenerate

    Returns:
        Average EAR value (float) or fallback if invalid
    """
    le = calculate_ear(left_eye)
    re = calculate_ear(right_eye)

    if le is None or re is None:
        return fallback

    return (le + re) / 2.0


def compute_ear(left_eye, right_eye, previous=None):
    """
    Whole-face EAR that is always finite.

    Degenerate geometry returns the previous valid EAR, or
    EAR_DEGENERATE_CAP when there is none yet.
    """
    ear = calculate_average_ear(left_eye, right_eye)
    if ear is None:
        sentinel = previous if previous is not None else EAR_DEGENERATE_CAP
        logger.debug("[EAR] Degenerate eye geometry, using %.3f", sentinel)
        return sentinel
    return ear


def extract_eyes(keypoints, left_indices=LEFT_EYE_INDICES, right_indices=RIGHT_EYE_INDICES):
    """
    Pick both eye contours out of a full face-mesh keypoint list.

    Args:
        keypoints: Sequence of (x, y) or (x, y, z) points indexed like Face Mesh
        left_indices: 6 indices of the left eye contour
        right_indices: 6 indices of the right eye contour

    Returns:
        Tuple of (left_eye, right_eye) lists, or None if keypoints is too short
    """
    needed = max(max(left_indices), max(right_indices))
    if keypoints is None or len(keypoints) <= needed:
        return None

    left_eye = [keypoints[idx] for idx in left_indices]
    right_eye = [keypoints[idx] for idx in right_indices]
    return left_eye, right_eye
