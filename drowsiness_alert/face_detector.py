"""
Face Detection Module
MediaPipe Face Mesh detection and keypoint extraction
"""

import cv2
import numpy as np
import mediapipe as mp

from drowsiness_alert.config import LEFT_EYE_INDICES, RIGHT_EYE_INDICES
from drowsiness_alert.errors import DetectorUnavailableError

mp_face_mesh = mp.solutions.face_mesh


class FaceDetector:
    """
    MediaPipe Face Mesh detector returning pixel-space keypoints for one face.
    """

    def __init__(self, min_detection_confidence=0.5, min_tracking_confidence=0.5):
        """
        Initialize face detector.

        Raises:
            DetectorUnavailableError: If the Face Mesh graph cannot be created
        """
        try:
            self.face_mesh = mp_face_mesh.FaceMesh(
                static_image_mode=False,
                max_num_faces=1,
                refine_landmarks=True,
                min_detection_confidence=min_detection_confidence,
                min_tracking_confidence=min_tracking_confidence,
            )
        except (RuntimeError, ValueError) as e:
            raise DetectorUnavailableError(f"Could not create Face Mesh detector: {e}") from e

    def detect(self, frame):
        """
        Detect face keypoints from frame.

        Args:
            frame: BGR image frame

        Returns:
            List of (x, y, z) keypoints in pixel units, or None if no face detected
        """
        rgb = cv2.cvtColor(frame, cv2.COLOR_BGR2RGB)
        results = self.face_mesh.process(rgb)

        if not results.multi_face_landmarks:
            return None

        h, w = frame.shape[:2]
        face = results.multi_face_landmarks[0]
        return [(lm.x * w, lm.y * h, lm.z * w) for lm in face.landmark]

    def close(self):
        self.face_mesh.close()


def draw_keypoints(frame, keypoints, color=(238, 97, 67), radius=1):
    """
    Draw every keypoint as a small dot.

    Args:
        frame: BGR image frame
        keypoints: List of (x, y[, z]) points
        color: BGR color tuple
        radius: Dot radius in pixels
    """
    for point in keypoints:
        cv2.circle(frame, (int(point[0]), int(point[1])), radius, color, -1)


def draw_eye_contours(frame, keypoints, color=(0, 255, 255), thickness=2):
    """
    Draw both eye contours on frame.

    Args:
        frame: BGR image frame
        keypoints: Full face keypoint list
        color: BGR color tuple
        thickness: Line thickness
    """
    for indices in (LEFT_EYE_INDICES, RIGHT_EYE_INDICES):
        eye = [keypoints[idx][:2] for idx in indices]
        pts = np.array(eye, dtype=np.int32).reshape((-1, 1, 2))
        cv2.polylines(frame, [pts], isClosed=True, color=color, thickness=thickness)
