"""
Camera Utilities Module
Camera initialization and frame reading with glitch tolerance
"""

import logging
import time

import cv2

from drowsiness_alert.config import (
    CAMERA_INDEX,
    CAMERA_BACKEND,
    CAMERA_PROBE_COUNT,
    FRAME_WIDTH,
    FRAME_HEIGHT,
    TARGET_FPS,
)

logger = logging.getLogger(__name__)


def _backend_candidates(backend=CAMERA_BACKEND):
    """
    Get list of camera backends to try.

    Returns:
        List of backend constants, None meaning the OpenCV default
    """
    backend = str(backend).upper()
    if backend == "DSHOW" and hasattr(cv2, "CAP_DSHOW"):
        return [cv2.CAP_DSHOW]
    if backend == "MSMF" and hasattr(cv2, "CAP_MSMF"):
        return [cv2.CAP_MSMF]

    candidates = [getattr(cv2, name) for name in ("CAP_DSHOW", "CAP_MSMF") if hasattr(cv2, name)]
    candidates.append(None)
    return candidates


def open_camera(index=CAMERA_INDEX, width=FRAME_WIDTH, height=FRAME_HEIGHT):
    """
    Open a capture device that actually delivers frames.

    Tries the configured index first, then the other probe indices, on every
    candidate backend.

    Returns:
        cv2.VideoCapture object

    Raises:
        RuntimeError: If no camera can be opened
    """
    indices = [index] + [i for i in range(CAMERA_PROBE_COUNT) if i != index]

    last_error = None
    for backend in _backend_candidates():
        for idx in indices:
            try:
                cap = cv2.VideoCapture(idx, backend) if backend is not None else cv2.VideoCapture(idx)
                if not cap.isOpened():
                    cap.release()
                    continue

                cap.set(cv2.CAP_PROP_FRAME_WIDTH, width)
                cap.set(cv2.CAP_PROP_FRAME_HEIGHT, height)
                cap.set(cv2.CAP_PROP_FPS, TARGET_FPS)

                for _ in range(10):
                    ret, _frame = cap.read()
                    if ret:
                        logger.info("Camera opened: index=%d, backend=%s",
                                    idx, "DEFAULT" if backend is None else backend)
                        return cap
                    time.sleep(0.05)

                cap.release()
            except cv2.error as e:
                last_error = e

    msg = (
        f"Could not read frames from any camera "
        f"(indices {indices}, backends {['DEFAULT' if b is None else b for b in _backend_candidates()]}). "
        f"Close other apps using the camera or set CAMERA_INDEX / CAMERA_BACKEND."
    )
    if last_error:
        msg += f" Last error: {last_error}"
    raise RuntimeError(msg)


class FrameSource:
    """
    Wraps a capture device and rides out short read failures.

    A handful of failed reads are retried silently, a longer run is logged,
    and a stuck camera is re-opened.
    """

    def __init__(self, silent_retries=5, warn_retries=20):
        self.cap = open_camera()
        self.silent_retries = silent_retries
        self.warn_retries = warn_retries
        self.consecutive_failures = 0
        self._last_warning = 0.0

    def read(self):
        """
        Read the next frame.

        Returns:
            BGR frame, or None if this read failed and the caller should retry

        Raises:
            RuntimeError: If the camera is stuck and cannot be re-opened
        """
        ret, frame = self.cap.read()
        if ret and frame is not None and frame.size > 0:
            self.consecutive_failures = 0
            return frame

        self.consecutive_failures += 1
        if self.consecutive_failures <= self.silent_retries:
            time.sleep(0.01)
            return None

        if self.consecutive_failures <= self.warn_retries:
            now = time.time()
            if now - self._last_warning > 5.0:
                logger.warning("Camera glitch detected (%d failures), retrying...", self.consecutive_failures)
                self._last_warning = now
            time.sleep(0.05)
            return None

        logger.error("Camera appears stuck, attempting to re-open...")
        self.cap.release()
        time.sleep(0.5)
        self.cap = open_camera()
        self.consecutive_failures = 0
        logger.info("Camera re-opened, resuming")
        return None

    def release(self):
        self.cap.release()
