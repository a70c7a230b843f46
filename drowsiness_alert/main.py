"""
Main Entry Point for the Drowsiness Alert Engine demo

Wires the camera, the MediaPipe landmark detector and the OpenCV overlay
around DrowsinessEngine.

Keys:
    space  start / stop detection
    s      test siren (2 s)
    x      stop siren
    m      toggle face mesh
    + / -  raise / lower EAR threshold
    ] / [  raise / lower drowsiness duration
    q      quit

Run with: drowsiness-alert   (or python -m drowsiness_alert.main)
"""

import logging

import cv2

from drowsiness_alert.camera_utils import FrameSource
from drowsiness_alert.config import (
    DRAW_FACE_MESH,
    EAR_THRESHOLD_STEP,
    DROWSINESS_DURATION_STEP,
)
from drowsiness_alert.engine import DrowsinessEngine
from drowsiness_alert.errors import InvalidConfigurationError
from drowsiness_alert.face_detector import FaceDetector, draw_keypoints
from drowsiness_alert.state_machine import AlertnessState
from drowsiness_alert.visualizer import draw_ear_chart, draw_overlay

WINDOW_NAME = "Drowsiness Alert"


def _nudge(setter, current, step):
    try:
        setter(round(current + step, 2))
    except InvalidConfigurationError as e:
        print(f"Ignored: {e}")


def main():
    """Main detection loop."""
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    print("Starting Drowsiness Alert Engine...")
    print("=" * 70)
    print("Keys: [space] start/stop  [s] test siren  [x] stop siren  [m] mesh")
    print("      [+/-] threshold  []/[] duration  [q] quit")
    print("=" * 70)

    source = FrameSource()
    detector = FaceDetector()
    engine = DrowsinessEngine()
    show_mesh = DRAW_FACE_MESH
    running = True

    print(f"Config: {engine.config}")
    if not engine.audio_enabled:
        print("Audio not supported - visual alerts only")

    frame_count = 0
    try:
        while True:
            frame = source.read()
            if frame is None:
                continue

            if running:
                keypoints = detector.detect(frame)
                observation = engine.on_frame(keypoints)

                if keypoints is not None and show_mesh:
                    draw_keypoints(frame, keypoints)
            else:
                engine.alarm.run_pending()
                observation = None

            if observation is not None:
                draw_overlay(frame, observation, engine.config.ear_threshold,
                             running=running, audio_enabled=engine.audio_enabled)
                draw_ear_chart(frame, engine.history_snapshot(), engine.config.ear_threshold)

                frame_count += 1
                if frame_count % 30 == 0:
                    if observation.state is AlertnessState.NO_FACE:
                        print(f"FPS: {observation.fps:.0f} | No face detected")
                    else:
                        print(
                            f"FPS: {observation.fps:.0f} | State: {observation.state.value} | "
                            f"EAR: {observation.ear:.3f} | Closed: {observation.closed_duration_seconds:.2f}s | "
                            f"Siren: {'ON' if observation.siren_active else 'off'}"
                        )
            else:
                cv2.putText(frame, "Detection stopped.", (10, 30),
                            cv2.FONT_HERSHEY_SIMPLEX, 0.7, (255, 255, 255), 2)

            cv2.imshow(WINDOW_NAME, frame)

            key = cv2.waitKey(1) & 0xFF
            if key == ord('q'):
                break
            elif key == ord(' '):
                running = not running
                if not running:
                    engine.reset()
                print("Detection running..." if running else "Detection stopped.")
            elif key == ord('s'):
                engine.test_siren()
            elif key == ord('x'):
                engine.stop_siren()
            elif key == ord('m'):
                show_mesh = not show_mesh
            elif key in (ord('+'), ord('=')):
                _nudge(engine.set_threshold, engine.config.ear_threshold, EAR_THRESHOLD_STEP)
            elif key == ord('-'):
                _nudge(engine.set_threshold, engine.config.ear_threshold, -EAR_THRESHOLD_STEP)
            elif key == ord(']'):
                _nudge(engine.set_drowsiness_duration, engine.config.drowsiness_duration_seconds,
                       DROWSINESS_DURATION_STEP)
            elif key == ord('['):
                _nudge(engine.set_drowsiness_duration, engine.config.drowsiness_duration_seconds,
                       -DROWSINESS_DURATION_STEP)

    finally:
        engine.shutdown()
        detector.close()
        source.release()
        cv2.destroyAllWindows()
        print("Shutdown complete.")


if __name__ == "__main__":
    main()
