"""Shared fixtures: a manual clock, a recording siren player and face builders."""

import pytest

from drowsiness_alert.alerter import AlarmScheduler
from drowsiness_alert.config import LEFT_EYE_INDICES, RIGHT_EYE_INDICES
from drowsiness_alert.engine import DrowsinessEngine
from drowsiness_alert.engine_config import EngineConfig

MESH_POINTS = 478
EYE_WIDTH = 30.0


class FakeClock:
    def __init__(self, start=100.0):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


class FakeSirenPlayer:
    def __init__(self, available=True):
        self.available = available
        self.calls = []

    def start(self):
        self.calls.append("start")

    def fade_out(self, duration_ms):
        self.calls.append(("fade_out", duration_ms))

    def release(self):
        self.calls.append("release")

    def close(self):
        self.calls.append("close")


def make_eye(ear, x0=0.0, y0=0.0, width=EYE_WIDTH):
    """Six eye points whose aspect ratio is exactly `ear`."""
    h = ear * width / 2.0
    return [
        (x0, y0),
        (x0 + width / 3, y0 - h),
        (x0 + 2 * width / 3, y0 - h),
        (x0 + width, y0),
        (x0 + 2 * width / 3, y0 + h),
        (x0 + width / 3, y0 + h),
    ]


def make_face(ear, right_ear=None):
    """Full face-mesh keypoint list with both eyes at the given EAR."""
    points = [(0.0, 0.0, 0.0)] * MESH_POINTS
    for indices, value, x0 in ((LEFT_EYE_INDICES, ear, 100.0),
                               (RIGHT_EYE_INDICES, ear if right_ear is None else right_ear, 200.0)):
        for idx, (x, y) in zip(indices, make_eye(value, x0=x0, y0=150.0)):
            points[idx] = (x, y, 0.0)
    return points


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def player():
    return FakeSirenPlayer()


@pytest.fixture
def alarm(player, clock):
    return AlarmScheduler(player=player, clock=clock)


@pytest.fixture
def config():
    return EngineConfig(ear_threshold=0.25, drowsiness_duration_seconds=0.5, frames_per_second=30)


@pytest.fixture
def engine(config, alarm, clock):
    return DrowsinessEngine(config=config, alarm=alarm, clock=clock)
