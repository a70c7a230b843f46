import math

import pytest

from drowsiness_alert.config import EAR_DEGENERATE_CAP, LEFT_EYE_INDICES, RIGHT_EYE_INDICES
from drowsiness_alert.ear_detector import (
    calculate_average_ear,
    calculate_ear,
    compute_ear,
    extract_eyes,
)

from conftest import make_eye, make_face


def test_single_eye_ratio():
    assert calculate_ear(make_eye(0.3)) == pytest.approx(0.3)


def test_average_of_both_eyes():
    assert calculate_average_ear(make_eye(0.2), make_eye(0.3)) == pytest.approx(0.25)


@pytest.mark.parametrize("k", [0.01, 0.5, 3.0, 250.0])
def test_scale_invariance(k):
    left, right = make_eye(0.22, 10, 20), make_eye(0.31, 60, 25)
    scaled_left = [(x * k, y * k) for x, y in left]
    scaled_right = [(x * k, y * k) for x, y in right]
    assert compute_ear(scaled_left, scaled_right) == pytest.approx(compute_ear(left, right))


def test_reflection_symmetry():
    left, right = make_eye(0.18, 5, 7), make_eye(0.27, 50, 9)
    mirrored_left = [(-x, y) for x, y in left]
    mirrored_right = [(-x, y) for x, y in right]
    assert compute_ear(mirrored_left, mirrored_right) == pytest.approx(compute_ear(left, right))
    assert compute_ear(right, left) == pytest.approx(compute_ear(left, right))


def test_z_coordinate_ignored():
    flat = make_eye(0.25)
    deep = [(x, y, 40.0 * i) for i, (x, y) in enumerate(flat)]
    assert calculate_ear(deep) == pytest.approx(calculate_ear(flat))


def test_wrong_point_count_is_invalid():
    assert calculate_ear(make_eye(0.3)[:5]) is None
    assert calculate_average_ear(make_eye(0.3), make_eye(0.3) + [(0, 0)]) is None


def test_collapsed_width_returns_previous_ear():
    collapsed = [(10.0, 10.0), (10.0, 8.0), (10.0, 8.0), (10.0, 10.0), (10.0, 12.0), (10.0, 12.0)]
    assert calculate_ear(collapsed) is None

    ear = compute_ear(collapsed, make_eye(0.3), previous=0.21)
    assert ear == 0.21


def test_collapsed_width_without_history_is_capped():
    collapsed = [(0.0, 0.0)] * 6
    ear = compute_ear(collapsed, collapsed)
    assert ear == EAR_DEGENERATE_CAP
    assert math.isfinite(ear)


def test_near_zero_width_is_degenerate():
    eye = make_eye(0.3, width=1e-9)
    assert calculate_ear(eye) is None


def test_extract_eyes_uses_mesh_indices():
    face = make_face(0.3)
    left, right = extract_eyes(face)
    assert left == [face[i] for i in LEFT_EYE_INDICES]
    assert right == [face[i] for i in RIGHT_EYE_INDICES]
    assert compute_ear(left, right) == pytest.approx(0.3)


def test_extract_eyes_rejects_short_keypoint_list():
    assert extract_eyes([(0, 0)] * 100) is None
    assert extract_eyes(None) is None
