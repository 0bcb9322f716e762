"""Tests for the roll/pitch stabilizer and yaw damping."""

import numpy as np
import pytest

from hoverpilot.attitude import AttitudeStabilizer, desired_up
from hoverpilot.math3d import quat_from_axis_angle, quat_normalize, RIGHT, UP, FORWARD


IDENTITY = np.array([1.0, 0.0, 0.0, 0.0])
NO_CMD = np.zeros(2)


def test_upright_at_rest_gives_zero_torque():
    stab = AttitudeStabilizer()
    torque = stab.compute(IDENTITY, np.zeros(3), NO_CMD)
    np.testing.assert_allclose(torque, np.zeros(3), atol=1e-12)


def test_torque_bounded_for_arbitrary_inputs():
    stab = AttitudeStabilizer(max_level_torque=5.0)
    rng = np.random.default_rng(0)
    for _ in range(200):
        q = quat_normalize(rng.normal(size=4))
        w = rng.normal(scale=50.0, size=3)
        cmd = rng.uniform(-1.0, 1.0, size=2)
        torque = stab.compute(q, w, cmd)
        assert np.linalg.norm(torque) <= 2 * 5.0 + 1e-9


def test_pure_yaw_rate_is_only_damped():
    stab = AttitudeStabilizer(yaw_damp=2.0)
    torque = stab.compute(IDENTITY, np.array([0.0, 1.0, 0.0]), NO_CMD)
    np.testing.assert_allclose(torque, [0.0, -2.0, 0.0], atol=1e-12)


def test_yaw_relief_reduces_damping_when_banked():
    q = quat_from_axis_angle(RIGHT, np.radians(80.0))
    up = np.array([0.0, np.cos(np.radians(80.0)), np.sin(np.radians(80.0))])
    w = 1.0 * up

    relieved = AttitudeStabilizer(tilt_kp=0.0, yaw_tilt_relief=True).compute(q, w, NO_CMD)
    full = AttitudeStabilizer(tilt_kp=0.0, yaw_tilt_relief=False).compute(q, w, NO_CMD)
    assert np.linalg.norm(relieved) < np.linalg.norm(full)


def test_recovers_toward_upright():
    q = quat_from_axis_angle(RIGHT, np.radians(20.0))  # body up leans toward +Z
    torque = AttitudeStabilizer().compute(q, np.zeros(3), NO_CMD)
    assert torque[0] < 0.0, "Should rotate back about -X"
    assert abs(torque[1]) < 1e-9 and abs(torque[2]) < 1e-9


# ---- Commanded lean --------------------------------------------------------

def test_pitch_command_leans_forward():
    bias = np.radians(10.0)
    target = desired_up(IDENTITY, np.array([0.0, 1.0]), bias)
    np.testing.assert_allclose(target, [0.0, np.cos(bias), np.sin(bias)], atol=1e-12)

    torque = AttitudeStabilizer(max_tilt_bias=bias).compute(IDENTITY, np.zeros(3), np.array([0.0, 1.0]))
    assert torque[0] > 0.0


def test_roll_command_leans_right():
    bias = np.radians(10.0)
    target = desired_up(IDENTITY, np.array([1.0, 0.0]), bias)
    np.testing.assert_allclose(target, [np.sin(bias), np.cos(bias), 0.0], atol=1e-12)


def test_lean_follows_heading():
    bias = np.radians(10.0)
    q = quat_from_axis_angle(UP, np.pi / 2)  # forward now points along +X
    target = desired_up(q, np.array([0.0, 1.0]), bias)
    assert target[0] == pytest.approx(np.sin(bias))
    assert target[2] == pytest.approx(0.0, abs=1e-12)


def test_command_saturates():
    bias = np.radians(10.0)
    a = desired_up(IDENTITY, np.array([0.0, 5.0]), bias)
    b = desired_up(IDENTITY, np.array([0.0, 1.0]), bias)
    np.testing.assert_allclose(a, b)
    assert FORWARD @ a > 0.0
