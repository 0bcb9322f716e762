"""Tests for the flight controller on the reference physics world."""

import numpy as np
import pytest

from hoverpilot.controller import FlightController
from hoverpilot.params import FlightParams
from hoverpilot.rigid_body import RigidBody
from hoverpilot.types import RigidBodyState
from hoverpilot.sim import FlightLoop, build_vehicle, run_hover_test, run_tilt_test
from hoverpilot.log import compute_statistics


DT = 0.02


def _body(y: float = 5.0) -> RigidBody:
    return RigidBody(RigidBodyState.at_rest((0.0, y, 0.0)))


# ---- Idle cases ------------------------------------------------------------

def test_idle_without_body():
    ctrl = FlightController(None)
    ctrl.start()
    assert ctrl.physics_step(DT) is None
    assert not ctrl.ready


def test_idle_before_start():
    body = _body()
    ctrl = FlightController(body)
    assert ctrl.physics_step(DT) is None
    np.testing.assert_array_equal(body.force, np.zeros(3))


def test_idle_without_lift_points():
    body = _body()
    ctrl = FlightController(body, lift_points=[])
    ctrl.start()
    assert ctrl.physics_step(DT) is None
    np.testing.assert_array_equal(body.angular_accel, np.zeros(3))


def test_idle_on_nonpositive_dt():
    ctrl = FlightController(_body())
    ctrl.start()
    assert ctrl.physics_step(0.0) is None


# ---- Start-up --------------------------------------------------------------

def test_start_captures_altitude_and_lowers_com():
    body = _body(y=3.0)
    ctrl = FlightController(body, FlightParams(com_drop=0.05))
    ctrl.start()
    assert ctrl.target_y == pytest.approx(3.0)
    np.testing.assert_allclose(body.center_of_mass, [0.0, -0.05, 0.0])


def test_start_keeps_configured_target():
    ctrl = FlightController(_body(y=3.0), FlightParams(target_y=8.0))
    ctrl.start()
    assert ctrl.target_y == pytest.approx(8.0)


def test_start_lock_overrides_configured_target():
    ctrl = FlightController(_body(y=3.0), FlightParams(target_y=8.0, lock_target_at_start=True))
    ctrl.start()
    assert ctrl.target_y == pytest.approx(3.0)


# ---- One physics step ------------------------------------------------------

def test_equilibrium_step_applies_hover_lift():
    body = _body()
    ctrl = FlightController(body)
    ctrl.start()
    out = ctrl.physics_step(DT)

    assert out is not None
    assert out.extra_force == pytest.approx(0.0)
    assert out.lift_per_point == pytest.approx(9.81 / 4)
    assert out.total_lift == pytest.approx(9.81)
    np.testing.assert_allclose(body.force, [0.0, 9.81, 0.0], atol=1e-12)
    np.testing.assert_allclose(body.torque, np.zeros(3), atol=1e-12)
    np.testing.assert_allclose(out.torque, np.zeros(3), atol=1e-12)


def test_climb_command_moves_target():
    ctrl = FlightController(_body(), FlightParams(climb_rate=1.0))
    ctrl.start()
    ctrl.set_command(np.zeros(2), 1.0)
    for _ in range(50):
        ctrl.physics_step(DT)
        ctrl.body.clear_forces()
    assert ctrl.target_y == pytest.approx(6.0)


def test_set_command_clips():
    ctrl = FlightController(_body())
    ctrl.set_command(np.array([3.0, -3.0]), -7.0)
    np.testing.assert_array_equal(ctrl.command.tilt_cmd, [1.0, -1.0])
    assert ctrl.command.climb_cmd == -1.0
    ctrl.clear_command()
    np.testing.assert_array_equal(ctrl.command.tilt_cmd, [0.0, 0.0])
    assert ctrl.command.climb_cmd == 0.0


# ---- Closed loop -----------------------------------------------------------

def test_hover_holds_altitude():
    log = run_hover_test(hover_height=5.0, start_height=5.0, t_final=5.0)
    stats = compute_statistics(log)
    assert stats["max_alt_error"] < 0.05
    assert stats["max_tilt_deg"] < 1.0
    assert stats["mean_lift"] == pytest.approx(9.81 / 4, rel=0.05)


def test_climb_reaches_new_target():
    vehicle = build_vehicle(start_position=(0.0, 2.0, 0.0))
    loop = FlightLoop(vehicle.world, vehicle.controller, dt=DT)
    loop.run_commanded(2.0, climb_cmd=1.0)
    loop.run_commanded(6.0)
    assert vehicle.controller.target_y == pytest.approx(4.0, abs=1e-6)
    assert vehicle.body.position[1] == pytest.approx(4.0, abs=0.25)


def test_tilt_command_leans_then_levels():
    log = run_tilt_test(tilt_cmd=(0.0, 1.0), lean_time=2.0, settle_time=3.0)
    tilt = log.tilt_deg()
    assert tilt.max() > 5.0, "Vehicle should lean under a full pitch command"
    assert tilt.max() < 20.0
    assert tilt[-1] < 1.5, "Vehicle should level once the command is released"
    assert log.p[-1, 2] > log.p[0, 2], "Forward lean should move the vehicle forward"
