"""Tests for rigid-body integration, contacts and wind."""

import numpy as np
import pytest

from hoverpilot.dynamics import PhysicsWorld, SphereObstacle
from hoverpilot.disturbances import WindField, WindParams, ConstantForce
from hoverpilot.rigid_body import RigidBody, ForceMode
from hoverpilot.types import RigidBodyState


DT = 0.02


def _world(y: float = 10.0, **kwargs) -> PhysicsWorld:
    body = RigidBody(RigidBodyState.at_rest((0.0, y, 0.0)))
    return PhysicsWorld(body, **kwargs)


def test_free_fall_matches_closed_form():
    world = _world(y=10.0)
    for _ in range(50):
        world.step(DT)
    t = 50 * DT
    assert world.time == pytest.approx(t)
    assert world.body.position[1] == pytest.approx(10.0 - 0.5 * 9.81 * t ** 2, abs=1e-9)
    assert world.body.state.v[1] == pytest.approx(-9.81 * t, abs=1e-9)


def test_weight_cancelling_force_holds_position():
    world = _world(y=5.0)
    for _ in range(100):
        world.body.add_force(np.array([0.0, 9.81, 0.0]))
        world.step(DT)
    np.testing.assert_allclose(world.body.position, [0.0, 5.0, 0.0], atol=1e-9)


def test_forces_cleared_after_step():
    world = _world()
    world.body.add_force(np.array([1.0, 2.0, 3.0]))
    world.body.add_torque(np.ones(3), ForceMode.ACCELERATION)
    world.step(DT)
    np.testing.assert_array_equal(world.body.force, np.zeros(3))
    np.testing.assert_array_equal(world.body.angular_accel, np.zeros(3))


def test_quaternion_stays_normalized():
    world = _world(y=100.0)
    world.body.state.w_body = np.array([1.0, 2.0, 3.0])
    for _ in range(200):
        world.step(DT)
    assert np.linalg.norm(world.body.state.q) == pytest.approx(1.0, abs=1e-12)


def test_offset_force_produces_torque():
    body = RigidBody(RigidBodyState.at_rest((0.0, 5.0, 0.0)))
    body.add_force_at_position(np.array([0.0, 1.0, 0.0]), np.array([0.25, 5.0, 0.0]))
    np.testing.assert_allclose(body.force, [0.0, 1.0, 0.0])
    np.testing.assert_allclose(body.torque, [0.0, 0.0, 0.25])


def test_acceleration_torque_ignores_inertia():
    world = _world(y=100.0)
    world.body.angular_drag = 0.0
    world.body.add_torque(np.array([0.0, 1.0, 0.0]), ForceMode.ACCELERATION)
    world.step(DT)
    assert world.body.angular_velocity[1] == pytest.approx(DT, rel=1e-6)


# ---- Contacts --------------------------------------------------------------

def test_ground_impact_reported_once():
    world = _world(y=1.0)
    impacts = []
    world.add_collision_listener(lambda speed, t: impacts.append((speed, t)))
    for _ in range(200):
        world.step(DT)

    assert len(impacts) == 1, f"Expected one impact, got {impacts}"
    speed, _t = impacts[0]
    assert speed == pytest.approx(np.sqrt(2 * 9.81 * 0.85), rel=0.1)
    assert world.body.position[1] == pytest.approx(world.body_radius)


def test_resting_contact_not_reported():
    world = _world(y=0.15)  # resting on the ground plane
    impacts = []
    world.add_collision_listener(lambda speed, t: impacts.append(speed))
    for _ in range(20):
        world.step(DT)
    assert impacts == []


def test_sphere_obstacle_blocks_and_reports():
    world = _world(y=5.0, obstacles=[SphereObstacle(center=(2.0, 5.0, 0.0), radius=0.5)])
    world.body.state.v = np.array([5.0, 0.0, 0.0])
    impacts = []
    world.add_collision_listener(lambda speed, t: impacts.append(speed))
    for _ in range(30):
        world.body.add_force(np.array([0.0, 9.81, 0.0]))
        world.step(DT)

    assert len(impacts) == 1
    assert impacts[0] == pytest.approx(5.0, rel=1e-6)
    dist = np.linalg.norm(world.body.position - np.array([2.0, 5.0, 0.0]))
    assert dist >= 0.5 + world.body_radius - 1e-9


# ---- Environment forces ----------------------------------------------------

def test_wind_disabled_is_silent():
    wind = WindField(WindParams(enabled=False))
    force, torque = wind.wrench(0.0, RigidBodyState.at_rest(), DT)
    np.testing.assert_array_equal(force, np.zeros(3))
    np.testing.assert_array_equal(torque, np.zeros(3))


def test_steady_wind_drag_on_body_at_rest():
    wind = WindField(WindParams(wind_vel=(2.0, 0.0, 0.0), gust_std=0.0, k_drag=0.2, enabled=True))
    force, _torque = wind.wrench(0.0, RigidBodyState.at_rest(), DT)
    np.testing.assert_allclose(force, [0.4, 0.0, 0.0])


def test_gusts_are_reproducible_from_seed():
    p = WindParams(gust_std=1.0, enabled=True)
    a = WindField(p, rng=np.random.default_rng(3))
    b = WindField(p, rng=np.random.default_rng(3))
    state = RigidBodyState.at_rest()
    for _ in range(20):
        fa, _ = a.wrench(0.0, state, DT)
        fb, _ = b.wrench(0.0, state, DT)
        np.testing.assert_array_equal(fa, fb)
    assert np.linalg.norm(a.gust_vel) > 0.0


def test_world_applies_environment_force():
    push = ConstantForce(force=np.array([1.0, 9.81, 0.0]))
    world = _world(y=5.0, environment=push)
    for _ in range(50):
        world.step(DT)
    t = 50 * DT
    assert world.body.position[0] == pytest.approx(0.5 * t ** 2, abs=1e-9)
    assert world.body.position[1] == pytest.approx(5.0, abs=1e-9)
