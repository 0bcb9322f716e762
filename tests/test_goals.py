"""Tests for goal cycling and fallback sampling."""

import numpy as np
import pytest

from hoverpilot.goals import GoalProvider, porch_goals, ring_goals


def test_waypoints_cycle_and_wrap():
    wps = [(1.0, 2.0, 3.0), (4.0, 5.0, 6.0), (7.0, 8.0, 9.0)]
    goals = GoalProvider(waypoints=wps)
    rng = np.random.default_rng(0)
    seen = [goals.next_goal(rng) for _ in range(4)]
    np.testing.assert_array_equal(seen[0], wps[0])
    np.testing.assert_array_equal(seen[2], wps[2])
    np.testing.assert_array_equal(seen[3], wps[0])


def test_returned_goal_is_a_copy():
    goals = GoalProvider(waypoints=[(1.0, 2.0, 3.0)])
    g = goals.next_goal(np.random.default_rng(0))
    g[0] = 99.0
    np.testing.assert_array_equal(goals.waypoints[0], [1.0, 2.0, 3.0])


def test_rewind():
    goals = GoalProvider(waypoints=[(1.0, 0.0, 0.0), (2.0, 0.0, 0.0)])
    rng = np.random.default_rng(0)
    goals.next_goal(rng)
    goals.rewind()
    assert goals.next_goal(rng)[0] == 1.0


def test_fallback_samples_inside_box():
    goals = GoalProvider(goal_center=(0.0, 12.5, 0.0), goal_half_extents=(8.0, 2.5, 8.0))
    assert goals.uses_fallback
    assert goals.n_waypoints == 0
    rng = np.random.default_rng(1)
    samples = np.array([goals.next_goal(rng) for _ in range(200)])
    assert np.all(np.abs(samples[:, 0]) <= 8.0)
    assert np.all((samples[:, 1] >= 10.0) & (samples[:, 1] <= 15.0))
    assert np.all(np.abs(samples[:, 2]) <= 8.0)


def test_empty_waypoints_fall_back():
    assert GoalProvider(waypoints=[]).uses_fallback


def test_bad_shape_rejected():
    with pytest.raises(ValueError):
        GoalProvider(waypoints=[(1.0, 2.0)])


def test_porch_goals_default():
    goals = porch_goals()
    assert goals.n_waypoints == 4
    assert np.all(goals.waypoints[:, 1] == 3.0)


def test_ring_goals_geometry():
    goals = ring_goals(radius=6.0, height=4.0, n_pts=8)
    assert goals.n_waypoints == 8
    radii = np.hypot(goals.waypoints[:, 0], goals.waypoints[:, 2])
    np.testing.assert_allclose(radii, 6.0)
    np.testing.assert_allclose(goals.waypoints[:, 1], 4.0)
