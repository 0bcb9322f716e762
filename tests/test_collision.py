"""Tests for the single-slot collision buffer."""

import pytest

from hoverpilot.collision import CollisionTracker


def test_keeps_fastest_impact():
    tracker = CollisionTracker(cooldown=0.5)
    for speed in (1.0, 3.0, 2.0):
        tracker.record_impact(speed, timestamp=0.1)
    assert tracker.pending.impact_speed == 3.0


def test_drain_returns_and_clears():
    tracker = CollisionTracker(cooldown=0.5)
    tracker.record_impact(2.0, timestamp=0.05)
    event = tracker.drain_if_cooldown_elapsed(0.1)
    assert event is not None and event.impact_speed == 2.0
    assert tracker.pending is None
    assert tracker.drain_if_cooldown_elapsed(0.2) is None


def test_cooldown_defers_but_keeps_impact():
    tracker = CollisionTracker(cooldown=0.5)
    tracker.record_impact(1.0)
    assert tracker.drain_if_cooldown_elapsed(1.0) is not None

    tracker.record_impact(4.0)
    tracker.record_impact(2.0)
    assert tracker.drain_if_cooldown_elapsed(1.2) is None, "Still inside cooldown"
    assert tracker.pending.impact_speed == 4.0

    event = tracker.drain_if_cooldown_elapsed(1.5)
    assert event is not None and event.impact_speed == 4.0


def test_sustained_contact_charged_once_per_window():
    tracker = CollisionTracker(cooldown=0.5)
    drained = 0
    t = 0.0
    for _ in range(10):  # one second of decision steps
        t += 0.1
        tracker.record_impact(1.0, timestamp=t)
        if tracker.drain_if_cooldown_elapsed(t) is not None:
            drained += 1
    assert drained == 2


def test_negative_speed_recorded_as_magnitude():
    tracker = CollisionTracker()
    tracker.record_impact(-3.0)
    assert tracker.pending.impact_speed == 3.0


def test_reset_clears_state():
    tracker = CollisionTracker(cooldown=0.5)
    tracker.record_impact(1.0)
    tracker.drain_if_cooldown_elapsed(10.0)
    tracker.record_impact(1.0)
    tracker.reset()
    assert tracker.pending is None
    tracker.record_impact(1.0)
    assert tracker.drain_if_cooldown_elapsed(0.0) is not None


def test_negative_cooldown_rejected():
    with pytest.raises(ValueError):
        CollisionTracker(cooldown=-0.1)


def test_drain_ignores_cooldown():
    tracker = CollisionTracker(cooldown=0.5)
    tracker.record_impact(1.0)
    assert tracker.drain_if_cooldown_elapsed(1.0) is not None

    tracker.record_impact(9.0)
    event = tracker.drain(1.1)
    assert event is not None and event.impact_speed == 9.0
    assert tracker.pending is None
    assert tracker.drain(1.2) is None
    tracker.record_impact(2.0)
    assert tracker.drain_if_cooldown_elapsed(1.3) is None, "Cooldown restarts from the forced drain"
