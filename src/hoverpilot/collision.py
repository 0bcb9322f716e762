"""
Single-slot collision buffer.

Impacts arrive from the physics callback at engine rate, possibly several
per decision step. The decision step drains the buffer at most once per
cooldown window, so a sustained contact is charged once rather than every
step. Only the fastest impact since the last drain is kept.
"""

from typing import Optional

from hoverpilot.types import CollisionEvent


class CollisionTracker:
    """
    Parameters
    ----------
    cooldown : float
        Minimum time [s] between two drains that return an event.
    """

    def __init__(self, cooldown: float = 0.5):
        if cooldown < 0:
            raise ValueError(f"cooldown must be non-negative, got {cooldown}")
        self.cooldown = cooldown
        self._pending: Optional[CollisionEvent] = None
        self._last_drain = float("-inf")

    @property
    def pending(self) -> Optional[CollisionEvent]:
        return self._pending

    def record_impact(self, speed: float, timestamp: float = 0.0) -> None:
        """Remember an impact; keeps the fastest one until the next drain."""
        speed = abs(float(speed))
        if self._pending is None or speed > self._pending.impact_speed:
            self._pending = CollisionEvent(impact_speed=speed, timestamp=float(timestamp))

    def drain(self, now: float) -> Optional[CollisionEvent]:
        """Return and clear the pending impact regardless of the cooldown."""
        event = self._pending
        if event is not None:
            self._pending = None
            self._last_drain = now
        return event

    def drain_if_cooldown_elapsed(self, now: float) -> Optional[CollisionEvent]:
        """
        Return and clear the pending impact if the cooldown has elapsed.

        During the cooldown the pending maximum is kept for a later drain.
        """
        if self._pending is None or now - self._last_drain < self.cooldown:
            return None
        return self.drain(now)

    def reset(self) -> None:
        self._pending = None
        self._last_drain = float("-inf")
