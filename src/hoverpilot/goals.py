"""
Goal selection for navigation episodes.

Goals come from an ordered waypoint list that is cycled one entry per
episode (wrapping). Without waypoints a goal is sampled uniformly inside a
box.
"""

from __future__ import annotations

from typing import Optional, Sequence, Tuple

import numpy as np
from numpy.typing import NDArray


class GoalProvider:
    """Ordered waypoint cycling with a random-box fallback.

    Parameters
    ----------
    waypoints : array-like, shape (N, 3), optional
        World-frame goals, visited in order across episodes.
    goal_center : sequence of 3 floats
        Centre of the fallback sampling box [m].
    goal_half_extents : sequence of 3 floats
        Half sizes of the fallback sampling box [m].
    """

    def __init__(
        self,
        waypoints: Optional[Sequence[Sequence[float]]] = None,
        goal_center: Sequence[float] = (0.0, 12.5, 0.0),
        goal_half_extents: Sequence[float] = (8.0, 2.5, 8.0),
    ):
        if waypoints is not None and len(waypoints) > 0:
            wps = np.asarray(waypoints, dtype=np.float64)
            if wps.ndim != 2 or wps.shape[1] != 3:
                raise ValueError(f"waypoints must have shape (N, 3), got {wps.shape}")
            self.waypoints: Optional[NDArray[np.float64]] = wps
        else:
            self.waypoints = None
        self.goal_center = np.asarray(goal_center, dtype=np.float64)
        self.goal_half_extents = np.asarray(goal_half_extents, dtype=np.float64)
        self.index = 0

    @property
    def n_waypoints(self) -> int:
        return 0 if self.waypoints is None else self.waypoints.shape[0]

    @property
    def uses_fallback(self) -> bool:
        return self.waypoints is None

    def next_goal(self, rng: np.random.Generator) -> NDArray[np.float64]:
        """Return the goal for a new episode and advance the cycle."""
        if self.waypoints is None:
            offset = rng.uniform(-self.goal_half_extents, self.goal_half_extents)
            return self.goal_center + offset
        goal = self.waypoints[self.index].copy()
        self.index = (self.index + 1) % self.n_waypoints
        return goal

    def rewind(self) -> None:
        self.index = 0


# ---------------------------------------------------------------------------
# Constructors
# ---------------------------------------------------------------------------

def porch_goals(
    porches: Sequence[Tuple[float, float, float]] = (
        (6.0, 3.0, 6.0),
        (-6.0, 3.0, 6.0),
        (-6.0, 3.0, -6.0),
        (6.0, 3.0, -6.0),
    ),
) -> GoalProvider:
    """Delivery-style goals at fixed drop-off points."""
    return GoalProvider(waypoints=list(porches))


def ring_goals(
    radius: float = 6.0,
    height: float = 4.0,
    n_pts: int = 8,
) -> GoalProvider:
    """Goals evenly spaced on a horizontal circle.

    Parameters
    ----------
    radius : float
        Circle radius [m].
    height : float
        Altitude [m].
    n_pts : int
        Number of goals.
    """
    angles = np.linspace(0, 2 * np.pi, n_pts, endpoint=False)
    waypoints = np.column_stack([
        radius * np.cos(angles),
        np.full(n_pts, height),
        radius * np.sin(angles),
    ])
    return GoalProvider(waypoints=waypoints)
