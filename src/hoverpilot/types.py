"""
Core data types for the flight core.

All arrays use numpy with explicit shapes noted in comments.
Quaternion convention: [w, x, y, z] (scalar-first).
"""

from dataclasses import dataclass, field

import numpy as np
from numpy.typing import NDArray


@dataclass
class RigidBodyState:
    """
    Physics state of the vehicle.

    Owned by the physics integrator. Controllers read it and only ever
    add forces/torques; they never replace it wholesale.

    Attributes:
        p: Position of the body origin in world frame [m], shape (3,)
        v: Linear velocity in world frame [m/s], shape (3,)
        q: Attitude quaternion [w, x, y, z], shape (4,)
        w_body: Angular velocity in body frame [rad/s], shape (3,)
        mass: Mass [kg]
    """

    p: NDArray[np.float64]  # (3,)
    v: NDArray[np.float64]  # (3,)
    q: NDArray[np.float64]  # (4,) [w, x, y, z]
    w_body: NDArray[np.float64]  # (3,)
    mass: float = 1.0

    def copy(self) -> "RigidBodyState":
        """Create a deep copy of this state."""
        return RigidBodyState(
            p=self.p.copy(),
            v=self.v.copy(),
            q=self.q.copy(),
            w_body=self.w_body.copy(),
            mass=self.mass,
        )

    def is_finite(self) -> bool:
        return all(np.all(np.isfinite(a)) for a in (self.p, self.v, self.q, self.w_body))

    @staticmethod
    def at_rest(position=None, mass: float = 1.0) -> "RigidBodyState":
        """Create a motionless, upright state at ``position``."""
        return RigidBodyState(
            p=np.zeros(3) if position is None else np.asarray(position, dtype=np.float64).copy(),
            v=np.zeros(3),
            q=np.array([1.0, 0.0, 0.0, 0.0]),  # Identity quaternion
            w_body=np.zeros(3),
            mass=mass,
        )


@dataclass
class AttitudeCommand:
    """
    Command surface written by the decision step.

    Attributes:
        tilt_cmd: Roll/pitch bias in [-1, 1], shape (2,)
        climb_cmd: Vertical-rate bias in [-1, 1]
    """

    tilt_cmd: NDArray[np.float64] = field(default_factory=lambda: np.zeros(2))
    climb_cmd: float = 0.0

    def clear(self) -> None:
        self.tilt_cmd = np.zeros(2)
        self.climb_cmd = 0.0

    def copy(self) -> "AttitudeCommand":
        return AttitudeCommand(tilt_cmd=self.tilt_cmd.copy(), climb_cmd=self.climb_cmd)


@dataclass
class ControlOutput:
    """
    What the flight controller applied during one physics step.

    Attributes:
        extra_force: PID output on top of hover weight [N]
        lift_per_point: Upward force at each lift point [N]
        n_points: Number of lift points the lift was split across
        torque: Angular acceleration command in world frame [rad/s²], shape (3,)
        target_y: Altitude target used for this step [m]
    """

    extra_force: float
    lift_per_point: float
    n_points: int
    torque: NDArray[np.float64]  # (3,)
    target_y: float

    @property
    def total_lift(self) -> float:
        return self.lift_per_point * self.n_points


@dataclass(frozen=True)
class CollisionEvent:
    """An impact reported by the physics/collision subsystem."""

    impact_speed: float
    timestamp: float
