"""
Rigid body handle used by the flight controller.

Wraps a :class:`RigidBodyState` together with the force/torque accumulators
that the physics integrator consumes once per step. The controller talks to
this handle only; it never integrates anything itself.
"""

from enum import Enum
from typing import Optional, Sequence

import numpy as np
from numpy.typing import NDArray

from hoverpilot.types import RigidBodyState
from hoverpilot.math3d import quat_to_R, UP, FORWARD


class ForceMode(Enum):
    """How a torque passed to :meth:`RigidBody.add_torque` is interpreted."""

    FORCE = "force"                # N·m, divided by inertia
    ACCELERATION = "acceleration"  # rad/s², mass/inertia independent


class RigidBody:
    """
    A body solved by :class:`hoverpilot.dynamics.PhysicsWorld`.

    Parameters
    ----------
    state : RigidBodyState
        Initial state (mass is taken from it).
    inertia_diag : sequence of 3 floats
        Principal moments of inertia [kg·m²].
    center_of_mass : sequence of 3 floats, optional
        Centre of mass offset in body frame [m].
    linear_drag, angular_drag : float
        Simple velocity-proportional damping rates [1/s].
    """

    def __init__(
        self,
        state: RigidBodyState,
        inertia_diag: Sequence[float] = (0.02, 0.04, 0.02),
        center_of_mass: Optional[Sequence[float]] = None,
        linear_drag: float = 0.0,
        angular_drag: float = 0.05,
    ):
        if state.mass <= 0:
            raise ValueError(f"mass must be positive, got {state.mass}")
        self.state = state
        self.inertia = np.diag(np.asarray(inertia_diag, dtype=np.float64))
        self.inertia_inv = np.linalg.inv(self.inertia)
        self.center_of_mass = (
            np.zeros(3) if center_of_mass is None
            else np.asarray(center_of_mass, dtype=np.float64).copy()
        )
        self.linear_drag = linear_drag
        self.angular_drag = angular_drag

        self.force = np.zeros(3)          # world frame [N]
        self.torque = np.zeros(3)         # world frame [N·m]
        self.angular_accel = np.zeros(3)  # world frame [rad/s²]

    # ------------------------------------------------------------------
    # Read-only views
    # ------------------------------------------------------------------

    @property
    def mass(self) -> float:
        return self.state.mass

    @property
    def position(self) -> NDArray[np.float64]:
        return self.state.p

    @property
    def rotation(self) -> NDArray[np.float64]:
        return quat_to_R(self.state.q)

    @property
    def up(self) -> NDArray[np.float64]:
        return self.rotation @ UP

    @property
    def forward(self) -> NDArray[np.float64]:
        return self.rotation @ FORWARD

    @property
    def angular_velocity(self) -> NDArray[np.float64]:
        """Angular velocity in world frame [rad/s]."""
        return self.rotation @ self.state.w_body

    @property
    def world_center_of_mass(self) -> NDArray[np.float64]:
        return self.transform_point(self.center_of_mass)

    def transform_point(self, point_body: NDArray[np.float64]) -> NDArray[np.float64]:
        return self.state.p + self.rotation @ np.asarray(point_body, dtype=np.float64)

    def inverse_transform_point(self, point_world: NDArray[np.float64]) -> NDArray[np.float64]:
        return self.rotation.T @ (np.asarray(point_world, dtype=np.float64) - self.state.p)

    def inverse_transform_direction(self, v_world: NDArray[np.float64]) -> NDArray[np.float64]:
        return self.rotation.T @ np.asarray(v_world, dtype=np.float64)

    # ------------------------------------------------------------------
    # Force application (accumulated until the next physics step)
    # ------------------------------------------------------------------

    def add_force(self, force: NDArray[np.float64]) -> None:
        """Continuous force through the centre of mass [N]."""
        self.force += force

    def add_force_at_position(
        self, force: NDArray[np.float64], point_world: NDArray[np.float64],
    ) -> None:
        """Continuous force at a world point; the lever arm adds torque."""
        self.force += force
        arm = np.asarray(point_world, dtype=np.float64) - self.world_center_of_mass
        self.torque += np.cross(arm, force)

    def add_torque(
        self, torque: NDArray[np.float64], mode: ForceMode = ForceMode.FORCE,
    ) -> None:
        if mode is ForceMode.ACCELERATION:
            self.angular_accel += torque
        else:
            self.torque += torque

    def clear_forces(self) -> None:
        self.force = np.zeros(3)
        self.torque = np.zeros(3)
        self.angular_accel = np.zeros(3)

    # ------------------------------------------------------------------
    # Teleport helpers (episode reset)
    # ------------------------------------------------------------------

    def teleport(self, position: NDArray[np.float64], q: NDArray[np.float64]) -> None:
        self.state.p = np.asarray(position, dtype=np.float64).copy()
        self.state.q = np.asarray(q, dtype=np.float64).copy()

    def stop(self) -> None:
        self.state.v = np.zeros(3)
        self.state.w_body = np.zeros(3)
