"""
Rigid body dynamics and the reference physics world.

Implements continuous-time dynamics with RK4 integration, gravity, an
optional environment-forces service, a ground plane and static sphere
obstacles. Contacts are resolved after integration and reported to
listeners as discrete impact notifications, which is all the flight core
expects from a physics engine.

Uses quaternion attitude representation throughout.
"""

from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence, Tuple

import numpy as np
from numpy.typing import NDArray

from hoverpilot.types import RigidBodyState
from hoverpilot.rigid_body import RigidBody
from hoverpilot.math3d import quat_normalize, quat_to_R
from hoverpilot.disturbances import EnvironmentForces


ImpactListener = Callable[[float, float], None]  # (impact_speed, time)


def omega_matrix(w: NDArray[np.float64]) -> NDArray[np.float64]:
    """
    Construct the quaternion derivative matrix Omega(w).

    For quaternion kinematics: q_dot = 0.5 * Omega(w) @ q

    Args:
        w: Angular velocity in body frame [rad/s], shape (3,)

    Returns:
        Omega matrix, shape (4, 4)
    """
    wx, wy, wz = w
    return np.array([
        [0.0, -wx, -wy, -wz],
        [wx,  0.0,  wz, -wy],
        [wy, -wz,  0.0,  wx],
        [wz,  wy, -wx,  0.0],
    ])


def state_derivative(
    state: RigidBodyState,
    body: RigidBody,
    gravity: NDArray[np.float64],
) -> tuple[NDArray[np.float64], NDArray[np.float64], NDArray[np.float64], NDArray[np.float64]]:
    """
    Compute time derivatives of all state components.

    The wrench accumulated on ``body`` is held constant over the step.

    Dynamics:
        p_dot = v
        v_dot = gravity + F/m - c_lin * v
        q_dot = 0.5 * Omega(w_body) @ q
        w_dot = J^{-1} (R^T tau - w × (J @ w)) + R^T alpha - c_ang * w

    Args:
        state: State at which to evaluate (an RK4 stage)
        body: Body carrying inertia, drag and the accumulated wrench
        gravity: Gravity vector in world frame [m/s²]

    Returns:
        Tuple of (p_dot, v_dot, q_dot, w_dot)
    """
    v = state.v
    q = state.q
    w = state.w_body

    R = quat_to_R(q)

    p_dot = v

    v_dot = gravity + body.force / state.mass - body.linear_drag * v

    q_dot = 0.5 * omega_matrix(w) @ q

    Jw = body.inertia @ w
    gyroscopic = np.cross(w, Jw)
    w_dot = (
        body.inertia_inv @ (R.T @ body.torque - gyroscopic)
        + R.T @ body.angular_accel
        - body.angular_drag * w
    )

    return p_dot, v_dot, q_dot, w_dot


def step_rk4(
    state: RigidBodyState,
    body: RigidBody,
    gravity: NDArray[np.float64],
    dt: float,
) -> RigidBodyState:
    """
    4th-order Runge-Kutta integration step.

    Args:
        state: Current state
        body: Body carrying inertia, drag and the accumulated wrench
        gravity: Gravity vector in world frame [m/s²]
        dt: Time step [s]

    Returns:
        Next state after dt (quaternion renormalised)
    """
    mass = state.mass

    def pack(s: RigidBodyState) -> NDArray[np.float64]:
        return np.concatenate([s.p, s.v, s.q, s.w_body])

    def unpack(x: NDArray[np.float64]) -> RigidBodyState:
        return RigidBodyState(p=x[0:3], v=x[3:6], q=x[6:10], w_body=x[10:13], mass=mass)

    def f(x: NDArray[np.float64]) -> NDArray[np.float64]:
        p_dot, v_dot, q_dot, w_dot = state_derivative(unpack(x), body, gravity)
        return np.concatenate([p_dot, v_dot, q_dot, w_dot])

    x = pack(state)
    k1 = f(x)
    k2 = f(x + 0.5 * dt * k1)
    k3 = f(x + 0.5 * dt * k2)
    k4 = f(x + dt * k3)

    x_next = x + (dt / 6.0) * (k1 + 2.0 * k2 + 2.0 * k3 + k4)

    new_state = unpack(x_next.copy())
    new_state.q = quat_normalize(new_state.q)
    return new_state


# ---------------------------------------------------------------------------
# Colliders
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class SphereObstacle:
    """Static spherical obstacle."""

    center: Tuple[float, float, float]
    radius: float


# ---------------------------------------------------------------------------
# Physics world
# ---------------------------------------------------------------------------

class PhysicsWorld:
    """
    Fixed-step integrator for a single :class:`RigidBody`.

    Parameters
    ----------
    body : RigidBody
        The vehicle.
    g : float
        Gravity magnitude [m/s²]; gravity acts along world -Y.
    environment : EnvironmentForces, optional
        External wind/disturbance service queried once per step.
    ground_y : float
        Height of the ground plane [m].
    obstacles : sequence of SphereObstacle
        Static obstacles.
    body_radius : float
        Collision radius of the vehicle [m].
    restitution : float
        Fraction of normal speed kept after a contact.
    friction : float
        Fraction of tangential and angular velocity removed per ground step.
    min_impact_speed : float
        Contacts slower than this are resolved but not reported.
    """

    def __init__(
        self,
        body: RigidBody,
        g: float = 9.81,
        environment: Optional[EnvironmentForces] = None,
        ground_y: float = 0.0,
        obstacles: Sequence[SphereObstacle] = (),
        body_radius: float = 0.15,
        restitution: float = 0.0,
        friction: float = 0.2,
        min_impact_speed: float = 0.3,
    ):
        self.body = body
        self.gravity = np.array([0.0, -g, 0.0])
        self.environment = environment
        self.ground_y = ground_y
        self.obstacles = list(obstacles)
        self.body_radius = body_radius
        self.restitution = restitution
        self.friction = friction
        self.min_impact_speed = min_impact_speed

        self.time = 0.0
        self._listeners: List[ImpactListener] = []
        self._contacts: set = set()

    @property
    def g(self) -> float:
        return float(-self.gravity[1])

    def add_collision_listener(self, listener: ImpactListener) -> None:
        self._listeners.append(listener)

    def reset(self) -> None:
        """Forget contacts and pending forces; keeps time running."""
        self._contacts = set()
        self.body.clear_forces()

    # ------------------------------------------------------------------

    def step(self, dt: float) -> None:
        """Integrate one physics tick and resolve contacts."""
        body = self.body

        if self.environment is not None:
            force, torque = self.environment.wrench(self.time, body.state, dt)
            body.add_force(force)
            body.add_torque(torque)

        body.state = step_rk4(body.state, body, self.gravity, dt)
        body.clear_forces()
        self.time += dt

        self._resolve_contacts()

    def _resolve_contacts(self) -> None:
        s = self.body.state
        touching = set()

        # Ground plane
        floor = self.ground_y + self.body_radius
        if s.p[1] < floor:
            touching.add("ground")
            speed = float(np.linalg.norm(s.v))
            s.p[1] = floor
            if s.v[1] < 0.0:
                s.v[1] = -self.restitution * s.v[1]
                self._report("ground", speed)
            keep = 1.0 - self.friction
            s.v[0] *= keep
            s.v[2] *= keep
            s.w_body = s.w_body * keep

        # Static spheres
        for i, obs in enumerate(self.obstacles):
            center = np.asarray(obs.center, dtype=np.float64)
            offset = s.p - center
            dist = float(np.linalg.norm(offset))
            reach = obs.radius + self.body_radius
            if dist >= reach:
                continue
            key = ("sphere", i)
            touching.add(key)
            normal = offset / dist if dist > 1e-9 else np.array([0.0, 1.0, 0.0])
            speed = float(np.linalg.norm(s.v))
            s.p = center + normal * reach
            vn = float(np.dot(s.v, normal))
            if vn < 0.0:
                s.v = s.v - (1.0 + self.restitution) * vn * normal
                self._report(key, speed)

        self._contacts = touching

    def _report(self, key, speed: float) -> None:
        # Only contact entry counts as an impact; resting contact is silent
        if key in self._contacts or speed < self.min_impact_speed:
            return
        for listener in self._listeners:
            listener(speed, self.time)
