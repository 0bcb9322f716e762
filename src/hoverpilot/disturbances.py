"""
Environmental force models for the physics update.

Wind is an explicit service handed to :class:`hoverpilot.dynamics.PhysicsWorld`;
nothing reads ambient wind from a global.

Includes:
- Constant wind velocity in world frame.
- Random gust model (low-pass filtered random walk).
- Aerodynamic drag force proportional to relative airspeed.
- Small random torque disturbances (e.g. asymmetric prop wash).

The drag model is simplified linear drag:
    F_wind = -k_drag * (v - v_wind)
applied in the world frame.
"""

from dataclasses import dataclass, field
from typing import Optional, Protocol, Tuple

import numpy as np
from numpy.typing import NDArray

from hoverpilot.types import RigidBodyState


class EnvironmentForces(Protocol):
    """Anything that pushes on the vehicle from outside."""

    def wrench(
        self, t: float, state: RigidBodyState, dt: float,
    ) -> Tuple[NDArray[np.float64], NDArray[np.float64]]:
        """Return (force [N], torque [N·m]) in world frame for this step."""
        ...


@dataclass
class WindParams:
    """
    Parameters for the wind / disturbance model.

    Wind Field:
        wind_vel: Constant (mean) wind velocity in world frame [m/s].

    Gust Model (low-pass filtered random walk):
        gust_std: Standard deviation of gust velocity [m/s].
                  Set to 0 to disable gusts.
        gust_tau: Time constant for gust low-pass filter [s].

    Drag:
        k_drag: Linear drag coefficient [N·s/m].

    Torque Disturbance:
        torque_std: Std-dev of random torque disturbance [N·m].

    Misc:
        enabled: Master enable flag.
        seed: Random seed used when no generator is supplied.
    """

    wind_vel: Tuple[float, float, float] = (1.0, 0.0, 0.0)
    gust_std: float = 0.5
    gust_tau: float = 1.0
    k_drag: float = 0.2
    torque_std: float = 0.0
    enabled: bool = False
    seed: int = 42


class WindField:
    """
    Mean wind plus Ornstein-Uhlenbeck gusts acting through airframe drag.

    Parameters
    ----------
    params : WindParams
    rng : numpy Generator, optional
        Source of gust noise. Defaults to one seeded from ``params.seed``.
    """

    def __init__(self, params: WindParams, rng: Optional[np.random.Generator] = None):
        self.params = params
        self.rng = rng if rng is not None else np.random.default_rng(params.seed)
        self.gust_vel = np.zeros(3)

    def reset(self, rng: Optional[np.random.Generator] = None) -> None:
        if rng is not None:
            self.rng = rng
        self.gust_vel = np.zeros(3)

    @property
    def air_velocity(self) -> NDArray[np.float64]:
        """Current total wind velocity in world frame [m/s]."""
        return np.asarray(self.params.wind_vel, dtype=np.float64) + self.gust_vel

    def wrench(
        self, t: float, state: RigidBodyState, dt: float,
    ) -> Tuple[NDArray[np.float64], NDArray[np.float64]]:
        p = self.params
        if not p.enabled:
            return np.zeros(3), np.zeros(3)

        # Discrete Ornstein-Uhlenbeck update (exact discretisation):
        #   x[k+1] = alpha * x[k] + sigma_d * noise
        alpha = np.exp(-dt / p.gust_tau) if p.gust_tau > 0 else 0.0
        if p.gust_std > 0:
            sigma_d = p.gust_std * np.sqrt(1.0 - alpha ** 2)
            self.gust_vel = alpha * self.gust_vel + sigma_d * self.rng.standard_normal(3)
        else:
            self.gust_vel = np.zeros(3)

        force = -p.k_drag * (state.v - self.air_velocity)

        if p.torque_std > 0:
            torque = p.torque_std * self.rng.standard_normal(3)
        else:
            torque = np.zeros(3)

        return force, torque


@dataclass
class ConstantForce:
    """A fixed world-frame push, handy for tests and scripted gust scenarios."""

    force: NDArray[np.float64] = field(default_factory=lambda: np.zeros(3))
    torque: NDArray[np.float64] = field(default_factory=lambda: np.zeros(3))

    def wrench(
        self, t: float, state: RigidBodyState, dt: float,
    ) -> Tuple[NDArray[np.float64], NDArray[np.float64]]:
        return np.asarray(self.force, dtype=np.float64), np.asarray(self.torque, dtype=np.float64)
