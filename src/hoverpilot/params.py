"""
Vehicle parameters and flight-controller gains.

Default values are for a ~1 kg quadrotor flying with a 50 Hz physics step.
Gains on the attitude loop are angular accelerations, so they do not need
retuning when the mass changes.
"""

from dataclasses import dataclass, field
from typing import Tuple

import numpy as np
from numpy.typing import NDArray


Vec3 = Tuple[float, float, float]


def quad_x_lift_points(arm: float = 0.25) -> Tuple[Vec3, ...]:
    """Four rotor positions in the body frame, X configuration."""
    return (
        (arm, 0.0, arm),
        (-arm, 0.0, arm),
        (-arm, 0.0, -arm),
        (arm, 0.0, -arm),
    )


@dataclass
class FlightParams:
    """
    Complete parameter set for the flight controller and airframe.

    Physical Parameters:
        mass: Mass [kg]
        inertia_diag: Principal moments of inertia [kg·m²] about (x, y, z)
        g: Gravitational acceleration magnitude [m/s²]
        lift_points: Rotor positions in body frame [m]
        com_drop: How far start() lowers the centre of mass [m]

    Altitude PID (outputs Newtons, total across rotors):
        kp, ki, kd: PID gains
        integral_clamp: Symmetric bound on the accumulated integral [m·s]
        max_extra_lift: Bound on PID output [N]

    Attitude stabilizer (outputs angular acceleration):
        tilt_kp: Per radian of tilt error [1/s²]
        tilt_kd: Against roll/pitch rate [1/s]
        yaw_damp: Against yaw rate [1/s]
        max_level_torque: Magnitude clamp for each torque part [rad/s²]
        yaw_tilt_relief: Reduce yaw damping while banked

    Command scaling:
        max_tilt_bias_deg: Lean for a full-scale tilt command [deg]
        climb_rate: Target climb speed for a full-scale climb command [m/s]

    Start-up:
        target_y: Initial altitude target [m] (0 = capture on start)
        lock_target_at_start: Always capture the current altitude on start
    """

    # Physical parameters
    mass: float = 1.0
    inertia_diag: Vec3 = (0.02, 0.04, 0.02)
    g: float = 9.81
    lift_points: Tuple[Vec3, ...] = field(default_factory=quad_x_lift_points)
    com_drop: float = 0.05

    # Altitude PID
    kp: float = 40.0
    ki: float = 5.0
    kd: float = 25.0
    integral_clamp: float = 100.0
    max_extra_lift: float = 400.0

    # Attitude stabilizer
    tilt_kp: float = 40.0
    tilt_kd: float = 8.0
    yaw_damp: float = 2.0
    max_level_torque: float = 200.0
    yaw_tilt_relief: bool = True

    # RL steering
    max_tilt_bias_deg: float = 10.0
    climb_rate: float = 1.0

    # Start-up
    target_y: float = 0.0
    lock_target_at_start: bool = False

    def __post_init__(self) -> None:
        if self.mass <= 0:
            raise ValueError(f"mass must be positive, got {self.mass}")
        if self.integral_clamp < 0 or self.max_extra_lift < 0 or self.max_level_torque < 0:
            raise ValueError("clamps and limits must be non-negative")
        # Tuples survive a JSON round trip as lists
        self.inertia_diag = tuple(float(x) for x in self.inertia_diag)
        self.lift_points = tuple(tuple(float(c) for c in lp) for lp in self.lift_points)

    @property
    def inertia(self) -> NDArray[np.float64]:
        return np.diag(self.inertia_diag)

    @property
    def hover_force(self) -> float:
        """Total lift required for hover [N]."""
        return self.mass * self.g

    @property
    def max_tilt_bias_rad(self) -> float:
        return float(np.radians(self.max_tilt_bias_deg))


def default_params() -> FlightParams:
    """Default parameters for a ~1 kg quadrotor."""
    return FlightParams()
