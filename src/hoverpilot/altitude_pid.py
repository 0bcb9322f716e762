"""
Altitude PID: turns a height error into extra lift on top of hover weight.

The derivative acts on the measured height rather than on the error, so a
jump in the target produces no derivative kick. Anti-windup is the clamped
form: the accumulated integral itself is bounded.
"""

from typing import Optional

import numpy as np

from hoverpilot.params import FlightParams


class AltitudePID:
    """
    Closed-loop altitude controller producing a scalar force correction [N].

    Parameters
    ----------
    kp, ki, kd : float
        PID gains.
    integral_clamp : float
        Symmetric bound on the accumulated integral.
    max_extra_lift : float
        Symmetric bound on the output.
    target_y : float
        Initial altitude target [m].
    """

    def __init__(
        self,
        kp: float = 40.0,
        ki: float = 5.0,
        kd: float = 25.0,
        integral_clamp: float = 100.0,
        max_extra_lift: float = 400.0,
        target_y: float = 0.0,
    ):
        self.kp = kp
        self.ki = ki
        self.kd = kd
        self.integral_clamp = integral_clamp
        self.max_extra_lift = max_extra_lift

        self.target_y = float(target_y)
        self.integral = 0.0
        self.prev_measurement: Optional[float] = None

    @classmethod
    def from_params(cls, params: FlightParams) -> "AltitudePID":
        return cls(
            kp=params.kp,
            ki=params.ki,
            kd=params.kd,
            integral_clamp=params.integral_clamp,
            max_extra_lift=params.max_extra_lift,
            target_y=params.target_y,
        )

    def reset(self, measurement: Optional[float] = None) -> None:
        """Zero the integral and restart the derivative from ``measurement``."""
        self.integral = 0.0
        self.prev_measurement = None if measurement is None else float(measurement)

    def set_target(self, target_y: float, measurement: Optional[float] = None) -> None:
        """
        Move the setpoint without a step-response bump.

        When ``measurement`` is omitted the derivative restarts from the next
        sample passed to ``update``.
        """
        self.target_y = float(target_y)
        self.reset(measurement)

    def update(self, current_y: float, dt: float) -> float:
        """
        Advance the loop by ``dt`` and return extra lift [N].

        Mutates the integral and derivative memory.
        """
        if dt <= 0:
            raise ValueError(f"dt must be positive, got {dt}")

        error = self.target_y - current_y

        self.integral = float(np.clip(
            self.integral + error * dt, -self.integral_clamp, self.integral_clamp,
        ))

        prev = current_y if self.prev_measurement is None else self.prev_measurement
        derivative = -(current_y - prev) / dt
        self.prev_measurement = float(current_y)

        extra = self.kp * error + self.ki * self.integral + self.kd * derivative
        return float(np.clip(extra, -self.max_extra_lift, self.max_extra_lift))


def distribute_lift(mass: float, g: float, extra_force: float, n_points: int) -> float:
    """
    Split total desired lift evenly across ``n_points`` rotors [N each].

    Rotors cannot pull down, so the share is floored at zero.
    """
    if n_points <= 0:
        return 0.0
    total = mass * g + extra_force
    return max(0.0, total / n_points)
