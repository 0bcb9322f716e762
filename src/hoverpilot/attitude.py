"""
Roll/pitch PD stabilizer with independent yaw-rate damping.

Drives the body up-axis toward a commanded "desired up" built by leaning
world up by the commanded roll and pitch. Output is an angular acceleration
in world frame, so the gains do not depend on vehicle mass or inertia.
"""

import numpy as np
from numpy.typing import NDArray

from hoverpilot.params import FlightParams
from hoverpilot.math3d import (
    quat_to_R,
    quat_from_axis_angle,
    quat_mul,
    quat_rotate_vec,
    project,
    clamp_magnitude,
    RIGHT,
    UP,
    FORWARD,
)


def desired_up(
    q: NDArray[np.float64],
    tilt_cmd: NDArray[np.float64],
    max_tilt_bias: float,
) -> NDArray[np.float64]:
    """
    World-up leaned by the commanded tilt.

    Pitch rotates about the body right axis (positive leans forward) and
    roll about the body forward axis (positive leans right).

    Args:
        q: Current attitude quaternion, shape (4,)
        tilt_cmd: [roll, pitch] in [-1, 1], shape (2,)
        max_tilt_bias: Lean for a full-scale command [rad]

    Returns:
        Desired up direction in world frame, shape (3,)
    """
    R = quat_to_R(q)
    roll = float(np.clip(tilt_cmd[0], -1.0, 1.0)) * max_tilt_bias
    pitch = float(np.clip(tilt_cmd[1], -1.0, 1.0)) * max_tilt_bias

    q_tilt = quat_mul(
        quat_from_axis_angle(R @ RIGHT, pitch),
        quat_from_axis_angle(R @ FORWARD, -roll),
    )
    return quat_rotate_vec(q_tilt, UP)


class AttitudeStabilizer:
    """
    PD controller on the up-axis error plus yaw damping.

    Each torque part is clamped to ``max_level_torque`` before summing, so
    the output magnitude never exceeds ``2 * max_level_torque``.
    """

    def __init__(
        self,
        tilt_kp: float = 40.0,
        tilt_kd: float = 8.0,
        yaw_damp: float = 2.0,
        max_level_torque: float = 200.0,
        max_tilt_bias: float = np.radians(10.0),
        yaw_tilt_relief: bool = True,
    ):
        self.tilt_kp = tilt_kp
        self.tilt_kd = tilt_kd
        self.yaw_damp = yaw_damp
        self.max_level_torque = max_level_torque
        self.max_tilt_bias = max_tilt_bias
        self.yaw_tilt_relief = yaw_tilt_relief

    @classmethod
    def from_params(cls, params: FlightParams) -> "AttitudeStabilizer":
        return cls(
            tilt_kp=params.tilt_kp,
            tilt_kd=params.tilt_kd,
            yaw_damp=params.yaw_damp,
            max_level_torque=params.max_level_torque,
            max_tilt_bias=params.max_tilt_bias_rad,
            yaw_tilt_relief=params.yaw_tilt_relief,
        )

    def compute(
        self,
        q: NDArray[np.float64],
        angular_velocity: NDArray[np.float64],
        tilt_cmd: NDArray[np.float64],
    ) -> NDArray[np.float64]:
        """
        Corrective angular acceleration in world frame [rad/s²].

        Args:
            q: Current attitude quaternion, shape (4,)
            angular_velocity: Angular velocity in world frame [rad/s], shape (3,)
            tilt_cmd: [roll, pitch] in [-1, 1], shape (2,)
        """
        up = quat_to_R(q) @ UP
        target_up = desired_up(q, tilt_cmd, self.max_tilt_bias)

        # |up × target| = sin(angle); clamp guards asin against round-off
        axis = np.cross(up, target_up)
        sin_angle = float(np.linalg.norm(axis))
        angle = float(np.arcsin(np.clip(sin_angle, 0.0, 1.0)))
        tilt_axis = axis / sin_angle if sin_angle > 1e-5 else np.zeros(3)

        w = np.asarray(angular_velocity, dtype=np.float64)
        w_yaw = project(w, up)
        w_rp = w - w_yaw

        torque_rp = tilt_axis * (self.tilt_kp * angle) - w_rp * self.tilt_kd

        yaw_damp = self.yaw_damp
        if self.yaw_tilt_relief:
            yaw_damp *= float(np.clip(np.cos(angle) + 0.25, 0.0, 1.0))
        torque_yaw = -w_yaw * yaw_damp

        return (
            clamp_magnitude(torque_rp, self.max_level_torque)
            + clamp_magnitude(torque_yaw, self.max_level_torque)
        )
