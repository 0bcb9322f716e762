"""
Flight telemetry logging.

Provides a pre-allocated log that peripheral consumers fill from the
read-only controller/body surface. Nothing here runs inside the control
law; a frame where the controller idled is recorded with zero lift.
"""

from dataclasses import dataclass, field
from typing import Optional

import numpy as np
from numpy.typing import NDArray

from hoverpilot.types import RigidBodyState, ControlOutput
from hoverpilot.math3d import tilt_angle


@dataclass
class FlightLog:
    """
    Time histories of the vehicle and controller.

    All arrays have shape (N,) or (N, 3) or (N, 4) where N is number of timesteps.
    """

    t: NDArray[np.float64]  # (N,)
    p: NDArray[np.float64]  # (N, 3)
    v: NDArray[np.float64]  # (N, 3)
    q: NDArray[np.float64]  # (N, 4)
    w_body: NDArray[np.float64]  # (N, 3)
    target_y: NDArray[np.float64]  # (N,)
    lift_per_point: NDArray[np.float64]  # (N,)
    torque: NDArray[np.float64]  # (N, 3)

    _idx: int = field(default=0, repr=False)

    @staticmethod
    def allocate(n_steps: int) -> "FlightLog":
        """Pre-allocate arrays for n_steps timesteps."""
        return FlightLog(
            t=np.zeros(n_steps),
            p=np.zeros((n_steps, 3)),
            v=np.zeros((n_steps, 3)),
            q=np.zeros((n_steps, 4)),
            w_body=np.zeros((n_steps, 3)),
            target_y=np.zeros(n_steps),
            lift_per_point=np.zeros(n_steps),
            torque=np.zeros((n_steps, 3)),
            _idx=0,
        )

    @property
    def capacity(self) -> int:
        return self.t.shape[0]

    def __len__(self) -> int:
        return self._idx

    def record(
        self,
        t: float,
        state: RigidBodyState,
        target_y: float,
        output: Optional[ControlOutput],
    ) -> None:
        """Record one timestep; silently stops when full."""
        i = self._idx
        if i >= self.capacity:
            return
        self.t[i] = t
        self.p[i] = state.p
        self.v[i] = state.v
        self.q[i] = state.q
        self.w_body[i] = state.w_body
        self.target_y[i] = target_y
        if output is not None:
            self.lift_per_point[i] = output.lift_per_point
            self.torque[i] = output.torque
        self._idx += 1

    def trim(self) -> "FlightLog":
        """Trim arrays to actual recorded length."""
        n = self._idx
        return FlightLog(
            t=self.t[:n],
            p=self.p[:n],
            v=self.v[:n],
            q=self.q[:n],
            w_body=self.w_body[:n],
            target_y=self.target_y[:n],
            lift_per_point=self.lift_per_point[:n],
            torque=self.torque[:n],
            _idx=n,
        )

    def tilt_deg(self) -> NDArray[np.float64]:
        n = self._idx
        return np.array([np.degrees(tilt_angle(q)) for q in self.q[:n]])


def compute_statistics(log: FlightLog) -> dict:
    """
    Compute summary statistics from a flight log.

    Returns:
        Dictionary with:
        - alt_rmse: RMS altitude error against the target [m]
        - max_alt_error: Maximum altitude error [m]
        - max_tilt_deg: Maximum tilt [deg]
        - mean_lift: Mean lift per rotor [N]
        - max_torque: Maximum torque command magnitude [rad/s²]
        - duration: Logged time span [s]
    """
    n = len(log)
    if n == 0:
        return {
            "alt_rmse": 0.0,
            "max_alt_error": 0.0,
            "max_tilt_deg": 0.0,
            "mean_lift": 0.0,
            "max_torque": 0.0,
            "duration": 0.0,
        }

    alt_err = log.target_y[:n] - log.p[:n, 1]
    return {
        "alt_rmse": float(np.sqrt(np.mean(alt_err ** 2))),
        "max_alt_error": float(np.max(np.abs(alt_err))),
        "max_tilt_deg": float(np.max(log.tilt_deg())),
        "mean_lift": float(np.mean(log.lift_per_point[:n])),
        "max_torque": float(np.max(np.linalg.norm(log.torque[:n], axis=1))),
        "duration": float(log.t[n - 1] - log.t[0]),
    }


def print_statistics(log: FlightLog, name: str = "Flight") -> None:
    """Print summary statistics to console."""
    stats = compute_statistics(log)

    print(f"\n{name} Statistics:")
    print(f"  Duration:        {stats['duration']:.2f} s")
    print(f"  Altitude RMSE:   {stats['alt_rmse']*1000:.1f} mm")
    print(f"  Max alt error:   {stats['max_alt_error']*1000:.1f} mm")
    print(f"  Max tilt:        {stats['max_tilt_deg']:.2f} deg")
    print(f"  Mean lift/rotor: {stats['mean_lift']:.3f} N")
    print(f"  Max torque:      {stats['max_torque']:.3f} rad/s²")
