"""
Flight controller: altitude PID + attitude stabilizer on one rigid body.

Every physics step the controller

1. nudges the altitude target by the climb command,
2. runs the altitude PID and applies the resulting lift along body-up at
   each lift point (not at the centre of mass, so lift asymmetry couples
   into attitude through the rigid-body dynamics),
3. runs the attitude stabilizer for the tilt command and applies the result
   as an acceleration-mode torque.

If the body or lift points are missing, or :meth:`start` has not been
called, a step does nothing. The controller never raises from inside the
physics loop.
"""

from typing import Optional, Sequence

import numpy as np
from numpy.typing import NDArray

from hoverpilot.types import AttitudeCommand, ControlOutput
from hoverpilot.params import FlightParams, default_params
from hoverpilot.rigid_body import RigidBody, ForceMode
from hoverpilot.altitude_pid import AltitudePID, distribute_lift
from hoverpilot.attitude import AttitudeStabilizer


class FlightController:
    """
    Parameters
    ----------
    body : RigidBody, optional
        Vehicle handle. ``None`` leaves the controller idle.
    params : FlightParams, optional
        Gains, limits and airframe description.
    lift_points : sequence of (3,) arrays, optional
        Rotor positions in body frame. Defaults to ``params.lift_points``.
    """

    def __init__(
        self,
        body: Optional[RigidBody],
        params: Optional[FlightParams] = None,
        lift_points: Optional[Sequence[Sequence[float]]] = None,
    ):
        self.body = body
        self.params = params or default_params()
        points = self.params.lift_points if lift_points is None else lift_points
        self.lift_points = [np.asarray(lp, dtype=np.float64) for lp in points]

        self.pid = AltitudePID.from_params(self.params)
        self.stabilizer = AttitudeStabilizer.from_params(self.params)
        self.command = AttitudeCommand()

        self.ready = False
        self.last_output: Optional[ControlOutput] = None

    # ------------------------------------------------------------------
    # Read-only surface for loggers
    # ------------------------------------------------------------------

    @property
    def target_y(self) -> float:
        return self.pid.target_y

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self) -> None:
        """
        One-time start sequence: lower the centre of mass, capture the
        altitude target if requested, and arm the controller.
        """
        if self.body is None:
            return
        self.body.center_of_mass = self.body.center_of_mass + np.array(
            [0.0, -self.params.com_drop, 0.0]
        )
        y = float(self.body.position[1])
        if self.params.lock_target_at_start or np.isclose(self.pid.target_y, 0.0):
            self.pid.target_y = y
        self.pid.reset(y)
        self.ready = True

    def set_target_y(self, target_y: float) -> None:
        """Move the altitude target and clear PID memory to avoid a bump."""
        measurement = None if self.body is None else float(self.body.position[1])
        self.pid.set_target(target_y, measurement)

    def set_command(self, tilt_cmd: NDArray[np.float64], climb_cmd: float) -> None:
        self.command.tilt_cmd = np.clip(np.asarray(tilt_cmd, dtype=np.float64), -1.0, 1.0)
        self.command.climb_cmd = float(np.clip(climb_cmd, -1.0, 1.0))

    def clear_command(self) -> None:
        self.command.clear()

    # ------------------------------------------------------------------
    # Physics step
    # ------------------------------------------------------------------

    def physics_step(self, dt: float) -> Optional[ControlOutput]:
        """Apply one tick of lift and torque; ``None`` when idle."""
        body = self.body
        if body is None or not self.lift_points or not self.ready or dt <= 0:
            return None

        p = self.params

        # 1) Climb command moves the target continuously
        self.pid.target_y += float(np.clip(self.command.climb_cmd, -1.0, 1.0)) * p.climb_rate * dt

        # 2) Altitude PID -> lift at each rotor
        extra = self.pid.update(float(body.position[1]), dt)
        per_point = distribute_lift(body.mass, p.g, extra, len(self.lift_points))
        lift = body.up * per_point
        for lp in self.lift_points:
            body.add_force_at_position(lift, body.transform_point(lp))

        # 3) Attitude stabilizer
        torque = self.stabilizer.compute(
            body.state.q, body.angular_velocity, self.command.tilt_cmd,
        )
        body.add_torque(torque, ForceMode.ACCELERATION)

        self.last_output = ControlOutput(
            extra_force=extra,
            lift_per_point=per_point,
            n_points=len(self.lift_points),
            torque=torque,
            target_y=self.pid.target_y,
        )
        return self.last_output
