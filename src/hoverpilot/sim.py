"""
Explicit two-rate scheduler and vehicle assembly.

The loop cadence is owned here rather than by engine callbacks:

    physics_step()            every dt:  controller → physics world → log
    decision_step(action)     every ``decimation`` physics steps:
                              act → physics ticks → evaluate → observe

Commands written by a decision step persist unchanged across the physics
ticks that follow it.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Sequence

import numpy as np
from numpy.typing import NDArray

from hoverpilot.types import RigidBodyState
from hoverpilot.params import FlightParams, default_params
from hoverpilot.rigid_body import RigidBody
from hoverpilot.dynamics import PhysicsWorld, SphereObstacle
from hoverpilot.disturbances import EnvironmentForces
from hoverpilot.controller import FlightController
from hoverpilot.collision import CollisionTracker
from hoverpilot.episode import EpisodeManager
from hoverpilot.log import FlightLog


# ---------------------------------------------------------------------------
# Assembly
# ---------------------------------------------------------------------------

@dataclass
class Vehicle:
    """Wired-up collaborators sharing one rigid body."""

    body: RigidBody
    world: PhysicsWorld
    controller: FlightController
    collisions: CollisionTracker


def build_vehicle(
    params: Optional[FlightParams] = None,
    start_position: Sequence[float] = (0.0, 5.0, 0.0),
    environment: Optional[EnvironmentForces] = None,
    obstacles: Sequence[SphereObstacle] = (),
    collision_cooldown: float = 0.5,
    start: bool = True,
) -> Vehicle:
    """
    Construct body, physics world, controller and collision buffer.

    Collaborators are passed explicitly; the collision buffer is subscribed
    to the world's impact notifications here, once.
    """
    params = params or default_params()
    body = RigidBody(
        RigidBodyState.at_rest(start_position, mass=params.mass),
        inertia_diag=params.inertia_diag,
    )
    world = PhysicsWorld(body, g=params.g, environment=environment, obstacles=obstacles)
    controller = FlightController(body, params)
    collisions = CollisionTracker(cooldown=collision_cooldown)
    world.add_collision_listener(collisions.record_impact)
    if start:
        controller.start()
    return Vehicle(body=body, world=world, controller=controller, collisions=collisions)


# ---------------------------------------------------------------------------
# Scheduler
# ---------------------------------------------------------------------------

@dataclass
class DecisionResult:
    obs: NDArray[np.float32]
    reward: float
    terminated: bool
    term_reason: str = ""
    info: Dict[str, Any] = field(default_factory=dict)


class FlightLoop:
    """
    Parameters
    ----------
    world : PhysicsWorld
    controller : FlightController
    manager : EpisodeManager, optional
        Needed only for :meth:`reset` / :meth:`decision_step`.
    dt : float
        Physics timestep [s].
    decimation : int
        Physics steps per decision step.
    log : FlightLog, optional
        Filled once per physics step.
    """

    def __init__(
        self,
        world: PhysicsWorld,
        controller: FlightController,
        manager: Optional[EpisodeManager] = None,
        dt: float = 0.02,
        decimation: int = 5,
        log: Optional[FlightLog] = None,
    ):
        if dt <= 0:
            raise ValueError(f"dt must be positive, got {dt}")
        if decimation < 1:
            raise ValueError(f"decimation must be >= 1, got {decimation}")
        self.world = world
        self.controller = controller
        self.manager = manager
        self.dt = dt
        self.decimation = decimation
        self.log = log

    @property
    def decision_dt(self) -> float:
        return self.dt * self.decimation

    def physics_step(self) -> None:
        output = self.controller.physics_step(self.dt)
        self.world.step(self.dt)
        if self.log is not None:
            self.log.record(self.world.time, self.world.body.state,
                            self.controller.target_y, output)

    def reset(self, rng: np.random.Generator) -> NDArray[np.float32]:
        if self.manager is None:
            raise RuntimeError("FlightLoop has no EpisodeManager")
        self.world.reset()
        return self.manager.reset(rng)

    def decision_step(self, action) -> DecisionResult:
        if self.manager is None:
            raise RuntimeError("FlightLoop has no EpisodeManager")
        self.manager.act(action)
        for _ in range(self.decimation):
            self.physics_step()
        outcome = self.manager.evaluate(self.decision_dt)
        return DecisionResult(
            obs=self.manager.observe(),
            reward=outcome.reward,
            terminated=outcome.terminated,
            term_reason=outcome.term_reason,
            info=outcome.info,
        )

    def run_commanded(
        self,
        duration: float,
        tilt_cmd: Sequence[float] = (0.0, 0.0),
        climb_cmd: float = 0.0,
    ) -> None:
        """Hold a fixed command for ``duration`` seconds of physics."""
        self.controller.set_command(np.asarray(tilt_cmd, dtype=np.float64), climb_cmd)
        n = int(round(duration / self.dt))
        for _ in range(n):
            self.physics_step()


# ---------------------------------------------------------------------------
# Scripted flights (no learner involved)
# ---------------------------------------------------------------------------

def run_hover_test(
    params: Optional[FlightParams] = None,
    hover_height: float = 5.0,
    start_height: float = 5.0,
    t_final: float = 5.0,
    dt: float = 0.02,
    environment: Optional[EnvironmentForces] = None,
) -> FlightLog:
    """
    Start at ``start_height`` and hold ``hover_height``.

    Returns:
        FlightLog
    """
    params = params or default_params()
    vehicle = build_vehicle(params, start_position=(0.0, start_height, 0.0),
                            environment=environment)
    vehicle.controller.set_target_y(hover_height)
    log = FlightLog.allocate(int(np.ceil(t_final / dt)) + 1)
    loop = FlightLoop(vehicle.world, vehicle.controller, dt=dt, log=log)
    loop.run_commanded(t_final)
    return log.trim()


def run_climb_test(
    params: Optional[FlightParams] = None,
    start_height: float = 2.0,
    climb_time: float = 2.0,
    settle_time: float = 6.0,
    dt: float = 0.02,
) -> FlightLog:
    """Full-scale climb command for ``climb_time`` seconds, then hold."""
    params = params or default_params()
    vehicle = build_vehicle(params, start_position=(0.0, start_height, 0.0))
    n = int(np.ceil((climb_time + settle_time) / dt)) + 1
    log = FlightLog.allocate(n)
    loop = FlightLoop(vehicle.world, vehicle.controller, dt=dt, log=log)
    loop.run_commanded(climb_time, climb_cmd=1.0)
    loop.run_commanded(settle_time, climb_cmd=0.0)
    return log.trim()


def run_tilt_test(
    params: Optional[FlightParams] = None,
    tilt_cmd: Sequence[float] = (0.0, 1.0),
    lean_time: float = 2.0,
    settle_time: float = 3.0,
    dt: float = 0.02,
) -> FlightLog:
    """Lean on a tilt command, then release it and let the vehicle level."""
    params = params or default_params()
    vehicle = build_vehicle(params, start_position=(0.0, 5.0, 0.0))
    n = int(np.ceil((lean_time + settle_time) / dt)) + 1
    log = FlightLog.allocate(n)
    loop = FlightLoop(vehicle.world, vehicle.controller, dt=dt, log=log)
    loop.run_commanded(lean_time, tilt_cmd=tilt_cmd)
    loop.run_commanded(settle_time)
    return log.trim()
