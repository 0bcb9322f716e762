"""
Episode manager: the RL interaction contract around the flight controller.

One decision step is ``act(action)`` → (physics ticks, driven elsewhere) →
``evaluate(dt)`` → ``observe()``. The manager owns goal selection, reward
shaping and termination; the physics and the learner are external.

State machine::

    IDLE --reset--> RUNNING --terminal outcome--> TERMINATED --reset--> RUNNING
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Tuple

import numpy as np
from numpy.typing import NDArray

from hoverpilot.rigid_body import RigidBody
from hoverpilot.controller import FlightController
from hoverpilot.collision import CollisionTracker
from hoverpilot.goals import GoalProvider
from hoverpilot.math3d import quat_from_yaw, safe_normalize, tilt_angle, UP


OBS_DIM = 13
# Layout (all in body frame):
#   [0:3]   goal position relative to the vehicle
#   [3:6]   linear velocity
#   [6:9]   angular velocity
#   [9]     altitude error (target_y - y)
#   [10:13] world up (tilt sensing)

ACTION_DIM = 3
# [roll, pitch, climb], each in [-1, 1]


class Phase(Enum):
    IDLE = "idle"
    RUNNING = "running"
    TERMINATED = "terminated"


@dataclass
class EpisodeConfig:
    """Reward shaping and termination settings.

    Start / goal
    ------------
    start_center, start_half_extents : box the start position is drawn from.

    Success
    -------
    success_radius [m], success_speed [m/s], success_tilt_deg [deg]

    Failure
    -------
    max_tilt_deg : tilt beyond this ends the episode.
    min_altitude : flying below this ends the episode [m].
    max_episode_time : timeout [s].
    stall_timeout : seconds without a new best distance (<= 0 disables).
    stall_margin : improvement over the best distance that resets the stall timer [m].

    Reward
    ------
    k_progress : per metre of distance closed.
    k_align : times dot(forward heading, direction to goal).
    step_cost : subtracted every decision step.
    success_reward, failure_reward : terminal rewards.
    k_collision : per m/s of impact speed.
    hard_crash_speed : impacts at or above this end the episode [m/s].
    crash_penalty : extra penalty on a hard crash.
    collision_cooldown : minimum time between two collision penalties [s].
    """

    # Start
    start_center: Tuple[float, float, float] = (0.0, 4.0, 0.0)
    start_half_extents: Tuple[float, float, float] = (5.0, 2.0, 5.0)

    # Success
    success_radius: float = 1.0
    success_speed: float = 0.5
    success_tilt_deg: float = 10.0

    # Failure
    max_tilt_deg: float = 45.0
    min_altitude: float = 0.2
    max_episode_time: float = 30.0
    stall_timeout: float = 8.0
    stall_margin: float = 0.1

    # Reward
    k_progress: float = 1.0
    k_align: float = 0.01
    step_cost: float = 0.001
    success_reward: float = 2.0
    failure_reward: float = -1.0
    k_collision: float = 0.1
    hard_crash_speed: float = 6.0
    crash_penalty: float = 1.0
    collision_cooldown: float = 0.5

    def __post_init__(self) -> None:
        if self.max_episode_time <= 0:
            raise ValueError("max_episode_time must be positive")
        if self.success_radius <= 0:
            raise ValueError("success_radius must be positive")
        if any(h < 0 for h in self.start_half_extents):
            raise ValueError("start_half_extents must be non-negative")
        self.start_center = tuple(float(x) for x in self.start_center)
        self.start_half_extents = tuple(float(x) for x in self.start_half_extents)


@dataclass
class EpisodeState:
    """Per-episode bookkeeping."""

    elapsed_time: float = 0.0
    best_distance: float = 0.0
    no_improvement_time: float = 0.0
    previous_distance: float = 0.0
    steps: int = 0
    total_reward: float = 0.0
    collisions: int = 0
    term_reason: str = ""


@dataclass
class StepOutcome:
    """Result of :meth:`EpisodeManager.evaluate`."""

    reward: float
    terminated: bool
    term_reason: str = ""
    info: Dict[str, Any] = field(default_factory=dict)


class EpisodeManager:
    """
    Parameters
    ----------
    body : RigidBody
        Vehicle handle (shared with the physics world and controller).
    controller : FlightController
        Receives actions through its command surface.
    goals : GoalProvider
        Supplies the goal at each reset.
    collisions : CollisionTracker
        Buffer filled by the physics collision callback.
    config : EpisodeConfig, optional
    """

    def __init__(
        self,
        body: RigidBody,
        controller: FlightController,
        goals: GoalProvider,
        collisions: CollisionTracker,
        config: Optional[EpisodeConfig] = None,
    ):
        self.body = body
        self.controller = controller
        self.goals = goals
        self.collisions = collisions
        self.cfg = config or EpisodeConfig()

        self.phase = Phase.IDLE
        self.state = EpisodeState()
        self.goal = np.zeros(3)

    # ------------------------------------------------------------------
    # Geometry helpers
    # ------------------------------------------------------------------

    @property
    def distance_to_goal(self) -> float:
        return float(np.linalg.norm(self.goal - self.body.position))

    def alignment(self) -> float:
        """Dot of horizontal forward heading and horizontal direction to goal."""
        fwd = self.body.forward.copy()
        to_goal = self.goal - self.body.position
        fwd[1] = 0.0
        to_goal[1] = 0.0
        zero = np.zeros(3)
        return float(np.dot(safe_normalize(fwd, zero), safe_normalize(to_goal, zero)))

    # ------------------------------------------------------------------
    # Reset
    # ------------------------------------------------------------------

    def reset(self, rng: np.random.Generator) -> NDArray[np.float32]:
        """Start a new episode and return its first observation."""
        cfg = self.cfg

        self.body.stop()
        self.body.clear_forces()
        center = np.asarray(cfg.start_center)
        half = np.asarray(cfg.start_half_extents)
        start = center + rng.uniform(-half, half)
        yaw = float(rng.uniform(0.0, 2.0 * np.pi))
        self.body.teleport(start, quat_from_yaw(yaw))

        self.goal = np.asarray(self.goals.next_goal(rng), dtype=np.float64)

        self.controller.set_target_y(float(start[1]))
        self.controller.clear_command()
        self.collisions.reset()

        dist = self.distance_to_goal
        self.state = EpisodeState(
            elapsed_time=0.0,
            best_distance=dist,
            no_improvement_time=0.0,
            previous_distance=dist,
        )
        self.phase = Phase.RUNNING
        return self.observe()

    # ------------------------------------------------------------------
    # Observation
    # ------------------------------------------------------------------

    def observe(self) -> NDArray[np.float32]:
        body = self.body
        obs = np.concatenate([
            body.inverse_transform_point(self.goal),           # 3
            body.inverse_transform_direction(body.state.v),    # 3
            body.state.w_body,                                 # 3
            [self.controller.target_y - body.position[1]],     # 1
            body.inverse_transform_direction(UP),              # 3
        ]).astype(np.float32)
        return obs

    # ------------------------------------------------------------------
    # Action
    # ------------------------------------------------------------------

    def act(self, action) -> NDArray[np.float64]:
        """Write a [roll, pitch, climb] action into the controller's command."""
        self._require_running()
        a = np.asarray(action, dtype=np.float64)
        if a.shape != (ACTION_DIM,):
            raise ValueError(
                f"Expected action of shape ({ACTION_DIM},), got {a.shape}"
            )
        if not np.all(np.isfinite(a)):
            raise ValueError(f"Action contains non-finite values: {a}")
        a = np.clip(a, -1.0, 1.0)
        self.controller.set_command(a[0:2], a[2])
        return a

    # ------------------------------------------------------------------
    # Reward / termination
    # ------------------------------------------------------------------

    def evaluate(self, dt: float) -> StepOutcome:
        """Score the decision step that just elapsed (``dt`` seconds)."""
        self._require_running()
        cfg = self.cfg
        st = self.state
        body = self.body

        st.elapsed_time += dt
        st.steps += 1

        if not body.state.is_finite():
            reward = cfg.failure_reward
            st.total_reward += reward
            st.term_reason = "diverged"
            self.phase = Phase.TERMINATED
            return StepOutcome(reward=float(reward), terminated=True,
                               term_reason="diverged",
                               info={"elapsed_time": st.elapsed_time,
                                     "total_reward": st.total_reward})

        dist = self.distance_to_goal
        reward = cfg.k_progress * (st.previous_distance - dist)
        reward += cfg.k_align * self.alignment()
        reward -= cfg.step_cost
        st.previous_distance = dist

        # Stall detection
        if dist < st.best_distance - cfg.stall_margin:
            st.best_distance = dist
            st.no_improvement_time = 0.0
        else:
            st.no_improvement_time += dt

        terminated = False
        reason = ""

        # Collisions; a hard crash is never held back by the cooldown
        impact_speed = 0.0
        pending = self.collisions.pending
        if pending is not None and pending.impact_speed >= cfg.hard_crash_speed:
            event = self.collisions.drain(st.elapsed_time)
        else:
            event = self.collisions.drain_if_cooldown_elapsed(st.elapsed_time)
        if event is not None:
            st.collisions += 1
            impact_speed = event.impact_speed
            reward -= cfg.k_collision * impact_speed
            if impact_speed >= cfg.hard_crash_speed:
                reward -= cfg.crash_penalty
                terminated = True
                reason = "crash"

        speed = float(np.linalg.norm(body.state.v))
        tilt_deg = float(np.degrees(tilt_angle(body.state.q)))

        if not terminated:
            if (
                dist < cfg.success_radius
                and speed < cfg.success_speed
                and tilt_deg < cfg.success_tilt_deg
            ):
                reward += cfg.success_reward
                terminated = True
                reason = "success"
            else:
                reason = self._failure_reason(tilt_deg)
                if reason:
                    reward += cfg.failure_reward
                    terminated = True

        st.total_reward += reward
        if terminated:
            st.term_reason = reason
            self.phase = Phase.TERMINATED

        info = {
            "elapsed_time": st.elapsed_time,
            "distance": dist,
            "best_distance": st.best_distance,
            "no_improvement_time": st.no_improvement_time,
            "speed": speed,
            "tilt_deg": tilt_deg,
            "impact_speed": impact_speed,
            "collisions": st.collisions,
            "total_reward": st.total_reward,
        }
        return StepOutcome(reward=float(reward), terminated=terminated,
                           term_reason=reason, info=info)

    def _failure_reason(self, tilt_deg: float) -> str:
        cfg = self.cfg
        st = self.state
        if tilt_deg > cfg.max_tilt_deg:
            return "tilt"
        if self.body.position[1] < cfg.min_altitude:
            return "floor"
        # Tolerance absorbs float accumulation of elapsed_time
        if st.elapsed_time >= cfg.max_episode_time - 1e-9:
            return "timeout"
        if cfg.stall_timeout > 0 and st.no_improvement_time >= cfg.stall_timeout - 1e-9:
            return "stall"
        return ""

    def _require_running(self) -> None:
        if self.phase is not Phase.RUNNING:
            raise RuntimeError(
                f"Episode is {self.phase.value}; call reset() before stepping"
            )
