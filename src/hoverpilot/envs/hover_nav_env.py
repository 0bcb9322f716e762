"""
Gymnasium environment around the flight core.

The policy outputs ``[roll, pitch, climb]`` in [-1, 1] each decision step.
These are written onto the flight controller's command surface; the
altitude PID, attitude stabilizer and rigid-body physics run underneath at
the physics rate. Reward and termination come from :class:`EpisodeManager`.
"""

from __future__ import annotations

import sys
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

import numpy as np
from numpy.typing import NDArray

import gymnasium as gym
from gymnasium import spaces

from hoverpilot.params import FlightParams
from hoverpilot.disturbances import WindParams, WindField
from hoverpilot.dynamics import SphereObstacle
from hoverpilot.episode import EpisodeConfig, EpisodeManager, OBS_DIM, ACTION_DIM
from hoverpilot.goals import GoalProvider
from hoverpilot.sim import FlightLoop, build_vehicle


# ---------------------------------------------------------------------------
# Environment config (plain dataclass so it stays JSON-friendly)
# ---------------------------------------------------------------------------

@dataclass
class EnvConfig:
    """Configuration for :class:`HoverNavEnv`.

    Timing
    ------
    dt_sim : float
        Physics timestep [s].
    control_decimation : int
        Physics steps per env step (action held constant).

    World
    -----
    obstacles : list of (x, y, z, radius)
        Static sphere obstacles.
    goal_waypoints : list of (x, y, z)
        Ordered goals cycled across episodes; empty means random goals.

    Misc
    ----
    render_every : int
        Print a status line every N env steps when render_mode="human".
    """

    # Timing
    dt_sim: float = 0.02
    control_decimation: int = 5          # dt_control = 0.1 s = 10 Hz

    # World
    obstacles: List[Tuple[float, float, float, float]] = field(default_factory=list)
    goal_waypoints: List[Tuple[float, float, float]] = field(default_factory=list)

    # Nested configs
    flight: FlightParams = field(default_factory=FlightParams)
    episode: EpisodeConfig = field(default_factory=EpisodeConfig)
    wind: WindParams = field(default_factory=WindParams)

    # Misc
    render_every: int = 50

    def __post_init__(self) -> None:
        if self.dt_sim <= 0:
            raise ValueError("dt_sim must be positive")
        if self.control_decimation < 1:
            raise ValueError("control_decimation must be >= 1")
        # Allow construction from plain dicts (JSON configs)
        if isinstance(self.flight, dict):
            self.flight = FlightParams(**self.flight)
        if isinstance(self.episode, dict):
            self.episode = EpisodeConfig(**self.episode)
        if isinstance(self.wind, dict):
            self.wind = WindParams(**self.wind)


def _obs_space() -> spaces.Box:
    hi = np.full(OBS_DIM, 500.0, dtype=np.float32)  # generous bounds
    return spaces.Box(low=-hi, high=hi, dtype=np.float32)


# ---------------------------------------------------------------------------
# HoverNavEnv
# ---------------------------------------------------------------------------

class HoverNavEnv(gym.Env):
    """Gymnasium environment for goal-reaching with the hover stabilizer.

    Parameters
    ----------
    config : EnvConfig, optional
        Environment configuration.
    goals : GoalProvider, optional
        Overrides ``config.goal_waypoints``.
    render_mode : str, optional
        ``"human"`` prints periodic status lines; ``"ansi"`` returns a string.
    """

    metadata = {"render_modes": ["human", "ansi"], "render_fps": 10}

    def __init__(
        self,
        config: Optional[EnvConfig] = None,
        goals: Optional[GoalProvider] = None,
        render_mode: Optional[str] = None,
    ):
        super().__init__()

        self.cfg = config or EnvConfig()
        self.render_mode = render_mode

        if goals is None:
            goals = GoalProvider(waypoints=self.cfg.goal_waypoints or None)
        if goals.uses_fallback:
            print("[HoverNavEnv] No goal waypoints configured; using random goals.",
                  file=sys.stderr)

        self.wind = WindField(self.cfg.wind)
        obstacles = [SphereObstacle(center=tuple(o[:3]), radius=float(o[3]))
                     for o in self.cfg.obstacles]
        vehicle = build_vehicle(
            self.cfg.flight,
            start_position=self.cfg.episode.start_center,
            environment=self.wind,
            obstacles=obstacles,
            collision_cooldown=self.cfg.episode.collision_cooldown,
        )
        self.body = vehicle.body
        self.world = vehicle.world
        self.controller = vehicle.controller
        self.manager = EpisodeManager(
            self.body, self.controller, goals, vehicle.collisions, self.cfg.episode,
        )
        self.loop = FlightLoop(
            self.world, self.controller, self.manager,
            dt=self.cfg.dt_sim, decimation=self.cfg.control_decimation,
        )

        self.observation_space = _obs_space()
        self.action_space = spaces.Box(
            low=-1.0, high=1.0, shape=(ACTION_DIM,), dtype=np.float32,
        )

    # ------------------------------------------------------------------
    # reset
    # ------------------------------------------------------------------

    def reset(
        self,
        *,
        seed: Optional[int] = None,
        options: Optional[Dict[str, Any]] = None,
    ) -> Tuple[NDArray[np.float32], Dict[str, Any]]:
        super().reset(seed=seed)
        rng = self.np_random

        self.wind.reset(np.random.default_rng(int(rng.integers(0, 2**31))))
        obs = self.loop.reset(rng)
        return obs, self._info()

    # ------------------------------------------------------------------
    # step
    # ------------------------------------------------------------------

    def step(
        self, action: NDArray[np.float32],
    ) -> Tuple[NDArray[np.float32], float, bool, bool, Dict[str, Any]]:
        result = self.loop.decision_step(action)

        info = self._info()
        info.update(result.info)
        info["term_reason"] = result.term_reason

        if self.render_mode == "human" and (
            self.manager.state.steps % self.cfg.render_every == 0
            or result.terminated
        ):
            self._render_human()

        return result.obs, float(result.reward), result.terminated, False, info

    # ------------------------------------------------------------------
    # render / close
    # ------------------------------------------------------------------

    def render(self) -> Optional[str]:
        if self.render_mode == "ansi":
            return self._render_ansi()
        elif self.render_mode == "human":
            self._render_human()
        return None

    def close(self) -> None:
        pass  # no resources to clean up

    # ==================================================================
    # Internal helpers
    # ==================================================================

    def _info(self) -> Dict[str, Any]:
        st = self.manager.state
        return {
            "sim_time": self.world.time,
            "step_count": st.steps,
            "elapsed_time": st.elapsed_time,
            "total_reward": st.total_reward,
            "dist_to_goal": self.manager.distance_to_goal,
            "goal": self.manager.goal.copy(),
            "position": self.body.position.copy(),
            "target_y": self.controller.target_y,
            "phase": self.manager.phase.value,
        }

    def _render_human(self) -> None:
        info = self._info()
        pos = info["position"]
        print(
            f"[step {info['step_count']:5d}]  "
            f"t={info['elapsed_time']:6.2f}s  "
            f"pos=({pos[0]:+6.2f}, {pos[1]:+6.2f}, {pos[2]:+6.2f})  "
            f"target_y={info['target_y']:6.2f}  "
            f"dist={info['dist_to_goal']:.2f}m  "
            f"R={info['total_reward']:+8.3f}"
        )

    def _render_ansi(self) -> str:
        info = self._info()
        return (
            f"step={info['step_count']} "
            f"t={info['elapsed_time']:.2f} "
            f"pos={info['position']} "
            f"dist={info['dist_to_goal']:.2f} "
            f"R={info['total_reward']:.3f}"
        )
