"""
Baseline (non-learned) policy evaluation for HoverNavEnv.

Provides three baselines:
  * **zero**: action = 0 (stabilizer holds the start altitude, no lean)
  * **random**: uniform random actions in [-1, 1]
  * **seek**: hand-tuned PD steering toward the goal from the observation

Usage::

    python -m hoverpilot.rl.baselines --policy zero --episodes 10 --seed 1
    python -m hoverpilot.rl.baselines --policy seek --goals ring --episodes 10
"""

from __future__ import annotations

import collections
import json
import time
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

import numpy as np
from numpy.typing import NDArray

from hoverpilot.envs.hover_nav_env import HoverNavEnv, EnvConfig
from hoverpilot.rl.config import build_parser, apply_args, FullConfig, goal_waypoints


POLICIES = ("zero", "random", "seek")

_TRACE_TAIL_LEN = 50  # max env steps kept in the tail trace


def _rl(arr, n: int | None = None) -> list:
    """Convert ndarray to a rounded JSON-friendly list of floats."""
    a = np.asarray(arr, dtype=np.float64).ravel()
    if n is not None:
        a = a[:n]
    return [round(float(x), 6) for x in a]


# ---------------------------------------------------------------------------
# Policies
# ---------------------------------------------------------------------------

def seek_action(
    obs: NDArray[np.float32],
    kp: float = 0.25,
    kd: float = 0.6,
    kp_climb: float = 0.5,
) -> NDArray[np.float32]:
    """
    PD steering toward the goal using only the observation vector.

    Lean toward the body-frame goal offset, damped by body-frame velocity;
    ask for climb in proportion to the vertical offset.
    """
    rel = obs[0:3]
    vel = obs[3:6]
    roll = kp * rel[0] - kd * vel[0]
    pitch = kp * rel[2] - kd * vel[2]
    climb = kp_climb * rel[1]
    return np.clip(np.array([roll, pitch, climb], dtype=np.float32), -1.0, 1.0)


def make_policy(name: str, env: HoverNavEnv) -> Callable[[NDArray[np.float32]], NDArray[np.float32]]:
    if name == "zero":
        return lambda obs: np.zeros(env.action_space.shape, dtype=np.float32)
    if name == "random":
        return lambda obs: env.action_space.sample()
    if name == "seek":
        return seek_action
    raise ValueError(f"Unknown policy: {name}")


# ---------------------------------------------------------------------------
# Run a single episode
# ---------------------------------------------------------------------------

def run_episode(
    env: HoverNavEnv,
    policy: Callable[[NDArray[np.float32]], NDArray[np.float32]],
    seed: int,
) -> Dict[str, Any]:
    obs, info = env.reset(seed=seed)
    env.action_space.seed(seed)
    total_reward = 0.0
    steps = 0

    trace: collections.deque[Dict[str, Any]] = collections.deque(
        maxlen=_TRACE_TAIL_LEN,
    )

    while True:
        action = policy(obs)
        obs, reward, terminated, truncated, info = env.step(action)
        total_reward += reward
        steps += 1

        trace.append({
            "k": steps,
            "t": round(info["elapsed_time"], 6),
            "reward": round(float(reward), 6),
            "pos": _rl(info["position"]),
            "dist": round(float(info["dist_to_goal"]), 6),
            "action": _rl(action),
        })

        if terminated or truncated:
            break

    return {
        "seed": seed,
        "steps": steps,
        "total_reward": float(total_reward),
        "term_reason": info.get("term_reason", ""),
        "elapsed_time": float(info["elapsed_time"]),
        "collisions": int(info.get("collisions", 0)),
        "goal": _rl(info["goal"]),
        "final_pos": _rl(info["position"]),
        "final_dist": round(float(info["dist_to_goal"]), 6),
        "trace_tail": list(trace),
    }


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def summarize(policy_name: str, seed: int, results: List[Dict[str, Any]]) -> Dict[str, Any]:
    episodes = len(results)
    returns = [r["total_reward"] for r in results]
    lengths = [r["steps"] for r in results]
    reasons = collections.Counter(r["term_reason"] for r in results)
    return {
        "policy": policy_name,
        "episodes": episodes,
        "seed": seed,
        "return_mean": float(np.mean(returns)) if returns else 0.0,
        "return_std": float(np.std(returns)) if returns else 0.0,
        "success_rate": reasons.get("success", 0) / max(episodes, 1),
        "crash_rate": reasons.get("crash", 0) / max(episodes, 1),
        "term_reasons": dict(reasons),
        "mean_episode_length": float(np.mean(lengths)) if lengths else 0.0,
        "per_episode": results,
    }


def run_baseline(
    policy_name: str = "zero",
    episodes: int = 10,
    seed: int = 0,
    env_config: EnvConfig | None = None,
    results_dir: Optional[str] = "results_rl",
    verbose: bool = True,
) -> Dict[str, Any]:
    """Run *episodes* with the given baseline policy and report statistics.

    Parameters
    ----------
    policy_name : str
        ``"zero"``, ``"random"`` or ``"seek"``.
    episodes : int
        Number of evaluation episodes.
    seed : int
        Base seed (each episode gets ``seed + i``).
    env_config : EnvConfig, optional
        Environment configuration. Uses defaults if *None*.
    results_dir : str, optional
        Where to save the JSON summary; ``None`` skips saving.
    verbose : bool
        Print per-episode + aggregate info.

    Returns
    -------
    dict
        Aggregate statistics and per-episode results.
    """
    env = HoverNavEnv(config=env_config or EnvConfig())
    policy = make_policy(policy_name, env)

    results: List[Dict[str, Any]] = []
    t0 = time.monotonic()

    for i in range(episodes):
        ep_seed = seed + i
        res = run_episode(env, policy, ep_seed)
        results.append(res)
        if verbose:
            print(
                f"  Episode {i + 1:3d}/{episodes}  "
                f"seed={ep_seed}  steps={res['steps']:5d}  "
                f"R={res['total_reward']:+8.2f}  "
                f"dist={res['final_dist']:6.2f}  "
                f"reason={res['term_reason']}"
            )

    env.close()
    summary = summarize(policy_name, seed, results)
    summary["wall_time_s"] = time.monotonic() - t0

    if verbose:
        print(f"\n{'=' * 55}")
        print(f"  Baseline: {policy_name}  ({episodes} episodes)")
        print(f"{'=' * 55}")
        print(f"  Return        : {summary['return_mean']:+.2f} ± {summary['return_std']:.2f}")
        print(f"  Success rate  : {summary['success_rate']:.1%}")
        print(f"  Crash rate    : {summary['crash_rate']:.1%}")
        print(f"  End reasons   : {summary['term_reasons']}")
        print(f"  Mean ep length: {summary['mean_episode_length']:.0f} steps")
        print(f"  Wall time     : {summary['wall_time_s']:.2f} s")
        print(f"{'=' * 55}")

    if results_dir is not None:
        out_dir = Path(results_dir)
        out_dir.mkdir(parents=True, exist_ok=True)
        out_path = out_dir / f"baseline_{policy_name}_seed{seed}.json"
        with open(out_path, "w") as f:
            json.dump(summary, f, indent=2)
        if verbose:
            print(f"  Results saved to {out_path}")

    return summary


# ---------------------------------------------------------------------------
# CLI entry point
# ---------------------------------------------------------------------------

def main() -> None:
    parser = build_parser("Baseline policy evaluation", include_ppo=False)
    parser.add_argument("--policy", type=str, default="zero", choices=POLICIES)
    parser.add_argument("--episodes", type=int, default=10)
    args = parser.parse_args()

    cfg = FullConfig()
    if args.goals is None:
        cfg.env.goal_waypoints = goal_waypoints("porch")
    apply_args(cfg, args, include_ppo=False)

    run_baseline(
        policy_name=args.policy,
        episodes=args.episodes,
        seed=cfg.run.seed,
        env_config=cfg.env,
        results_dir=cfg.run.results_dir,
        verbose=True,
    )


if __name__ == "__main__":
    main()
