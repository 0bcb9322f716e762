"""
Reproducible configuration for RL training and evaluation.

Provides dataclass containers and an ``argparse``-based loader so that
every run can be reconstructed from a single JSON file.
"""

from __future__ import annotations

import argparse
import json
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Tuple

from hoverpilot.envs.hover_nav_env import EnvConfig
from hoverpilot.goals import porch_goals, ring_goals


GOAL_SETS = ("porch", "ring", "random")


# ---------------------------------------------------------------------------
# PPO hyper-parameters
# ---------------------------------------------------------------------------

@dataclass
class PPOConfig:
    """Stable-Baselines3 PPO hyper-parameters."""

    policy: str = "MlpPolicy"
    total_timesteps: int = 500_000
    learning_rate: float = 3e-4
    n_steps: int = 2048
    batch_size: int = 64
    n_epochs: int = 10
    gamma: float = 0.99
    gae_lambda: float = 0.95
    clip_range: float = 0.2
    ent_coef: float = 0.0
    vf_coef: float = 0.5
    max_grad_norm: float = 0.5
    policy_kwargs: Dict[str, Any] = field(
        default_factory=lambda: {"net_arch": dict(pi=[64, 64], vf=[64, 64])}
    )

    # Callbacks
    eval_freq: int = 10_000          # steps between eval rounds
    n_eval_episodes: int = 5
    checkpoint_freq: int = 50_000    # steps between checkpoint saves


# ---------------------------------------------------------------------------
# Run meta-configuration
# ---------------------------------------------------------------------------

@dataclass
class RunConfig:
    """Paths, device, parallelism, seed."""

    seed: int = 0
    log_dir: str = "runs"
    model_dir: str = "models"
    results_dir: str = "results_rl"
    device: str = "auto"
    num_envs: int = 1
    run_name: str = ""               # auto-generated if empty
    verbose: int = 1


# ---------------------------------------------------------------------------
# Composite config
# ---------------------------------------------------------------------------

@dataclass
class FullConfig:
    env: EnvConfig = field(default_factory=EnvConfig)
    ppo: PPOConfig = field(default_factory=PPOConfig)
    run: RunConfig = field(default_factory=RunConfig)


# ---------------------------------------------------------------------------
# Serialisation helpers
# ---------------------------------------------------------------------------

def config_to_dict(cfg: FullConfig) -> Dict[str, Any]:
    return asdict(cfg)


def config_from_dict(data: Dict[str, Any]) -> FullConfig:
    """Inverse of :func:`config_to_dict`; missing sections keep defaults."""
    return FullConfig(
        env=EnvConfig(**data.get("env", {})),
        ppo=PPOConfig(**data.get("ppo", {})),
        run=RunConfig(**data.get("run", {})),
    )


def save_config(cfg: FullConfig, path: str | Path) -> None:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w") as f:
        json.dump(config_to_dict(cfg), f, indent=2)


def load_config(path: str | Path) -> FullConfig:
    with open(path) as f:
        return config_from_dict(json.load(f))


def goal_waypoints(name: str) -> List[Tuple[float, float, float]]:
    """Waypoint list for a named goal set (``random`` gives an empty list)."""
    if name == "porch":
        provider = porch_goals()
    elif name == "ring":
        provider = ring_goals()
    elif name == "random":
        return []
    else:
        raise ValueError(f"Unknown goal set '{name}'. Choose from {list(GOAL_SETS)}")
    return [tuple(float(c) for c in wp) for wp in provider.waypoints]


# ---------------------------------------------------------------------------
# Argparse loader
# ---------------------------------------------------------------------------

def _add_env_args(parser: argparse.ArgumentParser) -> None:
    g = parser.add_argument_group("Environment")
    g.add_argument("--goals", type=str, default=None, choices=GOAL_SETS)
    g.add_argument("--dt-sim", type=float, default=None)
    g.add_argument("--control-decimation", type=int, default=None)
    g.add_argument("--max-episode-time", type=float, default=None)
    g.add_argument("--stall-timeout", type=float, default=None)
    g.add_argument("--success-radius", type=float, default=None)
    g.add_argument("--wind", action="store_true", default=None,
                   help="Enable mean wind + gusts")


def _add_ppo_args(parser: argparse.ArgumentParser) -> None:
    g = parser.add_argument_group("PPO")
    g.add_argument("--total-timesteps", type=int, default=None)
    g.add_argument("--learning-rate", type=float, default=None)
    g.add_argument("--n-steps", type=int, default=None)
    g.add_argument("--batch-size", type=int, default=None)
    g.add_argument("--n-epochs", type=int, default=None)
    g.add_argument("--gamma", type=float, default=None)
    g.add_argument("--gae-lambda", type=float, default=None)
    g.add_argument("--clip-range", type=float, default=None)
    g.add_argument("--ent-coef", type=float, default=None)
    g.add_argument("--eval-freq", type=int, default=None)
    g.add_argument("--n-eval-episodes", type=int, default=None)
    g.add_argument("--checkpoint-freq", type=int, default=None)


def _add_run_args(parser: argparse.ArgumentParser) -> None:
    g = parser.add_argument_group("Run")
    g.add_argument("--config", type=str, default=None,
                   help="JSON config to start from (CLI flags override it)")
    g.add_argument("--seed", type=int, default=None)
    g.add_argument("--log-dir", type=str, default=None)
    g.add_argument("--model-dir", type=str, default=None)
    g.add_argument("--results-dir", type=str, default=None)
    g.add_argument("--device", type=str, default=None)
    g.add_argument("--num-envs", type=int, default=None)
    g.add_argument("--run-name", type=str, default=None)
    g.add_argument("--verbose", type=int, default=None)


def _apply_overrides(dc: object, ns: argparse.Namespace, keys: List[str]) -> None:
    """Apply non-None argparse values to the dataclass."""
    for key in keys:
        val = getattr(ns, key, None)
        if val is not None:
            setattr(dc, key, val)


def apply_args(cfg: FullConfig, args: argparse.Namespace, include_ppo: bool = True) -> FullConfig:
    """Overlay parsed CLI flags onto ``cfg`` in place and return it."""
    # --- env overrides ---
    _apply_overrides(cfg.env, args, ["dt_sim", "control_decimation"])
    _apply_overrides(cfg.env.episode, args,
                     ["max_episode_time", "stall_timeout", "success_radius"])
    if getattr(args, "goals", None) is not None:
        cfg.env.goal_waypoints = goal_waypoints(args.goals)
    if getattr(args, "wind", None):
        cfg.env.wind.enabled = True

    # --- ppo overrides ---
    if include_ppo:
        ppo_keys = [
            "total_timesteps", "learning_rate", "n_steps", "batch_size",
            "n_epochs", "gamma", "gae_lambda", "clip_range", "ent_coef",
            "eval_freq", "n_eval_episodes", "checkpoint_freq",
        ]
        _apply_overrides(cfg.ppo, args, ppo_keys)

    # --- run overrides ---
    run_keys = [
        "seed", "log_dir", "model_dir", "results_dir", "device",
        "num_envs", "run_name", "verbose",
    ]
    _apply_overrides(cfg.run, args, run_keys)
    return cfg


def build_parser(description: str, include_ppo: bool = True) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description=description)
    _add_env_args(parser)
    if include_ppo:
        _add_ppo_args(parser)
    _add_run_args(parser)
    return parser


def load_config_from_args(
    description: str = "Hover navigation RL",
    include_ppo: bool = True,
    parser: argparse.ArgumentParser | None = None,
    argv: List[str] | None = None,
) -> Tuple[FullConfig, argparse.Namespace]:
    """Build a :class:`FullConfig` from defaults (or ``--config``) + CLI overrides.

    Returns
    -------
    cfg : FullConfig
    args : argparse.Namespace  (raw, for any extra flags the caller added)
    """
    parser = parser or build_parser(description, include_ppo)
    args = parser.parse_args(argv)

    cfg = load_config(args.config) if args.config else FullConfig()
    if not args.config and args.goals is None:
        cfg.env.goal_waypoints = goal_waypoints("porch")
    apply_args(cfg, args, include_ppo)
    return cfg, args
