"""
PPO training for HoverNavEnv using Stable-Baselines3.

Usage::

    python -m hoverpilot.rl.train_ppo --goals porch --total-timesteps 300000 --seed 1
    python -m hoverpilot.rl.train_ppo --config models/run/config.json --num-envs 4

Logs are saved to ``runs/<run_name>/`` (TensorBoard) and model checkpoints
to ``models/<run_name>/``.
"""

from __future__ import annotations

import copy
import json
import time
from datetime import datetime
from pathlib import Path
from typing import Callable

import gymnasium as gym

from hoverpilot.envs.hover_nav_env import HoverNavEnv, EnvConfig
from hoverpilot.rl.baselines import run_baseline
from hoverpilot.rl.config import FullConfig, load_config_from_args, save_config


# ---------------------------------------------------------------------------
# Vectorised environment factory
# ---------------------------------------------------------------------------

def make_env(
    rank: int,
    seed: int,
    env_config: EnvConfig,
) -> Callable[[], gym.Env]:
    """Return a *thunk* that creates and seeds a single HoverNavEnv.

    Each env gets a unique seed ``seed + rank`` for determinism.
    """

    def _init() -> gym.Env:
        # One config copy per env
        env = HoverNavEnv(config=copy.deepcopy(env_config))
        env = gym.wrappers.ClipAction(env)
        env.reset(seed=seed + rank)
        return env

    return _init


# ---------------------------------------------------------------------------
# Main training routine
# ---------------------------------------------------------------------------

def train(cfg: FullConfig) -> Path:
    """Run PPO training and return the path to the saved model.

    Parameters
    ----------
    cfg : FullConfig
        Complete merged configuration.

    Returns
    -------
    Path
        Path to the final saved model (``.zip``).
    """
    # Lazy-import SB3 so the rest of the package doesn't need it
    try:
        from stable_baselines3 import PPO
        from stable_baselines3.common.callbacks import (
            CheckpointCallback,
            EvalCallback,
        )
        from stable_baselines3.common.vec_env import DummyVecEnv, VecMonitor
    except ImportError as exc:
        raise ImportError(
            "stable-baselines3 is required for training. Install with:\n"
            '  pip install -e ".[rl]"'
        ) from exc

    ec = cfg.env
    pc = cfg.ppo
    rc = cfg.run

    # --- Run name ---
    if not rc.run_name:
        ts = datetime.now().strftime("%Y%m%d_%H%M%S")
        rc.run_name = f"ppo_hover_seed{rc.seed}_{ts}"

    log_path = Path(rc.log_dir) / rc.run_name
    model_path = Path(rc.model_dir) / rc.run_name
    log_path.mkdir(parents=True, exist_ok=True)
    model_path.mkdir(parents=True, exist_ok=True)

    # --- Save config ---
    save_config(cfg, model_path / "config.json")

    # --- Vectorised training envs ---
    train_envs = VecMonitor(DummyVecEnv(
        [make_env(i, rc.seed, ec) for i in range(rc.num_envs)]
    ))

    # --- Eval env (single, separate seed range) ---
    eval_envs = VecMonitor(DummyVecEnv(
        [make_env(0, rc.seed + 1000, ec)]
    ))

    # --- Callbacks ---
    checkpoint_cb = CheckpointCallback(
        save_freq=max(pc.checkpoint_freq // rc.num_envs, 1),
        save_path=str(model_path),
        name_prefix="checkpoint",
        verbose=rc.verbose,
    )

    eval_cb = EvalCallback(
        eval_envs,
        best_model_save_path=str(model_path),
        log_path=str(log_path),
        eval_freq=max(pc.eval_freq // rc.num_envs, 1),
        n_eval_episodes=pc.n_eval_episodes,
        deterministic=True,
        verbose=rc.verbose,
    )

    # --- PPO model ---
    model = PPO(
        policy=pc.policy,
        env=train_envs,
        learning_rate=pc.learning_rate,
        n_steps=pc.n_steps,
        batch_size=pc.batch_size,
        n_epochs=pc.n_epochs,
        gamma=pc.gamma,
        gae_lambda=pc.gae_lambda,
        clip_range=pc.clip_range,
        ent_coef=pc.ent_coef,
        vf_coef=pc.vf_coef,
        max_grad_norm=pc.max_grad_norm,
        policy_kwargs=pc.policy_kwargs,
        tensorboard_log=str(log_path),
        seed=rc.seed,
        device=rc.device,
        verbose=rc.verbose,
    )

    if rc.verbose >= 1:
        # Zero-policy reference return
        baseline = run_baseline("zero", episodes=5, seed=rc.seed,
                                env_config=copy.deepcopy(ec),
                                results_dir=None, verbose=False)
        print(f"\n{'=' * 60}")
        print(f"  PPO Training: {rc.run_name}")
        print(f"{'=' * 60}")
        print(f"  Goals          : {len(ec.goal_waypoints) or 'random'}")
        print(f"  Wind           : {ec.wind.enabled}")
        print(f"  Seed           : {rc.seed}")
        print(f"  Num envs       : {rc.num_envs}")
        print(f"  Total timesteps: {pc.total_timesteps:,}")
        print(f"  Log dir        : {log_path}")
        print(f"  Model dir      : {model_path}")
        print(f"  Zero-policy R  : {baseline['return_mean']:+.3f} "
              f"± {baseline['return_std']:.3f}  ({baseline['episodes']} eps)")
        print(f"{'=' * 60}\n")

    # --- Train ---
    t0 = time.monotonic()
    model.learn(
        total_timesteps=pc.total_timesteps,
        callback=[checkpoint_cb, eval_cb],
        progress_bar=False,
    )
    wall_time = time.monotonic() - t0

    # --- Save final model ---
    final_model_path = model_path / "final_model"
    model.save(str(final_model_path))

    summary = {
        "run_name": rc.run_name,
        "total_timesteps": pc.total_timesteps,
        "wall_time_s": wall_time,
        "best_mean_reward": float(eval_cb.best_mean_reward),
        "final_model_path": str(final_model_path) + ".zip",
        "seed": rc.seed,
    }
    summary_path = model_path / "training_summary.json"
    with open(summary_path, "w") as f:
        json.dump(summary, f, indent=2)

    if rc.verbose >= 1:
        print(f"\n{'=' * 60}")
        print("  Training complete!")
        print(f"  Wall time      : {wall_time:.1f} s")
        print(f"  Best mean R    : {summary['best_mean_reward']:.3f}")
        print(f"  Final model    : {final_model_path}.zip")
        print(f"  Summary        : {summary_path}")
        print(f"{'=' * 60}")

    train_envs.close()
    eval_envs.close()

    return Path(str(final_model_path) + ".zip")


# ---------------------------------------------------------------------------
# CLI entry point
# ---------------------------------------------------------------------------

def main() -> None:
    cfg, _args = load_config_from_args(
        description="PPO training for HoverNavEnv",
        include_ppo=True,
    )
    train(cfg)


if __name__ == "__main__":
    main()
