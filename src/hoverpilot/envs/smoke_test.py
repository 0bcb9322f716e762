"""
Smoke test for the HoverNavEnv.

Run with::

    python -m hoverpilot.envs.smoke_test

Runs three short episodes (zero, random and goal-seeking policies) and
prints a summary for each. No plots, no GUI.
"""

from __future__ import annotations

import time

import numpy as np

from hoverpilot.envs.hover_nav_env import HoverNavEnv, EnvConfig
from hoverpilot.goals import porch_goals
from hoverpilot.rl.baselines import make_policy


def _run_episode(env: HoverNavEnv, policy: str, max_steps: int = 300) -> dict:
    """Run one episode and return a summary dict."""
    act = make_policy(policy, env)
    obs, info = env.reset(seed=0)

    total_reward = 0.0
    step = 0
    terminated = False

    for step in range(1, max_steps + 1):
        obs, reward, terminated, truncated, info = env.step(act(obs))
        total_reward += reward
        if terminated or truncated:
            break

    return {
        "policy": policy,
        "steps": step,
        "total_reward": total_reward,
        "terminated": terminated,
        "term_reason": info.get("term_reason", ""),
        "final_pos": info.get("position", np.zeros(3)),
        "final_dist": info.get("dist_to_goal", 0.0),
        "elapsed_time": info.get("elapsed_time", 0.0),
    }


def _print_summary(result: dict) -> None:
    print(f"\n{'=' * 55}")
    print(f"  Policy: {result['policy']}")
    print(f"{'=' * 55}")
    print(f"  Env steps       : {result['steps']}")
    print(f"  Episode time    : {result['elapsed_time']:.2f} s")
    print(f"  Total reward    : {result['total_reward']:+.3f}")
    print(f"  Final distance  : {result['final_dist']:.2f} m")
    print(f"  Terminated      : {result['terminated']}")
    print(f"  Reason          : {result['term_reason'] or 'n/a'}")
    pos = result["final_pos"]
    print(f"  Final position  : ({pos[0]:+.2f}, {pos[1]:+.2f}, {pos[2]:+.2f})")


def main() -> None:
    env = HoverNavEnv(config=EnvConfig(), goals=porch_goals(), render_mode="human")

    print("=" * 55)
    print("  HoverNavEnv Smoke Test")
    print("=" * 55)

    results = {}
    for policy in ("zero", "random", "seek"):
        t0 = time.monotonic()
        results[policy] = _run_episode(env, policy)
        wall = time.monotonic() - t0
        _print_summary(results[policy])
        print(f"  Wall-clock time : {wall:.2f} s")

    env.close()

    print("\n" + "=" * 55)
    ok = True
    if results["zero"]["term_reason"] in ("crash", "tilt", "floor", "diverged"):
        print(f"  [WARN] Zero-policy ended with '{results['zero']['term_reason']}'.")
        ok = False
    if results["seek"]["final_dist"] > results["zero"]["final_dist"]:
        print("  [WARN] Goal-seeking policy ended farther away than zero policy.")
    if ok:
        print("  [OK] Smoke test completed successfully.")
    else:
        print("  [WARN] Smoke test finished with warnings (see above).")
    print("=" * 55)


if __name__ == "__main__":
    main()
