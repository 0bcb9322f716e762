"""Tests for the HoverNavEnv Gymnasium wrapper."""

import numpy as np
import pytest

from hoverpilot.envs import HoverNavEnv, EnvConfig
from hoverpilot.episode import EpisodeConfig
from hoverpilot.goals import porch_goals


def _env(**episode_kwargs) -> HoverNavEnv:
    cfg = EnvConfig(episode=EpisodeConfig(**episode_kwargs))
    return HoverNavEnv(config=cfg, goals=porch_goals())


def test_spaces():
    env = _env()
    assert env.observation_space.shape == (13,)
    assert env.action_space.shape == (3,)
    assert np.all(env.action_space.low == -1.0)
    assert np.all(env.action_space.high == 1.0)


def test_reset_returns_valid_observation():
    env = _env()
    obs, info = env.reset(seed=0)
    assert obs.shape == (13,)
    assert obs.dtype == np.float32
    assert env.observation_space.contains(obs)
    assert info["step_count"] == 0
    assert info["phase"] == "running"


def test_step_contract():
    env = _env()
    env.reset(seed=0)
    obs, reward, terminated, truncated, info = env.step(np.zeros(3, dtype=np.float32))
    assert obs.shape == (13,)
    assert isinstance(reward, float)
    assert isinstance(terminated, bool)
    assert truncated is False
    assert "term_reason" in info
    assert info["step_count"] == 1
    assert info["sim_time"] == pytest.approx(0.1)


def test_zero_action_hovers_in_place():
    env = _env(stall_timeout=0.0)
    _obs, info = env.reset(seed=3)
    start = info["position"].copy()
    for _ in range(20):
        _obs, _r, terminated, _t, info = env.step(np.zeros(3, dtype=np.float32))
        assert not terminated
    np.testing.assert_allclose(info["position"], start, atol=0.05)


def test_episode_times_out():
    env = _env(max_episode_time=1.0, stall_timeout=0.0)
    env.reset(seed=0)
    steps = 0
    terminated = False
    info = {}
    while not terminated:
        _obs, _r, terminated, _t, info = env.step(np.zeros(3, dtype=np.float32))
        steps += 1
        assert steps <= 10
    assert steps == 10
    assert info["term_reason"] == "timeout"

    with pytest.raises(RuntimeError):
        env.step(np.zeros(3, dtype=np.float32))
    env.reset(seed=1)
    env.step(np.zeros(3, dtype=np.float32))


def test_bad_action_raises():
    env = _env()
    env.reset(seed=0)
    with pytest.raises(ValueError):
        env.step(np.zeros(2, dtype=np.float32))


def test_goals_cycle_across_resets():
    env = _env()
    _o, first = env.reset(seed=0)
    _o, second = env.reset(seed=0)
    assert not np.allclose(first["goal"], second["goal"])


def test_random_goals_warn(capsys):
    HoverNavEnv(config=EnvConfig())
    assert "random goals" in capsys.readouterr().err


def test_render_ansi():
    env = HoverNavEnv(config=EnvConfig(), goals=porch_goals(), render_mode="ansi")
    env.reset(seed=0)
    text = env.render()
    assert isinstance(text, str)
    assert "dist=" in text


def test_config_from_dicts():
    cfg = EnvConfig(flight={"kp": 30.0}, episode={"max_episode_time": 5.0}, wind={"enabled": True})
    assert cfg.flight.kp == 30.0
    assert cfg.episode.max_episode_time == 5.0
    assert cfg.wind.enabled
    with pytest.raises(ValueError):
        EnvConfig(control_decimation=0)
