"""
Gymnasium environments for the hover-navigation task.

Requires the ``gymnasium`` dependency::

    pip install gymnasium
"""

from hoverpilot.envs.hover_nav_env import HoverNavEnv, EnvConfig

__all__ = [
    "HoverNavEnv",
    "EnvConfig",
]
