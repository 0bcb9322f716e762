"""
Reinforcement-learning tooling for the hover-navigation environment.

PPO training requires the optional ``rl`` extras::

    pip install -e ".[rl]"

Submodules
----------
config      – Dataclass configs + argparse/JSON loaders
baselines   – Zero / random / goal-seeking policy evaluation
train_ppo   – Stable-Baselines3 PPO training loop
"""
