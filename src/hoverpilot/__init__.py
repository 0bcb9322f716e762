"""
Hoverpilot: Altitude Hold & Attitude Stabilization for a Multirotor

A hover stabilizer (altitude PID + leveling torque) driven by a coarse
[roll, pitch, climb] command, with an episode manager for goal-reaching RL.
"""

from hoverpilot.types import RigidBodyState, AttitudeCommand, ControlOutput
from hoverpilot.params import FlightParams, default_params
from hoverpilot.altitude_pid import AltitudePID
from hoverpilot.attitude import AttitudeStabilizer
from hoverpilot.controller import FlightController
from hoverpilot.collision import CollisionTracker
from hoverpilot.episode import EpisodeManager, EpisodeConfig
from hoverpilot.sim import build_vehicle, FlightLoop, run_hover_test

__version__ = "0.1.0"

__all__ = [
    "RigidBodyState",
    "AttitudeCommand",
    "ControlOutput",
    "FlightParams",
    "default_params",
    "AltitudePID",
    "AttitudeStabilizer",
    "FlightController",
    "CollisionTracker",
    "EpisodeManager",
    "EpisodeConfig",
    "build_vehicle",
    "FlightLoop",
    "run_hover_test",
]
