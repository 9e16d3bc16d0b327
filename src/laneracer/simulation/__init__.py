"""
Simulation module - Per-tick world update.

This module contains:
- EnvironmentCycle: Curve, elevation, tunnel lighting and weather
- PowerupManager: Timed effects, boost charge and combo
- SpawnManager: Traffic, obstacles and scenery
- AIDriver: Traffic motion and lane changes
- InputTranslator: Player controls to car motion
- CollisionResolver: Car contact and obstacle pickups
- RacingGame: Orchestrator tying everything together
- Snapshot: Read-only view of the world for renderers
"""

from laneracer.simulation.environment import EnvironmentCycle, EnvironmentConfig
from laneracer.simulation.powerups import Effect, PowerupManager, PowerupConfig, PowerupState
from laneracer.simulation.spawner import SpawnManager, SpawnConfig
from laneracer.simulation.ai import AIDriver, AIConfig
from laneracer.simulation.controls import (
    InputSample,
    InputTranslator,
    PlayerControls,
    DrivingConfig,
    MotionResult,
)
from laneracer.simulation.collision import CollisionResolver, CollisionConfig
from laneracer.simulation.snapshot import Snapshot, CarView, EffectView
from laneracer.simulation.game import RacingGame, GameSummary

__all__ = [
    "EnvironmentCycle",
    "EnvironmentConfig",
    "Effect",
    "PowerupManager",
    "PowerupConfig",
    "PowerupState",
    "SpawnManager",
    "SpawnConfig",
    "AIDriver",
    "AIConfig",
    "InputSample",
    "InputTranslator",
    "PlayerControls",
    "DrivingConfig",
    "MotionResult",
    "CollisionResolver",
    "CollisionConfig",
    "Snapshot",
    "CarView",
    "EffectView",
    "RacingGame",
    "GameSummary",
]
