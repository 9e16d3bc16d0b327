"""
LaneRacer - Lane-based endless racing simulation.

A deterministic-when-seeded simulation core for an arcade racer:
- Three-lane track with traffic, hazards, pickups and scenery
- Timed powerups, boost charge and pickup combos
- Career ladder with boss levels
- Replay recording and ghost playback
- Two-player state mirroring over TCP
"""

__version__ = "0.1.0"

from laneracer.simulation import (
    RacingGame,
    GameSummary,
    Snapshot,
    InputSample,
    PlayerControls,
)
from laneracer.config import GameConfig
from laneracer.models import GameMode, TrackType, Weather

__all__ = [
    "RacingGame",
    "GameSummary",
    "Snapshot",
    "InputSample",
    "PlayerControls",
    "GameConfig",
    "GameMode",
    "TrackType",
    "Weather",
]
