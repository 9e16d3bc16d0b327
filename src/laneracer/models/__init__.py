"""
Models module - World entities shared by every simulation component.

This module contains:
- Enumerations: game modes, car/obstacle types, weather, track types
- Car: Player and AI vehicles
- Obstacle: Hazards and pickups placed in lanes
- Building: Roadside scenery on city tracks
- CareerLevel: Immutable career ladder entry
- ReplayFrame: One recorded simulation tick
"""

from laneracer.models.enums import (
    GameMode,
    CarType,
    ObstacleType,
    Weather,
    TrackType,
    Side,
)
from laneracer.models.car import Car, MAX_HEALTH
from laneracer.models.world_objects import Obstacle, Building, PICKUP_TYPES
from laneracer.models.records import CareerLevel, ReplayFrame

__all__ = [
    "GameMode",
    "CarType",
    "ObstacleType",
    "Weather",
    "TrackType",
    "Side",
    "Car",
    "MAX_HEALTH",
    "Obstacle",
    "Building",
    "PICKUP_TYPES",
    "CareerLevel",
    "ReplayFrame",
]
