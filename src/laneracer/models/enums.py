"""
Enumerations used across the simulation.

Integer values are the ordinals shared with renderers and existing peers,
so they must not be reordered.
"""

from enum import IntEnum


class GameMode(IntEnum):
    """Top-level game modes."""
    SINGLE = 0
    SPLITSCREEN = 1
    CAREER = 2
    REPLAY = 3


class CarType(IntEnum):
    """Cosmetic/behavioral vehicle classes."""
    SPORTS = 0
    POLICE = 1
    RACER = 2
    TRUCK = 3
    TAXI = 4
    VAN = 5
    MUSCLE = 6
    CONVERTIBLE = 7
    LIMO = 8


class ObstacleType(IntEnum):
    """Lane objects: two hazards followed by four pickups."""
    CONE = 0
    OIL = 1
    BOOST = 2
    STAR = 3
    MAGNET = 4
    CLOCK = 5


class Weather(IntEnum):
    """Weather conditions."""
    CLEAR = 0
    RAIN = 1
    FOG = 2
    NIGHT = 3


class TrackType(IntEnum):
    """Track themes."""
    HIGHWAY = 0
    CITY = 1
    MOUNTAIN = 2
    DESERT = 3
    TUNNEL = 4


class Side(IntEnum):
    """Roadside for scenery."""
    LEFT = -1
    RIGHT = 1
