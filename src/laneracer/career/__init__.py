"""
Career module - Level-based progression.

This module contains:
- CareerProgression: Tracks level, progress and advancement
- DEFAULT_LEVELS: The built-in nine-level ladder
"""

from laneracer.career.progression import CareerProgression, CareerConfig, DEFAULT_LEVELS

__all__ = [
    "CareerProgression",
    "CareerConfig",
    "DEFAULT_LEVELS",
]
