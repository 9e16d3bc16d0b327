"""
Replay module - Run recording, ghost playback and persistence.

This module contains:
- ReplayRecorder: Per-tick recording of the player's run
- GhostPlayer: Time-ordered playback of a saved run
- ReplayStore: Replay files on disk
- HighScoreTable: Top-10 score table
"""

from laneracer.replay.recorder import ReplayRecorder, GhostPlayer
from laneracer.replay.storage import ReplayStore, HighScoreTable, StorageConfig

__all__ = [
    "ReplayRecorder",
    "GhostPlayer",
    "ReplayStore",
    "HighScoreTable",
    "StorageConfig",
]
