"""
Career progression - Level ladder, progress tracking and advancement.
"""

from dataclasses import dataclass, field
from typing import Optional, Sequence
import logging
import numpy as np

from laneracer.models import CareerLevel, TrackType, Weather


logger = logging.getLogger(__name__)


DEFAULT_LEVELS: tuple[CareerLevel, ...] = (
    CareerLevel(1, TrackType.HIGHWAY, Weather.CLEAR, 5000, objective="Complete first race"),
    CareerLevel(2, TrackType.CITY, Weather.CLEAR, 8000, objective="Navigate city streets"),
    CareerLevel(3, TrackType.HIGHWAY, Weather.RAIN, 10000, objective="Race in the rain"),
    CareerLevel(4, TrackType.MOUNTAIN, Weather.CLEAR, 15000, has_boss=True,
                objective="Defeat mountain boss"),
    CareerLevel(5, TrackType.DESERT, Weather.CLEAR, 20000, objective="Conquer the desert"),
    CareerLevel(6, TrackType.TUNNEL, Weather.NIGHT, 25000, objective="Master the tunnel"),
    CareerLevel(7, TrackType.CITY, Weather.FOG, 30000, has_boss=True,
                objective="City fog boss battle"),
    CareerLevel(8, TrackType.MOUNTAIN, Weather.RAIN, 40000, has_boss=True,
                objective="Ultimate mountain challenge"),
    CareerLevel(9, TrackType.HIGHWAY, Weather.NIGHT, 50000, has_boss=True,
                objective="Final boss showdown!"),
)


@dataclass
class CareerConfig:
    """Career configuration."""
    levels: Sequence[CareerLevel] = field(default_factory=lambda: DEFAULT_LEVELS)


class CareerProgression:
    """Tracks the active career level and progress toward its target.

    Levels are 1-based. Once the last level is completed the career is
    finished and `current_level` returns None.

    Usage:
        career = CareerProgression()
        career.update_progress(score)
        if career.is_level_complete(score):
            career.advance_level()
    """

    def __init__(self, config: CareerConfig | None = None):
        """Initialize career at level 1.

        Args:
            config: Career configuration

        Raises:
            ValueError: If the level list is empty
        """
        self.config = config or CareerConfig()
        self._levels: tuple[CareerLevel, ...] = tuple(self.config.levels)
        if not self._levels:
            raise ValueError("Career needs at least one level")
        for level in self._levels:
            if level.target_score <= 0:
                raise ValueError(f"Level {level.level} needs a positive target score")

        self._level_index: int = 1
        self._progress: float = 0.0

    @property
    def levels(self) -> tuple[CareerLevel, ...]:
        """All levels, in order."""
        return self._levels

    @property
    def level_number(self) -> int:
        """1-based index of the active level (len+1 once finished)."""
        return self._level_index

    @property
    def progress(self) -> float:
        """Percent of the current target reached, in [0, 100]."""
        return self._progress

    @property
    def finished(self) -> bool:
        """True once every level is complete."""
        return self._level_index > len(self._levels)

    @property
    def current_level(self) -> Optional[CareerLevel]:
        if self.finished:
            return None
        return self._levels[self._level_index - 1]

    @property
    def next_level(self) -> Optional[CareerLevel]:
        if self._level_index < len(self._levels):
            return self._levels[self._level_index]
        return None

    def update_progress(self, score: int) -> float:
        """Recompute progress from the current score.

        Args:
            score: Player score

        Returns:
            Progress percent
        """
        level = self.current_level
        if level is None:
            return self._progress
        self._progress = float(np.clip(score / level.target_score * 100.0, 0.0, 100.0))
        return self._progress

    def is_level_complete(self, score: int) -> bool:
        """Check whether the score meets the current target."""
        level = self.current_level
        return level is not None and score >= level.target_score

    def advance_level(self) -> Optional[CareerLevel]:
        """Move to the next level and reset progress.

        Returns:
            The new current level, or None if the career is finished
        """
        if self.finished:
            return None

        completed = self.current_level
        self._level_index += 1
        self._progress = 0.0

        new_level = self.current_level
        if new_level is None:
            logger.info("Career finished after level %d", completed.level)
        else:
            logger.info(
                "Level %d complete, starting level %d: %s",
                completed.level, new_level.level, new_level.objective,
            )
        return new_level

    def reset(self) -> None:
        """Return to level 1."""
        self._level_index = 1
        self._progress = 0.0

    def get_state(self) -> dict:
        """Get career state.

        Returns:
            Dictionary containing career state
        """
        level = self.current_level
        return {
            "level": self._level_index,
            "progress": self._progress,
            "finished": self.finished,
            "target_score": level.target_score if level else None,
            "objective": level.objective if level else None,
        }
