"""
AI driver - Longitudinal motion and random lane changes for traffic.
"""

from dataclasses import dataclass
from typing import Iterable
import numpy as np

from laneracer.models import Car


@dataclass
class AIConfig:
    """AI driver configuration."""
    # Chance of attempting a lane change on any given tick
    lane_change_probability: float = 0.002

    # When set, the chance is treated as a per-tick probability at this
    # tick rate and rescaled to the actual dt, making the lane-change
    # frequency independent of frame rate. None keeps the raw per-tick chance.
    lane_change_rate_hz: float | None = None


class AIDriver:
    """Steps every AI car once per tick."""

    def __init__(
        self,
        lane_count: int = 3,
        config: AIConfig | None = None,
        rng: np.random.Generator | None = None,
    ):
        self.config = config or AIConfig()
        self.lane_count = lane_count
        self._rng = rng or np.random.default_rng()

    def lane_change_chance(self, dt: float) -> float:
        """Probability of a lane change attempt this tick.

        Args:
            dt: Time step in seconds
        """
        p = self.config.lane_change_probability
        rate = self.config.lane_change_rate_hz
        if rate is None:
            return p
        return float(1.0 - (1.0 - p) ** (dt * rate))

    def step(self, cars: Iterable[Car], dt: float) -> None:
        """Advance AI cars by one tick.

        A lane change picks -1 or +1 with equal chance and is dropped if
        it would leave the road.

        Args:
            cars: AI cars to advance
            dt: Time step in seconds
        """
        chance = self.lane_change_chance(dt)
        for car in cars:
            if self._rng.random() < chance:
                step = -1 if int(self._rng.integers(2)) == 0 else 1
                car.change_lane(step, self.lane_count)
            car.update(dt)
