"""
Car - Player and AI vehicle state.

A car only moves longitudinally; lateral position is a discrete lane.
"""

from dataclasses import dataclass

from laneracer.models.enums import CarType


MAX_HEALTH = 100


@dataclass
class Car:
    """Vehicle on the track.

    Usage:
        car = Car(lane=1, distance=0.0, speed=0.0, is_player=True)
        car.update(dt=1 / 60)
    """
    lane: int = 1
    distance: float = 0.0
    speed: float = 0.0
    is_player: bool = False
    car_type: CarType = CarType.SPORTS
    is_boss: bool = False
    health: int = MAX_HEALTH

    @property
    def is_alive(self) -> bool:
        """A car is alive while it has health left."""
        return self.health > 0

    def update(self, dt: float) -> None:
        """Advance distance by speed over one tick.

        Args:
            dt: Time step in seconds
        """
        if self.speed < 0.0:
            self.speed = 0.0
        self.distance += self.speed * dt

    def damage(self, amount: int) -> None:
        """Apply damage, clamping health at zero.

        Args:
            amount: Health points to remove
        """
        self.health = max(0, self.health - amount)

    def slow_down(self, multiplier: float) -> None:
        """Scale speed by a penalty multiplier."""
        self.speed = max(0.0, self.speed * multiplier)

    def change_lane(self, step: int, lane_count: int) -> bool:
        """Move by `step` lanes if the target lane exists.

        Returns:
            True if the lane changed
        """
        target = self.lane + step
        if 0 <= target < lane_count:
            self.lane = target
            return True
        return False
