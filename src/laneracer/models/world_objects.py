"""
World objects - Obstacles, pickups and roadside buildings.
"""

from dataclasses import dataclass

from laneracer.models.enums import ObstacleType, Side


PICKUP_TYPES = frozenset({
    ObstacleType.BOOST,
    ObstacleType.STAR,
    ObstacleType.MAGNET,
    ObstacleType.CLOCK,
})


@dataclass
class Obstacle:
    """Hazard or pickup sitting in a lane.

    Collection is one-shot: once `collected` is set the obstacle has no
    further effect and is removed by the next despawn pass.
    """
    lane: int
    distance: float
    obstacle_type: ObstacleType = ObstacleType.CONE
    collected: bool = False

    @property
    def is_pickup(self) -> bool:
        """True for beneficial obstacles."""
        return self.obstacle_type in PICKUP_TYPES


@dataclass
class Building:
    """Purely cosmetic roadside building."""
    side: Side
    distance: float
    height: int
    style: int = 0
