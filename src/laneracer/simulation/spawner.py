"""
Spawner - Procedural traffic, obstacle and scenery generation.

Generates:
- AI traffic (police, racers, cosmetic cars, career bosses)
- Hazards and pickups with percentile-bucketed types
- Roadside buildings on city tracks

The spawner is the sole owner of these entities. Other components get
read-only tuple views, or mutate through the narrow methods here.
"""

from dataclasses import dataclass
from typing import List, Tuple
import logging
import numpy as np

from laneracer.models import (
    Building,
    Car,
    CareerLevel,
    CarType,
    GameMode,
    Obstacle,
    ObstacleType,
    Side,
    TrackType,
)


logger = logging.getLogger(__name__)


@dataclass
class SpawnConfig:
    """Spawn and despawn configuration.

    Ranges are half-open integer ranges [low, high).
    """
    initial_spawn_count: int = 5

    # First thresholds after an initial burst
    initial_ai_threshold: float = 50.0
    initial_obstacle_threshold: float = 30.0
    initial_building_threshold: float = 40.0

    # Threshold re-roll offsets after each spawn
    ai_respawn_offset: Tuple[int, int] = (30, 60)
    obstacle_respawn_offset: Tuple[int, int] = (40, 80)
    building_respawn_offset: Tuple[int, int] = (50, 100)

    # AI cars
    ai_distance_offset: Tuple[int, int] = (40, 100)
    ai_base_speed: Tuple[int, int] = (60, 140)
    police_percent: int = 15
    racer_percent: int = 30  # cumulative
    police_speed: Tuple[int, int] = (120, 160)
    racer_speed: Tuple[int, int] = (140, 180)
    boss_speed: float = 180.0
    boss_type: CarType = CarType.LIMO

    # Obstacles (cumulative percent thresholds, cone takes the rest)
    obstacle_distance_offset: Tuple[int, int] = (50, 120)
    boost_percent: int = 15
    oil_percent: int = 30
    star_percent: int = 40
    magnet_percent: int = 50
    clock_percent: int = 60

    # Buildings
    building_distance_offset: Tuple[int, int] = (60, 150)
    building_height: Tuple[int, int] = (5, 15)
    building_styles: int = 4

    # Despawn distances behind the player
    ai_despawn_behind: float = 120.0
    obstacle_despawn_behind: float = 100.0
    building_despawn_behind: float = 150.0


class SpawnManager:
    """Creates content ahead of the player and removes it behind.

    Usage:
        spawner = SpawnManager(lane_count=3)
        spawner.spawn_initial(player_distance=0.0)

        # each tick
        spawner.update_spawning(player.distance)
        spawner.cleanup(player.distance)
    """

    def __init__(
        self,
        lane_count: int = 3,
        mode: GameMode = GameMode.SINGLE,
        track: TrackType = TrackType.HIGHWAY,
        config: SpawnConfig | None = None,
        rng: np.random.Generator | None = None,
    ):
        """Initialize spawner.

        Args:
            lane_count: Number of lanes
            mode: Game mode
            track: Active track type
            config: Spawn configuration
            rng: Random source
        """
        if lane_count < 1:
            raise ValueError(f"lane_count must be at least 1, got {lane_count}")

        self.config = config or SpawnConfig()
        self.lane_count = lane_count
        self._rng = rng or np.random.default_rng()
        self._mode = mode
        self._track = track
        self._career_level: CareerLevel | None = None

        self._ai_cars: List[Car] = []
        self._obstacles: List[Obstacle] = []
        self._buildings: List[Building] = []

        self._next_ai_spawn: float = self.config.initial_ai_threshold
        self._next_obstacle_spawn: float = self.config.initial_obstacle_threshold
        self._next_building_spawn: float = self.config.initial_building_threshold

        # Set when a fresh segment starts; consumed by the first AI spawn
        self._boss_pending: bool = False

    @property
    def ai_cars(self) -> Tuple[Car, ...]:
        """AI cars currently in the world."""
        return tuple(self._ai_cars)

    @property
    def obstacles(self) -> Tuple[Obstacle, ...]:
        """Obstacles currently in the world."""
        return tuple(self._obstacles)

    @property
    def buildings(self) -> Tuple[Building, ...]:
        """Buildings currently in the world."""
        return tuple(self._buildings)

    @property
    def track(self) -> TrackType:
        return self._track

    @property
    def next_thresholds(self) -> Tuple[float, float, float]:
        """(ai, obstacle, building) spawn distances."""
        return (self._next_ai_spawn, self._next_obstacle_spawn, self._next_building_spawn)

    def ai_cars_near(self, lane: int, distance: float, radius: float) -> List[Car]:
        """AI cars in `lane` strictly within `radius` of `distance`."""
        return [
            c for c in self._ai_cars
            if c.lane == lane and abs(c.distance - distance) < radius
        ]

    def obstacles_near(self, lane: int, distance: float, radius: float) -> List[Obstacle]:
        """Uncollected obstacles in `lane` strictly within `radius` of `distance`."""
        return [
            o for o in self._obstacles
            if not o.collected and o.lane == lane and abs(o.distance - distance) < radius
        ]

    def set_track(self, track: TrackType) -> None:
        """Switch track type for future spawns."""
        self._track = track

    def set_career_level(self, level: CareerLevel | None) -> None:
        """Set the career level whose boss flag applies to new segments."""
        self._career_level = level

    def _randint(self, bounds: Tuple[int, int]) -> int:
        return int(self._rng.integers(bounds[0], bounds[1]))

    def _boss_due(self) -> bool:
        return (
            self._boss_pending
            and self._mode == GameMode.CAREER
            and self._career_level is not None
            and self._career_level.has_boss
        )

    def spawn_initial(self, player_distance: float = 0.0) -> None:
        """Spawn the opening burst and reset thresholds.

        Args:
            player_distance: Current player distance
        """
        cfg = self.config
        self._next_ai_spawn = player_distance + cfg.initial_ai_threshold
        self._next_obstacle_spawn = player_distance + cfg.initial_obstacle_threshold
        self._next_building_spawn = player_distance + cfg.initial_building_threshold
        self._boss_pending = True

        for _ in range(cfg.initial_spawn_count):
            self.spawn_ai_car(player_distance)
            self.spawn_obstacle(player_distance)
            if self._track == TrackType.CITY:
                self.spawn_building(player_distance)

        logger.debug(
            "Initial burst on %s: %d cars, %d obstacles, %d buildings",
            self._track.name, len(self._ai_cars), len(self._obstacles), len(self._buildings),
        )

    def spawn_ai_car(self, player_distance: float) -> Car:
        """Spawn one AI car ahead of the player.

        Args:
            player_distance: Current player distance

        Returns:
            The spawned car
        """
        cfg = self.config
        lane = int(self._rng.integers(self.lane_count))
        distance = player_distance + self._randint(cfg.ai_distance_offset)
        speed = float(self._randint(cfg.ai_base_speed))
        is_boss = False

        if self._boss_due():
            car_type = cfg.boss_type
            speed = cfg.boss_speed
            is_boss = True
            logger.info("Boss car spawned at %.0f", distance)
        else:
            roll = int(self._rng.integers(100))
            if roll < cfg.police_percent:
                car_type = CarType.POLICE
                speed = float(self._randint(cfg.police_speed))
            elif roll < cfg.racer_percent:
                car_type = CarType.RACER
                speed = float(self._randint(cfg.racer_speed))
            else:
                car_type = CarType(int(self._rng.integers(len(CarType))))

        self._boss_pending = False

        car = Car(
            lane=lane,
            distance=float(distance),
            speed=speed,
            is_player=False,
            car_type=car_type,
            is_boss=is_boss,
        )
        self._ai_cars.append(car)
        return car

    def spawn_obstacle(self, player_distance: float) -> Obstacle:
        """Spawn one hazard or pickup ahead of the player.

        Args:
            player_distance: Current player distance

        Returns:
            The spawned obstacle
        """
        cfg = self.config
        lane = int(self._rng.integers(self.lane_count))
        distance = player_distance + self._randint(cfg.obstacle_distance_offset)

        roll = int(self._rng.integers(100))
        if roll < cfg.boost_percent:
            obstacle_type = ObstacleType.BOOST
        elif roll < cfg.oil_percent:
            obstacle_type = ObstacleType.OIL
        elif roll < cfg.star_percent:
            obstacle_type = ObstacleType.STAR
        elif roll < cfg.magnet_percent:
            obstacle_type = ObstacleType.MAGNET
        elif roll < cfg.clock_percent:
            obstacle_type = ObstacleType.CLOCK
        else:
            obstacle_type = ObstacleType.CONE

        obstacle = Obstacle(lane=lane, distance=float(distance), obstacle_type=obstacle_type)
        self._obstacles.append(obstacle)
        return obstacle

    def spawn_building(self, player_distance: float) -> Building:
        """Spawn one roadside building ahead of the player.

        Args:
            player_distance: Current player distance

        Returns:
            The spawned building
        """
        cfg = self.config
        side = Side.LEFT if int(self._rng.integers(2)) == 0 else Side.RIGHT
        distance = player_distance + self._randint(cfg.building_distance_offset)
        height = self._randint(cfg.building_height)
        style = int(self._rng.integers(cfg.building_styles))

        building = Building(side=side, distance=float(distance), height=height, style=style)
        self._buildings.append(building)
        return building

    def update_spawning(self, player_distance: float) -> None:
        """Fire any spawn threshold the player has passed.

        Args:
            player_distance: Current player distance
        """
        cfg = self.config

        if player_distance > self._next_ai_spawn:
            self.spawn_ai_car(player_distance)
            self._next_ai_spawn = player_distance + self._randint(cfg.ai_respawn_offset)

        if player_distance > self._next_obstacle_spawn:
            self.spawn_obstacle(player_distance)
            self._next_obstacle_spawn = player_distance + self._randint(cfg.obstacle_respawn_offset)

        if self._track == TrackType.CITY and player_distance > self._next_building_spawn:
            self.spawn_building(player_distance)
            self._next_building_spawn = player_distance + self._randint(cfg.building_respawn_offset)

    def cleanup(self, player_distance: float) -> int:
        """Remove entities left behind and collected obstacles.

        Args:
            player_distance: Current player distance

        Returns:
            Number of entities removed
        """
        cfg = self.config
        before = len(self._ai_cars) + len(self._obstacles) + len(self._buildings)

        self._ai_cars = [
            c for c in self._ai_cars
            if c.distance >= player_distance - cfg.ai_despawn_behind
        ]
        self._obstacles = [
            o for o in self._obstacles
            if not o.collected and o.distance >= player_distance - cfg.obstacle_despawn_behind
        ]
        self._buildings = [
            b for b in self._buildings
            if b.distance >= player_distance - cfg.building_despawn_behind
        ]

        return before - (len(self._ai_cars) + len(self._obstacles) + len(self._buildings))

    def clear_all(self) -> None:
        """Remove every spawned entity."""
        self._ai_cars.clear()
        self._obstacles.clear()
        self._buildings.clear()
        self._boss_pending = True

    def get_state(self) -> dict:
        """Get spawner state.

        Returns:
            Dictionary containing spawner state
        """
        return {
            "track": self._track.name,
            "ai_cars": len(self._ai_cars),
            "obstacles": len(self._obstacles),
            "buildings": len(self._buildings),
            "next_ai_spawn": self._next_ai_spawn,
            "next_obstacle_spawn": self._next_obstacle_spawn,
            "next_building_spawn": self._next_building_spawn,
        }
