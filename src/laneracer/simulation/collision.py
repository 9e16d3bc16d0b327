"""
Collision - Car-car contact and obstacle pickup resolution.

Provides:
- Lane/distance proximity checks against AI traffic
- One-shot obstacle collection with type-specific effects
- Combo-scaled pickup scoring
"""

from dataclasses import dataclass

from laneracer.audio import NullAudio, Sound
from laneracer.models import Car, Obstacle, ObstacleType
from laneracer.simulation.powerups import Effect, PowerupManager
from laneracer.simulation.spawner import SpawnManager


@dataclass
class CollisionConfig:
    """Collision and hazard configuration."""
    car_collision_distance: float = 8.0
    obstacle_collision_distance: float = 5.0

    car_collision_damage: int = 20
    cone_collision_damage: int = 15

    car_collision_speed_multiplier: float = 0.6
    cone_speed_multiplier: float = 0.7
    oil_speed_multiplier: float = 0.5

    # AI car pushed ahead after contact so it doesn't hit again next tick
    separation_push: float = 10.0

    boost_pickup_charge: int = 100

    # Base points per pickup, multiplied by (combo + 1)
    boost_points: int = 100
    star_points: int = 200
    magnet_points: int = 150
    clock_points: int = 250


class CollisionResolver:
    """Resolves player contact with traffic and lane objects.

    Usage:
        resolver = CollisionResolver(powerups, spawner)
        score += resolver.check(player_car)
    """

    def __init__(
        self,
        powerups: PowerupManager,
        spawner: SpawnManager,
        config: CollisionConfig | None = None,
        audio=None,
    ):
        self.config = config or CollisionConfig()
        self._powerups = powerups
        self._spawner = spawner
        self._audio = audio or NullAudio()

    def check(self, player: Car) -> int:
        """Run car and obstacle checks for one player.

        Args:
            player: Player car

        Returns:
            Score gained from pickups
        """
        self.check_cars(player)
        return self.check_obstacles(player)

    def check_cars(self, player: Car) -> int:
        """Apply car-car contact.

        Invincibility skips damage and combo loss, but the speed penalty
        and separation push always apply.

        Returns:
            Number of contacts
        """
        cfg = self.config
        contacts = self._spawner.ai_cars_near(
            player.lane, player.distance, cfg.car_collision_distance
        )
        for ai in contacts:
            if not self._powerups.is_invincible:
                player.damage(cfg.car_collision_damage)
                self._powerups.reset_combo()
                self._audio.play_sound(Sound.CRASH)

            player.slow_down(cfg.car_collision_speed_multiplier)
            if ai.distance > player.distance:
                ai.distance += cfg.separation_push
        return len(contacts)

    def check_obstacles(self, player: Car) -> int:
        """Collect overlapping obstacles.

        Returns:
            Score gained
        """
        score = 0
        hits = self._spawner.obstacles_near(
            player.lane, player.distance, self.config.obstacle_collision_distance
        )
        for obstacle in hits:
            obstacle.collected = True
            score += self._collect(obstacle, player)
        return score

    def _pickup(self, points: int, sound: Sound) -> int:
        gained = points * (self._powerups.combo + 1)
        self._powerups.increment_combo()
        self._audio.play_sound(sound)
        return gained

    def _collect(self, obstacle: Obstacle, car: Car) -> int:
        cfg = self.config
        kind = obstacle.obstacle_type

        if kind == ObstacleType.CONE:
            if not self._powerups.is_invincible:
                car.damage(cfg.cone_collision_damage)
                car.slow_down(cfg.cone_speed_multiplier)
                self._powerups.reset_combo()
                self._audio.play_sound(Sound.HIT)
            return 0

        if kind == ObstacleType.OIL:
            if not self._powerups.is_invincible:
                car.slow_down(cfg.oil_speed_multiplier)
                self._powerups.reset_combo()
            return 0

        if kind == ObstacleType.BOOST:
            self._powerups.add_boost_charge(cfg.boost_pickup_charge)
            return self._pickup(cfg.boost_points, Sound.POWERUP)

        if kind == ObstacleType.STAR:
            self._powerups.activate(Effect.STAR)
            return self._pickup(cfg.star_points, Sound.STAR)

        if kind == ObstacleType.MAGNET:
            self._powerups.activate(Effect.MAGNET)
            return self._pickup(cfg.magnet_points, Sound.MAGNET)

        if kind == ObstacleType.CLOCK:
            self._powerups.activate(Effect.SLOWMO)
            return self._pickup(cfg.clock_points, Sound.SLOWMO)

        return 0
