"""
Controls - Translate per-tick input samples into car motion.

Provides:
- Player control and input sample containers
- Lane stepping, acceleration/braking/coasting
- Weather drag and boost activation
- Distance-based score accrual
"""

from dataclasses import dataclass, field

from laneracer.audio import NullAudio, Sound
from laneracer.models import Car, Weather
from laneracer.simulation.powerups import PowerupManager


@dataclass(frozen=True)
class PlayerControls:
    """Boolean controls for one player."""
    left: bool = False
    right: bool = False
    accelerate: bool = False
    brake: bool = False
    boost: bool = False


@dataclass(frozen=True)
class InputSample:
    """One polled input sample for a tick."""
    player1: PlayerControls = field(default_factory=PlayerControls)
    player2: PlayerControls = field(default_factory=PlayerControls)
    quit: bool = False
    pause: bool = False
    menu: bool = False


@dataclass
class DrivingConfig:
    """Longitudinal driving model."""
    max_speed: float = 200.0
    boost_speed: float = 250.0
    acceleration: float = 60.0
    deceleration: float = 40.0  # Coasting
    brake_force: float = 100.0

    rain_speed_multiplier: float = 0.95
    fog_speed_multiplier: float = 0.90

    # Score per distance unit travelled
    score_per_distance: float = 0.1


@dataclass
class MotionResult:
    """Outcome of one control step."""
    score_gained: int = 0
    boosted: bool = False


class InputTranslator:
    """Applies a player's controls to their car for one tick."""

    def __init__(
        self,
        powerups: PowerupManager,
        lane_count: int = 3,
        config: DrivingConfig | None = None,
        audio=None,
    ):
        """Initialize translator.

        Args:
            powerups: Powerup state (boost cap and activation)
            lane_count: Number of lanes
            config: Driving configuration
            audio: Audio collaborator for the boost cue
        """
        self.config = config or DrivingConfig()
        self.lane_count = lane_count
        self._powerups = powerups
        self._audio = audio or NullAudio()

    def max_speed(self) -> float:
        """Speed cap for the current boost state."""
        if self._powerups.is_boost_active:
            return self.config.boost_speed
        return self.config.max_speed

    def apply(
        self,
        car: Car,
        controls: PlayerControls,
        weather: Weather,
        dt: float,
    ) -> MotionResult:
        """Apply controls to a car.

        Args:
            car: Car to drive
            controls: This tick's controls
            weather: Current weather
            dt: Time step in seconds

        Returns:
            Score gained and whether boost fired
        """
        cfg = self.config

        if controls.left:
            car.change_lane(-1, self.lane_count)
        if controls.right:
            car.change_lane(1, self.lane_count)

        cap = self.max_speed()
        if controls.accelerate:
            car.speed = min(car.speed + cfg.acceleration * dt, cap)
        elif controls.brake:
            car.speed = max(car.speed - cfg.brake_force * dt, 0.0)
        else:
            car.speed = max(car.speed - cfg.deceleration * dt, 0.0)

        if weather == Weather.RAIN:
            car.speed *= cfg.rain_speed_multiplier
        elif weather == Weather.FOG:
            car.speed *= cfg.fog_speed_multiplier

        boosted = False
        if controls.boost and self._powerups.try_activate_boost():
            boosted = True
            self._audio.play_sound(Sound.BOOST)

        car.update(dt)
        score = int(car.speed * dt * cfg.score_per_distance)

        return MotionResult(score_gained=score, boosted=boosted)
