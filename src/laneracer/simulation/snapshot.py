"""
Snapshot - Immutable per-tick view of the world for renderers and export.

Entity collections are stored as read-only numpy column arrays, one
array per attribute, so a snapshot cannot be used to mutate the world.
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Sequence, Tuple
import numpy as np

from laneracer.models import Building, Car, GameMode, Obstacle, TrackType, Weather
from laneracer.simulation.powerups import Effect, PowerupState


def _frozen(values: Sequence, dtype) -> np.ndarray:
    array = np.array(values, dtype=dtype)
    array.setflags(write=False)
    return array


@dataclass(frozen=True)
class CarView:
    """Read-only copy of a car."""
    lane: int
    distance: float
    speed: float
    health: int
    car_type: int
    is_boss: bool = False

    @classmethod
    def of(cls, car: Car) -> "CarView":
        return cls(
            lane=car.lane,
            distance=car.distance,
            speed=car.speed,
            health=car.health,
            car_type=int(car.car_type),
            is_boss=car.is_boss,
        )


@dataclass(frozen=True)
class EffectView:
    """Read-only copy of one powerup effect."""
    active: bool
    remaining: float


@dataclass(frozen=True)
class Snapshot:
    """World state at a tick boundary."""
    # Players
    player1: CarView
    player1_score: int
    player2: Optional[CarView] = None
    player2_score: int = 0

    # Session
    elapsed: float = 0.0
    frame: int = 0
    mode: GameMode = GameMode.SINGLE
    track: TrackType = TrackType.HIGHWAY
    level: int = 1
    career_progress: float = 0.0

    # Powerups
    effects: Mapping[Effect, EffectView] = field(default_factory=lambda: MappingProxyType({}))
    boost_charge: float = 0.0
    combo: int = 0

    # Environment
    weather: Weather = Weather.CLEAR
    curve: float = 0.0
    elevation: float = 0.0
    tunnel_darkness: float = 0.0

    # AI cars
    ai_lanes: np.ndarray = field(default_factory=lambda: _frozen([], int))
    ai_distances: np.ndarray = field(default_factory=lambda: _frozen([], float))
    ai_types: np.ndarray = field(default_factory=lambda: _frozen([], int))
    ai_is_boss: np.ndarray = field(default_factory=lambda: _frozen([], bool))

    # Obstacles
    obstacle_lanes: np.ndarray = field(default_factory=lambda: _frozen([], int))
    obstacle_distances: np.ndarray = field(default_factory=lambda: _frozen([], float))
    obstacle_types: np.ndarray = field(default_factory=lambda: _frozen([], int))

    # Buildings
    building_sides: np.ndarray = field(default_factory=lambda: _frozen([], int))
    building_distances: np.ndarray = field(default_factory=lambda: _frozen([], float))
    building_heights: np.ndarray = field(default_factory=lambda: _frozen([], int))
    building_styles: np.ndarray = field(default_factory=lambda: _frozen([], int))

    # Replay / ghost
    replay_mode: bool = False
    ghost: Optional[Tuple[int, float]] = None

    @property
    def ai_count(self) -> int:
        return len(self.ai_lanes)

    @property
    def obstacle_count(self) -> int:
        return len(self.obstacle_lanes)

    @property
    def building_count(self) -> int:
        return len(self.building_sides)

    def effect(self, effect: Effect) -> EffectView:
        return self.effects.get(effect, EffectView(False, 0.0))

    def to_dict(self) -> Dict[str, Any]:
        """Convert to plain Python types for export.

        Returns:
            Dictionary of snapshot fields
        """
        def car(view: Optional[CarView]) -> Optional[Dict[str, Any]]:
            if view is None:
                return None
            return {
                "lane": view.lane,
                "distance": view.distance,
                "speed": view.speed,
                "health": view.health,
                "car_type": view.car_type,
                "is_boss": view.is_boss,
            }

        return {
            "player1": car(self.player1),
            "player1_score": self.player1_score,
            "player2": car(self.player2),
            "player2_score": self.player2_score,
            "elapsed": self.elapsed,
            "frame": self.frame,
            "mode": self.mode.name,
            "track": self.track.name,
            "level": self.level,
            "career_progress": self.career_progress,
            "effects": {
                e.value: {"active": v.active, "remaining": v.remaining}
                for e, v in self.effects.items()
            },
            "boost_charge": self.boost_charge,
            "combo": self.combo,
            "weather": self.weather.name,
            "curve": self.curve,
            "elevation": self.elevation,
            "tunnel_darkness": self.tunnel_darkness,
            "ai_cars": {
                "lanes": self.ai_lanes.tolist(),
                "distances": self.ai_distances.tolist(),
                "types": self.ai_types.tolist(),
                "is_boss": self.ai_is_boss.tolist(),
            },
            "obstacles": {
                "lanes": self.obstacle_lanes.tolist(),
                "distances": self.obstacle_distances.tolist(),
                "types": self.obstacle_types.tolist(),
            },
            "buildings": {
                "sides": self.building_sides.tolist(),
                "distances": self.building_distances.tolist(),
                "heights": self.building_heights.tolist(),
                "styles": self.building_styles.tolist(),
            },
            "replay_mode": self.replay_mode,
            "ghost": list(self.ghost) if self.ghost is not None else None,
        }


def entity_columns(
    ai_cars: Sequence[Car],
    obstacles: Sequence[Obstacle],
    buildings: Sequence[Building],
) -> Dict[str, np.ndarray]:
    """Build read-only column arrays for every entity collection."""
    return {
        "ai_lanes": _frozen([c.lane for c in ai_cars], int),
        "ai_distances": _frozen([c.distance for c in ai_cars], float),
        "ai_types": _frozen([int(c.car_type) for c in ai_cars], int),
        "ai_is_boss": _frozen([c.is_boss for c in ai_cars], bool),
        "obstacle_lanes": _frozen([o.lane for o in obstacles], int),
        "obstacle_distances": _frozen([o.distance for o in obstacles], float),
        "obstacle_types": _frozen([int(o.obstacle_type) for o in obstacles], int),
        "building_sides": _frozen([int(b.side) for b in buildings], int),
        "building_distances": _frozen([b.distance for b in buildings], float),
        "building_heights": _frozen([b.height for b in buildings], int),
        "building_styles": _frozen([b.style for b in buildings], int),
    }


def effect_views(states: Dict[Effect, PowerupState]) -> Mapping[Effect, EffectView]:
    return MappingProxyType({e: EffectView(s.active, s.remaining) for e, s in states.items()})
