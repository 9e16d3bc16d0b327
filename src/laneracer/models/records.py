"""
Records - Immutable career levels and replay frames.
"""

from dataclasses import dataclass, asdict
from typing import Any, Dict

from laneracer.models.enums import TrackType, Weather


@dataclass(frozen=True)
class CareerLevel:
    """One rung of the career ladder."""
    level: int
    track: TrackType
    weather: Weather
    target_score: int
    has_boss: bool = False
    objective: str = ""
    reward: int = 0


# Keys written by older clients, which stored the lane as "Position".
_LEGACY_FRAME_KEYS = {
    "Time": "time",
    "Position": "lane",
    "Distance": "distance",
    "Speed": "speed",
    "Score": "score",
}


@dataclass(frozen=True)
class ReplayFrame:
    """Player state captured at one simulation tick."""
    time: float
    lane: int
    distance: float
    speed: float
    score: int

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a JSON-serializable dictionary."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ReplayFrame":
        """Build a frame from a stored dictionary.

        Args:
            data: Dictionary with current or legacy key names

        Returns:
            ReplayFrame

        Raises:
            KeyError: If a field is missing
            TypeError, ValueError: If a field has the wrong type or is not finite
        """
        normalized = {_LEGACY_FRAME_KEYS.get(k, k): v for k, v in data.items()}
        try:
            return cls(
                time=float(normalized["time"]),
                lane=int(normalized["lane"]),
                distance=float(normalized["distance"]),
                speed=float(normalized["speed"]),
                score=int(normalized["score"]),
            )
        except OverflowError as e:
            raise ValueError(f"replay frame field out of range: {e}") from e
