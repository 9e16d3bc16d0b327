"""
Protocol - Wire format for peer state exchange.

Each record is one JSON object on its own line:

    {"Lane": 1, "Distance": 120.5, "Speed": 88.0, "Health": 100, "score": 420}

The mixed key casing is what existing peers send and expect.
"""

from dataclasses import dataclass
from typing import List, Optional
import json
import logging
import math

from laneracer.models import Car, MAX_HEALTH


logger = logging.getLogger(__name__)


ENCODING = "utf-8"
MAX_RECORD_BYTES = 4096


@dataclass(frozen=True)
class NetworkState:
    """Minimal per-tick state one peer shares with the other."""
    lane: int
    distance: float
    speed: float
    health: int
    score: int

    @classmethod
    def from_car(cls, car: Car, score: int) -> "NetworkState":
        return cls(
            lane=car.lane,
            distance=car.distance,
            speed=car.speed,
            health=car.health,
            score=score,
        )

    def apply_to(self, car: Car, lane_count: int | None = None) -> None:
        """Overwrite a car with this state, clamped to valid car values.

        Args:
            car: Car to overwrite
            lane_count: Lanes on the track (lane is not clamped if None)
        """
        lane = max(0, self.lane)
        if lane_count is not None:
            lane = min(lane, lane_count - 1)
        car.lane = lane
        car.distance = self.distance
        car.speed = max(0.0, self.speed)
        car.health = min(MAX_HEALTH, max(0, self.health))

    def encode(self) -> bytes:
        """Serialize as one newline-terminated record."""
        payload = {
            "Lane": int(self.lane),
            "Distance": float(self.distance),
            "Speed": float(self.speed),
            "Health": int(self.health),
            "score": int(self.score),
        }
        return (json.dumps(payload, separators=(",", ":")) + "\n").encode(ENCODING)

    @classmethod
    def decode(cls, line: bytes | str) -> "NetworkState":
        """Parse one record.

        Args:
            line: Record with or without trailing newline

        Returns:
            Parsed state

        Raises:
            ValueError: If the record is not valid JSON or misses a field
        """
        if isinstance(line, bytes):
            line = line.decode(ENCODING)
        data = json.loads(line)
        if not isinstance(data, dict):
            raise ValueError("record is not a JSON object")
        try:
            state = cls(
                lane=int(data["Lane"]),
                distance=float(data["Distance"]),
                speed=float(data["Speed"]),
                health=int(data["Health"]),
                score=int(data["score"]),
            )
        except KeyError as e:
            raise ValueError(f"record missing field {e}") from e
        except (TypeError, OverflowError) as e:
            raise ValueError(f"record has a bad field: {e}") from e
        if not (math.isfinite(state.distance) and math.isfinite(state.speed)):
            raise ValueError("record has a non-finite distance or speed")
        return state


class LineDecoder:
    """Reassembles newline-delimited records from arbitrary chunks.

    Partial records are kept until their newline arrives. A record that
    grows past `max_record_bytes` without a newline is dropped.
    """

    def __init__(self, max_record_bytes: int = MAX_RECORD_BYTES):
        self.max_record_bytes = max_record_bytes
        self._buffer = bytearray()
        self._discarding = False

    @property
    def pending(self) -> int:
        """Bytes held for an incomplete record."""
        return len(self._buffer)

    def feed(self, chunk: bytes) -> List[bytes]:
        """Add received bytes.

        Args:
            chunk: Raw bytes from the socket

        Returns:
            Complete, non-empty records (without newlines) in arrival order
        """
        records: List[bytes] = []
        self._buffer.extend(chunk)

        while True:
            newline = self._buffer.find(b"\n")
            if newline < 0:
                break
            line = bytes(self._buffer[:newline]).strip()
            del self._buffer[: newline + 1]
            if self._discarding:
                self._discarding = False
                continue
            if line:
                records.append(line)

        if len(self._buffer) > self.max_record_bytes:
            logger.warning("Dropping oversized record (%d bytes)", len(self._buffer))
            self._buffer.clear()
            self._discarding = True

        return records

    def reset(self) -> None:
        self._buffer.clear()
        self._discarding = False


def latest_state(records: List[bytes]) -> Optional[NetworkState]:
    """Decode the newest valid record, skipping malformed ones."""
    for record in reversed(records):
        try:
            return NetworkState.decode(record)
        except (ValueError, UnicodeDecodeError) as e:
            logger.debug("Skipping malformed record: %s", e)
    return None
