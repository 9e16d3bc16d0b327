"""
Replay recorder and ghost player.

Provides:
- Append-only per-tick recording of the player's run
- Time-ordered ghost playback of a saved run
"""

from typing import Dict, List, Optional, Sequence, Tuple
import numpy as np

from laneracer.models import ReplayFrame


class ReplayRecorder:
    """Records one frame per simulation tick.

    Usage:
        recorder = ReplayRecorder()
        recorder.record(time, lane, distance, speed, score)
        frames = recorder.frames
    """

    def __init__(self):
        self._frames: List[ReplayFrame] = []

    @property
    def frames(self) -> Tuple[ReplayFrame, ...]:
        """Recorded frames in time order."""
        return tuple(self._frames)

    @property
    def count(self) -> int:
        return len(self._frames)

    def record(
        self,
        time: float,
        lane: int,
        distance: float,
        speed: float,
        score: int,
    ) -> ReplayFrame:
        """Append a frame.

        Args:
            time: Elapsed simulation time
            lane: Player lane
            distance: Player distance
            speed: Player speed
            score: Player score

        Returns:
            The recorded frame
        """
        frame = ReplayFrame(
            time=float(time),
            lane=int(lane),
            distance=float(distance),
            speed=float(speed),
            score=int(score),
        )
        self._frames.append(frame)
        return frame

    def clear(self) -> None:
        """Discard the recording."""
        self._frames.clear()

    def as_arrays(self) -> Dict[str, np.ndarray]:
        """Get the recording as column arrays.

        Returns:
            Dictionary of field name to numpy array
        """
        return {
            "time": np.array([f.time for f in self._frames], dtype=float),
            "lane": np.array([f.lane for f in self._frames], dtype=int),
            "distance": np.array([f.distance for f in self._frames], dtype=float),
            "speed": np.array([f.speed for f in self._frames], dtype=float),
            "score": np.array([f.score for f in self._frames], dtype=int),
        }


class GhostPlayer:
    """Plays back a saved run as a non-interactive ghost.

    The cursor only moves forward. Position is that of the most recently
    passed frame, with no interpolation.
    """

    def __init__(self, frames: Sequence[ReplayFrame] | None = None):
        """Initialize ghost.

        Args:
            frames: Saved frames in time order
        """
        self._frames: Tuple[ReplayFrame, ...] = tuple(frames or ())
        self._cursor: int = 0

    @property
    def has_data(self) -> bool:
        return len(self._frames) > 0

    @property
    def frame_count(self) -> int:
        return len(self._frames)

    @property
    def cursor(self) -> int:
        """Number of frames passed so far."""
        return self._cursor

    def load(self, frames: Sequence[ReplayFrame]) -> None:
        """Replace the ghost run and rewind."""
        self._frames = tuple(frames)
        self._cursor = 0

    def reset(self) -> None:
        """Rewind to the start for a new playthrough."""
        self._cursor = 0

    def current_frame(self, time: float) -> Optional[ReplayFrame]:
        """Advance to `time` and return the last frame passed.

        Args:
            time: Current elapsed time

        Returns:
            Most recent frame with timestamp <= time, or None
        """
        while self._cursor < len(self._frames) and self._frames[self._cursor].time <= time:
            self._cursor += 1

        if self._cursor == 0:
            return None
        return self._frames[self._cursor - 1]

    def position(self, time: float) -> Optional[Tuple[int, float]]:
        """Ghost (lane, distance) at `time`, or None before the first frame."""
        frame = self.current_frame(time)
        if frame is None:
            return None
        return frame.lane, frame.distance
