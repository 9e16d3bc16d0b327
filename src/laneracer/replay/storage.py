"""
Storage - Replay and high-score persistence.

Provides:
- JSON replay files, one per finished run
- Best-run lookup for ghost playback
- Top-10 high-score table

Unreadable or malformed files are treated as missing data.
"""

from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence
import json
import logging
import numpy as np

from laneracer.models import ReplayFrame


logger = logging.getLogger(__name__)


class NumpyEncoder(json.JSONEncoder):
    """JSON encoder that handles numpy types."""

    def default(self, obj):
        if isinstance(obj, np.integer):
            return int(obj)
        if isinstance(obj, np.floating):
            return float(obj)
        if isinstance(obj, np.ndarray):
            return obj.tolist()
        return super().default(obj)


@dataclass
class StorageConfig:
    """Persistence configuration."""
    data_dir: Path = Path(".")
    replay_folder: str = "replays"
    score_file: str = "highscores.json"
    max_high_scores: int = 10

    def __post_init__(self):
        if isinstance(self.data_dir, str):
            self.data_dir = Path(self.data_dir)

    @property
    def replay_path(self) -> Path:
        return self.data_dir / self.replay_folder

    @property
    def score_path(self) -> Path:
        return self.data_dir / self.score_file


def _read_json(path: Path) -> Any:
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


class ReplayStore:
    """Saves recordings and finds the best one for the ghost."""

    def __init__(self, config: StorageConfig | None = None):
        self.config = config or StorageConfig()

    def save(self, frames: Sequence[ReplayFrame], timestamp: datetime | None = None) -> Optional[Path]:
        """Write a recording to a new replay file.

        Args:
            frames: Recorded frames
            timestamp: File timestamp (now if None)

        Returns:
            Path written, or None if there was nothing to save or the
            write failed
        """
        if not frames:
            return None

        stamp = (timestamp or datetime.now()).strftime("%Y%m%d_%H%M%S")
        folder = self.config.replay_path
        try:
            folder.mkdir(parents=True, exist_ok=True)
            output_file = folder / f"replay_{stamp}.json"
            suffix = 1
            while True:
                try:
                    f = open(output_file, "x", encoding="utf-8")
                    break
                except FileExistsError:
                    output_file = folder / f"replay_{stamp}_{suffix}.json"
                    suffix += 1

            with f:
                json.dump([frame.to_dict() for frame in frames], f, indent=2, cls=NumpyEncoder)
        except OSError as e:
            logger.warning("Could not save replay: %s", e)
            return None

        logger.info("Saved replay with %d frames to %s", len(frames), output_file)
        return output_file

    def load(self, path: Path) -> List[ReplayFrame]:
        """Load one replay file.

        Returns:
            Frames sorted by time, or an empty list if unreadable
        """
        try:
            data = _read_json(path)
            frames = [ReplayFrame.from_dict(item) for item in data]
        except (OSError, ValueError, TypeError, KeyError, AttributeError) as e:
            logger.warning("Ignoring malformed replay %s: %s", path, e)
            return []
        return sorted(frames, key=lambda f: f.time)

    def list_replays(self) -> List[Path]:
        """Replay files, newest first."""
        folder = self.config.replay_path
        if not folder.is_dir():
            return []
        files = list(folder.glob("*.json"))
        return sorted(files, key=lambda p: p.stat().st_mtime, reverse=True)

    def load_best(self) -> List[ReplayFrame]:
        """Load the run with the highest final score.

        Ties go to the most recent file.

        Returns:
            Frames of the best run, or an empty list
        """
        best: List[ReplayFrame] = []
        best_score = None
        for path in self.list_replays():
            frames = self.load(path)
            if not frames:
                continue
            final = frames[-1].score
            if best_score is None or final > best_score:
                best, best_score = frames, final
        return best


class HighScoreTable:
    """Top scores sorted descending, capped at `max_high_scores`."""

    def __init__(self, config: StorageConfig | None = None):
        self.config = config or StorageConfig()

    def load(self) -> List[Dict[str, Any]]:
        """Load high scores.

        Returns:
            Score records, or an empty list if missing or malformed
        """
        path = self.config.score_path
        if not path.exists():
            return []
        try:
            data = _read_json(path)
            if not isinstance(data, list):
                raise ValueError("expected a list of records")
            records = [dict(item) for item in data]
            records.sort(key=lambda r: int(r.get("score", 0)), reverse=True)
        except (OSError, ValueError, TypeError, OverflowError) as e:
            logger.warning("Ignoring malformed score file %s: %s", path, e)
            return []
        return records[: self.config.max_high_scores]

    def add(
        self,
        player: str,
        score: int,
        distance: float,
        time: float,
        level: int,
        mode: str,
        date: datetime | None = None,
    ) -> List[Dict[str, Any]]:
        """Insert a score and rewrite the table.

        Returns:
            The updated table
        """
        records = self.load()
        records.append({
            "player": player,
            "score": int(score),
            "distance": float(distance),
            "time": float(time),
            "level": int(level),
            "mode": mode,
            "date": (date or datetime.now()).strftime("%Y-%m-%d %H:%M:%S"),
        })
        records.sort(key=lambda r: int(r["score"]), reverse=True)
        records = records[: self.config.max_high_scores]

        path = self.config.score_path
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with open(path, "w", encoding="utf-8") as f:
                json.dump(records, f, indent=2, cls=NumpyEncoder)
        except OSError as e:
            logger.warning("Could not save high scores: %s", e)
        return records
