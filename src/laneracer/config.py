"""
Game configuration.

Aggregates the per-component configurations into one object passed to
the orchestrator and the session loop.
"""

from dataclasses import dataclass
from pathlib import Path

from laneracer.audio import AudioConfig
from laneracer.career.progression import CareerConfig
from laneracer.network.link import NetworkConfig
from laneracer.replay.storage import StorageConfig
from laneracer.simulation.ai import AIConfig
from laneracer.simulation.collision import CollisionConfig
from laneracer.simulation.controls import DrivingConfig
from laneracer.simulation.environment import EnvironmentConfig
from laneracer.simulation.powerups import PowerupConfig
from laneracer.simulation.spawner import SpawnConfig


@dataclass
class GameConfig:
    """Complete game configuration.

    Unset component configs are filled with their defaults.
    """
    # Track
    lane_count: int = 3

    # Timing
    target_fps: int = 60
    max_dt: float = 0.1  # Longest step allowed after a stall

    # Randomness (None for a fresh seed each run)
    seed: int | None = None

    # High-score entry name
    player_name: str = "player"

    # Data directory for replays and high scores
    data_dir: Path = Path(".")

    # Components
    environment: EnvironmentConfig | None = None
    powerups: PowerupConfig | None = None
    spawn: SpawnConfig | None = None
    ai: AIConfig | None = None
    driving: DrivingConfig | None = None
    collision: CollisionConfig | None = None
    career: CareerConfig | None = None
    storage: StorageConfig | None = None
    network: NetworkConfig | None = None
    audio: AudioConfig | None = None

    @property
    def frame_interval(self) -> float:
        """Seconds per tick at the target frame rate."""
        return 1.0 / self.target_fps

    def __post_init__(self):
        """Validate and normalize configuration."""
        if isinstance(self.data_dir, str):
            self.data_dir = Path(self.data_dir)
        if self.lane_count < 1:
            raise ValueError(f"lane_count must be at least 1, got {self.lane_count}")
        if self.target_fps <= 0:
            raise ValueError(f"target_fps must be positive, got {self.target_fps}")
        if self.max_dt <= 0:
            raise ValueError(f"max_dt must be positive, got {self.max_dt}")

        self.environment = self.environment or EnvironmentConfig()
        self.powerups = self.powerups or PowerupConfig()
        self.spawn = self.spawn or SpawnConfig()
        self.ai = self.ai or AIConfig()
        self.driving = self.driving or DrivingConfig()
        self.collision = self.collision or CollisionConfig()
        self.career = self.career or CareerConfig()
        self.storage = self.storage or StorageConfig(data_dir=self.data_dir)
        self.network = self.network or NetworkConfig()
        self.audio = self.audio or AudioConfig(sound_root=self.data_dir)
