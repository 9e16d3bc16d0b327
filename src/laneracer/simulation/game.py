"""
Racing game - Per-tick update orchestrator.

Provides:
- Fixed ordering of every subsystem within a tick
- Player management for single, split-screen and networked play
- Career level transitions with world reset
- Replay recording, ghost playback and end-of-run persistence
- Read-only snapshot for renderers
"""

from dataclasses import dataclass
from typing import Any, Callable, Optional, Sequence
import logging
import numpy as np

from laneracer.audio import NullAudio, RACE_MUSIC, SafeAudio
from laneracer.career.progression import CareerProgression
from laneracer.config import GameConfig
from laneracer.models import (
    Car,
    CarType,
    GameMode,
    ReplayFrame,
    TrackType,
    Weather,
)
from laneracer.network.link import PeerLink
from laneracer.network.protocol import NetworkState
from laneracer.replay.recorder import GhostPlayer, ReplayRecorder
from laneracer.replay.storage import HighScoreTable, ReplayStore
from laneracer.simulation.ai import AIDriver
from laneracer.simulation.collision import CollisionResolver
from laneracer.simulation.controls import InputSample, InputTranslator
from laneracer.simulation.environment import EnvironmentCycle
from laneracer.simulation.powerups import PowerupManager
from laneracer.simulation.snapshot import CarView, Snapshot, effect_views, entity_columns
from laneracer.simulation.spawner import SpawnManager
from laneracer.workers import BackgroundWorker


logger = logging.getLogger(__name__)


START_LANE = 1


@dataclass(frozen=True)
class GameSummary:
    """Final results of a run."""
    score: int
    distance: float
    time: float
    combo: int
    level: int
    mode: GameMode
    player2_score: Optional[int] = None

    @property
    def winner(self) -> Optional[int]:
        """1 or 2 for two-player games, None otherwise."""
        if self.player2_score is None:
            return None
        return 1 if self.score > self.player2_score else 2


class RacingGame:
    """Owns the world and advances it one tick at a time.

    Tick order: environment, powerups, player input, AI, collisions,
    spawn/despawn, replay recording, career check, peer exchange,
    snapshot.

    Usage:
        game = RacingGame(GameConfig(seed=1))
        game.initialize()

        while not game.is_over:
            game.update(dt, input_sample)
            renderer.render(game.render())
    """

    def __init__(
        self,
        config: GameConfig | None = None,
        mode: GameMode = GameMode.SINGLE,
        audio=None,
        link: PeerLink | None = None,
        worker: BackgroundWorker | None = None,
        ghost_frames: Sequence[ReplayFrame] | None = None,
    ):
        """Initialize game.

        Args:
            config: Game configuration
            mode: Game mode
            audio: Audio collaborator (silent if None)
            link: Connected peer link for network play
            worker: Worker for background saves (saves inline if None)
            ghost_frames: Ghost run (best saved run is loaded if None)
        """
        self.config = config or GameConfig()
        self.mode = mode
        self._audio = SafeAudio(audio) if audio is not None else NullAudio()
        self._link = link
        self._worker = worker
        self._rng = np.random.default_rng(self.config.seed)

        lanes = self.config.lane_count
        self.career: CareerProgression | None = None
        track, weather = TrackType.HIGHWAY, Weather.CLEAR
        if mode == GameMode.CAREER:
            self.career = CareerProgression(self.config.career)
            level = self.career.current_level
            track, weather = level.track, level.weather

        self.powerups = PowerupManager(self.config.powerups)
        self.environment = EnvironmentCycle(
            track, weather, mode, self.config.environment, rng=self._rng
        )
        self.spawner = SpawnManager(lanes, mode, track, self.config.spawn, rng=self._rng)
        if self.career is not None:
            self.spawner.set_career_level(self.career.current_level)

        self.ai = AIDriver(lanes, self.config.ai, rng=self._rng)
        self.controls = InputTranslator(self.powerups, lanes, self.config.driving, self._audio)
        self.collisions = CollisionResolver(
            self.powerups, self.spawner, self.config.collision, self._audio
        )

        self.recorder = ReplayRecorder()
        self.ghost = GhostPlayer(ghost_frames)
        self._ghost_supplied = ghost_frames is not None
        self._replays = ReplayStore(self.config.storage)
        self._scores = HighScoreTable(self.config.storage)

        self.player1: Optional[Car] = None
        self.player2: Optional[Car] = None
        self.player1_score: int = 0
        self.player2_score: int = 0

        self._elapsed: float = 0.0
        self._frame: int = 0
        self._snapshot: Optional[Snapshot] = None
        self._finished: bool = False

    @property
    def elapsed(self) -> float:
        """Simulation time since the run started."""
        return self._elapsed

    @property
    def frame(self) -> int:
        return self._frame

    @property
    def track(self) -> TrackType:
        return self.environment.track

    @property
    def level(self) -> int:
        return self.career.level_number if self.career else 1

    @property
    def is_networked(self) -> bool:
        return self._link is not None

    @property
    def has_player2(self) -> bool:
        return self.mode == GameMode.SPLITSCREEN or self._link is not None

    @property
    def is_over(self) -> bool:
        """True once player one has no health left."""
        return self.player1 is not None and not self.player1.is_alive

    def _new_players(self) -> None:
        self.player1 = Car(lane=START_LANE, is_player=True, car_type=CarType.SPORTS)
        self.player2 = None
        if self.has_player2:
            self.player2 = Car(lane=START_LANE, is_player=True, car_type=CarType.RACER)

    def initialize(self) -> None:
        """Create players, spawn opening content and start music."""
        self._new_players()
        self.spawner.spawn_initial(self.player1.distance)

        if not self._ghost_supplied:
            self.ghost.load(self._replays.load_best())
            if self.ghost.has_data:
                logger.info("Loaded ghost run with %d frames", self.ghost.frame_count)

        self._audio.play_music(RACE_MUSIC, True)
        self._snapshot = self._build_snapshot()
        logger.info(
            "Game initialized: mode=%s track=%s networked=%s",
            self.mode.name, self.track.name, self.is_networked,
        )

    def update(self, dt: float, inputs: InputSample | None = None) -> None:
        """Advance the world by one tick.

        Args:
            dt: Elapsed time in seconds (clamped to [0, max_dt])
            inputs: This tick's input sample
        """
        if self.player1 is None:
            return

        dt = float(np.clip(dt, 0.0, self.config.max_dt))
        inputs = inputs or InputSample()
        local_player2 = self.player2 is not None and self._link is None

        self.environment.update(dt)
        self.powerups.update(dt)

        weather = self.environment.weather
        result = self.controls.apply(self.player1, inputs.player1, weather, dt)
        self.player1_score += result.score_gained
        if local_player2:
            result = self.controls.apply(self.player2, inputs.player2, weather, dt)
            self.player2_score += result.score_gained

        self.ai.step(self.spawner.ai_cars, dt)

        self.player1_score += self.collisions.check(self.player1)
        if local_player2:
            self.player2_score += self.collisions.check(self.player2)

        self.spawner.update_spawning(self.player1.distance)
        self.spawner.cleanup(self.player1.distance)

        self._elapsed += dt
        self._frame += 1

        if self.mode != GameMode.REPLAY:
            p = self.player1
            self.recorder.record(self._elapsed, p.lane, p.distance, p.speed, self.player1_score)

        if self.career is not None:
            self._check_career()

        if self._link is not None:
            self._exchange()

        self._snapshot = self._build_snapshot()

    def _check_career(self) -> None:
        self.career.update_progress(self.player1_score)
        if not self.career.is_level_complete(self.player1_score):
            return

        level = self.career.advance_level()
        if level is None:
            return

        self.environment.set_track(level.track, level.weather)
        self.spawner.set_track(level.track)
        self.spawner.set_career_level(level)
        self.spawner.clear_all()
        self.spawner.spawn_initial(self.player1.distance)

    def _exchange(self) -> None:
        local = NetworkState.from_car(self.player1, self.player1_score)
        remote = self._link.exchange(local)
        if remote is not None and self.player2 is not None:
            remote.apply_to(self.player2, self.config.lane_count)
            self.player2_score = remote.score

    def _build_snapshot(self) -> Snapshot:
        ghost = self.ghost.position(self._elapsed) if self.ghost.has_data else None
        columns = entity_columns(
            self.spawner.ai_cars, self.spawner.obstacles, self.spawner.buildings
        )
        return Snapshot(
            player1=CarView.of(self.player1),
            player1_score=self.player1_score,
            player2=CarView.of(self.player2) if self.player2 is not None else None,
            player2_score=self.player2_score,
            elapsed=self._elapsed,
            frame=self._frame,
            mode=self.mode,
            track=self.track,
            level=self.level,
            career_progress=self.career.progress if self.career else 0.0,
            effects=effect_views(self.powerups.states()),
            boost_charge=self.powerups.boost_charge,
            combo=self.powerups.combo,
            weather=self.environment.weather,
            curve=self.environment.curve,
            elevation=self.environment.elevation,
            tunnel_darkness=self.environment.tunnel_darkness,
            replay_mode=self.mode == GameMode.REPLAY,
            ghost=ghost,
            **columns,
        )

    def render(self) -> Snapshot:
        """Latest snapshot, built at the end of the last tick.

        Raises:
            RuntimeError: If the game has not been initialized
        """
        if self._snapshot is None:
            if self.player1 is None:
                raise RuntimeError("Game not initialized")
            self._snapshot = self._build_snapshot()
        return self._snapshot

    def restart(self) -> None:
        """Start the run over on the current track."""
        self._new_players()
        self.spawner.clear_all()
        self.recorder.clear()
        self.ghost.reset()
        self.powerups.reset()
        self.player1_score = 0
        self.player2_score = 0
        self._elapsed = 0.0
        self._frame = 0
        self._finished = False
        self.spawner.spawn_initial(self.player1.distance)
        self._snapshot = self._build_snapshot()
        logger.info("Game restarted")

    def change_track(self) -> TrackType:
        """Cycle to the next track type and respawn content.

        Returns:
            The new track
        """
        track = TrackType((int(self.track) + 1) % len(TrackType))
        self.environment.set_track(track)
        self.spawner.set_track(track)
        self.spawner.clear_all()
        self.spawner.spawn_initial(self.player1.distance if self.player1 else 0.0)
        if self.player1 is not None:
            self._snapshot = self._build_snapshot()
        logger.info("Track changed to %s", track.name)
        return track

    def _background(self, fn: Callable[..., Any], *args: Any) -> None:
        if self._worker is not None:
            self._worker.submit(fn, *args)
        else:
            fn(*args)

    def save_replay(self) -> None:
        """Save the current recording without blocking the caller."""
        frames = self.recorder.frames
        if frames:
            self._background(self._replays.save, frames)

    def game_over(self, player_name: str | None = None) -> GameSummary:
        """Finish the run: save replay and high score, stop music.

        Safe to call more than once; only the first call persists.

        Returns:
            Final results
        """
        p1 = self.player1
        summary = GameSummary(
            score=self.player1_score,
            distance=p1.distance if p1 else 0.0,
            time=self._elapsed,
            combo=self.powerups.combo,
            level=self.level,
            mode=self.mode,
            player2_score=self.player2_score if self.player2 is not None else None,
        )

        if not self._finished:
            self._finished = True
            self.save_replay()
            self._background(
                self._scores.add,
                player_name or self.config.player_name,
                summary.score,
                summary.distance,
                summary.time,
                summary.level,
                self.mode.name,
            )
            logger.info(
                "Game over: score=%d distance=%.0f time=%.1fs level=%d",
                summary.score, summary.distance, summary.time, summary.level,
            )

        self._audio.stop_music()
        return summary

    def high_scores(self) -> list:
        """Current high-score table."""
        return self._scores.load()

    def cleanup(self) -> None:
        """Stop music and drop the peer connection."""
        self._audio.stop_music()
        if self._link is not None:
            self._link.disconnect()

    def get_state(self) -> dict:
        """Get complete game state.

        Returns:
            Dictionary containing game state
        """
        return {
            "mode": self.mode.name,
            "elapsed": self._elapsed,
            "frame": self._frame,
            "scores": [self.player1_score, self.player2_score],
            "environment": self.environment.get_state(),
            "powerups": self.powerups.get_state(),
            "spawner": self.spawner.get_state(),
            "career": self.career.get_state() if self.career else None,
            "recorded_frames": self.recorder.count,
        }
