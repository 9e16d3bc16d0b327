"""Tests for the racing game orchestrator."""

import dataclasses
import json

import pytest

from laneracer import GameConfig, GameMode, InputSample, PlayerControls, RacingGame
from laneracer.career import CareerConfig
from laneracer.models import CareerLevel, ReplayFrame, TrackType, Weather
from laneracer.network import NetworkState
from laneracer.simulation.powerups import Effect
from laneracer.workers import BackgroundWorker


DT = 1 / 60
THROTTLE = InputSample(player1=PlayerControls(accelerate=True))


def make_game(tmp_path, mode=GameMode.SINGLE, **kwargs) -> RacingGame:
    config = kwargs.pop("config", None) or GameConfig(seed=1, data_dir=tmp_path)
    return RacingGame(config, mode=mode, **kwargs)


class FakeLink:
    """Stands in for a connected peer link."""

    def __init__(self, remote=None):
        self.remote = remote
        self.sent = []
        self.disconnected = False

    def exchange(self, state):
        self.sent.append(state)
        return self.remote

    def disconnect(self):
        self.disconnected = True


class BrokenAudio:
    """Audio collaborator that fails on every call."""

    def play_sound(self, sound, volume=None):
        raise RuntimeError("no sound card")

    def play_music(self, track, loop=True):
        raise RuntimeError("no sound card")

    def stop_music(self):
        raise RuntimeError("no sound card")


class TestLifecycle:
    """Test initialization and the tick."""

    def test_initialize(self, tmp_path):
        """Test the opening state."""
        game = make_game(tmp_path)

        game.initialize()

        assert game.player1.lane == 1
        assert game.player1.health == 100
        assert game.player2 is None
        assert len(game.spawner.ai_cars) == 5
        assert len(game.spawner.obstacles) == 5
        assert game.render().frame == 0

    def test_update_before_initialize(self, tmp_path):
        """Test ticking an uninitialized game does nothing."""
        game = make_game(tmp_path)

        game.update(DT, THROTTLE)

        assert game.elapsed == 0.0
        with pytest.raises(RuntimeError):
            game.render()

    def test_dt_clamped(self, tmp_path):
        """Test long stalls and negative steps are clamped."""
        game = make_game(tmp_path)
        game.initialize()

        game.update(5.0)
        assert game.elapsed == pytest.approx(0.1)

        game.update(-1.0)
        assert game.elapsed == pytest.approx(0.1)
        assert game.frame == 2

    def test_distance_monotonic(self, tmp_path):
        """Test the player's distance never decreases."""
        game = make_game(tmp_path)
        game.initialize()
        last = game.player1.distance

        for _ in range(600):
            game.update(DT, THROTTLE)
            assert game.player1.distance >= last
            last = game.player1.distance

        assert game.elapsed == pytest.approx(10.0)
        assert last > 0

    def test_recording(self, tmp_path):
        """Test one frame is recorded per tick at simulation time."""
        game = make_game(tmp_path)
        game.initialize()

        for _ in range(30):
            game.update(DT, THROTTLE)

        frames = game.recorder.frames
        assert len(frames) == 30
        assert frames[-1].time == pytest.approx(0.5)
        assert frames[-1].score == game.player1_score

    def test_replay_mode_does_not_record(self, tmp_path):
        """Test replay mode plays without recording."""
        game = make_game(tmp_path, mode=GameMode.REPLAY)
        game.initialize()

        game.update(DT)

        assert game.recorder.count == 0
        assert game.render().replay_mode

    def test_audio_failures_contained(self, tmp_path):
        """Test a failing audio collaborator never stops the game."""
        game = make_game(tmp_path, audio=BrokenAudio())
        game.initialize()
        game.powerups.add_boost_charge(100)

        game.update(DT, InputSample(player1=PlayerControls(accelerate=True, boost=True)))
        game.game_over()
        game.cleanup()

        assert game.powerups.is_boost_active


class TestSnapshot:
    """Test the renderer view."""

    def test_read_only(self, tmp_path):
        """Test a snapshot cannot be used to change the world."""
        game = make_game(tmp_path)
        game.initialize()
        snapshot = game.render()

        with pytest.raises(dataclasses.FrozenInstanceError):
            snapshot.frame = 10
        with pytest.raises(ValueError):
            snapshot.ai_lanes[0] = 0
        with pytest.raises(TypeError):
            snapshot.effects[Effect.STAR] = None

    def test_stable_between_ticks(self, tmp_path):
        """Test a snapshot keeps its values after later ticks."""
        game = make_game(tmp_path)
        game.initialize()
        snapshot = game.render()

        game.update(DT, THROTTLE)

        assert snapshot.frame == 0
        assert snapshot.player1.speed == 0.0
        assert game.render().frame == 1

    def test_contents(self, tmp_path):
        """Test the snapshot mirrors the world."""
        game = make_game(tmp_path)
        game.initialize()
        game.update(DT, THROTTLE)

        snapshot = game.render()

        assert snapshot.ai_count == len(game.spawner.ai_cars)
        assert snapshot.obstacle_count == len(game.spawner.obstacles)
        assert snapshot.player1.distance == game.player1.distance
        assert snapshot.weather == game.environment.weather
        assert not snapshot.effect(Effect.BOOST).active
        json.dumps(snapshot.to_dict())


class TestCareerMode:
    """Test level transitions."""

    def test_level_up_resets_world(self, tmp_path):
        """Test reaching the target moves to the next level with a fresh world."""
        game = make_game(tmp_path, mode=GameMode.CAREER)
        game.initialize()
        old_cars = game.spawner.ai_cars

        game.player1_score = 5000
        game.update(0.0)

        assert game.career.level_number == 2
        assert game.career.progress == 0.0
        assert game.level == 2
        assert game.track == TrackType.CITY
        assert game.environment.weather == Weather.CLEAR
        assert not any(new is old for new in game.spawner.ai_cars for old in old_cars)
        assert len(game.spawner.buildings) == 5
        assert game.player1_score == 5000

    def test_progress_reported(self, tmp_path):
        """Test career progress reaches the snapshot."""
        game = make_game(tmp_path, mode=GameMode.CAREER)
        game.initialize()

        game.player1_score = 2500
        game.update(0.0)

        assert game.render().career_progress == pytest.approx(50.0)

    def test_boss_level(self, tmp_path):
        """Test a boss level opens with one boss."""
        levels = (CareerLevel(1, TrackType.MOUNTAIN, Weather.RAIN, 100, has_boss=True),)
        config = GameConfig(seed=1, data_dir=tmp_path, career=CareerConfig(levels=levels))
        game = make_game(tmp_path, mode=GameMode.CAREER, config=config)

        game.initialize()

        assert sum(c.is_boss for c in game.spawner.ai_cars) == 1
        assert game.environment.weather == Weather.RAIN

    def test_finished_career_keeps_world(self, tmp_path):
        """Test completing the last level does not reset the world."""
        levels = (CareerLevel(1, TrackType.HIGHWAY, Weather.CLEAR, 100),)
        config = GameConfig(seed=1, data_dir=tmp_path, career=CareerConfig(levels=levels))
        game = make_game(tmp_path, mode=GameMode.CAREER, config=config)
        game.initialize()
        cars = game.spawner.ai_cars

        game.player1_score = 100
        game.update(0.0)
        game.update(0.0)

        assert game.career.finished
        assert game.spawner.ai_cars == cars

    def test_zero_target_rejected(self, tmp_path):
        """Test a ladder with a zero target fails at construction, not mid-race."""
        levels = (CareerLevel(1, TrackType.HIGHWAY, Weather.CLEAR, 0),)
        config = GameConfig(seed=1, data_dir=tmp_path, career=CareerConfig(levels=levels))

        with pytest.raises(ValueError):
            make_game(tmp_path, mode=GameMode.CAREER, config=config)


class TestTwoPlayers:
    """Test split-screen and network play."""

    def test_splitscreen_inputs(self, tmp_path):
        """Test each player drives their own car."""
        game = make_game(tmp_path, mode=GameMode.SPLITSCREEN)
        game.initialize()

        game.update(0.1, InputSample(player2=PlayerControls(accelerate=True, right=True)))

        assert game.player2.lane == 2
        assert game.player2.speed > 0
        assert game.player1.speed == 0.0
        assert game.player1.lane == 1

    def test_network_mirror(self, tmp_path):
        """Test player 2 follows the remote peer, not local input."""
        remote = NetworkState(lane=2, distance=500.0, speed=90.0, health=70, score=1234)
        link = FakeLink(remote)
        game = make_game(tmp_path, link=link)
        game.initialize()

        game.update(DT, InputSample(player1=PlayerControls(accelerate=True), player2=PlayerControls(left=True)))

        assert game.is_networked
        assert game.player2.lane == 2
        assert game.player2.distance == 500.0
        assert game.player2.health == 70
        assert game.player2_score == 1234
        assert link.sent[-1].distance == game.player1.distance
        assert game.render().player2.distance == 500.0

    def test_network_mirror_clamped(self, tmp_path):
        """Test a peer cannot place player 2 off the track."""
        link = FakeLink(NetworkState(lane=9, distance=10.0, speed=-5.0, health=500, score=0))
        game = make_game(tmp_path, link=link)
        game.initialize()

        game.update(DT)

        assert game.player2.lane == game.config.lane_count - 1
        assert game.player2.speed == 0.0
        assert game.player2.health == 100

    def test_network_no_update(self, tmp_path):
        """Test player 2 keeps its state when nothing arrives."""
        game = make_game(tmp_path, link=FakeLink(None))
        game.initialize()

        game.update(DT)

        assert game.player2.distance == 0.0
        assert game.player2_score == 0

    def test_cleanup_disconnects(self, tmp_path):
        """Test cleanup closes the peer link."""
        link = FakeLink()
        game = make_game(tmp_path, link=link)
        game.initialize()

        game.cleanup()

        assert link.disconnected


class TestSessionControls:
    """Test restart, track change and persistence."""

    def test_restart(self, tmp_path):
        """Test restart starts the run over."""
        game = make_game(tmp_path)
        game.initialize()
        for _ in range(30):
            game.update(DT, THROTTLE)

        game.restart()

        assert game.elapsed == 0.0
        assert game.frame == 0
        assert game.player1.distance == 0.0
        assert game.player1_score == 0
        assert game.recorder.count == 0
        assert len(game.spawner.ai_cars) == 5

    def test_change_track(self, tmp_path):
        """Test track cycling respawns content for the new track."""
        game = make_game(tmp_path)
        game.initialize()

        assert game.change_track() == TrackType.CITY

        assert game.environment.track == TrackType.CITY
        assert game.spawner.track == TrackType.CITY
        assert len(game.spawner.buildings) == 5

    def test_change_track_wraps(self, tmp_path):
        """Test the last track cycles back to the first."""
        game = make_game(tmp_path)
        game.initialize()

        for _ in range(len(TrackType)):
            game.change_track()

        assert game.track == TrackType.HIGHWAY

    def test_game_over_persists_once(self, tmp_path):
        """Test game over saves one replay and one score."""
        game = make_game(tmp_path)
        game.initialize()
        for _ in range(10):
            game.update(DT, THROTTLE)

        summary = game.game_over("alice")
        game.game_over("alice")

        assert summary.score == game.player1_score
        assert summary.time == pytest.approx(10 * DT)
        assert summary.winner is None
        scores = game.high_scores()
        assert len(scores) == 1
        assert scores[0]["player"] == "alice"
        assert len(list((tmp_path / "replays").glob("*.json"))) == 1

    def test_background_persistence(self, tmp_path):
        """Test saves go through the worker when one is given."""
        worker = BackgroundWorker(max_workers=1)
        game = make_game(tmp_path, worker=worker)
        game.initialize()
        game.update(DT, THROTTLE)

        game.game_over()
        worker.shutdown(wait=True)

        assert (tmp_path / "highscores.json").exists()

    def test_ghost_from_best_run(self, tmp_path):
        """Test the next game races against the saved run."""
        first = make_game(tmp_path)
        first.initialize()
        for _ in range(10):
            first.update(DT, THROTTLE)
        first.game_over()

        second = make_game(tmp_path)
        second.initialize()
        second.update(DT, THROTTLE)

        assert second.ghost.has_data
        assert second.render().ghost == (first.recorder.frames[0].lane, first.recorder.frames[0].distance)

    def test_corrupt_replay_ignored(self, tmp_path):
        """Test an unreadable saved run leaves the game without a ghost."""
        folder = tmp_path / "replays"
        folder.mkdir()
        (folder / "replay_bad.json").write_text(
            '[{"time": 0.1, "lane": 1e999, "distance": 1.0, "speed": 50.0, "score": 10}]'
        )
        game = make_game(tmp_path)

        game.initialize()
        game.update(DT, THROTTLE)

        assert not game.ghost.has_data
        assert game.render().ghost is None

    def test_supplied_ghost(self, tmp_path):
        """Test an explicit ghost run is used as given."""
        game = make_game(tmp_path, ghost_frames=[ReplayFrame(0.0, 2, 30.0, 0.0, 0)])
        game.initialize()

        game.update(DT)

        assert game.render().ghost == (2, 30.0)

    def test_get_state(self, tmp_path):
        """Test the state dictionary."""
        game = make_game(tmp_path, mode=GameMode.CAREER)
        game.initialize()

        state = game.get_state()

        assert state["mode"] == "CAREER"
        assert state["career"]["level"] == 1
        assert state["spawner"]["ai_cars"] == 5
