"""Tests for replay recording, ghost playback and persistence."""

from datetime import datetime
from pathlib import Path
import json

import numpy as np

from laneracer.models import ReplayFrame
from laneracer.replay import GhostPlayer, HighScoreTable, ReplayRecorder, ReplayStore, StorageConfig


def make_frames(final_score: int, count: int = 5) -> list:
    return [
        ReplayFrame(
            time=i * 0.5,
            lane=i % 3,
            distance=i * 10.0,
            speed=60.0,
            score=final_score * i // (count - 1),
        )
        for i in range(count)
    ]


class TestReplayRecorder:
    """Test recording."""

    def test_record(self):
        """Test frames are appended in order."""
        recorder = ReplayRecorder()

        recorder.record(0.1, 1, 5.0, 50.0, 0)
        recorder.record(0.2, 2, 10.0, 55.0, 1)

        assert recorder.count == 2
        assert recorder.frames[1] == ReplayFrame(0.2, 2, 10.0, 55.0, 1)

    def test_clear(self):
        """Test clearing discards the recording."""
        recorder = ReplayRecorder()
        recorder.record(0.1, 1, 5.0, 50.0, 0)

        recorder.clear()

        assert recorder.frames == ()

    def test_as_arrays(self):
        """Test the recording converts to column arrays."""
        recorder = ReplayRecorder()
        recorder.record(0.1, 1, 5.0, 50.0, 0)
        recorder.record(0.2, 0, 10.0, 55.0, 3)

        arrays = recorder.as_arrays()

        assert np.allclose(arrays["time"], [0.1, 0.2])
        assert arrays["lane"].tolist() == [1, 0]
        assert arrays["score"].tolist() == [0, 3]


class TestGhostPlayer:
    """Test ghost playback."""

    def test_empty(self):
        """Test a ghost without data has no position."""
        ghost = GhostPlayer()

        assert not ghost.has_data
        assert ghost.position(10.0) is None

    def test_position_follows_time(self):
        """Test the ghost shows the last frame at or before the time."""
        ghost = GhostPlayer(make_frames(100))

        assert ghost.position(0.0) == (0, 0.0)
        assert ghost.position(0.7) == (1, 10.0)
        assert ghost.position(1.0) == (2, 20.0)
        assert ghost.position(99.0) == (1, 40.0)

    def test_cursor_forward_only(self):
        """Test the cursor never moves back until reset."""
        ghost = GhostPlayer(make_frames(100))
        ghost.position(1.2)
        cursor = ghost.cursor

        assert ghost.position(0.1) == (2, 20.0)
        assert ghost.cursor == cursor

        ghost.reset()
        assert ghost.position(0.1) == (0, 0.0)

    def test_before_first_frame(self):
        """Test there is no position before the first frame."""
        frames = [ReplayFrame(1.0, 2, 30.0, 60.0, 5)]
        ghost = GhostPlayer(frames)

        assert ghost.position(0.5) is None
        assert ghost.position(1.0) == (2, 30.0)


class TestReplayStore:
    """Test replay files."""

    def test_save_and_load_best(self, tmp_path):
        """Test a saved run loads back as the ghost."""
        store = ReplayStore(StorageConfig(data_dir=tmp_path))
        frames = make_frames(420)

        path = store.save(frames)

        assert path.parent == tmp_path / "replays"
        assert path.name.startswith("replay_")
        assert store.load_best() == frames

    def test_best_by_final_score(self, tmp_path):
        """Test the run with the highest final score wins."""
        store = ReplayStore(StorageConfig(data_dir=tmp_path))
        store.save(make_frames(100), timestamp=datetime(2024, 1, 1, 12, 0, 0))
        store.save(make_frames(900), timestamp=datetime(2024, 1, 1, 12, 0, 1))
        store.save(make_frames(300), timestamp=datetime(2024, 1, 1, 12, 0, 2))

        assert store.load_best()[-1].score == 900

    def test_same_timestamp(self, tmp_path):
        """Test saves in the same second do not overwrite each other."""
        store = ReplayStore(StorageConfig(data_dir=tmp_path))
        stamp = datetime(2024, 1, 1, 12, 0, 0)

        first = store.save(make_frames(1), timestamp=stamp)
        second = store.save(make_frames(2), timestamp=stamp)

        assert first != second
        assert len(store.list_replays()) == 2

    def test_malformed_skipped(self, tmp_path):
        """Test unreadable replay files are ignored."""
        store = ReplayStore(StorageConfig(data_dir=tmp_path))
        store.save(make_frames(50))
        (tmp_path / "replays" / "broken.json").write_text("{not json")
        (tmp_path / "replays" / "wrong.json").write_text(json.dumps([{"time": 1}]))

        assert store.load_best()[-1].score == 50

    def test_out_of_range_number_skipped(self, tmp_path):
        """Test a replay with a non-finite integer field reads as empty."""
        store = ReplayStore(StorageConfig(data_dir=tmp_path))
        store.save(make_frames(50))
        path = tmp_path / "replays" / "huge.json"
        path.write_text(
            '[{"time": 0.1, "lane": 1e999, "distance": 1.0, "speed": 50.0, "score": 10}]'
        )

        assert store.load(path) == []
        assert store.load_best()[-1].score == 50

    def test_saves_never_overwrite(self, tmp_path, monkeypatch):
        """Test a name taken between the check and the write gets a new suffix."""
        store = ReplayStore(StorageConfig(data_dir=tmp_path))
        stamp = datetime(2024, 1, 1, 12, 0, 0)
        first = store.save(make_frames(1), timestamp=stamp)
        monkeypatch.setattr(Path, "exists", lambda self: False)

        second = store.save(make_frames(2), timestamp=stamp)

        assert second is not None and second != first
        assert store.load(first)[-1].score == 1
        assert store.load(second)[-1].score == 2

    def test_load_sorts_by_time(self, tmp_path):
        """Test frames are sorted by time on load."""
        store = ReplayStore(StorageConfig(data_dir=tmp_path))
        path = tmp_path / "run.json"
        frames = make_frames(10)
        path.write_text(json.dumps([f.to_dict() for f in reversed(frames)]))

        assert store.load(path) == frames

    def test_nothing_to_save(self, tmp_path):
        """Test empty recordings are not written."""
        store = ReplayStore(StorageConfig(data_dir=tmp_path))

        assert store.save([]) is None
        assert store.load_best() == []


class TestHighScoreTable:
    """Test the high-score table."""

    def test_missing_file(self, tmp_path):
        """Test a missing table is empty."""
        table = HighScoreTable(StorageConfig(data_dir=tmp_path))

        assert table.load() == []

    def test_top_ten_sorted(self, tmp_path):
        """Test the table keeps the best ten, highest first."""
        table = HighScoreTable(StorageConfig(data_dir=tmp_path))

        for score in [50, 300, 10, 700, 20, 90, 400, 60, 80, 1000, 5, 250]:
            table.add("p", score, 100.0, 10.0, 1, "SINGLE")

        scores = [r["score"] for r in table.load()]
        assert scores == [1000, 700, 400, 300, 250, 90, 80, 60, 50, 20]

    def test_record_fields(self, tmp_path):
        """Test each record carries the run details."""
        table = HighScoreTable(StorageConfig(data_dir=tmp_path))

        table.add("alice", 1234, 567.8, 42.5, 3, "CAREER", date=datetime(2024, 5, 6, 7, 8, 9))

        record = table.load()[0]
        assert record == {
            "player": "alice",
            "score": 1234,
            "distance": 567.8,
            "time": 42.5,
            "level": 3,
            "mode": "CAREER",
            "date": "2024-05-06 07:08:09",
        }

    def test_malformed_file(self, tmp_path):
        """Test a corrupt table reads as empty."""
        (tmp_path / "highscores.json").write_text("[[[")
        table = HighScoreTable(StorageConfig(data_dir=tmp_path))

        assert table.load() == []

    def test_out_of_range_score(self, tmp_path):
        """Test a non-finite score reads as empty and the table recovers."""
        (tmp_path / "highscores.json").write_text('[{"score": 1e999}]')
        table = HighScoreTable(StorageConfig(data_dir=tmp_path))

        assert table.load() == []
        table.add("p", 100, 10.0, 1.0, 1, "SINGLE")
        assert [r["score"] for r in table.load()] == [100]
