"""
Audio - Fire-and-forget sound and music triggers.

Sounds are played by spawning an external player process on the
background worker. Any failure (missing player binary, missing file,
timeout) is logged and ignored.
"""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
import logging
import shutil
import subprocess
import threading

from laneracer.workers import BackgroundWorker


logger = logging.getLogger(__name__)


class Sound(Enum):
    """Sound cue files."""
    BOOST = "sounds/boost.wav"
    CRASH = "sounds/crash.wav"
    HIT = "sounds/hit.wav"
    POWERUP = "sounds/powerup.wav"
    STAR = "sounds/star.wav"
    MAGNET = "sounds/magnet.wav"
    SLOWMO = "sounds/slowmo.wav"


RACE_MUSIC = "sounds/race_music.mp3"


@dataclass
class AudioConfig:
    """Audio configuration."""
    enabled: bool = True
    sound_root: Path = Path(".")
    player: str = "mpg123"
    fallback_player: str = "aplay"
    default_volume: float = 0.5
    sound_timeout_s: float = 1.0


class NullAudio:
    """Audio sink that does nothing."""

    def play_sound(self, sound: Sound, volume: float | None = None) -> None:
        pass

    def play_music(self, track: str = RACE_MUSIC, loop: bool = True) -> None:
        pass

    def stop_music(self) -> None:
        pass


class AudioManager:
    """Plays sounds through an external command-line player.

    Usage:
        audio = AudioManager(worker=BackgroundWorker())
        audio.play_sound(Sound.CRASH)
    """

    def __init__(
        self,
        config: AudioConfig | None = None,
        worker: BackgroundWorker | None = None,
    ):
        """Initialize audio manager.

        Args:
            config: Audio configuration
            worker: Background worker for player processes
        """
        self.config = config or AudioConfig()
        self._worker = worker or BackgroundWorker(max_workers=2, name="laneracer-audio")
        self._music: subprocess.Popen | None = None
        self._music_lock = threading.Lock()
        self._music_generation = 0

    def _resolve(self, name: str) -> str:
        return str(Path(self.config.sound_root) / name)

    def _sound_command(self, path: str, volume: float) -> list[str] | None:
        if shutil.which(self.config.player):
            return [self.config.player, "-q", "--gain", str(int(volume * 100)), path]
        if shutil.which(self.config.fallback_player):
            return [self.config.fallback_player, "-q", path]
        return None

    def play_sound(self, sound: Sound, volume: float | None = None) -> None:
        """Trigger a sound without waiting for it.

        Args:
            sound: Sound cue
            volume: 0.0 to 1.0 (config default if None)
        """
        if not self.config.enabled:
            return
        volume = self.config.default_volume if volume is None else volume
        self._worker.submit(self._run_sound, self._resolve(sound.value), volume)

    def _run_sound(self, path: str, volume: float) -> None:
        command = self._sound_command(path, volume)
        if command is None:
            logger.debug("No audio player available for %s", path)
            return
        try:
            subprocess.run(
                command,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
                timeout=self.config.sound_timeout_s,
                check=False,
            )
        except (OSError, subprocess.SubprocessError) as e:
            logger.debug("Sound %s failed: %s", path, e)

    def play_music(self, track: str = RACE_MUSIC, loop: bool = True) -> None:
        """Start background music, replacing any current track.

        Args:
            track: Music file relative to the sound root
            loop: Loop forever
        """
        if not self.config.enabled:
            return
        self.stop_music()
        with self._music_lock:
            generation = self._music_generation
        self._worker.submit(self._start_music, self._resolve(track), loop, generation)

    def _start_music(self, path: str, loop: bool, generation: int) -> None:
        with self._music_lock:
            if generation != self._music_generation:
                return
        command = [self.config.player, "-q"]
        if loop:
            command += ["--loop", "-1"]
        command.append(path)
        try:
            process = subprocess.Popen(
                command,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
            )
        except OSError as e:
            logger.debug("Music %s failed: %s", path, e)
            return
        with self._music_lock:
            if generation == self._music_generation:
                process, self._music = self._music, process
        # Either a stale start or a track replaced by this one.
        self._kill(process)

    def stop_music(self) -> None:
        """Stop background music if playing, including a queued start."""
        with self._music_lock:
            self._music_generation += 1
            process, self._music = self._music, None
        self._kill(process)

    @staticmethod
    def _kill(process: subprocess.Popen | None) -> None:
        if process is None or process.poll() is not None:
            return
        try:
            process.kill()
            process.wait(timeout=1.0)
        except (OSError, subprocess.SubprocessError) as e:
            logger.debug("Stopping music failed: %s", e)


class SafeAudio:
    """Wraps any audio collaborator so that its failures never propagate."""

    def __init__(self, audio):
        self._audio = audio

    def _call(self, name: str, *args) -> None:
        try:
            getattr(self._audio, name)(*args)
        except Exception as e:  # audio is optional
            logger.debug("Audio %s failed: %s", name, e)

    def play_sound(self, sound: Sound, volume: float | None = None) -> None:
        self._call("play_sound", sound, volume)

    def play_music(self, track: str = RACE_MUSIC, loop: bool = True) -> None:
        self._call("play_music", track, loop)

    def stop_music(self) -> None:
        self._call("stop_music")
