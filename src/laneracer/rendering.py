"""
Rendering - Presentation boundary for the session loop.

A renderer owns the screen and the input device. The simulation never
calls into it directly; the session loop feeds it snapshots and polls it
for input samples.
"""

from abc import ABC, abstractmethod
from typing import Mapping, Optional, Sequence
import logging
import numpy as np

from laneracer.simulation.controls import InputSample, PlayerControls
from laneracer.simulation.snapshot import Snapshot


logger = logging.getLogger(__name__)


class Renderer(ABC):
    """Abstract presentation layer."""

    @abstractmethod
    def initialize(self) -> bool:
        """Prepare the display. Returns False if it is unavailable."""

    @abstractmethod
    def poll_input(self) -> Optional[InputSample]:
        """Read one input sample, or None once the display is closed."""

    @abstractmethod
    def render(self, snapshot: Snapshot) -> bool:
        """Draw a frame. Returns False once the display is closed."""

    @abstractmethod
    def render_menu(self, title: str, options: Sequence[str], selected: int) -> bool:
        """Draw a menu with one option highlighted.

        Menu navigation arrives through `poll_input`: accelerate moves
        up, brake moves down, boost selects, quit or pause dismisses.

        Returns:
            False once the display is closed
        """

    def cleanup(self) -> None:
        """Release the display."""


class HeadlessRenderer(Renderer):
    """Renderer with no display, driven by a simple autopilot.

    The autopilot holds the throttle, steers out of lanes with traffic
    close ahead, and fires boost whenever there is charge. Specific ticks
    can be overridden with scripted input samples.

    Usage:
        renderer = HeadlessRenderer(max_ticks=600, seed=1)
        GameSession(game, renderer).run()
    """

    def __init__(
        self,
        max_ticks: int | None = 600,
        seed: int | None = None,
        scripted: Mapping[int, InputSample] | None = None,
        menu_choices: Sequence[int] = (),
        lane_count: int = 3,
        log_every: int = 300,
        lookahead: float = 30.0,
    ):
        """Initialize headless renderer.

        Args:
            max_ticks: Ticks before quitting (None runs until game over)
            seed: Autopilot random seed
            scripted: Input samples to use instead of the autopilot, by tick
            menu_choices: Answers to successive menus (Resume once exhausted)
            lane_count: Number of lanes
            log_every: Ticks between progress log lines
            lookahead: Distance ahead the autopilot watches for traffic
        """
        self.max_ticks = max_ticks
        self.scripted = dict(scripted or {})
        self.lane_count = lane_count
        self.log_every = log_every
        self.lookahead = lookahead

        self._rng = np.random.default_rng(seed)
        self._menu_choices = list(menu_choices)
        self._menu_selected: Optional[int] = None
        self._tick = 0
        self._last: Optional[Snapshot] = None
        self._open = False

        self.frames_rendered = 0
        self.menus_shown: list[str] = []

    @property
    def tick(self) -> int:
        return self._tick

    def initialize(self) -> bool:
        self._open = True
        logger.info("Headless renderer ready (tick limit: %s)", self.max_ticks)
        return True

    def poll_input(self) -> Optional[InputSample]:
        if not self._open:
            return None
        if self._menu_selected is not None:
            return self._navigate(self._menu_selected)

        tick = self._tick
        self._tick += 1

        if tick in self.scripted:
            return self.scripted[tick]
        if self.max_ticks is not None and tick >= self.max_ticks:
            return InputSample(quit=True)
        return InputSample(player1=self._autopilot())

    def _autopilot(self) -> PlayerControls:
        snap = self._last
        if snap is None:
            return PlayerControls(accelerate=True)

        lane = snap.player1.lane
        ahead = (
            (snap.ai_lanes == lane)
            & (snap.ai_distances > snap.player1.distance)
            & (snap.ai_distances < snap.player1.distance + self.lookahead)
        )
        left = right = False
        if ahead.any():
            if lane == 0:
                right = True
            elif lane == self.lane_count - 1:
                left = True
            elif self._rng.random() < 0.5:
                left = True
            else:
                right = True

        return PlayerControls(
            left=left,
            right=right,
            accelerate=True,
            boost=snap.boost_charge > 0,
        )

    def render(self, snapshot: Snapshot) -> bool:
        if not self._open:
            return False
        self._last = snapshot
        self.frames_rendered += 1

        if self.log_every and snapshot.frame % self.log_every == 0:
            logger.info(
                "t=%.1fs distance=%.0f speed=%.0f score=%d health=%d %s/%s",
                snapshot.elapsed,
                snapshot.player1.distance,
                snapshot.player1.speed,
                snapshot.player1_score,
                snapshot.player1.health,
                snapshot.track.name,
                snapshot.weather.name,
            )
        return True

    def render_menu(self, title: str, options: Sequence[str], selected: int) -> bool:
        if not self._open:
            return False
        if self._menu_selected is None:
            self.menus_shown.append(title)
        self._menu_selected = selected
        return True

    def _navigate(self, selected: int) -> InputSample:
        target = self._menu_choices[0] if self._menu_choices else 0
        if selected > target:
            return InputSample(player1=PlayerControls(accelerate=True))
        if selected < target:
            return InputSample(player1=PlayerControls(brake=True))

        if self._menu_choices:
            self._menu_choices.pop(0)
        self._menu_selected = None
        return InputSample(player1=PlayerControls(boost=True))

    def cleanup(self) -> None:
        self._open = False
        logger.debug("Headless renderer closed after %d frames", self.frames_rendered)
