"""
Session loop - Drives a game at a fixed cadence.

Each iteration polls input, handles pause and the in-game menu, advances
the simulation and hands the snapshot to the renderer. Player death or a
quit request ends the session; the current tick always finishes first.
"""

from typing import Callable
import logging
import time

from laneracer.rendering import Renderer
from laneracer.simulation.game import GameSummary, RacingGame


logger = logging.getLogger(__name__)


MENU_TITLE = "PAUSE MENU"
MENU_POLL_S = 0.05
MENU_OPTIONS = ("Resume", "Restart", "Change Track", "Save Replay", "Quit")


class GameSession:
    """Runs one game against one renderer.

    Usage:
        session = GameSession(game, HeadlessRenderer(max_ticks=600))
        summary = session.run()
    """

    def __init__(
        self,
        game: RacingGame,
        renderer: Renderer,
        fixed_dt: float | None = None,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """Initialize session.

        Args:
            game: Game to drive
            renderer: Presentation layer
            fixed_dt: Step every tick by this amount without pacing
                (None paces to the target frame rate with wall-clock dt)
            clock: Monotonic time source
            sleep: Delay function
        """
        self.game = game
        self.renderer = renderer
        self.fixed_dt = fixed_dt
        self._clock = clock
        self._sleep = sleep

        self.paused: bool = False
        self.ticks: int = 0

    def run(self) -> GameSummary:
        """Run until quit, window close or player death.

        Returns:
            Final results

        Raises:
            RuntimeError: If the renderer fails to initialize
        """
        if not self.renderer.initialize():
            self.game.cleanup()
            self.renderer.cleanup()
            raise RuntimeError("Renderer failed to initialize")

        try:
            self.game.initialize()
            self._loop()
        finally:
            summary = self.game.game_over()
            self.game.cleanup()
            self.renderer.cleanup()

        logger.info(
            "Session ended after %d ticks: score=%d distance=%.0f",
            self.ticks, summary.score, summary.distance,
        )
        return summary

    def _loop(self) -> None:
        config = self.game.config
        last = self._clock()

        while True:
            frame_start = self._clock()

            inputs = self.renderer.poll_input()
            if inputs is None:
                break

            if inputs.pause:
                self.paused = not self.paused
                logger.info("Paused" if self.paused else "Resumed")

            if inputs.menu and self._menu():
                break

            now = self._clock()
            if self.fixed_dt is not None:
                dt = self.fixed_dt
            else:
                dt = min(now - last, config.max_dt)
            last = now

            if not self.paused:
                self.game.update(dt, inputs)
                self.ticks += 1

            if not self.renderer.render(self.game.render()):
                break
            if inputs.quit:
                break
            if self.game.is_over:
                logger.info("Player 1 destroyed")
                break

            if self.fixed_dt is None:
                remaining = config.frame_interval - (self._clock() - frame_start)
                if remaining > 0:
                    self._sleep(remaining)

    def _menu(self) -> bool:
        """Run the in-game menu until an option is chosen or it is dismissed.

        Returns:
            True if the session should end
        """
        selected = 0
        while True:
            if not self.renderer.render_menu(MENU_TITLE, MENU_OPTIONS, selected):
                return True

            inputs = self.renderer.poll_input()
            if inputs is None:
                return True

            controls = inputs.player1
            if controls.accelerate:
                selected = max(0, selected - 1)
            if controls.brake:
                selected = min(len(MENU_OPTIONS) - 1, selected + 1)

            if controls.boost:
                return self._choose(MENU_OPTIONS[selected])
            if inputs.quit or inputs.pause:
                return False

            if self.fixed_dt is None:
                self._sleep(MENU_POLL_S)

    def _choose(self, option: str) -> bool:
        logger.debug("Menu choice: %s", option)
        if option == "Restart":
            self.game.restart()
        elif option == "Change Track":
            self.game.change_track()
        elif option == "Save Replay":
            self.game.save_replay()
        elif option == "Quit":
            return True
        return False
