"""
LaneRacer command line runner.

Runs a game with the headless autopilot renderer and logs a summary.

Usage:
    laneracer                              # Single player, 600 ticks
    laneracer --mode career --ticks 3000   # Career run
    laneracer --host                       # Wait for player 2
    laneracer --join 192.168.1.20          # Join a hosted game
    python -m laneracer --help             # Show all options
"""

from pathlib import Path
import argparse
import logging
import sys

from laneracer.audio import AudioManager
from laneracer.config import GameConfig
from laneracer.models import GameMode
from laneracer.network.link import PeerLink, SyncError
from laneracer.rendering import HeadlessRenderer
from laneracer.session import GameSession
from laneracer.simulation.game import RacingGame
from laneracer.workers import BackgroundWorker


logger = logging.getLogger("laneracer")


MODES = {
    "single": GameMode.SINGLE,
    "splitscreen": GameMode.SPLITSCREEN,
    "career": GameMode.CAREER,
    "replay": GameMode.REPLAY,
}


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="LaneRacer lane-based racing simulation",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    # Quick single-player run
    laneracer --ticks 1200 --seed 7

    # Career mode with debug logging
    laneracer --mode career --log-level DEBUG

    # Two machines: host on one, join from the other
    laneracer --host --port 9999
    laneracer --join 192.168.1.20 --port 9999
        """
    )

    parser.add_argument(
        "--mode",
        choices=sorted(MODES),
        default="single",
        help="Game mode (default: single)"
    )

    net_group = parser.add_argument_group("Network Play")
    roles = net_group.add_mutually_exclusive_group()
    roles.add_argument(
        "--host",
        action="store_true",
        help="Host a game and wait for player 2"
    )
    roles.add_argument(
        "--join",
        metavar="HOST",
        help="Join a game hosted at HOST"
    )
    net_group.add_argument(
        "--port",
        type=int,
        default=9999,
        help="Network port (default: 9999)"
    )

    parser.add_argument(
        "--ticks",
        type=int,
        default=600,
        help="Ticks to run before quitting, 0 for no limit (default: 600)"
    )
    parser.add_argument(
        "--seed",
        type=int,
        help="Random seed for a reproducible run"
    )
    parser.add_argument(
        "--no-audio",
        action="store_true",
        help="Disable sound and music"
    )
    parser.add_argument(
        "--data-dir",
        type=Path,
        default=Path("."),
        help="Directory for replays and high scores (default: .)"
    )
    parser.add_argument(
        "--player",
        default="player",
        help="Name for the high-score table (default: player)"
    )

    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="INFO",
        help="Logging level (default: INFO)"
    )
    parser.add_argument(
        "--log-file",
        type=str,
        help="Also write the log to this file"
    )

    return parser.parse_args(argv)


def _setup_logging(level: str, log_file: str | None) -> None:
    """Configure logging."""
    log_format = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]

    if log_file:
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(
        level=getattr(logging, level),
        format=log_format,
        handlers=handlers
    )


def _open_link(args: argparse.Namespace, config: GameConfig) -> PeerLink | None:
    """Run the network handshake before any tick.

    Raises:
        SyncError: If no peer could be reached
    """
    if not args.host and not args.join:
        return None

    link = PeerLink(config.network)
    if args.host:
        logger.info("Waiting for player 2 on port %d...", args.port)
        link.serve(args.port)
    else:
        link.connect(args.join, args.port)
    return link


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = parse_args(argv)
    _setup_logging(args.log_level, args.log_file)

    config = GameConfig(
        seed=args.seed,
        data_dir=args.data_dir,
        player_name=args.player,
    )
    config.network.port = args.port
    config.audio.enabled = not args.no_audio

    try:
        link = _open_link(args, config)
    except SyncError as e:
        logger.error("Network setup failed: %s", e)
        return 1

    worker = BackgroundWorker(max_workers=2, name="laneracer-bg")
    audio = AudioManager(config.audio, worker) if config.audio.enabled else None
    game = RacingGame(config, mode=MODES[args.mode], audio=audio, link=link, worker=worker)
    renderer = HeadlessRenderer(
        max_ticks=args.ticks or None,
        seed=args.seed,
        lane_count=config.lane_count,
    )
    session = GameSession(game, renderer, fixed_dt=config.frame_interval)

    try:
        summary = session.run()
    except RuntimeError as e:
        logger.error("Session failed: %s", e)
        return 1
    except KeyboardInterrupt:
        logger.info("Interrupted")
        return 130
    finally:
        worker.shutdown(wait=True)

    logger.info("=" * 60)
    logger.info("Final score: %d", summary.score)
    logger.info("Distance: %.0f", summary.distance)
    logger.info("Time: %.1fs", summary.time)
    logger.info("Level: %d", summary.level)
    if summary.winner is not None:
        logger.info("Player 2 score: %d (winner: player %d)", summary.player2_score, summary.winner)
    for rank, record in enumerate(game.high_scores()[:3], start=1):
        logger.info("#%d %s: %d", rank, record.get("player"), record.get("score", 0))
    return 0


if __name__ == "__main__":
    sys.exit(main())
