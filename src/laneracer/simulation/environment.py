"""
Environment cycle - Track shape and weather over time.

Provides:
- Curve offset and elevation oscillation
- Tunnel lighting
- Weighted weather rerolls outside career mode
"""

from dataclasses import dataclass
import logging
import numpy as np

from laneracer.models import GameMode, TrackType, Weather


logger = logging.getLogger(__name__)


@dataclass
class EnvironmentConfig:
    """Environment cycle configuration."""
    # Curve oscillation: sin(t*f1)*a1 + sin(t*f2)*a2
    curve_freq_primary: float = 0.3
    curve_amp_primary: float = 2.0
    curve_freq_secondary: float = 0.15
    curve_amp_secondary: float = 1.5

    # Elevation timer runs at this fraction of real time
    elevation_rate: float = 0.5

    # Tunnel darkness: sin(t*f)*a + base
    tunnel_freq: float = 0.5
    tunnel_amp: float = 0.3
    tunnel_base: float = 0.5

    # Weather rerolls (seconds)
    first_weather_change_s: float = 30.0
    weather_change_min_s: int = 30
    weather_change_max_s: int = 60

    # Cumulative percent thresholds for clear/rain/fog (night takes the rest)
    clear_percent: int = 40
    rain_percent: int = 25
    fog_percent: int = 20


class EnvironmentCycle:
    """Advances track geometry effects and weather.

    All outputs are pure functions of accumulated time, track type and
    game mode, apart from the random weather reroll.
    """

    def __init__(
        self,
        track: TrackType = TrackType.HIGHWAY,
        weather: Weather = Weather.CLEAR,
        mode: GameMode = GameMode.SINGLE,
        config: EnvironmentConfig | None = None,
        rng: np.random.Generator | None = None,
    ):
        """Initialize environment.

        Args:
            track: Active track type
            weather: Initial weather
            mode: Game mode (career pins its own weather)
            config: Environment configuration
            rng: Random source for weather rerolls
        """
        self.config = config or EnvironmentConfig()
        self._rng = rng or np.random.default_rng()
        self._track = track
        self._weather = weather
        self._mode = mode

        self._curve_timer: float = 0.0
        self._elevation_timer: float = 0.0
        self._weather_timer: float = self.config.first_weather_change_s

        self._curve: float = 0.0
        self._elevation: float = 0.0
        self._tunnel_darkness: float = 0.0

    @property
    def track(self) -> TrackType:
        """Active track type."""
        return self._track

    @property
    def weather(self) -> Weather:
        """Current weather."""
        return self._weather

    @property
    def curve(self) -> float:
        """Horizontal curve offset."""
        return self._curve

    @property
    def elevation(self) -> float:
        """Elevation in [-1, 1]; zero off mountain tracks."""
        return self._elevation

    @property
    def tunnel_darkness(self) -> float:
        """Tunnel darkness in [0.2, 0.8]; zero off tunnel tracks."""
        return self._tunnel_darkness

    @property
    def weather_timer(self) -> float:
        """Seconds until the next weather reroll."""
        return self._weather_timer

    def set_track(self, track: TrackType, weather: Weather | None = None) -> None:
        """Switch track type, optionally pinning the weather.

        Args:
            track: New track type
            weather: Weather to pin (unchanged if None)
        """
        self._track = track
        if weather is not None:
            self._weather = weather

    def update(self, dt: float) -> None:
        """Advance the cycle by one tick.

        Args:
            dt: Time step in seconds
        """
        cfg = self.config

        self._curve_timer += dt
        t = self._curve_timer
        self._curve = float(
            np.sin(t * cfg.curve_freq_primary) * cfg.curve_amp_primary
            + np.sin(t * cfg.curve_freq_secondary) * cfg.curve_amp_secondary
        )

        self._elevation_timer += dt * cfg.elevation_rate
        if self._track == TrackType.MOUNTAIN:
            self._elevation = float(np.sin(self._elevation_timer))
        else:
            self._elevation = 0.0

        if self._track == TrackType.TUNNEL:
            self._tunnel_darkness = float(
                np.sin(t * cfg.tunnel_freq) * cfg.tunnel_amp + cfg.tunnel_base
            )
        else:
            self._tunnel_darkness = 0.0

        self._weather_timer -= dt
        if self._weather_timer <= 0 and self._mode != GameMode.CAREER:
            self.change_weather()
            self._weather_timer = float(
                self._rng.integers(cfg.weather_change_min_s, cfg.weather_change_max_s)
            )

    def change_weather(self) -> Weather:
        """Roll new weather from the weighted table.

        Returns:
            The new weather
        """
        cfg = self.config
        roll = int(self._rng.integers(100))

        if roll < cfg.clear_percent:
            weather = Weather.CLEAR
        elif roll < cfg.clear_percent + cfg.rain_percent:
            weather = Weather.RAIN
        elif roll < cfg.clear_percent + cfg.rain_percent + cfg.fog_percent:
            weather = Weather.FOG
        else:
            weather = Weather.NIGHT

        if weather != self._weather:
            logger.debug("Weather changed: %s -> %s", self._weather.name, weather.name)
        self._weather = weather
        return weather

    def get_state(self) -> dict:
        """Get environment state.

        Returns:
            Dictionary containing environment state
        """
        return {
            "track": self._track.name,
            "weather": self._weather.name,
            "curve": self._curve,
            "elevation": self._elevation,
            "tunnel_darkness": self._tunnel_darkness,
            "weather_timer": self._weather_timer,
        }
