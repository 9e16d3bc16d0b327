"""
Powerups - Timed effect states, boost charge and combo counter.

Every effect follows the same cycle:
    Inactive (remaining=0) -> Active (remaining=duration) -> Inactive

Boost charge is kept apart from the boost effect's countdown. Activating
boost drains the whole stored charge, whatever its size.
"""

from dataclasses import dataclass, replace
from enum import Enum
from typing import Dict


class Effect(Enum):
    """Named timed effects."""
    BOOST = "boost"
    SHIELD = "shield"
    STAR = "star"
    MAGNET = "magnet"
    SLOWMO = "slowmo"


@dataclass
class PowerupState:
    """State of a single effect."""
    active: bool = False
    remaining: float = 0.0
    cooldown: float = 0.0


@dataclass
class PowerupConfig:
    """Powerup timing configuration."""
    boost_duration: float = 3.0
    shield_duration: float = 5.0
    star_duration: float = 7.0
    magnet_duration: float = 10.0
    slowmo_duration: float = 5.0

    max_boost_charge: int = 200
    combo_duration: float = 3.0

    def duration_of(self, effect: Effect) -> float:
        """Default duration for an effect."""
        return {
            Effect.BOOST: self.boost_duration,
            Effect.SHIELD: self.shield_duration,
            Effect.STAR: self.star_duration,
            Effect.MAGNET: self.magnet_duration,
            Effect.SLOWMO: self.slowmo_duration,
        }[effect]


class PowerupManager:
    """Owns all effect states for a game session.

    Usage:
        powerups = PowerupManager()
        powerups.add_boost_charge(100)
        if powerups.try_activate_boost():
            ...
        powerups.update(dt)
    """

    def __init__(self, config: PowerupConfig | None = None):
        """Initialize with every effect inactive.

        Args:
            config: Powerup configuration
        """
        self.config = config or PowerupConfig()
        self._states: Dict[Effect, PowerupState] = {}
        self._boost_charge: float = 0.0
        self._combo: int = 0
        self._combo_timer: float = 0.0
        self.reset()

    @property
    def boost_charge(self) -> float:
        """Stored boost charge (0..max_boost_charge)."""
        return self._boost_charge

    @property
    def is_boost_active(self) -> bool:
        return self._states[Effect.BOOST].active

    @property
    def is_invincible(self) -> bool:
        """Star power makes the player immune to damage."""
        return self._states[Effect.STAR].active

    @property
    def combo(self) -> int:
        return self._combo

    @property
    def combo_timer(self) -> float:
        return self._combo_timer

    def state(self, effect: Effect) -> PowerupState:
        """Get a copy of one effect's state."""
        return replace(self._states[effect])

    def states(self) -> Dict[Effect, PowerupState]:
        """Get copies of all effect states."""
        return {effect: replace(s) for effect, s in self._states.items()}

    def reset(self) -> None:
        """Clear every effect, the boost charge and the combo."""
        self._states = {effect: PowerupState() for effect in Effect}
        self._boost_charge = 0.0
        self._combo = 0
        self._combo_timer = 0.0

    def update(self, dt: float) -> None:
        """Count down active effects, cooldowns and the combo window.

        An effect that reaches zero is deactivated in the same tick.

        Args:
            dt: Time step in seconds
        """
        for state in self._states.values():
            if state.active:
                state.remaining -= dt
                if state.remaining <= 0:
                    state.active = False
                    state.remaining = 0.0

            if state.cooldown > 0:
                state.cooldown = max(0.0, state.cooldown - dt)

        self._combo_timer = max(0.0, self._combo_timer - dt)
        if self._combo_timer <= 0:
            self._combo = 0

    def activate(self, effect: Effect, duration: float | None = None) -> None:
        """Activate an effect unconditionally.

        Args:
            effect: Effect to activate
            duration: Seconds of activity (config default if None)

        Raises:
            ValueError: If duration is not positive
        """
        if duration is None:
            duration = self.config.duration_of(effect)
        if duration <= 0:
            raise ValueError(f"Powerup duration must be positive, got {duration}")

        state = self._states[effect]
        state.active = True
        state.remaining = float(duration)

        if effect == Effect.BOOST:
            self._boost_charge = 0.0

    def add_boost_charge(self, amount: float) -> float:
        """Add boost charge, capped at the configured maximum.

        Returns:
            New charge level
        """
        self._boost_charge = min(
            self._boost_charge + amount,
            float(self.config.max_boost_charge),
        )
        return self._boost_charge

    def try_activate_boost(self) -> bool:
        """Activate boost if there is stored charge and it is not running.

        Returns:
            True if boost was activated
        """
        if self._boost_charge > 0 and not self.is_boost_active:
            self.activate(Effect.BOOST, self.config.boost_duration)
            return True
        return False

    def increment_combo(self) -> int:
        """Extend the pickup streak and restart its decay window.

        Returns:
            New combo count
        """
        self._combo += 1
        self._combo_timer = self.config.combo_duration
        return self._combo

    def reset_combo(self) -> None:
        """Break the streak."""
        self._combo = 0
        self._combo_timer = 0.0

    def get_state(self) -> dict:
        """Get powerup state.

        Returns:
            Dictionary containing powerup state
        """
        return {
            "effects": {
                effect.value: {
                    "active": s.active,
                    "remaining": s.remaining,
                    "cooldown": s.cooldown,
                }
                for effect, s in self._states.items()
            },
            "boost_charge": self._boost_charge,
            "combo": self._combo,
            "combo_timer": self._combo_timer,
        }
