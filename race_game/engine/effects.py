from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional, Tuple


class EffectCategory(Enum):
    """How a hazard changes the agent that runs into it."""

    SLOW = "slow"
    BOOST = "boost"
    SUPERBOOST = "superboost"
    STUN = "stun"
    PUSHBACK = "pushback"

    @property
    def is_multiplier(self) -> bool:
        return self in (EffectCategory.SLOW, EffectCategory.BOOST, EffectCategory.SUPERBOOST)


class ObstacleKind(Enum):
    ROCK = "rock"
    PUDDLE = "puddle"
    WIND = "wind"
    BANANA = "banana"
    BOMB = "bomb"
    ICE = "ice"
    SPRING = "spring"
    BOOST = "boost"
    STAR = "star"

    @classmethod
    def from_str(cls, value: str) -> "ObstacleKind":
        try:
            return cls(value.lower())
        except ValueError as exc:
            raise ValueError(f"Unknown obstacle kind: {value}") from exc


@dataclass(frozen=True)
class EffectEntry:
    kind: ObstacleKind
    category: EffectCategory
    name: str
    multiplier: float = 1.0
    duration: float = 0.0
    stun_duration: float = 0.0
    pushback: float = 0.0

    @property
    def label(self) -> str:
        """Short text shown when the effect triggers."""
        if self.category is EffectCategory.SLOW:
            return "Slowed!"
        if self.category is EffectCategory.SUPERBOOST:
            return "Super Boost!!"
        if self.category is EffectCategory.BOOST:
            return "Boost!"
        return f"{self.name}!"


# Durations in seconds, pushback in track units.
EFFECT_CATALOG: Dict[ObstacleKind, EffectEntry] = {
    ObstacleKind.ROCK: EffectEntry(ObstacleKind.ROCK, EffectCategory.SLOW, "Rock", multiplier=0.4, duration=0.5),
    ObstacleKind.PUDDLE: EffectEntry(ObstacleKind.PUDDLE, EffectCategory.SLOW, "Puddle", multiplier=0.5, duration=0.4),
    ObstacleKind.WIND: EffectEntry(ObstacleKind.WIND, EffectCategory.PUSHBACK, "Whirlwind", pushback=150.0),
    ObstacleKind.BANANA: EffectEntry(ObstacleKind.BANANA, EffectCategory.STUN, "Banana", stun_duration=0.8),
    ObstacleKind.BOMB: EffectEntry(ObstacleKind.BOMB, EffectCategory.PUSHBACK, "Bomb", pushback=250.0),
    ObstacleKind.ICE: EffectEntry(ObstacleKind.ICE, EffectCategory.STUN, "Ice", stun_duration=0.6),
    ObstacleKind.SPRING: EffectEntry(ObstacleKind.SPRING, EffectCategory.BOOST, "Spring", multiplier=1.8, duration=0.6),
    ObstacleKind.BOOST: EffectEntry(ObstacleKind.BOOST, EffectCategory.BOOST, "Booster", multiplier=2.2, duration=0.8),
    ObstacleKind.STAR: EffectEntry(ObstacleKind.STAR, EffectCategory.SUPERBOOST, "Star", multiplier=3.0, duration=1.0),
}

OBSTACLE_KINDS: Tuple[ObstacleKind, ...] = tuple(EFFECT_CATALOG.keys())


def effect_for(kind: ObstacleKind) -> EffectEntry:
    entry: Optional[EffectEntry] = EFFECT_CATALOG.get(kind)
    if entry is None:
        raise KeyError(f"No effect registered for obstacle kind '{kind}'")
    return entry


def speed_multiplier(kind: Optional[ObstacleKind]) -> float:
    """Multiplier a running effect applies to speed (1.0 for none)."""
    if kind is None:
        return 1.0
    entry = effect_for(kind)
    return entry.multiplier if entry.category.is_multiplier else 1.0
