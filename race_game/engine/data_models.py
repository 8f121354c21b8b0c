from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Sequence

from .effects import EffectCategory, ObstacleKind


class InvalidRosterError(ValueError):
    """Raised when a roster cannot produce any agents."""


class WinCondition(Enum):
    """Which end of the ranking is the picked agent."""

    FIRST = "first"
    LAST = "last"

    @classmethod
    def from_str(cls, value: str) -> "WinCondition":
        try:
            return cls(str(value).lower())
        except ValueError as exc:
            raise ValueError(f"Unknown win condition: {value}") from exc


class RaceStatus(Enum):
    IDLE = "idle"
    READY = "ready"
    RACING = "racing"
    FINISHED = "finished"


@dataclass(frozen=True)
class RosterEntry:
    name: str
    count: int = 1


@dataclass(frozen=True)
class AgentProfile:
    agent_id: str
    name: str
    color: str
    base_speed: float


@dataclass(frozen=True)
class ActiveEffect:
    kind: ObstacleKind
    expires_at: float

    def is_active(self, now: float) -> bool:
        return now < self.expires_at


@dataclass
class AgentState:
    """Mutable per-tick agent state."""

    profile: AgentProfile
    lane: int
    position: float = 0.0
    lateral_offset: float = 0.0
    direction: int = 0
    last_direction_change: Optional[float] = None
    current_speed: float = 0.0
    active_effect: Optional[ActiveEffect] = None
    stun_until: float = 0.0
    finished: bool = False
    finish_timestamp: Optional[float] = None

    @property
    def agent_id(self) -> str:
        return self.profile.agent_id

    @property
    def name(self) -> str:
        return self.profile.name

    @property
    def base_speed(self) -> float:
        return self.profile.base_speed

    def is_stunned(self, now: float) -> bool:
        return now < self.stun_until


@dataclass
class Obstacle:
    obstacle_id: str
    position: float
    lane: int
    kind: ObstacleKind
    active: bool = True


@dataclass(frozen=True)
class EffectEvent:
    agent_id: str
    agent_name: str
    kind: ObstacleKind
    category: EffectCategory
    text: str
    position: float
    lane: int
    timestamp: float


@dataclass(frozen=True)
class CameraTarget:
    agent_id: str
    name: str
    manual: bool = False


@dataclass(frozen=True)
class AgentSnapshot:
    agent_id: str
    name: str
    color: str
    lane: int
    position: float
    lateral_offset: float
    speed: float
    base_speed: float
    effect: Optional[str]
    stunned: bool
    finished: bool
    finish_timestamp: Optional[float]


@dataclass(frozen=True)
class ObstacleSnapshot:
    obstacle_id: str
    position: float
    lane: int
    kind: str
    active: bool


@dataclass(frozen=True)
class TickSnapshot:
    timestamp: Optional[float]
    elapsed: float
    status: RaceStatus
    agents: Sequence[AgentSnapshot] = field(default_factory=tuple)
    obstacles: Sequence[ObstacleSnapshot] = field(default_factory=tuple)
    ranking: Sequence[str] = field(default_factory=tuple)
    progress_percent: float = 0.0
    effect_events: Sequence[EffectEvent] = field(default_factory=tuple)
    camera: Optional[CameraTarget] = None

    def agent(self, agent_id: str) -> AgentSnapshot:
        for snapshot in self.agents:
            if snapshot.agent_id == agent_id:
                return snapshot
        raise KeyError(f"Agent '{agent_id}' not in snapshot")


@dataclass(frozen=True)
class RaceResult:
    ranking: Sequence[AgentProfile]
    win_condition: WinCondition
    picked: Optional[AgentProfile] = None

    @property
    def names(self) -> List[str]:
        return [profile.name for profile in self.ranking]
