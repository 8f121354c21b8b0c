"""
Race engine package implementing the lane race simulation.

The package is split into the effect catalog, data models, obstacle
spawning, collision resolution, ranking and camera direction. The race
loop composes these pieces and is driven by host-supplied timestamps.
"""

from .camera import CameraDirector  # noqa: F401
from .collisions import CollisionOutcome, CollisionResolver  # noqa: F401
from .data_models import (  # noqa: F401
    ActiveEffect,
    AgentProfile,
    AgentSnapshot,
    AgentState,
    CameraTarget,
    EffectEvent,
    InvalidRosterError,
    Obstacle,
    ObstacleSnapshot,
    RaceResult,
    RaceStatus,
    RosterEntry,
    TickSnapshot,
    WinCondition,
)
from .effects import EFFECT_CATALOG, EffectCategory, EffectEntry, ObstacleKind, effect_for  # noqa: F401
from .obstacles import ObstacleManager  # noqa: F401
from .ranking import RankingInvariantError, RankingRecorder  # noqa: F401
from .settings import CameraTier, RaceSettings  # noqa: F401
from .telemetry import TelemetryAgentFrame, TelemetryCollector, TelemetryFrame  # noqa: F401
from .race_loop import RaceLoop, assign_lanes, build_profiles  # noqa: F401

__all__ = [
    "CameraDirector",
    "CollisionOutcome",
    "CollisionResolver",
    "ActiveEffect",
    "AgentProfile",
    "AgentSnapshot",
    "AgentState",
    "CameraTarget",
    "EffectEvent",
    "InvalidRosterError",
    "Obstacle",
    "ObstacleSnapshot",
    "RaceResult",
    "RaceStatus",
    "RosterEntry",
    "TickSnapshot",
    "WinCondition",
    "EFFECT_CATALOG",
    "EffectCategory",
    "EffectEntry",
    "ObstacleKind",
    "effect_for",
    "ObstacleManager",
    "RankingInvariantError",
    "RankingRecorder",
    "CameraTier",
    "RaceSettings",
    "TelemetryAgentFrame",
    "TelemetryCollector",
    "TelemetryFrame",
    "RaceLoop",
    "assign_lanes",
    "build_profiles",
]
