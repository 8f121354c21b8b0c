from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Set, Tuple

from .data_models import ActiveEffect, AgentState, EffectEvent, Obstacle
from .effects import EffectCategory, EffectEntry, ObstacleKind, effect_for
from .settings import RaceSettings


@dataclass
class CollisionOutcome:
    """What one agent picked up during a single tick."""

    pushback: float = 0.0
    multiplier_kind: Optional[ObstacleKind] = None
    stunned: bool = False
    hits: List[ObstacleKind] = field(default_factory=list)


class CollisionResolver:
    """
    Two-phase agent/obstacle resolution.

    Candidates are gathered first against positions at the start of the tick,
    in agent-array order then obstacle order. They are then applied in that
    same order; the first candidate to reach an obstacle consumes it and
    later candidates for the same obstacle are dropped.
    """

    def __init__(self, settings: RaceSettings) -> None:
        self.settings = settings

    def collides(self, agent: AgentState, obstacle: Obstacle) -> bool:
        return (
            obstacle.active
            and obstacle.lane == agent.lane
            and abs(obstacle.position - agent.position) < self.settings.collision_distance
        )

    def collect_candidates(
        self, agents: Sequence[AgentState], obstacles: Sequence[Obstacle]
    ) -> List[Tuple[AgentState, Obstacle]]:
        candidates: List[Tuple[AgentState, Obstacle]] = []
        for agent in agents:
            for obstacle in obstacles:
                if self.collides(agent, obstacle):
                    candidates.append((agent, obstacle))
        return candidates

    def resolve(
        self,
        agents: Sequence[AgentState],
        obstacles: Sequence[Obstacle],
        now: float,
    ) -> Tuple[Dict[str, CollisionOutcome], List[EffectEvent]]:
        """Applies every winning candidate; ``agents`` must already be the eligible ones."""
        outcomes: Dict[str, CollisionOutcome] = {}
        events: List[EffectEvent] = []
        consumed: Set[str] = set()

        for agent, obstacle in self.collect_candidates(agents, obstacles):
            if obstacle.obstacle_id in consumed:
                continue
            consumed.add(obstacle.obstacle_id)
            obstacle.active = False

            outcome = outcomes.setdefault(agent.agent_id, CollisionOutcome())
            entry = self.apply_effect(agent, obstacle.kind, now, outcome)
            events.append(
                EffectEvent(
                    agent_id=agent.agent_id,
                    agent_name=agent.name,
                    kind=obstacle.kind,
                    category=entry.category,
                    text=entry.label,
                    position=agent.position,
                    lane=agent.lane,
                    timestamp=now,
                )
            )

        return outcomes, events

    def apply_effect(
        self,
        agent: AgentState,
        kind: ObstacleKind,
        now: float,
        outcome: Optional[CollisionOutcome] = None,
    ) -> EffectEntry:
        entry = effect_for(kind)
        if outcome is None:
            outcome = CollisionOutcome()
        outcome.hits.append(kind)

        if entry.category.is_multiplier:
            agent.active_effect = ActiveEffect(kind=kind, expires_at=now + entry.duration)
            outcome.multiplier_kind = kind
        elif entry.category is EffectCategory.STUN:
            agent.stun_until = now + entry.stun_duration
            outcome.stunned = True
        elif entry.category is EffectCategory.PUSHBACK:
            outcome.pushback = entry.pushback
        return entry
