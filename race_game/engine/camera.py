from __future__ import annotations

import math
import random
from typing import List, Optional, Sequence, Tuple

import numpy as np

from .data_models import AgentState, CameraTarget
from .settings import CameraTier, RaceSettings


def _tier_bound(count: int, fraction: float) -> int:
    # round first so 10 * 0.3 lands on 3, not 4
    return int(math.ceil(round(count * fraction, 9)))


def tier_ranges(count: int, tiers: Sequence[CameraTier]) -> List[Tuple[int, int]]:
    """Index ranges [start, end) of each tier over ``count`` agents sorted by position."""
    ranges: List[Tuple[int, int]] = []
    start = 0
    for tier in tiers:
        end = max(start, min(count, _tier_bound(count, tier.end_fraction)))
        ranges.append((start, end))
        start = end
    return ranges


class CameraDirector:
    """
    Picks which agent the spectator follows.

    Every ``camera_switch_interval`` seconds a new target is drawn from the
    still-racing field, weighted towards the front. ``focus_agent`` overrides
    the choice and restarts the interval. A focused agent that finishes is
    replaced right away by the first agent still racing.
    """

    def __init__(self, settings: RaceSettings, rng: random.Random) -> None:
        self.settings = settings
        self.rng = rng
        self.target: Optional[CameraTarget] = None
        self._timer = 0.0

    @property
    def timer(self) -> float:
        return self._timer

    def reset(self, agents: Sequence[AgentState] = ()) -> None:
        self._timer = 0.0
        self.target = None
        if agents:
            self.target = CameraTarget(agent_id=agents[0].agent_id, name=agents[0].name)

    def focus_agent(self, agents: Sequence[AgentState], agent_id: str) -> CameraTarget:
        agent = next((a for a in agents if a.agent_id == agent_id), None)
        if agent is None:
            raise KeyError(f"Agent '{agent_id}' not found")
        self.target = CameraTarget(agent_id=agent.agent_id, name=agent.name, manual=True)
        self._timer = 0.0
        return self.target

    def update(self, delta: float, agents: Sequence[AgentState]) -> Optional[CameraTarget]:
        racing = [agent for agent in agents if not agent.finished]
        if not racing:
            return self.target

        self._timer += delta
        if self._timer > self.settings.camera_switch_interval:
            self._timer = 0.0
            self.target = self.select_target(racing)
        elif self._target_finished(agents):
            first = racing[0]
            self.target = CameraTarget(agent_id=first.agent_id, name=first.name)
        return self.target

    def select_target(self, racing: Sequence[AgentState]) -> Optional[CameraTarget]:
        if not racing:
            return self.target
        ordered = sorted(racing, key=lambda a: a.position, reverse=True)
        index = self.select_index(len(ordered))
        chosen = ordered[index]
        return CameraTarget(agent_id=chosen.agent_id, name=chosen.name)

    def select_index(self, count: int) -> int:
        """Weighted tier draw followed by a uniform pick inside the tier."""
        tiers = self.settings.camera_tiers
        ranges = tier_ranges(count, tiers)
        total_weight = sum(tier.weight for tier in tiers)

        roll = self.rng.random() * total_weight
        chosen = ranges[-1]
        cumulative = 0.0
        for tier, bounds in zip(tiers, ranges):
            cumulative += tier.weight
            if roll < cumulative:
                chosen = bounds
                break

        start, end = chosen
        index = start + int(math.floor(self.rng.random() * (end - start)))
        return int(np.clip(index, 0, count - 1))

    def _target_finished(self, agents: Sequence[AgentState]) -> bool:
        if self.target is None:
            return True
        current = next((a for a in agents if a.agent_id == self.target.agent_id), None)
        return current is None or current.finished
