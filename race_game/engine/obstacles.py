from __future__ import annotations

import random
from typing import List, Sequence

from .data_models import AgentState, Obstacle
from .effects import OBSTACLE_KINDS
from .settings import RaceSettings


class ObstacleManager:
    """Spawns single-use hazards ahead of the field and keeps a bounded history of them."""

    def __init__(self, settings: RaceSettings, rng: random.Random) -> None:
        self.settings = settings
        self.rng = rng
        self._obstacles: List[Obstacle] = []
        self._timer = 0.0
        self._next_id = 0

    @property
    def obstacles(self) -> Sequence[Obstacle]:
        return self._obstacles

    @property
    def timer(self) -> float:
        return self._timer

    def reset(self) -> None:
        self._obstacles = []
        self._timer = 0.0
        self._next_id = 0

    def update(self, delta: float, agents: Sequence[AgentState]) -> List[Obstacle]:
        """Advances the spawn accumulator; returns the obstacles created this tick."""
        if not self.settings.obstacles_enabled:
            return []
        self._timer += delta
        if self._timer <= self.settings.spawn_interval:
            return []
        self._timer = 0.0
        return self.spawn_obstacles(agents)

    def spawn_obstacles(self, agents: Sequence[AgentState]) -> List[Obstacle]:
        racing = [agent for agent in agents if not agent.finished]
        if not racing:
            return []

        leader = max(racing, key=lambda a: a.position)
        trailer = min(racing, key=lambda a: a.position)
        min_pos = trailer.position + self.settings.trailing_margin
        max_pos = leader.position + self.settings.lookahead
        limit = self.settings.finish_line - self.settings.finish_safety_margin

        low, high = self.settings.spawn_count_range
        count = self.rng.randint(low, high)
        created: List[Obstacle] = []
        for _ in range(count):
            kind = self.rng.choice(OBSTACLE_KINDS)
            position = min_pos + self.rng.random() * (max_pos - min_pos)
            lane = self.rng.randrange(self.settings.lane_count)
            if position >= limit:
                continue
            obstacle = Obstacle(
                obstacle_id=f"obs-{self._next_id}",
                position=position,
                lane=lane,
                kind=kind,
            )
            self._next_id += 1
            created.append(obstacle)

        if created:
            self._obstacles.extend(created)
            self._prune()
        return created

    def add(self, obstacle: Obstacle) -> None:
        """Places a hand-made obstacle; used by tools and tests."""
        self._obstacles.append(obstacle)
        self._prune()

    def _prune(self) -> None:
        overflow = len(self._obstacles) - self.settings.max_live_obstacles
        if overflow > 0:
            del self._obstacles[:overflow]
