from __future__ import annotations

from typing import Dict, List, Optional, Sequence

from .data_models import AgentState, WinCondition


class RankingInvariantError(RuntimeError):
    """An agent was recorded as finishing twice."""


class RankingRecorder:
    """Append-only finish-order ledger."""

    def __init__(self, total: int = 0) -> None:
        self.total = total
        self._entries: List[AgentState] = []
        self._ranked_ids: set[str] = set()

    @property
    def entries(self) -> Sequence[AgentState]:
        return tuple(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def reset(self, total: int = 0) -> None:
        self.total = total
        self._entries = []
        self._ranked_ids = set()

    def record_finish(self, agent: AgentState) -> int:
        """Appends the agent and returns its 1-based place."""
        if agent.agent_id in self._ranked_ids:
            raise RankingInvariantError(f"Agent '{agent.agent_id}' is already ranked")
        self._entries.append(agent)
        self._ranked_ids.add(agent.agent_id)
        return len(self._entries)

    def is_ranked(self, agent_id: str) -> bool:
        return agent_id in self._ranked_ids

    def is_complete(self) -> bool:
        return self.total > 0 and len(self._entries) == self.total

    def ids(self) -> List[str]:
        return [agent.agent_id for agent in self._entries]

    def positions(self) -> Dict[str, int]:
        return {agent.agent_id: place for place, agent in enumerate(self._entries, start=1)}

    def winner(self) -> Optional[AgentState]:
        return self._entries[0] if self._entries else None

    def loser(self) -> Optional[AgentState]:
        if not self.is_complete():
            return None
        return self._entries[-1]

    def picked(self, condition: WinCondition) -> Optional[AgentState]:
        if condition is WinCondition.FIRST:
            return self.winner()
        return self.loser()
