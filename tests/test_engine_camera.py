import random
from typing import List

import pytest

from race_game.engine import AgentProfile, AgentState, CameraDirector, RaceSettings
from race_game.engine.camera import tier_ranges


class _ScriptedRandom(random.Random):
    """Returns the given values from random(), in order."""

    def __init__(self, values: List[float]) -> None:
        super().__init__(0)
        self._values = list(values)

    def random(self) -> float:
        return self._values.pop(0)


def _field(count: int) -> List[AgentState]:
    agents = []
    for idx in range(count):
        profile = AgentProfile(agent_id=f"agent-{idx}", name=f"Runner {idx}", color="#000000", base_speed=270.0)
        agents.append(AgentState(profile=profile, lane=idx % 5, position=1000.0 + idx * 10.0))
    return agents


def test_tier_ranges_for_ten_agents():
    settings = RaceSettings()
    assert tier_ranges(10, settings.camera_tiers) == [(0, 3), (3, 7), (7, 10)]
    assert tier_ranges(1, settings.camera_tiers) == [(0, 1), (1, 1), (1, 1)]


@pytest.mark.parametrize(
    "values, expected",
    [
        ([0.10, 0.99], 2),
        ([0.50, 0.00], 3),
        ([0.74, 0.99], 6),
        ([0.90, 0.99], 9),
        ([0.80, 0.00], 7),
    ],
)
def test_select_index_draws_tier_then_index(values, expected):
    director = CameraDirector(RaceSettings(), _ScriptedRandom(values))
    assert director.select_index(10) == expected


def test_single_agent_field_always_clamps_to_zero():
    for values in ([0.1, 0.5], [0.5, 0.5], [0.9, 0.5]):
        director = CameraDirector(RaceSettings(), _ScriptedRandom(values))
        assert director.select_index(1) == 0


def test_leading_tier_share_is_about_forty_percent():
    director = CameraDirector(RaceSettings(), random.Random(1234))
    agents = _field(10)
    ordered = sorted(agents, key=lambda a: a.position, reverse=True)
    leading_ids = {agent.agent_id for agent in ordered[:3]}

    hits = sum(1 for _ in range(1000) if director.select_target(agents).agent_id in leading_ids)

    assert abs(hits / 1000 - 0.40) < 0.05


def test_automatic_switch_fires_after_interval():
    director = CameraDirector(RaceSettings(), _ScriptedRandom([0.1, 0.0]))
    agents = _field(10)
    director.reset(agents)
    assert director.target.agent_id == "agent-0"

    director.update(2.0, agents)
    assert director.target.agent_id == "agent-0"
    director.update(1.5, agents)
    # leading tier, first index: the agent furthest along
    assert director.target.agent_id == "agent-9"
    assert director.timer == 0.0


def test_manual_focus_sets_target_and_restarts_interval():
    director = CameraDirector(RaceSettings(), _ScriptedRandom([0.1, 0.0]))
    agents = _field(4)
    director.reset(agents)
    director.update(2.5, agents)

    target = director.focus_agent(agents, "agent-2")

    assert target.agent_id == "agent-2"
    assert target.manual
    assert director.timer == 0.0
    director.update(2.5, agents)
    assert director.target.agent_id == "agent-2"
    director.update(1.0, agents)
    assert director.target.agent_id == "agent-3"
    assert not director.target.manual


def test_focus_unknown_agent_raises():
    director = CameraDirector(RaceSettings(), random.Random(0))
    with pytest.raises(KeyError):
        director.focus_agent(_field(2), "agent-99")


def test_finished_target_is_replaced_immediately():
    director = CameraDirector(RaceSettings(), random.Random(0))
    agents = _field(3)
    director.reset(agents)
    director.focus_agent(agents, "agent-0")
    agents[0].finished = True

    director.update(0.01, agents)

    assert director.target.agent_id == "agent-1"


def test_holds_last_target_when_everyone_finished():
    director = CameraDirector(RaceSettings(), random.Random(0))
    agents = _field(2)
    director.reset(agents)
    director.focus_agent(agents, "agent-1")
    for agent in agents:
        agent.finished = True

    director.update(10.0, agents)

    assert director.target.agent_id == "agent-1"
    assert director.timer == 0.0
