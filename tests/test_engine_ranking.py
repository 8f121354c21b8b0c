import pytest

from race_game.engine import AgentProfile, AgentState, RankingInvariantError, RankingRecorder, WinCondition


def _agent(idx: int) -> AgentState:
    profile = AgentProfile(agent_id=f"agent-{idx}", name=f"Runner {idx}", color="#000000", base_speed=270.0)
    return AgentState(profile=profile, lane=0)


def test_records_in_append_order_and_completes():
    ranking = RankingRecorder(total=3)
    agents = [_agent(2), _agent(0), _agent(1)]

    places = [ranking.record_finish(agent) for agent in agents]

    assert places == [1, 2, 3]
    assert ranking.ids() == ["agent-2", "agent-0", "agent-1"]
    assert ranking.positions()["agent-1"] == 3
    assert ranking.is_complete()


def test_second_record_for_same_agent_is_an_invariant_violation():
    ranking = RankingRecorder(total=2)
    agent = _agent(0)
    ranking.record_finish(agent)
    with pytest.raises(RankingInvariantError):
        ranking.record_finish(agent)
    assert len(ranking) == 1


def test_empty_ranking_is_never_complete():
    assert not RankingRecorder(total=0).is_complete()
    assert not RankingRecorder(total=2).is_complete()


def test_picked_agent_follows_win_condition():
    ranking = RankingRecorder(total=2)
    first, last = _agent(0), _agent(1)
    ranking.record_finish(first)

    assert ranking.picked(WinCondition.FIRST) is first
    assert ranking.picked(WinCondition.LAST) is None

    ranking.record_finish(last)
    assert ranking.picked(WinCondition.LAST) is last
    assert ranking.loser() is last


def test_reset_clears_entries():
    ranking = RankingRecorder(total=1)
    ranking.record_finish(_agent(0))
    ranking.reset()
    assert ranking.entries == ()
    assert not ranking.is_ranked("agent-0")
    assert ranking.total == 0
