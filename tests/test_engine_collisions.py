import pytest

from race_game.engine import AgentProfile, AgentState, CollisionResolver, RaceSettings
from race_game.engine.data_models import ActiveEffect, Obstacle
from race_game.engine.effects import EffectCategory, ObstacleKind


def _agent(idx: int, position: float, lane: int = 0) -> AgentState:
    profile = AgentProfile(agent_id=f"agent-{idx}", name=f"Runner {idx}", color="#000000", base_speed=270.0)
    return AgentState(profile=profile, lane=lane, position=position)


def _obstacle(idx: int, position: float, kind: ObstacleKind, lane: int = 0) -> Obstacle:
    return Obstacle(obstacle_id=f"obs-{idx}", position=position, lane=lane, kind=kind)


def test_predicate_requires_same_lane_active_and_proximity():
    resolver = CollisionResolver(RaceSettings())
    agent = _agent(0, 1000.0, lane=2)
    assert resolver.collides(agent, _obstacle(0, 1049.0, ObstacleKind.ROCK, lane=2))
    assert not resolver.collides(agent, _obstacle(1, 1050.0, ObstacleKind.ROCK, lane=2))
    assert not resolver.collides(agent, _obstacle(2, 1000.0, ObstacleKind.ROCK, lane=1))
    inactive = _obstacle(3, 1000.0, ObstacleKind.ROCK, lane=2)
    inactive.active = False
    assert not resolver.collides(agent, inactive)


def test_first_agent_in_array_order_consumes_the_obstacle():
    resolver = CollisionResolver(RaceSettings())
    first = _agent(0, 1010.0)
    second = _agent(1, 1000.0)
    rock = _obstacle(0, 1005.0, ObstacleKind.ROCK)

    outcomes, events = resolver.resolve([first, second], [rock], now=2.0)

    assert not rock.active
    assert first.active_effect == ActiveEffect(kind=ObstacleKind.ROCK, expires_at=2.5)
    assert second.active_effect is None
    assert list(outcomes) == ["agent-0"]
    assert [event.agent_id for event in events] == ["agent-0"]
    assert events[0].category is EffectCategory.SLOW
    assert events[0].text == "Slowed!"


def test_array_order_decides_even_when_second_agent_is_closer():
    resolver = CollisionResolver(RaceSettings())
    far = _agent(0, 960.0)
    near = _agent(1, 1000.0)
    star = _obstacle(0, 1000.0, ObstacleKind.STAR)

    resolver.resolve([far, near], [star], now=0.0)

    assert far.active_effect is not None
    assert near.active_effect is None


def test_stun_sets_stun_until_without_touching_active_effect():
    resolver = CollisionResolver(RaceSettings())
    agent = _agent(0, 1000.0)
    agent.active_effect = ActiveEffect(kind=ObstacleKind.BOOST, expires_at=5.0)

    outcomes, _ = resolver.resolve([agent], [_obstacle(0, 1000.0, ObstacleKind.ICE)], now=1.0)

    assert agent.stun_until == pytest.approx(1.6)
    assert outcomes["agent-0"].stunned
    assert agent.active_effect.kind is ObstacleKind.BOOST


def test_new_multiplier_effect_overwrites_previous_one():
    resolver = CollisionResolver(RaceSettings())
    agent = _agent(0, 1000.0)
    agent.active_effect = ActiveEffect(kind=ObstacleKind.ROCK, expires_at=10.0)

    resolver.resolve([agent], [_obstacle(0, 1000.0, ObstacleKind.SPRING)], now=1.0)

    assert agent.active_effect.kind is ObstacleKind.SPRING
    assert agent.active_effect.expires_at == pytest.approx(1.6)


def test_pushback_is_reported_not_stored_and_never_sums():
    resolver = CollisionResolver(RaceSettings())
    agent = _agent(0, 1000.0)
    obstacles = [_obstacle(0, 990.0, ObstacleKind.BOMB), _obstacle(1, 1010.0, ObstacleKind.WIND)]

    outcomes, events = resolver.resolve([agent], obstacles, now=0.0)

    assert outcomes["agent-0"].pushback == 150.0
    assert outcomes["agent-0"].hits == [ObstacleKind.BOMB, ObstacleKind.WIND]
    assert agent.active_effect is None
    assert agent.stun_until == 0.0
    assert len(events) == 2
    assert all(not obstacle.active for obstacle in obstacles)


def test_candidates_follow_agent_then_obstacle_order():
    resolver = CollisionResolver(RaceSettings())
    a = _agent(0, 1000.0)
    b = _agent(1, 1000.0, lane=1)
    obstacles = [
        _obstacle(0, 1000.0, ObstacleKind.ROCK, lane=1),
        _obstacle(1, 1000.0, ObstacleKind.PUDDLE, lane=0),
        _obstacle(2, 1020.0, ObstacleKind.ROCK, lane=0),
    ]
    pairs = resolver.collect_candidates([a, b], obstacles)
    assert [(agent.agent_id, obstacle.obstacle_id) for agent, obstacle in pairs] == [
        ("agent-0", "obs-1"),
        ("agent-0", "obs-2"),
        ("agent-1", "obs-0"),
    ]
