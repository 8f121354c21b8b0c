from __future__ import annotations

import random
from collections import deque
from typing import Any, Callable, Deque, Dict, Iterable, List, Optional, Sequence, Tuple

import numpy as np

from .camera import CameraDirector
from .collisions import CollisionResolver
from .data_models import (
    AgentProfile,
    AgentSnapshot,
    AgentState,
    CameraTarget,
    EffectEvent,
    InvalidRosterError,
    ObstacleSnapshot,
    RaceResult,
    RaceStatus,
    RosterEntry,
    TickSnapshot,
)
from .effects import speed_multiplier
from .obstacles import ObstacleManager
from .ranking import RankingRecorder
from .settings import RaceSettings
from .telemetry import TelemetryAgentFrame, TelemetryCollector, TelemetryFrame

RosterLike = Iterable[Any]


def normalise_roster(roster: RosterLike) -> List[RosterEntry]:
    """Accepts RosterEntry objects, (name, count) pairs or {"name", "count"} dicts."""
    entries: List[RosterEntry] = []
    for item in roster or ():
        if isinstance(item, RosterEntry):
            name, count = item.name, item.count
        elif isinstance(item, dict):
            name, count = item.get("name"), item.get("count", 1)
        elif isinstance(item, (tuple, list)) and len(item) == 2:
            name, count = item
        else:
            raise InvalidRosterError(f"Unsupported roster entry: {item!r}")

        name = str(name).strip() if name is not None else ""
        if not name:
            raise InvalidRosterError("Roster entry is missing a name")
        if isinstance(count, bool) or not isinstance(count, int) or count < 1:
            raise InvalidRosterError(f"Roster entry '{name}' has invalid count {count!r}")
        entries.append(RosterEntry(name=name, count=count))

    if not entries:
        raise InvalidRosterError("Roster is empty")
    return entries


def build_profiles(roster: RosterLike, rng: random.Random, settings: RaceSettings) -> List[AgentProfile]:
    """One colour per roster entry; each copy gets its own fixed base speed."""
    entries = normalise_roster(roster)
    low, high = settings.base_speed_range
    profiles: List[AgentProfile] = []
    for color_index, entry in enumerate(entries):
        color = settings.colors[color_index % len(settings.colors)]
        for _ in range(entry.count):
            profiles.append(
                AgentProfile(
                    agent_id=f"agent-{len(profiles)}",
                    name=entry.name,
                    color=color,
                    base_speed=low + rng.random() * (high - low),
                )
            )
    return profiles


def assign_lanes(count: int, lane_count: int) -> List[int]:
    """Least-used lane balancing; ties go to the lowest lane index."""
    usage = [0] * lane_count
    lanes: List[int] = []
    for _ in range(count):
        lane = usage.index(min(usage))
        usage[lane] += 1
        lanes.append(lane)
    return lanes


class RaceLoop:
    """
    Host-driven race simulation.

    The host feeds timestamps (seconds) into ``advance``; each call runs one
    tick and returns an immutable ``TickSnapshot``. Every random decision goes
    through ``rng`` so a seeded loop replays identically.
    """

    def __init__(
        self,
        settings: Optional[RaceSettings] = None,
        rng: Optional[random.Random] = None,
        rng_seed: Optional[int] = None,
        telemetry: Optional[TelemetryCollector] = None,
        verbose: bool = False,
    ) -> None:
        self.settings = settings or RaceSettings.from_config()
        self.rng = rng if rng is not None else random.Random(rng_seed)
        self.telemetry = telemetry
        self.verbose = verbose

        self.obstacles = ObstacleManager(self.settings, self.rng)
        self.collisions = CollisionResolver(self.settings)
        self.ranking = RankingRecorder()
        self.camera = CameraDirector(self.settings, self.rng)

        self._states: List[AgentState] = []
        self.status = RaceStatus.IDLE
        self.tick_index = 0
        self.elapsed = 0.0
        self._last_timestamp: Optional[float] = None
        self.effect_feed: Deque[EffectEvent] = deque(maxlen=self.settings.effect_feed_size)
        self._last_snapshot = self._snapshot(None, ())

    @property
    def states(self) -> Sequence[AgentState]:
        return self._states

    @property
    def last_snapshot(self) -> TickSnapshot:
        return self._last_snapshot

    # --- lifecycle -------------------------------------------------------

    def initialize(self, roster: RosterLike) -> List[AgentState]:
        profiles = build_profiles(roster, self.rng, self.settings)
        return self.load_profiles(profiles)

    def load_profiles(self, profiles: Sequence[AgentProfile]) -> List[AgentState]:
        if not profiles:
            raise InvalidRosterError("Roster is empty")
        ids = [profile.agent_id for profile in profiles]
        if len(set(ids)) != len(ids):
            raise InvalidRosterError("Agent ids must be unique")

        self.reset()
        lanes = assign_lanes(len(profiles), self.settings.lane_count)
        for profile, lane in zip(profiles, lanes):
            start = self.settings.track_start + self.rng.random() * self.settings.start_jitter
            self._states.append(AgentState(profile=profile, lane=lane, position=start))

        self.ranking.reset(total=len(self._states))
        self.camera.reset(self._states)
        self.status = RaceStatus.READY
        self._last_snapshot = self._snapshot(None, ())
        return list(self._states)

    def start(self, timestamp: float) -> None:
        if self.status is RaceStatus.IDLE:
            raise RuntimeError("Race has no agents; call initialize() first.")
        if self.status is not RaceStatus.READY:
            return
        self.status = RaceStatus.RACING
        self._last_timestamp = timestamp
        if self.verbose:
            print(f"[race] started with {len(self._states)} agents")

    def reset(self) -> None:
        self._states = []
        self.obstacles.reset()
        self.ranking.reset()
        self.camera.reset()
        self.status = RaceStatus.IDLE
        self.tick_index = 0
        self.elapsed = 0.0
        self._last_timestamp = None
        self.effect_feed.clear()
        if self.telemetry is not None:
            self.telemetry.clear()
        self._last_snapshot = self._snapshot(None, ())

    def is_finished(self) -> bool:
        return self.status is RaceStatus.FINISHED

    def focus_agent(self, agent_id: str) -> CameraTarget:
        return self.camera.focus_agent(self._states, agent_id)

    # --- tick driver -----------------------------------------------------

    def advance(self, timestamp: float) -> TickSnapshot:
        if self.status in (RaceStatus.IDLE, RaceStatus.FINISHED):
            return self._last_snapshot
        if self.status is RaceStatus.READY:
            self.start(timestamp)

        if timestamp < self._last_timestamp:
            raise ValueError(f"Timestamp went backwards: {timestamp} < {self._last_timestamp}")
        delta = self._frame_delta(timestamp - self._last_timestamp)
        self._last_timestamp = timestamp
        self.elapsed += delta

        previous_positions = {state.agent_id: state.position for state in self._states}
        self.obstacles.update(delta, self._states)
        events = self._step_agents(timestamp, delta)
        self.camera.update(delta, self._states)
        self.effect_feed.extend(events)

        if self.ranking.is_complete():
            self.status = RaceStatus.FINISHED
            if self.verbose:
                print(f"[race] complete after {self.elapsed:.2f}s")

        snapshot = self._snapshot(timestamp, events)
        if self.telemetry is not None:
            self._record_telemetry(snapshot, previous_positions)
        self.tick_index += 1
        self._last_snapshot = snapshot
        return snapshot

    def run_until_finished(
        self,
        dt: float = 1.0 / 60.0,
        max_time: float = 600.0,
        on_tick: Optional[Callable[[TickSnapshot], None]] = None,
        start_time: float = 0.0,
    ) -> List[TickSnapshot]:
        """Drives the loop with evenly spaced timestamps until every agent is ranked."""
        if self.status is RaceStatus.IDLE:
            raise RuntimeError("Race has no agents; call initialize() first.")
        if dt <= 0:
            raise ValueError("dt must be positive")

        snapshots: List[TickSnapshot] = []
        timestamp = self._last_timestamp if self._last_timestamp is not None else start_time
        if self.status is RaceStatus.READY:
            snapshots.append(self.advance(timestamp))

        max_ticks = int(max_time / dt)
        for step in range(1, max_ticks + 1):
            if self.is_finished():
                break
            snapshot = self.advance(timestamp + step * dt)
            snapshots.append(snapshot)
            if on_tick:
                on_tick(snapshot)

        return snapshots

    def result(self) -> RaceResult:
        condition = self.settings.win_condition
        picked = self.ranking.picked(condition)
        return RaceResult(
            ranking=tuple(agent.profile for agent in self.ranking.entries),
            win_condition=condition,
            picked=picked.profile if picked else None,
        )

    def progress_percent(self) -> float:
        if not self._states:
            return 0.0
        lead = max(state.position for state in self._states)
        ratio = (lead - self.settings.track_start) / self.settings.track_length
        return float(np.clip(ratio * 100.0, 0.0, 100.0))

    # --- agent updater ---------------------------------------------------

    def _frame_delta(self, raw_delta: float) -> float:
        limit = self.settings.max_frame_delta
        if limit is not None and raw_delta > limit:
            return limit
        return raw_delta

    def _step_agents(self, now: float, delta: float) -> List[EffectEvent]:
        raw_speeds: Dict[str, float] = {}
        eligible: List[AgentState] = []
        for state in self._states:
            if state.finished:
                continue
            if state.is_stunned(now):
                state.current_speed = 0.0
                continue
            raw_speeds[state.agent_id] = self._roll_speed(state, now)
            self._drift(state, now, delta)
            eligible.append(state)

        outcomes, events = self.collisions.resolve(eligible, self.obstacles.obstacles, now)

        finishers: List[Tuple[float, AgentState]] = []
        for state in eligible:
            outcome = outcomes.get(state.agent_id)
            pushback = outcome.pushback if outcome else 0.0
            speed = self._effective_speed(state, raw_speeds[state.agent_id], now)
            state.current_speed = speed

            travel = speed * delta
            position = max(self.settings.track_start, state.position + travel - pushback)
            if position >= self.settings.finish_line:
                overshoot = (position - self.settings.finish_line) / travel if travel > 0 else 0.0
                finishers.append((overshoot, state))
            state.position = position

        # whoever crossed earliest within the tick has the largest overshoot
        finishers.sort(key=lambda item: item[0], reverse=True)
        for _, state in finishers:
            self._finish(state, now)
        return events

    def _roll_speed(self, state: AgentState, now: float) -> float:
        low, high = self.settings.speed_factor_range
        speed = state.base_speed * self.rng.uniform(low, high)
        if state.active_effect is not None and not state.active_effect.is_active(now):
            state.active_effect = None
        return speed

    def _effective_speed(self, state: AgentState, raw_speed: float, now: float) -> float:
        if state.is_stunned(now):
            return 0.0
        effect = state.active_effect
        if effect is not None and effect.is_active(now):
            return raw_speed * speed_multiplier(effect.kind)
        return raw_speed

    def _drift(self, state: AgentState, now: float, delta: float) -> None:
        last = state.last_direction_change
        if last is None or now - last > self.settings.drift_interval:
            state.direction = self.rng.choice((-1, 0, 1))
            state.last_direction_change = now
        limit = self.settings.drift_limit
        offset = state.lateral_offset + state.direction * self.settings.drift_rate * delta
        state.lateral_offset = float(np.clip(offset, -limit, limit))

    def _finish(self, state: AgentState, now: float) -> None:
        state.position = self.settings.finish_line
        state.finished = True
        state.finish_timestamp = now
        state.current_speed = 0.0
        state.lateral_offset = 0.0
        state.active_effect = None
        state.stun_until = 0.0
        place = self.ranking.record_finish(state)
        if self.verbose:
            print(f"[race] #{place} {state.name} ({state.agent_id}) finished at t={self.elapsed:.2f}s")

    # --- views -----------------------------------------------------------

    def _snapshot(self, timestamp: Optional[float], events: Sequence[EffectEvent]) -> TickSnapshot:
        now = timestamp if timestamp is not None else 0.0
        agents = tuple(
            AgentSnapshot(
                agent_id=state.agent_id,
                name=state.name,
                color=state.profile.color,
                lane=state.lane,
                position=state.position,
                lateral_offset=state.lateral_offset,
                speed=state.current_speed,
                base_speed=state.base_speed,
                effect=state.active_effect.kind.value if state.active_effect else None,
                stunned=state.is_stunned(now) and not state.finished,
                finished=state.finished,
                finish_timestamp=state.finish_timestamp,
            )
            for state in self._states
        )
        obstacles = tuple(
            ObstacleSnapshot(
                obstacle_id=obstacle.obstacle_id,
                position=obstacle.position,
                lane=obstacle.lane,
                kind=obstacle.kind.value,
                active=obstacle.active,
            )
            for obstacle in self.obstacles.obstacles
        )
        return TickSnapshot(
            timestamp=timestamp,
            elapsed=self.elapsed,
            status=self.status,
            agents=agents,
            obstacles=obstacles,
            ranking=tuple(self.ranking.ids()),
            progress_percent=self.progress_percent(),
            effect_events=tuple(events),
            camera=self.camera.target,
        )

    def _record_telemetry(self, snapshot: TickSnapshot, previous_positions: Dict[str, float]) -> None:
        frames = [
            TelemetryAgentFrame(
                agent_id=agent.agent_id,
                name=agent.name,
                lane=agent.lane,
                position=agent.position,
                lateral_offset=agent.lateral_offset,
                distance_delta=agent.position - previous_positions.get(agent.agent_id, agent.position),
                speed=agent.speed,
                effect=agent.effect,
                stunned=agent.stunned,
                finished=agent.finished,
            )
            for agent in snapshot.agents
        ]
        self.telemetry.record_frame(
            TelemetryFrame(
                tick=self.tick_index,
                time=self.elapsed,
                progress=snapshot.progress_percent,
                camera_target=snapshot.camera.agent_id if snapshot.camera else None,
                agents=frames,
                events=[f"{event.agent_name}: {event.text}" for event in snapshot.effect_events],
            )
        )
