from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional, Sequence


@dataclass
class TelemetryAgentFrame:
    agent_id: str
    name: str
    lane: int
    position: float
    lateral_offset: float
    distance_delta: float
    speed: float
    effect: Optional[str]
    stunned: bool
    finished: bool


@dataclass
class TelemetryFrame:
    tick: int
    time: float
    progress: float
    camera_target: Optional[str]
    agents: List[TelemetryAgentFrame] = field(default_factory=list)
    events: List[str] = field(default_factory=list)


class TelemetryCollector:
    def __init__(self) -> None:
        self.frames: List[TelemetryFrame] = []

    def record_frame(self, frame: TelemetryFrame) -> None:
        self.frames.append(frame)

    def export(self) -> Sequence[TelemetryFrame]:
        return tuple(self.frames)

    def to_dicts(self) -> List[Dict[str, Any]]:
        return [asdict(frame) for frame in self.frames]

    def clear(self) -> None:
        self.frames.clear()
