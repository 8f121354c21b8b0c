from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple

from race_game.config import BALANCE_CONFIG

from .data_models import WinCondition


@dataclass(frozen=True)
class CameraTier:
    name: str
    end_fraction: float
    weight: float


DEFAULT_CAMERA_TIERS: Tuple[CameraTier, ...] = (
    CameraTier("leading", 0.3, 0.40),
    CameraTier("middle", 0.7, 0.35),
    CameraTier("trailing", 1.0, 0.25),
)

HORSE_COLORS: Tuple[str, ...] = (
    "#E74C3C", "#3498DB", "#2ECC71", "#F39C12", "#9B59B6",
    "#1ABC9C", "#E91E63", "#00BCD4", "#FF5722", "#795548",
    "#607D8B", "#8BC34A", "#FFC107", "#673AB7", "#009688",
)


@dataclass(frozen=True)
class RaceSettings:
    """Every tunable number the engine uses. Times in seconds, distances in track units."""

    lane_count: int = 5
    track_start: float = 80.0
    finish_line: float = 29800.0
    start_jitter: float = 40.0
    base_speed_range: Tuple[float, float] = (250.0, 290.0)
    speed_factor_range: Tuple[float, float] = (0.85, 1.15)
    max_frame_delta: Optional[float] = 0.25

    drift_interval: float = 1.0
    drift_rate: float = 25.0
    drift_limit: float = 20.0

    obstacles_enabled: bool = True
    spawn_interval: float = 0.3
    spawn_count_range: Tuple[int, int] = (1, 2)
    trailing_margin: float = 200.0
    lookahead: float = 1500.0
    finish_safety_margin: float = 100.0
    max_live_obstacles: int = 40
    collision_distance: float = 50.0

    camera_switch_interval: float = 3.0
    camera_tiers: Tuple[CameraTier, ...] = DEFAULT_CAMERA_TIERS

    effect_feed_size: int = 8
    win_condition: WinCondition = WinCondition.LAST
    colors: Tuple[str, ...] = field(default=HORSE_COLORS)

    def __post_init__(self) -> None:
        if self.lane_count < 1:
            raise ValueError("lane_count must be at least 1")
        if self.finish_line <= self.track_start:
            raise ValueError("finish_line must lie beyond track_start")
        if self.max_live_obstacles < 1:
            raise ValueError("max_live_obstacles must be at least 1")
        if not self.camera_tiers:
            raise ValueError("camera_tiers must not be empty")

    @property
    def track_length(self) -> float:
        return self.finish_line - self.track_start

    @classmethod
    def from_config(cls, config: Optional[Dict[str, Any]] = None) -> "RaceSettings":
        """Builds settings from the ``race_engine`` block, keeping defaults for missing keys."""
        source = BALANCE_CONFIG if config is None else config
        engine = source.get("race_engine") if isinstance(source, dict) else None
        if not isinstance(engine, dict):
            return cls()

        defaults = cls()
        drift = engine.get("drift") or {}
        obstacles = engine.get("obstacles") or {}
        camera = engine.get("camera") or {}

        tiers = defaults.camera_tiers
        if camera.get("tiers"):
            tiers = tuple(
                CameraTier(
                    name=str(tier.get("name", f"tier{idx}")),
                    end_fraction=float(tier["end_fraction"]),
                    weight=float(tier["weight"]),
                )
                for idx, tier in enumerate(camera["tiers"])
            )

        max_delta = engine.get("max_frame_delta", defaults.max_frame_delta)
        return cls(
            lane_count=int(engine.get("lane_count", defaults.lane_count)),
            track_start=float(engine.get("track_start", defaults.track_start)),
            finish_line=float(engine.get("finish_line", defaults.finish_line)),
            start_jitter=float(engine.get("start_jitter", defaults.start_jitter)),
            base_speed_range=(
                float(engine.get("base_speed_min", defaults.base_speed_range[0])),
                float(engine.get("base_speed_max", defaults.base_speed_range[1])),
            ),
            speed_factor_range=(
                float(engine.get("speed_factor_min", defaults.speed_factor_range[0])),
                float(engine.get("speed_factor_max", defaults.speed_factor_range[1])),
            ),
            max_frame_delta=None if max_delta is None else float(max_delta),
            drift_interval=float(drift.get("interval", defaults.drift_interval)),
            drift_rate=float(drift.get("rate", defaults.drift_rate)),
            drift_limit=float(drift.get("limit", defaults.drift_limit)),
            obstacles_enabled=bool(obstacles.get("enabled", defaults.obstacles_enabled)),
            spawn_interval=float(obstacles.get("spawn_interval", defaults.spawn_interval)),
            spawn_count_range=(
                int(obstacles.get("min_per_spawn", defaults.spawn_count_range[0])),
                int(obstacles.get("max_per_spawn", defaults.spawn_count_range[1])),
            ),
            trailing_margin=float(obstacles.get("trailing_margin", defaults.trailing_margin)),
            lookahead=float(obstacles.get("lookahead", defaults.lookahead)),
            finish_safety_margin=float(obstacles.get("finish_safety_margin", defaults.finish_safety_margin)),
            max_live_obstacles=int(obstacles.get("max_live", defaults.max_live_obstacles)),
            collision_distance=float(obstacles.get("collision_distance", defaults.collision_distance)),
            camera_switch_interval=float(camera.get("switch_interval", defaults.camera_switch_interval)),
            camera_tiers=tiers,
            effect_feed_size=int(engine.get("effect_feed_size", defaults.effect_feed_size)),
            win_condition=WinCondition.from_str(engine.get("win_condition", defaults.win_condition.value)),
        )
