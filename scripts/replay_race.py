"""
Generate telemetry dumps or lightweight visual replays for seeded lane races.

Examples:
    # Save the per-tick JSON for a race
    python scripts/replay_race.py --roster "Alice*2, Bob, Carol" --seed 3 --dump replays/race_3.json

    # Render a simple GIF/MP4 animation (requires matplotlib + ffmpeg/pillow)
    python scripts/replay_race.py --roster "Alice*2, Bob, Carol" --seed 3 --animate replays/race_3.gif
"""
from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.append(str(REPO_ROOT))

from race_game.engine import RaceLoop, RaceSettings, TelemetryCollector  # noqa: E402
from race_game.roster import parse_roster_or_raise  # noqa: E402

LANE_HEIGHT = 100.0

Frame = Dict[str, object]


def run_recorded_race(roster_text: str, seed: Optional[int], dt: float) -> Tuple[List[Frame], RaceSettings]:
    settings = RaceSettings.from_config()
    collector = TelemetryCollector()
    loop = RaceLoop(settings=settings, rng_seed=seed, telemetry=collector)
    loop.initialize(parse_roster_or_raise(roster_text))
    loop.run_until_finished(dt=dt)
    return collector.to_dicts(), settings


def dump_frames(frames: Sequence[Frame], output_path: Path) -> None:
    output_path.parent.mkdir(parents=True, exist_ok=True)
    with output_path.open("w", encoding="utf-8") as fh:
        json.dump(list(frames), fh, indent=2)
    print(f"[replay] wrote {len(frames)} frames to {output_path}")


def lane_centres(lane_count: int) -> np.ndarray:
    return (np.arange(lane_count) + 0.5) * LANE_HEIGHT


def thin_frames(frames: Sequence[Frame], step: int) -> List[Frame]:
    if step <= 1:
        return list(frames)
    thinned = list(frames[::step])
    if frames and thinned[-1] is not frames[-1]:
        thinned.append(frames[-1])
    return thinned


def animate_frames(
    frames: Sequence[Frame],
    settings: RaceSettings,
    output_path: Path,
    fps: int = 15,
    window: float = 2000.0,
) -> None:
    if not frames:
        raise RuntimeError("No telemetry frames to render.")

    import matplotlib

    matplotlib.use("Agg")
    import matplotlib.pyplot as plt
    from matplotlib.animation import FuncAnimation, PillowWriter

    agent_ids = sorted({agent["agent_id"] for frame in frames for agent in frame["agents"]})
    cmap = plt.get_cmap("tab20", len(agent_ids) or 1)
    color_map = {agent_id: cmap(idx % cmap.N) for idx, agent_id in enumerate(agent_ids)}
    centres = lane_centres(settings.lane_count)

    output_path.parent.mkdir(parents=True, exist_ok=True)
    fig, ax = plt.subplots(figsize=(10, 4))
    ax.set_ylim(0, settings.lane_count * LANE_HEIGHT)
    ax.set_xlabel("Track position")
    ax.set_ylabel("Lane")
    ax.set_yticks(centres)
    ax.set_yticklabels([str(lane + 1) for lane in range(settings.lane_count)])
    for boundary in np.arange(1, settings.lane_count) * LANE_HEIGHT:
        ax.axhline(boundary, color="lightgray", linewidth=0.5)
    ax.axvline(settings.finish_line, color="black", linewidth=1.5)

    scatter = ax.scatter([], [], s=60, edgecolors="black", linewidths=0.5, zorder=3)
    labels = {agent_id: ax.text(0, 0, "", fontsize=6, ha="right", va="bottom") for agent_id in agent_ids}
    time_text = ax.text(0.02, 0.92, "", transform=ax.transAxes, fontsize=9)

    def update(frame: Frame):
        agents = frame["agents"]
        xs = np.array([agent["position"] for agent in agents], dtype=float)
        ys = np.array([centres[agent["lane"]] + agent["lateral_offset"] for agent in agents], dtype=float)
        scatter.set_offsets(np.column_stack((xs, ys)) if len(xs) else np.empty((0, 2)))
        scatter.set_facecolors([color_map[agent["agent_id"]] for agent in agents])

        focus = next((a for a in agents if a["agent_id"] == frame["camera_target"]), None)
        centre = focus["position"] if focus else (float(xs.max()) if len(xs) else settings.track_start)
        ax.set_xlim(centre - window * 0.25, centre + window * 0.75)

        for agent in agents:
            artist = labels[agent["agent_id"]]
            artist.set_position((agent["position"], centres[agent["lane"]] + agent["lateral_offset"]))
            artist.set_text(agent["name"])
        time_text.set_text(f"t={frame['time']:.2f}s  progress={frame['progress']:.1f}%  tick={frame['tick']}")
        return (scatter, time_text, *labels.values())

    animation = FuncAnimation(fig, update, frames=frames, interval=1000 / fps, blit=False)

    writer: Optional[object] = None
    if output_path.suffix.lower() in {".gif"}:
        writer = PillowWriter(fps=fps)
    kwargs = {"writer": writer} if writer else {}
    animation.save(str(output_path), fps=fps, **kwargs)
    plt.close(fig)
    print(f"[replay] saved animation to {output_path}")


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Export or replay lane race telemetry.")
    parser.add_argument("--roster", required=True, help='Inline roster, e.g. "Alice*2, Bob".')
    parser.add_argument("--seed", type=int, default=None, help="Seed for a reproducible race.")
    parser.add_argument("--dt", type=float, default=1.0 / 30.0, help="Seconds per tick (default: 1/30).")
    parser.add_argument("--dump", type=Path, help="Optional JSON file to dump frames.")
    parser.add_argument("--animate", type=Path, help="Optional MP4/GIF path for a lane-view replay (requires matplotlib).")
    parser.add_argument("--fps", type=int, default=15, help="Frames per second for animation output (default: 15).")
    parser.add_argument(
        "--frame-step",
        type=int,
        default=10,
        help="Render every Nth tick in the animation (default: 10).",
    )
    return parser.parse_args()


def main() -> None:
    args = parse_args()
    frames, settings = run_recorded_race(args.roster, args.seed, args.dt)

    if args.dump:
        dump_frames(frames, args.dump)

    if args.animate:
        animate_frames(thin_frames(frames, args.frame_step), settings, args.animate, fps=args.fps)
    elif not args.dump:
        label = args.seed if args.seed is not None else "unseeded"
        dump_frames(frames, Path("replays") / f"race_{label}_telemetry.json")


if __name__ == "__main__":
    main()
