"""
Utility script to run a single lane race from a roster.

Usage:
    python scripts/run_race.py --roster "Alice*3, Bob*2, Carol" --seed 7
    python scripts/run_race.py --roster-file roster.txt --win-condition first --silent

The roster uses one "name" or "name*count" entry per line (or comma
separated). Balance values come from configs/race_balance.json (override the
path with RACE_BALANCE_CONFIG).
"""

from __future__ import annotations

import argparse
import os
import sys
from dataclasses import replace
from pathlib import Path

# Ensure repo root is on sys.path when script is executed from anywhere
REPO_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if REPO_ROOT not in sys.path:
    sys.path.append(REPO_ROOT)

from race_game.engine import RaceLoop, RaceSettings, WinCondition  # noqa: E402
from race_game.roster import parse_roster_or_raise  # noqa: E402


def main() -> None:
    parser = argparse.ArgumentParser(description="Run a lane race simulation.")
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument("--roster", help='Inline roster, e.g. "Alice*2, Bob".')
    source.add_argument("--roster-file", type=Path, help="Text file with one roster entry per line.")
    parser.add_argument("--seed", type=int, default=None, help="Seed for a reproducible race.")
    parser.add_argument("--dt", type=float, default=1.0 / 60.0, help="Seconds per tick (default: 1/60).")
    parser.add_argument(
        "--win-condition",
        choices=[condition.value for condition in WinCondition],
        default=None,
        help="Whether the first or the last finisher is picked (default from config).",
    )
    parser.add_argument("--no-obstacles", action="store_true", help="Disable hazard spawning.")
    parser.add_argument(
        "--silent",
        action="store_true",
        help="Only print the picked agent.",
    )
    args = parser.parse_args()

    text = args.roster if args.roster is not None else args.roster_file.read_text(encoding="utf-8")
    roster = parse_roster_or_raise(text)

    settings = RaceSettings.from_config()
    if args.win_condition:
        settings = replace(settings, win_condition=WinCondition.from_str(args.win_condition))
    if args.no_obstacles:
        settings = replace(settings, obstacles_enabled=False)

    loop = RaceLoop(settings=settings, rng_seed=args.seed, verbose=not args.silent)
    loop.initialize(roster)
    loop.run_until_finished(dt=args.dt)
    result = loop.result()

    if args.silent:
        print(result.picked.name if result.picked else "No finisher")
        return

    print("\nFinish Order:")
    for idx, profile in enumerate(result.ranking, start=1):
        print(f"{idx}. {profile.name} ({profile.agent_id}, base speed {profile.base_speed:.1f})")
    if result.picked:
        label = "Winner" if result.win_condition is WinCondition.FIRST else "Picked (last place)"
        print(f"\n{label}: {result.picked.name}")


if __name__ == "__main__":
    main()
