# roster.py
# Turns the "name" / "name*count" text the setup form collects into roster entries.

from __future__ import annotations
import re
from typing import List

from race_game.engine.data_models import InvalidRosterError, RosterEntry

SEPARATOR_RE = re.compile(r"[\n,]")
COUNT_RE = re.compile(r"^\s*(\d+)")

def _parse_count(raw: str) -> int:
    match = COUNT_RE.match(raw)
    if not match:
        return 1
    count = int(match.group(1))
    return count if count > 0 else 1

def parse_roster(text: str) -> List[RosterEntry]:
    """
    Parses lines like "Alice*3" or "Bob". Lines may also be comma separated.
    A missing or unreadable count means 1. Blank entries are skipped.
    """
    entries: List[RosterEntry] = []
    for chunk in SEPARATOR_RE.split(text or ""):
        item = chunk.strip()
        if not item:
            continue
        name, count = item, 1
        if "*" in item:
            name, _, raw_count = item.partition("*")
            name = name.strip()
            count = _parse_count(raw_count)
        if not name:
            continue
        entries.append(RosterEntry(name=name, count=count))
    return entries

def parse_roster_or_raise(text: str) -> List[RosterEntry]:
    entries = parse_roster(text)
    if not entries:
        raise InvalidRosterError("Roster is empty")
    return entries
