#!/usr/bin/env python3
from __future__ import annotations

import argparse
from pathlib import Path
from typing import List

from studyplan.query import availability_gaps, scheduled_items_for_day
from studyplan.tools._state_cli import ToolError, day_lines, default_state_path, die, load_state_for_tool
from studyplan.util.timeparse import format_hhmm, try_parse_day

PROG = "studyplan-day"


def main(argv: List[str] | None = None) -> int:
    ap = argparse.ArgumentParser(prog=PROG, description="Print one day's scheduled work and free availability.")
    ap.add_argument("--state", default=default_state_path(), help="State JSON path")
    ap.add_argument("--day", default=None, help="Day YYYY-MM-DD (default: the state's current_date)")
    ns = ap.parse_args(argv)

    try:
        state = load_state_for_tool(Path(ns.state))
    except ToolError as e:
        return die(PROG, str(e), e.rc)

    day = ns.day or state.current_date
    if try_parse_day(day) is None:
        return die(PROG, f"Invalid --day value: {day!r}")

    items = scheduled_items_for_day(state, day)
    load_min = sum(it.scheduled_time.duration_min for it in items)
    print(f"{day}  sessions={len(items)} load_min={load_min}")
    for line in day_lines(state, day):
        print(line)
    gaps = availability_gaps(state, day)
    if gaps:
        print("  free: " + ", ".join(f"{format_hhmm(s)}-{format_hhmm(e)}" for s, e in gaps))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
