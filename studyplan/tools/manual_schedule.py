#!/usr/bin/env python3
from __future__ import annotations

import argparse
from pathlib import Path
from typing import List

from studyplan.io import save_state
from studyplan.state import manually_schedule_task
from studyplan.tools._state_cli import ToolError, default_state_path, die, load_state_for_tool
from studyplan.util.timeparse import format_hhmm, hhmm_to_minutes

PROG = "studyplan-place"


def main(argv: List[str] | None = None) -> int:
    ap = argparse.ArgumentParser(
        prog=PROG,
        description="Pin a subtask to a day and time; replaces any slot it already had.",
    )
    ap.add_argument("--state", default=default_state_path(), help="State JSON path")
    ap.add_argument("--course", required=True, help="Course id")
    ap.add_argument("--task", required=True, help="Task id")
    ap.add_argument("--subtask", required=True, help="Subtask id")
    ap.add_argument("--day", required=True, help="Day YYYY-MM-DD")
    ap.add_argument("--start", required=True, help="Start HH:MM")
    ap.add_argument("--end", required=True, help="End HH:MM (24:00 allowed)")
    ns = ap.parse_args(argv)

    path = Path(ns.state)
    try:
        state = load_state_for_tool(path)
    except ToolError as e:
        return die(PROG, str(e), e.rc)

    try:
        start = hhmm_to_minutes(ns.start)
        end = hhmm_to_minutes(ns.end)
        state = manually_schedule_task(state, ns.subtask, ns.course, ns.task, ns.day, start, end)
    except ValueError as e:
        return die(PROG, str(e))

    save_state(state, path)
    print(f"[{PROG}] OK {ns.subtask} {ns.day} {format_hhmm(start)}-{format_hhmm(end)}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
