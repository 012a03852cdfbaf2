from __future__ import annotations

import argparse
import json
import os
import random
from pathlib import Path

from .io import scheduled_time_to_dict
from .query import days_with_events
from .service import PlannerService
from .state import set_current_date
from .tools._state_cli import ToolError, day_lines, default_state_path, die, load_state_for_tool, parse_seed

PROG = "studyplan"


def main(argv: list[str] | None = None) -> int:
    ap = argparse.ArgumentParser(
        prog=PROG,
        description="Place approved study tasks into weekly availability for the next 14 days.",
    )
    ap.add_argument(
        "--state",
        default=default_state_path(),
        help="State JSON path (default: env STUDYPLAN_STATE or ./studyplan_state.json)",
    )
    ap.add_argument(
        "--today",
        default=os.getenv("STUDYPLAN_TODAY") or None,
        help="Anchor date YYYY-MM-DD (default: env STUDYPLAN_TODAY or the state's current_date)",
    )
    ap.add_argument("--policy", choices=["A", "B"], default=None, help="Override the state's scheduling_type for this run")
    ap.add_argument(
        "--seed",
        default=os.getenv("STUDYPLAN_SEED") or None,
        help="Seed for the spread policy (default: env STUDYPLAN_SEED, else random)",
    )
    ap.add_argument("--force", action="store_true", help="Also move user-set slots (in-progress work still stays)")
    ap.add_argument("--dry-run", action="store_true", help="Do not write the state file back")
    ap.add_argument("--json", action="store_true", help="Print the new schedule as JSON instead of a summary")
    ns = ap.parse_args(argv)

    state_path = Path(ns.state)
    try:
        state = load_state_for_tool(state_path)
        seed = parse_seed(ns.seed)
    except ToolError as e:
        return die(PROG, str(e), e.rc)

    if ns.today:
        try:
            state = set_current_date(state, ns.today)
        except ValueError as e:
            return die(PROG, f"Invalid --today value: {e}")

    svc = PlannerService(
        state,
        path=None if ns.dry_run else state_path,
        rng=random.Random(seed),
    )
    result = svc.auto_schedule_tasks(bool(ns.force), scheduling_type=ns.policy)

    if ns.json:
        out = {
            "scheduled_tasks": [scheduled_time_to_dict(st) for st in result.scheduled_times],
            "unplaced": list(result.unplaced),
            "late": list(result.late),
            "warnings": list(result.warnings),
        }
        print(json.dumps(out, indent=2))
        return 0

    for day in days_with_events(svc.state):
        print(day)
        for line in day_lines(svc.state, day):
            print(line)
    print(
        f"[{PROG}] preserved={len(result.preserved)} placed={len(result.placed)} "
        f"unplaced={len(result.unplaced)} late={len(result.late)}"
    )
    for sid in result.unplaced:
        print(f"[{PROG}] WARN: no slot found for subtask {sid}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
