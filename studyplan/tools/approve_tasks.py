#!/usr/bin/env python3
from __future__ import annotations

import argparse
from pathlib import Path
from typing import List

from studyplan.io import save_state
from studyplan.state import approve_all_tasks, are_all_tasks_approved, toggle_task_approval
from studyplan.tools._state_cli import ToolError, default_state_path, die, load_state_for_tool

PROG = "studyplan-approve"


def main(argv: List[str] | None = None) -> int:
    ap = argparse.ArgumentParser(
        prog=PROG,
        description="Approve tasks for scheduling. Approval alone never reschedules.",
    )
    ap.add_argument("--state", default=default_state_path(), help="State JSON path")
    mode = ap.add_mutually_exclusive_group(required=True)
    mode.add_argument("--all", action="store_true", help="Approve every task")
    mode.add_argument("--toggle", action="store_true", help="Toggle one task (needs --course and --task)")
    mode.add_argument("--check", action="store_true", help="Exit 0 if all tasks are approved, else 1")
    ap.add_argument("--course", default=None, help="Course id (with --toggle)")
    ap.add_argument("--task", default=None, help="Task id (with --toggle)")
    ns = ap.parse_args(argv)

    path = Path(ns.state)
    try:
        state = load_state_for_tool(path)
    except ToolError as e:
        return die(PROG, str(e), e.rc)

    if ns.check:
        ok = are_all_tasks_approved(state)
        print(f"[{PROG}] {'all approved' if ok else 'unapproved tasks remain'}")
        return 0 if ok else 1

    if ns.all:
        state = approve_all_tasks(state)
        save_state(state, path)
        print(f"[{PROG}] OK all approved")
        return 0

    if not ns.course or not ns.task:
        return die(PROG, "--toggle needs --course and --task")
    try:
        state = toggle_task_approval(state, ns.course, ns.task)
    except ValueError as e:
        return die(PROG, str(e))
    save_state(state, path)
    task = state.course(ns.course).task(ns.task)
    print(f"[{PROG}] OK {ns.course}/{ns.task} approved={str(task.approved_by_user).lower()}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
