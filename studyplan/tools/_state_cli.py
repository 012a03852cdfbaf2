from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import List, Optional

from studyplan.io import load_state
from studyplan.model import PlannerState
from studyplan.query import scheduled_items_for_day
from studyplan.util.timeparse import format_hhmm
from studyplan.validate import StateValidationError

DEFAULT_STATE = "studyplan_state.json"


class ToolError(Exception):
    def __init__(self, msg: str, rc: int = 2) -> None:
        super().__init__(msg)
        self.rc = rc


def default_state_path() -> str:
    return os.getenv("STUDYPLAN_STATE", DEFAULT_STATE) or DEFAULT_STATE


def die(prog: str, msg: str, rc: int = 2) -> int:
    print(f"[{prog}] ERROR: {msg}", file=sys.stderr)
    return rc


def load_state_for_tool(path: Path) -> PlannerState:
    """Load a state file, mapping failures to ToolError (2 = input, 3 = validation)."""
    if not path.exists():
        raise ToolError(f"Missing state JSON: {path}")
    try:
        return load_state(path)
    except StateValidationError as e:
        raise ToolError(f"Invalid state: {path} ({e})", rc=3)
    except ValueError as e:
        # json.JSONDecodeError is a ValueError too
        raise ToolError(f"Failed to load state: {path} ({e})")
    except OSError as e:
        raise ToolError(f"Cannot read state: {path} ({e})")


def day_lines(state: PlannerState, day: str) -> List[str]:
    out: List[str] = []
    for it in scheduled_items_for_day(state, day):
        st = it.scheduled_time
        mark = " [user]" if st.user_set else ""
        label = it.subtask.description or it.subtask.id
        out.append(
            f"  {format_hhmm(st.start_time)}-{format_hhmm(st.end_time)}  "
            f"{it.course.name or it.course.id} / {it.task.description or it.task.id} / {label}{mark}"
        )
    return out


def parse_seed(raw: Optional[str]) -> Optional[int]:
    if raw is None or not str(raw).strip():
        return None
    try:
        return int(str(raw).strip())
    except ValueError:
        raise ToolError(f"Invalid seed: {raw!r}")
