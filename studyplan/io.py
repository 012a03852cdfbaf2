"""Load/save PlannerState JSON."""

from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, Optional

from .model import Course, Document, PlannerState, ScheduledTime, Subtask, Task
from .normalize import state_from_dict
from .util.dates import day_key, today_date
from .validate import STATE_SCHEMA_VERSION, assert_valid_state

JsonDict = Dict[str, Any]


def _document_to_dict(d: Document) -> JsonDict:
    return {"id": d.id, "display_name": d.display_name, "url": d.url, "content_type": d.content_type}


def _subtask_to_dict(s: Subtask) -> JsonDict:
    return {
        "id": s.id,
        "description": s.description,
        "expected_time": s.expected_time,
        "current_percentage_completed": s.current_percentage_completed,
    }


def _task_to_dict(t: Task) -> JsonDict:
    return {
        "id": t.id,
        "type": t.type,
        "due_date": t.due_date,
        "description": t.description,
        "approved_by_user": t.approved_by_user,
        "subtasks": [_subtask_to_dict(s) for s in t.subtasks],
        "documents": [_document_to_dict(d) for d in t.documents],
        "updated_at": t.updated_at,
    }


def _course_to_dict(c: Course) -> JsonDict:
    return {
        "id": c.id,
        "name": c.name,
        "tasks": [_task_to_dict(t) for t in c.tasks],
        "documents": {k: _document_to_dict(v) for k, v in c.documents.items()},
    }


def scheduled_time_to_dict(st: ScheduledTime) -> JsonDict:
    return {
        "id": st.id,
        "day": st.day,
        "start_time": st.start_time,
        "end_time": st.end_time,
        "subtask_id": st.subtask_id,
        "course_id": st.course_id,
        "task_id": st.task_id,
        "user_set": st.user_set,
    }


def state_to_dict(state: PlannerState) -> JsonDict:
    weekly = {
        str(dow): {
            "available_blocks": [
                {"id": b.id, "start_time": b.start_time, "end_time": b.end_time} for b in blocks
            ]
        }
        for dow, blocks in sorted(state.weekly_schedule.items())
    }
    p = state.preferences
    return {
        "schema_version": STATE_SCHEMA_VERSION,
        "current_date": state.current_date,
        "preferences": {
            "scheduling_type": p.scheduling_type,
            "calendar_day_start_hour": p.calendar_day_start_hour,
            "calendar_day_end_hour": p.calendar_day_end_hour,
        },
        "weekly_schedule": weekly,
        "courses": [_course_to_dict(c) for c in state.courses],
        "scheduled_tasks": [scheduled_time_to_dict(st) for st in state.scheduled_times],
    }


def empty_state(current_date: Optional[str] = None) -> PlannerState:
    return PlannerState(current_date=current_date or day_key(today_date()))


def load_state(path: Path, *, validate: bool = True, missing_ok: bool = True) -> PlannerState:
    """Load a state document.

    A missing file yields an empty state anchored today when missing_ok.
    Raises StateValidationError for documents that fail validation.
    """
    p = Path(path)
    if not p.exists():
        if missing_ok:
            return empty_state()
        raise FileNotFoundError(str(p))
    obj = json.loads(p.read_text(encoding="utf-8", errors="replace"))
    if validate:
        assert_valid_state(obj)
    elif not isinstance(obj, dict):
        raise ValueError("state must be a JSON object")
    return state_from_dict(obj)


def save_state(state: PlannerState, path: Path) -> Path:
    """Write the state atomically (temp file in the same directory, then replace)."""
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    text = json.dumps(state_to_dict(state), indent=2, ensure_ascii=False) + "\n"
    fd, tmp = tempfile.mkstemp(prefix=p.name + ".", suffix=".tmp", dir=str(p.parent))
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(text)
        os.replace(tmp, p)
    except BaseException:
        try:
            os.unlink(tmp)
        except OSError:
            pass
        raise
    return p
