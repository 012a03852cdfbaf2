"""State document validation helpers (library-facing)."""

from __future__ import annotations

from typing import Any, Dict, List

from .model import SCHEDULING_TYPES, TASK_TYPES
from .util.timeparse import try_parse_day

STATE_SCHEMA_VERSION = 1


class StateValidationError(ValueError):
    """Raised when a state document fails validation."""


def _require(cond: bool, msg: str, errs: List[str]) -> None:
    if not cond:
        errs.append(msg)


def _is_num(v: Any) -> bool:
    return isinstance(v, (int, float)) and not isinstance(v, bool)


def _is_int(v: Any) -> bool:
    return isinstance(v, int) and not isinstance(v, bool)


def _nonempty_str(v: Any) -> bool:
    return isinstance(v, str) and bool(v.strip())


def _validate_minutes(obj: Dict[str, Any], label: str, errs: List[str]) -> None:
    s = obj.get("start_time")
    e = obj.get("end_time")
    if not _is_int(s) or not _is_int(e):
        errs.append(f"{label}: start_time/end_time must be ints")
        return
    _require(0 <= s < 1440 and 0 < e <= 1440, f"{label}: times must be within 0..1440", errs)
    _require(e > s, f"{label}: end_time must be after start_time", errs)


def _validate_weekly(weekly: Any, errs: List[str]) -> None:
    if not isinstance(weekly, dict):
        errs.append("weekly_schedule must be dict")
        return
    for k, v in weekly.items():
        label = f"weekly_schedule[{k}]"
        if str(k) not in {"0", "1", "2", "3", "4", "5", "6"}:
            errs.append(f"{label}: key must be a day of week 0..6")
            continue
        blocks = v.get("available_blocks") if isinstance(v, dict) else v
        if not isinstance(blocks, list):
            errs.append(f"{label}: available_blocks must be list")
            continue
        for i, b in enumerate(blocks):
            if not isinstance(b, dict):
                errs.append(f"{label}.available_blocks[{i}] must be dict")
                continue
            # out-of-range or inverted blocks are ignored when the calendar is built
            if not _is_int(b.get("start_time")) or not _is_int(b.get("end_time")):
                errs.append(f"{label}.available_blocks[{i}]: start_time/end_time must be ints")


def _validate_subtask(s: Any, label: str, errs: List[str]) -> None:
    if not isinstance(s, dict):
        errs.append(f"{label} must be dict")
        return
    _require(_nonempty_str(s.get("id")), f"{label}.id must be non-empty string", errs)
    # range is not checked: negative or finished work is skipped by the planner
    _require(_is_num(s.get("expected_time", 0)), f"{label}.expected_time must be a number", errs)
    _require(
        _is_num(s.get("current_percentage_completed", 0)),
        f"{label}.current_percentage_completed must be a number",
        errs,
    )


def _validate_task(t: Any, label: str, errs: List[str]) -> None:
    if not isinstance(t, dict):
        errs.append(f"{label} must be dict")
        return
    _require(_nonempty_str(t.get("id")), f"{label}.id must be non-empty string", errs)
    _require(t.get("type", "assignment") in TASK_TYPES, f"{label}.type must be one of {TASK_TYPES}", errs)
    _require(isinstance(t.get("approved_by_user", False), bool), f"{label}.approved_by_user must be bool", errs)
    due = t.get("due_date")
    _require(due is None or isinstance(due, str), f"{label}.due_date must be string", errs)
    subtasks = t.get("subtasks", [])
    if not isinstance(subtasks, list):
        errs.append(f"{label}.subtasks must be list")
        return
    seen = set()
    for i, s in enumerate(subtasks):
        _validate_subtask(s, f"{label}.subtasks[{i}]", errs)
        sid = s.get("id") if isinstance(s, dict) else None
        if sid in seen:
            errs.append(f"{label}.subtasks[{i}]: duplicate subtask id {sid!r}")
        seen.add(sid)


def _validate_courses(courses: Any, errs: List[str]) -> None:
    if not isinstance(courses, list):
        errs.append("courses must be list")
        return
    seen = set()
    for ci, c in enumerate(courses):
        label = f"courses[{ci}]"
        if not isinstance(c, dict):
            errs.append(f"{label} must be dict")
            continue
        cid = c.get("id")
        _require(_nonempty_str(cid), f"{label}.id must be non-empty string", errs)
        if cid in seen:
            errs.append(f"{label}: duplicate course id {cid!r}")
        seen.add(cid)
        docs = c.get("documents", {})
        _require(isinstance(docs, dict), f"{label}.documents must be dict", errs)
        tasks = c.get("tasks", [])
        if not isinstance(tasks, list):
            errs.append(f"{label}.tasks must be list")
            continue
        for ti, t in enumerate(tasks):
            _validate_task(t, f"{label}.tasks[{ti}]", errs)


def _validate_scheduled(items: Any, errs: List[str]) -> None:
    if not isinstance(items, list):
        errs.append("scheduled_tasks must be list")
        return
    for i, st in enumerate(items):
        label = f"scheduled_tasks[{i}]"
        if not isinstance(st, dict):
            errs.append(f"{label} must be dict")
            continue
        for k in ("id", "subtask_id", "course_id", "task_id"):
            _require(_nonempty_str(st.get(k)), f"{label}.{k} must be non-empty string", errs)
        _require(try_parse_day(st.get("day")) is not None, f"{label}.day must be YYYY-MM-DD", errs)
        _require(isinstance(st.get("user_set", False), bool), f"{label}.user_set must be bool", errs)
        _validate_minutes(st, label, errs)


def validate_state(obj: Any) -> List[str]:
    """Return a list of validation errors (empty list means valid)."""
    if not isinstance(obj, dict):
        return [f"state must be a JSON object; got {type(obj).__name__}"]
    errs: List[str] = []

    sv = obj.get("schema_version", STATE_SCHEMA_VERSION)
    _require(sv == STATE_SCHEMA_VERSION, f"schema_version must be {STATE_SCHEMA_VERSION}", errs)
    _require(try_parse_day(obj.get("current_date")) is not None, "current_date must be YYYY-MM-DD", errs)

    prefs = obj.get("preferences", {})
    if isinstance(prefs, dict):
        st = prefs.get("scheduling_type", "A")
        _require(st in SCHEDULING_TYPES, f"preferences.scheduling_type must be one of {SCHEDULING_TYPES}", errs)
    else:
        errs.append("preferences must be dict")

    _validate_weekly(obj.get("weekly_schedule", {}), errs)
    _validate_courses(obj.get("courses", []), errs)
    _validate_scheduled(obj.get("scheduled_tasks", []), errs)
    return errs


def assert_valid_state(obj: Any) -> None:
    errs = validate_state(obj)
    if errs:
        raise StateValidationError("Invalid state:\n" + "\n".join(f"  - {e}" for e in errs))
