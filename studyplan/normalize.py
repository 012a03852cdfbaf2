# studyplan/normalize.py
from __future__ import annotations

import math
from typing import Any, Dict, List, Optional, Tuple

from .model import (
    MINUTES_PER_DAY,
    SCHEDULING_TYPES,
    Course,
    Document,
    PlannerState,
    Preferences,
    ScheduledTime,
    Subtask,
    Task,
    TimeBlock,
    WeeklySchedule,
)
from .util.console import eprint, obs_enabled
from .util.dates import day_key, today_date
from .util.timeparse import try_parse_day


def _warn(msg: str) -> None:
    if obs_enabled():
        eprint(f"[studyplan.normalize] WARN: {msg}")


def _as_str(v: Any, default: str = "") -> str:
    return v if isinstance(v, str) else default


def _as_opt_str(v: Any) -> Optional[str]:
    return v if isinstance(v, str) and v else None


def _as_int(v: Any) -> Optional[int]:
    if v is None or isinstance(v, bool):
        return None
    if isinstance(v, int):
        return v
    if isinstance(v, float) and v.is_integer():
        return int(v)
    return None


def _as_float(v: Any, *, field: str, owner: str) -> float:
    if isinstance(v, (int, float)) and not isinstance(v, bool) and math.isfinite(float(v)):
        return float(v)
    if v is not None:
        _warn(f"invalid {field} for {owner!r}: {v!r}; using 0")
    return 0.0


def document_from_dict(d: Dict[str, Any]) -> Document:
    return Document(
        id=_as_str(d.get("id")),
        display_name=_as_str(d.get("display_name") or d.get("name")),
        url=_as_opt_str(d.get("url")),
        content_type=_as_opt_str(d.get("content_type")),
    )


def subtask_from_dict(d: Dict[str, Any]) -> Subtask:
    sid = _as_str(d.get("id"))
    hours = _as_float(d.get("expected_time"), field="expected_time", owner=sid)
    pct = _as_float(d.get("current_percentage_completed"), field="current_percentage_completed", owner=sid)
    if hours < 0 or not 0 <= pct <= 100:
        _warn(f"subtask {sid!r} out of range: expected_time={hours} current_percentage_completed={pct}")
    return Subtask(
        id=sid,
        description=_as_str(d.get("description")),
        expected_time=hours,
        current_percentage_completed=pct,
    )


def task_from_dict(d: Dict[str, Any]) -> Task:
    tid = _as_str(d.get("id"))
    docs = d.get("documents") or []
    subtasks = d.get("subtasks") or []
    approved = d.get("approved_by_user")
    if approved is not None and not isinstance(approved, bool):
        _warn(f"invalid approved_by_user for task {tid!r}: {approved!r}; treating as unapproved")
    return Task(
        id=tid,
        type=_as_str(d.get("type"), "assignment"),
        due_date=_as_str(d.get("due_date")),
        # older documents used task_description
        description=_as_str(d.get("description", d.get("task_description"))),
        approved_by_user=approved is True,
        subtasks=tuple(subtask_from_dict(s) for s in subtasks if isinstance(s, dict)),
        documents=tuple(document_from_dict(x) for x in docs if isinstance(x, dict)),
        updated_at=_as_opt_str(d.get("updated_at")),
    )


def course_from_dict(d: Dict[str, Any]) -> Course:
    docs = d.get("documents") or {}
    tasks = d.get("tasks") or []
    documents: Dict[str, Document] = {}
    if isinstance(docs, dict):
        for k, v in docs.items():
            if isinstance(v, dict):
                documents[str(k)] = document_from_dict({"id": k, **v})
    return Course(
        id=_as_str(d.get("id")),
        name=_as_str(d.get("name")),
        tasks=tuple(task_from_dict(t) for t in tasks if isinstance(t, dict)),
        documents=documents,
    )


def scheduled_time_from_dict(d: Dict[str, Any]) -> Optional[ScheduledTime]:
    start = _as_int(d.get("start_time"))
    end = _as_int(d.get("end_time"))
    day = d.get("day")
    if start is None or end is None or end <= start or try_parse_day(day) is None:
        _warn(f"dropping malformed scheduled time: {d.get('id')!r}")
        return None
    return ScheduledTime(
        id=_as_str(d.get("id")),
        day=str(day),
        start_time=start,
        end_time=end,
        subtask_id=_as_str(d.get("subtask_id")),
        course_id=_as_str(d.get("course_id")),
        task_id=_as_str(d.get("task_id")),
        user_set=d.get("user_set") is True,
    )


def weekly_from_dict(raw: Any) -> WeeklySchedule:
    out: WeeklySchedule = {}
    if not isinstance(raw, dict):
        return out
    for k, v in raw.items():
        try:
            dow = int(k)
        except (TypeError, ValueError):
            _warn(f"ignoring weekly_schedule key {k!r}")
            continue
        if not 0 <= dow <= 6:
            _warn(f"ignoring weekly_schedule key {k!r}")
            continue
        blocks = v.get("available_blocks") if isinstance(v, dict) else v
        if not isinstance(blocks, list):
            continue
        parsed: List[TimeBlock] = []
        for b in blocks:
            if not isinstance(b, dict):
                continue
            s = _as_int(b.get("start_time"))
            e = _as_int(b.get("end_time"))
            if s is None or e is None:
                _warn(f"ignoring block without int start/end on day {dow}: {b!r}")
                continue
            if not 0 <= s < e <= MINUTES_PER_DAY:
                _warn(f"block {s}-{e} on day {dow} is out of range or inverted; clamped when slots are built")
            parsed.append(TimeBlock(start_time=s, end_time=e, id=_as_opt_str(b.get("id"))))
        out[dow] = tuple(parsed)
    return out


def preferences_from_dict(raw: Any) -> Preferences:
    if not isinstance(raw, dict):
        return Preferences()
    kind = raw.get("scheduling_type", "A")
    if kind not in SCHEDULING_TYPES:
        _warn(f"unknown scheduling_type {kind!r}; using 'A'")
        kind = "A"
    start = _as_int(raw.get("calendar_day_start_hour"))
    end = _as_int(raw.get("calendar_day_end_hour"))
    return Preferences(
        scheduling_type=kind,
        calendar_day_start_hour=8 if start is None else start,
        calendar_day_end_hour=22 if end is None else end,
    )


def state_from_dict(obj: Dict[str, Any]) -> PlannerState:
    cur = obj.get("current_date")
    if try_parse_day(cur) is None:
        cur = day_key(today_date())
    courses = obj.get("courses") or []
    scheduled = obj.get("scheduled_tasks") or []
    slots: Tuple[ScheduledTime, ...] = tuple(
        st for st in (scheduled_time_from_dict(x) for x in scheduled if isinstance(x, dict)) if st is not None
    )
    return PlannerState(
        current_date=str(cur),
        courses=tuple(course_from_dict(c) for c in courses if isinstance(c, dict)),
        scheduled_times=slots,
        weekly_schedule=weekly_from_dict(obj.get("weekly_schedule")),
        preferences=preferences_from_dict(obj.get("preferences")),
    )
