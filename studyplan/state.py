# studyplan/state.py
"""State transitions on PlannerState.

Every function takes a snapshot and returns a new one; nothing is mutated.
Rescheduling is never triggered here; callers run the planner explicitly.
"""

from __future__ import annotations

import datetime as dt
import math
from dataclasses import replace
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from .model import (
    MINUTES_PER_DAY,
    SCHEDULING_TYPES,
    TASK_TYPES,
    Course,
    PlannerState,
    Preferences,
    ScheduledTime,
    Subtask,
    Task,
    TimeBlock,
    WeeklySchedule,
    scheduled_time_id,
)
from .util.timeparse import parse_day


class UnknownEntityError(ValueError):
    """Raised when an operation names a course/task/subtask that does not exist."""


_TASK_FIELDS = {"type", "due_date", "description", "approved_by_user", "subtasks", "documents"}
_SUBTASK_FIELDS = {"description", "expected_time", "current_percentage_completed"}
_PREF_FIELDS = {"scheduling_type", "calendar_day_start_hour", "calendar_day_end_hour"}


def _now_iso() -> str:
    return dt.datetime.now(dt.timezone.utc).isoformat(timespec="seconds")


def _map_course(state: PlannerState, course_id: str, fn: Callable[[Course], Course]) -> PlannerState:
    found = False
    courses: List[Course] = []
    for c in state.courses:
        if c.id == course_id:
            courses.append(fn(c))
            found = True
        else:
            courses.append(c)
    if not found:
        raise UnknownEntityError(f"unknown course: {course_id}")
    return replace(state, courses=tuple(courses))


def _map_task(state: PlannerState, course_id: str, task_id: str, fn: Callable[[Task], Task]) -> PlannerState:
    def on_course(c: Course) -> Course:
        if c.task(task_id) is None:
            raise UnknownEntityError(f"unknown task: {course_id}/{task_id}")
        return replace(c, tasks=tuple(fn(t) if t.id == task_id else t for t in c.tasks))

    return _map_course(state, course_id, on_course)


def _drop_slots(state: PlannerState, keep: Callable[[ScheduledTime], bool]) -> PlannerState:
    return replace(state, scheduled_times=tuple(st for st in state.scheduled_times if keep(st)))


# --- manual override -----------------------------------------------------------


def _check_minutes(start_time: int, end_time: int) -> None:
    if isinstance(start_time, bool) or isinstance(end_time, bool):
        raise ValueError("start_time/end_time must be ints")
    if not isinstance(start_time, int) or not isinstance(end_time, int):
        raise ValueError("start_time/end_time must be ints")
    if not (0 <= start_time < MINUTES_PER_DAY) or not (0 < end_time <= MINUTES_PER_DAY):
        raise ValueError(f"times must be minutes within a day; got {start_time}-{end_time}")
    if end_time <= start_time:
        raise ValueError(f"end_time must be after start_time; got {start_time}-{end_time}")


def manually_schedule_task(
    state: PlannerState,
    subtask_id: str,
    course_id: str,
    task_id: str,
    day: str,
    start_time: int,
    end_time: int,
) -> PlannerState:
    """Replace every slot of the subtask with one user-set slot.

    Other placements are left alone; the new slot may overlap them.
    """
    parse_day(day)
    _check_minutes(start_time, end_time)
    course = state.course(course_id)
    task = course.task(task_id) if course else None
    if task is None or task.subtask(subtask_id) is None:
        raise UnknownEntityError(f"unknown subtask: {course_id}/{task_id}/{subtask_id}")

    slot = ScheduledTime(
        id=scheduled_time_id(subtask_id, day),
        day=day,
        start_time=int(start_time),
        end_time=int(end_time),
        subtask_id=subtask_id,
        course_id=course_id,
        task_id=task_id,
        user_set=True,
    )
    kept = tuple(st for st in state.scheduled_times if st.subtask_id != subtask_id)
    return replace(state, scheduled_times=kept + (slot,))


def unschedule_subtask(state: PlannerState, subtask_id: str) -> PlannerState:
    return _drop_slots(state, lambda st: st.subtask_id != subtask_id)


# --- approval ------------------------------------------------------------------


def toggle_task_approval(state: PlannerState, course_id: str, task_id: str) -> PlannerState:
    return _map_task(state, course_id, task_id, lambda t: replace(t, approved_by_user=not t.approved_by_user))


def approve_all_tasks(state: PlannerState) -> PlannerState:
    courses = tuple(
        replace(c, tasks=tuple(t if t.approved_by_user else replace(t, approved_by_user=True) for t in c.tasks))
        for c in state.courses
    )
    return replace(state, courses=courses)


def are_all_tasks_approved(state: PlannerState) -> bool:
    return all(t.approved_by_user for c in state.courses for t in c.tasks)


# --- courses / tasks / subtasks -------------------------------------------------


def set_courses(state: PlannerState, courses: Iterable[Course]) -> PlannerState:
    return replace(state, courses=tuple(courses))


def _check_task_type(value: Any) -> None:
    if value not in TASK_TYPES:
        raise ValueError(f"task type must be one of {TASK_TYPES}; got {value!r}")


def _check_subtask_numbers(expected_time: Any, pct: Any) -> None:
    for name, v in (("expected_time", expected_time), ("current_percentage_completed", pct)):
        if isinstance(v, bool) or not isinstance(v, (int, float)) or not math.isfinite(float(v)):
            raise ValueError(f"{name} must be a finite number; got {v!r}")
    if expected_time < 0:
        raise ValueError(f"expected_time must be >= 0; got {expected_time!r}")
    if not (0 <= pct <= 100):
        raise ValueError(f"current_percentage_completed must be within 0..100; got {pct!r}")


def add_task(state: PlannerState, course_id: str, task: Task, *, now: Optional[str] = None) -> PlannerState:
    _check_task_type(task.type)

    def on_course(c: Course) -> Course:
        if c.task(task.id) is not None:
            raise ValueError(f"task already exists: {course_id}/{task.id}")
        stamped = task if task.updated_at else replace(task, updated_at=now or _now_iso())
        return replace(c, tasks=c.tasks + (stamped,))

    return _map_course(state, course_id, on_course)


def update_task(
    state: PlannerState,
    course_id: str,
    task_id: str,
    *,
    now: Optional[str] = None,
    **changes: Any,
) -> PlannerState:
    unknown = set(changes) - _TASK_FIELDS
    if unknown:
        raise ValueError(f"cannot update task fields: {sorted(unknown)}")
    if "type" in changes:
        _check_task_type(changes["type"])
    if "subtasks" in changes:
        changes["subtasks"] = tuple(changes["subtasks"])
    if "documents" in changes:
        changes["documents"] = tuple(changes["documents"])
    stamp = now or _now_iso()
    return _map_task(state, course_id, task_id, lambda t: replace(t, updated_at=stamp, **changes))


def remove_task(state: PlannerState, course_id: str, task_id: str) -> PlannerState:
    def on_course(c: Course) -> Course:
        if c.task(task_id) is None:
            raise UnknownEntityError(f"unknown task: {course_id}/{task_id}")
        return replace(c, tasks=tuple(t for t in c.tasks if t.id != task_id))

    out = _map_course(state, course_id, on_course)
    return _drop_slots(out, lambda st: not (st.course_id == course_id and st.task_id == task_id))


def add_subtask(state: PlannerState, course_id: str, task_id: str, subtask: Subtask) -> PlannerState:
    _check_subtask_numbers(subtask.expected_time, subtask.current_percentage_completed)

    def on_task(t: Task) -> Task:
        if t.subtask(subtask.id) is not None:
            raise ValueError(f"subtask already exists: {task_id}/{subtask.id}")
        return replace(t, subtasks=t.subtasks + (subtask,))

    return _map_task(state, course_id, task_id, on_task)


def update_subtask(
    state: PlannerState,
    course_id: str,
    task_id: str,
    subtask_id: str,
    **changes: Any,
) -> PlannerState:
    unknown = set(changes) - _SUBTASK_FIELDS
    if unknown:
        raise ValueError(f"cannot update subtask fields: {sorted(unknown)}")

    def on_task(t: Task) -> Task:
        cur = t.subtask(subtask_id)
        if cur is None:
            raise UnknownEntityError(f"unknown subtask: {course_id}/{task_id}/{subtask_id}")
        new = replace(cur, **changes)
        _check_subtask_numbers(new.expected_time, new.current_percentage_completed)
        return replace(t, subtasks=tuple(new if s.id == subtask_id else s for s in t.subtasks))

    return _map_task(state, course_id, task_id, on_task)


def remove_subtask(state: PlannerState, course_id: str, task_id: str, subtask_id: str) -> PlannerState:
    def on_task(t: Task) -> Task:
        if t.subtask(subtask_id) is None:
            raise UnknownEntityError(f"unknown subtask: {course_id}/{task_id}/{subtask_id}")
        return replace(t, subtasks=tuple(s for s in t.subtasks if s.id != subtask_id))

    out = _map_task(state, course_id, task_id, on_task)
    return _drop_slots(out, lambda st: st.subtask_id != subtask_id)


def reorder_subtasks(state: PlannerState, course_id: str, task_id: str, subtask_ids: Sequence[str]) -> PlannerState:
    def on_task(t: Task) -> Task:
        by_id = {s.id: s for s in t.subtasks}
        if sorted(subtask_ids) != sorted(by_id) or len(set(subtask_ids)) != len(subtask_ids):
            raise ValueError(f"reorder must list each subtask of {task_id} exactly once")
        return replace(t, subtasks=tuple(by_id[sid] for sid in subtask_ids))

    return _map_task(state, course_id, task_id, on_task)


# --- availability / preferences -------------------------------------------------


def _check_block(dow: int, b: TimeBlock) -> None:
    if not isinstance(dow, int) or not (0 <= dow <= 6):
        raise ValueError(f"day of week must be 0..6 (0 = Sunday); got {dow!r}")
    _check_minutes(b.start_time, b.end_time)


def update_weekly_schedule(state: PlannerState, weekly: Mapping[int, Iterable[TimeBlock]]) -> PlannerState:
    out: WeeklySchedule = {}
    for dow, blocks in weekly.items():
        bs = tuple(blocks)
        for b in bs:
            _check_block(dow, b)
        out[int(dow)] = bs
    return replace(state, weekly_schedule=out)


def toggle_time_block(state: PlannerState, day_of_week: int, start_time: int, end_time: int) -> PlannerState:
    """Add the block to that weekday if absent (exact start/end match), remove it if present."""
    _check_block(day_of_week, TimeBlock(start_time=start_time, end_time=end_time))
    weekly: Dict[int, Tuple[TimeBlock, ...]] = dict(state.weekly_schedule)
    blocks = weekly.get(day_of_week, ())
    hit = [b for b in blocks if b.start_time == start_time and b.end_time == end_time]
    if hit:
        weekly[day_of_week] = tuple(b for b in blocks if b not in hit)
    else:
        block_id = f"{day_of_week}-{start_time}-{end_time}"
        weekly[day_of_week] = blocks + (TimeBlock(start_time=start_time, end_time=end_time, id=block_id),)
    return replace(state, weekly_schedule=weekly)


def update_preferences(state: PlannerState, **changes: Any) -> PlannerState:
    unknown = set(changes) - _PREF_FIELDS
    if unknown:
        raise ValueError(f"cannot update preference fields: {sorted(unknown)}")
    prefs: Preferences = replace(state.preferences, **changes)
    if prefs.scheduling_type not in SCHEDULING_TYPES:
        raise ValueError(f"scheduling_type must be one of {SCHEDULING_TYPES}; got {prefs.scheduling_type!r}")
    if not (0 <= prefs.calendar_day_start_hour < prefs.calendar_day_end_hour <= 24):
        raise ValueError("calendar hours must satisfy 0 <= start < end <= 24")
    return replace(state, preferences=prefs)


def set_current_date(state: PlannerState, day: str) -> PlannerState:
    parse_day(day)
    return replace(state, current_date=day)


def apply_schedule(state: PlannerState, scheduled_times: Iterable[ScheduledTime]) -> PlannerState:
    return replace(state, scheduled_times=tuple(scheduled_times))
