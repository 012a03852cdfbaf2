"""studyplan.query

Read helpers that join scheduled slots back to course/task/subtask data.
Orphaned slots (whose subtask no longer exists) are skipped, never raised.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from .interval import Interval, subtract, union_intervals
from .model import Course, PlannerState, ScheduledTime, Subtask, Task
from .planner import remaining_minutes
from .slots import merged_blocks
from .util.timeparse import parse_day
from .util.dates import weekday_index


@dataclass(frozen=True)
class ScheduledItem:
    scheduled_time: ScheduledTime
    course: Course
    task: Task
    subtask: Subtask


def _resolve(state: PlannerState, st: ScheduledTime) -> Optional[ScheduledItem]:
    course = state.course(st.course_id)
    task = course.task(st.task_id) if course else None
    subtask = task.subtask(st.subtask_id) if task else None
    if course is None or task is None or subtask is None:
        return None
    return ScheduledItem(scheduled_time=st, course=course, task=task, subtask=subtask)


def scheduled_items_for_day(state: PlannerState, day: str) -> List[ScheduledItem]:
    out: List[ScheduledItem] = []
    for st in state.scheduled_times:
        if st.day != day:
            continue
        item = _resolve(state, st)
        if item is not None:
            out.append(item)
    out.sort(key=lambda it: (it.scheduled_time.start_time, it.scheduled_time.end_time, it.scheduled_time.id))
    return out


def days_with_events(state: PlannerState) -> List[str]:
    return sorted({st.day for st in state.scheduled_times})


def slots_by_subtask(state: PlannerState) -> Dict[str, List[ScheduledTime]]:
    out: Dict[str, List[ScheduledTime]] = {}
    for st in state.scheduled_times:
        out.setdefault(st.subtask_id, []).append(st)
    return out


def unscheduled_subtasks(state: PlannerState) -> List[Tuple[Course, Task, Subtask]]:
    """Approved, unfinished subtasks with remaining work and no slot at all."""
    has_slot = set(slots_by_subtask(state))
    out: List[Tuple[Course, Task, Subtask]] = []
    for c in state.courses:
        for t in c.tasks:
            if not t.approved_by_user:
                continue
            for s in t.subtasks:
                if s.id in has_slot or s.is_complete:
                    continue
                need = remaining_minutes(s)
                if need is None or need <= 0:
                    continue
                out.append((c, t, s))
    return out


def availability_gaps(state: PlannerState, day: str) -> List[Interval]:
    """Availability on `day` not covered by any scheduled slot."""
    blocks = merged_blocks(state.weekly_schedule, weekday_index(parse_day(day)))
    busy = union_intervals((st.start_time, st.end_time) for st in state.scheduled_times if st.day == day)
    out: List[Interval] = []
    for b in blocks:
        out.extend(subtract(b, busy))
    return out
