# studyplan/planner.py
from __future__ import annotations

import datetime as dt
import math
import random
from dataclasses import dataclass
from typing import Dict, FrozenSet, Iterable, List, Optional, Set, Tuple

from .model import (
    HORIZON_DAYS,
    Course,
    PlannerState,
    ScheduledTime,
    Subtask,
    Task,
    scheduled_time_id,
)
from .placement import POLICIES, RandomSource
from .slots import build_free_slots, carve_preserved
from .util.dates import add_days, day_key
from .util.timeparse import parse_day, parse_due_date, try_parse_day


def remaining_minutes(subtask: Subtask) -> Optional[int]:
    """Minutes of work left, or None when the inputs are not usable numbers.

    ceil(expected_time * 60 * (1 - pct / 100)); may be <= 0 for finished work.
    """
    try:
        hours = float(subtask.expected_time)
        pct = float(subtask.current_percentage_completed)
    except (TypeError, ValueError):
        return None
    raw = hours * 60.0 * (1.0 - pct / 100.0)
    if not math.isfinite(raw):
        return None
    # round first so float noise (0.1h * 60 = 6.000000000000001) does not add a minute
    return int(math.ceil(round(raw, 6)))


_Chain = Tuple[Course, Task, Subtask]


def _index_chains(courses: Iterable[Course]) -> Dict[Tuple[str, str, str], _Chain]:
    out: Dict[Tuple[str, str, str], _Chain] = {}
    for c in courses:
        for t in c.tasks:
            for s in t.subtasks:
                out[(c.id, t.id, s.id)] = (c, t, s)
    return out


@dataclass(frozen=True)
class PreservationResult:
    preserved: Tuple[ScheduledTime, ...]
    processed_subtask_ids: FrozenSet[str]
    # (slot, reason) for slots that were let go: "missing" | "complete" | "stale" | "bad_day"
    dropped: Tuple[Tuple[ScheduledTime, str], ...] = ()


def preservation_pass(
    scheduled: Iterable[ScheduledTime],
    courses: Iterable[Course],
    anchor: dt.date,
    *,
    force_reschedule: bool = False,
) -> PreservationResult:
    """Split existing slots into the ones to keep as-is and the rest.

    A slot is kept when its subtask is in progress (0 < pct < 100), or when
    it was set by the user and this is not a forced run. Slots whose
    course/task/subtask is gone, slots of finished subtasks, and slots left
    in the past for unfinished work are dropped.
    """
    chains = _index_chains(courses)
    preserved: List[ScheduledTime] = []
    processed: Set[str] = set()
    dropped: List[Tuple[ScheduledTime, str]] = []

    for st in scheduled:
        chain = chains.get((st.course_id, st.task_id, st.subtask_id))
        if chain is None:
            dropped.append((st, "missing"))
            continue
        subtask = chain[2]
        if subtask.is_complete:
            dropped.append((st, "complete"))
            continue
        day = try_parse_day(st.day)
        if day is None:
            dropped.append((st, "bad_day"))
            continue
        if day < anchor:
            dropped.append((st, "stale"))
            continue
        if (st.user_set and not force_reschedule) or subtask.in_progress:
            preserved.append(st)
            processed.add(st.subtask_id)

    return PreservationResult(
        preserved=tuple(preserved),
        processed_subtask_ids=frozenset(processed),
        dropped=tuple(dropped),
    )


@dataclass(frozen=True)
class WorkItem:
    subtask: Subtask
    task: Task
    course_id: str
    due: dt.datetime
    task_index: int  # position of the task in its course's due-date order


def build_work_list(
    courses: Iterable[Course],
    processed_subtask_ids: Iterable[str] = (),
    *,
    warnings: Optional[List[str]] = None,
) -> List[WorkItem]:
    """Ranked list of subtasks that still need a slot, soonest due first."""
    processed = set(processed_subtask_ids)
    items: List[WorkItem] = []

    for c in courses:
        dated: List[Tuple[dt.datetime, Task]] = []
        for t in c.tasks:
            if not t.approved_by_user:
                continue
            due = parse_due_date(t.due_date)
            if due is None:
                if warnings is not None:
                    warnings.append(f"task {t.id!r}: unparseable due_date {t.due_date!r}; not scheduled")
                continue
            dated.append((due, t))
        dated.sort(key=lambda x: x[0])

        for task_index, (due, t) in enumerate(dated):
            for s in t.subtasks:
                if s.id in processed or s.is_complete:
                    continue
                items.append(WorkItem(subtask=s, task=t, course_id=c.id, due=due, task_index=task_index))

    items.sort(key=lambda it: (it.due, it.task_index))
    return items


def due_boundary(due: dt.datetime) -> str:
    """Last day work may go on: the day before the due date."""
    return day_key(add_days(due.date(), -1))


@dataclass(frozen=True)
class ScheduleResult:
    scheduled_times: Tuple[ScheduledTime, ...]  # preserved + placed, the full replacement
    preserved: Tuple[ScheduledTime, ...]
    placed: Tuple[ScheduledTime, ...]
    unplaced: Tuple[str, ...]  # subtask ids with no slot
    late: Tuple[str, ...] = ()  # subtask ids placed after their due boundary
    warnings: Tuple[str, ...] = ()


def auto_schedule(
    state: PlannerState,
    *,
    force_reschedule: bool = False,
    rng: Optional[RandomSource] = None,
    scheduling_type: Optional[str] = None,
    horizon_days: int = HORIZON_DAYS,
) -> ScheduleResult:
    """Compute a complete new schedule for `state` (pure apart from `rng`)."""
    anchor = parse_day(state.current_date)
    warnings: List[str] = []

    kind = scheduling_type or state.preferences.scheduling_type
    policy = POLICIES.get(kind)
    if policy is None:
        warnings.append(f"unknown scheduling_type {kind!r}; using 'A'")
        kind = "A"
        policy = POLICIES[kind]
    if kind == "B" and rng is None:
        rng = random.Random()

    free = build_free_slots(state.weekly_schedule, anchor, horizon_days=horizon_days)

    pres = preservation_pass(
        state.scheduled_times,
        state.courses,
        anchor,
        force_reschedule=force_reschedule,
    )
    for st, reason in pres.dropped:
        if reason in {"missing", "stale", "bad_day"}:
            warnings.append(f"dropped slot {st.id!r} ({reason})")
    carve_preserved(free, pres.preserved)

    work = build_work_list(state.courses, pres.processed_subtask_ids, warnings=warnings)

    placed: List[ScheduledTime] = []
    unplaced: List[str] = []
    late: List[str] = []
    seen: Set[str] = set()

    for item in work:
        sid = item.subtask.id
        if sid in seen:
            continue
        seen.add(sid)

        need = remaining_minutes(item.subtask)
        if need is None:
            warnings.append(f"subtask {sid!r}: invalid expected_time/percentage; skipped")
            continue
        if need <= 0:
            continue

        p = policy(free, need, due_boundary(item.due), rng)
        if p is None:
            unplaced.append(sid)
            continue
        if p.fallback:
            late.append(sid)
        placed.append(
            ScheduledTime(
                id=scheduled_time_id(sid, p.day),
                day=p.day,
                start_time=p.start_time,
                end_time=p.end_time,
                subtask_id=sid,
                course_id=item.course_id,
                task_id=item.task.id,
                user_set=False,
            )
        )

    return ScheduleResult(
        scheduled_times=pres.preserved + tuple(placed),
        preserved=pres.preserved,
        placed=tuple(placed),
        unplaced=tuple(unplaced),
        late=tuple(late),
        warnings=tuple(warnings),
    )
