"""Small constructors shared by the contract tests."""

from __future__ import annotations

from typing import Dict, Iterable, Tuple

from studyplan.model import Course, PlannerState, Preferences, ScheduledTime, Subtask, Task, TimeBlock

# 2025-03-01 is a Saturday.
SATURDAY = "2025-03-01"
MONDAY = "2025-03-03"
TUESDAY = "2025-03-04"
WEDNESDAY = "2025-03-05"
NEXT_MONDAY = "2025-03-10"

MON_8_10: Dict[int, Tuple[TimeBlock, ...]] = {1: (TimeBlock(start_time=480, end_time=600),)}
EVERY_DAY_8_10: Dict[int, Tuple[TimeBlock, ...]] = {
    dow: (TimeBlock(start_time=480, end_time=600),) for dow in range(7)
}


def sub(sid: str, hours: float = 1.0, pct: float = 0.0) -> Subtask:
    return Subtask(id=sid, description=f"work {sid}", expected_time=hours, current_percentage_completed=pct)


def task(tid: str, due: str, subtasks: Iterable[Subtask], *, approved: bool = True) -> Task:
    return Task(
        id=tid,
        type="assignment",
        due_date=due,
        description=f"task {tid}",
        approved_by_user=approved,
        subtasks=tuple(subtasks),
    )


def course(cid: str, tasks: Iterable[Task]) -> Course:
    return Course(id=cid, name=f"course {cid}", tasks=tuple(tasks))


def slot(
    sid: str,
    day: str,
    start: int,
    end: int,
    *,
    user_set: bool = False,
    course_id: str = "c1",
    task_id: str = "t1",
) -> ScheduledTime:
    return ScheduledTime(
        id=f"{sid}-{day}",
        day=day,
        start_time=start,
        end_time=end,
        subtask_id=sid,
        course_id=course_id,
        task_id=task_id,
        user_set=user_set,
    )


def state(
    courses: Iterable[Course],
    weekly=None,
    scheduled: Iterable[ScheduledTime] = (),
    *,
    current: str = SATURDAY,
    kind: str = "A",
) -> PlannerState:
    return PlannerState(
        current_date=current,
        courses=tuple(courses),
        scheduled_times=tuple(scheduled),
        weekly_schedule=dict(MON_8_10 if weekly is None else weekly),
        preferences=Preferences(scheduling_type=kind),
    )
