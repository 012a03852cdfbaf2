# studyplan/model.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Optional, Tuple

TASK_TYPES = ("assignment", "test")
SCHEDULING_TYPES = ("A", "B")

# Free-slot fragments shorter than this are not offered as placement targets.
MIN_SLOT_MINUTES = 15
HORIZON_DAYS = 14
MINUTES_PER_DAY = 24 * 60


@dataclass(frozen=True)
class Document:
    id: str
    display_name: str = ""
    url: Optional[str] = None
    content_type: Optional[str] = None


@dataclass(frozen=True)
class Subtask:
    id: str
    description: str = ""
    expected_time: float = 0.0  # hours
    current_percentage_completed: float = 0.0  # 0..100

    @property
    def is_complete(self) -> bool:
        return self.current_percentage_completed >= 100

    @property
    def in_progress(self) -> bool:
        return 0 < self.current_percentage_completed < 100


@dataclass(frozen=True)
class Task:
    id: str
    type: str = "assignment"  # "assignment" | "test"
    due_date: str = ""
    description: str = ""
    approved_by_user: bool = False
    subtasks: Tuple[Subtask, ...] = ()
    documents: Tuple[Document, ...] = ()
    updated_at: Optional[str] = None

    def subtask(self, subtask_id: str) -> Optional[Subtask]:
        for s in self.subtasks:
            if s.id == subtask_id:
                return s
        return None


@dataclass(frozen=True)
class Course:
    id: str
    name: str = ""
    tasks: Tuple[Task, ...] = ()
    documents: Dict[str, Document] = field(default_factory=dict)

    def task(self, task_id: str) -> Optional[Task]:
        for t in self.tasks:
            if t.id == task_id:
                return t
        return None


@dataclass(frozen=True)
class ScheduledTime:
    """One contiguous work block for one subtask on one day.

    `id` is a composite natural key, "{subtask_id}-{day}".
    """

    id: str
    day: str  # YYYY-MM-DD
    start_time: int  # minutes since midnight
    end_time: int
    subtask_id: str
    course_id: str
    task_id: str
    user_set: bool = False

    @property
    def duration_min(self) -> int:
        return int(self.end_time - self.start_time)


def scheduled_time_id(subtask_id: str, day: str) -> str:
    return f"{subtask_id}-{day}"


@dataclass(frozen=True)
class TimeBlock:
    start_time: int
    end_time: int
    id: Optional[str] = None


# day-of-week (0 = Sunday .. 6 = Saturday) -> recurring availability
WeeklySchedule = Dict[int, Tuple[TimeBlock, ...]]


@dataclass(frozen=True)
class Preferences:
    scheduling_type: str = "A"  # "A" earliest/compact | "B" spread
    calendar_day_start_hour: int = 8  # display only
    calendar_day_end_hour: int = 22  # display only


@dataclass(frozen=True)
class PlannerState:
    """Everything the scheduler reads, as one immutable snapshot."""

    current_date: str  # YYYY-MM-DD anchor for the horizon
    courses: Tuple[Course, ...] = ()
    scheduled_times: Tuple[ScheduledTime, ...] = ()
    weekly_schedule: WeeklySchedule = field(default_factory=dict)
    preferences: Preferences = field(default_factory=Preferences)

    def course(self, course_id: str) -> Optional[Course]:
        for c in self.courses:
            if c.id == course_id:
                return c
        return None


__all__ = [
    "TASK_TYPES",
    "SCHEDULING_TYPES",
    "MIN_SLOT_MINUTES",
    "HORIZON_DAYS",
    "MINUTES_PER_DAY",
    "Document",
    "Subtask",
    "Task",
    "Course",
    "ScheduledTime",
    "scheduled_time_id",
    "TimeBlock",
    "WeeklySchedule",
    "Preferences",
    "PlannerState",
]
