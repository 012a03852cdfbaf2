"""studyplan.api

Stable *library* entrypoint for studyplan.

Policy:
  - Only names listed in __all__ are considered public API.
  - Everything else is internal and may change without notice.
"""

from __future__ import annotations

from studyplan.io import empty_state, load_state, save_state, state_to_dict
from studyplan.model import (
    Course,
    Document,
    PlannerState,
    Preferences,
    ScheduledTime,
    Subtask,
    Task,
    TimeBlock,
)
from studyplan.normalize import state_from_dict
from studyplan.planner import (
    ScheduleResult,
    WorkItem,
    auto_schedule,
    build_work_list,
    preservation_pass,
    remaining_minutes,
)
from studyplan.query import (
    ScheduledItem,
    availability_gaps,
    days_with_events,
    scheduled_items_for_day,
    unscheduled_subtasks,
)
from studyplan.service import PlannerService
from studyplan.slots import build_free_slots
from studyplan.state import (
    UnknownEntityError,
    approve_all_tasks,
    are_all_tasks_approved,
    manually_schedule_task,
    toggle_task_approval,
)
from studyplan.validate import StateValidationError, assert_valid_state, validate_state

__all__ = [
    "Course",
    "Document",
    "PlannerState",
    "Preferences",
    "ScheduledTime",
    "Subtask",
    "Task",
    "TimeBlock",
    "ScheduleResult",
    "WorkItem",
    "auto_schedule",
    "build_free_slots",
    "preservation_pass",
    "build_work_list",
    "remaining_minutes",
    "manually_schedule_task",
    "toggle_task_approval",
    "approve_all_tasks",
    "are_all_tasks_approved",
    "PlannerService",
    "ScheduledItem",
    "scheduled_items_for_day",
    "days_with_events",
    "unscheduled_subtasks",
    "availability_gaps",
    "empty_state",
    "load_state",
    "save_state",
    "state_to_dict",
    "state_from_dict",
    "validate_state",
    "assert_valid_state",
    "StateValidationError",
    "UnknownEntityError",
]
