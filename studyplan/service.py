"""Stateful facade over the pure planner.

PlannerService holds the current PlannerState, applies operations from
`studyplan.state`, runs the scheduler on request, and optionally persists
each new state to a JSON file. It is not thread-safe: callers must not
mutate the state while a scheduling run is in flight.
"""

from __future__ import annotations

import random
import time
from pathlib import Path
from typing import Any, Optional, Tuple

from . import state as ops
from .io import load_state, save_state
from .model import Course, PlannerState, Preferences, ScheduledTime, Subtask, Task, TimeBlock
from .placement import RandomSource
from .planner import ScheduleResult, auto_schedule
from .util.console import eprint, obs_enabled


class PlannerService:
    def __init__(
        self,
        state: PlannerState,
        *,
        path: Optional[Path] = None,
        rng: Optional[RandomSource] = None,
    ) -> None:
        self._state = state
        self._path = Path(path) if path is not None else None
        self._rng: RandomSource = rng if rng is not None else random.Random()
        self.last_result: Optional[ScheduleResult] = None

    @classmethod
    def open(cls, path: Path, *, rng: Optional[RandomSource] = None, validate: bool = True) -> "PlannerService":
        return cls(load_state(Path(path), validate=validate), path=path, rng=rng)

    @property
    def state(self) -> PlannerState:
        return self._state

    @property
    def scheduled_times(self) -> Tuple[ScheduledTime, ...]:
        return self._state.scheduled_times

    @property
    def preferences(self) -> Preferences:
        return self._state.preferences

    def _commit(self, new_state: PlannerState) -> None:
        self._state = new_state
        if self._path is not None:
            save_state(new_state, self._path)

    def save(self) -> None:
        if self._path is None:
            raise ValueError("service has no state path")
        save_state(self._state, self._path)

    # --- scheduling ------------------------------------------------------------

    def auto_schedule_tasks(self, force_reschedule: bool = False, *, scheduling_type: Optional[str] = None) -> ScheduleResult:
        t0 = time.monotonic()
        result = auto_schedule(
            self._state,
            force_reschedule=force_reschedule,
            rng=self._rng,
            scheduling_type=scheduling_type,
        )
        self._commit(ops.apply_schedule(self._state, result.scheduled_times))
        self.last_result = result
        if obs_enabled():
            elapsed_ms = int((time.monotonic() - t0) * 1000)
            eprint(
                f"[studyplan.service] schedule.ok ms={elapsed_ms} force={int(bool(force_reschedule))} "
                f"preserved={len(result.preserved)} placed={len(result.placed)} "
                f"unplaced={len(result.unplaced)} late={len(result.late)}"
            )
            for w in result.warnings:
                eprint(f"[studyplan.service] WARN: {w}")
        return result

    def manually_schedule_task(
        self,
        subtask_id: str,
        course_id: str,
        task_id: str,
        day: str,
        start_time: int,
        end_time: int,
    ) -> None:
        self._commit(ops.manually_schedule_task(self._state, subtask_id, course_id, task_id, day, start_time, end_time))

    # --- approval --------------------------------------------------------------

    def toggle_task_approval(self, course_id: str, task_id: str) -> None:
        self._commit(ops.toggle_task_approval(self._state, course_id, task_id))

    def approve_all_tasks(self) -> None:
        self._commit(ops.approve_all_tasks(self._state))

    def are_all_tasks_approved(self) -> bool:
        return ops.are_all_tasks_approved(self._state)

    # --- data edits ------------------------------------------------------------

    def set_courses(self, courses: Tuple[Course, ...]) -> None:
        self._commit(ops.set_courses(self._state, courses))

    def add_task(self, course_id: str, task: Task) -> None:
        self._commit(ops.add_task(self._state, course_id, task))

    def update_task(self, course_id: str, task_id: str, **changes: Any) -> None:
        self._commit(ops.update_task(self._state, course_id, task_id, **changes))

    def remove_task(self, course_id: str, task_id: str) -> None:
        self._commit(ops.remove_task(self._state, course_id, task_id))

    def add_subtask(self, course_id: str, task_id: str, subtask: Subtask) -> None:
        self._commit(ops.add_subtask(self._state, course_id, task_id, subtask))

    def update_subtask(self, course_id: str, task_id: str, subtask_id: str, **changes: Any) -> None:
        self._commit(ops.update_subtask(self._state, course_id, task_id, subtask_id, **changes))

    def remove_subtask(self, course_id: str, task_id: str, subtask_id: str) -> None:
        self._commit(ops.remove_subtask(self._state, course_id, task_id, subtask_id))

    def toggle_time_block(self, day_of_week: int, start_time: int, end_time: int) -> None:
        self._commit(ops.toggle_time_block(self._state, day_of_week, start_time, end_time))

    def update_weekly_schedule(self, weekly: dict[int, Tuple[TimeBlock, ...]]) -> None:
        self._commit(ops.update_weekly_schedule(self._state, weekly))

    def update_preferences(self, **changes: Any) -> None:
        self._commit(ops.update_preferences(self._state, **changes))

    def set_current_date(self, day: str) -> None:
        self._commit(ops.set_current_date(self._state, day))
