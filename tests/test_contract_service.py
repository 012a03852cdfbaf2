import contextlib
import io
import json
import os
import random
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from studyplan.model import Subtask
from studyplan.service import PlannerService
from studyplan.state import UnknownEntityError, approve_all_tasks

from _builders import MONDAY, TUESDAY, course, state, sub, task


def _state():
    return state([course("c1", [task("t1", TUESDAY, [sub("s1"), sub("s2")], approved=False)])])


class TestPlannerServiceContract(unittest.TestCase):
    def test_approval_does_not_reschedule(self) -> None:
        svc = PlannerService(_state(), rng=random.Random(1))
        svc.approve_all_tasks()
        self.assertTrue(svc.are_all_tasks_approved())
        self.assertEqual(svc.scheduled_times, ())

        res = svc.auto_schedule_tasks()
        self.assertEqual(svc.last_result, res)
        self.assertEqual([x.subtask_id for x in svc.scheduled_times], ["s1", "s2"])
        self.assertTrue(all(x.day == MONDAY for x in svc.scheduled_times))

    def test_edits_persist_when_path_set(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            path = Path(td) / "state.json"
            svc = PlannerService(_state(), path=path)
            svc.toggle_task_approval("c1", "t1")
            svc.add_subtask("c1", "t1", Subtask(id="s3", expected_time=0.25))
            svc.auto_schedule_tasks(scheduling_type="A")
            svc.manually_schedule_task("s3", "c1", "t1", TUESDAY, 1200, 1215)

            saved = json.loads(path.read_text(encoding="utf-8"))
            self.assertEqual(len(saved["courses"][0]["tasks"][0]["subtasks"]), 3)
            pinned = [x for x in saved["scheduled_tasks"] if x["subtask_id"] == "s3"]
            self.assertEqual(len(pinned), 1)
            self.assertTrue(pinned[0]["user_set"])

            reopened = PlannerService.open(path)
            self.assertEqual(reopened.state, svc.state)

    def test_failed_edit_leaves_state(self) -> None:
        svc = PlannerService(_state())
        before = svc.state
        with self.assertRaises(UnknownEntityError):
            svc.remove_subtask("c1", "t1", "s9")
        self.assertIs(svc.state, before)

    def test_observability_lines(self) -> None:
        svc = PlannerService(approve_all_tasks(_state()))
        buf = io.StringIO()
        with mock.patch.dict(os.environ, {"STUDYPLAN_OBS_LOG": "1"}), contextlib.redirect_stderr(buf):
            svc.auto_schedule_tasks(scheduling_type="Z")
        out = buf.getvalue()
        self.assertIn("[studyplan.service] schedule.ok", out)
        self.assertIn("preserved=0 placed=2 unplaced=0 late=0", out)
        self.assertIn("[studyplan.service] WARN: unknown scheduling_type 'Z'", out)

        quiet = io.StringIO()
        with mock.patch.dict(os.environ, {"STUDYPLAN_OBS_LOG": ""}), contextlib.redirect_stderr(quiet):
            svc.auto_schedule_tasks()
        self.assertEqual(quiet.getvalue(), "")

    def test_save_without_path(self) -> None:
        with self.assertRaises(ValueError):
            PlannerService(_state()).save()


if __name__ == "__main__":
    unittest.main(verbosity=2)
