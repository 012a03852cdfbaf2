import json
import os
import shutil
import subprocess
import sys
import tempfile
import unittest
from pathlib import Path


REPO_ROOT = Path(__file__).resolve().parents[1]
FIXTURE = REPO_ROOT / "tests" / "fixtures" / "state_small.json"


def _py() -> str:
    return os.environ.get("PYTHON", sys.executable)


def _run(*args: str):
    env = dict(os.environ)
    env.pop("STUDYPLAN_STATE", None)
    env.pop("STUDYPLAN_TODAY", None)
    env.pop("STUDYPLAN_SEED", None)
    p = subprocess.run([_py(), "-m", *args], cwd=str(REPO_ROOT), text=True, capture_output=True, env=env)
    return p, (p.stdout or "") + "\n" + (p.stderr or "")


class TestScheduleCliContract(unittest.TestCase):
    def test_schedule_run_writes_state(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            state_path = Path(td) / "state.json"
            shutil.copyfile(FIXTURE, state_path)

            p, combined = _run("studyplan.cli", "--state", str(state_path), "--today", "2025-03-01", "--policy", "A")
            self.assertEqual(p.returncode, 0, combined)
            self.assertIn("[studyplan] preserved=1 placed=2 unplaced=0 late=0", p.stdout)
            self.assertIn("  18:00-19:00  Algorithms / Problem set 3 / Read chapter 4", p.stdout)

            saved = json.loads(state_path.read_text(encoding="utf-8"))
            ids = sorted(x["id"] for x in saved["scheduled_tasks"])
            self.assertEqual(ids, ["s1-2025-03-05", "s2-2025-03-05", "s4-2025-03-03"])

    def test_dry_run_json_leaves_file_alone(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            state_path = Path(td) / "state.json"
            shutil.copyfile(FIXTURE, state_path)
            before = state_path.read_text(encoding="utf-8")

            p, combined = _run("studyplan.cli", "--state", str(state_path), "--dry-run", "--json", "--policy", "B", "--seed", "7")
            self.assertEqual(p.returncode, 0, combined)
            out = json.loads(p.stdout)
            self.assertIn("scheduled_tasks", out)
            self.assertEqual(state_path.read_text(encoding="utf-8"), before)

    def test_bad_subtask_numbers_do_not_block_the_run(self) -> None:
        for field, value in (("current_percentage_completed", 110), ("expected_time", -1)):
            with self.subTest(field=field), tempfile.TemporaryDirectory() as td:
                obj = json.loads(FIXTURE.read_text(encoding="utf-8"))
                obj["courses"][0]["tasks"][0]["subtasks"][1][field] = value
                obj["weekly_schedule"]["2"] = {"available_blocks": [{"id": "x", "start_time": 900, "end_time": 600}]}
                state_path = Path(td) / "state.json"
                state_path.write_text(json.dumps(obj), encoding="utf-8")

                p, combined = _run("studyplan.cli", "--state", str(state_path), "--policy", "A")
                self.assertEqual(p.returncode, 0, combined)
                self.assertIn("[studyplan] preserved=1 placed=1 unplaced=0 late=0", p.stdout)

                saved = json.loads(state_path.read_text(encoding="utf-8"))
                ids = sorted(x["id"] for x in saved["scheduled_tasks"])
                self.assertEqual(ids, ["s1-2025-03-05", "s4-2025-03-03"])

    def test_unreadable_state_is_input_error(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            p, combined = _run("studyplan.cli", "--state", td)
            self.assertEqual(p.returncode, 2, combined)
            self.assertIn("[studyplan] ERROR:", p.stderr)
            self.assertNotIn("Traceback", p.stderr)

            p, combined = _run("studyplan.tools.validate_state", "--in", td)
            self.assertEqual(p.returncode, 2, combined)
            self.assertIn("[studyplan-validate-state] ERROR:", p.stderr)

    def test_missing_state_is_input_error(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            p, combined = _run("studyplan.cli", "--state", str(Path(td) / "nope.json"))
            self.assertEqual(p.returncode, 2, combined)
            self.assertIn("[studyplan] ERROR:", p.stderr)


class TestStateToolsContract(unittest.TestCase):
    def test_validate_state_tool(self) -> None:
        p, combined = _run("studyplan.tools.validate_state", "--in", str(FIXTURE))
        self.assertEqual(p.returncode, 0, combined)
        self.assertIn("[studyplan-validate-state] OK", combined)

        with tempfile.TemporaryDirectory() as td:
            bad = Path(td) / "bad.json"
            bad.write_text(json.dumps({"current_date": "soon"}), encoding="utf-8")
            p, combined = _run("studyplan.tools.validate_state", "--in", str(bad))
            self.assertEqual(p.returncode, 3, combined)
            self.assertIn("current_date", p.stderr)

    def test_manual_schedule_tool(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            state_path = Path(td) / "state.json"
            shutil.copyfile(FIXTURE, state_path)
            p, combined = _run(
                "studyplan.tools.manual_schedule",
                "--state", str(state_path),
                "--course", "c2", "--task", "t3", "--subtask", "s4",
                "--day", "2025-03-04", "--start", "20:00", "--end", "21:30",
            )
            self.assertEqual(p.returncode, 0, combined)
            self.assertIn("[studyplan-place] OK s4 2025-03-04 20:00-21:30", p.stdout)

            saved = json.loads(state_path.read_text(encoding="utf-8"))
            s4 = [x for x in saved["scheduled_tasks"] if x["subtask_id"] == "s4"]
            self.assertEqual(len(s4), 1)
            self.assertEqual((s4[0]["start_time"], s4[0]["end_time"], s4[0]["user_set"]), (1200, 1290, True))

            p, combined = _run(
                "studyplan.tools.manual_schedule",
                "--state", str(state_path),
                "--course", "c2", "--task", "t3", "--subtask", "s9",
                "--day", "2025-03-04", "--start", "20:00", "--end", "21:30",
            )
            self.assertEqual(p.returncode, 2, combined)

    def test_approve_tool(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            state_path = Path(td) / "state.json"
            shutil.copyfile(FIXTURE, state_path)

            p, combined = _run("studyplan.tools.approve_tasks", "--state", str(state_path), "--check")
            self.assertEqual(p.returncode, 1, combined)

            p, combined = _run("studyplan.tools.approve_tasks", "--state", str(state_path), "--toggle", "--course", "c1", "--task", "t2")
            self.assertEqual(p.returncode, 0, combined)
            self.assertIn("approved=true", p.stdout)

            p, combined = _run("studyplan.tools.approve_tasks", "--state", str(state_path), "--check")
            self.assertEqual(p.returncode, 0, combined)
            self.assertIn("all approved", p.stdout)

    def test_day_view_tool(self) -> None:
        p, combined = _run("studyplan.tools.day_view", "--state", str(FIXTURE), "--day", "2025-03-03")
        self.assertEqual(p.returncode, 0, combined)
        self.assertIn("2025-03-03  sessions=1 load_min=45", p.stdout)
        self.assertIn("  08:00-08:45  History / Essay draft / Outline", p.stdout)
        self.assertIn("  free: 08:45-10:00", p.stdout)


if __name__ == "__main__":
    unittest.main(verbosity=2)
