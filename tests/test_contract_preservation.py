import datetime as dt
import unittest

from studyplan.planner import preservation_pass

from _builders import MONDAY, TUESDAY, course, slot, sub, task

ANCHOR = dt.date(2025, 3, 1)


def _courses():
    return [
        course(
            "c1",
            [
                task(
                    "t1",
                    "2025-03-10",
                    [sub("fresh"), sub("half", pct=50), sub("done", pct=100)],
                )
            ],
        )
    ]


class TestPreservationContract(unittest.TestCase):
    def test_user_set_kept_unless_forced(self) -> None:
        st = slot("fresh", TUESDAY, 600, 660, user_set=True)

        res = preservation_pass([st], _courses(), ANCHOR)
        self.assertEqual(res.preserved, (st,))
        self.assertEqual(res.processed_subtask_ids, frozenset({"fresh"}))

        forced = preservation_pass([st], _courses(), ANCHOR, force_reschedule=True)
        self.assertEqual(forced.preserved, ())
        self.assertEqual(forced.processed_subtask_ids, frozenset())

    def test_in_progress_kept_even_when_forced(self) -> None:
        system = slot("half", MONDAY, 480, 510)
        res = preservation_pass([system], _courses(), ANCHOR, force_reschedule=True)
        self.assertEqual(res.preserved, (system,))
        self.assertIn("half", res.processed_subtask_ids)

    def test_system_slot_of_unstarted_subtask_is_reschedulable(self) -> None:
        res = preservation_pass([slot("fresh", MONDAY, 480, 540)], _courses(), ANCHOR)
        self.assertEqual(res.preserved, ())
        self.assertEqual(res.dropped, ())

    def test_missing_chain_dropped(self) -> None:
        gone_subtask = slot("ghost", MONDAY, 480, 540, user_set=True)
        gone_task = slot("fresh", MONDAY, 480, 540, user_set=True, task_id="t9")
        gone_course = slot("fresh", MONDAY, 480, 540, user_set=True, course_id="c9")
        res = preservation_pass([gone_subtask, gone_task, gone_course], _courses(), ANCHOR)
        self.assertEqual(res.preserved, ())
        self.assertEqual([r for _, r in res.dropped], ["missing", "missing", "missing"])

    def test_past_slots_of_unfinished_work_dropped(self) -> None:
        past_user = slot("fresh", "2025-02-27", 480, 540, user_set=True)
        past_progress = slot("half", "2025-02-28", 480, 540)
        today = slot("half", "2025-03-01", 480, 540)
        res = preservation_pass([past_user, past_progress, today], _courses(), ANCHOR)
        self.assertEqual(res.preserved, (today,))
        self.assertEqual([r for _, r in res.dropped], ["stale", "stale"])

    def test_completed_subtask_slots_never_kept(self) -> None:
        done = slot("done", TUESDAY, 600, 660, user_set=True)
        res = preservation_pass([done], _courses(), ANCHOR)
        self.assertEqual(res.preserved, ())
        self.assertEqual(res.dropped[0][1], "complete")


if __name__ == "__main__":
    unittest.main(verbosity=2)
