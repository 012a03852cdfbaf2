from __future__ import annotations

import unittest


class TestPublicApiLockContract(unittest.TestCase):
    def test_api_module_exports_are_present(self) -> None:
        import studyplan.api as api

        self.assertTrue(hasattr(api, "__all__"))
        self.assertIsInstance(api.__all__, (list, tuple))
        self.assertEqual(len(api.__all__), len(set(api.__all__)))

        for name in api.__all__:
            self.assertIsInstance(name, str)
            self.assertTrue(hasattr(api, name), f"studyplan.api missing public name: {name}")
            self.assertIsNotNone(getattr(api, name), f"studyplan.api {name} is None")

    def test_core_entrypoints_are_public(self) -> None:
        import studyplan.api as api

        for name in ("auto_schedule", "manually_schedule_task", "toggle_task_approval", "approve_all_tasks", "PlannerService"):
            self.assertIn(name, api.__all__)

    def test_package_reexports_match_api_all(self) -> None:
        import studyplan
        import studyplan.api as api

        for name in api.__all__:
            self.assertTrue(hasattr(studyplan, name), f"studyplan package does not re-export: {name}")
            self.assertIs(getattr(studyplan, name), getattr(api, name), f"studyplan.{name} must be same object as studyplan.api.{name}")


if __name__ == "__main__":
    unittest.main(verbosity=2)
