"""Tests for background tasks, their event queue, and path locking."""

from __future__ import annotations

import threading
import unittest
from pathlib import Path

from dualpane.errors import Cancelled
from dualpane.operations import PathLockRegistry, Progress, TaskEventKind, TaskRunner


class TaskRunnerTests(unittest.TestCase):
    def test_result_and_events_are_published(self) -> None:
        runner = TaskRunner()

        def work(token, on_progress, on_item):
            on_item("first")
            on_progress(Progress("demo", 1, 2))
            on_progress(Progress("demo", 2, 2))
            return 42

        handle = runner.submit("demo", work)

        self.assertEqual(handle.wait(5), 42)
        self.assertTrue(handle.done)
        self.assertEqual(handle.last_progress, Progress("demo", 2, 2))
        kinds = [event.kind for event in runner.drain_events()]
        self.assertEqual(
            kinds,
            [TaskEventKind.ITEM, TaskEventKind.PROGRESS, TaskEventKind.PROGRESS, TaskEventKind.RESULT],
        )
        self.assertEqual(runner.drain_events(), [])
        self.assertEqual(runner.running(), [])

    def test_task_error_is_reraised_from_wait(self) -> None:
        runner = TaskRunner()

        def work(token, on_progress, on_item):
            raise ValueError("boom")

        handle = runner.submit("failing", work)

        with self.assertRaises(ValueError):
            handle.wait(5)
        events = runner.drain_events()
        self.assertEqual(events[-1].kind, TaskEventKind.ERROR)
        self.assertIsInstance(events[-1].payload, ValueError)

    def test_cancel_while_waiting_for_lock_skips_work(self) -> None:
        locks = PathLockRegistry()
        runner = TaskRunner(locks)
        held = locks.acquire([Path("/locked/tree")])
        ran = threading.Event()

        def work(token, on_progress, on_item):
            ran.set()
            return "ran"

        handle = runner.submit("blocked", work, paths=[Path("/locked/tree/child")])
        handle.cancel()
        locks.release(held)

        with self.assertRaises(Cancelled):
            handle.wait(5)
        self.assertFalse(ran.is_set())

    def test_overlapping_tasks_run_one_after_another(self) -> None:
        runner = TaskRunner()
        release_first = threading.Event()
        first_started = threading.Event()
        order: list[str] = []

        def first(token, on_progress, on_item):
            first_started.set()
            release_first.wait(5)
            order.append("first")

        def second(token, on_progress, on_item):
            order.append("second")

        first_handle = runner.submit("first", first, paths=[Path("/work/a")])
        self.assertTrue(first_started.wait(5))
        second_handle = runner.submit("second", second, paths=[Path("/work")])
        self.assertFalse(second_handle.done)

        release_first.set()
        first_handle.wait(5)
        second_handle.wait(5)

        self.assertEqual(order, ["first", "second"])


class PathLockRegistryTests(unittest.TestCase):
    def test_nested_paths_conflict_and_disjoint_paths_do_not(self) -> None:
        locks = PathLockRegistry()
        lock_id = locks.acquire([Path("/data/photos")])

        self.assertTrue(locks.is_locked(Path("/data")))
        self.assertTrue(locks.is_locked(Path("/data/photos/2024")))
        self.assertFalse(locks.is_locked(Path("/data/music")))
        self.assertIsNone(locks.acquire([Path("/data/photos/a.jpg")], timeout=0.05))

        other = locks.acquire([Path("/data/music")], timeout=0.05)
        self.assertIsNotNone(other)

        locks.release(lock_id)
        self.assertFalse(locks.is_locked(Path("/data/photos")))


if __name__ == "__main__":
    unittest.main()
