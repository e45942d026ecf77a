"""Tests for bounded back/forward navigation stacks."""

from __future__ import annotations

import unittest
from pathlib import Path

from dualpane.pane import MAX_HISTORY, NavigationHistory


def _p(index: int) -> Path:
    return Path(f"/history/test/dir{index}")


class NavigationHistoryTests(unittest.TestCase):
    def test_back_stack_is_capped_and_evicts_oldest(self) -> None:
        history = NavigationHistory()
        for index in range(MAX_HISTORY + 10):
            history.record(_p(index))

        self.assertEqual(len(history.back), MAX_HISTORY)
        self.assertEqual(history.back[0], _p(10))
        self.assertEqual(history.back[-1], _p(MAX_HISTORY + 9))

    def test_forward_stack_is_capped_too(self) -> None:
        history = NavigationHistory(max_entries=3)
        for index in range(5):
            history.record(_p(index))
        current = _p(99)
        while True:
            target = history.go_back(current)
            if target is None:
                break
            current = target

        self.assertEqual(len(history.forward), 3)

    def test_go_back_then_forward_round_trips(self) -> None:
        history = NavigationHistory()
        history.record(_p(1))

        self.assertEqual(history.go_back(_p(2)), _p(1))
        self.assertTrue(history.can_go_forward)
        self.assertEqual(history.go_forward(_p(1)), _p(2))
        self.assertEqual(history.back, [_p(1)])
        self.assertEqual(history.forward, [])

    def test_record_clears_forward_and_suppresses_adjacent_duplicates(self) -> None:
        history = NavigationHistory()
        history.record(_p(1))
        history.record(_p(1))
        history.go_back(_p(2))

        history.record(_p(1))

        self.assertEqual(history.back, [_p(1)])
        self.assertFalse(history.can_go_forward)

    def test_empty_stacks_return_none(self) -> None:
        history = NavigationHistory()
        self.assertIsNone(history.go_back(_p(1)))
        self.assertIsNone(history.go_forward(_p(1)))


if __name__ == "__main__":
    unittest.main()
