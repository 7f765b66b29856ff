"""Tests for the bounded-concurrency runner."""

import threading
import time
import unittest
from unittest.mock import MagicMock

from apicseed._concurrent import concurrent
from apicseed._config import SEED


class TestConcurrent(unittest.TestCase):
    """Tests for concurrent()."""

    def setUp(self):
        SEED.reset()

    def tearDown(self):
        SEED.reset()

    def test_results_are_in_index_order(self):
        """Should return results in ascending index order, whatever the completion order."""
        def operation(i: int) -> int:
            time.sleep(0.01 * (5 - i % 5))
            return i * 10

        results = concurrent(operation, lambda i: i, total_calls=10, limit=5)

        self.assertEqual(results, [i * 10 for i in range(1, 11)])

    def test_list_arguments_are_spread(self):
        operation = MagicMock(side_effect=lambda a, b: f"{a}-{b}")

        results = concurrent(operation, lambda i: [i, i + 1], total_calls=3, limit=2)

        self.assertEqual(results, ["1-2", "2-3", "3-4"])

    def test_tuple_arguments_are_spread(self):
        results = concurrent(lambda a, b: a + b, lambda i: (i, 100), total_calls=2, limit=2)

        self.assertEqual(results, [101, 102])

    def test_non_sequence_argument_is_passed_as_single_argument(self):
        results = concurrent(lambda d: d["i"], lambda i: {"i": i}, total_calls=3, limit=3)

        self.assertEqual(results, [1, 2, 3])

    def test_none_arguments_skip_the_index(self):
        """Should skip indices resolving to None and log a warning."""
        with self.assertLogs("apicseed._concurrent", level="WARNING") as logs:
            results = concurrent(
                lambda i: i,
                lambda i: None if i % 2 == 0 else i,
                total_calls=6,
                limit=4,
            )

        self.assertEqual(results, [1, 3, 5])
        self.assertEqual(len(logs.records), 3)
        self.assertIn("Skipping method execution 2", logs.output[0])

    def test_zero_calls_returns_empty_list(self):
        operation = MagicMock()

        self.assertEqual(concurrent(operation, lambda i: i, total_calls=0, limit=3), [])
        operation.assert_not_called()

    def test_never_exceeds_limit_in_flight(self):
        """Should keep at most `limit` calls running at the same time."""
        lock = threading.Lock()
        in_flight = 0
        max_in_flight = 0

        def operation(i: int) -> int:
            nonlocal in_flight, max_in_flight
            with lock:
                in_flight += 1
                max_in_flight = max(max_in_flight, in_flight)
            time.sleep(0.02)
            with lock:
                in_flight -= 1
            return i

        results = concurrent(operation, lambda i: i, total_calls=12, limit=3)

        self.assertEqual(len(results), 12)
        self.assertLessEqual(max_in_flight, 3)

    def test_next_wave_starts_after_previous_wave_completes(self):
        """Should not start a call of wave N+1 before every call of wave N is done."""
        lock = threading.Lock()
        finished: set[int] = set()
        started_too_early: list[int] = []

        def operation(i: int) -> int:
            wave_start = ((i - 1) // 2) * 2
            with lock:
                if any(j not in finished for j in range(1, wave_start + 1)):
                    started_too_early.append(i)
            time.sleep(0.01)
            with lock:
                finished.add(i)
            return i

        concurrent(operation, lambda i: i, total_calls=6, limit=2)

        self.assertEqual(started_too_early, [])

    def test_exception_propagates_and_stops_later_waves(self):
        """Should re-raise the error of a call and not start any later wave."""
        calls: list[int] = []
        lock = threading.Lock()

        def operation(i: int) -> int:
            with lock:
                calls.append(i)
            if i == 2:
                raise RuntimeError("boom")
            return i

        with self.assertRaises(RuntimeError):
            concurrent(operation, lambda i: i, total_calls=10, limit=2)

        self.assertTrue(all(i <= 2 for i in calls))

    def test_limit_defaults_to_concurrency_limit_config(self):
        """Should use the http.concurrency_limit config when no limit is given."""
        SEED.configure(http={"concurrency_limit": 2}, allow_env_override=False)
        lock = threading.Lock()
        in_flight = 0
        max_in_flight = 0

        def operation(i: int) -> int:
            nonlocal in_flight, max_in_flight
            with lock:
                in_flight += 1
                max_in_flight = max(max_in_flight, in_flight)
            time.sleep(0.01)
            with lock:
                in_flight -= 1
            return i

        concurrent(operation, lambda i: i, total_calls=6)

        self.assertLessEqual(max_in_flight, 2)

    def test_rejects_invalid_arguments(self):
        with self.assertRaises(AssertionError):
            concurrent("not callable", lambda i: i, total_calls=1)  # type: ignore[arg-type]
        with self.assertRaises(AssertionError):
            concurrent(lambda i: i, lambda i: i, total_calls=-1)
        with self.assertRaises(AssertionError):
            concurrent(lambda i: i, lambda i: i, total_calls=1, limit=0)


if __name__ == "__main__":
    unittest.main()
