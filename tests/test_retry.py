#!/usr/bin/env python3
# tests/test_retry.py
"""
PulseCraft — Retry / Timeout Tests

Run with: python -m pytest tests/test_retry.py -v
"""

import sys
from pathlib import Path

# Add parent to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

import asyncio
import unittest
from unittest.mock import AsyncMock


class TestBackoffSchedule(unittest.TestCase):
    """Test the backoff schedule helper."""

    def test_default_schedule(self):
        from council.retry import backoff_schedule

        self.assertEqual(backoff_schedule(3, 1000), [1.0, 2.0])
        self.assertEqual(backoff_schedule(4, 1000), [1.0, 2.0, 4.0])

    def test_single_attempt_has_no_delays(self):
        from council.retry import backoff_schedule

        self.assertEqual(backoff_schedule(1, 1000), [])


class TestWithRetry(unittest.IsolatedAsyncioTestCase):
    """Test bounded exponential backoff."""

    async def test_fails_twice_then_succeeds(self):
        """Two failures then success: returns the value after exactly 3 calls."""
        from council.retry import with_retry

        fn = AsyncMock(side_effect=[RuntimeError("a"), RuntimeError("b"), "ok"])
        result = await with_retry(fn, 3, 10)

        self.assertEqual(result, "ok")
        self.assertEqual(fn.await_count, 3)

    async def test_rethrows_after_max_attempts(self):
        """Four scripted failures with max_attempts=3: 3 calls then re-raise."""
        from council.retry import with_retry

        errors = [ValueError(f"fail {i}") for i in range(4)]
        fn = AsyncMock(side_effect=errors)

        with self.assertRaises(ValueError) as ctx:
            await with_retry(fn, 3, 10)

        self.assertEqual(fn.await_count, 3)
        self.assertIs(ctx.exception, errors[2])

    async def test_sleeps_follow_doubling_schedule(self):
        from council.retry import with_retry

        slept = []

        async def fake_sleep(seconds):
            slept.append(seconds)

        fn = AsyncMock(side_effect=[OSError(), OSError(), OSError()])
        with self.assertRaises(OSError):
            await with_retry(fn, 3, 1000, sleep=fake_sleep)

        self.assertEqual(slept, [1.0, 2.0])

    async def test_success_first_try_never_sleeps(self):
        from council.retry import with_retry

        sleep = AsyncMock()
        fn = AsyncMock(return_value=42)

        self.assertEqual(await with_retry(fn, sleep=sleep), 42)
        sleep.assert_not_awaited()

    async def test_invalid_attempts(self):
        from council.retry import with_retry

        with self.assertRaises(ValueError):
            await with_retry(AsyncMock(), max_attempts=0)

    async def test_cancellation_is_not_retried(self):
        from council.retry import with_retry

        fn = AsyncMock(side_effect=asyncio.CancelledError())
        with self.assertRaises(asyncio.CancelledError):
            await with_retry(fn, 3, 10)
        self.assertEqual(fn.await_count, 1)

    async def test_retry_policy_passes_settings(self):
        from council.retry import RetryPolicy

        sleep = AsyncMock()
        policy = RetryPolicy(max_attempts=2, initial_delay_ms=5, sleep=sleep)
        fn = AsyncMock(side_effect=[RuntimeError("x"), "done"])

        self.assertEqual(await policy.run(fn, label="test"), "done")
        sleep.assert_awaited_once_with(0.005)


class TestWithTimeout(unittest.IsolatedAsyncioTestCase):
    """Test the hard deadline wrapper."""

    async def test_returns_value_inside_deadline(self):
        from council.retry import with_timeout

        async def quick():
            return "fast"

        self.assertEqual(await with_timeout(quick(), 1.0, "quick"), "fast")

    async def test_raises_operation_timeout(self):
        from council.retry import with_timeout
        from core.errors import OperationTimeout

        async def slow():
            await asyncio.sleep(10)

        with self.assertRaises(OperationTimeout) as ctx:
            await with_timeout(slow(), 0.01, "slow_op")

        self.assertEqual(ctx.exception.operation, "slow_op")
        self.assertIn("slow_op", str(ctx.exception))


if __name__ == "__main__":
    unittest.main()
