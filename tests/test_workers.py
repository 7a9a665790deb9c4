"""
Tests for the bounded worker pool.
"""

import asyncio
import time

import pytest

from netsnmp.workers import WorkerPool, run_bounded


class TestWorkerPool:

    def test_rejects_non_positive_limit(self):
        with pytest.raises(ValueError):
            WorkerPool(0)
        with pytest.raises(ValueError):
            WorkerPool(-3)

    def test_never_exceeds_limit(self):
        pool = WorkerPool(limit=5)
        current = {"n": 0, "peak": 0}

        async def worker(item):
            current["n"] += 1
            current["peak"] = max(current["peak"], current["n"])
            await asyncio.sleep(0.1)
            current["n"] -= 1
            return item * 2

        start = time.monotonic()
        outcomes = asyncio.run(pool.run(range(12), worker))
        elapsed = time.monotonic() - start

        assert len(outcomes) == 12
        assert current["peak"] <= 5
        assert pool.peak_in_flight == 5
        assert pool.in_flight == 0
        # ceil(12 / 5) = 3 waves of 0.1s
        assert 0.28 <= elapsed < 0.9
        assert sorted(o.result for o in outcomes) == [i * 2 for i in range(12)]

    def test_failure_does_not_stop_siblings(self):
        async def worker(item):
            await asyncio.sleep(0)
            if item == 3:
                raise RuntimeError("agent exploded")
            return item

        outcomes = asyncio.run(WorkerPool(2).run(range(6), worker))

        failed = [o for o in outcomes if not o.ok]
        assert len(outcomes) == 6
        assert len(failed) == 1
        assert failed[0].item == 3
        assert isinstance(failed[0].error, RuntimeError)

    def test_outcomes_in_completion_order(self):
        delays = {"slow": 0.05, "fast": 0.0}

        async def worker(item):
            await asyncio.sleep(delays[item])
            return item

        seen = []
        asyncio.run(WorkerPool(2).run(["slow", "fast"], worker,
                                      on_outcome=lambda o: seen.append(o.item)))
        assert seen == ["fast", "slow"]

    def test_outcome_handler_error_is_contained(self):
        async def worker(item):
            return item

        def handler(outcome):
            raise KeyError("bad handler")

        outcomes = asyncio.run(WorkerPool(3).run([1, 2, 3], worker, on_outcome=handler))
        assert len(outcomes) == 3

    def test_empty_input(self):
        async def worker(item):
            return item

        assert asyncio.run(run_bounded([], worker, limit=4)) == []

    def test_delay_between_launches(self):
        async def worker(item):
            return item

        start = time.monotonic()
        asyncio.run(WorkerPool(10, delay=0.05).run(range(4), worker))
        # Three gaps between four launches
        assert time.monotonic() - start >= 0.14
