"""
NetSnmp - Bounded Worker Pool.

The single concurrency primitive used by every fan-out in the scanner
(liveness, host probes, neighbor walks).

A permit is taken *before* a task is created, so at most `limit` tasks
exist at any time. Each task bounds itself with its own timeout; the
pool only waits. A task that raises is recorded as a failed outcome and
never stops its siblings.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Generic, Iterable, List, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar('T')
R = TypeVar('R')


@dataclass
class WorkOutcome(Generic[T, R]):
    """Result of one work item: either result or error is meaningful."""
    item: T
    result: Optional[R] = None
    error: Optional[BaseException] = None

    @property
    def ok(self) -> bool:
        return self.error is None


OutcomeCallback = Callable[[WorkOutcome], None]


class WorkerPool:
    """
    Runs an async worker over items with at most `limit` in flight.

    Outcomes are reported in completion order, which is not the launch
    order.

    Usage:
        pool = WorkerPool(limit=25)
        outcomes = await pool.run(addresses, probe_one, on_outcome=collect)
    """

    def __init__(self, limit: int, delay: float = 0.0):
        """
        Args:
            limit: Maximum concurrent tasks (must be positive)
            delay: Seconds to wait between task launches
        """
        if limit <= 0:
            raise ValueError(f"Worker limit must be positive, got {limit}")
        self.limit = limit
        self.delay = delay
        self.in_flight = 0
        self.peak_in_flight = 0

    async def run(
        self,
        items: Iterable[T],
        worker: Callable[[T], Awaitable[R]],
        on_outcome: Optional[OutcomeCallback] = None,
    ) -> List[WorkOutcome]:
        """
        Run worker(item) for every item and wait for all of them.

        Returns:
            Outcomes in completion order
        """
        semaphore = asyncio.Semaphore(self.limit)
        outcomes: List[WorkOutcome] = []
        pending = set()

        async def _run_one(item: T) -> None:
            self.in_flight += 1
            self.peak_in_flight = max(self.peak_in_flight, self.in_flight)
            try:
                outcome = WorkOutcome(item, result=await worker(item))
            except asyncio.CancelledError:
                raise
            except Exception as e:
                logger.warning(f"Worker failed for {item}: {type(e).__name__}: {e}")
                outcome = WorkOutcome(item, error=e)
            finally:
                self.in_flight -= 1
                semaphore.release()

            outcomes.append(outcome)
            if on_outcome:
                try:
                    on_outcome(outcome)
                except Exception as e:
                    logger.error(f"Outcome handler failed for {item}: {e}")

        first = True
        for item in items:
            if self.delay and not first:
                await asyncio.sleep(self.delay)
            first = False

            # Blocks until a slot is free
            await semaphore.acquire()
            task = asyncio.ensure_future(_run_one(item))
            pending.add(task)
            task.add_done_callback(pending.discard)

        if pending:
            await asyncio.gather(*pending)

        return outcomes


async def run_bounded(
    items: Iterable[T],
    worker: Callable[[T], Awaitable[Any]],
    limit: int,
    on_outcome: Optional[OutcomeCallback] = None,
) -> List[WorkOutcome]:
    """Convenience wrapper: one-off WorkerPool run."""
    return await WorkerPool(limit).run(items, worker, on_outcome)
