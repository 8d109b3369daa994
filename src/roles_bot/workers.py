"""
Keyed worker pool
=================

Gateway events are handed to :class:`KeyedWorkerPool` as coroutine factories
tagged with a key. Jobs sharing a key run one after another in submission
order; jobs with different keys run concurrently, at most ``concurrency`` at
a time. A job may also name an ``after`` key: it then waits for the jobs
queued under that key to drain, which lets per-user reaction jobs line up
behind the setup or delete job of their message without queueing behind each
other. :meth:`KeyedWorkerPool.close` stops intake and waits for every queued
or running job, which is how a shutdown lets an in-flight setup finish or
roll back.
"""

from __future__ import annotations

import asyncio
import logging
from collections import deque
from typing import Awaitable, Callable, Deque, Dict, Hashable, Optional, Set, Tuple

logger = logging.getLogger(__name__)

Job = Callable[[], Awaitable[None]]
_Entry = Tuple[Job, Optional["asyncio.Task[None]"]]


class KeyedWorkerPool:
    def __init__(self, concurrency: int) -> None:
        if concurrency < 1:
            raise ValueError("concurrency must be at least 1")
        self._sem = asyncio.Semaphore(concurrency)
        self._pending: Dict[Hashable, Deque[_Entry]] = {}
        self._drainers: Dict[Hashable, asyncio.Task[None]] = {}
        self._tasks: Set[asyncio.Task[None]] = set()
        self._closing = False

    def pending(self, key: Hashable) -> int:
        """Jobs queued under ``key`` that have not started yet."""
        return len(self._pending.get(key, ()))

    def active(self, key: Hashable) -> bool:
        """True while any job for ``key`` is queued or running."""
        return key in self._drainers

    def submit(self, key: Hashable, job: Job, *, after: Hashable | None = None) -> bool:
        """
        Queue ``job`` behind earlier jobs for ``key``; False once closing.

        With ``after``, the job also waits until the jobs queued or running
        under that key have drained, including any queued there meanwhile.
        """

        if self._closing:
            logger.warning("Worker pool closing; dropping job for %s", key)
            return False

        barrier = self._drainers.get(after) if after not in (None, key) else None
        queue = self._pending.get(key)
        if queue is not None:
            queue.append((job, barrier))
            return True

        self._pending[key] = deque([(job, barrier)])
        task = asyncio.create_task(self._drain(key), name=f"worker:{key}")
        self._drainers[key] = task
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return True

    async def _drain(self, key: Hashable) -> None:
        queue = self._pending[key]
        try:
            while queue:
                job, barrier = queue.popleft()
                if barrier is not None:
                    # Wait outside the semaphore so the job we wait on can run.
                    await asyncio.wait({barrier})
                async with self._sem:
                    try:
                        await job()
                    except Exception:
                        logger.exception("Job for %s failed", key)
        finally:
            # No await between the empty check and the pop, so a concurrent
            # submit either lands in ``queue`` before we exit or starts afresh.
            self._pending.pop(key, None)
            self._drainers.pop(key, None)

    async def join(self) -> None:
        """Wait until every queued and running job has finished."""

        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def close(self) -> None:
        """Refuse new jobs and wait for all queued and running ones."""

        self._closing = True
        await self.join()
        logger.info("Worker pool drained")


__all__ = ["KeyedWorkerPool", "Job"]
