# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""BackgroundScheduler: independent periodic maintenance jobs.

Uses pure asyncio.  Each job runs on its own task and sleeps for its
interval before every tick; a tick that raises is logged and the timer
keeps going.
"""

from __future__ import annotations

import asyncio
import contextlib
import inspect
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

logger = logging.getLogger("gameguard.maintenance.scheduler")

JobFunc = Callable[[], Awaitable[object] | object]


@dataclass(frozen=True)
class PeriodicJob:
    name: str
    interval: float
    func: JobFunc


class BackgroundScheduler:
    """Runs a fixed set of :class:`PeriodicJob` instances."""

    def __init__(self, jobs: list[PeriodicJob] | None = None) -> None:
        self._jobs: dict[str, PeriodicJob] = {}
        self._tasks: dict[str, asyncio.Task[None]] = {}
        self._ticks: dict[str, int] = {}
        self._failures: dict[str, int] = {}
        for job in jobs or []:
            self.add_job(job)

    def add_job(self, job: PeriodicJob) -> None:
        if self.running:
            raise RuntimeError("Cannot add jobs while the scheduler is running")
        self._jobs[job.name] = job
        self._ticks[job.name] = 0
        self._failures[job.name] = 0

    @property
    def running(self) -> bool:
        return bool(self._tasks)

    @property
    def job_names(self) -> list[str]:
        return list(self._jobs)

    def start(self) -> None:
        """Start every job's timer. A no-op if already running."""
        if self._tasks:
            return
        loop = asyncio.get_running_loop()
        for job in self._jobs.values():
            self._tasks[job.name] = loop.create_task(self._loop(job))
        logger.info("Background jobs started: %s", ", ".join(self._jobs))

    async def stop(self) -> None:
        tasks = list(self._tasks.values())
        self._tasks.clear()
        for task in tasks:
            task.cancel()
        for task in tasks:
            with contextlib.suppress(asyncio.CancelledError):
                await task
        if tasks:
            logger.info("Background jobs stopped")

    async def _loop(self, job: PeriodicJob) -> None:
        while True:
            await asyncio.sleep(job.interval)
            await self._run(job)

    async def _run(self, job: PeriodicJob) -> None:
        try:
            result = job.func()
            if inspect.isawaitable(result):
                await result
            self._ticks[job.name] += 1
        except Exception:
            self._failures[job.name] += 1
            logger.exception("Background job %s failed", job.name)

    async def run_job(self, name: str) -> None:
        """Run one tick of *name* immediately, outside its timer."""
        await self._run(self._jobs[name])

    def stats(self) -> dict[str, dict[str, int]]:
        return {
            name: {"ticks": self._ticks[name], "failures": self._failures[name]}
            for name in self._jobs
        }
